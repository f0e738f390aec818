from __future__ import annotations

import os

from pydantic import BaseModel, Field

from .exceptions import ConfigError

# Polling and pagination defaults
DEFAULT_WAIT_TIMEOUT = 600
DEFAULT_POLL_INTERVAL = 2
DEFAULT_MAX_PAGES = 20
DEFAULT_PAGE_SIZE = 100

# Environment fallbacks for values the CLI does not receive as flags
ENV_VARS = {
    "project": "GCE_PROJECT",
    "zone": "GCE_ZONE",
    "wait_timeout": "SKYFORGE_WAIT_TIMEOUT",
    "poll_interval": "SKYFORGE_POLL_INTERVAL",
    "max_pages": "SKYFORGE_MAX_PAGES",
    "page_size": "SKYFORGE_PAGE_SIZE",
}


class Settings(BaseModel):
    project: str | None = None
    zone: str | None = None
    wait_timeout: float = Field(default=DEFAULT_WAIT_TIMEOUT, gt=0)
    poll_interval: float = Field(default=DEFAULT_POLL_INTERVAL, ge=0)
    max_pages: int = Field(default=DEFAULT_MAX_PAGES, gt=0)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0, le=500)

    @classmethod
    def from_env(cls, **overrides: object) -> Settings:
        """
        Builds settings from environment variables.
        Explicit overrides win; None overrides are ignored.
        """
        values: dict[str, object] = {}
        for key, var in ENV_VARS.items():
            if os.environ.get(var):
                values[key] = os.environ[var]
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)

    def require(self, *keys: str) -> None:
        missing = [k for k in keys if getattr(self, k) in (None, "")]
        if missing:
            raise ConfigError(missing)
