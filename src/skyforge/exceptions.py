from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .schemas.operations import OperationErrorDetail


class SkyforgeError(Exception):
    """Base class for every error raised by skyforge."""


class ConfigError(SkyforgeError):
    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"The following required parameters are missing: {', '.join(self.missing)}"
        )


# Human labels for the fields a create request is validated on
FIELD_LABELS = {
    "machine_type": "machine type",
    "network": "network",
    "public_ip": "Public IP setting",
    "image": "image",
}


class ValidationError(SkyforgeError):
    """A create request was rejected before any mutating call was issued."""

    def __init__(self, field: str, value: object) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid {FIELD_LABELS.get(field, field)}: {value}")


class OperationError(SkyforgeError):
    """A remote operation reached DONE but carried errors."""

    def __init__(self, operation: str, errors: Sequence[OperationErrorDetail]) -> None:
        self.operation = operation
        self.errors = list(errors)
        details = "; ".join(f"{e.code}: {e.message}" for e in self.errors)
        super().__init__(f"Operation {operation} failed: {details}")


class OperationTimeoutError(SkyforgeError, TimeoutError):
    """Polling gave up before the desired status was observed."""

    def __init__(self, timeout: float, last_status: str | None = None) -> None:
        self.timeout = timeout
        self.last_status = last_status
        super().__init__(
            f"Request did not complete in {timeout:g} seconds. "
            "Check the Google Cloud Console for more info."
        )


class ResourceLookupError(SkyforgeError):
    """Existence of a resource could not be determined, so it was left alone."""

    def __init__(self, kind: str, name: str, cause: Exception) -> None:
        self.kind = kind
        self.name = name
        self.cause = cause
        super().__init__(f"Unable to look up {kind} {name}: {cause}")
