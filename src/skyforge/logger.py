from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logger(
    name: str = "skyforge",
    level: int = logging.ERROR,
    console: Console | None = None,
) -> logging.Logger:
    """
    Configures and returns a logger with a RichHandler.

    Passing `console` routes log records through the same console the
    reporter writes to, so debug lines and heartbeat dots share one stream.
    Repeated calls reuse the existing handler.
    """
    logger = logging.getLogger(name)

    handler = next(
        (h for h in logger.handlers if isinstance(h, RichHandler)), None
    )
    if handler is None:
        handler = RichHandler(
            console=console, rich_tracebacks=True, markup=True, show_path=False
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    elif console is not None:
        handler.console = console

    logger.setLevel(level)
    return logger


# Quiet by default; the CLI lowers this with --verbose
logger = setup_logger()
