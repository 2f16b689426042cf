"""Logging configuration for the command-line entry point."""
from __future__ import annotations

import logging
import os
import typing as t

from rich.console import Console
from rich.logging import RichHandler

LOG_HANDLER_NAME: t.Final = "canvas-cli-console"
LOG_LEVEL_ENV_VAR: t.Final = "CANVAS_LOG_LEVEL"


def get_configured_log_level(default: int = logging.WARNING) -> int:
    """Resolve the log level from CANVAS_LOG_LEVEL (a name or a number)."""
    value = (os.getenv(LOG_LEVEL_ENV_VAR) or "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        resolved = getattr(logging, value.upper(), None)
        if isinstance(resolved, int):
            return resolved
        return default


def configure_logging(verbose: bool = False) -> logging.Handler:
    """Attach a single rich handler on stderr to the package logger.

    Calling this again only adjusts the level of the existing handler.
    """
    level = logging.DEBUG if verbose else get_configured_log_level()
    package_logger = logging.getLogger("canvas_cli")

    for handler in package_logger.handlers:
        if handler.get_name() == LOG_HANDLER_NAME:
            handler.setLevel(level)
            package_logger.setLevel(level)
            return handler

    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    handler.set_name(LOG_HANDLER_NAME)
    handler.setLevel(level)
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    return handler
