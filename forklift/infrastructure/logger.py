"""
Package-wide logger for forklift.

Records are rendered by rich on the shared stderr ``console`` so that log
lines and the CLI progress bar do not overwrite each other.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "forklift"
DATE_FORMAT = "[%X]"

console = Console(stderr=True)


def _build_logger() -> logging.Logger:
    """Create the package logger with a single rich handler."""

    _logger = logging.getLogger(LOGGER_NAME)
    if not _logger.handlers:
        handler = RichHandler(console=console, show_path=False, log_time_format=DATE_FORMAT)
        handler.setFormatter(logging.Formatter("%(message)s"))
        _logger.addHandler(handler)
    _logger.setLevel(logging.INFO)
    return _logger


logger = _build_logger()


__all__ = ["logger", "console", "LOGGER_NAME"]
