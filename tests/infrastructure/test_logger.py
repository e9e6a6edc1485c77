import logging

from rich.logging import RichHandler

from forklift.infrastructure.logger import LOGGER_NAME, console, logger
from forklift.interfaces import cli


def test_logger_is_the_package_logger():
    assert logger is logging.getLogger(LOGGER_NAME)
    assert logger.propagate is True


def test_single_rich_handler_bound_to_shared_console():
    handlers = logger.handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], RichHandler)
    assert handlers[0].console is console


def test_cli_progress_uses_the_logging_console():
    assert cli.console is console
