"""Logging utilities for the pullpanda tool."""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler


ROOT_LOGGER_NAME = "pullpanda"
FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _install_console_handler() -> None:
    """Attach the stderr rich handler to the root pullpanda logger, once."""
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    if any(isinstance(handler, RichHandler) for handler in root_logger.handlers):
        return

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setLevel(logging.WARNING)
    root_logger.addHandler(handler)


class PullPandaLogger:
    """Thin wrapper over a stdlib logger under the ``pullpanda`` tree.

    Records propagate to the root pullpanda logger, whose rich handler writes
    to stderr so the report on stdout stays clean.
    """

    def __init__(self, name: str = ROOT_LOGGER_NAME, level: str = "WARNING"):
        """Initialize logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        """
        _install_console_handler()
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

    def debug(self, message: str, **kwargs) -> None:
        self.logger.debug(message, **kwargs)

    def warning(self, message: str, **kwargs) -> None:
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs) -> None:
        self.logger.error(message, **kwargs)


# Global logger instance
logger = PullPandaLogger()


def get_logger(name: Optional[str] = None, level: str = "WARNING") -> PullPandaLogger:
    """Get logger instance.

    Args:
        name: Logger name (defaults to 'pullpanda')
        level: Log level

    Returns:
        Logger instance
    """
    if name is None:
        return logger
    return PullPandaLogger(name, level)


def _set_tree_level(level: int) -> None:
    """Set the level of the root pullpanda logger and all of its children."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)
    for name, child_logger in logging.Logger.manager.loggerDict.items():
        if isinstance(child_logger, logging.Logger) and name.startswith(ROOT_LOGGER_NAME):
            child_logger.setLevel(level)


def enable_logging() -> None:
    """Switch the pullpanda logger tree and its console handler to DEBUG."""
    _set_tree_level(logging.DEBUG)

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root_logger.handlers:
        if isinstance(handler, RichHandler):
            handler.setLevel(logging.DEBUG)

    logger.debug("Logging enabled")


def add_file_handler(path: Union[str, Path]) -> logging.FileHandler:
    """Also write DEBUG-level records to a log file.

    Args:
        path: Log file path; parent directories are created

    Returns:
        The installed file handler
    """
    log_path = Path(path)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))

    logging.getLogger(ROOT_LOGGER_NAME).addHandler(file_handler)
    # The console handler keeps its own level, so lowering the loggers is safe
    _set_tree_level(logging.DEBUG)
    return file_handler
