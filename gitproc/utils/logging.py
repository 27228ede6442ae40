"""Logging configuration for gitproc."""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

# Default log format
LOG_FORMAT = "%(message)s"
LOG_DATE_FORMAT = "[%X]"

ROOT_LOGGER = "gitproc"


def setup_logging(
    level: Union[int, str] = logging.WARNING,
    log_file: Optional[Path] = None,
    verbose: bool = False,
) -> logging.Logger:
    """Set up logging with Rich handler for console output.

    Args:
        level: Logging level or level name (default: WARNING)
        log_file: Optional path to log file
        verbose: Enable verbose/debug output

    Returns:
        Configured logger instance
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    if verbose:
        level = logging.DEBUG

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # Console handler with Rich; git output goes to stdout so logs stay on stderr
    console = Console(stderr=True)
    console_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=verbose,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        markup=False,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)  # Always log debug to file
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (will be prefixed with 'gitproc.')

    Returns:
        Logger instance
    """
    if name:
        return logging.getLogger(f"{ROOT_LOGGER}.{name}")
    return logging.getLogger(ROOT_LOGGER)


class LogCapture:
    """Context manager to capture log messages (useful for testing)."""

    def __init__(self, logger_name: str = ROOT_LOGGER, level: int = logging.DEBUG):
        self.logger_name = logger_name
        self.level = level
        self.records: list[logging.LogRecord] = []
        self._handler: Optional[logging.Handler] = None
        self._previous_level: Optional[int] = None

    def __enter__(self) -> "LogCapture":
        logger = logging.getLogger(self.logger_name)
        self._handler = CaptureHandler(self.records)
        self._previous_level = logger.level
        logger.setLevel(self.level)
        logger.addHandler(self._handler)
        return self

    def __exit__(self, *args) -> None:
        logger = logging.getLogger(self.logger_name)
        if self._handler:
            logger.removeHandler(self._handler)
        if self._previous_level is not None:
            logger.setLevel(self._previous_level)

    @property
    def messages(self) -> list[str]:
        """Get captured log messages."""
        return [record.getMessage() for record in self.records]

    def has_message(self, substring: str) -> bool:
        """Check if any captured message contains the substring."""
        return any(substring in msg for msg in self.messages)


class CaptureHandler(logging.Handler):
    """Handler that captures log records to a list."""

    def __init__(self, records: list[logging.LogRecord]):
        super().__init__()
        self.records = records

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)
