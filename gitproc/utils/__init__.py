"""Utility modules for gitproc."""

from gitproc.utils.logging import LogCapture, get_logger, setup_logging

__all__ = ["LogCapture", "get_logger", "setup_logging"]
