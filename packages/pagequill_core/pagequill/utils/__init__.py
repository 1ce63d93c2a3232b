"""Utilities: logging setup and file names."""

from .filenames import build_filename, sanitize_for_path
from .rich_logger import RichLogger, get_rich_logger, setup_logging

__all__ = ["RichLogger", "build_filename", "get_rich_logger", "sanitize_for_path", "setup_logging"]
