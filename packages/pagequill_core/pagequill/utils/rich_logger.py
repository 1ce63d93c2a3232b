"""
Console logging for PageQuill.

Routes the standard ``logging`` records of every module through rich, and
offers a small helper for coloured CLI feedback.
"""

import logging
import sys
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

STANDARD_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
STANDARD_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _level(level: str) -> int:
    return getattr(logging, str(level).upper(), logging.INFO)


def _rich_handler(console: Console) -> RichHandler:
    handler = RichHandler(
        console=console,
        show_time=True,
        show_path=True,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter(fmt="%(message)s", datefmt="[%X]"))
    return handler


class RichLogger:
    """
    Logger with rich formatting and colors.
    """

    def __init__(self, name: str = "pagequill", level: str = "INFO", console: Optional[Console] = None):
        """
        Initialize rich logger.

        Args:
            name: Logger name
            level: Log level
            console: Console to print to (stderr by default)
        """
        self.name = name
        self.level = level
        self.console = console or Console(stderr=True)

        self.logger = logging.getLogger(name)
        self.logger.setLevel(_level(level))

    def debug(self, message: str, **kwargs):
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs):
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs):
        self.logger.warning(message, **kwargs)

    def error(self, message: str, **kwargs):
        self.logger.error(message, **kwargs)

    def success(self, message: str):
        """Print a success line."""
        self.console.print(f"[green]✓ {message}[/green]")

    def failure(self, message: str):
        """Print a failure line."""
        self.console.print(f"[red]✗ {message}[/red]")

    def table(self, title: str, data: Dict[str, Any]):
        """Display data in a rich table."""
        table = Table(title=title)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="magenta")
        for key, value in data.items():
            table.add_row(str(key), str(value))
        self.console.print(table)


def get_rich_logger(name: str = "pagequill", level: str = "INFO") -> RichLogger:
    """
    Get rich logger instance.

    Args:
        name: Logger name
        level: Log level

    Returns:
        RichLogger instance
    """
    return RichLogger(name, level)


def setup_logging(level: str = "INFO", use_rich: bool = True) -> None:
    """
    Setup logging for the application.

    Args:
        level: Log level
        use_rich: Whether to use rich logging
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(_level(level))
    root_logger.handlers.clear()

    if use_rich:
        root_logger.addHandler(_rich_handler(Console(stderr=True)))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(STANDARD_FORMAT, datefmt=STANDARD_DATEFMT))
        root_logger.addHandler(handler)

    logging.getLogger(__name__).debug(f"Logging initialized at {level} level (rich={use_rich})")
