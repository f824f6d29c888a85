"""
Logging setup with Rich integration.

Modules log through ``logging.getLogger(__name__)``; this module installs a
single ``RichHandler`` on the root logger so those records render on the
console used by the CLI.
"""

import logging
import threading

from rich.console import Console
from rich.logging import RichHandler


class LoggerManager:
    """Configures the root logger once per process."""

    _console: Console | None = None
    _handler: RichHandler | None = None
    _setup_complete: bool = False
    _setup_lock: threading.Lock = threading.Lock()

    @classmethod
    def setup_global_logging(
        cls, console: Console | None = None, level: int = logging.WARNING
    ) -> None:
        """Install the Rich handler on the root logger. Later calls only adjust the level."""
        with cls._setup_lock:
            root_logger = logging.getLogger()

            if cls._setup_complete:
                root_logger.setLevel(level)
                return

            cls._console = console or Console(stderr=True)

            # Replace RichHandlers installed by anyone else, keep other handlers
            for handler in list(root_logger.handlers):
                if isinstance(handler, RichHandler):
                    root_logger.removeHandler(handler)

            rich_handler = RichHandler(
                console=cls._console,
                show_time=False,
                show_path=False,
                markup=False,
                rich_tracebacks=True,
            )
            rich_handler.setFormatter(logging.Formatter(fmt="%(message)s"))

            root_logger.addHandler(rich_handler)
            root_logger.setLevel(level)
            cls._handler = rich_handler
            cls._setup_complete = True

    @classmethod
    def reset(cls) -> None:
        """Remove the installed handler so logging can be configured again."""
        with cls._setup_lock:
            if cls._handler is not None:
                logging.getLogger().removeHandler(cls._handler)
            cls._handler = None
            cls._console = None
            cls._setup_complete = False


def level_for_verbosity(verbose: bool = False, quiet: bool = False) -> int:
    """Map the CLI verbosity flags to a logging level."""
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.ERROR
    return logging.WARNING


def setup_enhanced_logging(
    console: Console | None = None, level: int = logging.WARNING
) -> logging.Logger:
    """Set up logging and return the CLI logger."""
    LoggerManager.setup_global_logging(console, level)
    return logging.getLogger("testbridge.cli")
