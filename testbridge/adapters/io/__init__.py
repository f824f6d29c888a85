"""IO adapters: local filesystem, subprocesses and logging."""

from .filesystem import LocalFileSystem
from .subprocess_safe import (
    CommandOutput,
    SubprocessError,
    SubprocessExecutionError,
    SubprocessTimeoutError,
    run_command,
    run_command_async,
)

__all__ = [
    "CommandOutput",
    "LocalFileSystem",
    "SubprocessError",
    "SubprocessExecutionError",
    "SubprocessTimeoutError",
    "run_command",
    "run_command_async",
]
