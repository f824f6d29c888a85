"""
Safe subprocess execution for toolchain invocations.

Commands run in their own process group and are always reaped, including on
timeouts and interruptions. ``run_command_async`` runs the blocking call on a
worker thread so the event loop keeps serving other lookups meanwhile.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import subprocess
from collections.abc import Iterator, Sequence
from concurrent.futures import BrokenExecutor, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from ...domain.models import TestBridgeError

logger = logging.getLogger(__name__)

# Extra time granted to the worker thread on top of the command timeout.
EXECUTOR_TIMEOUT_BUFFER = 5.0


class SubprocessError(TestBridgeError):
    """Base exception for subprocess-related errors."""

    pass


class SubprocessTimeoutError(SubprocessError):
    """Raised when a command does not finish within its timeout."""

    pass


class SubprocessExecutionError(SubprocessError):
    """Raised when a command exits with a non-zero status."""

    def __init__(self, message: str, returncode: int = 1, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


@dataclass(frozen=True)
class CommandOutput:
    stdout: str
    stderr: str
    returncode: int


def _terminate(proc: subprocess.Popen, cmd: Sequence[str]) -> None:
    if proc.poll() is not None:
        return
    with contextlib.suppress(ProcessLookupError):
        proc.terminate()
    try:
        proc.wait(timeout=5)
    except subprocess.TimeoutExpired:
        logger.warning("Force killing stubborn process: %s", list(cmd))
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        proc.wait()


@contextlib.contextmanager
def _spawn(cmd: Sequence[str], cwd: str | Path | None) -> Iterator[subprocess.Popen]:
    proc = subprocess.Popen(
        list(cmd),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        cwd=cwd,
        start_new_session=True,
    )
    try:
        yield proc
    finally:
        _terminate(proc, cmd)


def run_command(
    cmd: Sequence[str],
    timeout: float = 60.0,
    cwd: str | Path | None = None,
    check: bool = True,
) -> CommandOutput:
    """
    Run ``cmd`` to completion and return its output.

    Args:
        cmd: Command and arguments to execute
        timeout: Seconds to wait before the command is killed
        cwd: Working directory for the command
        check: Raise ``SubprocessExecutionError`` on a non-zero exit status

    Raises:
        SubprocessTimeoutError: If the command exceeds ``timeout``
        SubprocessExecutionError: If ``check`` is set and the command fails
        OSError: If the command cannot be started
    """
    with _spawn(cmd, cwd) as proc:
        try:
            stdout, stderr = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            logger.warning("Command %s timed out after %s seconds", list(cmd), timeout)
            with contextlib.suppress(ProcessLookupError):
                proc.kill()
            proc.communicate()
            raise SubprocessTimeoutError(
                f"Command {list(cmd)} timed out after {timeout} seconds"
            ) from None

    if check and proc.returncode != 0:
        raise SubprocessExecutionError(
            f"Command {list(cmd)} failed with exit code {proc.returncode}: {stderr.strip()}",
            returncode=proc.returncode,
            stderr=stderr,
        )

    return CommandOutput(stdout=stdout, stderr=stderr, returncode=proc.returncode)


async def run_command_async(
    cmd: Sequence[str],
    timeout: float = 60.0,
    cwd: str | Path | None = None,
    check: bool = True,
) -> CommandOutput:
    """
    Run ``run_command`` on a worker thread.

    Raises:
        SubprocessTimeoutError: If the command or the worker exceed the timeout
        SubprocessExecutionError: If ``check`` is set and the command fails
        RuntimeError: If the worker thread pool breaks
        OSError: If the command cannot be started
    """
    loop = asyncio.get_running_loop()
    executor_timeout = timeout + EXECUTOR_TIMEOUT_BUFFER

    try:
        with ThreadPoolExecutor(max_workers=1) as executor:
            return await asyncio.wait_for(
                loop.run_in_executor(executor, run_command, cmd, timeout, cwd, check),
                timeout=executor_timeout,
            )
    except asyncio.TimeoutError:
        logger.warning("Subprocess execution timed out after %s seconds", executor_timeout)
        raise SubprocessTimeoutError(
            f"Command {list(cmd)} timed out after {executor_timeout} seconds"
        ) from None
    except BrokenExecutor as e:
        logger.error("Executor failed during subprocess execution: %s", e)
        raise RuntimeError(f"ThreadPoolExecutor is broken: {e}") from e
