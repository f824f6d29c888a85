"""Swift toolchain adapter invoking the `swift` executable."""

import logging
from pathlib import Path

from ...domain.models import TestBridgeError
from ..io.subprocess_safe import SubprocessError, run_command_async

logger = logging.getLogger(__name__)


class ToolchainError(TestBridgeError):
    """Raised when the Swift toolchain cannot be run or reports a failure."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class SwiftToolchain:
    """Toolchain port implementation backed by the local Swift installation."""

    def __init__(self, swift_executable: str = "swift", timeout: float = 60.0):
        self.swift_executable = swift_executable
        self.timeout = timeout

    async def dump_package(self, package_root: Path) -> str:
        """
        Run ``swift package dump-package`` inside ``package_root``.

        Raises:
            ToolchainError: If the command cannot be started, fails or times out
        """
        cmd = [self.swift_executable, "package", "dump-package"]
        logger.debug("Running %s in %s", " ".join(cmd), package_root)

        try:
            output = await run_command_async(cmd, timeout=self.timeout, cwd=package_root)
        except SubprocessError as e:
            raise ToolchainError(f"Failed to dump package at {package_root}: {e}", e) from e
        except OSError as e:
            raise ToolchainError(
                f"Could not run {self.swift_executable!r}; is the Swift toolchain installed?", e
            ) from e

        return output.stdout.strip()
