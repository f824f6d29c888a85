"""Port interface for the package manager toolchain."""

from abc import abstractmethod
from pathlib import Path
from typing import Protocol


class ToolchainPort(Protocol):
    """Port interface for toolchain invocations."""

    @abstractmethod
    async def dump_package(self, package_root: Path) -> str:
        """
        Dump the manifest of the package rooted at ``package_root`` as JSON.

        Raises:
            ToolchainError: If the toolchain cannot produce a manifest dump
        """
        ...
