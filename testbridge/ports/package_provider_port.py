"""Port interface for locating packages and their resolution sessions."""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..application.concurrency import CancellationToken
    from ..application.paths.package_paths import PackagePathsContext


class PackageProviderPort(Protocol):
    """Port interface for obtaining the resolution session of a file."""

    @abstractmethod
    async def package_paths_for_file(
        self,
        file_path: Path,
        cancellation: CancellationToken | None = None,
    ) -> PackagePathsContext:
        """
        Return the resolution session for the package that contains a file.

        Sessions are cached per package root for the lifetime of the provider.

        Raises:
            PackageNotFoundError: If no manifest exists above the file
            OperationCancelledError: If cancellation was requested
        """
        ...
