"""
Package provider that locates manifests on disk and dumps them with the toolchain.

Every lookup is cached as an in-flight task: concurrent requests for the same
directory or package root share a single manifest search, toolchain run and
session construction.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

from ...application.concurrency import (
    CancellationToken,
    OperationCancelledError,
    raise_if_cancelled,
)
from ...application.paths.package_paths import PackagePathsContext
from ...application.paths.path_utils import is_subdirectory
from ...domain.conventions import DEFAULT_MANIFEST_FILE_NAME
from ...domain.models import Manifest, PackageNotFoundError
from ...ports.filesystem_port import FileSystemPort
from ...ports.toolchain_port import ToolchainPort
from ..manifest.manifest_parser import parse_manifest

logger = logging.getLogger(__name__)

K = TypeVar("K")
V = TypeVar("V")


class FileDiskPackageProvider:
    """
    Package provider port backed by the filesystem and the Swift toolchain.

    Caches live as long as the provider; create one provider per batch or
    CLI invocation.
    """

    def __init__(
        self,
        file_system: FileSystemPort,
        toolchain: ToolchainPort,
        manifest_file_name: str = DEFAULT_MANIFEST_FILE_NAME,
    ):
        self.file_system = file_system
        self.toolchain = toolchain
        self.manifest_file_name = manifest_file_name

        self._manifest_paths_per_directory: dict[Path, asyncio.Task[Path | None]] = {}
        self._sessions_per_root: dict[Path, asyncio.Task[PackagePathsContext]] = {}
        self._workspace_manifests: asyncio.Task[list[Path]] | None = None

    async def package_paths_for_file(
        self,
        file_path: Path,
        cancellation: CancellationToken | None = None,
    ) -> PackagePathsContext:
        """
        Return the resolution session of the package that contains ``file_path``.

        Raises:
            PackageNotFoundError: If no manifest exists above the file
            OperationCancelledError: If cancellation was requested
            ToolchainError: If the manifest cannot be dumped
            ManifestParseError: If the dump cannot be parsed
        """
        raise_if_cancelled(cancellation)

        manifest_path = await self.manifest_path_for_file(file_path, cancellation)
        if manifest_path is None:
            raise PackageNotFoundError(file_path)

        raise_if_cancelled(cancellation)

        package_root = manifest_path.parent
        return await _shared(
            self._sessions_per_root,
            package_root,
            lambda: self._create_session(package_root, manifest_path),
        )

    async def manifest_path_for_file(
        self,
        file_path: Path,
        cancellation: CancellationToken | None = None,
    ) -> Path | None:
        """Return the manifest of the package containing ``file_path``, or None."""
        directory = file_path.parent
        return await _shared(
            self._manifest_paths_per_directory,
            directory,
            lambda: self._find_manifest(file_path, cancellation),
        )

    async def load_manifest(self, package_root: Path) -> Manifest:
        """Dump and parse the manifest of the package at ``package_root``."""
        dump = await self.toolchain.dump_package(package_root)
        return parse_manifest(dump)

    async def _create_session(self, package_root: Path, manifest_path: Path) -> PackagePathsContext:
        logger.debug("Loading package manifest %s", manifest_path)
        manifest = await self.load_manifest(package_root)
        return await PackagePathsContext.create(
            package_root, manifest, self.file_system, manifest_path=manifest_path
        )

    async def _find_manifest(
        self, file_path: Path, cancellation: CancellationToken | None
    ) -> Path | None:
        # Manifests known to the workspace first; the innermost one wins.
        containing = [
            manifest
            for manifest in await self._workspace_manifest_paths()
            if is_subdirectory(manifest.parent, file_path)
        ]
        if containing:
            return max(containing, key=lambda manifest: len(manifest.parts))

        raise_if_cancelled(cancellation)

        # Then walk up the directory tree, stopping below the filesystem root.
        current = file_path.parent
        while current.parent != current:
            raise_if_cancelled(cancellation)

            candidate = current / self.manifest_file_name
            if await self.file_system.file_exists(candidate):
                return candidate

            current = current.parent

        logger.debug("No %s found above %s", self.manifest_file_name, file_path)
        return None

    async def _workspace_manifest_paths(self) -> list[Path]:
        if self._workspace_manifests is None:
            self._workspace_manifests = asyncio.ensure_future(
                self.file_system.find_files(f"**/{self.manifest_file_name}")
            )
        return await asyncio.shield(self._workspace_manifests)


async def _shared(cache: dict[K, asyncio.Task[V]], key: K, factory: Callable[[], Awaitable[V]]) -> V:
    """Await the cached task for ``key``, starting it with ``factory`` on first use."""
    task = cache.get(key)
    if task is None:
        task = asyncio.ensure_future(factory())
        cache[key] = task
    try:
        return await asyncio.shield(task)
    except OperationCancelledError:
        # A cancelled lookup must not poison later requests.
        if cache.get(key) is task:
            del cache[key]
        raise
