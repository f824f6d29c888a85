"""
Target path resolution, file classification and target name inference.

A ``PackagePathsContext`` is the resolution session for one package root. It
resolves the directory of every declared target once, when the session is
created, and answers containment queries against those directories for the
rest of the session.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from ...domain.conventions import SOURCE_SEARCH_PATHS, TEST_SEARCH_PATHS, TEST_SUFFIX
from ...domain.models import Manifest, ResolvedTarget, SourceFile, Target, TargetRole
from ...ports.filesystem_port import FileSystemPort
from ..algorithms.dedupe import deduplicate_stable
from ..concurrency import AsyncOnce
from ..dependency_graph import TargetDependencyGraph
from .path_utils import (
    is_subdirectory,
    join,
    relative_directory,
    root_directory_of_relative_path,
)

logger = logging.getLogger(__name__)

SOURCE_ROLES = frozenset({TargetRole.REGULAR, TargetRole.EXECUTABLE, TargetRole.PLUGIN})


def search_paths_for_role(role: TargetRole) -> tuple[str, ...]:
    """Return the conventional roots probed for a target of ``role``."""
    if role is TargetRole.TEST:
        return TEST_SEARCH_PATHS
    return SOURCE_SEARCH_PATHS


async def compute_path_for_target(
    target: Target, package_root: Path, file_system: FileSystemPort
) -> Path:
    """
    Return the directory a target occupies.

    Resolution order:
    1. the explicit path of the target, without probing the disk;
    2. the first ``<root>/<convention>/<target>`` that exists as a directory;
    3. ``<root>/<first convention>/<target>``, whether it exists or not.
    """
    if target.explicit_path is not None:
        return join(package_root, target.explicit_path)

    search_paths = search_paths_for_role(target.role)
    for convention in search_paths:
        candidate = join(package_root, convention, target.name)
        if await file_system.is_directory(candidate):
            return candidate

    return join(package_root, search_paths[0], target.name)


async def _resolve_targets(
    package_root: Path, manifest: Manifest, file_system: FileSystemPort
) -> list[ResolvedTarget]:
    async def resolve(target: Target) -> ResolvedTarget:
        computed_path = await compute_path_for_target(target, package_root, file_system)
        return ResolvedTarget(
            name=target.name,
            role=target.role,
            explicit_path=target.explicit_path,
            dependencies=target.dependencies,
            computed_path=computed_path,
            path_exists_as_directory=await file_system.is_directory(computed_path),
        )

    return list(await asyncio.gather(*(resolve(t) for t in manifest.targets)))


class PackagePathsContext:
    """
    Resolution session for a single package root.

    Answers which target contains a file, whether a file is a source or a
    test file, and where conventional roots live. Target directories are
    resolved once in ``create``; the first available sources and tests roots
    are resolved lazily and memoized for the lifetime of the session.
    """

    def __init__(
        self,
        package_root: Path,
        manifest: Manifest,
        file_system: FileSystemPort,
        resolved_targets: list[ResolvedTarget],
        manifest_path: Path | None = None,
    ) -> None:
        self.package_root = package_root
        self.manifest = manifest
        self.manifest_path = manifest_path
        self.file_system = file_system
        self._resolved_targets = list(resolved_targets)
        self._dependency_graph: TargetDependencyGraph | None = None
        self._sources_path = AsyncOnce(lambda: self._first_existing_root(SOURCE_SEARCH_PATHS))
        self._tests_path = AsyncOnce(lambda: self._first_existing_root(TEST_SEARCH_PATHS))

    @classmethod
    async def create(
        cls,
        package_root: Path,
        manifest: Manifest,
        file_system: FileSystemPort,
        manifest_path: Path | None = None,
    ) -> PackagePathsContext:
        """Resolve every target of ``manifest`` and return a new session."""
        resolved = await _resolve_targets(package_root, manifest, file_system)
        for target in resolved:
            logger.debug(
                "Resolved target %s (%s) -> %s%s",
                target.name,
                target.role.value,
                target.computed_path,
                "" if target.path_exists_as_directory else " (missing)",
            )
        return cls(package_root, manifest, file_system, resolved, manifest_path)

    @property
    def resolved_targets(self) -> list[ResolvedTarget]:
        return list(self._resolved_targets)

    def dependency_graph(self) -> TargetDependencyGraph:
        """Return the dependency graph of the managed package."""
        if self._dependency_graph is None:
            self._dependency_graph = TargetDependencyGraph(self.manifest)
        return self._dependency_graph

    # Conventional roots

    async def available_sources_path(self) -> Path | None:
        """
        Return the first conventional sources root that exists on disk.

        None does not mean the package has no sources: targets may declare
        custom paths outside every conventional root.
        """
        return await self._sources_path.get()

    async def available_tests_path(self) -> Path | None:
        """
        Return the first conventional tests root that exists on disk.

        None does not mean the package has no tests: targets may declare
        custom paths outside every conventional root.
        """
        return await self._tests_path.get()

    async def _first_existing_root(self, search_paths: tuple[str, ...]) -> Path | None:
        for convention in search_paths:
            full_path = join(self.package_root, convention)
            if await self.file_system.is_directory(full_path):
                return full_path
        return None

    async def computed_path_for(self, target: Target) -> Path:
        """Return the directory of ``target``, reusing the session's resolution."""
        for resolved in self._resolved_targets:
            if resolved.name == target.name:
                return resolved.computed_path
        return await compute_path_for_target(target, self.package_root, self.file_system)

    # Classification

    async def is_source_file(self, file_path: Path) -> bool:
        """
        Return True if ``file_path`` is inside a source target or sources root.

        Returns False for files in test targets.
        """
        for target in self._resolved_targets:
            if not target.path_exists_as_directory:
                continue
            if not is_subdirectory(target.computed_path, file_path):
                continue
            if target.role in SOURCE_ROLES:
                return True
            if target.role is TargetRole.TEST:
                return False

        return await self._in_existing_root(file_path, SOURCE_SEARCH_PATHS)

    async def is_test_file(self, file_path: Path) -> bool:
        """
        Return True if ``file_path`` is inside a test target or tests root.

        Returns False for files in source targets.
        """
        for target in self._resolved_targets:
            if not target.path_exists_as_directory:
                continue
            if not is_subdirectory(target.computed_path, file_path):
                continue
            if target.role is TargetRole.TEST:
                return True
            if target.role in SOURCE_ROLES:
                return False

        return await self._in_existing_root(file_path, TEST_SEARCH_PATHS)

    async def _in_existing_root(self, file_path: Path, search_paths: tuple[str, ...]) -> bool:
        return await self.conventional_root_for(file_path, search_paths) is not None

    async def conventional_root_for(
        self, file_path: Path, search_paths: tuple[str, ...]
    ) -> Path | None:
        """Return the root of ``search_paths`` that exists and contains ``file_path``."""
        for convention in search_paths:
            root = join(self.package_root, convention)
            if is_subdirectory(root, file_path) and await self.file_system.is_directory(root):
                return root
        return None

    async def conventional_directory_for(self, name: str, role: TargetRole) -> Path | None:
        """
        Return the directory of an undeclared target called ``name``.

        The first conventional root of ``role`` holding a ``name`` directory
        wins. Otherwise ``name`` is placed under the first existing root of
        that role, and None is returned when there is none.
        """
        for convention in search_paths_for_role(role):
            candidate = join(self.package_root, convention, name)
            if await self.file_system.is_directory(candidate):
                return candidate

        if role is TargetRole.TEST:
            root = await self.available_tests_path()
        else:
            root = await self.available_sources_path()
        return join(root, name) if root is not None else None

    # Target lookup

    def target_for_path(self, file_path: Path) -> ResolvedTarget | None:
        """Return the first target whose directory contains ``file_path``."""
        for target in self._resolved_targets:
            if is_subdirectory(target.computed_path, file_path):
                return target
        return None

    async def target_name_from_path(self, file_path: Path) -> str | None:
        """
        Return the name of the target a file belongs to.

        Falls back to the first directory below a conventional root when no
        declared target contains the file. Roots that exist on disk are
        preferred; otherwise the first candidate in priority order is used.
        """
        target = self.target_for_path(file_path)
        if target is not None:
            return target.name

        candidates: list[str] = []
        for convention in deduplicate_stable([*SOURCE_SEARCH_PATHS, *TEST_SEARCH_PATHS]):
            root = join(self.package_root, convention)
            if not is_subdirectory(root, file_path):
                continue

            relative_dir = relative_directory(file_path, root)
            if not relative_dir:
                continue

            candidate = root_directory_of_relative_path(relative_dir)
            if await self.file_system.is_directory(root):
                return candidate
            candidates.append(candidate)

        return candidates[0] if candidates else None

    def test_target_for(self, target: Target | None) -> Target | None:
        """Return the test target named ``<target>Tests``, if declared."""
        if target is None:
            return None

        expected = f"{target.name}{TEST_SUFFIX}"
        for candidate in self.manifest.targets:
            if candidate.role is TargetRole.TEST and candidate.name == expected:
                return candidate
        return None

    def source_target_for(self, target: Target | None) -> Target | None:
        """Return the non-test target a ``<Name>Tests`` test target exercises."""
        if target is None or target.role is not TargetRole.TEST:
            return None
        if not target.name.endswith(TEST_SUFFIX):
            return None

        expected = target.name[: -len(TEST_SUFFIX)]
        for candidate in self.manifest.targets:
            if candidate.role is not TargetRole.TEST and candidate.name == expected:
                return candidate
        return None

    async def load_source_file(self, file_path: Path) -> SourceFile:
        """Load a source file through the session's filesystem."""
        return SourceFile(
            name=file_path.name,
            path=file_path,
            contents=await self.file_system.read_text(file_path),
            exists_on_disk=True,
        )
