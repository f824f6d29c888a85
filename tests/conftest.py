"""Global fixtures and utilities for the testbridge test suite.

Most tests run the resolution engine against ``VirtualFileSystem``, an
in-memory implementation of the filesystem port, so package layouts can be
described as a handful of paths.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path, PurePath

import pytest

from testbridge.application.concurrency import CancellationToken, raise_if_cancelled
from testbridge.application.paths.package_paths import PackagePathsContext
from testbridge.domain.models import (
    Manifest,
    PackageNotFoundError,
    Target,
    TargetDependency,
    TargetRole,
)

PACKAGE_ROOT = Path("/workspace/Package")


# ================================================================================
# Filesystem fake
# ================================================================================


class VirtualFileSystem:
    """In-memory filesystem port. Adding a file also adds its parent directories."""

    def __init__(self, files: Iterable[str | Path] = (), directories: Iterable[str | Path] = ()):
        self.files: dict[Path, str] = {}
        self.directories: set[Path] = set()
        self.is_directory_calls: list[Path] = []
        self.find_files_calls: list[tuple[str, str | None]] = []

        for path in files:
            self.add_file(path)
        for path in directories:
            self.add_directory(path)

    def add_file(self, path: str | Path, contents: str = "") -> Path:
        path = Path(path)
        self.files[path] = contents
        self.add_directory(path.parent)
        return path

    def add_directory(self, path: str | Path) -> Path:
        path = Path(path)
        self.directories.add(path)
        self.directories.update(path.parents)
        return path

    async def is_directory(self, path: Path) -> bool:
        self.is_directory_calls.append(Path(path))
        return Path(path) in self.directories

    async def file_exists(self, path: Path) -> bool:
        return Path(path) in self.files

    async def read_text(self, path: Path) -> str:
        return self.files.get(Path(path), "")

    async def find_files(self, include: str, exclude: str | None = None) -> list[Path]:
        self.find_files_calls.append((include, exclude))
        return sorted(
            path
            for path in self.files
            if _glob_match(path, include) and not (exclude and _glob_match(path, exclude))
        )


def _glob_match(path: PurePath, pattern: str) -> bool:
    if pattern.startswith("**/"):
        pattern = pattern[3:]
    return path.match(pattern)


# ================================================================================
# Manifest factories
# ================================================================================


def make_target(
    name: str,
    role: TargetRole | str = TargetRole.REGULAR,
    path: str | None = None,
    dependencies: Iterable[str] = (),
) -> Target:
    return Target(
        name=name,
        role=TargetRole(role),
        explicit_path=path,
        dependencies=[TargetDependency(by_name=[dependency, None]) for dependency in dependencies],
    )


def make_manifest(*targets: Target, name: str = "Package") -> Manifest:
    return Manifest(name=name, targets=list(targets))


async def make_package(
    file_system: VirtualFileSystem,
    manifest: Manifest,
    package_root: Path = PACKAGE_ROOT,
) -> PackagePathsContext:
    return await PackagePathsContext.create(
        package_root, manifest, file_system, manifest_path=package_root / "Package.swift"
    )


# ================================================================================
# Package provider fake
# ================================================================================


class StaticPackageProvider:
    """Package provider port serving prebuilt sessions by package root."""

    def __init__(self, *packages: PackagePathsContext):
        self.packages = list(packages)
        self.requested: list[Path] = []

    async def package_paths_for_file(
        self, file_path: Path, cancellation: CancellationToken | None = None
    ) -> PackagePathsContext:
        raise_if_cancelled(cancellation)
        self.requested.append(file_path)

        containing = [
            package
            for package in self.packages
            if package.package_root in file_path.parents
        ]
        if not containing:
            raise PackageNotFoundError(file_path)
        return max(containing, key=lambda package: len(package.package_root.parts))


# ================================================================================
# Fixtures
# ================================================================================


@pytest.fixture
def package_root() -> Path:
    return PACKAGE_ROOT


@pytest.fixture
def conventional_file_system() -> VirtualFileSystem:
    """``Sources/Target`` and ``Tests/TargetTests`` laid out by convention."""
    fs = VirtualFileSystem()
    fs.add_file(PACKAGE_ROOT / "Package.swift")
    fs.add_file(PACKAGE_ROOT / "Sources/Target/A.swift", "import Foundation\n")
    fs.add_file(PACKAGE_ROOT / "Sources/Target/Sub/B.swift")
    fs.add_directory(PACKAGE_ROOT / "Tests/TargetTests")
    return fs


@pytest.fixture
def conventional_manifest() -> Manifest:
    return make_manifest(
        make_target("Target"),
        make_target("TargetTests", TargetRole.TEST, dependencies=["Target"]),
    )

