"""
Local disk implementation of the filesystem port.

Blocking ``os``/``pathlib`` calls run on the default thread pool. Every IO
error is logged and reported as a negative answer.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Callable
from pathlib import Path, PurePath
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Directories never descended into while searching for files.
DEFAULT_EXCLUDE_DIRS = frozenset(
    {
        ".build",
        ".swiftpm",
        ".git",
        ".hg",
        ".svn",
        "node_modules",
        "DerivedData",
    }
)


class LocalFileSystem:
    """
    Filesystem port backed by the local disk.

    Glob searches are rooted at ``search_root``; absolute paths passed to the
    probing methods are used as given.
    """

    def __init__(
        self,
        search_root: str | Path | None = None,
        exclude_dirs: frozenset[str] | set[str] | None = None,
    ) -> None:
        self.search_root = Path(search_root) if search_root else Path.cwd()
        self.exclude_dirs = frozenset(exclude_dirs) if exclude_dirs is not None else DEFAULT_EXCLUDE_DIRS

    async def _run(self, func: Callable[..., T], *args: object) -> T:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func, *args)

    async def is_directory(self, path: Path) -> bool:
        try:
            return await self._run(os.path.isdir, path)
        except OSError as e:
            logger.debug("Failed to stat %s: %s", path, e)
            return False

    async def file_exists(self, path: Path) -> bool:
        try:
            return await self._run(os.path.isfile, path)
        except OSError as e:
            logger.debug("Failed to stat %s: %s", path, e)
            return False

    async def read_text(self, path: Path) -> str:
        try:
            return await self._run(_read_text, path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read %s: %s", path, e)
            return ""

    async def find_files(self, include: str, exclude: str | None = None) -> list[Path]:
        """
        List files below ``search_root`` matching ``include``.

        Patterns are matched against paths relative to ``search_root``. Results
        are sorted so repeated searches return the same first match.
        """
        try:
            return await self._run(self._walk, include, exclude)
        except OSError as e:
            logger.warning("Failed to search %s for %s: %s", self.search_root, include, e)
            return []

    def _walk(self, include: str, exclude: str | None) -> list[Path]:
        matches: list[Path] = []

        for root, dirs, files in os.walk(self.search_root):
            dirs[:] = sorted(d for d in dirs if d not in self.exclude_dirs)

            for filename in files:
                full_path = Path(root) / filename
                relative = PurePath(os.path.relpath(full_path, self.search_root))

                if not _matches_pattern(relative, include):
                    continue
                if exclude and _matches_pattern(relative, exclude):
                    continue
                matches.append(full_path)

        matches.sort()
        logger.debug("Found %d file(s) matching %r in %s", len(matches), include, self.search_root)
        return matches


def _read_text(path: Path) -> str:
    with open(path, encoding="utf-8") as f:
        return f.read()


def _matches_pattern(relative_path: PurePath, pattern: str) -> bool:
    # PurePath.match anchors relative patterns at the right, so a leading
    # "**/" also matches files directly in the search root.
    if pattern.startswith("**/") and relative_path.match(pattern[3:]):
        return True
    return relative_path.match(pattern)
