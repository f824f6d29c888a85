"""Port interface for filesystem probing."""

from abc import abstractmethod
from pathlib import Path
from typing import Protocol


class FileSystemPort(Protocol):
    """
    Port interface for read-only filesystem queries.

    Every query is asynchronous and fallible: I/O problems are reported as a
    negative answer, never as an exception.
    """

    @abstractmethod
    async def is_directory(self, path: Path) -> bool:
        """
        Return True if ``path`` exists and is a directory.

        Returns False if the path exists but is not a directory, or on IO error.
        """
        ...

    @abstractmethod
    async def file_exists(self, path: Path) -> bool:
        """
        Return True if ``path`` exists and is a regular file.

        Returns False if the path exists but is not a file, or on IO error.
        """
        ...

    @abstractmethod
    async def find_files(
        self, include: str, exclude: str | None = None
    ) -> list[Path]:
        """
        List files matching a glob pattern.

        Args:
            include: Glob pattern, relative to the filesystem's search root
            exclude: Optional glob pattern of files to leave out

        Returns:
            Matching file paths, or an empty list on IO error
        """
        ...

    @abstractmethod
    async def read_text(self, path: Path) -> str:
        """Return the text contents of a file, or an empty string on IO error."""
        ...
