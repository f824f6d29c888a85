"""Pure path helpers used by the resolution engine. No filesystem access."""

from __future__ import annotations

import os
import re
from pathlib import Path, PurePath

_IDENTIFIER_UNSAFE = re.compile(r"[^\w]")


def is_subdirectory(base: str | PurePath, file_path: str | PurePath) -> bool:
    """
    Return True if ``file_path`` lies strictly below ``base``.

    ``base`` itself is not considered to be below ``base``.
    """
    relative = os.path.relpath(os.fspath(file_path), os.fspath(base))
    return (
        relative != os.curdir
        and relative != os.pardir
        and not relative.startswith(os.pardir + os.sep)
        and not os.path.isabs(relative)
    )


def relative_directory(file_path: str | PurePath, base: str | PurePath) -> str:
    """
    Return the directory of ``file_path`` relative to ``base``.

    A file directly inside ``base`` yields an empty string.
    """
    relative = os.path.relpath(os.path.dirname(os.fspath(file_path)), os.fspath(base))
    return "" if relative == os.curdir else relative


def join(base: str | PurePath, *components: str) -> Path:
    """Join ``components`` onto ``base`` and collapse ``.``/``..`` segments."""
    return Path(os.path.normpath(os.path.join(os.fspath(base), *components)))


def root_directory_of_relative_path(relative_path: str) -> str:
    """
    Return the first component of a relative path.

    Raises:
        ValueError: If ``relative_path`` is absolute
    """
    if os.path.isabs(relative_path):
        raise ValueError("relative_path must not be an absolute path")

    current = relative_path
    while os.path.dirname(current) not in ("", os.curdir):
        current = os.path.dirname(current)
    return current


def sanitize_filename(file_name: str) -> str:
    """Reduce ``file_name`` to its last path component."""
    return PurePath(file_name).name


def sanitize_identifier(name: str) -> str:
    """Replace every character that is not a letter, digit or underscore with ``_``."""
    return _IDENTIFIER_UNSAFE.sub("_", name)
