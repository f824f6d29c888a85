"""
Navigation Use Case - jump between a source file and its test file.

Going to a test file always goes through the package manifest. Going back to
a source file may first try configured filename patterns (``$1Tests``,
``$1Spec`` ...) against the files of the workspace, and only falls back to
the manifest when none of them finds a match.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ..config.models import TestBridgeConfig
from ..domain.conventions import SEARCH_PATTERN_PLACEHOLDER, SOURCE_FILE_EXTENSION
from ..domain.models import (
    DiagnosticKind,
    DiagnosticRecord,
    MappingResult,
    NavigationResult,
    PackageNotFoundError,
)
from ..ports.filesystem_port import FileSystemPort
from ..ports.package_provider_port import PackageProviderPort
from .concurrency import CancellationToken, raise_if_cancelled
from .paths.path_utils import sanitize_filename
from .paths.source_test_mapper import SourceToTestFileMapper

logger = logging.getLogger(__name__)


def validate_search_pattern(
    pattern: str, placeholder: str = SEARCH_PATTERN_PLACEHOLDER
) -> DiagnosticRecord | None:
    """Return a diagnostic if ``pattern`` does not hold exactly one placeholder."""
    if pattern.count(placeholder) == 1:
        return None

    return DiagnosticRecord(
        message=(
            "Found test file search pattern that does not contain exactly one copy "
            f"of '{placeholder}' placeholder: {pattern}"
        ),
        kind=DiagnosticKind.INCORRECT_SEARCH_PATTERN,
    )


def reverse_placeholder(pattern: str, placeholder: str, base_name: str) -> str | None:
    """
    Recover the text ``placeholder`` stood for when ``pattern`` produced ``base_name``.

    ``reverse_placeholder("$1Tests", "$1", "FooTests")`` is ``"Foo"``. Returns
    None when ``base_name`` does not fit the pattern or the placeholder would
    match an empty string.
    """
    if pattern == placeholder:
        return base_name or None

    parts = pattern.split(placeholder)
    if len(parts) != 2:
        return None

    prefix, suffix = parts
    if len(base_name) <= len(prefix) + len(suffix):
        return None
    if not base_name.startswith(prefix) or not base_name.endswith(suffix):
        return None

    return base_name[len(prefix) : len(base_name) - len(suffix)]


class NavigationUseCase:
    """
    Use case for navigating between source files and test files.

    Both directions report the destination together with whether it already
    exists on disk, so callers can offer to create missing test files.
    """

    def __init__(
        self,
        package_provider: PackageProviderPort,
        file_system: FileSystemPort,
        config: TestBridgeConfig | None = None,
    ):
        self._packages = package_provider
        self._file_system = file_system
        self._config = config or TestBridgeConfig()

    async def goto_test_file(
        self, file_path: Path, cancellation: CancellationToken | None = None
    ) -> NavigationResult:
        """
        Find the test file of a source file.

        A file that already is a test file resolves to itself, with an
        ``already_in_test_file`` diagnostic.
        """
        raise_if_cancelled(cancellation)

        try:
            package = await self._packages.package_paths_for_file(file_path, cancellation)
        except PackageNotFoundError:
            return _manifest_not_found(file_path)

        # Test files may live under source roots, so a file that also
        # classifies as source is mapped rather than reported.
        if not await package.is_source_file(file_path) and await package.is_test_file(file_path):
            return NavigationResult(
                original_path=file_path,
                destination=file_path,
                exists_on_disk=await self._file_system.file_exists(file_path),
                diagnostics=[
                    DiagnosticRecord(
                        message="File is already a test file",
                        kind=DiagnosticKind.ALREADY_IN_TEST_FILE,
                        source_file=file_path,
                    )
                ],
            )

        mapping = await SourceToTestFileMapper(package).suggested_test_path_for(file_path)
        return await self._from_mapping(mapping)

    async def goto_source_file(
        self, file_path: Path, cancellation: CancellationToken | None = None
    ) -> NavigationResult:
        """
        Find the source file a test file exercises.

        Filename heuristics, when enabled, are tried first; the package
        manifest is only consulted when none of the patterns finds a file.
        """
        diagnostics: list[DiagnosticRecord] = []
        goto_config = self._config.goto_test_file

        if goto_config.use_filename_heuristics and goto_config.heuristic_filename_patterns:
            match, diagnostics = await self._heuristic_search(
                file_path, goto_config.heuristic_filename_patterns
            )
            if match is not None:
                return NavigationResult(
                    original_path=file_path,
                    destination=match,
                    exists_on_disk=True,
                    diagnostics=diagnostics,
                )

        raise_if_cancelled(cancellation)

        try:
            package = await self._packages.package_paths_for_file(file_path, cancellation)
        except PackageNotFoundError:
            result = _manifest_not_found(file_path)
            return result.model_copy(update={"diagnostics": [*diagnostics, *result.diagnostics]})

        mapping = await SourceToTestFileMapper(package).suggested_source_path_for(file_path)
        result = await self._from_mapping(mapping)
        return result.model_copy(update={"diagnostics": [*diagnostics, *result.diagnostics]})

    async def _heuristic_search(
        self, file_path: Path, patterns: list[str]
    ) -> tuple[Path | None, list[DiagnosticRecord]]:
        diagnostics: list[DiagnosticRecord] = []
        base_name = file_path.name.removesuffix(SOURCE_FILE_EXTENSION)

        for pattern in patterns:
            problem = validate_search_pattern(pattern)
            if problem is not None:
                diagnostics.append(problem)
                continue

            pattern = pattern.removesuffix(SOURCE_FILE_EXTENSION)

            file_name = reverse_placeholder(pattern, SEARCH_PATTERN_PLACEHOLDER, base_name)
            if not file_name:
                continue

            sanitized = sanitize_filename(file_name)
            if sanitized != file_name:
                diagnostics.append(
                    DiagnosticRecord(
                        message=(
                            "Found test file search pattern that does not resolve to a "
                            f"simple filename: {pattern}"
                        ),
                        kind=DiagnosticKind.SPECIAL_CHARACTERS_IN_SEARCH_PATTERN,
                    )
                )
                if not sanitized:
                    continue
                file_name = sanitized

            matches = await self._file_system.find_files(
                f"**/{file_name}{SOURCE_FILE_EXTENSION}"
            )
            matches = [m for m in matches if os.path.normpath(m) != os.path.normpath(file_path)]
            if matches:
                logger.debug("Pattern %r matched %s", pattern, matches[0])
                return matches[0], diagnostics

        return None, diagnostics

    async def _from_mapping(self, mapping: MappingResult) -> NavigationResult:
        exists = False
        if mapping.transformed_path is not None:
            exists = await self._file_system.file_exists(mapping.transformed_path)

        return NavigationResult(
            original_path=mapping.original_path,
            destination=mapping.transformed_path,
            exists_on_disk=exists,
            diagnostics=mapping.diagnostics,
        )


def _manifest_not_found(file_path: Path) -> NavigationResult:
    return NavigationResult(
        original_path=file_path,
        diagnostics=[
            DiagnosticRecord(
                message="Cannot find Package.swift manifest for the file",
                kind=DiagnosticKind.PACKAGE_MANIFEST_NOT_FOUND,
                source_file=file_path,
            )
        ],
    )
