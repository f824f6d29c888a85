"""
Suggest Test Files Use Case - propose test files for a batch of source files.

For every source file the use case locates the owning package, maps the file
onto its mirrored test location and renders an XCTest scaffold for it. Files
that cannot be mapped contribute diagnostics instead of descriptors.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Sequence
from pathlib import Path

from ..config.models import EmitImportDeclarationsMode, TestBridgeConfig
from ..domain.conventions import (
    TARGET_NAME_PLACEHOLDER,
    TEST_CASE_BASE_CLASS,
    TEST_FRAMEWORK_MODULE,
    TEST_SUFFIX,
)
from ..domain.models import (
    DiagnosticKind,
    DiagnosticRecord,
    PackageNotFoundError,
    SuggestTestFilesResult,
    Target,
    TestFileDescriptor,
)
from ..ports.filesystem_port import FileSystemPort
from ..ports.package_provider_port import PackageProviderPort
from .algorithms.dedupe import deduplicate_stable
from .concurrency import (
    CancellationToken,
    OperationCancelledError,
    limit_with_parameters,
    raise_if_cancelled,
)
from .dependency_graph import TargetDependencyGraph
from .paths.path_utils import sanitize_identifier
from .paths.source_test_mapper import SourceToTestFileMapper
from .syntax.import_detection import detect_module_imports
from .syntax.swift_file_builder import SwiftFileBuilder

logger = logging.getLogger(__name__)


def render_test_file(class_name: str, target_name: str | None, imports: Sequence[str] = ()) -> str:
    """
    Render the scaffold of an empty XCTest case.

    ``target_name`` is imported with ``@testable``; a placeholder token is
    written when it is unknown. ``imports`` follow it in the given order.
    """
    builder = SwiftFileBuilder()

    builder.put_import(TEST_FRAMEWORK_MODULE)
    with builder.section():
        builder.put_import(target_name or TARGET_NAME_PLACEHOLDER, testable=True)
        builder.put_imports(list(imports))
    builder.put_empty_class(class_name, [TEST_CASE_BASE_CLASS])

    return builder.build()


def select_emitted_imports(
    mode: EmitImportDeclarationsMode,
    detected_imports: list[str],
    target: Target | None,
    dependency_graph: TargetDependencyGraph,
) -> list[str]:
    """Pick the detected imports that are repeated in the generated test file."""
    if mode is EmitImportDeclarationsMode.ALWAYS:
        return list(detected_imports)

    if mode is EmitImportDeclarationsMode.EXPLICIT_DEPENDENCIES_ONLY:
        if target is None:
            return []
        return [
            module
            for module in detected_imports
            if dependency_graph.has_dependency_path(target, module)
        ]

    return []


class SuggestTestFilesUseCase:
    """
    Use case for proposing test files for source files.

    Package sessions are obtained from the provider, which caches them per
    package root; the batch first warms that cache once per distinct
    directory, then resolves every file with bounded concurrency.
    """

    def __init__(
        self,
        package_provider: PackageProviderPort,
        file_system: FileSystemPort,
        config: TestBridgeConfig | None = None,
    ):
        """
        Initialize the use case.

        Args:
            package_provider: Port for locating package resolution sessions
            file_system: Port for filesystem queries
            config: Configuration, defaults when omitted
        """
        self._packages = package_provider
        self._file_system = file_system
        self._config = config or TestBridgeConfig()

    async def suggest_test_files(
        self,
        file_paths: Sequence[Path],
        cancellation: CancellationToken | None = None,
    ) -> SuggestTestFilesResult:
        """
        Propose one test file per source file in ``file_paths``.

        Args:
            file_paths: Source files to generate test files for
            cancellation: Optional cooperative cancellation token

        Returns:
            Proposed test files and the diagnostics of files that were skipped,
            in input order

        Raises:
            OperationCancelledError: If cancellation was requested. Its
                ``partial_result`` is a ``SuggestTestFilesResult`` with the
                files completed so far.
        """
        concurrency = self._config.concurrency

        # One lookup per directory fills the package cache before the batch.
        representatives = deduplicate_stable(list(file_paths), key=lambda p: os.path.dirname(p))
        logger.debug(
            "Warming package cache for %d director%s",
            len(representatives),
            "y" if len(representatives) == 1 else "ies",
        )
        try:
            await limit_with_parameters(
                concurrency.max_concurrent_packages,
                lambda path: self._warm_package(path, cancellation),
                representatives,
                cancellation,
            )
        except OperationCancelledError as e:
            raise OperationCancelledError(partial_result=SuggestTestFilesResult()) from e

        try:
            results = await limit_with_parameters(
                concurrency.max_concurrent_files,
                lambda path: self._suggest_for_file(path, cancellation),
                list(file_paths),
                cancellation,
            )
        except OperationCancelledError as e:
            partial = _merge_results(e.partial_result or [])
            raise OperationCancelledError(partial_result=partial) from e

        merged = _merge_results(results)
        logger.info(
            "Suggested %d test file(s) with %d diagnostic(s)",
            len(merged.test_files),
            len(merged.diagnostics),
        )
        return merged

    async def _warm_package(self, file_path: Path, cancellation: CancellationToken | None) -> None:
        try:
            await self._packages.package_paths_for_file(file_path, cancellation)
        except PackageNotFoundError:
            # Reported per file once the batch runs.
            logger.debug("No package manifest above %s", file_path)

    async def _suggest_for_file(
        self, file_path: Path, cancellation: CancellationToken | None
    ) -> SuggestTestFilesResult:
        raise_if_cancelled(cancellation)

        try:
            package = await self._packages.package_paths_for_file(file_path, cancellation)
        except PackageNotFoundError:
            return SuggestTestFilesResult(
                diagnostics=[
                    DiagnosticRecord(
                        message="Cannot find Package.swift manifest for the file",
                        kind=DiagnosticKind.PACKAGE_MANIFEST_NOT_FOUND,
                        source_file=file_path,
                    )
                ]
            )

        mapping = await SourceToTestFileMapper(package).suggested_test_path_for(file_path)
        if mapping.transformed_path is None:
            return SuggestTestFilesResult(diagnostics=mapping.diagnostics)

        raise_if_cancelled(cancellation)

        source_file = await package.load_source_file(file_path)
        target = package.target_for_path(file_path)
        target_name = target.name if target else await package.target_name_from_path(file_path)

        detected_imports = detect_module_imports(source_file.contents)
        emitted_imports = select_emitted_imports(
            self._config.file_gen.emit_import_declarations,
            detected_imports,
            target,
            package.dependency_graph(),
        )

        stem, _ = os.path.splitext(file_path.name)
        descriptor = TestFileDescriptor(
            name=mapping.transformed_path.name,
            path=mapping.transformed_path,
            contents=render_test_file(
                sanitize_identifier(f"{stem}{TEST_SUFFIX}"), target_name, emitted_imports
            ),
            original_file=file_path,
            exists_on_disk=await self._file_system.file_exists(mapping.transformed_path),
            suggested_imports=detected_imports,
        )
        return SuggestTestFilesResult(test_files=[descriptor])


def _merge_results(results: Sequence[SuggestTestFilesResult]) -> SuggestTestFilesResult:
    merged = SuggestTestFilesResult()
    for result in results:
        merged = merged.merged_with(result)
    return merged


async def suggest_test_files(
    file_paths: Sequence[Path],
    package_provider: PackageProviderPort,
    file_system: FileSystemPort,
    config: TestBridgeConfig | None = None,
    cancellation: CancellationToken | None = None,
) -> SuggestTestFilesResult:
    """Convenience wrapper around ``SuggestTestFilesUseCase``."""
    use_case = SuggestTestFilesUseCase(package_provider, file_system, config)
    return await use_case.suggest_test_files(file_paths, cancellation)
