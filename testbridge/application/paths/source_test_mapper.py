"""
Bidirectional mapping between source files and their mirrored test files.

Both directions follow the same cascade: the relative directory of the input is
computed against the root of its owning target, then transposed onto the
counterpart target on the opposite side. Each level of the cascade is tried in
order and the first that applies wins:

1. target with an explicit path;
2. target resolved through conventions;
3. target name inferred from the directory structure;
4. bare conventional root;
5. failure, reported as a diagnostic.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path

from ...domain.conventions import SOURCE_SEARCH_PATHS, TEST_SEARCH_PATHS, TEST_SUFFIX
from ...domain.models import (
    DiagnosticKind,
    MappingResult,
    Resolution,
    Resolved,
    Target,
    TargetRole,
    Unresolved,
)
from .package_paths import PackagePathsContext
from .path_utils import join

logger = logging.getLogger(__name__)


def mirrored_test_file_name(source_file_name: str) -> str:
    """``A.swift`` -> ``ATests.swift``."""
    stem, suffix = os.path.splitext(source_file_name)
    return f"{stem}{TEST_SUFFIX}{suffix}"


def mirrored_source_file_name(test_file_name: str) -> str | None:
    """``ATests.swift`` -> ``A.swift``; None when the stem lacks the test suffix."""
    stem, suffix = os.path.splitext(test_file_name)
    if not stem.endswith(TEST_SUFFIX):
        return None
    return f"{stem[: -len(TEST_SUFFIX)]}{suffix}"


def to_test_target_name(name: str) -> str | None:
    return f"{name}{TEST_SUFFIX}"


def to_source_target_name(name: str) -> str | None:
    if name.endswith(TEST_SUFFIX):
        return name[: -len(TEST_SUFFIX)]
    return None


class SourceToTestFileMapper:
    """
    Maps source files to test files and back for one resolution session.

    Results are always ``MappingResult`` instances; failures are reported as
    diagnostics, never raised.
    """

    def __init__(self, package: PackagePathsContext) -> None:
        self.package = package

    async def suggested_test_path_for(self, source_file: Path) -> MappingResult:
        """
        Return the path of the test file mirroring ``source_file``.

        The transformed path is None if the file is not a source file or if
        no tests folder can be located for it.
        """
        if not await self.package.is_source_file(source_file):
            return self._failed(
                source_file,
                Unresolved.single(
                    "File is not contained within a recognized Sources/ folder",
                    DiagnosticKind.FILE_NOT_IN_SOURCES_FOLDER,
                    source_file,
                ),
            )

        target = self.package.target_for_path(source_file)
        target_name = target.name if target else await self.package.target_name_from_path(source_file)
        test_target = self.package.test_target_for(target)

        relative_dir = await self.find_relative_target_path(
            source_file,
            search_paths=SOURCE_SEARCH_PATHS,
            failure_kind=DiagnosticKind.SOURCES_FOLDER_NOT_FOUND,
        )
        if isinstance(relative_dir, Unresolved):
            return self._failed(source_file, relative_dir)

        destination = await self.transpose(
            source_file,
            relative_dir.value,
            destination_root=await self.package.available_tests_path(),
            file_name=mirrored_test_file_name(source_file.name),
            counterpart=test_target,
            counterpart_role=TargetRole.TEST,
            target_name=target_name,
            transform_target_name=to_test_target_name,
            failure_kind=DiagnosticKind.TESTS_FOLDER_NOT_FOUND,
            failure_message="Could not locate tests folder for a file's package",
        )
        if isinstance(destination, Unresolved):
            return self._failed(source_file, destination)

        logger.debug("Mapped source %s -> %s", source_file, destination.value)
        return MappingResult(original_path=source_file, transformed_path=destination.value)

    async def suggested_source_path_for(self, test_file: Path) -> MappingResult:
        """
        Return the path of the source file ``test_file`` mirrors.

        The transformed path is None if the file is not a test file, if its
        name does not end in ``Tests`` or if no sources folder can be located.
        """
        if not await self.package.is_test_file(test_file):
            return self._failed(
                test_file,
                Unresolved.single(
                    "File is not contained within a recognized Tests/ folder",
                    DiagnosticKind.FILE_NOT_IN_TESTS_FOLDER,
                    test_file,
                ),
            )

        source_file_name = mirrored_source_file_name(test_file.name)
        if source_file_name is None:
            return self._failed(
                test_file,
                Unresolved.single(
                    "Test file name has unrecognized test file name pattern",
                    DiagnosticKind.UNRECOGNIZED_TEST_FILE_NAME_PATTERN,
                    test_file,
                ),
            )

        target = self.package.target_for_path(test_file)
        target_name = target.name if target else await self.package.target_name_from_path(test_file)
        source_target = self.package.source_target_for(target)

        relative_dir = await self.find_relative_target_path(
            test_file,
            search_paths=TEST_SEARCH_PATHS,
            failure_kind=DiagnosticKind.TESTS_FOLDER_NOT_FOUND,
        )
        if isinstance(relative_dir, Unresolved):
            return self._failed(test_file, relative_dir)

        destination = await self.transpose(
            test_file,
            relative_dir.value,
            destination_root=await self.package.available_sources_path(),
            file_name=source_file_name,
            counterpart=source_target,
            counterpart_role=TargetRole.REGULAR,
            target_name=target_name,
            transform_target_name=to_source_target_name,
            failure_kind=DiagnosticKind.SOURCES_FOLDER_NOT_FOUND,
            failure_message="Could not locate sources folder for a file's package",
        )
        if isinstance(destination, Unresolved):
            return self._failed(test_file, destination)

        logger.debug("Mapped test %s -> %s", test_file, destination.value)
        return MappingResult(original_path=test_file, transformed_path=destination.value)

    async def find_relative_target_path(
        self,
        file_path: Path,
        search_paths: tuple[str, ...],
        failure_kind: DiagnosticKind,
    ) -> Resolution[str]:
        """
        Return the directory of ``file_path`` relative to its target's root.

        When no declared target owns the file, the relative path is taken
        against the conventional root of ``search_paths`` that contains it. An
        empty string means the file sits directly in that root.
        """
        file_dir = os.path.dirname(os.fspath(file_path))
        target = self.package.target_for_path(file_path)

        if target is not None and target.explicit_path is not None:
            base = join(self.package.package_root, target.explicit_path)
            return Resolved(_relative(file_dir, base))

        if target is not None:
            base = await self.package.computed_path_for(target)
            return Resolved(_relative(file_dir, base))

        side_root = await self.package.conventional_root_for(file_path, search_paths)
        if side_root is None:
            return Unresolved.single(
                "Cannot find folder that contains the file", failure_kind, file_path
            )

        target_name = await self.package.target_name_from_path(file_path)
        if target_name is not None:
            return Resolved(_relative(file_dir, join(side_root, target_name)))

        return Resolved(_relative(file_dir, side_root))

    async def transpose(
        self,
        file_path: Path,
        relative_dir: str,
        destination_root: Path | None,
        file_name: str,
        counterpart: Target | None,
        counterpart_role: TargetRole,
        target_name: str | None,
        transform_target_name: Callable[[str], str | None],
        failure_kind: DiagnosticKind,
        failure_message: str,
    ) -> Resolution[Path]:
        """
        Place ``file_name`` under ``relative_dir`` of the counterpart target.

        Without a declared counterpart the destination is the conventional
        directory of the name derived from ``target_name``, or the bare
        ``destination_root`` when no name is known.
        """
        if counterpart is not None and counterpart.explicit_path is not None:
            return Resolved(
                join(self.package.package_root, counterpart.explicit_path, relative_dir, file_name)
            )

        if counterpart is not None:
            counterpart_path = await self.package.computed_path_for(counterpart)
            return Resolved(join(counterpart_path, relative_dir, file_name))

        if target_name is not None:
            counterpart_name = transform_target_name(target_name)
            if counterpart_name is None:
                return Unresolved.single(failure_message, failure_kind, file_path)

            counterpart_dir = await self.package.conventional_directory_for(
                counterpart_name, counterpart_role
            )
            if counterpart_dir is None:
                return Unresolved.single(failure_message, failure_kind, file_path)
            return Resolved(join(counterpart_dir, relative_dir, file_name))

        if destination_root is not None:
            return Resolved(join(destination_root, relative_dir, file_name))

        return Unresolved.single(failure_message, failure_kind, file_path)

    @staticmethod
    def _failed(file_path: Path, failure: Unresolved) -> MappingResult:
        logger.debug("Could not map %s: %s", file_path, failure.diagnostics[0].kind.value)
        return MappingResult(original_path=file_path, diagnostics=list(failure.diagnostics))


def _relative(file_dir: str, base: str | Path) -> str:
    relative = os.path.relpath(file_dir, os.fspath(base))
    return "" if relative == os.curdir else relative
