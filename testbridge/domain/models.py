"""
Domain models for the testbridge system.

This module contains the core domain models using Pydantic for validation
and serialization. They describe a package manifest (targets and their roles),
the per-session resolved view of those targets, and the diagnostics and
mapping results produced while transposing files between source and test
targets.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

T = TypeVar("T")


class TestBridgeError(Exception):
    """Base exception for testbridge domain errors."""

    pass


class PackageNotFoundError(TestBridgeError):
    """Raised when no package manifest exists above a file."""

    def __init__(self, file_path: Path, message: str | None = None):
        super().__init__(message or f"No package manifest found for {file_path}")
        self.file_path = file_path


class TargetRole(str, Enum):
    """Enumeration of the roles a manifest target can have."""

    REGULAR = "regular"
    EXECUTABLE = "executable"
    PLUGIN = "plugin"
    SYSTEM = "system"
    BINARY = "binary"
    SNIPPET = "snippet"
    MACRO = "macro"
    TEST = "test"

    @property
    def is_test(self) -> bool:
        return self is TargetRole.TEST


class TargetDependency(BaseModel):
    """
    A single dependency entry of a target, as emitted by the manifest dump.

    Each variant is a positional list; only the first entry (the name) is
    relevant for path resolution and dependency analysis.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    by_name: list[str | None] | None = Field(None, alias="byName")
    target: list[str | None] | None = Field(None, alias="target")
    product: list[str | None] | None = Field(None, alias="product")

    @property
    def name(self) -> str | None:
        """Name of the dependency, or None for entries that cannot be named."""
        if self.by_name:
            return self.by_name[0]
        if self.target:
            return self.target[0]
        if self.product and len(self.product) >= 4:
            return self.product[0]
        return None


class Target(BaseModel):
    """
    A named unit of code declared by a package manifest.

    The manifest dump calls the role ``type`` and the explicit directory
    ``path``; both spellings are accepted on input.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(..., description="Target name, unique within a manifest")
    role: TargetRole = Field(..., alias="type", description="Role of the target")
    explicit_path: str | None = Field(
        None,
        alias="path",
        description="Directory of the target relative to the package root",
    )
    dependencies: list[TargetDependency] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate that target names are not blank."""
        if not v or not v.strip():
            raise ValueError("Target name cannot be empty")
        return v

    @property
    def dependency_names(self) -> list[str]:
        """Names of the dependencies of this target, in declaration order."""
        names = []
        for dependency in self.dependencies:
            name = dependency.name
            if name is not None:
                names.append(name)
        return names


class ToolsVersion(BaseModel):
    """Tools version marker of a manifest."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    version: str = Field(..., alias="_version")


class Manifest(BaseModel):
    """
    Declarative description of a package and its targets.

    Immutable once parsed. The engine only borrows it for the lifetime of a
    resolution session.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(..., description="Package name")
    targets: list[Target] = Field(default_factory=list)
    tools_version: ToolsVersion | None = Field(None, alias="toolsVersion")
    dependencies: list[dict[str, Any]] = Field(
        default_factory=list, description="Package dependencies, as dumped"
    )

    @field_validator("targets")
    @classmethod
    def validate_unique_target_names(cls, v: list[Target]) -> list[Target]:
        """Validate that no two targets share a name."""
        seen: set[str] = set()
        for target in v:
            if target.name in seen:
                raise ValueError(f"Duplicate target name: {target.name}")
            seen.add(target.name)
        return v

    def target_named(self, name: str) -> Target | None:
        for target in self.targets:
            if target.name == name:
                return target
        return None


class ResolvedTarget(Target):
    """A target together with the directory it occupies for one session."""

    computed_path: Path = Field(..., description="Absolute directory of the target")
    path_exists_as_directory: bool = Field(
        ..., description="Whether computed_path is a directory on disk"
    )


class DiagnosticKind(str, Enum):
    """Closed set of diagnostic kinds consumed by the presentation layer."""

    FILE_NOT_IN_SOURCES_FOLDER = "file_not_in_sources_folder"
    FILE_NOT_IN_TESTS_FOLDER = "file_not_in_tests_folder"
    UNRECOGNIZED_TEST_FILE_NAME_PATTERN = "unrecognized_test_file_name_pattern"
    PACKAGE_MANIFEST_NOT_FOUND = "package_manifest_not_found"
    SOURCES_FOLDER_NOT_FOUND = "sources_folder_not_found"
    TESTS_FOLDER_NOT_FOUND = "tests_folder_not_found"
    INCORRECT_SEARCH_PATTERN = "incorrect_search_pattern"
    SPECIAL_CHARACTERS_IN_SEARCH_PATTERN = "special_characters_in_search_pattern"
    ALREADY_IN_TEST_FILE = "already_in_test_file"

    @property
    def is_blocking(self) -> bool:
        """Whether a diagnostic of this kind prevents producing a path."""
        return self not in _INFORMATIONAL_KINDS


_INFORMATIONAL_KINDS = frozenset(
    {
        DiagnosticKind.INCORRECT_SEARCH_PATTERN,
        DiagnosticKind.SPECIAL_CHARACTERS_IN_SEARCH_PATTERN,
        DiagnosticKind.ALREADY_IN_TEST_FILE,
    }
)


class DiagnosticRecord(BaseModel):
    """A structured, non-fatal record of why a resolution step fell short."""

    model_config = ConfigDict(frozen=True)

    message: str = Field(..., description="Human readable message")
    kind: DiagnosticKind = Field(..., description="Machine readable kind")
    source_file: Path | None = Field(
        None, description="File that triggered the diagnostic, if any"
    )


class MappingResult(BaseModel):
    """
    Result of transposing one file between its source and test locations.

    ``transformed_path`` is None exactly when a blocking diagnostic is
    present; a non-null path may only be accompanied by informational
    diagnostics.
    """

    model_config = ConfigDict(frozen=True)

    original_path: Path
    transformed_path: Path | None = None
    diagnostics: list[DiagnosticRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _validate_diagnostics(self) -> "MappingResult":
        blocking = [d for d in self.diagnostics if d.kind.is_blocking]
        if self.transformed_path is None and not blocking:
            raise ValueError(
                "A mapping without a transformed path requires a blocking diagnostic"
            )
        if self.transformed_path is not None and blocking:
            raise ValueError(
                "A mapping with a transformed path cannot carry blocking diagnostics"
            )
        return self

    @property
    def succeeded(self) -> bool:
        return self.transformed_path is not None


class SourceFile(BaseModel):
    """A source file from which a unit test file can be generated."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="File name, including extension")
    path: Path = Field(..., description="Full file path")
    contents: str = Field("", description="Contents of the file")
    exists_on_disk: bool = Field(True, description="False for memory-only files")


class TestFileDescriptor(BaseModel):
    """A proposed test file for a source file, with generated contents."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="File name, including extension")
    path: Path = Field(..., description="Full destination path")
    contents: str = Field(..., description="Generated scaffold contents")
    original_file: Path = Field(..., description="Source file the test mirrors")
    exists_on_disk: bool = Field(False, description="Whether path already exists")
    suggested_imports: list[str] = Field(
        default_factory=list, description="Modules imported by the source file"
    )


class SuggestTestFilesResult(BaseModel):
    """Aggregate result of proposing test files for a batch of sources."""

    model_config = ConfigDict(frozen=True)

    test_files: list[TestFileDescriptor] = Field(default_factory=list)
    diagnostics: list[DiagnosticRecord] = Field(default_factory=list)

    def merged_with(self, other: "SuggestTestFilesResult") -> "SuggestTestFilesResult":
        """Concatenate two results, keeping relative order."""
        return SuggestTestFilesResult(
            test_files=[*self.test_files, *other.test_files],
            diagnostics=[*self.diagnostics, *other.diagnostics],
        )


# Step results used inside the mapper. A step either resolves to a value or
# explains, through diagnostics, why it could not.


@dataclass(frozen=True)
class Resolved(Generic[T]):
    value: T


@dataclass(frozen=True)
class Unresolved:
    diagnostics: tuple[DiagnosticRecord, ...]

    @classmethod
    def single(
        cls, message: str, kind: DiagnosticKind, source_file: Path | None = None
    ) -> "Unresolved":
        return cls((DiagnosticRecord(message=message, kind=kind, source_file=source_file),))


Resolution = Union[Resolved[T], Unresolved]


class NavigationResult(BaseModel):
    """Destination of a jump between a source file and its test file."""

    model_config = ConfigDict(frozen=True)

    original_path: Path
    destination: Path | None = None
    exists_on_disk: bool = Field(False, description="Whether destination exists")
    diagnostics: list[DiagnosticRecord] = Field(default_factory=list)
