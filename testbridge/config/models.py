"""Pydantic models for testbridge configuration."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConfirmationMode(str, Enum):
    """When to ask before writing generated test files."""

    ALWAYS = "always"
    ONLY_IF_MULTI_FILE = "only_if_multi_file"
    ONLY_ON_DIRECTORIES = "only_on_directories"
    NEVER = "never"


class EmitImportDeclarationsMode(str, Enum):
    """Which imports of a source file are repeated in its generated test file."""

    ALWAYS = "always"
    EXPLICIT_DEPENDENCIES_ONLY = "explicit_dependencies_only"
    NEVER = "never"


class FileGenConfig(BaseModel):
    """Configuration for test file generation."""

    confirmation: ConfirmationMode = Field(
        default=ConfirmationMode.ONLY_IF_MULTI_FILE,
        description="When to confirm before writing generated test files",
    )

    emit_import_declarations: EmitImportDeclarationsMode = Field(
        default=EmitImportDeclarationsMode.EXPLICIT_DEPENDENCIES_ONLY,
        description="Which detected imports are added to generated test files",
    )


class GotoTestFileConfig(BaseModel):
    """Configuration for navigating between source and test files."""

    use_filename_heuristics: bool = Field(
        default=False,
        description="Search the workspace by file name before using the manifest",
    )

    heuristic_filename_patterns: list[str] = Field(
        default=["$1Tests"],
        description="Test file name patterns; '$1' stands for the source file name",
    )

    @field_validator("heuristic_filename_patterns", mode="before")
    @classmethod
    def coerce_single_pattern(cls, v: Any) -> Any:
        """Accept a single pattern string as well as a list."""
        if isinstance(v, str):
            return [v]
        return v


class ConcurrencyConfig(BaseModel):
    """Limits for batch operations."""

    max_concurrent_files: int = Field(
        default=20, ge=1, description="Files resolved concurrently in a batch"
    )

    max_concurrent_packages: int = Field(
        default=10, ge=1, description="Package manifests loaded concurrently"
    )


class ToolchainConfig(BaseModel):
    """Configuration for the external Swift toolchain."""

    swift_executable: str = Field(default="swift", description="Swift executable")

    timeout: float = Field(
        default=60.0, gt=0, description="Timeout in seconds for toolchain invocations"
    )


class TestBridgeConfig(BaseModel):
    """Main configuration model for testbridge."""

    file_gen: FileGenConfig = Field(
        default_factory=FileGenConfig, description="Test file generation"
    )

    goto_test_file: GotoTestFileConfig = Field(
        default_factory=GotoTestFileConfig,
        description="Navigation between source and test files",
    )

    concurrency: ConcurrencyConfig = Field(
        default_factory=ConcurrencyConfig, description="Batch concurrency limits"
    )

    toolchain: ToolchainConfig = Field(
        default_factory=ToolchainConfig, description="Swift toolchain invocation"
    )

    @field_validator("goto_test_file")
    @classmethod
    def validate_heuristics(cls, v: GotoTestFileConfig) -> GotoTestFileConfig:
        """Heuristic navigation needs at least one pattern to search with."""
        if v.use_filename_heuristics and not v.heuristic_filename_patterns:
            raise ValueError(
                "use_filename_heuristics requires at least one heuristic filename pattern"
            )
        return v

    model_config = ConfigDict(validate_assignment=True, extra="forbid")


__all__ = [
    "ConcurrencyConfig",
    "ConfirmationMode",
    "EmitImportDeclarationsMode",
    "FileGenConfig",
    "GotoTestFileConfig",
    "TestBridgeConfig",
    "ToolchainConfig",
]
