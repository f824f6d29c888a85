"""Domain models and conventions for the testbridge system."""

from .models import (
    DiagnosticKind,
    DiagnosticRecord,
    Manifest,
    PackageNotFoundError,
    MappingResult,
    NavigationResult,
    Resolution,
    Resolved,
    ResolvedTarget,
    SourceFile,
    SuggestTestFilesResult,
    Target,
    TargetDependency,
    TargetRole,
    TestBridgeError,
    TestFileDescriptor,
    Unresolved,
)

__all__ = [
    "DiagnosticKind",
    "DiagnosticRecord",
    "Manifest",
    "PackageNotFoundError",
    "MappingResult",
    "NavigationResult",
    "Resolution",
    "Resolved",
    "ResolvedTarget",
    "SourceFile",
    "SuggestTestFilesResult",
    "Target",
    "TargetDependency",
    "TargetRole",
    "TestBridgeError",
    "TestFileDescriptor",
    "Unresolved",
]
