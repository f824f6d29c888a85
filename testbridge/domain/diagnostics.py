"""
Aggregation of diagnostic records for presentation.

Operations hand back flat, ordered lists of ``DiagnosticRecord``. Before
they are shown to a user, records of the same kind are collapsed into a
single summary that names a few offending files.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .models import DiagnosticKind, DiagnosticRecord

# Number of file names listed in a summary before truncating.
TRUNCATE_LIST_AT = 2

_SUMMARY_HEADLINES: dict[DiagnosticKind, str] = {
    DiagnosticKind.FILE_NOT_IN_SOURCES_FOLDER: (
        "One or more files were not contained within a recognized Sources/ folder"
    ),
    DiagnosticKind.FILE_NOT_IN_TESTS_FOLDER: (
        "One or more files were not contained within a recognized Tests/ folder"
    ),
    DiagnosticKind.UNRECOGNIZED_TEST_FILE_NAME_PATTERN: (
        "One or more test files have an unrecognized test file name pattern"
    ),
    DiagnosticKind.PACKAGE_MANIFEST_NOT_FOUND: (
        "Could not find a Package.swift manifest for one or more files"
    ),
    DiagnosticKind.SOURCES_FOLDER_NOT_FOUND: (
        "Could not locate a sources folder for one or more files"
    ),
    DiagnosticKind.TESTS_FOLDER_NOT_FOUND: (
        "Could not locate a tests folder for one or more files"
    ),
    DiagnosticKind.ALREADY_IN_TEST_FILE: "One or more files are already test files",
}


class DiagnosticSummary(BaseModel):
    """Collapsed view of all diagnostics of one kind."""

    model_config = ConfigDict(frozen=True)

    kind: DiagnosticKind
    message: str
    files: list[Path] = Field(default_factory=list)
    count: int = 0

    @property
    def is_blocking(self) -> bool:
        return self.kind.is_blocking


def group_by_kind(
    diagnostics: Iterable[DiagnosticRecord],
) -> dict[DiagnosticKind, list[DiagnosticRecord]]:
    """Group records by kind, keeping first-seen order of kinds and records."""
    groups: dict[DiagnosticKind, list[DiagnosticRecord]] = {}
    for record in diagnostics:
        groups.setdefault(record.kind, []).append(record)
    return groups


def format_file_list(files: list[Path], truncate_at: int = TRUNCATE_LIST_AT) -> str:
    """Render base names of ``files``, one per line, truncating the tail."""
    names = [path.name for path in files]
    listed = "\n".join(names[:truncate_at])
    truncated = len(names) - truncate_at
    if truncated > 0:
        listed = f"{listed}\n...and {truncated} more"
    return listed


def summarize_diagnostics(
    diagnostics: Iterable[DiagnosticRecord],
    truncate_at: int = TRUNCATE_LIST_AT,
) -> list[DiagnosticSummary]:
    """
    Collapse diagnostics into one summary per kind.

    Records that carry a source file are deduplicated by that file. Pattern
    diagnostics are not tied to files; their distinct messages are joined
    instead.

    Args:
        diagnostics: Records in the order operations produced them
        truncate_at: Maximum number of file names listed per summary

    Returns:
        One summary per distinct kind, in first-seen order
    """
    summaries = []
    for kind, records in group_by_kind(diagnostics).items():
        files: list[Path] = []
        messages: list[str] = []
        for record in records:
            if record.source_file is not None:
                if record.source_file not in files:
                    files.append(record.source_file)
            elif record.message not in messages:
                messages.append(record.message)

        headline = _SUMMARY_HEADLINES.get(kind)
        if files and headline:
            message = f"{headline}:\n{format_file_list(files, truncate_at)}"
        elif files:
            message = f"{records[0].message}:\n{format_file_list(files, truncate_at)}"
        else:
            message = "\n".join(messages)

        summaries.append(
            DiagnosticSummary(kind=kind, message=message, files=files, count=len(records))
        )
    return summaries
