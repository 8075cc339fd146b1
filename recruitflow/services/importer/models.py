"""Data models used by the bulk importer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

# system field_name -> CSV header ("" means skip)
FieldMapping = Dict[str, str]


class ImportStep(str, Enum):
    """Steps of the import wizard, in forward order."""

    SELECT = "select"
    MAP = "map"
    PREVIEW = "preview"
    UPLOAD = "upload"


@dataclass(slots=True)
class ParsedRow:
    """One CSV data row; ``raw`` is fixed, ``mapped``/``errors`` are derived."""

    raw: Dict[str, str]
    row_number: int
    mapped: Dict[str, str] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(slots=True)
class ParsedFile:
    """Headers plus data rows produced from one source file."""

    headers: List[str]
    rows: List[ParsedRow]
    source_name: str | None = None


@dataclass(slots=True)
class ValidationResult:
    """Snapshot of a validation pass."""

    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass(slots=True)
class UploadOutcome:
    """Summary of a bulk-import submission."""

    success: int
    failed: int
    errors: List[str] = field(default_factory=list)


@dataclass(slots=True)
class PendingFile:
    """A file handed across a navigation boundary through the mailbox."""

    name: str
    content: bytes
    content_type: str = ""
    is_resume: bool = False


__all__ = [
    "FieldMapping",
    "ImportStep",
    "ParsedFile",
    "ParsedRow",
    "PendingFile",
    "UploadOutcome",
    "ValidationResult",
]
