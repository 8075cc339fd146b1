"""Bulk record importer service package."""

from .mailbox import PendingFileMailbox
from .models import ImportStep, ParsedFile, ParsedRow, PendingFile, UploadOutcome, ValidationResult
from .report import write_import_report
from .session import ImportSession

__all__ = [
    "ImportSession",
    "ImportStep",
    "ParsedFile",
    "ParsedRow",
    "PendingFile",
    "PendingFileMailbox",
    "UploadOutcome",
    "ValidationResult",
    "write_import_report",
]
