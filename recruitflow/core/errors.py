"""Custom exceptions used across recruitflow."""


class RecruitFlowError(Exception):
    """Base error for the application."""


class ConfigError(RecruitFlowError):
    """Configuration related error."""


class InputRejectedError(RecruitFlowError):
    """Raised when a source file is rejected before any parsing state is kept."""


class ImportStateError(RecruitFlowError):
    """Raised when an import session transition is not allowed."""


class ImportValidationError(RecruitFlowError):
    """Raised when validation blocks advancing past the mapping step."""

    def __init__(self, message: str, result=None) -> None:
        super().__init__(message)
        self.result = result


class SubmissionError(RecruitFlowError):
    """Raised when the bulk import request cannot be completed."""


class ExportError(RecruitFlowError):
    """Raised when exporting records fails."""
