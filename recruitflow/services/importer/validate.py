"""Validation layer for parsed import rows."""

from __future__ import annotations

import re
from typing import List, Sequence

from recruitflow.services.admin_api.schemas import FieldDefinition

from .fields import required_fields
from .models import FieldMapping, ParsedRow, ValidationResult

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
EMAIL_FIELD = "email"
NO_MODULE_ERROR = "Please select a module."


def _is_blank(value: str | None) -> bool:
    return value is None or value.strip() == ""


def _mapped_header(mapping: FieldMapping, field_name: str) -> str | None:
    header = mapping.get(field_name)
    if _is_blank(header):
        return None
    return header


def validate_rows(
    module: str | None,
    mapping: FieldMapping,
    fields: Sequence[FieldDefinition],
    rows: Sequence[ParsedRow],
) -> ValidationResult:
    """Validate ``rows`` against the required ``fields`` and current ``mapping``.

    Each row's ``errors`` list is replaced, so repeated calls with the same
    inputs give the same result. Email format problems are warnings only.
    """

    errors: List[str] = []
    warnings: List[str] = []

    if not module:
        errors.append(NO_MODULE_ERROR)
        return ValidationResult(is_valid=False, errors=errors, warnings=warnings)

    required = required_fields(fields)
    missing = [f.display_label for f in required if _mapped_header(mapping, f.field_name) is None]
    if missing:
        errors.append(f"Required fields not mapped: {', '.join(missing)}")

    mapped_required: List[tuple[FieldDefinition, str]] = []
    for definition in required:
        header = _mapped_header(mapping, definition.field_name)
        if header is not None:
            mapped_required.append((definition, header))
    email_header = _mapped_header(mapping, EMAIL_FIELD)

    for row in rows:
        row_errors: List[str] = []
        for definition, header in mapped_required:
            if _is_blank(row.raw.get(header)):
                row_errors.append(f'Row {row.row_number}: Missing required field "{definition.display_label}"')

        if email_header is not None:
            value = (row.raw.get(email_header) or "").strip()
            if value and not EMAIL_PATTERN.match(value):
                warnings.append(f"Row {row.row_number}: Invalid email format")

        row.errors = row_errors
        errors.extend(row_errors)

    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def split_rows(rows: Sequence[ParsedRow]) -> tuple[list[ParsedRow], list[ParsedRow]]:
    """Return ``(valid, invalid)`` rows based on their current ``errors``."""

    valid = [row for row in rows if row.is_valid]
    invalid = [row for row in rows if not row.is_valid]
    return valid, invalid


__all__ = ["EMAIL_PATTERN", "NO_MODULE_ERROR", "validate_rows", "split_rows"]
