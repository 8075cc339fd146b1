"""Record building and response summarising for bulk submissions."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Sequence

from recruitflow.services.admin_api.schemas import FieldDefinition, field_labels

from .models import FieldMapping, ParsedRow, UploadOutcome

MAX_DISPLAY_ERRORS = 20


def build_record(row: ParsedRow, mapping: FieldMapping) -> Dict[str, str]:
    """Return only the mapped fields whose raw cell is non-empty after trimming."""

    record: Dict[str, str] = {}
    for field_name, header in mapping.items():
        if not header or not header.strip():
            continue
        value = row.raw.get(header)
        if value is None:
            continue
        value = value.strip()
        if value:
            record[field_name] = value
    return record


def apply_mapping(rows: Iterable[ParsedRow], mapping: FieldMapping) -> None:
    """Recompute ``mapped`` for every row from the current mapping."""

    for row in rows:
        row.mapped = build_record(row, mapping)


def build_field_name_to_label(mapping: FieldMapping, fields: Sequence[FieldDefinition]) -> Dict[str, str]:
    """Labels for the mapped fields, used server-side to store custom fields."""

    labels = field_labels(fields)
    return {name: labels[name] for name, header in mapping.items() if header and name in labels}


def summarize_import_response(payload: Mapping[str, Any]) -> UploadOutcome:
    """Convert a bulk-import response into an :class:`UploadOutcome`."""

    summary = payload.get("summary")
    if not isinstance(summary, Mapping):
        summary = {}
    messages: List[str] = []
    for entry in summary.get("errors") or []:
        if isinstance(entry, Mapping):
            details = entry.get("errors") or []
            if isinstance(details, str):
                details = [details]
            text = ", ".join(str(item) for item in details) or "Import failed"
            row = entry.get("row")
            messages.append(f"Row {row}: {text}" if row is not None else text)
        else:
            messages.append(str(entry))
    return UploadOutcome(
        success=_as_int(summary.get("successful")),
        failed=_as_int(summary.get("failed")),
        errors=messages[:MAX_DISPLAY_ERRORS],
    )


def _as_int(value: Any) -> int:
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


__all__ = [
    "MAX_DISPLAY_ERRORS",
    "apply_mapping",
    "build_field_name_to_label",
    "build_record",
    "summarize_import_response",
]
