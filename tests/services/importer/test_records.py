from __future__ import annotations

from recruitflow.services.admin_api.schemas import FieldDefinition
from recruitflow.services.importer.models import ParsedRow
from recruitflow.services.importer.records import (
    MAX_DISPLAY_ERRORS,
    build_field_name_to_label,
    build_record,
    summarize_import_response,
)


def test_build_record_keeps_only_mapped_non_empty_cells() -> None:
    row = ParsedRow(raw={"First": " Ada ", "Last": "   ", "Notes": "ignored"}, row_number=2)
    record = build_record(row, {"firstName": "First", "lastName": "Last", "email": ""})
    assert record == {"firstName": "Ada"}


def test_field_name_to_label_only_for_mapped_fields() -> None:
    fields = [
        FieldDefinition(field_name="firstName", field_label="First Name"),
        FieldDefinition(field_name="custom_1", field_label="Shift Preference"),
    ]
    labels = build_field_name_to_label({"firstName": "First", "custom_1": ""}, fields)
    assert labels == {"firstName": "First Name"}


def test_summary_renders_row_errors() -> None:
    payload = {"summary": {"successful": 1, "failed": 1, "errors": [{"row": 3, "errors": ["Duplicate email"]}]}}
    outcome = summarize_import_response(payload)
    assert outcome.success == 1
    assert outcome.failed == 1
    assert outcome.errors == ["Row 3: Duplicate email"]


def test_summary_truncates_displayed_errors() -> None:
    errors = [{"row": idx, "errors": ["bad", "worse"]} for idx in range(2, 40)]
    outcome = summarize_import_response({"summary": {"successful": "0", "failed": 38, "errors": errors}})
    assert outcome.failed == 38
    assert len(outcome.errors) == MAX_DISPLAY_ERRORS
    assert outcome.errors[0] == "Row 2: bad, worse"


def test_summary_tolerates_missing_fields() -> None:
    outcome = summarize_import_response({})
    assert (outcome.success, outcome.failed, outcome.errors) == (0, 0, [])
