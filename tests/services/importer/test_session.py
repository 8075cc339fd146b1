from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from recruitflow.core.errors import (
    ImportStateError,
    ImportValidationError,
    InputRejectedError,
    SubmissionError,
)
from recruitflow.services.admin_api.models import ApiRequestError, RequestCancelled
from recruitflow.services.admin_api.schemas import FieldDefinition, ImportOptions
from recruitflow.services.importer import ImportSession, ImportStep, PendingFile, PendingFileMailbox

JOB_SEEKER_FIELDS = [
    FieldDefinition(field_name="lastName", field_label="Last Name", is_required=True, sort_order=2),
    FieldDefinition(field_name="firstName", field_label="First Name", is_required=True, sort_order=1),
    FieldDefinition(field_name="email", field_label="Email", sort_order=3),
    FieldDefinition(field_name="ssn", field_label="SSN", is_hidden=True, sort_order=4),
]

TWO_ROWS = "First Name,Last Name,Email\nAda,,ada@example.com\nAlan,Turing,alan@example.com\n"


class FakeClient:
    """Stands in for ``AdminApiClient`` and records what the session sends."""

    def __init__(self, fields: list[FieldDefinition] | None = None) -> None:
        self.fields = list(fields if fields is not None else JOB_SEEKER_FIELDS)
        self.import_response: dict[str, Any] = {"summary": {"successful": 1, "failed": 0, "errors": []}}
        self.import_error: Exception | None = None
        self.resume_result: dict[str, Any] = {}
        self.imports: list[dict[str, Any]] = []
        self.on_fetch = None
        self.on_import = None

    def fetch_field_definitions(self, entity_type: str, *, cancel_token=None) -> list[FieldDefinition]:
        if self.on_fetch is not None:
            self.on_fetch()
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        return list(self.fields)

    def import_records(self, entity_type, records, *, options=None, field_name_to_label=None, cancel_token=None):
        self.imports.append(
            {
                "entityType": entity_type,
                "records": list(records),
                "options": options,
                "fieldNameToLabel": field_name_to_label,
            }
        )
        if self.on_import is not None:
            self.on_import()
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        if self.import_error is not None:
            raise self.import_error
        return self.import_response

    def parse_resume_bytes(self, name, content, *, content_type=None, cancel_token=None):
        return self.resume_result

    def parse_resume(self, path, *, cancel_token=None):
        return self.resume_result


def _session(client: FakeClient | None = None, **kwargs) -> ImportSession:
    return ImportSession(client or FakeClient(), **kwargs)


def test_select_module_loads_visible_fields_in_order() -> None:
    session = _session()
    assert session.select_module("Job-Seekers")
    assert session.module == "job-seekers"
    assert [f.field_name for f in session.field_definitions] == ["firstName", "lastName", "email"]
    assert session.step == ImportStep.SELECT


def test_unsupported_module_is_rejected() -> None:
    with pytest.raises(ValueError):
        _session().select_module("invoices")


def test_file_after_module_enters_map_with_auto_mapping() -> None:
    session = _session()
    session.select_module("job-seekers")
    session.load_text(TWO_ROWS, name="people.csv")
    assert session.step == ImportStep.MAP
    assert session.mapping == {"firstName": "First Name", "lastName": "Last Name", "email": "Email"}
    assert session.rows[1].mapped == {"firstName": "Alan", "lastName": "Turing", "email": "alan@example.com"}


def test_file_before_module_waits_for_fields() -> None:
    session = _session()
    session.load_text(TWO_ROWS, name="people.csv")
    assert session.step == ImportStep.SELECT
    session.select_module("job-seekers")
    assert session.step == ImportStep.MAP
    assert session.mapping["firstName"] == "First Name"


def test_explicit_skips_survive_field_refetch() -> None:
    session = _session()
    session.select_module("job-seekers")
    session.load_text(TWO_ROWS, name="people.csv")
    for field_name in ("firstName", "lastName", "email"):
        session.set_mapping(field_name, "")

    assert session.load_field_definitions()
    assert session.mapping == {"firstName": "", "lastName": "", "email": ""}
    assert session.step == ImportStep.MAP
    assert session.rows[1].mapped == {}


def test_rejected_input_keeps_previous_state() -> None:
    session = _session()
    session.select_module("job-seekers")
    session.load_text(TWO_ROWS, name="people.csv")
    with pytest.raises(InputRejectedError):
        session.load_text("a,b\n", name="people.xlsx")
    assert session.step == ImportStep.MAP
    assert len(session.rows) == 2


def test_skip_incomplete_records_leaves_one_row_to_submit() -> None:
    client = FakeClient()
    session = _session(client)
    session.select_module("job-seekers")
    session.load_text(TWO_ROWS, name="people.csv")

    with pytest.raises(ImportValidationError) as excinfo:
        session.advance_to_preview()
    assert excinfo.value.result.errors == ['Row 2: Missing required field "Last Name"']
    assert session.step == ImportStep.MAP

    assert session.skip_incomplete_records() == 1
    assert session.step == ImportStep.PREVIEW
    assert len(session.valid_rows) == 1
    assert [row.row_number for row in session.skipped_rows] == [2]

    outcome = session.submit(ImportOptions(skip_duplicates=True))
    assert outcome is not None
    assert session.step == ImportStep.UPLOAD
    sent = client.imports[0]
    assert sent["entityType"] == "job-seekers"
    assert sent["records"] == [{"firstName": "Alan", "lastName": "Turing", "email": "alan@example.com"}]
    assert sent["options"].skip_duplicates
    assert sent["fieldNameToLabel"] == {"firstName": "First Name", "lastName": "Last Name", "email": "Email"}


def test_unmapped_required_field_blocks_skip_as_well() -> None:
    session = _session()
    session.select_module("job-seekers")
    session.load_text(TWO_ROWS, name="people.csv")
    session.set_mapping("lastName", "")
    with pytest.raises(ImportValidationError):
        session.skip_incomplete_records()
    assert session.step == ImportStep.MAP
    assert len(session.rows) == 2


def test_manual_mapping_is_validated_and_kept() -> None:
    session = _session()
    session.select_module("job-seekers")
    session.load_text("Given,Family\nAda,Lovelace\n", name="people.csv")
    assert session.mapping == {}
    with pytest.raises(ValueError):
        session.set_mapping("firstName", "Nope")
    with pytest.raises(ValueError):
        session.set_mapping("unknown", "Given")
    session.set_mappings({"firstName": "Given", "lastName": "Family"})
    session.load_field_definitions()
    assert session.mapping == {"firstName": "Given", "lastName": "Family"}
    session.advance_to_preview()
    assert session.step == ImportStep.PREVIEW


def test_submission_failure_stays_in_preview() -> None:
    client = FakeClient()
    client.import_error = ApiRequestError("boom", status_code=500, payload={"message": "Database unavailable"})
    session = _session(client)
    session.select_module("job-seekers")
    session.load_text("First Name,Last Name\nAda,Lovelace\n", name="people.csv")
    session.advance_to_preview()

    with pytest.raises(SubmissionError, match="Database unavailable"):
        session.submit()
    assert session.step == ImportStep.PREVIEW

    client.import_error = None
    client.import_response = {"success": False, "message": "Invalid entity type"}
    with pytest.raises(SubmissionError, match="Invalid entity type"):
        session.submit()
    assert session.step == ImportStep.PREVIEW


def test_submit_with_no_valid_rows_is_refused() -> None:
    session = _session()
    session.select_module("job-seekers")
    session.load_text("First Name,Last Name\nAda,Lovelace\n", name="people.csv")
    session.advance_to_preview()
    session.rows[0].errors = ["Row 2: stale"]
    with pytest.raises(SubmissionError, match="No valid records to import."):
        session.submit()
    assert session.step == ImportStep.PREVIEW


def test_submission_outcome_is_summarised() -> None:
    client = FakeClient()
    client.import_response = {
        "summary": {"successful": 1, "failed": 1, "errors": [{"row": 3, "errors": ["Duplicate email"]}]}
    }
    session = _session(client)
    session.select_module("job-seekers")
    session.load_text("First Name,Last Name\nAda,Lovelace\nAlan,Turing\n", name="people.csv")
    session.advance_to_preview()
    outcome = session.submit()
    assert outcome is not None
    assert (outcome.success, outcome.failed, outcome.errors) == (1, 1, ["Row 3: Duplicate email"])


def test_illegal_transitions_raise() -> None:
    session = _session()
    with pytest.raises(ImportStateError):
        session.advance_to_preview()
    with pytest.raises(ImportStateError):
        session.submit()
    with pytest.raises(ImportStateError):
        session.back_to_map()
    with pytest.raises(ImportStateError):
        session.load_field_definitions()


def test_back_to_map_from_preview() -> None:
    session = _session()
    session.select_module("job-seekers")
    session.load_text("First Name,Last Name\nAda,Lovelace\n", name="people.csv")
    session.advance_to_preview()
    session.back_to_map()
    assert session.step == ImportStep.MAP


def test_changing_module_discards_rows() -> None:
    session = _session()
    session.select_module("job-seekers")
    session.load_text(TWO_ROWS, name="people.csv")
    old_token = session.cancel_token
    session.select_module("leads")
    assert old_token.cancelled
    assert session.rows == []
    assert session.mapping == {}
    assert session.step == ImportStep.SELECT


def test_reset_clears_state_and_discards_late_submission() -> None:
    client = FakeClient()
    session = _session(client)
    session.select_module("job-seekers")
    session.load_text("First Name,Last Name\nAda,Lovelace\n", name="people.csv")
    session.advance_to_preview()

    client.on_import = session.reset
    assert session.submit() is None
    assert session.step == ImportStep.SELECT
    assert session.rows == []
    assert session.outcome is None
    assert not session.cancel_token.cancelled


def test_field_fetch_cancelled_mid_flight_is_ignored() -> None:
    client = FakeClient()
    session = _session(client)
    session.select_module("job-seekers")
    session.load_text(TWO_ROWS, name="people.csv")
    client.on_fetch = session.reset
    client.fields = []
    assert session.load_field_definitions() is False
    assert session.fields_loaded
    assert [f.field_name for f in session.field_definitions] == ["firstName", "lastName", "email"]


def test_pending_csv_waits_for_field_definitions(tmp_path: Path) -> None:
    mailbox = PendingFileMailbox(tmp_path)
    mailbox.put(PendingFile(name="people.csv", content=TWO_ROWS.encode("utf-8"), content_type="text/csv"))
    session = _session(mailbox=mailbox)

    assert session.load_pending()
    assert session.step == ImportStep.SELECT
    assert not mailbox.has_pending()
    assert session.load_pending() is False

    session.select_module("job-seekers")
    assert session.step == ImportStep.MAP
    assert session.mapping["lastName"] == "Last Name"


def test_pending_resume_is_parsed_remotely(tmp_path: Path) -> None:
    client = FakeClient(
        [
            FieldDefinition(field_name="first_name", field_label="First Name", is_required=True),
            FieldDefinition(field_name="last_name", field_label="Last Name", is_required=True),
            FieldDefinition(field_name="email", field_label="Email"),
        ]
    )
    client.resume_result = {"candidate_name": "Ada Lovelace", "candidate_email": "ada@example.com", "positions": []}
    mailbox = PendingFileMailbox(tmp_path)
    mailbox.put(PendingFile(name="ada.pdf", content=b"%PDF-1.4", content_type="application/pdf", is_resume=True))

    session = _session(client, mailbox=mailbox)
    session.select_module("job-seekers")
    assert session.load_pending()
    assert session.step == ImportStep.MAP
    assert session.rows[0].mapped == {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com"}


def test_load_pending_without_mailbox() -> None:
    with pytest.raises(ImportStateError):
        _session().load_pending()


def test_cancelled_token_refuses_new_requests() -> None:
    client = FakeClient()
    session = _session(client)
    session.select_module("job-seekers")
    token = session.cancel_token
    session.close()
    assert token.cancelled
    with pytest.raises(RequestCancelled):
        token.raise_if_cancelled()
