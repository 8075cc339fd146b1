"""Import wizard state machine: select -> map -> preview -> upload."""

from __future__ import annotations

import logging
from typing import List

from recruitflow.core.errors import ImportStateError, ImportValidationError, SubmissionError
from recruitflow.core.logger import get_logger
from recruitflow.services.admin_api.cancel import CancelToken
from recruitflow.services.admin_api.client import AdminApiClient
from recruitflow.services.admin_api.models import ApiError, RequestCancelled
from recruitflow.services.admin_api.schemas import FieldDefinition, ImportOptions, validate_entity_type

from .acquisition import decode_csv_bytes, ensure_csv_name, parse_csv_text, read_csv_file, resume_result_to_row
from .fields import find_field, visible_fields
from .mailbox import PendingFileMailbox
from .mapping import auto_map_fields
from .models import FieldMapping, ImportStep, ParsedFile, ParsedRow, UploadOutcome, ValidationResult
from .records import apply_mapping, build_field_name_to_label, build_record, summarize_import_response
from .validate import split_rows, validate_rows

LOGGER = get_logger()

_PREVIEW_ERROR_LINES = 5


class ImportSession:
    """Drive one bulk import from file selection to submission.

    The session owns a :class:`CancelToken`; ``reset`` and ``close`` cancel
    it so requests still in flight cannot write into the cleared state.
    """

    def __init__(
        self,
        client: AdminApiClient,
        *,
        mailbox: PendingFileMailbox | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._mailbox = mailbox
        self._logger = logger or LOGGER
        self._token = CancelToken()
        self.module: str | None = None
        self.field_definitions: List[FieldDefinition] = []
        self._fields_loaded = False
        self._clear_data()

    # Public state ------------------------------------------------------

    @property
    def step(self) -> ImportStep:
        return self._step

    @property
    def cancel_token(self) -> CancelToken:
        return self._token

    @property
    def fields_loaded(self) -> bool:
        return self._fields_loaded

    @property
    def valid_rows(self) -> List[ParsedRow]:
        return split_rows(self.rows)[0]

    @property
    def invalid_rows(self) -> List[ParsedRow]:
        return split_rows(self.rows)[1]

    # Module and field definitions --------------------------------------

    def select_module(self, entity_type: str) -> bool:
        """Choose the destination module and load its field definitions.

        Switching from one module to another discards parsed rows and the
        mapping.
        """

        entity = validate_entity_type(entity_type)
        if entity != self.module:
            if self.module is not None:
                self._logger.info("importer.session module_changed from=%s to=%s", self.module, entity)
                self._cancel("module changed")
                self._clear_data()
            self.module = entity
            self.field_definitions = []
            self._fields_loaded = False
        return self.load_field_definitions()

    def load_field_definitions(self) -> bool:
        """Fetch field definitions for the current module.

        Returns ``False`` when the request was cancelled and its result
        discarded.
        """

        if not self.module:
            raise ImportStateError("Please select a module.")
        token = self._token
        try:
            definitions = self._client.fetch_field_definitions(self.module, cancel_token=token)
        except RequestCancelled:
            self._logger.info("importer.session fields_discarded module=%s", self.module)
            return False
        if token.cancelled:
            return False

        self.field_definitions = visible_fields(definitions)
        self._fields_loaded = True
        self._apply_auto_mapping()
        if self.headers and self._step == ImportStep.SELECT:
            self._step = ImportStep.MAP
        return True

    # File acquisition ----------------------------------------------------

    def load_file(self, path) -> None:
        self._accept(read_csv_file(path))

    def load_text(self, text: str, *, name: str = "upload.csv") -> None:
        ensure_csv_name(name)
        self._accept(parse_csv_text(text, source_name=name))

    def load_resume(self, path) -> bool:
        token = self._token
        try:
            result = self._client.parse_resume(path, cancel_token=token)
        except RequestCancelled:
            return False
        self._accept(resume_result_to_row(result, source_name=str(path)))
        return True

    def load_pending(self, mailbox: PendingFileMailbox | None = None) -> bool:
        """Take the pending file from the mailbox, if any, and parse it.

        The mapping step is entered only once field definitions are
        available; until then the session waits in ``select``.
        """

        box = mailbox or self._mailbox
        if box is None:
            raise ImportStateError("No pending-file mailbox configured.")
        pending = box.take()
        if pending is None:
            return False

        if pending.is_resume:
            token = self._token
            try:
                result = self._client.parse_resume_bytes(
                    pending.name, pending.content, content_type=pending.content_type, cancel_token=token
                )
            except RequestCancelled:
                return False
            parsed = resume_result_to_row(result, source_name=pending.name)
        else:
            ensure_csv_name(pending.name)
            parsed = parse_csv_text(decode_csv_bytes(pending.content), source_name=pending.name)
        self._accept(parsed, wait_for_fields=True)
        return True

    # Mapping editor ----------------------------------------------------

    def set_mapping(self, field_name: str, header: str | None) -> None:
        """Point ``field_name`` at ``header``; an empty header skips the field."""

        self._require_step(ImportStep.MAP)
        value = (header or "").strip()
        if find_field(self.field_definitions, field_name) is None:
            raise ValueError(f"Unknown field for {self.module}: {field_name}")
        if value and value not in self.headers:
            raise ValueError(f"CSV has no column named {value!r}")
        self.mapping[field_name] = value
        apply_mapping(self.rows, self.mapping)
        self.validation = None

    def set_mappings(self, overrides: dict[str, str]) -> None:
        for field_name, header in overrides.items():
            self.set_mapping(field_name, header)

    # Validation and transitions -----------------------------------------

    def validate(self) -> ValidationResult:
        apply_mapping(self.rows, self.mapping)
        result = validate_rows(self.module, self.mapping, self.field_definitions, self.rows)
        self.validation = result
        self._logger.info(
            "importer.session validated module=%s valid=%s errors=%d warnings=%d",
            self.module,
            result.is_valid,
            len(result.errors),
            len(result.warnings),
        )
        return result

    def advance_to_preview(self) -> ValidationResult:
        self._require_step(ImportStep.MAP)
        result = self.validate()
        if not result.is_valid:
            shown = "\n".join(result.errors[:_PREVIEW_ERROR_LINES])
            raise ImportValidationError(f"Please fix validation errors:\n{shown}", result)
        if not self.valid_rows:
            raise ImportValidationError("No valid rows to import.", result)
        self._step = ImportStep.PREVIEW
        return result

    def skip_incomplete_records(self) -> int:
        """Drop rows with errors and move on to preview with the remainder.

        Returns the number of dropped rows. Mapping-level errors are not
        something skipping can fix, so they still block the transition.
        """

        self._require_step(ImportStep.MAP)
        result = self.validate()
        row_errors = {error for row in self.rows for error in row.errors}
        blocking = [error for error in result.errors if error not in row_errors]
        if blocking:
            raise ImportValidationError(f"Please fix validation errors:\n{blocking[0]}", result)
        valid, invalid = split_rows(self.rows)
        if not valid:
            raise ImportValidationError("No valid rows remain after skipping incomplete records.", result)

        self.skipped_rows.extend(invalid)
        self.rows = valid
        self.validate()
        self._step = ImportStep.PREVIEW
        self._logger.info("importer.session skipped_incomplete dropped=%d kept=%d", len(invalid), len(valid))
        return len(invalid)

    def back_to_map(self) -> None:
        self._require_step(ImportStep.PREVIEW)
        self._step = ImportStep.MAP

    def submit(self, options: ImportOptions | None = None) -> UploadOutcome | None:
        """Send the valid rows to the bulk-import endpoint.

        Returns ``None`` when the session was reset while the request was
        in flight. Failures leave the session in ``preview`` so the user can
        re-trigger the submission.
        """

        self._require_step(ImportStep.PREVIEW)
        valid = self.valid_rows
        if not valid:
            raise SubmissionError("No valid records to import.")

        records = [build_record(row, self.mapping) for row in valid]
        labels = build_field_name_to_label(self.mapping, self.field_definitions)
        token = self._token
        try:
            payload = self._client.import_records(
                self.module,
                records,
                options=options,
                field_name_to_label=labels or None,
                cancel_token=token,
            )
        except RequestCancelled:
            self._logger.info("importer.session submission_discarded module=%s", self.module)
            return None
        except ApiError as exc:
            self._logger.error("importer.session submission_failed module=%s error=%s", self.module, exc, exc_info=True)
            raise SubmissionError(f"An error occurred during upload: {exc.server_message or exc}") from exc
        if token.cancelled:
            return None
        if payload.get("success") is False:
            raise SubmissionError(str(payload.get("message") or "Import failed."))

        outcome = summarize_import_response(payload)
        self.outcome = outcome
        self.submitted_rows = len(records)
        self._step = ImportStep.UPLOAD
        self._logger.info(
            "importer.session submitted module=%s records=%d success=%d failed=%d",
            self.module,
            len(records),
            outcome.success,
            outcome.failed,
        )
        return outcome

    def reset(self) -> None:
        """Cancel in-flight work and return to ``select`` with no parsed data."""

        self._cancel("reset")
        self._clear_data()

    def close(self) -> None:
        self._cancel("closed")

    # Internal helpers -------------------------------------------------

    def _accept(self, parsed: ParsedFile, *, wait_for_fields: bool = False) -> None:
        self._clear_data()
        self.headers = list(parsed.headers)
        self.rows = list(parsed.rows)
        self.source_name = parsed.source_name
        if self.module and self._fields_loaded:
            self._apply_auto_mapping()
            self._step = ImportStep.MAP
        elif self.module and not wait_for_fields:
            self._step = ImportStep.MAP
        # else stay in select; load_field_definitions moves on to map

    def _apply_auto_mapping(self) -> None:
        # any entry, including an explicit skip, is a user edit
        if not self.headers or self.mapping:
            return
        self.mapping = auto_map_fields(self.headers, self.field_definitions)
        apply_mapping(self.rows, self.mapping)
        self._logger.info(
            "importer.session auto_mapped module=%s matched=%d fields=%d",
            self.module,
            len(self.mapping),
            len(self.field_definitions),
        )

    def _clear_data(self) -> None:
        self._step = ImportStep.SELECT
        self.headers: List[str] = []
        self.rows: List[ParsedRow] = []
        self.skipped_rows: List[ParsedRow] = []
        self.mapping: FieldMapping = {}
        self.validation: ValidationResult | None = None
        self.outcome: UploadOutcome | None = None
        self.submitted_rows = 0
        self.source_name: str | None = None

    def _cancel(self, reason: str) -> None:
        self._token.cancel(reason)
        self._token = CancelToken()

    def _require_step(self, *steps: ImportStep) -> None:
        if self._step not in steps:
            allowed = ", ".join(step.value for step in steps)
            raise ImportStateError(f"Action not allowed in step '{self._step.value}' (requires {allowed})")


__all__ = ["ImportSession"]
