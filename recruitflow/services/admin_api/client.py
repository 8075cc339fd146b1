"""Primary client implementation for the admin API."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path
from typing import Any, Mapping, Sequence

from recruitflow.core.logger import get_logger

from .auth import BearerAuth
from .cancel import CancelToken
from .config import AdminApiConfig, resolve_config
from .http import HttpClient
from .models import ApiRequestError
from .schemas import FieldDefinition, ImportOptions, parse_field_definitions, validate_entity_type

LOGGER = get_logger()

FIELD_MANAGEMENT_PATH = "/api/admin/field-management/{entity_type}"
IMPORT_PATH = "/api/admin/data-uploader/import"
PARSE_RESUME_PATH = "/api/admin/parse-resume"
EXPORT_PATH = "/api/admin/data-downloader/export"


class AdminApiClient:
    """High level client for the admin field-management, import, and export endpoints."""

    def __init__(
        self,
        config: AdminApiConfig,
        *,
        http_client: HttpClient | None = None,
        auth: BearerAuth | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._logger = logger or LOGGER
        if http_client is None:
            self._http = HttpClient(config, auth=auth, logger=self._logger)
        else:
            self._http = http_client

    @classmethod
    def from_profile(cls, profile_name: str | None) -> "AdminApiClient":
        """Instantiate a client from ``profiles.yaml`` plus environment overrides."""

        return cls(resolve_config(profile_name))

    @property
    def config(self) -> AdminApiConfig:
        return self._config

    def fetch_field_definitions(
        self,
        entity_type: str,
        *,
        cancel_token: CancelToken | None = None,
    ) -> list[FieldDefinition]:
        """Return every field definition declared for ``entity_type`` (hidden ones included)."""

        entity = validate_entity_type(entity_type)
        payload = self._http.request_json(
            "GET",
            FIELD_MANAGEMENT_PATH.format(entity_type=entity),
            cancel_token=cancel_token,
        )
        definitions = parse_field_definitions(payload)
        self._logger.info("admin_api.client fields_loaded entity=%s count=%d", entity, len(definitions))
        return definitions

    def import_records(
        self,
        entity_type: str,
        records: Sequence[Mapping[str, Any]],
        *,
        options: ImportOptions | None = None,
        field_name_to_label: Mapping[str, str] | None = None,
        cancel_token: CancelToken | None = None,
    ) -> dict[str, Any]:
        """Send mapped records to the bulk-import endpoint and return the decoded response."""

        body: dict[str, Any] = {
            "entityType": validate_entity_type(entity_type),
            "records": [dict(record) for record in records],
            "options": (options or ImportOptions()).to_payload(),
        }
        if field_name_to_label:
            body["fieldNameToLabel"] = dict(field_name_to_label)
        self._logger.info(
            "admin_api.client import_started entity=%s records=%d", body["entityType"], len(body["records"])
        )
        return self._http.request_json("POST", IMPORT_PATH, json_body=body, cancel_token=cancel_token)

    def parse_resume(self, path: str | Path, *, cancel_token: CancelToken | None = None) -> dict[str, Any]:
        """Upload a resume file for parsing and return the structured ``result`` object."""

        resume_path = Path(path)
        if not resume_path.exists():
            raise FileNotFoundError(str(path))
        return self.parse_resume_bytes(
            resume_path.name,
            resume_path.read_bytes(),
            content_type=mimetypes.guess_type(resume_path.name)[0],
            cancel_token=cancel_token,
        )

    def parse_resume_bytes(
        self,
        name: str,
        content: bytes,
        *,
        content_type: str | None = None,
        cancel_token: CancelToken | None = None,
    ) -> dict[str, Any]:
        """Parse an in-memory resume (e.g. one taken from the pending-file mailbox)."""

        files = {"file": (name, content, content_type or "application/octet-stream")}
        payload = self._http.request_json("POST", PARSE_RESUME_PATH, files=files, cancel_token=cancel_token)
        result = payload.get("result")
        if payload.get("success") is False or not isinstance(result, dict):
            raise ApiRequestError(str(payload.get("message") or "Resume parsing failed."), payload=payload)
        self._logger.info("admin_api.client resume_parsed name=%s", name)
        return result

    def export_records(
        self,
        module: str,
        *,
        selected_fields: Sequence[str] = (),
        export_format: str = "csv",
        field_name_to_label: Mapping[str, str] | None = None,
        cancel_token: CancelToken | None = None,
    ) -> list[dict[str, Any]]:
        """Fetch one module's records from the export endpoint."""

        body: dict[str, Any] = {
            "module": validate_entity_type(module),
            "selectedFields": list(selected_fields),
            "format": export_format,
        }
        if field_name_to_label:
            body["fieldNameToLabel"] = dict(field_name_to_label)
        payload = self._http.request_json("POST", EXPORT_PATH, json_body=body, cancel_token=cancel_token)
        if payload.get("success") is False or payload.get("errors"):
            message = payload.get("message") or "; ".join(
                f"{key}: {value}" for key, value in (payload.get("errors") or {}).items()
            )
            raise ApiRequestError(message or "Export failed", payload=payload)
        data = payload.get("data")
        if not isinstance(data, list):
            return []
        records = [item for item in data if isinstance(item, dict)]
        self._logger.info("admin_api.client export_loaded module=%s records=%d", body["module"], len(records))
        return records

    def close(self) -> None:
        """Release the underlying HTTP session."""

        self._http.close()


__all__ = ["AdminApiClient", "FIELD_MANAGEMENT_PATH", "IMPORT_PATH", "PARSE_RESUME_PATH", "EXPORT_PATH"]
