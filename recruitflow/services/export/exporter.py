"""CSV and Excel writers for records pulled from the export endpoint."""

from __future__ import annotations

import csv
import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Sequence

import pandas as pd
from openpyxl import Workbook
from openpyxl.utils import get_column_letter

from recruitflow.core.errors import ExportError
from recruitflow.core.logger import get_logger
from recruitflow.services.admin_api.client import AdminApiClient
from recruitflow.services.admin_api.models import ApiError
from recruitflow.services.admin_api.schemas import field_labels

LOGGER = get_logger()

EXPORT_FORMATS = ("csv", "excel")
SHEET_NAME_LIMIT = 31
COLUMN_WIDTH = 15


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, separators=(",", ":"))
    return str(value)


def flatten_record(record: Mapping[str, Any], prefix: str = "") -> Dict[str, str]:
    """Flatten nested objects into ``parent_child`` keys.

    Lists become ``"; "``-joined strings and ``None`` becomes ``""``.
    """

    flattened: Dict[str, str] = {}
    for key, value in record.items():
        name = f"{prefix}_{key}" if prefix else str(key)
        if value is None:
            flattened[name] = ""
        elif isinstance(value, Mapping):
            flattened.update(flatten_record(value, name))
        elif isinstance(value, list):
            flattened[name] = "; ".join(_scalar(item) for item in value)
        else:
            flattened[name] = _scalar(value)
    return flattened


def build_frame(
    records: Iterable[Mapping[str, Any]],
    *,
    selected_fields: Sequence[str] = (),
    labels: Mapping[str, str] | None = None,
) -> pd.DataFrame:
    """Build a labelled frame; selected fields absent from every record are dropped."""

    flattened = [flatten_record(record) for record in records]
    if selected_fields:
        columns = [name for name in selected_fields if any(name in row for row in flattened)]
    else:
        columns = list(flattened[0].keys()) if flattened else []

    labels = labels or {}
    frame = pd.DataFrame(
        [[row.get(name) or "" for name in columns] for row in flattened],
        columns=[labels.get(name) or name for name in columns],
    )
    return frame


def write_csv(frame: pd.DataFrame, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    # BOM so spreadsheet tools pick up UTF-8
    frame.to_csv(path, index=False, encoding="utf-8-sig", quoting=csv.QUOTE_ALL)
    return path


def write_excel(frame: pd.DataFrame, path: Path, *, sheet_name: str) -> Path:
    """Write ``frame`` into a single-sheet workbook named after the module."""

    path.parent.mkdir(parents=True, exist_ok=True)
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name[:SHEET_NAME_LIMIT]
    ws.append([str(column) for column in frame.columns])
    for values in frame.itertuples(index=False):
        ws.append(list(values))
    for index in range(1, len(frame.columns) + 1):
        ws.column_dimensions[get_column_letter(index)].width = COLUMN_WIDTH

    tmp_path = path.with_name(path.name + ".tmp")
    wb.save(tmp_path)
    os.replace(tmp_path, path)
    return path


def export_module(
    client: AdminApiClient,
    module: str,
    output: str | Path,
    *,
    selected_fields: Sequence[str] = (),
    export_format: str = "csv",
) -> Path:
    """Export ``module`` records to ``output`` and return the written path."""

    if export_format not in EXPORT_FORMATS:
        raise ExportError(f"Unsupported export format: {export_format}")

    try:
        labels = field_labels(client.fetch_field_definitions(module))
        records = client.export_records(
            module,
            selected_fields=selected_fields,
            export_format=export_format,
            field_name_to_label={name: labels[name] for name in selected_fields if name in labels} or None,
        )
    except ApiError as exc:
        raise ExportError(f"Export failed: {exc.server_message or exc}") from exc
    if not records:
        raise ExportError(f"No {module} records to export.")

    frame = build_frame(records, selected_fields=selected_fields, labels=labels)
    path = Path(output)
    if export_format == "excel":
        write_excel(frame, path, sheet_name=module)
    else:
        write_csv(frame, path)
    LOGGER.info(
        "export.exporter written module=%s format=%s rows=%d columns=%d path=%s",
        module,
        export_format,
        len(frame),
        len(frame.columns),
        path,
    )
    return path


__all__: List[str] = [
    "EXPORT_FORMATS",
    "build_frame",
    "export_module",
    "flatten_record",
    "write_csv",
    "write_excel",
]
