"""Reporting utilities for bulk imports."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pandas as pd

from .mapping import unmapped_headers
from .session import ImportSession


def _rows_frame(session: ImportSession, rows) -> pd.DataFrame:
    records = []
    for row in rows:
        record = {"row": row.row_number}
        record.update({header: row.raw.get(header, "") for header in session.headers})
        record["errors"] = "; ".join(row.errors)
        records.append(record)
    return pd.DataFrame(records, columns=["row", *session.headers, "errors"])


def write_import_report(session: ImportSession, output_dir: Path) -> tuple[Path, Path | None]:
    """Write a Markdown summary of ``session`` and a CSV of rejected rows."""

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    rejected = [*session.skipped_rows, *session.invalid_rows]
    reject_path: Path | None = None
    if rejected:
        reject_path = output_dir / f"import_{session.module}_{stamp}_rejects.csv"
        _rows_frame(session, rejected).to_csv(reject_path, index=False, encoding="utf-8-sig")

    report_path = output_dir / f"import_{session.module}_{stamp}_report.md"
    lines = ["# Bulk Import Report", ""]
    lines.append(f"- Module: {session.module}")
    lines.append(f"- Source: {session.source_name or '-'}")
    lines.append(f"- Step reached: {session.step.value}")
    lines.append(f"- Parsed rows: {len(session.rows) + len(session.skipped_rows)}")
    lines.append(f"- Skipped incomplete rows: {len(session.skipped_rows)}")
    lines.append(f"- Submitted rows: {session.submitted_rows}")
    if session.outcome is not None:
        lines.append(f"- Imported: {session.outcome.success}")
        lines.append(f"- Failed: {session.outcome.failed}")
    lines.append("")

    lines.append("## Field mapping")
    for definition in session.field_definitions:
        header = session.mapping.get(definition.field_name) or "(skip)"
        marker = " *" if definition.is_required else ""
        lines.append(f"- {definition.display_label}{marker} <- {header}")
    extra = unmapped_headers(session.headers, session.mapping)
    if extra:
        lines.append(f"- Unmapped source columns: {', '.join(extra)}")
    lines.append("")

    if session.validation is not None and session.validation.warnings:
        lines.append("## Warnings")
        lines.extend(f"- {warning}" for warning in session.validation.warnings)
        lines.append("")

    if session.outcome is not None and session.outcome.errors:
        lines.append("## Server errors")
        lines.extend(f"- {error}" for error in session.outcome.errors)
        lines.append("")

    if reject_path:
        lines.append(f"Rejected rows exported to `{reject_path.name}`.")

    report_path.write_text("\n".join(lines), encoding="utf-8")
    return report_path, reject_path


__all__ = ["write_import_report"]
