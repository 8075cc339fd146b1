"""File acquisition: CSV files, pending mailbox payloads, and resume results."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List, Mapping

from recruitflow.core.errors import InputRejectedError
from recruitflow.core.logger import get_logger

from .models import ParsedFile, ParsedRow
from .tokenizer import parse_csv

LOGGER = get_logger()

CSV_EXTENSION = ".csv"
RESUME_EXTENSIONS = {"pdf", "doc", "docx", "txt", "rtf"}
RESUME_HEADERS: tuple[str, ...] = (
    "First Name",
    "Last Name",
    "Email",
    "Phone",
    "Address",
    "Title",
    "Current Organization",
    "Skills",
    "Resume Text",
)


def ensure_csv_name(name: str) -> None:
    """Reject anything whose extension is not ``.csv`` (case-insensitive)."""

    if not str(name).lower().endswith(CSV_EXTENSION):
        raise InputRejectedError("Please select a CSV file.")


def is_resume_file(name: str, content_type: str = "") -> bool:
    ext = str(name).lower().rsplit(".", 1)[-1] if "." in str(name) else ""
    kind = (content_type or "").lower()
    return (
        ext in RESUME_EXTENSIONS
        or "pdf" in kind
        or "word" in kind
        or "document" in kind
        or kind == "text/plain"
        or "rtf" in kind
    )


def decode_csv_bytes(data: bytes) -> str:
    """Decode UTF-8 text, dropping a leading byte-order mark."""

    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise InputRejectedError("File must be UTF-8 encoded") from exc


def parse_csv_text(text: str, *, source_name: str | None = None) -> ParsedFile:
    """Tokenize ``text`` and split it into headers and 1-based-numbered data rows."""

    rows = parse_csv(text.lstrip("\ufeff"))
    if not rows:
        raise InputRejectedError("CSV file is empty.")

    headers = [header.strip() for header in rows[0]]
    parsed_rows: List[ParsedRow] = []
    for index, values in enumerate(rows[1:]):
        raw = {header: (values[col] if col < len(values) else "") for col, header in enumerate(headers)}
        parsed_rows.append(ParsedRow(raw=raw, row_number=index + 2))

    LOGGER.info(
        "importer.acquisition parsed source=%s headers=%d rows=%d",
        source_name or "<text>",
        len(headers),
        len(parsed_rows),
    )
    return ParsedFile(headers=headers, rows=parsed_rows, source_name=source_name)


def read_csv_file(path: str | Path) -> ParsedFile:
    """Read and parse a local ``.csv`` file."""

    csv_path = Path(path)
    ensure_csv_name(csv_path.name)
    if not csv_path.is_file():
        raise InputRejectedError(f"File not found: {csv_path}")
    return parse_csv_text(decode_csv_bytes(csv_path.read_bytes()), source_name=csv_path.name)


def _split_name(full_name: str) -> tuple[str, str]:
    parts = full_name.split(None, 1)
    if not parts:
        return "", ""
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], parts[1].strip()


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def resume_result_to_row(result: Mapping[str, Any], *, source_name: str | None = None) -> ParsedFile:
    """Flatten a resume-parse result into one synthetic CSV-like row."""

    first_name, last_name = _split_name(_text(result.get("candidate_name")))
    positions = [p for p in result.get("positions") or [] if isinstance(p, Mapping)]
    first_position = positions[0] if positions else {}

    skills: List[str] = []
    details: List[str] = []
    for position in positions:
        raw_skills = position.get("skills") or []
        if isinstance(raw_skills, str):
            raw_skills = raw_skills.split(",")
        for skill in raw_skills:
            text = _text(skill)
            if text and text not in skills:
                skills.append(text)
        detail = _text(position.get("job_details"))
        if detail:
            details.append(detail)

    for education in result.get("education_qualifications") or []:
        if isinstance(education, Mapping):
            parts = [
                _text(education.get(key))
                for key in ("school_name", "degree_type", "specialization_subjects")
            ]
            line = ", ".join(part for part in parts if part)
        else:
            line = _text(education)
        if line:
            details.append(line)

    raw = dict.fromkeys(RESUME_HEADERS, "")
    raw.update(
        {
            "First Name": first_name,
            "Last Name": last_name,
            "Email": _text(result.get("candidate_email")),
            "Phone": _text(result.get("candidate_phone")),
            "Address": _text(result.get("candidate_address")),
            "Title": _text(first_position.get("position_name")),
            "Current Organization": _text(first_position.get("company_name")),
            "Skills": ", ".join(skills),
            "Resume Text": "\n\n".join(details),
        }
    )
    return ParsedFile(headers=list(RESUME_HEADERS), rows=[ParsedRow(raw=raw, row_number=2)], source_name=source_name)


__all__ = [
    "CSV_EXTENSION",
    "RESUME_HEADERS",
    "decode_csv_bytes",
    "ensure_csv_name",
    "is_resume_file",
    "parse_csv_text",
    "read_csv_file",
    "resume_result_to_row",
]
