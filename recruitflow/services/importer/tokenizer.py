"""RFC 4180 style CSV tokenizer.

Fields are trimmed of surrounding whitespace, so intentionally padded
values are not preserved. Blank lines produce no rows.
"""

from __future__ import annotations

from typing import List


def parse_csv(text: str) -> List[List[str]]:
    """Split ``text`` into rows of fields in a single pass."""

    rows: List[List[str]] = []
    current_row: List[str] = []
    current_field: List[str] = []
    in_quotes = False
    length = len(text)
    i = 0

    while i < length:
        char = text[i]
        next_char = text[i + 1] if i + 1 < length else ""

        if char == '"':
            if in_quotes and next_char == '"':
                current_field.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            current_row.append("".join(current_field).strip())
            current_field = []
        elif char in "\r\n" and not in_quotes:
            if current_field or current_row:
                current_row.append("".join(current_field).strip())
                rows.append(current_row)
                current_row = []
                current_field = []
            if char == "\r" and next_char == "\n":
                i += 1
        else:
            current_field.append(char)
        i += 1

    if current_field or current_row:
        current_row.append("".join(current_field).strip())
        rows.append(current_row)

    return rows


__all__ = ["parse_csv"]
