from __future__ import annotations

import pytest

from recruitflow.services.importer.tokenizer import parse_csv


def _quote(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


def test_quoted_field_keeps_comma() -> None:
    assert parse_csv('a,b\nc,"d,e"') == [["a", "b"], ["c", "d,e"]]


def test_empty_input_yields_no_rows() -> None:
    assert parse_csv("") == []


def test_trailing_newline_does_not_add_row() -> None:
    assert parse_csv("a,b\n1,2\n") == [["a", "b"], ["1", "2"]]


def test_crlf_is_single_line_break() -> None:
    assert parse_csv("a,b\r\n1,2\r\n") == [["a", "b"], ["1", "2"]]


def test_blank_lines_are_skipped() -> None:
    assert parse_csv("a\n\n\nb\n") == [["a"], ["b"]]


def test_doubled_quotes_unescape() -> None:
    assert parse_csv('"say ""hi"""') == [['say "hi"']]


def test_fields_are_trimmed() -> None:
    assert parse_csv("  padded  , x ") == [["padded", "x"]]


def test_empty_trailing_field_is_kept() -> None:
    assert parse_csv("a,b,\n") == [["a", "b", ""]]


@pytest.mark.parametrize(
    "fields",
    [
        ["plain", "with,comma", 'with "quotes"'],
        ["multi\nline", "carriage\r\nreturn", ""],
        ['""', ",,,", "trailing"],
    ],
)
def test_quoted_fields_survive_tokenizing(fields: list[str]) -> None:
    line = ",".join(_quote(value) for value in fields)
    assert parse_csv(line) == [fields]
