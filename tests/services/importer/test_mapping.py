from __future__ import annotations

from recruitflow.services.admin_api.schemas import FieldDefinition
from recruitflow.services.importer.mapping import (
    auto_map_fields,
    field_variants,
    normalize_header,
    unmapped_headers,
)


def _field(name: str, label: str = "", **extra) -> FieldDefinition:
    return FieldDefinition(field_name=name, field_label=label, **extra)


def test_normalize_header_strips_required_marker() -> None:
    assert normalize_header("  First Name ** ") == "first name"
    assert normalize_header("Email") == "email"
    assert normalize_header("") == ""


def test_field_variants_are_deduplicated() -> None:
    variants = field_variants(_field("first_name", "First Name"))
    assert variants == ["first name", "first_name", "firstname"]


def test_conservative_matching_leaves_email_address_unmapped() -> None:
    fields = [
        _field("firstName", "First Name"),
        _field("lastName", "Last Name"),
        _field("email", "Email"),
    ]
    mapping = auto_map_fields(["First Name", "Last Name", "Email Address"], fields)
    assert mapping == {"firstName": "First Name", "lastName": "Last Name"}


def test_header_variants_with_underscores_and_stars() -> None:
    fields = [_field("first_name", "First Name"), _field("phone", "Phone")]
    mapping = auto_map_fields(["FIRST_NAME*", "phone"], fields)
    assert mapping == {"first_name": "FIRST_NAME*", "phone": "phone"}


def test_first_field_wins_and_headers_are_unique() -> None:
    fields = [
        _field("primary_email", "Email"),
        _field("email", "Email"),
        _field("", "Email"),
    ]
    mapping = auto_map_fields(["Email", "Notes"], fields)
    assert mapping == {"primary_email": "Email"}
    values = [value for value in mapping.values() if value]
    assert len(values) == len(set(values))


def test_unmapped_headers_lists_unused_columns() -> None:
    assert unmapped_headers(["A", "B", "C"], {"x": "A", "y": ""}) == ["B", "C"]
