"""Helpers selecting the field definitions the importer works with."""

from __future__ import annotations

from typing import Iterable, List

from recruitflow.services.admin_api.schemas import FieldDefinition


def visible_fields(definitions: Iterable[FieldDefinition]) -> List[FieldDefinition]:
    """Drop hidden fields and order the rest by ``sort_order`` (stable)."""

    return sorted((d for d in definitions if not d.is_hidden), key=lambda d: d.sort_order)


def required_fields(definitions: Iterable[FieldDefinition]) -> List[FieldDefinition]:
    return [d for d in definitions if d.is_required and d.field_name]


def find_field(definitions: Iterable[FieldDefinition], field_name: str) -> FieldDefinition | None:
    for definition in definitions:
        if definition.field_name == field_name:
            return definition
    return None


__all__ = ["visible_fields", "required_fields", "find_field"]
