"""Wire schemas exchanged with the admin API.

Field definitions arrive with inconsistent key names and casings depending
on which backend version served them (``is_hidden`` vs ``isHidden``,
``sort_order`` vs ``sortOrder``...). ``normalize_field_definition`` is the
only place that deals with those variants; everything downstream works with
the canonical :class:`FieldDefinition`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

SUPPORTED_ENTITY_TYPES: tuple[str, ...] = (
    "organizations",
    "job-seekers",
    "jobs",
    "hiring-managers",
    "placements",
    "leads",
)

_TRUE_STRINGS = {"true", "1", "yes", "y", "t"}


class FieldDefinition(BaseModel):
    """Destination-system metadata for one field of a module."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    field_name: str = Field(default="", validation_alias=AliasChoices("field_name", "fieldName", "name"))
    field_label: str = Field(default="", validation_alias=AliasChoices("field_label", "fieldLabel", "label"))
    field_type: str = Field(default="text", validation_alias=AliasChoices("field_type", "fieldType", "type"))
    is_required: bool = Field(default=False, validation_alias=AliasChoices("is_required", "isRequired", "required"))
    is_hidden: bool = Field(default=False, validation_alias=AliasChoices("is_hidden", "isHidden", "hidden"))
    sort_order: int = Field(default=0, validation_alias=AliasChoices("sort_order", "sortOrder", "order"))

    @field_validator("field_name", "field_label", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("field_type", mode="before")
    @classmethod
    def _coerce_type(cls, value: Any) -> str:
        if value is None or str(value).strip() == "":
            return "text"
        return str(value).strip().lower()

    @field_validator("is_required", "is_hidden", mode="before")
    @classmethod
    def _coerce_flag(cls, value: Any) -> bool:
        if value is None:
            return False
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_STRINGS
        return bool(value)

    @field_validator("sort_order", mode="before")
    @classmethod
    def _coerce_order(cls, value: Any) -> int:
        if value is None or value == "":
            return 0
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return 0

    @property
    def display_label(self) -> str:
        return self.field_label or self.field_name


def normalize_field_definition(raw: Mapping[str, Any]) -> FieldDefinition:
    """Map one external field-definition payload onto :class:`FieldDefinition`."""

    definition = FieldDefinition.model_validate(dict(raw))
    if not definition.field_label and definition.field_name:
        definition = definition.model_copy(update={"field_label": definition.field_name})
    return definition


def parse_field_definitions(payload: Mapping[str, Any]) -> list[FieldDefinition]:
    """Read ``customFields`` (preferred) or ``fields`` from a field-management response."""

    items = payload.get("customFields")
    if items is None:
        items = payload.get("fields")
    if not isinstance(items, list):
        return []
    return [normalize_field_definition(item) for item in items if isinstance(item, Mapping)]


@dataclass(slots=True, frozen=True)
class ImportOptions:
    """Duplicate-handling switches forwarded to the bulk-import endpoint."""

    update_existing: bool = False
    skip_duplicates: bool = False
    import_new_only: bool = False

    def to_payload(self) -> dict[str, bool]:
        return {
            "updateExisting": self.update_existing,
            "skipDuplicates": self.skip_duplicates,
            "importNewOnly": self.import_new_only,
        }


def validate_entity_type(entity_type: str) -> str:
    """Return the normalized entity type or raise ``ValueError`` when unsupported."""

    normalized = (entity_type or "").strip().lower()
    if normalized not in SUPPORTED_ENTITY_TYPES:
        raise ValueError(
            f"Unsupported entity type: {entity_type!r} (expected one of {', '.join(SUPPORTED_ENTITY_TYPES)})"
        )
    return normalized


def field_labels(fields: Iterable[FieldDefinition]) -> dict[str, str]:
    """Return ``field_name -> field_label`` for named fields."""

    return {f.field_name: f.display_label for f in fields if f.field_name}


__all__ = [
    "FieldDefinition",
    "ImportOptions",
    "SUPPORTED_ENTITY_TYPES",
    "field_labels",
    "normalize_field_definition",
    "parse_field_definitions",
    "validate_entity_type",
]
