"""Header to field auto-mapping for the bulk importer."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Sequence

from recruitflow.services.admin_api.schemas import FieldDefinition

from .models import FieldMapping

_TRAILING_STARS = re.compile(r"\*+$")


def normalize_header(label: str) -> str:
    """Lowercase, trim, and drop the trailing ``*`` required marker."""

    text = (label or "").lower().strip()
    return _TRAILING_STARS.sub("", text).strip()


def field_variants(definition: FieldDefinition) -> List[str]:
    """Return the normalized spellings a CSV header may use for ``definition``."""

    label = definition.field_label or ""
    name = definition.field_name or ""
    candidates = [
        normalize_header(label),
        normalize_header(name).replace("_", " "),
        name.lower().replace(" ", "_"),
        normalize_header(label).replace(" ", ""),
        normalize_header(label).replace(" ", "_"),
    ]
    # dict keeps first-seen order while deduplicating
    return [v for v in dict.fromkeys(candidates) if v]


def auto_map_fields(headers: Sequence[str], fields: Iterable[FieldDefinition]) -> FieldMapping:
    """Best-effort mapping of ``field_name -> header``.

    Fields are visited in the given order and each claims the first unused
    header whose normalized form matches one of its variants, so a header
    is never assigned to two fields. Unmatched fields are left out.
    """

    mapping: FieldMapping = {}
    used: set[str] = set()
    normalized: Dict[str, str] = {header: normalize_header(header) for header in headers}

    for definition in fields:
        if not definition.field_name:
            continue
        variants = set(field_variants(definition))
        for header in headers:
            if header in used:
                continue
            norm = normalized[header]
            if norm in variants or norm.replace("_", " ") in variants:
                mapping[definition.field_name] = header
                used.add(header)
                break

    return mapping


def unmapped_headers(headers: Sequence[str], mapping: FieldMapping) -> List[str]:
    """Return headers no field currently reads from."""

    used = {value for value in mapping.values() if value}
    return [header for header in headers if header not in used]


__all__ = ["normalize_header", "field_variants", "auto_map_fields", "unmapped_headers"]
