"""Add or update operator-supplied fields under their canonical keys."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fieldrecon.domain.errors import ValidationError
from fieldrecon.domain.model import attribute_value, is_blank

from .contracts import UpsertResult
from .normalize import DEFAULT_NORMALIZER

if TYPE_CHECKING:
    from collections.abc import Iterable

    from fieldrecon.domain.model import AttributeMap

    from .contracts import FieldInput
    from .normalize import NameNormalizer

log = logging.getLogger(__name__)


def is_valid_value(raw: object) -> bool:
    """``None``, whitespace-only strings and empty lists carry no value."""
    if raw is None:
        return False
    if isinstance(raw, str):
        return bool(raw.strip())
    if isinstance(raw, list | tuple):
        return bool(raw)
    return True


def upsert_fields(
    attributes: AttributeMap,
    fields: Iterable[FieldInput],
    *,
    normalizer: NameNormalizer = DEFAULT_NORMALIZER,
) -> UpsertResult:
    """Apply ``fields`` to a copy of ``attributes``.

    Invalid entries are collected in ``errors`` and skipped; they never abort the
    remaining updates.
    """
    result = UpsertResult(attributes=dict(attributes))
    for entry in fields:
        raw_name = entry.name if entry.name else entry.label
        key = normalizer.normalize(raw_name)
        if not key:
            result.errors.append({"field": str(raw_name or ""), "error": "Field name is required"})
            continue
        if not is_valid_value(entry.value):
            result.errors.append({"field": key, "error": "Field value is empty"})
            continue
        try:
            value = attribute_value(entry.value)
        except ValidationError as exc:
            result.errors.append({"field": key, "error": str(exc)})
            continue
        if is_blank(value):
            result.errors.append({"field": key, "error": "Field value is empty"})
            continue

        if key in result.attributes:
            result.updated.append(key)
        else:
            result.added.append(key)
        result.attributes[key] = value

    if result.errors:
        log.info("Skipped %d invalid field(s) during upsert", len(result.errors))
    return result
