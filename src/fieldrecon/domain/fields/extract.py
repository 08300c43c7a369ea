"""Uniform ``canonical name -> value`` view over a third-party record."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fieldrecon.domain.errors import ValidationError
from fieldrecon.domain.model import (
    STANDARD_ATTRIBUTES,
    FieldSource,
    TextValue,
    ThirdParty,
    is_blank,
)

from .normalize import DEFAULT_NORMALIZER, NameNormalizer

if TYPE_CHECKING:
    from collections.abc import Mapping

    from fieldrecon.domain.model import AttributeValue

log = logging.getLogger(__name__)

DEFAULT_STANDARD_FIELDS: dict[str, str] = {
    "legal_name": "razon_social",
    "legal_name_short": "razon_social_corta",
    "full_name": "nombre_completo",
    "identification_type": "tipo_identificacion",
    "identification_number": "numero_identificacion",
    "id_issue_city": "ciudad_expedicion",
    "legal_representative_name": "representante_legal",
    "legal_representative_id_type": "tipo_id_representante",
    "legal_representative_id_number": "numero_id_representante",
    "licensee_name": "licenciatario",
    "email": "email",
    "phone": "telefono",
    "address": "direccion",
    "city": "ciudad",
    "country": "pais",
}


@dataclass(frozen=True, slots=True)
class ExtractedField:
    """One field present on a record, with provenance."""

    name: str
    value: AttributeValue
    source: FieldSource
    original_key: str

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "value": self.value.to_plain(),
            "source": self.source.value,
            "original_key": self.original_key,
        }


type FieldMap = dict[str, ExtractedField]


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldExtractor:
    """Merge fixed attributes and the free-form attribute map into one field map.

    A custom attribute whose key normalizes onto a standard field's canonical name
    overwrites the standard entry: custom values are operator edits. Two custom keys
    normalizing to the same name resolve like migration collisions (the key already in
    canonical form wins, otherwise the first non-blank one).
    """

    normalizer: NameNormalizer = DEFAULT_NORMALIZER
    standard_fields: Mapping[str, str] = field(
        default_factory=lambda: dict(DEFAULT_STANDARD_FIELDS)
    )

    def __post_init__(self) -> None:
        unknown = sorted(set(self.standard_fields) - set(STANDARD_ATTRIBUTES))
        if unknown:
            raise ValidationError(
                f"Unknown standard attributes: {', '.join(unknown)}", keys=unknown
            )

    def extract(self, party: ThirdParty | None) -> FieldMap:
        if party is None:
            raise ValidationError("Cannot extract fields from a missing third party")

        fields: FieldMap = {}
        for attribute, canonical_name in self.standard_fields.items():
            raw = party.standard_value(attribute)
            if raw is None:
                continue
            fields[canonical_name] = ExtractedField(
                name=canonical_name,
                value=TextValue(raw),
                source=FieldSource.STANDARD,
                original_key=attribute,
            )

        for key, value in party.attributes.items():
            if is_blank(value):
                continue
            canonical_name = self.normalizer.normalize(key)
            if not canonical_name:
                log.debug("Skipping attribute with unnormalizable key %r on %s", key, party.id)
                continue
            existing = fields.get(canonical_name)
            if existing is not None and existing.source is FieldSource.CUSTOM:
                keep_existing = existing.original_key == canonical_name or key != canonical_name
                log.warning(
                    "Attributes %r and %r both normalize to %r on %s; keeping %r",
                    existing.original_key,
                    key,
                    canonical_name,
                    party.id,
                    existing.original_key if keep_existing else key,
                )
                if keep_existing:
                    continue
            fields[canonical_name] = ExtractedField(
                name=canonical_name,
                value=value,
                source=FieldSource.CUSTOM,
                original_key=key,
            )
        return fields
