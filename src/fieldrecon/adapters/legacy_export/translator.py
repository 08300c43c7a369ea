"""Translate legacy export payloads into domain third parties and templates."""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from fieldrecon.domain.errors import ValidationError
from fieldrecon.domain.model import (
    STANDARD_ATTRIBUTES,
    AttributeMap,
    ContractTemplate,
    FieldType,
    TemplateField,
    ThirdParty,
    attribute_value,
)

from .schema import LegacyExportDocument, TemplatePayload, ThirdPartyPayload

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

log = getLogger(__name__)

LEGACY_ID_NAMESPACE = uuid.UUID("6f1c1f5e-4d1a-4f0e-9a53-1b7c0c8e2a10")


@dataclass(slots=True)
class LegacyExport:
    third_parties: list[ThirdParty] = field(default_factory=list[ThirdParty])
    templates: list[ContractTemplate] = field(default_factory=list[ContractTemplate])


def legacy_uuid(kind: str, raw_id: str | None) -> uuid.UUID:
    """Stable UUID for a legacy document id; fresh when the export carries none."""

    if not raw_id:
        return uuid.uuid4()
    try:
        return uuid.UUID(raw_id)
    except ValueError:
        return uuid.uuid5(LEGACY_ID_NAMESPACE, f"{kind}:{raw_id}")


def parse_third_party(payload: ThirdPartyPayload, *, default_company_id: str) -> ThirdParty:
    standard = {attribute: getattr(payload, attribute) for attribute in STANDARD_ATTRIBUTES}
    return ThirdParty(
        id=legacy_uuid("third_party", payload.id),
        company_id=payload.company or default_company_id,
        third_party_type=payload.third_party_type,
        attributes=_custom_attributes(payload),
        active=payload.active,
        **standard,
    )


def parse_template(payload: TemplatePayload, *, default_company_id: str) -> ContractTemplate:
    return ContractTemplate(
        id=legacy_uuid("template", payload.id),
        company_id=payload.company or default_company_id,
        name=payload.name,
        third_party_type=payload.third_party_type,
        category=payload.category,
        active=payload.active,
        fields=[
            TemplateField(
                name=item.name,
                label=item.label,
                value_type=FieldType.coerce(item.value_type) if item.value_type else None,
                mandatory=item.required,
            )
            for item in payload.fields
        ],
    )


def parse_export(document: Mapping[str, object], *, default_company_id: str) -> LegacyExport:
    try:
        parsed = LegacyExportDocument.model_validate(document)
    except PydanticValidationError as exc:
        message = f"Invalid legacy export: {exc.error_count()} error(s)\n{exc}"
        raise ValidationError(message) from exc

    export = LegacyExport(
        third_parties=[
            parse_third_party(item, default_company_id=default_company_id)
            for item in parsed.third_parties
        ],
        templates=[
            parse_template(item, default_company_id=default_company_id)
            for item in parsed.templates
        ],
    )
    log.info(
        "Parsed legacy export: %d third parties, %d templates",
        len(export.third_parties),
        len(export.templates),
    )
    return export


def read_export_file(path: Path, *, default_company_id: str) -> LegacyExport:
    try:
        with path.open(encoding="utf-8") as handle:
            document = json.load(handle)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"{path} is not valid JSON: {exc}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise ValidationError(f"Cannot read legacy export {path}: {exc}") from exc
    if not isinstance(document, dict):
        raise ValidationError(f"{path} must contain a JSON object")
    return parse_export(document, default_company_id=default_company_id)


def _custom_attributes(payload: ThirdPartyPayload) -> AttributeMap:
    attributes: AttributeMap = {}
    for key, raw in payload.custom_fields.items():
        if raw is None:
            continue
        try:
            attributes[key] = attribute_value(raw)
        except ValidationError:
            log.warning(
                "Dropping custom field %r on %s: unsupported value %r", key, payload.id, raw
            )
    return attributes
