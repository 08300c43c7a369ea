"""Pydantic models describing legacy JSON exports of third parties and templates."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, cast

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _scalar_text(value: object) -> object:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return _blank_to_none(value)


def _reference_code(value: object) -> object:
    """Populated references arrive as ``{"code": ..., "label": ...}`` documents."""
    if isinstance(value, Mapping):
        mapping_value = cast(Mapping[str, object], value)
        for key in ("code", "_id", "id"):
            candidate = mapping_value.get(key)
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
        return None
    return _blank_to_none(value)


class LegacyBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class ThirdPartyPayload(LegacyBaseModel):
    id: str | None = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    company: str | None = Field(
        default=None, validation_alias=AliasChoices("company", "company_id")
    )
    third_party_type: str | None = Field(
        default=None, validation_alias=AliasChoices("third_party_type", "supplier_type")
    )
    legal_name: str | None = None
    legal_name_short: str | None = None
    full_name: str | None = None
    identification_type: str | None = None
    identification_number: str | None = None
    id_issue_city: str | None = None
    legal_representative_name: str | None = None
    legal_representative_id_type: str | None = None
    legal_representative_id_number: str | None = None
    licensee_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    country: str | None = None
    custom_fields: dict[str, Any] = Field(default_factory=dict[str, Any])
    active: bool = True

    _normalize_refs = field_validator("id", "company", "third_party_type", mode="before")(
        _reference_code
    )
    _normalize_text = field_validator(
        "legal_name",
        "legal_name_short",
        "full_name",
        "identification_type",
        "identification_number",
        "id_issue_city",
        "legal_representative_name",
        "legal_representative_id_type",
        "legal_representative_id_number",
        "licensee_name",
        "email",
        "phone",
        "address",
        "city",
        "country",
        mode="before",
    )(_scalar_text)

    @field_validator("custom_fields", mode="before")
    @classmethod
    def _null_custom_fields(cls, value: object) -> object:
        return {} if value is None else value


class TemplateFieldPayload(LegacyBaseModel):
    name: str = Field(validation_alias=AliasChoices("field_name", "name"))
    label: str | None = Field(default=None, validation_alias=AliasChoices("field_label", "label"))
    value_type: str | None = Field(
        default=None, validation_alias=AliasChoices("field_type", "type", "value_type")
    )
    required: bool = Field(default=False, validation_alias=AliasChoices("required", "mandatory"))

    _normalize_label = field_validator("label", "value_type", mode="before")(_blank_to_none)


class TemplatePayload(LegacyBaseModel):
    id: str | None = Field(default=None, validation_alias=AliasChoices("_id", "id"))
    company: str | None = Field(
        default=None, validation_alias=AliasChoices("company", "company_id")
    )
    name: str
    third_party_type: str | None = Field(
        default=None, validation_alias=AliasChoices("third_party_type", "supplier_type")
    )
    category: str | None = None
    active: bool = True
    fields: list[TemplateFieldPayload] = Field(default_factory=list[TemplateFieldPayload])

    _normalize_refs = field_validator("id", "company", "third_party_type", mode="before")(
        _reference_code
    )
    _normalize_category = field_validator("category", mode="before")(_reference_code)


class LegacyExportDocument(LegacyBaseModel):
    third_parties: list[ThirdPartyPayload] = Field(
        default_factory=list[ThirdPartyPayload],
        validation_alias=AliasChoices("third_parties", "suppliers"),
    )
    templates: list[TemplatePayload] = Field(default_factory=list[TemplatePayload])
