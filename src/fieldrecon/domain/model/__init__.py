"""Public domain model surface."""

from __future__ import annotations

from fieldrecon.domain.model.base import Entity, new_id
from fieldrecon.domain.model.enums import FieldSource, FieldType, ValueKind
from fieldrecon.domain.model.party import STANDARD_ATTRIBUTES, ThirdParty
from fieldrecon.domain.model.template import ContractTemplate, TemplateField
from fieldrecon.domain.model.values import (
    AttributeMap,
    AttributeValue,
    BooleanValue,
    DateValue,
    NumberValue,
    PlainScalar,
    TextValue,
    attribute_value,
    attributes_to_plain,
    coerce_attributes,
    from_tagged,
    is_blank,
    to_tagged,
)

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "new_id",
    # records
    "STANDARD_ATTRIBUTES",
    "ThirdParty",
    "ContractTemplate",
    "TemplateField",
    # values
    "AttributeMap",
    "AttributeValue",
    "PlainScalar",
    "TextValue",
    "NumberValue",
    "DateValue",
    "BooleanValue",
    "attribute_value",
    "attributes_to_plain",
    "coerce_attributes",
    "from_tagged",
    "is_blank",
    "to_tagged",
    # enums
    "FieldSource",
    "FieldType",
    "ValueKind",
]
