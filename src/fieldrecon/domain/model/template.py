"""Contract templates and the fields they expect from a third party."""

from __future__ import annotations

from dataclasses import dataclass, field

from fieldrecon.domain.model.base import Entity
from fieldrecon.domain.model.enums import FieldType


@dataclass(frozen=True, slots=True, kw_only=True)
class TemplateField:
    name: str
    label: str | None = None
    value_type: FieldType | None = None
    mandatory: bool = False

    @property
    def display_label(self) -> str:
        return self.label or self.name


@dataclass(eq=False, kw_only=True)
class ContractTemplate(Entity):
    company_id: str
    name: str
    third_party_type: str | None = None
    category: str | None = None
    active: bool = True
    fields: list[TemplateField] = field(default_factory=list["TemplateField"])

    def declares_fields_for(self, third_party_type: str) -> bool:
        return self.active and self.third_party_type == third_party_type and bool(self.fields)
