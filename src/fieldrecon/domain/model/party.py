"""Third-party records (suppliers, clients, employees ...)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final

from fieldrecon.domain.model.base import Entity
from fieldrecon.domain.model.values import AttributeMap

if TYPE_CHECKING:
    from datetime import datetime

    from fieldrecon.domain.model.values import AttributeValue

STANDARD_ATTRIBUTES: Final[tuple[str, ...]] = (
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
)


@dataclass(eq=False, kw_only=True)
class ThirdParty(Entity):
    """A registry record with a few fixed attributes and an open attribute map."""

    company_id: str
    third_party_type: str | None = None

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

    attributes: AttributeMap = field(default_factory=dict["str", "AttributeValue"])
    active: bool = True
    updated_by: str | None = None
    updated_at: datetime | None = None
    version: int | None = None

    @property
    def display_name(self) -> str | None:
        return self.legal_name or self.full_name

    def standard_value(self, attribute: str) -> str | None:
        """Return a fixed attribute's value, treating whitespace-only text as absent."""
        if attribute not in STANDARD_ATTRIBUTES:
            raise AttributeError(f"Unknown standard attribute: {attribute}")
        value: str | None = getattr(self, attribute)
        if value is None or not value.strip():
            return None
        return value

    def replace_attributes(self, attributes: AttributeMap, *, updated_by: str | None) -> None:
        """Swap in a new attribute map (assignment, so ORM change tracking sees it)."""
        self.attributes = dict(attributes)
        if updated_by is not None:
            self.updated_by = updated_by
