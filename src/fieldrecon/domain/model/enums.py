"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ValueKind(StrEnum):
    """Tag carried by every attribute value."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"


class FieldType(StrEnum):
    """Value type a template declares for one of its fields."""

    TEXT = "text"
    EMAIL = "email"
    PHONE = "phone"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"

    @classmethod
    def coerce(cls, value: str | None) -> FieldType:
        """Map a free-form type name onto the enum; unknown names become TEXT."""
        if not value:
            return cls.TEXT
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.TEXT


class FieldSource(StrEnum):
    """Where an extracted field came from on the third-party record."""

    STANDARD = "standard"
    CUSTOM = "custom"
