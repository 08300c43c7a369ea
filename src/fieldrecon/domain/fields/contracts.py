"""Result contracts produced by the field reconciliation engine.

Every contract exposes ``to_dict()`` returning plain JSON-safe data, so reports can be
handed to any transport (CLI, batch job, HTTP handler) unchanged.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from fieldrecon.domain.model import attributes_to_plain

if TYPE_CHECKING:
    from uuid import UUID

    from fieldrecon.domain.model import AttributeMap, AttributeValue, FieldType


def percentage(part: int, whole: int, *, empty: int = 100) -> int:
    """``round(100 * part / whole)`` rounding halves up; ``empty`` when ``whole`` is 0."""

    if whole <= 0:
        return empty
    return math.floor(100 * part / whole + 0.5)


@dataclass(slots=True, kw_only=True)
class Requirement:
    """A field some template expects, aggregated across templates by canonical name."""

    canonical_name: str
    label: str
    value_type: FieldType
    mandatory: bool = False
    source_templates: list[UUID] = field(default_factory=list["UUID"])
    template_names: list[str] = field(default_factory=list[str])

    def to_dict(self) -> dict[str, object]:
        return {
            "canonical_name": self.canonical_name,
            "label": self.label,
            "value_type": self.value_type.value,
            "mandatory": self.mandatory,
            "source_templates": [str(template_id) for template_id in self.source_templates],
            "template_names": list(self.template_names),
        }


type RequirementMap = dict[str, Requirement]


class MatchKind(StrEnum):
    """Which tier paired a requirement with an entity field."""

    EXACT = "exact"
    SUBSTRING = "substring"
    COMPACT = "compact"


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchResult:
    requirement: Requirement
    matched_key: str
    field_name: str
    value: AttributeValue
    match_kind: MatchKind

    def to_dict(self) -> dict[str, object]:
        return {
            "requirement": self.requirement.to_dict(),
            "matched_key": self.matched_key,
            "field_name": self.field_name,
            "value": self.value.to_plain(),
            "match_kind": self.match_kind.value,
        }


@dataclass(slots=True, kw_only=True)
class ReconciliationReport:
    matched: list[MatchResult] = field(default_factory=list[MatchResult])
    missing: list[Requirement] = field(default_factory=list[Requirement])

    @property
    def total(self) -> int:
        return len(self.matched) + len(self.missing)

    @property
    def completion_percentage(self) -> int:
        return percentage(len(self.matched), self.total)

    def to_dict(self) -> dict[str, object]:
        return {
            "matched": [match.to_dict() for match in self.matched],
            "missing": [requirement.to_dict() for requirement in self.missing],
            "total": self.total,
            "completion_percentage": self.completion_percentage,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class RenamedKey:
    """One entry of a migration diff."""

    old_key: str
    new_key: str
    value: AttributeValue
    collided: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "old_key": self.old_key,
            "new_key": self.new_key,
            "value": self.value.to_plain(),
            "collided": self.collided,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class CollisionWarning:
    """Several original keys normalized to one canonical key; only one value survives."""

    canonical_key: str
    kept_key: str
    kept_value: AttributeValue
    dropped: tuple[tuple[str, AttributeValue], ...]

    @property
    def dropped_keys(self) -> tuple[str, ...]:
        return tuple(key for key, _ in self.dropped)

    def to_dict(self) -> dict[str, object]:
        return {
            "canonical_key": self.canonical_key,
            "kept_key": self.kept_key,
            "kept_value": self.kept_value.to_plain(),
            "dropped": {key: value.to_plain() for key, value in self.dropped},
        }


@dataclass(slots=True, kw_only=True)
class MigrationResult:
    attributes: AttributeMap
    diff: list[RenamedKey] = field(default_factory=list[RenamedKey])
    collisions: list[CollisionWarning] = field(default_factory=list[CollisionWarning])

    @property
    def changed(self) -> bool:
        return bool(self.diff) or bool(self.collisions)

    def to_dict(self) -> dict[str, object]:
        return {
            "attributes": attributes_to_plain(self.attributes),
            "diff": [entry.to_dict() for entry in self.diff],
            "collisions": [warning.to_dict() for warning in self.collisions],
            "changed": self.changed,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class Suggestion:
    canonical_name: str
    frequency: int
    cohort_size: int
    percentage: int
    sample_values: tuple[AttributeValue, ...] = ()
    recommended: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "canonical_name": self.canonical_name,
            "frequency": self.frequency,
            "cohort_size": self.cohort_size,
            "percentage": self.percentage,
            "sample_values": [value.to_plain() for value in self.sample_values],
            "recommended": self.recommended,
        }


@dataclass(frozen=True, slots=True, kw_only=True)
class CatalogSuggestion:
    """A commonly expected field for a third-party type the entity does not have yet."""

    canonical_name: str
    label: str
    value_type: FieldType
    options: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "canonical_name": self.canonical_name,
            "label": self.label,
            "value_type": self.value_type.value,
            "options": list(self.options),
        }


@dataclass(slots=True, kw_only=True)
class MergeResult:
    attributes: AttributeMap
    target_key: str
    value: AttributeValue
    merged_keys: tuple[str, ...]
    removed_keys: tuple[str, ...] = ()
    overwritten: AttributeValue | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "target_key": self.target_key,
            "value": self.value.to_plain(),
            "merged_keys": list(self.merged_keys),
            "removed_keys": list(self.removed_keys),
            "overwritten": self.overwritten.to_plain() if self.overwritten is not None else None,
        }


@dataclass(slots=True, kw_only=True)
class FieldInput:
    """One field to add or update, as supplied by an operator."""

    name: object
    value: object
    label: str | None = None


@dataclass(slots=True, kw_only=True)
class UpsertResult:
    attributes: AttributeMap
    added: list[str] = field(default_factory=list[str])
    updated: list[str] = field(default_factory=list[str])
    errors: list[dict[str, str]] = field(default_factory=list[dict[str, str]])

    @property
    def changed(self) -> bool:
        return bool(self.added) or bool(self.updated)

    def to_dict(self) -> dict[str, object]:
        return {
            "added": list(self.added),
            "updated": list(self.updated),
            "errors": [dict(error) for error in self.errors],
        }


@dataclass(slots=True, kw_only=True)
class TemplateValidation:
    template_id: UUID
    template_name: str
    matched: list[MatchResult] = field(default_factory=list[MatchResult])
    missing_required: list[Requirement] = field(default_factory=list[Requirement])
    missing_optional: list[Requirement] = field(default_factory=list[Requirement])

    @property
    def valid(self) -> bool:
        return not self.missing_required

    def to_dict(self) -> dict[str, object]:
        return {
            "template_id": str(self.template_id),
            "template_name": self.template_name,
            "valid": self.valid,
            "matched": [match.to_dict() for match in self.matched],
            "missing_required": [req.to_dict() for req in self.missing_required],
            "missing_optional": [req.to_dict() for req in self.missing_optional],
        }


@dataclass(slots=True, kw_only=True)
class EntityAnalysis:
    """Reconciliation of one third party against every template of its type."""

    third_party_id: UUID
    third_party_type: str | None
    fields: dict[str, dict[str, object]] = field(default_factory=dict[str, dict[str, object]])
    requirements: RequirementMap = field(default_factory=dict[str, Requirement])
    report: ReconciliationReport = field(default_factory=ReconciliationReport)

    @property
    def has_type(self) -> bool:
        return bool(self.third_party_type)

    @property
    def completion_percentage(self) -> int:
        if not self.has_type:
            return 0
        return self.report.completion_percentage

    def to_dict(self) -> dict[str, object]:
        return {
            "third_party_id": str(self.third_party_id),
            "third_party_type": self.third_party_type,
            "has_type": self.has_type,
            "fields": dict(self.fields),
            "requirements": [requirement.to_dict() for requirement in self.requirements.values()],
            "matched": [match.to_dict() for match in self.report.matched],
            "missing": [requirement.to_dict() for requirement in self.report.missing],
            "total": self.report.total,
            "completion_percentage": self.completion_percentage,
        }


@dataclass(slots=True, kw_only=True)
class TemplateGap:
    """What one template still needs from a third party."""

    template_id: UUID
    template_name: str
    category: str | None = None
    report: ReconciliationReport = field(default_factory=ReconciliationReport)

    @property
    def completion_percentage(self) -> int:
        return self.report.completion_percentage

    def to_dict(self) -> dict[str, object]:
        return {
            "template_id": str(self.template_id),
            "template_name": self.template_name,
            "category": self.category,
            "matched": [match.to_dict() for match in self.report.matched],
            "missing": [requirement.to_dict() for requirement in self.report.missing],
            "completion_percentage": self.completion_percentage,
        }


@dataclass(slots=True, kw_only=True)
class MissingFieldsReport:
    """Per-template breakdown; only templates with missing fields are listed.

    Templates are ordered most complete first, ties by name.
    """

    third_party_id: UUID
    display_name: str | None
    third_party_type: str | None
    current_fields: list[str] = field(default_factory=list[str])
    templates_analyzed: int = 0
    templates: list[TemplateGap] = field(default_factory=list[TemplateGap])

    @property
    def templates_needing_fields(self) -> int:
        return len(self.templates)

    def to_dict(self) -> dict[str, object]:
        return {
            "third_party_id": str(self.third_party_id),
            "display_name": self.display_name,
            "third_party_type": self.third_party_type,
            "current_fields": list(self.current_fields),
            "templates_analyzed": self.templates_analyzed,
            "templates_needing_fields": self.templates_needing_fields,
            "templates": [gap.to_dict() for gap in self.templates],
        }
