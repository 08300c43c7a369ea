"""Pair aggregated requirements with the fields an entity already carries."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from .contracts import MatchKind, MatchResult, ReconciliationReport
from .normalize import DEFAULT_NORMALIZER, NameNormalizer

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .contracts import Requirement
    from .extract import ExtractedField

log = logging.getLogger(__name__)

FUZZY_SUBSTRING: Final[str] = "substring"
FUZZY_TOKENS: Final[str] = "tokens"


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldMatcher:
    """Tiered name equivalence: exact, then fuzzy containment, then compact equality.

    ``fuzzy_mode="substring"`` accepts containment anywhere in the other name;
    ``"tokens"`` only accepts containment along underscore token boundaries, so
    ``"mail"`` no longer satisfies ``"email"``.
    """

    normalizer: NameNormalizer = DEFAULT_NORMALIZER
    min_fuzzy_length: int = 3
    fuzzy_mode: str = FUZZY_SUBSTRING

    def compare(self, left: object, right: object) -> MatchKind | None:
        """Return the tier at which two labels are equivalent, or ``None``."""
        canonical_left = self.normalizer.normalize(left)
        canonical_right = self.normalizer.normalize(right)
        if not canonical_left or not canonical_right:
            return None
        return self._compare_canonical(canonical_left, canonical_right)

    def find(
        self, name: object, fields: Mapping[str, ExtractedField]
    ) -> tuple[str, ExtractedField, MatchKind] | None:
        """Best-tier match for ``name``; within a tier the first key in map order wins."""
        canonical = self.normalizer.normalize(name)
        if not canonical:
            return None
        candidates = [(self.normalizer.normalize(key), entry) for key, entry in fields.items()]
        for tier in MatchKind:
            for key, entry in candidates:
                if key and self._matches_at(tier, canonical, key):
                    return key, entry, tier
        return None

    def _compare_canonical(self, left: str, right: str) -> MatchKind | None:
        for tier in MatchKind:
            if self._matches_at(tier, left, right):
                return tier
        return None

    def _matches_at(self, tier: MatchKind, left: str, right: str) -> bool:
        match tier:
            case MatchKind.EXACT:
                return left == right
            case MatchKind.SUBSTRING:
                if len(left) <= self.min_fuzzy_length or len(right) <= self.min_fuzzy_length:
                    return False
                if self.fuzzy_mode == FUZZY_TOKENS:
                    return f"_{left}_" in f"_{right}_" or f"_{right}_" in f"_{left}_"
                return left in right or right in left
            case MatchKind.COMPACT:
                return left.replace("_", "") == right.replace("_", "")


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationEngine:
    matcher: FieldMatcher = FieldMatcher()

    def reconcile(
        self,
        entity_fields: Mapping[str, ExtractedField],
        requirements: Mapping[str, Requirement],
    ) -> ReconciliationReport:
        report = ReconciliationReport()
        for requirement in requirements.values():
            found = self.matcher.find(requirement.canonical_name, entity_fields)
            if found is None:
                report.missing.append(requirement)
                continue
            field_name, entry, tier = found
            report.matched.append(
                MatchResult(
                    requirement=requirement,
                    matched_key=entry.original_key,
                    field_name=field_name,
                    value=entry.value,
                    match_kind=tier,
                )
            )
        log.debug(
            "Reconciled %d requirements: %d matched, %d missing",
            report.total,
            len(report.matched),
            len(report.missing),
        )
        return report
