"""Propose fields an entity lacks, from its cohort or from the per-type catalog."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fieldrecon.domain.model import FieldType

from .contracts import CatalogSuggestion, Suggestion, percentage
from .extract import FieldExtractor
from .reconcile import FieldMatcher

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from fieldrecon.domain.model import AttributeValue, ThirdParty

    from .extract import FieldMap

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    name: str
    label: str
    value_type: str = "text"
    options: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True, kw_only=True)
class SuggestionEngine:
    extractor: FieldExtractor = field(default_factory=FieldExtractor)
    matcher: FieldMatcher = field(default_factory=FieldMatcher)
    min_frequency: int = 2
    recommend_ratio: float = 0.5
    sample_values_limit: int = 3
    catalog: Mapping[str, Sequence[CatalogEntry]] = field(
        default_factory=dict[str, "Sequence[CatalogEntry]"]
    )

    def suggest(self, party: ThirdParty, cohort: Iterable[ThirdParty]) -> list[Suggestion]:
        own_fields = self.extractor.extract(party)
        members = [member for member in cohort if member.id != party.id]
        if not members:
            return []

        frequency: dict[str, int] = {}
        samples: dict[str, list[AttributeValue]] = {}
        present: dict[str, bool] = {}
        for member in members:
            for name, entry in self.extractor.extract(member).items():
                if name not in present:
                    present[name] = self._already_present(name, own_fields)
                if present[name]:
                    continue
                frequency[name] = frequency.get(name, 0) + 1
                bucket = samples.setdefault(name, [])
                if len(bucket) < self.sample_values_limit:
                    bucket.append(entry.value)

        cohort_size = len(members)
        suggestions = [
            Suggestion(
                canonical_name=name,
                frequency=count,
                cohort_size=cohort_size,
                percentage=percentage(count, cohort_size),
                sample_values=tuple(samples[name]),
                recommended=count >= self.recommend_ratio * cohort_size,
            )
            for name, count in frequency.items()
            if count >= self.min_frequency
        ]
        suggestions.sort(key=lambda suggestion: suggestion.frequency, reverse=True)
        log.debug(
            "Cohort of %d produced %d suggestions for %s",
            cohort_size,
            len(suggestions),
            party.id,
        )
        return suggestions

    def suggest_from_catalog(self, party: ThirdParty) -> list[CatalogSuggestion]:
        """Commonly expected fields for the party's type that it does not carry yet."""
        if not party.third_party_type:
            return []
        own_fields = self.extractor.extract(party)
        suggestions: list[CatalogSuggestion] = []
        for entry in self.catalog.get(party.third_party_type, ()):
            canonical_name = self.matcher.normalizer.normalize(entry.name)
            if not canonical_name or self._already_present(canonical_name, own_fields):
                continue
            suggestions.append(
                CatalogSuggestion(
                    canonical_name=canonical_name,
                    label=entry.label,
                    value_type=FieldType.coerce(entry.value_type),
                    options=entry.options,
                )
            )
        return suggestions

    def _already_present(self, name: str, own_fields: FieldMap) -> bool:
        return self.matcher.find(name, own_fields) is not None
