"""Facade composing the field reconciliation stages over one set of heuristics."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .contracts import EntityAnalysis, MissingFieldsReport, TemplateGap, TemplateValidation
from .extract import DEFAULT_STANDARD_FIELDS, FieldExtractor
from .merge import MergeEngine
from .migrate import MigrationEngine
from .normalize import DEFAULT_SEPARATORS, DEFAULT_STOP_WORDS, NameNormalizer
from .reconcile import FieldMatcher, ReconciliationEngine
from .requirements import RequirementCollector
from .suggest import CatalogEntry, SuggestionEngine
from .upsert import upsert_fields

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from fieldrecon.domain.model import AttributeMap, ContractTemplate, ThirdParty

    from .contracts import (
        CatalogSuggestion,
        FieldInput,
        MergeResult,
        MigrationResult,
        ReconciliationReport,
        RequirementMap,
        Suggestion,
        UpsertResult,
    )
    from .extract import FieldMap

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class FieldReconciliationEngine:
    """Stateless entry point: every call derives new values from its inputs."""

    normalizer: NameNormalizer = field(default_factory=NameNormalizer)
    extractor: FieldExtractor = field(default_factory=FieldExtractor)
    collector: RequirementCollector = field(default_factory=RequirementCollector)
    reconciler: ReconciliationEngine = field(default_factory=ReconciliationEngine)
    migrator: MigrationEngine = field(default_factory=MigrationEngine)
    suggester: SuggestionEngine = field(default_factory=SuggestionEngine)
    merger: MergeEngine = field(default_factory=MergeEngine)

    @classmethod
    def create(  # noqa: PLR0913
        cls,
        *,
        stop_words: Iterable[str] = DEFAULT_STOP_WORDS,
        separators: Sequence[str] = DEFAULT_SEPARATORS,
        standard_fields: Mapping[str, str] | None = None,
        aliases: Mapping[str, str] | None = None,
        type_hints: Mapping[str, str] | None = None,
        catalog: Mapping[str, Sequence[CatalogEntry]] | None = None,
        min_fuzzy_length: int = 3,
        fuzzy_mode: str = "substring",
        min_frequency: int = 2,
        recommend_ratio: float = 0.5,
        sample_values_limit: int = 3,
    ) -> FieldReconciliationEngine:
        normalizer = NameNormalizer(stop_words=frozenset(stop_words), separators=tuple(separators))
        extractor = FieldExtractor(
            normalizer=normalizer,
            standard_fields=dict(
                standard_fields if standard_fields is not None else DEFAULT_STANDARD_FIELDS
            ),
        )
        matcher = FieldMatcher(
            normalizer=normalizer, min_fuzzy_length=min_fuzzy_length, fuzzy_mode=fuzzy_mode
        )
        return cls(
            normalizer=normalizer,
            extractor=extractor,
            collector=RequirementCollector(
                normalizer=normalizer, type_hints=dict(type_hints or {})
            ),
            reconciler=ReconciliationEngine(matcher=matcher),
            migrator=MigrationEngine(normalizer=normalizer, aliases=dict(aliases or {})),
            suggester=SuggestionEngine(
                extractor=extractor,
                matcher=matcher,
                min_frequency=min_frequency,
                recommend_ratio=recommend_ratio,
                sample_values_limit=sample_values_limit,
                catalog=dict(catalog or {}),
            ),
            merger=MergeEngine(normalizer=normalizer),
        )

    # --- single stages -------------------------------------------------

    def normalize(self, label: object) -> str:
        return self.normalizer.normalize(label)

    def extract(self, party: ThirdParty | None) -> FieldMap:
        return self.extractor.extract(party)

    def collect_requirements(
        self, third_party_type: str, templates: Iterable[ContractTemplate]
    ) -> RequirementMap:
        return self.collector.collect(third_party_type, templates)

    def reconcile(
        self, entity_fields: FieldMap, requirements: RequirementMap
    ) -> ReconciliationReport:
        return self.reconciler.reconcile(entity_fields, requirements)

    def migrate(self, attributes: AttributeMap, *, apply_aliases: bool = False) -> MigrationResult:
        return self.migrator.migrate(attributes, apply_aliases=apply_aliases)

    def suggest(self, party: ThirdParty, cohort: Iterable[ThirdParty]) -> list[Suggestion]:
        return self.suggester.suggest(party, cohort)

    def suggest_from_catalog(self, party: ThirdParty) -> list[CatalogSuggestion]:
        return self.suggester.suggest_from_catalog(party)

    def merge(
        self,
        attributes: AttributeMap,
        keys: Sequence[str],
        target_name: str,
        *,
        remove_originals: bool = True,
        target_value: object = None,
    ) -> MergeResult:
        return self.merger.merge(
            attributes,
            keys,
            target_name,
            remove_originals=remove_originals,
            target_value=target_value,
        )

    def merge_matching(
        self,
        attributes: AttributeMap,
        raw_names: Sequence[str],
        target_name: str,
        *,
        remove_originals: bool = True,
    ) -> MergeResult | None:
        return self.merger.merge_matching(
            attributes, raw_names, target_name, remove_originals=remove_originals
        )

    def upsert(self, attributes: AttributeMap, fields: Iterable[FieldInput]) -> UpsertResult:
        return upsert_fields(attributes, fields, normalizer=self.normalizer)

    # --- composed operations -------------------------------------------

    def analyze(self, party: ThirdParty, templates: Iterable[ContractTemplate]) -> EntityAnalysis:
        """Extract, collect and reconcile in one pass for the party's own type."""
        fields = self.extract(party)
        analysis = EntityAnalysis(
            third_party_id=party.id,
            third_party_type=party.third_party_type,
            fields={name: entry.to_dict() for name, entry in fields.items()},
        )
        if not party.third_party_type:
            log.info("Third party %s has no type; nothing to reconcile against", party.id)
            return analysis
        analysis.requirements = self.collect_requirements(party.third_party_type, templates)
        analysis.report = self.reconcile(fields, analysis.requirements)
        return analysis

    def validate_for_template(
        self, party: ThirdParty, template: ContractTemplate
    ) -> TemplateValidation:
        report = self.reconcile(self.extract(party), self.collector.collect_template(template))
        validation = TemplateValidation(
            template_id=template.id,
            template_name=template.name,
            matched=report.matched,
        )
        for requirement in report.missing:
            if requirement.mandatory:
                validation.missing_required.append(requirement)
            else:
                validation.missing_optional.append(requirement)
        return validation

    def missing_by_template(
        self, party: ThirdParty, templates: Iterable[ContractTemplate]
    ) -> MissingFieldsReport:
        """Reconcile the party against each template separately."""
        fields = self.extract(party)
        report = MissingFieldsReport(
            third_party_id=party.id,
            display_name=party.display_name,
            third_party_type=party.third_party_type,
            current_fields=list(fields),
        )
        for template in templates:
            report.templates_analyzed += 1
            gap = TemplateGap(
                template_id=template.id,
                template_name=template.name,
                category=template.category,
                report=self.reconcile(fields, self.collector.collect_template(template)),
            )
            if gap.report.missing:
                report.templates.append(gap)
        report.templates.sort(
            key=lambda gap: (-gap.completion_percentage, gap.template_name, str(gap.template_id))
        )
        return report
