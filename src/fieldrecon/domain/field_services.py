"""Application services driving the field reconciliation engine over the repositories.

Single-record services load one third party, run one engine operation and, when the
operation mutates, save the record and commit. Cohort services walk their records
sequentially, committing after each record, and expose a ``progress(done, total)``
callback and a ``should_cancel()`` probe checked before every record.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fieldrecon.domain.errors import NotFoundError
from fieldrecon.domain.fields import percentage

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from uuid import UUID

    from fieldrecon.domain.fields import (
        CatalogSuggestion,
        EntityAnalysis,
        FieldInput,
        FieldReconciliationEngine,
        MergeResult,
        MigrationResult,
        MissingFieldsReport,
        Requirement,
        Suggestion,
        TemplateValidation,
        UpsertResult,
    )
    from fieldrecon.domain.model import ContractTemplate, ThirdParty
    from fieldrecon.domain.ports import FieldUnitOfWork

type ProgressCallback = Callable[[int, int], None]
type CancelProbe = Callable[[], bool]

DEFAULT_COHORT_LIMIT = 10
DEFAULT_ATTENTION_THRESHOLD = 70
UNTYPED = "untyped"

log = logging.getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class MigrateAllResult:
    """Outcome of a company-wide key migration."""

    total: int = 0
    migrated: int = 0
    skipped: int = 0
    dry_run: bool = False
    cancelled: bool = False
    details: list[dict[str, object]] = field(default_factory=list[dict[str, object]])

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "migrated": self.migrated,
            "skipped": self.skipped,
            "dry_run": self.dry_run,
            "cancelled": self.cancelled,
            "details": list(self.details),
        }


@dataclass(slots=True, kw_only=True)
class BulkMergeResult:
    """Outcome of merging the same raw names across a cohort."""

    total: int = 0
    merged: int = 0
    skipped: int = 0
    target_key: str = ""
    cancelled: bool = False
    details: list[dict[str, object]] = field(default_factory=list[dict[str, object]])

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "merged": self.merged,
            "skipped": self.skipped,
            "target_key": self.target_key,
            "cancelled": self.cancelled,
            "details": list(self.details),
        }


@dataclass(slots=True, kw_only=True)
class CompletenessStats:
    total: int = 0
    average_completion: int = 0
    by_type: dict[str, dict[str, int]] = field(default_factory=dict[str, dict[str, int]])
    needs_attention: list[dict[str, object]] = field(default_factory=list[dict[str, object]])

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "average_completion": self.average_completion,
            "by_type": {name: dict(stats) for name, stats in self.by_type.items()},
            "needs_attention": list(self.needs_attention),
        }


# --- single record -------------------------------------------------------


def analyze_third_party(
    *,
    unit_of_work_factory: Callable[[], FieldUnitOfWork],
    engine: FieldReconciliationEngine,
    third_party_id: UUID,
    company_id: str,
) -> EntityAnalysis:
    """Completion analysis of one third party against every template of its type."""

    with unit_of_work_factory() as uow:
        party = _load_party(uow, third_party_id, company_id)
        templates = _templates_for(uow, party.third_party_type, company_id)
        return engine.analyze(party, templates)


def required_fields_for_type(
    *,
    unit_of_work_factory: Callable[[], FieldUnitOfWork],
    engine: FieldReconciliationEngine,
    third_party_type: str,
    company_id: str,
) -> list[Requirement]:
    with unit_of_work_factory() as uow:
        templates = _templates_for(uow, third_party_type, company_id)
        return list(engine.collect_requirements(third_party_type, templates).values())


def validate_for_template(
    *,
    unit_of_work_factory: Callable[[], FieldUnitOfWork],
    engine: FieldReconciliationEngine,
    third_party_id: UUID,
    template_id: UUID,
    company_id: str,
) -> TemplateValidation:
    with unit_of_work_factory() as uow:
        party = _load_party(uow, third_party_id, company_id)
        template = uow.repositories.templates.get(template_id)
        if template is None or template.company_id != company_id:
            raise NotFoundError("template", template_id)
        return engine.validate_for_template(party, template)


def missing_fields_by_template(
    *,
    unit_of_work_factory: Callable[[], FieldUnitOfWork],
    engine: FieldReconciliationEngine,
    third_party_id: UUID,
    company_id: str,
    template_id: UUID | None = None,
) -> MissingFieldsReport:
    """Per-template gaps over the company's active templates, or one of them."""

    with unit_of_work_factory() as uow:
        party = _load_party(uow, third_party_id, company_id)
        templates = uow.repositories.templates
        if template_id is None:
            return engine.missing_by_template(party, templates.find_active_by_company(company_id))
        template = templates.get(template_id)
        if template is None or template.company_id != company_id or not template.active:
            raise NotFoundError("template", template_id)
        return engine.missing_by_template(party, [template])


def migrate_third_party(  # noqa: PLR0913
    *,
    unit_of_work_factory: Callable[[], FieldUnitOfWork],
    engine: FieldReconciliationEngine,
    third_party_id: UUID,
    company_id: str,
    dry_run: bool = False,
    apply_aliases: bool = False,
    updated_by: str | None = None,
) -> MigrationResult:
    """Rename one record's attribute keys to canonical form."""

    with unit_of_work_factory() as uow:
        party = _load_party(uow, third_party_id, company_id)
        result = engine.migrate(party.attributes, apply_aliases=apply_aliases)
        if result.changed and not dry_run:
            party.replace_attributes(result.attributes, updated_by=updated_by)
            uow.repositories.third_parties.save(party)
            uow.commit()
            log.info("Migrated %d key(s) on third party %s", len(result.diff), party.id)
        return result


def suggest_for_third_party(
    *,
    unit_of_work_factory: Callable[[], FieldUnitOfWork],
    engine: FieldReconciliationEngine,
    third_party_id: UUID,
    company_id: str,
    cohort_limit: int = DEFAULT_COHORT_LIMIT,
) -> list[Suggestion]:
    """Fields that same-type records commonly carry and this one lacks."""

    with unit_of_work_factory() as uow:
        party = _load_party(uow, third_party_id, company_id)
        if not party.third_party_type:
            return []
        candidates = uow.repositories.third_parties.find_by_type_and_company(
            party.third_party_type, company_id, limit=cohort_limit + 1
        )
        cohort = [member for member in candidates if member.id != party.id][:cohort_limit]
        return engine.suggest(party, cohort)


def catalog_suggestions(
    *,
    unit_of_work_factory: Callable[[], FieldUnitOfWork],
    engine: FieldReconciliationEngine,
    third_party_id: UUID,
    company_id: str,
) -> list[CatalogSuggestion]:
    with unit_of_work_factory() as uow:
        party = _load_party(uow, third_party_id, company_id)
        return engine.suggest_from_catalog(party)


def upsert_third_party_fields(
    *,
    unit_of_work_factory: Callable[[], FieldUnitOfWork],
    engine: FieldReconciliationEngine,
    third_party_id: UUID,
    company_id: str,
    fields: Sequence[FieldInput],
    updated_by: str | None = None,
) -> UpsertResult:
    with unit_of_work_factory() as uow:
        party = _load_party(uow, third_party_id, company_id)
        result = engine.upsert(party.attributes, fields)
        if result.changed:
            party.replace_attributes(result.attributes, updated_by=updated_by)
            uow.repositories.third_parties.save(party)
            uow.commit()
        return result


def merge_third_party_fields(  # noqa: PLR0913
    *,
    unit_of_work_factory: Callable[[], FieldUnitOfWork],
    engine: FieldReconciliationEngine,
    third_party_id: UUID,
    company_id: str,
    keys: Sequence[str],
    target_name: str,
    target_value: object = None,
    remove_originals: bool = True,
    updated_by: str | None = None,
) -> MergeResult:
    with unit_of_work_factory() as uow:
        party = _load_party(uow, third_party_id, company_id)
        result = engine.merge(
            party.attributes,
            keys,
            target_name,
            remove_originals=remove_originals,
            target_value=target_value,
        )
        party.replace_attributes(result.attributes, updated_by=updated_by)
        uow.repositories.third_parties.save(party)
        uow.commit()
        return result


# --- cohorts -------------------------------------------------------------


def migrate_all(  # noqa: PLR0913
    *,
    unit_of_work_factory: Callable[[], FieldUnitOfWork],
    engine: FieldReconciliationEngine,
    company_id: str,
    third_party_type: str | None = None,
    dry_run: bool = False,
    apply_aliases: bool = False,
    updated_by: str | None = None,
    progress: ProgressCallback | None = None,
    should_cancel: CancelProbe | None = None,
) -> MigrateAllResult:
    """Migrate every active third party of a company (optionally of one type)."""

    summary = MigrateAllResult(dry_run=dry_run)
    with unit_of_work_factory() as uow:
        repository = uow.repositories.third_parties
        parties = repository.find_by_company(company_id, third_party_type=third_party_type)
        summary.total = len(parties)
        for index, party in enumerate(parties):
            if should_cancel is not None and should_cancel():
                summary.cancelled = True
                log.info("Migration cancelled after %d of %d records", index, summary.total)
                break
            result = engine.migrate(party.attributes, apply_aliases=apply_aliases)
            if result.changed:
                summary.migrated += 1
                summary.details.append(
                    {
                        "third_party_id": str(party.id),
                        "name": party.display_name,
                        "diff": [entry.to_dict() for entry in result.diff],
                        "collisions": [warning.to_dict() for warning in result.collisions],
                    }
                )
                if not dry_run:
                    party.replace_attributes(result.attributes, updated_by=updated_by)
                    repository.save(party)
                    uow.commit()
            else:
                summary.skipped += 1
            if progress is not None:
                progress(index + 1, summary.total)
    log.info(
        "Migration%s: %d of %d record(s) changed",
        " (dry run)" if dry_run else "",
        summary.migrated,
        summary.total,
    )
    return summary


def merge_fields_bulk(  # noqa: PLR0913
    *,
    unit_of_work_factory: Callable[[], FieldUnitOfWork],
    engine: FieldReconciliationEngine,
    company_id: str,
    third_party_type: str,
    raw_names: Sequence[str],
    target_name: str,
    remove_originals: bool = True,
    updated_by: str | None = None,
    progress: ProgressCallback | None = None,
    should_cancel: CancelProbe | None = None,
) -> BulkMergeResult:
    """Merge keys matching ``raw_names`` on every record of one type.

    Records carrying fewer than two matching keys are counted as skipped.
    """

    summary = BulkMergeResult(target_key=engine.normalize(target_name))
    with unit_of_work_factory() as uow:
        repository = uow.repositories.third_parties
        cohort = repository.find_by_type_and_company(third_party_type, company_id)
        summary.total = len(cohort)
        for index, party in enumerate(cohort):
            if should_cancel is not None and should_cancel():
                summary.cancelled = True
                log.info("Bulk merge cancelled after %d of %d records", index, summary.total)
                break
            result = engine.merge_matching(
                party.attributes, raw_names, target_name, remove_originals=remove_originals
            )
            if result is None:
                summary.skipped += 1
            else:
                summary.merged += 1
                party.replace_attributes(result.attributes, updated_by=updated_by)
                repository.save(party)
                uow.commit()
                summary.details.append(
                    {"third_party_id": str(party.id), "name": party.display_name}
                    | result.to_dict()
                )
            if progress is not None:
                progress(index + 1, summary.total)
    log.info(
        "Bulk merge into %r: %d merged, %d skipped",
        summary.target_key,
        summary.merged,
        summary.skipped,
    )
    return summary


def completeness_stats(
    *,
    unit_of_work_factory: Callable[[], FieldUnitOfWork],
    engine: FieldReconciliationEngine,
    company_id: str,
    attention_threshold: int = DEFAULT_ATTENTION_THRESHOLD,
) -> CompletenessStats:
    """Company-wide completion overview, with the weakest records listed first."""

    stats = CompletenessStats()
    totals: dict[str, int] = {}
    overall = 0
    with unit_of_work_factory() as uow:
        parties = uow.repositories.third_parties.find_by_company(company_id)
        templates_by_type: dict[str, list[ContractTemplate]] = {}
        for party in parties:
            type_code = party.third_party_type
            templates: list[ContractTemplate] = []
            if type_code:
                if type_code not in templates_by_type:
                    templates_by_type[type_code] = _templates_for(uow, type_code, company_id)
                templates = templates_by_type[type_code]
            analysis = engine.analyze(party, templates)
            completion = analysis.completion_percentage
            type_name = type_code or UNTYPED

            bucket = stats.by_type.setdefault(type_name, {"count": 0, "average_completion": 0})
            bucket["count"] += 1
            totals[type_name] = totals.get(type_name, 0) + completion
            overall += completion

            if completion < attention_threshold:
                stats.needs_attention.append(
                    {
                        "third_party_id": str(party.id),
                        "name": party.display_name,
                        "type": type_name,
                        "completion_percentage": completion,
                        "missing_count": len(analysis.report.missing),
                    }
                )

    stats.total = len(parties)
    stats.average_completion = percentage(overall, 100 * stats.total, empty=0)
    for type_name, bucket in stats.by_type.items():
        bucket["average_completion"] = percentage(totals[type_name], 100 * bucket["count"])
    stats.needs_attention.sort(key=_completion_of)
    return stats


def _completion_of(entry: dict[str, object]) -> int:
    completion = entry["completion_percentage"]
    return completion if isinstance(completion, int) else 0


def _load_party(uow: FieldUnitOfWork, third_party_id: UUID, company_id: str) -> ThirdParty:
    party = uow.repositories.third_parties.get(third_party_id)
    if party is None or party.company_id != company_id:
        raise NotFoundError("third party", third_party_id)
    return party


def _templates_for(
    uow: FieldUnitOfWork, third_party_type: str | None, company_id: str
) -> list[ContractTemplate]:
    if not third_party_type:
        return []
    return uow.repositories.templates.find_active_by_type(third_party_type, company_id)
