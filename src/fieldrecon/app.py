"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from fieldrecon.adapters.legacy_export import read_export_file
from fieldrecon.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyFieldUnitOfWork,
    is_started,
    startup,
)
from fieldrecon.config import (
    ConfigurationError,
    get_heuristics_config,
    get_reconciliation_config,
)
from fieldrecon.domain import field_services
from fieldrecon.domain.errors import ValidationError
from fieldrecon.domain.fields import CatalogEntry, FieldReconciliationEngine
from fieldrecon.domain.ports.unit_of_work import FieldUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path
    from uuid import UUID

    from fieldrecon.config import HeuristicsConfig, ReconciliationConfig
    from fieldrecon.domain.field_services import (
        BulkMergeResult,
        CancelProbe,
        CompletenessStats,
        MigrateAllResult,
        ProgressCallback,
    )
    from fieldrecon.domain.fields import (
        CatalogSuggestion,
        EntityAnalysis,
        FieldInput,
        MergeResult,
        MigrationResult,
        MissingFieldsReport,
        Requirement,
        Suggestion,
        TemplateValidation,
        UpsertResult,
    )

UnitOfWorkFactory = Callable[[], FieldUnitOfWork]


log = getLogger(__name__)


@dataclass(slots=True)
class ImportResult:
    third_parties: int = 0
    templates: int = 0
    skipped: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "third_parties": self.third_parties,
            "templates": self.templates,
            "skipped": self.skipped,
        }


def build_engine(
    heuristics: HeuristicsConfig | None = None,
    reconciliation: ReconciliationConfig | None = None,
) -> FieldReconciliationEngine:
    """Compose the engine from the heuristic tables and tunables in effect."""

    heuristics = heuristics or get_heuristics_config()
    reconciliation = reconciliation or get_reconciliation_config()
    catalog = {
        type_code: tuple(
            CatalogEntry(common.name, common.label, common.value_type, common.options)
            for common in entries
        )
        for type_code, entries in heuristics.common_fields.items()
    }
    try:
        return FieldReconciliationEngine.create(
            stop_words=heuristics.stop_words,
            separators=heuristics.separators,
            standard_fields=heuristics.standard_fields,
            aliases=heuristics.aliases,
            type_hints=heuristics.type_hints,
            catalog=catalog,
            min_fuzzy_length=reconciliation.min_fuzzy_length,
            fuzzy_mode=reconciliation.fuzzy_mode,
            min_frequency=reconciliation.suggestion_min_frequency,
            recommend_ratio=reconciliation.recommend_ratio,
            sample_values_limit=reconciliation.sample_values_limit,
        )
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid heuristic tables: {exc}") from exc


def _resolve_unit_of_work(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyFieldUnitOfWork


def _wiring(
    unit_of_work_factory: UnitOfWorkFactory | None,
    engine: FieldReconciliationEngine | None,
) -> tuple[UnitOfWorkFactory, FieldReconciliationEngine]:
    return _resolve_unit_of_work(unit_of_work_factory), engine or build_engine()


def analyze_third_party(
    third_party_id: UUID,
    company_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    engine: FieldReconciliationEngine | None = None,
) -> EntityAnalysis:
    uow_factory, effective_engine = _wiring(unit_of_work_factory, engine)
    return field_services.analyze_third_party(
        unit_of_work_factory=uow_factory,
        engine=effective_engine,
        third_party_id=third_party_id,
        company_id=company_id,
    )


def required_fields(
    third_party_type: str,
    company_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    engine: FieldReconciliationEngine | None = None,
) -> list[Requirement]:
    uow_factory, effective_engine = _wiring(unit_of_work_factory, engine)
    return field_services.required_fields_for_type(
        unit_of_work_factory=uow_factory,
        engine=effective_engine,
        third_party_type=third_party_type,
        company_id=company_id,
    )


def validate_template(
    third_party_id: UUID,
    template_id: UUID,
    company_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    engine: FieldReconciliationEngine | None = None,
) -> TemplateValidation:
    uow_factory, effective_engine = _wiring(unit_of_work_factory, engine)
    return field_services.validate_for_template(
        unit_of_work_factory=uow_factory,
        engine=effective_engine,
        third_party_id=third_party_id,
        template_id=template_id,
        company_id=company_id,
    )


def missing_by_template(
    third_party_id: UUID,
    company_id: str,
    *,
    template_id: UUID | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    engine: FieldReconciliationEngine | None = None,
) -> MissingFieldsReport:
    uow_factory, effective_engine = _wiring(unit_of_work_factory, engine)
    return field_services.missing_fields_by_template(
        unit_of_work_factory=uow_factory,
        engine=effective_engine,
        third_party_id=third_party_id,
        company_id=company_id,
        template_id=template_id,
    )


def migrate_third_party(  # noqa: PLR0913
    third_party_id: UUID,
    company_id: str,
    *,
    dry_run: bool = False,
    apply_aliases: bool = False,
    updated_by: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    engine: FieldReconciliationEngine | None = None,
) -> MigrationResult:
    uow_factory, effective_engine = _wiring(unit_of_work_factory, engine)
    return field_services.migrate_third_party(
        unit_of_work_factory=uow_factory,
        engine=effective_engine,
        third_party_id=third_party_id,
        company_id=company_id,
        dry_run=dry_run,
        apply_aliases=apply_aliases,
        updated_by=updated_by,
    )


def migrate_all(  # noqa: PLR0913
    company_id: str,
    *,
    third_party_type: str | None = None,
    dry_run: bool = False,
    apply_aliases: bool = False,
    updated_by: str | None = None,
    progress: ProgressCallback | None = None,
    should_cancel: CancelProbe | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    engine: FieldReconciliationEngine | None = None,
) -> MigrateAllResult:
    uow_factory, effective_engine = _wiring(unit_of_work_factory, engine)
    log.info(
        "Starting key migration: company=%s, type=%s, dry_run=%s, aliases=%s",
        company_id,
        third_party_type,
        dry_run,
        apply_aliases,
    )
    return field_services.migrate_all(
        unit_of_work_factory=uow_factory,
        engine=effective_engine,
        company_id=company_id,
        third_party_type=third_party_type,
        dry_run=dry_run,
        apply_aliases=apply_aliases,
        updated_by=updated_by,
        progress=progress,
        should_cancel=should_cancel,
    )


def suggest_fields(
    third_party_id: UUID,
    company_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    engine: FieldReconciliationEngine | None = None,
) -> list[Suggestion]:
    uow_factory, effective_engine = _wiring(unit_of_work_factory, engine)
    return field_services.suggest_for_third_party(
        unit_of_work_factory=uow_factory,
        engine=effective_engine,
        third_party_id=third_party_id,
        company_id=company_id,
        cohort_limit=get_reconciliation_config().suggestion_cohort_limit,
    )


def catalog_fields(
    third_party_id: UUID,
    company_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    engine: FieldReconciliationEngine | None = None,
) -> list[CatalogSuggestion]:
    uow_factory, effective_engine = _wiring(unit_of_work_factory, engine)
    return field_services.catalog_suggestions(
        unit_of_work_factory=uow_factory,
        engine=effective_engine,
        third_party_id=third_party_id,
        company_id=company_id,
    )


def add_fields(  # noqa: PLR0913
    third_party_id: UUID,
    company_id: str,
    fields: Sequence[FieldInput],
    *,
    updated_by: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    engine: FieldReconciliationEngine | None = None,
) -> UpsertResult:
    uow_factory, effective_engine = _wiring(unit_of_work_factory, engine)
    return field_services.upsert_third_party_fields(
        unit_of_work_factory=uow_factory,
        engine=effective_engine,
        third_party_id=third_party_id,
        company_id=company_id,
        fields=fields,
        updated_by=updated_by,
    )


def merge_fields(  # noqa: PLR0913
    third_party_id: UUID,
    company_id: str,
    keys: Sequence[str],
    target_name: str,
    *,
    target_value: object = None,
    remove_originals: bool = True,
    updated_by: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    engine: FieldReconciliationEngine | None = None,
) -> MergeResult:
    uow_factory, effective_engine = _wiring(unit_of_work_factory, engine)
    return field_services.merge_third_party_fields(
        unit_of_work_factory=uow_factory,
        engine=effective_engine,
        third_party_id=third_party_id,
        company_id=company_id,
        keys=keys,
        target_name=target_name,
        target_value=target_value,
        remove_originals=remove_originals,
        updated_by=updated_by,
    )


def merge_fields_bulk(  # noqa: PLR0913
    company_id: str,
    third_party_type: str,
    raw_names: Sequence[str],
    target_name: str,
    *,
    remove_originals: bool = True,
    updated_by: str | None = None,
    progress: ProgressCallback | None = None,
    should_cancel: CancelProbe | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    engine: FieldReconciliationEngine | None = None,
) -> BulkMergeResult:
    uow_factory, effective_engine = _wiring(unit_of_work_factory, engine)
    return field_services.merge_fields_bulk(
        unit_of_work_factory=uow_factory,
        engine=effective_engine,
        company_id=company_id,
        third_party_type=third_party_type,
        raw_names=raw_names,
        target_name=target_name,
        remove_originals=remove_originals,
        updated_by=updated_by,
        progress=progress,
        should_cancel=should_cancel,
    )


def completeness_stats(
    company_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    engine: FieldReconciliationEngine | None = None,
) -> CompletenessStats:
    uow_factory, effective_engine = _wiring(unit_of_work_factory, engine)
    return field_services.completeness_stats(
        unit_of_work_factory=uow_factory,
        engine=effective_engine,
        company_id=company_id,
        attention_threshold=get_reconciliation_config().attention_threshold,
    )


def import_legacy_export(
    path: Path,
    company_id: str,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ImportResult:
    """Load a legacy JSON export; records whose id already exists are skipped."""

    export = read_export_file(path, default_company_id=company_id)
    uow_factory = _resolve_unit_of_work(unit_of_work_factory)

    result = ImportResult()
    with uow_factory() as uow:
        repositories = uow.repositories
        for party in export.third_parties:
            if repositories.third_parties.get(party.id) is not None:
                result.skipped += 1
                continue
            repositories.third_parties.add(party)
            result.third_parties += 1
        for template in export.templates:
            if repositories.templates.get(template.id) is not None:
                result.skipped += 1
                continue
            repositories.templates.add(template)
            result.templates += 1
        uow.commit()

    log.info(
        "Imported %d third parties and %d templates from %s (%d skipped)",
        result.third_parties,
        result.templates,
        path,
        result.skipped,
    )
    return result
