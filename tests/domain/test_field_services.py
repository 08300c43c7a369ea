from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import uuid4

import pytest

from fieldrecon.domain import field_services
from fieldrecon.domain.errors import NotFoundError, ValidationError
from fieldrecon.domain.fields import FieldInput
from fieldrecon.domain.model import TextValue
from tests.helpers.parties import make_field, make_party, make_template, persist

if TYPE_CHECKING:
    from collections.abc import Callable

    from fieldrecon.adapters.sqlalchemy.unit_of_work import SqlAlchemyFieldUnitOfWork
    from fieldrecon.domain.fields import FieldReconciliationEngine
    from fieldrecon.domain.model import ThirdParty

    UnitOfWorkFactory = Callable[[], SqlAlchemyFieldUnitOfWork]


def _reload(uow_factory: UnitOfWorkFactory, party: ThirdParty) -> ThirdParty:
    with uow_factory() as uow:
        loaded = uow.repositories.third_parties.get(party.id)
        assert loaded is not None
        return loaded


def test_analyze_reports_completion_against_type_templates(
    sqlite_unit_of_work: UnitOfWorkFactory, engine: FieldReconciliationEngine
) -> None:
    party = make_party({"Número de Identificación": "900123456", "Nombre": "Acme SA"})
    persist(
        sqlite_unit_of_work,
        parties=[party],
        templates=[
            make_template(
                "Suministro",
                [
                    make_field("numero_identificacion", mandatory=True),
                    make_field("Representante Legal", mandatory=True),
                ],
            ),
            make_template("Clientes", [make_field("cupo")], third_party_type="cliente"),
        ],
    )

    analysis = field_services.analyze_third_party(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        third_party_id=party.id,
        company_id="acme-legal",
    )

    assert analysis.completion_percentage == 50
    assert [req.canonical_name for req in analysis.report.missing] == ["representante_legal"]


def test_records_of_another_company_are_not_found(
    sqlite_unit_of_work: UnitOfWorkFactory, engine: FieldReconciliationEngine
) -> None:
    party = make_party(company_id="otra-empresa")
    persist(sqlite_unit_of_work, parties=[party])

    with pytest.raises(NotFoundError):
        field_services.analyze_third_party(
            unit_of_work_factory=sqlite_unit_of_work,
            engine=engine,
            third_party_id=party.id,
            company_id="acme-legal",
        )
    with pytest.raises(NotFoundError):
        field_services.catalog_suggestions(
            unit_of_work_factory=sqlite_unit_of_work,
            engine=engine,
            third_party_id=uuid4(),
            company_id="acme-legal",
        )


def test_required_fields_and_template_validation(
    sqlite_unit_of_work: UnitOfWorkFactory, engine: FieldReconciliationEngine
) -> None:
    party = make_party({"banco": "Uno"}, legal_name="Acme SA")
    template = make_template(
        "Suministro", [make_field("Razón Social", mandatory=True), make_field("Banco")]
    )
    foreign = make_template("Ajena", [make_field("banco")], company_id="otra-empresa")
    persist(sqlite_unit_of_work, parties=[party], templates=[template, foreign])

    requirements = field_services.required_fields_for_type(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        third_party_type="proveedor",
        company_id="acme-legal",
    )
    validation = field_services.validate_for_template(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        third_party_id=party.id,
        template_id=template.id,
        company_id="acme-legal",
    )

    assert [req.canonical_name for req in requirements] == ["razon_social", "banco"]
    assert validation.valid is True
    with pytest.raises(NotFoundError):
        field_services.validate_for_template(
            unit_of_work_factory=sqlite_unit_of_work,
            engine=engine,
            third_party_id=party.id,
            template_id=foreign.id,
            company_id="acme-legal",
        )


def test_missing_fields_by_template_covers_active_company_templates(
    sqlite_unit_of_work: UnitOfWorkFactory, engine: FieldReconciliationEngine
) -> None:
    party = make_party({"banco": "Uno"}, legal_name="Acme SA")
    suministro = make_template(
        "Suministro",
        [make_field("Razón Social"), make_field("Banco"), make_field("Tipo de Cuenta")],
    )
    servicios = make_template("Servicios", [make_field("banco")])
    clientes = make_template("Clientes", [make_field("cupo")], third_party_type="cliente")
    archived = make_template("Antiguo", [make_field("fax")], active=False)
    foreign = make_template("Ajena", [make_field("fax")], company_id="otra-empresa")
    persist(
        sqlite_unit_of_work,
        parties=[party],
        templates=[suministro, servicios, clientes, archived, foreign],
    )

    report = field_services.missing_fields_by_template(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        third_party_id=party.id,
        company_id="acme-legal",
    )
    single = field_services.missing_fields_by_template(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        third_party_id=party.id,
        company_id="acme-legal",
        template_id=servicios.id,
    )

    assert report.templates_analyzed == 3
    assert [(gap.template_id, gap.completion_percentage) for gap in report.templates] == [
        (suministro.id, 67),
        (clientes.id, 0),
    ]
    assert (single.templates_analyzed, single.templates) == (1, [])
    for template_id in (archived.id, foreign.id, uuid4()):
        with pytest.raises(NotFoundError):
            field_services.missing_fields_by_template(
                unit_of_work_factory=sqlite_unit_of_work,
                engine=engine,
                third_party_id=party.id,
                company_id="acme-legal",
                template_id=template_id,
            )


def test_migrate_third_party_saves_unless_dry_run(
    sqlite_unit_of_work: UnitOfWorkFactory, engine: FieldReconciliationEngine
) -> None:
    party = make_party({"Correo Electrónico": "a@b.com", "correo_electronico": "old@b.com"})
    persist(sqlite_unit_of_work, parties=[party])

    preview = field_services.migrate_third_party(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        third_party_id=party.id,
        company_id="acme-legal",
        dry_run=True,
    )
    assert preview.changed is True
    assert "Correo Electrónico" in _reload(sqlite_unit_of_work, party).attributes

    field_services.migrate_third_party(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        third_party_id=party.id,
        company_id="acme-legal",
        updated_by="ana",
    )
    stored = _reload(sqlite_unit_of_work, party)
    assert stored.attributes == {"correo_electronico": TextValue("old@b.com")}
    assert stored.updated_by == "ana"
    assert stored.version == 2


def test_suggestions_come_from_same_type_records(
    sqlite_unit_of_work: UnitOfWorkFactory, engine: FieldReconciliationEngine
) -> None:
    party = make_party({"ciudad": "Cali"}, legal_name="Acme SA")
    cohort = [
        make_party({"Banco": "Uno"}, legal_name="Beta SA"),
        make_party({"banco": "Dos"}, legal_name="Gamma SA"),
        make_party({"BANCO": "Tres"}, legal_name="Delta SA"),
        make_party({"web": "x.co"}, legal_name="Epsilon SA"),
        make_party({"banco": "Cuatro"}, third_party_type="cliente"),
    ]
    persist(sqlite_unit_of_work, parties=[party, *cohort])

    [suggestion] = field_services.suggest_for_third_party(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        third_party_id=party.id,
        company_id="acme-legal",
    )

    assert suggestion.canonical_name == "banco"
    assert (suggestion.frequency, suggestion.cohort_size, suggestion.percentage) == (3, 4, 75)
    assert suggestion.recommended is True


def test_upsert_and_merge_persist_changes(
    sqlite_unit_of_work: UnitOfWorkFactory, engine: FieldReconciliationEngine
) -> None:
    party = make_party({"Celular": "300"})
    persist(sqlite_unit_of_work, parties=[party])

    upsert = field_services.upsert_third_party_fields(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        third_party_id=party.id,
        company_id="acme-legal",
        fields=[FieldInput(name="Teléfono", value="601"), FieldInput(name="", value="x")],
    )
    merge = field_services.merge_third_party_fields(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        third_party_id=party.id,
        company_id="acme-legal",
        keys=["telefono", "Celular"],
        target_name="Teléfono de Contacto",
    )

    assert upsert.added == ["telefono"]
    assert len(upsert.errors) == 1
    assert merge.target_key == "telefono_contacto"
    assert _reload(sqlite_unit_of_work, party).attributes == {
        "telefono_contacto": TextValue("601")
    }


def test_rejected_merge_leaves_the_record_untouched(
    sqlite_unit_of_work: UnitOfWorkFactory, engine: FieldReconciliationEngine
) -> None:
    party = make_party({"Celular": "300"})
    persist(sqlite_unit_of_work, parties=[party])

    with pytest.raises(ValidationError):
        field_services.merge_third_party_fields(
            unit_of_work_factory=sqlite_unit_of_work,
            engine=engine,
            third_party_id=party.id,
            company_id="acme-legal",
            keys=["Celular"],
            target_name="telefono",
        )

    assert _reload(sqlite_unit_of_work, party).version == 1


def test_migrate_all_reports_progress_and_honours_dry_run(
    sqlite_unit_of_work: UnitOfWorkFactory, engine: FieldReconciliationEngine
) -> None:
    messy = make_party({"Tipo de Cuenta": "ahorros"}, legal_name="A SA")
    clean = make_party({"banco": "Uno"}, legal_name="B SA")
    client = make_party({"Cupo Aprobado": 10}, third_party_type="cliente", legal_name="C SA")
    persist(sqlite_unit_of_work, parties=[messy, clean, client])
    calls: list[tuple[int, int]] = []

    preview = field_services.migrate_all(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        company_id="acme-legal",
        dry_run=True,
        progress=lambda done, total: calls.append((done, total)),
    )

    assert (preview.total, preview.migrated, preview.skipped) == (3, 2, 1)
    assert calls == [(1, 3), (2, 3), (3, 3)]
    assert preview.details[0]["diff"][0]["new_key"] == "tipo_cuenta"  # type: ignore[index]
    assert "Tipo de Cuenta" in _reload(sqlite_unit_of_work, messy).attributes

    applied = field_services.migrate_all(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        company_id="acme-legal",
        third_party_type="proveedor",
    )

    assert (applied.total, applied.migrated) == (2, 1)
    assert list(_reload(sqlite_unit_of_work, messy).attributes) == ["tipo_cuenta"]
    assert "Cupo Aprobado" in _reload(sqlite_unit_of_work, client).attributes


def test_migrate_all_stops_when_cancelled(
    sqlite_unit_of_work: UnitOfWorkFactory, engine: FieldReconciliationEngine
) -> None:
    first = make_party({"Banco": "Uno"}, legal_name="A SA")
    second = make_party({"Banco": "Dos"}, legal_name="B SA")
    persist(sqlite_unit_of_work, parties=[first, second])
    probes = iter([False, True])

    summary = field_services.migrate_all(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        company_id="acme-legal",
        should_cancel=lambda: next(probes),
    )

    assert summary.cancelled is True
    assert summary.migrated == 1
    assert "banco" in _reload(sqlite_unit_of_work, first).attributes
    assert "Banco" in _reload(sqlite_unit_of_work, second).attributes


def test_merge_fields_bulk_skips_records_without_two_matches(
    sqlite_unit_of_work: UnitOfWorkFactory, engine: FieldReconciliationEngine
) -> None:
    both = make_party({"Celular": "300", "Móvil": "301"}, legal_name="A SA")
    one = make_party({"celular": "302"}, legal_name="B SA")
    persist(sqlite_unit_of_work, parties=[both, one])

    summary = field_services.merge_fields_bulk(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        company_id="acme-legal",
        third_party_type="proveedor",
        raw_names=["celular", "movil"],
        target_name="Teléfono Móvil",
    )

    assert (summary.total, summary.merged, summary.skipped) == (2, 1, 1)
    assert summary.target_key == "telefono_movil"
    assert _reload(sqlite_unit_of_work, both).attributes == {
        "telefono_movil": TextValue("300")
    }
    assert _reload(sqlite_unit_of_work, one).attributes == {"celular": TextValue("302")}


def test_completeness_stats_groups_by_type(
    sqlite_unit_of_work: UnitOfWorkFactory, engine: FieldReconciliationEngine
) -> None:
    full = make_party({"banco": "Uno", "cuenta": "1"}, legal_name="A SA")
    half = make_party({"banco": "Dos"}, legal_name="B SA")
    untyped = make_party({"banco": "Tres"}, third_party_type=None, legal_name="C SA")
    persist(
        sqlite_unit_of_work,
        parties=[full, half, untyped],
        templates=[make_template("Suministro", [make_field("banco"), make_field("cuenta")])],
    )

    stats = field_services.completeness_stats(
        unit_of_work_factory=sqlite_unit_of_work,
        engine=engine,
        company_id="acme-legal",
    )

    assert stats.total == 3
    assert stats.average_completion == 50
    assert stats.by_type == {
        "proveedor": {"count": 2, "average_completion": 75},
        "untyped": {"count": 1, "average_completion": 0},
    }
    assert [entry["name"] for entry in stats.needs_attention] == ["C SA", "B SA"]
