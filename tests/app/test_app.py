from __future__ import annotations

import json
from typing import TYPE_CHECKING

from fieldrecon import app
from fieldrecon.domain.fields import FieldInput
from fieldrecon.domain.model import TextValue
from tests.helpers.parties import make_field, make_party, make_template, persist

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from fieldrecon.adapters.sqlalchemy.unit_of_work import SqlAlchemyFieldUnitOfWork

    UnitOfWorkFactory = Callable[[], SqlAlchemyFieldUnitOfWork]


def test_import_legacy_export_skips_existing_records(
    tmp_path: Path, sqlite_unit_of_work: UnitOfWorkFactory
) -> None:
    path = tmp_path / "export.json"
    path.write_text(
        json.dumps(
            {
                "suppliers": [
                    {"_id": "sup-1", "supplier_type": "proveedor", "legal_name": "Acme SA"},
                    {"_id": "sup-2", "supplier_type": "proveedor", "custom_fields": {"Banco": "X"}},
                ],
                "templates": [{"_id": "tpl-1", "name": "Suministro", "fields": []}],
            }
        ),
        encoding="utf-8",
    )

    first = app.import_legacy_export(path, "acme-legal", unit_of_work_factory=sqlite_unit_of_work)
    second = app.import_legacy_export(path, "acme-legal", unit_of_work_factory=sqlite_unit_of_work)

    assert first.to_dict() == {"third_parties": 2, "templates": 1, "skipped": 0}
    assert second.to_dict() == {"third_parties": 0, "templates": 0, "skipped": 3}
    with sqlite_unit_of_work() as uow:
        assert len(uow.repositories.third_parties.find_by_company("acme-legal")) == 2


def test_app_entry_points_use_the_configured_engine(
    sqlite_unit_of_work: UnitOfWorkFactory,
) -> None:
    party = make_party({"NIT": "900123456", "Celular": "300"})
    persist(
        sqlite_unit_of_work,
        parties=[party],
        templates=[
            make_template(
                "Suministro",
                [make_field("Número de Identificación", mandatory=True), make_field("Banco")],
            )
        ],
    )

    migration = app.migrate_third_party(
        party.id, "acme-legal", apply_aliases=True, unit_of_work_factory=sqlite_unit_of_work
    )
    added = app.add_fields(
        party.id,
        "acme-legal",
        [FieldInput(name="Banco", value="Banco Uno")],
        unit_of_work_factory=sqlite_unit_of_work,
    )
    analysis = app.analyze_third_party(
        party.id, "acme-legal", unit_of_work_factory=sqlite_unit_of_work
    )

    assert migration.attributes["numero_identificacion"] == TextValue("900123456")
    assert migration.attributes["telefono"] == TextValue("300")
    assert added.added == ["banco"]
    assert analysis.completion_percentage == 100

    requirements = app.required_fields(
        "proveedor", "acme-legal", unit_of_work_factory=sqlite_unit_of_work
    )
    assert [req.canonical_name for req in requirements] == ["numero_identificacion", "banco"]
