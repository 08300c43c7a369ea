from __future__ import annotations

from typing import TYPE_CHECKING

from fieldrecon.domain.fields import CatalogEntry, FieldReconciliationEngine
from fieldrecon.domain.model import FieldType, TextValue
from tests.helpers.parties import make_party

if TYPE_CHECKING:
    from fieldrecon.domain.model import ThirdParty


def _cohort() -> list[ThirdParty]:
    return [
        make_party({"Banco": "Banco Uno", "sector": "minería"}),
        make_party({"banco": "Banco Dos", "Sector": "energía"}),
        make_party({"BANCO": "Banco Tres"}),
        make_party({"sector": "agro", "web": "acme.co"}),
    ]


def test_field_most_of_the_cohort_has_is_recommended(
    engine: FieldReconciliationEngine,
) -> None:
    party = make_party({"ciudad": "Bogotá"})

    suggestions = engine.suggest(party, _cohort())

    banco = suggestions[0]
    assert banco.to_dict() == {
        "canonical_name": "banco",
        "frequency": 3,
        "cohort_size": 4,
        "percentage": 75,
        "sample_values": ["Banco Uno", "Banco Dos", "Banco Tres"],
        "recommended": True,
    }
    assert [suggestion.canonical_name for suggestion in suggestions] == ["banco", "sector"]
    assert "web" not in {suggestion.canonical_name for suggestion in suggestions}


def test_fields_the_entity_already_has_are_not_suggested(
    engine: FieldReconciliationEngine,
) -> None:
    party = make_party({"Nombre del Banco": "Banco Cuatro"})

    suggestions = engine.suggest(party, _cohort())

    assert [suggestion.canonical_name for suggestion in suggestions] == ["sector"]


def test_entity_itself_is_excluded_from_its_cohort(engine: FieldReconciliationEngine) -> None:
    party = make_party({"ciudad": "Bogotá"})

    assert engine.suggest(party, [party]) == []
    assert engine.suggest(party, []) == []


def test_adding_a_suggested_field_removes_it_from_the_suggestions(
    engine: FieldReconciliationEngine,
) -> None:
    cohort = _cohort()
    party = make_party({"ciudad": "Bogotá"})
    before = {suggestion.canonical_name for suggestion in engine.suggest(party, cohort)}

    party.attributes["banco"] = TextValue("Banco Cinco")
    after = {suggestion.canonical_name for suggestion in engine.suggest(party, cohort)}

    assert after == before - {"banco"}


def test_one_more_cohort_member_with_the_field_raises_its_share(
    engine: FieldReconciliationEngine,
) -> None:
    party = make_party({"ciudad": "Bogotá"})
    cohort = _cohort()
    [before, *_] = engine.suggest(party, cohort)

    [after, *_] = engine.suggest(party, [*cohort, make_party({"Banco": "Banco Seis"})])

    assert (before.canonical_name, after.canonical_name) == ("banco", "banco")
    assert after.frequency == before.frequency + 1
    assert after.cohort_size == before.cohort_size + 1
    assert after.percentage > before.percentage
    assert after.percentage == 80


def test_recommendation_threshold_is_relative_to_cohort_size() -> None:
    engine = FieldReconciliationEngine.create(recommend_ratio=0.8, sample_values_limit=1)
    party = make_party()

    [banco, sector] = engine.suggest(party, _cohort())

    assert banco.recommended is False
    assert banco.sample_values == (TextValue("Banco Uno"),)
    assert sector.frequency == 3


def test_catalog_suggestions_skip_fields_already_present() -> None:
    engine = FieldReconciliationEngine.create(
        catalog={
            "proveedor": (
                CatalogEntry("banco", "Banco"),
                CatalogEntry(
                    "Tipo de Cuenta", "Tipo de cuenta", "select", ("ahorros", "corriente")
                ),
                CatalogEntry("regimen_tributario", "Régimen tributario"),
            )
        }
    )
    party = make_party({"Banco": "Banco Uno"})

    suggestions = engine.suggest_from_catalog(party)

    assert [suggestion.canonical_name for suggestion in suggestions] == [
        "tipo_cuenta",
        "regimen_tributario",
    ]
    assert suggestions[0].value_type is FieldType.SELECT
    assert suggestions[0].options == ("ahorros", "corriente")
    assert engine.suggest_from_catalog(make_party(third_party_type=None)) == []
