from __future__ import annotations

from itertools import permutations
from typing import TYPE_CHECKING

from fieldrecon.domain.fields import RequirementCollector
from fieldrecon.domain.model import FieldType
from tests.helpers.parties import make_field, make_template

if TYPE_CHECKING:
    from fieldrecon.domain.fields import FieldReconciliationEngine


def test_requirements_are_deduplicated_by_canonical_name(
    engine: FieldReconciliationEngine,
) -> None:
    supply = make_template(
        "Contrato de suministro",
        [make_field("Número de Identificación"), make_field("Banco", mandatory=True)],
    )
    services = make_template(
        "Contrato de servicios",
        [make_field("numero_identificacion", mandatory=True), make_field("Representante Legal")],
    )

    requirements = engine.collect_requirements("proveedor", [supply, services])

    assert list(requirements) == ["numero_identificacion", "representante_legal", "banco"]
    identification = requirements["numero_identificacion"]
    assert identification.mandatory is True
    assert identification.source_templates == [services.id, supply.id]
    assert identification.template_names == ["Contrato de servicios", "Contrato de suministro"]
    assert requirements["representante_legal"].mandatory is False


def test_only_active_templates_of_the_requested_type_contribute(
    engine: FieldReconciliationEngine,
) -> None:
    templates = [
        make_template("Proveedores", [make_field("banco")]),
        make_template("Clientes", [make_field("cupo")], third_party_type="cliente"),
        make_template("Archivado", [make_field("archivo")], active=False),
        make_template("Sin campos", []),
    ]

    requirements = engine.collect_requirements("proveedor", templates)

    assert list(requirements) == ["banco"]


def test_aggregation_does_not_depend_on_template_order(
    engine: FieldReconciliationEngine,
) -> None:
    templates = [
        make_template("A", [make_field("Correo", label="Correo")]),
        make_template("B", [make_field("correo", mandatory=True, label="E-mail")]),
        make_template("C", [make_field("CORREO", value_type=FieldType.EMAIL)]),
    ]

    results = [
        {
            name: requirement.to_dict()
            for name, requirement in engine.collect_requirements("proveedor", order).items()
        }
        for order in permutations(templates)
    ]

    assert all(result == results[0] for result in results)
    assert results[0]["correo"]["mandatory"] is True
    assert results[0]["correo"]["label"] == "Correo"
    assert results[0]["correo"]["value_type"] == "email"


def test_missing_value_type_falls_back_to_type_hints() -> None:
    collector = RequirementCollector(type_hints={"salario": "number"})
    template = make_template("Laboral", [make_field("Salario"), make_field("Cargo")])

    requirements = collector.collect("proveedor", [template])

    assert requirements["salario"].value_type is FieldType.NUMBER
    assert requirements["cargo"].value_type is FieldType.TEXT
