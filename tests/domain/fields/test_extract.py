from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from fieldrecon.domain.errors import ValidationError
from fieldrecon.domain.fields import FieldExtractor
from fieldrecon.domain.model import FieldSource, NumberValue, TextValue
from tests.helpers.parties import make_party

if TYPE_CHECKING:
    from fieldrecon.domain.fields import FieldReconciliationEngine


def test_standard_attributes_map_to_canonical_names(engine: FieldReconciliationEngine) -> None:
    party = make_party(legal_name="Acme SA", identification_number="900123456", email="  ")

    fields = engine.extract(party)

    assert set(fields) == {"razon_social", "numero_identificacion"}
    assert fields["razon_social"].value == TextValue("Acme SA")
    assert fields["razon_social"].source is FieldSource.STANDARD
    assert fields["razon_social"].original_key == "legal_name"


def test_custom_attributes_are_normalized_and_blank_values_skipped(
    engine: FieldReconciliationEngine,
) -> None:
    party = make_party({"Cuenta Bancaria": "123-456", "Banco": "  ", "Empleados": 0})

    fields = engine.extract(party)

    assert set(fields) == {"cuenta_bancaria", "empleados"}
    assert fields["cuenta_bancaria"].original_key == "Cuenta Bancaria"
    assert fields["cuenta_bancaria"].source is FieldSource.CUSTOM
    assert fields["empleados"].value == NumberValue(0)


def test_custom_attribute_overrides_standard_one(engine: FieldReconciliationEngine) -> None:
    party = make_party({"Razón Social": "Acme Operador"}, legal_name="Acme SA")

    fields = engine.extract(party)

    assert fields["razon_social"].value == TextValue("Acme Operador")
    assert fields["razon_social"].source is FieldSource.CUSTOM


def test_colliding_custom_keys_prefer_the_canonical_one(
    engine: FieldReconciliationEngine,
) -> None:
    party = make_party({"Correo Electrónico": "new@b.com", "correo_electronico": "old@b.com"})

    fields = engine.extract(party)

    assert fields["correo_electronico"].original_key == "correo_electronico"
    assert fields["correo_electronico"].value == TextValue("old@b.com")


def test_colliding_non_canonical_keys_keep_the_first(engine: FieldReconciliationEngine) -> None:
    party = make_party({"Correo Electrónico": "first@b.com", "CORREO-ELECTRONICO": "x@b.com"})

    fields = engine.extract(party)

    assert fields["correo_electronico"].original_key == "Correo Electrónico"


def test_missing_party_is_rejected(engine: FieldReconciliationEngine) -> None:
    with pytest.raises(ValidationError):
        engine.extract(None)


def test_extractor_honours_a_custom_standard_table() -> None:
    extractor = FieldExtractor(standard_fields={"phone": "celular"})
    party = make_party(phone="3001234567", legal_name="Ignored SA")

    assert set(extractor.extract(party)) == {"celular"}


def test_extractor_rejects_unknown_standard_attributes() -> None:
    with pytest.raises(ValidationError) as excinfo:
        FieldExtractor(standard_fields={"phone": "telefono", "website": "sitio_web"})

    assert excinfo.value.keys == ("website",)
