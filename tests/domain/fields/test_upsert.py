from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest

from fieldrecon.domain.fields import FieldInput, is_valid_value
from fieldrecon.domain.model import BooleanValue, DateValue, TextValue, coerce_attributes

if TYPE_CHECKING:
    from fieldrecon.domain.fields import FieldReconciliationEngine


def test_upsert_adds_and_updates_canonical_keys(engine: FieldReconciliationEngine) -> None:
    attributes = coerce_attributes({"banco": "Banco Uno"})

    result = engine.upsert(
        attributes,
        [
            FieldInput(name="Banco", value="Banco Dos"),
            FieldInput(name="Fecha de Constitución", value=date(2001, 5, 4)),
            FieldInput(name="", label="Régimen Simple", value=True),
        ],
    )

    assert result.added == ["fecha_constitucion", "regimen_simple"]
    assert result.updated == ["banco"]
    assert result.errors == []
    assert result.attributes == {
        "banco": TextValue("Banco Dos"),
        "fecha_constitucion": DateValue(date(2001, 5, 4)),
        "regimen_simple": BooleanValue(flag=True),
    }
    assert attributes == {"banco": TextValue("Banco Uno")}
    assert result.changed is True


def test_invalid_entries_are_collected_without_aborting(
    engine: FieldReconciliationEngine,
) -> None:
    result = engine.upsert(
        {},
        [
            FieldInput(name="  ", value="x"),
            FieldInput(name="Banco", value="   "),
            FieldInput(name="Sedes", value={"bogota": 1}),
            FieldInput(name="Ciudad", value="Cali"),
        ],
    )

    assert result.added == ["ciudad"]
    assert [error["field"] for error in result.errors] == ["  ", "banco", "sedes"]
    assert result.errors[0]["error"] == "Field name is required"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, False),
        ("", False),
        (" \t", False),
        ([], False),
        ("x", True),
        (0, True),
        (False, True),
        (["a"], True),
    ],
)
def test_is_valid_value(raw: object, expected: bool) -> None:  # noqa: FBT001
    assert is_valid_value(raw) is expected
