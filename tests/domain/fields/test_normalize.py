from __future__ import annotations

import pytest

from fieldrecon.domain.fields import NameNormalizer, compact_field_name, normalize_field_name


def test_accents_case_and_stop_words_collapse_to_one_key() -> None:
    assert normalize_field_name("Número de Identificación") == "numero_identificacion"
    assert normalize_field_name("numero_de_identificacion") == "numero_identificacion"
    assert normalize_field_name("NUMERO DE IDENTIFICACION") == "numero_identificacion"


@pytest.mark.parametrize(
    ("label", "expected"),
    [
        ("Nombre / Razón Social", "nombre_razon_social"),
        ("  correo-electrónico  ", "correo_electronico"),
        ("__tipo__id__", "tipo_id"),
        ("cuenta.bancaria", "cuenta_bancaria"),
        ("Dirección\tFiscal", "direccion_fiscal"),
        ("Ciudad del Domicilio", "ciudad_domicilio"),
    ],
)
def test_separator_runs_become_single_underscores(label: str, expected: str) -> None:
    assert normalize_field_name(label) == expected


@pytest.mark.parametrize("label", ["", None, 42, "   ", "___", "/-/"])
def test_empty_or_non_text_input_normalizes_to_empty_string(label: object) -> None:
    assert normalize_field_name(label) == ""


def test_label_made_only_of_stop_words_keeps_its_tokens() -> None:
    assert normalize_field_name("De La") == "de_la"
    assert normalize_field_name("el") == "el"


@pytest.mark.parametrize(
    "label",
    [
        "Número de Identificación",
        "İstanbul Şubesi",
        "Nombre / Razón Social",
        "de la",
        "  __Ñandú--del--Sur__ ",
        "ﬁrma",
    ],
)
def test_normalize_is_idempotent(label: str) -> None:
    once = normalize_field_name(label)
    assert normalize_field_name(once) == once


def test_compact_form_drops_every_separator() -> None:
    assert compact_field_name("Cuenta Bancaria") == "cuentabancaria"
    assert compact_field_name("cuenta_de_la_bancaria") == "cuentabancaria"


def test_custom_tables_change_stop_words_and_separators() -> None:
    normalizer = NameNormalizer(stop_words=frozenset({"of"}), separators=("_", "|"))

    assert normalizer.normalize("Place of Birth") == "place_birth"
    assert normalizer.normalize("city|country") == "city_country"
    assert normalizer.normalize("numero de cuenta") == "numero_de_cuenta"
    assert normalizer.normalize("a.b") == "a.b"


def test_accented_stop_words_match_accent_free_tokens() -> None:
    normalizer = NameNormalizer(stop_words=frozenset({"Él", "según"}))

    assert normalizer.stop_words == frozenset({"el", "segun"})
    assert normalizer.normalize("Firma según él") == "firma"
