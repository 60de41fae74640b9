from itertools import count

import pytest

from inventaire import csv_codec
from inventaire.errors import ImportParseError
from inventaire.models import Product

TODAY = "17/10/2026"


def _parse(text):
    ids = count(1)
    return csv_codec.parse(text, allocate_id=lambda: next(ids), today=lambda: TODAY)


def test_parse_skips_header_and_maps_columns() -> None:
    text = (
        "name,category,quantity,price,lastUpdated\n"
        "Café, Boissons ,12,2500,01/10/2026\n"
        "Sucre,Épicerie,3,750.5,\n"
    )

    products = _parse(text)

    assert products == [
        Product(id=1, name="Café", category="Boissons", quantity=12, price=2500.0, last_updated="01/10/2026"),
        Product(id=2, name="Sucre", category="Épicerie", quantity=3, price=750.5, last_updated=TODAY),
    ]


def test_parse_applies_defaults_for_missing_columns() -> None:
    products = _parse("h\n,,,,\nSeul\n")

    blank, short = products
    assert blank.name == "Sans nom"
    assert blank.category == "Non catégorisé"
    assert blank.quantity == 0
    assert blank.price == 0
    assert blank.last_updated == TODAY
    assert short.name == "Seul"
    assert short.category == "Non catégorisé"


def test_parse_non_numeric_values_become_zero() -> None:
    (product,) = _parse("header\nWidget,Tools,abc,xyz,\n")

    assert product.name == "Widget"
    assert product.quantity == 0
    assert product.price == 0


@pytest.mark.parametrize("raw", ["-4", "inf", "nan", ""])
def test_parse_rejects_negative_and_non_finite_numbers(raw: str) -> None:
    (product,) = _parse(f"header\nA,B,{raw},{raw},\n")

    assert product.quantity == 0
    assert product.price == 0


def test_parse_truncates_fractional_quantity() -> None:
    (product,) = _parse("header\nA,B,2.9,1.25,\n")

    assert product.quantity == 2
    assert product.price == 1.25


def test_parse_ignores_blank_lines_and_crlf() -> None:
    text = "\ufeff\r\nNOM,CATÉGORIE\r\n\r\nVis,Quincaillerie,5,10,02/10/2026\r\n   \n"

    (product,) = _parse(text)

    assert product.name == "Vis"
    assert product.last_updated == "02/10/2026"


def test_parse_accepts_utf8_bytes() -> None:
    (product,) = _parse("h\nÉcrou,Pièces,1,2,\n".encode("utf-8-sig"))

    assert product.name == "Écrou"


def test_parse_header_only_yields_nothing() -> None:
    assert _parse("name,category,quantity,price,lastUpdated\n") == []


@pytest.mark.parametrize("text", ["", "\n\n   \n", b"\xff\xfe\x00"])
def test_parse_empty_or_undecodable_input_fails(text) -> None:
    with pytest.raises(ImportParseError):
        _parse(text)


def test_parse_does_not_handle_quoted_commas() -> None:
    (product,) = _parse('h\n"Vis, inox",Quincaillerie,5,10,\n')

    assert product.name == '"Vis'
    assert product.category == 'inox"'
    assert product.quantity == 0


def test_to_csv_writes_french_header_and_rows() -> None:
    products = [
        Product(id=1, name="Café", category="Boissons", quantity=12, price=2500.0, last_updated="01/10/2026"),
        Product(id=2, name="Sucre", category="Épicerie", quantity=3, price=750.5, last_updated="02/10/2026"),
    ]

    text = csv_codec.to_csv(products)

    assert text.split("\n") == [
        "NOM,CATÉGORIE,QUANTITÉ,PRIX,DERNIÈRE MAJ",
        "Café,Boissons,12,2500,01/10/2026",
        "Sucre,Épicerie,3,750.5,02/10/2026",
    ]


def test_to_csv_empty_collection_is_header_only() -> None:
    assert csv_codec.to_csv([]) == "NOM,CATÉGORIE,QUANTITÉ,PRIX,DERNIÈRE MAJ"


def test_export_then_import_keeps_fields() -> None:
    original = [
        Product(id=10, name="Farine", category="Épicerie", quantity=8, price=1200.0, last_updated="05/10/2026"),
        Product(id=11, name="Lait", category="Frais", quantity=0, price=0.75, last_updated="06/10/2026"),
    ]

    restored = _parse(csv_codec.to_csv(original))

    assert [
        (p.name, p.category, p.quantity, p.price, p.last_updated) for p in restored
    ] == [(p.name, p.category, p.quantity, p.price, p.last_updated) for p in original]
    assert [p.id for p in restored] == [1, 2]


def test_parse_rejects_digit_separators() -> None:
    (product,) = _parse("h\nA,B,1_000,2_5,\n")

    assert product.quantity == 0
    assert product.price == 0
