from decimal import Decimal

import pytest

from sementes.adapters.parsers import parse_lado, parse_localizacao, parse_peso_kg, parse_peso_raw
from sementes.domain.errors import ValidationError
from sementes.domain.models import Coordenada


@pytest.mark.parametrize(
    "txt,exp_num,exp_unit,exp_desc",
    [
        ("25,5 kg - saco", Decimal("25.5"), "KG", "saco"),
        ("500 G", Decimal("500"), "G", None),
        ("1.2 T - bag", Decimal("1.2"), "T", "bag"),
        ("12", Decimal("12"), None, None),
        (40, Decimal("40"), None, None),
        ("", None, None, None),
        (None, None, None, None),
    ],
)
def test_parse_peso_raw(txt, exp_num, exp_unit, exp_desc):
    num, unit, desc = parse_peso_raw(txt)
    assert num == exp_num
    assert unit == exp_unit
    assert desc == exp_desc


def test_parse_peso_kg():
    assert parse_peso_kg("500 g") == Decimal("0.500")
    assert parse_peso_kg("1,5 t") == Decimal("1500.0")
    assert parse_peso_kg("25") == Decimal("25")
    assert parse_peso_kg(None) is None
    with pytest.raises(ValidationError):
        parse_peso_kg("3 libras")


@pytest.mark.parametrize("val,esperado", [("B", 2), ("b", 2), (2, 2), ("2", 2), (2.0, 2), ("t", 20)])
def test_parse_lado(val, esperado):
    assert parse_lado(val) == esperado


@pytest.mark.parametrize("val", ["", "Z", 0, 1.5, True])
def test_parse_lado_invalido(val):
    with pytest.raises(ValidationError):
        parse_lado(val)


def test_parse_localizacao():
    assert parse_localizacao(" Q1 - LB - F3 - A2 ") == Coordenada(1, 2, 3, 2)
    with pytest.raises(ValidationError):
        parse_localizacao(None)
