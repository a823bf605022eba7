import pytest

from sementes.config import DefaultConfig
from sementes.domain.coordenadas import (
    dentro_dos_limites,
    enumerar_coordenadas,
    gerar_codigo,
    lado_para_letra,
    letra_para_lado,
    parse_codigo,
    validar_dimensoes,
)
from sementes.domain.errors import DimensionError, ValidationError
from sementes.domain.models import Coordenada, Dimensoes


def test_lado_letra_bijecao():
    for lado in range(1, 21):
        assert letra_para_lado(lado_para_letra(lado)) == lado
    assert lado_para_letra(1) == "A"
    assert lado_para_letra(20) == "T"
    assert letra_para_lado("b") == 2


@pytest.mark.parametrize("lado", [0, 21, -1])
def test_lado_fora_do_intervalo(lado):
    with pytest.raises(ValidationError):
        lado_para_letra(lado)


def test_letra_invalida():
    with pytest.raises(ValidationError):
        letra_para_lado("U")


def test_enumeracao_ordenada_e_deterministica():
    dim = Dimensoes(2, 2, 1, 2)
    pares = list(enumerar_coordenadas(dim))
    assert len(pares) == dim.total == 8
    coords = [c for c, _ in pares]
    assert coords == sorted(coords, key=lambda c: (c.quadra, c.lado, c.fila, c.andar))
    assert pares[0] == (Coordenada(1, 1, 1, 1), "Q1-LA-F1-A1")
    assert pares[-1][1] == "Q2-LB-F1-A2"
    assert pares == list(enumerar_coordenadas(dim))


def test_enumeracao_unitaria():
    assert list(enumerar_coordenadas(Dimensoes(1, 1, 1, 1))) == [(Coordenada(1, 1, 1, 1), "Q1-LA-F1-A1")]


@pytest.mark.parametrize(
    "dim",
    [
        Dimensoes(0, 1, 1, 1),
        Dimensoes(1, -1, 1, 1),
        Dimensoes(101, 1, 1, 1),
        Dimensoes(1, 21, 1, 1),
        Dimensoes(1, 1, 1, 21),
    ],
)
def test_dimensoes_invalidas(dim):
    with pytest.raises(DimensionError):
        validar_dimensoes(dim)


def test_dimensoes_invalidas_falham_antes_de_iterar():
    with pytest.raises(DimensionError):
        enumerar_coordenadas(Dimensoes(0, 1, 1, 1))


def test_total_acima_do_teto():
    cfg = DefaultConfig(max_localizacoes=10)
    with pytest.raises(DimensionError):
        validar_dimensoes(Dimensoes(2, 2, 2, 2), cfg)


def test_lados_numericos():
    pares = list(enumerar_coordenadas(Dimensoes(1, 25, 1, 1), usar_letras=False))
    assert pares[-1][1] == "Q1-L25-F1-A1"


def test_parse_codigo_inverso():
    coord = Coordenada(3, 2, 4, 1)
    assert parse_codigo(gerar_codigo(coord)) == coord
    assert parse_codigo("q1-lb-f3-a2") == Coordenada(1, 2, 3, 2)
    with pytest.raises(ValidationError):
        parse_codigo("X1-LA-F1-A1")


def test_dentro_dos_limites():
    dim = Dimensoes(1, 2, 1, 2)
    assert dentro_dos_limites(Coordenada(1, 2, 1, 2), dim)
    assert not dentro_dos_limites(Coordenada(1, 3, 1, 1), dim)
