"""
Aritmética de pesos e capacidades.

Pesos circulam internamente como gramas inteiras: a conversão de kg para g
é feita uma única vez, na fronteira (entrada do usuário), com arredondamento
para a precisão declarada de 0,001 kg. A partir daí toda conta é inteira,
de modo que ``peso_unitario * quantidade`` é sempre exatamente o delta de
peso aplicado às localizações.

Todas as funções são puras.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

Numero = Union[int, float, str, Decimal]

GRAMAS_POR_KG = 1000


def kg_para_g(kg: Numero) -> int:
    """Converte quilogramas para gramas inteiras (arredondamento half-up).

    Aceita vírgula como separador decimal quando ``kg`` é string.

    Raises
    ------
    ValueError
        Se o valor não for numérico ou não for finito.
    """
    if kg is None or isinstance(kg, bool):
        raise ValueError("peso deve ser informado")
    try:
        valor = Decimal(str(kg).strip().replace(",", "."))
    except InvalidOperation:
        raise ValueError(f"peso inválido: {kg!r}") from None
    if not valor.is_finite():
        raise ValueError(f"peso inválido: {kg!r}")
    return int((valor * GRAMAS_POR_KG).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def g_para_kg(g: int) -> float:
    """Converte gramas inteiras para quilogramas."""
    return g / GRAMAS_POR_KG


def peso_total_g(quantidade: int, peso_unitario_g: int) -> int:
    """Peso de ``quantidade`` unidades, em gramas."""
    return int(quantidade) * int(peso_unitario_g)


def percentual_ocupacao(peso_atual_g: int, capacidade_g: int) -> int:
    """Percentual (inteiro, arredondado) da capacidade em uso."""
    if not capacidade_g:
        return 0
    return int((Decimal(peso_atual_g) * 100 / Decimal(capacidade_g)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
