"""
Hierarquia de coordenadas das câmaras (quadra / lado / fila / andar).

Funções puras: validação de dimensões, conversão do lado numérico para
letra (1→A … 20→T) e enumeração determinística de todas as coordenadas
de uma câmara com o respectivo código ``Q{q}-L{lado}-F{f}-A{a}``.
Nada aqui toca o banco; a persistência fica com ``LocalizacaoRepo``.
"""

from __future__ import annotations

import re
from typing import Iterator, Optional, Tuple

from sementes.config import DEFAULTS, DefaultConfig
from sementes.domain.errors import DimensionError, ValidationError
from sementes.domain.models import Coordenada, Dimensoes

LETRAS_LADO = "ABCDEFGHIJKLMNOPQRST"

_CODIGO_RE = re.compile(r"^Q(\d+)-L([A-T]|\d+)-F(\d+)-A(\d+)$")


def lado_para_letra(lado: int) -> str:
    """1 → 'A', 2 → 'B', …, 20 → 'T'."""
    if not isinstance(lado, int) or isinstance(lado, bool) or not 1 <= lado <= len(LETRAS_LADO):
        raise ValidationError(f"Lado {lado!r} fora do intervalo 1..{len(LETRAS_LADO)}", lado=lado)
    return LETRAS_LADO[lado - 1]


def letra_para_lado(letra: str) -> int:
    """'A' → 1, …, 'T' → 20 (inversa de ``lado_para_letra``)."""
    s = str(letra or "").strip().upper()
    if len(s) != 1 or s not in LETRAS_LADO:
        raise ValidationError(f"Lado deve ser uma letra de A a T, recebido {letra!r}", lado=letra)
    return LETRAS_LADO.index(s) + 1


def validar_dimensoes(
    dim: Dimensoes,
    config: DefaultConfig = DEFAULTS,
    usar_letras: Optional[bool] = None,
) -> None:
    """Valida cada eixo e o total de localizações.

    Raises:
        DimensionError: eixo não inteiro, ≤ 0, acima do máximo configurado
            ou total acima do teto de localizações.
    """
    letras = config.usar_letras_lado if usar_letras is None else usar_letras
    limites = {
        "quadras": config.max_quadras,
        "lados": min(config.max_lados, len(LETRAS_LADO)) if letras else config.max_lados_numerico,
        "filas": config.max_filas,
        "andares": config.max_andares,
    }
    for eixo, maximo in limites.items():
        valor = getattr(dim, eixo)
        if not isinstance(valor, int) or isinstance(valor, bool):
            raise DimensionError(f"{eixo} deve ser um número inteiro", eixo=eixo, valor=valor)
        if valor <= 0:
            raise DimensionError(f"{eixo} deve ser maior que zero", eixo=eixo, valor=valor)
        if valor > maximo:
            raise DimensionError(f"{eixo} excede o máximo de {maximo}", eixo=eixo, valor=valor)
    if dim.total > config.max_localizacoes:
        raise DimensionError(
            f"Total de localizações ({dim.total}) excede o limite de {config.max_localizacoes}",
            total=dim.total,
        )


def gerar_codigo(coord: Coordenada, usar_letras: bool = True) -> str:
    lado = lado_para_letra(coord.lado) if usar_letras else str(coord.lado)
    return f"Q{coord.quadra}-L{lado}-F{coord.fila}-A{coord.andar}"


def parse_codigo(codigo: str) -> Coordenada:
    """Inverso de ``gerar_codigo``: 'Q1-LB-F3-A2' → Coordenada(1, 2, 3, 2)."""
    m = _CODIGO_RE.match(str(codigo or "").strip().upper())
    if not m:
        raise ValidationError(f"Código de localização inválido: {codigo!r}", codigo=codigo)
    q, lado, f, a = m.groups()
    lado_num = int(lado) if lado.isdigit() else letra_para_lado(lado)
    return Coordenada(int(q), lado_num, int(f), int(a))


def dentro_dos_limites(coord: Coordenada, dim: Dimensoes) -> bool:
    return (
        1 <= coord.quadra <= dim.quadras
        and 1 <= coord.lado <= dim.lados
        and 1 <= coord.fila <= dim.filas
        and 1 <= coord.andar <= dim.andares
    )


def enumerar_coordenadas(
    dim: Dimensoes,
    config: DefaultConfig = DEFAULTS,
    usar_letras: Optional[bool] = None,
) -> Iterator[Tuple[Coordenada, str]]:
    """Enumera (coordenada, código) em ordem crescente de quadra, lado, fila, andar."""
    letras = config.usar_letras_lado if usar_letras is None else usar_letras
    validar_dimensoes(dim, config, letras)
    return _iterar(dim, letras)


def _iterar(dim: Dimensoes, letras: bool) -> Iterator[Tuple[Coordenada, str]]:
    for q in range(1, dim.quadras + 1):
        for lado in range(1, dim.lados + 1):
            for f in range(1, dim.filas + 1):
                for a in range(1, dim.andares + 1):
                    coord = Coordenada(q, lado, f, a)
                    yield coord, gerar_codigo(coord, letras)
