"""
Utilidades de parsing para valores vindos de planilhas e da linha de comando.

Este módulo interpreta strings de peso com unidade (por exemplo
"25,5 kg - saco" ou "500 g"), o lado de uma localização (letra A–T ou
número) e códigos de localização (``Q1-LB-F3-A2``). O objetivo é extrair
de forma robusta o valor que a camada de casos de uso espera.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any, Optional, Tuple

from sementes.domain.coordenadas import letra_para_lado, parse_codigo
from sementes.domain.errors import ValidationError
from sementes.domain.models import Coordenada

_NUM_RE = re.compile(r"[-+]?\d+(?:[.,]\d+)?")

# fator para kg
_UNIDADES_PESO = {
    "KG": Decimal("1"),
    "KGS": Decimal("1"),
    "QUILO": Decimal("1"),
    "QUILOS": Decimal("1"),
    "G": Decimal("0.001"),
    "GR": Decimal("0.001"),
    "T": Decimal("1000"),
    "TON": Decimal("1000"),
}


def parse_peso_raw(txt: Any) -> Tuple[Optional[Decimal], Optional[str], Optional[str]]:
    """Interpreta uma string de peso com unidade.

    A string segue o padrão "<valor> <unidade> - <descrição>", com a
    unidade e a descrição opcionais. Vírgula ou ponto servem de separador
    decimal.

    Exemplos:
        "25,5 kg - saco" → (Decimal('25.5'), "KG", "saco")
        "500 G"          → (Decimal('500'), "G", None)
        "12"             → (Decimal('12'), None, None)

    Returns:
        Tupla (numero, unidade, descricao); o que não puder ser
        determinado volta como None.
    """
    if txt is None:
        return None, None, None
    if isinstance(txt, (int, float)) and not isinstance(txt, bool):
        return Decimal(str(txt)), None, None
    s = str(txt).strip()
    if not s:
        return None, None, None
    head, desc = (s.split(" - ", 1) + [""])[:2]
    desc = desc.strip() or None
    m = _NUM_RE.search(head)
    num = Decimal(m.group(0).replace(",", ".")) if m else None
    resto = head[m.end():].strip() if m else head.strip()
    unidade = resto.split()[0].upper() if resto else None
    return num, unidade, desc


def parse_peso_kg(txt: Any) -> Optional[Decimal]:
    """Peso em kg a partir de texto livre; unidade ausente é tomada como kg.

    Raises:
        ValidationError: unidade desconhecida.
    """
    num, unidade, _ = parse_peso_raw(txt)
    if num is None:
        return None
    if unidade is None:
        return num
    fator = _UNIDADES_PESO.get(unidade)
    if fator is None:
        raise ValidationError(f"Unidade de peso desconhecida: {unidade}", valor=txt)
    return num * fator


def parse_lado(val: Any) -> int:
    """Lado como número: aceita 'B', 'b', 2, '2' ou 2.0."""
    if isinstance(val, bool):
        raise ValidationError(f"Lado inválido: {val!r}", lado=val)
    if isinstance(val, (int, float)):
        if float(val).is_integer() and val > 0:
            return int(val)
        raise ValidationError(f"Lado inválido: {val!r}", lado=val)
    s = str(val or "").strip()
    if s.isdigit() and int(s) > 0:
        return int(s)
    return letra_para_lado(s)


def parse_localizacao(txt: Any) -> Coordenada:
    """Coordenada a partir de um código ``Q1-LB-F3-A2`` (espaços ignorados)."""
    return parse_codigo(re.sub(r"\s+", "", str(txt or "")))
