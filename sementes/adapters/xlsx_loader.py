# sementes/adapters/xlsx_loader.py
"""
Loader de planilhas (XLSX) de entrada de lotes de sementes.

Esta função:
- lê a planilha usando pandas;
- normaliza cabeçalhos (acentos, variações, sinônimos);
- retorna uma lista de dicionários com as chaves esperadas pelo caso de
  uso de importação, um por linha, com ``linha`` (número na planilha) e
  ``erros`` (problemas encontrados na própria linha).

Observações:
- Quando a coluna de peso é o total da linha ("kg", "peso total"), o peso
  unitário é ``kg / quantidade``; sem peso informado usa-se 1 kg por unidade.
- Datas são normalizadas para ISO (YYYY-MM-DD) quando possível.
- Coordenadas (quadra, lado, fila, andar) opcionais viram o código
  ``Q{q}-L{lado}-F{f}-A{a}`` sugerido para a localização.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any, Dict, List, Optional

import pandas as pd

from sementes.adapters.parsers import parse_lado, parse_peso_kg
from sementes.domain.coordenadas import gerar_codigo
from sementes.domain.errors import ValidationError
from sementes.domain.models import Coordenada

PESO_PADRAO_POR_UNIDADE_KG = Decimal("1")


# ---------------------------
# utilitários de normalização
# ---------------------------

def _slug(s: str) -> str:
    """Normaliza cabeçalhos: minúsculas, sem acentos, sem não-alfanumérico."""
    if s is None:
        return ""
    s = str(s).strip().lower()
    acentos = dict(zip("áàâãäéèêëíìîïóòôõöúùûüç", "aaaaaeeeeiiiiooooouuuuc"))
    s = "".join(acentos.get(ch, ch) for ch in s)
    s = re.sub(r"[^a-z0-9]+", " ", s)
    return re.sub(r"\s+", " ", s).strip()


def _safe_get(row, key):
    """Valor da linha ou None (trata NA do pandas e strings vazias)."""
    val = row.get(key)
    if val is None or pd.isna(val):
        return None
    if isinstance(val, str) and not val.strip():
        return None
    return val


def _to_date_iso(val: Any) -> Optional[str]:
    """Converte valor para data ISO (YYYY-MM-DD) se possível."""
    if val is None:
        return None
    if isinstance(val, pd.Timestamp):
        return val.date().isoformat()
    s = str(val).strip()
    if not s:
        return None
    iso = re.match(r"^\d{4}-\d{2}-\d{2}", s)
    d = pd.to_datetime(s[:10] if iso else s, dayfirst=not iso, errors="coerce")
    if pd.isna(d):
        return None
    return d.date().isoformat()


def _to_int(val: Any) -> Optional[int]:
    if val is None:
        return None
    try:
        f = float(str(val).strip().replace(",", "."))
    except ValueError:
        return None
    return int(f) if f.is_integer() else None


_ALIASES = {
    "produto": "nome",
    "nome": "nome",
    "nome do produto": "nome",
    "semente": "nome",

    "lote": "lote",
    "numero do lote": "lote",

    "quantidade": "quantidade",
    "qtd": "quantidade",
    "qtde": "quantidade",
    "unidades": "quantidade",

    "peso unitario": "peso_unitario",
    "peso por unidade": "peso_unitario",
    "peso unitario kg": "peso_unitario",
    "kg por unidade": "peso_unitario",

    "kg": "peso_total",
    "peso": "peso_total",
    "peso total": "peso_total",
    "peso kg": "peso_total",
    "peso total kg": "peso_total",

    "tipo de semente": "tipo_semente_id",
    "tipo semente": "tipo_semente_id",
    "cultura": "tipo_semente_id",

    "cliente": "cliente_id",

    "validade": "data_validade",
    "data validade": "data_validade",
    "data de validade": "data_validade",
    "vencimento": "data_validade",

    "armazenamento": "tipo_armazenamento",
    "tipo de armazenamento": "tipo_armazenamento",
    "embalagem": "tipo_armazenamento",

    "observacoes": "observacoes",
    "obs": "observacoes",

    "quadra": "quadra",
    "lado": "lado",
    "fila": "fila",
    "andar": "andar",
}


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Renomeia colunas com base em sinônimos/variações."""
    return df.rename(columns={col: _ALIASES.get(_slug(col), _slug(col)) for col in df.columns})


def _peso_unitario(row, quantidade: Optional[int], erros: List[str]) -> Optional[Decimal]:
    try:
        unitario = parse_peso_kg(_safe_get(row, "peso_unitario"))
        total = parse_peso_kg(_safe_get(row, "peso_total"))
    except ValidationError as e:
        erros.append(e.message)
        return None
    if unitario is not None:
        return unitario
    if total is not None and quantidade:
        return total / quantidade
    return PESO_PADRAO_POR_UNIDADE_KG


def _codigo_localizacao(row, erros: List[str]) -> Optional[str]:
    valores = [_safe_get(row, k) for k in ("quadra", "lado", "fila", "andar")]
    if all(v is None for v in valores):
        return None
    if any(v is None for v in valores):
        erros.append("Coordenadas incompletas (quadra, lado, fila e andar)")
        return None
    try:
        coord = Coordenada(_to_int(valores[0]), parse_lado(valores[1]), _to_int(valores[2]), _to_int(valores[3]))
    except ValidationError as e:
        erros.append(e.message)
        return None
    if None in (coord.quadra, coord.fila, coord.andar):
        erros.append("Coordenadas devem ser números inteiros")
        return None
    return gerar_codigo(coord)


# ---------------------------
# loader público (XLSX)
# ---------------------------

def load_produtos_from_xlsx(path: str) -> List[Dict[str, Any]]:
    """Lê o XLSX de lotes e retorna um registro por linha não vazia.

    Campos de saída (chaves do dict por linha):
      - linha: número da linha na planilha (cabeçalho = 1)
      - nome, lote: str | None
      - quantidade: int | None
      - peso_unitario_kg: Decimal | None
      - tipo_semente_id, cliente_id, observacoes: str | None
      - tipo_armazenamento: 'saco' | 'bag' (padrão 'saco')
      - data_validade: ISO date | None
      - localizacao: código sugerido | None
      - erros: lista de mensagens (vazia quando a linha é válida)
    """
    df = pd.read_excel(path, dtype="string")
    df = _normalize_columns(df)
    out: List[Dict[str, Any]] = []
    for idx, row in df.iterrows():
        if all(_safe_get(row, c) is None for c in df.columns):
            continue
        erros: List[str] = []
        nome = _safe_get(row, "nome")
        lote = _safe_get(row, "lote")
        if nome is None:
            erros.append("Produto sem nome")
        if lote is None:
            erros.append("Produto sem lote")
        quantidade = _to_int(_safe_get(row, "quantidade"))
        if quantidade is None or quantidade < 1:
            erros.append("Quantidade inválida")
        armazenamento = (_safe_get(row, "tipo_armazenamento") or "saco").strip().lower()
        rec = {
            "linha": int(idx) + 2,
            "nome": nome.strip() if nome else None,
            "lote": lote.strip() if lote else None,
            "quantidade": quantidade,
            "peso_unitario_kg": _peso_unitario(row, quantidade, erros),
            "tipo_semente_id": _safe_get(row, "tipo_semente_id"),
            "cliente_id": _safe_get(row, "cliente_id"),
            "tipo_armazenamento": armazenamento,
            "data_validade": _to_date_iso(_safe_get(row, "data_validade")),
            "observacoes": _safe_get(row, "observacoes"),
            "localizacao": _codigo_localizacao(row, erros),
            "erros": erros,
        }
        out.append(rec)
    return out
