"""
Políticas de classificação do sistema de armazenagem.

Este módulo contém funções que encapsulam regras de negócio de
classificação: estado de capacidade de uma localização, nível de acesso
por andar, status de validade de um lote e urgência de uma solicitação
de retirada. As funções são utilizadas pelos relatórios e pela geração
de localizações.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

from sementes.domain.formulas import percentual_ocupacao


def status_capacidade(peso_atual_g: int, capacidade_g: int) -> str:
    """Classifica o uso de capacidade de uma localização.

    Regras:
        - 0% → ``'empty'``
        - abaixo de 50% → ``'low'``
        - abaixo de 80% → ``'medium'``
        - abaixo de 100% → ``'high'``
        - 100% → ``'full'``
    """
    pct = percentual_ocupacao(peso_atual_g, capacidade_g)
    if pct == 0:
        return "empty"
    if pct < 50:
        return "low"
    if pct < 80:
        return "medium"
    if pct < 100:
        return "high"
    return "full"


def nivel_acesso(andar: int) -> str:
    """Nível de acesso pelo andar: até 2 térreo, até 5 elevado, acima alto."""
    if andar <= 2:
        return "ground"
    if andar <= 5:
        return "elevated"
    return "high"


def _to_date(val: Union[str, date, datetime, None]) -> Optional[date]:
    if val is None:
        return None
    if isinstance(val, datetime):
        return val.date()
    if isinstance(val, date):
        return val
    s = str(val).strip()
    if not s:
        return None
    return date.fromisoformat(s[:10])


def status_validade(data_validade: Union[str, date, None], hoje: Optional[date] = None) -> str:
    """Classifica um lote pela data de validade.

    Regras:
        - sem data → ``'no-expiration'``
        - vencido → ``'expired'``
        - até 7 dias → ``'critical'``
        - até 30 dias → ``'warning'``
        - demais → ``'good'``
    """
    d = _to_date(data_validade)
    if d is None:
        return "no-expiration"
    dias = (d - (hoje or date.today())).days
    if dias < 0:
        return "expired"
    if dias <= 7:
        return "critical"
    if dias <= 30:
        return "warning"
    return "good"


def dias_entre(inicio: Union[str, datetime], fim: Union[str, datetime, None] = None) -> int:
    """Dias completos entre dois instantes ISO (``fim`` padrão: agora)."""
    ini = inicio if isinstance(inicio, datetime) else datetime.fromisoformat(str(inicio))
    end = fim if isinstance(fim, datetime) else (datetime.fromisoformat(str(fim)) if fim else datetime.now())
    return max(0, (end - ini).days)


def urgencia_retirada(status: str, solicitado_em: str, agora: Optional[datetime] = None) -> str:
    """Urgência de uma solicitação: ``resolved`` | ``normal`` | ``urgent`` | ``overdue``."""
    if status != "PENDENTE":
        return "resolved"
    dias = dias_entre(solicitado_em, agora)
    if dias > 7:
        return "overdue"
    if dias > 3:
        return "urgent"
    return "normal"
