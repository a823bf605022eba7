"""
Reconstrução do estado de um produto a partir do seu histórico de
movimentações.

O livro de movimentações é a trilha de auditoria: aplicando os registros
de um produto em ordem chega-se ao mesmo status, localização principal,
quantidade e distribuição por localização que estão gravados no banco.
As regras de consumo espelham as de ``usecases.movimentar_produto``:

- saídas consomem primeiro a localização principal e depois as demais na
  ordem em que foram alocadas;
- quando a principal se esgota, a alocação mais antiga restante assume.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from sementes.domain.models import Movimentacao, StatusProduto, TipoMovimentacao


@dataclass
class EstadoReconstruido:
    status: Optional[StatusProduto] = None
    localizacao_id: Optional[int] = None
    quantidade: int = 0
    alocacoes: Dict[int, int] = field(default_factory=dict)


def _retirar(estado: EstadoReconstruido, localizacao_id: int, qtd: int) -> None:
    restante = estado.alocacoes.get(localizacao_id, 0) - qtd
    if restante > 0:
        estado.alocacoes[localizacao_id] = restante
    else:
        estado.alocacoes.pop(localizacao_id, None)


def _ajustar_principal(estado: EstadoReconstruido) -> None:
    if estado.localizacao_id not in estado.alocacoes:
        estado.localizacao_id = next(iter(estado.alocacoes), None)


def _consumir(estado: EstadoReconstruido, qtd: int) -> None:
    ordem = [estado.localizacao_id] + [k for k in estado.alocacoes if k != estado.localizacao_id]
    for loc in ordem:
        if qtd <= 0:
            break
        disponivel = estado.alocacoes.get(loc, 0)
        tirar = min(disponivel, qtd)
        _retirar(estado, loc, tirar)
        qtd -= tirar


def aplicar(estado: EstadoReconstruido, mov: Movimentacao) -> EstadoReconstruido:
    """Aplica uma movimentação ao estado (mutando e retornando ``estado``)."""
    tipo = TipoMovimentacao(mov.tipo)
    if tipo == TipoMovimentacao.ENTRY:
        estado.alocacoes = {mov.destino_id: mov.quantidade}
        estado.localizacao_id = mov.destino_id
        estado.quantidade = mov.quantidade
    elif tipo == TipoMovimentacao.TRANSFER:
        estado.alocacoes = {mov.destino_id: estado.quantidade}
        estado.localizacao_id = mov.destino_id
    elif tipo == TipoMovimentacao.PARTIAL_TRANSFER:
        _retirar(estado, mov.origem_id, mov.quantidade)
        estado.alocacoes[mov.destino_id] = estado.alocacoes.get(mov.destino_id, 0) + mov.quantidade
        _ajustar_principal(estado)
    elif tipo == TipoMovimentacao.STOCK_ADD:
        estado.alocacoes[mov.destino_id] = estado.alocacoes.get(mov.destino_id, 0) + mov.quantidade
        estado.quantidade += mov.quantidade
    elif tipo == TipoMovimentacao.EXIT:
        if mov.quantidade >= estado.quantidade:
            estado.alocacoes = {}
        else:
            _consumir(estado, mov.quantidade)
        estado.quantidade -= mov.quantidade
        _ajustar_principal(estado)
    estado.status = StatusProduto(mov.status_resultante)
    return estado


def reconstruir_estado(movimentacoes: Iterable[Movimentacao]) -> EstadoReconstruido:
    """Reaplica as movimentações (já em ordem cronológica) de um produto."""
    estado = EstadoReconstruido()
    for mov in movimentacoes:
        aplicar(estado, mov)
    return estado
