"""
Máquina de estados do produto e da solicitação de retirada.

Uma única tabela de transições é consultada por ``transicionar``; qualquer
par (status, evento) ausente da tabela é ilegal. A tabela de autoridade diz
qual papel pode disparar cada evento.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, FrozenSet, Tuple

from sementes.domain.errors import InvalidStateTransitionError, UnauthorizedTransitionError
from sementes.domain.models import Ator, Papel, StatusProduto, StatusRetirada


class Evento(str, Enum):
    CADASTRAR = "CADASTRAR"
    CONCLUIR_CADASTRO = "CONCLUIR_CADASTRO"
    LOCALIZAR = "LOCALIZAR"
    MOVER = "MOVER"
    MOVER_PARCIAL = "MOVER_PARCIAL"
    ADICIONAR_ESTOQUE = "ADICIONAR_ESTOQUE"
    SAIDA_PARCIAL = "SAIDA_PARCIAL"
    SAIDA_TOTAL = "SAIDA_TOTAL"
    SOLICITAR_RETIRADA = "SOLICITAR_RETIRADA"
    CONFIRMAR_RETIRADA_TOTAL = "CONFIRMAR_RETIRADA_TOTAL"
    CONFIRMAR_RETIRADA_PARCIAL = "CONFIRMAR_RETIRADA_PARCIAL"
    CANCELAR_RETIRADA = "CANCELAR_RETIRADA"
    REMOVER = "REMOVER"
    GERAR_LOCALIZACOES = "GERAR_LOCALIZACOES"
    ATUALIZAR_AMBIENTE = "ATUALIZAR_AMBIENTE"


S = StatusProduto

TRANSICOES: Dict[Tuple[StatusProduto, Evento], StatusProduto] = {
    (S.CADASTRADO, Evento.CONCLUIR_CADASTRO): S.AGUARDANDO_LOCACAO,
    (S.CADASTRADO, Evento.REMOVER): S.REMOVIDO,
    (S.AGUARDANDO_LOCACAO, Evento.REMOVER): S.REMOVIDO,
    (S.AGUARDANDO_LOCACAO, Evento.LOCALIZAR): S.LOCADO,
    (S.LOCADO, Evento.MOVER): S.LOCADO,
    (S.LOCADO, Evento.MOVER_PARCIAL): S.LOCADO,
    (S.LOCADO, Evento.ADICIONAR_ESTOQUE): S.LOCADO,
    (S.LOCADO, Evento.SAIDA_PARCIAL): S.LOCADO,
    (S.LOCADO, Evento.SAIDA_TOTAL): S.REMOVIDO,
    (S.LOCADO, Evento.SOLICITAR_RETIRADA): S.AGUARDANDO_RETIRADA,
    (S.LOCADO, Evento.REMOVER): S.REMOVIDO,
    (S.AGUARDANDO_RETIRADA, Evento.CONFIRMAR_RETIRADA_TOTAL): S.RETIRADO,
    (S.AGUARDANDO_RETIRADA, Evento.CONFIRMAR_RETIRADA_PARCIAL): S.LOCADO,
    (S.AGUARDANDO_RETIRADA, Evento.CANCELAR_RETIRADA): S.LOCADO,
}

ESTADOS_FINAIS: FrozenSet[StatusProduto] = frozenset({S.RETIRADO, S.REMOVIDO})

# status em que o produto referencia uma localização
ESTADOS_COM_LOCALIZACAO: FrozenSet[StatusProduto] = frozenset({S.LOCADO, S.AGUARDANDO_RETIRADA})

AUTORIDADE: Dict[Evento, Papel] = {
    Evento.CADASTRAR: Papel.ADMIN,
    Evento.CONCLUIR_CADASTRO: Papel.ADMIN,
    Evento.LOCALIZAR: Papel.OPERATOR,
    Evento.MOVER: Papel.OPERATOR,
    Evento.MOVER_PARCIAL: Papel.OPERATOR,
    Evento.ADICIONAR_ESTOQUE: Papel.ADMIN,
    Evento.SAIDA_PARCIAL: Papel.ADMIN,
    Evento.SAIDA_TOTAL: Papel.ADMIN,
    Evento.SOLICITAR_RETIRADA: Papel.ADMIN,
    Evento.CONFIRMAR_RETIRADA_TOTAL: Papel.OPERATOR,
    Evento.CONFIRMAR_RETIRADA_PARCIAL: Papel.OPERATOR,
    Evento.CANCELAR_RETIRADA: Papel.ADMIN,
    Evento.REMOVER: Papel.ADMIN,
    Evento.GERAR_LOCALIZACOES: Papel.ADMIN,
    Evento.ATUALIZAR_AMBIENTE: Papel.ADMIN,
}


def transicionar(status: StatusProduto, evento: Evento) -> StatusProduto:
    """Retorna o status de destino ou levanta ``InvalidStateTransitionError``."""
    atual = StatusProduto(status)
    destino = TRANSICOES.get((atual, evento))
    if destino is None:
        if atual in ESTADOS_FINAIS:
            msg = f"Produto em estado final ({atual.value}) não admite {evento.value}"
        else:
            msg = f"Transição {evento.value} não permitida a partir de {atual.value}"
        raise InvalidStateTransitionError(msg, status=atual.value, evento=evento.value)
    return destino


def autorizar(ator: Ator, evento: Evento) -> None:
    """Garante que o papel do ator tem autoridade sobre o evento."""
    exigido = AUTORIDADE[evento]
    papel = getattr(ator.papel, "value", ator.papel)
    if papel != exigido.value:
        raise UnauthorizedTransitionError(
            f"Apenas {exigido.value} pode executar {evento.value}",
            ator=ator.id,
            papel=papel,
            evento=evento.value,
        )


TRANSICOES_RETIRADA: Dict[Tuple[StatusRetirada, str], StatusRetirada] = {
    (StatusRetirada.PENDENTE, "confirmar"): StatusRetirada.CONFIRMADO,
    (StatusRetirada.PENDENTE, "cancelar"): StatusRetirada.CANCELADO,
}


def transicionar_retirada(status: StatusRetirada, acao: str) -> StatusRetirada:
    destino = TRANSICOES_RETIRADA.get((StatusRetirada(status), acao))
    if destino is None:
        raise InvalidStateTransitionError(
            f"Apenas solicitações pendentes podem ser {'confirmadas' if acao == 'confirmar' else 'canceladas'}",
            status=StatusRetirada(status).value,
            acao=acao,
        )
    return destino
