# sementes/usecases/retiradas.py
"""
UC: Fluxo de retirada (ADMIN solicita, OPERATOR confirma).
- run_solicitar_retirada(): LOCADO → AGUARDANDO_RETIRADA; cria a solicitação PENDENTE.
- run_confirmar_retirada(): TOTAL → RETIRADO; PARCIAL → LOCADO com quantidade reduzida.
- run_cancelar_retirada():  AGUARDANDO_RETIRADA → LOCADO, sem mexer no estoque.
- listar_pendentes() / listar_por_produto(): consultas com urgência e tempo de espera.

Obs.:
- No máximo uma solicitação PENDENTE por produto (índice único parcial);
  quem perde a corrida recebe ``ConflictError``.
- A solicitação guarda em ``dados_originais`` um retrato do produto no
  momento do pedido.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from sementes.config import DB_PATH
from sementes.domain.errors import ValidationError
from sementes.domain.fsm import Evento, autorizar, transicionar, transicionar_retirada
from sementes.domain.models import (
    Ator,
    SolicitacaoRetirada,
    StatusRetirada,
    TipoRetirada,
)
from sementes.domain.policies import dias_entre, urgencia_retirada
from sementes.infra.db import connect, transaction
from sementes.infra.logger import (
    log_movimentacao, log_retirada, log_system_event, log_transaction,
)
from sementes.infra.repositories import (
    LocalizacaoRepo,
    ProdutoRepo,
    SolicitacaoRepo,
    agora_iso,
)
from sementes.usecases.movimentar_produto import saida_em_transacao, validar_quantidade


def run_solicitar_retirada(
    produto_id: int,
    tipo: Any,
    ator: Ator,
    quantidade: Any = None,
    motivo: Optional[str] = None,
    observacoes: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """
    Abre uma solicitação de retirada.

    Args:
        produto_id: produto LOCADO
        tipo: TOTAL ou PARCIAL
        ator: ADMIN
        quantidade: obrigatória para PARCIAL (0 < quantidade < total)
        motivo: motivo informado pelo solicitante

    Returns:
        ``{"produto", "solicitacao", "movimentacao": None}``
    """
    dados = {"produto_id": produto_id, "tipo": str(tipo), "quantidade": quantidade, "ator": ator.id}
    try:
        autorizar(ator, Evento.SOLICITAR_RETIRADA)
        try:
            tipo_ret = TipoRetirada(str(getattr(tipo, "value", tipo)).upper())
        except ValueError:
            raise ValidationError(f"Tipo de retirada inválido: {tipo!r}", tipo=tipo) from None

        with transaction(db_path) as conn:
            produtos = ProdutoRepo(conn)
            produto = produtos.get(produto_id)
            novo = transicionar(produto.status, Evento.SOLICITAR_RETIRADA)

            qtd = None
            if tipo_ret == TipoRetirada.PARCIAL:
                if quantidade is None:
                    raise ValidationError("Quantidade é obrigatória para retirada parcial")
                qtd = validar_quantidade(quantidade)
                if qtd >= produto.quantidade:
                    raise ValidationError(
                        f"Retirada parcial exige quantidade menor que o total ({produto.quantidade})",
                        quantidade=qtd,
                        total=produto.quantidade,
                    )

            loc = LocalizacaoRepo(conn).get(produto.localizacao_id)
            sol = SolicitacaoRepo(conn).insert(
                SolicitacaoRetirada(
                    produto_id=produto.id,
                    tipo=tipo_ret,
                    solicitado_por=ator.id,
                    quantidade_solicitada=qtd,
                    motivo=motivo,
                    observacoes=observacoes,
                    dados_originais={
                        "nome": produto.nome,
                        "lote": produto.lote,
                        "quantidade": produto.quantidade,
                        "peso_total_kg": produto.peso_total_kg,
                        "localizacao": loc.codigo,
                    },
                )
            )
            produto.status = novo
            produtos.atualizar(produto)

        log_retirada("solicitar", sol.id, produto.id, ator.id, tipo=tipo_ret.value, quantidade=qtd)
        log_transaction("solicitar_retirada", dados, result={"solicitacao_id": sol.id})
        return {"produto": produto, "solicitacao": sol, "movimentacao": None}
    except Exception as e:
        log_transaction("solicitar_retirada", dados, error=str(e))
        log_system_event("solicitar_retirada_error", {"error": str(e)}, level="error")
        raise


def run_confirmar_retirada(
    solicitacao_id: int,
    ator: Ator,
    observacoes: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """Operador confirma a retirada física do material."""
    dados = {"solicitacao_id": solicitacao_id, "ator": ator.id}
    try:
        with transaction(db_path) as conn:
            solicitacoes = SolicitacaoRepo(conn)
            sol = solicitacoes.get(solicitacao_id)
            total = sol.tipo == TipoRetirada.TOTAL
            autorizar(ator, Evento.CONFIRMAR_RETIRADA_TOTAL if total else Evento.CONFIRMAR_RETIRADA_PARCIAL)
            sol.status = transicionar_retirada(sol.status, "confirmar")

            produto = ProdutoRepo(conn).get(sol.produto_id)
            quantidade = produto.quantidade if total else sol.quantidade_solicitada
            result = saida_em_transacao(
                conn, produto, quantidade, ator,
                sol.motivo or f"Retirada {sol.tipo.value.lower()} confirmada",
                Evento.CONFIRMAR_RETIRADA_PARCIAL, Evento.CONFIRMAR_RETIRADA_TOTAL,
            )
            sol.confirmado_por = ator.id
            sol.confirmado_em = agora_iso()
            if observacoes:
                sol.observacoes = observacoes
            solicitacoes.resolver(sol)

        mov = result["movimentacao"]
        log_movimentacao(mov.tipo.value, mov.produto_id, mov.quantidade, mov.ator_id,
                         origem=mov.origem_id, peso_kg=mov.peso_kg, solicitacao_id=sol.id)
        log_retirada("confirmar", sol.id, produto.id, ator.id, tipo=sol.tipo.value, quantidade=quantidade)
        log_transaction("confirmar_retirada", dados, result={"status_produto": produto.status.value})
        result["solicitacao"] = sol
        return result
    except Exception as e:
        log_transaction("confirmar_retirada", dados, error=str(e))
        log_system_event("confirmar_retirada_error", {"error": str(e)}, level="error")
        raise


def run_cancelar_retirada(
    solicitacao_id: int,
    ator: Ator,
    motivo: Optional[str] = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """Admin cancela a solicitação; o produto volta a LOCADO sem movimentação."""
    dados = {"solicitacao_id": solicitacao_id, "ator": ator.id}
    try:
        autorizar(ator, Evento.CANCELAR_RETIRADA)
        with transaction(db_path) as conn:
            solicitacoes = SolicitacaoRepo(conn)
            produtos = ProdutoRepo(conn)
            sol = solicitacoes.get(solicitacao_id)
            sol.status = transicionar_retirada(sol.status, "cancelar")
            produto = produtos.get(sol.produto_id)
            produto.status = transicionar(produto.status, Evento.CANCELAR_RETIRADA)
            produtos.atualizar(produto)
            sol.cancelado_por = ator.id
            sol.cancelado_em = agora_iso()
            if motivo:
                sol.observacoes = motivo
            solicitacoes.resolver(sol)

        log_retirada("cancelar", sol.id, produto.id, ator.id, motivo=motivo)
        log_transaction("cancelar_retirada", dados, result={"status_produto": produto.status.value})
        return {"produto": produto, "solicitacao": sol, "movimentacao": None}
    except Exception as e:
        log_transaction("cancelar_retirada", dados, error=str(e))
        log_system_event("cancelar_retirada_error", {"error": str(e)}, level="error")
        raise


# ----------------------
# consultas
# ----------------------

def _com_urgencia(sols: List[SolicitacaoRetirada], agora: Optional[datetime] = None) -> List[Dict[str, Any]]:
    out: List[Dict[str, Any]] = []
    for s in sols:
        fim = s.confirmado_em or s.cancelado_em
        out.append({
            "solicitacao": s,
            "urgencia": urgencia_retirada(s.status.value, s.solicitado_em, agora),
            "dias_espera": dias_entre(s.solicitado_em, fim or agora),
        })
    return out


def listar_pendentes(db_path: str = DB_PATH, agora: Optional[datetime] = None) -> List[Dict[str, Any]]:
    """Solicitações PENDENTE, mais antigas primeiro, com urgência e dias de espera."""
    with connect(db_path) as conn:
        sols = SolicitacaoRepo(conn).listar(status=StatusRetirada.PENDENTE)
    return _com_urgencia(sols, agora)


def listar_por_produto(produto_id: int, db_path: str = DB_PATH, agora: Optional[datetime] = None) -> List[Dict[str, Any]]:
    with connect(db_path) as conn:
        sols = SolicitacaoRepo(conn).listar(produto_id=produto_id)
    return _com_urgencia(sols, agora)
