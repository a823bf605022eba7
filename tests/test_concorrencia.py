"""
Operações concorrentes sobre o mesmo banco (arquivo SQLite, uma conexão
por operação).
"""

import threading

from conftest import ADMIN, OPERADOR, cadastrar, cadastrar_locado, loc, localizacoes
from sementes.domain.errors import (
    ConflictError,
    InvalidStateTransitionError,
    LocationOccupiedError,
)
from sementes.domain.models import StatusProduto, StatusRetirada
from sementes.infra.db import connect
from sementes.infra.repositories import SolicitacaoRepo
from sementes.usecases.movimentar_produto import obter_produto, run_localizar
from sementes.usecases.retiradas import run_solicitar_retirada


def _em_paralelo(*chamadas):
    barreira = threading.Barrier(len(chamadas))
    resultados = [None] * len(chamadas)

    def alvo(i, fn):
        barreira.wait()
        try:
            resultados[i] = fn()
        except Exception as e:  # resultado da thread é o próprio erro
            resultados[i] = e

    threads = [threading.Thread(target=alvo, args=(i, fn)) for i, fn in enumerate(chamadas)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return resultados


def test_duas_localizacoes_simultaneas_na_mesma_posicao(db, camara):
    alvo = localizacoes(db, camara.id)[0]
    p1 = cadastrar(db, lote="L1")
    p2 = cadastrar(db, lote="L2")

    resultados = _em_paralelo(
        lambda: run_localizar(p1.id, alvo.id, OPERADOR, db_path=db),
        lambda: run_localizar(p2.id, alvo.id, OPERADOR, db_path=db),
    )

    sucessos = [r for r in resultados if isinstance(r, dict)]
    erros = [r for r in resultados if isinstance(r, Exception)]
    assert len(sucessos) == 1
    assert len(erros) == 1 and isinstance(erros[0], LocationOccupiedError)

    vencedor = sucessos[0]["produto"]
    perdedor = p2 if vencedor.id == p1.id else p1
    assert loc(db, alvo.id).produto_id == vencedor.id
    assert obter_produto(vencedor.id, db).status == StatusProduto.LOCADO
    assert obter_produto(perdedor.id, db).status == StatusProduto.AGUARDANDO_LOCACAO


def test_duas_solicitacoes_simultaneas(db, camara):
    a = localizacoes(db, camara.id)[0]
    p = cadastrar_locado(db, a.id)

    resultados = _em_paralelo(
        lambda: run_solicitar_retirada(p.id, "TOTAL", ADMIN, db_path=db),
        lambda: run_solicitar_retirada(p.id, "PARCIAL", ADMIN, quantidade=2, db_path=db),
    )

    sucessos = [r for r in resultados if isinstance(r, dict)]
    erros = [r for r in resultados if isinstance(r, Exception)]
    assert len(sucessos) == 1
    assert len(erros) == 1
    assert isinstance(erros[0], (InvalidStateTransitionError, ConflictError))

    with connect(db) as c:
        pendentes = SolicitacaoRepo(c).listar(status=StatusRetirada.PENDENTE)
    assert len(pendentes) == 1
