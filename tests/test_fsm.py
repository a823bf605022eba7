import pytest

from sementes.domain.errors import InvalidStateTransitionError, UnauthorizedTransitionError
from sementes.domain.fsm import (
    AUTORIDADE,
    TRANSICOES,
    Evento,
    autorizar,
    transicionar,
    transicionar_retirada,
)
from sementes.domain.models import Ator, Papel, StatusProduto, StatusRetirada

S = StatusProduto


@pytest.mark.parametrize("par,destino", list(TRANSICOES.items()))
def test_transicoes_legais(par, destino):
    status, evento = par
    assert transicionar(status, evento) == destino


def test_toda_transicao_ausente_e_ilegal():
    eventos_de_produto = [e for e in Evento if e not in (Evento.CADASTRAR, Evento.GERAR_LOCALIZACOES, Evento.ATUALIZAR_AMBIENTE)]
    for status in S:
        for evento in eventos_de_produto:
            if (status, evento) in TRANSICOES:
                continue
            with pytest.raises(InvalidStateTransitionError):
                transicionar(status, evento)


@pytest.mark.parametrize("final", [S.RETIRADO, S.REMOVIDO])
def test_estados_finais(final):
    with pytest.raises(InvalidStateTransitionError) as exc:
        transicionar(final, Evento.MOVER)
    assert "estado final" in exc.value.message


def test_tabela_da_maquina():
    assert transicionar(S.LOCADO, Evento.SAIDA_TOTAL) == S.REMOVIDO
    assert transicionar(S.AGUARDANDO_RETIRADA, Evento.CONFIRMAR_RETIRADA_PARCIAL) == S.LOCADO
    assert transicionar(S.AGUARDANDO_RETIRADA, Evento.CONFIRMAR_RETIRADA_TOTAL) == S.RETIRADO
    with pytest.raises(InvalidStateTransitionError):
        transicionar(S.AGUARDANDO_RETIRADA, Evento.MOVER)
    with pytest.raises(InvalidStateTransitionError):
        transicionar(S.CADASTRADO, Evento.LOCALIZAR)


def test_autoridade():
    admin = Ator("a", Papel.ADMIN)
    op = Ator("o", Papel.OPERATOR)
    for evento, papel in AUTORIDADE.items():
        certo, errado = (admin, op) if papel == Papel.ADMIN else (op, admin)
        autorizar(certo, evento)
        with pytest.raises(UnauthorizedTransitionError):
            autorizar(errado, evento)


def test_operador_nao_solicita_retirada():
    with pytest.raises(UnauthorizedTransitionError) as exc:
        autorizar(Ator("o", Papel.OPERATOR), Evento.SOLICITAR_RETIRADA)
    assert exc.value.code == "UNAUTHORIZED"


def test_transicoes_da_retirada():
    assert transicionar_retirada(StatusRetirada.PENDENTE, "confirmar") == StatusRetirada.CONFIRMADO
    assert transicionar_retirada(StatusRetirada.PENDENTE, "cancelar") == StatusRetirada.CANCELADO
    for final in (StatusRetirada.CONFIRMADO, StatusRetirada.CANCELADO):
        for acao in ("confirmar", "cancelar"):
            with pytest.raises(InvalidStateTransitionError):
                transicionar_retirada(final, acao)
