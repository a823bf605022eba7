from datetime import date

import pytest

from conftest import ADMIN, OPERADOR, cadastrar, cadastrar_locado, loc, localizacoes
from sementes.domain.errors import (
    CapacityExceededError,
    InvalidStateTransitionError,
    LocationOccupiedError,
    NotFoundError,
    UnauthorizedTransitionError,
    ValidationError,
)
from sementes.domain.models import Dimensoes, StatusProduto, TipoMovimentacao
from sementes.infra.db import connect
from sementes.infra.repositories import AlocacaoRepo, MovimentacaoRepo
from sementes.usecases.gerar_localizacoes import run_criar_camara
from sementes.usecases.movimentar_produto import (
    obter_produto,
    run_adicionar_estoque,
    run_cadastrar_produto,
    run_concluir_cadastro,
    run_localizar,
    run_localizar_automatico,
    run_mover,
    run_mover_parcial,
    run_remover,
    run_saida_parcial,
    run_saida_total,
)


def _movs(db, produto_id):
    with connect(db) as c:
        return MovimentacaoRepo(c).find_by_produto(produto_id)


def _alocs(db, produto_id):
    with connect(db) as c:
        return {a.localizacao_id: a.quantidade for a in AlocacaoRepo(c).listar_por_produto(produto_id)}


# ----------------------
# cadastro
# ----------------------

def test_cadastro_aguardando_locacao(db):
    p = cadastrar(db, quantidade=10, peso="50,5")
    assert p.id is not None
    assert p.status == StatusProduto.AGUARDANDO_LOCACAO
    assert p.peso_total_kg == 505.0
    assert p.localizacao_id is None
    assert _movs(db, p.id) == []


def test_cadastro_rascunho_e_conclusao(db):
    p = run_cadastrar_produto("Milho", "M1", 5, 20, ADMIN, status_inicial=StatusProduto.CADASTRADO, db_path=db)["produto"]
    assert p.status == StatusProduto.CADASTRADO
    with pytest.raises(InvalidStateTransitionError):
        run_localizar(p.id, 1, OPERADOR, db_path=db)
    p = run_concluir_cadastro(p.id, ADMIN, db_path=db)["produto"]
    assert p.status == StatusProduto.AGUARDANDO_LOCACAO


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(quantidade=0),
        dict(quantidade=-3),
        dict(quantidade=2.5),
        dict(quantidade=10**19),
        dict(quantidade=1000001, peso="0,001"),
        dict(peso=0),
        dict(peso=1001),
        dict(peso="abc"),
        dict(nome=""),
        dict(tipo_armazenamento="caixa"),
        dict(data_validade="31/12/2020"),
        dict(data_validade="2020-02-30"),
    ],
)
def test_cadastro_invalido(db, kwargs):
    with pytest.raises(ValidationError):
        cadastrar(db, **kwargs)


def test_cadastro_normaliza_validade(db):
    assert cadastrar(db, data_validade=" 2026-03-01 ").data_validade == "2026-03-01"
    assert cadastrar(db, lote="L2", data_validade=date(2026, 4, 15)).data_validade == "2026-04-15"
    assert cadastrar(db, lote="L3", data_validade="").data_validade is None


def test_cadastro_em_status_invalido(db):
    with pytest.raises(ValidationError):
        run_cadastrar_produto("Soja", "L1", 1, 1, ADMIN, status_inicial=StatusProduto.LOCADO, db_path=db)


def test_operador_nao_cadastra(db):
    with pytest.raises(UnauthorizedTransitionError):
        run_cadastrar_produto("Soja", "L1", 1, 1, OPERADOR, db_path=db)


def test_produto_inexistente(db):
    with pytest.raises(NotFoundError):
        run_localizar(42, 1, OPERADOR, db_path=db)


# ----------------------
# localizar
# ----------------------

def test_localizar(db, camara):
    a = localizacoes(db, camara.id)[0]
    p = cadastrar_locado(db, a.id)
    assert p.status == StatusProduto.LOCADO
    assert p.localizacao_id == a.id
    a = loc(db, a.id)
    assert a.ocupada and a.produto_id == p.id and a.peso_atual_kg == 500.0
    (mov,) = _movs(db, p.id)
    assert mov.tipo == TipoMovimentacao.ENTRY
    assert mov.destino_id == a.id and mov.quantidade == 10 and mov.peso_kg == 500.0
    assert mov.status_resultante == StatusProduto.LOCADO


def test_admin_nao_localiza(db, camara):
    p = cadastrar(db)
    with pytest.raises(UnauthorizedTransitionError):
        run_localizar(p.id, localizacoes(db, camara.id)[0].id, ADMIN, db_path=db)


def test_localizar_automatico_pula_ocupadas_e_pequenas(db, camara):
    locs = localizacoes(db, camara.id)
    cadastrar_locado(db, locs[0].id)
    p = cadastrar(db, lote="L2", quantidade=4, peso=100)
    res = run_localizar_automatico(p.id, OPERADOR, db_path=db)
    assert res["produto"].localizacao_id == locs[1].id
    assert res["movimentacao"].motivo == "Localização automática"


def test_localizar_automatico_sem_espaco(db, camara):
    p = cadastrar(db, quantidade=30, peso=50)
    with pytest.raises(NotFoundError):
        run_localizar_automatico(p.id, OPERADOR, db_path=db)
    assert obter_produto(p.id, db).status == StatusProduto.AGUARDANDO_LOCACAO


@pytest.mark.parametrize("tentativas", [0, -1, 2.5])
def test_localizar_automatico_tentativas_invalidas(db, camara, tentativas):
    p = cadastrar(db)
    with pytest.raises(ValidationError):
        run_localizar_automatico(p.id, OPERADOR, tentativas=tentativas, db_path=db)
    assert obter_produto(p.id, db).status == StatusProduto.AGUARDANDO_LOCACAO


def test_localizar_automatico_respeita_tentativas(db, camara):
    p = cadastrar(db)
    res = run_localizar_automatico(p.id, OPERADOR, tentativas=1, db_path=db)
    assert res["produto"].localizacao_id == localizacoes(db, camara.id)[0].id


# ----------------------
# movimentação parcial e total
# ----------------------

def test_movimentacao_parcial_divide_o_peso(db, camara):
    a, b = localizacoes(db, camara.id)[:2]
    p = cadastrar_locado(db, a.id, quantidade=10, peso=50)

    res = run_mover_parcial(p.id, 4, b.id, OPERADOR, db_path=db)

    assert loc(db, a.id).peso_atual_kg == 300.0
    assert loc(db, b.id).peso_atual_kg == 200.0
    assert loc(db, b.id).produto_id == p.id
    produto = res["produto"]
    assert produto.quantidade == 10
    assert produto.status == StatusProduto.LOCADO
    assert produto.localizacao_id == a.id
    assert _alocs(db, p.id) == {a.id: 6, b.id: 4}

    movs = _movs(db, p.id)
    assert [m.tipo for m in movs] == [TipoMovimentacao.ENTRY, TipoMovimentacao.PARTIAL_TRANSFER]
    assert (movs[1].origem_id, movs[1].destino_id, movs[1].quantidade) == (a.id, b.id, 4)


def test_conservacao_de_peso_na_parcial(db, camara):
    a, b = localizacoes(db, camara.id)[:2]
    p = cadastrar_locado(db, a.id, quantidade=7, peso="0,333")
    antes_a, antes_b = loc(db, a.id).peso_atual_g, loc(db, b.id).peso_atual_g
    run_mover_parcial(p.id, 3, b.id, OPERADOR, db_path=db)
    depois_a, depois_b = loc(db, a.id).peso_atual_g, loc(db, b.id).peso_atual_g
    assert antes_a - depois_a == 3 * 333 == depois_b - antes_b


def test_parcial_para_localizacao_propria_soma(db, camara):
    a, b = localizacoes(db, camara.id)[:2]
    p = cadastrar_locado(db, a.id)
    run_mover_parcial(p.id, 2, b.id, OPERADOR, db_path=db)
    run_mover_parcial(p.id, 3, b.id, OPERADOR, db_path=db)
    assert _alocs(db, p.id) == {a.id: 5, b.id: 5}
    assert loc(db, b.id).peso_atual_kg == 250.0


def test_parcial_esvaziando_a_origem_libera_e_troca_principal(db, camara):
    a, b, c = localizacoes(db, camara.id)[:3]
    p = cadastrar_locado(db, a.id)
    run_mover_parcial(p.id, 4, b.id, OPERADOR, db_path=db)
    run_mover_parcial(p.id, 6, c.id, OPERADOR, origem_id=a.id, db_path=db)
    produto = obter_produto(p.id, db)
    assert not loc(db, a.id).ocupada
    assert produto.localizacao_id == b.id
    assert _alocs(db, p.id) == {b.id: 4, c.id: 6}


@pytest.mark.parametrize("qtd", [0, 10, 11])
def test_parcial_quantidade_invalida(db, camara, qtd):
    a, b = localizacoes(db, camara.id)[:2]
    p = cadastrar_locado(db, a.id)
    with pytest.raises(ValidationError):
        run_mover_parcial(p.id, qtd, b.id, OPERADOR, db_path=db)
    assert len(_movs(db, p.id)) == 1


def test_parcial_para_localizacao_de_outro_produto(db, camara):
    a, b = localizacoes(db, camara.id)[:2]
    p = cadastrar_locado(db, a.id)
    cadastrar_locado(db, b.id, lote="L2")
    with pytest.raises(LocationOccupiedError):
        run_mover_parcial(p.id, 2, b.id, OPERADOR, db_path=db)
    assert loc(db, a.id).peso_atual_kg == 500.0
    assert _alocs(db, p.id) == {a.id: 10}


def test_parcial_sem_capacidade_no_destino(db, camara):
    a = localizacoes(db, camara.id)[0]
    pequena = run_criar_camara("C2", Dimensoes(1, 1, 1, 1), ADMIN, capacidade_kg=100, db_path=db)["camara"]
    destino = localizacoes(db, pequena.id)[0]
    p = cadastrar_locado(db, a.id)
    with pytest.raises(CapacityExceededError):
        run_mover_parcial(p.id, 4, destino.id, OPERADOR, db_path=db)
    assert not loc(db, destino.id).ocupada
    assert loc(db, a.id).peso_atual_kg == 500.0
    assert len(_movs(db, p.id)) == 1


def test_mover_consolida(db, camara):
    a, b, c = localizacoes(db, camara.id)[:3]
    p = cadastrar_locado(db, a.id)
    run_mover_parcial(p.id, 4, b.id, OPERADOR, db_path=db)
    res = run_mover(p.id, c.id, OPERADOR, "reorganização", db_path=db)
    assert res["produto"].localizacao_id == c.id
    assert not loc(db, a.id).ocupada and not loc(db, b.id).ocupada
    assert loc(db, c.id).peso_atual_kg == 500.0
    assert _alocs(db, p.id) == {c.id: 10}
    mov = res["movimentacao"]
    assert (mov.tipo, mov.origem_id, mov.destino_id, mov.quantidade) == (TipoMovimentacao.TRANSFER, a.id, c.id, 10)


def test_mover_para_alocacao_propria(db, camara):
    a, b = localizacoes(db, camara.id)[:2]
    p = cadastrar_locado(db, a.id)
    run_mover_parcial(p.id, 4, b.id, OPERADOR, db_path=db)
    run_mover(p.id, b.id, OPERADOR, db_path=db)
    assert not loc(db, a.id).ocupada
    assert loc(db, b.id).peso_atual_kg == 500.0
    assert obter_produto(p.id, db).localizacao_id == b.id
    with pytest.raises(ValidationError):
        run_mover(p.id, b.id, OPERADOR, db_path=db)


def test_mover_para_ocupada(db, camara):
    a, b = localizacoes(db, camara.id)[:2]
    p = cadastrar_locado(db, a.id)
    cadastrar_locado(db, b.id, lote="L2")
    with pytest.raises(LocationOccupiedError):
        run_mover(p.id, b.id, OPERADOR, db_path=db)
    assert loc(db, a.id).produto_id == p.id


# ----------------------
# estoque e saídas
# ----------------------

def test_adicionar_estoque(db, camara):
    a = localizacoes(db, camara.id)[0]
    p = cadastrar_locado(db, a.id)
    res = run_adicionar_estoque(p.id, 5, ADMIN, db_path=db)
    assert res["produto"].quantidade == 15
    assert loc(db, a.id).peso_atual_kg == 750.0
    assert res["movimentacao"].tipo == TipoMovimentacao.STOCK_ADD
    with pytest.raises(CapacityExceededError):
        run_adicionar_estoque(p.id, 6, ADMIN, db_path=db)
    assert obter_produto(p.id, db).quantidade == 15
    with pytest.raises(UnauthorizedTransitionError):
        run_adicionar_estoque(p.id, 1, OPERADOR, db_path=db)


def test_adicionar_estoque_acima_do_maximo(db, camara):
    a = localizacoes(db, camara.id)[0]
    p = cadastrar_locado(db, a.id, quantidade=10, peso="0,001")
    with pytest.raises(ValidationError):
        run_adicionar_estoque(p.id, 10**19, ADMIN, db_path=db)
    with pytest.raises(ValidationError):
        run_adicionar_estoque(p.id, 999991, ADMIN, db_path=db)
    assert obter_produto(p.id, db).quantidade == 10
    assert loc(db, a.id).peso_atual_kg == 0.01
    assert run_adicionar_estoque(p.id, 999990, ADMIN, db_path=db)["produto"].quantidade == 1000000


def test_saida_parcial_consome_principal_primeiro(db, camara):
    a, b = localizacoes(db, camara.id)[:2]
    p = cadastrar_locado(db, a.id)
    run_mover_parcial(p.id, 4, b.id, OPERADOR, db_path=db)

    res = run_saida_parcial(p.id, 8, ADMIN, "venda", db_path=db)
    produto = res["produto"]
    assert produto.quantidade == 2
    assert produto.status == StatusProduto.LOCADO
    assert produto.localizacao_id == b.id
    assert not loc(db, a.id).ocupada
    assert loc(db, b.id).peso_atual_kg == 100.0
    assert _alocs(db, p.id) == {b.id: 2}


def test_saida_de_todo_estoque_remove(db, camara):
    a = localizacoes(db, camara.id)[0]
    p = cadastrar_locado(db, a.id)
    res = run_saida_parcial(p.id, 10, ADMIN, db_path=db)
    assert res["produto"].status == StatusProduto.REMOVIDO
    assert res["produto"].localizacao_id is None
    assert not loc(db, a.id).ocupada
    with pytest.raises(InvalidStateTransitionError):
        run_saida_parcial(p.id, 1, ADMIN, db_path=db)


def test_saida_acima_do_disponivel(db, camara):
    a = localizacoes(db, camara.id)[0]
    p = cadastrar_locado(db, a.id)
    with pytest.raises(ValidationError):
        run_saida_parcial(p.id, 11, ADMIN, db_path=db)
    assert obter_produto(p.id, db).quantidade == 10


def test_saida_total(db, camara):
    a, b = localizacoes(db, camara.id)[:2]
    p = cadastrar_locado(db, a.id)
    run_mover_parcial(p.id, 3, b.id, OPERADOR, db_path=db)
    res = run_saida_total(p.id, ADMIN, db_path=db)
    assert res["produto"].status == StatusProduto.REMOVIDO
    assert res["produto"].quantidade == 0
    assert {l.id for l in res["localizacoes"]} == {a.id, b.id}
    assert res["movimentacao"].quantidade == 10
    assert _alocs(db, p.id) == {}


def test_remover(db, camara):
    a = localizacoes(db, camara.id)[0]
    locado = cadastrar_locado(db, a.id)
    res = run_remover(locado.id, ADMIN, "descarte", db_path=db)
    assert res["produto"].status == StatusProduto.REMOVIDO
    assert res["movimentacao"].tipo == TipoMovimentacao.EXIT
    assert not loc(db, a.id).ocupada

    pendente = cadastrar(db, lote="L2")
    res = run_remover(pendente.id, ADMIN, db_path=db)
    assert res["produto"].status == StatusProduto.REMOVIDO
    assert res["movimentacao"] is None

    with pytest.raises(InvalidStateTransitionError):
        run_remover(pendente.id, ADMIN, db_path=db)


def test_estado_final_nao_muda(db, camara):
    a, b = localizacoes(db, camara.id)[:2]
    p = cadastrar_locado(db, a.id)
    run_remover(p.id, ADMIN, db_path=db)
    antes = obter_produto(p.id, db)
    with pytest.raises(InvalidStateTransitionError):
        run_mover(p.id, b.id, OPERADOR, db_path=db)
    assert obter_produto(p.id, db) == antes
    assert len(_movs(db, p.id)) == 2
