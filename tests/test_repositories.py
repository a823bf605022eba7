import pytest

from conftest import cadastrar
from sementes.domain.errors import ConflictError, InfrastructureError, NotFoundError
from sementes.infra.db import connect, transaction
from sementes.infra.migrations import apply_migrations
from sementes.infra.repositories import ProdutoRepo


def test_migracoes_idempotentes(db):
    assert apply_migrations(db) == 2
    with connect(db) as c:
        tabelas = {r[0] for r in c.execute("SELECT name FROM sqlite_master WHERE type = 'table'")}
        triggers = {r[0] for r in c.execute("SELECT name FROM sqlite_master WHERE type = 'trigger'")}
    assert {"camara", "localizacao", "produto", "alocacao", "movimentacao", "solicitacao_retirada"} <= tabelas
    assert {"trg_movimentacao_sem_update", "trg_movimentacao_sem_delete"} <= triggers


def test_versao_desatualizada_gera_conflito(db):
    p = cadastrar(db)
    with connect(db) as c:
        copia = ProdutoRepo(c).get(p.id)

    with transaction(db) as c:
        atual = ProdutoRepo(c).get(p.id)
        atual.observacoes = "primeira escrita"
        ProdutoRepo(c).atualizar(atual)
    assert atual.versao == 1

    copia.observacoes = "escrita atrasada"
    with pytest.raises(ConflictError):
        with transaction(db) as c:
            ProdutoRepo(c).atualizar(copia)

    with connect(db) as c:
        gravado = ProdutoRepo(c).get(p.id)
    assert gravado.observacoes == "primeira escrita"
    assert gravado.versao == 1


def test_rollback_em_erro_de_negocio(db):
    p = cadastrar(db)
    with pytest.raises(NotFoundError):
        with transaction(db) as c:
            repo = ProdutoRepo(c)
            produto = repo.get(p.id)
            produto.nome = "alterado"
            repo.atualizar(produto)
            repo.get(999)
    with connect(db) as c:
        assert ProdutoRepo(c).get(p.id).nome == "Soja"


def test_erro_de_banco_vira_infraestrutura(tmp_path):
    with pytest.raises(InfrastructureError):
        with transaction(str(tmp_path / "novo.sqlite")) as c:
            c.execute("SELECT * FROM tabela_inexistente")
