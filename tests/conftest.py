from pathlib import Path

import pytest

from sementes.domain.models import Ator, Dimensoes, Papel
from sementes.infra.db import connect
from sementes.infra.migrations import apply_migrations
from sementes.infra.repositories import LocalizacaoRepo
from sementes.usecases.gerar_localizacoes import run_criar_camara
from sementes.usecases.movimentar_produto import run_cadastrar_produto, run_localizar


ADMIN = Ator("admin1", Papel.ADMIN)
OPERADOR = Ator("op1", Papel.OPERATOR)


@pytest.fixture
def admin():
    return ADMIN


@pytest.fixture
def operador():
    return OPERADOR


@pytest.fixture
def db(tmp_path: Path) -> str:
    db_path = str(tmp_path / "sementes_test.sqlite")
    apply_migrations(db_path)
    return db_path


@pytest.fixture
def camara(db):
    """Câmara 1x2x1x2 (4 localizações de 1000 kg)."""
    res = run_criar_camara("C1", Dimensoes(1, 2, 1, 2), ADMIN, capacidade_kg=1000, db_path=db)
    return res["camara"]


def localizacoes(db, camara_id):
    with connect(db) as c:
        return LocalizacaoRepo(c).listar_por_camara(camara_id)


def loc(db, localizacao_id):
    with connect(db) as c:
        return LocalizacaoRepo(c).get(localizacao_id)


def cadastrar(db, quantidade=10, peso=50, nome="Soja", lote="L1", **kw):
    return run_cadastrar_produto(nome, lote, quantidade, peso, ADMIN, db_path=db, **kw)["produto"]


def cadastrar_locado(db, localizacao_id, quantidade=10, peso=50, **kw):
    p = cadastrar(db, quantidade, peso, **kw)
    return run_localizar(p.id, localizacao_id, OPERADOR, db_path=db)["produto"]
