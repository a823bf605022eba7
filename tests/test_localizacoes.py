"""
Registro de localizações: geração idempotente e escritas condicionais
(claim / adjust / release).
"""

import pytest

from conftest import ADMIN, OPERADOR, cadastrar, cadastrar_locado, loc, localizacoes
from sementes.domain.errors import (
    CapacityExceededError,
    ConflictError,
    DimensionError,
    LocationOccupiedError,
    NotFoundError,
    UnauthorizedTransitionError,
    ValidationError,
)
from sementes.domain.models import Coordenada, Dimensoes, StatusProduto
from sementes.infra.db import connect, transaction
from sementes.infra.repositories import LocalizacaoRepo, MovimentacaoRepo
from sementes.usecases.gerar_localizacoes import (
    listar_camaras,
    obter_localizacao_por_coordenada,
    run_atualizar_ambiente,
    run_criar_camara,
    run_gerar_localizacoes,
)
from sementes.usecases.movimentar_produto import listar_disponiveis, obter_produto, run_localizar


def test_camara_unitaria_gera_uma_localizacao_sem_duplicar(db):
    res = run_criar_camara("Unitária", Dimensoes(1, 1, 1, 1), ADMIN, db_path=db)
    cam = res["camara"]
    assert res["criadas"] == 1

    locs = localizacoes(db, cam.id)
    assert len(locs) == 1
    assert locs[0].codigo == "Q1-LA-F1-A1"
    assert locs[0].capacidade_max_kg == 1000.0
    assert not locs[0].ocupada

    again = run_gerar_localizacoes(cam.id, ADMIN, db_path=db)
    assert again["criadas"] == 0
    assert again["removidas"] == 0
    assert len(localizacoes(db, cam.id)) == 1


def test_gerar_localizacoes_exige_admin(db, camara):
    with pytest.raises(UnauthorizedTransitionError):
        run_gerar_localizacoes(camara.id, OPERADOR, db_path=db)


def test_criar_camara_valida_dimensoes_e_nome(db):
    with pytest.raises(DimensionError):
        run_criar_camara("X", Dimensoes(0, 1, 1, 1), ADMIN, db_path=db)
    with pytest.raises(ValidationError):
        run_criar_camara("  ", Dimensoes(1, 1, 1, 1), ADMIN, db_path=db)
    assert listar_camaras(db) == []


def test_nome_de_camara_duplicado(db, camara):
    with pytest.raises(ConflictError):
        run_criar_camara("C1", Dimensoes(1, 1, 1, 1), ADMIN, db_path=db)


def test_ampliar_dimensoes_cria_apenas_as_novas(db, camara):
    res = run_gerar_localizacoes(camara.id, ADMIN, dimensoes=Dimensoes(2, 2, 1, 2), db_path=db)
    assert res["criadas"] == 4
    assert res["total"] == 8
    assert len(localizacoes(db, camara.id)) == 8
    assert listar_camaras(db)[0].dimensoes == Dimensoes(2, 2, 1, 2)


def test_reduzir_dimensoes_remove_livres(db, camara):
    res = run_gerar_localizacoes(camara.id, ADMIN, dimensoes=Dimensoes(1, 1, 1, 2), db_path=db)
    assert res["removidas"] == 2
    assert [l.codigo for l in localizacoes(db, camara.id)] == ["Q1-LA-F1-A1", "Q1-LA-F1-A2"]


def test_reduzir_dimensoes_com_ocupada_fora_falha(db, camara):
    ultima = localizacoes(db, camara.id)[-1]
    cadastrar_locado(db, ultima.id)
    with pytest.raises(DimensionError):
        run_gerar_localizacoes(camara.id, ADMIN, dimensoes=Dimensoes(1, 1, 1, 1), db_path=db)
    # nada mudou
    assert len(localizacoes(db, camara.id)) == 4
    assert listar_camaras(db)[0].dimensoes == Dimensoes(1, 2, 1, 2)


def test_produto_acima_da_capacidade_nao_ocupa(db, camara):
    # 24 x 50 kg = 1200 kg numa localização de 1000 kg
    p = cadastrar(db, quantidade=24, peso=50)
    alvo = localizacoes(db, camara.id)[0]
    with pytest.raises(CapacityExceededError):
        run_localizar(p.id, alvo.id, OPERADOR, db_path=db)

    depois = loc(db, alvo.id)
    assert not depois.ocupada
    assert depois.peso_atual_g == 0
    assert obter_produto(p.id, db).status == StatusProduto.AGUARDANDO_LOCACAO
    with connect(db) as c:
        assert MovimentacaoRepo(c).find_by_produto(p.id) == []


def test_localizacao_ocupada(db, camara):
    alvo = localizacoes(db, camara.id)[0]
    cadastrar_locado(db, alvo.id)
    outro = cadastrar(db, lote="L2")
    with pytest.raises(LocationOccupiedError):
        run_localizar(outro.id, alvo.id, OPERADOR, db_path=db)


def test_localizacao_inexistente(db, camara):
    p = cadastrar(db)
    with pytest.raises(NotFoundError):
        run_localizar(p.id, 9999, OPERADOR, db_path=db)


def test_escritas_condicionais(db, camara):
    a, b = localizacoes(db, camara.id)[:2]
    p1 = cadastrar(db)
    p2 = cadastrar(db, lote="L2")
    with transaction(db) as c:
        repo = LocalizacaoRepo(c)
        ocupada = repo.claim_if_free(a.id, p1.id, 400_000)
        assert ocupada.ocupada and ocupada.produto_id == p1.id

        with pytest.raises(LocationOccupiedError):
            repo.claim_if_free(a.id, p2.id, 1)
        with pytest.raises(LocationOccupiedError):
            repo.adjust_weight_if_within_capacity(a.id, p2.id, 1)
        with pytest.raises(CapacityExceededError):
            repo.adjust_weight_if_within_capacity(a.id, p1.id, 600_001)
        with pytest.raises(CapacityExceededError):
            repo.adjust_weight_if_within_capacity(a.id, p1.id, -400_001)

        assert repo.adjust_weight_if_within_capacity(a.id, p1.id, 600_000).peso_atual_g == 1_000_000
        with pytest.raises(ConflictError):
            repo.release_if_occupant(a.id, p2.id)
        livre = repo.release_if_occupant(a.id, p1.id)
        assert not livre.ocupada and livre.peso_atual_g == 0 and livre.produto_id is None

        with pytest.raises(CapacityExceededError):
            repo.claim_if_free(b.id, p1.id, 1_000_001)


def test_find_available_ordem_e_filtros(db, camara):
    locs = localizacoes(db, camara.id)
    cadastrar_locado(db, locs[0].id)
    livres = listar_disponiveis(db_path=db)
    assert [l.codigo for l in livres] == [l.codigo for l in locs[1:]]
    assert listar_disponiveis(peso_minimo_kg=1001, db_path=db) == []
    assert len(listar_disponiveis(camara_id=camara.id, limite=2, db_path=db)) == 2

    with connect(db) as c:
        com_proprio = LocalizacaoRepo(c).find_available(peso_minimo_g=1000, produto_id=1)
    assert com_proprio[0].id == locs[0].id


def test_atualizar_ambiente(db, camara):
    cam = run_atualizar_ambiente(camara.id, 4.5, 38.0, ADMIN, db_path=db)
    assert cam.temperatura == 4.5
    assert cam.umidade == 38.0
    with pytest.raises(NotFoundError):
        run_atualizar_ambiente(999, 1.0, 1.0, ADMIN, db_path=db)


def test_atualizar_ambiente_exige_admin(db, camara):
    with pytest.raises(UnauthorizedTransitionError):
        run_atualizar_ambiente(camara.id, 2.0, 40.0, OPERADOR, db_path=db)
    (cam,) = listar_camaras(db_path=db)
    assert cam.temperatura is None
    assert cam.umidade is None


def test_localizacao_por_coordenada(db, camara):
    alvo = obter_localizacao_por_coordenada(camara.id, Coordenada(1, 2, 1, 1), db_path=db)
    assert alvo.codigo == "Q1-LB-F1-A1"
    assert alvo.camara_id == camara.id

    with pytest.raises(DimensionError):
        obter_localizacao_por_coordenada(camara.id, Coordenada(1, 3, 1, 1), db_path=db)
    with pytest.raises(NotFoundError):
        obter_localizacao_por_coordenada(999, Coordenada(1, 1, 1, 1), db_path=db)
