# sementes/usecases/gerar_localizacoes.py
"""
UC: Câmaras e geração de localizações.
- run_criar_camara(): cadastra a câmara e, opcionalmente, gera as localizações.
- run_gerar_localizacoes(): (re)gera as localizações a partir das dimensões.
- run_atualizar_ambiente(): grava temperatura/umidade da câmara (ADMIN).
- obter_localizacao_por_coordenada(): resolve um código Q-L-F-A para a localização.

A geração é idempotente: coordenadas existentes são mantidas e as que
faltam são criadas. Ao reduzir dimensões, as localizações livres fora dos
novos limites são apagadas; se alguma delas estiver ocupada nada muda e
``DimensionError`` é levantado.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from sementes.config import DB_PATH, DEFAULTS
from sementes.domain.coordenadas import dentro_dos_limites, enumerar_coordenadas, gerar_codigo, validar_dimensoes
from sementes.domain.errors import DimensionError, ValidationError
from sementes.domain.formulas import kg_para_g
from sementes.domain.fsm import Evento, autorizar
from sementes.domain.models import Ator, Camara, Coordenada, Dimensoes, Localizacao
from sementes.infra.db import connect, transaction
from sementes.infra.logger import (
    log_database_operation, log_system_event, log_transaction,
)
from sementes.infra.repositories import CamaraRepo, LocalizacaoRepo


def _capacidade_g(capacidade_kg: Any) -> int:
    try:
        cap_g = kg_para_g(capacidade_kg)
    except ValueError as e:
        raise ValidationError(str(e), capacidade_kg=capacidade_kg) from None
    if cap_g <= 0 or cap_g > kg_para_g(DEFAULTS.capacidade_max_kg):
        raise ValidationError(
            f"Capacidade deve estar entre 0 e {DEFAULTS.capacidade_max_kg} kg",
            capacidade_kg=capacidade_kg,
        )
    return cap_g


def run_criar_camara(
    nome: str,
    dimensoes: Dimensoes,
    ator: Ator,
    capacidade_kg: Any = None,
    temperatura: Optional[float] = None,
    umidade: Optional[float] = None,
    gerar: bool = True,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """Cadastra uma câmara (ADMIN) e gera suas localizações."""
    dados = {"nome": nome, "dimensoes": dimensoes, "ator": ator.id}
    log_system_event("criar_camara_start", dados)
    try:
        autorizar(ator, Evento.GERAR_LOCALIZACOES)
        if not str(nome or "").strip():
            raise ValidationError("Nome da câmara é obrigatório")
        validar_dimensoes(dimensoes)
        cap_g = _capacidade_g(DEFAULTS.capacidade_padrao_kg if capacidade_kg is None else capacidade_kg)

        with transaction(db_path) as conn:
            camara = CamaraRepo(conn).insert(
                Camara(None, nome.strip(), dimensoes, cap_g, temperatura, umidade)
            )
            criadas = 0
            if gerar:
                criadas = LocalizacaoRepo(conn).insert_many(
                    camara.id, enumerar_coordenadas(dimensoes), cap_g
                )
        log_database_operation("camara", "INSERT", 1, camara_id=camara.id)
        log_database_operation("localizacao", "INSERT_MANY", criadas, camara_id=camara.id)

        result = {"camara": camara, "criadas": criadas}
        log_transaction("criar_camara", dados, result={"camara_id": camara.id, "criadas": criadas})
        return result
    except Exception as e:
        log_transaction("criar_camara", dados, error=str(e))
        log_system_event("criar_camara_error", {"error": str(e)}, level="error")
        raise


def run_gerar_localizacoes(
    camara_id: int,
    ator: Ator,
    dimensoes: Optional[Dimensoes] = None,
    capacidade_kg: Any = None,
    db_path: str = DB_PATH,
) -> Dict[str, Any]:
    """
    Garante que a câmara tenha exatamente as localizações das suas dimensões.

    Args:
        camara_id: câmara alvo
        ator: precisa ser ADMIN
        dimensoes: novas dimensões (omitido: usa as gravadas na câmara)
        capacidade_kg: capacidade das localizações criadas agora
            (omitido: capacidade padrão da câmara)

    Returns:
        ``{"camara", "criadas", "removidas", "total"}``
    """
    dados = {"camara_id": camara_id, "dimensoes": dimensoes, "ator": ator.id}
    log_system_event("gerar_localizacoes_start", dados)
    try:
        autorizar(ator, Evento.GERAR_LOCALIZACOES)
        if dimensoes is not None:
            validar_dimensoes(dimensoes)

        with transaction(db_path) as conn:
            camaras = CamaraRepo(conn)
            locs = LocalizacaoRepo(conn)
            camara = camaras.get(camara_id)
            dim = dimensoes or camara.dimensoes
            cap_g = camara.capacidade_padrao_g if capacidade_kg is None else _capacidade_g(capacidade_kg)

            ocupadas_fora = locs.contar_ocupadas_fora(camara_id, dim)
            if ocupadas_fora:
                raise DimensionError(
                    f"{ocupadas_fora} localização(ões) ocupada(s) ficariam fora das novas dimensões",
                    camara_id=camara_id,
                    ocupadas=ocupadas_fora,
                )
            removidas = locs.delete_free_out_of_range(camara_id, dim)
            criadas = locs.insert_many(camara_id, enumerar_coordenadas(dim), cap_g)
            if dim != camara.dimensoes:
                camaras.atualizar_dimensoes(camara_id, dim)
                camara.dimensoes = dim

        log_database_operation("localizacao", "DELETE", removidas, camara_id=camara_id)
        log_database_operation("localizacao", "INSERT_MANY", criadas, camara_id=camara_id)

        result = {"camara": camara, "criadas": criadas, "removidas": removidas, "total": dim.total}
        log_transaction("gerar_localizacoes", dados, result={"criadas": criadas, "removidas": removidas})
        return result
    except Exception as e:
        log_transaction("gerar_localizacoes", dados, error=str(e))
        log_system_event("gerar_localizacoes_error", {"error": str(e)}, level="error")
        raise


def run_atualizar_ambiente(
    camara_id: int,
    temperatura: Optional[float],
    umidade: Optional[float],
    ator: Ator,
    db_path: str = DB_PATH,
) -> Camara:
    dados = {"camara_id": camara_id, "temperatura": temperatura, "umidade": umidade, "ator": ator.id}
    try:
        autorizar(ator, Evento.ATUALIZAR_AMBIENTE)
        with transaction(db_path) as conn:
            repo = CamaraRepo(conn)
            repo.atualizar_ambiente(camara_id, temperatura, umidade)
            camara = repo.get(camara_id)
        log_database_operation("camara", "UPDATE", 1, camara_id=camara_id, temperatura=temperatura, umidade=umidade)
        log_transaction("atualizar_ambiente", dados, result={"camara_id": camara.id})
        return camara
    except Exception as e:
        log_transaction("atualizar_ambiente", dados, error=str(e))
        log_system_event("atualizar_ambiente_error", {"error": str(e)}, level="error")
        raise


def obter_localizacao_por_coordenada(camara_id: int, coord: Coordenada, db_path: str = DB_PATH) -> Localizacao:
    """Localização da câmara na coordenada dada; fora das dimensões levanta ``DimensionError``."""
    with connect(db_path) as conn:
        camara = CamaraRepo(conn).get(camara_id)
        if not dentro_dos_limites(coord, camara.dimensoes):
            raise DimensionError(
                f"Coordenada fora das dimensões da câmara {camara.nome}",
                camara_id=camara_id,
                coordenada=gerar_codigo(coord, DEFAULTS.usar_letras_lado),
            )
        return LocalizacaoRepo(conn).get_by_codigo(camara_id, gerar_codigo(coord, DEFAULTS.usar_letras_lado))


def listar_camaras(db_path: str = DB_PATH):
    with connect(db_path) as conn:
        return CamaraRepo(conn).listar()
