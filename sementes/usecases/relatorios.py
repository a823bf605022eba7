# sementes/usecases/relatorios.py
"""
Relatórios de armazenagem (somente leitura):
- ocupação por câmara
- localizações próximas da capacidade
- retiradas por status/tipo e tempo médio de espera
- vencimentos dos lotes ativos
- histórico de produto e de localização (livro de movimentações)

Cada relatório devolve ``(colunas, linhas, mensagem)`` para exibição tabular
e, onde faz sentido, também um resumo em dict.
"""

from __future__ import annotations

from collections import Counter
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from sementes.config import DB_PATH, DEFAULTS
from sementes.domain.formulas import g_para_kg, percentual_ocupacao
from sementes.domain.historico import reconstruir_estado
from sementes.domain.policies import dias_entre, status_capacidade, status_validade
from sementes.infra.db import connect
from sementes.infra.logger import log_database_operation, log_system_event, system_logger
from sementes.infra.migrations import apply_migrations
from sementes.infra.repositories import MovimentacaoRepo, SolicitacaoRepo
from sementes.infra.views import create_views

Tabela = Tuple[List[str], List[List[Any]], Optional[str]]


def _preparar(db_path: str) -> None:
    apply_migrations(db_path)
    create_views(db_path)


# ----------------------
# 1) Ocupação
# ----------------------

def relatorio_ocupacao(camara_id: Optional[int] = None, db_path: str = DB_PATH) -> Tabela:
    """Total/ocupadas/livres, capacidade total e usada e utilização por câmara."""
    log_system_event("relatorio_ocupacao_start", {"camara_id": camara_id})
    _preparar(db_path)
    sql = "SELECT * FROM vw_ocupacao_camara"
    params: List[Any] = []
    if camara_id is not None:
        sql += " WHERE camara_id = ?"
        params.append(camara_id)
    sql += " ORDER BY camara_id"
    with connect(db_path) as c:
        rows = c.execute(sql, params).fetchall()
    log_database_operation("vw_ocupacao_camara", "SELECT", len(rows))

    colunas = ["Câmara", "Localizações", "Ocupadas", "Livres", "Capacidade (kg)", "Peso (kg)", "Utilização %"]
    linhas = [
        [
            r["camara"],
            r["total_localizacoes"],
            r["ocupadas"],
            r["livres"],
            g_para_kg(r["capacidade_total_g"]),
            g_para_kg(r["peso_total_g"]),
            percentual_ocupacao(r["peso_total_g"], r["capacidade_total_g"]),
        ]
        for r in rows
    ]
    msg = None if linhas else "Nenhuma câmara cadastrada."
    return colunas, linhas, msg


# ----------------------
# 2) Próximas da capacidade
# ----------------------

def relatorio_proximas_capacidade(limiar_pct: Optional[int] = None, db_path: str = DB_PATH) -> Tabela:
    """Localizações ocupadas com uso ≥ ``limiar_pct`` % (padrão da configuração)."""
    limiar = DEFAULTS.limiar_capacidade_pct if limiar_pct is None else int(limiar_pct)
    _preparar(db_path)
    with connect(db_path) as c:
        rows = c.execute(
            "SELECT * FROM vw_localizacao_detalhe WHERE ocupada = 1 ORDER BY camara_id, quadra, lado, fila, andar"
        ).fetchall()

    colunas = ["Câmara", "Código", "Produto", "Lote", "Peso (kg)", "Capacidade (kg)", "Uso %", "Status"]
    linhas: List[List[Any]] = []
    for r in rows:
        pct = percentual_ocupacao(r["peso_atual_g"], r["capacidade_max_g"])
        if pct < limiar:
            continue
        linhas.append([
            r["camara"], r["codigo"], r["produto"], r["lote"],
            g_para_kg(r["peso_atual_g"]), g_para_kg(r["capacidade_max_g"]), pct,
            status_capacidade(r["peso_atual_g"], r["capacidade_max_g"]),
        ])
    linhas.sort(key=lambda x: x[6], reverse=True)
    system_logger.info(f"REPORT_CAPACIDADE: limiar={limiar} encontrados={len(linhas)}")
    msg = None if linhas else f"Nenhuma localização com uso ≥ {limiar}%."
    return colunas, linhas, msg


# ----------------------
# 3) Retiradas
# ----------------------

def resumo_retiradas(inicio: Optional[str] = None, fim: Optional[str] = None, db_path: str = DB_PATH) -> Dict[str, Any]:
    """Contagens por status e tipo e média de dias entre pedido e resolução."""
    _preparar(db_path)
    with connect(db_path) as c:
        sols = SolicitacaoRepo(c).listar(inicio=inicio, fim=fim)

    por_status = Counter(s.status.value for s in sols)
    por_tipo = Counter(s.tipo.value for s in sols)
    esperas = [
        dias_entre(s.solicitado_em, s.confirmado_em or s.cancelado_em)
        for s in sols
        if s.confirmado_em or s.cancelado_em
    ]
    return {
        "total": len(sols),
        "por_status": dict(por_status),
        "por_tipo": dict(por_tipo),
        "media_dias_espera": round(sum(esperas) / len(esperas), 2) if esperas else None,
    }


def relatorio_retiradas(inicio: Optional[str] = None, fim: Optional[str] = None, db_path: str = DB_PATH) -> Tabela:
    resumo = resumo_retiradas(inicio, fim, db_path)
    colunas = ["Indicador", "Valor"]
    linhas: List[List[Any]] = [["Total", resumo["total"]]]
    for status in ("PENDENTE", "CONFIRMADO", "CANCELADO"):
        linhas.append([f"Status {status}", resumo["por_status"].get(status, 0)])
    for tipo in ("TOTAL", "PARCIAL"):
        linhas.append([f"Tipo {tipo}", resumo["por_tipo"].get(tipo, 0)])
    linhas.append(["Média de dias de espera", resumo["media_dias_espera"]])
    msg = None if resumo["total"] else "Nenhuma solicitação de retirada no período."
    return colunas, linhas, msg


# ----------------------
# 4) Vencimentos
# ----------------------

def relatorio_vencimentos(janela_dias: int = 30, hoje: Optional[date] = None, db_path: str = DB_PATH) -> Tabela:
    """
    Produtos ativos classificados pela validade.

    Entram no relatório os lotes vencidos e os que vencem em até
    ``janela_dias`` dias; lotes sem data de validade ficam de fora.
    """
    ref = hoje or date.today()
    _preparar(db_path)
    with connect(db_path) as c:
        df = pd.read_sql_query(
            "SELECT id, nome, lote, quantidade, status, data_validade, localizacao_codigo FROM vw_produtos_ativos",
            c,
        )
    log_database_operation("vw_produtos_ativos", "SELECT", len(df))

    colunas = ["ID", "Produto", "Lote", "Quantidade", "Localização", "Validade", "Dias", "Situação"]
    if df.empty:
        return colunas, [], "Nenhum produto ativo."

    df = df[df["data_validade"].notna() & (df["data_validade"].astype(str).str.strip() != "")].copy()
    df["validade"] = pd.to_datetime(df["data_validade"].astype(str).str[:10], errors="coerce").dt.date
    df = df[df["validade"].notna()]
    df["dias"] = df["validade"].apply(lambda d: (d - ref).days)
    df = df[df["dias"] <= int(janela_dias)].sort_values(["dias", "id"])
    df["situacao"] = df["validade"].apply(lambda d: status_validade(d, ref))

    linhas = [
        [int(r.id), r.nome, r.lote, int(r.quantidade), r.localizacao_codigo, r.validade.isoformat(), int(r.dias), r.situacao]
        for r in df.itertuples(index=False)
    ]
    msg = None if linhas else f"Nenhum lote vence nos próximos {janela_dias} dias."
    return colunas, linhas, msg


# ----------------------
# 5) Históricos
# ----------------------

_COLS_MOV = ["ID", "Data/Hora", "Tipo", "Produto", "Origem", "Destino", "Quantidade", "Peso (kg)", "Status", "Ator", "Motivo"]


def _linhas_mov(movs) -> List[List[Any]]:
    return [
        [m.id, m.timestamp, m.tipo.value, m.produto_id, m.origem_id, m.destino_id,
         m.quantidade, m.peso_kg, m.status_resultante.value, m.ator_id, m.motivo]
        for m in movs
    ]


def historico_produto(produto_id: int, db_path: str = DB_PATH) -> Tabela:
    with connect(db_path) as c:
        movs = MovimentacaoRepo(c).find_by_produto(produto_id)
    linhas = _linhas_mov(movs)
    if not linhas:
        return _COLS_MOV, [], f"Produto {produto_id} sem movimentações."
    estado = reconstruir_estado(movs)
    msg = (
        f"Estado pelo histórico: {estado.status.value}, {estado.quantidade} un., "
        f"localização principal {estado.localizacao_id}"
    )
    return _COLS_MOV, linhas, msg


def historico_localizacao(localizacao_id: int, db_path: str = DB_PATH) -> Tabela:
    with connect(db_path) as c:
        movs = MovimentacaoRepo(c).find_by_localizacao(localizacao_id)
    linhas = _linhas_mov(movs)
    return _COLS_MOV, linhas, None if linhas else f"Localização {localizacao_id} sem movimentações."


def exportar_xlsx(colunas: List[str], linhas: List[List[Any]], path: str) -> str:
    """Grava um relatório tabular em XLSX."""
    pd.DataFrame(linhas, columns=colunas).to_excel(path, index=False)
    log_system_event("relatorio_exportado", {"path": path, "linhas": len(linhas)})
    return path
