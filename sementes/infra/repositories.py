# sementes/infra/repositories.py
"""
Repositórios (DAO) sobre o SQLite.

Classes:
- CamaraRepo
- LocalizacaoRepo   (escritas condicionais: claim / adjust / release)
- ProdutoRepo       (atualização com checagem de versão)
- AlocacaoRepo
- MovimentacaoRepo  (somente-anexação)
- SolicitacaoRepo

Todos recebem uma ``sqlite3.Connection`` já aberta: quem define a unidade
de trabalho é o caso de uso (``infra.db.transaction``), de modo que várias
escritas de repositórios diferentes confirmam juntas.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sementes.domain.errors import (
    CapacityExceededError,
    ConflictError,
    LocationOccupiedError,
    NotFoundError,
)
from sementes.domain.models import (
    Alocacao,
    Camara,
    Coordenada,
    Dimensoes,
    Localizacao,
    Movimentacao,
    Produto,
    SolicitacaoRetirada,
    StatusProduto,
)
from sementes.domain.policies import nivel_acesso


# -------------------------
# Helpers
# -------------------------

def agora_iso() -> str:
    """Timestamp ISO com microssegundos; ordena o livro de movimentações."""
    return datetime.now().isoformat(timespec="microseconds")


def _valor(v: Any) -> Any:
    return getattr(v, "value", v)


# -------------------------
# Câmara
# -------------------------

class CamaraRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def insert(self, camara: Camara) -> Camara:
        d = camara.dimensoes
        try:
            cur = self.conn.execute(
                """
                INSERT INTO camara
                    (nome, quadras, lados, filas, andares, capacidade_padrao_g, temperatura, umidade)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (camara.nome, d.quadras, d.lados, d.filas, d.andares,
                 camara.capacidade_padrao_g, camara.temperatura, camara.umidade),
            )
        except sqlite3.IntegrityError as e:
            raise ConflictError(f"Já existe câmara com o nome {camara.nome!r}", nome=camara.nome) from e
        camara.id = cur.lastrowid
        return camara

    def get(self, camara_id: int) -> Camara:
        row = self.conn.execute("SELECT * FROM camara WHERE id = ?", (camara_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"Câmara {camara_id} não encontrada", camara_id=camara_id)
        return Camara.from_row(row)

    def listar(self) -> List[Camara]:
        cur = self.conn.execute("SELECT * FROM camara ORDER BY id")
        return [Camara.from_row(r) for r in cur.fetchall()]

    def atualizar_dimensoes(self, camara_id: int, dim: Dimensoes) -> None:
        self.conn.execute(
            "UPDATE camara SET quadras = ?, lados = ?, filas = ?, andares = ? WHERE id = ?",
            (dim.quadras, dim.lados, dim.filas, dim.andares, camara_id),
        )

    def atualizar_ambiente(self, camara_id: int, temperatura: Optional[float], umidade: Optional[float]) -> None:
        """Temperatura e umidade são campos simples de leitura/escrita."""
        cur = self.conn.execute(
            "UPDATE camara SET temperatura = ?, umidade = ? WHERE id = ?",
            (temperatura, umidade, camara_id),
        )
        if cur.rowcount == 0:
            raise NotFoundError(f"Câmara {camara_id} não encontrada", camara_id=camara_id)


# -------------------------
# Localização
# -------------------------

_FORA_DOS_LIMITES = "(quadra > ? OR lado > ? OR fila > ? OR andar > ?)"


class LocalizacaoRepo:
    """Registro de localizações.

    As três escritas de estado (``claim_if_free``,
    ``adjust_weight_if_within_capacity`` e ``release_if_occupant``) são
    UPDATEs condicionais: a condição de negócio vai no WHERE e o
    ``rowcount`` diz se a escrita venceu. Quando não vence, a linha é relida
    só para escolher o erro certo.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def insert_many(self, camara_id: int, coords: Iterable[Tuple[Coordenada, str]], capacidade_g: int) -> int:
        """Cria as coordenadas que ainda não existem; retorna quantas foram criadas."""
        rows = [
            (camara_id, c.quadra, c.lado, c.fila, c.andar, codigo, capacidade_g, nivel_acesso(c.andar))
            for c, codigo in coords
        ]
        antes = self.conn.total_changes
        self.conn.executemany(
            """
            INSERT OR IGNORE INTO localizacao
                (camara_id, quadra, lado, fila, andar, codigo, capacidade_max_g, nivel_acesso)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            rows,
        )
        return self.conn.total_changes - antes

    def get(self, localizacao_id: int) -> Localizacao:
        row = self.conn.execute("SELECT * FROM localizacao WHERE id = ?", (localizacao_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"Localização {localizacao_id} não encontrada", localizacao_id=localizacao_id)
        return Localizacao.from_row(row)

    def get_by_codigo(self, camara_id: int, codigo: str) -> Localizacao:
        row = self.conn.execute(
            "SELECT * FROM localizacao WHERE camara_id = ? AND codigo = ?", (camara_id, codigo)
        ).fetchone()
        if row is None:
            raise NotFoundError(f"Localização {codigo} não encontrada", camara_id=camara_id, codigo=codigo)
        return Localizacao.from_row(row)

    def listar_por_camara(self, camara_id: int) -> List[Localizacao]:
        cur = self.conn.execute(
            "SELECT * FROM localizacao WHERE camara_id = ? ORDER BY quadra, lado, fila, andar",
            (camara_id,),
        )
        return [Localizacao.from_row(r) for r in cur.fetchall()]

    def listar_por_produto(self, produto_id: int) -> List[Localizacao]:
        cur = self.conn.execute(
            "SELECT * FROM localizacao WHERE produto_id = ? ORDER BY id", (produto_id,)
        )
        return [Localizacao.from_row(r) for r in cur.fetchall()]

    def find_available(
        self,
        camara_id: Optional[int] = None,
        peso_minimo_g: int = 0,
        produto_id: Optional[int] = None,
        limite: Optional[int] = None,
    ) -> List[Localizacao]:
        """Localizações livres que comportam ``peso_minimo_g``.

        Com ``produto_id``, inclui também as localizações já ocupadas por
        esse produto que ainda têm folga suficiente.
        """
        sql = """
            SELECT * FROM localizacao
            WHERE ((ocupada = 0 AND capacidade_max_g >= :peso)
                   OR (:pid IS NOT NULL AND produto_id = :pid
                       AND capacidade_max_g - peso_atual_g >= :peso))
        """
        params: Dict[str, Any] = {"peso": int(peso_minimo_g), "pid": produto_id}
        if camara_id is not None:
            sql += " AND camara_id = :camara"
            params["camara"] = camara_id
        sql += " ORDER BY camara_id, quadra, lado, fila, andar"
        if limite is not None:
            sql += " LIMIT :limite"
            params["limite"] = int(limite)
        return [Localizacao.from_row(r) for r in self.conn.execute(sql, params).fetchall()]

    def claim_if_free(self, localizacao_id: int, produto_id: int, peso_g: int) -> Localizacao:
        cur = self.conn.execute(
            """
            UPDATE localizacao
               SET ocupada = 1, produto_id = ?, peso_atual_g = ?
             WHERE id = ? AND ocupada = 0 AND capacidade_max_g >= ?
            """,
            (produto_id, peso_g, localizacao_id, peso_g),
        )
        if cur.rowcount == 0:
            loc = self.get(localizacao_id)
            if loc.ocupada:
                raise LocationOccupiedError(
                    f"Localização {loc.codigo} já está ocupada",
                    localizacao_id=localizacao_id,
                    ocupante=loc.produto_id,
                )
            raise CapacityExceededError(
                f"Localização {loc.codigo} comporta {loc.capacidade_max_kg} kg, "
                f"necessário {peso_g / 1000} kg",
                localizacao_id=localizacao_id,
                capacidade_g=loc.capacidade_max_g,
                peso_g=peso_g,
            )
        return self.get(localizacao_id)

    def adjust_weight_if_within_capacity(self, localizacao_id: int, produto_id: int, delta_g: int) -> Localizacao:
        """Soma ``delta_g`` (positivo ou negativo) ao peso, só para o ocupante."""
        cur = self.conn.execute(
            """
            UPDATE localizacao
               SET peso_atual_g = peso_atual_g + :delta
             WHERE id = :id AND ocupada = 1 AND produto_id = :pid
               AND peso_atual_g + :delta >= 0
               AND peso_atual_g + :delta <= capacidade_max_g
            """,
            {"delta": int(delta_g), "id": localizacao_id, "pid": produto_id},
        )
        if cur.rowcount == 0:
            loc = self.get(localizacao_id)
            if loc.produto_id != produto_id:
                raise LocationOccupiedError(
                    f"Localização {loc.codigo} não pertence ao produto {produto_id}",
                    localizacao_id=localizacao_id,
                    ocupante=loc.produto_id,
                )
            raise CapacityExceededError(
                f"Ajuste de {delta_g / 1000} kg deixaria {loc.codigo} fora de [0, {loc.capacidade_max_kg}] kg",
                localizacao_id=localizacao_id,
                peso_atual_g=loc.peso_atual_g,
                delta_g=delta_g,
            )
        return self.get(localizacao_id)

    def release_if_occupant(self, localizacao_id: int, produto_id: int) -> Localizacao:
        cur = self.conn.execute(
            """
            UPDATE localizacao
               SET ocupada = 0, produto_id = NULL, peso_atual_g = 0
             WHERE id = ? AND produto_id = ?
            """,
            (localizacao_id, produto_id),
        )
        if cur.rowcount == 0:
            loc = self.get(localizacao_id)
            raise ConflictError(
                f"Produto {produto_id} não ocupa {loc.codigo}",
                localizacao_id=localizacao_id,
                ocupante=loc.produto_id,
            )
        return self.get(localizacao_id)

    def contar_ocupadas_fora(self, camara_id: int, dim: Dimensoes) -> int:
        row = self.conn.execute(
            f"SELECT COUNT(*) FROM localizacao WHERE camara_id = ? AND ocupada = 1 AND {_FORA_DOS_LIMITES}",
            (camara_id, dim.quadras, dim.lados, dim.filas, dim.andares),
        ).fetchone()
        return row[0]

    def delete_free_out_of_range(self, camara_id: int, dim: Dimensoes) -> int:
        cur = self.conn.execute(
            f"DELETE FROM localizacao WHERE camara_id = ? AND ocupada = 0 AND {_FORA_DOS_LIMITES}",
            (camara_id, dim.quadras, dim.lados, dim.filas, dim.andares),
        )
        return cur.rowcount


# -------------------------
# Produto
# -------------------------

_PRODUTO_COLS = (
    "nome", "lote", "quantidade", "peso_unitario_g", "status", "localizacao_id",
    "tipo_semente_id", "cliente_id", "tipo_armazenamento", "data_entrada",
    "data_validade", "observacoes",
)


class ProdutoRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def _payload(self, p: Produto) -> Dict[str, Any]:
        return {c: _valor(getattr(p, c)) for c in _PRODUTO_COLS}

    def insert(self, produto: Produto) -> Produto:
        payload = self._payload(produto)
        cur = self.conn.execute(
            f"""
            INSERT INTO produto ({", ".join(_PRODUTO_COLS)}, versao)
            VALUES ({", ".join(":" + c for c in _PRODUTO_COLS)}, 0)
            """,
            payload,
        )
        produto.id = cur.lastrowid
        produto.versao = 0
        return produto

    def get(self, produto_id: int) -> Produto:
        row = self.conn.execute("SELECT * FROM produto WHERE id = ?", (produto_id,)).fetchone()
        if row is None:
            raise NotFoundError(f"Produto {produto_id} não encontrado", produto_id=produto_id)
        return Produto.from_row(row)

    def atualizar(self, produto: Produto) -> Produto:
        """Grava o produto se ninguém o alterou desde a leitura (``versao``)."""
        payload = self._payload(produto)
        payload.update(id=produto.id, versao=produto.versao)
        sets = ", ".join(f"{c} = :{c}" for c in _PRODUTO_COLS)
        cur = self.conn.execute(
            f"UPDATE produto SET {sets}, versao = versao + 1 WHERE id = :id AND versao = :versao",
            payload,
        )
        if cur.rowcount == 0:
            raise ConflictError(
                f"Produto {produto.id} foi alterado por outra operação",
                produto_id=produto.id,
                versao=produto.versao,
            )
        produto.versao += 1
        return produto

    def listar(self, status: Optional[Iterable[StatusProduto]] = None) -> List[Produto]:
        sql = "SELECT * FROM produto"
        params: List[Any] = []
        if status:
            valores = [_valor(s) for s in status]
            sql += f" WHERE status IN ({', '.join('?' for _ in valores)})"
            params.extend(valores)
        sql += " ORDER BY id"
        return [Produto.from_row(r) for r in self.conn.execute(sql, params).fetchall()]


# -------------------------
# Alocação
# -------------------------

class AlocacaoRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def listar_por_produto(self, produto_id: int) -> List[Alocacao]:
        """Alocações em ordem de criação."""
        cur = self.conn.execute(
            "SELECT * FROM alocacao WHERE produto_id = ? ORDER BY id", (produto_id,)
        )
        return [Alocacao.from_row(r) for r in cur.fetchall()]

    def get_por_localizacao(self, localizacao_id: int) -> Optional[Alocacao]:
        row = self.conn.execute(
            "SELECT * FROM alocacao WHERE localizacao_id = ?", (localizacao_id,)
        ).fetchone()
        return Alocacao.from_row(row) if row else None

    def criar(self, produto_id: int, localizacao_id: int, quantidade: int) -> Alocacao:
        cur = self.conn.execute(
            "INSERT INTO alocacao (produto_id, localizacao_id, quantidade) VALUES (?, ?, ?)",
            (produto_id, localizacao_id, quantidade),
        )
        return Alocacao(cur.lastrowid, produto_id, localizacao_id, quantidade)

    def definir_quantidade(self, alocacao_id: int, quantidade: int) -> None:
        if quantidade <= 0:
            self.conn.execute("DELETE FROM alocacao WHERE id = ?", (alocacao_id,))
        else:
            self.conn.execute("UPDATE alocacao SET quantidade = ? WHERE id = ?", (quantidade, alocacao_id))

    def remover_por_produto(self, produto_id: int) -> int:
        return self.conn.execute("DELETE FROM alocacao WHERE produto_id = ?", (produto_id,)).rowcount


# -------------------------
# Movimentações
# -------------------------

class MovimentacaoRepo:
    """Livro de movimentações: ``append`` é a única escrita."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def append(self, mov: Movimentacao) -> Movimentacao:
        ts = mov.timestamp or agora_iso()
        cur = self.conn.execute(
            """
            INSERT INTO movimentacao
                (tipo, produto_id, ator_id, origem_id, destino_id,
                 quantidade, peso_g, motivo, status_resultante, timestamp)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (_valor(mov.tipo), mov.produto_id, mov.ator_id, mov.origem_id, mov.destino_id,
             mov.quantidade, mov.peso_g, mov.motivo, _valor(mov.status_resultante), ts),
        )
        row = self.conn.execute("SELECT * FROM movimentacao WHERE id = ?", (cur.lastrowid,)).fetchone()
        return Movimentacao.from_row(row)

    def find_by_produto(self, produto_id: int) -> List[Movimentacao]:
        cur = self.conn.execute(
            "SELECT * FROM movimentacao WHERE produto_id = ? ORDER BY timestamp, id", (produto_id,)
        )
        return [Movimentacao.from_row(r) for r in cur.fetchall()]

    def find_by_localizacao(self, localizacao_id: int) -> List[Movimentacao]:
        cur = self.conn.execute(
            """
            SELECT * FROM movimentacao
            WHERE origem_id = :loc OR destino_id = :loc
            ORDER BY timestamp, id
            """,
            {"loc": localizacao_id},
        )
        return [Movimentacao.from_row(r) for r in cur.fetchall()]

    def listar(self, inicio: Optional[str] = None, fim: Optional[str] = None, tipo: Optional[str] = None) -> List[Movimentacao]:
        """Movimentações no período [inicio, fim] (datas ISO) e, opcionalmente, de um tipo."""
        sql = "SELECT * FROM movimentacao WHERE 1 = 1"
        params: List[Any] = []
        if inicio:
            sql += " AND date(timestamp) >= date(?)"
            params.append(inicio)
        if fim:
            sql += " AND date(timestamp) <= date(?)"
            params.append(fim)
        if tipo:
            sql += " AND tipo = ?"
            params.append(_valor(tipo))
        sql += " ORDER BY timestamp, id"
        return [Movimentacao.from_row(r) for r in self.conn.execute(sql, params).fetchall()]


# -------------------------
# Solicitações de retirada
# -------------------------

_SOLICITACAO_COLS = (
    "produto_id", "tipo", "status", "quantidade_solicitada", "motivo",
    "solicitado_por", "solicitado_em", "confirmado_por", "confirmado_em",
    "cancelado_por", "cancelado_em", "observacoes", "dados_originais",
)


class SolicitacaoRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def _payload(self, s: SolicitacaoRetirada) -> Dict[str, Any]:
        payload = {c: _valor(getattr(s, c)) for c in _SOLICITACAO_COLS}
        payload["dados_originais"] = json.dumps(s.dados_originais or {}, ensure_ascii=False)
        return payload

    def insert(self, sol: SolicitacaoRetirada) -> SolicitacaoRetirada:
        sol.solicitado_em = sol.solicitado_em or agora_iso()
        try:
            cur = self.conn.execute(
                f"""
                INSERT INTO solicitacao_retirada ({", ".join(_SOLICITACAO_COLS)})
                VALUES ({", ".join(":" + c for c in _SOLICITACAO_COLS)})
                """,
                self._payload(sol),
            )
        except sqlite3.IntegrityError as e:
            raise ConflictError(
                f"Produto {sol.produto_id} já possui solicitação de retirada pendente",
                produto_id=sol.produto_id,
            ) from e
        sol.id = cur.lastrowid
        return sol

    def get(self, solicitacao_id: int) -> SolicitacaoRetirada:
        row = self.conn.execute(
            "SELECT * FROM solicitacao_retirada WHERE id = ?", (solicitacao_id,)
        ).fetchone()
        if row is None:
            raise NotFoundError(f"Solicitação {solicitacao_id} não encontrada", solicitacao_id=solicitacao_id)
        return SolicitacaoRetirada.from_row(row)

    def pendente_do_produto(self, produto_id: int) -> Optional[SolicitacaoRetirada]:
        row = self.conn.execute(
            "SELECT * FROM solicitacao_retirada WHERE produto_id = ? AND status = 'PENDENTE'",
            (produto_id,),
        ).fetchone()
        return SolicitacaoRetirada.from_row(row) if row else None

    def resolver(self, sol: SolicitacaoRetirada) -> SolicitacaoRetirada:
        """Grava a resolução (confirmação/cancelamento) de uma solicitação ainda pendente."""
        payload = self._payload(sol)
        payload["id"] = sol.id
        sets = ", ".join(f"{c} = :{c}" for c in _SOLICITACAO_COLS)
        cur = self.conn.execute(
            f"UPDATE solicitacao_retirada SET {sets} WHERE id = :id AND status = 'PENDENTE'",
            payload,
        )
        if cur.rowcount == 0:
            raise ConflictError(
                f"Solicitação {sol.id} já foi resolvida por outra operação",
                solicitacao_id=sol.id,
            )
        return sol

    def listar(
        self,
        status: Optional[str] = None,
        inicio: Optional[str] = None,
        fim: Optional[str] = None,
        produto_id: Optional[int] = None,
    ) -> List[SolicitacaoRetirada]:
        sql = "SELECT * FROM solicitacao_retirada WHERE 1 = 1"
        params: List[Any] = []
        if status:
            sql += " AND status = ?"
            params.append(_valor(status))
        if produto_id is not None:
            sql += " AND produto_id = ?"
            params.append(produto_id)
        if inicio:
            sql += " AND date(solicitado_em) >= date(?)"
            params.append(inicio)
        if fim:
            sql += " AND date(solicitado_em) <= date(?)"
            params.append(fim)
        sql += " ORDER BY solicitado_em, id"
        return [SolicitacaoRetirada.from_row(r) for r in self.conn.execute(sql, params).fetchall()]
