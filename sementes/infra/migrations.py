# sementes/infra/migrations.py
"""
Migrações de schema usando PRAGMA user_version.

V1: tabelas base (câmaras, localizações, produtos, alocações, movimentações,
    solicitações de retirada)
V2: livro de movimentações somente-anexação (triggers) e no máximo uma
    solicitação PENDENTE por produto (índice único parcial)
"""

from __future__ import annotations

from typing import List

from .db import connect
from .logger import log_database_operation


SCHEMA_V1: List[str] = [
    # Câmaras (dado de referência local)
    """
    CREATE TABLE IF NOT EXISTS camara (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        nome TEXT NOT NULL UNIQUE,
        quadras INTEGER NOT NULL CHECK (quadras > 0),
        lados INTEGER NOT NULL CHECK (lados > 0),
        filas INTEGER NOT NULL CHECK (filas > 0),
        andares INTEGER NOT NULL CHECK (andares > 0),
        capacidade_padrao_g INTEGER NOT NULL CHECK (capacidade_padrao_g > 0),
        temperatura REAL,
        umidade REAL
    );
    """,
    # Localizações físicas
    """
    CREATE TABLE IF NOT EXISTS localizacao (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        camara_id INTEGER NOT NULL,
        quadra INTEGER NOT NULL,
        lado INTEGER NOT NULL,
        fila INTEGER NOT NULL,
        andar INTEGER NOT NULL,
        codigo TEXT NOT NULL,
        capacidade_max_g INTEGER NOT NULL CHECK (capacidade_max_g > 0),
        peso_atual_g INTEGER NOT NULL DEFAULT 0
            CHECK (peso_atual_g >= 0 AND peso_atual_g <= capacidade_max_g),
        ocupada INTEGER NOT NULL DEFAULT 0 CHECK (ocupada IN (0, 1)),
        produto_id INTEGER,
        nivel_acesso TEXT NOT NULL DEFAULT 'ground',
        UNIQUE (camara_id, quadra, lado, fila, andar),
        UNIQUE (camara_id, codigo),
        CHECK ((ocupada = 1) = (produto_id IS NOT NULL)),
        FOREIGN KEY (camara_id) REFERENCES camara(id) ON DELETE CASCADE,
        FOREIGN KEY (produto_id) REFERENCES produto(id)
    );
    """,
    # Lotes de sementes
    """
    CREATE TABLE IF NOT EXISTS produto (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        nome TEXT NOT NULL,
        lote TEXT NOT NULL,
        quantidade INTEGER NOT NULL CHECK (quantidade >= 0),
        peso_unitario_g INTEGER NOT NULL CHECK (peso_unitario_g > 0),
        status TEXT NOT NULL,
        localizacao_id INTEGER,
        tipo_semente_id TEXT,
        cliente_id TEXT,
        tipo_armazenamento TEXT NOT NULL DEFAULT 'saco',
        data_entrada TEXT,
        data_validade TEXT,
        observacoes TEXT,
        versao INTEGER NOT NULL DEFAULT 0,
        FOREIGN KEY (localizacao_id) REFERENCES localizacao(id)
    );
    """,
    # Quanto de cada produto está em cada localização
    """
    CREATE TABLE IF NOT EXISTS alocacao (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        produto_id INTEGER NOT NULL,
        localizacao_id INTEGER NOT NULL UNIQUE,
        quantidade INTEGER NOT NULL CHECK (quantidade > 0),
        FOREIGN KEY (produto_id) REFERENCES produto(id),
        FOREIGN KEY (localizacao_id) REFERENCES localizacao(id)
    );
    """,
    # Livro de movimentações
    """
    CREATE TABLE IF NOT EXISTS movimentacao (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        tipo TEXT NOT NULL
            CHECK (tipo IN ('entry', 'exit', 'transfer', 'partial-transfer', 'stock-add')),
        produto_id INTEGER NOT NULL,
        ator_id TEXT NOT NULL,
        origem_id INTEGER,
        destino_id INTEGER,
        quantidade INTEGER NOT NULL CHECK (quantidade > 0),
        peso_g INTEGER NOT NULL,
        motivo TEXT,
        status_resultante TEXT NOT NULL,
        timestamp TEXT NOT NULL,
        FOREIGN KEY (produto_id) REFERENCES produto(id)
    );
    """,
    # Solicitações de retirada
    """
    CREATE TABLE IF NOT EXISTS solicitacao_retirada (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        produto_id INTEGER NOT NULL,
        tipo TEXT NOT NULL CHECK (tipo IN ('TOTAL', 'PARCIAL')),
        status TEXT NOT NULL DEFAULT 'PENDENTE'
            CHECK (status IN ('PENDENTE', 'CONFIRMADO', 'CANCELADO')),
        quantidade_solicitada INTEGER,
        motivo TEXT,
        solicitado_por TEXT NOT NULL,
        solicitado_em TEXT NOT NULL,
        confirmado_por TEXT,
        confirmado_em TEXT,
        cancelado_por TEXT,
        cancelado_em TEXT,
        observacoes TEXT,
        dados_originais TEXT,
        FOREIGN KEY (produto_id) REFERENCES produto(id)
    );
    """,
]

SCHEMA_V2: List[str] = [
    """
    CREATE TRIGGER IF NOT EXISTS trg_movimentacao_sem_update
    BEFORE UPDATE ON movimentacao
    BEGIN
        SELECT RAISE(ABORT, 'movimentacao e somente-anexacao');
    END;
    """,
    """
    CREATE TRIGGER IF NOT EXISTS trg_movimentacao_sem_delete
    BEFORE DELETE ON movimentacao
    BEGIN
        SELECT RAISE(ABORT, 'movimentacao e somente-anexacao');
    END;
    """,
    """
    CREATE UNIQUE INDEX IF NOT EXISTS uq_retirada_pendente
    ON solicitacao_retirada(produto_id) WHERE status = 'PENDENTE';
    """,
]


def _apply(conn, scripts: List[str]) -> None:
    for sql in scripts:
        conn.executescript(sql)


def apply_migrations(db_path: str) -> int:
    """Aplica migrações incrementais de acordo com PRAGMA user_version.

    Retorna a versão final do schema.
    """
    with connect(db_path) as conn:
        ver = conn.execute("PRAGMA user_version;").fetchone()[0] or 0

        if ver < 1:
            _apply(conn, SCHEMA_V1)
            conn.execute("PRAGMA user_version = 1;")
            log_database_operation("schema", "MIGRATE", versao=1)
            ver = 1

        if ver < 2:
            _apply(conn, SCHEMA_V2)
            conn.execute("PRAGMA user_version = 2;")
            log_database_operation("schema", "MIGRATE", versao=2)
            ver = 2

        # versões futuras: if ver < 3: _apply(conn, SCHEMA_V3)
    return ver
