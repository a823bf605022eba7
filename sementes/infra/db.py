# sementes/infra/db.py
"""
Utilidades de conexão SQLite.

- ``connect``: leituras e scripts de migração (commit ao sair).
- ``transaction``: escritas de negócio. Abre ``BEGIN IMMEDIATE`` para que
  escritores concorrentes sejam serializados pelo próprio SQLite; o segundo
  escritor espera até ``busy_timeout_s`` pelo lock.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

from sementes.config import DEFAULTS
from sementes.domain.errors import InfrastructureError, SementesError


def _open(db_path: str, timeout: Optional[float] = None) -> sqlite3.Connection:
    conn = sqlite3.connect(
        db_path,
        timeout=DEFAULTS.busy_timeout_s if timeout is None else timeout,
        isolation_level=None,
        check_same_thread=False,
    )
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


@contextmanager
def connect(db_path: str) -> Iterator[sqlite3.Connection]:
    """
    Context manager para abrir conexão SQLite com:
    - foreign_keys ON
    - row_factory = sqlite3.Row
    - commit ao sair (rollback em caso de exceção)
    """
    conn = sqlite3.connect(db_path, timeout=DEFAULTS.busy_timeout_s)
    try:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON;")
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


@contextmanager
def transaction(db_path: str, timeout: Optional[float] = None) -> Iterator[sqlite3.Connection]:
    """
    Unidade de trabalho: tudo o que for escrito em ``conn`` é confirmado junto
    ou descartado junto.

    Erros de negócio (``SementesError``) atravessam intactos após o rollback;
    qualquer ``sqlite3.Error`` vira ``InfrastructureError``.
    """
    try:
        conn = _open(db_path, timeout)
    except sqlite3.Error as e:
        raise InfrastructureError(f"Não foi possível abrir o banco: {e}", db_path=db_path) from e
    try:
        conn.execute("BEGIN IMMEDIATE;")
        yield conn
        conn.execute("COMMIT;")
    except SementesError:
        _rollback(conn)
        raise
    except sqlite3.Error as e:
        _rollback(conn)
        raise InfrastructureError(f"Falha no banco de dados: {e}", db_path=db_path) from e
    except Exception:
        _rollback(conn)
        raise
    finally:
        conn.close()


def _rollback(conn: sqlite3.Connection) -> None:
    if conn.in_transaction:
        conn.execute("ROLLBACK;")
