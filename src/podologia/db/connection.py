from __future__ import annotations

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from podologia.domain.rules import StorageError

logger = logging.getLogger(__name__)


def connect(db_path: Path, *, wal_mode: bool = True) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    try:
        conn = sqlite3.connect(db_path)
    except sqlite3.Error as e:
        logger.exception("No se pudo abrir la base de datos %s", db_path)
        raise StorageError(f"No se pudo abrir la base de datos: {e}") from e
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON;")
    if wal_mode:
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
    logger.info("Base de datos abierta: %s", db_path)
    return conn


@contextmanager
def storage_errors(action: str) -> Iterator[None]:
    """Convierte cualquier sqlite3.Error en StorageError (con traza en el log)."""
    try:
        yield
    except sqlite3.Error as e:
        logger.exception("Error de almacenamiento al %s", action)
        raise StorageError(f"No se pudo {action}: {e}") from e


@contextmanager
def transaction(conn: sqlite3.Connection, action: str) -> Iterator[sqlite3.Connection]:
    """
    Una sola transacción: commit al salir, rollback ante cualquier excepción
    (incluida ValidationError, que se propaga tal cual).
    """
    with storage_errors(action):
        with conn:
            yield conn
