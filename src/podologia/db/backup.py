from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from podologia.config import StorageConfig
from podologia.db.connection import storage_errors
from podologia.domain.rules import StorageError

logger = logging.getLogger(__name__)


def backup_sqlite(conn: sqlite3.Connection, backup_path: Path) -> None:
    backup_path.parent.mkdir(parents=True, exist_ok=True)
    with storage_errors("respaldar la base de datos"):
        dst = sqlite3.connect(backup_path)
        try:
            conn.backup(dst)
        finally:
            dst.close()
    logger.info("Respaldo creado: %s", backup_path)


def timestamped_backup_path(backups_dir: Path, *, now: datetime | None = None) -> Path:
    stamp = (now or datetime.now()).strftime("%Y%m%d-%H%M%S")
    return backups_dir / f"podologia-{stamp}.db"


def close_store(conn: sqlite3.Connection, storage: StorageConfig) -> None:
    """
    Cierre de la sesión: respaldo opcional y luego close().
    Un respaldo fallido solo se registra; la conexión se cierra siempre y no se
    tapa una excepción que ya venga propagándose.
    """
    try:
        if storage.backup_on_exit:
            try:
                backup_sqlite(conn, timestamped_backup_path(storage.backups_dir))
            except (StorageError, OSError):
                logger.exception("No se pudo crear el respaldo al cerrar")
    finally:
        conn.close()
        logger.info("Base de datos cerrada")
