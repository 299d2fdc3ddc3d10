from __future__ import annotations

from podologia.config import load_config
from podologia.db.backup import close_store
from podologia.db.connection import connect
from podologia.db.schema import migrate
from podologia.logging_setup import configure_logging
from podologia.ui.main_window import run_main_window


def main() -> None:
    cfg = load_config()
    configure_logging(cfg.logging)

    conn = connect(cfg.storage.db_path, wal_mode=cfg.storage.wal_mode)
    try:
        migrate(conn)
        run_main_window(cfg, conn)
    finally:
        close_store(conn, cfg.storage)
