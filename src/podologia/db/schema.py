from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 2

_SCHEMA: list[str] = [
    # Pacientes
    """CREATE TABLE IF NOT EXISTS patients (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        phone TEXT,
        address TEXT,
        created_at TEXT NOT NULL DEFAULT (datetime('now')),
        updated_at TEXT
    );""",
    """CREATE INDEX IF NOT EXISTS idx_patients_name ON patients(name);""",
    # Visitas (sin cascada en la FK: el borrado del paciente limpia sus visitas en la misma transacción)
    """CREATE TABLE IF NOT EXISTS visits (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        patient_id INTEGER NOT NULL,
        date TEXT NOT NULL,
        notes TEXT,
        created_at TEXT NOT NULL DEFAULT (datetime('now')),
        updated_at TEXT,
        FOREIGN KEY (patient_id) REFERENCES patients(id) ON DELETE RESTRICT
    );""",
    """CREATE INDEX IF NOT EXISTS idx_visits_date ON visits(date);""",
    """CREATE INDEX IF NOT EXISTS idx_visits_patient ON visits(patient_id);""",
]

# Columnas agregadas en la versión 2 (informe clínico + hora)
_ADDITIVE_COLUMNS: list[tuple[str, str, str]] = [
    ("visits", "time", "time TEXT"),
    ("visits", "diagnostico", "diagnostico TEXT NOT NULL DEFAULT ''"),
    ("visits", "tratamiento", "tratamiento TEXT NOT NULL DEFAULT ''"),
    ("visits", "observaciones", "observaciones TEXT NOT NULL DEFAULT ''"),
]


def _colnames(conn: sqlite3.Connection, table: str) -> set[str]:
    rows = conn.execute(f"PRAGMA table_info({table})").fetchall()
    # table_info: (cid, name, type, notnull, dflt_value, pk)
    return {r[1] for r in rows}


def _ensure_column(conn: sqlite3.Connection, table: str, col: str, col_def: str) -> None:
    cols = _colnames(conn, table)
    if col not in cols:
        conn.execute(f"ALTER TABLE {table} ADD COLUMN {col_def}")
        logger.info("Columna agregada: %s.%s", table, col)


def schema_version(conn: sqlite3.Connection) -> int:
    return int(conn.execute("PRAGMA user_version").fetchone()[0])


def migrate(conn: sqlite3.Connection) -> None:
    conn.execute("PRAGMA foreign_keys = ON;")

    for stmt in _SCHEMA:
        conn.execute(stmt)
    conn.commit()

    # Backward-compatible adds (por si la DB es de la versión 1)
    for table, col, col_def in _ADDITIVE_COLUMNS:
        _ensure_column(conn, table, col, col_def)

    if schema_version(conn) < SCHEMA_VERSION:
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
    conn.commit()
