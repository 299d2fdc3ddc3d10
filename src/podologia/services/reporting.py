from __future__ import annotations

import sqlite3

from podologia.db.connection import storage_errors


def report_counts(conn: sqlite3.Connection, start_date: str, end_date: str) -> dict[str, int]:
    with storage_errors("contar informes"):
        row = conn.execute(
            """
            SELECT COUNT(*) AS total,
                   SUM(CASE WHEN diagnostico <> '' OR tratamiento <> '' OR observaciones <> ''
                            THEN 1 ELSE 0 END) AS con_informe
            FROM visits
            WHERE date BETWEEN ? AND ?
            """,
            (start_date, end_date),
        ).fetchone()
    total = int(row["total"] or 0)
    con_informe = int(row["con_informe"] or 0)
    return {"total": total, "con_informe": con_informe, "sin_informe": total - con_informe}


def pending_reports(conn: sqlite3.Connection, *, until: str, limit: int = 200) -> list[sqlite3.Row]:
    # Visitas hasta `until` (inclusive) que todavía no tienen informe clínico
    with storage_errors("leer visitas sin informe"):
        return conn.execute(
            """
            SELECT v.id, v.date, v.time, p.name AS patient_name
            FROM visits v
            LEFT JOIN patients p ON p.id = v.patient_id
            WHERE v.date <= ?
              AND v.diagnostico = '' AND v.tratamiento = '' AND v.observaciones = ''
            ORDER BY v.date DESC, v.time DESC
            LIMIT ?
            """,
            (until, int(limit)),
        ).fetchall()
