from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime

from podologia.db.connection import storage_errors, transaction
from podologia.domain.models import Patient
from podologia.domain.rules import StorageError, ValidationError, validate_patient_name

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


@dataclass
class PatientCreate:
    name: str
    phone: str = ""
    address: str = ""


class PatientRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def list_all(self) -> list[Patient]:
        with storage_errors("leer pacientes"):
            rows = self.conn.execute(
                "SELECT id, name, phone, address FROM patients ORDER BY id"
            ).fetchall()
        return [Patient.from_row(r) for r in rows]

    def search(self, q: str) -> list[Patient]:
        q = (q or "").strip()
        if not q:
            return self.list_all()
        like = f"%{q}%"
        with storage_errors("buscar pacientes"):
            rows = self.conn.execute(
                """
                SELECT id, name, phone, address
                FROM patients
                WHERE name LIKE ? OR phone LIKE ?
                ORDER BY name
                LIMIT 200
                """,
                (like, like),
            ).fetchall()
        return [Patient.from_row(r) for r in rows]

    def get(self, patient_id: int) -> Patient | None:
        with storage_errors("leer paciente"):
            row = self.conn.execute(
                "SELECT id, name, phone, address FROM patients WHERE id=?",
                (patient_id,),
            ).fetchone()
        return Patient.from_row(row) if row else None

    def create(self, p: PatientCreate) -> int:
        try:
            validate_patient_name(p.name)
        except ValidationError:
            logger.warning("Paciente rechazado: nombre vacío")
            raise

        with transaction(self.conn, "guardar paciente"):
            cur = self.conn.execute(
                """
                INSERT INTO patients (name, phone, address, updated_at)
                VALUES (?, ?, ?, ?)
                """,
                (
                    p.name.strip(),
                    (p.phone or "").strip(),
                    (p.address or "").strip(),
                    _now_iso(),
                ),
            )
        last_id = cur.lastrowid
        if last_id is None:
            raise StorageError("No se pudo obtener lastrowid del INSERT (unexpected).")
        logger.info("Paciente creado id=%s", last_id)
        return int(last_id)

    def delete(self, patient_id: int) -> int:
        """
        Elimina el paciente y todas sus visitas en una sola transacción.
        Si algo falla no se borra nada. Retorna cuántas visitas se eliminaron.
        """
        with transaction(self.conn, "eliminar paciente"):
            cur = self.conn.execute("DELETE FROM visits WHERE patient_id=?", (patient_id,))
            removed_visits = cur.rowcount
            self.conn.execute("DELETE FROM patients WHERE id=?", (patient_id,))
        logger.info(
            "Paciente eliminado id=%s (visitas eliminadas: %s)", patient_id, removed_visits
        )
        return removed_visits
