from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime

from podologia.db.connection import storage_errors, transaction
from podologia.domain.models import ClinicalReport, Visit
from podologia.domain.rules import (
    StorageError,
    ValidationError,
    validate_visit_date,
    validate_visit_required,
    validate_visit_time,
)

logger = logging.getLogger(__name__)

_COLUMNS = "id, patient_id, date, time, notes, diagnostico, tratamiento, observaciones"


def _now_iso() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


@dataclass
class VisitCreate:
    patient_id: int | None
    date: str | None  # "YYYY-MM-DD"
    time: str = ""  # "HH:MM"
    notes: str = ""


class VisitRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # ---------------- Lecturas ----------------

    def list_all(self) -> list[Visit]:
        with storage_errors("leer visitas"):
            rows = self.conn.execute(f"SELECT {_COLUMNS} FROM visits ORDER BY id").fetchall()
        return [Visit.from_row(r) for r in rows]

    def get(self, visit_id: int) -> Visit | None:
        with storage_errors("leer visita"):
            row = self.conn.execute(
                f"SELECT {_COLUMNS} FROM visits WHERE id=?", (visit_id,)
            ).fetchone()
        return Visit.from_row(row) if row else None

    def list_for_patient(self, patient_id: int) -> list[Visit]:
        with storage_errors("leer visitas del paciente"):
            rows = self.conn.execute(
                f"""SELECT {_COLUMNS}
                   FROM visits
                   WHERE patient_id=?
                   ORDER BY date DESC, time DESC, id DESC
                   LIMIT 200""",
                (patient_id,),
            ).fetchall()
        return [Visit.from_row(r) for r in rows]

    def list_by_date_range(self, start_date: str, end_date: str) -> list[sqlite3.Row]:
        """
        start_date / end_date: 'YYYY-MM-DD'. Incluye ambos extremos.
        Cada fila trae además `patient_name` (NULL si el paciente ya no existe).
        """
        with storage_errors("leer agenda"):
            return self.conn.execute(
                """SELECT v.id, v.patient_id, v.date, v.time, v.notes,
                          v.diagnostico, v.tratamiento, v.observaciones,
                          p.name AS patient_name
                   FROM visits v
                   LEFT JOIN patients p ON p.id = v.patient_id
                   WHERE v.date BETWEEN ? AND ?
                   ORDER BY v.date, v.time, v.id
                   LIMIT 1000""",
                (start_date, end_date),
            ).fetchall()

    # ---------------- Escrituras ----------------

    def create(self, v: VisitCreate) -> int:
        fecha = (v.date or "").strip()
        hora = (v.time or "").strip()
        try:
            validate_visit_required(v.patient_id, fecha)
            validate_visit_date(fecha)
            validate_visit_time(hora)
        except ValidationError as e:
            logger.warning("Visita rechazada: %s", e)
            raise

        with transaction(self.conn, "agendar visita"):
            exists = self.conn.execute(
                "SELECT 1 FROM patients WHERE id=?", (v.patient_id,)
            ).fetchone()
            if not exists:
                logger.warning("Visita rechazada: paciente %s no existe", v.patient_id)
                raise ValidationError("El paciente no existe.")

            # informe clínico siempre vacío al agendar
            cur = self.conn.execute(
                """INSERT INTO visits
                   (patient_id, date, time, notes, diagnostico, tratamiento, observaciones,
                    updated_at)
                   VALUES (?, ?, ?, ?, '', '', '', ?)""",
                (
                    v.patient_id,
                    fecha,
                    hora or None,
                    (v.notes or "").strip() or None,
                    _now_iso(),
                ),
            )
        last_id = cur.lastrowid
        if last_id is None:
            raise StorageError("No se pudo obtener lastrowid del INSERT (unexpected).")
        logger.info("Visita creada id=%s paciente=%s fecha=%s", last_id, v.patient_id, fecha)
        return int(last_id)

    def update(self, visit: Visit) -> None:
        """Sobrescribe la visita completa (gana la última escritura)."""
        with transaction(self.conn, "actualizar visita"):
            cur = self.conn.execute(
                """UPDATE visits SET
                     patient_id=?, date=?, time=?, notes=?,
                     diagnostico=?, tratamiento=?, observaciones=?,
                     updated_at=?
                   WHERE id=?""",
                (
                    visit.patient_id,
                    visit.date,
                    visit.time or None,
                    visit.notes or None,
                    visit.diagnostico,
                    visit.tratamiento,
                    visit.observaciones,
                    _now_iso(),
                    visit.id,
                ),
            )
            if cur.rowcount == 0:
                raise ValidationError("Visita no encontrada.")
        logger.info("Visita actualizada id=%s", visit.id)

    def save_report(self, visit_id: int, report: ClinicalReport) -> Visit:
        visit = self.get(visit_id)
        if visit is None:
            raise ValidationError("Visita no encontrada.")

        visit.diagnostico = (report.diagnostico or "").strip()
        visit.tratamiento = (report.tratamiento or "").strip()
        visit.observaciones = (report.observaciones or "").strip()
        self.update(visit)
        return visit

    def delete(self, visit_id: int) -> None:
        with transaction(self.conn, "eliminar visita"):
            self.conn.execute("DELETE FROM visits WHERE id=?", (visit_id,))
        logger.info("Visita eliminada id=%s", visit_id)
