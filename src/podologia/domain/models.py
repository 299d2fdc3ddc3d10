from __future__ import annotations

import sqlite3
from dataclasses import dataclass


@dataclass
class Patient:
    id: int
    name: str
    phone: str = ""
    address: str = ""

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> Patient:
        return cls(
            id=int(row["id"]),
            name=row["name"],
            phone=row["phone"] or "",
            address=row["address"] or "",
        )


@dataclass
class ClinicalReport:
    diagnostico: str = ""
    tratamiento: str = ""
    observaciones: str = ""

    def is_empty(self) -> bool:
        return not (self.diagnostico or self.tratamiento or self.observaciones)


@dataclass
class Visit:
    id: int
    patient_id: int
    date: str
    time: str = ""
    notes: str = ""
    diagnostico: str = ""
    tratamiento: str = ""
    observaciones: str = ""

    @property
    def report(self) -> ClinicalReport:
        return ClinicalReport(self.diagnostico, self.tratamiento, self.observaciones)

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> Visit:
        return cls(
            id=int(row["id"]),
            patient_id=int(row["patient_id"]),
            date=row["date"],
            time=row["time"] or "",
            notes=row["notes"] or "",
            diagnostico=row["diagnostico"] or "",
            tratamiento=row["tratamiento"] or "",
            observaciones=row["observaciones"] or "",
        )
