from __future__ import annotations

import re
from datetime import date


class ValidationError(ValueError):
    pass


class StorageError(RuntimeError):
    pass


_DATE_RE = re.compile(r"^[0-9]{4}-[0-9]{2}-[0-9]{2}$")
_TIME_RE = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")


def validate_patient_name(name: str | None) -> None:
    if not (name or "").strip():
        raise ValidationError("Nombre requerido.")


def validate_visit_date(value: str) -> None:
    # YYYY-MM-DD estricto (lo que entrega el DateEntry)
    if not _DATE_RE.match(value):
        raise ValidationError("Fecha inválida (use AAAA-MM-DD).")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise ValidationError("Fecha inválida (use AAAA-MM-DD).") from None


def validate_visit_time(value: str) -> None:
    if value and not _TIME_RE.match(value):
        raise ValidationError("Hora inválida (use HH:MM).")


def validate_visit_required(patient_id: int | None, fecha: str | None) -> None:
    if not patient_id or not (fecha or "").strip():
        raise ValidationError("Paciente y fecha requeridos.")
