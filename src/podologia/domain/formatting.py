from __future__ import annotations

from urllib.parse import quote

from podologia.domain.models import ClinicalReport

MAPS_SEARCH = "https://www.google.com/maps/search/?api=1&query="


def patient_label(name: str | None, *, exists: bool = True) -> str:
    if not exists:
        return "Paciente eliminado"
    return (name or "").strip() or "Sin nombre"


def report_summary(report: ClinicalReport) -> str:
    """Una línea con el informe clínico; '-' para campos vacíos, '' si no hay informe."""
    if report.is_empty():
        return ""
    return (
        f"Diagnóstico: {report.diagnostico or '-'} | "
        f"Tratamiento: {report.tratamiento or '-'} | "
        f"Observaciones: {report.observaciones or '-'}"
    )


def maps_search_url(address: str) -> str:
    return MAPS_SEARCH + quote(address.strip(), safe="")
