import pytest

from podologia.config import load_config
from podologia.domain.rules import (
    ValidationError,
    validate_patient_name,
    validate_visit_date,
    validate_visit_required,
    validate_visit_time,
)


def test_patient_name_required():
    validate_patient_name("Ana")
    for bad in ("", "   ", None):
        with pytest.raises(ValidationError):
            validate_patient_name(bad)


def test_visit_requires_patient_and_date():
    validate_visit_required(1, "2024-01-01")
    with pytest.raises(ValidationError):
        validate_visit_required(None, "2024-01-01")
    with pytest.raises(ValidationError):
        validate_visit_required(1, "")


def test_visit_date_format():
    validate_visit_date("2024-02-29")
    for bad in ("2023-02-29", "20240101", "01-01-2024", "2024-W01-1", "2024-001", "hoy"):
        with pytest.raises(ValidationError):
            validate_visit_date(bad)


def test_visit_time_is_optional():
    validate_visit_time("")
    validate_visit_time("08:05")
    validate_visit_time("23:59")
    for bad in ("8:05", "24:00", "12:60", "mediodía"):
        with pytest.raises(ValidationError):
            validate_visit_time(bad)


def test_shipped_config_loads():
    cfg = load_config()
    assert cfg.app.title == "Agenda de Podología"
    assert cfg.storage.db_path.name == "podologia.db"
    assert cfg.logging.level == "INFO"
