from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from podologia.db.connection import connect
from podologia.db.schema import migrate
from podologia.domain.models import ClinicalReport, Visit
from podologia.domain.rules import StorageError, ValidationError
from podologia.repos.patients import PatientCreate, PatientRepo
from podologia.repos.visits import VisitCreate, VisitRepo


@pytest.fixture
def conn(tmp_path: Path):
    db = tmp_path / "t.db"
    c = connect(db, wal_mode=False)
    migrate(c)
    yield c
    c.close()


@pytest.fixture
def patient_id(conn: sqlite3.Connection) -> int:
    return PatientRepo(conn).create(PatientCreate("Ana"))


def test_create_visit_with_empty_report(conn: sqlite3.Connection, patient_id: int):
    repo = VisitRepo(conn)
    vid = repo.create(
        VisitCreate(patient_id=patient_id, date="2024-01-01", time="09:30", notes="Uña encarnada")
    )

    v = repo.get(vid)
    assert v is not None
    assert v.patient_id == patient_id
    assert v.date == "2024-01-01"
    assert v.time == "09:30"
    assert v.notes == "Uña encarnada"
    assert v.report == ClinicalReport()


@pytest.mark.parametrize(
    "data",
    [
        VisitCreate(patient_id=None, date="2024-01-01"),
        VisitCreate(patient_id=0, date="2024-01-01"),
        VisitCreate(patient_id=1, date=None),
        VisitCreate(patient_id=1, date="  "),
        VisitCreate(patient_id=1, date="01/02/2024"),
        VisitCreate(patient_id=1, date="2024-W01-1"),
        VisitCreate(patient_id=1, date="2024-01-01", time="25:00"),
    ],
)
def test_invalid_visit_fails_and_leaves_table_unchanged(
    conn: sqlite3.Connection, patient_id: int, data: VisitCreate
):
    repo = VisitRepo(conn)
    repo.create(VisitCreate(patient_id=patient_id, date="2024-01-01"))

    with pytest.raises(ValidationError):
        repo.create(data)

    assert len(repo.list_all()) == 1


def test_visit_for_unknown_patient_is_rejected(conn: sqlite3.Connection):
    repo = VisitRepo(conn)
    with pytest.raises(ValidationError):
        repo.create(VisitCreate(patient_id=42, date="2024-01-01"))
    assert repo.list_all() == []


def test_save_report_preserves_visit_identity(conn: sqlite3.Connection, patient_id: int):
    repo = VisitRepo(conn)
    vid = repo.create(
        VisitCreate(patient_id=patient_id, date="2024-03-05", time="10:00", notes="Control")
    )

    saved = repo.save_report(
        vid,
        ClinicalReport(
            diagnostico="Onicocriptosis", tratamiento=" Espiculotomía ", observaciones=""
        ),
    )

    v = repo.get(vid)
    assert v == saved
    assert (v.id, v.patient_id, v.date, v.time, v.notes) == (
        vid,
        patient_id,
        "2024-03-05",
        "10:00",
        "Control",
    )
    assert v.diagnostico == "Onicocriptosis"
    assert v.tratamiento == "Espiculotomía"
    assert v.observaciones == ""


def test_save_report_last_write_wins(conn: sqlite3.Connection, patient_id: int):
    repo = VisitRepo(conn)
    vid = repo.create(VisitCreate(patient_id=patient_id, date="2024-03-05"))

    repo.save_report(vid, ClinicalReport(diagnostico="A", tratamiento="B", observaciones="C"))
    repo.save_report(vid, ClinicalReport(diagnostico="X"))

    assert repo.get(vid).report == ClinicalReport(diagnostico="X")


def test_save_report_on_missing_visit(conn: sqlite3.Connection):
    with pytest.raises(ValidationError):
        VisitRepo(conn).save_report(123, ClinicalReport(diagnostico="X"))


def test_update_missing_visit_fails_and_leaves_table_unchanged(
    conn: sqlite3.Connection, patient_id: int
):
    repo = VisitRepo(conn)
    vid = repo.create(VisitCreate(patient_id=patient_id, date="2024-01-01", notes="Control"))

    with pytest.raises(ValidationError):
        repo.update(Visit(id=999, patient_id=patient_id, date="2024-02-02", diagnostico="X"))

    assert repo.list_all() == [
        Visit(id=vid, patient_id=patient_id, date="2024-01-01", notes="Control")
    ]


def test_update_to_unknown_patient_is_storage_error(conn: sqlite3.Connection, patient_id: int):
    repo = VisitRepo(conn)
    vid = repo.create(VisitCreate(patient_id=patient_id, date="2024-03-05"))
    v = repo.get(vid)
    v.patient_id = 999

    with pytest.raises(StorageError):
        repo.update(v)

    assert repo.get(vid).patient_id == patient_id


def test_delete_visit(conn: sqlite3.Connection, patient_id: int):
    repo = VisitRepo(conn)
    v1 = repo.create(VisitCreate(patient_id=patient_id, date="2024-01-01"))
    v2 = repo.create(VisitCreate(patient_id=patient_id, date="2024-01-02"))

    repo.delete(v1)
    repo.delete(v1)

    assert [v.id for v in repo.list_all()] == [v2]


def test_list_for_patient_newest_first(conn: sqlite3.Connection, patient_id: int):
    repo = VisitRepo(conn)
    repo.create(VisitCreate(patient_id=patient_id, date="2024-01-01"))
    repo.create(VisitCreate(patient_id=patient_id, date="2024-02-01"))

    assert [v.date for v in repo.list_for_patient(patient_id)] == ["2024-02-01", "2024-01-01"]


def test_list_by_date_range_is_inclusive(conn: sqlite3.Connection, patient_id: int):
    repo = VisitRepo(conn)
    for d in ("2024-01-01", "2024-01-15", "2024-01-31", "2024-02-01"):
        repo.create(VisitCreate(patient_id=patient_id, date=d))

    rows = repo.list_by_date_range("2024-01-01", "2024-01-31")

    assert [r["date"] for r in rows] == ["2024-01-01", "2024-01-15", "2024-01-31"]
    assert all(r["patient_name"] == "Ana" for r in rows)


def test_read_on_closed_store_raises_storage_error(tmp_path: Path):
    c = connect(tmp_path / "closed.db", wal_mode=False)
    migrate(c)
    c.close()

    with pytest.raises(StorageError):
        VisitRepo(c).list_all()
