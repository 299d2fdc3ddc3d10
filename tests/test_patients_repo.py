from __future__ import annotations

import sqlite3
from pathlib import Path

import pytest

from podologia.db.connection import connect
from podologia.db.schema import migrate
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


def test_create_and_list(conn: sqlite3.Connection):
    repo = PatientRepo(conn)
    pid = repo.create(PatientCreate("  Ana  ", phone="0412-0000000", address="Calle 1"))
    assert pid > 0

    rows = repo.list_all()
    assert len(rows) == 1
    assert rows[0].id == pid
    assert rows[0].name == "Ana"
    assert rows[0].phone == "0412-0000000"
    assert rows[0].address == "Calle 1"


def test_optional_fields_default_empty(conn: sqlite3.Connection):
    repo = PatientRepo(conn)
    pid = repo.create(PatientCreate("Luis"))
    p = repo.get(pid)
    assert p is not None
    assert p.phone == ""
    assert p.address == ""


@pytest.mark.parametrize("name", ["", "   "])
def test_create_without_name_fails_and_leaves_table_unchanged(conn: sqlite3.Connection, name: str):
    repo = PatientRepo(conn)
    repo.create(PatientCreate("Ana"))

    with pytest.raises(ValidationError):
        repo.create(PatientCreate(name, phone="123"))

    assert [p.name for p in repo.list_all()] == ["Ana"]


def test_ids_are_unique(conn: sqlite3.Connection):
    repo = PatientRepo(conn)
    ids = {repo.create(PatientCreate(f"P{i}")) for i in range(5)}
    assert len(ids) == 5


def test_search_by_name_or_phone(conn: sqlite3.Connection):
    repo = PatientRepo(conn)
    repo.create(PatientCreate("Ana Perez", phone="0414"))
    repo.create(PatientCreate("Luis Gomez", phone="0212"))

    assert [p.name for p in repo.search("perez")] == ["Ana Perez"]
    assert [p.name for p in repo.search("0212")] == ["Luis Gomez"]
    assert len(repo.search("")) == 2


def test_delete_cascades_to_visits_only_of_that_patient(conn: sqlite3.Connection):
    pr = PatientRepo(conn)
    vr = VisitRepo(conn)
    ana = pr.create(PatientCreate("Ana"))
    luis = pr.create(PatientCreate("Luis"))
    vr.create(VisitCreate(patient_id=ana, date="2024-01-01"))
    vr.create(VisitCreate(patient_id=ana, date="2024-01-08"))
    keep = vr.create(VisitCreate(patient_id=luis, date="2024-01-02"))

    removed = pr.delete(ana)

    assert removed == 2
    assert [p.id for p in pr.list_all()] == [luis]
    assert [v.id for v in vr.list_all()] == [keep]


def test_example_flow(conn: sqlite3.Connection):
    pr = PatientRepo(conn)
    vr = VisitRepo(conn)
    pid = pr.create(PatientCreate("Ana"))
    assert pid == 1
    vid = vr.create(VisitCreate(patient_id=1, date="2024-01-01"))
    assert vid == 1

    pr.delete(1)

    assert all(v.id != 1 for v in vr.list_all())
    assert pr.get(1) is None


def test_delete_missing_patient_is_noop(conn: sqlite3.Connection):
    pr = PatientRepo(conn)
    pr.create(PatientCreate("Ana"))
    assert pr.delete(999) == 0
    assert len(pr.list_all()) == 1


def test_cascade_delete_is_atomic(conn: sqlite3.Connection):
    pr = PatientRepo(conn)
    vr = VisitRepo(conn)
    pid = pr.create(PatientCreate("Ana"))
    vr.create(VisitCreate(patient_id=pid, date="2024-01-01"))

    # Falla el segundo paso (borrado del paciente) después de borrar sus visitas
    conn.execute(
        """CREATE TRIGGER block_patient_delete BEFORE DELETE ON patients
           BEGIN SELECT RAISE(ABORT, 'bloqueado'); END"""
    )
    conn.commit()

    with pytest.raises(StorageError):
        pr.delete(pid)

    assert [p.id for p in pr.list_all()] == [pid]
    assert len(vr.list_all()) == 1
