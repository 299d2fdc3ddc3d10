from __future__ import annotations

from pathlib import Path

import pytest

from podologia.config import load_config


def test_partial_config_uses_defaults(tmp_path: Path):
    p = tmp_path / "config.yaml"
    p.write_text(
        "storage:\n  db_path: ./x/agenda.db\n  wal_mode: false\nlogging:\n  level: debug\n",
        encoding="utf-8",
    )

    cfg = load_config(p)

    assert cfg.storage.db_path == Path("./x/agenda.db").resolve()
    assert cfg.storage.wal_mode is False
    assert cfg.storage.backup_on_exit is True
    assert cfg.storage.backups_dir == Path("./backups").resolve()
    assert cfg.logging.level == "DEBUG"
    assert cfg.logging.file is None
    assert cfg.app.title == "Agenda de Podología"
    assert cfg.ui.geometry == "1000x680"


def test_empty_config_file(tmp_path: Path):
    p = tmp_path / "config.yaml"
    p.write_text("", encoding="utf-8")

    cfg = load_config(p)

    assert cfg.storage.db_path.name == "podologia.db"


def test_missing_config_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")
