from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml


@dataclass(frozen=True)
class StorageConfig:
    db_path: Path
    backups_dir: Path
    wal_mode: bool = True
    backup_on_exit: bool = True


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    file: Path | None = None


@dataclass(frozen=True)
class UiConfig:
    geometry: str = "1000x680"


@dataclass(frozen=True)
class AppConfig:
    title: str = "Agenda de Podología"
    locale: str = "es"


@dataclass(frozen=True)
class Settings:
    app: AppConfig
    storage: StorageConfig
    logging: LoggingConfig
    ui: UiConfig


def _as_path(p: str) -> Path:
    return Path(p).resolve()


def load_config(path: str | Path = "config/config.yaml") -> Settings:
    with open(path, "r", encoding="utf-8") as f:
        raw: dict[str, Any] = yaml.safe_load(f) or {}

    app_raw = raw.get("app", {}) or {}
    storage_raw = raw.get("storage", {}) or {}
    log_raw = raw.get("logging", {}) or {}
    ui_raw = raw.get("ui", {}) or {}

    storage = StorageConfig(
        db_path=_as_path(storage_raw.get("db_path", "./data/podologia.db")),
        backups_dir=_as_path(storage_raw.get("backups_dir", "./backups")),
        wal_mode=bool(storage_raw.get("wal_mode", True)),
        backup_on_exit=bool(storage_raw.get("backup_on_exit", True)),
    )

    log_file = log_raw.get("file")
    logging_cfg = LoggingConfig(
        level=str(log_raw.get("level", "INFO")).upper(),
        file=_as_path(log_file) if log_file else None,
    )

    app = AppConfig(
        title=str(app_raw.get("title", "Agenda de Podología")),
        locale=str(app_raw.get("locale", "es")),
    )
    ui = UiConfig(geometry=str(ui_raw.get("geometry", "1000x680")))
    return Settings(app=app, storage=storage, logging=logging_cfg, ui=ui)
