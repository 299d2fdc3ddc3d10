from __future__ import annotations

import logging

from podologia.config import LoggingConfig

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(cfg: LoggingConfig) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if cfg.file is not None:
        cfg.file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(cfg.file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, cfg.level, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
