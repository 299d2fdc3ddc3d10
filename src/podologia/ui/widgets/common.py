from __future__ import annotations

import functools
import logging
import webbrowser
from collections.abc import Callable
from tkinter import messagebox
from typing import Any

from podologia.domain.formatting import maps_search_url
from podologia.domain.rules import StorageError

logger = logging.getLogger(__name__)


def info(msg: str, title: str = "Info") -> None:
    messagebox.showinfo(title, msg)


def warn(msg: str, title: str = "Atención") -> None:
    messagebox.showwarning(title, msg)


def error(msg: str, title: str = "Error") -> None:
    messagebox.showerror(title, msg)


def shows_storage_errors(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Para callbacks de Tk: un StorageError se muestra en un diálogo de error."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except StorageError as e:
            logger.warning("%s falló: %s", fn.__qualname__, e)
            error(str(e))
            return None

    return wrapper


def open_map(address: str) -> None:
    if not address.strip():
        warn("El paciente no tiene dirección.")
        return
    webbrowser.open(maps_search_url(address), new=2)
