from __future__ import annotations

import logging
import sqlite3
import tkinter as tk
from tkinter import ttk

from podologia.config import Settings
from podologia.ui.events import EventBus
from podologia.ui.views.patients import PatientsView
from podologia.ui.views.visits import VisitsView

logger = logging.getLogger(__name__)


def run_main_window(cfg: Settings, conn: sqlite3.Connection) -> None:
    root = tk.Tk()
    root.title(cfg.app.title)
    root.geometry(cfg.ui.geometry)

    bus = EventBus()

    nb = ttk.Notebook(root)
    nb.pack(fill=tk.BOTH, expand=True)

    patients = PatientsView(nb, conn, bus=bus)
    visits = VisitsView(nb, conn, bus=bus)

    nb.add(patients, text="Pacientes")
    nb.add(visits, text="Visitas")

    def on_tab_changed(_evt: object = None) -> None:
        widget = nb.nametowidget(nb.select())
        if hasattr(widget, "refresh"):
            widget.refresh()

    nb.bind("<<NotebookTabChanged>>", on_tab_changed)

    nb.select(patients)
    logger.info("Ventana principal iniciada")
    root.mainloop()
