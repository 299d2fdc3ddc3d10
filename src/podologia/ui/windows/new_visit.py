from __future__ import annotations

import sqlite3
import tkinter as tk
from datetime import date
from tkinter import ttk

from tkcalendar import DateEntry

from podologia.domain.formatting import patient_label
from podologia.domain.rules import StorageError, ValidationError
from podologia.repos.patients import PatientRepo
from podologia.repos.visits import VisitCreate, VisitRepo
from podologia.ui.events import VISITS, EventBus
from podologia.ui.widgets.common import error, info, warn


class NewVisitWindow(tk.Toplevel):
    def __init__(
        self,
        master: tk.Misc,
        conn: sqlite3.Connection,
        *,
        bus: EventBus,
        patient_id: int | None = None,
    ):
        super().__init__(master)
        self.bus = bus
        self.repo = VisitRepo(conn)
        self.patients = PatientRepo(conn).list_all()
        self.initial_patient_id = patient_id

        self.title("Agendar visita")
        self.geometry("520x360")
        self.resizable(False, False)

        self._build()

        # Modal
        self.transient(master)
        self.grab_set()

    def _build(self) -> None:
        style = ttk.Style()
        style.configure("Field.TLabel", font=("Segoe UI", 9, "bold"), foreground="#0b2d5c")

        frm = ttk.Frame(self)
        frm.pack(fill=tk.BOTH, expand=True, padx=12, pady=12)
        frm.grid_columnconfigure(1, weight=1)

        r = 0
        ttk.Label(frm, text="Paciente:", style="Field.TLabel").grid(row=r, column=0, sticky="w")
        # "id - nombre" para poder recuperar el id al guardar
        self._labels = [f"{p.id} - {patient_label(p.name)}" for p in self.patients]
        self.patient_var = tk.StringVar()
        ttk.Combobox(
            frm, textvariable=self.patient_var, values=self._labels, state="readonly", width=36
        ).grid(row=r, column=1, sticky="w", padx=(6, 0), pady=4)
        for p, lbl in zip(self.patients, self._labels):
            if p.id == self.initial_patient_id:
                self.patient_var.set(lbl)
        r += 1

        ttk.Label(frm, text="Fecha:", style="Field.TLabel").grid(row=r, column=0, sticky="w")
        self.de_date = DateEntry(frm, width=12, date_pattern="yyyy-mm-dd")
        self.de_date.set_date(date.today())
        self.de_date.grid(row=r, column=1, sticky="w", padx=(6, 0), pady=4)
        r += 1

        ttk.Label(frm, text="Hora (HH:MM):", style="Field.TLabel").grid(row=r, column=0, sticky="w")
        self.time_var = tk.StringVar()
        ttk.Entry(frm, textvariable=self.time_var, width=8).grid(
            row=r, column=1, sticky="w", padx=(6, 0), pady=4
        )
        r += 1

        ttk.Label(frm, text="Comentario / Evento / Causalidad:", style="Field.TLabel").grid(
            row=r, column=0, columnspan=2, sticky="w", pady=(10, 0)
        )
        r += 1
        self.txt_notes = tk.Text(frm, height=5, wrap="word")
        self.txt_notes.grid(row=r, column=0, columnspan=2, sticky="nsew", pady=(2, 0))
        frm.grid_rowconfigure(r, weight=1)
        r += 1

        btns = ttk.Frame(frm)
        btns.grid(row=r, column=0, columnspan=2, sticky="e", pady=(12, 0))
        ttk.Button(btns, text="Guardar", command=self.save).pack(side=tk.LEFT)
        ttk.Button(btns, text="Cancelar", command=self.destroy).pack(side=tk.LEFT, padx=8)

    def _selected_patient_id(self) -> int | None:
        lbl = self.patient_var.get()
        if lbl not in self._labels:
            return None
        return self.patients[self._labels.index(lbl)].id

    def save(self) -> None:
        try:
            visit_id = self.repo.create(
                VisitCreate(
                    patient_id=self._selected_patient_id(),
                    date=self.de_date.get_date().isoformat(),
                    time=self.time_var.get(),
                    notes=self.txt_notes.get("1.0", tk.END),
                )
            )
        except ValidationError as e:
            warn(str(e))
            return
        except StorageError as e:
            error(str(e))
            return

        self.bus.publish(VISITS)
        info(f"Visita agendada (ID: {visit_id}).")
        self.destroy()
