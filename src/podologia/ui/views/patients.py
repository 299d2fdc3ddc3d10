from __future__ import annotations

import sqlite3
import tkinter as tk
from tkinter import messagebox, ttk

from podologia.domain.formatting import patient_label, report_summary
from podologia.domain.rules import StorageError, ValidationError
from podologia.repos.patients import PatientCreate, PatientRepo
from podologia.repos.visits import VisitRepo
from podologia.ui.events import PATIENTS, VISITS, EventBus
from podologia.ui.widgets.common import error, info, open_map, shows_storage_errors, warn
from podologia.ui.windows.new_visit import NewVisitWindow


class PatientsView(ttk.Frame):
    def __init__(self, master: tk.Misc, conn: sqlite3.Connection, *, bus: EventBus):
        super().__init__(master)
        self.conn = conn
        self.bus = bus
        self.repo = PatientRepo(conn)
        self.visits = VisitRepo(conn)
        self.selected_id: int | None = None

        # Auto-refresh sin botón:
        self.bus.subscribe(PATIENTS, self.refresh)
        self.bus.subscribe(VISITS, self._refresh_selected_patient_panels)

        self._build()
        self.refresh()

    def _build(self) -> None:
        body = ttk.Frame(self)
        body.pack(fill=tk.BOTH, expand=True, padx=12, pady=(12, 12))

        style = ttk.Style()
        style.configure("Pacientes.Treeview.Heading", font=("Segoe UI", 9, "bold"))
        style.configure(
            "Pacientes.Treeview",
            rowheight=22,
            background="#ffffff",
            fieldbackground="#ffffff",
        )
        style.map(
            "Pacientes.Treeview",
            background=[("selected", "#cce8ff")],
            foreground=[("selected", "#000000")],
        )
        style.configure("Clean.TLabelframe", padding=(10, 8))
        style.configure("Clean.TLabelframe.Label", font=("Segoe UI", 10, "bold"))

        # ---------- Alta de paciente (IZQUIERDA) ----------
        form = ttk.LabelFrame(
            body, text="Agregar paciente", style="Clean.TLabelframe", labelanchor="nw"
        )
        form.pack(side=tk.LEFT, fill=tk.Y, padx=(0, 12))
        form.configure(width=340)
        form.pack_propagate(False)

        self.name = tk.StringVar()
        self.phone = tk.StringVar()

        self.ent_name = self._row_entry(form, "Nombre:", self.name)
        self._row_entry(form, "Teléfono:", self.phone)

        ttk.Label(form, text="Dirección:").pack(anchor="w", padx=10, pady=(4, 0))
        self.address = tk.Text(form, height=3, wrap="word")
        self.address.pack(fill=tk.X, padx=10, pady=(2, 6))
        self.address.bind("<Tab>", self._focus_next)

        btns = ttk.Frame(form)
        btns.pack(fill=tk.X, padx=10, pady=(6, 10))
        ttk.Button(btns, text="Guardar", command=self.save).pack(side=tk.RIGHT)
        ttk.Button(btns, text="Limpiar", command=self.clear_form).pack(side=tk.RIGHT, padx=8)

        # ---------- Lista de pacientes (DERECHA) ----------
        right = ttk.Frame(body)
        right.pack(side=tk.RIGHT, fill=tk.BOTH, expand=True)

        top = ttk.Frame(right)
        top.pack(fill=tk.X, pady=(0, 8))

        ttk.Label(top, text="Buscar (nombre / teléfono):").pack(side=tk.LEFT)
        self.q = tk.StringVar()
        ent_q = ttk.Entry(top, textvariable=self.q, width=28)
        ent_q.pack(side=tk.LEFT, padx=6)
        ent_q.bind("<Return>", lambda _e: self.refresh())
        ttk.Button(top, text="Buscar", command=self.refresh).pack(side=tk.LEFT, padx=6)

        self.btn_new_visit = ttk.Button(
            top, text="Agendar visita", command=self.open_new_visit, state=tk.DISABLED
        )
        self.btn_new_visit.pack(side=tk.LEFT, padx=(12, 6))
        self.btn_map = ttk.Button(top, text="Ver en mapa", command=self.show_map, state=tk.DISABLED)
        self.btn_map.pack(side=tk.LEFT, padx=(0, 6))
        self.btn_delete = ttk.Button(
            top, text="Eliminar", command=self.delete_patient, state=tk.DISABLED
        )
        self.btn_delete.pack(side=tk.LEFT)

        pan = ttk.PanedWindow(right, orient=tk.VERTICAL)
        pan.pack(fill=tk.BOTH, expand=True)

        patients_box = ttk.Frame(pan)
        pan.add(patients_box, weight=1)
        bottom_box = ttk.Frame(pan)
        pan.add(bottom_box, weight=1)

        cols = ("nombre", "telefono", "direccion")
        self.tree = ttk.Treeview(
            patients_box, columns=cols, show="headings", height=10, style="Pacientes.Treeview"
        )
        for c, t, w in [
            ("nombre", "Nombre", 220),
            ("telefono", "Teléfono", 130),
            ("direccion", "Dirección", 300),
        ]:
            self.tree.heading(c, text=t, anchor="w")
            self.tree.column(c, width=w, anchor="w")
        self.tree.bind("<<TreeviewSelect>>", self.on_select)
        self.tree.pack(fill=tk.BOTH, expand=True)

        # --- Historial ---
        self.hist_frame = ttk.LabelFrame(
            bottom_box, text="Visitas (paciente seleccionado)", labelanchor="nw"
        )
        self.hist_frame.pack(fill=tk.BOTH, expand=True, pady=(10, 0))

        cols_h = ("fecha", "hora", "notas", "informe")
        self.tree_hist = ttk.Treeview(self.hist_frame, columns=cols_h, show="headings", height=6)
        for c, t, w in [
            ("fecha", "Fecha", 100),
            ("hora", "Hora", 60),
            ("notas", "Notas", 220),
            ("informe", "Informe", 420),
        ]:
            self.tree_hist.heading(c, text=t, anchor="w")
            self.tree_hist.column(c, width=w, anchor="w")
        self.tree_hist.pack(fill=tk.BOTH, expand=True)

        self.tree_hist.tag_configure("even", background="#eef6ee")
        self.tree_hist.tag_configure("odd", background="#ffffff")

    def _row_entry(
        self, master: tk.Misc, label: str, var: tk.StringVar, width: int = 26
    ) -> ttk.Entry:
        row = ttk.Frame(master)
        row.pack(fill=tk.X, padx=10, pady=3)
        ttk.Label(row, text=label, width=10).pack(side=tk.LEFT)
        ent = ttk.Entry(row, textvariable=var, width=width)
        ent.pack(side=tk.LEFT, padx=6, fill=tk.X, expand=True)
        return ent

    # ---------------- Refresh ----------------

    @shows_storage_errors
    def _refresh_selected_patient_panels(self) -> None:
        if self.selected_id is not None:
            self._load_hist(self.selected_id)

    @shows_storage_errors
    def refresh(self) -> None:
        prev = self.selected_id

        for i in self.tree.get_children():
            self.tree.delete(i)

        for p in self.repo.search(self.q.get()):
            self.tree.insert(
                "",
                "end",
                iid=str(p.id),
                values=(patient_label(p.name), p.phone, p.address),
            )

        if prev is not None and self.tree.exists(str(prev)):
            self.tree.selection_set(str(prev))
            self.tree.see(str(prev))
            self._load_hist(prev)
        else:
            self._select_none()

    def _clear_hist(self) -> None:
        for i in self.tree_hist.get_children():
            self.tree_hist.delete(i)

    def _load_hist(self, patient_id: int) -> None:
        self._clear_hist()
        for idx, v in enumerate(self.visits.list_for_patient(patient_id)):
            tag = "even" if idx % 2 == 0 else "odd"
            self.tree_hist.insert(
                "",
                "end",
                tags=(tag,),
                values=(v.date, v.time, v.notes[:120], report_summary(v.report)[:250]),
            )

    # ---------------- Actions ----------------

    def _select_none(self) -> None:
        self.selected_id = None
        self.hist_frame.config(text="Visitas (paciente seleccionado)")
        for b in (self.btn_new_visit, self.btn_map, self.btn_delete):
            b.config(state=tk.DISABLED)
        self._clear_hist()

    def clear_form(self) -> None:
        self.name.set("")
        self.phone.set("")
        self.address.delete("1.0", tk.END)
        self.ent_name.focus_set()

    @shows_storage_errors
    def on_select(self, _evt: object = None) -> None:
        sel = self.tree.selection()
        if not sel:
            self._select_none()
            return

        patient_id = int(sel[0])
        p = self.repo.get(patient_id)
        if p is None:
            self._select_none()
            return

        self.selected_id = patient_id
        self.hist_frame.config(text=f"Visitas de {patient_label(p.name)}")
        self.btn_new_visit.config(state=tk.NORMAL)
        self.btn_delete.config(state=tk.NORMAL)
        self.btn_map.config(state=tk.NORMAL if p.address else tk.DISABLED)
        self._load_hist(patient_id)

    def save(self) -> None:
        try:
            self.selected_id = self.repo.create(
                PatientCreate(
                    name=self.name.get(),
                    phone=self.phone.get(),
                    address=self.address.get("1.0", tk.END),
                )
            )
            info("Paciente agregado.")
            self.clear_form()
            self.bus.publish(PATIENTS)
        except ValidationError as e:
            warn(str(e))
        except StorageError as e:
            error(str(e))

    def delete_patient(self) -> None:
        if self.selected_id is None:
            warn("Selecciona un paciente primero.")
            return

        if not messagebox.askyesno(
            "Confirmar eliminación",
            "¿Eliminar este paciente y todas sus visitas? Esta acción no se puede deshacer.",
        ):
            return

        try:
            removed = self.repo.delete(self.selected_id)
            info(f"Paciente eliminado (visitas eliminadas: {removed}).")
            self._select_none()
            self.bus.publish(PATIENTS)
            self.bus.publish(VISITS)
        except StorageError as e:
            error(str(e))

    def open_new_visit(self) -> None:
        if self.selected_id is None:
            warn("Selecciona un paciente primero.")
            return
        win = NewVisitWindow(self, self.conn, bus=self.bus, patient_id=self.selected_id)
        self.wait_window(win)

    @shows_storage_errors
    def show_map(self) -> None:
        if self.selected_id is None:
            return
        p = self.repo.get(self.selected_id)
        if p is not None:
            open_map(p.address)

    def _focus_next(self, event: tk.Event) -> str:
        event.widget.tk_focusNext().focus_set()
        return "break"
