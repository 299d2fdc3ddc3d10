from __future__ import annotations

import sqlite3
import tkinter as tk
from datetime import date, timedelta
from tkinter import messagebox, ttk

from tkcalendar import DateEntry

from podologia.domain.formatting import patient_label, report_summary
from podologia.domain.models import ClinicalReport
from podologia.domain.rules import StorageError
from podologia.repos.visits import VisitRepo
from podologia.services.reporting import pending_reports, report_counts
from podologia.ui.events import PATIENTS, VISITS, EventBus
from podologia.ui.widgets.common import error, info, shows_storage_errors, warn
from podologia.ui.windows.edit_report import EditReportWindow
from podologia.ui.windows.new_visit import NewVisitWindow


class VisitsView(ttk.Frame):
    def __init__(self, master: tk.Misc, conn: sqlite3.Connection, *, bus: EventBus):
        super().__init__(master)
        self.conn = conn
        self.bus = bus
        self.bus.subscribe(VISITS, self.refresh)
        self.bus.subscribe(PATIENTS, self.refresh)
        self.repo = VisitRepo(conn)
        self._build()

    def _build(self) -> None:
        today = date.today()

        style = ttk.Style()
        style.configure("Visitas.Treeview.Heading", font=("Segoe UI", 9, "bold"))
        style.configure(
            "Visitas.Treeview",
            rowheight=22,
            background="#ffffff",
            fieldbackground="#ffffff",
        )
        style.map(
            "Visitas.Treeview",
            background=[("selected", "#cce8ff")],
            foreground=[("selected", "#000000")],
        )
        style.configure("Visitas.TLabelframe.Label", font=("Segoe UI", 10, "bold"))
        style.configure("Inferior.TLabelframe.Label", font=("Segoe UI", 10, "bold"))

        # --- Top: rango + acciones ---
        top = ttk.Frame(self)
        top.pack(fill=tk.X, padx=12, pady=12)

        ttk.Label(top, text="Desde:").pack(side=tk.LEFT)
        self.de_from = DateEntry(top, width=12, date_pattern="yyyy-mm-dd")
        self.de_from.set_date(today)
        self.de_from.pack(side=tk.LEFT, padx=(6, 10))

        ttk.Label(top, text="Hasta:").pack(side=tk.LEFT)
        self.de_to = DateEntry(top, width=12, date_pattern="yyyy-mm-dd")
        self.de_to.set_date(today + timedelta(days=30))
        self.de_to.pack(side=tk.LEFT, padx=(6, 10))

        ttk.Button(top, text="Aplicar", command=self.refresh).pack(side=tk.LEFT, padx=(0, 8))
        ttk.Button(top, text="Hoy", command=self._set_today).pack(side=tk.LEFT, padx=(0, 8))
        ttk.Button(top, text="Esta semana", command=self._set_this_week).pack(
            side=tk.LEFT, padx=(0, 8)
        )
        ttk.Button(top, text="Este mes", command=self._set_this_month).pack(side=tk.LEFT)

        ttk.Button(top, text="Eliminar", command=self.delete_visit).pack(side=tk.RIGHT)
        ttk.Button(top, text="Informe", command=self.open_report).pack(side=tk.RIGHT, padx=8)
        ttk.Button(top, text="Agendar visita", command=self.open_new_visit).pack(side=tk.RIGHT)

        pan = ttk.PanedWindow(self, orient=tk.VERTICAL)
        pan.pack(fill=tk.BOTH, expand=True, padx=12, pady=(0, 12))

        visits_container = ttk.Frame(pan)
        pan.add(visits_container, weight=2)
        bottom_container = ttk.Frame(pan)
        pan.add(bottom_container, weight=1)

        # --- Visitas ---
        self.mid = ttk.LabelFrame(
            visits_container, text="Visitas", style="Visitas.TLabelframe", labelanchor="nw"
        )
        self.mid.pack(fill=tk.BOTH, expand=True)

        cols = ("fecha", "hora", "paciente", "notas", "informe")
        self.tree = ttk.Treeview(
            self.mid, columns=cols, show="headings", height=14, style="Visitas.Treeview"
        )
        for c, t, w in [
            ("fecha", "Fecha", 100),
            ("hora", "Hora", 60),
            ("paciente", "Paciente", 200),
            ("notas", "Notas", 220),
            ("informe", "Informe", 380),
        ]:
            self.tree.heading(c, text=t, anchor="w")
            self.tree.column(c, width=w, anchor="w")
        self.tree.pack(fill=tk.BOTH, expand=True)
        self.tree.bind("<Double-1>", lambda _e: self.open_report())

        self.tree.tag_configure("even", background="#eef2fb")
        self.tree.tag_configure("odd", background="#ffffff")
        self.tree.tag_configure("orphan", foreground="#a00000")

        # --- Pendientes de informe ---
        self.bottom = ttk.LabelFrame(
            bottom_container,
            text="Visitas sin informe clínico",
            style="Inferior.TLabelframe",
            labelanchor="nw",
        )
        self.bottom.pack(fill=tk.BOTH, expand=True)

        self.lbl_counts = ttk.Label(self.bottom, text="")
        self.lbl_counts.pack(anchor="w", padx=10, pady=(6, 4))

        cols_p = ("fecha", "hora", "paciente")
        self.tree_pending = ttk.Treeview(self.bottom, columns=cols_p, show="headings", height=5)
        for c, t, w in [("fecha", "Fecha", 100), ("hora", "Hora", 60), ("paciente", "Paciente", 300)]:
            self.tree_pending.heading(c, text=t, anchor="w")
            self.tree_pending.column(c, width=w, anchor="w")
        self.tree_pending.pack(fill=tk.BOTH, expand=True)
        self.tree_pending.bind("<Double-1>", lambda _e: self.open_report(self.tree_pending))

        self.refresh()

    # ---------- Range helpers ----------

    def _get_range(self) -> tuple[date, date]:
        d1 = self.de_from.get_date()
        d2 = self.de_to.get_date()
        if d1 > d2:
            d1, d2 = d2, d1
            self.de_from.set_date(d1)
            self.de_to.set_date(d2)
        return d1, d2

    def _set_range(self, d1: date, d2: date) -> None:
        if d1 > d2:
            d1, d2 = d2, d1
        self.de_from.set_date(d1)
        self.de_to.set_date(d2)
        self.refresh()

    def _set_today(self) -> None:
        d = date.today()
        self._set_range(d, d)

    def _set_this_week(self) -> None:
        # Semana: lunes..domingo (ISO)
        today = date.today()
        start = today - timedelta(days=today.weekday())
        self._set_range(start, start + timedelta(days=6))

    def _set_this_month(self) -> None:
        start = date.today().replace(day=1)
        if start.month == 12:
            next_month = start.replace(year=start.year + 1, month=1)
        else:
            next_month = start.replace(month=start.month + 1)
        self._set_range(start, next_month - timedelta(days=1))

    # ---------- Refresh ----------

    @shows_storage_errors
    def refresh(self) -> None:
        d1, d2 = self._get_range()
        if d1 == d2:
            self.mid.config(text=f"Visitas ({d1.isoformat()})")
        else:
            self.mid.config(text=f"Visitas ({d1.isoformat()} → {d2.isoformat()})")

        for i in self.tree.get_children():
            self.tree.delete(i)

        rows = self.repo.list_by_date_range(d1.isoformat(), d2.isoformat())
        for idx, r in enumerate(rows):
            tags: tuple[str, ...] = ("even" if idx % 2 == 0 else "odd",)
            exists = r["patient_name"] is not None
            if not exists:
                tags += ("orphan",)
            report = ClinicalReport(r["diagnostico"], r["tratamiento"], r["observaciones"])
            self.tree.insert(
                "",
                "end",
                iid=str(r["id"]),
                tags=tags,
                values=(
                    r["date"],
                    r["time"] or "",
                    patient_label(r["patient_name"], exists=exists),
                    (r["notes"] or "")[:100],
                    report_summary(report)[:250],
                ),
            )

        counts = report_counts(self.conn, d1.isoformat(), d2.isoformat())
        self.lbl_counts.config(
            text=f"En el rango: {counts['total']} visitas, "
            f"{counts['con_informe']} con informe, {counts['sin_informe']} sin informe."
        )

        for i in self.tree_pending.get_children():
            self.tree_pending.delete(i)
        for r in pending_reports(self.conn, until=date.today().isoformat()):
            exists = r["patient_name"] is not None
            self.tree_pending.insert(
                "",
                "end",
                iid=str(r["id"]),
                values=(r["date"], r["time"] or "", patient_label(r["patient_name"], exists=exists)),
            )

    # ---------- Actions ----------

    def _selected_visit_id(self, tree: ttk.Treeview | None = None) -> int | None:
        # Sin árbol explícito: primero la lista del rango, luego la de pendientes
        trees = (tree,) if tree is not None else (self.tree, self.tree_pending)
        for t in trees:
            sel = t.selection()
            if sel:
                return int(sel[0])
        return None

    def open_new_visit(self) -> None:
        win = NewVisitWindow(self, self.conn, bus=self.bus)
        self.wait_window(win)

    @shows_storage_errors
    def open_report(self, tree: ttk.Treeview | None = None) -> None:
        visit_id = self._selected_visit_id(tree)
        if visit_id is None:
            warn("Selecciona una visita primero.")
            return
        visit = self.repo.get(visit_id)
        if visit is None:
            warn("La visita ya no existe.")
            self.refresh()
            return
        win = EditReportWindow(
            self, self.repo, visit=visit, on_saved=lambda: self.bus.publish(VISITS)
        )
        self.wait_window(win)

    def delete_visit(self) -> None:
        visit_id = self._selected_visit_id()
        if visit_id is None:
            warn("Selecciona una visita primero.")
            return
        if not messagebox.askyesno("Confirmar eliminación", "¿Eliminar esta visita?"):
            return
        try:
            self.repo.delete(visit_id)
        except StorageError as e:
            error(str(e))
            return
        info("Visita eliminada.")
        self.bus.publish(VISITS)
