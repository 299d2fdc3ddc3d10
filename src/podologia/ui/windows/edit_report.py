from __future__ import annotations

import tkinter as tk
from collections.abc import Callable
from tkinter import messagebox, ttk

from podologia.domain.models import ClinicalReport, Visit
from podologia.domain.rules import StorageError, ValidationError
from podologia.repos.visits import VisitRepo


class EditReportWindow(tk.Toplevel):
    def __init__(
        self,
        master: tk.Misc,
        repo: VisitRepo,
        *,
        visit: Visit,
        on_saved: Callable[[], None] | None = None,
    ):
        super().__init__(master)
        self.repo = repo
        self.visit_id = visit.id
        self.on_saved = on_saved

        self.title("Informe clínico")
        self.geometry("560x460")
        self.resizable(False, False)

        self._build(visit.report)

        # Modal
        self.transient(master)
        self.grab_set()
        self.protocol("WM_DELETE_WINDOW", self.destroy)

    def _field(self, master: tk.Misc, label: str, initial: str) -> tk.Text:
        ttk.Label(master, text=label).pack(anchor="w", pady=(6, 0))

        box = ttk.Frame(master)
        box.pack(fill=tk.BOTH, expand=True, pady=(2, 0))

        txt = tk.Text(box, height=4, width=60, wrap="word")
        txt.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)

        sb = ttk.Scrollbar(box, orient="vertical", command=txt.yview)
        sb.pack(side=tk.RIGHT, fill=tk.Y)
        txt.configure(yscrollcommand=sb.set)

        txt.insert("1.0", initial)
        return txt

    def _build(self, report: ClinicalReport) -> None:
        frm = ttk.Frame(self)
        frm.pack(fill=tk.BOTH, expand=True, padx=12, pady=12)

        self.txt_diag = self._field(frm, "Diagnóstico:", report.diagnostico)
        self.txt_trat = self._field(frm, "Tratamiento:", report.tratamiento)
        self.txt_obs = self._field(frm, "Observaciones:", report.observaciones)

        btns = ttk.Frame(frm)
        btns.pack(fill=tk.X, pady=(10, 0))
        ttk.Button(btns, text="Guardar", command=self._save).pack(side=tk.RIGHT)
        ttk.Button(btns, text="Cancelar", command=self.destroy).pack(side=tk.RIGHT, padx=8)

    def _save(self) -> None:
        report = ClinicalReport(
            diagnostico=self.txt_diag.get("1.0", tk.END),
            tratamiento=self.txt_trat.get("1.0", tk.END),
            observaciones=self.txt_obs.get("1.0", tk.END),
        )
        try:
            self.repo.save_report(self.visit_id, report)
        except ValidationError as e:
            messagebox.showwarning("Validación", str(e), parent=self)
            return
        except StorageError as e:
            messagebox.showerror("Error", str(e), parent=self)
            return

        messagebox.showinfo("Info", "Informe clínico guardado.", parent=self)
        if self.on_saved:
            self.on_saved()
        self.destroy()
