# Rev 0.2.0
# taskdesk/ui/employees_view.py
from __future__ import annotations
from typing import List, Optional

from PySide6.QtWidgets import (
    QDialog, QHBoxLayout, QHeaderView, QLineEdit, QMessageBox, QPushButton,
    QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget,
)

from ..models.entities import Employee
from ..viewmodels.employees_viewmodel import EmployeesViewModel
from .employee_editor_dialog import EmployeeEditorDialog

_COLUMNS = ["Name", "Position", "Department", "Email", "Phone", "Role", "Status", "Joined"]


class EmployeesView(QWidget):
    def __init__(self, vm: EmployeesViewModel, parent=None):
        super().__init__(parent)
        self._vm = vm
        self._rows: List[Employee] = []
        self._editing: Optional[str] = None

        self._search = QLineEdit()
        self._search.setPlaceholderText("Search name, email, department…")
        self._btn_new = QPushButton("New Employee")
        self._btn_edit = QPushButton("Edit")
        self._btn_delete = QPushButton("Delete")
        self._btn_refresh = QPushButton("Refresh")
        top_bar = QHBoxLayout()
        top_bar.addWidget(self._search, 1)
        for b in (self._btn_new, self._btn_edit, self._btn_delete, self._btn_refresh):
            top_bar.addWidget(b)

        self._table = QTableWidget(0, len(_COLUMNS))
        self._table.setHorizontalHeaderLabels(_COLUMNS)
        self._table.setEditTriggers(QTableWidget.NoEditTriggers)
        self._table.setSelectionBehavior(QTableWidget.SelectRows)
        self._table.setSelectionMode(QTableWidget.SingleSelection)
        self._table.verticalHeader().setVisible(False)
        self._table.horizontalHeader().setSectionResizeMode(QHeaderView.ResizeToContents)
        self._table.horizontalHeader().setStretchLastSection(True)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.addLayout(top_bar)
        root.addWidget(self._table, 1)

        self._search.textChanged.connect(self._vm.set_search)
        self._btn_new.clicked.connect(self._on_new_clicked)
        self._btn_edit.clicked.connect(self._on_edit_clicked)
        self._btn_delete.clicked.connect(self._on_delete_clicked)
        self._btn_refresh.clicked.connect(self._vm.refresh)
        self._table.itemSelectionChanged.connect(self._on_selection_changed)

        self._vm.employeesReloaded.connect(self._render)
        self._vm.employeeOpened.connect(self._on_employee_opened)
        self._vm.errorOccurred.connect(lambda msg: QMessageBox.warning(self, "Employees", msg))

    def set_viewer(self, viewer):
        self._vm.set_viewer(viewer)
        self._btn_new.setVisible(self._vm.can_create())

    # ---------- Internals ----------
    def _render(self, employees: List[Employee]):
        self._rows = sorted(employees, key=lambda e: e.full_name.lower())
        self._table.setRowCount(len(self._rows))
        for r, e in enumerate(self._rows):
            values = [e.full_name, e.position, e.department, e.email, e.phone, e.role, e.status, (e.joining_date or "")[:10]]
            for c, v in enumerate(values):
                self._table.setItem(r, c, QTableWidgetItem(v))
        self._on_selection_changed()

    def _selected(self) -> Optional[Employee]:
        row = self._table.currentRow()
        if row < 0 or row >= len(self._rows) or not self._table.selectionModel().hasSelection():
            return None
        return self._rows[row]

    def _on_selection_changed(self):
        employee = self._selected()
        caps = self._vm.capabilities(employee) if employee else None
        self._btn_edit.setEnabled(bool(caps and caps.edit))
        self._btn_delete.setEnabled(bool(caps and caps.delete))

    def _on_new_clicked(self):
        dlg = EmployeeEditorDialog(self)
        if dlg.exec() == QDialog.Accepted:
            self._vm.create_employee(dlg.values(), dlg.password())

    def _on_edit_clicked(self):
        employee = self._selected()
        if employee is None:
            return
        # the editor opens once the fresh copy arrives
        self._editing = employee.id
        self._vm.open_employee(employee.id)

    def _on_employee_opened(self, employee: Employee):
        if self._editing is None or employee.id != self._editing:
            return
        self._editing = None
        dlg = EmployeeEditorDialog(self, employee=employee)
        if dlg.exec() == QDialog.Accepted:
            self._vm.save_employee(dlg.values())

    def _on_delete_clicked(self):
        employee = self._selected()
        if employee is None:
            return
        if QMessageBox.question(self, "Delete Employee", f"Delete {employee.full_name}?") == QMessageBox.Yes:
            self._vm.delete_employee(employee.id)
