# taskdesk/ui/tasks_view.py
# Rev 0.2.0
from __future__ import annotations
from typing import Callable, List, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QComboBox, QDialog, QHBoxLayout, QHeaderView, QLabel, QLineEdit, QMessageBox,
    QPushButton, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget,
)

from ..models.entities import Task
from ..services.permissions import resolve_capabilities
from ..services.task_filters import SOURCE_FILTERS, TASK_STATUS_FILTERS, TaskFilter, is_overdue
from ..viewmodels.task_detail_viewmodel import TaskDetailViewModel
from ..viewmodels.tasks_viewmodel import TasksViewModel
from .task_detail_dialog import TaskDetailDialog
from .task_editor_dialog import TaskEditorDialog

_STATUS_ITEMS = tuple(zip(("All", "Completed", "Pending", "Overdue"), TASK_STATUS_FILTERS))
_PRIORITY_ITEMS = (("All", "all"), ("Urgent", "Urgent"), ("Less Urgent", "Less Urgent"), ("Free Time", "Free Time"), ("Custom", "Custom"))
_SOURCE_ITEMS = tuple(zip(("All", "From Director", "Self-created"), SOURCE_FILTERS))

_COLUMNS = ["Title", "Project", "Priority", "Status", "Assigned To", "Due", "Work"]


class TasksView(QWidget):
    def __init__(self, vm: TasksViewModel, make_detail_vm: Callable[[], TaskDetailViewModel], parent=None):
        super().__init__(parent)
        self._vm = vm
        self._make_detail_vm = make_detail_vm
        self._rows: List[Task] = []

        # ---------- Filters ----------
        self._cmb_status = self._combo(_STATUS_ITEMS)
        self._cmb_priority = self._combo(_PRIORITY_ITEMS)
        self._cmb_source = self._combo(_SOURCE_ITEMS)
        self._lbl_source = QLabel("Source:")
        self._search = QLineEdit()
        self._search.setPlaceholderText("Search tasks…")
        self._search.setClearButtonEnabled(True)

        filters = QHBoxLayout()
        filters.addWidget(QLabel("Status:"))
        filters.addWidget(self._cmb_status)
        filters.addWidget(QLabel("Priority:"))
        filters.addWidget(self._cmb_priority)
        filters.addWidget(self._lbl_source)
        filters.addWidget(self._cmb_source)
        filters.addWidget(self._search, 1)

        # ---------- Controls ----------
        self._btn_new = QPushButton("New Task")
        self._btn_edit = QPushButton("Edit")
        self._btn_delete = QPushButton("Delete")
        self._btn_refresh = QPushButton("Refresh")
        self._btn_edit.setEnabled(False)
        self._btn_delete.setEnabled(False)

        top_bar = QHBoxLayout()
        for b in (self._btn_new, self._btn_edit, self._btn_delete):
            top_bar.addWidget(b)
        top_bar.addStretch(1)
        top_bar.addWidget(self._btn_refresh)

        # ---------- Table ----------
        self._table = QTableWidget(0, len(_COLUMNS))
        self._table.setHorizontalHeaderLabels(_COLUMNS)
        self._table.setEditTriggers(QTableWidget.NoEditTriggers)
        self._table.setSelectionBehavior(QTableWidget.SelectRows)
        self._table.setSelectionMode(QTableWidget.SingleSelection)
        self._table.setAlternatingRowColors(True)
        self._table.verticalHeader().setVisible(False)
        hdr = self._table.horizontalHeader()
        hdr.setSectionResizeMode(QHeaderView.ResizeToContents)
        hdr.setSectionResizeMode(0, QHeaderView.Stretch)  # Title

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.addLayout(filters)
        root.addLayout(top_bar)
        root.addWidget(self._table, 1)

        # ---------- Wiring ----------
        for cmb in (self._cmb_status, self._cmb_priority, self._cmb_source):
            cmb.currentIndexChanged.connect(self._apply_filters)
        self._search.textChanged.connect(self._apply_filters)
        self._btn_new.clicked.connect(self._on_new_clicked)
        self._btn_edit.clicked.connect(self._on_edit_clicked)
        self._btn_delete.clicked.connect(self._on_delete_clicked)
        self._btn_refresh.clicked.connect(self._vm.refresh)
        self._table.itemDoubleClicked.connect(lambda _item: self._open_selected())
        self._table.itemSelectionChanged.connect(self._on_selection_changed)

        self._vm.tasksReloaded.connect(self._render)
        self._vm.errorOccurred.connect(self._on_error)

    # ---------- Public API ----------
    def on_viewer_changed(self):
        employee = bool(self._vm.viewer and self._vm.viewer.is_employee)
        self._lbl_source.setVisible(employee)
        self._cmb_source.setVisible(employee)

    # ---------- Internals ----------
    @staticmethod
    def _combo(items) -> QComboBox:
        cmb = QComboBox()
        for label, value in items:
            cmb.addItem(label, value)
        return cmb

    def _apply_filters(self, *_):
        self._vm.set_filters(TaskFilter(
            status=self._cmb_status.currentData(),
            priority=self._cmb_priority.currentData(),
            source=self._cmb_source.currentData(),
            search=self._search.text(),
        ))

    def _render(self, tasks: List[Task]):
        self._rows = list(tasks)
        self._table.setRowCount(len(self._rows))
        for r, t in enumerate(self._rows):
            status = "Overdue" if is_overdue(t) else t.status
            values = [
                t.title,
                t.project_name or "—",
                t.priority,
                status,
                ", ".join(t.assignee_names) or t.assigned_to_name or "—",
                (t.due_date or "—")[:10],
                f"{t.work_done}%",
            ]
            for c, v in enumerate(values):
                item = QTableWidgetItem(v)
                if c == 0:
                    item.setData(Qt.UserRole, t.id)
                self._table.setItem(r, c, item)
        self._on_selection_changed()

    def _selected_task(self) -> Optional[Task]:
        row = self._table.currentRow()
        if row < 0 or row >= len(self._rows) or not self._table.selectionModel().hasSelection():
            return None
        return self._rows[row]

    def _on_selection_changed(self):
        task = self._selected_task()
        caps = resolve_capabilities(self._vm.viewer, task) if task else None
        self._btn_edit.setEnabled(bool(caps and caps.edit))
        self._btn_delete.setEnabled(bool(caps and caps.delete))

    def _open_selected(self):
        task = self._selected_task()
        if task is None:
            return
        dlg = TaskDetailDialog(self._make_detail_vm(), self._vm, task, self)
        dlg.exec()
        self._vm.refresh()

    def _editor(self, task: Optional[Task] = None) -> TaskEditorDialog:
        return TaskEditorDialog(
            self,
            viewer=self._vm.viewer,
            users=self._vm.users(),
            projects=self._vm.projects(),
            task=task,
        )

    def _on_new_clicked(self):
        if self._vm.viewer is None:
            return
        dlg = self._editor()
        if dlg.exec() == QDialog.Accepted:
            self._vm.create_task(dlg.values())

    def _on_edit_clicked(self):
        task = self._selected_task()
        if task is None:
            return
        dlg = self._editor(task)
        if dlg.exec() == QDialog.Accepted:
            self._vm.save_task(dlg.values())

    def _on_delete_clicked(self):
        task = self._selected_task()
        if task is None:
            return
        if QMessageBox.question(self, "Delete Task", f"Delete task '{task.title}'?") == QMessageBox.Yes:
            self._vm.delete_task(task.id)

    def _on_error(self, message: str):
        QMessageBox.warning(self, "Tasks", message)
