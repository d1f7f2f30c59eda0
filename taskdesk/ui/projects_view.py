# taskdesk/ui/projects_view.py
# Rev 0.2.0
from __future__ import annotations
from typing import Callable, List, Optional, Sequence

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QComboBox, QDialog, QHBoxLayout, QHeaderView, QLabel, QLineEdit, QListWidget,
    QMessageBox, QPushButton, QSplitter, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget,
)

from ..models.entities import Project, User
from ..services.task_filters import PROJECT_STATUS_FILTERS, ProjectFilter
from ..viewmodels.projects_viewmodel import ProjectsViewModel
from .project_editor_dialog import ProjectEditorDialog

_STATUS_ITEMS = tuple(zip(("All", "Completed", "Pending", "Assigned to others"), PROJECT_STATUS_FILTERS))
_COLUMNS = ["Name", "Assigned To", "Status", "Progress", "Start", "Comments"]


class ProjectsView(QWidget):
    """Project table with a comment thread for the selected project."""

    def __init__(self, vm: ProjectsViewModel, users: Callable[[], Sequence[User]], parent=None):
        super().__init__(parent)
        self._vm = vm
        self._users = users
        self._rows: List[Project] = []
        self._viewer: Optional[User] = None

        # ---------- Filters / controls ----------
        self._cmb_status = QComboBox()
        for label, value in _STATUS_ITEMS:
            self._cmb_status.addItem(label, value)
        self._search = QLineEdit()
        self._search.setPlaceholderText("Search projects…")
        self._search.setClearButtonEnabled(True)

        self._btn_new = QPushButton("New Project")
        self._btn_edit = QPushButton("Edit")
        self._btn_delete = QPushButton("Delete")
        self._btn_refresh = QPushButton("Refresh")

        top_bar = QHBoxLayout()
        top_bar.addWidget(QLabel("Show:"))
        top_bar.addWidget(self._cmb_status)
        top_bar.addWidget(self._search, 1)
        for b in (self._btn_new, self._btn_edit, self._btn_delete, self._btn_refresh):
            top_bar.addWidget(b)

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
        hdr.setSectionResizeMode(0, QHeaderView.Stretch)

        # ---------- Comments (bottom) ----------
        self._comments = QListWidget()
        self._comments.setWordWrap(True)
        self._input = QLineEdit()
        self._input.setPlaceholderText("Comment on the selected project…")
        self._btn_send = QPushButton("Send")
        composer = QHBoxLayout()
        composer.addWidget(self._input, 1)
        composer.addWidget(self._btn_send)

        bottom = QWidget(self)
        bl = QVBoxLayout(bottom)
        bl.setContentsMargins(0, 0, 0, 0)
        bl.addWidget(QLabel("Comments"))
        bl.addWidget(self._comments, 1)
        bl.addLayout(composer)

        split = QSplitter(Qt.Vertical, self)
        split.addWidget(self._table)
        split.addWidget(bottom)
        split.setStretchFactor(0, 3)
        split.setStretchFactor(1, 2)

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.addLayout(top_bar)
        root.addWidget(split, 1)

        # ---------- Wiring ----------
        self._cmb_status.currentIndexChanged.connect(self._apply_filter)
        self._search.textChanged.connect(self._apply_filter)
        self._btn_new.clicked.connect(self._on_new_clicked)
        self._btn_edit.clicked.connect(self._on_edit_clicked)
        self._btn_delete.clicked.connect(self._on_delete_clicked)
        self._btn_refresh.clicked.connect(self._vm.refresh)
        self._btn_send.clicked.connect(self._on_send)
        self._input.returnPressed.connect(self._on_send)
        self._input.textChanged.connect(self._on_draft_edited)
        self._table.itemSelectionChanged.connect(self._on_selection_changed)
        self._table.cellClicked.connect(self._on_row_clicked)

        self._vm.projectsReloaded.connect(self._render)
        self._vm.projectChanged.connect(self._on_project_changed)
        self._vm.errorOccurred.connect(self._on_error)

    # ---------- Public API ----------
    def set_viewer(self, viewer: Optional[User]):
        self._viewer = viewer
        self._vm.set_viewer(viewer)

    # ---------- Lifecycle (auto refresh only while visible) ----------
    def showEvent(self, ev):
        super().showEvent(ev)
        self._vm.start_auto_refresh()

    def hideEvent(self, ev):
        self._vm.stop_auto_refresh()
        super().hideEvent(ev)

    # ---------- Internals ----------
    def _apply_filter(self, *_):
        self._vm.set_filter(ProjectFilter(status=self._cmb_status.currentData(), search=self._search.text()))

    def _render(self, projects: List[Project]):
        keep = self._selected_project()
        self._rows = list(projects)
        self._table.blockSignals(True)
        self._table.setRowCount(len(self._rows))
        for r, p in enumerate(self._rows):
            values = [
                p.name,
                p.assigned_employee_name or "—",
                p.effective_status,
                f"{p.progress}%",
                (p.start_date or "—")[:10],
                str(len(p.comments)),
            ]
            for c, v in enumerate(values):
                self._table.setItem(r, c, QTableWidgetItem(v))
            if keep is not None and p.id == keep.id:
                self._table.selectRow(r)
        self._table.blockSignals(False)
        self._on_selection_changed()

    def _selected_project(self) -> Optional[Project]:
        row = self._table.currentRow()
        if row < 0 or row >= len(self._rows) or not self._table.selectionModel().hasSelection():
            return None
        return self._rows[row]

    def _on_selection_changed(self):
        project = self._selected_project()
        caps = self._vm.capabilities(project) if project else None
        self._btn_edit.setEnabled(bool(caps and caps.edit))
        self._btn_delete.setEnabled(bool(caps and caps.delete))
        self._input.setEnabled(bool(caps and caps.comment))
        self._btn_send.setEnabled(bool(caps and caps.comment))
        self._show_comments(project)

    def _show_comments(self, project: Optional[Project]):
        self._comments.clear()
        if project is None:
            self._input.clear()
            return
        for c in project.comments:
            self._comments.addItem(f"{c.user_name} · {c.timestamp[:16].replace('T', ' ')}\n{c.content}")
        self._comments.scrollToBottom()
        draft = self._vm.draft_for(project.id).text
        if self._input.text() != draft:
            self._input.setText(draft)

    def _on_project_changed(self, project: Project):
        self._rows = [project if p.id == project.id else p for p in self._rows]
        selected = self._selected_project()
        if selected is not None and selected.id == project.id:
            self._show_comments(project)

    def _on_row_clicked(self, row: int, _col: int):
        if 0 <= row < len(self._rows):
            self._vm.reload_project(self._rows[row].id)

    def _on_draft_edited(self, text: str):
        project = self._selected_project()
        if project is not None and project.id:
            self._vm.draft_for(project.id).text = text

    def _on_send(self):
        project = self._selected_project()
        if project is None:
            return
        if self._vm.add_comment(project.id, self._input.text()) is not None:
            self._input.setText(self._vm.draft_for(project.id).text)

    def _editor(self, project: Optional[Project] = None) -> ProjectEditorDialog:
        return ProjectEditorDialog(self, viewer=self._viewer, users=self._users(), project=project)

    def _on_new_clicked(self):
        if self._viewer is None:
            return
        dlg = self._editor()
        if dlg.exec() == QDialog.Accepted:
            self._vm.create_project(dlg.values())

    def _on_edit_clicked(self):
        project = self._selected_project()
        if project is None:
            return
        dlg = self._editor(project)
        if dlg.exec() == QDialog.Accepted:
            self._vm.save_project(dlg.values())

    def _on_delete_clicked(self):
        project = self._selected_project()
        if project is None:
            return
        if QMessageBox.question(self, "Delete Project", f"Delete project '{project.name}'?") == QMessageBox.Yes:
            self._vm.delete_project(project.id)

    def _on_error(self, message: str):
        QMessageBox.warning(self, "Projects", message)
