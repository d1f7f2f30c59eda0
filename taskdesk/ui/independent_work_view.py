# Rev 0.2.0
# taskdesk/ui/independent_work_view.py
from __future__ import annotations
from typing import List, Optional

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog, QHBoxLayout, QHeaderView, QLabel, QLineEdit, QListWidget, QMessageBox,
    QPushButton, QSplitter, QTableWidget, QTableWidgetItem, QVBoxLayout, QWidget,
)

from ..models.entities import IndependentWork
from ..viewmodels.independent_work_viewmodel import IndependentWorkViewModel
from .independent_work_dialog import IndependentWorkDialog

_COLUMNS = ["Date", "Employee", "Category", "Hours", "Description", "Comments"]


class IndependentWorkView(QWidget):
    def __init__(self, vm: IndependentWorkViewModel, parent=None):
        super().__init__(parent)
        self._vm = vm
        self._rows: List[IndependentWork] = []

        self._btn_new = QPushButton("Log Work")
        self._btn_edit = QPushButton("Edit")
        self._btn_delete = QPushButton("Delete")
        self._btn_refresh = QPushButton("Refresh")
        top_bar = QHBoxLayout()
        for b in (self._btn_new, self._btn_edit, self._btn_delete):
            top_bar.addWidget(b)
        top_bar.addStretch(1)
        top_bar.addWidget(self._btn_refresh)

        self._table = QTableWidget(0, len(_COLUMNS))
        self._table.setHorizontalHeaderLabels(_COLUMNS)
        self._table.setEditTriggers(QTableWidget.NoEditTriggers)
        self._table.setSelectionBehavior(QTableWidget.SelectRows)
        self._table.setSelectionMode(QTableWidget.SingleSelection)
        self._table.verticalHeader().setVisible(False)
        hdr = self._table.horizontalHeader()
        hdr.setSectionResizeMode(QHeaderView.ResizeToContents)
        hdr.setSectionResizeMode(4, QHeaderView.Stretch)  # Description

        self._comments = QListWidget()
        self._comments.setWordWrap(True)
        self._input = QLineEdit()
        self._input.setPlaceholderText("Comment on the selected entry…")
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

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.addLayout(top_bar)
        root.addWidget(split, 1)

        self._btn_new.clicked.connect(self._on_new_clicked)
        self._btn_edit.clicked.connect(self._on_edit_clicked)
        self._btn_delete.clicked.connect(self._on_delete_clicked)
        self._btn_refresh.clicked.connect(self._vm.refresh)
        self._btn_send.clicked.connect(self._on_send)
        self._input.returnPressed.connect(self._on_send)
        self._table.itemSelectionChanged.connect(self._on_selection_changed)
        self._table.cellClicked.connect(self._on_row_clicked)

        self._vm.entriesReloaded.connect(self._render)
        self._vm.entryChanged.connect(self._on_entry_changed)
        self._vm.errorOccurred.connect(lambda msg: QMessageBox.warning(self, "Independent Work", msg))

    # ---------- Internals ----------
    def _render(self, entries: List[IndependentWork]):
        self._rows = sorted(entries, key=lambda w: w.date, reverse=True)
        self._table.setRowCount(len(self._rows))
        for r, w in enumerate(self._rows):
            values = [w.date[:10], w.employee_name, w.category, f"{w.time_spent:g}", w.description, str(len(w.comments))]
            for c, v in enumerate(values):
                self._table.setItem(r, c, QTableWidgetItem(v))
        self._on_selection_changed()

    def _selected(self) -> Optional[IndependentWork]:
        row = self._table.currentRow()
        if row < 0 or row >= len(self._rows) or not self._table.selectionModel().hasSelection():
            return None
        return self._rows[row]

    def _on_selection_changed(self):
        work = self._selected()
        caps = self._vm.capabilities(work) if work else None
        self._btn_edit.setEnabled(bool(caps and caps.edit))
        self._btn_delete.setEnabled(bool(caps and caps.delete))
        self._input.setEnabled(bool(caps and caps.comment))
        self._btn_send.setEnabled(bool(caps and caps.comment))
        self._show_comments(work)

    def _show_comments(self, work: Optional[IndependentWork]):
        self._comments.clear()
        if work is None:
            return
        for c in work.comments:
            self._comments.addItem(f"{c.user_name} · {c.timestamp[:16].replace('T', ' ')}\n{c.content}")
        self._comments.scrollToBottom()

    def _on_entry_changed(self, work: IndependentWork):
        self._rows = [work if w.id == work.id else w for w in self._rows]
        selected = self._selected()
        if selected is not None and selected.id == work.id:
            self._show_comments(work)
            draft = self._vm.draft_for(work.id).text
            if draft:
                # a failed comment put its text back
                self._input.setText(draft)

    def _on_row_clicked(self, row: int, _col: int):
        if 0 <= row < len(self._rows):
            self._vm.open_entry(self._rows[row].id)

    def _on_send(self):
        work = self._selected()
        if work is None:
            return
        if self._vm.add_comment(work.id, self._input.text()) is not None:
            self._input.setText(self._vm.draft_for(work.id).text)

    def _on_new_clicked(self):
        dlg = IndependentWorkDialog(self)
        if dlg.exec() == QDialog.Accepted:
            self._vm.create_entry(dlg.values())

    def _on_edit_clicked(self):
        work = self._selected()
        if work is None:
            return
        dlg = IndependentWorkDialog(self, work=work)
        if dlg.exec() == QDialog.Accepted:
            self._vm.save_entry(dlg.values())

    def _on_delete_clicked(self):
        work = self._selected()
        if work is None:
            return
        if QMessageBox.question(self, "Delete Entry", "Delete this work entry?") == QMessageBox.Yes:
            self._vm.delete_entry(work.id)
