# Rev 0.2.0
from __future__ import annotations
from typing import Optional

from PySide6.QtCore import QDate, Qt
from PySide6.QtWidgets import (
    QComboBox, QDateEdit, QDialog, QDialogButtonBox, QDoubleSpinBox, QFormLayout,
    QTextEdit, QVBoxLayout, QWidget,
)

from ..models.entities import IndependentWork
from ..models.types import WORK_CATEGORIES
from ..utils.dates import parse_iso
from .window_mode import lock_dialog_fixed


class IndependentWorkDialog(QDialog):
    def __init__(self, parent: QWidget | None = None, *, work: Optional[IndependentWork] = None):
        super().__init__(parent)
        self._work = work
        self.setWindowTitle("Edit Work Entry" if work else "Log Work")

        self._date = QDateEdit()
        self._date.setCalendarPopup(True)
        self._date.setDisplayFormat("yyyy-MM-dd")
        when = parse_iso(work.date) if work else None
        self._date.setDate(QDate(when.year, when.month, when.day) if when else QDate.currentDate())

        self._cmb_category = QComboBox()
        self._cmb_category.addItems(list(WORK_CATEGORIES))
        if work:
            self._cmb_category.setCurrentText(work.category)

        self._hours = QDoubleSpinBox()
        self._hours.setRange(0, 24)
        self._hours.setSingleStep(0.5)
        self._hours.setSuffix(" h")
        self._hours.setValue(work.time_spent if work else 1.0)

        self._desc = QTextEdit()
        self._desc.setAcceptRichText(False)
        self._desc.setPlainText(work.description if work else "")

        form = QFormLayout()
        form.addRow("Date:", self._date)
        form.addRow("Category:", self._cmb_category)
        form.addRow("Time spent:", self._hours)
        form.addRow("Description:", self._desc)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        root = QVBoxLayout(self)
        root.addLayout(form)
        root.addWidget(btns)

        lock_dialog_fixed(self, width_ratio=0.35, height_ratio=0.45)
        self._desc.setFocus(Qt.OtherFocusReason)

    def values(self) -> IndependentWork:
        base = self._work
        return IndependentWork(
            id=base.id if base else None,
            employee_id=base.employee_id if base else "",
            employee_name=base.employee_name if base else "",
            date=self._date.date().toString("yyyy-MM-dd"),
            description=self._desc.toPlainText().strip(),
            category=self._cmb_category.currentText(),
            time_spent=self._hours.value(),
            attachments=list(base.attachments) if base else [],
            comments=list(base.comments) if base else [],
        )
