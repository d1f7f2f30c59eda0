# taskdesk/ui/project_editor_dialog.py
# Rev 0.2.0
from __future__ import annotations
from typing import Optional, Sequence

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QComboBox, QDialog, QDialogButtonBox, QFormLayout, QLabel, QLineEdit,
    QSpinBox, QTextEdit, QVBoxLayout, QWidget,
)

from ..models.entities import Project, User
from ..models.types import PROJECT_COMPLETED, PROJECT_STATUSES
from ..utils.dates import now_iso
from .window_mode import lock_dialog_fixed


class ProjectEditorDialog(QDialog):
    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        viewer: User,
        users: Sequence[User] = (),
        project: Optional[Project] = None,
    ):
        super().__init__(parent)
        self._project = project
        self.setWindowTitle("Edit Project" if project else "New Project")

        self._name = QLineEdit(project.name if project else "")
        self._desc = QTextEdit()
        self._desc.setAcceptRichText(False)
        self._desc.setPlainText(project.description if project else "")

        self._cmb_owner = QComboBox()
        owners = [viewer] if viewer.is_employee else list(users)
        for u in owners:
            self._cmb_owner.addItem(f"{u.name} ({u.role})", u)
            if project and u.id == project.assigned_employee_id:
                self._cmb_owner.setCurrentIndex(self._cmb_owner.count() - 1)

        self._cmb_status = QComboBox()
        self._cmb_status.addItems(list(PROJECT_STATUSES))
        self._cmb_status.setCurrentText(project.status if project else PROJECT_STATUSES[0])

        self._progress = QSpinBox()
        self._progress.setRange(0, 100)
        self._progress.setSuffix(" %")
        self._progress.setValue(project.progress if project else 0)
        self._progress.valueChanged.connect(self._on_progress)

        form = QFormLayout()
        form.addRow("Name:", self._name)
        form.addRow("Description:", self._desc)
        form.addRow(QLabel("<hr/>"))
        form.addRow("Assigned to:", self._cmb_owner)
        form.addRow("Status:", self._cmb_status)
        form.addRow("Progress:", self._progress)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        root = QVBoxLayout(self)
        root.addLayout(form)
        root.addWidget(btns)

        lock_dialog_fixed(self, width_ratio=0.4, height_ratio=0.5)
        self._name.setFocus(Qt.OtherFocusReason)

    def _on_progress(self, value: int):
        if value >= 100:
            self._cmb_status.setCurrentText(PROJECT_COMPLETED)

    def values(self) -> Project:
        owner: Optional[User] = self._cmb_owner.currentData()
        base = self._project
        return Project(
            id=base.id if base else None,
            name=self._name.text().strip(),
            description=self._desc.toPlainText().strip(),
            assigned_employee_id=owner.id if owner else "",
            assigned_employee_name=owner.name if owner else "",
            status=self._cmb_status.currentText(),
            start_date=base.start_date if base else now_iso()[:10],
            progress=self._progress.value(),
            is_employee_created=base.is_employee_created if base else False,
            needs_director_input=base.needs_director_input if base else False,
            comments=list(base.comments) if base else [],
        )
