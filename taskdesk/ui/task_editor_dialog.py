# taskdesk/ui/task_editor_dialog.py
# Rev 0.2.0
from __future__ import annotations
from typing import List, Optional, Sequence

from PySide6.QtCore import QDate, Qt
from PySide6.QtWidgets import (
    QCheckBox, QComboBox, QDateEdit, QDialog, QDialogButtonBox, QFormLayout,
    QLabel, QLineEdit, QSpinBox, QTextEdit, QVBoxLayout, QWidget,
)

from ..models.entities import Project, Task, User
from ..models.types import STANDARD_PRIORITIES, TASK_STATUSES
from ..utils.dates import parse_iso
from .window_mode import lock_dialog_fixed


class TaskEditorDialog(QDialog):
    """
    Create/edit form for a task. values() returns a Task built from the
    widgets; the id and workflow fields of `task` (edit mode) are carried over.
    Employees only get themselves in the assignee list.
    """

    def __init__(
        self,
        parent: QWidget | None = None,
        *,
        viewer: User,
        users: Sequence[User] = (),
        projects: Sequence[Project] = (),
        task: Optional[Task] = None,
    ):
        super().__init__(parent)
        self._task = task
        self.setWindowTitle("Edit Task" if task else "New Task")

        self._title = QLineEdit(task.title if task else "")
        self._desc = QTextEdit()
        self._desc.setAcceptRichText(False)
        self._desc.setPlainText(task.description if task else "")

        self._cmb_priority = QComboBox()
        self._cmb_priority.setEditable(True)  # free text = custom priority
        self._cmb_priority.addItems(list(STANDARD_PRIORITIES))
        self._cmb_priority.setCurrentText(task.priority if task else "Less Urgent")

        self._cmb_status = QComboBox()
        self._cmb_status.addItems(list(TASK_STATUSES))
        self._cmb_status.setCurrentText(task.status if task else "Pending")

        self._cmb_assignee = QComboBox()
        assignable: List[User] = [viewer] if viewer.is_employee else [u for u in users if u.is_employee or u.is_project_head]
        for u in assignable:
            self._cmb_assignee.addItem(u.name, u)
        if task:
            for i, u in enumerate(assignable):
                if u.id == task.assigned_to_id:
                    self._cmb_assignee.setCurrentIndex(i)

        self._cmb_project = QComboBox()
        self._cmb_project.addItem("(none)", None)
        for p in projects:
            self._cmb_project.addItem(p.name, p)
            if task and p.id == task.project_id:
                self._cmb_project.setCurrentIndex(self._cmb_project.count() - 1)

        self._due = QDateEdit()
        self._due.setCalendarPopup(True)
        self._due.setDisplayFormat("yyyy-MM-dd")
        due = parse_iso(task.due_date) if task else None
        self._due.setDate(QDate(due.year, due.month, due.day) if due else QDate.currentDate().addDays(7))

        self._work = QSpinBox()
        self._work.setRange(0, 100)
        self._work.setSingleStep(10)
        self._work.setSuffix(" %")
        self._work.setValue(task.work_done if task else 0)

        self._chk_director = QCheckBox("Director input required")
        self._chk_director.setChecked(bool(task and task.needs_director_input))

        form = QFormLayout()
        form.addRow("Title:", self._title)
        form.addRow("Description:", self._desc)
        form.addRow(QLabel("<hr/>"))
        form.addRow("Priority:", self._cmb_priority)
        form.addRow("Status:", self._cmb_status)
        form.addRow("Assignee:", self._cmb_assignee)
        form.addRow("Project:", self._cmb_project)
        form.addRow("Due date:", self._due)
        form.addRow("Work done:", self._work)
        form.addRow("", self._chk_director)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        root = QVBoxLayout(self)
        root.addLayout(form)
        root.addWidget(btns)

        lock_dialog_fixed(self, width_ratio=0.4, height_ratio=0.6)
        self._title.setFocus(Qt.OtherFocusReason)

    def values(self) -> Task:
        assignee: Optional[User] = self._cmb_assignee.currentData()
        project: Optional[Project] = self._cmb_project.currentData()
        base = self._task
        keep_team = bool(base and assignee and assignee.id == base.assigned_to_id)
        return Task(
            id=base.id if base else None,
            title=self._title.text().strip(),
            description=self._desc.toPlainText().strip(),
            priority=self._cmb_priority.currentText().strip() or "Less Urgent",
            status=self._cmb_status.currentText(),
            assigned_to_id=assignee.id if assignee else "",
            assigned_to_name=assignee.name if assignee else "",
            assignee_ids=list(base.assignee_ids) if keep_team else [],
            assignee_names=list(base.assignee_names) if keep_team else [],
            assigned_by_id=base.assigned_by_id if base else "",
            assigned_by_name=base.assigned_by_name if base else "",
            project_id=project.id if project else None,
            project_name=project.name if project else None,
            due_date=self._due.date().toString("yyyy-MM-dd"),
            start_date=base.start_date if base else None,
            reminder_date=base.reminder_date if base else None,
            work_done=self._work.value(),
            needs_director_input=self._chk_director.isChecked(),
            extension=base.extension if base else None,
            completion_request_status=base.completion_request_status if base else None,
            is_employee_created=base.is_employee_created if base else False,
            is_locked=base.is_locked if base else False,
        )
