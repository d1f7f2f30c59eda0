# taskdesk/ui/task_detail_dialog.py
# Rev 0.2.0
from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor
from PySide6.QtWidgets import (
    QDialog, QDialogButtonBox, QFormLayout, QHBoxLayout, QInputDialog, QLabel,
    QLineEdit, QListWidget, QListWidgetItem, QMessageBox, QPushButton, QVBoxLayout,
)

from ..models.entities import Task
from ..viewmodels.task_detail_viewmodel import TaskDetailViewModel
from ..viewmodels.tasks_viewmodel import TasksViewModel
from .window_mode import lock_dialog_fixed


class TaskDetailDialog(QDialog):
    """
    Read-only task fields, the comment thread and the workflow buttons the
    viewer is allowed to use. The open task is polled for the dialog's lifetime.
    """

    def __init__(self, detail_vm: TaskDetailViewModel, tasks_vm: TasksViewModel, task: Task, parent=None):
        super().__init__(parent)
        self._vm = detail_vm
        self._tasks_vm = tasks_vm
        self.setWindowTitle(f"Task: {task.title}")

        # ---------- fields ----------
        self._lbl = {k: QLabel() for k in (
            "title", "status", "priority", "assignee", "assigned_by", "project", "due", "work", "extension", "completion",
        )}
        for lbl in self._lbl.values():
            lbl.setTextInteractionFlags(Qt.TextSelectableByMouse)
        self._lbl_desc = QLabel()
        self._lbl_desc.setWordWrap(True)

        form = QFormLayout()
        form.addRow("Title:", self._lbl["title"])
        form.addRow("Description:", self._lbl_desc)
        form.addRow("Status:", self._lbl["status"])
        form.addRow("Priority:", self._lbl["priority"])
        form.addRow("Assigned to:", self._lbl["assignee"])
        form.addRow("Assigned by:", self._lbl["assigned_by"])
        form.addRow("Project:", self._lbl["project"])
        form.addRow("Due:", self._lbl["due"])
        form.addRow("Work done:", self._lbl["work"])
        form.addRow("Extension:", self._lbl["extension"])
        form.addRow("Completion:", self._lbl["completion"])

        # ---------- workflow buttons ----------
        self._btn_req_ext = QPushButton("Request Extension")
        self._btn_resp_ext = QPushButton("Respond to Extension")
        self._btn_req_done = QPushButton("Request Completion")
        self._btn_approve = QPushButton("Approve Completion")
        self._btn_reject = QPushButton("Reject Completion")
        actions = QHBoxLayout()
        for b in (self._btn_req_ext, self._btn_resp_ext, self._btn_req_done, self._btn_approve, self._btn_reject):
            actions.addWidget(b)
        actions.addStretch(1)

        # ---------- comments ----------
        self._comments = QListWidget()
        self._comments.setWordWrap(True)
        self._input = QLineEdit()
        self._input.setPlaceholderText("Add a comment…")
        self._btn_send = QPushButton("Send")
        composer = QHBoxLayout()
        composer.addWidget(self._input, 1)
        composer.addWidget(self._btn_send)

        btns = QDialogButtonBox(QDialogButtonBox.Close)
        btns.rejected.connect(self.reject)

        root = QVBoxLayout(self)
        root.addLayout(form)
        root.addLayout(actions)
        root.addWidget(QLabel("Comments"))
        root.addWidget(self._comments, 1)
        root.addLayout(composer)
        root.addWidget(btns)

        # ---------- wiring ----------
        self._btn_send.clicked.connect(self._on_send)
        self._input.returnPressed.connect(self._on_send)
        self._input.textChanged.connect(self._on_draft_edited)
        self._btn_req_ext.clicked.connect(self._on_request_extension)
        self._btn_resp_ext.clicked.connect(self._on_respond_extension)
        self._btn_req_done.clicked.connect(self._on_request_completion)
        self._btn_approve.clicked.connect(lambda: self._on_completion(True))
        self._btn_reject.clicked.connect(lambda: self._on_completion(False))

        self._vm.taskChanged.connect(self._render)
        self._vm.commentFailed.connect(self._on_comment_failed)

        lock_dialog_fixed(self, width_ratio=0.5, height_ratio=0.75)
        self._vm.open(task)

    # ---------- Lifecycle ----------
    def done(self, result: int):
        self._vm.close()
        super().done(result)

    def closeEvent(self, ev):
        self._vm.close()
        super().closeEvent(ev)

    # ---------- Rendering ----------
    def _render(self, task: Task):
        self._lbl["title"].setText(task.title)
        self._lbl_desc.setText(task.description or "—")
        self._lbl["status"].setText(task.status)
        self._lbl["priority"].setText(task.priority)
        self._lbl["assignee"].setText(", ".join(task.assignee_names) or task.assigned_to_name or "—")
        self._lbl["assigned_by"].setText(task.assigned_by_name or "—")
        self._lbl["project"].setText(task.project_name or "—")
        self._lbl["due"].setText((task.due_date or "—")[:10])
        self._lbl["work"].setText(f"{task.work_done}%")
        ext = task.extension
        self._lbl["extension"].setText(f"{ext.status}: {ext.proposed_deadline[:10]} ({ext.reason})" if ext else "—")
        self._lbl["completion"].setText(task.completion_request_status or "—")

        self._comments.clear()
        for c in task.comments:
            item = QListWidgetItem(f"{c.user_name} · {c.timestamp[:16].replace('T', ' ')}\n{c.content}")
            if c.id and c.id.startswith("local-"):
                item.setForeground(QColor("gray"))  # not yet confirmed by the server
            self._comments.addItem(item)
        self._comments.scrollToBottom()
        if self._input.text() != self._vm.draft.text:
            self._input.setText(self._vm.draft.text)

        caps = self._vm.capabilities()
        self._input.setEnabled(caps.comment)
        self._btn_send.setEnabled(caps.comment)
        self._btn_req_ext.setVisible(caps.request_extension)
        self._btn_resp_ext.setVisible(caps.respond_extension)
        self._btn_req_done.setVisible(caps.request_completion)
        self._btn_approve.setVisible(caps.approve_completion)
        self._btn_reject.setVisible(caps.approve_completion)

    # ---------- Actions ----------
    def _on_send(self):
        self._vm.submit_comment(self._input.text())

    def _on_draft_edited(self, text: str):
        self._vm.draft.text = text

    def _on_comment_failed(self, message: str):
        self._input.setText(self._vm.draft.text)
        QMessageBox.warning(self, "Comment", message)

    def _current_id(self):
        task = self._vm.task()
        return task.id if task else None

    def _on_request_extension(self):
        deadline, ok = QInputDialog.getText(self, "Request Extension", "New deadline (YYYY-MM-DD):")
        if not ok:
            return
        reason, ok = QInputDialog.getText(self, "Request Extension", "Reason:")
        if ok:
            self._tasks_vm.request_extension(self._current_id(), deadline.strip(), reason.strip())

    def _on_respond_extension(self):
        status, ok = QInputDialog.getItem(self, "Extension Request", "Decision:", ["Approved", "Rejected"], 0, False)
        if not ok:
            return
        comment, ok = QInputDialog.getText(self, "Extension Request", "Response comment:")
        if ok:
            self._tasks_vm.respond_extension(self._current_id(), status, comment.strip())

    def _on_request_completion(self):
        if QMessageBox.question(self, "Request Completion", "Ask a manager to mark this task completed?") == QMessageBox.Yes:
            self._tasks_vm.request_completion(self._current_id())

    def _on_completion(self, approve: bool):
        comment, ok = QInputDialog.getText(self, "Completion Request", "Comment (optional):")
        if ok:
            self._tasks_vm.handle_completion(self._current_id(), approve, comment.strip())
