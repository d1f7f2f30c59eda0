# taskdesk/ui/employee_editor_dialog.py
# Rev 0.2.0
from __future__ import annotations
from typing import Optional

from PySide6.QtCore import QDate, Qt
from PySide6.QtWidgets import (
    QComboBox, QDateEdit, QDialog, QDialogButtonBox, QFormLayout, QLabel,
    QLineEdit, QVBoxLayout, QWidget,
)

from ..models.entities import Employee
from ..models.types import EMPLOYEE, EMPLOYEE_STATUSES, ROLES
from .window_mode import lock_dialog_fixed


class EmployeeEditorDialog(QDialog):
    """Create (with password) or edit an employee account."""

    def __init__(self, parent: QWidget | None = None, *, employee: Optional[Employee] = None):
        super().__init__(parent)
        self._employee = employee
        self.setWindowTitle("Edit Employee" if employee else "New Employee")

        e = employee
        self._first = QLineEdit(e.first_name if e else "")
        self._last = QLineEdit(e.last_name if e else "")
        self._email = QLineEdit(e.email if e else "")
        self._phone = QLineEdit(e.phone if e else "")
        self._position = QLineEdit(e.position if e else "")
        self._department = QLineEdit(e.department if e else "")
        self._username = QLineEdit(e.username if e else "")

        self._joining = QDateEdit()
        self._joining.setCalendarPopup(True)
        self._joining.setDisplayFormat("yyyy-MM-dd")
        joined = QDate.fromString((e.joining_date or "")[:10], "yyyy-MM-dd") if e else QDate()
        self._joining.setDate(joined if joined.isValid() else QDate.currentDate())

        self._cmb_role = QComboBox()
        self._cmb_role.addItems(list(ROLES))
        self._cmb_role.setCurrentText(e.role if e else EMPLOYEE)
        self._cmb_status = QComboBox()
        self._cmb_status.addItems(list(EMPLOYEE_STATUSES))
        self._cmb_status.setCurrentText(e.status if e else EMPLOYEE_STATUSES[0])

        self._password = QLineEdit()
        self._password.setEchoMode(QLineEdit.Password)

        form = QFormLayout()
        form.addRow("First name:", self._first)
        form.addRow("Last name:", self._last)
        form.addRow("Email:", self._email)
        form.addRow("Phone:", self._phone)
        form.addRow("Position:", self._position)
        form.addRow("Department:", self._department)
        form.addRow("Joining date:", self._joining)
        form.addRow(QLabel("<hr/>"))
        form.addRow("Username:", self._username)
        if employee is None:
            form.addRow("Password:", self._password)
        form.addRow("Role:", self._cmb_role)
        form.addRow("Status:", self._cmb_status)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        btns.accepted.connect(self.accept)
        btns.rejected.connect(self.reject)

        root = QVBoxLayout(self)
        root.addLayout(form)
        root.addWidget(btns)

        lock_dialog_fixed(self, width_ratio=0.35, height_ratio=0.6)
        self._first.setFocus(Qt.OtherFocusReason)

    def password(self) -> str:
        return self._password.text()

    def values(self) -> Employee:
        return Employee(
            id=self._employee.id if self._employee else None,
            first_name=self._first.text().strip(),
            last_name=self._last.text().strip(),
            email=self._email.text().strip(),
            role=self._cmb_role.currentText(),
            phone=self._phone.text().strip(),
            position=self._position.text().strip(),
            department=self._department.text().strip(),
            joining_date=self._joining.date().toString("yyyy-MM-dd"),
            status=self._cmb_status.currentText(),
            username=self._username.text().strip(),
        )
