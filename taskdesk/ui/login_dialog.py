# Rev 0.2.0
# taskdesk/ui/login_dialog.py
from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QDialog, QDialogButtonBox, QFormLayout, QLabel, QLineEdit, QVBoxLayout, QWidget,
)

from ..viewmodels.session_viewmodel import SessionViewModel


class LoginDialog(QDialog):
    def __init__(self, session: SessionViewModel, parent: QWidget | None = None):
        super().__init__(parent)
        self._session = session
        self.setWindowTitle("taskdesk: Sign in")

        self._email = QLineEdit()
        self._email.setPlaceholderText("name@company.com")
        self._password = QLineEdit()
        self._password.setEchoMode(QLineEdit.Password)
        self._error = QLabel("")
        self._error.setWordWrap(True)
        self._error.setVisible(False)

        form = QFormLayout()
        form.addRow("Email:", self._email)
        form.addRow("Password:", self._password)

        btns = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        self._btn_ok = btns.button(QDialogButtonBox.Ok)
        self._btn_ok.setText("Sign in")
        btns.accepted.connect(self._on_submit)
        btns.rejected.connect(self.reject)

        root = QVBoxLayout(self)
        root.addLayout(form)
        root.addWidget(self._error)
        root.addWidget(btns)

        self._session.loginFailed.connect(self._on_failed)
        self._session.loggedIn.connect(self._on_logged_in)
        self._email.setFocus(Qt.OtherFocusReason)

    def _on_submit(self):
        self._error.setVisible(False)
        if self._session.login(self._email.text(), self._password.text()):
            self._btn_ok.setEnabled(False)
            self._btn_ok.setText("Signing in…")

    def _on_logged_in(self, _user):
        self.accept()

    def _on_failed(self, message: str):
        self._btn_ok.setEnabled(True)
        self._btn_ok.setText("Sign in")
        self._password.clear()
        self._error.setText(message)
        self._error.setVisible(True)
