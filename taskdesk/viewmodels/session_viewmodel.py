# Rev 0.2.0
from __future__ import annotations

from typing import Optional

from PySide6.QtCore import QObject, Signal

from ..models.entities import User
from ..models.errors import GatewayError, ValidationError
from ..services.background import BackgroundRunner
from ..utils.logging_setup import get_logger


class SessionViewModel(QObject):
    """Holds the signed-in user. Credentials are checked by the gateway only."""

    loggedIn = Signal(object)    # User
    loggedOut = Signal()
    loginFailed = Signal(str)

    def __init__(self, employees_repo, *, runner=None):
        super().__init__()
        self._employees = employees_repo
        self._runner = runner if runner is not None else BackgroundRunner(parent=self)
        self._user: Optional[User] = None
        self._busy = False
        self._log = get_logger("vm.session")

    @property
    def user(self) -> Optional[User]:
        return self._user

    def is_busy(self) -> bool:
        return self._busy

    def login(self, email: str, password: str) -> bool:
        """Starts a sign-in; the answer arrives as loggedIn or loginFailed."""
        if self._busy:
            return False
        try:
            if not (email or "").strip():
                raise ValidationError("email", "Email is required.")
            if not password:
                raise ValidationError("password", "Password is required.")
        except ValidationError as exc:
            self.loginFailed.emit(exc.message)
            return False
        email = email.strip()
        self._busy = True
        self._runner.submit(lambda: self._employees.login(email, password), self._on_login, lambda exc: self._on_failed(email, exc))
        return True

    def logout(self) -> None:
        if self._user is not None:
            self._log.info("Signed out %s", self._user.name)
        self._user = None
        self.loggedOut.emit()

    def _on_login(self, user: User) -> None:
        self._busy = False
        self._user = user
        self._log.info("Signed in as %s (%s)", user.name, user.role)
        self.loggedIn.emit(user)

    def _on_failed(self, email: str, exc: GatewayError) -> None:
        self._busy = False
        self._log.warning("Login for %s failed: %s", email, exc)
        self.loginFailed.emit("Invalid email or password." if exc.status in (400, 401, 404) else str(exc))
