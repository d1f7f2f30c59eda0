# Rev 0.2.0
# taskdesk/viewmodels/employees_viewmodel.py
from __future__ import annotations

from typing import Any, Callable, List, Optional

from PySide6.QtCore import QObject, Signal

from ..models.entities import Employee, User, ids_match
from ..models.errors import GatewayError, ValidationError
from ..services.background import BackgroundRunner
from ..services.permissions import Capabilities, can_create_employees, resolve_capabilities
from ..services.store import EntityStore
from ..services.validation import validate_employee
from ..utils.logging_setup import get_logger


class EmployeesViewModel(QObject):
    """
    Employee roster for Directors and Project Heads. Only Directors create,
    edit or delete accounts. Any roster change also marks the "user" list
    stale, since assignee pickers read from it.
    """

    employeesReloaded = Signal(list)
    employeeOpened = Signal(object)     # Employee, fresh from GET /api/employees/:id
    errorOccurred = Signal(str)

    def __init__(self, employees_repo, store: EntityStore, viewer: Optional[User] = None, *, runner=None):
        super().__init__()
        self._repo = employees_repo
        self._store = store
        self._viewer = viewer
        self._runner = runner if runner is not None else BackgroundRunner(parent=self)
        self._search = ""
        self._visible: List[Employee] = []
        self._log = get_logger("vm.employees")
        self._store.changed.connect(self._on_store_changed)

    # ---- viewer / filter
    @property
    def viewer(self) -> Optional[User]:
        return self._viewer

    def set_viewer(self, viewer: Optional[User]) -> None:
        self._viewer = viewer
        self.reload()

    def set_search(self, text: str) -> None:
        self._search = (text or "").strip().lower()
        self.refilter()

    def visible_employees(self) -> List[Employee]:
        return list(self._visible)

    def capabilities(self, employee: Employee) -> Capabilities:
        return resolve_capabilities(self._viewer, employee)

    def can_create(self) -> bool:
        return can_create_employees(self._viewer)

    # ---- queries
    def reload(self) -> None:
        if self._viewer is None or self._viewer.is_employee:
            self._visible = []
            self.employeesReloaded.emit([])
            return
        self._store.fetch("employee", self._repo.list_all, self._runner, self._on_load_failed)
        self.refilter()

    def refresh(self) -> None:
        self._store.invalidate("employee")
        self.reload()

    def refilter(self) -> None:
        if self._viewer is None or self._viewer.is_employee:
            self._visible = []
        else:
            self._visible = [e for e in self._store.all("employee") if self._matches(e)]
        self.employeesReloaded.emit(self._visible)

    def _matches(self, employee: Employee) -> bool:
        if not self._search:
            return True
        haystack = " ".join((employee.full_name, employee.email, employee.position, employee.department, employee.username))
        return self._search in haystack.lower()

    def open_employee(self, employee_id: Optional[str]) -> bool:
        """Re-read one employee and emit employeeOpened, e.g. before showing the editor."""
        if not employee_id or self._viewer is None:
            return False

        def opened(employee: Employee) -> None:
            self._store.upsert("employee", employee)
            self.employeeOpened.emit(employee)

        def failed(exc: GatewayError) -> None:
            self._log.warning("Reading employee %s failed: %s", employee_id, exc)
            self.errorOccurred.emit(f"Could not load employee: {exc}")

        self._runner.submit(lambda: self._repo.get(employee_id), opened, failed)
        return True

    # ---- commands (False = rejected before any gateway call)
    def create_employee(self, employee: Employee, password: str) -> bool:
        if not self.can_create():
            self._log.warning("create_employee refused for %s", self._viewer.role if self._viewer else "nobody")
            return False
        try:
            validate_employee(employee, password, creating=True)
        except ValidationError as exc:
            self.errorOccurred.emit(exc.message)
            return False
        self._send(lambda: self._repo.create(employee, password), "Error creating employee", f"Creating employee {employee.email}")
        return True

    def save_employee(self, employee: Employee) -> bool:
        if not employee.id:
            self._log.warning("save_employee called without an id; ignoring")
            return False
        if not self.capabilities(employee).edit:
            self._log.warning("save_employee refused for employee %s", employee.id)
            return False
        try:
            validate_employee(employee)
        except ValidationError as exc:
            self.errorOccurred.emit(exc.message)
            return False
        employee_id, fields = employee.id, employee.to_api()
        self._send(lambda: self._repo.update(employee_id, fields), "Error updating employee", f"Updating employee {employee_id}")
        return True

    def delete_employee(self, employee_id: Optional[str]) -> bool:
        if not employee_id:
            self._log.warning("delete_employee called without an id; ignoring")
            return False
        if self._viewer is None or not self._viewer.is_director or ids_match(employee_id, self._viewer.id):
            self._log.warning("delete_employee refused for employee %s", employee_id)
            return False
        self._send(
            lambda: self._repo.delete(employee_id), "Error deleting employee", f"Deleting employee {employee_id}",
            on_success=lambda _: self._store.remove("employee", employee_id),
        )
        return True

    # ---- internals
    def _send(self, call: Callable[[], Any], failure: str, what: str, *, on_success: Optional[Callable[[Any], None]] = None) -> None:
        def done(result: Any) -> None:
            if on_success is not None:
                on_success(result)
            self._store.invalidate("user")
            self.refresh()

        def failed(exc: GatewayError) -> None:
            self._log.error("%s failed: %s", what, exc)
            self.errorOccurred.emit(f"{failure}: {exc}")

        self._runner.submit(call, done, failed)

    def _on_load_failed(self, exc: GatewayError) -> None:
        self._log.error("Loading employees failed: %s", exc)
        self.errorOccurred.emit(f"Could not load employees: {exc}")

    def _on_store_changed(self, kind: str) -> None:
        if kind == "employee" and self._viewer is not None:
            self.refilter()
