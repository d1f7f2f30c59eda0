# Rev 0.2.0: role-scoped task list, filter pipeline, derived stats
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from ..models.entities import Project, Task, User
from ..models.errors import GatewayError, ValidationError
from ..services.background import BackgroundRunner
from ..services.stats import DashboardStats, compute_employee_breakdown, compute_stats
from ..services.store import EntityStore
from ..services.task_filters import TaskFilter, filter_tasks
from ..services.validation import (
    validate_extension_request, validate_extension_response, validate_task,
)
from ..utils.dates import now_iso
from ..utils.logging_setup import get_logger

_KINDS = ("task", "project", "user")


class TasksViewModel(QObject):
    """
    Lists come from the shared store and are re-read in the background when
    stale; every store change re-runs the filter pipeline and the stats.
    Commands return False only when rejected locally (validation, missing
    id, no viewer); gateway failures arrive later through errorOccurred.
    """

    tasksReloaded = Signal(list)          # filtered, display order
    statsChanged = Signal(object)         # DashboardStats
    breakdownChanged = Signal(object)     # EmployeeBreakdown (employees only)
    pendingRequestsChanged = Signal(list, list)   # extension requests, completion requests
    errorOccurred = Signal(str)

    def __init__(self, tasks_repo, projects_repo, employees_repo, store: EntityStore, viewer: Optional[User] = None, *, runner=None):
        super().__init__()
        self._tasks = tasks_repo
        self._projects = projects_repo
        self._employees = employees_repo
        self._store = store
        self._viewer = viewer
        self._runner = runner if runner is not None else BackgroundRunner(parent=self)
        self._filter = TaskFilter()
        self._visible: List[Task] = []
        self._stats = DashboardStats()
        self._log = get_logger("vm.tasks")
        self._store.changed.connect(self._on_store_changed)

    # ---- viewer / filters
    @property
    def viewer(self) -> Optional[User]:
        return self._viewer

    def set_viewer(self, viewer: Optional[User]) -> None:
        self._viewer = viewer
        self._store.invalidate("task")
        self.reload()

    def set_filters(self, criteria: TaskFilter) -> None:
        self._filter = criteria
        self.refilter()

    def visible_tasks(self) -> List[Task]:
        return list(self._visible)

    def stats(self) -> DashboardStats:
        return self._stats

    def users(self) -> List[User]:
        return self._store.all("user")

    def projects(self) -> List[Project]:
        return self._store.all("project")

    # ---- queries
    def reload(self) -> None:
        """Show what the store has now; stale lists are re-read in the background."""
        if self._viewer is None:
            self._visible = []
            self.tasksReloaded.emit([])
            return
        viewer = self._viewer
        self._load("task", lambda: self._tasks.list_for_viewer(viewer))
        self._load("project", self._projects.list_all)
        self._load("user", self._employees.list_users)
        self.refilter()

    def refresh(self) -> None:
        """User-initiated: drop every cached list and read them again."""
        for kind in _KINDS:
            self._store.invalidate(kind)
        self.reload()

    def refilter(self) -> None:
        tasks: List[Task] = self._store.all("task")
        projects: List[Project] = self._store.all("project")
        self._visible = filter_tasks(
            tasks, self._viewer, self._filter,
            users=self._store.all("user"), projects=projects,
        )
        self._stats = compute_stats(tasks, projects, self._viewer)
        self.tasksReloaded.emit(self._visible)
        self.statsChanged.emit(self._stats)
        if self._viewer is not None and self._viewer.is_employee:
            self.breakdownChanged.emit(compute_employee_breakdown(tasks, self._viewer.id))

    def load_pending_requests(self) -> None:
        """Managers only: emits pendingRequestsChanged with open extension and completion requests."""
        if self._viewer is None or self._viewer.is_employee:
            self.pendingRequestsChanged.emit([], [])
            return

        def read():
            extensions = [t for t in self._tasks.list_extension_requests() if t.extension and t.extension.status == "Pending"]
            return extensions, self._tasks.list_completion_requests("Pending")

        def failed(exc: GatewayError) -> None:
            self._log.warning("Loading pending requests failed: %s", exc)
            self.pendingRequestsChanged.emit([], [])

        self._runner.submit(read, lambda pair: self.pendingRequestsChanged.emit(*pair), failed)

    # ---- commands
    def create_task(self, task: Task) -> bool:
        if self._viewer is None:
            return False
        task.assigned_by_id = task.assigned_by_id or self._viewer.id
        task.assigned_by_name = task.assigned_by_name or self._viewer.name
        task.is_employee_created = task.is_employee_created or self._viewer.is_employee
        try:
            validate_task(task)
        except ValidationError as exc:
            self.errorOccurred.emit(exc.message)
            return False
        self._send(lambda: self._tasks.create(task), "Error creating task", f"Creating task {task.title!r}")
        return True

    def update_task(self, task_id: Optional[str], fields: Dict[str, Any]) -> bool:
        if not task_id:
            self._log.warning("update_task called without a task id; ignoring")
            return False
        self._send(lambda: self._tasks.update(task_id, fields), "Error updating task", f"Updating task {task_id}")
        return True

    def save_task(self, task: Task) -> bool:
        try:
            validate_task(task)
        except ValidationError as exc:
            self.errorOccurred.emit(exc.message)
            return False
        return self.update_task(task.id, task.to_api())

    def delete_task(self, task_id: Optional[str]) -> bool:
        if not task_id:
            self._log.warning("delete_task called without a task id; ignoring")
            return False
        self._send(
            lambda: self._tasks.delete(task_id), "Error deleting task", f"Deleting task {task_id}",
            on_success=lambda _: self._store.remove("task", task_id),
        )
        return True

    def request_extension(self, task_id: Optional[str], proposed_deadline: str, reason: str) -> bool:
        try:
            validate_extension_request(proposed_deadline, reason)
        except ValidationError as exc:
            self.errorOccurred.emit(exc.message)
            return False
        return self.update_task(task_id, {
            "newDeadlineProposal": proposed_deadline,
            "reasonForExtension": reason,
            "extensionRequestStatus": "Pending",
            "extensionRequestDate": now_iso(),
        })

    def respond_extension(self, task_id: Optional[str], status: str, response_comment: str) -> bool:
        if not task_id:
            self._log.warning("respond_extension called without a task id; ignoring")
            return False
        try:
            validate_extension_response(status, response_comment)
        except ValidationError as exc:
            self.errorOccurred.emit(exc.message)
            return False
        responder = self._viewer.name if self._viewer else ""
        self._send(
            lambda: self._tasks.update_extension_status(task_id, status, response_comment, responder),
            "Error updating extension status", f"Extension response for {task_id}",
        )
        return True

    def request_completion(self, task_id: Optional[str]) -> bool:
        if not task_id or self._viewer is None:
            self._log.warning("request_completion needs a task id and a viewer; ignoring")
            return False
        requester = self._viewer.name
        self._send(
            lambda: self._tasks.request_completion(task_id, requester),
            "Error requesting completion", f"Completion request for {task_id}",
        )
        return True

    def handle_completion(self, task_id: Optional[str], approve: bool, comment: str = "") -> bool:
        if not task_id or self._viewer is None:
            self._log.warning("handle_completion needs a task id and a viewer; ignoring")
            return False
        approver = self._viewer.name
        action = "approve" if approve else "reject"
        self._send(
            lambda: self._tasks.handle_completion(task_id, action, approver, comment),
            "Error processing completion request", f"Completion approval for {task_id}",
        )
        return True

    # ---- internals
    def _load(self, kind: str, loader) -> None:
        def failed(exc: GatewayError) -> None:
            # initial loads fall back to an empty collection (the store already emptied it)
            self._log.error("Loading %s list failed: %s", kind, exc)
            self.errorOccurred.emit(f"Could not load {kind}s: {exc}")

        self._store.fetch(kind, loader, self._runner, failed)

    def _send(self, call: Callable[[], Any], failure: str, what: str, *, on_success: Optional[Callable[[Any], None]] = None) -> None:
        def done(result: Any) -> None:
            if on_success is not None:
                on_success(result)
            self._invalidate_and_reload()

        def failed(exc: GatewayError) -> None:
            self._log.error("%s failed: %s", what, exc)
            self.errorOccurred.emit(f"{failure}: {exc}")

        self._runner.submit(call, done, failed)

    def _invalidate_and_reload(self) -> None:
        self._store.invalidate("task")
        self.reload()

    def _on_store_changed(self, kind: str) -> None:
        # includes task versions pushed by the detail poller and comment flows
        if kind in _KINDS and self._viewer is not None:
            self.refilter()
