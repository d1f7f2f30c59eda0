# Rev 0.2.0

"""Pytest fixtures for taskdesk (Rev 0.2.0)"""
from __future__ import annotations
import dataclasses
from typing import Any, Dict, List, Optional

import pytest
from PySide6.QtCore import QCoreApplication, QEventLoop, QTimer

from taskdesk.models.entities import Comment, Employee, IndependentWork, Project, Task, User
from taskdesk.models.errors import GatewayError
from taskdesk.models.types import DIRECTOR, EMPLOYEE, PROJECT_HEAD
from taskdesk.services.store import EntityStore


# --- Entity factories --------------------------------------------------------

def make_user(role: str = EMPLOYEE, user_id: str = "u1", name: Optional[str] = None) -> User:
    return User(id=user_id, name=name or f"{role} {user_id}", email=f"{user_id}@example.com", role=role)


def make_task(task_id: Optional[str] = "t1", **kw) -> Task:
    kw.setdefault("title", f"Task {task_id}")
    kw.setdefault("assigned_to_id", "u1")
    kw.setdefault("assigned_to_name", "Employee u1")
    kw.setdefault("due_date", "2999-01-01")
    return Task(id=task_id, **kw)


def make_project(project_id: Optional[str] = "p1", **kw) -> Project:
    kw.setdefault("name", f"Project {project_id}")
    kw.setdefault("assigned_employee_id", "u1")
    kw.setdefault("assigned_employee_name", "Employee u1")
    return Project(id=project_id, **kw)


def make_work(work_id: Optional[str] = "w1", **kw) -> IndependentWork:
    kw.setdefault("employee_id", "u1")
    kw.setdefault("employee_name", "Employee u1")
    kw.setdefault("date", "2024-05-01")
    kw.setdefault("description", "Site visit")
    return IndependentWork(id=work_id, **kw)


def make_comment(comment_id: str = "c1", content: str = "hi", user_id: str = "u9") -> Comment:
    return Comment(id=comment_id, user_id=user_id, user_name=f"User {user_id}", content=content,
                   timestamp="2024-05-01T09:00:00.000Z")


# --- A tiny in-memory stub repo just for unit tests --------------------------

class StubRepo:
    """
    Stands in for any repository. Every call is counted in `calls[name]`.
    Set `fail` to a GatewayError to make the next gateway-backed call raise it
    (sticky until reset). `server_comments` is what add_comment reports back.
    """

    def __init__(self, items: Optional[List[Any]] = None):
        self.items: List[Any] = list(items or [])
        self.calls: Dict[str, int] = {}
        self.updates: List[tuple] = []
        self.created: List[Any] = []
        self.deleted: List[str] = []
        self.posted: List[tuple] = []
        self.fail: Optional[GatewayError] = None
        self.server_comments: Optional[List[Comment]] = None

    def _hit(self, name: str):
        self.calls[name] = self.calls.get(name, 0) + 1
        if self.fail is not None:
            raise self.fail

    def count(self, name: str) -> int:
        return self.calls.get(name, 0)

    # listing
    def list_all(self):
        self._hit("list_all")
        return list(self.items)

    def list_for_viewer(self, user):
        self._hit("list_for_viewer")
        return list(self.items)

    def list_for_employee(self, employee_id):
        self._hit("list_for_employee")
        return [w for w in self.items if w.employee_id == employee_id]

    # crud
    def get(self, entity_id):
        self._hit("get")
        for e in self.items:
            if e.id == entity_id:
                return e
        raise GatewayError(404, "Not found")

    def create(self, entity, *extra):
        self._hit("create")
        self.created.append((entity, *extra) if extra else entity)
        return entity

    def update(self, entity_id, fields):
        self._hit("update")
        self.updates.append((entity_id, fields))
        return None

    def delete(self, entity_id):
        self._hit("delete")
        self.deleted.append(entity_id)

    def add_comment(self, entity_id, comment):
        self._hit("add_comment")
        self.posted.append((entity_id, comment))
        entity = next(e for e in self.items if e.id == entity_id)
        comments = self.server_comments if self.server_comments is not None else list(entity.comments) + [comment]
        return dataclasses.replace(entity, comments=list(comments))

    # task workflows
    def update_extension_status(self, task_id, status, comment, responded_by):
        self._hit("update_extension_status")
        self.updates.append((task_id, {"status": status, "responseComment": comment, "respondedBy": responded_by}))

    def request_completion(self, task_id, requested_by):
        self._hit("request_completion")

    def handle_completion(self, task_id, action, approved_by, comment=""):
        self._hit("handle_completion")
        self.updates.append((task_id, {"action": action, "approvedBy": approved_by, "comment": comment}))

    def list_extension_requests(self):
        self._hit("list_extension_requests")
        return [t for t in self.items if t.extension is not None]

    def list_completion_requests(self, status="all"):
        self._hit("list_completion_requests")
        return [t for t in self.items if t.completion_request_status is not None
                and (status == "all" or t.completion_request_status == status)]

    # employees
    def login(self, email, password):
        self._hit("login")
        return next(e.as_user() for e in self.items if e.email == email)

    def list_users(self):
        self._hit("list_users")
        return [e.as_user() for e in self.items]


def make_employee(emp_id: Optional[str] = "u1", role: str = EMPLOYEE, first: str = "Ada", last: str = "Lovelace", **kw) -> Employee:
    kw.setdefault("phone", "555-0100")
    kw.setdefault("position", "Engineer")
    kw.setdefault("department", "Design")
    kw.setdefault("joining_date", "2023-02-01")
    kw.setdefault("username", f"user_{emp_id}")
    return Employee(id=emp_id, first_name=first, last_name=last, email=f"{emp_id}@example.com", role=role, **kw)


# --- Runners -----------------------------------------------------------------

class InlineRunner:
    """Runs each call on the spot; same callback contract as BackgroundRunner."""

    def __init__(self):
        self.submitted = 0

    def submit(self, fn, on_done, on_error):
        self.submitted += 1
        try:
            result = fn()
        except GatewayError as exc:
            on_error(exc)
            return
        on_done(result)


class HeldRunner:
    """Queues calls until release() so tests can look at the in-between state."""

    def __init__(self):
        self.queue: List[tuple] = []

    def submit(self, fn, on_done, on_error):
        self.queue.append((fn, on_done, on_error))

    def release(self, index: int = 0):
        fn, on_done, on_error = self.queue.pop(index)
        InlineRunner().submit(fn, on_done, on_error)


def wait_until(predicate, timeout_ms: int = 2000) -> bool:
    """Spin the Qt event loop until predicate() holds or the timeout passes."""
    if predicate():
        return True
    loop = QEventLoop()
    ticker = QTimer()
    ticker.setInterval(5)
    ticker.timeout.connect(lambda: predicate() and loop.quit())
    deadline = QTimer()
    deadline.setSingleShot(True)
    deadline.timeout.connect(loop.quit)
    ticker.start()
    deadline.start(timeout_ms)
    loop.exec()
    ticker.stop()
    deadline.stop()
    return predicate()


# --- Fixtures ----------------------------------------------------------------

@pytest.fixture(scope="session")
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture()
def store(qapp) -> EntityStore:
    return EntityStore()


@pytest.fixture()
def runner() -> InlineRunner:
    return InlineRunner()


@pytest.fixture()
def director() -> User:
    return make_user(DIRECTOR, "d1", "Dana Director")


@pytest.fixture()
def project_head() -> User:
    return make_user(PROJECT_HEAD, "h1", "Hal Head")


@pytest.fixture()
def employee() -> User:
    return make_user(EMPLOYEE, "u1", "Employee u1")
