# tests/test_viewmodels.py
from __future__ import annotations

import pytest

from conftest import HeldRunner, InlineRunner, StubRepo, make_comment, make_employee, make_project, make_task, make_work
from taskdesk.models.entities import ExtensionRequest
from taskdesk.models.errors import GatewayError
from taskdesk.models.types import DIRECTOR, EMPLOYEE, PROJECT_HEAD
from taskdesk.services.task_filters import ProjectFilter, TaskFilter
from taskdesk.viewmodels.employees_viewmodel import EmployeesViewModel
from taskdesk.viewmodels.independent_work_viewmodel import IndependentWorkViewModel
from taskdesk.viewmodels.projects_viewmodel import ProjectsViewModel
from taskdesk.viewmodels.session_viewmodel import SessionViewModel
from taskdesk.viewmodels.tasks_viewmodel import TasksViewModel


@pytest.fixture()
def repos():
    tasks = StubRepo([
        make_task("t1", status="Pending", priority="Urgent", assigned_by_id="d1"),
        make_task("t2", status="Completed", assigned_by_id="u1"),
        make_task("t3", status="Pending", assigned_to_id="u2"),
    ])
    projects = StubRepo([make_project("p1", assigned_employee_id="u1"), make_project("p2", assigned_employee_id="u2")])
    employees = StubRepo([make_employee("d1", DIRECTOR, "Dana", "D"), make_employee("u1", EMPLOYEE, "Ada", "L")])
    return tasks, projects, employees


@pytest.fixture()
def tasks_vm(repos, store):
    tasks, projects, employees = repos
    return TasksViewModel(tasks, projects, employees, store, runner=InlineRunner())


# --- TasksViewModel ----------------------------------------------------------

def test_reload_fills_store_and_emits(tasks_vm, store, director):
    reloaded, stats = [], []
    tasks_vm.tasksReloaded.connect(reloaded.append)
    tasks_vm.statsChanged.connect(stats.append)
    tasks_vm.set_viewer(director)

    assert [t.id for t in reloaded[-1]] == ["t1", "t2", "t3"]
    assert stats[-1].total_tasks == 3 and stats[-1].completed_tasks == 1
    assert {u.id for u in store.all("user")} == {"d1", "u1"}


def test_employee_view_filters_and_breakdown(tasks_vm, employee):
    breakdowns = []
    tasks_vm.breakdownChanged.connect(breakdowns.append)
    tasks_vm.set_viewer(employee)
    assert [t.id for t in tasks_vm.visible_tasks()] == ["t1", "t2"]

    tasks_vm.set_filters(TaskFilter(source="director"))
    assert [t.id for t in tasks_vm.visible_tasks()] == ["t1"]
    assert breakdowns[-1].urgent == 1 and breakdowns[-1].completed == 1


def test_filters_do_not_refetch(tasks_vm, repos, director):
    tasks_vm.set_viewer(director)
    before = repos[0].count("list_for_viewer")
    tasks_vm.set_filters(TaskFilter(status="completed"))
    tasks_vm.set_filters(TaskFilter(search="t3"))
    assert repos[0].count("list_for_viewer") == before


def test_load_failure_falls_back_to_empty(repos, store, director):
    tasks, projects, employees = repos
    tasks.fail = GatewayError(500, "boom")
    vm = TasksViewModel(tasks, projects, employees, store, runner=InlineRunner())
    errors = []
    vm.errorOccurred.connect(errors.append)
    vm.set_viewer(director)
    assert vm.visible_tasks() == []
    assert errors and "boom" in errors[0]


def test_mutation_invalidates_and_reloads(tasks_vm, repos, director):
    tasks_vm.set_viewer(director)
    before = repos[0].count("list_for_viewer")
    assert tasks_vm.update_task("t1", {"status": "In Progress"})
    assert repos[0].updates[-1] == ("t1", {"status": "In Progress"})
    assert repos[0].count("list_for_viewer") == before + 1


def test_missing_id_guard(tasks_vm, repos, director):
    tasks_vm.set_viewer(director)
    assert tasks_vm.update_task(None, {"x": 1}) is False
    assert tasks_vm.delete_task("") is False
    assert repos[0].count("update") == 0 and repos[0].count("delete") == 0


def test_create_task_validates_before_network(tasks_vm, repos, employee):
    tasks_vm.set_viewer(employee)
    errors = []
    tasks_vm.errorOccurred.connect(errors.append)
    assert tasks_vm.create_task(make_task(None, title="")) is False
    assert repos[0].count("create") == 0
    assert errors == ["Title is required."]

    assert tasks_vm.create_task(make_task(None, title="Order rebar"))
    created = repos[0].created[-1]
    assert created.title == "Order rebar"
    assert created.assigned_by_id == "u1" and created.is_employee_created


def test_gateway_error_on_mutation_is_reported(tasks_vm, repos, store, director):
    tasks_vm.set_viewer(director)
    errors = []
    tasks_vm.errorOccurred.connect(errors.append)
    repos[0].fail = GatewayError(409, "Task is locked")
    # sent, then reported once the gateway answers
    assert tasks_vm.delete_task("t1") is True
    assert errors == ["Error deleting task: Task is locked (HTTP 409)"]
    assert store.get("task", "t1") is not None


def test_extension_and_completion_workflows(tasks_vm, repos, director):
    tasks_vm.set_viewer(director)
    assert tasks_vm.request_extension("t1", "2024-09-01", "rain")
    task_id, fields = repos[0].updates[-1]
    assert task_id == "t1" and fields["extensionRequestStatus"] == "Pending"

    assert tasks_vm.respond_extension("t1", "Approved", "ok")
    assert repos[0].updates[-1][1]["respondedBy"] == "Dana Director"

    assert tasks_vm.handle_completion("t1", approve=False, comment="not yet")
    assert repos[0].updates[-1][1]["action"] == "reject"
    assert tasks_vm.request_completion("t1")
    assert repos[0].count("request_completion") == 1


def test_pending_requests_for_managers_only(repos, store, director, employee):
    tasks = StubRepo([
        make_task("t1", extension=ExtensionRequest(proposed_deadline="2024-07-01", reason="rain")),
        make_task("t2", extension=ExtensionRequest(proposed_deadline="2024-07-01", status="Approved")),
        make_task("t3", completion_request_status="Pending"),
    ])
    vm = TasksViewModel(tasks, repos[1], repos[2], store, runner=InlineRunner())
    got = []
    vm.pendingRequestsChanged.connect(lambda ext, done: got.append(([t.id for t in ext], [t.id for t in done])))
    vm.set_viewer(director)
    vm.load_pending_requests()
    assert got[-1] == (["t1"], ["t3"])

    vm.set_viewer(employee)
    vm.load_pending_requests()
    assert got[-1] == ([], [])
    assert tasks.count("list_extension_requests") == 1


def test_pending_requests_failure_reports_nothing_pending(repos, store, director):
    tasks = StubRepo([make_task("t3", completion_request_status="Pending")])
    vm = TasksViewModel(tasks, repos[1], repos[2], store, runner=InlineRunner())
    vm.set_viewer(director)
    got = []
    vm.pendingRequestsChanged.connect(lambda ext, done: got.append((ext, done)))
    tasks.fail = GatewayError(503, "down")
    vm.load_pending_requests()
    assert got == [([], [])]


def test_invalid_extension_response_is_not_sent(tasks_vm, repos, director):
    tasks_vm.set_viewer(director)
    assert tasks_vm.respond_extension("t1", "Maybe", "hmm") is False
    assert repos[0].count("update_extension_status") == 0


# --- ProjectsViewModel -------------------------------------------------------

def test_projects_filter_and_comment_rollback(repos, store, employee):
    _, projects, _ = repos
    vm = ProjectsViewModel(projects, store, runner=InlineRunner())
    vm.set_viewer(employee)
    assert [p.id for p in vm.visible_projects()] == ["p1"]

    errors = []
    vm.errorOccurred.connect(errors.append)
    projects.fail = GatewayError(None, "Network error")
    outcome = vm.add_comment("p1", "hello")

    assert not outcome.ok
    assert store.get("project", "p1").comments == []
    assert vm.draft_for("p1").text == "hello"
    assert errors


def test_projects_comment_success_replaces_list(repos, store, director):
    _, projects, _ = repos
    vm = ProjectsViewModel(projects, store, runner=InlineRunner())
    vm.set_viewer(director)
    changed = []
    vm.projectChanged.connect(changed.append)

    outcome = vm.add_comment("p2", "status update")
    assert outcome.ok
    assert len(changed) == 2
    assert store.get("project", "p2").comments[0].content == "status update"
    assert vm.draft_for("p2").text == ""


def test_project_full_progress_saves_as_completed(repos, store, director):
    _, projects, _ = repos
    vm = ProjectsViewModel(projects, store, runner=InlineRunner())
    vm.set_viewer(director)
    assert vm.save_project(make_project("p1", progress=100, status="Active"))
    assert projects.updates[-1][1]["status"] == "Completed"


def test_projects_auto_refresh_timer(repos, store, director):
    _, projects, _ = repos
    vm = ProjectsViewModel(projects, store, runner=InlineRunner(), refresh_interval_ms=10_000)
    vm.set_viewer(director)
    vm.start_auto_refresh()
    assert vm.is_auto_refreshing()
    vm.stop_auto_refresh()
    assert not vm.is_auto_refreshing()


def test_projects_status_filter(repos, store, director):
    _, projects, _ = repos
    vm = ProjectsViewModel(projects, store, runner=InlineRunner())
    vm.set_viewer(director)
    vm.set_filter(ProjectFilter(status="employee"))
    assert [p.id for p in vm.visible_projects()] == ["p1", "p2"]


# --- IndependentWorkViewModel ------------------------------------------------

def test_independent_work_scoped_loader(store, employee, director):
    repo = StubRepo([make_work("w1", employee_id="u1"), make_work("w2", employee_id="u2")])
    vm = IndependentWorkViewModel(repo, store, runner=InlineRunner())
    vm.set_viewer(employee)
    assert [w.id for w in vm.entries()] == ["w1"]
    assert repo.count("list_for_employee") == 1

    vm.set_viewer(director)
    assert {w.id for w in vm.entries()} == {"w1", "w2"}
    assert repo.count("list_all") == 1


def test_independent_work_create_fills_owner(store, employee):
    repo = StubRepo([])
    vm = IndependentWorkViewModel(repo, store, runner=InlineRunner())
    vm.set_viewer(employee)
    vm.create_entry(make_work(None, employee_id="", employee_name=""))
    assert repo.created[-1].employee_id == "u1"


# --- Background loading -------------------------------------------------------

def test_tasks_follow_store_updates_from_elsewhere(tasks_vm, store, director):
    tasks_vm.set_viewer(director)
    reloaded = []
    tasks_vm.tasksReloaded.connect(reloaded.append)

    # e.g. the task detail poller installing a fresher copy
    store.upsert("task", make_task("t1", title="fresh", status="Completed"))
    assert reloaded
    assert next(t for t in tasks_vm.visible_tasks() if t.id == "t1").title == "fresh"
    assert tasks_vm.stats().completed_tasks == 2


def test_tasks_ignore_store_updates_without_viewer(tasks_vm, store):
    reloaded = []
    tasks_vm.tasksReloaded.connect(reloaded.append)
    store.upsert("task", make_task("t9"))
    assert reloaded == []


def test_reload_does_not_wait_for_the_gateway(repos, store, director):
    tasks, projects, employees = repos
    held = HeldRunner()
    vm = TasksViewModel(tasks, projects, employees, store, runner=held)
    vm.set_viewer(director)
    assert vm.visible_tasks() == []
    assert len(held.queue) == 3

    while held.queue:
        held.release()
    assert [t.id for t in vm.visible_tasks()] == ["t1", "t2", "t3"]


# --- ProjectsViewModel (single reads) ----------------------------------------

def test_reload_project_installs_server_copy(repos, store, director):
    _, projects, _ = repos
    vm = ProjectsViewModel(projects, store, runner=InlineRunner())
    vm.set_viewer(director)
    projects.items[0] = make_project("p1", assigned_employee_id="u1", comments=[make_comment("c7", "from server")])
    changed = []
    vm.projectChanged.connect(changed.append)

    assert vm.reload_project("p1")
    assert projects.count("get") == 1
    assert changed[-1].comments[0].id == "c7"
    assert store.get("project", "p1").comments[0].content == "from server"
    assert vm.reload_project(None) is False


def test_reload_project_failure_is_reported(repos, store, director):
    _, projects, _ = repos
    vm = ProjectsViewModel(projects, store, runner=InlineRunner())
    vm.set_viewer(director)
    errors = []
    vm.errorOccurred.connect(errors.append)
    assert vm.reload_project("missing")
    assert errors == ["Could not load project: Not found (HTTP 404)"]


def test_project_comment_is_pending_until_answered(repos, store, director):
    _, projects, _ = repos
    held = HeldRunner()
    vm = ProjectsViewModel(projects, store, runner=held)
    vm.set_viewer(director)
    held.release()  # the project list

    outcome = vm.add_comment("p1", "on it")
    assert not outcome.settled
    assert store.get("project", "p1").comments[0].id.startswith("local-")
    held.release()
    assert outcome.ok


# --- IndependentWorkViewModel (single reads) ---------------------------------

def test_open_entry_reads_one_entry(store, employee):
    repo = StubRepo([make_work("w1", employee_id="u1")])
    vm = IndependentWorkViewModel(repo, store, runner=InlineRunner())
    vm.set_viewer(employee)
    repo.items[0] = make_work("w1", employee_id="u1", comments=[make_comment("c1", "checked")])
    changed = []
    vm.entryChanged.connect(changed.append)

    assert vm.open_entry("w1")
    assert repo.count("get") == 1
    assert changed[-1].comments[0].content == "checked"
    assert store.get("independent_work", "w1").comments[0].id == "c1"
    assert vm.open_entry("") is False


def test_independent_work_validation_and_delete(store, employee):
    repo = StubRepo([make_work("w1", employee_id="u1")])
    vm = IndependentWorkViewModel(repo, store, runner=InlineRunner())
    vm.set_viewer(employee)
    errors = []
    vm.errorOccurred.connect(errors.append)

    assert vm.create_entry(make_work(None, description="")) is False
    assert errors == ["Work description is required."]
    assert vm.delete_entry("w1")
    assert repo.deleted == ["w1"]


# --- EmployeesViewModel ------------------------------------------------------

@pytest.fixture()
def roster():
    return StubRepo([
        make_employee("d1", DIRECTOR, "Dana", "Director"),
        make_employee("h1", PROJECT_HEAD, "Hal", "Head", department="Site"),
        make_employee("u1", EMPLOYEE, "Ada", "Lovelace"),
    ])


def test_employees_listed_for_managers_only(roster, store, director, project_head, employee):
    vm = EmployeesViewModel(roster, store, runner=InlineRunner())
    vm.set_viewer(employee)
    assert vm.visible_employees() == []
    assert roster.count("list_all") == 0

    vm.set_viewer(project_head)
    assert {e.id for e in vm.visible_employees()} == {"d1", "h1", "u1"}
    assert not vm.can_create()

    vm.set_viewer(director)
    assert vm.can_create()
    assert roster.count("list_all") == 1


def test_employee_search(roster, store, director):
    vm = EmployeesViewModel(roster, store, runner=InlineRunner())
    vm.set_viewer(director)
    vm.set_search("site")
    assert [e.id for e in vm.visible_employees()] == ["h1"]
    vm.set_search("  LOVE ")
    assert [e.id for e in vm.visible_employees()] == ["u1"]
    vm.set_search("")
    assert len(vm.visible_employees()) == 3


def test_director_creates_employee_with_password(roster, store, director):
    vm = EmployeesViewModel(roster, store, runner=InlineRunner())
    vm.set_viewer(director)
    store.replace_all("user", [])
    errors = []
    vm.errorOccurred.connect(errors.append)

    assert vm.create_employee(make_employee(None, first="Grace", last="Hopper"), "") is False
    assert errors == ["Password is required."]
    assert roster.count("create") == 0

    assert vm.create_employee(make_employee(None, first="Grace", last="Hopper"), "s3cret")
    employee, password = roster.created[-1]
    assert employee.full_name == "Grace Hopper" and password == "s3cret"
    assert store.is_stale("user")
    assert roster.count("list_all") == 2


def test_project_head_cannot_change_the_roster(roster, store, project_head):
    vm = EmployeesViewModel(roster, store, runner=InlineRunner())
    vm.set_viewer(project_head)
    assert vm.create_employee(make_employee(None), "pw") is False
    assert vm.save_employee(make_employee("u1", position="Lead")) is False
    assert vm.delete_employee("u1") is False
    assert roster.count("create") == roster.count("update") == roster.count("delete") == 0


def test_director_updates_and_deletes(roster, store, director):
    vm = EmployeesViewModel(roster, store, runner=InlineRunner())
    vm.set_viewer(director)

    assert vm.save_employee(make_employee("u1", EMPLOYEE, "Ada", "Lovelace", status="On Leave"))
    assert roster.updates[-1][0] == "u1"
    assert roster.updates[-1][1]["status"] == "On Leave"

    assert vm.delete_employee("d1") is False  # own account
    assert vm.delete_employee("u1")
    assert roster.deleted == ["u1"]


def test_employee_gateway_failure_is_reported(roster, store, director):
    vm = EmployeesViewModel(roster, store, runner=InlineRunner())
    vm.set_viewer(director)
    errors = []
    vm.errorOccurred.connect(errors.append)
    roster.fail = GatewayError(409, "Email already exists")
    assert vm.save_employee(make_employee("u1"))
    assert errors == ["Error updating employee: Email already exists (HTTP 409)"]


def test_open_employee_reads_fresh_copy(roster, store, director):
    vm = EmployeesViewModel(roster, store, runner=InlineRunner())
    vm.set_viewer(director)
    roster.items[2] = make_employee("u1", EMPLOYEE, "Ada", "King")
    opened, errors = [], []
    vm.employeeOpened.connect(opened.append)
    vm.errorOccurred.connect(errors.append)

    assert vm.open_employee("u1")
    assert opened[-1].last_name == "King"
    assert store.get("employee", "u1").last_name == "King"

    assert vm.open_employee("nobody")
    assert errors == ["Could not load employee: Not found (HTTP 404)"]


# --- SessionViewModel --------------------------------------------------------

def test_login_success_and_failure(qapp):
    repo = StubRepo([make_employee("u1", EMPLOYEE, "Ada", "L")])
    vm = SessionViewModel(repo, runner=InlineRunner())
    failures, logged = [], []
    vm.loginFailed.connect(failures.append)
    vm.loggedIn.connect(logged.append)

    assert vm.login("", "pw") is False
    assert failures == ["Email is required."]

    repo.fail = GatewayError(401, "Invalid credentials")
    assert vm.login("u1@example.com", "bad")
    assert failures[-1] == "Invalid email or password."
    assert vm.user is None and not vm.is_busy()

    repo.fail = None
    assert vm.login("u1@example.com", "good")
    assert vm.user.name == "Ada L"
    assert logged == [vm.user]
    vm.logout()
    assert vm.user is None


def test_second_login_is_refused_while_one_is_out(qapp):
    repo = StubRepo([make_employee("u1", EMPLOYEE, "Ada", "L")])
    held = HeldRunner()
    vm = SessionViewModel(repo, runner=held)
    assert vm.login("u1@example.com", "pw")
    assert vm.is_busy()
    assert vm.login("u1@example.com", "pw") is False
    held.release()
    assert vm.user is not None and not vm.is_busy()
