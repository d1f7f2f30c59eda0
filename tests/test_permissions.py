# tests/test_permissions.py
from __future__ import annotations

import pytest

from conftest import make_employee, make_project, make_task, make_user, make_work
from taskdesk.models.entities import ExtensionRequest
from taskdesk.models.types import DIRECTOR, EMPLOYEE
from taskdesk.services.permissions import NONE, Capabilities, can_create_employees, resolve_capabilities


def test_no_user_gets_nothing():
    assert resolve_capabilities(None, make_task()) is NONE
    assert resolve_capabilities(None, make_project()) == Capabilities()


def test_unknown_entity_type_is_rejected(director):
    with pytest.raises(TypeError):
        resolve_capabilities(director, object())


# --- tasks -------------------------------------------------------------------

def test_director_task_caps(director):
    caps = resolve_capabilities(director, make_task(is_locked=True))
    assert caps.view and caps.edit and caps.delete and caps.comment
    assert not caps.request_extension and not caps.request_completion


def test_project_head_cannot_edit_locked_task(project_head):
    assert resolve_capabilities(project_head, make_task()).edit
    locked = resolve_capabilities(project_head, make_task(is_locked=True))
    assert locked.view and not locked.edit and not locked.delete


def test_assigned_employee(employee):
    caps = resolve_capabilities(employee, make_task())
    assert caps.view and caps.edit and caps.comment
    assert caps.request_extension and caps.request_completion
    assert not caps.delete and not caps.respond_extension and not caps.approve_completion


def test_unrelated_employee_sees_nothing():
    stranger = make_user(EMPLOYEE, "u9")
    caps = resolve_capabilities(stranger, make_task())
    assert not (caps.view or caps.edit or caps.comment or caps.request_extension)


def test_employee_creator_can_delete_own_task(employee):
    own = make_task(assigned_by_id="u1", is_employee_created=True)
    assert resolve_capabilities(employee, own).delete
    assert not resolve_capabilities(employee, make_task(assigned_by_id="u1")).delete


def test_creator_can_view_task_assigned_elsewhere(employee):
    caps = resolve_capabilities(employee, make_task(assigned_to_id="u2", assigned_by_id="u1"))
    assert caps.view and caps.comment and not caps.edit


def test_pending_extension_flips_who_can_act(employee, director):
    task = make_task(extension=ExtensionRequest(proposed_deadline="2024-07-01", reason="rain"))
    assert not resolve_capabilities(employee, task).request_extension
    assert resolve_capabilities(director, task).respond_extension
    assert not resolve_capabilities(director, make_task()).respond_extension


def test_pending_completion_flips_who_can_act(employee, project_head):
    task = make_task(completion_request_status="Pending")
    assert not resolve_capabilities(employee, task).request_completion
    assert resolve_capabilities(project_head, task).approve_completion


def test_completed_task_has_no_employee_requests(employee):
    caps = resolve_capabilities(employee, make_task(status="Completed"))
    assert not caps.request_extension and not caps.request_completion


# --- projects / independent work ---------------------------------------------

def test_project_caps(director, project_head, employee):
    project = make_project(assigned_employee_id="u1")
    assert resolve_capabilities(director, project).delete
    ph = resolve_capabilities(project_head, project)
    assert ph.view and ph.comment and not ph.edit
    emp = resolve_capabilities(employee, project)
    assert emp.view and not emp.edit
    own = resolve_capabilities(employee, make_project(assigned_employee_id="u1", is_employee_created=True))
    assert own.edit and own.delete
    assert not resolve_capabilities(employee, make_project(assigned_employee_id="u2")).view


def test_independent_work_caps(director, employee):
    work = make_work(employee_id="u1")
    mine = resolve_capabilities(employee, work)
    assert mine.view and mine.edit and mine.delete and mine.comment
    boss = resolve_capabilities(director, work)
    assert boss.view and boss.comment and not boss.edit
    assert not resolve_capabilities(make_user(EMPLOYEE, "u2"), work).view


def test_employee_record_caps(director, project_head, employee):
    other = make_employee("u2")
    boss = resolve_capabilities(director, other)
    assert boss.view and boss.edit and boss.delete
    assert not boss.comment

    ph = resolve_capabilities(project_head, other)
    assert ph.view and not ph.edit and not ph.delete

    assert resolve_capabilities(employee, make_employee("u1")).view
    assert resolve_capabilities(employee, other) == Capabilities()


def test_director_cannot_delete_own_account(director):
    own = resolve_capabilities(director, make_employee("d1", DIRECTOR))
    assert own.edit and not own.delete


def test_only_directors_create_employees(director, project_head, employee):
    assert can_create_employees(director)
    assert not can_create_employees(project_head)
    assert not can_create_employees(employee)
    assert not can_create_employees(None)
