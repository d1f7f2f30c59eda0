# Rev 0.2.0

"""Capability resolution (Rev 0.2.0)
One place that answers "what may this user do with this entity?".
Plain role comparisons; every view asks here instead of checking roles itself.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union

from ..models.entities import Employee, IndependentWork, Project, Task, User, ids_match
from ..models.types import TASK_COMPLETED

Entity = Union[Task, Project, IndependentWork, Employee]


@dataclass(frozen=True)
class Capabilities:
    view: bool = False
    edit: bool = False
    delete: bool = False
    comment: bool = False
    request_extension: bool = False
    respond_extension: bool = False
    request_completion: bool = False
    approve_completion: bool = False


NONE = Capabilities()


def _task_caps(user: User, task: Task) -> Capabilities:
    assigned = task.is_assigned_to(user.id)
    creator = ids_match(task.assigned_by_id, user.id)
    manager = user.is_director or user.is_project_head
    open_task = task.status != TASK_COMPLETED
    extension_pending = task.extension is not None and task.extension.status == "Pending"
    completion_pending = task.completion_request_status == "Pending"

    view = manager or (user.is_employee and (assigned or creator))
    if user.is_director:
        edit = True
    elif user.is_project_head:
        edit = not task.is_locked
    else:
        edit = user.is_employee and assigned and not task.is_locked

    return Capabilities(
        view=view,
        edit=edit,
        delete=user.is_director or (user.is_employee and task.is_employee_created and creator),
        comment=view,
        request_extension=user.is_employee and assigned and open_task and not extension_pending,
        respond_extension=manager and extension_pending,
        request_completion=user.is_employee and assigned and open_task and not completion_pending,
        approve_completion=manager and completion_pending,
    )


def _project_caps(user: User, project: Project) -> Capabilities:
    assigned = ids_match(project.assigned_employee_id, user.id)
    view = user.is_director or user.is_project_head or (user.is_employee and assigned)
    own_created = user.is_employee and project.is_employee_created and assigned
    return Capabilities(
        view=view,
        edit=user.is_director or own_created,
        delete=user.is_director or own_created,
        comment=view,
    )


def _work_caps(user: User, work: IndependentWork) -> Capabilities:
    owner = ids_match(work.employee_id, user.id)
    view = user.is_director or user.is_project_head or owner
    return Capabilities(view=view, edit=owner, delete=owner, comment=view)


def _employee_caps(user: User, employee: Employee) -> Capabilities:
    # only Directors manage the roster, and never their own account
    myself = ids_match(employee.id, user.id)
    return Capabilities(
        view=user.is_director or user.is_project_head or myself,
        edit=user.is_director,
        delete=user.is_director and not myself,
    )


def can_create_employees(user: Optional[User]) -> bool:
    return user is not None and user.is_director


def resolve_capabilities(user: Optional[User], entity: Entity) -> Capabilities:
    if user is None:
        return NONE
    if isinstance(entity, Task):
        return _task_caps(user, entity)
    if isinstance(entity, Project):
        return _project_caps(user, entity)
    if isinstance(entity, IndependentWork):
        return _work_caps(user, entity)
    if isinstance(entity, Employee):
        return _employee_caps(user, entity)
    raise TypeError(f"No capability rules for {type(entity).__name__}")
