# Rev 0.2.0

"""Task/Project filter pipeline (Rev 0.2.0)

Predicates are applied in a fixed order and AND-ed:
role scope -> status -> priority -> source -> free-text search.
Source order is preserved; nothing is re-sorted.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ..models.entities import Project, Task, User, ids_match
from ..models.types import (
    DIRECTOR, PROJECT_ACTIVE, PROJECT_COMPLETED, PROJECT_ON_HOLD,
    STANDARD_PRIORITIES, TASK_COMPLETED, TASK_IN_PROGRESS, TASK_PENDING,
)
from ..utils.dates import as_aware, parse_iso

ALL = "all"
TASK_STATUS_FILTERS = (ALL, "completed", "pending", "overdue")
SOURCE_FILTERS = (ALL, "director", "self")
PROJECT_STATUS_FILTERS = (ALL, "completed", "pending", "employee")

TaskPredicate = Callable[[Task], bool]


@dataclass(frozen=True)
class TaskFilter:
    status: str = ALL
    priority: str = ALL
    source: str = ALL
    search: str = ""


@dataclass(frozen=True)
class ProjectFilter:
    status: str = ALL
    search: str = ""


# ---------- role scope ----------

def owned_project_ids(projects: Iterable[Project], viewer: User) -> set[str]:
    return {p.id for p in projects if p.id and ids_match(p.assigned_employee_id, viewer.id)}


def scope_tasks(
    tasks: Sequence[Task],
    viewer: Optional[User],
    *,
    projects: Iterable[Project] = (),
    project_head_scope: bool = False,
) -> List[Task]:
    """Employees see their own tasks; Project Heads optionally only their projects' tasks."""
    if viewer is None:
        return []
    if viewer.is_employee:
        return [t for t in tasks if t.is_assigned_to(viewer.id)]
    if viewer.is_project_head and project_head_scope:
        owned = owned_project_ids(projects, viewer)
        return [t for t in tasks if t.project_id is not None and t.project_id in owned]
    return list(tasks)


def scope_projects(projects: Sequence[Project], viewer: Optional[User], *, project_head_scope: bool = False) -> List[Project]:
    if viewer is None:
        return []
    if viewer.is_employee or (viewer.is_project_head and project_head_scope):
        return [p for p in projects if ids_match(p.assigned_employee_id, viewer.id)]
    return list(projects)


# ---------- single predicates ----------

def is_overdue(task: Task, now: Optional[datetime] = None) -> bool:
    if task.status == TASK_COMPLETED:
        return False
    due = parse_iso(task.due_date)
    if due is None:
        return False
    return due < as_aware(now)


def status_predicate(status: str, now: Optional[datetime] = None) -> Optional[TaskPredicate]:
    status = (status or ALL).lower()
    if status == ALL:
        return None
    if status == "completed":
        return lambda t: t.status == TASK_COMPLETED
    if status == "pending":
        return lambda t: t.status in (TASK_PENDING, TASK_IN_PROGRESS)
    if status == "overdue":
        fixed_now = as_aware(now)
        return lambda t: is_overdue(t, fixed_now)
    raise ValueError(f"Unknown status filter: {status!r}")


def priority_predicate(priority: str) -> Optional[TaskPredicate]:
    if not priority or priority.lower() == ALL:
        return None
    if priority == "Custom":
        return lambda t: t.priority not in STANDARD_PRIORITIES
    return lambda t: t.priority == priority


def source_predicate(source: str, viewer: User, users: Iterable[User] = ()) -> Optional[TaskPredicate]:
    source = (source or ALL).lower()
    if source == ALL or not viewer.is_employee:
        return None
    if source == "self":
        return lambda t: ids_match(t.assigned_by_id, viewer.id)
    if source == "director":
        roles: Dict[str, str] = {str(u.id): u.role for u in users}
        return lambda t: roles.get(str(t.assigned_by_id)) == DIRECTOR
    raise ValueError(f"Unknown source filter: {source!r}")


def search_predicate(search: str) -> Optional[TaskPredicate]:
    needle = (search or "").strip().lower()
    if not needle:
        return None

    def _match(t: Task) -> bool:
        for hay in (t.title, t.description, t.project_name, t.assigned_by_name):
            if hay and needle in hay.lower():
                return True
        return False
    return _match


# ---------- pipelines ----------

def filter_tasks(
    tasks: Sequence[Task],
    viewer: Optional[User],
    criteria: TaskFilter = TaskFilter(),
    *,
    users: Iterable[User] = (),
    projects: Iterable[Project] = (),
    now: Optional[datetime] = None,
    project_head_scope: bool = False,
) -> List[Task]:
    scoped = scope_tasks(tasks, viewer, projects=projects, project_head_scope=project_head_scope)
    if viewer is None:
        return scoped
    predicates = [
        p for p in (
            status_predicate(criteria.status, now),
            priority_predicate(criteria.priority),
            source_predicate(criteria.source, viewer, users),
            search_predicate(criteria.search),
        )
        if p is not None
    ]
    return [t for t in scoped if all(p(t) for p in predicates)]


def filter_projects(projects: Sequence[Project], viewer: Optional[User], criteria: ProjectFilter = ProjectFilter()) -> List[Project]:
    scoped = scope_projects(projects, viewer)
    if viewer is None:
        return scoped

    status = (criteria.status or ALL).lower()
    if status == "completed":
        scoped = [p for p in scoped if p.status == PROJECT_COMPLETED]
    elif status == "pending":
        scoped = [p for p in scoped if p.status in (PROJECT_ACTIVE, PROJECT_ON_HOLD)]
    elif status == "employee":
        scoped = [p for p in scoped if not ids_match(p.assigned_employee_id, viewer.id)]
    elif status != ALL:
        raise ValueError(f"Unknown project filter: {status!r}")

    needle = (criteria.search or "").strip().lower()
    if needle:
        scoped = [
            p for p in scoped
            if any(h and needle in h.lower() for h in (p.name, p.description, p.assigned_employee_name))
        ]
    return scoped
