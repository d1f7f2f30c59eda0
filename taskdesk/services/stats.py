# Rev 0.2.0
"""Dashboard counters, always a full recompute over the current snapshot."""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..models.entities import Project, Task, User
from ..models.types import PROJECT_ACTIVE, TASK_COMPLETED, TASK_IN_PROGRESS, TASK_PENDING
from .task_filters import is_overdue, scope_projects, scope_tasks
from ..utils.dates import as_aware


@dataclass(frozen=True)
class DashboardStats:
    total_tasks: int = 0
    completed_tasks: int = 0
    pending_tasks: int = 0
    overdue_tasks: int = 0
    in_progress_tasks: int = 0
    total_projects: int = 0
    active_projects: int = 0
    # no employee roster is available to this view
    active_employees: int = 0


@dataclass(frozen=True)
class EmployeeBreakdown:
    urgent: int = 0
    less_urgent: int = 0
    free_time: int = 0
    completed: int = 0


def compute_stats(
    tasks: Sequence[Task],
    projects: Sequence[Project],
    viewer: Optional[User],
    *,
    now: Optional[datetime] = None,
) -> DashboardStats:
    if viewer is None:
        return DashboardStats()
    now = as_aware(now)
    # Project Heads are counted over the projects they own and those projects' tasks
    scoped_tasks = scope_tasks(tasks, viewer, projects=projects, project_head_scope=True)
    scoped_projects = scope_projects(projects, viewer, project_head_scope=True)

    return DashboardStats(
        total_tasks=len(scoped_tasks),
        completed_tasks=sum(1 for t in scoped_tasks if t.status == TASK_COMPLETED),
        pending_tasks=sum(1 for t in scoped_tasks if t.status == TASK_PENDING),
        overdue_tasks=sum(1 for t in scoped_tasks if is_overdue(t, now)),
        in_progress_tasks=sum(1 for t in scoped_tasks if t.status == TASK_IN_PROGRESS),
        total_projects=len(scoped_projects),
        active_projects=sum(1 for p in scoped_projects if p.status == PROJECT_ACTIVE),
        active_employees=0,
    )


def compute_employee_breakdown(tasks: Sequence[Task], viewer_id: str) -> EmployeeBreakdown:
    mine = [t for t in tasks if t.is_assigned_to(viewer_id)]
    return EmployeeBreakdown(
        urgent=sum(1 for t in mine if t.priority == "Urgent"),
        less_urgent=sum(1 for t in mine if t.priority == "Less Urgent"),
        free_time=sum(1 for t in mine if t.priority == "Free Time"),
        completed=sum(1 for t in mine if t.status == TASK_COMPLETED),
    )
