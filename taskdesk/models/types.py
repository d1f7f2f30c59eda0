# taskdesk type definitions
# Rev 0.2.0

from __future__ import annotations
from typing import Literal

Role = Literal["Director", "Project Head", "Employee"]
DIRECTOR: Role = "Director"
PROJECT_HEAD: Role = "Project Head"
EMPLOYEE: Role = "Employee"
ROLES = (DIRECTOR, PROJECT_HEAD, EMPLOYEE)

# Task priority; anything outside the first three counts as "Custom" for filtering
Priority = Literal["Urgent", "Less Urgent", "Free Time", "Custom"]
STANDARD_PRIORITIES = ("Urgent", "Less Urgent", "Free Time")
PRIORITIES = STANDARD_PRIORITIES + ("Custom",)

TaskStatus = Literal["Pending", "In Progress", "Completed"]
TASK_PENDING: TaskStatus = "Pending"
TASK_IN_PROGRESS: TaskStatus = "In Progress"
TASK_COMPLETED: TaskStatus = "Completed"
TASK_STATUSES = (TASK_PENDING, TASK_IN_PROGRESS, TASK_COMPLETED)

ProjectStatus = Literal["Active", "On Hold", "Completed"]
PROJECT_ACTIVE: ProjectStatus = "Active"
PROJECT_ON_HOLD: ProjectStatus = "On Hold"
PROJECT_COMPLETED: ProjectStatus = "Completed"
PROJECT_STATUSES = (PROJECT_ACTIVE, PROJECT_ON_HOLD, PROJECT_COMPLETED)

# Shared by extension and completion requests
RequestStatus = Literal["Pending", "Approved", "Rejected"]
REQUEST_STATUSES = ("Pending", "Approved", "Rejected")

WorkCategory = Literal["Design", "Site", "Office", "Other"]
WORK_CATEGORIES = ("Design", "Site", "Office", "Other")

EmployeeStatus = Literal["Active", "Inactive", "On Leave"]
EMPLOYEE_STATUSES = ("Active", "Inactive", "On Leave")

EntityKind = Literal["task", "project", "user", "independent_work", "employee"]
