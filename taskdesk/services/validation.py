# Rev 0.2.0
"""Form checks run before any gateway call; failures raise ValidationError."""
from __future__ import annotations

from typing import Optional

from ..models.entities import Employee, IndependentWork, Project, Task
from ..models.errors import ValidationError
from ..models.types import EMPLOYEE_STATUSES, PROJECT_STATUSES, REQUEST_STATUSES, ROLES, WORK_CATEGORIES
from ..utils.dates import parse_iso


def _required(value, field: str, label: str) -> None:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ValidationError(field, f"{label} is required.")


def validate_task(task: Task) -> None:
    _required(task.title, "title", "Title")
    _required(task.assigned_to_id, "assignedToId", "Assignee")
    _required(task.due_date, "dueDate", "Due date")
    if parse_iso(task.due_date) is None:
        raise ValidationError("dueDate", f"Due date {task.due_date!r} is not a valid date.")
    if task.reminder_date and parse_iso(task.reminder_date) is None:
        raise ValidationError("reminderDate", f"Reminder date {task.reminder_date!r} is not a valid date.")
    if task.work_done % 10 or not 0 <= task.work_done <= 100:
        raise ValidationError("workDone", "Work done must be 0-100 in steps of 10.")


def validate_project(project: Project) -> None:
    _required(project.name, "name", "Project name")
    _required(project.assigned_employee_id, "assignedEmployeeId", "Assigned employee")
    if project.status not in PROJECT_STATUSES:
        raise ValidationError("status", f"Unknown project status {project.status!r}.")
    if not 0 <= project.progress <= 100:
        raise ValidationError("progress", "Progress must be between 0 and 100.")


def validate_independent_work(work: IndependentWork) -> None:
    _required(work.employee_id, "employeeId", "Employee")
    _required(work.date, "date", "Date")
    _required(work.description, "workDescription", "Work description")
    if work.category not in WORK_CATEGORIES:
        raise ValidationError("category", f"Unknown category {work.category!r}.")
    if work.time_spent < 0:
        raise ValidationError("timeSpent", "Time spent cannot be negative.")


def validate_extension_request(proposed_deadline: str, reason: str) -> None:
    _required(proposed_deadline, "newDeadlineProposal", "New deadline")
    _required(reason, "reasonForExtension", "Reason")
    if parse_iso(proposed_deadline) is None:
        raise ValidationError("newDeadlineProposal", f"{proposed_deadline!r} is not a valid date.")


def validate_extension_response(status: str, response_comment: str) -> None:
    if status not in REQUEST_STATUSES or status == "Pending":
        raise ValidationError("status", "Extension response must be Approved or Rejected.")
    _required(response_comment, "responseComment", "Response comment")


def validate_employee(employee: Employee, password: Optional[str] = None, *, creating: bool = False) -> None:
    """Every profile field is required; a password only when the account is created."""
    _required(employee.first_name, "firstName", "First name")
    _required(employee.last_name, "lastName", "Last name")
    _required(employee.email, "email", "Email")
    if "@" not in employee.email:
        raise ValidationError("email", f"{employee.email!r} is not an email address.")
    _required(employee.phone, "phone", "Phone")
    _required(employee.position, "position", "Position")
    _required(employee.department, "department", "Department")
    _required(employee.joining_date, "joiningDate", "Joining date")
    if parse_iso(employee.joining_date) is None:
        raise ValidationError("joiningDate", f"Joining date {employee.joining_date!r} is not a valid date.")
    _required(employee.username, "username", "Username")
    if creating:
        _required(password, "password", "Password")
    if employee.role not in ROLES:
        raise ValidationError("role", f"Unknown role {employee.role!r}.")
    if employee.status not in EMPLOYEE_STATUSES:
        raise ValidationError("status", f"Unknown employee status {employee.status!r}.")
