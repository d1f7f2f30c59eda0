# Rev 0.2.0
"""Client-side entities mirroring the REST payloads.

Every entity is built through ``from_api`` so the dual id fields (``id`` and the
persistence ``_id``) collapse into one canonical ``id`` right at the boundary.
``to_api`` produces the camelCase body the gateway expects.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .types import DIRECTOR, EMPLOYEE, PROJECT_HEAD, PROJECT_COMPLETED


# ---------- identity helpers ----------

def canonical_id(payload: Dict[str, Any]) -> Optional[str]:
    """``id`` when non-empty, else ``_id``; always a str (or None)."""
    for key in ("id", "_id"):
        raw = payload.get(key)
        if isinstance(raw, dict):  # extended-JSON ObjectId
            raw = raw.get("$oid")
        if raw is not None and str(raw) != "":
            return str(raw)
    return None


def ids_match(a: Any, b: Any) -> bool:
    if a is None or b is None:
        return False
    return a == b or str(a) == str(b)


def _str(payload: Dict[str, Any], key: str, default: str = "") -> str:
    v = payload.get(key)
    return default if v is None else str(v)


def _opt_str(payload: Dict[str, Any], key: str) -> Optional[str]:
    v = payload.get(key)
    if v is None or v == "":
        return None
    return str(v)


def _int(value: Any, default: int = 0) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


def normalize_work_done(value: Any) -> int:
    """Clamp to 0..100 and snap to the nearest step of 10 (half up)."""
    v = max(0, min(100, _int(value)))
    return (v + 5) // 10 * 10


# ---------- comments / attachments ----------

@dataclass
class Comment:
    id: Optional[str]
    user_id: str
    user_name: str
    content: str
    timestamp: str
    user_role: Optional[str] = None
    visible_to_employee: bool = True

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Comment":
        return cls(
            id=canonical_id(payload),
            user_id=_str(payload, "userId"),
            user_name=_str(payload, "userName"),
            content=_str(payload, "content"),
            timestamp=_str(payload, "timestamp"),
            user_role=_opt_str(payload, "userRole"),
            visible_to_employee=bool(payload.get("isVisibleToEmployee", True)),
        )

    def to_api(self) -> Dict[str, Any]:
        body = {"userId": self.user_id, "userName": self.user_name, "content": self.content}
        if self.user_role:
            body["userRole"] = self.user_role
        return body


def _comments(payload: Dict[str, Any]) -> List[Comment]:
    return [Comment.from_api(c) for c in (payload.get("comments") or []) if isinstance(c, dict)]


@dataclass
class Attachment:
    id: Optional[str]
    file_name: str
    file_type: str
    file_size: int
    file_data: str  # base64, opaque to the client
    uploaded_at: Optional[str] = None

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Attachment":
        return cls(
            id=canonical_id(payload),
            file_name=_str(payload, "fileName"),
            file_type=_str(payload, "fileType"),
            file_size=_int(payload.get("fileSize")),
            file_data=_str(payload, "fileData"),
            uploaded_at=_opt_str(payload, "uploadedAt"),
        )

    def to_api(self) -> Dict[str, Any]:
        body = {
            "fileName": self.file_name,
            "fileType": self.file_type,
            "fileSize": self.file_size,
            "fileData": self.file_data,
        }
        if self.id:
            body["id"] = self.id
        if self.uploaded_at:
            body["uploadedAt"] = self.uploaded_at
        return body


# ---------- users ----------

@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    role: str

    @property
    def is_director(self) -> bool:
        return self.role == DIRECTOR

    @property
    def is_project_head(self) -> bool:
        return self.role == PROJECT_HEAD

    @property
    def is_employee(self) -> bool:
        return self.role == EMPLOYEE

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "User":
        if "firstName" in payload or "lastName" in payload:
            return cls.from_employee(payload)
        return cls(
            id=canonical_id(payload) or "",
            name=_str(payload, "name"),
            email=_str(payload, "email"),
            role=_str(payload, "role", EMPLOYEE),
        )

    @classmethod
    def from_employee(cls, payload: Dict[str, Any]) -> "User":
        name = f"{_str(payload, 'firstName')} {_str(payload, 'lastName')}".strip()
        return cls(
            id=canonical_id(payload) or "",
            name=name,
            email=_str(payload, "email") or _str(payload, "username"),
            role=_str(payload, "role", EMPLOYEE),
        )


@dataclass
class Employee:
    id: Optional[str]
    first_name: str
    last_name: str
    email: str
    role: str = EMPLOYEE
    phone: str = ""
    position: str = ""
    department: str = ""
    joining_date: Optional[str] = None
    status: str = "Active"
    username: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def as_user(self) -> User:
        return User(id=self.id or "", name=self.full_name, email=self.email or self.username, role=self.role)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Employee":
        return cls(
            id=canonical_id(payload),
            first_name=_str(payload, "firstName"),
            last_name=_str(payload, "lastName"),
            email=_str(payload, "email"),
            role=_str(payload, "role", EMPLOYEE),
            phone=_str(payload, "phone"),
            position=_str(payload, "position"),
            department=_str(payload, "department"),
            joining_date=_opt_str(payload, "joiningDate"),
            status=_str(payload, "status", "Active"),
            username=_str(payload, "username"),
        )

    def to_api(self) -> Dict[str, Any]:
        body = {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "role": self.role,
            "phone": self.phone,
            "position": self.position,
            "department": self.department,
            "status": self.status,
            "username": self.username,
        }
        if self.joining_date:
            body["joiningDate"] = self.joining_date
        return body


# ---------- tasks ----------

@dataclass
class ExtensionRequest:
    proposed_deadline: str
    reason: str = ""
    status: str = "Pending"
    response_comment: Optional[str] = None
    requested_at: Optional[str] = None
    responded_at: Optional[str] = None
    responded_by: Optional[str] = None

    @classmethod
    def from_task_payload(cls, payload: Dict[str, Any]) -> Optional["ExtensionRequest"]:
        proposal = _opt_str(payload, "newDeadlineProposal")
        if not proposal:
            return None
        return cls(
            proposed_deadline=proposal,
            reason=_str(payload, "reasonForExtension"),
            status=_str(payload, "extensionRequestStatus", "Pending"),
            response_comment=_opt_str(payload, "extensionResponseComment"),
            requested_at=_opt_str(payload, "extensionRequestDate"),
            responded_at=_opt_str(payload, "extensionResponseDate"),
            responded_by=_opt_str(payload, "extensionResponseBy"),
        )

    def to_api(self) -> Dict[str, Any]:
        body = {
            "newDeadlineProposal": self.proposed_deadline,
            "reasonForExtension": self.reason,
            "extensionRequestStatus": self.status,
        }
        if self.requested_at:
            body["extensionRequestDate"] = self.requested_at
        if self.response_comment is not None:
            body["extensionResponseComment"] = self.response_comment
        return body


@dataclass
class Task:
    id: Optional[str]
    title: str
    description: str = ""
    priority: str = "Less Urgent"
    status: str = "Pending"
    assigned_to_id: str = ""
    assigned_to_name: str = ""
    assignee_ids: List[str] = field(default_factory=list)
    assignee_names: List[str] = field(default_factory=list)
    assigned_by_id: str = ""
    assigned_by_name: str = ""
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    due_date: Optional[str] = None
    start_date: Optional[str] = None
    reminder_date: Optional[str] = None
    completed_date: Optional[str] = None
    work_done: int = 0
    needs_director_input: bool = False
    extension: Optional[ExtensionRequest] = None
    completion_request_status: Optional[str] = None
    is_employee_created: bool = False
    is_locked: bool = False
    comments: List[Comment] = field(default_factory=list)

    def __post_init__(self):
        self.sync_assignment()
        self.work_done = normalize_work_done(self.work_done)

    def sync_assignment(self) -> None:
        """Keep the singular assignee fields mirroring the head of the lists."""
        if self.assignee_ids:
            self.assigned_to_id = self.assignee_ids[0]
            if self.assignee_names:
                self.assigned_to_name = self.assignee_names[0]
        elif self.assigned_to_id:
            self.assignee_ids = [self.assigned_to_id]
            self.assignee_names = [self.assigned_to_name] if self.assigned_to_name else []

    def is_assigned_to(self, user_id: Any) -> bool:
        if ids_match(self.assigned_to_id, user_id):
            return True
        return any(ids_match(a, user_id) for a in self.assignee_ids)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Task":
        ids = [str(x) for x in (payload.get("assignedEmployeeIds") or []) if x not in (None, "")]
        names = [str(x) for x in (payload.get("assignedEmployeeNames") or []) if x is not None]
        return cls(
            id=canonical_id(payload),
            title=_str(payload, "title"),
            description=_str(payload, "description"),
            priority=_str(payload, "priority", "Less Urgent"),
            status=_str(payload, "status", "Pending"),
            assigned_to_id=_str(payload, "assignedToId"),
            assigned_to_name=_str(payload, "assignedToName"),
            assignee_ids=ids,
            assignee_names=names,
            assigned_by_id=_str(payload, "assignedById"),
            assigned_by_name=_str(payload, "assignedByName"),
            project_id=_opt_str(payload, "projectId"),
            project_name=_opt_str(payload, "projectName"),
            due_date=_opt_str(payload, "dueDate"),
            start_date=_opt_str(payload, "startDate"),
            reminder_date=_opt_str(payload, "reminderDate"),
            completed_date=_opt_str(payload, "completedDate"),
            work_done=payload.get("workDone") or 0,
            needs_director_input=bool(payload.get("flagDirectorInputRequired", False)),
            extension=ExtensionRequest.from_task_payload(payload),
            completion_request_status=_opt_str(payload, "completionRequestStatus"),
            is_employee_created=bool(payload.get("isEmployeeCreated", False)),
            is_locked=bool(payload.get("isLocked", False)),
            comments=_comments(payload),
        )

    def to_api(self, *, include_id: bool = False) -> Dict[str, Any]:
        self.sync_assignment()
        body: Dict[str, Any] = {
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "status": self.status,
            "assignedToId": self.assigned_to_id,
            "assignedToName": self.assigned_to_name,
            "assignedEmployeeIds": list(self.assignee_ids),
            "assignedEmployeeNames": list(self.assignee_names),
            "assignedById": self.assigned_by_id,
            "assignedByName": self.assigned_by_name,
            "projectId": self.project_id or "",
            "projectName": self.project_name or "",
            "dueDate": self.due_date or "",
            "startDate": self.start_date or self.due_date or "",
            "workDone": self.work_done,
            "flagDirectorInputRequired": self.needs_director_input,
            "isEmployeeCreated": self.is_employee_created,
            "isLocked": self.is_locked,
        }
        if self.reminder_date:
            body["reminderDate"] = self.reminder_date
        if self.extension is not None:
            body.update(self.extension.to_api())
        if include_id and self.id:
            body["id"] = self.id
        return body


# ---------- projects ----------

@dataclass
class Project:
    id: Optional[str]
    name: str
    description: str = ""
    assigned_employee_id: str = ""
    assigned_employee_name: str = ""
    status: str = "Active"
    start_date: Optional[str] = None
    progress: int = 0
    is_employee_created: bool = False
    needs_director_input: bool = False
    comments: List[Comment] = field(default_factory=list)

    @property
    def effective_status(self) -> str:
        # progress 100 reads as completed even when the server still says otherwise
        return PROJECT_COMPLETED if self.progress >= 100 else self.status

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "Project":
        return cls(
            id=canonical_id(payload),
            name=_str(payload, "name"),
            description=_str(payload, "description"),
            assigned_employee_id=_str(payload, "assignedEmployeeId"),
            assigned_employee_name=_str(payload, "assignedEmployeeName"),
            status=_str(payload, "status", "Active"),
            start_date=_opt_str(payload, "startDate"),
            progress=max(0, min(100, _int(payload.get("progress")))),
            is_employee_created=bool(payload.get("isEmployeeCreated", False)),
            needs_director_input=bool(payload.get("flagDirectorInputRequired", False)),
            comments=_comments(payload),
        )

    def to_api(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "assignedEmployeeId": self.assigned_employee_id,
            "assignedEmployeeName": self.assigned_employee_name,
            "status": self.status,
            "startDate": self.start_date or "",
            "progress": self.progress,
            "isEmployeeCreated": self.is_employee_created,
            "flagDirectorInputRequired": self.needs_director_input,
        }


# ---------- independent work ----------

@dataclass
class IndependentWork:
    id: Optional[str]
    employee_id: str
    employee_name: str
    date: str
    description: str
    category: str = "Other"
    time_spent: float = 0.0
    attachments: List[Attachment] = field(default_factory=list)
    comments: List[Comment] = field(default_factory=list)

    @classmethod
    def from_api(cls, payload: Dict[str, Any]) -> "IndependentWork":
        try:
            spent = float(payload.get("timeSpent") or 0)
        except (TypeError, ValueError):
            spent = 0.0
        return cls(
            id=canonical_id(payload),
            employee_id=_str(payload, "employeeId"),
            employee_name=_str(payload, "employeeName"),
            date=_str(payload, "date"),
            description=_str(payload, "workDescription"),
            category=_str(payload, "category", "Other"),
            time_spent=spent,
            attachments=[Attachment.from_api(a) for a in (payload.get("attachments") or []) if isinstance(a, dict)],
            comments=_comments(payload),
        )

    def to_api(self) -> Dict[str, Any]:
        return {
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "date": self.date,
            "workDescription": self.description,
            "category": self.category,
            "timeSpent": self.time_spent,
            "attachments": [a.to_api() for a in self.attachments],
        }
