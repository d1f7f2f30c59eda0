# Rev 0.2.0
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models.entities import Comment, Task, User
from .http_gateway import HttpGateway, entity_path, json_list as _as_list, json_object as _as_entity


class TaskRepository:
    """
    Task CRUD + role-scoped listing + extension/completion workflows
    against the /api/tasks endpoints.
    """

    def __init__(self, gateway: HttpGateway):
        self._gw = gateway

    # -------------------------
    # Listing
    # -------------------------
    def list_all(self) -> List[Task]:
        return [Task.from_api(r) for r in _as_list(self._gw.get("/api/tasks"), "tasks")]

    def list_for_user(self, user: User) -> List[Task]:
        body = self._gw.get(f"/api/tasks/user/{user.id}", params={"role": user.role})
        return [Task.from_api(r) for r in _as_list(body, "tasks")]

    def list_for_viewer(self, user: Optional[User]) -> List[Task]:
        """Directors read the full collection; everyone else the per-user endpoint."""
        if user is None or user.is_director:
            return self.list_all()
        return self.list_for_user(user)

    def list_extension_requests(self) -> List[Task]:
        return [Task.from_api(r) for r in _as_list(self._gw.get("/api/extension-requests"), "tasks")]

    def list_completion_requests(self, status: str = "all") -> List[Task]:
        body = self._gw.get("/api/tasks/completion-requests", params={"status": status or "all"})
        return [Task.from_api(r) for r in _as_list(body, "tasks")]

    # -------------------------
    # CRUD
    # -------------------------
    def create(self, task: Task) -> Task:
        body = self._gw.post("/api/tasks", json=task.to_api())
        return Task.from_api(_as_entity(body, "task"))

    def update(self, task_id: str, fields: Dict[str, Any]) -> Optional[Task]:
        body = self._gw.put(entity_path("/api/tasks", task_id), json=fields)
        return Task.from_api(body) if isinstance(body, dict) else None

    def delete(self, task_id: str) -> None:
        self._gw.delete(entity_path("/api/tasks", task_id))

    # -------------------------
    # Comments / workflows
    # -------------------------
    def add_comment(self, task_id: str, comment: Comment) -> Task:
        body = self._gw.post(entity_path("/api/tasks", task_id, "comments"), json=comment.to_api())
        return Task.from_api(_as_entity(body, "task"))

    def update_extension_status(self, task_id: str, status: str, response_comment: str, responded_by: str) -> Optional[Task]:
        body = self._gw.put(
            entity_path("/api/tasks", task_id, "extension-status"),
            json={"status": status, "responseComment": response_comment, "respondedBy": responded_by},
        )
        return Task.from_api(body) if isinstance(body, dict) else None

    def request_completion(self, task_id: str, requested_by: str) -> Task:
        body = self._gw.post(entity_path("/api/tasks", task_id, "completion-request"), json={"requestedBy": requested_by})
        return Task.from_api(_as_entity(body, "task"))

    def handle_completion(self, task_id: str, action: str, approved_by: str, comment: str = "") -> Task:
        if action not in ("approve", "reject"):
            raise ValueError(f"action must be 'approve' or 'reject', not {action!r}")
        body = self._gw.post(
            entity_path("/api/tasks", task_id, "completion-approval"),
            json={"action": action, "approvedBy": approved_by, "comment": comment},
        )
        return Task.from_api(_as_entity(body, "task"))
