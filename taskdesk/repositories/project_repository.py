# Rev 0.2.0
# taskdesk – ProjectRepository
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models.entities import Comment, Project
from .http_gateway import HttpGateway, entity_path, json_list as _as_list, json_object as _as_entity


class ProjectRepository:
    """Project CRUD + comments against /api/projects."""

    def __init__(self, gateway: HttpGateway):
        self._gw = gateway

    # ---------- public API ----------

    def list_all(self) -> List[Project]:
        return [Project.from_api(r) for r in _as_list(self._gw.get("/api/projects"), "projects")]

    def get(self, project_id: str) -> Project:
        return Project.from_api(_as_entity(self._gw.get(entity_path("/api/projects", project_id)), "project"))

    def create(self, project: Project) -> Project:
        body = self._gw.post("/api/projects", json=project.to_api())
        return Project.from_api(_as_entity(body, "project"))

    def update(self, project_id: str, fields: Dict[str, Any]) -> Optional[Project]:
        body = self._gw.put(entity_path("/api/projects", project_id), json=fields)
        return Project.from_api(body) if isinstance(body, dict) else None

    def delete(self, project_id: str) -> None:
        self._gw.delete(entity_path("/api/projects", project_id))

    def add_comment(self, project_id: str, comment: Comment) -> Project:
        body = self._gw.post(entity_path("/api/projects", project_id, "comments"), json=comment.to_api())
        return Project.from_api(_as_entity(body, "project"))
