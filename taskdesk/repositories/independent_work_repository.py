# Rev 0.2.0
# taskdesk – IndependentWorkRepository
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models.entities import Comment, IndependentWork
from .http_gateway import HttpGateway, entity_path, json_list as _as_list, json_object as _as_entity


class IndependentWorkRepository:
    """Self-logged work entries (with attachments) against /api/independent-work."""

    def __init__(self, gateway: HttpGateway):
        self._gw = gateway

    def list_all(self) -> List[IndependentWork]:
        body = self._gw.get("/api/independent-work")
        return [IndependentWork.from_api(r) for r in _as_list(body, "independent work")]

    def list_for_employee(self, employee_id: str) -> List[IndependentWork]:
        body = self._gw.get(f"/api/independent-work/employee/{employee_id}")
        return [IndependentWork.from_api(r) for r in _as_list(body, "independent work")]

    def get(self, work_id: str) -> IndependentWork:
        body = self._gw.get(entity_path("/api/independent-work", work_id))
        return IndependentWork.from_api(_as_entity(body, "independent work"))

    def create(self, work: IndependentWork) -> IndependentWork:
        body = self._gw.post("/api/independent-work", json=work.to_api())
        return IndependentWork.from_api(_as_entity(body, "independent work"))

    def update(self, work_id: str, fields: Dict[str, Any]) -> Optional[IndependentWork]:
        body = self._gw.put(entity_path("/api/independent-work", work_id), json=fields)
        return IndependentWork.from_api(body) if isinstance(body, dict) else None

    def delete(self, work_id: str) -> None:
        self._gw.delete(entity_path("/api/independent-work", work_id))

    def add_comment(self, work_id: str, comment: Comment) -> IndependentWork:
        body = self._gw.post(entity_path("/api/independent-work", work_id, "comments"), json=comment.to_api())
        return IndependentWork.from_api(_as_entity(body, "independent work"))
