# Rev 0.2.0
# taskdesk – EmployeeRepository
from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..models.entities import Employee, User
from .http_gateway import HttpGateway, entity_path, json_list as _as_list, json_object as _as_entity


class EmployeeRepository:
    """Employee roster + login against /api/employees."""

    def __init__(self, gateway: HttpGateway):
        self._gw = gateway

    def list_all(self) -> List[Employee]:
        return [Employee.from_api(r) for r in _as_list(self._gw.get("/api/employees"), "employees")]

    def list_users(self) -> List[User]:
        return [e.as_user() for e in self.list_all()]

    def get(self, employee_id: str, *, email: Optional[str] = None) -> Employee:
        params = {"email": email} if email else None
        body = self._gw.get(entity_path("/api/employees", employee_id), params=params)
        return Employee.from_api(_as_entity(body, "employee"))

    def create(self, employee: Employee, password: str) -> Employee:
        payload = employee.to_api()
        payload["password"] = password
        return Employee.from_api(_as_entity(self._gw.post("/api/employees", json=payload), "employee"))

    def update(self, employee_id: str, fields: Dict[str, Any], *, email: Optional[str] = None) -> Employee:
        params = {"email": email} if email else None
        body = self._gw.put(entity_path("/api/employees", employee_id), params=params, json=fields)
        return Employee.from_api(_as_entity(body, "employee"))

    def delete(self, employee_id: str) -> None:
        self._gw.delete(entity_path("/api/employees", employee_id))

    def login(self, email: str, password: str) -> User:
        body = self._gw.post("/api/employees/login", json={"email": email, "password": password})
        return User.from_employee(_as_entity(body, "employee"))
