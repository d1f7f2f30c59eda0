# taskdesk application context
# Rev 0.2.0

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .repositories.employee_repository import EmployeeRepository
from .repositories.http_gateway import HttpGateway
from .repositories.independent_work_repository import IndependentWorkRepository
from .repositories.project_repository import ProjectRepository
from .repositories.task_repository import TaskRepository
from .services.background import BackgroundRunner
from .services.store import EntityStore
from .utils.config import PollingSettings, api_settings, load_settings, polling_settings
from .utils.logging_setup import get_logger


@dataclass
class AppContext:
    """Central container for shared app resources."""
    settings: Dict[str, Any]
    gateway: HttpGateway
    tasks: TaskRepository
    projects: ProjectRepository
    employees: EmployeeRepository
    independent_work: IndependentWorkRepository
    store: EntityStore
    runner: BackgroundRunner
    polling: PollingSettings

    @classmethod
    def create(cls, settings: Optional[Dict[str, Any]] = None, *, gateway: Optional[HttpGateway] = None) -> "AppContext":
        """Build the gateway, repositories, the shared store and the background runner."""
        log = get_logger("AppContext")
        settings = settings or load_settings()
        api = api_settings(settings)
        gw = gateway or HttpGateway(api.base_url, timeout=api.timeout_secs)
        log.info("AppContext initialized against %s (timeout %.1fs)", gw.base_url, api.timeout_secs)
        return cls(
            settings=settings,
            gateway=gw,
            tasks=TaskRepository(gw),
            projects=ProjectRepository(gw),
            employees=EmployeeRepository(gw),
            independent_work=IndependentWorkRepository(gw),
            store=EntityStore(),
            runner=BackgroundRunner(),
            polling=polling_settings(settings),
        )

    def close(self) -> None:
        self.runner.shutdown()
        self.store.clear()
        self.gateway.close()
