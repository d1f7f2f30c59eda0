# Rev 0.2.0
# taskdesk/viewmodels/projects_viewmodel.py
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from ..models.entities import Project, User
from ..models.errors import GatewayError, ValidationError
from ..models.types import PROJECT_COMPLETED
from ..services.background import BackgroundRunner
from ..services.comment_reconciler import CommentDraft, CommentOutcome, FlowState, OptimisticCommentFlow
from ..services.permissions import Capabilities, resolve_capabilities
from ..services.store import EntityStore
from ..services.task_filters import ProjectFilter, filter_projects
from ..services.validation import validate_project
from ..utils.logging_setup import get_logger


class ProjectsViewModel(QObject):
    projectsReloaded = Signal(list)
    projectChanged = Signal(object)      # Project (optimistic / reconciled versions)
    errorOccurred = Signal(str)

    def __init__(self, projects_repo, store: EntityStore, viewer: Optional[User] = None, *, runner=None, refresh_interval_ms: int = 30000):
        super().__init__()
        self._repo = projects_repo
        self._store = store
        self._viewer = viewer
        self._runner = runner if runner is not None else BackgroundRunner(parent=self)
        self._filter = ProjectFilter()
        self._visible: List[Project] = []
        self._drafts: Dict[str, CommentDraft] = {}
        self._comments = OptimisticCommentFlow(
            self._repo.add_comment, self._apply, self._runner, on_settled=self._on_comment_settled, name="project",
        )
        self._log = get_logger("vm.projects")

        # picks up comments from other users while the projects tab is showing
        self._refresh = QTimer(self)
        self._refresh.setInterval(refresh_interval_ms)
        self._refresh.timeout.connect(self.refresh)
        self._store.changed.connect(self._on_store_changed)

    # ---- viewer / filters
    def set_viewer(self, viewer: Optional[User]) -> None:
        self._viewer = viewer
        self.reload()

    def set_filter(self, criteria: ProjectFilter) -> None:
        self._filter = criteria
        self.refilter()

    def visible_projects(self) -> List[Project]:
        return list(self._visible)

    def capabilities(self, project: Project) -> Capabilities:
        return resolve_capabilities(self._viewer, project)

    def draft_for(self, project_id: str) -> CommentDraft:
        return self._drafts.setdefault(str(project_id), CommentDraft())

    # ---- auto refresh
    def start_auto_refresh(self) -> None:
        self._refresh.start()

    def stop_auto_refresh(self) -> None:
        self._refresh.stop()

    def is_auto_refreshing(self) -> bool:
        return self._refresh.isActive()

    # ---- queries
    def reload(self) -> None:
        self._store.fetch("project", self._repo.list_all, self._runner, self._on_load_failed)
        self.refilter()

    def refresh(self) -> None:
        self._store.invalidate("project")
        self.reload()

    def refilter(self) -> None:
        self._visible = filter_projects(self._store.all("project"), self._viewer, self._filter)
        self.projectsReloaded.emit(self._visible)

    # ---- commands (False = rejected before any gateway call)
    def create_project(self, project: Project) -> bool:
        if self._viewer is not None and self._viewer.is_employee:
            project.is_employee_created = True
            project.assigned_employee_id = project.assigned_employee_id or self._viewer.id
            project.assigned_employee_name = project.assigned_employee_name or self._viewer.name
        self._complete_if_done(project)
        try:
            validate_project(project)
        except ValidationError as exc:
            self.errorOccurred.emit(exc.message)
            return False
        self._send(lambda: self._repo.create(project), "Error creating project", f"Creating project {project.name!r}")
        return True

    def save_project(self, project: Project) -> bool:
        if not project.id:
            self._log.warning("save_project called without a project id; ignoring")
            return False
        self._complete_if_done(project)
        try:
            validate_project(project)
        except ValidationError as exc:
            self.errorOccurred.emit(exc.message)
            return False
        project_id, fields = project.id, project.to_api()
        self._send(lambda: self._repo.update(project_id, fields), "Error updating project", f"Updating project {project_id}")
        return True

    def delete_project(self, project_id: Optional[str]) -> bool:
        if not project_id:
            self._log.warning("delete_project called without a project id; ignoring")
            return False
        self._send(
            lambda: self._repo.delete(project_id), "Error deleting project", f"Deleting project {project_id}",
            on_success=lambda _: self._store.remove("project", project_id),
        )
        return True

    def reload_project(self, project_id: Optional[str]) -> bool:
        """Re-read one project (GET /api/projects/:id) and install it in the store."""
        if not project_id:
            return False

        def failed(exc: GatewayError) -> None:
            self._log.warning("Reading project %s failed: %s", project_id, exc)
            self.errorOccurred.emit(f"Could not load project: {exc}")

        self._runner.submit(lambda: self._repo.get(project_id), self._apply, failed)
        return True

    def add_comment(self, project_id: str, text: Optional[str] = None) -> Optional[CommentOutcome]:
        project = self._store.get("project", project_id)
        if project is None or self._viewer is None:
            self._log.warning("add_comment: project %s not loaded or no viewer", project_id)
            return None
        draft = self.draft_for(project_id)
        if text is not None:
            draft.text = text
        return self._comments.submit(project, draft, self._viewer)

    # ---- internals
    def _send(self, call: Callable[[], Any], failure: str, what: str, *, on_success: Optional[Callable[[Any], None]] = None) -> None:
        def done(result: Any) -> None:
            if on_success is not None:
                on_success(result)
            self.refresh()

        def failed(exc: GatewayError) -> None:
            self._log.error("%s failed: %s", what, exc)
            self.errorOccurred.emit(f"{failure}: {exc}")

        self._runner.submit(call, done, failed)

    def _on_load_failed(self, exc: GatewayError) -> None:
        self._log.error("Loading projects failed: %s", exc)
        self.errorOccurred.emit(f"Could not load projects: {exc}")

    def _on_comment_settled(self, outcome: CommentOutcome) -> None:
        if outcome.state is FlowState.ROLLED_BACK:
            self.errorOccurred.emit(f"Failed to add comment: {outcome.error}")

    def _on_store_changed(self, kind: str) -> None:
        # another view model (or a background load) replaced the shared project list
        if kind == "project" and self._viewer is not None:
            self.refilter()

    @staticmethod
    def _complete_if_done(project: Project) -> None:
        if project.progress >= 100:
            project.status = PROJECT_COMPLETED

    def _apply(self, project: Project) -> None:
        self._store.upsert("project", project)
        self._visible = [project if p.id == project.id else p for p in self._visible]
        self.projectChanged.emit(project)
