# Rev 0.2.0
from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from ..models.entities import IndependentWork, User
from ..models.errors import GatewayError, ValidationError
from ..services.background import BackgroundRunner
from ..services.comment_reconciler import CommentDraft, CommentOutcome, FlowState, OptimisticCommentFlow
from ..services.permissions import Capabilities, resolve_capabilities
from ..services.store import EntityStore
from ..services.validation import validate_independent_work
from ..utils.logging_setup import get_logger


class IndependentWorkViewModel(QObject):
    """
    Employees log their own work entries; Directors / Project Heads read
    everyone's. Comments use the same optimistic flow as tasks.
    """

    entriesReloaded = Signal(list)
    entryChanged = Signal(object)
    errorOccurred = Signal(str)

    def __init__(self, work_repo, store: EntityStore, viewer: Optional[User] = None, *, runner=None):
        super().__init__()
        self._repo = work_repo
        self._store = store
        self._viewer = viewer
        self._runner = runner if runner is not None else BackgroundRunner(parent=self)
        self._drafts: Dict[str, CommentDraft] = {}
        self._comments = OptimisticCommentFlow(
            self._repo.add_comment, self._apply, self._runner, on_settled=self._on_comment_settled, name="independent_work",
        )
        self._log = get_logger("vm.independent_work")
        self._store.changed.connect(self._on_store_changed)

    @property
    def viewer(self) -> Optional[User]:
        return self._viewer

    def set_viewer(self, viewer: Optional[User]) -> None:
        self._viewer = viewer
        self.refresh()

    def entries(self) -> List[IndependentWork]:
        return self._store.all("independent_work")

    def capabilities(self, work: IndependentWork) -> Capabilities:
        return resolve_capabilities(self._viewer, work)

    def draft_for(self, work_id: str) -> CommentDraft:
        return self._drafts.setdefault(str(work_id), CommentDraft())

    # ---- queries
    def reload(self) -> None:
        if self._viewer is None:
            self.entriesReloaded.emit([])
            return
        self._store.fetch("independent_work", self._loader(), self._runner, self._on_load_failed)
        self.entriesReloaded.emit(self.entries())

    def refresh(self) -> None:
        self._store.invalidate("independent_work")
        self.reload()

    def _loader(self):
        viewer = self._viewer
        if viewer.is_employee:
            return lambda: self._repo.list_for_employee(viewer.id)
        return self._repo.list_all

    # ---- commands (False = rejected before any gateway call)
    def create_entry(self, work: IndependentWork) -> bool:
        if self._viewer is None:
            return False
        work.employee_id = work.employee_id or self._viewer.id
        work.employee_name = work.employee_name or self._viewer.name
        try:
            validate_independent_work(work)
        except ValidationError as exc:
            self.errorOccurred.emit(exc.message)
            return False
        self._send(lambda: self._repo.create(work), "Error saving work entry", "Creating independent work")
        return True

    def save_entry(self, work: IndependentWork) -> bool:
        if not work.id:
            self._log.warning("save_entry called without an id; ignoring")
            return False
        try:
            validate_independent_work(work)
        except ValidationError as exc:
            self.errorOccurred.emit(exc.message)
            return False
        work_id, fields = work.id, work.to_api()
        self._send(lambda: self._repo.update(work_id, fields), "Error updating work entry", f"Updating independent work {work_id}")
        return True

    def delete_entry(self, work_id: Optional[str]) -> bool:
        if not work_id:
            self._log.warning("delete_entry called without an id; ignoring")
            return False
        self._send(
            lambda: self._repo.delete(work_id), "Error deleting work entry", f"Deleting independent work {work_id}",
            on_success=lambda _: self._store.remove("independent_work", work_id),
        )
        return True

    def open_entry(self, work_id: Optional[str]) -> bool:
        """Re-read one entry (GET /api/independent-work/:id), e.g. before editing it."""
        if not work_id:
            return False

        def failed(exc: GatewayError) -> None:
            self._log.warning("Reading independent work %s failed: %s", work_id, exc)
            self.errorOccurred.emit(f"Could not load work entry: {exc}")

        self._runner.submit(lambda: self._repo.get(work_id), self._apply, failed)
        return True

    def add_comment(self, work_id: str, text: Optional[str] = None) -> Optional[CommentOutcome]:
        work = self._store.get("independent_work", work_id)
        if work is None or self._viewer is None:
            self._log.warning("add_comment: entry %s not loaded or no viewer", work_id)
            return None
        draft = self.draft_for(work_id)
        if text is not None:
            draft.text = text
        return self._comments.submit(work, draft, self._viewer)

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
        self._log.error("Loading independent work failed: %s", exc)
        self.errorOccurred.emit(f"Could not load independent work: {exc}")

    def _on_comment_settled(self, outcome: CommentOutcome) -> None:
        if outcome.state is FlowState.ROLLED_BACK:
            self.errorOccurred.emit(f"Error adding comment: {outcome.error}")

    def _on_store_changed(self, kind: str) -> None:
        if kind == "independent_work" and self._viewer is not None:
            self.entriesReloaded.emit(self.entries())

    def _apply(self, work: IndependentWork) -> None:
        self._store.upsert("independent_work", work)
        self.entryChanged.emit(work)
