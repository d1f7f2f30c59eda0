# Rev 0.2.0: open-task polling + optimistic comments
from __future__ import annotations

from typing import Any, Callable, List, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from ..models.entities import Task, User, ids_match
from ..models.errors import GatewayError
from ..services.background import BackgroundRunner
from ..services.comment_reconciler import CommentDraft, CommentOutcome, FlowState, OptimisticCommentFlow
from ..services.permissions import Capabilities, resolve_capabilities
from ..services.store import EntityStore
from ..utils.logging_setup import get_logger

DEFAULT_POLL_MS = 3000


class TaskDetailPoller(QObject):
    """
    While a task detail view is open, re-read the viewer's task list on a
    fixed interval and emit the freshest copy of the open task.

    The fetch runs on `runner`; at most one fetch is out at a time.
    stop() cancels the timer, and a result that lands after stop() (or
    after start() switched to another task) is discarded.
    """

    taskRefreshed = Signal(object)   # Task
    pollFailed = Signal(str)

    def __init__(
        self,
        fetch: Callable[[], List[Task]],
        runner,
        *,
        interval_ms: int = DEFAULT_POLL_MS,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._fetch = fetch
        self._runner = runner
        self._task_id: Any = None
        self._generation = 0
        self._inflight: Optional[int] = None
        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.poll_once)
        self._log = get_logger("poller")

    @property
    def task_id(self) -> Any:
        return self._task_id

    def is_active(self) -> bool:
        return self._timer.isActive()

    def is_fetching(self) -> bool:
        return self._inflight == self._generation

    def start(self, task_id: Any) -> None:
        self.stop()
        self._task_id = task_id
        self._log.debug("Polling task %s every %d ms", task_id, self._timer.interval())
        self.poll_once()
        if self._task_id is not None:
            self._timer.start()

    def stop(self) -> None:
        self._timer.stop()
        if self._task_id is not None:
            self._log.debug("Stopped polling task %s", self._task_id)
        self._task_id = None
        self._generation += 1

    def poll_once(self) -> None:
        task_id = self._task_id
        if task_id is None:
            return
        if self.is_fetching():
            self._log.debug("Previous refresh of task %s still running; skipping tick", task_id)
            return
        generation = self._generation
        self._inflight = generation

        def done(tasks: List[Task]) -> None:
            if self._inflight == generation:
                self._inflight = None
            # view closed (or switched task) while the request was out
            if generation != self._generation:
                return
            for t in tasks:
                if ids_match(t.id, task_id):
                    self.taskRefreshed.emit(t)
                    return
            self._log.debug("Task %s not in refreshed list", task_id)

        def failed(exc: GatewayError) -> None:
            if self._inflight == generation:
                self._inflight = None
            if generation != self._generation:
                return
            self._log.warning("Refreshing task %s failed: %s", task_id, exc)
            self.pollFailed.emit(str(exc))

        self._runner.submit(self._fetch, done, failed)


class TaskDetailViewModel(QObject):
    taskChanged = Signal(object)     # Task
    commentFailed = Signal(str)
    errorOccurred = Signal(str)

    def __init__(self, tasks_repo, store: EntityStore, viewer: Optional[User], *, runner=None, poll_interval_ms: int = DEFAULT_POLL_MS):
        super().__init__()
        self._tasks = tasks_repo
        self._store = store
        self._viewer = viewer
        self._runner = runner if runner is not None else BackgroundRunner(parent=self)
        self._task: Optional[Task] = None
        self.draft = CommentDraft()

        self._poller = TaskDetailPoller(self._fetch_for_viewer, self._runner, interval_ms=poll_interval_ms, parent=self)
        self._poller.taskRefreshed.connect(self._on_refreshed)
        self._poller.pollFailed.connect(self.errorOccurred)

        self._comments = OptimisticCommentFlow(
            self._tasks.add_comment, self._apply, self._runner, on_settled=self._on_comment_settled, name="task",
        )
        self._log = get_logger("vm.task_detail")

    # ---- lifecycle
    def open(self, task: Task) -> None:
        self._task = task
        self.draft = CommentDraft()
        self.taskChanged.emit(task)
        if task.id:
            self._poller.start(task.id)
        else:
            self._log.warning("Opened a task without id; polling disabled")

    def close(self) -> None:
        self._poller.stop()
        self._task = None

    @property
    def poller(self) -> TaskDetailPoller:
        return self._poller

    def task(self) -> Optional[Task]:
        return self._task

    def capabilities(self) -> Capabilities:
        if self._task is None:
            return Capabilities()
        return resolve_capabilities(self._viewer, self._task)

    # ---- comments
    def submit_comment(self, text: Optional[str] = None) -> Optional[CommentOutcome]:
        """Shows the comment at once; the returned outcome settles when the server answers."""
        if self._task is None or self._viewer is None:
            return None
        if text is not None:
            self.draft.text = text
        return self._comments.submit(self._task, self.draft, self._viewer)

    # ---- internals
    def _fetch_for_viewer(self) -> List[Task]:
        return self._tasks.list_for_viewer(self._viewer)

    def _apply(self, task: Task) -> None:
        self._store.upsert("task", task)
        # a comment can settle after the view was closed or moved on
        if self._task is None or not ids_match(self._task.id, task.id):
            return
        self._task = task
        self.taskChanged.emit(task)

    def _on_comment_settled(self, outcome: CommentOutcome) -> None:
        if outcome.state is FlowState.ROLLED_BACK:
            self.commentFailed.emit(f"Error adding comment: {outcome.error}")

    def _on_refreshed(self, task: Task) -> None:
        if self._task is None:
            return
        self._apply(task)
