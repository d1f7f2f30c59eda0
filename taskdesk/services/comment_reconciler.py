# Rev 0.2.0

"""Optimistic comment flow (Rev 0.2.0)

    IDLE --submit--> PENDING --ok--> RECONCILED
                             +--error--> ROLLED_BACK

The local comment is shown right away and the post runs on the runner;
on success the comment list is replaced wholesale by the server's list
(never merged), on failure the entity snapshot and the draft text come back.
"""
from __future__ import annotations
import dataclasses
import enum
import uuid
from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

from ..models.entities import Comment, IndependentWork, Project, Task, User
from ..models.errors import GatewayError
from ..utils.dates import now_iso
from ..utils.logging_setup import get_logger

E = TypeVar("E", Task, Project, IndependentWork)


class FlowState(enum.Enum):
    IDLE = "idle"
    PENDING = "pending"
    RECONCILED = "reconciled"
    ROLLED_BACK = "rolled_back"


@dataclass
class CommentDraft:
    """Model of the comment input field."""
    text: str = ""


@dataclass
class CommentOutcome(Generic[E]):
    """Returned by submit(); a PENDING outcome is updated in place once the post settles."""
    state: FlowState
    entity: E
    error: Optional[GatewayError] = None

    @property
    def ok(self) -> bool:
        return self.state is FlowState.RECONCILED

    @property
    def settled(self) -> bool:
        return self.state in (FlowState.RECONCILED, FlowState.ROLLED_BACK)


def local_comment(author: User, content: str) -> Comment:
    return Comment(
        id=f"local-{uuid.uuid4().hex}",
        user_id=author.id,
        user_name=author.name,
        user_role=author.role,
        content=content,
        timestamp=now_iso(),
        visible_to_employee=True,
    )


class OptimisticCommentFlow(Generic[E]):
    """
    post(entity_id, comment) -> entity   the gateway call (runs on `runner`); returns server truth
    apply(entity)                         installs an entity version into the store/view
    on_settled(outcome)                   called once the post succeeded or was rolled back
    """

    def __init__(
        self,
        post: Callable[[str, Comment], E],
        apply: Callable[[E], None],
        runner,
        *,
        on_settled: Optional[Callable[[CommentOutcome[E]], None]] = None,
        name: str = "comments",
    ):
        self._post = post
        self._apply = apply
        self._runner = runner
        self._on_settled = on_settled
        self._log = get_logger(f"reconciler.{name}")
        self.state = FlowState.IDLE

    def submit(self, entity: E, draft: CommentDraft, author: User) -> CommentOutcome[E]:
        text = draft.text
        if not text.strip():
            return CommentOutcome(FlowState.IDLE, entity)
        if not entity.id:
            self._log.warning("Refusing to comment on an entity without id")
            return CommentOutcome(FlowState.IDLE, entity)

        snapshot = entity
        comment = local_comment(author, text.strip())
        optimistic = dataclasses.replace(snapshot, comments=list(snapshot.comments) + [comment])
        outcome: CommentOutcome[E] = CommentOutcome(FlowState.PENDING, optimistic)

        self.state = FlowState.PENDING
        draft.text = ""
        self._apply(optimistic)

        def reconciled(server: E) -> None:
            entity_now = dataclasses.replace(snapshot, comments=list(server.comments))
            self._apply(entity_now)
            self._log.debug("Comment on %s reconciled (%d comments)", snapshot.id, len(entity_now.comments))
            self._settle(outcome, FlowState.RECONCILED, entity_now)

        def rolled_back(exc: GatewayError) -> None:
            self._log.warning("Comment on %s failed, rolling back: %s", snapshot.id, exc)
            # the draft comes back before the view re-renders the snapshot
            draft.text = text if not draft.text.strip() else f"{text} {draft.text}"
            self._apply(snapshot)
            self._settle(outcome, FlowState.ROLLED_BACK, snapshot, exc)

        self._runner.submit(lambda: self._post(snapshot.id, comment), reconciled, rolled_back)
        return outcome

    def _settle(self, outcome: CommentOutcome[E], state: FlowState, entity: E, error: Optional[GatewayError] = None) -> None:
        outcome.state = state
        outcome.entity = entity
        outcome.error = error
        self.state = state
        if self._on_settled is not None:
            self._on_settled(outcome)
