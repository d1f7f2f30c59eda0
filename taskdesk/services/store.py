# Rev 0.2.0
"""
EntityStore: the single client-side cache, keyed by canonical id per kind.
The gateway stays the source of truth; every mutation invalidates the
affected kind so the next read reloads it.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, List, Optional

from PySide6.QtCore import QObject, Signal

from ..models.errors import GatewayError
from ..models.types import EntityKind
from ..utils.logging_setup import get_logger

KINDS = ("task", "project", "user", "independent_work", "employee")


class EntityStore(QObject):
    changed = Signal(str)        # kind
    invalidated = Signal(str)    # kind

    def __init__(self):
        super().__init__()
        self._items: Dict[str, Dict[str, Any]] = {k: {} for k in KINDS}
        self._stale: Dict[str, bool] = {k: True for k in KINDS}
        # bumped by invalidate/clear; a load started under an older generation is dropped
        self._generation: Dict[str, int] = {k: 0 for k in KINDS}
        self._inflight: Dict[str, int] = {}
        self._log = get_logger("store")

    # ---- reads
    def all(self, kind: EntityKind) -> List[Any]:
        return list(self._bucket(kind).values())

    def get(self, kind: EntityKind, entity_id: Any) -> Optional[Any]:
        if entity_id is None:
            return None
        return self._bucket(kind).get(str(entity_id))

    def is_stale(self, kind: EntityKind) -> bool:
        self._bucket(kind)
        return self._stale[kind]

    # ---- writes
    def replace_all(self, kind: EntityKind, entities: Iterable[Any]) -> None:
        bucket = self._bucket(kind)
        bucket.clear()
        for e in entities:
            if e.id:
                bucket[str(e.id)] = e
            else:
                self._log.warning("Dropping %s without id from the store", kind)
        self._stale[kind] = False
        self.changed.emit(kind)

    def upsert(self, kind: EntityKind, entity: Any) -> None:
        if not entity.id:
            self._log.warning("Cannot upsert %s without id", kind)
            return
        self._bucket(kind)[str(entity.id)] = entity
        self.changed.emit(kind)

    def remove(self, kind: EntityKind, entity_id: Any) -> None:
        if self._bucket(kind).pop(str(entity_id), None) is not None:
            self.changed.emit(kind)

    def invalidate(self, kind: EntityKind) -> None:
        self._bucket(kind)
        self._stale[kind] = True
        self._generation[kind] += 1
        self.invalidated.emit(kind)

    def fetch(
        self,
        kind: EntityKind,
        loader: Callable[[], Iterable[Any]],
        runner,
        on_error: Optional[Callable[[GatewayError], None]] = None,
    ) -> bool:
        """
        Reload `kind` through `runner` when stale. Returns False when the
        cache is fresh or a load for the current generation is already out.
        A failed load leaves the kind empty (and fresh) and calls on_error.
        """
        if not self.is_stale(kind) or self._inflight.get(kind) == self._generation[kind]:
            return False
        generation = self._generation[kind]
        self._inflight[kind] = generation

        def done(entities: Iterable[Any]) -> None:
            if self._generation[kind] != generation:
                self._log.debug("Dropping %s list loaded before the last invalidate", kind)
                return
            self._inflight.pop(kind, None)
            self.replace_all(kind, entities)

        def failed(exc: GatewayError) -> None:
            if self._generation[kind] != generation:
                return
            self._inflight.pop(kind, None)
            self.replace_all(kind, [])
            if on_error is not None:
                on_error(exc)

        runner.submit(loader, done, failed)
        return True

    def is_loading(self, kind: EntityKind) -> bool:
        self._bucket(kind)
        return self._inflight.get(kind) == self._generation[kind]

    def clear(self) -> None:
        for k in KINDS:
            self._items[k].clear()
            self._stale[k] = True
            self._generation[k] += 1
        self._inflight.clear()

    # ---- internals
    def _bucket(self, kind: str) -> Dict[str, Any]:
        try:
            return self._items[kind]
        except KeyError:
            raise ValueError(f"Unknown entity kind: {kind!r}") from None
