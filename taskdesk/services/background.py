# Rev 0.2.0
"""
Gateway calls run on a QThreadPool worker; results come back through a
queued signal, so `on_done` / `on_error` always run on the thread that
called submit() (the UI thread in the app).

One worker by default: requests leave in the order they were issued.
"""
from __future__ import annotations

from typing import Any, Callable, Set

from PySide6.QtCore import QObject, QRunnable, Qt, QThreadPool, Signal, Slot

from ..models.errors import GatewayError
from ..utils.logging_setup import get_logger

OnDone = Callable[[Any], None]
OnError = Callable[[GatewayError], None]


class _Relay(QObject):
    """Lives on the submitting thread; the worker only emits on it."""

    finished = Signal(object)
    failed = Signal(object)

    def __init__(self, runner: "BackgroundRunner", on_done: OnDone, on_error: OnError):
        super().__init__()
        self._runner = runner
        self._on_done = on_done
        self._on_error = on_error
        self.finished.connect(self._deliver_done, Qt.QueuedConnection)
        self.failed.connect(self._deliver_failed, Qt.QueuedConnection)

    @Slot(object)
    def _deliver_done(self, result: Any) -> None:
        self._runner._release(self)
        self._on_done(result)

    @Slot(object)
    def _deliver_failed(self, exc: BaseException) -> None:
        self._runner._release(self)
        if isinstance(exc, GatewayError):
            self._on_error(exc)
            return
        raise exc


class _Job(QRunnable):
    def __init__(self, fn: Callable[[], Any], relay: _Relay):
        super().__init__()
        self._fn = fn
        self._relay = relay

    def run(self) -> None:
        try:
            result = self._fn()
        except Exception as exc:  # re-raised on the UI thread unless it is a GatewayError
            self._relay.failed.emit(exc)
            return
        self._relay.finished.emit(result)


class BackgroundRunner(QObject):
    def __init__(self, *, max_threads: int = 1, parent: QObject | None = None):
        super().__init__(parent)
        self._pool = QThreadPool(self)
        self._pool.setMaxThreadCount(max_threads)
        self._pending: Set[_Relay] = set()
        self._log = get_logger("background")

    def submit(self, fn: Callable[[], Any], on_done: OnDone, on_error: OnError) -> None:
        relay = _Relay(self, on_done, on_error)
        self._pending.add(relay)
        self._pool.start(_Job(fn, relay))

    def pending(self) -> int:
        """Calls whose result has not been delivered yet."""
        return len(self._pending)

    def wait(self, msecs: int = -1) -> bool:
        """Block until the workers are idle; results still need the event loop to be delivered."""
        return self._pool.waitForDone(msecs)

    def shutdown(self, msecs: int = 3000) -> None:
        self._pool.clear()
        if not self._pool.waitForDone(msecs):
            self._log.warning("Gateway calls still running after %d ms at shutdown", msecs)
        self._pending.clear()

    def _release(self, relay: _Relay) -> None:
        self._pending.discard(relay)
        relay.deleteLater()
