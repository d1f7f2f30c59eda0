# tests/test_task_poller.py
from __future__ import annotations

import dataclasses
import time

from PySide6.QtCore import QEventLoop, QTimer

from conftest import HeldRunner, InlineRunner, StubRepo, make_comment, make_task, wait_until
from taskdesk.models.errors import GatewayError
from taskdesk.services.background import BackgroundRunner
from taskdesk.viewmodels.task_detail_viewmodel import TaskDetailPoller, TaskDetailViewModel


def _spin(ms: int):
    loop = QEventLoop()
    QTimer.singleShot(ms, loop.quit)
    loop.exec()


class _Fetch:
    def __init__(self, tasks=None, fail=None):
        self.tasks = tasks if tasks is not None else [make_task("t1")]
        self.fail = fail
        self.calls = 0
        self.hook = None

    def __call__(self):
        self.calls += 1
        if self.hook:
            self.hook()
        if self.fail:
            raise self.fail
        return list(self.tasks)


def test_start_fetches_immediately_and_emits(qapp):
    fetch = _Fetch([make_task("t0"), make_task("7", title="mine")])
    poller = TaskDetailPoller(fetch, InlineRunner(), interval_ms=1000)
    got = []
    poller.taskRefreshed.connect(got.append)

    poller.start(7)  # raw int id still matches the canonical "7"
    assert fetch.calls == 1
    assert [t.title for t in got] == ["mine"]
    assert poller.is_active()
    poller.stop()


def test_call_count_plateaus_after_stop(qapp):
    fetch = _Fetch()
    poller = TaskDetailPoller(fetch, InlineRunner(), interval_ms=20)
    poller.start("t1")
    _spin(150)
    assert fetch.calls >= 3

    poller.stop()
    plateau = fetch.calls
    _spin(120)
    assert fetch.calls == plateau
    assert not poller.is_active()
    assert poller.task_id is None


def test_failure_is_reported_and_polling_continues(qapp):
    fetch = _Fetch(fail=GatewayError(503, "Service Unavailable"))
    poller = TaskDetailPoller(fetch, InlineRunner(), interval_ms=20)
    errors = []
    poller.pollFailed.connect(errors.append)

    poller.start("t1")
    _spin(100)
    poller.stop()
    assert len(errors) >= 2
    assert "HTTP 503" in errors[0]


def test_result_for_closed_view_is_discarded(qapp):
    fetch = _Fetch()
    poller = TaskDetailPoller(fetch, InlineRunner(), interval_ms=1000)
    got = []
    poller.taskRefreshed.connect(got.append)
    fetch.hook = poller.stop  # view closes while the request is out

    poller.start("t1")
    assert fetch.calls == 1
    assert got == []
    assert not poller.is_active()


def test_switching_task_only_tracks_latest(qapp):
    fetch = _Fetch([make_task("a"), make_task("b")])
    poller = TaskDetailPoller(fetch, InlineRunner(), interval_ms=1000)
    got = []
    poller.taskRefreshed.connect(lambda t: got.append(t.id))
    poller.start("a")
    poller.start("b")
    poller.poll_once()
    poller.stop()
    assert got == ["a", "b", "b"]


def test_missing_task_emits_nothing(qapp):
    poller = TaskDetailPoller(_Fetch([make_task("x")]), InlineRunner(), interval_ms=1000)
    got = []
    poller.taskRefreshed.connect(got.append)
    poller.start("nope")
    poller.stop()
    assert got == []



def test_tick_is_skipped_while_a_fetch_is_out(qapp):
    held = HeldRunner()
    poller = TaskDetailPoller(_Fetch(), held, interval_ms=1000)
    got = []
    poller.taskRefreshed.connect(got.append)

    poller.start("t1")
    poller.poll_once()
    poller.poll_once()
    assert len(held.queue) == 1
    assert poller.is_fetching()

    held.release()
    assert [t.id for t in got] == ["t1"]
    assert not poller.is_fetching()
    poller.poll_once()
    assert len(held.queue) == 1
    poller.stop()


def test_answers_arriving_after_stop_are_ignored(qapp):
    held = HeldRunner()
    ok = TaskDetailPoller(_Fetch(), held, interval_ms=1000)
    bad = TaskDetailPoller(_Fetch(fail=GatewayError(500, "boom")), held, interval_ms=1000)
    got, errors = [], []
    for p in (ok, bad):
        p.taskRefreshed.connect(got.append)
        p.pollFailed.connect(errors.append)
        p.start("t1")
        p.stop()

    held.release()
    held.release()
    assert got == [] and errors == []


def test_event_loop_keeps_running_during_a_slow_fetch(qapp):
    def slow_fetch():
        time.sleep(0.5)
        return [make_task("t1", title="slow")]

    runner = BackgroundRunner()
    poller = TaskDetailPoller(slow_fetch, runner, interval_ms=10_000)
    got, ticks = [], []
    poller.taskRefreshed.connect(got.append)
    try:
        started = time.monotonic()
        poller.start("t1")
        QTimer.singleShot(10, lambda: ticks.append((time.monotonic() - started, poller.is_fetching())))

        assert wait_until(lambda: bool(ticks), 400)
        elapsed, fetching = ticks[0]
        assert elapsed < 0.3
        assert fetching

        assert wait_until(lambda: bool(got), 3000)
        assert got[0].title == "slow"
    finally:
        poller.stop()
        runner.shutdown()


# --- TaskDetailViewModel -------------------------------------------------------

def test_detail_vm_polls_while_open(store, employee):
    repo = StubRepo([make_task("t1")])
    vm = TaskDetailViewModel(repo, store, employee, runner=InlineRunner(), poll_interval_ms=20)
    vm.open(make_task("t1"))
    _spin(90)
    assert vm.poller.is_active()
    vm.close()
    plateau = repo.count("list_for_viewer")
    assert plateau >= 2
    _spin(80)
    assert repo.count("list_for_viewer") == plateau
    assert vm.task() is None


def test_detail_vm_refresh_lands_in_store(store, employee):
    fresh = make_task("t1", status="In Progress", comments=[make_comment("c1")])
    repo = StubRepo([fresh])
    vm = TaskDetailViewModel(repo, store, employee, runner=InlineRunner(), poll_interval_ms=1000)
    changed = []
    vm.taskChanged.connect(changed.append)

    vm.open(make_task("t1"))
    vm.close()
    assert changed[-1].status == "In Progress"
    assert store.get("task", "t1").comments[0].id == "c1"


def test_detail_vm_comment_failure_restores(store, employee):
    task = make_task("p1", comments=[])
    repo = StubRepo([task])
    vm = TaskDetailViewModel(repo, store, employee, runner=InlineRunner(), poll_interval_ms=1000)
    failures = []
    vm.commentFailed.connect(failures.append)
    vm.open(task)
    vm.poller.stop()

    repo.fail = GatewayError(None, "Network error")
    outcome = vm.submit_comment("hello")

    assert not outcome.ok
    assert vm.task().comments == []
    assert vm.draft.text == "hello"
    assert failures and "Network error" in failures[0]


def test_detail_vm_comment_success_reconciles(store, employee):
    task = make_task("t1")
    repo = StubRepo([task])
    repo.server_comments = [make_comment("s1", "first"), make_comment("s2", "hello")]
    vm = TaskDetailViewModel(repo, store, employee, runner=InlineRunner(), poll_interval_ms=1000)
    vm.open(task)
    vm.poller.stop()

    outcome = vm.submit_comment("hello")
    assert outcome.ok
    assert [c.id for c in vm.task().comments] == ["s1", "s2"]
    assert [c.id for c in store.get("task", "t1").comments] == ["s1", "s2"]
    assert vm.draft.text == ""
    assert dataclasses.replace(task, comments=[]) == dataclasses.replace(vm.task(), comments=[])


def test_detail_vm_comment_settling_after_close_updates_store_only(store, employee):
    task = make_task("t1")
    repo = StubRepo([task])
    repo.server_comments = [make_comment("s1", "late")]
    held = HeldRunner()
    vm = TaskDetailViewModel(repo, store, employee, runner=held, poll_interval_ms=1000)
    vm.open(task)
    outcome = vm.submit_comment("late")
    assert outcome.state.value == "pending"
    vm.close()

    changed = []
    vm.taskChanged.connect(changed.append)
    held.release()  # the poll: discarded
    held.release()  # the comment post
    assert outcome.ok
    assert changed == []
    assert [c.id for c in store.get("task", "t1").comments] == ["s1"]
