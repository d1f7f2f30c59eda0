# tests/test_app_context.py
from __future__ import annotations

from taskdesk.app_context import AppContext
from taskdesk.utils.config import load_settings


def test_create_wires_repositories(qapp, tmp_path, monkeypatch):
    monkeypatch.setenv("TASKDESK_API_URL", "http://api.test:9000/")
    monkeypatch.delenv("TASKDESK_POLL_MS", raising=False)
    ctx = AppContext.create(load_settings(tmp_path / "settings.json"))
    try:
        assert ctx.gateway.base_url == "http://api.test:9000"
        assert ctx.polling.task_detail_interval_ms == 3000
        assert ctx.store.is_stale("task")
        assert ctx.tasks is not None and ctx.independent_work is not None
        assert ctx.runner.pending() == 0
    finally:
        ctx.close()
