# Rev 0.2.0
# taskdesk: main window (Overview | Tasks | Projects | Employees | Independent Work)

from __future__ import annotations
from pathlib import Path
from typing import Optional

from PySide6.QtWidgets import QLabel, QMainWindow, QTabWidget

from ..app_context import AppContext
from ..utils.logging_setup import get_logger
from ..viewmodels.employees_viewmodel import EmployeesViewModel
from ..viewmodels.independent_work_viewmodel import IndependentWorkViewModel
from ..viewmodels.projects_viewmodel import ProjectsViewModel
from ..viewmodels.session_viewmodel import SessionViewModel
from ..viewmodels.task_detail_viewmodel import TaskDetailViewModel
from ..viewmodels.tasks_viewmodel import TasksViewModel
from .employees_view import EmployeesView
from .independent_work_view import IndependentWorkView
from .projects_view import ProjectsView
from .stats_panel import StatsPanel
from .tasks_view import TasksView


class MainWindow(QMainWindow):
    def __init__(self, ctx: AppContext, session: SessionViewModel, *, logfile: Optional[Path] = None, parent=None):
        super().__init__(parent)
        self._ctx = ctx
        self._session = session
        self._log = get_logger("ui.main")
        user = session.user

        # ---- view models ----
        self._tasks_vm = TasksViewModel(ctx.tasks, ctx.projects, ctx.employees, ctx.store, runner=ctx.runner)
        self._projects_vm = ProjectsViewModel(
            ctx.projects, ctx.store, runner=ctx.runner, refresh_interval_ms=ctx.polling.projects_interval_ms,
        )
        self._employees_vm = EmployeesViewModel(ctx.employees, ctx.store, runner=ctx.runner)
        self._work_vm = IndependentWorkViewModel(ctx.independent_work, ctx.store, runner=ctx.runner)

        # ---- tabs ----
        self._stats = StatsPanel(self)
        self._tasks = TasksView(self._tasks_vm, self._make_detail_vm, self)
        self._projects = ProjectsView(self._projects_vm, lambda: ctx.store.all("user"), self)
        self._employees = EmployeesView(self._employees_vm, self)
        self._work = IndependentWorkView(self._work_vm, self)

        self._tabs = QTabWidget(self)
        self._tabs.addTab(self._stats, "Overview")
        self._tabs.addTab(self._tasks, "Tasks")
        self._tabs.addTab(self._projects, "Projects")
        if user is not None and not user.is_employee:
            self._tabs.addTab(self._employees, "Employees")
        if user is not None and user.is_employee:
            self._tabs.addTab(self._work, "Independent Work")
        self.setCentralWidget(self._tabs)

        self._tasks_vm.statsChanged.connect(self._stats.set_stats)
        self._tasks_vm.breakdownChanged.connect(self._stats.set_breakdown)
        self._tasks_vm.pendingRequestsChanged.connect(self._on_pending_requests)

        # ---- menu / status ----
        session_menu = self.menuBar().addMenu("&Session")
        session_menu.addAction("Refresh All", self._refresh_all)
        session_menu.addSeparator()
        session_menu.addAction("Sign Out", self._sign_out)

        who = f"{user.name} ({user.role})" if user else "not signed in"
        self.statusBar().addWidget(QLabel(f"{who} · {ctx.gateway.base_url}"))
        if logfile:
            self.statusBar().addPermanentWidget(QLabel(f"log: {logfile}"))

        self.setWindowTitle(f"taskdesk: {who}")

        # initial load
        self._apply_viewer()

    # -------------------- wiring --------------------

    def _make_detail_vm(self) -> TaskDetailViewModel:
        return TaskDetailViewModel(
            self._ctx.tasks, self._ctx.store, self._session.user,
            runner=self._ctx.runner, poll_interval_ms=self._ctx.polling.task_detail_interval_ms,
        )

    def _apply_viewer(self):
        user = self._session.user
        self._tasks_vm.set_viewer(user)
        self._tasks.on_viewer_changed()
        self._projects.set_viewer(user)
        if user is not None and not user.is_employee:
            self._employees.set_viewer(user)
        if user is not None and user.is_employee:
            self._work_vm.set_viewer(user)
        self._update_requests()

    def _refresh_all(self):
        self._tasks_vm.refresh()
        self._projects_vm.refresh()
        if self._employees_vm.viewer is not None:
            self._employees_vm.refresh()
        if self._work_vm.viewer is not None:
            self._work_vm.refresh()
        self._update_requests()

    def _update_requests(self):
        self._tasks_vm.load_pending_requests()

    def _on_pending_requests(self, extensions, completions):
        user = self._session.user
        self._stats.set_requests(len(extensions), len(completions), visible=user is not None and not user.is_employee)

    def _sign_out(self):
        self._session.logout()
        self._ctx.store.clear()
        self.close()

    def closeEvent(self, ev):
        self._projects_vm.stop_auto_refresh()
        self._log.info("Main window closed")
        super().closeEvent(ev)
