# Rev 0.2.0
# taskdesk/ui/stats_panel.py
from __future__ import annotations

from PySide6.QtWidgets import QFormLayout, QGroupBox, QLabel, QVBoxLayout, QWidget

from ..services.stats import DashboardStats, EmployeeBreakdown

_STAT_ROWS = (
    ("total_tasks", "Total tasks"),
    ("completed_tasks", "Completed"),
    ("pending_tasks", "Pending"),
    ("in_progress_tasks", "In progress"),
    ("overdue_tasks", "Overdue"),
    ("total_projects", "Projects"),
    ("active_projects", "Active projects"),
)

_BREAKDOWN_ROWS = (
    ("urgent", "Urgent"),
    ("less_urgent", "Less urgent"),
    ("free_time", "Free time"),
    ("completed", "Completed"),
)


class StatsPanel(QWidget):
    """Overview tab: dashboard counters, plus the per-priority breakdown for employees."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self._values: dict[str, QLabel] = {}
        self._breakdown: dict[str, QLabel] = {}

        totals = QGroupBox("Overview")
        form = QFormLayout(totals)
        for key, label in _STAT_ROWS:
            self._values[key] = QLabel("0")
            form.addRow(f"{label}:", self._values[key])

        self._mine = QGroupBox("My tasks")
        mine_form = QFormLayout(self._mine)
        for key, label in _BREAKDOWN_ROWS:
            self._breakdown[key] = QLabel("0")
            mine_form.addRow(f"{label}:", self._breakdown[key])
        self._mine.setVisible(False)

        self._requests = QGroupBox("Awaiting my response")
        req_form = QFormLayout(self._requests)
        self._extensions = QLabel("0")
        self._completions = QLabel("0")
        req_form.addRow("Extension requests:", self._extensions)
        req_form.addRow("Completion requests:", self._completions)
        self._requests.setVisible(False)

        root = QVBoxLayout(self)
        root.addWidget(totals)
        root.addWidget(self._mine)
        root.addWidget(self._requests)
        root.addStretch(1)

    # ---------- Public API ----------
    def set_stats(self, stats: DashboardStats):
        for key, lbl in self._values.items():
            lbl.setText(str(getattr(stats, key)))

    def set_breakdown(self, breakdown: EmployeeBreakdown):
        for key, lbl in self._breakdown.items():
            lbl.setText(str(getattr(breakdown, key)))
        self._mine.setVisible(True)

    def set_requests(self, extensions: int, completions: int, visible: bool = True):
        self._extensions.setText(str(extensions))
        self._completions.setText(str(completions))
        self._requests.setVisible(visible)
