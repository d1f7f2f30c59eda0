# Rev 0.2.0

# taskdesk/ui/window_mode.py
from PySide6.QtCore import QRect, Qt
from PySide6.QtGui import QGuiApplication


def _available(win) -> QRect:
    screen = QGuiApplication.screenAt(win.frameGeometry().center()) or QGuiApplication.primaryScreen()
    return screen.availableGeometry()


def fit_to_screen(win, *, width: int, height: int):
    """Resize to the configured size, shrunk to the available area (taskbar-safe)."""
    rect = _available(win)
    win.resize(min(width, rect.width()), min(height, rect.height()))


def lock_dialog_fixed(win, *, width_ratio=0.6, height_ratio=0.7):
    """
    For modal dialogs: keep them *not* maximized, but non-resizable and sized
    as a fraction of the current screen.
    """
    rect = _available(win)
    win.setFixedSize(int(rect.width() * width_ratio), int(rect.height() * height_ratio))
    win.setWindowFlag(Qt.WindowMaximizeButtonHint, False)
