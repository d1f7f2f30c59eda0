# Rev 0.2.0

# taskdesk/main.py
import sys

from PySide6.QtCore import QCoreApplication, Qt
from PySide6.QtGui import QFont, QGuiApplication
from PySide6.QtWidgets import QApplication, QDialog

from taskdesk.app_context import AppContext
from taskdesk.ui.login_dialog import LoginDialog
from taskdesk.ui.main_window import MainWindow
from taskdesk.ui.window_mode import fit_to_screen
from taskdesk.utils.config import load_settings, remember_window_size
from taskdesk.utils.logging_setup import get_logger, setup_logging
from taskdesk.viewmodels.session_viewmodel import SessionViewModel


def main():
    QGuiApplication.setHighDpiScaleFactorRoundingPolicy(
        Qt.HighDpiScaleFactorRoundingPolicy.PassThrough
    )
    app = QApplication(sys.argv)
    QCoreApplication.setOrganizationName("taskdesk")
    QCoreApplication.setApplicationName("taskdesk")

    logfile = setup_logging("taskdesk")
    print(f"[logging] Writing to: {logfile}")
    log = get_logger("main")

    # --- DI wiring ---
    settings = load_settings()
    ctx = AppContext.create(settings)
    # login will surface the same failure; keep going so the URL can be checked in the log
    ctx.runner.submit(
        ctx.gateway.health,
        lambda _: log.info("API at %s is reachable", ctx.gateway.base_url),
        lambda exc: log.warning("Health check against %s failed: %s", ctx.gateway.base_url, exc),
    )

    # --- login ---
    session = SessionViewModel(ctx.employees, runner=ctx.runner)
    login = LoginDialog(session)
    if login.exec() != QDialog.Accepted or session.user is None:
        log.info("Login cancelled")
        ctx.close()
        return 0

    # --- UI ---
    win = MainWindow(ctx, session, logfile=logfile)
    size = settings.get("main_window", {})
    fit_to_screen(win, width=int(size.get("width", 1200)), height=int(size.get("height", 760)))
    win.show()

    app.setProperty("mainWindow", win)
    app.setFont(QFont("Sans Serif", 10))

    code = app.exec()
    remember_window_size(win.width(), win.height())
    ctx.close()
    return code


if __name__ == "__main__":
    sys.exit(main())
