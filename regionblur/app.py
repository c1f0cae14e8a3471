from __future__ import annotations

import logging
import sys

from PySide6.QtWidgets import QApplication

from .config import default_settings_path, load_settings
from .logging_setup import setup_logging
from .ui.main_window import MainWindow

log = logging.getLogger(__name__)


def main() -> int:
    log_file = setup_logging()
    log.info(f"Starting Region Blur, logging to {log_file}")
    settings_path = default_settings_path()
    settings = load_settings(settings_path)

    app = QApplication(sys.argv)
    window = MainWindow(settings, settings_path=settings_path)
    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
