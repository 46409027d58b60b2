from __future__ import annotations

import logging
import sys

from PySide6.QtGui import QColor, QFont, QPalette
from PySide6.QtWidgets import QApplication, QMessageBox, QStyleFactory

from task_tracker.config import SETTINGS
from task_tracker.domain.errors import PersistenceError
from task_tracker.infra.logging import setup_logging
from task_tracker.services.task_service import build_service
from task_tracker.ui.main_window import MainWindow

logger = logging.getLogger(__name__)


def _apply_light_palette(app: QApplication) -> None:
    palette = QPalette()
    palette.setColor(QPalette.Window, QColor("#F8FAFC"))
    palette.setColor(QPalette.WindowText, QColor("#334155"))
    palette.setColor(QPalette.Base, QColor("#FFFFFF"))
    palette.setColor(QPalette.AlternateBase, QColor("#EFF6FF"))
    palette.setColor(QPalette.Text, QColor("#1E293B"))
    palette.setColor(QPalette.Button, QColor("#E5E7EB"))
    palette.setColor(QPalette.ButtonText, QColor("#1E293B"))
    palette.setColor(QPalette.Highlight, QColor("#3B82F6"))
    palette.setColor(QPalette.HighlightedText, QColor("#FFFFFF"))
    app.setPalette(palette)


def main() -> None:
    setup_logging()
    app = QApplication(sys.argv)
    try:
        service = build_service(SETTINGS)
        result = service.start(seed_defaults=SETTINGS.seed_defaults)
    except PersistenceError as exc:
        logger.exception("Storage could not be opened")
        QMessageBox.critical(None, "Storage error", str(exc))
        return

    app.setStyle(QStyleFactory.create("Fusion"))
    _apply_light_palette(app)
    app.setFont(QFont("Noto Sans CJK JP", 10))

    window = MainWindow(service)
    window.show()
    window.show_load_warning(result.warning)
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
