"""Allow running FocusCycle as a module: python -m focuscycle."""

import logging
import os
import sys

from PyQt6.QtWidgets import QApplication

from .database.db import init_db
from .app import FocusCycleApp


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("FOCUSCYCLE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_db()

    app = QApplication(sys.argv)
    app.setApplicationName("FocusCycle")
    app.setOrganizationName("FocusCycle")

    window = FocusCycleApp()
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
