# main.py
import logging
import sys

from PyQt5.QtCore import QCoreApplication
from PyQt5.QtWidgets import QApplication, QMessageBox

from menutrans import config

# QStandardPaths derives the settings directory from these, so set them first
QCoreApplication.setOrganizationName(config.SETTINGS_ORG)
QCoreApplication.setApplicationName(config.SETTINGS_APP)

from menutrans.app import TranslatorApp


def setup_logging(level_name=None):
    """Configures root logging from config.LOG_LEVEL (or an explicit level name)."""
    level_name = str(level_name or config.LOG_LEVEL).upper()
    log_level = logging.getLevelName(level_name)
    if not isinstance(log_level, int):
        print(f"Warning: Unknown log level '{level_name}'. Using INFO.")
        log_level = logging.INFO

    logging.basicConfig(level=log_level, format=config.LOG_FORMAT, datefmt=config.DATE_FORMAT)
    logging.debug(f"Logging initialised at {logging.getLevelName(log_level)}.")


def run_application(argv=None):
    """Starts the tray application and blocks in the Qt event loop."""
    setup_logging()
    logging.info(f"{config.SETTINGS_APP} starting...")

    app = QApplication(sys.argv if argv is None else argv)
    # The app lives in the tray; closing a window must not end it
    app.setQuitOnLastWindowClosed(False)

    try:
        translator = TranslatorApp()
        translator.start()
        exit_code = app.exec_()
    except Exception as e:
        logging.exception("Fatal error while running the application:")
        QMessageBox.critical(None, "Fatal Error", f"{config.SETTINGS_APP} stopped unexpectedly:\n{e}\n\nSee the log for details.")
        sys.exit(1)

    logging.info(f"Event loop exited with code {exit_code}.")
    sys.exit(exit_code)


if __name__ == '__main__':
    run_application()
