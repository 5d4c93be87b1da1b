# menutrans/gui/theme.py
import logging

from PyQt5.QtGui import QPalette
from PyQt5.QtWidgets import QApplication

from menutrans.core.settings_manager import Theme

LIGHT_STYLE = """
QWidget#TranslatorPopup { background-color: rgba(255, 255, 255, 242); border: 1px solid #e5e7eb; border-radius: 8px; }
QLabel#ResultLabel { background-color: rgba(239, 246, 255, 200); color: #1f2937; border-radius: 4px; padding: 4px 8px; }
QLineEdit#PopupInput { background: transparent; border: none; color: #111827; font-size: 16px; }
QTextBrowser, QTextEdit { background-color: #ffffff; color: #111827; }
"""

DARK_STYLE = """
QWidget { background-color: #111827; color: #e5e7eb; }
QWidget#TranslatorPopup { background-color: rgba(17, 24, 39, 242); border: 1px solid #374151; border-radius: 8px; }
QLabel#ResultLabel { background-color: rgba(30, 58, 138, 90); color: #e5e7eb; border-radius: 4px; padding: 4px 8px; }
QLineEdit#PopupInput { background: transparent; border: none; color: #ffffff; font-size: 16px; }
QLineEdit, QTextEdit, QPlainTextEdit, QTextBrowser, QComboBox { background-color: #1f2937; color: #e5e7eb; border: 1px solid #374151; }
QPushButton { background-color: #374151; color: #e5e7eb; border: 1px solid #4b5563; padding: 4px 10px; border-radius: 4px; }
QPushButton:hover { background-color: #4b5563; }
"""


def system_prefers_dark(app=None) -> bool:
    app = app or QApplication.instance()
    if app is None:
        return False
    return app.palette().color(QPalette.Window).lightness() < 128


def resolve_theme(theme, app=None) -> Theme:
    """Maps SYSTEM to LIGHT or DARK from the current palette."""
    if theme == Theme.SYSTEM:
        return Theme.DARK if system_prefers_dark(app) else Theme.LIGHT
    return theme


def apply_theme(theme, app=None):
    app = app or QApplication.instance()
    if app is None:
        return
    resolved = resolve_theme(theme, app)
    app.setStyleSheet(DARK_STYLE if resolved == Theme.DARK else LIGHT_STYLE)
    logging.debug(f"Theme applied: {theme.value} -> {resolved.value}")
