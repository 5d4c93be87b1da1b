# menutrans/gui/translator_popup.py
import logging
import subprocess

from PyQt5.QtCore import Qt, QTimer, pyqtSignal
from PyQt5.QtGui import QCursor, QKeyEvent
from PyQt5.QtWidgets import QApplication, QLabel, QLineEdit, QPushButton, QVBoxLayout, QWidget, QHBoxLayout

from menutrans import config
from menutrans.core.live_translation import LiveTranslationController


def paste_into_front_app():
    """Sends Cmd+V to whichever application has focus."""
    try:
        subprocess.Popen([config.OSASCRIPT_CMD, "-e", config.PASTE_SCRIPT])
    except OSError as e:
        logging.error(f"Paste failed: {e}")


class PopupInput(QLineEdit):
    """Line edit that reports Enter and Escape to the popup."""
    committed = pyqtSignal()
    dismissed = pyqtSignal()

    def keyPressEvent(self, event: QKeyEvent):
        if event.key() in (Qt.Key_Return, Qt.Key_Enter):
            self.committed.emit()
            return
        if event.key() == Qt.Key_Escape:
            self.dismissed.emit()
            return
        super().keyPressEvent(event)


class TranslatorPopup(QWidget):
    """
    Small frameless window for live typing translation.

    Enter copies the translation (or the input, when there is none yet) to the
    clipboard, hides the popup and pastes into the previously focused app.
    """
    settingsRequested = pyqtSignal()

    def __init__(self, translate_func, parent=None, paste_func=paste_into_front_app,
                 delay_ms=config.LIVE_TRANSLATE_DEBOUNCE_MS):
        super().__init__(parent)
        self.paste_func = paste_func
        self.result_text = ""
        self.controller = LiveTranslationController(translate_func, delay_ms=delay_ms, parent=self)
        self.controller.translation_ready.connect(self.set_result)
        self.controller.busy_changed.connect(self._on_busy_changed)

        self.setObjectName("TranslatorPopup")
        self.setWindowFlags(Qt.FramelessWindowHint | Qt.WindowStaysOnTopHint | Qt.Tool)
        self.setAttribute(Qt.WA_TranslucentBackground, False)
        self.resize(config.POPUP_WIDTH, config.POPUP_HEIGHT)
        self._init_ui()

    def _init_ui(self):
        self.result_label = QLabel(self)
        self.result_label.setObjectName("ResultLabel")
        self.result_label.setWordWrap(True)
        self.result_label.setTextInteractionFlags(Qt.TextSelectableByMouse)
        self.result_label.setVisible(False)

        self.input_edit = PopupInput(self)
        self.input_edit.setObjectName("PopupInput")
        self.input_edit.setPlaceholderText("Translation input...")
        self.input_edit.textChanged.connect(self.controller.on_text_changed)
        self.input_edit.committed.connect(self.commit)
        self.input_edit.dismissed.connect(self.dismiss)

        self.settings_button = QPushButton('⚙', self)
        self.settings_button.setFlat(True)
        self.settings_button.setFixedWidth(24)
        self.settings_button.setToolTip("Settings")
        self.settings_button.clicked.connect(self.settingsRequested)

        input_row = QHBoxLayout()
        input_row.addWidget(self.input_edit, 1)
        input_row.addWidget(self.settings_button)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.addWidget(self.result_label)
        layout.addLayout(input_row)

    def set_result(self, text):
        self.result_text = text or ""
        self.result_label.setText(self.result_text)
        self.result_label.setVisible(bool(self.result_text))

    def _on_busy_changed(self, busy):
        if busy:
            self.result_label.setText("Translating...")
            self.result_label.setVisible(True)
        elif not self.result_text:
            self.result_label.setVisible(False)

    def show_at_cursor(self):
        pos = QCursor.pos()
        screen = QApplication.screenAt(pos) or QApplication.primaryScreen()
        x, y = pos.x(), pos.y() + 20
        if screen is not None:
            area = screen.availableGeometry()
            x = min(max(area.left(), x), area.right() - self.width())
            y = min(max(area.top(), y), area.bottom() - self.height())
        self.move(x, y)
        self.show()
        self.raise_()
        self.activateWindow()
        self.input_edit.setFocus()

    def toggle(self):
        if self.isVisible():
            self.dismiss()
        else:
            self.show_at_cursor()

    def commit(self):
        text_to_commit = self.result_text or self.input_edit.text()
        self.controller.cancel()
        self.input_edit.blockSignals(True)
        self.input_edit.clear()
        self.input_edit.blockSignals(False)
        self.set_result("")
        self.hide()
        if not text_to_commit:
            return
        QApplication.clipboard().setText(text_to_commit)
        logging.debug(f"Committed {len(text_to_commit)} chars to the clipboard.")
        QTimer.singleShot(config.PASTE_DELAY_MS, self.paste_func)

    def dismiss(self):
        self.hide()
