# menutrans/gui/screenshot_result_window.py
import logging

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import QApplication, QHBoxLayout, QLabel, QPushButton, QTextEdit, QVBoxLayout, QWidget

from menutrans import config


class ScreenshotResultWindow(QWidget):
    """Shows the recognized text and its translation. One instance is reused."""

    STATE_PROCESSING = "processing"
    STATE_RESULT = "result"
    STATE_ERROR = "error"

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Screenshot Translation")
        self.setWindowFlags(self.windowFlags() | Qt.WindowStaysOnTopHint)
        self.resize(*config.RESULT_WINDOW_SIZE)
        self.state = None
        self.original_text = ""
        self.translated_text = ""
        self._init_ui()
        self.show_processing()

    def _init_ui(self):
        self.status_label = QLabel(self); self.status_label.setTextFormat(Qt.PlainText); self.status_label.setWordWrap(True)
        self.original_label = QLabel("Original", self)
        self.original_edit = QTextEdit(self); self.original_edit.setReadOnly(True)
        self.translated_label = QLabel("Translation", self)
        self.translated_edit = QTextEdit(self); self.translated_edit.setReadOnly(True)

        self.copy_button = QPushButton("Copy Translation", self)
        self.copy_button.clicked.connect(self.copy_translation)
        self.close_button = QPushButton("Close", self)
        self.close_button.clicked.connect(self.close)

        buttons = QHBoxLayout()
        buttons.addStretch()
        buttons.addWidget(self.copy_button)
        buttons.addWidget(self.close_button)

        layout = QVBoxLayout(self)
        layout.addWidget(self.status_label)
        layout.addWidget(self.original_label)
        layout.addWidget(self.original_edit, 1)
        layout.addWidget(self.translated_label)
        layout.addWidget(self.translated_edit, 1)
        layout.addLayout(buttons)

    def _set_sections_visible(self, visible):
        for w in (self.original_label, self.original_edit, self.translated_label,
                  self.translated_edit, self.copy_button):
            w.setVisible(visible)

    def show_processing(self):
        self.state = self.STATE_PROCESSING
        self.status_label.setText("Recognizing and translating...")
        self.status_label.setStyleSheet("color:#555;")
        self.status_label.setVisible(True)
        self._set_sections_visible(False)

    def show_result(self, original, translated):
        self.state = self.STATE_RESULT
        self.original_text = original or ""
        self.translated_text = translated or ""
        self.status_label.setVisible(False)
        self._set_sections_visible(True)
        self.original_edit.setPlainText(self.original_text)
        self.translated_edit.setPlainText(self.translated_text)
        logging.debug("Screenshot result displayed.")

    def show_error(self, message):
        self.state = self.STATE_ERROR
        self._set_sections_visible(False)
        self.status_label.setVisible(True)
        self.status_label.setStyleSheet("color:#A00;")
        self.status_label.setText(f"Error: {message or 'Unknown error'}")

    def present(self):
        self.show()
        self.raise_()
        self.activateWindow()

    def copy_translation(self):
        if self.translated_text:
            QApplication.clipboard().setText(self.translated_text)
