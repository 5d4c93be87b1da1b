# menutrans/gui/explain_window.py
import html
import logging
import time

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QKeyEvent, QPixmap
from PyQt5.QtWidgets import (QHBoxLayout, QLabel, QListWidget, QListWidgetItem, QPlainTextEdit, QPushButton,
                             QTextBrowser, QVBoxLayout, QWidget)

from menutrans import config
from menutrans.core.workers import ExplainWorker, start_worker

PREVIEW_MAX_HEIGHT = 240


class ChatInput(QPlainTextEdit):
    """Enter sends, Shift+Enter inserts a newline, Escape closes the window."""
    sendRequested = pyqtSignal()
    closeRequested = pyqtSignal()

    def keyPressEvent(self, event: QKeyEvent):
        if event.key() in (Qt.Key_Return, Qt.Key_Enter) and not (event.modifiers() & Qt.ShiftModifier):
            self.sendRequested.emit()
            return
        if event.key() == Qt.Key_Escape:
            self.closeRequested.emit()
            return
        super().keyPressEvent(event)


def render_messages_html(entries, loading=False, loading_text="...") -> str:
    """entries: iterable of (role, content, is_error)."""
    parts = []
    for role, content, is_error in entries:
        body = html.escape(content or "").replace('\n', '<br>')
        if role == 'user':
            parts.append(f'<p align="right" style="margin:6px 0;"><span style="background-color:#2563eb; '
                         f'color:#ffffff;">&nbsp;{body}&nbsp;</span></p>')
        elif is_error:
            parts.append(f'<p style="margin:6px 0; color:#b91c1c;">{body}</p>')
        else:
            parts.append(f'<p style="margin:6px 0;">{body}</p>')
    if loading:
        parts.append(f'<p style="margin:6px 0; color:#6b7280;"><i>{html.escape(loading_text)}</i></p>')
    return "".join(parts)


class ExplainWindow(QWidget):
    """
    Chat about one screenshot.

    Opens with a collapsible image preview and fetches the summary. Questions
    are answered with the whole conversation as context. A history panel lists
    earlier sessions; opening one shows it read-only until the user returns to
    the current session. Closing saves the current session and deletes the image.
    """
    closed = pyqtSignal()

    def __init__(self, session, history_manager=None, parent=None, auto_start=True):
        super().__init__(parent)
        self.session = session
        self.history_manager = history_manager
        self.language_key = getattr(session.language, 'value', session.language)
        self.loading = False
        self.replaying_record = None
        self._display = [] # (role, content, is_error) for the live session
        self._closed = False

        self.setAttribute(Qt.WA_DeleteOnClose)
        self.setWindowTitle("Screenshot Explain")
        self.resize(*config.EXPLAIN_WINDOW_SIZE)
        self._init_ui()
        self._load_preview()
        self.refresh_history()
        if auto_start:
            self.start_summary()

    def _init_ui(self):
        self.toggle_image_button = QPushButton("Hide Image", self)
        self.toggle_image_button.setCheckable(True)
        self.toggle_image_button.toggled.connect(self._toggle_preview)
        self.history_button = QPushButton("History", self)
        self.history_button.setCheckable(True)
        self.history_button.toggled.connect(self._toggle_history)
        self.back_button = QPushButton("Back to Current", self)
        self.back_button.clicked.connect(self.return_to_session)
        self.back_button.setVisible(False)
        self.close_button = QPushButton("Close", self)
        self.close_button.clicked.connect(self.close)

        header = QHBoxLayout()
        header.addWidget(self.toggle_image_button)
        header.addWidget(self.history_button)
        header.addWidget(self.back_button)
        header.addStretch()
        header.addWidget(self.close_button)

        self.preview_label = QLabel(self)
        self.preview_label.setAlignment(Qt.AlignCenter)
        self.preview_label.setMaximumHeight(PREVIEW_MAX_HEIGHT)

        self.history_list = QListWidget(self)
        self.history_list.setVisible(False)
        self.history_list.itemClicked.connect(self._on_history_item_clicked)

        self.chat_view = QTextBrowser(self)
        self.chat_view.setOpenExternalLinks(False)

        self.input_edit = ChatInput(self)
        self.input_edit.setPlaceholderText(
            "输入问题，Enter 发送" if self.language_key == "zh" else "Ask a question, Enter to send")
        self.input_edit.setMaximumHeight(80)
        self.input_edit.sendRequested.connect(self.send_question)
        self.input_edit.closeRequested.connect(self.close)
        self.send_button = QPushButton("Send", self)
        self.send_button.clicked.connect(self.send_question)

        input_row = QHBoxLayout()
        input_row.addWidget(self.input_edit, 1)
        input_row.addWidget(self.send_button)

        layout = QVBoxLayout(self)
        layout.addLayout(header)
        layout.addWidget(self.preview_label)
        layout.addWidget(self.history_list)
        layout.addWidget(self.chat_view, 1)
        layout.addLayout(input_row)

    # --- Preview ---

    def _load_preview(self):
        pixmap = QPixmap(self.session.image_path)
        if pixmap.isNull():
            logging.warning(f"Could not load screenshot preview: {self.session.image_path}")
            self.preview_label.setVisible(False)
            self.toggle_image_button.setEnabled(False)
            return
        self.preview_label.setPixmap(pixmap.scaled(
            config.EXPLAIN_WINDOW_SIZE[0] - 40, PREVIEW_MAX_HEIGHT, Qt.KeepAspectRatio, Qt.SmoothTransformation))

    def _toggle_preview(self, hidden):
        self.preview_label.setVisible(not hidden and self.replaying_record is None)
        self.toggle_image_button.setText("Show Image" if hidden else "Hide Image")

    # --- Conversation ---

    def _render(self):
        if self.replaying_record is not None:
            entries = [(m.role, m.content, False) for m in self.replaying_record.messages]
            self.chat_view.setHtml(render_messages_html(entries))
        else:
            loading_text = "思考中..." if self.language_key == "zh" else "Thinking..."
            self.chat_view.setHtml(render_messages_html(self._display, self.loading, loading_text))
        scrollbar = self.chat_view.verticalScrollBar()
        scrollbar.setValue(scrollbar.maximum())

    def _set_loading(self, loading):
        self.loading = loading
        self.send_button.setEnabled(not loading and self.replaying_record is None)
        self._render()

    def _error_text(self, message):
        prefix = config.EXPLAIN_ERROR_PREFIX.get(self.language_key, config.EXPLAIN_ERROR_PREFIX['en'])
        return f"{prefix}{message}"

    def start_summary(self):
        if self.loading:
            return
        self._set_loading(True)
        worker = ExplainWorker(self.session)
        worker.finished.connect(self._on_summary_ready)
        worker.error.connect(self._on_request_failed)
        start_worker(worker)

    def send_question(self):
        if self.loading or self.replaying_record is not None:
            return
        question = self.input_edit.toPlainText().strip()
        if not question:
            return
        self.input_edit.clear()
        self._display.append(('user', question, False))
        self._set_loading(True)
        worker = ExplainWorker(self.session, question)
        worker.finished.connect(self._on_answer_ready)
        worker.error.connect(self._on_request_failed)
        start_worker(worker)

    def _on_summary_ready(self, summary):
        self._display.append(('assistant', summary, False))
        self._set_loading(False)

    def _on_answer_ready(self, answer):
        self._display.append(('assistant', answer, False))
        self._set_loading(False)

    def _on_request_failed(self, message):
        # Shown only; the session itself is unchanged
        self._display.append(('assistant', self._error_text(message), True))
        self._set_loading(False)

    # --- History ---

    def refresh_history(self):
        self.history_list.clear()
        if self.history_manager is None:
            self.history_button.setEnabled(False)
            return
        result = self.history_manager.get_history()
        if not result.success:
            logging.error(f"Error getting history: {result.error}")
            return
        for record in result.value:
            stamp = time.strftime("%m-%d %H:%M", time.localtime(record.timestamp / 1000.0))
            item = QListWidgetItem(f"{stamp}  {record.preview}")
            item.setData(Qt.UserRole, record.id)
            self.history_list.addItem(item)
        self.history_button.setEnabled(self.history_list.count() > 0)

    def _toggle_history(self, visible):
        self.history_list.setVisible(visible)

    def _on_history_item_clicked(self, item):
        self.show_history_record(item.data(Qt.UserRole))

    def show_history_record(self, record_id) -> bool:
        result = self.history_manager.load_record(record_id)
        if not result.success:
            logging.warning(f"Could not load history record '{record_id}': {result.error}")
            return False
        self.replaying_record = result.value
        self.history_button.setChecked(False)
        self.preview_label.setVisible(False)
        self.back_button.setVisible(True)
        self.input_edit.setEnabled(False)
        self.send_button.setEnabled(False)
        self._render()
        return True

    def return_to_session(self):
        self.replaying_record = None
        self.back_button.setVisible(False)
        self.input_edit.setEnabled(True)
        self.preview_label.setVisible(not self.toggle_image_button.isChecked()
                                      and self.toggle_image_button.isEnabled())
        self._set_loading(self.loading)

    # --- Closing ---

    def keyPressEvent(self, event: QKeyEvent):
        if event.key() == Qt.Key_Escape:
            self.close()
            return
        super().keyPressEvent(event)

    def closeEvent(self, event):
        if not self._closed:
            self._closed = True
            self.session.close(self.history_manager)
            self.closed.emit()
        super().closeEvent(event)
