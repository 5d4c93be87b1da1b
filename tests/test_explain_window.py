import os
from unittest import mock

import pytest
from PyQt5.QtCore import pyqtSignal
from PyQt5.QtWidgets import QWidget

from menutrans import config
from menutrans.core.chat_client import ChatCompletionError
from menutrans.core.history_manager import ChatMessage, HistoryManager
from menutrans.core.pipelines import ExplainSession
from menutrans.core.settings_manager import ExplainLanguage
from menutrans.gui.explain_window import ExplainWindow, render_messages_html
from menutrans.gui.window_manager import WindowManager


@pytest.fixture
def engine():
    engine = mock.Mock()
    engine.summarize.return_value = "A chart of sales."
    engine.ask.return_value = "Sales rose in March."
    return engine


@pytest.fixture
def session(screenshot_file, engine):
    return ExplainSession(screenshot_file, ExplainLanguage.EN, engine)


def test_render_escapes_and_marks_errors():
    markup = render_messages_html([('user', "<b>hi</b>", False), ('assistant', "Error: boom", True)],
                                  loading=True, loading_text="Thinking...")
    assert "&lt;b&gt;hi&lt;/b&gt;" in markup
    assert "color:#b91c1c" in markup
    assert "Thinking..." in markup


def test_summary_question_and_close(qtbot, session, settings_manager, screenshot_file):
    history = HistoryManager(settings_manager)
    window = ExplainWindow(session, history)
    qtbot.waitUntil(lambda: not window.loading, timeout=3000)

    window.input_edit.setPlainText("When did sales rise?")
    window.send_question()
    assert window.loading
    qtbot.waitUntil(lambda: not window.loading, timeout=3000)

    assert [entry[0] for entry in window._display] == ['assistant', 'user', 'assistant']
    assert "Sales rose in March." in window.chat_view.toPlainText()

    with qtbot.waitSignal(window.closed, timeout=1000):
        window.close()
    records = history.get_history().value
    assert len(records) == 1
    assert len(records[0].messages) == 3
    assert not os.path.exists(screenshot_file)


def test_failed_summary_shows_error_and_saves_nothing(qtbot, session, engine, settings_manager):
    engine.summarize.side_effect = ChatCompletionError("Network Error: offline")
    history = HistoryManager(settings_manager)
    window = ExplainWindow(session, history)
    qtbot.waitUntil(lambda: not window.loading, timeout=3000)

    assert window._display == [('assistant', "Error: Network Error: offline", True)]
    window.close()
    assert history.get_history().value == []


def test_empty_question_is_ignored(qtbot, session, engine):
    window = ExplainWindow(session, auto_start=False)

    window.input_edit.setPlainText("   ")
    window.send_question()

    assert not window.loading
    engine.ask.assert_not_called()
    window.close()


def test_history_replay_is_read_only(qtbot, session, settings_manager):
    history = HistoryManager(settings_manager)
    saved = history.save_session([ChatMessage('assistant', "Old summary")]).value
    window = ExplainWindow(session, history, auto_start=False)

    assert window.history_list.count() == 1
    assert window.show_history_record(saved.id)
    assert "Old summary" in window.chat_view.toPlainText()
    assert not window.input_edit.isEnabled()

    window.return_to_session()
    assert window.replaying_record is None
    assert window.input_edit.isEnabled()
    assert "Old summary" not in window.chat_view.toPlainText()
    window.close()


def test_window_manager_keeps_single_explain_window(qtbot):
    created = []

    class FakeExplainWindow(QWidget):
        closed = pyqtSignal()

        def __init__(self, session, history_manager=None):
            super().__init__()
            created.append(self)

    manager = WindowManager(explain_window_factory=FakeExplainWindow, result_window_factory=QWidget)

    assert manager.open_explain(mock.Mock())
    assert not manager.open_explain(mock.Mock())
    assert len(created) == 1
    qtbot.addWidget(created[0])

    created[0].closed.emit()
    assert not manager.has_explain_window()
    assert manager.open_explain(mock.Mock())
    qtbot.addWidget(created[1])


def test_window_manager_reuses_result_window(qtbot):
    manager = WindowManager(result_window_factory=QWidget)
    window = manager.result_window()
    qtbot.addWidget(window)
    assert manager.result_window() is window
