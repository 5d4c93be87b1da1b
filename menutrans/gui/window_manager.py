# menutrans/gui/window_manager.py
import logging

from PyQt5.QtCore import QObject

from menutrans.gui.explain_window import ExplainWindow
from menutrans.gui.screenshot_result_window import ScreenshotResultWindow


class WindowManager(QObject):
    """
    Owns the single screenshot-result window and the single explain window.
    A slot is cleared when its window is destroyed.
    """

    def __init__(self, parent=None, result_window_factory=ScreenshotResultWindow,
                 explain_window_factory=ExplainWindow):
        super().__init__(parent)
        self.result_window_factory = result_window_factory
        self.explain_window_factory = explain_window_factory
        self._result_window = None
        self._explain_window = None

    @property
    def explain_window(self):
        return self._explain_window

    def has_explain_window(self) -> bool:
        return self._explain_window is not None

    def result_window(self):
        """Returns the result window, creating it on first use."""
        if self._result_window is None:
            window = self.result_window_factory()
            window.destroyed.connect(self._on_result_window_destroyed)
            self._result_window = window
            logging.debug("Screenshot result window created.")
        return self._result_window

    def open_explain(self, session, history_manager=None) -> bool:
        """
        Opens the explain window for a session. When one is already open it is
        focused instead and False is returned; the caller keeps the new capture.
        """
        if self.focus_explain():
            return False
        window = self.explain_window_factory(session, history_manager)
        window.closed.connect(self._on_explain_window_closed)
        window.destroyed.connect(self._on_explain_window_closed)
        self._explain_window = window
        self._focus(window)
        return True

    def focus_explain(self) -> bool:
        """Brings the open explain window to the front. False when none is open."""
        if self._explain_window is None:
            return False
        logging.info("Explain window already open. Focusing it.")
        self._focus(self._explain_window)
        return True

    def _focus(self, window):
        window.show()
        window.raise_()
        window.activateWindow()

    def _on_result_window_destroyed(self, *args):
        self._result_window = None

    def _on_explain_window_closed(self, *args):
        self._explain_window = None

    def close_all(self):
        if self._explain_window is not None:
            self._explain_window.close()
        if self._result_window is not None:
            self._result_window.close()
