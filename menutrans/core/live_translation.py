# menutrans/core/live_translation.py
import logging

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from menutrans import config
from menutrans.core.workers import TranslationWorker, start_worker


class LiveTranslationController(QObject):
    """
    Debounces popup edits and translates the latest text.

    Every edit restarts a single-shot timer and bumps the generation counter.
    Only a result whose generation is still current is emitted, so a slow
    response can never overwrite the translation of newer text.
    """
    translation_ready = pyqtSignal(str)
    busy_changed = pyqtSignal(bool)

    def __init__(self, translate_func, delay_ms=config.LIVE_TRANSLATE_DEBOUNCE_MS, parent=None):
        super().__init__(parent)
        self.translate_func = translate_func
        self._generation = 0
        self._pending_text = ""
        self._timer = QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(delay_ms)
        self._timer.timeout.connect(self._start_translation)

    @property
    def generation(self) -> int:
        return self._generation

    def on_text_changed(self, text: str):
        self._generation += 1
        self._pending_text = text
        if not text.strip():
            self._timer.stop()
            self.translation_ready.emit("")
            self.busy_changed.emit(False)
            return
        self._timer.start()

    def cancel(self):
        """Drops the pending edit and any in-flight result."""
        self._generation += 1
        self._timer.stop()
        self.busy_changed.emit(False)

    def _start_translation(self):
        generation = self._generation
        logging.debug(f"Live translation triggered (generation {generation}).")
        worker = TranslationWorker(self.translate_func, self._pending_text, generation)
        worker.finished.connect(self._on_finished)
        self.busy_changed.emit(True)
        start_worker(worker)

    def _on_finished(self, generation, original, translated):
        if generation != self._generation:
            logging.debug(f"Dropping stale translation (generation {generation}, current {self._generation}).")
            return
        self.busy_changed.emit(False)
        self.translation_ready.emit(translated)
