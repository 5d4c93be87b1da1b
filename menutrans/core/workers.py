# menutrans/core/workers.py
import logging
import threading
import time

from PyQt5.QtCore import QCoreApplication, QObject, QThread, pyqtSignal

from menutrans import config
from menutrans.core.chat_client import ChatCompletionError
from menutrans.core.pipelines import PipelineStatus
from menutrans.core.screen_capture import capture_region


# Running (thread, worker) pairs, kept referenced until their thread finishes
_active_workers = set()


def start_worker(worker) -> QThread:
    """
    Moves a worker onto a new QThread and starts it. Every worker here emits
    `done` exactly once when run() returns, which quits and cleans up the thread.
    """
    # Owned by the application object so the thread outlives whoever started it
    thread = QThread(QCoreApplication.instance())
    entry = (thread, worker)
    _active_workers.add(entry)
    worker.moveToThread(thread)
    thread.started.connect(worker.run)
    worker.done.connect(thread.quit)
    worker.done.connect(worker.deleteLater)
    thread.finished.connect(lambda: _active_workers.discard(entry))
    thread.finished.connect(thread.deleteLater)
    thread.start()
    return thread


class TranslationWorker(QObject):
    """
    Translates one snapshot of the popup text.
    The generation number is passed back so stale results can be dropped.
    """
    # Emits (generation, original_text, translated_text)
    finished = pyqtSignal(int, str, str)
    done = pyqtSignal()

    def __init__(self, translate_func, text, generation):
        super().__init__()
        self.translate_func = translate_func
        self.text = text
        self.generation = generation

    def run(self):
        start_time = time.time()
        thread_name = threading.current_thread().name
        logging.debug(f"TranslationWorker run() started in thread '{thread_name}'. Generation: {self.generation}")
        try:
            translated = self.translate_func(self.text)
            self.finished.emit(self.generation, self.text, str(translated if translated is not None else ""))
        except Exception as e:
            # TranslationService maps failures to result strings; this is a last resort
            logging.exception("TranslationWorker: Unhandled error in run:")
            self.finished.emit(self.generation, self.text, config.SENTINEL_API_ERROR.format(message=e))
        finally:
            logging.debug(f"TranslationWorker run() finished. Duration: {time.time() - start_time:.3f}s")
            self.done.emit()


class ScreenshotTranslateWorker(QObject):
    """Runs a ScreenshotTranslatePipeline off the UI thread."""
    captured = pyqtSignal()
    # Emits (ocr_text, translated_text)
    finished = pyqtSignal(str, str)
    error = pyqtSignal(str)
    done = pyqtSignal()

    def __init__(self, pipeline):
        super().__init__()
        self.pipeline = pipeline

    def run(self):
        start_time = time.time()
        logging.debug("ScreenshotTranslateWorker run() started.")
        try:
            result = self.pipeline.run(on_captured=self.captured.emit)
            if result.status == PipelineStatus.DONE:
                self.finished.emit(result.original, result.translated)
            elif result.status == PipelineStatus.FAILED:
                self.error.emit(result.error or "Unknown error")
            else:
                logging.info(f"Screenshot translation ended without a result: {result.status.value}")
        except Exception as e:
            logging.exception("ScreenshotTranslateWorker: Unhandled error in run:")
            self.error.emit(f"Worker Error: {e}")
        finally:
            logging.debug(f"ScreenshotTranslateWorker run() finished. Duration: {time.time() - start_time:.3f}s")
            self.done.emit()


class CaptureWorker(QObject):
    """Waits for the interactive region capture and reports the file path."""
    captured = pyqtSignal(str)
    done = pyqtSignal()

    def __init__(self, prefix, capture=capture_region):
        super().__init__()
        self.prefix = prefix
        self.capture = capture

    def run(self):
        try:
            path = self.capture(self.prefix)
            if path:
                self.captured.emit(path)
        except Exception:
            logging.exception("CaptureWorker: Unhandled error in run:")
        finally:
            self.done.emit()


class ExplainWorker(QObject):
    """Fetches the summary (question=None) or answers one question for an ExplainSession."""
    finished = pyqtSignal(str)
    error = pyqtSignal(str)
    done = pyqtSignal()

    def __init__(self, session, question=None):
        super().__init__()
        self.session = session
        self.question = question

    def run(self):
        start_time = time.time()
        kind = "question" if self.question is not None else "summary"
        logging.debug(f"ExplainWorker run() started ({kind}).")
        try:
            if self.question is None:
                reply = self.session.fetch_summary()
            else:
                reply = self.session.ask(self.question)
            self.finished.emit(reply or "")
        except (ChatCompletionError, OSError, ValueError) as e:
            logging.error(f"Error getting {kind}: {e}")
            self.error.emit(str(e))
        except Exception as e:
            logging.exception("ExplainWorker: Unhandled error in run:")
            self.error.emit(str(e))
        finally:
            logging.debug(f"ExplainWorker run() finished. Duration: {time.time() - start_time:.3f}s")
            self.done.emit()
