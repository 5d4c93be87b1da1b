# menutrans/core/pipelines.py
import logging
import threading
from enum import Enum
from typing import Callable, List, NamedTuple, Optional

from menutrans import config
from menutrans.core.explain_engine import ExplainEngine
from menutrans.core.history_manager import ChatMessage
from menutrans.core.screen_capture import capture_region, discard_capture
from menutrans.core.settings_manager import OcrSource
from menutrans.core.translation_service import TranslationService
from menutrans.ocr_engines.base_engine import OCRError
from menutrans.ocr_engines.factory import create_ocr_engine


class PipelineStatus(str, Enum):
    CANCELLED = "cancelled"
    MISCONFIGURED = "misconfigured"
    DONE = "done"
    FAILED = "failed"


class ScreenshotTranslateResult(NamedTuple):
    status: PipelineStatus
    original: str = ""
    translated: str = ""
    error: Optional[str] = None


class ScreenshotTranslatePipeline:
    """
    capture -> OCR -> translate, run synchronously on a worker thread.

    Steps after capture are skipped when the user cancels, and the capture
    file is always deleted once the run ends.
    """

    def __init__(self, settings, capture=capture_region, ocr_engine_factory=create_ocr_engine,
                 translation_service=None):
        self.settings = settings
        self.capture = capture
        self.ocr_engine_factory = ocr_engine_factory
        self.translation_service = translation_service

    def run(self, on_captured: Callable[[], None] = None) -> ScreenshotTranslateResult:
        image_path = self.capture(config.SCREENSHOT_TRANSLATE_PREFIX)
        if not image_path:
            return ScreenshotTranslateResult(PipelineStatus.CANCELLED)

        try:
            logging.info("Screenshot captured")
            shot = self.settings.screenshot_translation
            if shot.ocr_source == OcrSource.VISION_MODEL and not shot.glm_api_key:
                logging.error("GLM API Key not configured")
                return ScreenshotTranslateResult(PipelineStatus.MISCONFIGURED)

            if on_captured:
                on_captured()

            engine = self.ocr_engine_factory(self.settings)
            if engine is None or not engine.is_available():
                logging.error("OCR engine unavailable for the selected source.")
                return ScreenshotTranslateResult(PipelineStatus.FAILED, error="OCR engine unavailable")

            recognized = engine.recognize(image_path)
            logging.info(f"Recognized: {recognized[:100]}...")

            service = self.translation_service or TranslationService(self.settings)
            translated = service.translate(recognized)
            logging.info(f"Translated: {translated[:100]}...")
            return ScreenshotTranslateResult(PipelineStatus.DONE, original=recognized, translated=translated)
        except OCRError as e:
            logging.error(f"Processing error: {e}")
            return ScreenshotTranslateResult(PipelineStatus.FAILED, error=str(e))
        except Exception as e:
            logging.exception("Unhandled error in screenshot translation:")
            return ScreenshotTranslateResult(PipelineStatus.FAILED, error=str(e))
        finally:
            discard_capture(image_path)


class ExplainSession:
    """
    The conversation about one captured image.

    `messages` only ever holds completed exchanges: the summary, then pairs of
    (question, answer). A question is recorded only once it has an answer.
    """

    def __init__(self, image_path: str, language, engine: ExplainEngine):
        self.image_path = image_path
        self.language = language
        self.engine = engine
        self.messages: List[ChatMessage] = []
        self.closed = False
        self._lock = threading.Lock()

    def fetch_summary(self) -> str:
        """Requests the initial summary. Raises ChatCompletionError on failure."""
        summary = self.engine.summarize(self.image_path, self.language)
        with self._lock:
            if not self.closed:
                self.messages.append(ChatMessage('assistant', summary))
        return summary

    def ask(self, question: str) -> str:
        """
        Answers a question with the whole conversation as context. The question
        joins `messages` together with its answer, so a failed request or a
        session closed mid-request leaves no unanswered turn behind.
        """
        question = (question or "").strip()
        if not question:
            raise ValueError("Question cannot be empty.")
        pending = ChatMessage('user', question)
        with self._lock:
            conversation = self.messages + [pending]
        answer = self.engine.ask(self.image_path, conversation, self.language)
        with self._lock:
            if self.closed:
                logging.info("Explain session closed before the answer arrived. Answer dropped.")
            else:
                self.messages.extend([pending, ChatMessage('assistant', answer)])
        return answer

    def close(self, history_manager=None):
        """Persists the completed exchanges (when there are any) and deletes the image."""
        with self._lock:
            if self.closed:
                return None
            self.closed = True
            messages = list(self.messages)
        result = None
        try:
            if history_manager is not None and messages:
                result = history_manager.save_session(messages)
        finally:
            discard_capture(self.image_path)
        return result
