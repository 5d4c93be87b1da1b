# menutrans/ocr_engines/system_vision_engine.py
import logging
import subprocess
import sys

from menutrans import config as app_config
from menutrans.ocr_engines.base_engine import OCREngine, OCRError

HELPER_MODULE = "menutrans.ocr_engines.vision_helper"


class SystemVisionEngine(OCREngine):
    """
    On-device OCR through the macOS Vision framework.

    Recognition runs in a short-lived helper process so a stuck Vision request
    can never block the application; the helper aborts itself after
    OCR_HELPER_TIMEOUT_SECONDS.
    """

    def __init__(self, config=None, python_executable=None):
        super().__init__(config)
        self.python_executable = python_executable or sys.executable

    def is_available(self) -> bool:
        return sys.platform == 'darwin'

    def recognize(self, image_path: str) -> str:
        command = [self.python_executable, "-m", HELPER_MODULE, image_path]
        logging.debug(f"Running Vision OCR helper on '{image_path}'")
        try:
            completed = subprocess.run(
                command, capture_output=True, text=True,
                # Outer guard in case the helper's own alarm never fires
                timeout=app_config.OCR_HELPER_TIMEOUT_SECONDS + 5,
            )
        except subprocess.TimeoutExpired as e:
            raise OCRError("System OCR timed out.") from e
        except OSError as e:
            raise OCRError(f"Could not start system OCR helper: {e}") from e

        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or "").strip() or f"exit code {completed.returncode}"
            logging.error(f"System OCR Error: {detail}")
            raise OCRError(f"System OCR failed: {detail}")

        recognized = (completed.stdout or "").strip()
        if not recognized:
            logging.info("System OCR: No text detected.")
            return app_config.OCR_NO_TEXT_SENTINEL
        logging.debug(f"System OCR result len: {len(recognized)}.")
        return recognized
