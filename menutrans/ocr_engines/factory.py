# menutrans/ocr_engines/factory.py
import logging

from menutrans.core.settings_manager import OcrSource
from menutrans.ocr_engines.system_vision_engine import SystemVisionEngine
from menutrans.ocr_engines.vision_model_engine import VisionModelOCREngine


def create_ocr_engine(settings):
    """Builds the OCR engine selected by settings.screenshot_translation.ocr_source. No fallback."""
    shot = settings.screenshot_translation
    logging.info(f"Initializing OCR engine: '{shot.ocr_source.value}'")
    if shot.ocr_source == OcrSource.ON_DEVICE:
        return SystemVisionEngine()
    if shot.ocr_source == OcrSource.VISION_MODEL:
        return VisionModelOCREngine(config={'api_key': shot.glm_api_key})
    logging.error(f"Unknown OCR source: '{shot.ocr_source}'")
    return None
