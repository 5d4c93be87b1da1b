# menutrans/ocr_engines/vision_model_engine.py
import logging

from menutrans import config as app_config
from menutrans.core.chat_client import (ChatCompletionClient, ChatCompletionError, encode_image_data_url,
                                        image_content_part, text_content_part)
from menutrans.ocr_engines.base_engine import OCREngine, OCRError


class VisionModelOCREngine(OCREngine):
    """OCR through the GLM-4V vision model. Requires a Zhipu API key."""

    def __init__(self, config=None, client=None):
        super().__init__(config)
        self.api_key = self.config.get('api_key') or ""
        self.model = self.config.get('model') or app_config.GLM_OCR_MODEL
        self.client = client or ChatCompletionClient(app_config.GLM_OCR_BASE_URL, self.api_key)

    def is_available(self) -> bool:
        return bool(self.api_key)

    def recognize(self, image_path: str) -> str:
        try:
            data_url = encode_image_data_url(image_path)
        except OSError as e:
            raise OCRError(f"Could not read screenshot: {e}") from e

        body = {
            'model': self.model,
            'messages': [{
                'role': 'user',
                'content': [text_content_part(app_config.OCR_PROMPT), image_content_part(data_url)],
            }],
        }
        logging.debug("Sending screenshot to GLM-4V for text recognition...")
        try:
            content = self.client.complete(body)
        except ChatCompletionError as e:
            logging.error(f"GLM-4V Error: {e}")
            raise OCRError(e.provider_message or "GLM API Error") from e
        logging.debug(f"GLM-4V result len: {len(content)}.")
        return content
