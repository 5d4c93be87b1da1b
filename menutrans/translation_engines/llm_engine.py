# menutrans/translation_engines/llm_engine.py
import logging

from menutrans import config as app_config
from menutrans.core.chat_client import ChatCompletionClient, ChatCompletionError
from menutrans.translation_engines.base_engine import TranslationEngine, TranslationError


class MissingAPIKeyError(TranslationError):
    """Raised before any request is made when no API key is configured."""
    pass


def build_translation_prompt(text: str, target_language_code: str) -> str:
    language_name = app_config.LANGUAGE_NAMES.get(target_language_code, target_language_code)
    return (f"Translate the following text to {language_name}. "
            f"Only output the translation, no explanation. Text: \"{text}\"")


class LLMEngine(TranslationEngine):
    """
    Translation engine backed by an OpenAI-compatible chat-completion API
    (DeepSeek by default). Sends one user message per request.
    """

    def __init__(self, config=None, client=None):
        super().__init__(config)
        self.api_key = self.config.get('api_key') or ""
        self.base_url = self.config.get('base_url') or app_config.DEFAULT_OPENAI_BASE_URL
        self.model = self.config.get('model') or app_config.FALLBACK_OPENAI_MODEL
        self.client = client or ChatCompletionClient(self.base_url, self.api_key)
        if not self.api_key:
            logging.warning("LLMEngine: API key not configured.")

    def is_available(self) -> bool:
        return bool(self.api_key)

    def translate(self, text: str, target_language_code: str, source_language_code: str = None) -> str:
        if not self.api_key:
            raise MissingAPIKeyError("Missing API Key")
        if not target_language_code: raise ValueError("Target language code cannot be empty.")
        if not text: return ""

        body = {
            'model': self.model,
            'messages': [{'role': 'user', 'content': build_translation_prompt(text, target_language_code)}],
        }
        logging.debug(f"Requesting LLM translation: model='{self.model}', target='{target_language_code}'")
        try:
            content = self.client.complete(body)
        except ChatCompletionError as e:
            message = e.provider_message or str(e)
            if self.api_key in message:
                message = message.replace(self.api_key, "****")
            raise TranslationError(message) from e
        return content.strip()
