# menutrans/core/translation_service.py
import logging
import re

from menutrans import config
from menutrans.core.settings_manager import TranslationSource
from menutrans.translation_engines.base_engine import TranslationError
from menutrans.translation_engines.bing_engine import BingEngine
from menutrans.translation_engines.llm_engine import LLMEngine

CJK_PATTERN = re.compile(r'[\u4e00-\u9fa5]')


def contains_cjk(text: str) -> bool:
    return bool(CJK_PATTERN.search(text or ""))


def resolve_target_language(text: str, preference: str) -> str:
    """
    Maps the user's target-language preference to a concrete code.

    'auto' picks English for text containing CJK ideographs and Simplified
    Chinese for everything else. 'zh' is the hosted service's 'zh-Hans'.
    """
    preference = (preference or config.DEFAULT_TARGET_LANGUAGE).strip()
    if preference == "auto":
        return "en" if contains_cjk(text) else config.HOSTED_CHINESE_CODE
    if preference == "zh":
        return config.HOSTED_CHINESE_CODE
    return preference


def create_translation_engine(settings):
    """Builds the engine selected by settings.source. Returns None for an unknown tag."""
    source = settings.source
    logging.info(f"Initializing translation engine: '{getattr(source, 'value', source)}'")
    if source == TranslationSource.HOSTED:
        return BingEngine()
    if source == TranslationSource.LANGUAGE_MODEL:
        openai = settings.openai
        return LLMEngine(config={'api_key': openai.api_key, 'base_url': openai.base_url, 'model': openai.model})
    logging.error(f"Unknown translation engine key: '{source}'")
    return None


class TranslationService:
    """
    Single entry point for text translation, shared by live typing and
    screenshot translation. Never raises: failures come back as fixed
    result strings (see config.SENTINEL_*).
    """

    def __init__(self, settings, engine=None):
        self.settings = settings
        self.engine = engine if engine is not None else create_translation_engine(settings)

    def translate(self, text: str, target_preference: str = None) -> str:
        trimmed = (text or "").strip()
        if not trimmed:
            return ""
        if self.engine is None:
            return config.SENTINEL_UNKNOWN_SOURCE

        preference = target_preference if target_preference is not None else self.settings.target_lang
        target = resolve_target_language(trimmed, preference)
        engine_name = type(self.engine).__name__
        is_hosted = isinstance(self.engine, BingEngine)
        logging.debug(f"Translating {len(trimmed)} chars with {engine_name} -> '{target}'")

        if not self.engine.is_available():
            logging.warning(f"{engine_name} is unavailable (no API key configured?).")
            return config.SENTINEL_BING_FAIL if is_hosted else config.SENTINEL_MISSING_KEY

        try:
            translated = self.engine.translate(text=trimmed, target_language_code=target)
        except TranslationError as e:
            logging.error(f"Translation failed using {engine_name}: {e}")
            if is_hosted:
                return config.SENTINEL_BING_FAIL
            return config.SENTINEL_API_ERROR.format(message=e)
        except Exception as e:
            logging.exception(f"Unexpected error calling {engine_name}.translate():")
            if is_hosted:
                return config.SENTINEL_BING_FAIL
            return config.SENTINEL_API_ERROR.format(message=e)

        if not translated:
            logging.warning(f"{engine_name} returned an empty translation.")
            return config.SENTINEL_BING_EMPTY if is_hosted else config.SENTINEL_AI_EMPTY
        return translated
