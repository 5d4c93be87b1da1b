from dataclasses import replace
from unittest import mock

import pytest

from menutrans import config
from menutrans.core.settings_manager import OpenAIConfig, Settings, TranslationSource
from menutrans.core.translation_service import (TranslationService, create_translation_engine,
                                                resolve_target_language)
from menutrans.translation_engines.base_engine import TranslationError
from menutrans.translation_engines.bing_engine import BingEngine
from menutrans.translation_engines.llm_engine import LLMEngine


@pytest.mark.parametrize("text,preference,expected", [
    ("你好世界", "auto", "en"),
    ("hello 世界", "auto", "en"),
    ("hello", "auto", "zh-Hans"),
    ("こんにちは", "auto", "zh-Hans"),
    ("hello", "zh", "zh-Hans"),
    ("hello", "ja", "ja"),
    ("hello", "", "zh-Hans"),
])
def test_resolve_target_language(text, preference, expected):
    assert resolve_target_language(text, preference) == expected


def test_factory_selects_engine():
    assert isinstance(create_translation_engine(Settings()), BingEngine)
    llm_settings = replace(Settings(), source=TranslationSource.LANGUAGE_MODEL,
                           openai=OpenAIConfig(api_key="sk-1", model="m"))
    engine = create_translation_engine(llm_settings)
    assert isinstance(engine, LLMEngine)
    assert engine.model == "m"


def test_empty_input_makes_no_call():
    engine = mock.Mock(spec=BingEngine)
    service = TranslationService(Settings(), engine=engine)

    assert service.translate("") == ""
    assert service.translate("   \n") == ""
    engine.translate.assert_not_called()


def test_trims_and_resolves_target():
    engine = mock.Mock(spec=BingEngine)
    engine.translate.return_value = "你好"
    service = TranslationService(Settings(), engine=engine)

    assert service.translate("  hello  ") == "你好"
    engine.translate.assert_called_once_with(text="hello", target_language_code="zh-Hans")


def test_explicit_preference_overrides_settings():
    engine = mock.Mock(spec=BingEngine)
    engine.translate.return_value = "hola"
    TranslationService(Settings(), engine=engine).translate("hello", target_preference="es")
    engine.translate.assert_called_once_with(text="hello", target_language_code="es")


def test_hosted_failure_and_empty_results():
    engine = mock.Mock(spec=BingEngine)
    service = TranslationService(Settings(), engine=engine)

    engine.translate.side_effect = TranslationError("network down")
    assert service.translate("hello") == config.SENTINEL_BING_FAIL

    engine.translate.side_effect = None
    engine.translate.return_value = ""
    assert service.translate("hello") == config.SENTINEL_BING_EMPTY


def test_missing_key_makes_no_http_call():
    client = mock.Mock()
    engine = LLMEngine(config={'api_key': ""}, client=client)
    service = TranslationService(replace(Settings(), source=TranslationSource.LANGUAGE_MODEL), engine=engine)

    assert service.translate("hello") == config.SENTINEL_MISSING_KEY
    client.complete.assert_not_called()


def test_unavailable_hosted_engine_is_not_called():
    engine = mock.Mock(spec=BingEngine)
    engine.is_available.return_value = False
    service = TranslationService(Settings(), engine=engine)

    assert service.translate("hello") == config.SENTINEL_BING_FAIL
    engine.translate.assert_not_called()


def test_language_model_errors():
    client = mock.Mock()
    engine = LLMEngine(config={'api_key': "sk-1"}, client=client)
    service = TranslationService(replace(Settings(), source=TranslationSource.LANGUAGE_MODEL), engine=engine)

    client.complete.return_value = "   "
    assert service.translate("hello") == config.SENTINEL_AI_EMPTY

    engine.translate = mock.Mock(side_effect=TranslationError("quota exceeded"))
    assert service.translate("hello") == "API Error: quota exceeded"


def test_unknown_engine():
    service = TranslationService(Settings(), engine=None)
    service.engine = None
    assert service.translate("hello") == config.SENTINEL_UNKNOWN_SOURCE


def test_hosted_service_unreachable_returns_fail():
    import requests

    session = mock.Mock()
    session.headers = {}
    session.get.side_effect = requests.exceptions.ConnectionError("offline")
    service = TranslationService(Settings(), engine=BingEngine(session=session))

    assert service.translate("hello") == config.SENTINEL_BING_FAIL
