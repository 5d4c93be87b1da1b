from unittest import mock

import pytest
import requests

from menutrans.core.chat_client import ChatCompletionClient, ChatCompletionError
from menutrans.translation_engines.base_engine import TranslationError
from menutrans.translation_engines.bing_engine import BingEngine
from menutrans.translation_engines.llm_engine import LLMEngine, MissingAPIKeyError, build_translation_prompt

TRANSLATOR_PAGE = ('<html><div id="rich_tta" data-iid="translator.5028"></div>'
                   '<script>_G={IG:"ABCDEF123"};var params_AbusePreventionHelper = '
                   '[1700000000000,"tok-xyz",3600000];</script></html>')


@pytest.fixture
def bing_session(fake_response):
    session = mock.Mock()
    session.headers = {}
    session.get.return_value = fake_response(text=TRANSLATOR_PAGE)
    return session


def test_bing_translates_and_reuses_token(bing_session, fake_response):
    bing_session.post.return_value = fake_response([
        {'detectedLanguage': {'language': 'en', 'score': 1.0},
         'translations': [{'text': '你好 &amp; 再见', 'to': 'zh-Hans'}]},
    ])
    engine = BingEngine(session=bing_session)

    assert engine.translate("hello & bye", "zh-Hans") == "你好 & 再见"
    assert engine.translate("hello", "zh-Hans") == "你好 & 再见"

    assert bing_session.get.call_count == 1
    url = bing_session.post.call_args[0][0]
    assert "IG=ABCDEF123" in url and "IID=translator.5028" in url
    payload = bing_session.post.call_args[1]['data']
    assert payload['fromLang'] == 'auto-detect'
    assert payload['to'] == 'zh-Hans'
    assert payload['token'] == 'tok-xyz'
    assert payload['key'] == '1700000000000'


def test_bing_error_payload_drops_token(bing_session, fake_response):
    bing_session.post.return_value = fake_response({'statusCode': 205})
    engine = BingEngine(session=bing_session)

    with pytest.raises(TranslationError):
        engine.translate("hello", "zh-Hans")
    assert engine._token is None


def test_bing_unreachable(bing_session):
    bing_session.get.side_effect = requests.exceptions.ConnectionError("offline")
    with pytest.raises(TranslationError, match="Network error"):
        BingEngine(session=bing_session).translate("hello", "zh-Hans")


def test_bing_page_without_token(bing_session, fake_response):
    bing_session.get.return_value = fake_response(text="<html>captcha</html>")
    with pytest.raises(TranslationError, match="token"):
        BingEngine(session=bing_session).translate("hello", "zh-Hans")


def test_translation_prompt_names_language():
    assert build_translation_prompt("hi", "zh-Hans") == (
        'Translate the following text to Simplified Chinese. Only output the translation, no explanation. Text: "hi"')
    assert "to fr." in build_translation_prompt("hi", "fr")


def test_llm_sends_single_user_message():
    client = mock.Mock()
    client.complete.return_value = "  Bonjour \n"
    engine = LLMEngine(config={'api_key': "sk-1", 'model': "deepseek-chat"}, client=client)

    assert engine.translate("Hello", "fr") == "Bonjour"
    body = client.complete.call_args[0][0]
    assert body['model'] == "deepseek-chat"
    assert len(body['messages']) == 1
    assert body['messages'][0]['role'] == 'user'


def test_llm_defaults_model():
    engine = LLMEngine(config={'api_key': "sk-1", 'model': ""}, client=mock.Mock())
    assert engine.model == "gpt-3.5-turbo"


def test_llm_missing_key():
    client = mock.Mock()
    with pytest.raises(MissingAPIKeyError):
        LLMEngine(config={}, client=client).translate("Hello", "fr")
    client.complete.assert_not_called()


def test_llm_provider_error_message_is_used():
    client = mock.Mock()
    client.complete.side_effect = ChatCompletionError("HTTP 401", status_code=401, body="{}",
                                                      provider_message="Invalid key sk-1")
    engine = LLMEngine(config={'api_key': "sk-1"}, client=client)

    with pytest.raises(TranslationError) as excinfo:
        engine.translate("Hello", "fr")
    assert str(excinfo.value) == "Invalid key ****"


def test_chat_client_posts_to_completions(fake_response):
    session = mock.Mock()
    session.post.return_value = fake_response({'choices': [{'message': {'content': "ok"}}]})
    client = ChatCompletionClient("https://api.example.com/v1/", "sk-1", session=session)

    assert client.complete({'model': "m", 'messages': []}) == "ok"
    args, kwargs = session.post.call_args
    assert args[0] == "https://api.example.com/v1/chat/completions"
    assert kwargs['headers']['Authorization'] == "Bearer sk-1"


def test_chat_client_http_error(fake_response):
    session = mock.Mock()
    session.post.return_value = fake_response({'error': {'message': "rate limited"}}, status_code=429,
                                              text='{"error": {"message": "rate limited"}}')
    client = ChatCompletionClient("https://api.example.com/v1", "sk-1", session=session)

    with pytest.raises(ChatCompletionError) as excinfo:
        client.complete({'model': "m", 'messages': []})
    assert excinfo.value.status_code == 429
    assert excinfo.value.provider_message == "rate limited"


def test_chat_client_network_error():
    session = mock.Mock()
    session.post.side_effect = requests.exceptions.Timeout("slow")
    client = ChatCompletionClient("https://api.example.com/v1", "sk-1", session=session)

    with pytest.raises(ChatCompletionError, match="Network Error"):
        client.create({'model': "m", 'messages': []})
