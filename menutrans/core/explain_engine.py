# menutrans/core/explain_engine.py
import logging

from menutrans import config
from menutrans.core.chat_client import (ChatCompletionClient, ChatCompletionError, encode_image_data_url,
                                        image_content_part, text_content_part)
from menutrans.core.settings_manager import CustomPrompts, ExplainLanguage, VisionProvider


def _language_key(language) -> str:
    value = getattr(language, 'value', language)
    return value if value in config.EXPLAIN_SYSTEM_PROMPTS else config.DEFAULT_EXPLAIN_LANGUAGE


def build_question_turn(question: str, language, question_prompt: str = None) -> str:
    key = _language_key(language)
    prompt = question_prompt or config.EXPLAIN_QUESTION_PROMPTS[key]
    return f"{prompt}\n\n{config.EXPLAIN_QUESTION_LABELS[key]}{question}"


class ExplainEngine:
    """
    Talks to a vision chat model about one screenshot.

    The image is re-read and attached to the first user turn of every request.
    GLM models take no system role, so for them the system instruction is
    prepended to that turn's text instead.
    """

    def __init__(self, model_config, custom_prompts=None, client=None):
        self.model_config = model_config
        self.custom_prompts = custom_prompts or CustomPrompts()
        self.client = client or ChatCompletionClient(model_config.base_url, model_config.api_key)

    def system_prompt(self, language) -> str:
        return self.custom_prompts.system_prompt or config.EXPLAIN_SYSTEM_PROMPTS[_language_key(language)]

    def summarize(self, image_path: str, language=ExplainLanguage.ZH) -> str:
        prompt = self.custom_prompts.summary_prompt or config.EXPLAIN_SUMMARY_PROMPTS[_language_key(language)]
        return self._call(image_path, [{'role': 'user', 'content': prompt}], language)

    def ask(self, image_path: str, conversation, language=ExplainLanguage.ZH) -> str:
        """
        Answers the last entry of `conversation`, a user question.
        Earlier entries are sent as context, unchanged.
        """
        turns = [{'role': m.role, 'content': m.content} if hasattr(m, 'role') else dict(m) for m in conversation]
        if not turns or turns[-1]['role'] != 'user':
            raise ValueError("Conversation must end with a user question.")
        turns[-1] = {'role': 'user', 'content': build_question_turn(
            turns[-1]['content'], language, self.custom_prompts.question_prompt)}
        return self._call(image_path, turns, language)

    def build_request(self, image_path: str, turns, language) -> dict:
        data_url = encode_image_data_url(image_path)
        provider = self.model_config.provider
        system_prompt = self.system_prompt(language)

        messages = []
        image_attached = False
        for turn in turns:
            if turn['role'] == 'user' and not image_attached:
                text = turn['content']
                if provider == VisionProvider.GLM:
                    text = system_prompt + text
                messages.append({'role': 'user',
                                 'content': [image_content_part(data_url), text_content_part(text)]})
                image_attached = True
            else:
                messages.append({'role': turn['role'], 'content': turn['content']})

        if provider == VisionProvider.OPENAI:
            messages.insert(0, {'role': 'system', 'content': system_prompt})

        body = {'model': self.model_config.model_name, 'messages': messages,
                'temperature': config.VISION_TEMPERATURE}
        if provider == VisionProvider.OPENAI:
            body['max_tokens'] = config.VISION_MAX_TOKENS
        return body

    def _call(self, image_path, turns, language) -> str:
        try:
            body = self.build_request(image_path, turns, language)
        except OSError as e:
            raise ChatCompletionError(f"Could not read screenshot: {e}") from e

        logging.debug(f"Vision request: provider='{self.model_config.provider.value}', turns={len(turns)}")
        try:
            return self.client.complete(body)
        except ChatCompletionError as e:
            if e.status_code is None:
                raise
            raise ChatCompletionError(f"Vision API Error: {e.status_code} - {e.body}",
                                      status_code=e.status_code, body=e.body,
                                      provider_message=e.provider_message) from e
