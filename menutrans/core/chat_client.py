# menutrans/core/chat_client.py
import base64
import logging

import requests

from menutrans import config


class ChatCompletionError(Exception):
    """Raised when a chat-completion request fails or returns a non-success status."""

    def __init__(self, message, status_code=None, body=None, provider_message=None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.provider_message = provider_message


def encode_image_data_url(image_path: str) -> str:
    """Reads an image file and returns it as a base64 PNG data URL."""
    with open(image_path, 'rb') as f:
        encoded = base64.b64encode(f.read()).decode('utf-8')
    return f"data:image/png;base64,{encoded}"


def image_content_part(data_url: str) -> dict:
    return {'type': 'image_url', 'image_url': {'url': data_url}}


def text_content_part(text: str) -> dict:
    return {'type': 'text', 'text': text}


def _provider_error_message(data):
    if isinstance(data, dict):
        error = data.get('error')
        if isinstance(error, dict):
            return error.get('message')
        if isinstance(error, str):
            return error
    return None


class ChatCompletionClient:
    """Minimal client for OpenAI-compatible `/chat/completions` endpoints."""

    def __init__(self, base_url: str, api_key: str, timeout=config.HTTP_TIMEOUT_SECONDS, session=None):
        self.base_url = (base_url or "").rstrip('/')
        self.api_key = api_key or ""
        self.timeout = timeout
        self.session = session or requests

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def create(self, body: dict) -> dict:
        """POSTs the request body and returns the decoded JSON response."""
        headers = {'Authorization': f"Bearer {self.api_key}", 'Content-Type': 'application/json'}
        logging.debug(f"POST {self.endpoint} (model='{body.get('model')}', messages={len(body.get('messages', []))})")
        try:
            response = self.session.post(self.endpoint, json=body, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise ChatCompletionError(f"Network Error: {e}") from e

        if not response.ok:
            body_text = response.text
            try:
                provider_message = _provider_error_message(response.json())
            except ValueError:
                provider_message = None
            raise ChatCompletionError(
                f"HTTP {response.status_code}: {provider_message or body_text}",
                status_code=response.status_code, body=body_text, provider_message=provider_message,
            )

        try:
            return response.json()
        except ValueError as e:
            raise ChatCompletionError("Invalid response format.", status_code=response.status_code,
                                      body=response.text) from e

    def complete(self, body: dict) -> str:
        """Returns the first choice's message content ('' when the model sent none)."""
        data = self.create(body)
        try:
            content = data['choices'][0]['message'].get('content')
        except (KeyError, IndexError, TypeError, AttributeError) as e:
            raise ChatCompletionError("Malformed chat completion response.", body=str(data)[:500]) from e
        return content or ""
