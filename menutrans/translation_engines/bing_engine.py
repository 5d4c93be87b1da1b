# menutrans/translation_engines/bing_engine.py
import html
import logging
import re
import threading
import time

import requests

from menutrans import config as app_config
from menutrans.translation_engines.base_engine import TranslationEngine, TranslationError

IG_PATTERN = re.compile(r'IG:"([^"]+)"')
IID_PATTERN = re.compile(r'data-iid="([^"]+)"')
ABUSE_PARAMS_PATTERN = re.compile(r'params_AbusePreventionHelper\s*=\s*\[([^\]]+)\]')


class BingEngine(TranslationEngine):
    """
    Translation engine using the free Bing Translator web endpoint.
    No API key; the page exposes a short-lived anti-abuse token that is fetched
    once and reused until it expires.
    """

    def __init__(self, config=None, session=None):
        super().__init__(config)
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': app_config.BING_USER_AGENT})
        self._token_lock = threading.Lock()
        self._token = None # dict: ig, iid, key, token, expires_at

    def is_available(self) -> bool:
        return self.session is not None

    def _fetch_token(self) -> dict:
        """Scrapes the translator page for the values the translate endpoint expects."""
        logging.debug("Requesting Bing translator page for a fresh token...")
        try:
            response = self.session.get(app_config.BING_TRANSLATOR_URL, timeout=app_config.HTTP_TIMEOUT_SECONDS)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise TranslationError(f"Network error fetching Bing token: {e}") from e

        page = response.text
        ig_match = IG_PATTERN.search(page)
        iid_match = IID_PATTERN.search(page)
        params_match = ABUSE_PARAMS_PATTERN.search(page)
        if not (ig_match and iid_match and params_match):
            raise TranslationError("Could not find Bing token in translator page (page layout changed?).")

        parts = [p.strip().strip('"') for p in params_match.group(1).split(',')]
        if len(parts) < 3:
            raise TranslationError("Unexpected Bing token format.")
        try:
            expiry_ms = int(parts[2])
        except ValueError:
            expiry_ms = 3600 * 1000
        token = {
            'ig': ig_match.group(1),
            'iid': iid_match.group(1),
            'key': parts[0],
            'token': parts[1],
            'expires_at': time.monotonic() + expiry_ms / 1000.0,
        }
        logging.debug(f"Bing token acquired (IID={token['iid']}, valid for {expiry_ms / 1000.0:.0f}s).")
        return token

    def _current_token(self) -> dict:
        with self._token_lock:
            if self._token is None or time.monotonic() >= self._token['expires_at']:
                self._token = self._fetch_token()
            return self._token

    def translate(self, text: str, target_language_code: str, source_language_code: str = None) -> str:
        """Translates text through Bing. Source language is auto-detected unless given."""
        if not target_language_code: raise ValueError("Target language code cannot be empty.")
        if not text: return ""
        if len(text) > app_config.BING_MAX_TEXT_LENGTH:
            logging.warning(f"Bing input truncated from {len(text)} to {app_config.BING_MAX_TEXT_LENGTH} characters.")
            text = text[:app_config.BING_MAX_TEXT_LENGTH]

        token = self._current_token()
        url = f"{app_config.BING_TRANSLATE_API_URL}?isVertical=1&IG={token['ig']}&IID={token['iid']}"
        payload = {
            'fromLang': source_language_code or 'auto-detect',
            'to': target_language_code,
            'text': text,
            'token': token['token'],
            'key': token['key'],
        }
        logging.debug(f"Requesting Bing translation: target='{target_language_code}', source='{payload['fromLang']}'")
        try:
            response = self.session.post(url, data=payload, timeout=app_config.HTTP_TIMEOUT_SECONDS)
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.RequestException as e:
            raise TranslationError(f"Network error connecting to Bing: {e}") from e
        except ValueError as e:
            raise TranslationError("Bing returned an invalid response format.") from e

        if isinstance(result, dict):
            # Error payloads are objects, e.g. {"statusCode": 205} for an expired token
            with self._token_lock:
                self._token = None
            raise TranslationError(f"Bing API Error: status {result.get('statusCode', 'unknown')}")

        try:
            entry = result[0]
            translated = entry['translations'][0]['text']
        except (IndexError, KeyError, TypeError) as e:
            raise TranslationError("No text result from Bing.") from e

        detected = (entry.get('detectedLanguage') or {}).get('language', 'unknown')
        translated = html.unescape(translated or "")
        logging.debug(f"Bing translated (Detected: {detected}): '{text[:50]}...' -> '{translated[:50]}...'")
        return translated
