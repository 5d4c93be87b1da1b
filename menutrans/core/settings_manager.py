# menutrans/core/settings_manager.py
import copy
import json
import logging
import os
import sys
import tempfile
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, NamedTuple, Optional

from PyQt5.QtCore import QStandardPaths

from menutrans import config


class Theme(str, Enum):
    SYSTEM = "system"
    LIGHT = "light"
    DARK = "dark"


class TranslationSource(str, Enum):
    HOSTED = "bing"
    LANGUAGE_MODEL = "openai"


class OcrSource(str, Enum):
    ON_DEVICE = "system"
    VISION_MODEL = "glm"


class VisionProvider(str, Enum):
    GLM = "glm"
    OPENAI = "openai"


class ExplainLanguage(str, Enum):
    ZH = "zh"
    EN = "en"


class OperationResult(NamedTuple):
    """Outcome of a persistence operation, reported instead of raising."""
    success: bool
    error: Optional[str] = None
    value: Any = None


def _enum_value(enum_cls, raw, default, key):
    """Converts a stored string to an enum member, falling back to the default."""
    try:
        return enum_cls(raw)
    except (ValueError, TypeError):
        logging.warning(f"Saved value '{raw}' for '{key}' is not valid. Reverting to '{default.value}'.")
        return default


def _str_value(raw, default):
    return raw if isinstance(raw, str) else default


def _bool_value(raw, default):
    return raw if isinstance(raw, bool) else default


def _optional_prompt(raw):
    return raw if isinstance(raw, str) and raw.strip() else None


def _dict_value(raw, key):
    """Nested sections must be objects; anything else is treated as missing."""
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        logging.warning(f"Saved section '{key}' is not an object. Using defaults.")
        return {}
    return raw


@dataclass(frozen=True)
class OpenAIConfig:
    api_key: str = ""
    base_url: str = config.DEFAULT_OPENAI_BASE_URL
    model: str = config.DEFAULT_OPENAI_MODEL

    @classmethod
    def from_dict(cls, data: dict) -> "OpenAIConfig":
        return cls(
            api_key=_str_value(data.get('apiKey'), ""),
            base_url=_str_value(data.get('baseURL'), config.DEFAULT_OPENAI_BASE_URL),
            model=_str_value(data.get('model'), config.DEFAULT_OPENAI_MODEL),
        )

    def to_dict(self) -> dict:
        return {'apiKey': self.api_key, 'baseURL': self.base_url, 'model': self.model}


@dataclass(frozen=True)
class ScreenshotTranslationConfig:
    enabled: bool = True
    hotkey: str = config.DEFAULT_SCREENSHOT_HOTKEY
    ocr_source: OcrSource = OcrSource(config.DEFAULT_OCR_SOURCE)
    glm_api_key: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "ScreenshotTranslationConfig":
        return cls(
            enabled=_bool_value(data.get('enabled'), True),
            hotkey=_str_value(data.get('hotkey'), config.DEFAULT_SCREENSHOT_HOTKEY),
            ocr_source=_enum_value(OcrSource, data.get('ocrSource', config.DEFAULT_OCR_SOURCE),
                                   OcrSource(config.DEFAULT_OCR_SOURCE), 'screenshotTranslation.ocrSource'),
            glm_api_key=_str_value(data.get('glmApiKey'), ""),
        )

    def to_dict(self) -> dict:
        return {'enabled': self.enabled, 'hotkey': self.hotkey,
                'ocrSource': self.ocr_source.value, 'glmApiKey': self.glm_api_key}


@dataclass(frozen=True)
class ExplainModelConfig:
    provider: VisionProvider = VisionProvider(config.DEFAULT_VISION_PROVIDER)
    api_key: str = ""
    base_url: str = config.DEFAULT_VISION_BASE_URL
    model_name: str = config.DEFAULT_VISION_MODEL

    @classmethod
    def from_dict(cls, data: dict) -> "ExplainModelConfig":
        return cls(
            provider=_enum_value(VisionProvider, data.get('provider', config.DEFAULT_VISION_PROVIDER),
                                 VisionProvider(config.DEFAULT_VISION_PROVIDER), 'screenshotExplain.model.provider'),
            api_key=_str_value(data.get('apiKey'), ""),
            base_url=_str_value(data.get('baseURL'), config.DEFAULT_VISION_BASE_URL),
            model_name=_str_value(data.get('modelName'), config.DEFAULT_VISION_MODEL),
        )

    def to_dict(self) -> dict:
        return {'provider': self.provider.value, 'apiKey': self.api_key,
                'baseURL': self.base_url, 'modelName': self.model_name}


@dataclass(frozen=True)
class CustomPrompts:
    system_prompt: Optional[str] = None
    summary_prompt: Optional[str] = None
    question_prompt: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CustomPrompts":
        return cls(
            system_prompt=_optional_prompt(data.get('systemPrompt')),
            summary_prompt=_optional_prompt(data.get('summaryPrompt')),
            question_prompt=_optional_prompt(data.get('questionPrompt')),
        )

    def to_dict(self) -> dict:
        prompts = {'systemPrompt': self.system_prompt, 'summaryPrompt': self.summary_prompt,
                   'questionPrompt': self.question_prompt}
        return {k: v for k, v in prompts.items() if v}


@dataclass(frozen=True)
class ScreenshotExplainConfig:
    enabled: bool = True
    hotkey: str = config.DEFAULT_EXPLAIN_HOTKEY
    model: ExplainModelConfig = field(default_factory=ExplainModelConfig)
    default_language: ExplainLanguage = ExplainLanguage(config.DEFAULT_EXPLAIN_LANGUAGE)
    custom_prompts: CustomPrompts = field(default_factory=CustomPrompts)

    @classmethod
    def from_dict(cls, data: dict) -> "ScreenshotExplainConfig":
        return cls(
            enabled=_bool_value(data.get('enabled'), True),
            hotkey=_str_value(data.get('hotkey'), config.DEFAULT_EXPLAIN_HOTKEY),
            model=ExplainModelConfig.from_dict(_dict_value(data.get('model'), 'screenshotExplain.model')),
            default_language=_enum_value(ExplainLanguage, data.get('defaultLanguage', config.DEFAULT_EXPLAIN_LANGUAGE),
                                         ExplainLanguage(config.DEFAULT_EXPLAIN_LANGUAGE),
                                         'screenshotExplain.defaultLanguage'),
            custom_prompts=CustomPrompts.from_dict(_dict_value(data.get('customPrompts'), 'screenshotExplain.customPrompts')),
        )

    def to_dict(self) -> dict:
        data = {'enabled': self.enabled, 'hotkey': self.hotkey, 'model': self.model.to_dict(),
                'defaultLanguage': self.default_language.value}
        prompts = self.custom_prompts.to_dict()
        if prompts:
            data['customPrompts'] = prompts
        return data


@dataclass(frozen=True)
class Settings:
    """Immutable snapshot of every user option. Replace it, never mutate it."""
    hotkey: str = config.DEFAULT_HOTKEY
    theme: Theme = Theme(config.DEFAULT_THEME)
    target_lang: str = config.DEFAULT_TARGET_LANGUAGE
    source: TranslationSource = TranslationSource(config.DEFAULT_TRANSLATION_ENGINE)
    openai: OpenAIConfig = field(default_factory=OpenAIConfig)
    screenshot_translation: ScreenshotTranslationConfig = field(default_factory=ScreenshotTranslationConfig)
    screenshot_explain: ScreenshotExplainConfig = field(default_factory=ScreenshotExplainConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        target_lang = _str_value(data.get('targetLang'), config.DEFAULT_TARGET_LANGUAGE).strip()
        return cls(
            hotkey=_str_value(data.get('hotkey'), config.DEFAULT_HOTKEY),
            theme=_enum_value(Theme, data.get('theme', config.DEFAULT_THEME), Theme(config.DEFAULT_THEME), 'theme'),
            target_lang=target_lang or config.DEFAULT_TARGET_LANGUAGE,
            source=_enum_value(TranslationSource, data.get('source', config.DEFAULT_TRANSLATION_ENGINE),
                               TranslationSource(config.DEFAULT_TRANSLATION_ENGINE), 'source'),
            openai=OpenAIConfig.from_dict(_dict_value(data.get('openai'), 'openai')),
            screenshot_translation=ScreenshotTranslationConfig.from_dict(_dict_value(data.get('screenshotTranslation'), 'screenshotTranslation')),
            screenshot_explain=ScreenshotExplainConfig.from_dict(_dict_value(data.get('screenshotExplain'), 'screenshotExplain')),
        )

    def to_dict(self) -> dict:
        return {
            'hotkey': self.hotkey,
            'theme': self.theme.value,
            'targetLang': self.target_lang,
            'source': self.source.value,
            'openai': self.openai.to_dict(),
            'screenshotTranslation': self.screenshot_translation.to_dict(),
            'screenshotExplain': self.screenshot_explain.to_dict(),
        }


class SettingsManager:
    """
    Owns the JSON settings document on disk.

    The document is read wholesale on load and written wholesale on every save.
    Besides the Settings record it carries other top-level sections (the explain
    history) which are accessed through get_section/set_section.
    """

    def __init__(self, file_path: Optional[str] = None):
        self.file_path = file_path or self._determine_settings_path()
        self._document = {}
        self._settings = Settings()
        self.load()

    @property
    def settings(self) -> Settings:
        return self._settings

    def _determine_settings_path(self) -> str:
        """Determines the platform-appropriate path for the settings file."""
        data_path = QStandardPaths.writableLocation(QStandardPaths.AppDataLocation)

        if not data_path:
            logging.warning("AppDataLocation not found by Qt, using application directory for settings.")
            if getattr(sys, 'frozen', False):
                data_path = os.path.dirname(sys.executable)
            else:
                package_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
                data_path = os.path.join(os.path.dirname(package_dir), "data")

        try:
            os.makedirs(data_path, exist_ok=True)
        except OSError as e:
            logging.error(f"Could not create data directory: {data_path}, Error: {e}. Falling back.")
            fallback_path = os.path.join(os.path.expanduser("~"), f".{config.SETTINGS_APP}_data")
            try:
                os.makedirs(fallback_path, exist_ok=True)
                data_path = fallback_path
                logging.warning(f"Using fallback data directory: {data_path}")
            except OSError as e2:
                logging.error(f"Could not create fallback directory: {fallback_path}, Error: {e2}. Settings might not save.")
                data_path = "."

        file_path = os.path.join(data_path, config.SETTINGS_FILENAME)
        logging.info(f"Settings file path set to: {file_path}")
        return file_path

    def load(self) -> Settings:
        """Reads the whole document from disk. First run (or a corrupt file) yields defaults."""
        document = {}
        try:
            if os.path.exists(self.file_path):
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    loaded = json.load(f)
                if isinstance(loaded, dict):
                    document = loaded
                else:
                    logging.warning(f"Settings file '{self.file_path}' does not hold an object. Using defaults.")
            else:
                logging.info("Settings file not found, starting with defaults.")
        except json.JSONDecodeError:
            logging.exception(f"Error decoding settings JSON file: {self.file_path}. Using defaults.")
        except OSError as e:
            logging.error(f"Could not read settings file '{self.file_path}': {e}")

        self._document = document
        self._settings = Settings.from_dict(document)
        logging.debug(f"Settings loaded. Sections on disk: {sorted(document.keys())}")
        return self._settings

    def update(self, new_settings: Settings) -> OperationResult:
        """Replaces the current snapshot and writes the document."""
        previous = self._settings
        self._settings = new_settings
        result = self._write_document()
        if not result.success:
            self._settings = previous
            return result
        logging.info("Settings saved.")
        return OperationResult(True, value=new_settings)

    def get_section(self, key: str, default: Any = None) -> Any:
        """Returns a deep copy of a top-level section of the document."""
        return copy.deepcopy(self._document.get(key, default))

    def set_section(self, key: str, value: Any) -> OperationResult:
        previous = self._document.get(key)
        had_key = key in self._document
        self._document[key] = value
        result = self._write_document()
        if not result.success:
            if had_key:
                self._document[key] = previous
            else:
                self._document.pop(key, None)
        return result

    def _write_document(self) -> OperationResult:
        document = dict(self._document)
        document.update(self._settings.to_dict())
        directory = os.path.dirname(self.file_path) or "."
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".settings-", suffix=".json", dir=directory)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(document, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.file_path)
            tmp_path = None
            self._document = document
            logging.debug(f"Settings document written to {self.file_path}")
            return OperationResult(True)
        except (OSError, TypeError, ValueError) as e:
            logging.error(f"Error saving settings file '{self.file_path}': {e}")
            return OperationResult(False, error=str(e))
        finally:
            if tmp_path and os.path.exists(tmp_path):
                try:
                    os.remove(tmp_path)
                except OSError:
                    logging.debug(f"Could not remove temporary settings file {tmp_path}")
