# menutrans/gui/settings_dialog.py
import dataclasses
import logging

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (QCheckBox, QComboBox, QDialog, QDialogButtonBox, QFormLayout, QGroupBox, QHBoxLayout,
                             QLabel, QLineEdit, QMessageBox, QPlainTextEdit, QPushButton, QTabWidget, QVBoxLayout,
                             QWidget)

from menutrans import config
from menutrans.core.settings_manager import (CustomPrompts, ExplainLanguage, ExplainModelConfig, OcrSource,
                                             OpenAIConfig, ScreenshotExplainConfig, ScreenshotTranslationConfig,
                                             Settings, Theme, TranslationSource, VisionProvider)
from menutrans.core.hotkey_manager import parse_hotkey
from menutrans.gui.hotkey_edit import HotkeyEdit


def _key_field(parent, placeholder, tooltip=""):
    """Password line edit with a Show/Hide toggle. Returns (container, edit)."""
    container = QWidget(parent)
    row = QHBoxLayout(container); row.setContentsMargins(0, 0, 0, 0)
    edit = QLineEdit(parent); edit.setEchoMode(QLineEdit.Password); edit.setPlaceholderText(placeholder)
    if tooltip: edit.setToolTip(tooltip)
    button = QPushButton("Show", parent); button.setCheckable(True); button.setFixedWidth(50)
    button.toggled.connect(lambda checked: (edit.setEchoMode(QLineEdit.Normal if checked else QLineEdit.Password),
                                            button.setText("Hide" if checked else "Show")))
    row.addWidget(edit, 1); row.addWidget(button)
    return container, edit


def _select_data(combo, value):
    idx = combo.findData(value)
    if idx >= 0:
        combo.setCurrentIndex(idx)


class SettingsDialog(QDialog):
    """Dialog for configuring application settings. Produces a new Settings snapshot."""

    def __init__(self, parent=None, current_settings=None):
        super().__init__(parent)
        self.current_settings = current_settings or Settings()

        self.setWindowTitle("Settings")
        self.setMinimumWidth(480)

        self._setup_widgets()
        self._setup_layout()
        self._connect_signals()
        self._load_initial_settings()
        self._update_provider_specific_visibility()

        logging.debug("SettingsDialog initialized.")

    def _setup_widgets(self):
        # General
        self.hotkey_edit = HotkeyEdit(parent=self); self.hotkey_edit.setToolTip(config.TOOLTIP_HOTKEY_INPUT)
        self.theme_combo = QComboBox(self)
        for key, display_name in config.THEMES.items(): self.theme_combo.addItem(display_name, key)

        # Translation
        self.engine_combo = QComboBox(self); self.engine_combo.setToolTip(config.TOOLTIP_ENGINE_SELECT)
        for key, display_name in config.AVAILABLE_ENGINES.items(): self.engine_combo.addItem(display_name, key)
        self.language_combo = QComboBox(self); self.language_combo.setToolTip(config.TOOLTIP_TARGET_LANGUAGE_SELECT)
        for display_name, code in config.TARGET_LANGUAGES: self.language_combo.addItem(display_name, code)
        self.openai_key_label = QLabel("API Key:")
        self.openai_key_widget, self.openai_key_edit = _key_field(self, "sk-...", config.TOOLTIP_OPENAI_KEY)
        self.openai_base_url_label = QLabel("Base URL:")
        self.openai_base_url_edit = QLineEdit(self); self.openai_base_url_edit.setToolTip(config.TOOLTIP_OPENAI_BASE_URL)
        self.openai_model_label = QLabel("Model:")
        self.openai_model_edit = QLineEdit(self); self.openai_model_edit.setPlaceholderText(config.FALLBACK_OPENAI_MODEL)

        # Screenshot translation
        self.screenshot_group = QGroupBox("Screenshot Translation", self); self.screenshot_group.setCheckable(True)
        self.screenshot_hotkey_edit = HotkeyEdit(parent=self)
        self.ocr_source_combo = QComboBox(self); self.ocr_source_combo.setToolTip(config.TOOLTIP_OCR_SOURCE_SELECT)
        for key, display_name in config.AVAILABLE_OCR_SOURCES.items(): self.ocr_source_combo.addItem(display_name, key)
        self.glm_key_label = QLabel("GLM API Key:")
        self.glm_key_widget, self.glm_key_edit = _key_field(self, "Zhipu API key", config.TOOLTIP_GLM_KEY)

        # Screenshot explain
        self.explain_group = QGroupBox("Screenshot Explain", self); self.explain_group.setCheckable(True)
        self.explain_hotkey_edit = HotkeyEdit(parent=self)
        self.vision_provider_combo = QComboBox(self); self.vision_provider_combo.setToolTip(config.TOOLTIP_VISION_PROVIDER_SELECT)
        for key, display_name in config.AVAILABLE_VISION_PROVIDERS.items(): self.vision_provider_combo.addItem(display_name, key)
        self.vision_key_widget, self.vision_key_edit = _key_field(self, "API key")
        self.vision_base_url_label = QLabel("Base URL:")
        self.vision_base_url_edit = QLineEdit(self)
        self.vision_model_label = QLabel("Model:")
        self.vision_model_edit = QLineEdit(self)
        self.explain_language_combo = QComboBox(self)
        for key, display_name in config.EXPLAIN_LANGUAGES.items(): self.explain_language_combo.addItem(display_name, key)
        self.system_prompt_edit = QPlainTextEdit(self)
        self.summary_prompt_edit = QPlainTextEdit(self)
        self.question_prompt_edit = QPlainTextEdit(self)
        for edit in (self.system_prompt_edit, self.summary_prompt_edit, self.question_prompt_edit):
            edit.setPlaceholderText(config.TOOLTIP_CUSTOM_PROMPT); edit.setMaximumHeight(70)

        self.button_box = QDialogButtonBox(QDialogButtonBox.Save | QDialogButtonBox.Cancel, self)

    def _setup_layout(self):
        main_layout = QVBoxLayout(self)
        tabs = QTabWidget(self)

        general = QWidget(); general_form = QFormLayout(general)
        general_form.setLabelAlignment(Qt.AlignRight)
        general_form.addRow("Popup Hotkey:", self.hotkey_edit)
        general_form.addRow("Theme:", self.theme_combo)
        general_form.addRow("Translation Engine:", self.engine_combo)
        general_form.addRow("Translate To:", self.language_combo)
        general_form.addRow(self.openai_key_label, self.openai_key_widget)
        general_form.addRow(self.openai_base_url_label, self.openai_base_url_edit)
        general_form.addRow(self.openai_model_label, self.openai_model_edit)
        tabs.addTab(general, "Translate")

        screenshot = QWidget(); screenshot_layout = QVBoxLayout(screenshot)
        shot_form = QFormLayout(self.screenshot_group); shot_form.setLabelAlignment(Qt.AlignRight)
        shot_form.addRow("Hotkey:", self.screenshot_hotkey_edit)
        shot_form.addRow("OCR Source:", self.ocr_source_combo)
        shot_form.addRow(self.glm_key_label, self.glm_key_widget)
        screenshot_layout.addWidget(self.screenshot_group)
        screenshot_layout.addStretch(1)
        tabs.addTab(screenshot, "Screenshot")

        explain = QWidget(); explain_layout = QVBoxLayout(explain)
        explain_form = QFormLayout(self.explain_group); explain_form.setLabelAlignment(Qt.AlignRight)
        explain_form.addRow("Hotkey:", self.explain_hotkey_edit)
        explain_form.addRow("Provider:", self.vision_provider_combo)
        explain_form.addRow("API Key:", self.vision_key_widget)
        explain_form.addRow(self.vision_base_url_label, self.vision_base_url_edit)
        explain_form.addRow(self.vision_model_label, self.vision_model_edit)
        explain_form.addRow("Reply Language:", self.explain_language_combo)
        explain_form.addRow("System Prompt:", self.system_prompt_edit)
        explain_form.addRow("Summary Prompt:", self.summary_prompt_edit)
        explain_form.addRow("Question Prompt:", self.question_prompt_edit)
        explain_layout.addWidget(self.explain_group)
        tabs.addTab(explain, "Explain")

        main_layout.addWidget(tabs)
        main_layout.addWidget(self.button_box)

    def _connect_signals(self):
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)
        self.engine_combo.currentIndexChanged.connect(self._update_provider_specific_visibility)
        self.ocr_source_combo.currentIndexChanged.connect(self._update_provider_specific_visibility)
        self.vision_provider_combo.currentIndexChanged.connect(self._on_vision_provider_changed)

    def _load_initial_settings(self):
        s = self.current_settings
        self.hotkey_edit.setHotkey(s.hotkey)
        _select_data(self.theme_combo, s.theme.value)
        _select_data(self.engine_combo, s.source.value)
        if self.language_combo.findData(s.target_lang) < 0:
            self.language_combo.addItem(s.target_lang, s.target_lang)
        _select_data(self.language_combo, s.target_lang)
        self.openai_key_edit.setText(s.openai.api_key)
        self.openai_base_url_edit.setText(s.openai.base_url)
        self.openai_model_edit.setText(s.openai.model)

        shot = s.screenshot_translation
        self.screenshot_group.setChecked(shot.enabled)
        self.screenshot_hotkey_edit.setHotkey(shot.hotkey)
        _select_data(self.ocr_source_combo, shot.ocr_source.value)
        self.glm_key_edit.setText(shot.glm_api_key)

        explain = s.screenshot_explain
        self.explain_group.setChecked(explain.enabled)
        self.explain_hotkey_edit.setHotkey(explain.hotkey)
        self.vision_provider_combo.blockSignals(True)
        _select_data(self.vision_provider_combo, explain.model.provider.value)
        self.vision_provider_combo.blockSignals(False)
        self.vision_key_edit.setText(explain.model.api_key)
        self.vision_base_url_edit.setText(explain.model.base_url)
        self.vision_model_edit.setText(explain.model.model_name)
        _select_data(self.explain_language_combo, explain.default_language.value)
        self.system_prompt_edit.setPlainText(explain.custom_prompts.system_prompt or "")
        self.summary_prompt_edit.setPlainText(explain.custom_prompts.summary_prompt or "")
        self.question_prompt_edit.setPlainText(explain.custom_prompts.question_prompt or "")

    def _on_vision_provider_changed(self, index):
        if self.vision_provider_combo.itemData(index) == VisionProvider.GLM.value:
            self.vision_base_url_edit.setText(config.DEFAULT_VISION_BASE_URL)
            self.vision_model_edit.setText(config.DEFAULT_VISION_MODEL)
        else:
            if self.vision_base_url_edit.text() == config.DEFAULT_VISION_BASE_URL:
                self.vision_base_url_edit.setText(config.OPENAI_VISION_BASE_URL)
            if self.vision_model_edit.text() == config.DEFAULT_VISION_MODEL:
                self.vision_model_edit.setText(config.OPENAI_VISION_MODEL)
        self._update_provider_specific_visibility()

    def _update_provider_specific_visibility(self):
        is_llm = self.engine_combo.currentData() == TranslationSource.LANGUAGE_MODEL.value
        for w in (self.openai_key_label, self.openai_key_widget, self.openai_base_url_label,
                  self.openai_base_url_edit, self.openai_model_label, self.openai_model_edit):
            w.setVisible(is_llm)

        is_glm_ocr = self.ocr_source_combo.currentData() == OcrSource.VISION_MODEL.value
        self.glm_key_label.setVisible(is_glm_ocr); self.glm_key_widget.setVisible(is_glm_ocr)

        is_openai_vision = self.vision_provider_combo.currentData() == VisionProvider.OPENAI.value
        for w in (self.vision_base_url_label, self.vision_base_url_edit,
                  self.vision_model_label, self.vision_model_edit):
            w.setVisible(is_openai_vision)

    def get_updated_settings(self) -> Settings:
        """Builds a new Settings snapshot from the widgets."""
        custom_prompts = CustomPrompts(
            system_prompt=self.system_prompt_edit.toPlainText().strip() or None,
            summary_prompt=self.summary_prompt_edit.toPlainText().strip() or None,
            question_prompt=self.question_prompt_edit.toPlainText().strip() or None,
        )
        settings = dataclasses.replace(
            self.current_settings,
            hotkey=self.hotkey_edit.currentHotkey(),
            theme=Theme(self.theme_combo.currentData()),
            target_lang=self.language_combo.currentData() or config.DEFAULT_TARGET_LANGUAGE,
            source=TranslationSource(self.engine_combo.currentData()),
            openai=OpenAIConfig(
                api_key=self.openai_key_edit.text().strip(),
                base_url=self.openai_base_url_edit.text().strip() or config.DEFAULT_OPENAI_BASE_URL,
                model=self.openai_model_edit.text().strip(),
            ),
            screenshot_translation=ScreenshotTranslationConfig(
                enabled=self.screenshot_group.isChecked(),
                hotkey=self.screenshot_hotkey_edit.currentHotkey(),
                ocr_source=OcrSource(self.ocr_source_combo.currentData()),
                glm_api_key=self.glm_key_edit.text().strip(),
            ),
            screenshot_explain=ScreenshotExplainConfig(
                enabled=self.explain_group.isChecked(),
                hotkey=self.explain_hotkey_edit.currentHotkey(),
                model=ExplainModelConfig(
                    provider=VisionProvider(self.vision_provider_combo.currentData()),
                    api_key=self.vision_key_edit.text().strip(),
                    base_url=self.vision_base_url_edit.text().strip() or config.DEFAULT_VISION_BASE_URL,
                    model_name=self.vision_model_edit.text().strip() or config.DEFAULT_VISION_MODEL,
                ),
                default_language=ExplainLanguage(self.explain_language_combo.currentData()),
                custom_prompts=custom_prompts,
            ),
        )
        return settings

    def validation_errors(self, settings: Settings):
        errors = []
        hotkeys = [("Popup", settings.hotkey)]
        if settings.screenshot_translation.enabled:
            hotkeys.append(("Screenshot Translation", settings.screenshot_translation.hotkey))
        if settings.screenshot_explain.enabled:
            hotkeys.append(("Screenshot Explain", settings.screenshot_explain.hotkey))
        for name, hotkey in hotkeys:
            if not hotkey:
                errors.append(f"Please set a hotkey for {name}.")
        # Compare key sets so "shift+command+a" and "command+shift+a" collide
        used = [parse_hotkey(h) for _, h in hotkeys if h]
        if len(set(used)) != len(used):
            errors.append("Each feature needs a different hotkey.")
        return errors

    def accept(self):
        """Validate settings before accepting the dialog."""
        errors = self.validation_errors(self.get_updated_settings())
        if errors:
            QMessageBox.warning(self, "Invalid Settings", "\n".join(errors))
            return
        super().accept()
