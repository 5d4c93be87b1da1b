from dataclasses import replace
from unittest import mock

from PyQt5.QtCore import QEvent, Qt
from PyQt5.QtGui import QKeyEvent
from PyQt5.QtWidgets import QApplication

from menutrans import config
from menutrans.core.settings_manager import (ScreenshotExplainConfig, Settings, Theme, TranslationSource,
                                             VisionProvider)
from menutrans.gui.hotkey_edit import HotkeyEdit, compose_hotkey, qt_key_to_str, qt_modifier_to_str
from menutrans.gui.screenshot_result_window import ScreenshotResultWindow
from menutrans.gui.settings_dialog import SettingsDialog
from menutrans.gui.theme import DARK_STYLE, apply_theme
from menutrans.gui.translator_popup import TranslatorPopup


def _press(widget, key, text=""):
    widget.keyPressEvent(QKeyEvent(QEvent.KeyPress, key, Qt.NoModifier, text))


def test_key_names():
    assert qt_key_to_str(Qt.Key_A, "A") == "a"
    assert qt_key_to_str(Qt.Key_F5, "") == "f5"
    assert qt_key_to_str(Qt.Key_Space, " ") == "space"
    assert qt_modifier_to_str(Qt.Key_Shift) == "shift"
    assert qt_modifier_to_str(Qt.Key_Alt) == "option"
    assert compose_hotkey({"shift", "command"}, "a") == "command+shift+a"


def test_hotkey_edit_captures_combination(qtbot):
    edit = HotkeyEdit("command+option+t")
    qtbot.addWidget(edit)
    changes = []
    edit.hotkeyChanged.connect(changes.append)

    edit.click()
    assert edit.isCapturing()
    _press(edit, Qt.Key_Shift)
    _press(edit, Qt.Key_Alt)
    _press(edit, Qt.Key_X, "x")

    assert edit.currentHotkey() == "option+shift+x"
    assert changes == ["option+shift+x"]
    assert not edit.isCapturing()


def test_hotkey_edit_needs_modifier_and_escape_cancels(qtbot):
    edit = HotkeyEdit("command+option+t")
    qtbot.addWidget(edit)

    edit.click()
    _press(edit, Qt.Key_X, "x")
    assert edit.isCapturing()
    _press(edit, Qt.Key_Escape)

    assert not edit.isCapturing()
    assert edit.currentHotkey() == "command+option+t"


def test_popup_commit_copies_and_pastes(qtbot):
    paste = mock.Mock()
    popup = TranslatorPopup(lambda text: "unused", paste_func=paste, delay_ms=5000)
    qtbot.addWidget(popup)
    popup.show()
    popup.input_edit.setText("hello")
    popup.set_result("你好")

    popup.commit()

    assert QApplication.clipboard().text() == "你好"
    assert not popup.isVisible()
    assert popup.input_edit.text() == ""
    assert popup.result_text == ""
    qtbot.waitUntil(lambda: paste.called, timeout=1000)


def test_popup_commit_without_translation_uses_input(qtbot):
    paste = mock.Mock()
    popup = TranslatorPopup(lambda text: "unused", paste_func=paste, delay_ms=5000)
    qtbot.addWidget(popup)
    popup.input_edit.setText("draft")

    popup.commit()

    assert QApplication.clipboard().text() == "draft"


def test_popup_live_translation(qtbot):
    popup = TranslatorPopup(lambda text: f"[{text}]", paste_func=mock.Mock(), delay_ms=10)
    qtbot.addWidget(popup)

    with qtbot.waitSignal(popup.controller.translation_ready, timeout=3000):
        popup.input_edit.setText("hello")

    assert popup.result_text == "[hello]"


def test_result_window_states(qtbot):
    window = ScreenshotResultWindow()
    qtbot.addWidget(window)
    assert window.state == window.STATE_PROCESSING

    window.show_result("你好世界", "Hello world")
    assert window.state == window.STATE_RESULT
    assert window.translated_edit.toPlainText() == "Hello world"
    window.copy_translation()
    assert QApplication.clipboard().text() == "Hello world"

    window.show_error("")
    assert window.state == window.STATE_ERROR
    assert window.status_label.text() == "Error: Unknown error"


def test_settings_dialog_round_trip(qtbot):
    current = replace(Settings(), theme=Theme.DARK, target_lang="ja", source=TranslationSource.LANGUAGE_MODEL)
    dialog = SettingsDialog(current_settings=current)
    qtbot.addWidget(dialog)

    assert dialog.get_updated_settings() == current


def test_settings_dialog_provider_switch_suggests_defaults(qtbot):
    dialog = SettingsDialog(current_settings=Settings())
    qtbot.addWidget(dialog)

    dialog.vision_provider_combo.setCurrentIndex(dialog.vision_provider_combo.findData(VisionProvider.OPENAI.value))
    assert dialog.vision_base_url_edit.text() == config.OPENAI_VISION_BASE_URL
    assert dialog.vision_model_edit.text() == config.OPENAI_VISION_MODEL

    dialog.vision_provider_combo.setCurrentIndex(dialog.vision_provider_combo.findData(VisionProvider.GLM.value))
    assert dialog.vision_base_url_edit.text() == config.DEFAULT_VISION_BASE_URL
    assert dialog.get_updated_settings().screenshot_explain.model.provider == VisionProvider.GLM


def test_settings_dialog_validation(qtbot):
    dialog = SettingsDialog(current_settings=Settings())
    qtbot.addWidget(dialog)
    clash = replace(Settings(), screenshot_explain=ScreenshotExplainConfig(hotkey=config.DEFAULT_SCREENSHOT_HOTKEY))

    assert dialog.validation_errors(Settings()) == []
    assert dialog.validation_errors(clash) == ["Each feature needs a different hotkey."]
    reordered = replace(Settings(), screenshot_explain=ScreenshotExplainConfig(hotkey="shift+command+a"))
    assert dialog.validation_errors(reordered) == ["Each feature needs a different hotkey."]
    disabled = replace(clash, screenshot_explain=ScreenshotExplainConfig(
        enabled=False, hotkey=config.DEFAULT_SCREENSHOT_HOTKEY))
    assert dialog.validation_errors(disabled) == []
    assert dialog.validation_errors(replace(Settings(), hotkey="")) == ["Please set a hotkey for Popup."]


def test_apply_theme(qapp):
    apply_theme(Theme.DARK, qapp)
    assert qapp.styleSheet() == DARK_STYLE
    qapp.setStyleSheet("")
