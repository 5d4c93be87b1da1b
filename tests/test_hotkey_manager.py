from dataclasses import replace
from types import SimpleNamespace
from unittest import mock

import keyboard
import pytest

from menutrans import config
from menutrans.core.hotkey_manager import HotkeyManager, normalize_key_name, parse_hotkey
from menutrans.core.settings_manager import ScreenshotExplainConfig, ScreenshotTranslationConfig, Settings


def _down(name):
    return SimpleNamespace(name=name, event_type=keyboard.KEY_DOWN)


def _up(name):
    return SimpleNamespace(name=name, event_type=keyboard.KEY_UP)


@pytest.fixture
def manager(qtbot):
    hook = mock.Mock(return_value="hook-ref")
    unhook = mock.Mock()
    manager = HotkeyManager(hook=hook, unhook=unhook)
    fired = []
    manager.triggered.connect(fired.append)
    manager.fired = fired
    return manager


@pytest.mark.parametrize("name,expected", [
    ("Left Cmd", "command"),
    ("right shift", "shift"),
    ("option", "alt"),
    ("Control", "ctrl"),
    ("A", "a"),
])
def test_normalize_key_name(name, expected):
    assert normalize_key_name(name) == expected


def test_parse_hotkey():
    assert parse_hotkey("command+option+t") == frozenset({"command", "alt", "t"})
    assert parse_hotkey("") == frozenset()


def test_exact_combination_triggers(manager):
    manager.register(config.ACTION_TOGGLE_POPUP, "command+option+t")

    for name in ("command", "alt", "t"):
        manager._on_key_event(_down(name))

    assert manager.fired == [config.ACTION_TOGGLE_POPUP]


def test_extra_modifier_does_not_trigger(manager):
    manager.register(config.ACTION_TOGGLE_POPUP, "command+t")

    for name in ("command", "shift", "t"):
        manager._on_key_event(_down(name))

    assert manager.fired == []


def test_release_clears_state(manager):
    manager.register(config.ACTION_SCREENSHOT_TRANSLATE, "command+shift+a")
    for name in ("command", "shift", "a"):
        manager._on_key_event(_down(name))
    manager._on_key_event(_up("a"))
    manager._on_key_event(_down("a"))

    assert manager.fired == [config.ACTION_SCREENSHOT_TRANSLATE] * 2


def test_duplicate_hotkey_rejected(manager):
    assert manager.register(config.ACTION_TOGGLE_POPUP, "command+shift+a")
    assert not manager.register(config.ACTION_SCREENSHOT_TRANSLATE, "command+shift+a")
    assert manager.bindings == {config.ACTION_TOGGLE_POPUP: "a+command+shift"}


def test_register_all_respects_enabled_flags(manager):
    settings = replace(Settings(),
                       screenshot_translation=ScreenshotTranslationConfig(enabled=False),
                       screenshot_explain=ScreenshotExplainConfig(hotkey="command+shift+x"))

    assert manager.register_all(settings)

    assert set(manager.bindings) == {config.ACTION_TOGGLE_POPUP, config.ACTION_SCREENSHOT_EXPLAIN}
    assert manager.is_running()


def test_start_failure_is_reported(qtbot):
    manager = HotkeyManager(hook=mock.Mock(side_effect=ImportError("You must be root")), unhook=mock.Mock())
    assert not manager.start()
    assert not manager.is_running()


def test_stop_unhooks(manager):
    manager.start()
    manager.stop()
    assert not manager.is_running()
    manager._unhook.assert_called_once_with("hook-ref")
