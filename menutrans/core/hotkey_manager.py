# menutrans/core/hotkey_manager.py
import logging
import threading

import keyboard
from PyQt5.QtCore import QObject, pyqtSignal

from menutrans import config

KEY_DOWN = keyboard.KEY_DOWN
KEY_UP = keyboard.KEY_UP

# Accepted spellings -> the name the keyboard library reports
KEY_ALIASES = {
    'cmd': 'command', 'meta': 'command', 'super': 'command', 'win': 'command', 'windows': 'command',
    'option': 'alt', 'opt': 'alt', 'alt gr': 'alt',
    'control': 'ctrl',
    'return': 'enter',
    'escape': 'esc',
}


def normalize_key_name(name: str) -> str:
    key = (name or "").strip().lower()
    for side in ('left ', 'right '):
        if key.startswith(side):
            key = key[len(side):]
            break
    return KEY_ALIASES.get(key, key)


def parse_hotkey(hotkey_str: str) -> frozenset:
    """Parses 'command+shift+a' into a set of normalized key names."""
    if not hotkey_str:
        return frozenset()
    return frozenset(normalize_key_name(part) for part in hotkey_str.split('+') if part.strip())


class HotkeyManager(QObject):
    """
    Global hotkeys through one keyboard.hook listener.

    The hook callback runs on the keyboard library's thread; matches are
    reported through the `triggered` signal, which Qt queues into the thread
    that owns this object.
    """
    triggered = pyqtSignal(str) # action name

    def __init__(self, parent=None, hook=None, unhook=None):
        super().__init__(parent)
        self._hook = hook or keyboard.hook
        self._unhook = unhook or keyboard.unhook
        self._hook_ref = None
        self._bindings = {} # frozenset(keys) -> action
        self._pressed_keys = set()
        self._lock = threading.Lock()

    @property
    def bindings(self) -> dict:
        with self._lock:
            return {action: "+".join(sorted(keys)) for keys, action in self._bindings.items()}

    def is_running(self) -> bool:
        return self._hook_ref is not None

    def start(self) -> bool:
        if self._hook_ref is not None:
            return True
        try:
            self._hook_ref = self._hook(self._on_key_event, suppress=False)
        except Exception:
            # keyboard needs accessibility permission on macOS (root on Linux)
            logging.exception("Error setting up keyboard hook:")
            self._hook_ref = None
            return False
        logging.info("Keyboard hook registered.")
        return True

    def stop(self):
        if self._hook_ref is None:
            return
        try:
            self._unhook(self._hook_ref)
            logging.debug("Keyboard hook removed.")
        except Exception:
            logging.exception("Error removing keyboard hook:")
        self._hook_ref = None
        with self._lock:
            self._pressed_keys.clear()

    def register(self, action: str, hotkey_str: str) -> bool:
        keys = parse_hotkey(hotkey_str)
        if not keys:
            logging.error(f"Invalid hotkey for '{action}': '{hotkey_str}'")
            return False
        with self._lock:
            existing = self._bindings.get(keys)
            if existing and existing != action:
                logging.error(f"Hotkey '{hotkey_str}' already bound to '{existing}'. '{action}' not registered.")
                return False
            self._bindings = {k: a for k, a in self._bindings.items() if a != action}
            self._bindings[keys] = action
        logging.info(f"Registered hotkey '{hotkey_str}' for '{action}'.")
        return True

    def unregister_all(self):
        with self._lock:
            self._bindings = {}
            self._pressed_keys.clear()

    def register_all(self, settings):
        """Replaces every binding from a Settings snapshot."""
        self.unregister_all()
        self.register(config.ACTION_TOGGLE_POPUP, settings.hotkey)
        if settings.screenshot_translation.enabled:
            self.register(config.ACTION_SCREENSHOT_TRANSLATE, settings.screenshot_translation.hotkey)
        if settings.screenshot_explain.enabled:
            self.register(config.ACTION_SCREENSHOT_EXPLAIN, settings.screenshot_explain.hotkey)
        return self.start()

    def _on_key_event(self, event):
        try:
            if not event.name:
                return
            key_name = normalize_key_name(event.name)
            action = None
            with self._lock:
                if event.event_type == KEY_DOWN:
                    self._pressed_keys.add(key_name)
                    # Exact match only: extra held keys do not trigger
                    action = self._bindings.get(frozenset(self._pressed_keys))
                elif event.event_type == KEY_UP:
                    self._pressed_keys.discard(key_name)
            if action:
                logging.debug(f"Hotkey for '{action}' detected!")
                self.triggered.emit(action)
        except Exception:
            logging.exception("Error processing key event in hotkey manager:")
