# menutrans/gui/hotkey_edit.py
import logging
import sys

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QKeyEvent
from PyQt5.QtWidgets import QPushButton

# Order modifiers appear in a stored hotkey string
MODIFIER_ORDER = ['command', 'control', 'option', 'shift']
MODIFIER_SYMBOLS = {'command': '⌘', 'control': '⌃', 'option': '⌥', 'shift': '⇧'}

KEY_NAMES = {
    Qt.Key_Space: 'space', Qt.Key_Tab: 'tab', Qt.Key_Backspace: 'backspace', Qt.Key_Delete: 'delete',
    Qt.Key_Return: 'enter', Qt.Key_Enter: 'enter',
    Qt.Key_Home: 'home', Qt.Key_End: 'end', Qt.Key_PageUp: 'page up', Qt.Key_PageDown: 'page down',
    Qt.Key_Left: 'left', Qt.Key_Right: 'right', Qt.Key_Up: 'up', Qt.Key_Down: 'down',
    Qt.Key_Minus: '-', Qt.Key_Equal: '=', Qt.Key_Comma: ',', Qt.Key_Period: '.',
    Qt.Key_Semicolon: ';', Qt.Key_Apostrophe: "'", Qt.Key_QuoteLeft: '`',
    Qt.Key_BracketLeft: '[', Qt.Key_BracketRight: ']', Qt.Key_Backslash: '\\', Qt.Key_Slash: '/',
}


def qt_modifier_to_str(key_code):
    """Name of a modifier key as stored in settings, or None for other keys."""
    # Qt reports Command as Key_Control and Control as Key_Meta on macOS
    if sys.platform == 'darwin':
        names = {Qt.Key_Control: 'command', Qt.Key_Meta: 'control'}
    else:
        names = {Qt.Key_Control: 'control', Qt.Key_Meta: 'command'}
    names[Qt.Key_Alt] = 'option'
    names[Qt.Key_Shift] = 'shift'
    return names.get(key_code)


def qt_key_to_str(key_code, key_text):
    """Name of a non-modifier key, or None when it cannot be used in a hotkey."""
    if Qt.Key_A <= key_code <= Qt.Key_Z or Qt.Key_0 <= key_code <= Qt.Key_9:
        return chr(key_code).lower()
    # Shifted letters and digits still arrive with their plain key text on some layouts
    if key_text and len(key_text) == 1 and key_text.isascii() and key_text.isalnum():
        return key_text.lower()
    if Qt.Key_F1 <= key_code <= Qt.Key_F12:
        return f"f{key_code - Qt.Key_F1 + 1}"
    return KEY_NAMES.get(key_code)


def compose_hotkey(modifiers, key_name) -> str:
    return "+".join([m for m in MODIFIER_ORDER if m in modifiers] + [key_name])


def display_hotkey(hotkey_str) -> str:
    """'command+shift+a' -> '⌘ ⇧ A'"""
    if not hotkey_str:
        return "Click to Set Hotkey"
    parts = [MODIFIER_SYMBOLS.get(p, p.upper() if len(p) == 1 else p.title()) for p in hotkey_str.split('+')]
    return " ".join(parts)


class HotkeyEdit(QPushButton):
    """
    Button that records a global hotkey. Click it, hold the modifiers and
    press a key. At least one modifier is required; Escape alone cancels.
    """
    hotkeyChanged = pyqtSignal(str)

    def __init__(self, initial_hotkey="", parent=None):
        super().__init__(parent)
        self._hotkey = ""
        self._capturing = False
        self._held_modifiers = set()
        self.setFocusPolicy(Qt.StrongFocus)
        self.clicked.connect(self._begin_capture)
        self.setHotkey(initial_hotkey)

    def setHotkey(self, hotkey_str):
        self._hotkey = hotkey_str or ""
        self._capturing = False
        self._refresh()

    def currentHotkey(self) -> str:
        return self._hotkey

    def isCapturing(self) -> bool:
        return self._capturing

    def _refresh(self):
        self.setText(display_hotkey(self._hotkey))
        self.setToolTip(f"Current Hotkey: {self._hotkey or 'none'}\nClick to change.")

    def _show_held(self):
        held = [MODIFIER_SYMBOLS[m] for m in MODIFIER_ORDER if m in self._held_modifiers]
        self.setText(" ".join(held + ["..."]) if held else "Press new hotkey...")

    def _begin_capture(self):
        self._capturing = True
        self._held_modifiers = set()
        self._show_held()
        self.grabKeyboard()

    def _end_capture(self):
        self._capturing = False
        self.releaseKeyboard()
        self._refresh()

    def keyPressEvent(self, event: QKeyEvent):
        if not self._capturing:
            super().keyPressEvent(event)
            return

        if event.key() == Qt.Key_Escape and not self._held_modifiers:
            self._end_capture()
            return

        modifier = qt_modifier_to_str(event.key())
        if modifier:
            self._held_modifiers.add(modifier)
            self._show_held()
            return

        key_name = qt_key_to_str(event.key(), event.text())
        if not key_name or not self._held_modifiers:
            # A bare key would swallow normal typing system-wide
            logging.debug(f"HotkeyEdit: ignoring key {event.key()} (modifiers held: {len(self._held_modifiers)}).")
            return

        self._hotkey = compose_hotkey(self._held_modifiers, key_name)
        logging.debug(f"Hotkey captured: {self._hotkey}")
        self._end_capture()
        self.hotkeyChanged.emit(self._hotkey)

    def keyReleaseEvent(self, event: QKeyEvent):
        if not self._capturing:
            super().keyReleaseEvent(event)
            return
        modifier = qt_modifier_to_str(event.key())
        if modifier in self._held_modifiers and not event.isAutoRepeat():
            self._held_modifiers.discard(modifier)
            self._show_held()
