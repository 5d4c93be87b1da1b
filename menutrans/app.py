# menutrans/app.py
import logging

from PyQt5.QtCore import QObject, QTimer
from PyQt5.QtWidgets import QAction, QApplication, QDialog, QMenu, QMessageBox, QStyle, QSystemTrayIcon

from menutrans import config
from menutrans.core.explain_engine import ExplainEngine
from menutrans.core.history_manager import HistoryManager
from menutrans.core.hotkey_manager import HotkeyManager
from menutrans.core.pipelines import ExplainSession, ScreenshotTranslatePipeline
from menutrans.core.screen_capture import capture_region, discard_capture
from menutrans.core.settings_manager import SettingsManager
from menutrans.core.translation_service import TranslationService
from menutrans.core.workers import CaptureWorker, ScreenshotTranslateWorker, start_worker
from menutrans.gui.settings_dialog import SettingsDialog
from menutrans.gui.theme import apply_theme
from menutrans.gui.translator_popup import TranslatorPopup
from menutrans.gui.window_manager import WindowManager
from menutrans.ocr_engines.factory import create_ocr_engine


class TranslatorApp(QObject):
    """
    Application shell: tray icon, popup, hotkeys and the two screenshot flows.
    Owns the single SettingsManager and HistoryManager of the process.
    """

    def __init__(self, settings_manager=None, history_manager=None, hotkey_manager=None,
                 window_manager=None, show_tray=True, capture=capture_region, ocr_engine_factory=create_ocr_engine):
        super().__init__()
        self.capture = capture
        self.ocr_engine_factory = ocr_engine_factory
        self.settings_manager = settings_manager or SettingsManager()
        self.history_manager = history_manager or HistoryManager(self.settings_manager)
        self.translation_service = TranslationService(self.settings)
        self.window_manager = window_manager or WindowManager(self)
        self.hotkey_manager = hotkey_manager or HotkeyManager(self)
        self.hotkey_manager.triggered.connect(self.on_hotkey)

        self.screenshot_translate_busy = False
        self.screenshot_explain_busy = False

        self.popup = TranslatorPopup(self.translate_text)
        self.popup.settingsRequested.connect(self.open_settings)

        self.tray = None
        if show_tray:
            self._setup_tray()

        apply_theme(self.settings.theme)
        logging.info("Application initialized.")

    @property
    def settings(self):
        return self.settings_manager.settings

    def start(self):
        if not self.hotkey_manager.register_all(self.settings):
            logging.error("Global hotkeys unavailable. Use the tray menu instead.")

    def translate_text(self, text):
        # Looked up per call so a settings change takes effect immediately
        return self.translation_service.translate(text)

    def _setup_tray(self):
        icon = QApplication.style().standardIcon(QStyle.SP_FileDialogDetailedView)
        self.tray = QSystemTrayIcon(icon, self)
        self.tray.setToolTip(config.TRAY_TOOLTIP)
        menu = QMenu()
        show_action = QAction("Show Translator", menu); show_action.triggered.connect(self.popup.show_at_cursor)
        settings_action = QAction("Settings", menu); settings_action.triggered.connect(self.open_settings)
        quit_action = QAction("Quit", menu); quit_action.triggered.connect(self.quit)
        menu.addAction(show_action)
        menu.addAction(settings_action)
        menu.addSeparator()
        menu.addAction(quit_action)
        self.tray.setContextMenu(menu)
        self._tray_menu = menu
        self.tray.show()

    # --- Hotkeys ---

    def on_hotkey(self, action):
        logging.debug(f"Hotkey action: {action}")
        if action == config.ACTION_TOGGLE_POPUP:
            self.popup.toggle()
        elif action == config.ACTION_SCREENSHOT_TRANSLATE:
            self.trigger_screenshot_translate()
        elif action == config.ACTION_SCREENSHOT_EXPLAIN:
            self.trigger_screenshot_explain()
        else:
            logging.warning(f"Unknown hotkey action: '{action}'")

    # --- Screenshot translate ---

    def trigger_screenshot_translate(self) -> bool:
        if self.screenshot_translate_busy:
            logging.warning("Screenshot translation already running. Trigger ignored.")
            return False
        self.screenshot_translate_busy = True
        logging.info("Screenshot Hotkey Triggered")
        self.popup.hide()
        # Let the popup disappear before the capture overlay appears
        QTimer.singleShot(config.SCREENSHOT_HIDE_DELAY_MS, self._start_screenshot_translate)
        return True

    def _start_screenshot_translate(self):
        pipeline = ScreenshotTranslatePipeline(self.settings, capture=self.capture,
                                               ocr_engine_factory=self.ocr_engine_factory,
                                               translation_service=self.translation_service)
        worker = ScreenshotTranslateWorker(pipeline)
        worker.captured.connect(self._on_screenshot_captured)
        worker.finished.connect(self._on_screenshot_translated)
        worker.error.connect(self._on_screenshot_failed)
        worker.done.connect(self._on_screenshot_translate_done)
        start_worker(worker)

    def _on_screenshot_captured(self):
        window = self.window_manager.result_window()
        window.show_processing()
        window.present()

    def _on_screenshot_translated(self, original, translated):
        window = self.window_manager.result_window()
        window.show_result(original, translated)
        # The window may have been closed while OCR was running
        window.present()

    def _on_screenshot_failed(self, message):
        window = self.window_manager.result_window()
        window.show_error(message)
        window.present()

    def _on_screenshot_translate_done(self):
        self.screenshot_translate_busy = False

    # --- Screenshot explain ---

    def trigger_screenshot_explain(self) -> bool:
        if self.screenshot_explain_busy:
            logging.warning("Screenshot explain capture already running. Trigger ignored.")
            return False
        self.screenshot_explain_busy = True
        logging.info("Explain Hotkey Triggered")
        self.popup.hide()
        worker = CaptureWorker(config.SCREENSHOT_EXPLAIN_PREFIX, capture=self.capture)
        worker.captured.connect(self.open_explain)
        worker.done.connect(self._on_explain_capture_done)
        start_worker(worker)
        return True

    def _on_explain_capture_done(self):
        self.screenshot_explain_busy = False

    def open_explain(self, image_path) -> bool:
        if self.window_manager.has_explain_window():
            self.window_manager.focus_explain()
            discard_capture(image_path)
            return False
        explain = self.settings.screenshot_explain
        engine = ExplainEngine(explain.model, explain.custom_prompts)
        session = ExplainSession(image_path, explain.default_language, engine)
        try:
            return self.window_manager.open_explain(session, self.history_manager)
        except Exception:
            logging.exception("Error creating explain window:")
            session.close()
            return False

    # --- Settings ---

    def open_settings(self):
        dialog = SettingsDialog(None, self.settings)
        if dialog.exec_() != QDialog.Accepted:
            return
        self.apply_settings(dialog.get_updated_settings())

    def apply_settings(self, new_settings) -> bool:
        result = self.settings_manager.update(new_settings)
        if not result.success:
            QMessageBox.warning(None, "Settings", f"Could not save settings:\n{result.error}")
            return False
        self.translation_service = TranslationService(self.settings)
        apply_theme(self.settings.theme)
        self.hotkey_manager.register_all(self.settings)
        logging.info("Settings applied.")
        return True

    def quit(self):
        logging.info("Quitting application.")
        self.hotkey_manager.stop()
        self.window_manager.close_all()
        if self.tray:
            self.tray.hide()
        QApplication.instance().quit()
