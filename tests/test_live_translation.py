import threading

from menutrans.core.live_translation import LiveTranslationController


def test_debounced_translation(qtbot):
    calls = []

    def translate(text):
        calls.append(text)
        return f"<{text}>"

    controller = LiveTranslationController(translate, delay_ms=20)

    with qtbot.waitSignal(controller.translation_ready, timeout=3000) as blocker:
        controller.on_text_changed("h")
        controller.on_text_changed("he")
        controller.on_text_changed("hello")

    assert blocker.args == ["<hello>"]
    assert calls == ["hello"]


def test_empty_text_clears_immediately(qtbot):
    translate = []
    controller = LiveTranslationController(translate.append, delay_ms=20)

    with qtbot.waitSignal(controller.translation_ready, timeout=100) as blocker:
        controller.on_text_changed("   ")

    assert blocker.args == [""]
    qtbot.wait(60)
    assert translate == []


def test_stale_result_is_dropped(qtbot):
    release = threading.Event()

    def translate(text):
        if text == "slow":
            release.wait(2)
        return text.upper()

    controller = LiveTranslationController(translate, delay_ms=10)
    results = []
    controller.translation_ready.connect(results.append)

    controller.on_text_changed("slow")
    qtbot.wait(50)
    with qtbot.waitSignal(controller.translation_ready, timeout=3000):
        controller.on_text_changed("fast")
    release.set()
    qtbot.wait(100)

    assert results == ["FAST"]


def test_cancel_discards_pending(qtbot):
    calls = []
    controller = LiveTranslationController(calls.append, delay_ms=20)

    controller.on_text_changed("hello")
    controller.cancel()
    qtbot.wait(80)

    assert calls == []
