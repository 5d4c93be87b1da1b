from menutrans.core.history_manager import HISTORY_SECTION_KEY, ChatMessage, HistoryManager
from menutrans.core.settings_manager import SettingsManager


def _session(n):
    return [ChatMessage('assistant', f"Summary {n}"), ChatMessage('user', "why?"),
            ChatMessage('assistant', "because")]


def test_empty_session_is_not_recorded(settings_manager):
    history = HistoryManager(settings_manager)

    result = history.save_session([])

    assert not result.success
    assert history.get_history().value == []


def test_newest_first_and_truncated(settings_manager):
    history = HistoryManager(settings_manager, max_items=5)
    for n in range(7):
        assert history.save_session(_session(n)).success

    records = history.get_history().value

    assert len(records) == 5
    assert [r.messages[0].content for r in records] == [f"Summary {n}" for n in (6, 5, 4, 3, 2)]
    assert len({r.id for r in records}) == 5
    timestamps = [r.timestamp for r in records]
    assert timestamps == sorted(timestamps, reverse=True)


def test_history_persists_in_settings_document(settings_manager):
    history = HistoryManager(settings_manager)
    saved = history.save_session(_session(1)).value

    reloaded = HistoryManager(SettingsManager(settings_manager.file_path))
    record = reloaded.load_record(saved.id)

    assert record.success
    assert record.value.messages == tuple(_session(1))
    assert record.value.preview == "Summary 1"


def test_load_unknown_record(settings_manager):
    result = HistoryManager(settings_manager).load_record("12345")
    assert not result.success
    assert result.error == "History not found"


def test_invalid_items_are_skipped(settings_manager):
    settings_manager.set_section(HISTORY_SECTION_KEY, [
        "junk",
        {'id': "1", 'timestamp': 1, 'messages': [{'role': "system", 'content': "x"}]},
        {'id': "2", 'timestamp': 2, 'messages': [{'role': "assistant", 'content': "ok"}]},
    ])

    records = HistoryManager(settings_manager).get_history().value

    assert [r.id for r in records] == ["2"]


def test_ids_unique_within_same_millisecond(settings_manager, monkeypatch):
    monkeypatch.setattr("menutrans.core.history_manager.time.time", lambda: 1700000000.0)
    history = HistoryManager(settings_manager)

    first = history.save_session(_session(1)).value
    second = history.save_session(_session(2)).value

    assert first.id != second.id
