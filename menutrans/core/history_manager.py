# menutrans/core/history_manager.py
import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

from menutrans import config
from menutrans.core.settings_manager import OperationResult

HISTORY_SECTION_KEY = "explainHistory"


@dataclass(frozen=True)
class ChatMessage:
    role: str # 'user' or 'assistant'
    content: str

    def to_dict(self) -> dict:
        return {'role': self.role, 'content': self.content}


@dataclass(frozen=True)
class HistoryRecord:
    id: str
    timestamp: int # epoch milliseconds
    messages: Tuple[ChatMessage, ...]

    def to_dict(self) -> dict:
        return {'id': self.id, 'timestamp': self.timestamp,
                'messages': [m.to_dict() for m in self.messages]}

    @property
    def preview(self) -> str:
        return self.messages[0].content[:50] if self.messages else ""


def _parse_record(item) -> Optional[HistoryRecord]:
    if not isinstance(item, dict):
        return None
    record_id, timestamp, messages = item.get('id'), item.get('timestamp'), item.get('messages')
    if not isinstance(record_id, str) or not isinstance(timestamp, (int, float)) or not isinstance(messages, list):
        return None
    parsed = []
    for message in messages:
        if not isinstance(message, dict):
            return None
        role, content = message.get('role'), message.get('content')
        if role not in ('user', 'assistant') or not isinstance(content, str):
            return None
        parsed.append(ChatMessage(role, content))
    return HistoryRecord(record_id, int(timestamp), tuple(parsed))


class HistoryManager:
    """
    Keeps the explain-session history inside the settings document.

    New records are prepended; the log is truncated to the most recent
    max_items entries. Records are never edited after they are written.
    """

    def __init__(self, settings_manager, max_items=config.MAX_HISTORY_ITEMS):
        self.settings_manager = settings_manager
        self.max_items = max(max_items, 0)
        self._last_id = 0

    def _new_record_id(self) -> int:
        # Millisecond clock, bumped so ids stay unique within the process
        record_id = int(time.time() * 1000)
        if record_id <= self._last_id:
            record_id = self._last_id + 1
        self._last_id = record_id
        return record_id

    def _load_records(self) -> List[HistoryRecord]:
        raw = self.settings_manager.get_section(HISTORY_SECTION_KEY, [])
        if not isinstance(raw, list):
            logging.warning("Explain history section is not a list. Ignoring it.")
            return []
        records = []
        for item in raw:
            record = _parse_record(item)
            if record is None:
                logging.warning(f"Skipping invalid history item format: {item!r:.80}")
                continue
            records.append(record)
        return records

    def save_session(self, messages) -> OperationResult:
        """Stores a finished session. Sessions without messages are not recorded."""
        messages = tuple(messages)
        if not messages:
            logging.debug("History save skipped: session has no messages.")
            return OperationResult(False, error="Session has no messages")
        if not self.max_items:
            logging.debug("History save skipped: history disabled.")
            return OperationResult(False, error="History is disabled")

        try:
            records = self._load_records()
            record_id = self._new_record_id()
            record = HistoryRecord(str(record_id), record_id, messages)
            updated = [record] + records
            updated = updated[:self.max_items]
            result = self.settings_manager.set_section(HISTORY_SECTION_KEY, [r.to_dict() for r in updated])
        except Exception as e:
            logging.exception("Unexpected error saving explain history:")
            return OperationResult(False, error=str(e))

        if not result.success:
            logging.error(f"Error saving history: {result.error}")
            return result
        logging.info(f"History saved, total: {len(updated)}")
        return OperationResult(True, value=record)

    def get_history(self) -> OperationResult:
        try:
            return OperationResult(True, value=self._load_records())
        except Exception as e:
            logging.exception("Error getting explain history:")
            return OperationResult(False, error=str(e), value=[])

    def load_record(self, record_id: str) -> OperationResult:
        result = self.get_history()
        if not result.success:
            return result
        for record in result.value:
            if record.id == record_id:
                return OperationResult(True, value=record)
        return OperationResult(False, error="History not found")
