# menutrans/ocr_engines/base_engine.py
import abc


class OCRError(Exception):
    """Raised when text recognition fails. The message is shown to the user."""
    pass


class OCREngine(abc.ABC):
    """Turns a screenshot file into text. The caller owns (and deletes) the file."""

    def __init__(self, config=None):
        self.config = dict(config or {})

    @abc.abstractmethod
    def recognize(self, image_path: str) -> str:
        """Returns the recognized lines joined by newlines. Raises OCRError."""

    @abc.abstractmethod
    def is_available(self) -> bool:
        pass
