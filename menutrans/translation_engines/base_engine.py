# menutrans/translation_engines/base_engine.py
import abc


class TranslationError(Exception):
    """Raised by an engine when a request fails or the provider answers with an error."""
    pass


class TranslationEngine(abc.ABC):
    """
    One translation backend. Engines do a single request per call and never
    retry; mapping failures to display text is the caller's job.
    """

    def __init__(self, config=None):
        # api_key / base_url / model, depending on the backend
        self.config = dict(config or {})

    @abc.abstractmethod
    def translate(self, text: str, target_language_code: str, source_language_code: str = None) -> str:
        """
        Returns the translation of already-trimmed `text` into a resolved code
        such as 'en' or 'zh-Hans'. The source is auto-detected when not given.
        An empty string means the provider sent nothing back.

        Raises TranslationError on any provider or network failure.
        """

    @abc.abstractmethod
    def is_available(self) -> bool:
        """True when the engine has everything it needs to make a request."""
