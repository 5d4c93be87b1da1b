import os

# Widgets are created without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest

from menutrans.core.settings_manager import SettingsManager


@pytest.fixture
def settings_manager(tmp_path):
    return SettingsManager(str(tmp_path / "settings.json"))


@pytest.fixture
def screenshot_file(tmp_path):
    path = tmp_path / "shot.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake")
    return str(path)


class FakeResponse:
    """Stand-in for requests.Response."""

    def __init__(self, json_data=None, status_code=200, text=None):
        self._json = json_data
        self.status_code = status_code
        self.ok = 200 <= status_code < 400
        self.text = text if text is not None else ("" if json_data is None else str(json_data))

    def json(self):
        if self._json is None:
            raise ValueError("No JSON")
        return self._json

    def raise_for_status(self):
        import requests
        if not self.ok:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")


@pytest.fixture
def fake_response():
    return FakeResponse
