import os
import subprocess
from unittest import mock

from menutrans.core.screen_capture import capture_path, capture_region, discard_capture


def test_capture_path_uses_prefix(tmp_path):
    path = capture_path("explain-screenshot", str(tmp_path))
    assert os.path.dirname(path) == str(tmp_path)
    assert os.path.basename(path).startswith("explain-screenshot-")
    assert path.endswith(".png")


def test_capture_returns_written_file(tmp_path, monkeypatch):
    def fake_run(command, **kwargs):
        assert command[:2] == ["screencapture", "-i"]
        with open(command[2], 'wb') as f:
            f.write(b"png")
        return subprocess.CompletedProcess(command, 0)

    monkeypatch.setattr(subprocess, "run", fake_run)
    path = capture_region("screenshot", str(tmp_path))

    assert path is not None and os.path.exists(path)


def test_cancelled_capture_returns_none(tmp_path, monkeypatch):
    monkeypatch.setattr(subprocess, "run", mock.Mock(return_value=subprocess.CompletedProcess([], 0)))
    assert capture_region("screenshot", str(tmp_path)) is None


def test_missing_capture_tool(tmp_path, monkeypatch):
    monkeypatch.setattr(subprocess, "run", mock.Mock(side_effect=FileNotFoundError("screencapture")))
    assert capture_region("screenshot", str(tmp_path)) is None


def test_discard_capture(tmp_path):
    path = tmp_path / "shot.png"
    path.write_bytes(b"png")
    discard_capture(str(path))
    assert not path.exists()
    discard_capture(str(path))
    discard_capture(None)
