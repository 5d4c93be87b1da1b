# menutrans/core/screen_capture.py
import logging
import os
import subprocess
import tempfile
import time
from typing import Optional

from menutrans import config


def capture_path(prefix: str, directory: str = None) -> str:
    directory = directory or tempfile.gettempdir()
    return os.path.join(directory, f"{prefix}-{int(time.time() * 1000)}.png")


def capture_region(prefix: str, directory: str = None) -> Optional[str]:
    """
    Runs the interactive macOS region capture and waits for the user.

    Returns the path of the PNG, or None when no file was written (the user
    pressed Escape, or the capture tool failed).
    """
    path = capture_path(prefix, directory)
    logging.debug(f"Starting interactive capture -> {path}")
    try:
        completed = subprocess.run([config.SCREENCAPTURE_CMD, "-i", path], capture_output=True)
    except OSError as e:
        logging.error(f"Screenshot error: {e}")
        return None

    if not os.path.exists(path):
        if completed.returncode != 0:
            logging.error(f"Screenshot error: exit code {completed.returncode}")
        logging.info("Screenshot cancelled")
        return None
    return path


def discard_capture(path: Optional[str]):
    """Deletes a capture file. Failures are logged, never raised."""
    if not path:
        return
    try:
        os.remove(path)
        logging.debug(f"Removed capture file {path}")
    except FileNotFoundError:
        pass
    except OSError as e:
        logging.warning(f"Could not remove capture file {path}: {e}")
