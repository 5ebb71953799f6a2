from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Tuple

from .lib.env import PATHS

DEFAULT_LOG_PATH = PATHS.log_default
FALLBACK_LOG_NAME = "archrice-installer.log"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_active_log_path: Optional[str] = None


def open_log_file(log_path: str) -> Tuple[logging.FileHandler, str]:
    """Open ``log_path``, or a file in the working directory if it is unwritable.

    The live ISO root is usually writable, but a read-only ``/var/log`` or a
    bad ``--log`` argument must not stop the install.
    """

    candidates = [log_path, str(Path.cwd() / FALLBACK_LOG_NAME)]
    error: Optional[OSError] = None
    for candidate in candidates:
        try:
            Path(candidate).parent.mkdir(parents=True, exist_ok=True)
            return logging.FileHandler(candidate, encoding="utf-8"), candidate
        except OSError as e:
            error = e
    assert error is not None
    raise error


def configure_logging(log_path: str = DEFAULT_LOG_PATH, level: int = logging.INFO) -> str:
    """Send every command and decision to a log file and the console.

    Only the first call installs handlers. Returns the file actually written.
    """

    global _active_log_path

    root = logging.getLogger()
    root.setLevel(level)
    if _active_log_path is not None:
        return _active_log_path

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")
    file_handler, chosen = open_log_file(log_path)
    console = logging.StreamHandler()
    for h in (file_handler, console):
        h.setFormatter(fmt)
        root.addHandler(h)

    _active_log_path = chosen
    if chosen != log_path:
        logging.getLogger(__name__).warning("Cannot write %s; logging to %s", log_path, chosen)
    return chosen
