"""Timestamped logging to stderr and an optional log file.

Lines look like ``[2026-01-02 10:00:00] [SCREENSHOT] message``. Debug lines
are dropped unless debug is on (WINSHOT_DEBUG=1 or set_debug(True)).
"""

from __future__ import annotations

import os
import sys
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_FILE: Optional[Path] = None
_DEBUG = os.environ.get("WINSHOT_DEBUG", "").strip().lower() in ("1", "true", "yes", "on")
_lock = threading.Lock()


def set_state_dir(state_dir: Optional[str]) -> None:
    """Set the log file location; None disables file logging."""
    global LOG_FILE
    LOG_FILE = Path(state_dir) / "winshot.log" if state_dir else None


def set_debug(enabled: bool) -> None:
    global _DEBUG
    _DEBUG = enabled


def debug_enabled() -> bool:
    return _DEBUG


def log_message(msg: str, level: str = "info") -> None:
    """Write message to stderr (and the log file, if set) with timestamp."""
    if level == "debug" and not _DEBUG:
        return
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    prefix = "" if level == "info" else f"{level.upper()}: "
    line = f"[{timestamp}] {prefix}{msg}\n"
    # Worker threads log concurrently.
    with _lock:
        print(line, end="", file=sys.stderr)
        if LOG_FILE is not None:
            LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
            with open(LOG_FILE, "a") as f:
                f.write(line)
