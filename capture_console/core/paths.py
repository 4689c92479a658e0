"""Path constants for the capture console."""

from __future__ import annotations

import os
import sys
from pathlib import Path


def _is_frozen() -> bool:
    return bool(getattr(sys, "frozen", False))


PACKAGE_ROOT = Path(__file__).resolve().parents[1]
CAPTURE_MODULE_DIR = PACKAGE_ROOT / "capture"
DEFAULT_CONFIG_PATH = CAPTURE_MODULE_DIR / "config.txt"

# Directory holding the running executable; the capture driver ships next to it.
if _is_frozen():
    APPLICATION_DIR = Path(sys.executable).resolve().parent
else:
    APPLICATION_DIR = Path(sys.argv[0]).resolve().parent if sys.argv and sys.argv[0] else Path.cwd()

_USER_STATE_ENV = os.environ.get("CAPTURE_CONSOLE_STATE_DIR")
USER_STATE_DIR = Path(_USER_STATE_ENV).expanduser() if _USER_STATE_ENV else (Path.home() / ".capture_console")
USER_LOGS_DIR = USER_STATE_DIR / "logs"


def ensure_directories() -> None:
    """Create the per-user directories if they don't exist."""

    USER_STATE_DIR.mkdir(parents=True, exist_ok=True)
    USER_LOGS_DIR.mkdir(parents=True, exist_ok=True)


__all__ = [
    "APPLICATION_DIR",
    "CAPTURE_MODULE_DIR",
    "DEFAULT_CONFIG_PATH",
    "PACKAGE_ROOT",
    "USER_LOGS_DIR",
    "USER_STATE_DIR",
    "ensure_directories",
]
