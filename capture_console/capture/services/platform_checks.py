"""Privilege and capture-driver detection for the local capture service."""

from __future__ import annotations

import ctypes
import os
import sys
from pathlib import Path
from typing import Iterable, Optional

from capture_console.core.logging_utils import get_module_logger
from capture_console.core.paths import APPLICATION_DIR

from ..domain.constants import DRIVER_LIBRARIES, DRIVER_SYS_FILES

logger = get_module_logger("Capture.Platform")


class PrivilegeDetectionError(RuntimeError):
    """The platform refused to tell us whether the process is elevated."""


def is_running_as_admin() -> bool:
    """Return True when the process can open a capture handle.

    Windows asks the shell for the token elevation; POSIX checks for
    effective uid 0.
    """
    if sys.platform == "win32":
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())  # type: ignore[attr-defined]
        except (AttributeError, OSError) as exc:
            raise PrivilegeDetectionError(f"Failed to detect administrator privileges: {exc}") from exc
    geteuid = getattr(os, "geteuid", None)
    if geteuid is None:
        raise PrivilegeDetectionError("Failed to detect administrator privileges: no effective uid")
    return geteuid() == 0


def _has_any(directory: Path, names: Iterable[str]) -> bool:
    return any((directory / name).exists() for name in names)


def _system_drivers_dir() -> Path:
    system_root = os.environ.get("SystemRoot", r"C:\Windows")
    return Path(system_root) / "System32" / "drivers"


def find_capture_driver(
    search_dirs: Iterable[Path] = (),
    *,
    platform: Optional[str] = None,
    application_dir: Optional[Path] = None,
    system_drivers_dir: Optional[Path] = None,
) -> bool:
    """Return True when the WinDivert driver is installed.

    A local install needs the user-mode library next to its ``.sys`` file;
    a global install only needs the ``.sys`` under System32/drivers.
    Non-Windows hosts are development machines and report the driver present.
    """
    platform = platform or sys.platform
    if platform != "win32":
        return True

    candidates = [application_dir or APPLICATION_DIR, *search_dirs]
    for directory in candidates:
        if _has_any(directory, DRIVER_LIBRARIES) and _has_any(directory, DRIVER_SYS_FILES):
            logger.debug("Capture driver found in %s", directory)
            return True

    drivers_dir = system_drivers_dir or _system_drivers_dir()
    if _has_any(drivers_dir, DRIVER_SYS_FILES):
        logger.debug("Capture driver found in %s", drivers_dir)
        return True

    logger.info("Capture driver not found (searched %d location(s))", len(candidates) + 1)
    return False


__all__ = ["PrivilegeDetectionError", "find_capture_driver", "is_running_as_admin"]
