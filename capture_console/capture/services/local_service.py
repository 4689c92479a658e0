"""In-process capture service holding the session bookkeeping.

The packet engine itself lives elsewhere; it feeds this service through
:meth:`LocalCaptureService.record_packet`. The REST server exposes an
instance of this class so the console can be exercised end to end.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from datetime import datetime, timezone
from typing import Callable, Deque, Optional, Tuple

from capture_console.core.logging_utils import LoggerLike, ensure_structured_logger

from ..domain import CapabilitySnapshot, CaptureStatus
from ..domain.constants import DRIVER_NAME, DRIVER_URL, DRIVER_VERSION, THROUGHPUT_WINDOW_SECONDS
from .capture_service import CaptureServiceError
from .platform_checks import PrivilegeDetectionError, find_capture_driver, is_running_as_admin

ALREADY_RUNNING_MESSAGE = "Capture is already running"
NOT_RUNNING_MESSAGE = "Capture is not running"
REQUIRES_ADMIN_MESSAGE = (
    "Application requires Administrator privileges to capture network traffic. "
    "Please restart the application as Administrator."
)
DRIVER_NOT_FOUND_MESSAGE = (
    f"{DRIVER_NAME} driver not found. Please download {DRIVER_NAME} {DRIVER_VERSION} from "
    f"{DRIVER_URL} and place WinDivert.dll and WinDivert64.sys in the application directory."
)


class LocalCaptureService:
    """CaptureService implementation living in the same process."""

    def __init__(
        self,
        *,
        admin_check: Callable[[], bool] = is_running_as_admin,
        driver_check: Callable[[], bool] = find_capture_driver,
        clock: Callable[[], float] = time.monotonic,
        window_seconds: float = THROUGHPUT_WINDOW_SECONDS,
        logger: LoggerLike = None,
    ) -> None:
        self._admin_check = admin_check
        self._driver_check = driver_check
        self._clock = clock
        self._window = max(0.001, float(window_seconds))
        self.logger = ensure_structured_logger(logger, fallback_name="Capture").getChild("LocalService")
        self._lock = asyncio.Lock()
        self._running = False
        self._packet_count = 0
        self._last_packet_time: Optional[datetime] = None
        self._recent: Deque[Tuple[float, int]] = deque()

    @property
    def is_running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # CaptureService operations

    async def check_capability(self) -> CapabilitySnapshot:
        is_admin = await asyncio.to_thread(self._detect_admin)
        driver_found = await asyncio.to_thread(self._driver_check)
        return CapabilitySnapshot(is_admin=is_admin, driver_found=bool(driver_found))

    async def start_capture(self) -> CaptureStatus:
        async with self._lock:
            if self._running:
                raise CaptureServiceError(ALREADY_RUNNING_MESSAGE, code="ALREADY_RUNNING", status=409)
            if not await asyncio.to_thread(self._detect_admin):
                raise CaptureServiceError(REQUIRES_ADMIN_MESSAGE, code="REQUIRES_ADMIN", status=403)
            if not await asyncio.to_thread(self._driver_check):
                raise CaptureServiceError(DRIVER_NOT_FOUND_MESSAGE, code="DRIVER_NOT_FOUND", status=503)

            self._running = True
            self._packet_count = 0
            self._last_packet_time = None
            self._recent.clear()
            self.logger.info("Capture session started")
            return self._snapshot()

    async def stop_capture(self) -> CaptureStatus:
        async with self._lock:
            if not self._running:
                raise CaptureServiceError(NOT_RUNNING_MESSAGE, code="NOT_RUNNING", status=409)
            self._running = False
            self.logger.info("Capture session stopped after %d packet(s)", self._packet_count)
            return self._snapshot()

    async def get_capture_status(self) -> CaptureStatus:
        async with self._lock:
            return self._snapshot()

    # ------------------------------------------------------------------
    # Engine feed

    def record_packet(self, length: int, timestamp: Optional[datetime] = None) -> bool:
        """Account one captured packet; ignored while no session is running."""
        if not self._running:
            return False
        if length < 0:
            raise ValueError(f"packet length must be >= 0, got {length}")
        self._packet_count += 1
        self._last_packet_time = timestamp or datetime.now(timezone.utc)
        now = self._clock()
        self._recent.append((now, length))
        self._prune_window(now)
        return True

    # ------------------------------------------------------------------
    # Internal helpers

    def _detect_admin(self) -> bool:
        try:
            return bool(self._admin_check())
        except PrivilegeDetectionError as exc:
            raise CaptureServiceError(str(exc), code="PRIVILEGE_DETECTION_FAILED", status=500) from exc

    def _prune_window(self, now: float) -> None:
        cutoff = now - self._window
        while self._recent and self._recent[0][0] < cutoff:
            self._recent.popleft()

    def _bytes_per_second(self) -> float:
        self._prune_window(self._clock())
        return sum(length for _, length in self._recent) / self._window

    def _snapshot(self) -> CaptureStatus:
        last = self._last_packet_time
        return CaptureStatus(
            is_running=self._running,
            packet_count=self._packet_count,
            bytes_per_second=self._bytes_per_second() if self._running else 0.0,
            last_packet_time=last.isoformat() if last is not None else None,
        )


__all__ = [
    "ALREADY_RUNNING_MESSAGE",
    "DRIVER_NOT_FOUND_MESSAGE",
    "LocalCaptureService",
    "NOT_RUNNING_MESSAGE",
    "REQUIRES_ADMIN_MESSAGE",
]
