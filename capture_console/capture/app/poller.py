"""Periodic capture-status polling."""

from __future__ import annotations

from typing import Callable, Optional

from capture_console.core.logging_utils import LoggerLike, ensure_structured_logger

from ..domain import DEFAULT_POLL_INTERVAL, CaptureStatus, PollFailed
from ..services import CaptureService, CaptureServiceError
from .scheduler import PeriodicScheduler, ScheduledHandle


class StatusPoller:
    """Fetch capture status on a fixed period while active.

    Only one scheduled handle exists at a time: ``activate`` cancels the
    previous one before creating a new one. Poll failures are logged and the
    loop keeps running.
    """

    def __init__(
        self,
        service: CaptureService,
        on_status: Callable[[CaptureStatus], None],
        *,
        scheduler: PeriodicScheduler,
        interval: float = DEFAULT_POLL_INTERVAL,
        logger: LoggerLike = None,
    ) -> None:
        self.service = service
        self._on_status = on_status
        self._scheduler = scheduler
        self.interval = interval
        self.logger = ensure_structured_logger(logger, fallback_name="Capture").getChild("Poller")
        self._handle: Optional[ScheduledHandle] = None
        self._generation = 0
        self.failure_count = 0
        self.consecutive_failures = 0
        self.last_failure: Optional[PollFailed] = None

    @property
    def active(self) -> bool:
        return self._handle is not None and self._handle.active

    def activate(self) -> None:
        if self._handle is not None:
            self.deactivate()
        self._generation += 1
        self.consecutive_failures = 0
        self._handle = self._scheduler.call_every(self.interval, self.tick, name="capture_status_poll")
        self.logger.debug("Status polling activated (every %.3fs)", self.interval)

    def deactivate(self) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            return
        self._generation += 1
        handle.cancel()
        self.logger.debug("Status polling deactivated")

    async def tick(self) -> bool:
        """Run one poll; returns True when a status was forwarded."""
        generation = self._generation
        try:
            status = await self.service.get_capture_status()
        except CaptureServiceError as exc:
            self._record_failure(PollFailed(f"Failed to get capture status: {exc.message}"))
            return False

        if generation != self._generation or self._handle is None:
            self.logger.debug("Discarding status from a cancelled poll cycle")
            return False

        if self.consecutive_failures:
            self.logger.info("Status polling recovered after %d failure(s)", self.consecutive_failures)
            self.consecutive_failures = 0
        self._on_status(status)
        return True

    def _record_failure(self, error: PollFailed) -> None:
        self.failure_count += 1
        self.consecutive_failures += 1
        self.last_failure = error
        if self.consecutive_failures == 1:
            self.logger.warning("%s", error.message)
        else:
            self.logger.debug("%s (%d in a row)", error.message, self.consecutive_failures)


__all__ = ["StatusPoller"]
