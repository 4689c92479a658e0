"""Cancellable periodic scheduling used by the status poller."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Protocol

from capture_console.core.asyncio_utils import create_logged_task
from capture_console.core.logging_utils import LoggerLike, ensure_structured_logger

TickCallback = Callable[[], Awaitable[object]]


class ScheduledHandle(Protocol):
    @property
    def active(self) -> bool: ...

    def cancel(self) -> None: ...


class PeriodicScheduler(Protocol):
    def call_every(
        self,
        interval: float,
        callback: TickCallback,
        *,
        name: Optional[str] = None,
    ) -> ScheduledHandle: ...


class _TaskHandle:
    __slots__ = ("_task", "_cancelled")

    def __init__(self, task: asyncio.Task) -> None:
        self._task = task
        self._cancelled = False

    @property
    def task(self) -> asyncio.Task:
        return self._task

    @property
    def active(self) -> bool:
        return not self._cancelled and not self._task.done()

    def cancel(self) -> None:
        self._cancelled = True
        self._task.cancel()


class AsyncioScheduler:
    """Run a callback every ``interval`` seconds on the running loop.

    The period is measured from the end of one tick to the start of the next,
    so a slow tick never overlaps the following one. A tick that raises is
    logged and the schedule keeps going.
    """

    def __init__(self, logger: LoggerLike = None) -> None:
        self.logger = ensure_structured_logger(logger, fallback_name="Capture").getChild("Scheduler")

    def call_every(
        self,
        interval: float,
        callback: TickCallback,
        *,
        name: Optional[str] = None,
    ) -> _TaskHandle:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        label = name or getattr(callback, "__name__", "periodic")
        task = create_logged_task(
            self._run(interval, callback, label),
            logger=self.logger,
            context=label,
        )
        return _TaskHandle(task)

    async def _run(self, interval: float, callback: TickCallback, label: str) -> None:
        self.logger.debug("Periodic task %s running every %.3fs", label, interval)
        try:
            while True:
                await asyncio.sleep(interval)
                try:
                    await callback()
                except Exception:
                    self.logger.exception("Periodic task %s tick failed", label)
        finally:
            self.logger.debug("Periodic task %s stopped", label)


__all__ = ["AsyncioScheduler", "PeriodicScheduler", "ScheduledHandle", "TickCallback"]
