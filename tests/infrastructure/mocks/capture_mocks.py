"""Fakes for capture controller testing.

Provides a scriptable capture service, a scheduler whose ticks are fired
manually, and a view that records what it was asked to show.
"""

from __future__ import annotations

import asyncio
from collections import Counter, deque
from typing import Awaitable, Callable, Deque, List, Optional, Union

from capture_console.capture.domain import (
    CapabilitySnapshot,
    CaptureControlError,
    CaptureStatus,
    PanelRenderModel,
)
from capture_console.capture.services import CaptureServiceError

StatusScript = Union[CaptureStatus, CaptureServiceError]


class FakeCaptureService:
    """In-memory CaptureService with per-operation failure injection.

    ``*_error`` attributes make the matching call raise. ``*_gate`` events,
    when set to an unset ``asyncio.Event``, hold the call in flight until
    the test sets them. ``status_script`` entries are returned (or raised)
    by ``get_capture_status`` in order before falling back to live state.
    """

    def __init__(
        self,
        capability: Optional[CapabilitySnapshot] = None,
    ) -> None:
        self.capability = capability or CapabilitySnapshot(is_admin=True, driver_found=True)
        self.running = False
        self.packet_count = 0
        self.bytes_per_second = 0.0
        self.last_packet_time: Optional[str] = None
        self.calls: Counter = Counter()

        self.capability_error: Optional[CaptureServiceError] = None
        self.start_error: Optional[CaptureServiceError] = None
        self.stop_error: Optional[CaptureServiceError] = None
        self.status_error: Optional[CaptureServiceError] = None

        self.start_gate: Optional[asyncio.Event] = None
        self.stop_gate: Optional[asyncio.Event] = None
        self.status_gate: Optional[asyncio.Event] = None

        self.status_script: Deque[StatusScript] = deque()

    def current_status(self) -> CaptureStatus:
        return CaptureStatus(
            is_running=self.running,
            packet_count=self.packet_count,
            bytes_per_second=self.bytes_per_second,
            last_packet_time=self.last_packet_time,
        )

    async def check_capability(self) -> CapabilitySnapshot:
        self.calls["check_capability"] += 1
        if self.capability_error is not None:
            raise self.capability_error
        return self.capability

    async def start_capture(self) -> CaptureStatus:
        self.calls["start_capture"] += 1
        if self.start_gate is not None:
            await self.start_gate.wait()
        if self.start_error is not None:
            raise self.start_error
        self.running = True
        self.packet_count = 0
        self.bytes_per_second = 0.0
        self.last_packet_time = None
        return self.current_status()

    async def stop_capture(self) -> CaptureStatus:
        self.calls["stop_capture"] += 1
        if self.stop_gate is not None:
            await self.stop_gate.wait()
        if self.stop_error is not None:
            raise self.stop_error
        self.running = False
        self.bytes_per_second = 0.0
        return self.current_status()

    async def get_capture_status(self) -> CaptureStatus:
        self.calls["get_capture_status"] += 1
        if self.status_gate is not None:
            await self.status_gate.wait()
        if self.status_script:
            item = self.status_script.popleft()
            if isinstance(item, CaptureServiceError):
                raise item
            return item
        if self.status_error is not None:
            raise self.status_error
        return self.current_status()


TickCallback = Callable[[], Awaitable[object]]


class ManualHandle:
    """Handle returned by ManualScheduler.call_every."""

    def __init__(self, interval: float, callback: TickCallback, name: Optional[str]) -> None:
        self.interval = interval
        self.callback = callback
        self.name = name
        self.active = True
        self.cancel_count = 0

    def cancel(self) -> None:
        self.cancel_count += 1
        self.active = False


class ManualScheduler:
    """PeriodicScheduler that only ticks when the test calls ``fire``."""

    def __init__(self) -> None:
        self.handles: List[ManualHandle] = []

    def call_every(
        self,
        interval: float,
        callback: TickCallback,
        *,
        name: Optional[str] = None,
    ) -> ManualHandle:
        handle = ManualHandle(interval, callback, name)
        self.handles.append(handle)
        return handle

    @property
    def active_handles(self) -> List[ManualHandle]:
        return [handle for handle in self.handles if handle.active]

    async def fire(self, times: int = 1) -> None:
        """Run one tick of every active schedule ``times`` times."""
        for _ in range(times):
            for handle in self.active_handles:
                await handle.callback()


class RecordingView:
    """ViewPort that keeps every model and error it receives."""

    def __init__(self) -> None:
        self.models: List[PanelRenderModel] = []
        self.errors: List[CaptureControlError] = []

    def render(self, model: PanelRenderModel) -> None:
        self.models.append(model)

    def show_error(self, error: CaptureControlError) -> None:
        self.errors.append(error)

    @property
    def last(self) -> PanelRenderModel:
        assert self.models, "view was never rendered"
        return self.models[-1]


__all__ = [
    "FakeCaptureService",
    "ManualHandle",
    "ManualScheduler",
    "RecordingView",
]
