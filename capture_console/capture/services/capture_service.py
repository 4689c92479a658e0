"""Interface of the external capture service consumed by the controller."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..domain import CapabilitySnapshot, CaptureStatus


class CaptureServiceError(Exception):
    """A capture service operation failed; ``message`` is user-presentable."""

    def __init__(self, message: str, *, code: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


@runtime_checkable
class CaptureService(Protocol):
    """Four asynchronous operations; each raises CaptureServiceError on failure."""

    async def check_capability(self) -> CapabilitySnapshot: ...

    async def start_capture(self) -> CaptureStatus: ...

    async def stop_capture(self) -> CaptureStatus: ...

    async def get_capture_status(self) -> CaptureStatus: ...


__all__ = ["CaptureService", "CaptureServiceError"]
