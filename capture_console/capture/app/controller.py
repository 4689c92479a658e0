"""Capture session state controller.

Owns the capability snapshot and the latest capture status, gates
``start()`` on capability, drives start/stop against the capture service
and owns the status poller. Every successful mutation is followed by a
render push to the view.

Overlapping requests: a ``start()`` or ``stop()`` issued while another one
is still waiting on the service is rejected (returns False, no service
call, nothing mutated).
"""

from __future__ import annotations

import asyncio
from typing import Optional

from capture_console.core.logging_utils import LoggerLike, ensure_structured_logger

from ..domain import (
    DEFAULT_POLL_INTERVAL,
    CapabilityCheckFailed,
    CapabilityError,
    CapabilitySnapshot,
    CaptureControlError,
    CaptureStatus,
    PanelRenderModel,
    StartFailed,
    StopFailed,
    build_panel_model,
)
from ..services import CapabilityProbe, CaptureService, CaptureServiceError
from ..ui.view import ViewPort
from .poller import StatusPoller
from .scheduler import AsyncioScheduler, PeriodicScheduler

CAPABILITY_REQUIRED_MESSAGE = "Cannot start capture: Admin privileges and WinDivert driver required"
CAPABILITY_UNKNOWN_MESSAGE = "Cannot start capture: privileges have not been checked successfully"


class CaptureSessionController:
    """High-level coordinator for one capture console."""

    def __init__(
        self,
        service: CaptureService,
        view: ViewPort,
        *,
        scheduler: Optional[PeriodicScheduler] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        probe: Optional[CapabilityProbe] = None,
        logger: LoggerLike = None,
    ) -> None:
        base_logger = ensure_structured_logger(logger, fallback_name="Capture")
        self.logger = base_logger.getChild("Controller")
        self.service = service
        self.view = view
        self.probe = probe or CapabilityProbe(service, base_logger)
        self.poller = StatusPoller(
            service,
            self._apply_status,
            scheduler=scheduler or AsyncioScheduler(base_logger),
            interval=poll_interval,
            logger=base_logger,
        )
        self._capability: Optional[CapabilitySnapshot] = None
        self._capability_error: Optional[str] = None
        self._status: Optional[CaptureStatus] = None
        self._transition_lock = asyncio.Lock()
        self.last_error: Optional[CaptureControlError] = None

    # ------------------------------------------------------------------
    # State accessors

    @property
    def capability(self) -> Optional[CapabilitySnapshot]:
        return self._capability

    @property
    def status(self) -> Optional[CaptureStatus]:
        return self._status

    @property
    def can_capture(self) -> bool:
        return self._capability is not None and self._capability.can_capture

    @property
    def polling_active(self) -> bool:
        return self.poller.active

    @property
    def busy(self) -> bool:
        return self._transition_lock.locked()

    def render_model(self) -> PanelRenderModel:
        return build_panel_model(
            self._capability,
            self._status,
            capability_error=self._capability_error,
        )

    # ------------------------------------------------------------------
    # Lifecycle

    async def initialize(self) -> bool:
        self.render()
        return await self.refresh_capability()

    async def refresh_capability(self) -> bool:
        """Query capability and replace the snapshot; a failure clears it."""
        try:
            snapshot = await self.probe.check()
        except CapabilityCheckFailed as error:
            self._capability = None
            self._capability_error = error.message
            self.last_error = error
            self.render()
            return False
        self._capability = snapshot
        self._capability_error = None
        self.render()
        return True

    def shutdown(self) -> None:
        self.poller.deactivate()

    # ------------------------------------------------------------------
    # Capture transitions

    async def start(self) -> bool:
        capability = self._capability
        if capability is None:
            self._report(CapabilityError(CAPABILITY_UNKNOWN_MESSAGE))
            return False
        if not capability.can_capture:
            self._report(CapabilityError(CAPABILITY_REQUIRED_MESSAGE))
            return False
        if self._transition_lock.locked():
            self.logger.debug("Start ignored; a start/stop request is already in flight")
            return False

        async with self._transition_lock:
            self.logger.debug("Requesting capture start")
            try:
                status = await self.service.start_capture()
            except CaptureServiceError as exc:
                self._report(StartFailed(f"Failed to start capture: {exc.message}"), cause=exc)
                return False
            self._apply_status(status)
            self.poller.activate()
            self.logger.info("Capture started (running=%s)", status.is_running)
            return True

    async def stop(self) -> bool:
        if self._transition_lock.locked():
            self.logger.debug("Stop ignored; a start/stop request is already in flight")
            return False

        async with self._transition_lock:
            self.logger.debug("Requesting capture stop")
            try:
                status = await self.service.stop_capture()
            except CaptureServiceError as exc:
                # Polling is left as-is; the service may still be capturing.
                self._report(StopFailed(f"Failed to stop capture: {exc.message}"), cause=exc)
                return False
            self._apply_status(status)
            self.poller.deactivate()
            self.logger.info("Capture stopped (%d packet(s))", status.packet_count)
            return True

    # ------------------------------------------------------------------
    # Rendering + reporting

    def render(self) -> None:
        model = self.render_model()
        try:
            self.view.render(model)
        except Exception:
            self.logger.exception("View render failed")

    def _apply_status(self, status: CaptureStatus) -> None:
        self._status = status
        self.render()

    def _report(self, error: CaptureControlError, *, cause: Optional[BaseException] = None) -> None:
        if cause is not None:
            error.__cause__ = cause
        self.last_error = error
        self.logger.warning("%s", error.message)
        try:
            self.view.show_error(error)
        except Exception:
            self.logger.exception("View error notification failed")


__all__ = [
    "CAPABILITY_REQUIRED_MESSAGE",
    "CAPABILITY_UNKNOWN_MESSAGE",
    "CaptureSessionController",
]
