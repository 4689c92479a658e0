"""One-shot capability check against the capture service."""

from __future__ import annotations

from capture_console.core.logging_utils import LoggerLike, ensure_structured_logger

from ..domain import CapabilityCheckFailed, CapabilitySnapshot
from .capture_service import CaptureService, CaptureServiceError


class CapabilityProbe:
    """Ask the service whether this host may capture."""

    def __init__(self, service: CaptureService, logger: LoggerLike = None) -> None:
        self.service = service
        self.logger = ensure_structured_logger(logger, fallback_name="Capture").getChild("Probe")

    async def check(self) -> CapabilitySnapshot:
        try:
            snapshot = await self.service.check_capability()
        except CaptureServiceError as exc:
            self.logger.warning("Capability check failed: %s", exc.message)
            raise CapabilityCheckFailed(f"Error checking privileges: {exc.message}") from exc
        self.logger.info(
            "Capability: admin=%s driver=%s can_capture=%s",
            snapshot.is_admin,
            snapshot.driver_found,
            snapshot.can_capture,
        )
        return snapshot


__all__ = ["CapabilityProbe"]
