"""View port contract and the console rendition used in CLI mode."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from capture_console.core.logging_utils import LoggerLike, ensure_structured_logger

from ..domain import CapabilityDisplayState, CaptureControlError, PanelRenderModel


@runtime_checkable
class ViewPort(Protocol):
    """Push-only sink; the controller never reads from it."""

    def render(self, model: PanelRenderModel) -> None: ...

    def show_error(self, error: CaptureControlError) -> None: ...


def describe_capability(model: PanelRenderModel) -> str:
    capability = model.capability
    if capability.state is CapabilityDisplayState.LOADING:
        return "Loading status..."
    if capability.state is CapabilityDisplayState.ERROR:
        return capability.error_message or "Error checking privileges"
    admin = "Yes" if capability.is_admin else "No"
    driver = "Found" if capability.driver_found else "Not Found"
    return f"Admin: {admin} | WinDivert Driver: {driver}"


def describe_status(model: PanelRenderModel) -> str:
    status = model.status
    if status is None:
        return "No capture session"
    return (
        f"Status: {status.state_label} | Packets Captured: {status.packet_count} | "
        f"Throughput: {status.throughput} bytes/s | Last Packet: {status.last_packet}"
    )


class ConsoleView:
    """Log each render push; used when running without Tk."""

    def __init__(self, logger: LoggerLike = None) -> None:
        self.logger = ensure_structured_logger(logger, fallback_name="Capture").getChild("View")
        self._last_lines: tuple[str, ...] = ()

    def render(self, model: PanelRenderModel) -> None:
        lines = (describe_capability(model), *model.capability.guidance, describe_status(model))
        # Poll ticks re-render every period; only log what changed.
        if lines == self._last_lines:
            return
        self._last_lines = lines
        for line in lines:
            self.logger.info("%s", line)
        self.logger.debug("Controls: start=%s stop=%s", model.start_enabled, model.stop_enabled)

    def show_error(self, error: CaptureControlError) -> None:
        self.logger.error("%s: %s", error.title, error.message)


__all__ = ["ConsoleView", "ViewPort", "describe_capability", "describe_status"]
