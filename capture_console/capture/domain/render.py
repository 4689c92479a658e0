"""Render models pushed to the view, plus the display formatting rules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .constants import ADMIN_GUIDANCE, DRIVER_GUIDANCE, LAST_PACKET_PLACEHOLDER
from .entities import CapabilitySnapshot, CaptureStatus


def format_packet_count(count: int) -> str:
    return f"{count:,}"


def format_throughput(bytes_per_second: float) -> str:
    return f"{bytes_per_second:.2f}"


def format_last_packet(value: str | None) -> str:
    return value or LAST_PACKET_PLACEHOLDER


class CapabilityDisplayState(Enum):
    LOADING = "loading"
    READY = "ready"
    ERROR = "error"


@dataclass(slots=True, frozen=True)
class CapabilityRender:
    state: CapabilityDisplayState
    is_admin: bool | None = None
    driver_found: bool | None = None
    can_capture: bool = False
    guidance: tuple[str, ...] = ()
    error_message: str | None = None

    @classmethod
    def loading(cls) -> "CapabilityRender":
        return cls(state=CapabilityDisplayState.LOADING)

    @classmethod
    def failed(cls, message: str) -> "CapabilityRender":
        return cls(state=CapabilityDisplayState.ERROR, error_message=message)

    @classmethod
    def from_snapshot(cls, snapshot: CapabilitySnapshot) -> "CapabilityRender":
        guidance: list[str] = []
        if not snapshot.is_admin:
            guidance.append(ADMIN_GUIDANCE)
        if not snapshot.driver_found:
            guidance.append(DRIVER_GUIDANCE)
        return cls(
            state=CapabilityDisplayState.READY,
            is_admin=snapshot.is_admin,
            driver_found=snapshot.driver_found,
            can_capture=snapshot.can_capture,
            guidance=tuple(guidance),
        )


@dataclass(slots=True, frozen=True)
class StatusRender:
    running: bool
    state_label: str
    packet_count: str
    throughput: str
    last_packet: str

    @classmethod
    def from_status(cls, status: CaptureStatus) -> "StatusRender":
        return cls(
            running=status.is_running,
            state_label="Running" if status.is_running else "Stopped",
            packet_count=format_packet_count(status.packet_count),
            throughput=format_throughput(status.bytes_per_second),
            last_packet=format_last_packet(status.last_packet_time),
        )


@dataclass(slots=True, frozen=True)
class PanelRenderModel:
    """Everything the view needs after a state change."""

    capability: CapabilityRender
    status: StatusRender | None
    start_enabled: bool
    stop_enabled: bool


def build_panel_model(
    capability: CapabilitySnapshot | None,
    status: CaptureStatus | None,
    *,
    capability_error: str | None = None,
) -> PanelRenderModel:
    if capability is not None:
        capability_render = CapabilityRender.from_snapshot(capability)
    elif capability_error is not None:
        capability_render = CapabilityRender.failed(capability_error)
    else:
        capability_render = CapabilityRender.loading()

    running = bool(status and status.is_running)
    can_capture = capability is not None and capability.can_capture
    return PanelRenderModel(
        capability=capability_render,
        status=StatusRender.from_status(status) if status is not None else None,
        start_enabled=can_capture and not running,
        stop_enabled=running,
    )


__all__ = [
    "CapabilityDisplayState",
    "CapabilityRender",
    "PanelRenderModel",
    "StatusRender",
    "build_panel_model",
    "format_last_packet",
    "format_packet_count",
    "format_throughput",
]
