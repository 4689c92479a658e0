"""Domain models and constants for the capture module."""

from .constants import DEFAULT_POLL_INTERVAL, LAST_PACKET_PLACEHOLDER
from .entities import CapabilitySnapshot, CaptureStatus
from .errors import (
    CapabilityCheckFailed,
    CapabilityError,
    CaptureControlError,
    PollFailed,
    StartFailed,
    StopFailed,
)
from .render import (
    CapabilityDisplayState,
    CapabilityRender,
    PanelRenderModel,
    StatusRender,
    build_panel_model,
)

__all__ = [
    "CapabilityCheckFailed",
    "CapabilityDisplayState",
    "CapabilityError",
    "CapabilityRender",
    "CapabilitySnapshot",
    "CaptureControlError",
    "CaptureStatus",
    "DEFAULT_POLL_INTERVAL",
    "LAST_PACKET_PLACEHOLDER",
    "PanelRenderModel",
    "PollFailed",
    "StartFailed",
    "StatusRender",
    "StopFailed",
    "build_panel_model",
]
