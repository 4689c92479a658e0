"""Error taxonomy for capture session control.

Every failure coming back from the capture service is converted into one of
these kinds at the call site. ``PollFailed`` is diagnostic only; the others
are shown to the user.
"""

from __future__ import annotations


class CaptureControlError(Exception):
    """Base class for capture control failures."""

    user_visible = True
    title = "Capture error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class CapabilityCheckFailed(CaptureControlError):
    """The privilege/driver check could not be completed."""

    title = "Capability check failed"


class CapabilityError(CaptureControlError):
    """Start was requested without an eligible capability snapshot."""

    title = "Cannot start capture"


class StartFailed(CaptureControlError):
    """The capture service refused or failed to start a session."""

    title = "Failed to start capture"


class StopFailed(CaptureControlError):
    """The capture service refused or failed to stop the session."""

    title = "Failed to stop capture"


class PollFailed(CaptureControlError):
    """A periodic status query failed."""

    user_visible = False
    title = "Status poll failed"


__all__ = [
    "CapabilityCheckFailed",
    "CapabilityError",
    "CaptureControlError",
    "PollFailed",
    "StartFailed",
    "StopFailed",
]
