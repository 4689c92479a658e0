from .application import CaptureApp, build_service
from .command_router import CommandRouter
from .controller import CaptureSessionController
from .poller import StatusPoller
from .scheduler import AsyncioScheduler, PeriodicScheduler, ScheduledHandle

__all__ = [
    "AsyncioScheduler",
    "CaptureApp",
    "CaptureSessionController",
    "CommandRouter",
    "PeriodicScheduler",
    "ScheduledHandle",
    "StatusPoller",
    "build_service",
]
