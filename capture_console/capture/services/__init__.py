from .capability_probe import CapabilityProbe
from .capture_service import CaptureService, CaptureServiceError
from .http_client import HttpCaptureService
from .local_service import LocalCaptureService

__all__ = [
    "CapabilityProbe",
    "CaptureService",
    "CaptureServiceError",
    "HttpCaptureService",
    "LocalCaptureService",
]
