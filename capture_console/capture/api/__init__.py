"""Local REST API for the capture service."""

from .routes import HEALTH_PATH, SERVICE_KEY, setup_capture_routes
from .server import CaptureServiceServer, create_app

__all__ = [
    "CaptureServiceServer",
    "HEALTH_PATH",
    "SERVICE_KEY",
    "create_app",
    "setup_capture_routes",
]
