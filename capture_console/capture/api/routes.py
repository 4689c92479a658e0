"""Capture service API routes."""

from aiohttp import web

from ..services.http_client import CAPABILITY_PATH, START_PATH, STATUS_PATH, STOP_PATH

HEALTH_PATH = "/api/v1/health"
SERVICE_KEY = "capture_service"


def setup_capture_routes(app: web.Application) -> None:
    """Register capture routes; ``app[SERVICE_KEY]`` must hold the service."""
    app.router.add_get(CAPABILITY_PATH, capability_handler)
    app.router.add_post(START_PATH, start_capture_handler)
    app.router.add_post(STOP_PATH, stop_capture_handler)
    app.router.add_get(STATUS_PATH, capture_status_handler)
    app.router.add_get(HEALTH_PATH, health_handler)


async def capability_handler(request: web.Request) -> web.Response:
    """GET /api/v1/capture/capability - Privilege and driver check."""
    service = request.app[SERVICE_KEY]
    snapshot = await service.check_capability()
    return web.json_response(snapshot.to_payload())


async def start_capture_handler(request: web.Request) -> web.Response:
    """POST /api/v1/capture/start - Begin a capture session."""
    service = request.app[SERVICE_KEY]
    status = await service.start_capture()
    return web.json_response(status.to_payload())


async def stop_capture_handler(request: web.Request) -> web.Response:
    """POST /api/v1/capture/stop - End the running capture session."""
    service = request.app[SERVICE_KEY]
    status = await service.stop_capture()
    return web.json_response(status.to_payload())


async def capture_status_handler(request: web.Request) -> web.Response:
    """GET /api/v1/capture/status - Live capture counters."""
    service = request.app[SERVICE_KEY]
    status = await service.get_capture_status()
    return web.json_response(status.to_payload())


async def health_handler(request: web.Request) -> web.Response:
    """GET /api/v1/health - Liveness probe."""
    service = request.app[SERVICE_KEY]
    return web.json_response({"status": "ok", "capturing": bool(getattr(service, "is_running", False))})


__all__ = ["HEALTH_PATH", "SERVICE_KEY", "setup_capture_routes"]
