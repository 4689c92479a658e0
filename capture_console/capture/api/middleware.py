"""Security and error handling middleware for the capture service API."""

from typing import Callable, Optional

from aiohttp import web

from capture_console.core.logging_utils import get_module_logger

from ..services import CaptureServiceError

logger = get_module_logger("Capture.APIMiddleware")

LOCALHOST_IPS = frozenset({"127.0.0.1", "::1", "::ffff:127.0.0.1"})


def create_error_response(
    code: str,
    message: str,
    status: int = 400,
    details: Optional[dict] = None,
) -> web.Response:
    """Create standardized error response."""
    error = {"error": {"code": code, "message": message}, "status": status}
    if details:
        error["error"]["details"] = details
    return web.json_response(error, status=status)


@web.middleware
async def localhost_only_middleware(request: web.Request, handler: Callable) -> web.StreamResponse:
    """Reject requests from any IP other than the loopback addresses."""
    peername = request.transport.get_extra_info("peername") if request.transport else None
    if peername:
        remote_ip = peername[0]
        if remote_ip not in LOCALHOST_IPS:
            logger.warning("Rejected request from non-localhost IP: %s", remote_ip)
            return create_error_response(
                "ACCESS_DENIED",
                "API access is restricted to localhost only",
                status=403,
            )
    return await handler(request)


@web.middleware
async def error_handling_middleware(request: web.Request, handler: Callable) -> web.StreamResponse:
    """Format every failure as ``{"error": {"code", "message"}, "status"}``."""
    try:
        return await handler(request)
    except CaptureServiceError as e:
        status = e.status or 500
        logger.info("%s %s failed: %s", request.method, request.path, e.message)
        return create_error_response(e.code or "CAPTURE_ERROR", e.message, status=status)
    except web.HTTPException as e:
        return create_error_response(
            e.reason.upper().replace(" ", "_") if e.reason else "HTTP_ERROR",
            e.text or str(e),
            status=e.status,
        )
    except Exception as e:
        logger.exception("Unexpected error handling %s %s", request.method, request.path)
        return create_error_response(
            "INTERNAL_ERROR",
            "An unexpected error occurred",
            status=500,
            details={"type": type(e).__name__, "message": str(e)},
        )


__all__ = [
    "create_error_response",
    "error_handling_middleware",
    "localhost_only_middleware",
]
