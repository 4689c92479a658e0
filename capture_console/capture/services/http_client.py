"""aiohttp client for the capture engine's local REST API."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Optional, TypeVar

import aiohttp

from capture_console.core.logging_utils import LoggerLike, ensure_structured_logger

from ..domain import CapabilitySnapshot, CaptureStatus
from .capture_service import CaptureServiceError

T = TypeVar("T")

CAPABILITY_PATH = "/api/v1/capture/capability"
START_PATH = "/api/v1/capture/start"
STOP_PATH = "/api/v1/capture/stop"
STATUS_PATH = "/api/v1/capture/status"


class HttpCaptureService:
    """CaptureService backed by HTTP requests.

    The request timeout is the only latency bound in the stack; the
    controller itself never times out a call.
    """

    def __init__(
        self,
        base_url: str,
        *,
        request_timeout: float | None = 10.0,
        session: Optional[aiohttp.ClientSession] = None,
        logger: LoggerLike = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=request_timeout)
        self._session = session
        self._owns_session = session is None
        self.logger = ensure_structured_logger(logger, fallback_name="Capture").getChild("HttpService")

    async def __aenter__(self) -> "HttpCaptureService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
        self._session = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    # ------------------------------------------------------------------
    # CaptureService operations

    async def check_capability(self) -> CapabilitySnapshot:
        return await self._request("GET", CAPABILITY_PATH, CapabilitySnapshot.from_payload)

    async def start_capture(self) -> CaptureStatus:
        return await self._request("POST", START_PATH, CaptureStatus.from_payload)

    async def stop_capture(self) -> CaptureStatus:
        return await self._request("POST", STOP_PATH, CaptureStatus.from_payload)

    async def get_capture_status(self) -> CaptureStatus:
        return await self._request("GET", STATUS_PATH, CaptureStatus.from_payload)

    # ------------------------------------------------------------------
    # Internal helpers

    async def _request(self, method: str, path: str, parse: Callable[[Any], T]) -> T:
        url = f"{self.base_url}{path}"
        session = self._get_session()
        try:
            async with session.request(method, url, timeout=self._timeout) as response:
                try:
                    body = await response.json(content_type=None)
                except ValueError:
                    body = None
                if response.status >= 400:
                    raise self._error_from_body(body, response.status, response.reason)
        except asyncio.TimeoutError as exc:
            raise CaptureServiceError(
                f"Capture service did not respond within {self._timeout.total}s",
                code="TIMEOUT",
            ) from exc
        except aiohttp.ClientError as exc:
            raise CaptureServiceError(f"Capture service unreachable: {exc}", code="UNREACHABLE") from exc

        if body is None:
            raise CaptureServiceError(f"Empty response from {method} {path}", code="BAD_RESPONSE")
        try:
            return parse(body)
        except (TypeError, ValueError) as exc:
            raise CaptureServiceError(
                f"Malformed response from {method} {path}: {exc}",
                code="BAD_RESPONSE",
            ) from exc

    @staticmethod
    def _error_from_body(body: Any, status: int, reason: Optional[str]) -> CaptureServiceError:
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict) and error.get("message"):
            return CaptureServiceError(str(error["message"]), code=error.get("code"), status=status)
        return CaptureServiceError(f"HTTP {status}: {reason or 'request failed'}", status=status)


__all__ = ["HttpCaptureService"]
