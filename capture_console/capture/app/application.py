"""Capture console application composed of small managers.

The app wires a capture service backend, the session controller and a
view together, and owns the background tasks spawned on behalf of the UI.
"""

from __future__ import annotations

import asyncio
import json
import sys
from functools import partial
from typing import Any, Awaitable, Optional, TextIO

from capture_console.core.asyncio_utils import BackgroundTaskManager
from capture_console.core.logging_utils import LoggerLike, ensure_structured_logger

from ..config import CaptureSettings
from ..services import CaptureService, HttpCaptureService, LocalCaptureService
from ..services.platform_checks import find_capture_driver
from ..ui.view import ViewPort
from .command_router import CommandRouter
from .controller import CaptureSessionController
from .scheduler import PeriodicScheduler

CONSOLE_HELP = "Commands: start, stop, status, recheck, quit"
STDIN_POLL_TIMEOUT = 0.2


def build_service(settings: CaptureSettings, logger: LoggerLike = None) -> CaptureService:
    """Create the capture service backend selected by ``settings.backend``."""
    if settings.backend == "local":
        return LocalCaptureService(
            driver_check=partial(find_capture_driver, settings.driver_dirs),
            logger=logger,
        )
    return HttpCaptureService(
        settings.service_url,
        request_timeout=settings.request_timeout,
        logger=logger,
    )


def _poll_stream_line(stream: TextIO, timeout: float) -> Optional[str]:
    """Read one line, returning None when nothing arrived within ``timeout``.

    Uses select() on POSIX so a pending read never blocks shutdown. Windows
    (and streams without a file descriptor) fall back to a blocking readline.
    """
    if sys.platform != "win32":
        try:
            stream.fileno()
        except (AttributeError, OSError, ValueError):
            pass
        else:
            import select

            readable, _, _ = select.select([stream], [], [], timeout)
            if not readable:
                return None
    return stream.readline()


class CaptureApp:
    """High-level coordinator for the capture console."""

    def __init__(
        self,
        settings: CaptureSettings,
        view: ViewPort,
        *,
        service: Optional[CaptureService] = None,
        scheduler: Optional[PeriodicScheduler] = None,
        logger: LoggerLike = None,
    ) -> None:
        self.settings = settings
        base_logger = ensure_structured_logger(logger, fallback_name="Capture")
        self.logger = base_logger.getChild("App")
        self._owns_service = service is None
        self.service = service or build_service(settings, base_logger)
        self.view = view
        self.task_manager = BackgroundTaskManager("CaptureTasks", self.logger)
        self.controller = CaptureSessionController(
            self.service,
            view,
            scheduler=scheduler,
            poll_interval=settings.poll_interval,
            logger=base_logger,
        )
        self.command_router = CommandRouter(base_logger, self)
        self.shutdown_event = asyncio.Event()
        self._shutdown_complete = False

        self.logger.debug("Initialized CaptureApp with settings: %s", settings)

    # ------------------------------------------------------------------
    # Lifecycle

    async def start(self) -> bool:
        self.logger.info("Capture console started (backend=%s)", self.settings.backend)
        return await self.controller.initialize()

    def request_shutdown(self, reason: str) -> None:
        if not self.shutdown_event.is_set():
            self.logger.info("Shutdown requested: %s", reason)
        self.shutdown_event.set()

    async def shutdown(self) -> None:
        if self._shutdown_complete:
            return
        self._shutdown_complete = True
        self.logger.debug("Shutdown requested")
        self.shutdown_event.set()
        self.controller.shutdown()
        await self.task_manager.shutdown(timeout=self.settings.shutdown_timeout)
        if self._owns_service:
            close = getattr(self.service, "close", None)
            if close is not None:
                await close()
        self.logger.info("Capture console shutdown complete")

    # ------------------------------------------------------------------
    # Command/user handling

    async def handle_command(self, command: dict[str, Any]) -> bool:
        return await self.command_router.handle_command(command)

    async def handle_user_action(self, action: str, **kwargs: Any) -> bool:
        return await self.command_router.handle_user_action(action, **kwargs)

    def submit(self, coro: Awaitable[Any], name: str) -> asyncio.Task:
        return self.task_manager.create(coro, name=name)

    async def run_console(self, stream: Optional[TextIO] = None) -> None:
        """Read commands from ``stream`` (stdin) until EOF or shutdown.

        Plain words go to the user action router; lines starting with ``{``
        are parsed as JSON command messages.
        """
        stream = stream or sys.stdin
        self.logger.info("%s", CONSOLE_HELP)
        while not self.shutdown_event.is_set():
            line = await asyncio.to_thread(_poll_stream_line, stream, STDIN_POLL_TIMEOUT)
            if line is None:
                continue
            if line == "":
                self.logger.debug("Command stream closed")
                break
            text = line.strip()
            if not text:
                continue
            try:
                handled = await self._dispatch_line(text)
            except Exception:
                self.logger.exception("Command handler failed [%s]", text[:100])
                continue
            if not handled:
                self.logger.info("Unknown command %r. %s", text[:100], CONSOLE_HELP)

    async def _dispatch_line(self, text: str) -> bool:
        if text.startswith("{"):
            try:
                command = json.loads(text)
            except json.JSONDecodeError:
                self.logger.debug("Failed to parse command: %s", text[:100])
                return False
            if not isinstance(command, dict):
                return False
            return await self.handle_command(command)
        return await self.handle_user_action(text)


__all__ = ["CONSOLE_HELP", "CaptureApp", "build_service"]
