"""aiohttp REST server exposing a capture service on localhost.

This is the engine side of the REST contract consumed by
``HttpCaptureService``; it wraps a ``LocalCaptureService`` by default.
"""

import argparse
import asyncio
from typing import Optional

from aiohttp import web

from capture_console.cli.common import (
    add_common_cli_arguments,
    install_exception_handlers,
    install_signal_handlers,
    positive_int,
)
from capture_console.core.logging_config import configure_logging, resolve_log_level
from capture_console.core.logging_utils import get_module_logger

from ..services import CaptureService, LocalCaptureService
from .middleware import error_handling_middleware, localhost_only_middleware
from .routes import SERVICE_KEY, setup_capture_routes

logger = get_module_logger("Capture.APIServer")

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8765


def create_app(service: CaptureService, *, localhost_only: bool = True) -> web.Application:
    """Create and configure the aiohttp application."""
    middlewares = [error_handling_middleware]
    if localhost_only:
        middlewares.insert(0, localhost_only_middleware)

    app = web.Application(middlewares=middlewares)
    app[SERVICE_KEY] = service
    setup_capture_routes(app)
    return app


class CaptureServiceServer:
    """Runs the capture REST API alongside an existing asyncio loop."""

    def __init__(
        self,
        service: CaptureService,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        localhost_only: bool = True,
    ) -> None:
        self.service = service
        self.host = host
        self.port = port
        self.localhost_only = localhost_only

        self._runner: Optional[web.AppRunner] = None
        self._site: Optional[web.TCPSite] = None
        self._running = False

    async def start(self) -> None:
        """Start the API server (non-blocking)."""
        if self._running:
            logger.warning("Capture service API already running")
            return

        app = create_app(self.service, localhost_only=self.localhost_only)
        self._runner = web.AppRunner(app)
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.host, self.port)
        await self._site.start()

        self._running = True
        logger.info("Capture service API listening on %s", self.url)

    async def stop(self) -> None:
        """Stop the API server gracefully."""
        if not self._running:
            return

        logger.info("Stopping capture service API...")
        if self._site:
            await self._site.stop()
            self._site = None
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
        self._running = False
        logger.info("Capture service API stopped")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="capture-service",
        description="Serve the in-process capture service over the local REST API",
    )
    parser.add_argument("--host", type=str, default=DEFAULT_HOST, help="Address to bind to")
    parser.add_argument("--port", type=positive_int, default=DEFAULT_PORT, help="Port to bind to")
    parser.add_argument(
        "--allow-remote",
        action="store_true",
        help="Accept requests from non-loopback addresses",
    )
    add_common_cli_arguments(parser, include_config=False)
    return parser.parse_args(argv)


async def serve(argv: Optional[list[str]] = None) -> None:
    args = parse_args(argv)
    effective_level, invalid_level = resolve_log_level(args.log_level)
    configure_logging(level=effective_level, console=args.console_output, log_file=args.log_file)
    if invalid_level:
        logger.warning("Unknown log level '%s'; defaulting to %s", args.log_level, effective_level)

    loop = asyncio.get_running_loop()
    install_exception_handlers(logger, loop)

    server = CaptureServiceServer(
        LocalCaptureService(logger=logger),
        host=args.host,
        port=args.port,
        localhost_only=not args.allow_remote,
    )
    stop_event = asyncio.Event()

    async def request_stop() -> None:
        logger.info("Shutdown signal received")
        stop_event.set()

    install_signal_handlers(request_stop, loop, stop_event)

    await server.start()
    try:
        await stop_event.wait()
    finally:
        await server.stop()


def main(argv: Optional[list[str]] = None) -> None:
    try:
        asyncio.run(serve(argv))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
