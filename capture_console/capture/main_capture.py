"""Capture console entry point."""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys
from functools import partial
from typing import Optional

from capture_console.cli.common import install_exception_handlers, install_signal_handlers
from capture_console.core.async_bridge import AsyncBridge
from capture_console.core.logging_config import configure_logging, resolve_log_level
from capture_console.core.logging_utils import get_module_logger
from capture_console.core.paths import USER_LOGS_DIR, ensure_directories

from .app import CaptureApp
from .config import CaptureSettings, parse_cli_args
from .ui import ConsoleView, TkCaptureView, ViewCallbacks
from .ui import tk_view

DEFAULT_LOG_FILENAME = "capture_console.log"

logger = get_module_logger("Capture")


def _configure_logging(settings: CaptureSettings) -> None:
    effective_level, invalid_level = resolve_log_level(settings.log_level, CaptureSettings().log_level)
    log_file = settings.log_file
    if log_file is None and not settings.console_output:
        ensure_directories()
        log_file = USER_LOGS_DIR / DEFAULT_LOG_FILENAME
    configure_logging(level=effective_level, console=settings.console_output, log_file=log_file)
    if invalid_level:
        logger.warning("Unknown log level '%s'; defaulting to %s", settings.log_level, effective_level)
    logger.debug(
        "Capture console configured (mode=%s, backend=%s, log_file=%s)",
        settings.mode,
        settings.backend,
        log_file,
    )


async def run_cli(settings: CaptureSettings) -> None:
    app = CaptureApp(settings, ConsoleView(logger), logger=logger)
    loop = asyncio.get_running_loop()
    install_exception_handlers(logger, loop)

    async def on_signal() -> None:
        app.request_shutdown("signal received")

    install_signal_handlers(on_signal, loop, app.shutdown_event)

    try:
        await app.start()
        console_task = asyncio.create_task(app.run_console(), name="console_commands")
        shutdown_task = asyncio.create_task(app.shutdown_event.wait(), name="shutdown_wait")
        done, pending = await asyncio.wait(
            {console_task, shutdown_task},
            return_when=asyncio.FIRST_COMPLETED,
        )
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        for task in done:
            task.result()
    finally:
        await app.shutdown()


def run_gui(settings: CaptureSettings) -> int:
    if tk_view.tk is None:
        logger.error("Tk is not available; run with --mode cli")
        return 1

    root = tk_view.tk.Tk()
    bridge = AsyncBridge(root)
    bridge.start()
    install_exception_handlers(logger, bridge.loop)

    app: Optional[CaptureApp] = None

    def dispatch(action: str) -> None:
        if app is None:
            return

        async def _submit() -> None:
            app.submit(app.handle_user_action(action), name=f"user_action:{action}")

        bridge.run_coroutine(_submit())

    view = TkCaptureView(
        root,
        bridge.call_in_gui,
        ViewCallbacks(
            start=partial(dispatch, "start"),
            stop=partial(dispatch, "stop"),
            recheck=partial(dispatch, "recheck"),
        ),
        logger=logger,
        window_geometry=settings.window_geometry,
    )
    app = CaptureApp(settings, view, logger=logger)
    root.protocol("WM_DELETE_WINDOW", root.quit)

    async def _watch_shutdown() -> None:
        await app.shutdown_event.wait()
        bridge.call_in_gui(root.quit)

    bridge.run_coroutine(app.start())
    bridge.run_coroutine(_watch_shutdown())

    try:
        root.mainloop()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        future = bridge.run_coroutine(app.shutdown())
        try:
            future.result(timeout=settings.shutdown_timeout + 1.0)
        except concurrent.futures.TimeoutError:
            logger.warning("Shutdown did not finish within %.1fs", settings.shutdown_timeout)
        except Exception:
            logger.exception("Shutdown failed")
        bridge.stop(timeout=settings.shutdown_timeout)
        root.destroy()
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_cli_args(argv)
    settings = CaptureSettings.from_args(args)
    _configure_logging(settings)

    if settings.mode == "cli":
        try:
            asyncio.run(run_cli(settings))
        except KeyboardInterrupt:
            pass
        return 0
    return run_gui(settings)


if __name__ == "__main__":
    sys.exit(main())
