from __future__ import annotations

import argparse
import asyncio
import contextlib
import signal
import sys
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

from capture_console.core.logging_config import VALID_LEVELS
from capture_console.core.logging_utils import LoggerLike, ensure_structured_logger


def add_common_cli_arguments(
    parser: argparse.ArgumentParser,
    *,
    default_log_level: str = "info",
    default_log_file: Optional[Path] = None,
    default_console_output: bool = True,
    include_config: bool = True,
) -> None:
    parser.add_argument(
        "--log-level",
        type=str,
        default=default_log_level,
        help=f"Logging verbosity ({', '.join(VALID_LEVELS)})",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=default_log_file,
        help="Optional path for a rotating log file",
    )

    if include_config:
        parser.add_argument(
            "--config",
            type=Path,
            default=None,
            help="Configuration file providing defaults for the other options",
        )

    console_group = parser.add_mutually_exclusive_group()
    console_group.add_argument(
        "--console",
        dest="console_output",
        action="store_true",
        default=default_console_output,
        help="Log to the console",
    )
    console_group.add_argument(
        "--no-console",
        dest="console_output",
        action="store_false",
        help="Log to file only (no console output)",
    )


def _positive_number(value: str, typ: type, name: str):
    try:
        parsed = typ(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Value must be a {name}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("Value must be positive")
    return parsed


def positive_int(value: str) -> int:
    return _positive_number(value, int, "integer")


def positive_float(value: str) -> float:
    return _positive_number(value, float, "number")


def install_exception_handlers(
    logger: LoggerLike,
    loop: Optional[asyncio.AbstractEventLoop] = None,
) -> None:
    """Route uncaught exceptions (sys and asyncio) to ``logger``."""

    target = ensure_structured_logger(logger, fallback_name="Main")

    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        target.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))

    sys.excepthook = handle_exception

    if loop is not None:
        def handle_asyncio_exception(loop, context):
            exception = context.get("exception")
            message = context.get("message", "Unhandled asyncio exception")
            if exception:
                target.error("Asyncio exception: %s", message, exc_info=exception)
            else:
                target.error("Asyncio error: %s, context: %s", message, context)

        loop.set_exception_handler(handle_asyncio_exception)


def install_signal_handlers(
    shutdown: Callable[[], Awaitable[Any]],
    loop: asyncio.AbstractEventLoop,
    shutdown_event: Optional[asyncio.Event] = None,
) -> None:
    """Register SIGINT/SIGTERM handlers that request a graceful shutdown once."""

    in_progress = False

    def signal_handler() -> None:
        nonlocal in_progress
        if in_progress or (shutdown_event is not None and shutdown_event.is_set()):
            return
        in_progress = True
        loop.create_task(shutdown())

    for sig in (signal.SIGINT, signal.SIGTERM):
        # Windows event loops have no add_signal_handler.
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, signal_handler)


__all__ = [
    "add_common_cli_arguments",
    "install_exception_handlers",
    "install_signal_handlers",
    "positive_float",
    "positive_int",
]
