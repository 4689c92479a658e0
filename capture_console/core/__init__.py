"""Shared infrastructure (logging, asyncio helpers, paths) for the console."""

from .asyncio_utils import BackgroundTaskManager, create_logged_task
from .logging_config import configure_logging, resolve_log_level
from .logging_utils import StructuredLogger, ensure_structured_logger, get_module_logger

__all__ = [
    "BackgroundTaskManager",
    "StructuredLogger",
    "configure_logging",
    "create_logged_task",
    "ensure_structured_logger",
    "get_module_logger",
    "resolve_log_level",
]
