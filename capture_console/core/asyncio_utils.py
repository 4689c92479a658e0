"""Asyncio helpers for background work that must never lose exceptions."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any, Awaitable, Optional, Set

from .logging_utils import LoggerLike, ensure_structured_logger


def _task_label(task: asyncio.Task[Any], context: Optional[str]) -> str:
    if context:
        return context
    name = task.get_name()
    return name or "background task"


def add_task_exception_logger(
    task: asyncio.Task[Any],
    *,
    logger: LoggerLike = None,
    context: Optional[str] = None,
) -> asyncio.Task[Any]:
    """Ensure task exceptions are retrieved and logged.

    Without this, exceptions in fire-and-forget tasks surface as
    "Task exception was never retrieved" warnings long after the failure.
    """
    task_logger = ensure_structured_logger(logger, fallback_name="asyncio")

    def _done(done_task: asyncio.Task[Any]) -> None:
        if done_task.cancelled():
            return
        exc = done_task.exception()
        if exc is not None:
            task_logger.error(
                "Unhandled exception in %s: %s",
                _task_label(done_task, context),
                exc,
                exc_info=exc,
            )

    task.add_done_callback(_done)
    return task


def create_logged_task(
    coro: Awaitable[Any],
    *,
    logger: LoggerLike = None,
    context: Optional[str] = None,
    loop: Optional[asyncio.AbstractEventLoop] = None,
    pending: Optional[set[asyncio.Task[Any]]] = None,
) -> asyncio.Task[Any]:
    """Create a task that won't lose exceptions, optionally tracking it."""
    if loop is None:
        loop = asyncio.get_running_loop()

    task = loop.create_task(coro)
    if context:
        task.set_name(context)

    add_task_exception_logger(task, logger=logger, context=context)

    if pending is not None:
        pending.add(task)
        task.add_done_callback(pending.discard)

    return task


class BackgroundTaskManager:
    """Track background tasks spawned by the app and cancel them safely."""

    def __init__(self, name: str = "BackgroundTasks", logger: LoggerLike = None) -> None:
        self._name = name
        self._logger = ensure_structured_logger(logger, fallback_name=name)
        self._tasks: Set[asyncio.Task] = set()
        self._closing = False

    @property
    def closing(self) -> bool:
        return self._closing

    def create(self, coro: Awaitable, *, name: Optional[str] = None) -> asyncio.Task:
        if self._closing:
            with contextlib.suppress(AttributeError):
                coro.close()  # type: ignore[attr-defined]
            raise RuntimeError(f"{self._name} is closing; refusing to create new tasks")
        return create_logged_task(
            coro,
            logger=self._logger,
            context=name or getattr(coro, "__name__", None),
            pending=self._tasks,
        )

    async def shutdown(self, *, timeout: float = 5.0) -> bool:
        self._closing = True
        pending = [task for task in self._tasks if not task.done()]
        if not pending:
            return True
        for task in pending:
            task.cancel()
        try:
            await asyncio.wait_for(asyncio.gather(*pending, return_exceptions=True), timeout=timeout)
            return True
        except asyncio.TimeoutError:
            still_pending = [t.get_name() or f"Task@{id(t):x}" for t in pending if not t.done()]
            self._logger.warning(
                "%s timeout cancelling %d task(s): %s",
                self._name,
                len(still_pending),
                ", ".join(still_pending),
            )
            return False

    def active(self) -> int:
        return sum(1 for task in self._tasks if not task.done())


__all__ = [
    "BackgroundTaskManager",
    "add_task_exception_logger",
    "create_logged_task",
]
