"""Bridge between the Tk main loop and an asyncio loop on a worker thread."""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from typing import Any, Callable, Coroutine, Optional

from .logging_utils import get_module_logger

logger = get_module_logger("AsyncBridge")


class AsyncBridge:
    """Run asyncio as a guest of the Tk main loop.

    Tk owns the main thread and its real ``mainloop()``; the asyncio loop
    runs forever on a daemon thread. Coroutines are submitted with
    :meth:`run_coroutine`, GUI work is marshalled back with
    :meth:`call_in_gui` (Tk's ``after`` is the only thread-safe entry).
    """

    def __init__(self, root: Any) -> None:
        self.root = root
        self.loop: Optional[asyncio.AbstractEventLoop] = None
        self.thread: Optional[threading.Thread] = None
        self._running = False
        self._ready = threading.Event()

    def start(self) -> None:
        """Start the asyncio event loop in a background thread."""
        if self._running:
            return
        self._running = True
        self.thread = threading.Thread(target=self._run_event_loop, name="AsyncBridge", daemon=True)
        self.thread.start()

        if not self._ready.wait(timeout=5.0):
            raise RuntimeError("AsyncIO loop failed to start within 5 seconds")

        logger.debug("AsyncIO event loop running in background (thread %s)", self.thread.ident)

    def _run_event_loop(self) -> None:
        self.loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self.loop)
        self._ready.set()
        try:
            self.loop.run_forever()
        finally:
            self.loop.close()
            logger.debug("AsyncIO loop closed")

    def run_coroutine(self, coro: Coroutine[Any, Any, Any]) -> concurrent.futures.Future:
        """Schedule ``coro`` on the asyncio loop from any thread."""
        if self.loop is None:
            coro.close()
            raise RuntimeError("AsyncIO loop not started")
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def call_in_gui(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Schedule ``func`` on the Tk thread."""

        def wrapper() -> None:
            try:
                func(*args, **kwargs)
            except Exception:
                logger.exception("GUI callback %s failed", getattr(func, "__name__", func))

        self.root.after(0, wrapper)

    def stop(self, timeout: float = 5.0) -> None:
        """Cancel pending tasks and stop the asyncio loop."""
        if not self.loop or not self._running:
            return
        self._running = False
        future = asyncio.run_coroutine_threadsafe(self._shutdown(), self.loop)
        try:
            future.result(timeout=timeout)
        except concurrent.futures.TimeoutError:
            logger.warning("AsyncIO bridge did not stop within %.1fs", timeout)
        if self.thread is not None:
            self.thread.join(timeout=timeout)

    async def _shutdown(self) -> None:
        current = asyncio.current_task()
        tasks = [task for task in asyncio.all_tasks() if task is not current]
        logger.debug("Cancelling %d pending tasks", len(tasks))
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        asyncio.get_running_loop().stop()


__all__ = ["AsyncBridge"]
