"""
Debounce helper for search-as-you-type.

Every push() restarts the quiet-window timer; only the value that survives a
full window uninterrupted reaches the callback.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

logger = logging.getLogger(__name__)


class Debouncer:
    """Delay *callback* until input has been quiet for *delay* seconds."""

    def __init__(self, callback: Callable[[Any], Awaitable[Any]], delay: float) -> None:
        if delay < 0:
            raise ValueError("delay must be non-negative")
        self._callback = callback
        self.delay = delay
        self._timer: asyncio.Task | None = None
        # Callbacks past their window; held so they are not collected mid-run.
        self._running: set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def in_flight(self) -> int:
        return len(self._running)

    def push(self, value: Any) -> None:
        """Replace any pending value with *value* and restart the window.

        Must be called from a running event loop.
        """
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._fire(value))

    def cancel(self) -> None:
        """Drop the pending value, if any. A callback already running is left alone."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    def close(self) -> None:
        """Drop the pending value and cancel callbacks still running."""
        self.cancel()
        for task in list(self._running):
            task.cancel()

    async def _fire(self, value: Any) -> None:
        await asyncio.sleep(self.delay)
        # Past the window: from here on a new push() starts a fresh timer
        # instead of cancelling this delivery.
        task = asyncio.current_task()
        if task is not None:
            self._running.add(task)
            task.add_done_callback(self._running.discard)
        self._timer = None
        try:
            await self._callback(value)
        except Exception:
            logger.exception("Debounced callback failed for %r", value)
