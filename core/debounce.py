"""
Debounce - Cancellable delayed callbacks on the running asyncio loop
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set

class DebounceTimer:
    """Fires a callback once input has been stable for ``delay`` seconds.

    Each ``schedule`` call cancels a firing that has not happened yet. Once the
    callback has started it runs to completion; later calls cannot cancel it.
    """

    def __init__(self, delay: float):
        self.delay = delay
        self._pending: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def schedule(self, callback: Callable[[], Awaitable[None]]) -> None:
        self.cancel()
        task = asyncio.get_running_loop().create_task(self._fire(callback))
        self._pending = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def cancel(self) -> None:
        if self.pending:
            self._pending.cancel()
        self._pending = None

    async def join(self) -> None:
        """Wait until no firing is pending or running."""
        while True:
            tasks = [task for task in self._tasks if not task.done()]
            if not tasks:
                return
            await asyncio.wait(tasks)

    async def _fire(self, callback: Callable[[], Awaitable[None]]) -> None:
        await asyncio.sleep(self.delay)
        # detach: from here on the callback is no longer cancellable
        if self._pending is asyncio.current_task():
            self._pending = None
        try:
            await callback()
        except Exception as e:
            logging.error(f"Debounced callback failed: {e}")
