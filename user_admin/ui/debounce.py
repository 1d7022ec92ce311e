"""
Quiet-period scheduling for search input.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from user_admin.core.logging import get_logger

logger = get_logger(__name__)


class Debouncer:
    """
    Runs only the last call of a burst, once ``delay`` seconds pass without
    a newer call.

    Cancelling only affects a call that is still waiting; a request already
    sent to the backend runs to completion.
    """

    def __init__(self, delay: float):
        self.delay = delay
        self._task: Optional[asyncio.Task] = None
        self._fired = False

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def call(self, func: Callable[..., Awaitable[Any]], *args: Any) -> asyncio.Task:
        """Schedule func(*args), replacing any call still waiting."""
        self.cancel()
        self._fired = False
        self._task = asyncio.get_running_loop().create_task(self._run(func, args))
        return self._task

    async def _run(self, func: Callable[..., Awaitable[Any]], args: tuple) -> Any:
        await asyncio.sleep(self.delay)
        self._fired = True
        return await func(*args)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done() and not self._fired:
            self._task.cancel()
            self._task = None
            logger.debug("Pending debounced call cancelled")

    async def flush(self) -> Any:
        """Wait for the scheduled call, if any, and return its result."""
        if self._task is None or self._task.cancelled():
            return None
        return await self._task
