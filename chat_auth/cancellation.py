"""Lifecycle-bound cancellation scope for orchestrator tasks."""

import asyncio
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


class CancelScope:
    """Owns the asyncio tasks launched on behalf of one view lifecycle.

    Once cancelled, every pending task is cancelled and ``active`` stays
    False, so callers can check it before touching the owning view.
    """

    def __init__(self, sleep: Callable[[float], Awaitable[None]] = asyncio.sleep):
        self._sleep = sleep
        self._tasks: set[asyncio.Task[Any]] = set()
        self._cancelled = False

    @property
    def active(self) -> bool:
        return not self._cancelled

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def launch(self, coro: Coroutine[Any, Any, T], name: str | None = None) -> asyncio.Task[T]:
        """Schedule a coroutine as a task bound to this scope."""
        if self._cancelled:
            coro.close()
            raise RuntimeError("Cannot launch a task on a cancelled scope")

        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def ensure_active(self) -> None:
        """Raise CancelledError if the scope was torn down."""
        if self._cancelled:
            raise asyncio.CancelledError()

    async def sleep(self, seconds: float) -> None:
        """Suspend for ``seconds``, respecting cancellation on both sides."""
        self.ensure_active()
        await self._sleep(seconds)
        self.ensure_active()

    def cancel(self) -> None:
        """Cancel every pending task and mark the scope inactive."""
        if self._cancelled:
            return
        self._cancelled = True
        pending = [task for task in self._tasks if not task.done()]
        for task in pending:
            task.cancel()
        logger.debug("Cancel scope torn down", cancelled_tasks=len(pending))
