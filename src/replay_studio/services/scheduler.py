"""Cancellable background tasks owned by a studio session."""

import asyncio
from collections.abc import Coroutine
from typing import Any

from replay_studio.logging import get_logger

logger = get_logger(__name__)


class SchedulerClosedError(RuntimeError):
    """Raised when work is scheduled on a scheduler that has been closed."""


class TaskScheduler:
    """Keyed registry of asyncio tasks.

    Each key holds at most one task; spawning under a busy key cancels the
    previous task, unless the previous task is the caller itself (a task may
    schedule its own successor). Closing the scheduler cancels everything and
    refuses new work, so no callback outlives its owner.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[Any]] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def spawn(self, key: str, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Run a coroutine in the background under a key.

        Must be called from a running event loop.

        Raises:
            SchedulerClosedError: If the scheduler has been closed.
        """
        if self._closed:
            coro.close()
            raise SchedulerClosedError(f"Cannot schedule {key!r}: scheduler is closed")

        self.cancel(key)
        task = asyncio.get_running_loop().create_task(coro, name=key)
        self._tasks[key] = task
        task.add_done_callback(lambda t: self._forget(key, t))
        logger.debug("task_scheduled", key=key)
        return task

    def _forget(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]
        if task.cancelled():
            logger.debug("task_cancelled", key=key)
            return
        error = task.exception()
        if error is not None:
            logger.error("task_failed", key=key, error=str(error))

    def cancel(self, key: str) -> bool:
        """Cancel the task under a key.

        The calling task is never cancelled through this method.

        Returns:
            True if a running task was cancelled
        """
        task = self._tasks.get(key)
        if task is None or task.done() or task is asyncio.current_task():
            return False
        task.cancel()
        return True

    def is_active(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done() and not task.cancelling()

    def active_keys(self) -> list[str]:
        return [key for key, task in self._tasks.items() if not task.done()]

    async def join(self, prefix: str = "") -> None:
        """Wait until no task whose key starts with ``prefix`` is running.

        Tasks that keep rescheduling themselves (continuous discovery) never
        drain; cancel them or pick a narrower prefix.
        """
        current = asyncio.current_task()
        while True:
            pending = [
                task
                for key, task in self._tasks.items()
                if key.startswith(prefix) and not task.done() and task is not current
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def cancel_all(self) -> None:
        """Cancel every task and wait for them to unwind."""
        current = asyncio.current_task()
        tasks = [t for t in self._tasks.values() if not t.done() and t is not current]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("tasks_cancelled", count=len(tasks))

    async def close(self) -> None:
        """Cancel everything and refuse further scheduling."""
        self._closed = True
        await self.cancel_all()
