"""Join-on-in-flight memoization for coroutine results.

Each key maps to a single :class:`asyncio.Task`. The first caller for a key
starts the task; every later caller, whether it arrives while the task is
running or after it finished, awaits that same task. A failed task stays
memoized, so all dependents observe the same exception and nothing is
retried within a session. Only a task that was itself cancelled is
dropped from the table.
"""

from __future__ import annotations

import asyncio
import functools
from collections.abc import Awaitable, Callable, Hashable
from typing import Any, Generic, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


class TaskMemo(Generic[T]):
    """Per-key table of in-flight or completed tasks.

    Args:
        name: Label used in log events
    """

    def __init__(self, name: str):
        self.name = name
        self._tasks: dict[Hashable, asyncio.Task[T]] = {}
        self.started = 0

    def __contains__(self, key: Hashable) -> bool:
        return key in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    def get_or_start(
        self,
        key: Hashable,
        factory: Callable[[], Awaitable[T]],
    ) -> asyncio.Task[T]:
        """Return the task for ``key``, starting it with ``factory`` if absent.

        Must be called from within a running event loop.
        """
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            task.add_done_callback(functools.partial(self._on_done, key))
            self._tasks[key] = task
            self.started += 1
            logger.debug("memo_started", memo=self.name, key=str(key))
        return task

    async def get(self, key: Hashable, factory: Callable[[], Awaitable[T]]) -> T:
        """Await the memoized result for ``key``.

        Cancelling the caller does not cancel the shared task; other
        callers still receive its result.
        """
        return await asyncio.shield(self.get_or_start(key, factory))

    def _on_done(self, key: Hashable, task: asyncio.Task[Any]) -> None:
        # A cancelled task is forgotten so the next caller starts over
        if task.cancelled():
            if self._tasks.get(key) is task:
                del self._tasks[key]
            logger.debug("memo_cancelled", memo=self.name, key=str(key))
            return
        # Mark the exception as retrieved; dependents re-raise it on await
        exc = task.exception()
        if exc is not None:
            logger.debug("memo_failed", memo=self.name, error=str(exc))
