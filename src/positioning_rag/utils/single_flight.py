"""Key-based coalescing of concurrent identical calls."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class SingleFlight(Generic[T]):
    """Run at most one in-flight call per key.

    The first caller for a key starts the work as its own task; callers
    arriving while it is still running await the same task instead of
    starting their own. Every caller awaits through ``asyncio.shield``, so a
    cancelled caller never cancels the shared work: it runs to completion
    and the remaining callers still get its result. The key is released as
    soon as the task finishes, so later calls start fresh.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Task[T]] = {}

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> tuple[T, bool]:
        """Run ``fn`` for ``key`` unless a call for the same key is running.

        Args:
            key: Coalescing key
            fn: Zero-argument coroutine factory

        Returns:
            (result, shared) where ``shared`` is True if the result came from
            another caller's in-flight call
        """
        task = self._inflight.get(key)
        shared = task is not None
        if task is None:
            task = asyncio.ensure_future(fn())
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._release(key, done))

        return await asyncio.shield(task), shared

    def _release(self, key: str, task: asyncio.Task[T]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Mark retrieved so a failure whose callers were all cancelled is not reported
        if not task.cancelled():
            task.exception()
