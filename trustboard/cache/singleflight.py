"""Per-key de-duplication of concurrent computations."""

import asyncio
from typing import Awaitable, Callable, TypeVar

T = TypeVar("T")


class SingleFlight:
    """
    Run at most one computation per key at a time.

    Callers arriving while a computation for their key is in flight await
    the same task and get its result or its exception. Once it finishes the
    key is released and the next caller starts a fresh computation.
    """

    def __init__(self):
        self._inflight: dict[str, asyncio.Task] = {}

    async def do(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(fn())
            self._inflight[key] = task
            task.add_done_callback(lambda t, k=key: self._release(k, t))
        # shield: one impatient caller must not cancel the shared work
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Task) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled():
            # mark the exception retrieved; waiters already received it
            task.exception()

    def in_flight(self, key: str) -> bool:
        return key in self._inflight
