"""
Concurrency Scheduler - bounded admission of per-medicine tasks.

THE PROBLEM:
    The catalog has ~300 medicines and each one takes up to eight page
    loads. Starting them all at once opens hundreds of browser contexts
    and hammers the site; running them one by one takes hours.

THE SOLUTION:
    A counting gate with K permits (default 3):
    - acquire() takes a permit, or queues the caller until one is free
    - release() hands the freed permit straight to the oldest waiter
    - waiters are served strictly in request order (FIFO)

ARCHITECTURE:
    ┌──────────────────────────────────────────────────────────────┐
    │                ConcurrencyScheduler(capacity=3)              │
    │                                                              │
    │   permits: 0          waiters: [fut4, fut5, fut6, ...]       │
    │                                                              │
    │   task1 ─┐                                                   │
    │   task2 ─┼─ running (hold a permit)                          │
    │   task3 ─┘                                                   │
    │                                                              │
    │   release() by task1 → permit handed to fut4 → task4 runs    │
    └──────────────────────────────────────────────────────────────┘

PER TASK:
    acquire → extract medicine → update counters + progress event
            → release → sleep(delay)

    The delay happens after release, so it throttles the task's own
    cadence without holding a permit idle.
"""

import asyncio
import time
from collections import deque
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Awaitable, Callable, Deque, Iterable, List, Optional, TypeVar

T = TypeVar('T')


class ConcurrencyScheduler:
    """
    FIFO counting semaphore built from a deque of futures and a counter.

    Args:
        capacity: Maximum number of tasks holding a permit at once
    """

    def __init__(self, capacity: int = 3):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._permits = capacity
        self._waiters: Deque[asyncio.Future] = deque()

    @property
    def available(self) -> int:
        """Permits free right now."""
        return self._permits

    @property
    def waiting(self) -> int:
        """Callers queued in acquire()."""
        return sum(1 for fut in self._waiters if not fut.done())

    async def acquire(self):
        if self._permits > 0 and not self._waiters:
            self._permits -= 1
            return

        fut = asyncio.get_running_loop().create_future()
        self._waiters.append(fut)
        try:
            await fut
        except asyncio.CancelledError:
            if fut.done() and not fut.cancelled():
                # Cancelled after release() handed us the permit: give it back
                self.release()
            elif fut in self._waiters:
                self._waiters.remove(fut)
            raise

    def release(self):
        self._permits += 1
        while self._waiters:
            fut = self._waiters.popleft()
            if not fut.done():
                # Hand the permit over directly so it is never seen as free
                self._permits -= 1
                fut.set_result(None)
                break

    @asynccontextmanager
    async def slot(self):
        """
        Hold a permit for the duration of the block.

            async with scheduler.slot():
                await extract(link)
        """
        await self.acquire()
        try:
            yield
        finally:
            self.release()

    async def run_all(
        self,
        items: Iterable[T],
        handler: Callable[[T], Awaitable[None]],
        delay_seconds: float = 0.0,
    ) -> List[BaseException]:
        """
        Run handler(item) for every item, at most `capacity` at a time.

        The handler owns its own error handling; an exception escaping it
        still releases the permit and does not stop the other tasks.
        Returns the exceptions that escaped, in item order.
        """

        async def admit(item: T):
            await self.acquire()
            try:
                await handler(item)
            finally:
                self.release()
                if delay_seconds > 0:
                    await asyncio.sleep(delay_seconds)

        results = await asyncio.gather(*(admit(item) for item in items), return_exceptions=True)
        return [r for r in results if isinstance(r, BaseException)]


@dataclass
class ProgressSnapshot:
    processed: int
    total: int
    percent: float
    elapsed: float
    eta_seconds: Optional[float]


class ProgressTracker:
    """
    Processed/total accounting with an ETA.

    ETA = elapsed / processed * remaining, and None until at least one item
    has been processed.
    """

    def __init__(self, total: int, clock: Callable[[], float] = time.monotonic):
        self.total = total
        self.clock = clock
        self.started_at = clock()
        self.processed = 0

    def record(self) -> ProgressSnapshot:
        """Count one finished item and return the new state."""
        self.processed += 1
        return self.snapshot()

    def snapshot(self) -> ProgressSnapshot:
        elapsed = self.clock() - self.started_at
        percent = self.processed / self.total * 100 if self.total else 100.0
        eta = None
        if self.processed:
            remaining = max(self.total - self.processed, 0)
            eta = elapsed / self.processed * remaining
        return ProgressSnapshot(
            processed=self.processed,
            total=self.total,
            percent=percent,
            elapsed=elapsed,
            eta_seconds=eta,
        )
