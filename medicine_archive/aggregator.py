"""
Collects finished medicines into one RunResult.
"""

import asyncio
from typing import Callable, List, Optional

from .models import Item, RunResult, utc_now

# Persistence collaborator: receives the finished RunResult
ResultSaver = Callable[[RunResult], None]


class ResultAggregator:

    def __init__(self, total_found: int = 0, saver: Optional[ResultSaver] = None, clock=utc_now):
        self.total_found = total_found
        self.saver = saver
        self.clock = clock
        self.items: List[Item] = []
        self.failed_names: List[str] = []
        self._lock = asyncio.Lock()

    async def add_item(self, item: Item):
        """Append a finished item. Items keep completion order."""
        async with self._lock:
            self.items.append(item)

    def add_failure(self, name: str):
        self.failed_names.append(name)

    def build(self) -> RunResult:
        return RunResult(
            total_found=self.total_found,
            succeeded=len(self.items),
            failed_names=list(self.failed_names),
            items=list(self.items),
            completed_at=self.clock(),
        )

    def finish(self) -> RunResult:
        """Build the result and hand it to the saver, if one is set."""
        result = self.build()
        if self.saver is not None:
            self.saver(result)
        return result
