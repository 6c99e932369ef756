"""
Progress events emitted by the scraping core.

The core never formats log lines itself. It hands ProgressEvents to an
EventSink (any callable) and the sink decides how to render them. See
logger.LoggingEventSink for the console/file renderer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional


class EventKind(Enum):
    RUN_STARTED = "run_started"
    CATALOG_BUILT = "catalog_built"
    ITEM_STARTED = "item_started"
    ITEM_SUCCEEDED = "item_succeeded"
    ITEM_FAILED = "item_failed"
    SECTION_FAILED = "section_failed"
    SECTION_LINKS_FAILED = "section_links_failed"
    TASK_ERROR = "task_error"
    RUN_COMPLETED = "run_completed"


@dataclass
class ProgressEvent:
    kind: EventKind
    name: Optional[str] = None
    url: Optional[str] = None
    processed: int = 0
    total: int = 0
    percent: float = 0.0
    eta_seconds: Optional[float] = None
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "kind": self.kind.value,
            "name": self.name,
            "url": self.url,
            "processed": self.processed,
            "total": self.total,
            "percent": round(self.percent, 1),
            "eta_seconds": self.eta_seconds,
            "error": self.error,
            "details": dict(self.details),
        }


EventSink = Callable[[ProgressEvent], None]


def null_sink(event: ProgressEvent) -> None:
    """Sink that drops every event."""


class RecordingSink:
    """Sink that keeps every event in memory. Handy for replays and tests."""

    def __init__(self):
        self.events: List[ProgressEvent] = []

    def __call__(self, event: ProgressEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: EventKind) -> List[ProgressEvent]:
        return [e for e in self.events if e.kind is kind]
