"""
Append-only event log.

Records every event seen on a bus with a 1-based sequence number, giving
external indexers an ordered view that matches registry commit order.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Iterator, Optional

from .bus import Event, EventBus


@dataclass(frozen=True)
class LogEntry:
    """A single recorded event."""

    sequence: int
    event: Event


class EventLog:
    """Observable log subscribed to ``pattern`` on ``bus``.

    Args:
        bus: The event bus to record from.
        pattern: Glob pattern of event types to keep. Defaults to all.
    """

    def __init__(self, bus: EventBus, pattern: str = "*") -> None:
        self._bus = bus
        self._entries: list[LogEntry] = []
        self._lock = threading.Lock()
        bus.subscribe(pattern, self._record)

    def _record(self, event: Event) -> None:
        with self._lock:
            self._entries.append(LogEntry(len(self._entries) + 1, event))

    def entries(self, event_type: Optional[str] = None) -> list[LogEntry]:
        """Return recorded entries, optionally filtered by exact type."""
        with self._lock:
            snapshot = list(self._entries)
        if event_type is None:
            return snapshot
        return [e for e in snapshot if e.event.event_type == event_type]

    def events(self) -> list[Event]:
        return [entry.event for entry in self.entries()]

    def close(self) -> None:
        """Stop recording. Already recorded entries are kept."""
        self._bus.unsubscribe(self._record)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self.entries())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
