"""
Event bus for registry notifications.

State-changing registry operations publish an event after they commit.
Subscribers register glob-style patterns and are called synchronously in
subscription order. A failing subscriber is logged and skipped; it never
affects the committed state change or the other subscribers.
"""

from __future__ import annotations

import fnmatch
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable

logger = logging.getLogger(__name__)


# Registry event types
EVENT_ISSUER_AUTHORIZED = "issuer.authorized"
EVENT_ISSUER_REVOKED = "issuer.revoked"
EVENT_CERTIFICATE_ISSUED = "certificate.issued"
EVENT_CERTIFICATE_REVOKED = "certificate.revoked"

ALL_EVENT_TYPES = [
    EVENT_ISSUER_AUTHORIZED,
    EVENT_ISSUER_REVOKED,
    EVENT_CERTIFICATE_ISSUED,
    EVENT_CERTIFICATE_REVOKED,
]


@dataclass
class Event:
    """A notification emitted by the registry."""

    event_type: str
    source: str
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    event_id: str = field(default_factory=lambda: f"evt-{time.monotonic_ns()}")


EventHandler = Callable[[Event], Any]


class EventBus(ABC):
    """Abstract base class for event bus implementations."""

    @abstractmethod
    def emit(self, event: Event) -> None:
        """Deliver an event to all matching subscribers."""

    @abstractmethod
    def subscribe(self, pattern: str, handler: EventHandler) -> None:
        """Subscribe a handler to events matching a glob-style pattern.

        Args:
            pattern: Glob-style pattern (e.g., ``certificate.*``, ``*``).
            handler: Callable invoked with the matching Event.
        """

    @abstractmethod
    def unsubscribe(self, handler: EventHandler) -> None:
        """Remove a handler from all subscriptions."""


class InMemoryEventBus(EventBus):
    """Synchronous in-process event bus with glob-style pattern matching."""

    def __init__(self) -> None:
        self._subscriptions: list[tuple[str, EventHandler]] = []

    def emit(self, event: Event) -> None:
        for pattern, handler in list(self._subscriptions):
            if not fnmatch.fnmatch(event.event_type, pattern):
                continue
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Subscriber %r failed handling %s", handler, event.event_type
                )

    def subscribe(self, pattern: str, handler: EventHandler) -> None:
        self._subscriptions.append((pattern, handler))

    def unsubscribe(self, handler: EventHandler) -> None:
        self._subscriptions = [
            (p, h) for p, h in self._subscriptions if h != handler
        ]

    def __len__(self) -> int:
        return len(self._subscriptions)
