"""Event bus and event log for registry notifications."""

from .bus import (
    ALL_EVENT_TYPES,
    EVENT_CERTIFICATE_ISSUED,
    EVENT_CERTIFICATE_REVOKED,
    EVENT_ISSUER_AUTHORIZED,
    EVENT_ISSUER_REVOKED,
    Event,
    EventBus,
    EventHandler,
    InMemoryEventBus,
)
from .log import EventLog, LogEntry

__all__ = [
    "Event",
    "EventBus",
    "EventHandler",
    "InMemoryEventBus",
    "EventLog",
    "LogEntry",
    "EVENT_ISSUER_AUTHORIZED",
    "EVENT_ISSUER_REVOKED",
    "EVENT_CERTIFICATE_ISSUED",
    "EVENT_CERTIFICATE_REVOKED",
    "ALL_EVENT_TYPES",
]
