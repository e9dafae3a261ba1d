"""
Prometheus metrics for the certificate registry.

``RegistryMetrics`` subscribes to the registry event bus and counts
notifications, so metrics stay decoupled from the state transitions.

Metrics exposed:

* ``<prefix>_issuers_authorized_total``
* ``<prefix>_issuers_revoked_total``
* ``<prefix>_certificates_issued_total`` (labelled by ``issuer``)
* ``<prefix>_certificates_revoked_total``

Counters are created once per collector registry and prefix. Later
``RegistryMetrics`` on the same collector reuse them, so a registry can be
rebuilt in the same process without duplicate-timeseries errors.
"""

from __future__ import annotations

import threading
import weakref
from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter

from skillcert.constants import DEFAULT_METRICS_PREFIX
from skillcert.events.bus import (
    EVENT_CERTIFICATE_ISSUED,
    EVENT_CERTIFICATE_REVOKED,
    EVENT_ISSUER_AUTHORIZED,
    EVENT_ISSUER_REVOKED,
    Event,
    EventBus,
)

_counters: "weakref.WeakKeyDictionary[CollectorRegistry, dict[str, Counter]]" = (
    weakref.WeakKeyDictionary()
)
_counters_lock = threading.Lock()


def _counter(
    registry: CollectorRegistry,
    name: str,
    documentation: str,
    labelnames: tuple[str, ...] = (),
) -> Counter:
    with _counters_lock:
        known = _counters.setdefault(registry, {})
        if name not in known:
            known[name] = Counter(name, documentation, labelnames, registry=registry)
        return known[name]


class RegistryMetrics:
    """Prometheus counters fed from registry events.

    Args:
        bus: Event bus to subscribe to.
        prefix: Metric name prefix. Defaults to ``skillcert``.
        registry: Prometheus collector registry. Defaults to the global one.
    """

    def __init__(
        self,
        bus: EventBus,
        prefix: str = DEFAULT_METRICS_PREFIX,
        registry: Optional[CollectorRegistry] = None,
    ) -> None:
        registry = registry if registry is not None else REGISTRY
        self.issuers_authorized_total = _counter(
            registry,
            f"{prefix}_issuers_authorized_total",
            "Total issuer authorizations",
        )
        self.issuers_revoked_total = _counter(
            registry,
            f"{prefix}_issuers_revoked_total",
            "Total issuer revocations",
        )
        self.certificates_issued_total = _counter(
            registry,
            f"{prefix}_certificates_issued_total",
            "Total certificates issued",
            ("issuer",),
        )
        self.certificates_revoked_total = _counter(
            registry,
            f"{prefix}_certificates_revoked_total",
            "Total certificate revocations",
        )
        self._bus = bus
        bus.subscribe("*", self._handle_event)

    def _handle_event(self, event: Event) -> None:
        if event.event_type == EVENT_ISSUER_AUTHORIZED:
            self.issuers_authorized_total.inc()
        elif event.event_type == EVENT_ISSUER_REVOKED:
            self.issuers_revoked_total.inc()
        elif event.event_type == EVENT_CERTIFICATE_ISSUED:
            self.certificates_issued_total.labels(
                issuer=event.payload.get("issuer", "")
            ).inc()
        elif event.event_type == EVENT_CERTIFICATE_REVOKED:
            self.certificates_revoked_total.inc()

    def detach(self) -> None:
        """Stop counting events."""
        self._bus.unsubscribe(self._handle_event)
