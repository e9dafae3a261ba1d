"""Shared fixtures for registry tests."""

import pytest

from skillcert.events import EventLog, InMemoryEventBus
from skillcert.identity import ManualClock
from skillcert.registry import CertificateRegistry


@pytest.fixture
def clock():
    return ManualClock(start=1_700_000_000)


@pytest.fixture
def bus():
    return InMemoryEventBus()


@pytest.fixture
def event_log(bus):
    return EventLog(bus)


@pytest.fixture
def registry(clock, bus):
    return CertificateRegistry(owner="0xowner", clock=clock, bus=bus)


@pytest.fixture
def acme(registry):
    """Registry with 0xacme authorized as an issuer."""
    registry.manage_issuer("0xowner", "0xacme", "Acme", "desc", True)
    return "0xacme"
