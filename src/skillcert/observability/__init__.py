"""Observability for the certificate registry."""

from .metrics import RegistryMetrics

__all__ = ["RegistryMetrics"]
