"""
Certificate Registry

Issuer authorization, certificate issuance, verification and revocation.
"""

from .models import Certificate, Issuer, VerificationResult
from .registry import CertificateRegistry
from .state import RegistryState, load_state, save_state

__all__ = [
    "CertificateRegistry",
    "Certificate",
    "Issuer",
    "VerificationResult",
    "RegistryState",
    "load_state",
    "save_state",
]
