"""
SkillCert - Skill Certificate Registry

Records skill certificates issued by authorized issuers to recipients and
answers whether a certificate is currently valid.

Version: 1.0.0
"""

__version__ = "1.0.0"

from .config import RegistryConfig, configure_logging
from .events import (
    EVENT_CERTIFICATE_ISSUED,
    EVENT_CERTIFICATE_REVOKED,
    EVENT_ISSUER_AUTHORIZED,
    EVENT_ISSUER_REVOKED,
    Event,
    EventBus,
    EventLog,
    InMemoryEventBus,
)
from .exceptions import (
    InvalidArgumentError,
    NotFoundError,
    SkillCertError,
    StorageError,
    UnauthorizedError,
)
from .identity import Clock, ManualClock, SystemClock
from .registry import (
    Certificate,
    CertificateRegistry,
    Issuer,
    RegistryState,
    VerificationResult,
)

__all__ = [
    # Version
    "__version__",

    # Registry
    "CertificateRegistry",
    "Certificate",
    "Issuer",
    "VerificationResult",
    "RegistryState",

    # Environment
    "Clock",
    "ManualClock",
    "SystemClock",
    "RegistryConfig",
    "configure_logging",

    # Events
    "Event",
    "EventBus",
    "EventLog",
    "InMemoryEventBus",
    "EVENT_ISSUER_AUTHORIZED",
    "EVENT_ISSUER_REVOKED",
    "EVENT_CERTIFICATE_ISSUED",
    "EVENT_CERTIFICATE_REVOKED",

    # Exceptions
    "SkillCertError",
    "UnauthorizedError",
    "InvalidArgumentError",
    "NotFoundError",
    "StorageError",
]
