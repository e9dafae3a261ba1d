"""
Caller identities.

An identity is an opaque string authenticated by the hosting environment
(for example the sender of a signed transaction). The registry only
compares identities for equality and rejects the null identity where a
real principal is required.
"""

from typing import Optional

from skillcert.constants import NULL_IDENTITY
from skillcert.exceptions import InvalidArgumentError


def is_blank(value: Optional[str]) -> bool:
    """True for ``None``, non-strings and whitespace-only strings."""
    return not isinstance(value, str) or not value.strip()


def is_null_identity(identity: Optional[str]) -> bool:
    """True for blank identities and the all-zero address."""
    if is_blank(identity):
        return True
    return identity.strip().lower() == NULL_IDENTITY


def require_identity(identity: Optional[str], field: str = "identity") -> str:
    """Return ``identity`` unchanged, or raise if it is the null identity.

    Raises:
        InvalidArgumentError: If ``identity`` is null.
    """
    if is_null_identity(identity):
        raise InvalidArgumentError(f"Invalid {field}: {identity!r}")
    return identity
