"""
Registry records.

Certificates and issuers are frozen pydantic models. The registry never
mutates a stored record in place; it replaces it with an updated copy, so
a record handed to a reader is a stable snapshot.
"""

from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field

from skillcert.constants import NO_EXPIRY


class Certificate(BaseModel):
    """A skill certificate issued by an authorized issuer.

    Attributes:
        id: Sequential id, starting at 1.
        recipient: Identity the certificate was issued to.
        issuer: Identity that issued the certificate.
        skill_name: Name of the certified skill.
        description: Free-text description.
        issue_date: Issue time in seconds since the epoch.
        expiry_date: Expiry time in seconds since the epoch, or 0 for never.
        metadata_handle: Opaque reference to external content, empty for none.
        is_active: False once the certificate has been revoked.
    """

    model_config = ConfigDict(frozen=True)

    id: int = Field(..., gt=0)
    recipient: str
    issuer: str
    skill_name: str = Field(..., min_length=1)
    description: str = ""
    issue_date: int = Field(..., ge=0)
    expiry_date: int = Field(default=NO_EXPIRY, ge=0)
    metadata_handle: str = ""
    is_active: bool = True

    @property
    def never_expires(self) -> bool:
        return self.expiry_date == NO_EXPIRY

    @property
    def has_metadata(self) -> bool:
        return bool(self.metadata_handle)

    def is_expired(self, now: int) -> bool:
        """True once ``now`` has reached the expiry date."""
        return not self.never_expires and self.expiry_date <= now


class Issuer(BaseModel):
    """An identity the owner has authorized (or once authorized) to issue."""

    model_config = ConfigDict(frozen=True)

    identity: str
    name: str = ""
    description: str = ""
    is_authorized: bool = False
    total_certificates_issued: int = Field(default=0, ge=0)


class VerificationResult(NamedTuple):
    """Outcome of verifying a certificate.

    Unpacks as ``is_valid, certificate``.
    """

    is_valid: bool
    certificate: Certificate
