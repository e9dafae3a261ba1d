"""
Certificate Registry

Records skill certificates issued by authorized issuers and answers
whether a certificate is currently valid.

- The owner authorizes and revokes issuers
- Authorized issuers issue certificates to recipients
- Anyone verifies a certificate; validity is computed on every read
- The issuer of a certificate, or the owner, revokes it
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from skillcert.constants import NO_EXPIRY, NONEXISTENT_CERTIFICATE_ID
from skillcert.events.bus import (
    EVENT_CERTIFICATE_ISSUED,
    EVENT_CERTIFICATE_REVOKED,
    EVENT_ISSUER_AUTHORIZED,
    EVENT_ISSUER_REVOKED,
    Event,
    EventBus,
    InMemoryEventBus,
)
from skillcert.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    StorageError,
    UnauthorizedError,
)
from skillcert.identity.caller import is_blank, is_null_identity, require_identity
from skillcert.identity.clock import Clock, SystemClock
from skillcert.registry.models import Certificate, Issuer, VerificationResult
from skillcert.registry.state import RegistryState, load_state, save_state

if TYPE_CHECKING:
    from prometheus_client import CollectorRegistry

    from skillcert.config import RegistryConfig

logger = logging.getLogger(__name__)


class CertificateRegistry:
    """
    Skill certificate registry.

    State-changing operations take the caller identity as their first
    argument, check permissions before touching any state, and publish an
    event on ``bus`` once the change has committed. They are serialized by
    a single lock. Each write builds a new ``RegistryState`` and, once it is
    persisted, publishes it with a single reference swap. Reads take no
    lock and always see one committed state.

    Args:
        owner: The privileged identity that manages issuers.
        clock: Source of the current time. Defaults to ``SystemClock``.
        bus: Event bus for notifications. Defaults to a private
            ``InMemoryEventBus``.
        storage: ``"memory"`` or a path to a JSON snapshot that is written
            after every committed change.

    Example:
        >>> registry = CertificateRegistry(owner="0xowner", clock=ManualClock(0))
        >>> registry.manage_issuer("0xowner", "0xacme", "Acme", "", True)
        >>> registry.issue_certificate("0xacme", "0xbob", "Rust", "", 3600, "")
        1
    """

    def __init__(
        self,
        owner: str,
        clock: Optional[Clock] = None,
        bus: Optional[EventBus] = None,
        storage: str = "memory",
    ) -> None:
        require_identity(owner, "owner")
        self._state = RegistryState(owner=owner)
        self._clock = clock or SystemClock()
        self.bus = bus or InMemoryEventBus()
        self._storage: Optional[Path] = None if storage == "memory" else Path(storage)
        self._lock = threading.RLock()
        self.metrics = None

    @classmethod
    def load(
        cls,
        path: Union[str, Path],
        clock: Optional[Clock] = None,
        bus: Optional[EventBus] = None,
        persist: bool = False,
    ) -> "CertificateRegistry":
        """Restore a registry from a snapshot written by :meth:`save`.

        No events are emitted for the restored state.

        Args:
            path: Snapshot file.
            clock: Source of the current time.
            bus: Event bus for notifications.
            persist: Keep writing changes back to ``path``.

        Raises:
            StorageError: If the snapshot is missing or corrupt.
        """
        state = load_state(path)
        registry = cls(
            owner=state.owner,
            clock=clock,
            bus=bus,
            storage=str(path) if persist else "memory",
        )
        registry._state = state
        logger.info(
            "Restored registry from %s: %d certificates, %d issuers",
            path,
            state.certificate_counter,
            len(state.issuers),
        )
        return registry

    @classmethod
    def from_config(
        cls,
        config: "RegistryConfig",
        clock: Optional[Clock] = None,
        bus: Optional[EventBus] = None,
        collector: Optional["CollectorRegistry"] = None,
    ) -> "CertificateRegistry":
        """Build a registry from configuration.

        Loads the configured snapshot if it exists and attaches Prometheus
        metrics when enabled. Metrics go to ``collector``, or to the global
        Prometheus registry when it is not given; registries built from the
        same configuration share their counters.

        Raises:
            StorageError: If the snapshot belongs to a different owner.
        """
        if config.storage != "memory" and Path(config.storage).exists():
            registry = cls.load(config.storage, clock=clock, bus=bus, persist=True)
            if registry.owner != config.owner:
                raise StorageError(
                    f"Snapshot {config.storage} belongs to owner {registry.owner}, "
                    f"not {config.owner}"
                )
        else:
            registry = cls(
                owner=config.owner, clock=clock, bus=bus, storage=config.storage
            )

        if config.metrics_enabled:
            from skillcert.observability.metrics import RegistryMetrics

            registry.metrics = RegistryMetrics(
                registry.bus, prefix=config.metrics_prefix, registry=collector
            )
        return registry

    @property
    def owner(self) -> str:
        return self._state.owner

    @property
    def clock(self) -> Clock:
        return self._clock

    # ------------------------------------------------------------------
    # Issuer management
    # ------------------------------------------------------------------

    def manage_issuer(
        self,
        caller: str,
        target: str,
        name: str,
        description: str,
        authorize: bool,
    ) -> None:
        """
        Authorize or revoke an issuer.

        Authorizing an identity that was seen before keeps its issuance
        count. Revoking only clears the authorized flag; revoking an
        identity that was never authorized still succeeds and emits
        ``issuer.revoked``.

        Args:
            caller: Identity invoking the operation; must be the owner.
            target: Issuer identity.
            name: Display name, required when authorizing.
            description: Free-text description.
            authorize: True to authorize, False to revoke.

        Raises:
            UnauthorizedError: If ``caller`` is not the owner.
            InvalidArgumentError: If ``target`` is null, or ``name`` is empty
                when authorizing.
        """
        with self._lock:
            if caller != self._state.owner:
                logger.warning("Rejected manage_issuer from non-owner %s", caller)
                raise UnauthorizedError(f"{caller} is not the registry owner")
            require_identity(target, "issuer identity")
            if authorize and is_blank(name):
                raise InvalidArgumentError("Issuer name must not be empty")

            state = self._state
            current = self._issuer_record(target, state)
            if authorize:
                updated = current.model_copy(
                    update={
                        "name": name,
                        "description": description or "",
                        "is_authorized": True,
                    }
                )
            else:
                updated = current.model_copy(update={"is_authorized": False})
            self._commit(
                state.model_copy(
                    update={"issuers": {**state.issuers, target: updated}}
                )
            )

            if authorize:
                logger.info("Authorized issuer %s (%s)", target, name)
                self._emit(
                    EVENT_ISSUER_AUTHORIZED,
                    caller,
                    {"identity": target, "name": name},
                )
            else:
                logger.info("Revoked issuer %s", target)
                self._emit(EVENT_ISSUER_REVOKED, caller, {"identity": target})

    def is_authorized_issuer(self, identity: str) -> bool:
        """Check whether ``identity`` may currently issue certificates."""
        return self._issuer_record(identity, self._state).is_authorized

    def get_issuer(self, identity: str) -> Issuer:
        """Return the issuer record, or a default record if never seen."""
        return self._issuer_record(identity, self._state)

    # ------------------------------------------------------------------
    # Certificates
    # ------------------------------------------------------------------

    def issue_certificate(
        self,
        caller: str,
        recipient: str,
        skill_name: str,
        description: str,
        validity_period_seconds: int,
        metadata_handle: str,
    ) -> int:
        """
        Issue a certificate from ``caller`` to ``recipient``.

        Args:
            caller: Identity invoking the operation; must be an authorized
                issuer.
            recipient: Identity receiving the certificate.
            skill_name: Name of the certified skill.
            description: Free-text description.
            validity_period_seconds: Lifetime in seconds, or 0 for a
                certificate that never expires.
            metadata_handle: Opaque reference to external content.

        Returns:
            The new certificate id.

        Raises:
            UnauthorizedError: If ``caller`` is not an authorized issuer.
            InvalidArgumentError: If ``recipient`` is null, ``skill_name`` is
                empty, or the validity period is negative.
        """
        with self._lock:
            state = self._state
            if not self._issuer_record(caller, state).is_authorized:
                logger.warning("Rejected issuance from unauthorized %s", caller)
                raise UnauthorizedError(f"{caller} is not an authorized issuer")
            require_identity(recipient, "recipient")
            if is_blank(skill_name):
                raise InvalidArgumentError("Skill name must not be empty")
            if (
                isinstance(validity_period_seconds, bool)
                or not isinstance(validity_period_seconds, int)
                or validity_period_seconds < 0
            ):
                raise InvalidArgumentError(
                    f"Invalid validity period: {validity_period_seconds!r}"
                )

            now = self._clock.now()
            certificate_id = state.certificate_counter + 1
            expiry_date = (
                now + validity_period_seconds
                if validity_period_seconds > 0
                else NO_EXPIRY
            )
            certificate = Certificate(
                id=certificate_id,
                recipient=recipient,
                issuer=caller,
                skill_name=skill_name,
                description=description or "",
                issue_date=now,
                expiry_date=expiry_date,
                metadata_handle=metadata_handle or "",
                is_active=True,
            )
            issuer = state.issuers[caller]

            self._commit(
                state.model_copy(
                    update={
                        "certificate_counter": certificate_id,
                        "certificates": {
                            **state.certificates,
                            certificate_id: certificate,
                        },
                        "recipient_certificates": _append_index(
                            state.recipient_certificates, recipient, certificate_id
                        ),
                        "issuer_certificates": _append_index(
                            state.issuer_certificates, caller, certificate_id
                        ),
                        "issuers": {
                            **state.issuers,
                            caller: issuer.model_copy(
                                update={
                                    "total_certificates_issued": (
                                        issuer.total_certificates_issued + 1
                                    )
                                }
                            ),
                        },
                    }
                )
            )

            logger.info(
                "Issued certificate #%d (%s) from %s to %s",
                certificate_id,
                skill_name,
                caller,
                recipient,
            )
            self._emit(
                EVENT_CERTIFICATE_ISSUED,
                caller,
                {
                    "certificate_id": certificate_id,
                    "recipient": recipient,
                    "issuer": caller,
                    "skill_name": skill_name,
                },
                at=now,
            )
            return certificate_id

    def verify_certificate(self, certificate_id: int) -> VerificationResult:
        """
        Check whether a certificate is currently valid.

        A certificate is valid while it is active, its issuer is still
        authorized, and it has not reached its expiry date. The record is
        returned even when it is not valid.

        Raises:
            NotFoundError: If the certificate was never issued.
        """
        state = self._state
        certificate = self._certificate_record(certificate_id, state)
        now = self._clock.now()
        is_valid = (
            certificate.is_active
            and self._issuer_record(certificate.issuer, state).is_authorized
            and not certificate.is_expired(now)
        )
        logger.debug("Verified certificate #%d: valid=%s", certificate_id, is_valid)
        return VerificationResult(is_valid, certificate)

    def get_certificate(self, certificate_id: int) -> Certificate:
        """
        Return the stored certificate without computing validity.

        Raises:
            NotFoundError: If the certificate was never issued.
        """
        return self._certificate_record(certificate_id, self._state)

    def revoke_certificate(self, caller: str, certificate_id: int) -> None:
        """
        Revoke a certificate.

        Revoking an already revoked certificate succeeds and emits
        ``certificate.revoked`` again.

        Args:
            caller: Identity invoking the operation; must be the
                certificate's issuer or the owner.
            certificate_id: Certificate to revoke.

        Raises:
            NotFoundError: If the certificate was never issued.
            UnauthorizedError: If ``caller`` is neither the issuer nor the owner.
        """
        with self._lock:
            state = self._state
            certificate = self._certificate_record(certificate_id, state)
            if caller != certificate.issuer and caller != state.owner:
                logger.warning(
                    "Rejected revocation of certificate #%d by %s",
                    certificate_id,
                    caller,
                )
                raise UnauthorizedError(
                    f"{caller} may not revoke certificate {certificate_id}"
                )

            if certificate.is_active:
                revoked = certificate.model_copy(update={"is_active": False})
                self._commit(
                    state.model_copy(
                        update={
                            "certificates": {
                                **state.certificates,
                                certificate_id: revoked,
                            }
                        }
                    )
                )

            logger.info("Revoked certificate #%d by %s", certificate_id, caller)
            self._emit(
                EVENT_CERTIFICATE_REVOKED,
                caller,
                {"certificate_id": certificate_id},
            )

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def get_recipient_certificates(self, recipient: str) -> list[int]:
        """Ids issued to ``recipient``, oldest first, including revoked ones."""
        return list(self._state.recipient_certificates.get(recipient, ()))

    def get_issuer_certificates(self, issuer: str) -> list[int]:
        """Ids issued by ``issuer``, oldest first, including revoked ones."""
        return list(self._state.issuer_certificates.get(issuer, ()))

    def get_total_certificates(self) -> int:
        """Number of certificates ever issued."""
        return self._state.certificate_counter

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, path: Union[str, Path]) -> None:
        """Write a snapshot of the whole registry to ``path``."""
        with self._lock:
            save_state(self._state, path)

    def _commit(self, new_state: RegistryState) -> None:
        """Persist ``new_state`` if file-backed, then make it the live state.

        If the snapshot cannot be written the live state is left untouched.
        """
        if self._storage is not None:
            try:
                save_state(new_state, self._storage)
            except StorageError:
                logger.error("Change discarded; snapshot %s not written", self._storage)
                raise
        self._state = new_state

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _issuer_record(identity: str, state: RegistryState) -> Issuer:
        issuer = state.issuers.get(identity) if not is_null_identity(identity) else None
        if issuer is None:
            return Issuer(identity=identity if isinstance(identity, str) else "")
        return issuer

    @staticmethod
    def _certificate_record(certificate_id: int, state: RegistryState) -> Certificate:
        certificate = None
        if (
            isinstance(certificate_id, int)
            and not isinstance(certificate_id, bool)
            and certificate_id != NONEXISTENT_CERTIFICATE_ID
        ):
            certificate = state.certificates.get(certificate_id)
        if certificate is None:
            raise NotFoundError(f"Certificate {certificate_id!r} does not exist")
        return certificate

    def _emit(
        self,
        event_type: str,
        source: str,
        payload: dict,
        at: Optional[int] = None,
    ) -> None:
        if at is None:
            at = self._clock.now()
        self.bus.emit(
            Event(
                event_type=event_type,
                source=source,
                payload=payload,
                timestamp=datetime.fromtimestamp(at, tz=timezone.utc),
            )
        )


def _append_index(
    index: dict[str, list[int]], key: str, certificate_id: int
) -> dict[str, list[int]]:
    """Return a copy of ``index`` with ``certificate_id`` appended under ``key``."""
    return {**index, key: [*index.get(key, ()), certificate_id]}
