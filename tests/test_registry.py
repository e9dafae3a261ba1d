"""Tests for the certificate registry operations."""

import pytest

from skillcert.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    UnauthorizedError,
)
from skillcert.registry import Certificate, CertificateRegistry, Issuer

OWNER = "0xowner"
ACME = "0xacme"
GLOBEX = "0xglobex"
ALICE = "0xalice"
BOB = "0xbob"
MALLORY = "0xmallory"
NULL_ADDRESS = "0x0000000000000000000000000000000000000000"


class TestConstruction:
    def test_owner_is_fixed(self, registry):
        assert registry.owner == OWNER

    @pytest.mark.parametrize("owner", [None, "", "   ", NULL_ADDRESS])
    def test_null_owner_rejected(self, owner):
        with pytest.raises(InvalidArgumentError):
            CertificateRegistry(owner=owner)

    def test_empty_registry(self, registry):
        assert registry.get_total_certificates() == 0
        assert registry.get_recipient_certificates(ALICE) == []
        assert registry.get_issuer_certificates(ACME) == []


class TestManageIssuer:
    def test_authorize_new_issuer(self, registry):
        registry.manage_issuer(OWNER, ACME, "Acme", "Training provider", True)
        issuer = registry.get_issuer(ACME)
        assert issuer.name == "Acme"
        assert issuer.description == "Training provider"
        assert issuer.is_authorized is True
        assert issuer.total_certificates_issued == 0
        assert registry.is_authorized_issuer(ACME) is True

    def test_non_owner_rejected(self, registry):
        with pytest.raises(UnauthorizedError):
            registry.manage_issuer(MALLORY, MALLORY, "Evil", "", True)
        assert registry.is_authorized_issuer(MALLORY) is False
        assert registry.get_issuer(MALLORY) == Issuer(identity=MALLORY)

    def test_non_owner_cannot_revoke(self, registry, acme):
        with pytest.raises(UnauthorizedError):
            registry.manage_issuer(acme, acme, "", "", False)
        assert registry.is_authorized_issuer(acme) is True

    def test_authorized_issuer_is_not_owner(self, registry, acme):
        with pytest.raises(UnauthorizedError):
            registry.manage_issuer(acme, GLOBEX, "Globex", "", True)

    @pytest.mark.parametrize("target", [None, "", NULL_ADDRESS])
    def test_null_target_rejected(self, registry, target):
        with pytest.raises(InvalidArgumentError):
            registry.manage_issuer(OWNER, target, "Name", "", True)

    @pytest.mark.parametrize("name", ["", "   ", "\t\n", None])
    def test_blank_name_rejected_when_authorizing(self, registry, name):
        with pytest.raises(InvalidArgumentError):
            registry.manage_issuer(OWNER, ACME, name, "desc", True)
        assert registry.is_authorized_issuer(ACME) is False

    def test_empty_name_allowed_when_revoking(self, registry, acme):
        registry.manage_issuer(OWNER, acme, "", "", False)
        assert registry.is_authorized_issuer(acme) is False

    def test_revoke_keeps_name_and_count(self, registry, acme):
        registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        registry.manage_issuer(OWNER, acme, "ignored", "ignored", False)
        issuer = registry.get_issuer(acme)
        assert issuer.is_authorized is False
        assert issuer.name == "Acme"
        assert issuer.description == "desc"
        assert issuer.total_certificates_issued == 1

    def test_reauthorize_preserves_count(self, registry, acme):
        registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        registry.issue_certificate(acme, BOB, "Go", "", 0, "")
        registry.manage_issuer(OWNER, acme, "", "", False)
        registry.manage_issuer(OWNER, acme, "Acme Corp", "renamed", True)
        issuer = registry.get_issuer(acme)
        assert issuer.is_authorized is True
        assert issuer.name == "Acme Corp"
        assert issuer.description == "renamed"
        assert issuer.total_certificates_issued == 2

    def test_revoke_never_authorized_succeeds(self, registry):
        registry.manage_issuer(OWNER, GLOBEX, "", "", False)
        issuer = registry.get_issuer(GLOBEX)
        assert issuer.is_authorized is False
        assert issuer.total_certificates_issued == 0

    def test_owner_can_authorize_itself(self, registry):
        registry.manage_issuer(OWNER, OWNER, "Registry", "", True)
        assert registry.issue_certificate(OWNER, ALICE, "Rust", "", 0, "") == 1


class TestIsAuthorizedIssuer:
    def test_unknown_identity(self, registry):
        assert registry.is_authorized_issuer(GLOBEX) is False

    def test_null_identity(self, registry):
        assert registry.is_authorized_issuer("") is False
        assert registry.is_authorized_issuer(None) is False

    def test_get_issuer_default_record(self, registry):
        issuer = registry.get_issuer(GLOBEX)
        assert issuer.identity == GLOBEX
        assert issuer.name == ""
        assert issuer.is_authorized is False
        assert issuer.total_certificates_issued == 0


class TestIssueCertificate:
    def test_first_id_is_one(self, registry, acme):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "Systems", 3600, "ipfs://Qm1")
        assert cert_id == 1
        assert registry.get_total_certificates() == 1

    def test_certificate_fields(self, registry, acme, clock):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "Systems", 3600, "ipfs://Qm1")
        cert = registry.get_certificate(cert_id)
        assert cert == Certificate(
            id=1,
            recipient=ALICE,
            issuer=acme,
            skill_name="Rust",
            description="Systems",
            issue_date=clock.now(),
            expiry_date=clock.now() + 3600,
            metadata_handle="ipfs://Qm1",
            is_active=True,
        )
        assert cert.has_metadata is True

    def test_zero_validity_never_expires(self, registry, acme):
        cert = registry.get_certificate(registry.issue_certificate(acme, ALICE, "Rust", "", 0, ""))
        assert cert.expiry_date == 0
        assert cert.never_expires is True
        assert cert.has_metadata is False

    def test_ids_are_sequential(self, registry, acme):
        ids = [registry.issue_certificate(acme, ALICE, f"Skill {i}", "", 0, "") for i in range(5)]
        assert ids == [1, 2, 3, 4, 5]
        assert registry.get_total_certificates() == 5

    def test_issuer_count_increments(self, registry, acme):
        registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        registry.issue_certificate(acme, BOB, "Go", "", 0, "")
        assert registry.get_issuer(acme).total_certificates_issued == 2

    def test_count_unaffected_by_revocation(self, registry, acme):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        registry.revoke_certificate(acme, cert_id)
        assert registry.get_issuer(acme).total_certificates_issued == 1

    def test_unauthorized_caller_allocates_no_id(self, registry, acme):
        with pytest.raises(UnauthorizedError):
            registry.issue_certificate(MALLORY, ALICE, "Rust", "", 0, "")
        assert registry.get_total_certificates() == 0
        assert registry.get_recipient_certificates(ALICE) == []

    def test_owner_is_not_implicitly_an_issuer(self, registry):
        with pytest.raises(UnauthorizedError):
            registry.issue_certificate(OWNER, ALICE, "Rust", "", 0, "")

    def test_revoked_issuer_cannot_issue(self, registry, acme):
        registry.manage_issuer(OWNER, acme, "", "", False)
        with pytest.raises(UnauthorizedError):
            registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")

    @pytest.mark.parametrize("recipient", [None, "", NULL_ADDRESS])
    def test_null_recipient_rejected(self, registry, acme, recipient):
        with pytest.raises(InvalidArgumentError):
            registry.issue_certificate(acme, recipient, "Rust", "", 0, "")
        assert registry.get_total_certificates() == 0

    @pytest.mark.parametrize("skill", ["", "   ", "\t", None])
    def test_blank_skill_rejected(self, registry, acme, skill):
        with pytest.raises(InvalidArgumentError):
            registry.issue_certificate(acme, ALICE, skill, "", 0, "")
        assert registry.get_total_certificates() == 0
        assert registry.get_issuer(acme).total_certificates_issued == 0

    @pytest.mark.parametrize("validity", [-1, 1.5, "3600", True])
    def test_invalid_validity_rejected(self, registry, acme, validity):
        with pytest.raises(InvalidArgumentError):
            registry.issue_certificate(acme, ALICE, "Rust", "", validity, "")
        assert registry.get_total_certificates() == 0

    def test_unauthorized_checked_before_arguments(self, registry):
        with pytest.raises(UnauthorizedError):
            registry.issue_certificate(MALLORY, "", "", "", -1, "")

    def test_self_issued_certificate(self, registry, acme):
        cert_id = registry.issue_certificate(acme, acme, "Rust", "", 0, "")
        assert registry.get_recipient_certificates(acme) == [cert_id]
        assert registry.get_issuer_certificates(acme) == [cert_id]


class TestVerifyCertificate:
    def test_valid_immediately(self, registry, acme):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "", 3600, "")
        is_valid, cert = registry.verify_certificate(cert_id)
        assert is_valid is True
        assert cert.id == cert_id

    def test_result_fields(self, registry, acme):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        result = registry.verify_certificate(cert_id)
        assert result.is_valid is True
        assert result.certificate.skill_name == "Rust"

    @pytest.mark.parametrize("cert_id", [0, 1, 42, -1])
    def test_never_issued_not_found(self, registry, cert_id):
        with pytest.raises(NotFoundError):
            registry.verify_certificate(cert_id)

    @pytest.mark.parametrize("cert_id", [True, 1.0, "1", None])
    def test_non_integer_ids_not_found(self, registry, acme, cert_id):
        registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        with pytest.raises(NotFoundError):
            registry.verify_certificate(cert_id)
        with pytest.raises(NotFoundError):
            registry.get_certificate(cert_id)
        with pytest.raises(NotFoundError):
            registry.revoke_certificate(OWNER, cert_id)
        assert registry.get_certificate(1).is_active is True

    def test_id_zero_not_found_after_issuance(self, registry, acme):
        registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        with pytest.raises(NotFoundError):
            registry.verify_certificate(0)
        with pytest.raises(NotFoundError):
            registry.verify_certificate(2)

    def test_revoked_certificate_invalid_but_retrievable(self, registry, acme):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        registry.revoke_certificate(acme, cert_id)
        is_valid, cert = registry.verify_certificate(cert_id)
        assert is_valid is False
        assert cert.is_active is False
        assert cert.skill_name == "Rust"

    def test_issuer_revocation_invalidates_all(self, registry, acme):
        ids = [registry.issue_certificate(acme, r, "Rust", "", 0, "") for r in (ALICE, BOB)]
        registry.manage_issuer(OWNER, acme, "", "", False)
        for cert_id in ids:
            is_valid, cert = registry.verify_certificate(cert_id)
            assert is_valid is False
            assert cert.is_active is True

    def test_issuer_reauthorization_restores_validity(self, registry, acme):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        registry.manage_issuer(OWNER, acme, "", "", False)
        registry.manage_issuer(OWNER, acme, "Acme", "", True)
        assert registry.verify_certificate(cert_id).is_valid is True

    def test_other_issuers_unaffected(self, registry, acme):
        registry.manage_issuer(OWNER, GLOBEX, "Globex", "", True)
        acme_cert = registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        globex_cert = registry.issue_certificate(GLOBEX, ALICE, "Go", "", 0, "")
        registry.manage_issuer(OWNER, acme, "", "", False)
        assert registry.verify_certificate(acme_cert).is_valid is False
        assert registry.verify_certificate(globex_cert).is_valid is True


class TestRevokeCertificate:
    def test_issuer_revokes(self, registry, acme):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        registry.revoke_certificate(acme, cert_id)
        assert registry.get_certificate(cert_id).is_active is False

    def test_owner_revokes(self, registry, acme):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        registry.revoke_certificate(OWNER, cert_id)
        assert registry.get_certificate(cert_id).is_active is False

    def test_recipient_cannot_revoke(self, registry, acme):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        with pytest.raises(UnauthorizedError):
            registry.revoke_certificate(ALICE, cert_id)
        assert registry.get_certificate(cert_id).is_active is True

    def test_other_issuer_cannot_revoke(self, registry, acme):
        registry.manage_issuer(OWNER, GLOBEX, "Globex", "", True)
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        with pytest.raises(UnauthorizedError):
            registry.revoke_certificate(GLOBEX, cert_id)

    def test_deauthorized_issuer_can_still_revoke_own(self, registry, acme):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        registry.manage_issuer(OWNER, acme, "", "", False)
        registry.revoke_certificate(acme, cert_id)
        assert registry.get_certificate(cert_id).is_active is False

    def test_revoke_is_idempotent(self, registry, acme):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        registry.revoke_certificate(acme, cert_id)
        registry.revoke_certificate(acme, cert_id)
        assert registry.get_certificate(cert_id).is_active is False

    def test_not_found_checked_before_authorization(self, registry):
        with pytest.raises(NotFoundError):
            registry.revoke_certificate(MALLORY, 7)

    def test_revocation_does_not_touch_other_fields(self, registry, acme):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "d", 60, "h")
        before = registry.get_certificate(cert_id)
        registry.revoke_certificate(acme, cert_id)
        after = registry.get_certificate(cert_id)
        assert after.model_dump(exclude={"is_active"}) == before.model_dump(exclude={"is_active"})

    def test_snapshot_held_by_reader_is_stable(self, registry, acme):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        _, snapshot = registry.verify_certificate(cert_id)
        registry.revoke_certificate(acme, cert_id)
        assert snapshot.is_active is True


class TestEnumeration:
    def test_recipient_index_in_insertion_order(self, registry, acme):
        registry.manage_issuer(OWNER, GLOBEX, "Globex", "", True)
        first = registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        registry.issue_certificate(acme, BOB, "Go", "", 0, "")
        third = registry.issue_certificate(GLOBEX, ALICE, "Python", "", 0, "")
        assert registry.get_recipient_certificates(ALICE) == [first, third]

    def test_issuer_index_regardless_of_revocation(self, registry, acme):
        ids = [registry.issue_certificate(acme, r, "Rust", "", 0, "") for r in (ALICE, BOB, ALICE)]
        registry.revoke_certificate(acme, ids[1])
        registry.manage_issuer(OWNER, acme, "", "", False)
        assert registry.get_issuer_certificates(acme) == ids

    def test_duplicates_are_kept(self, registry, acme):
        ids = [registry.issue_certificate(acme, ALICE, "Rust", "", 0, "") for _ in range(2)]
        assert registry.get_recipient_certificates(ALICE) == ids

    def test_returned_lists_are_copies(self, registry, acme):
        registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        registry.get_recipient_certificates(ALICE).append(99)
        registry.get_issuer_certificates(acme).clear()
        assert registry.get_recipient_certificates(ALICE) == [1]
        assert registry.get_issuer_certificates(acme) == [1]

    def test_total_includes_revoked(self, registry, acme):
        cert_id = registry.issue_certificate(acme, ALICE, "Rust", "", 0, "")
        registry.issue_certificate(acme, ALICE, "Go", "", 0, "")
        registry.revoke_certificate(OWNER, cert_id)
        assert registry.get_total_certificates() == 2
