"""
Tests for VoteVerificationService.
"""

import re
from datetime import datetime, timezone

import pytest

from common.exceptions import VerificationNotFoundError
from verification.models import VerificationCreate, VerificationStatus
from verification.service import VoteVerificationService, build_verification_summary, receipt_payload

from fakes import InMemoryVerificationRepository

VERIFIED_AT = datetime(2024, 11, 6, 9, 30, tzinfo=timezone.utc)


def _service(receipt_key=None):
    return VoteVerificationService(
        InMemoryVerificationRepository(),
        receipt_key=receipt_key,
        clock=lambda: VERIFIED_AT,
    )


def _create(service, vote_id="v1", election_id="election-1"):
    return service.create_verification(
        VerificationCreate(vote_id=vote_id, election_id=election_id, user_id="voter-9")
    )


class TestVerificationCode:
    """Test receipt verification codes."""

    def test_code_format(self):
        """Test codes are 12 uppercase hex characters."""
        code = VoteVerificationService().generate_verification_code()
        assert re.fullmatch(r"[0-9A-F]{12}", code)

    def test_codes_differ(self):
        """Test consecutive codes are not repeated."""
        service = VoteVerificationService()
        assert len({service.generate_verification_code() for _ in range(20)}) == 20


class TestVoteIntegrity:
    """Test vote payload comparison."""

    def test_key_order_irrelevant(self):
        """Test payloads with the same content hash the same."""
        service = VoteVerificationService()
        assert service.calculate_vote_hash({"a": 1, "b": [1, 2]}) == service.calculate_vote_hash({"b": [1, 2], "a": 1})

    def test_matching_payloads(self):
        """Test an unchanged stored vote verifies."""
        vote = {"vote_id": "v1", "choices": {"mayor": "candidate-3"}}
        result = VoteVerificationService().verify_vote_integrity(vote, dict(vote))
        assert result.is_valid is True
        assert result.original_hash == result.stored_hash

    def test_altered_payload(self):
        """Test a changed stored vote fails."""
        result = VoteVerificationService().verify_vote_integrity(
            {"vote_id": "v1", "choices": {"mayor": "candidate-3"}},
            {"vote_id": "v1", "choices": {"mayor": "candidate-1"}},
        )
        assert result.is_valid is False
        assert result.original_hash != result.stored_hash


class TestReceiptDigest:
    """Test keyed receipt digests."""

    def test_valid_digest(self):
        """Test a receipt signed with the key verifies under the same key."""
        service = VoteVerificationService()
        receipt = {"vote_id": "v1", "code": "ABCDEF123456"}
        digest = service.sign_receipt(receipt, "server-key")
        result = service.verify_receipt_digest(receipt, digest, "server-key")
        assert result.is_valid is True
        assert result.receipt_hash == service.calculate_vote_hash(receipt)

    def test_wrong_key(self):
        """Test a different key fails verification."""
        service = VoteVerificationService()
        receipt = {"vote_id": "v1"}
        digest = service.sign_receipt(receipt, "server-key")
        assert service.verify_receipt_digest(receipt, digest, "other-key").is_valid is False

    def test_altered_receipt(self):
        """Test an altered receipt fails verification."""
        service = VoteVerificationService()
        digest = service.sign_receipt({"vote_id": "v1"}, "server-key")
        assert service.verify_receipt_digest({"vote_id": "v2"}, digest, "server-key").is_valid is False


class TestVerificationSummary:
    """Test verification outcome summaries."""

    def test_success_rate(self):
        """Test the success rate is a two-decimal percentage."""
        summary = build_verification_summary([True, True, False])
        assert summary.total == 3
        assert summary.successful == 2
        assert summary.failed == 1
        assert summary.success_rate == 66.67

    def test_empty(self):
        """Test no outcomes gives a zero success rate."""
        summary = build_verification_summary([])
        assert summary.total == 0
        assert summary.success_rate == 0.0


class TestVerificationRecords:
    """Test the verification record lifecycle."""

    def test_create_issues_code(self):
        """Test a new record is pending with a 12-character code."""
        record = _create(_service())
        assert record.verification_status == VerificationStatus.PENDING
        assert re.fullmatch(r"[0-9A-F]{12}", record.verification_code)
        assert record.verified_at is None
        assert record.receipt_digest is None

    def test_create_issues_receipt_with_key(self):
        """Test a configured key yields a receipt digest over the code."""
        service = _service(receipt_key="server-key")
        record = _create(service)
        assert record.receipt_digest == service.sign_receipt(receipt_payload(record), "server-key")

    def test_verify_by_code(self):
        """Test looking up a code marks the record verified."""
        service = _service()
        record = _create(service)

        verified = service.verify_by_code(record.verification_code)

        assert verified.verification_id == record.verification_id
        assert verified.verification_status == VerificationStatus.VERIFIED
        assert verified.verified_at == VERIFIED_AT

    def test_verify_with_matching_receipt(self):
        """Test the issued receipt digest verifies the record."""
        service = _service(receipt_key="server-key")
        record = _create(service)

        verified = service.verify_by_code(record.verification_code, receipt_digest=record.receipt_digest)

        assert verified.verification_status == VerificationStatus.VERIFIED

    def test_verify_with_wrong_receipt(self):
        """Test a receipt digest that does not match fails the record."""
        service = _service(receipt_key="server-key")
        record = _create(service)

        result = service.verify_by_code(record.verification_code, receipt_digest="0" * 64)

        assert result.verification_status == VerificationStatus.FAILED
        assert result.verified_at is None

    def test_receipt_without_key_fails(self):
        """Test a receipt digest cannot pass when no key is configured."""
        service = _service()
        record = _create(service)
        result = service.verify_by_code(record.verification_code, receipt_digest="0" * 64)
        assert result.verification_status == VerificationStatus.FAILED

    def test_unknown_code(self):
        """Test an unknown code raises VerificationNotFoundError."""
        with pytest.raises(VerificationNotFoundError):
            _service().verify_by_code("FFFFFFFFFFFF")

    def test_election_verifications(self):
        """Test an election's records are listed with success counts."""
        service = _service()
        first = _create(service, vote_id="v1")
        _create(service, vote_id="v2")
        _create(service, vote_id="v3", election_id="election-2")
        service.verify_by_code(first.verification_code)

        listing = service.get_election_verifications("election-1")

        assert len(listing.verifications) == 2
        assert listing.summary.total == 2
        assert listing.summary.successful == 1
        assert listing.summary.success_rate == 50.0

    def test_records_require_repository(self):
        """Test record operations without a repository raise RuntimeError."""
        with pytest.raises(RuntimeError):
            VoteVerificationService().create_verification(
                VerificationCreate(vote_id="v1", election_id="election-1")
            )
