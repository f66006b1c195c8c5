"""
Vote verification - verification records, receipt digests and payload
integrity checks.

A voter is issued a verification code when a record is opened and, when the
service holds a receipt key, an HMAC receipt digest over that code. Looking
the code up later verifies the vote; a supplied receipt digest must match.

Vote payloads are hashed over canonical JSON, so two payloads with the same
content always hash the same regardless of key order.
"""

import hashlib
import hmac
import secrets
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Optional

from common.exceptions import VerificationNotFoundError
from common.logging import get_logger
from common.serialization import canonical_json
from verification.models import (
    ElectionVerifications,
    ReceiptVerificationResult,
    VerificationCreate,
    VerificationStatus,
    VerificationSummary,
    VoteIntegrityResult,
    VoteVerification,
)
from verification.repository import VerificationRepository

logger = get_logger(__name__)

VERIFICATION_CODE_BYTES = 6


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def receipt_payload(verification: VoteVerification) -> Dict[str, Any]:
    """Fields of a verification record covered by its receipt digest."""
    return {
        "verification_code": verification.verification_code,
        "vote_id": verification.vote_id,
        "election_id": verification.election_id,
    }


def build_verification_summary(outcomes: Iterable[bool]) -> VerificationSummary:
    """Count successful and failed outcomes; success_rate is 0 when empty."""
    outcomes = list(outcomes)
    total = len(outcomes)
    successful = sum(1 for outcome in outcomes if outcome)
    return VerificationSummary(
        total=total,
        successful=successful,
        failed=total - successful,
        success_rate=round(successful / total * 100, 2) if total else 0.0,
    )


class VoteVerificationService:
    """Manages verification records and checks vote payloads against stored copies."""

    def __init__(
        self,
        repository: Optional[VerificationRepository] = None,
        receipt_key: Optional[str] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize vote verification service.

        Args:
            repository: VerificationRepository; needed for verification records
            receipt_key: Server-held key for receipt digests; without one no
                receipts are issued and a supplied digest never matches
            clock: Source of verification times
        """
        self._repository = repository
        self._receipt_key = receipt_key
        self._clock = clock

    def generate_verification_code(self) -> str:
        """Random 12-character uppercase hex code a voter can use to look up their vote."""
        return secrets.token_hex(VERIFICATION_CODE_BYTES).upper()

    def calculate_vote_hash(self, vote_data: Dict[str, Any]) -> str:
        return hashlib.sha256(canonical_json(vote_data).encode("utf-8")).hexdigest()

    def verify_vote_integrity(
        self,
        original_vote: Dict[str, Any],
        stored_vote: Dict[str, Any],
    ) -> VoteIntegrityResult:
        """Compare a vote payload with its stored copy by digest."""
        original_hash = self.calculate_vote_hash(original_vote)
        stored_hash = self.calculate_vote_hash(stored_vote)
        result = VoteIntegrityResult(
            is_valid=hmac.compare_digest(original_hash, stored_hash),
            original_hash=original_hash,
            stored_hash=stored_hash,
        )
        if not result.is_valid:
            logger.warning(
                "vote_integrity_mismatch",
                original_hash=original_hash,
                stored_hash=stored_hash,
            )
        return result

    def sign_receipt(self, receipt_data: Dict[str, Any], key: str) -> str:
        """HMAC-SHA256 digest of a receipt under a server-held key."""
        return hmac.new(
            key.encode("utf-8"),
            canonical_json(receipt_data).encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

    def verify_receipt_digest(
        self,
        receipt_data: Dict[str, Any],
        digest: str,
        key: str,
    ) -> ReceiptVerificationResult:
        """
        Check a receipt's keyed digest.

        This proves the receipt was issued by a holder of the key and has not
        been altered since. It is not a public-key signature.
        """
        expected = self.sign_receipt(receipt_data, key)
        return ReceiptVerificationResult(
            is_valid=hmac.compare_digest(expected, digest),
            receipt_hash=self.calculate_vote_hash(receipt_data),
        )

    def create_verification(self, verification_create: VerificationCreate) -> VoteVerification:
        """
        Open a pending verification record with a fresh code.

        The receipt digest covers the code, vote and election, so it can be
        checked again from the stored record.
        """
        code = self.generate_verification_code()
        receipt_digest = None
        if self._receipt_key:
            receipt_digest = self.sign_receipt(
                {
                    "verification_code": code,
                    "vote_id": verification_create.vote_id,
                    "election_id": verification_create.election_id,
                },
                self._receipt_key,
            )

        verification = self._require_repository().create_verification(
            verification_create,
            verification_code=code,
            receipt_digest=receipt_digest,
        )
        logger.info(
            "verification_created",
            election_id=verification.election_id,
            verification_id=verification.verification_id,
            vote_id=verification.vote_id,
            receipt_issued=receipt_digest is not None,
        )
        return verification

    def verify_by_code(
        self,
        verification_code: str,
        receipt_digest: Optional[str] = None,
    ) -> VoteVerification:
        """
        Verify a vote by its verification code.

        Without a receipt digest the record moves to 'verified'. With one,
        it moves to 'verified' only if the digest matches, otherwise to
        'failed'.

        Raises:
            VerificationNotFoundError: If no record has this code
        """
        repository = self._require_repository()
        verification = repository.get_by_code(verification_code)
        if verification is None:
            raise VerificationNotFoundError("Verification code not found")

        receipt_valid = None
        if receipt_digest is not None:
            receipt_valid = self._receipt_key is not None and self.verify_receipt_digest(
                receipt_payload(verification),
                receipt_digest,
                self._receipt_key,
            ).is_valid

        if receipt_valid is False:
            status, verified_at = VerificationStatus.FAILED, None
        else:
            status, verified_at = VerificationStatus.VERIFIED, self._clock()

        updated = repository.update_status(verification.verification_id, status, verified_at)
        if updated is None:
            raise VerificationNotFoundError("Verification code not found")

        if status == VerificationStatus.FAILED:
            logger.warning(
                "verification_receipt_mismatch",
                election_id=updated.election_id,
                verification_id=updated.verification_id,
            )
        else:
            logger.info(
                "vote_verified",
                election_id=updated.election_id,
                verification_id=updated.verification_id,
                receipt_checked=receipt_valid is not None,
            )
        return updated

    def get_election_verifications(self, election_id: str) -> ElectionVerifications:
        """List an election's verification records with success counts."""
        verifications = self._require_repository().get_by_election(election_id)
        return ElectionVerifications(
            election_id=election_id,
            verifications=verifications,
            summary=build_verification_summary(
                verification.verification_status == VerificationStatus.VERIFIED
                for verification in verifications
            ),
        )

    def _require_repository(self) -> VerificationRepository:
        if self._repository is None:
            raise RuntimeError("VoteVerificationService was created without a repository")
        return self._repository
