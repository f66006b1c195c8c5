"""
Verification module - verification records, receipt digests and vote payload integrity.
"""

from verification.models import (
    ElectionVerifications,
    ReceiptVerificationResult,
    VerificationCreate,
    VerificationStatus,
    VerificationSummary,
    VerifyCodeRequest,
    VoteIntegrityRequest,
    VoteIntegrityResult,
    VoteVerification,
)
from verification.repository import VerificationRepository
from verification.service import VoteVerificationService, build_verification_summary

__all__ = [
    "ElectionVerifications",
    "ReceiptVerificationResult",
    "VerificationCreate",
    "VerificationRepository",
    "VerificationStatus",
    "VerificationSummary",
    "VerifyCodeRequest",
    "VoteIntegrityRequest",
    "VoteIntegrityResult",
    "VoteVerification",
    "VoteVerificationService",
    "build_verification_summary",
]
