"""Pydantic models for vote verification records and integrity checks."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class VerificationStatus(str, Enum):
    """Lifecycle of a verification record."""

    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"


class VerificationCreate(BaseModel):
    """
    Model for opening a verification record for a cast vote.

    The service assigns the verification code and, when a receipt key is
    configured, the receipt digest handed to the voter.
    """

    vote_id: str = Field(..., min_length=1, description="Vote being verified")
    election_id: str = Field(..., min_length=1, description="Election the vote belongs to")
    user_id: Optional[str] = Field(None, description="Voter the record is issued to")
    verification_type: str = Field("manual", min_length=1, description="How the verification was requested")
    verification_data: Dict[str, Any] = Field(default_factory=dict, description="Supporting details")


class VoteVerification(BaseModel):
    """A stored verification record."""

    verification_id: str = Field(..., description="Record identifier (UUID)")
    vote_id: str
    election_id: str
    user_id: Optional[str] = None
    verification_code: str = Field(..., description="Code the voter looks the record up by")
    verification_type: str = "manual"
    verification_status: VerificationStatus = VerificationStatus.PENDING
    verification_data: Dict[str, Any] = Field(default_factory=dict)
    receipt_digest: Optional[str] = Field(None, description="HMAC-SHA256 receipt digest issued with the code")
    verified_at: Optional[datetime] = None
    created_at: datetime

    model_config = ConfigDict(use_enum_values=True)


class VerifyCodeRequest(BaseModel):
    """Request body for verifying a vote by its code."""

    verification_code: str = Field(..., min_length=1, description="Code issued when the record was opened")
    receipt_digest: Optional[str] = Field(None, description="Receipt digest to check, if the voter holds one")


class VoteIntegrityResult(BaseModel):
    """Comparison of a vote payload against its stored copy."""

    is_valid: bool
    original_hash: str
    stored_hash: str


class ReceiptVerificationResult(BaseModel):
    """Check of a receipt's keyed digest."""

    is_valid: bool
    receipt_hash: str


class VerificationSummary(BaseModel):
    total: int = Field(0, ge=0)
    successful: int = Field(0, ge=0)
    failed: int = Field(0, ge=0)
    success_rate: float = Field(0.0, ge=0, le=100, description="Percentage, two decimals")


class ElectionVerifications(BaseModel):
    """An election's verification records, newest first, with outcome counts."""

    election_id: str
    verifications: List[VoteVerification] = Field(default_factory=list)
    summary: VerificationSummary


class VoteIntegrityRequest(BaseModel):
    """Request body for comparing a vote payload with its stored copy."""

    original_vote: Dict[str, Any] = Field(..., description="Vote payload as the voter holds it")
    stored_vote: Dict[str, Any] = Field(..., description="Vote payload as stored")
    vote_id: Optional[str] = Field(None, description="Vote identifier, for logging")
