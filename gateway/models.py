"""
Request/response models for the Gateway API.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from audit.models import ChainVerificationResult
from common.serialization import require_finite_json
from fraud_detection.models import VoteRecord


class AuditEntryRequest(BaseModel):
    """Request body for recording an audit action."""

    election_id: str = Field(..., min_length=1, description="Election the action belongs to")
    action_type: str = Field(..., min_length=1, description="Category of the action")
    action_data: Dict[str, Any] = Field(default_factory=dict, description="Action payload")
    user_id: Optional[str] = Field(None, description="Acting user, if any")

    @field_validator("action_data")
    @classmethod
    def _finite_action_data(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        require_finite_json(value)
        return value


class AuditEntryCreated(BaseModel):
    """Response for a recorded audit action."""

    audit_id: str
    hash_chain: str
    previous_hash: str


class ChainVerificationResponse(BaseModel):
    """Response for an election chain verification."""

    election_id: str
    is_chain_valid: bool
    total_entries: int
    chain_verification: ChainVerificationResult


class FraudDetectionRequest(BaseModel):
    """Request body for running fraud detection over supplied votes."""

    election_id: str = Field(..., min_length=1, description="Election identifier")
    votes: List[VoteRecord] = Field(default_factory=list, description="Votes to analyze")


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error message")
    error_code: Optional[str] = Field(None, description="Error code")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
