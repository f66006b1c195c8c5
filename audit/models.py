"""Pydantic models for the election audit trail - data contracts."""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator

from common.serialization import assume_utc, require_finite_json

# Naive values are read as UTC so that every timestamp can be compared.
Timestamp = Annotated[datetime, AfterValidator(assume_utc)]


class AuditAction(BaseModel):
    """
    The hashed content of an audit entry.

    Every field here is persisted verbatim on the entry, so the chain link
    can be recomputed later from the stored record alone.
    """

    action_type: str = Field(..., min_length=1, description="Category of the action (e.g., 'vote_cast', 'election_closed')")
    action_data: Dict[str, Any] = Field(default_factory=dict, description="Opaque structured payload")
    user_id: Optional[str] = Field(None, description="Acting user; None for system-initiated actions")
    timestamp: Timestamp = Field(..., description="Creation time as stored on the entry")

    model_config = ConfigDict(frozen=True)


class AuditEntryCreate(BaseModel):
    """
    Model for recording a new audit action.

    The service assigns audit_id, timestamp and the chain link.
    """

    election_id: str = Field(..., min_length=1, description="Election the action belongs to")
    action_type: str = Field(..., min_length=1, description="Category of the action")
    action_data: Dict[str, Any] = Field(default_factory=dict, description="Action payload")
    user_id: Optional[str] = Field(None, description="Acting user, if any")
    ip_address: Optional[str] = Field(None, description="Client address the action came from")
    user_agent: Optional[str] = Field(None, description="Client user agent")

    @field_validator("action_data")
    @classmethod
    def _finite_action_data(cls, value: Dict[str, Any]) -> Dict[str, Any]:
        require_finite_json(value)
        return value


class AuditEntry(BaseModel):
    """
    One recorded action against an election, as stored.

    Entries are append-only: once written they are never updated or deleted.
    """

    audit_id: str = Field(..., description="Unique entry identifier (UUID)")
    election_id: str = Field(..., min_length=1, description="Election identifier")
    user_id: Optional[str] = Field(None, description="Acting user; None for system actions")
    action_type: str = Field(..., description="Category of the action")
    action_data: Dict[str, Any] = Field(default_factory=dict, description="Action payload")
    ip_address: Optional[str] = Field(None, description="Client address")
    user_agent: Optional[str] = Field(None, description="Client user agent")
    timestamp: Timestamp = Field(..., description="Creation time")
    hash_chain: str = Field(..., description="SHA-256 hex digest covering this entry")
    previous_hash: str = Field("", description="hash_chain of the preceding entry, '' for the first")

    model_config = ConfigDict(frozen=True)

    def to_action(self) -> AuditAction:
        """Extract the hashed fields of this entry."""
        return AuditAction(
            action_type=self.action_type,
            action_data=self.action_data,
            user_id=self.user_id,
            timestamp=self.timestamp,
        )


class ChainLinkResult(BaseModel):
    """Verification outcome for a single entry of a chain."""

    audit_id: str = Field(..., description="Entry identifier")
    is_valid: bool = Field(..., description="Whether this entry passed every enabled check")
    expected_previous_hash: str = Field(..., description="Predecessor's hash_chain ('' for the first entry)")
    actual_previous_hash: str = Field(..., description="previous_hash stored on the entry")
    current_hash: str = Field(..., description="hash_chain stored on the entry")
    recomputed_hash: Optional[str] = Field(None, description="Digest recomputed from stored fields (recompute mode only)")
    digest_valid: Optional[bool] = Field(None, description="Whether recomputed_hash matches current_hash (recompute mode only)")


class ChainVerificationResult(BaseModel):
    """
    Result of verifying an election's chain.

    An empty chain is vacuously valid; use total_entries to tell
    "no entries" apart from "verified".
    """

    is_chain_valid: bool = Field(..., description="AND of all per-entry results")
    verification_results: List[ChainLinkResult] = Field(default_factory=list, description="One row per entry, in input order")
    total_entries: int = Field(..., ge=0, description="Number of entries checked")
    digests_checked: bool = Field(False, description="True when digests were recomputed, not just links compared")

    @property
    def failed_entries(self) -> List[ChainLinkResult]:
        return [row for row in self.verification_results if not row.is_valid]


class RapidActionsFinding(BaseModel):
    """Same actor performed two consecutive actions too quickly."""

    type: Literal["rapid_actions"] = "rapid_actions"
    description: str = "User performed actions too quickly"
    user_id: str
    timestamp: datetime = Field(..., description="Timestamp of the later action")
    time_difference_ms: float = Field(..., ge=0)


class HighActivityFinding(BaseModel):
    """Actor recorded more actions than the activity threshold allows."""

    type: Literal["high_activity"] = "high_activity"
    description: str = "User has unusually high activity"
    user_id: str
    action_count: int = Field(..., ge=0)
    threshold: int


AuditAnomaly = Annotated[
    Union[RapidActionsFinding, HighActivityFinding],
    Field(discriminator="type"),
]


class AnomalyReport(BaseModel):
    """Output of AnomalyDetector."""

    anomalies: List[AuditAnomaly] = Field(default_factory=list)
    total_anomalies: int = Field(0, ge=0)


class Timespan(BaseModel):
    """First and last timestamp of an entry sequence."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None


class AuditSummary(BaseModel):
    """Counts over an election's audit trail."""

    total_actions: int = Field(..., ge=0)
    action_types: Dict[str, int] = Field(default_factory=dict)
    unique_users: int = Field(..., ge=0)
    timespan: Timespan = Field(default_factory=Timespan)


class AuditReport(BaseModel):
    """
    Election-level audit summary.

    Combines action counts, per-user activity, anomaly findings and the
    chain verification result for a single election.
    """

    election_id: str
    summary: AuditSummary
    user_activity: Dict[str, int] = Field(default_factory=dict)
    anomalies: AnomalyReport = Field(default_factory=AnomalyReport)
    hash_chain_verification: ChainVerificationResult


class ElectionAuditResponse(BaseModel):
    """Model for API response containing an election's trail and its report."""

    election_id: str
    audit_trail: List[AuditEntry] = Field(default_factory=list)
    audit_report: AuditReport
    total_entries: int = Field(..., ge=0)


class UserAuditHistory(BaseModel):
    """Model for API response containing one user's actions, newest first."""

    user_id: str
    audit_history: List[AuditEntry] = Field(default_factory=list)
    total_actions: int = Field(..., ge=0)
