"""
Data models for fraud detection.

Defines vote input records, detector findings, fraud reports and the
manually filed fraud cases that investigators work through.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from audit.models import HighActivityFinding, RapidActionsFinding, Timestamp


class VoteRecord(BaseModel):
    """A cast ballot, as read from the vote store. Read-only input to the detectors."""

    vote_id: str = Field(..., min_length=1, description="Vote identifier")
    user_id: str = Field(..., min_length=1, description="Voter identifier")
    election_id: str = Field(..., min_length=1, description="Election identifier")
    created_at: Timestamp = Field(..., description="When the vote was cast")

    model_config = ConfigDict(frozen=True)


class DuplicateVoteFinding(BaseModel):
    """Same voter cast more than one ballot in the same election."""

    type: Literal["duplicate_vote"] = "duplicate_vote"
    user_id: str
    election_id: str
    vote_ids: List[str] = Field(..., min_length=2, max_length=2, description="(first vote, repeat vote)")


class RapidVotingFinding(BaseModel):
    """Same voter cast two ballots in quick succession."""

    type: Literal["rapid_voting"] = "rapid_voting"
    user_id: str
    time_difference_ms: float = Field(..., ge=0)
    vote_ids: List[str] = Field(..., min_length=2, max_length=2, description="(earlier vote, later vote)")


class VotingSpikeFinding(BaseModel):
    """An hour of the day received far more votes than the daily average."""

    type: Literal["voting_spike"] = "voting_spike"
    hour: int = Field(..., ge=0, le=23)
    vote_count: int = Field(..., ge=0)
    average: int = Field(..., ge=0, description="Average votes per hour, rounded half up")


AnomalyFinding = Annotated[
    Union[VotingSpikeFinding, RapidActionsFinding, HighActivityFinding],
    Field(discriminator="type"),
]


class HourlyVoteCount(BaseModel):
    hour: int = Field(..., ge=0, le=23)
    vote_count: int = Field(..., ge=0)


class BehaviorSummary(BaseModel):
    """Output of BehaviorAnalyzer for one election."""

    election_id: str
    total_votes: int = Field(0, ge=0)
    unique_voters: int = Field(0, ge=0)
    voting_timeline: List[HourlyVoteCount] = Field(default_factory=list, description="Observed hours, ascending")
    suspicious_activity: List[VotingSpikeFinding] = Field(default_factory=list)


class DetectionResults(BaseModel):
    """
    One batch of detector output handed to the report aggregator.

    anomalies holds voting spikes and, when audit data was analysed too,
    audit trail anomalies.
    """

    duplicates: List[DuplicateVoteFinding] = Field(default_factory=list)
    patterns: List[RapidVotingFinding] = Field(default_factory=list)
    anomalies: List[AnomalyFinding] = Field(default_factory=list)

    @property
    def issue_count(self) -> int:
        return len(self.duplicates) + len(self.patterns) + len(self.anomalies)


class RiskLevel(str, Enum):
    """Qualitative risk derived from the total number of findings."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class FraudSummary(BaseModel):
    total_issues: int = Field(..., ge=0)
    risk_level: RiskLevel

    model_config = ConfigDict(use_enum_values=True)


class FraudReport(BaseModel):
    """Aggregated risk assessment for one election."""

    election_id: str
    fraud_summary: FraudSummary
    detailed_results: List[DetectionResults] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


class DetectedIssueCounts(BaseModel):
    duplicates: int = Field(0, ge=0)
    suspicious_patterns: int = Field(0, ge=0)
    voting_spikes: int = Field(0, ge=0)


class FraudAnalysis(BaseModel):
    """Full result of running every detector over an election's votes."""

    election_id: str
    fraud_analysis: FraudReport
    behavior_analysis: BehaviorSummary
    detected_issues: DetectedIssueCounts


class FraudType(str, Enum):
    """Categories a fraud case can be filed under."""

    DUPLICATE_VOTING = "duplicate_voting"
    VOTER_IMPERSONATION = "voter_impersonation"
    VOTE_BUYING = "vote_buying"
    COERCION = "coercion"
    TECHNICAL_MANIPULATION = "technical_manipulation"
    OTHER = "other"


class CaseStatus(str, Enum):
    """Investigation status of a fraud case."""

    PENDING = "pending"
    INVESTIGATING = "investigating"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"
    ESCALATED = "escalated"


class CaseSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class FraudCaseCreate(BaseModel):
    """
    Model for filing a fraud case.

    Used when a reporter submits suspected fraud for investigation.
    """

    election_id: str = Field(..., min_length=1, description="Election the case concerns")
    fraud_type: FraudType = Field(..., description="Category of suspected fraud")
    description: str = Field(..., min_length=1, description="What was observed")
    reporter_id: Optional[str] = Field(None, description="User filing the case")
    reported_user_id: Optional[str] = Field(None, description="User the case is about, if any")
    evidence: Dict[str, Any] = Field(default_factory=dict, description="Supporting evidence")
    severity: CaseSeverity = Field(CaseSeverity.MEDIUM, description="Reporter's severity estimate")

    model_config = ConfigDict(use_enum_values=True)


class FraudCase(BaseModel):
    """
    Model for a fraud case as stored/returned from the database.
    """

    report_id: str = Field(..., description="Case identifier (UUID)")
    election_id: str
    reporter_id: Optional[str] = None
    reported_user_id: Optional[str] = None
    fraud_type: FraudType
    description: str
    evidence: Dict[str, Any] = Field(default_factory=dict)
    status: CaseStatus = CaseStatus.PENDING
    severity: CaseSeverity = CaseSeverity.MEDIUM
    investigated_by: Optional[str] = None
    resolution: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(use_enum_values=True)


class FraudCaseUpdate(BaseModel):
    """Model for moving a case through its investigation."""

    status: CaseStatus = Field(..., description="New status")
    investigated_by: Optional[str] = Field(None, description="Investigator making the change")
    resolution: Optional[str] = Field(None, description="Outcome notes")

    model_config = ConfigDict(use_enum_values=True)


class FraudCaseSummary(BaseModel):
    """Counts over a set of fraud cases."""

    total: int = Field(0, ge=0)
    by_status: Dict[str, int] = Field(default_factory=dict)
    by_type: Dict[str, int] = Field(default_factory=dict)
    by_severity: Dict[str, int] = Field(default_factory=dict)


class FraudCaseListResponse(BaseModel):
    """Model for API response containing an election's fraud cases."""

    election_id: str
    reports: List[FraudCase] = Field(default_factory=list)
    summary: FraudCaseSummary
