"""Fraud detection service - runs the detectors and manages fraud cases."""

from typing import Optional, Sequence

from audit.anomaly import AnomalyDetector
from audit.models import AuditEntry
from audit.repository import AuditRepository
from common.exceptions import FraudCaseNotFoundError
from common.logging import get_logger
from fraud_detection.aggregator import FraudReportAggregator, summarize_cases
from fraud_detection.config import DetectionThresholds
from fraud_detection.detectors import BehaviorAnalyzer, DuplicateVoteDetector, PatternDetector
from fraud_detection.models import (
    CaseStatus,
    DetectedIssueCounts,
    DetectionResults,
    FraudAnalysis,
    FraudCase,
    FraudCaseCreate,
    FraudCaseListResponse,
    FraudCaseUpdate,
    VoteRecord,
)
from fraud_detection.repository import FraudRepository

logger = get_logger(__name__)


class FraudDetectionService:
    """
    Service for election fraud analysis and fraud case management.

    Vote analysis works on votes handed in directly or fetched from the
    repository. Case management needs a repository.
    """

    def __init__(
        self,
        repository: Optional[FraudRepository] = None,
        audit_repository: Optional[AuditRepository] = None,
        duplicate_detector: Optional[DuplicateVoteDetector] = None,
        pattern_detector: Optional[PatternDetector] = None,
        behavior_analyzer: Optional[BehaviorAnalyzer] = None,
        anomaly_detector: Optional[AnomalyDetector] = None,
        aggregator: Optional[FraudReportAggregator] = None,
    ):
        """
        Initialize fraud detection service.

        Args:
            repository: FraudRepository for votes and fraud cases
            audit_repository: AuditRepository; when set, stored election
                analysis also folds in audit trail anomalies
            duplicate_detector, pattern_detector, behavior_analyzer,
            anomaly_detector, aggregator: analysis components (defaults
                use the built-in thresholds)
        """
        self._repository = repository
        self._audit_repository = audit_repository
        self._duplicate_detector = duplicate_detector or DuplicateVoteDetector()
        self._pattern_detector = pattern_detector or PatternDetector()
        self._behavior_analyzer = behavior_analyzer or BehaviorAnalyzer()
        self._anomaly_detector = anomaly_detector or AnomalyDetector()
        self._aggregator = aggregator or FraudReportAggregator()

    @classmethod
    def from_thresholds(
        cls,
        thresholds: DetectionThresholds,
        repository: Optional[FraudRepository] = None,
        audit_repository: Optional[AuditRepository] = None,
    ) -> "FraudDetectionService":
        """Create a service whose detectors are configured with the given thresholds."""
        service = cls(repository=repository, audit_repository=audit_repository)
        service.configure(thresholds)
        return service

    def configure(self, thresholds: DetectionThresholds) -> None:
        """Apply thresholds to every detector."""
        config = thresholds.model_dump()
        for detector in (
            self._duplicate_detector,
            self._pattern_detector,
            self._behavior_analyzer,
            self._anomaly_detector,
        ):
            detector.configure(config)
        logger.debug("detection_thresholds_applied", **config)

    def analyze_votes(
        self,
        election_id: str,
        votes: Sequence[VoteRecord],
        audit_entries: Optional[Sequence[AuditEntry]] = None,
    ) -> FraudAnalysis:
        """
        Run every detector over an election's votes.

        Args:
            election_id: Election identifier
            votes: Vote records to analyze
            audit_entries: Optional audit trail (timestamp ascending) whose
                anomalies are counted alongside voting spikes

        Returns:
            FraudAnalysis with the aggregated report and behavior summary
        """
        duplicates = self._duplicate_detector.detect(votes)
        patterns = self._pattern_detector.detect(votes)
        behavior = self._behavior_analyzer.analyze(election_id, votes)

        anomalies = list(behavior.suspicious_activity)
        if audit_entries:
            anomalies.extend(self._anomaly_detector.detect(audit_entries).anomalies)

        report = self._aggregator.aggregate(
            election_id,
            [DetectionResults(duplicates=duplicates, patterns=patterns, anomalies=anomalies)],
        )

        logger.info(
            "fraud_analysis_completed",
            election_id=election_id,
            total_votes=behavior.total_votes,
            duplicates=len(duplicates),
            patterns=len(patterns),
            anomalies=len(anomalies),
            risk_level=report.fraud_summary.risk_level,
        )

        return FraudAnalysis(
            election_id=election_id,
            fraud_analysis=report,
            behavior_analysis=behavior,
            detected_issues=DetectedIssueCounts(
                duplicates=len(duplicates),
                suspicious_patterns=len(patterns),
                voting_spikes=len(behavior.suspicious_activity),
            ),
        )

    def analyze_election(self, election_id: str) -> FraudAnalysis:
        """Fetch an election's stored votes (and audit trail, if available) and analyze them."""
        votes = self._require_repository().get_votes_by_election(election_id)
        audit_entries = None
        if self._audit_repository is not None:
            audit_entries = self._audit_repository.get_entries_by_election(election_id)
        return self.analyze_votes(election_id, votes, audit_entries)

    def file_case(self, case_create: FraudCaseCreate) -> FraudCase:
        """File a fraud case for investigation."""
        case = self._require_repository().create_case(case_create)
        logger.info(
            "fraud_case_filed",
            election_id=case.election_id,
            report_id=case.report_id,
            fraud_type=case.fraud_type,
            severity=case.severity,
        )
        return case

    def list_cases(
        self,
        election_id: str,
        status: Optional[CaseStatus] = None,
    ) -> FraudCaseListResponse:
        """List an election's fraud cases with status, type and severity counts."""
        cases = self._require_repository().get_cases_by_election(election_id, status=status)
        return FraudCaseListResponse(
            election_id=election_id,
            reports=cases,
            summary=summarize_cases(cases),
        )

    def update_case(self, report_id: str, case_update: FraudCaseUpdate) -> FraudCase:
        """
        Move a fraud case to a new status.

        Raises:
            FraudCaseNotFoundError: If no case has this report_id
        """
        case = self._require_repository().update_case(report_id, case_update)
        if case is None:
            raise FraudCaseNotFoundError(f"Fraud case {report_id} not found")

        logger.info(
            "fraud_case_updated",
            report_id=report_id,
            status=case.status,
            investigated_by=case.investigated_by,
        )
        return case

    def _require_repository(self) -> FraudRepository:
        if self._repository is None:
            raise RuntimeError("FraudDetectionService was created without a repository")
        return self._repository
