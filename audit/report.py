"""Election-level audit report aggregation."""

from collections import Counter
from typing import Optional, Sequence

from audit.anomaly import AnomalyDetector
from audit.models import AuditEntry, AuditReport, AuditSummary, Timespan
from audit.verifier import ChainVerifier
from common.exceptions import PreconditionViolation


class AuditReportAggregator:
    """
    Summarizes an election's audit trail.

    Produces action-type counts, per-user activity, the first and last
    timestamp, anomaly findings and the chain verification result. Output
    depends only on the entries passed in.
    """

    def __init__(
        self,
        verifier: Optional[ChainVerifier] = None,
        anomaly_detector: Optional[AnomalyDetector] = None,
        recompute_digests: bool = True,
    ):
        """
        Args:
            verifier: ChainVerifier used for the embedded chain check
            anomaly_detector: AnomalyDetector used for the anomaly section
            recompute_digests: Recompute every digest instead of only
                comparing links
        """
        self._verifier = verifier or ChainVerifier()
        self._anomaly_detector = anomaly_detector or AnomalyDetector()
        self._recompute_digests = recompute_digests

    def summarize(self, election_id: str, entries: Sequence[AuditEntry]) -> AuditReport:
        """
        Build the audit report for one election.

        Args:
            election_id: Election the entries belong to
            entries: Entries sorted by timestamp ascending

        Returns:
            AuditReport

        Raises:
            PreconditionViolation: If any entry belongs to another election,
                or entries are not in timestamp order
        """
        for entry in entries:
            if entry.election_id != election_id:
                raise PreconditionViolation(
                    f"Entry {entry.audit_id} belongs to election {entry.election_id}, not {election_id}"
                )

        action_types = Counter(entry.action_type for entry in entries)
        user_activity = Counter(entry.user_id for entry in entries if entry.user_id is not None)

        if self._recompute_digests:
            chain = self._verifier.recompute_and_compare(entries)
        else:
            chain = self._verifier.verify(entries)

        timespan = Timespan()
        if entries:
            timespan = Timespan(start=entries[0].timestamp, end=entries[-1].timestamp)

        return AuditReport(
            election_id=election_id,
            summary=AuditSummary(
                total_actions=len(entries),
                action_types=dict(action_types),
                unique_users=len(user_activity),
                timespan=timespan,
            ),
            user_activity=dict(user_activity),
            anomalies=self._anomaly_detector.detect(entries),
            hash_chain_verification=chain,
        )
