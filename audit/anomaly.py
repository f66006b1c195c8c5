"""
Anomaly detection over an election's audit trail.

Two independent checks, both of which may fire for the same entries:
1. Rapid actions: the same actor in two consecutive entries less than
   rapid_action_window_ms apart.
2. High activity: an actor with more than high_activity_threshold entries
   across the whole input.

Entries without a user_id are system actions and are not attributed to
any actor by either check.
"""

from collections import Counter
from typing import List, Sequence, Union

from audit.models import AnomalyReport, AuditEntry, HighActivityFinding, RapidActionsFinding
from audit.verifier import require_chronological
from common.logging import get_logger

logger = get_logger(__name__)

RAPID_ACTION_WINDOW_MS = 1000
HIGH_ACTIVITY_THRESHOLD = 10


class AnomalyDetector:
    """Flags rapid repeated audit actions and high-activity actors."""

    def __init__(
        self,
        rapid_action_window_ms: float = RAPID_ACTION_WINDOW_MS,
        high_activity_threshold: int = HIGH_ACTIVITY_THRESHOLD,
    ):
        self.rapid_action_window_ms = rapid_action_window_ms
        self.high_activity_threshold = high_activity_threshold

    def configure(self, config: dict) -> None:
        self.rapid_action_window_ms = config.get("rapid_action_window_ms", self.rapid_action_window_ms)
        self.high_activity_threshold = config.get("high_activity_threshold", self.high_activity_threshold)

    def detect(self, entries: Sequence[AuditEntry]) -> AnomalyReport:
        """
        Run both checks over entries sorted by timestamp ascending.

        Raises:
            PreconditionViolation: If entries are not in timestamp order
        """
        require_chronological(entries)

        anomalies: List[Union[RapidActionsFinding, HighActivityFinding]] = []
        anomalies.extend(self._rapid_actions(entries))
        anomalies.extend(self._high_activity(entries))

        if anomalies:
            logger.debug("audit_anomalies_detected", total_anomalies=len(anomalies))

        return AnomalyReport(anomalies=anomalies, total_anomalies=len(anomalies))

    def _rapid_actions(self, entries: Sequence[AuditEntry]) -> List[RapidActionsFinding]:
        findings = []
        for previous, current in zip(entries, entries[1:]):
            if current.user_id is None or current.user_id != previous.user_id:
                continue
            gap_ms = (current.timestamp - previous.timestamp).total_seconds() * 1000
            if gap_ms < self.rapid_action_window_ms:
                findings.append(
                    RapidActionsFinding(
                        user_id=current.user_id,
                        timestamp=current.timestamp,
                        time_difference_ms=gap_ms,
                    )
                )
        return findings

    def _high_activity(self, entries: Sequence[AuditEntry]) -> List[HighActivityFinding]:
        # Counter keeps first-appearance order
        counts = Counter(entry.user_id for entry in entries if entry.user_id is not None)
        return [
            HighActivityFinding(
                user_id=user_id,
                action_count=count,
                threshold=self.high_activity_threshold,
            )
            for user_id, count in counts.items()
            if count > self.high_activity_threshold
        ]
