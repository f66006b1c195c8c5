"""
Fraud report aggregation.

Merges detector output into a single risk assessment. Risk levels are
fixed by finding count:

- 0 findings: low
- 1 to 4 findings: medium
- 5 or more findings: high
"""

from collections import Counter
from typing import List, Sequence

from common.logging import get_logger
from fraud_detection.models import (
    DetectionResults,
    FraudCase,
    FraudCaseSummary,
    FraudReport,
    FraudSummary,
    RiskLevel,
)

logger = get_logger(__name__)

HIGH_RISK_MIN_ISSUES = 5

NO_ISSUES_RECOMMENDATION = "No fraud indicators detected. Election appears to be conducted fairly."
MANUAL_REVIEW_RECOMMENDATION = "Manual review recommended due to detected anomalies."
DUPLICATES_RECOMMENDATION = "Investigate duplicate vote submissions."
PATTERNS_RECOMMENDATION = "Review rapid voting patterns for potential automation."
ANOMALIES_RECOMMENDATION = "Audit unusual user activity patterns."


def classify_risk(total_issues: int) -> RiskLevel:
    """Map a finding count to a risk level."""
    if total_issues == 0:
        return RiskLevel.LOW
    if total_issues < HIGH_RISK_MIN_ISSUES:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


class FraudReportAggregator:
    """Builds a FraudReport from one or more batches of detector output."""

    def aggregate(self, election_id: str, detector_outputs: Sequence[DetectionResults]) -> FraudReport:
        """
        Merge detector outputs into a report.

        Args:
            election_id: Election the findings belong to
            detector_outputs: Batches of duplicates, patterns and anomalies

        Returns:
            FraudReport with total issue count, risk level and recommendations
        """
        total_issues = sum(result.issue_count for result in detector_outputs)
        risk_level = classify_risk(total_issues)

        logger.debug(
            "fraud_report_aggregated",
            election_id=election_id,
            total_issues=total_issues,
            risk_level=risk_level.value,
        )

        return FraudReport(
            election_id=election_id,
            fraud_summary=FraudSummary(total_issues=total_issues, risk_level=risk_level),
            detailed_results=list(detector_outputs),
            recommendations=self.recommendations(total_issues, detector_outputs),
        )

    def recommendations(self, total_issues: int, detector_outputs: Sequence[DetectionResults]) -> List[str]:
        """Baseline line first, then one line per finding category present, in fixed order."""
        if total_issues == 0:
            return [NO_ISSUES_RECOMMENDATION]

        lines = [MANUAL_REVIEW_RECOMMENDATION]
        if any(result.duplicates for result in detector_outputs):
            lines.append(DUPLICATES_RECOMMENDATION)
        if any(result.patterns for result in detector_outputs):
            lines.append(PATTERNS_RECOMMENDATION)
        if any(result.anomalies for result in detector_outputs):
            lines.append(ANOMALIES_RECOMMENDATION)
        return lines


def summarize_cases(cases: Sequence[FraudCase]) -> FraudCaseSummary:
    """Count fraud cases by status, type and severity."""
    return FraudCaseSummary(
        total=len(cases),
        by_status=dict(Counter(case.status for case in cases)),
        by_type=dict(Counter(case.fraud_type for case in cases)),
        by_severity=dict(Counter(case.severity for case in cases)),
    )
