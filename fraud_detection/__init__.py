"""
Fraud Detection module - vote detectors, report aggregation and fraud cases.
"""

from fraud_detection.models import (
    BehaviorSummary,
    CaseSeverity,
    CaseStatus,
    DetectionResults,
    DuplicateVoteFinding,
    FraudAnalysis,
    FraudCase,
    FraudCaseCreate,
    FraudCaseUpdate,
    FraudReport,
    FraudType,
    RapidVotingFinding,
    RiskLevel,
    VoteRecord,
    VotingSpikeFinding,
)
from fraud_detection.aggregator import FraudReportAggregator, classify_risk, summarize_cases
from fraud_detection.config import DetectionThresholds, load_detection_config
from fraud_detection.detectors import BehaviorAnalyzer, DuplicateVoteDetector, PatternDetector
from fraud_detection.interfaces import VoteDetector
from fraud_detection.repository import FraudRepository
from fraud_detection.service import FraudDetectionService

__all__ = [
    "BehaviorAnalyzer",
    "BehaviorSummary",
    "CaseSeverity",
    "CaseStatus",
    "DetectionResults",
    "DetectionThresholds",
    "DuplicateVoteDetector",
    "DuplicateVoteFinding",
    "FraudAnalysis",
    "FraudCase",
    "FraudCaseCreate",
    "FraudCaseUpdate",
    "FraudDetectionService",
    "FraudReport",
    "FraudReportAggregator",
    "FraudRepository",
    "FraudType",
    "PatternDetector",
    "RapidVotingFinding",
    "RiskLevel",
    "VoteDetector",
    "VoteRecord",
    "VotingSpikeFinding",
    "classify_risk",
    "load_detection_config",
    "summarize_cases",
]
