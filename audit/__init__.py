"""
Audit module - hash-chained election audit trail, verification and reporting.
"""

from audit.anomaly import AnomalyDetector
from audit.hasher import ChainHasher
from audit.models import (
    AnomalyReport,
    AuditAction,
    AuditEntry,
    AuditEntryCreate,
    AuditReport,
    ChainLinkResult,
    ChainVerificationResult,
    ElectionAuditResponse,
    HighActivityFinding,
    RapidActionsFinding,
    UserAuditHistory,
)
from audit.report import AuditReportAggregator
from audit.repository import AuditRepository
from audit.service import AuditTrailService
from audit.verifier import ChainVerifier

__all__ = [
    "AnomalyDetector",
    "AnomalyReport",
    "AuditAction",
    "AuditEntry",
    "AuditEntryCreate",
    "AuditReport",
    "AuditReportAggregator",
    "AuditRepository",
    "AuditTrailService",
    "ChainHasher",
    "ChainLinkResult",
    "ChainVerificationResult",
    "ChainVerifier",
    "ElectionAuditResponse",
    "HighActivityFinding",
    "RapidActionsFinding",
    "UserAuditHistory",
]
