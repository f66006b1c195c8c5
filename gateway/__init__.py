"""
Gateway module - HTTP API for the audit trail, fraud detection and verification
"""

from gateway.api import create_app
from gateway.models import (
    AuditEntryCreated,
    AuditEntryRequest,
    ChainVerificationResponse,
    ErrorResponse,
    FraudDetectionRequest,
)

__all__ = [
    "create_app",
    "AuditEntryCreated",
    "AuditEntryRequest",
    "ChainVerificationResponse",
    "ErrorResponse",
    "FraudDetectionRequest",
]
