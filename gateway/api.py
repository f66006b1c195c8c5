"""
FastAPI application for the election integrity service.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from audit.service import AuditTrailService
from common.logging import get_logger
from fraud_detection.service import FraudDetectionService
from gateway.audit_api import create_audit_router
from gateway.fraud_api import create_fraud_router
from gateway.verification_api import create_verification_router
from verification.service import VoteVerificationService

logger = get_logger(__name__)


def create_app(
    fraud_service: FraudDetectionService,
    audit_service: Optional[AuditTrailService] = None,
    verification_service: Optional[VoteVerificationService] = None,
    enable_cors: bool = True,
) -> FastAPI:
    """
    Create and configure the FastAPI application.
    
    Args:
        fraud_service: FraudDetectionService instance
        audit_service: Optional AuditTrailService; audit routes are only
            registered when storage is available
        verification_service: VoteVerificationService instance
        enable_cors: Whether to enable CORS middleware
        
    Returns:
        Configured FastAPI app
    """
    verification_service = verification_service or VoteVerificationService()

    app = FastAPI(
        title="Election Integrity Service",
        description="Tamper-evident election audit trail and fraud detection",
        version="0.1.0",
    )
    
    if enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    
    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "audit_enabled": audit_service is not None}

    app.include_router(create_fraud_router(fraud_service))
    app.include_router(create_verification_router(verification_service))

    if audit_service:
        app.include_router(create_audit_router(audit_service))
        logger.info("audit_api_routes_registered")
    
    return app
