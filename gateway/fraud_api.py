"""Fraud detection and fraud case API endpoints."""

from fastapi import APIRouter, Body, Query

from common.exceptions import FraudCaseNotFoundError, PreconditionViolation
from common.logging import get_logger
from fraud_detection.models import (
    CaseStatus,
    FraudAnalysis,
    FraudCase,
    FraudCaseCreate,
    FraudCaseListResponse,
    FraudCaseUpdate,
)
from fraud_detection.service import FraudDetectionService
from gateway.errors import http_error, request_trace
from gateway.models import FraudDetectionRequest

logger = get_logger(__name__)


def create_fraud_router(fraud_service: FraudDetectionService) -> APIRouter:
    """
    Create FastAPI router for fraud detection and fraud case management.

    Args:
        fraud_service: FraudDetectionService instance

    Returns:
        Configured APIRouter
    """
    router = APIRouter(prefix="/api/fraud", tags=["Fraud"])

    @router.post("/detect", response_model=FraudAnalysis)
    async def detect_fraud(body: FraudDetectionRequest):
        """
        Run every detector over the supplied votes.
        """
        with request_trace() as trace_id:
            if not body.votes:
                raise http_error(400, "Vote data is required for fraud detection", "VALIDATION_ERROR", trace_id)
            try:
                return fraud_service.analyze_votes(body.election_id, body.votes)
            except PreconditionViolation as e:
                logger.warning("api_fraud_detection_rejected", election_id=body.election_id, error=str(e))
                raise http_error(400, str(e), "PRECONDITION_VIOLATION", trace_id)
            except Exception as e:
                logger.error(
                    "api_fraud_detection_failed",
                    election_id=body.election_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise http_error(500, "Fraud detection failed", "INTERNAL_ERROR", trace_id)

    @router.get("/elections/{election_id}/analysis", response_model=FraudAnalysis)
    async def analyze_election(election_id: str):
        """
        Run every detector over an election's stored votes and audit trail.
        """
        with request_trace() as trace_id:
            try:
                return fraud_service.analyze_election(election_id)
            except PreconditionViolation as e:
                logger.warning("api_election_analysis_rejected", election_id=election_id, error=str(e))
                raise http_error(400, str(e), "PRECONDITION_VIOLATION", trace_id)
            except Exception as e:
                logger.error(
                    "api_election_analysis_failed",
                    election_id=election_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise http_error(500, "Fraud analysis failed", "INTERNAL_ERROR", trace_id)

    @router.post("/reports", response_model=FraudCase, status_code=201)
    async def create_fraud_report(case: FraudCaseCreate):
        """
        File a fraud case for investigation.
        """
        with request_trace() as trace_id:
            try:
                return fraud_service.file_case(case)
            except Exception as e:
                logger.error(
                    "api_fraud_report_create_failed",
                    election_id=case.election_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise http_error(500, "Failed to create fraud report", "INTERNAL_ERROR", trace_id)

    @router.get("/elections/{election_id}/reports", response_model=FraudCaseListResponse)
    async def get_fraud_reports(
        election_id: str,
        status: CaseStatus | None = Query(None, description="Filter by status"),
    ):
        """
        List an election's fraud cases with summary counts.
        """
        with request_trace() as trace_id:
            try:
                return fraud_service.list_cases(election_id, status=status)
            except Exception as e:
                logger.error(
                    "api_fraud_reports_list_failed",
                    election_id=election_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise http_error(500, "Failed to retrieve fraud reports", "INTERNAL_ERROR", trace_id)

    @router.patch("/reports/{report_id}", response_model=FraudCase)
    async def update_fraud_report(report_id: str, update: FraudCaseUpdate = Body(...)):
        """
        Move a fraud case to a new status.
        """
        with request_trace() as trace_id:
            try:
                return fraud_service.update_case(report_id, update)
            except FraudCaseNotFoundError as e:
                raise http_error(404, str(e), "NOT_FOUND", trace_id)
            except Exception as e:
                logger.error(
                    "api_fraud_report_update_failed",
                    report_id=report_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise http_error(500, "Failed to update fraud report", "INTERNAL_ERROR", trace_id)

    return router
