"""Election audit trail API endpoints."""

from fastapi import APIRouter, Query, Request

from audit.models import AuditEntryCreate, ElectionAuditResponse, UserAuditHistory
from audit.service import AuditTrailService
from common.exceptions import AuditTrailNotFoundError, PreconditionViolation
from common.logging import get_logger
from gateway.errors import http_error, request_trace
from gateway.models import AuditEntryCreated, AuditEntryRequest, ChainVerificationResponse

logger = get_logger(__name__)


def create_audit_router(audit_service: AuditTrailService) -> APIRouter:
    """
    Create FastAPI router for the election audit trail.

    Args:
        audit_service: AuditTrailService instance

    Returns:
        Configured APIRouter
    """
    router = APIRouter(prefix="/api/audit", tags=["Audit"])

    @router.post("/entries", response_model=AuditEntryCreated, status_code=201)
    async def create_audit_entry(body: AuditEntryRequest, request: Request):
        """
        Record an audit action and link it into the election's chain.
        """
        with request_trace() as trace_id:
            try:
                entry = audit_service.record_action(
                    AuditEntryCreate(
                        election_id=body.election_id,
                        action_type=body.action_type,
                        action_data=body.action_data,
                        user_id=body.user_id,
                        ip_address=request.client.host if request.client else None,
                        user_agent=request.headers.get("user-agent"),
                    )
                )
                return AuditEntryCreated(
                    audit_id=entry.audit_id,
                    hash_chain=entry.hash_chain,
                    previous_hash=entry.previous_hash,
                )
            except Exception as e:
                logger.error(
                    "api_audit_entry_failed",
                    election_id=body.election_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise http_error(500, "Failed to create audit entry", "INTERNAL_ERROR", trace_id)

    @router.get("/elections/{election_id}", response_model=ElectionAuditResponse)
    async def get_election_audit(election_id: str):
        """
        Get an election's trail with its audit report and anomalies.
        """
        with request_trace() as trace_id:
            try:
                return audit_service.get_election_audit(election_id)
            except PreconditionViolation as e:
                logger.warning("api_election_audit_rejected", election_id=election_id, error=str(e))
                raise http_error(400, str(e), "PRECONDITION_VIOLATION", trace_id)
            except Exception as e:
                logger.error(
                    "api_election_audit_failed",
                    election_id=election_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise http_error(500, "Failed to retrieve audit", "INTERNAL_ERROR", trace_id)

    @router.get("/elections/{election_id}/verify", response_model=ChainVerificationResponse)
    async def verify_audit_chain(
        election_id: str,
        recompute: bool = Query(True, description="Recompute digests, not only compare links"),
    ):
        """
        Verify the integrity of an election's audit chain.
        """
        with request_trace() as trace_id:
            try:
                result = audit_service.verify_election_chain(
                    election_id,
                    recompute_digests=recompute,
                )
                return ChainVerificationResponse(
                    election_id=election_id,
                    is_chain_valid=result.is_chain_valid,
                    total_entries=result.total_entries,
                    chain_verification=result,
                )
            except AuditTrailNotFoundError as e:
                raise http_error(404, str(e), "NOT_FOUND", trace_id)
            except PreconditionViolation as e:
                logger.warning("api_chain_verification_rejected", election_id=election_id, error=str(e))
                raise http_error(400, str(e), "PRECONDITION_VIOLATION", trace_id)
            except Exception as e:
                logger.error(
                    "api_chain_verification_failed",
                    election_id=election_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise http_error(500, "Failed to verify audit chain", "INTERNAL_ERROR", trace_id)

    @router.get("/users/{user_id}", response_model=UserAuditHistory)
    async def get_user_audit_history(
        user_id: str,
        limit: int | None = Query(None, ge=1, le=1000, description="Maximum results"),
    ):
        """
        Get a user's audit history across elections, newest first.
        """
        with request_trace() as trace_id:
            try:
                return audit_service.get_user_history(user_id, limit=limit)
            except Exception as e:
                logger.error(
                    "api_user_audit_history_failed",
                    user_id=user_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise http_error(500, "Failed to retrieve user audit history", "INTERNAL_ERROR", trace_id)

    return router
