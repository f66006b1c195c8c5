"""Vote verification API endpoints."""

from fastapi import APIRouter

from common.exceptions import VerificationNotFoundError
from common.logging import get_logger
from gateway.errors import http_error, request_trace
from verification.models import (
    ElectionVerifications,
    VerificationCreate,
    VerifyCodeRequest,
    VoteIntegrityRequest,
    VoteIntegrityResult,
    VoteVerification,
)
from verification.service import VoteVerificationService

logger = get_logger(__name__)


def create_verification_router(verification_service: VoteVerificationService) -> APIRouter:
    """
    Create FastAPI router for vote verification.

    Args:
        verification_service: VoteVerificationService instance

    Returns:
        Configured APIRouter
    """
    router = APIRouter(prefix="/api/verification", tags=["Verification"])

    @router.post("", response_model=VoteVerification, status_code=201)
    async def create_verification(body: VerificationCreate):
        """
        Open a verification record and issue its code.
        """
        with request_trace() as trace_id:
            try:
                return verification_service.create_verification(body)
            except Exception as e:
                logger.error(
                    "api_verification_create_failed",
                    election_id=body.election_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise http_error(500, "Failed to create verification", "INTERNAL_ERROR", trace_id)

    @router.post("/verify", response_model=VoteVerification)
    async def verify_by_code(body: VerifyCodeRequest):
        """
        Verify a vote by its verification code.
        """
        with request_trace() as trace_id:
            try:
                return verification_service.verify_by_code(
                    body.verification_code,
                    receipt_digest=body.receipt_digest,
                )
            except VerificationNotFoundError as e:
                raise http_error(404, str(e), "NOT_FOUND", trace_id)
            except Exception as e:
                logger.error(
                    "api_verification_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise http_error(500, "Failed to verify vote", "INTERNAL_ERROR", trace_id)

    @router.get("/elections/{election_id}", response_model=ElectionVerifications)
    async def get_election_verifications(election_id: str):
        """
        List an election's verification records with success counts.
        """
        with request_trace() as trace_id:
            try:
                return verification_service.get_election_verifications(election_id)
            except Exception as e:
                logger.error(
                    "api_election_verifications_failed",
                    election_id=election_id,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise http_error(500, "Failed to retrieve verifications", "INTERNAL_ERROR", trace_id)

    @router.post("/integrity", response_model=VoteIntegrityResult)
    async def verify_vote_integrity(body: VoteIntegrityRequest):
        """
        Compare a vote payload with its stored copy.
        """
        with request_trace():
            result = verification_service.verify_vote_integrity(body.original_vote, body.stored_vote)
            logger.info("vote_integrity_checked", vote_id=body.vote_id, is_valid=result.is_valid)
            return result

    return router
