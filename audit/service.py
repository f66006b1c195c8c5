"""Audit trail service - business logic layer for the election audit chain."""

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from audit.hasher import ChainHasher
from audit.models import (
    AuditAction,
    AuditEntry,
    AuditEntryCreate,
    ChainVerificationResult,
    ElectionAuditResponse,
    UserAuditHistory,
)
from audit.report import AuditReportAggregator
from audit.repository import AuditRepository
from audit.verifier import ChainVerifier
from common.exceptions import AuditTrailNotFoundError
from common.logging import get_logger

logger = get_logger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuditTrailService:
    """Service for recording, reporting on and verifying election audit trails."""

    def __init__(
        self,
        repository: AuditRepository,
        hasher: Optional[ChainHasher] = None,
        verifier: Optional[ChainVerifier] = None,
        report_aggregator: Optional[AuditReportAggregator] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize audit trail service.

        Args:
            repository: AuditRepository instance for data access
            hasher: ChainHasher used to link new entries
            verifier: ChainVerifier used by verify_election_chain
            report_aggregator: AuditReportAggregator used by get_election_audit
            clock: Source of entry timestamps
        """
        self._repository = repository
        self._hasher = hasher or ChainHasher()
        self._verifier = verifier or ChainVerifier(self._hasher)
        self._report_aggregator = report_aggregator or AuditReportAggregator(self._verifier)
        self._clock = clock

    def record_action(self, request: AuditEntryCreate) -> AuditEntry:
        """
        Append an audit action to its election's chain.

        The timestamp is fixed before hashing and stored with the entry, so
        the digest can be recomputed from the stored row. Failures propagate:
        an action that could not be chained must not look recorded.

        Args:
            request: AuditEntryCreate describing the action

        Returns:
            The stored AuditEntry with its chain link
        """

        def build_entry(head: Optional[AuditEntry]) -> AuditEntry:
            timestamp = self._clock()
            previous_hash = ""
            if head is not None:
                previous_hash = head.hash_chain
                # Chain order is timestamp order; never step behind the head.
                if timestamp < head.timestamp:
                    timestamp = head.timestamp

            action = AuditAction(
                action_type=request.action_type,
                action_data=request.action_data,
                user_id=request.user_id,
                timestamp=timestamp,
            )
            return AuditEntry(
                audit_id=str(uuid.uuid4()),
                election_id=request.election_id,
                user_id=request.user_id,
                action_type=request.action_type,
                action_data=request.action_data,
                ip_address=request.ip_address,
                user_agent=request.user_agent,
                timestamp=timestamp,
                hash_chain=self._hasher.compute_link(action, previous_hash),
                previous_hash=previous_hash,
            )

        entry = self._repository.append_entry(request.election_id, build_entry)

        logger.info(
            "audit_entry_recorded",
            election_id=entry.election_id,
            audit_id=entry.audit_id,
            action_type=entry.action_type,
            user_id=entry.user_id,
        )
        return entry

    def get_election_audit(self, election_id: str) -> ElectionAuditResponse:
        """Get an election's trail together with its audit report."""
        entries = self._repository.get_entries_by_election(election_id)
        report = self._report_aggregator.summarize(election_id, entries)

        logger.info(
            "election_audit_generated",
            election_id=election_id,
            total_entries=len(entries),
            total_anomalies=report.anomalies.total_anomalies,
            is_chain_valid=report.hash_chain_verification.is_chain_valid,
        )
        return ElectionAuditResponse(
            election_id=election_id,
            audit_trail=entries,
            audit_report=report,
            total_entries=len(entries),
        )

    def verify_election_chain(
        self,
        election_id: str,
        recompute_digests: bool = True,
    ) -> ChainVerificationResult:
        """
        Verify an election's stored chain.

        Args:
            election_id: Election identifier
            recompute_digests: Recompute each digest rather than only
                comparing links

        Raises:
            AuditTrailNotFoundError: If the election has no entries
        """
        entries = self._repository.get_entries_by_election(election_id)
        if not entries:
            raise AuditTrailNotFoundError(f"No audit trail found for election {election_id}")

        if recompute_digests:
            result = self._verifier.recompute_and_compare(entries)
        else:
            result = self._verifier.verify(entries)

        if result.is_chain_valid:
            logger.info(
                "audit_chain_verified",
                election_id=election_id,
                total_entries=result.total_entries,
                digests_checked=result.digests_checked,
            )
        else:
            logger.warning(
                "audit_chain_broken",
                election_id=election_id,
                total_entries=result.total_entries,
                failed_audit_ids=[row.audit_id for row in result.failed_entries],
                digests_checked=result.digests_checked,
            )
        return result

    def get_user_history(self, user_id: str, limit: Optional[int] = None) -> UserAuditHistory:
        """Get all audit actions by a user, newest first."""
        entries = self._repository.get_entries_by_user(user_id, limit=limit)
        return UserAuditHistory(
            user_id=user_id,
            audit_history=entries,
            total_actions=len(entries),
        )
