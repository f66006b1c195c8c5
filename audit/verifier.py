"""
Chain verification for an election's audit trail.

Two modes:
- verify(): pointer continuity only. Each entry's previous_hash must equal
  its predecessor's hash_chain.
- recompute_and_compare(): continuity plus digest correctness. Each entry's
  hash_chain is recomputed from its stored fields and compared.

Neither mode reorders its input; callers pass entries sorted by timestamp
ascending, ties in insertion order.
"""

from typing import List, Optional, Sequence

from audit.hasher import ChainHasher
from audit.models import AuditEntry, ChainLinkResult, ChainVerificationResult
from common.exceptions import PreconditionViolation
from common.logging import get_logger

logger = get_logger(__name__)


def require_chronological(entries: Sequence[AuditEntry]) -> None:
    """
    Raise PreconditionViolation unless timestamps are non-decreasing.

    Equal timestamps are allowed; their relative order is the store's
    insertion order.
    """
    for index in range(1, len(entries)):
        if entries[index].timestamp < entries[index - 1].timestamp:
            raise PreconditionViolation(
                f"Audit entries must be sorted by timestamp ascending: "
                f"entry {index} ({entries[index].audit_id}) precedes entry {index - 1}"
            )


def require_single_election(entries: Sequence[AuditEntry]) -> None:
    """Raise PreconditionViolation if entries span more than one election."""
    election_ids = {entry.election_id for entry in entries}
    if len(election_ids) > 1:
        raise PreconditionViolation(
            f"A hash chain belongs to one election, got {sorted(election_ids)}"
        )


class ChainVerifier:
    """Replays an ordered sequence of audit entries and checks link integrity."""

    def __init__(self, hasher: Optional[ChainHasher] = None):
        self._hasher = hasher or ChainHasher()

    def verify(self, entries: Sequence[AuditEntry]) -> ChainVerificationResult:
        """
        Check that every entry points at its predecessor.

        Args:
            entries: One election's entries, sorted by creation order

        Returns:
            ChainVerificationResult with one row per entry

        Raises:
            PreconditionViolation: If entries are unsorted or mix elections
        """
        return self._run(entries, recompute=False)

    def recompute_and_compare(self, entries: Sequence[AuditEntry]) -> ChainVerificationResult:
        """
        Check links and recompute every digest from stored fields.

        A row passes only if its previous_hash matches the predecessor and
        its hash_chain matches the recomputed digest. This catches edits to
        an entry's content that leave the pointers untouched.
        """
        return self._run(entries, recompute=True)

    def _run(self, entries: Sequence[AuditEntry], recompute: bool) -> ChainVerificationResult:
        require_single_election(entries)
        require_chronological(entries)

        rows: List[ChainLinkResult] = []
        expected_previous = ""
        for entry in entries:
            link_ok = entry.previous_hash == expected_previous
            recomputed = None
            digest_ok = None
            if recompute:
                recomputed = self._hasher.recompute(entry)
                digest_ok = recomputed == entry.hash_chain

            rows.append(
                ChainLinkResult(
                    audit_id=entry.audit_id,
                    is_valid=link_ok and digest_ok is not False,
                    expected_previous_hash=expected_previous,
                    actual_previous_hash=entry.previous_hash,
                    current_hash=entry.hash_chain,
                    recomputed_hash=recomputed,
                    digest_valid=digest_ok,
                )
            )
            # Next link is judged against what is stored, not what was expected,
            # so a single corrupted pointer fails only its own row.
            expected_previous = entry.hash_chain

        result = ChainVerificationResult(
            is_chain_valid=all(row.is_valid for row in rows),
            verification_results=rows,
            total_entries=len(rows),
            digests_checked=recompute,
        )

        logger.debug(
            "audit_chain_checked",
            total_entries=result.total_entries,
            is_chain_valid=result.is_chain_valid,
            digests_checked=recompute,
        )
        return result
