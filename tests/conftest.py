"""
Shared fixtures for building audit chains and vote sets.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Sequence, Tuple

import pytest

from audit.hasher import ChainHasher
from audit.models import AuditAction, AuditEntry
from fraud_detection.models import VoteRecord

BASE_TIME = datetime(2024, 11, 5, 8, 0, 0, tzinfo=timezone.utc)


def make_chain(
    steps: Sequence[Tuple[Optional[str], int]],
    election_id: str = "election-1",
    action_type: str = "vote_cast",
) -> List[AuditEntry]:
    """
    Build a correctly linked chain.

    Args:
        steps: (user_id, milliseconds after BASE_TIME) per entry, in order
    """
    hasher = ChainHasher()
    entries = []
    previous_hash = ""
    for index, (user_id, offset_ms) in enumerate(steps):
        timestamp = BASE_TIME + timedelta(milliseconds=offset_ms)
        action_data = {"sequence": index}
        digest = hasher.compute_link(
            AuditAction(
                action_type=action_type,
                action_data=action_data,
                user_id=user_id,
                timestamp=timestamp,
            ),
            previous_hash,
        )
        entries.append(
            AuditEntry(
                audit_id=str(uuid.uuid4()),
                election_id=election_id,
                user_id=user_id,
                action_type=action_type,
                action_data=action_data,
                timestamp=timestamp,
                hash_chain=digest,
                previous_hash=previous_hash,
            )
        )
        previous_hash = digest
    return entries


def make_vote(vote_id: str, user_id: str, offset_ms: int = 0, election_id: str = "election-1") -> VoteRecord:
    return VoteRecord(
        vote_id=vote_id,
        user_id=user_id,
        election_id=election_id,
        created_at=BASE_TIME + timedelta(milliseconds=offset_ms),
    )


@pytest.fixture
def chain_of_five() -> List[AuditEntry]:
    """Five entries by alternating users, one minute apart."""
    return make_chain([("alice" if i % 2 == 0 else "bob", i * 60_000) for i in range(5)])


def with_naive_timestamp(entry: AuditEntry) -> AuditEntry:
    """Rebuild an entry as if its timestamp had been supplied without an offset."""
    return AuditEntry.model_validate(
        {**entry.model_dump(), "timestamp": entry.timestamp.replace(tzinfo=None)}
    )
