"""
Duplicate vote detection.

A voter may cast one ballot per election. The first ballot seen for a
(user_id, election_id) pair is remembered; every later ballot for the same
pair is reported against it, regardless of timing.
"""

from typing import Dict, List, Sequence, Tuple

from fraud_detection.interfaces import VoteDetector, require_grouping_keys
from fraud_detection.models import DuplicateVoteFinding, VoteRecord


class DuplicateVoteDetector(VoteDetector):
    """Flags multiple ballots from the same voter in the same election."""

    @property
    def name(self) -> str:
        return "duplicate_votes"

    def detect(self, votes: Sequence[VoteRecord]) -> List[DuplicateVoteFinding]:
        """
        Report every repeat ballot, in input order.

        A voter with three ballots yields two findings, each pointing back
        at the first ballot.
        """
        require_grouping_keys(votes)

        first_vote: Dict[Tuple[str, str], str] = {}
        findings = []
        for vote in votes:
            key = (vote.user_id, vote.election_id)
            if key not in first_vote:
                first_vote[key] = vote.vote_id
                continue
            findings.append(
                DuplicateVoteFinding(
                    user_id=vote.user_id,
                    election_id=vote.election_id,
                    vote_ids=[first_vote[key], vote.vote_id],
                )
            )
        return findings
