"""Rapid succession voting detection."""

from typing import Dict, List, Sequence

from fraud_detection.interfaces import VoteDetector, require_grouping_keys
from fraud_detection.models import RapidVotingFinding, VoteRecord

RAPID_VOTE_WINDOW_MS = 5000


class PatternDetector(VoteDetector):
    """
    Flags a voter casting ballots in rapid succession.

    Votes are grouped per voter and ordered by created_at (stable, so equal
    timestamps keep input order). Each adjacent pair closer together than
    the window is one finding. Voters are reported in the order they first
    appear in the input.
    """

    def __init__(self, rapid_vote_window_ms: float = RAPID_VOTE_WINDOW_MS):
        self.rapid_vote_window_ms = rapid_vote_window_ms

    @property
    def name(self) -> str:
        return "rapid_voting"

    def configure(self, config: dict) -> None:
        self.rapid_vote_window_ms = config.get("rapid_vote_window_ms", self.rapid_vote_window_ms)

    def detect(self, votes: Sequence[VoteRecord]) -> List[RapidVotingFinding]:
        require_grouping_keys(votes)

        by_voter: Dict[str, List[VoteRecord]] = {}
        for vote in votes:
            by_voter.setdefault(vote.user_id, []).append(vote)

        findings = []
        for user_id, voter_votes in by_voter.items():
            if len(voter_votes) < 2:
                continue
            ordered = sorted(voter_votes, key=lambda v: v.created_at)
            for earlier, later in zip(ordered, ordered[1:]):
                gap_ms = (later.created_at - earlier.created_at).total_seconds() * 1000
                if gap_ms < self.rapid_vote_window_ms:
                    findings.append(
                        RapidVotingFinding(
                            user_id=user_id,
                            time_difference_ms=gap_ms,
                            vote_ids=[earlier.vote_id, later.vote_id],
                        )
                    )
        return findings
