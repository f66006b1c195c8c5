"""
Voting behavior analysis.

Buckets an election's votes by hour of day and flags hours whose count is
far above the average. The average is always total_votes / 24, not the
number of hours actually observed, so the threshold does not move when only
part of a day has votes.
"""

import math
from collections import Counter
from typing import Sequence

from common.logging import get_logger
from fraud_detection.interfaces import require_grouping_keys
from fraud_detection.models import BehaviorSummary, HourlyVoteCount, VoteRecord, VotingSpikeFinding

logger = get_logger(__name__)

HOURS_PER_DAY = 24
SPIKE_MULTIPLIER = 3.0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class BehaviorAnalyzer:
    """Summarizes turnout per hour and flags temporal voting spikes."""

    def __init__(self, spike_multiplier: float = SPIKE_MULTIPLIER):
        self.spike_multiplier = spike_multiplier

    @property
    def name(self) -> str:
        return "voting_behavior"

    def configure(self, config: dict) -> None:
        self.spike_multiplier = config.get("spike_multiplier", self.spike_multiplier)

    def analyze(self, election_id: str, votes: Sequence[VoteRecord]) -> BehaviorSummary:
        """
        Build the behavior summary for one election.

        The hour of a vote is the hour component of its created_at as
        given; timestamps are not converted to another zone first.

        Args:
            election_id: Election the votes belong to
            votes: Vote records, any order

        Returns:
            BehaviorSummary; all zeros and no findings for no votes
        """
        if not votes:
            return BehaviorSummary(election_id=election_id)
        require_grouping_keys(votes)

        by_hour = Counter(vote.created_at.hour for vote in votes)
        average = len(votes) / HOURS_PER_DAY
        threshold = average * self.spike_multiplier

        spikes = [
            VotingSpikeFinding(
                hour=hour,
                vote_count=count,
                average=round_half_up(average),
            )
            for hour, count in sorted(by_hour.items())
            if count > threshold
        ]

        if spikes:
            logger.debug(
                "voting_spikes_detected",
                election_id=election_id,
                spike_hours=[spike.hour for spike in spikes],
                average_per_hour=average,
            )

        return BehaviorSummary(
            election_id=election_id,
            total_votes=len(votes),
            unique_voters=len({vote.user_id for vote in votes}),
            voting_timeline=[
                HourlyVoteCount(hour=hour, vote_count=count)
                for hour, count in sorted(by_hour.items())
            ],
            suspicious_activity=spikes,
        )
