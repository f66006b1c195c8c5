"""
Tests for the vote detectors.
"""

from datetime import datetime, timedelta, timezone

import pytest

from common.exceptions import PreconditionViolation
from fraud_detection.detectors import BehaviorAnalyzer, DuplicateVoteDetector, PatternDetector
from fraud_detection.interfaces import VoteDetector
from fraud_detection.models import VoteRecord

from conftest import BASE_TIME, make_vote


class TestDuplicateVoteDetector:
    """Test duplicate ballot detection."""

    def test_is_vote_detector(self):
        """Test the detector implements the VoteDetector interface."""
        detector = DuplicateVoteDetector()
        assert isinstance(detector, VoteDetector)
        assert detector.name == "duplicate_votes"

    def test_two_votes_same_voter(self):
        """Test two ballots by A in E give one finding referencing both."""
        votes = [make_vote("v1", "A", 0), make_vote("v2", "A", 60_000)]
        findings = DuplicateVoteDetector().detect(votes)
        assert len(findings) == 1
        assert findings[0].type == "duplicate_vote"
        assert findings[0].user_id == "A"
        assert findings[0].election_id == "election-1"
        assert findings[0].vote_ids == ["v1", "v2"]

    def test_every_repeat_references_first(self):
        """Test three ballots give two findings pointing at the first ballot."""
        votes = [make_vote("v1", "A"), make_vote("v2", "A"), make_vote("v3", "A")]
        findings = DuplicateVoteDetector().detect(votes)
        assert [f.vote_ids for f in findings] == [["v1", "v2"], ["v1", "v3"]]

    def test_same_voter_different_elections(self):
        """Test one ballot per election is not a duplicate."""
        votes = [make_vote("v1", "A", election_id="e1"), make_vote("v2", "A", election_id="e2")]
        assert DuplicateVoteDetector().detect(votes) == []

    def test_findings_follow_input_order(self):
        """Test findings appear in the order the repeats appear."""
        votes = [
            make_vote("a1", "A"),
            make_vote("b1", "B"),
            make_vote("b2", "B"),
            make_vote("a2", "A"),
        ]
        findings = DuplicateVoteDetector().detect(votes)
        assert [f.user_id for f in findings] == ["B", "A"]

    def test_empty_input(self):
        """Test no votes gives no findings."""
        assert DuplicateVoteDetector().detect([]) == []

    def test_missing_user_id_rejected(self):
        """Test an unvalidated record without user_id raises PreconditionViolation."""
        vote = VoteRecord.model_construct(vote_id="v1", user_id="", election_id="e1", created_at=BASE_TIME)
        with pytest.raises(PreconditionViolation):
            DuplicateVoteDetector().detect([vote])

    def test_validation_rejects_empty_ids(self):
        """Test VoteRecord validation rejects empty identifiers at the boundary."""
        with pytest.raises(Exception):
            VoteRecord(vote_id="v1", user_id="", election_id="e1", created_at=BASE_TIME)


class TestPatternDetector:
    """Test rapid succession voting detection."""

    def test_three_seconds_apart_flagged(self):
        """Test two votes 3000ms apart give one rapid_voting finding."""
        votes = [make_vote("v1", "A", 0), make_vote("v2", "A", 3000)]
        findings = PatternDetector().detect(votes)
        assert len(findings) == 1
        assert findings[0].type == "rapid_voting"
        assert findings[0].time_difference_ms == 3000
        assert findings[0].vote_ids == ["v1", "v2"]

    def test_six_seconds_apart_not_flagged(self):
        """Test two votes 6000ms apart give nothing."""
        votes = [make_vote("v1", "A", 0), make_vote("v2", "A", 6000)]
        assert PatternDetector().detect(votes) == []

    def test_gap_equal_to_window_not_flagged(self):
        """Test the window is exclusive."""
        votes = [make_vote("v1", "A", 0), make_vote("v2", "A", 5000)]
        assert PatternDetector().detect(votes) == []

    def test_sorted_within_voter(self):
        """Test votes are ordered by created_at before pairing."""
        votes = [make_vote("late", "A", 4000), make_vote("early", "A", 0)]
        findings = PatternDetector().detect(votes)
        assert findings[0].vote_ids == ["early", "late"]
        assert findings[0].time_difference_ms == 4000

    def test_equal_timestamps_keep_input_order(self):
        """Test ties preserve input order and give a zero gap."""
        votes = [make_vote("first", "A", 0), make_vote("second", "A", 0)]
        findings = PatternDetector().detect(votes)
        assert findings[0].vote_ids == ["first", "second"]
        assert findings[0].time_difference_ms == 0

    def test_adjacent_pairs_only(self):
        """Test each adjacent pair is judged on its own gap."""
        votes = [make_vote("v1", "A", 0), make_vote("v2", "A", 1000), make_vote("v3", "A", 10_000)]
        findings = PatternDetector().detect(votes)
        assert [f.vote_ids for f in findings] == [["v1", "v2"]]

    def test_single_vote_voters_ignored(self):
        """Test voters with one ballot produce nothing."""
        votes = [make_vote("v1", "A", 0), make_vote("v2", "B", 100)]
        assert PatternDetector().detect(votes) == []

    def test_configure_window(self):
        """Test configure() overrides the window."""
        detector = PatternDetector()
        detector.configure({"rapid_vote_window_ms": 10_000})
        votes = [make_vote("v1", "A", 0), make_vote("v2", "A", 6000)]
        assert len(detector.detect(votes)) == 1

    def test_empty_input(self):
        """Test no votes gives no findings."""
        assert PatternDetector().detect([]) == []


class TestBehaviorAnalyzer:
    """Test hourly voting behavior analysis."""

    def _vote_at_hour(self, vote_id: str, user_id: str, hour: int) -> VoteRecord:
        return VoteRecord(
            vote_id=vote_id,
            user_id=user_id,
            election_id="election-1",
            created_at=datetime(2024, 11, 5, hour, 30, tzinfo=timezone.utc),
        )

    def test_empty_input(self):
        """Test zero votes gives an all-zero summary."""
        summary = BehaviorAnalyzer().analyze("election-1", [])
        assert summary.total_votes == 0
        assert summary.unique_voters == 0
        assert summary.voting_timeline == []
        assert summary.suspicious_activity == []

    def test_spike_flagged(self):
        """Test an hour with 4 votes over an otherwise one-per-hour day is a spike."""
        votes = [self._vote_at_hour(f"v{h}", f"u{h}", h) for h in range(24)]
        votes += [self._vote_at_hour(f"x{i}", f"x{i}", 12) for i in range(3)]

        summary = BehaviorAnalyzer().analyze("election-1", votes)

        assert summary.total_votes == 27
        assert summary.unique_voters == 27
        assert len(summary.suspicious_activity) == 1
        spike = summary.suspicious_activity[0]
        assert spike.type == "voting_spike"
        assert spike.hour == 12
        assert spike.vote_count == 4
        assert spike.average == 1

    def test_even_spread_no_spike(self):
        """Test one vote per hour gives no spikes."""
        votes = [self._vote_at_hour(f"v{h}", f"u{h}", h) for h in range(24)]
        summary = BehaviorAnalyzer().analyze("election-1", votes)
        assert summary.suspicious_activity == []
        assert len(summary.voting_timeline) == 24

    def test_fixed_divisor_of_24(self):
        """Test a single busy hour is a spike even when no other hour has votes."""
        votes = [self._vote_at_hour(f"v{i}", "A", 9) for i in range(2)]
        summary = BehaviorAnalyzer().analyze("election-1", votes)
        # average = 2 / 24, threshold = 0.25
        assert [s.hour for s in summary.suspicious_activity] == [9]
        assert summary.suspicious_activity[0].average == 0
        assert summary.unique_voters == 1

    def test_timeline_sorted_by_hour(self):
        """Test the timeline lists observed hours in ascending order."""
        votes = [
            self._vote_at_hour("v1", "A", 15),
            self._vote_at_hour("v2", "B", 3),
            self._vote_at_hour("v3", "C", 15),
        ]
        summary = BehaviorAnalyzer().analyze("election-1", votes)
        assert [(t.hour, t.vote_count) for t in summary.voting_timeline] == [(3, 1), (15, 2)]

    def test_average_rounds_half_up(self):
        """Test the reported average rounds .5 upward."""
        # 36 votes -> average 1.5 -> reported as 2
        votes = [self._vote_at_hour(f"v{h}", f"u{h}", h) for h in range(24)]
        votes += [self._vote_at_hour(f"x{i}", f"x{i}", 0) for i in range(12)]
        summary = BehaviorAnalyzer().analyze("election-1", votes)
        assert summary.suspicious_activity[0].hour == 0
        assert summary.suspicious_activity[0].average == 2

    def test_hour_taken_as_given(self):
        """Test the hour component is read without zone conversion."""
        offset = timezone(timedelta(hours=5))
        vote = VoteRecord(
            vote_id="v1",
            user_id="A",
            election_id="election-1",
            created_at=datetime(2024, 11, 5, 22, 0, tzinfo=offset),
        )
        summary = BehaviorAnalyzer().analyze("election-1", [vote])
        assert summary.voting_timeline[0].hour == 22

    def test_custom_multiplier(self):
        """Test the spike multiplier is overridable."""
        votes = [self._vote_at_hour(f"v{h}", f"u{h}", h) for h in range(24)]
        votes.append(self._vote_at_hour("extra", "extra", 5))
        summary = BehaviorAnalyzer(spike_multiplier=1.5).analyze("election-1", votes)
        assert [s.hour for s in summary.suspicious_activity] == [5]
