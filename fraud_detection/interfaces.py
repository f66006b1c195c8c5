"""
Vote detector interface definition.

Defines the contract that pluggable vote-level fraud detectors implement.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence

from pydantic import BaseModel

from common.exceptions import PreconditionViolation
from fraud_detection.models import VoteRecord


def require_grouping_keys(votes: Sequence[VoteRecord]) -> None:
    """
    Raise PreconditionViolation if any vote lacks a user_id or election_id.

    VoteRecord validation already rejects empty identifiers; this guards
    records built without validation (e.g. model_construct from a trusted row).
    """
    for index, vote in enumerate(votes):
        if not vote.user_id or not vote.election_id:
            raise PreconditionViolation(
                f"Vote at index {index} ({vote.vote_id}) is missing user_id or election_id"
            )


class VoteDetector(ABC):
    """
    Abstract base class for vote detectors.

    Detectors are pure: they read the votes they are given, never fetch or
    store anything, and return an empty list for empty input.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique detector name (e.g., "duplicate_votes")."""
        pass

    @abstractmethod
    def detect(self, votes: Sequence[VoteRecord]) -> List[BaseModel]:
        """
        Scan votes and return findings in a deterministic order.

        Args:
            votes: Vote records for analysis

        Returns:
            List of finding models
        """
        pass

    def configure(self, config: dict) -> None:
        """
        Apply threshold overrides.

        Override this if the detector has tunable thresholds.
        """
        pass
