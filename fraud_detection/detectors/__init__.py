"""
Vote detectors - duplicate, rapid succession and temporal spike detection.
"""

from fraud_detection.detectors.behavior import BehaviorAnalyzer
from fraud_detection.detectors.duplicate import DuplicateVoteDetector
from fraud_detection.detectors.patterns import PatternDetector

__all__ = [
    "BehaviorAnalyzer",
    "DuplicateVoteDetector",
    "PatternDetector",
]
