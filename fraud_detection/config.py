"""
Configuration loader for detection thresholds.

Loads the 'detection' section of a YAML config file. Any threshold left
out of the file keeps its built-in default.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from audit.anomaly import HIGH_ACTIVITY_THRESHOLD, RAPID_ACTION_WINDOW_MS
from fraud_detection.detectors.behavior import SPIKE_MULTIPLIER
from fraud_detection.detectors.patterns import RAPID_VOTE_WINDOW_MS


class DetectionThresholds(BaseModel):
    """Heuristic thresholds used by the vote detectors and the audit anomaly detector."""

    rapid_vote_window_ms: float = Field(
        default=RAPID_VOTE_WINDOW_MS,
        gt=0,
        description="Votes by one voter closer together than this are rapid voting",
    )
    rapid_action_window_ms: float = Field(
        default=RAPID_ACTION_WINDOW_MS,
        gt=0,
        description="Consecutive audit actions by one user closer than this are rapid actions",
    )
    high_activity_threshold: int = Field(
        default=HIGH_ACTIVITY_THRESHOLD,
        ge=0,
        description="Audit actions per user above this count are high activity",
    )
    spike_multiplier: float = Field(
        default=SPIKE_MULTIPLIER,
        gt=0,
        description="An hour above this multiple of the hourly average is a voting spike",
    )


def load_detection_config(config_path: str) -> DetectionThresholds:
    """
    Load detection thresholds from a YAML file.
    
    Args:
        config_path: Path to the YAML configuration file
        
    Returns:
        DetectionThresholds with file values applied over the defaults
        
    Raises:
        FileNotFoundError: If the config file doesn't exist
        yaml.YAMLError: If the YAML file is invalid
        ValueError: If the config structure or a threshold value is invalid
    """
    config_file = Path(config_path)
    
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")
    
    try:
        with open(config_file, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"Invalid YAML in config file {config_path}: {e}") from e
    
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a YAML dictionary, got {type(data)}")
    
    if "detection" not in data:
        raise ValueError("Config file must contain a 'detection' key")
    
    detection_data = data["detection"] or {}
    
    if not isinstance(detection_data, dict):
        raise ValueError(f"'detection' must be a dictionary, got {type(detection_data)}")
    
    unknown = set(detection_data) - set(DetectionThresholds.model_fields)
    if unknown:
        raise ValueError(f"Unknown detection thresholds: {sorted(unknown)}")
    
    try:
        return DetectionThresholds(**detection_data)
    except Exception as e:
        raise ValueError(f"Invalid detection configuration: {e}") from e
