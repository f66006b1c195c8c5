"""
Canonical serialization shared by the audit chain and vote verification.

Digests are computed over canonical JSON text. Whatever is hashed must be
stored as that same text and parsed back to the same values, so payloads
are restricted to finite JSON values and timestamps are always aware.
"""

import json
import math
from datetime import datetime, timezone
from typing import Any, Dict


def assume_utc(value: datetime) -> datetime:
    """
    Attach UTC to a naive datetime; aware datetimes are returned unchanged.

    Keeps the offset a timestamp was given with, so any two values that
    pass through here can be compared and subtracted.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def normalize_timestamp(value: datetime) -> str:
    """
    Render a timestamp as UTC ISO-8601 with microseconds.

    Naive datetimes are taken to be UTC. The same instant always renders
    the same way regardless of the offset it was stored with.
    """
    return assume_utc(value).astimezone(timezone.utc).isoformat(timespec="microseconds")


def canonical_json(payload: Dict[str, Any]) -> str:
    """Serialize with sorted keys and compact separators."""
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=str,
    )


def require_finite_json(payload: Any) -> None:
    """
    Raise ValueError if payload holds NaN or infinite numbers.

    PostgreSQL's json type rejects them, and they have no JSON text form
    that parses back to the same value.
    """
    if isinstance(payload, float) and not math.isfinite(payload):
        raise ValueError(f"non-finite number {payload!r} is not valid JSON")
    if isinstance(payload, dict):
        for value in payload.values():
            require_finite_json(value)
    elif isinstance(payload, (list, tuple)):
        for value in payload:
            require_finite_json(value)
