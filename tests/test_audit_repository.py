"""
Tests for AuditRepository storage of hashed payloads.
"""

import json
import uuid
from contextlib import contextmanager

import pytest
from pydantic import ValidationError

from audit.hasher import ChainHasher
from audit.models import AuditAction, AuditEntry, AuditEntryCreate
from audit.repository import AuditRepository
from audit.verifier import ChainVerifier
from common.db import SCHEMA_STATEMENTS

from conftest import BASE_TIME


class RecordingCursor:
    """
    Cursor double for a json column.

    Stores the inserted row and hands it back the way psycopg2 decodes a
    json column: json.loads over the exact text that was written.
    """

    def __init__(self):
        self.rows = []
        self._result = []

    def execute(self, query, params=None):
        statement = " ".join(query.split())
        if statement.startswith("INSERT INTO vottery_audit_trails"):
            columns = (
                "audit_id", "election_id", "user_id", "action_type", "action_data",
                "ip_address", "user_agent", "timestamp", "hash_chain", "previous_hash",
            )
            self.rows.append(dict(zip(columns, params)))
            self._result = []
        elif "FROM vottery_audit_trails" in statement:
            self._result = [
                {**row, "action_data": json.loads(row["action_data"])} for row in self.rows
            ]
            if "DESC" in statement:
                self._result = self._result[-1:]
        else:
            self._result = []

    def fetchone(self):
        return self._result[0] if self._result else None

    def fetchall(self):
        return list(self._result)


class RecordingDB:
    def __init__(self):
        self.cursor = RecordingCursor()

    @contextmanager
    def get_cursor(self, dict_cursor=False):
        yield self.cursor


def _append(repository, action_data):
    hasher = ChainHasher()

    def build_entry(head):
        previous_hash = head.hash_chain if head else ""
        action = AuditAction(
            action_type="tally_published",
            action_data=action_data,
            user_id="official-1",
            timestamp=BASE_TIME,
        )
        return AuditEntry(
            audit_id=str(uuid.uuid4()),
            election_id="election-1",
            user_id=action.user_id,
            action_type=action.action_type,
            action_data=action.action_data,
            timestamp=action.timestamp,
            hash_chain=hasher.compute_link(action, previous_hash),
            previous_hash=previous_hash,
        )

    return repository.append_entry("election-1", build_entry)


class TestStoredPayloads:
    """Test hashed payloads survive storage unchanged."""

    def test_payload_column_keeps_text(self):
        """Test action_data is a json column, which stores text verbatim."""
        audit_table = SCHEMA_STATEMENTS[0]
        assert "action_data JSON NOT NULL" in audit_table
        assert "JSONB" not in audit_table

    def test_exponent_floats_recompute_after_read_back(self):
        """Test numbers that jsonb would rewrite still verify after a round trip."""
        repository = AuditRepository(RecordingDB())
        _append(repository, {"turnout": 1e20, "margin": 1e-07, "ratio": 0.1})
        _append(repository, {"nested": {"b": [1.5, 2], "a": -0.0}})

        stored = repository.get_entries_by_election("election-1")

        assert stored[0].action_data == {"turnout": 1e20, "margin": 1e-07, "ratio": 0.1}
        assert isinstance(stored[0].action_data["turnout"], float)
        assert ChainVerifier().recompute_and_compare(stored).is_chain_valid is True

    def test_written_text_is_canonical(self):
        """Test the stored text is the same canonical form that was hashed."""
        db = RecordingDB()
        _append(AuditRepository(db), {"b": 2, "a": 1})
        assert db.cursor.rows[0]["action_data"] == '{"a":1,"b":2}'

    def test_chain_head_is_latest_entry(self):
        """Test the chain head is the last appended entry."""
        repository = AuditRepository(RecordingDB())
        _append(repository, {"seq": 1})
        last = _append(repository, {"seq": 2})
        assert repository.get_chain_head("election-1").audit_id == last.audit_id


class TestPayloadValidation:
    """Test payloads that cannot be stored as JSON are rejected up front."""

    @pytest.mark.parametrize("number", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_numbers_rejected(self, number):
        """Test NaN and infinities are refused when an action is recorded."""
        with pytest.raises(ValidationError):
            AuditEntryCreate(
                election_id="election-1",
                action_type="tally_published",
                action_data={"counts": [1, {"ratio": number}]},
            )
