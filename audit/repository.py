"""Repository for audit trail entries - raw SQL data access layer."""

from typing import Callable, List, Optional

from audit.models import AuditEntry
from common.db import IntegrityDB
from common.logging import get_logger
from common.serialization import canonical_json

logger = get_logger(__name__)

_ENTRY_COLUMNS = """
    audit_id::text AS audit_id,
    election_id,
    user_id,
    action_type,
    action_data,
    ip_address,
    user_agent,
    timestamp,
    hash_chain,
    previous_hash
"""


class AuditRepository:
    """
    Append-only storage for hash-chained audit entries.

    action_data is written as the canonical JSON text that was hashed, into
    a json (not jsonb) column. json keeps the text as written, so the payload
    read back parses to the same values and the digest can be recomputed.
    jsonb would rewrite numbers such as 1e+20 and break that.
    """

    def __init__(self, db: IntegrityDB):
        """
        Initialize audit repository.

        Args:
            db: IntegrityDB instance for database connections
        """
        self._db = db

    def append_entry(
        self,
        election_id: str,
        build_entry: Callable[[Optional[AuditEntry]], AuditEntry],
    ) -> AuditEntry:
        """
        Append a new entry to an election's chain.

        Reads the current chain head and inserts the entry built from it in
        one transaction, holding a per-election advisory lock so concurrent
        appends cannot fork the chain.

        Args:
            election_id: Election whose chain is extended
            build_entry: Called with the current head (None for an empty
                chain); returns the fully linked entry to insert

        Returns:
            The stored AuditEntry
        """
        try:
            with self._db.get_cursor(dict_cursor=True) as cursor:
                cursor.execute(
                    "SELECT pg_advisory_xact_lock(hashtext(%s))",
                    (election_id,),
                )
                head = self._select_head(cursor, election_id)

                entry = build_entry(head)
                cursor.execute(
                    """
                    INSERT INTO vottery_audit_trails
                        (audit_id, election_id, user_id, action_type, action_data,
                         ip_address, user_agent, timestamp, hash_chain, previous_hash)
                    VALUES
                        (%s, %s, %s, %s, %s::json, %s, %s, %s, %s, %s)
                    """,
                    (
                        entry.audit_id,
                        entry.election_id,
                        entry.user_id,
                        entry.action_type,
                        canonical_json(entry.action_data),
                        entry.ip_address,
                        entry.user_agent,
                        entry.timestamp,
                        entry.hash_chain,
                        entry.previous_hash,
                    ),
                )
                return entry
        except Exception as e:
            logger.error(
                "audit_entry_insert_failed",
                election_id=election_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    def get_chain_head(self, election_id: str) -> Optional[AuditEntry]:
        """Latest entry of an election's chain, or None if it has none."""
        try:
            with self._db.get_cursor(dict_cursor=True) as cursor:
                return self._select_head(cursor, election_id)
        except Exception as e:
            logger.error(
                "audit_chain_head_query_failed",
                election_id=election_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    def get_entries_by_election(self, election_id: str) -> List[AuditEntry]:
        """
        Get an election's entries in chain order (timestamp, then insertion).

        Args:
            election_id: Election identifier

        Returns:
            List of AuditEntry models, oldest first
        """
        try:
            with self._db.get_cursor(dict_cursor=True) as cursor:
                cursor.execute(
                    f"""
                    SELECT {_ENTRY_COLUMNS}
                    FROM vottery_audit_trails
                    WHERE election_id = %s
                    ORDER BY timestamp ASC, id ASC
                    """,
                    (election_id,),
                )
                return [AuditEntry(**row) for row in cursor.fetchall()]
        except Exception as e:
            logger.error(
                "audit_entries_query_failed",
                election_id=election_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    def get_entries_by_user(self, user_id: str, limit: Optional[int] = None) -> List[AuditEntry]:
        """
        Get a user's entries across all elections, newest first.

        Args:
            user_id: User identifier
            limit: Optional limit on number of results

        Returns:
            List of AuditEntry models
        """
        try:
            with self._db.get_cursor(dict_cursor=True) as cursor:
                query = f"""
                    SELECT {_ENTRY_COLUMNS}
                    FROM vottery_audit_trails
                    WHERE user_id = %s
                    ORDER BY timestamp DESC, id DESC
                """
                params = [user_id]

                if limit:
                    query += " LIMIT %s"
                    params.append(limit)

                cursor.execute(query, tuple(params))
                return [AuditEntry(**row) for row in cursor.fetchall()]
        except Exception as e:
            logger.error(
                "audit_entries_query_failed",
                user_id=user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    @staticmethod
    def _select_head(cursor, election_id: str) -> Optional[AuditEntry]:
        cursor.execute(
            f"""
            SELECT {_ENTRY_COLUMNS}
            FROM vottery_audit_trails
            WHERE election_id = %s
            ORDER BY timestamp DESC, id DESC
            LIMIT 1
            """,
            (election_id,),
        )
        row = cursor.fetchone()
        return AuditEntry(**row) if row else None
