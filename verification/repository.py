"""Repository for vote verification records - raw SQL data access layer."""

import json
import uuid
from datetime import datetime
from typing import List, Optional

from common.db import IntegrityDB
from common.logging import get_logger
from verification.models import VerificationCreate, VerificationStatus, VoteVerification

logger = get_logger(__name__)

_VERIFICATION_COLUMNS = """
    verification_id::text AS verification_id,
    vote_id,
    election_id,
    user_id,
    verification_code,
    verification_type,
    verification_status,
    verification_data,
    receipt_digest,
    verified_at,
    created_at
"""


class VerificationRepository:
    """Data access for vottery_vote_verifications."""

    def __init__(self, db: IntegrityDB):
        """
        Initialize verification repository.

        Args:
            db: IntegrityDB instance for database connections
        """
        self._db = db

    def create_verification(
        self,
        verification_create: VerificationCreate,
        verification_code: str,
        receipt_digest: Optional[str] = None,
    ) -> VoteVerification:
        """
        Insert a new verification record with status 'pending'.

        Args:
            verification_create: VerificationCreate model
            verification_code: Code issued to the voter
            receipt_digest: Receipt digest issued with the code, if any

        Returns:
            Created VoteVerification model
        """
        try:
            with self._db.get_cursor(dict_cursor=True) as cursor:
                cursor.execute(
                    f"""
                    INSERT INTO vottery_vote_verifications
                        (verification_id, vote_id, election_id, user_id, verification_code,
                         verification_type, verification_status, verification_data, receipt_digest)
                    VALUES
                        (%s, %s, %s, %s, %s, %s, %s, %s::jsonb, %s)
                    RETURNING {_VERIFICATION_COLUMNS}
                    """,
                    (
                        str(uuid.uuid4()),
                        verification_create.vote_id,
                        verification_create.election_id,
                        verification_create.user_id,
                        verification_code,
                        verification_create.verification_type,
                        VerificationStatus.PENDING.value,
                        json.dumps(verification_create.verification_data),
                        receipt_digest,
                    ),
                )
                return VoteVerification(**cursor.fetchone())
        except Exception as e:
            logger.error(
                "verification_create_failed",
                election_id=verification_create.election_id,
                vote_id=verification_create.vote_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    def get_by_code(self, verification_code: str) -> Optional[VoteVerification]:
        """
        Look up a verification record by its code.

        Returns:
            VoteVerification model, or None if no record has this code
        """
        try:
            with self._db.get_cursor(dict_cursor=True) as cursor:
                cursor.execute(
                    f"""
                    SELECT {_VERIFICATION_COLUMNS}
                    FROM vottery_vote_verifications
                    WHERE verification_code = %s
                    """,
                    (verification_code,),
                )
                row = cursor.fetchone()
                return VoteVerification(**row) if row else None
        except Exception as e:
            logger.error(
                "verification_lookup_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    def update_status(
        self,
        verification_id: str,
        status: VerificationStatus,
        verified_at: Optional[datetime] = None,
    ) -> Optional[VoteVerification]:
        """
        Set a record's status and verification time.

        Args:
            verification_id: Record identifier
            status: New status
            verified_at: When the vote was verified; None leaves it unset

        Returns:
            Updated VoteVerification model, or None if no such record exists
        """
        try:
            with self._db.get_cursor(dict_cursor=True) as cursor:
                cursor.execute(
                    f"""
                    UPDATE vottery_vote_verifications
                    SET
                        verification_status = %s,
                        verified_at = %s
                    WHERE verification_id::text = %s
                    RETURNING {_VERIFICATION_COLUMNS}
                    """,
                    (VerificationStatus(status).value, verified_at, verification_id),
                )
                row = cursor.fetchone()
                return VoteVerification(**row) if row else None
        except Exception as e:
            logger.error(
                "verification_update_failed",
                verification_id=verification_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    def get_by_election(self, election_id: str) -> List[VoteVerification]:
        """
        Get an election's verification records, newest first.

        Args:
            election_id: Election identifier

        Returns:
            List of VoteVerification models
        """
        try:
            with self._db.get_cursor(dict_cursor=True) as cursor:
                cursor.execute(
                    f"""
                    SELECT {_VERIFICATION_COLUMNS}
                    FROM vottery_vote_verifications
                    WHERE election_id = %s
                    ORDER BY created_at DESC
                    """,
                    (election_id,),
                )
                return [VoteVerification(**row) for row in cursor.fetchall()]
        except Exception as e:
            logger.error(
                "verifications_query_failed",
                election_id=election_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
