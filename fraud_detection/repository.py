"""Repository for votes and fraud cases - raw SQL data access layer."""

import json
import uuid
from typing import List, Optional

from common.db import IntegrityDB
from common.logging import get_logger
from fraud_detection.models import (
    CaseStatus,
    FraudCase,
    FraudCaseCreate,
    FraudCaseUpdate,
    VoteRecord,
)

logger = get_logger(__name__)

_CASE_COLUMNS = """
    report_id::text AS report_id,
    election_id,
    reporter_id,
    reported_user_id,
    fraud_type,
    description,
    evidence,
    status,
    severity,
    investigated_by,
    resolution,
    created_at,
    updated_at
"""


class FraudRepository:
    """
    Data access for fraud detection.

    Votes are read from the voting system's vottery_votes table, which this
    service does not own. Fraud cases live in vottery_fraud_reports.
    """

    def __init__(self, db: IntegrityDB):
        """
        Initialize fraud repository.

        Args:
            db: IntegrityDB instance for database connections
        """
        self._db = db

    def get_votes_by_election(self, election_id: str) -> List[VoteRecord]:
        """
        Get all votes cast in an election, oldest first.

        Args:
            election_id: Election identifier

        Returns:
            List of VoteRecord models
        """
        try:
            with self._db.get_cursor(dict_cursor=True) as cursor:
                cursor.execute(
                    """
                    SELECT
                        vote_id::text AS vote_id,
                        user_id::text AS user_id,
                        election_id::text AS election_id,
                        created_at
                    FROM vottery_votes
                    WHERE election_id = %s
                    ORDER BY created_at ASC
                    """,
                    (election_id,),
                )
                return [VoteRecord(**row) for row in cursor.fetchall()]
        except Exception as e:
            logger.error(
                "votes_query_failed",
                election_id=election_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    def create_case(self, case_create: FraudCaseCreate) -> FraudCase:
        """
        Insert a new fraud case with status 'pending'.

        Args:
            case_create: FraudCaseCreate model

        Returns:
            Created FraudCase model
        """
        try:
            with self._db.get_cursor(dict_cursor=True) as cursor:
                cursor.execute(
                    f"""
                    INSERT INTO vottery_fraud_reports
                        (report_id, election_id, reporter_id, reported_user_id,
                         fraud_type, description, evidence, status, severity)
                    VALUES
                        (%s, %s, %s, %s, %s, %s, %s::jsonb, %s, %s)
                    RETURNING {_CASE_COLUMNS}
                    """,
                    (
                        str(uuid.uuid4()),
                        case_create.election_id,
                        case_create.reporter_id,
                        case_create.reported_user_id,
                        case_create.fraud_type,
                        case_create.description,
                        json.dumps(case_create.evidence),
                        CaseStatus.PENDING.value,
                        case_create.severity,
                    ),
                )
                return FraudCase(**cursor.fetchone())
        except Exception as e:
            logger.error(
                "fraud_case_create_failed",
                election_id=case_create.election_id,
                fraud_type=case_create.fraud_type,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    def get_cases_by_election(
        self,
        election_id: str,
        status: Optional[CaseStatus] = None,
    ) -> List[FraudCase]:
        """
        Get an election's fraud cases, newest first.

        Args:
            election_id: Election identifier
            status: Optional status filter

        Returns:
            List of FraudCase models
        """
        try:
            with self._db.get_cursor(dict_cursor=True) as cursor:
                query = f"""
                    SELECT {_CASE_COLUMNS}
                    FROM vottery_fraud_reports
                    WHERE election_id = %s
                """
                params = [election_id]

                if status:
                    query += " AND status = %s"
                    params.append(CaseStatus(status).value)

                query += " ORDER BY created_at DESC"

                cursor.execute(query, tuple(params))
                return [FraudCase(**row) for row in cursor.fetchall()]
        except Exception as e:
            logger.error(
                "fraud_cases_query_failed",
                election_id=election_id,
                status=status,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

    def update_case(self, report_id: str, case_update: FraudCaseUpdate) -> Optional[FraudCase]:
        """
        Update a case's status, investigator and resolution.

        Args:
            report_id: Case identifier
            case_update: FraudCaseUpdate model with changes

        Returns:
            Updated FraudCase model, or None if no such case exists
        """
        try:
            with self._db.get_cursor(dict_cursor=True) as cursor:
                cursor.execute(
                    f"""
                    UPDATE vottery_fraud_reports
                    SET
                        status = %s,
                        investigated_by = COALESCE(%s, investigated_by),
                        resolution = COALESCE(%s, resolution),
                        updated_at = NOW()
                    WHERE report_id::text = %s
                    RETURNING {_CASE_COLUMNS}
                    """,
                    (
                        case_update.status,
                        case_update.investigated_by,
                        case_update.resolution,
                        report_id,
                    ),
                )
                row = cursor.fetchone()
                return FraudCase(**row) if row else None
        except Exception as e:
            logger.error(
                "fraud_case_update_failed",
                report_id=report_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
