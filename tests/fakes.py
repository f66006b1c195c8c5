"""
In-memory stand-ins for the PostgreSQL repositories.
"""

import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from audit.models import AuditEntry
from fraud_detection.models import FraudCase, FraudCaseCreate, FraudCaseUpdate, VoteRecord
from verification.models import VerificationCreate, VerificationStatus, VoteVerification


class InMemoryAuditRepository:
    """Keeps entries per election in insertion order."""

    def __init__(self):
        self.entries: Dict[str, List[AuditEntry]] = {}

    def append_entry(
        self,
        election_id: str,
        build_entry: Callable[[Optional[AuditEntry]], AuditEntry],
    ) -> AuditEntry:
        chain = self.entries.setdefault(election_id, [])
        entry = build_entry(chain[-1] if chain else None)
        chain.append(entry)
        return entry

    def get_chain_head(self, election_id: str) -> Optional[AuditEntry]:
        chain = self.entries.get(election_id)
        return chain[-1] if chain else None

    def get_entries_by_election(self, election_id: str) -> List[AuditEntry]:
        return list(self.entries.get(election_id, []))

    def get_entries_by_user(self, user_id: str, limit: Optional[int] = None) -> List[AuditEntry]:
        found = [
            (entry.timestamp, position, entry)
            for chain in self.entries.values()
            for position, entry in enumerate(chain)
            if entry.user_id == user_id
        ]
        found.sort(key=lambda item: item[:2], reverse=True)
        entries = [entry for _, _, entry in found]
        return entries[:limit] if limit else entries


class InMemoryFraudRepository:
    """Holds votes and fraud cases."""

    def __init__(self, votes: Optional[List[VoteRecord]] = None):
        self.votes = votes or []
        self.cases: Dict[str, FraudCase] = {}

    def get_votes_by_election(self, election_id: str) -> List[VoteRecord]:
        return [vote for vote in self.votes if vote.election_id == election_id]

    def create_case(self, case_create: FraudCaseCreate) -> FraudCase:
        now = datetime.now(timezone.utc)
        case = FraudCase(
            report_id=str(uuid.uuid4()),
            created_at=now,
            updated_at=now,
            **case_create.model_dump(),
        )
        self.cases[case.report_id] = case
        return case

    def get_cases_by_election(self, election_id: str, status=None) -> List[FraudCase]:
        return [
            case
            for case in self.cases.values()
            if case.election_id == election_id and (status is None or case.status == status)
        ]

    def update_case(self, report_id: str, case_update: FraudCaseUpdate) -> Optional[FraudCase]:
        case = self.cases.get(report_id)
        if case is None:
            return None
        updated = case.model_copy(
            update={
                "status": case_update.status,
                "investigated_by": case_update.investigated_by or case.investigated_by,
                "resolution": case_update.resolution or case.resolution,
                "updated_at": datetime.now(timezone.utc),
            }
        )
        self.cases[report_id] = updated
        return updated


class InMemoryVerificationRepository:
    """Holds verification records keyed by id."""

    def __init__(self):
        self.records: Dict[str, VoteVerification] = {}

    def create_verification(
        self,
        verification_create: VerificationCreate,
        verification_code: str,
        receipt_digest: Optional[str] = None,
    ) -> VoteVerification:
        record = VoteVerification(
            verification_id=str(uuid.uuid4()),
            verification_code=verification_code,
            receipt_digest=receipt_digest,
            created_at=datetime.now(timezone.utc),
            **verification_create.model_dump(),
        )
        self.records[record.verification_id] = record
        return record

    def get_by_code(self, verification_code: str) -> Optional[VoteVerification]:
        for record in self.records.values():
            if record.verification_code == verification_code:
                return record
        return None

    def update_status(
        self,
        verification_id: str,
        status: VerificationStatus,
        verified_at: Optional[datetime] = None,
    ) -> Optional[VoteVerification]:
        record = self.records.get(verification_id)
        if record is None:
            return None
        updated = record.model_copy(
            update={"verification_status": VerificationStatus(status).value, "verified_at": verified_at}
        )
        self.records[verification_id] = updated
        return updated

    def get_by_election(self, election_id: str) -> List[VoteVerification]:
        found = [record for record in self.records.values() if record.election_id == election_id]
        return list(reversed(found))
