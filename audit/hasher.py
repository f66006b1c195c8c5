"""
Chain link computation for audit entries.

A link digest covers the entry's action content plus the predecessor's
digest. Only fields persisted on the entry go into the digest, never the
time of hashing, so a stored entry can always be re-verified.
"""

import hashlib

from audit.models import AuditAction, AuditEntry
from common.serialization import canonical_json, normalize_timestamp


class ChainHasher:
    """Computes SHA-256 chain links for audit actions."""

    def serialize(self, action: AuditAction) -> str:
        """Stable serialization of the hashed fields of an action."""
        return canonical_json(
            {
                "action_type": action.action_type,
                "action_data": action.action_data,
                "user_id": action.user_id,
                "timestamp": normalize_timestamp(action.timestamp),
            }
        )

    def compute_link(self, action: AuditAction, previous_hash: str = "") -> str:
        """
        Compute the chain digest for an action given its predecessor's digest.

        Args:
            action: Hashed content of the new entry
            previous_hash: hash_chain of the preceding entry ('' for the first)

        Returns:
            Lowercase hex SHA-256 digest
        """
        material = self.serialize(action) + previous_hash
        return hashlib.sha256(material.encode("utf-8")).hexdigest()

    def recompute(self, entry: AuditEntry) -> str:
        """Recompute a stored entry's digest from its own persisted fields."""
        return self.compute_link(entry.to_action(), entry.previous_hash)
