"""
Row fingerprints and in-file duplicate suppression.

The fingerprint is built from the raw values, before defaults are
substituted, so a row with no team column and a row with an empty team
column collide, while a row that literally says "unassigned" does not.
Cross-upload duplicates are left to the unique index on dedupe_key.
"""

from typing import Set

from app.models.spend import CloudProvider
from app.modules.ingestion.domain.normalizer import RawBillingRow

FINGERPRINT_SEPARATOR = "_"


def fingerprint(row: RawBillingRow, cloud: CloudProvider) -> str:
    parts = (
        row.date,
        cloud.value,
        row.account_or_project,
        row.service,
        row.team,
        row.env,
        row.cost,
    )
    return FINGERPRINT_SEPARATOR.join(part or "" for part in parts)


class BatchDeduplicator:
    """Remembers fingerprints seen in the current upload."""

    def __init__(self):
        self._seen: Set[str] = set()

    def admit(self, key: str) -> bool:
        """True the first time a key is offered, False afterwards."""
        if key in self._seen:
            return False
        self._seen.add(key)
        return True

    def __len__(self) -> int:
        return len(self._seen)
