"""
Spend Persistence Service

Idempotent bulk storage of canonical spend records. Duplicates against
already-stored data are resolved by the unique index on dedupe_key with
ON CONFLICT DO NOTHING; RETURNING tells us which rows actually landed.
"""

import uuid
from typing import Any, Dict, List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.models.spend import SpendRecord
from app.modules.ingestion.domain.records import CanonicalRecord
from app.shared.db.base import utcnow

logger = structlog.get_logger()

DEFAULT_BATCH_SIZE = 500


class SpendPersistenceService:
    def __init__(self, db: AsyncSession, batch_size: int = DEFAULT_BATCH_SIZE):
        self.db = db
        self.batch_size = batch_size

    def _insert_ignoring_duplicates(self, values: List[Dict[str, Any]]):
        """Dialect-aware INSERT ... ON CONFLICT (dedupe_key) DO NOTHING RETURNING id."""
        dialect_name = self.db.get_bind().dialect.name
        if dialect_name == "postgresql":
            from sqlalchemy.dialects.postgresql import insert
        else:
            from sqlalchemy.dialects.sqlite import insert

        stmt = insert(SpendRecord).values(values)
        stmt = stmt.on_conflict_do_nothing(index_elements=["dedupe_key"])
        return stmt.returning(SpendRecord.id)

    async def insert_skip_duplicates(self, records: Sequence[CanonicalRecord]) -> int:
        """
        Inserts all records in one transaction and returns how many were new.
        Rows whose dedupe_key already exists are silently skipped.
        """
        inserted = 0
        created_at = utcnow()

        for i in range(0, len(records), self.batch_size):
            batch = records[i : i + self.batch_size]
            values = []
            for r in batch:
                row = r.to_row()
                row["id"] = uuid.uuid4()
                row["created_at"] = created_at
                values.append(row)

            result = await self.db.execute(self._insert_ignoring_duplicates(values))
            inserted += len(result.all())

        await self.db.commit()

        logger.info("spend_persistence_success",
                    offered=len(records),
                    inserted=inserted)

        return inserted
