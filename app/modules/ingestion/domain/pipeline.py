"""
Billing CSV Ingestion Pipeline

parse -> infer cloud -> (normalize -> validate -> coerce -> fingerprint ->
in-file dedup) per row -> one bulk insert that skips stored duplicates.

Row rejections are not errors. They are counted and folded into a single
`skipped` figure (total parsed rows minus rows inserted), with a breakdown
alongside for diagnostics.
"""

import csv
import io
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.models.spend import CloudProvider
from app.modules.ingestion.domain.dedupe import BatchDeduplicator, fingerprint
from app.modules.ingestion.domain.normalizer import infer_cloud, normalize_row
from app.modules.ingestion.domain.persistence import DEFAULT_BATCH_SIZE, SpendPersistenceService
from app.modules.ingestion.domain.records import CanonicalRecord, build_record
from app.modules.ingestion.domain.validation import is_admissible
from app.schemas.spend import IngestionSummary, SkipBreakdown
from app.shared.core.exceptions import EmptyInputError, InputError, NoValidRowsError
from app.shared.db.session import Database

logger = structlog.get_logger()


def parse_csv(content: bytes) -> List[Dict[str, Optional[str]]]:
    """Header-aware parse. Blank lines are not rows; a UTF-8 BOM is tolerated."""
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise InputError("File is not valid UTF-8 text", code="invalid_encoding")

    try:
        return list(csv.DictReader(io.StringIO(text, newline="")))
    except csv.Error as e:
        raise InputError(f"Malformed CSV: {e}", code="malformed_csv")


class PreparedBatch:
    """Output of the in-memory half of the pipeline."""

    def __init__(self, cloud: CloudProvider, total_rows: int):
        self.cloud = cloud
        self.total_rows = total_rows
        self.records: List[CanonicalRecord] = []
        self.invalid = 0
        self.duplicate_in_file = 0


def prepare_batch(rows: List[Dict[str, Optional[str]]], filename: Optional[str]) -> PreparedBatch:
    """Everything up to, but not including, persistence. Pure apart from raising."""
    if not rows:
        raise EmptyInputError()

    cloud = infer_cloud(filename)
    batch = PreparedBatch(cloud, total_rows=len(rows))
    dedupe = BatchDeduplicator()

    for row_number, row in enumerate(rows, start=1):
        raw = normalize_row(row)
        if not is_admissible(raw):
            batch.invalid += 1
            continue

        key = fingerprint(raw, cloud)
        record = build_record(raw, cloud, key, row_number)
        if not dedupe.admit(key):
            batch.duplicate_in_file += 1
            continue

        batch.records.append(record)

    if not batch.records:
        raise NoValidRowsError(details={
            "total_rows": batch.total_rows,
            "invalid": batch.invalid,
            "duplicate_in_file": batch.duplicate_in_file,
        })

    return batch


class IngestionPipeline:
    """Synchronous, one-file-at-a-time ingestion into the spend store."""

    def __init__(self, db: Database, batch_size: int = DEFAULT_BATCH_SIZE):
        self.db = db
        self.batch_size = batch_size

    async def ingest(self, content: bytes, filename: Optional[str]) -> IngestionSummary:
        rows = parse_csv(content)
        batch = prepare_batch(rows, filename)

        logger.info("ingestion_batch_prepared",
                    filename=filename,
                    cloud=batch.cloud.value,
                    total_rows=batch.total_rows,
                    candidates=len(batch.records),
                    invalid=batch.invalid,
                    duplicate_in_file=batch.duplicate_in_file)

        async def _persist(session: AsyncSession) -> int:
            service = SpendPersistenceService(session, batch_size=self.batch_size)
            return await service.insert_skip_duplicates(batch.records)

        inserted = await self.db.run(_persist)

        summary = IngestionSummary(
            cloud=batch.cloud.value,
            total_rows=batch.total_rows,
            inserted=inserted,
            skipped=batch.total_rows - inserted,
            breakdown=SkipBreakdown(
                invalid=batch.invalid,
                duplicate_in_file=batch.duplicate_in_file,
                already_persisted=len(batch.records) - inserted,
            ),
        )

        logger.info("ingestion_complete",
                    filename=filename,
                    cloud=summary.cloud,
                    inserted=summary.inserted,
                    skipped=summary.skipped)
        return summary
