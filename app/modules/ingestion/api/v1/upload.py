from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, UploadFile
import structlog

from app.modules.ingestion.domain.pipeline import IngestionPipeline
from app.schemas.spend import UploadResponse
from app.shared.core.auth import CurrentUser, requires_editor
from app.shared.core.config import get_settings
from app.shared.core.exceptions import InputError, MissingFileError, SpendLedgerException
from app.shared.db.session import Database, get_database

router = APIRouter(tags=["Ingestion"])
logger = structlog.get_logger()


def get_pipeline(db: Database = Depends(get_database)) -> IngestionPipeline:
    return IngestionPipeline(db, batch_size=get_settings().INGEST_BATCH_SIZE)


@router.post("/upload", response_model=UploadResponse)
async def upload_billing_csv(
    user: Annotated[CurrentUser, Depends(requires_editor)],
    pipeline: Annotated[IngestionPipeline, Depends(get_pipeline)],
    file: Optional[UploadFile] = File(None),
):
    """
    Ingests one AWS or GCP billing CSV export.

    The provider is taken from the file name ("gcp" anywhere -> GCP, else AWS).
    Re-uploading rows that are already stored inserts nothing; they are
    reported in `skipped`.
    """
    if file is None:
        raise MissingFileError()

    content = await file.read()
    logger.info("upload_received", filename=file.filename, size_bytes=len(content), user_id=str(user.id))

    try:
        summary = await pipeline.ingest(content, file.filename)
    except InputError:
        raise
    except Exception as e:
        logger.error("upload_failed", filename=file.filename, error=str(e), exc_info=True)
        raise SpendLedgerException("Upload failed", code="upload_failed") from e

    return UploadResponse(
        message=f"Uploaded successfully ({summary.cloud.upper()} detected)",
        cloud=summary.cloud,
        inserted=summary.inserted,
        skipped=summary.skipped,
    )
