"""
Savings Pipeline Service

CRUD over saving ideas moving through PROPOSED -> APPROVED -> REALIZED.
Transitions are not enforced; any status may be set on update.
"""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.models.savings import SavingIdea, SavingStatus
from app.schemas.savings import SavingIdeaCreate, SavingIdeaUpdate
from app.shared.core.exceptions import InputError, ResourceNotFoundError
from app.shared.db.session import Database

logger = structlog.get_logger()

REQUIRED_FIELDS = ("title", "service", "owner")
# Columns that may be cleared with an explicit null
NULLABLE_FIELDS = {"notes"}

NOT_FOUND_MESSAGE = "Saving idea not found"


def parse_idea_id(raw: Optional[str]) -> UUID:
    """Missing id is a 400; an id that cannot name any row is a 404."""
    value = str(raw or "").strip()
    if not value:
        raise InputError("Missing ID", code="missing_id")
    try:
        return UUID(value)
    except ValueError:
        raise ResourceNotFoundError(NOT_FOUND_MESSAGE)


def parse_status_filter(raw: Optional[str]) -> Optional[SavingStatus]:
    """Unknown status values are ignored rather than rejected."""
    if not raw:
        return None
    try:
        return SavingStatus(raw)
    except ValueError:
        return None


class SavingsService:
    def __init__(self, db: Database):
        self.db = db

    async def list_ideas(self, status: Optional[SavingStatus] = None) -> List[SavingIdea]:
        stmt = select(SavingIdea).order_by(SavingIdea.created_at.desc())
        if status is not None:
            stmt = stmt.where(SavingIdea.status == status.value)

        async def _run(session: AsyncSession) -> List[SavingIdea]:
            return list((await session.execute(stmt)).scalars().all())

        return await self.db.run(_run)

    async def get_idea(self, idea_id: UUID) -> SavingIdea:
        async def _run(session: AsyncSession) -> Optional[SavingIdea]:
            return await session.get(SavingIdea, idea_id)

        idea = await self.db.run(_run)
        if idea is None:
            raise ResourceNotFoundError(NOT_FOUND_MESSAGE)
        return idea

    async def create_idea(self, payload: SavingIdeaCreate) -> SavingIdea:
        if not all(getattr(payload, field) for field in REQUIRED_FIELDS):
            raise InputError("Missing required fields", code="missing_fields")

        async def _run(session: AsyncSession) -> SavingIdea:
            idea = SavingIdea(
                title=payload.title,
                service=payload.service,
                owner=payload.owner,
                est_monthly_saving_usd=payload.est_monthly_saving_usd,
                confidence=payload.confidence,
                status=payload.status.value,
                notes=payload.notes,
            )
            session.add(idea)
            await session.commit()
            await session.refresh(idea)
            return idea

        idea = await self.db.run(_run)
        logger.info("saving_idea_created", idea_id=str(idea.id), service=idea.service, status=idea.status)
        return idea

    async def update_idea(self, payload: SavingIdeaUpdate) -> SavingIdea:
        idea_id = parse_idea_id(payload.id)
        changes = {
            field: value
            for field, value in payload.model_dump(exclude_unset=True, exclude={"id"}).items()
            if value is not None or field in NULLABLE_FIELDS
        }
        if isinstance(changes.get("status"), SavingStatus):
            changes["status"] = changes["status"].value

        async def _run(session: AsyncSession) -> Optional[SavingIdea]:
            idea = await session.get(SavingIdea, idea_id)
            if idea is None:
                return None
            for field, value in changes.items():
                setattr(idea, field, value)
            await session.commit()
            await session.refresh(idea)
            return idea

        idea = await self.db.run(_run)
        if idea is None:
            raise ResourceNotFoundError(NOT_FOUND_MESSAGE)
        logger.info("saving_idea_updated", idea_id=str(idea.id), fields=sorted(changes))
        return idea

    async def delete_idea(self, raw_id: Optional[str]) -> None:
        idea_id = parse_idea_id(raw_id)

        async def _run(session: AsyncSession) -> bool:
            idea = await session.get(SavingIdea, idea_id)
            if idea is None:
                return False
            await session.delete(idea)
            await session.commit()
            return True

        if not await self.db.run(_run):
            raise ResourceNotFoundError(NOT_FOUND_MESSAGE)
        logger.info("saving_idea_deleted", idea_id=str(idea_id))
