"""
Savings Pipeline API

GET    /savings?status=PROPOSED
POST   /savings
PUT    /savings            body: {id, ...fields}
DELETE /savings?id=<id>
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status
import structlog

from app.modules.savings.domain.service import SavingsService, parse_status_filter
from app.schemas.savings import SavingIdeaCreate, SavingIdeaResponse, SavingIdeaUpdate
from app.shared.core.auth import CurrentUser, get_current_user, requires_editor
from app.shared.core.logging import audit_log
from app.shared.db.session import Database, get_database

router = APIRouter(tags=["Savings"])
logger = structlog.get_logger()


def get_savings_service(db: Database = Depends(get_database)) -> SavingsService:
    return SavingsService(db)


@router.get("/savings", response_model=List[SavingIdeaResponse])
async def list_saving_ideas(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[SavingsService, Depends(get_savings_service)],
    status_filter: Optional[str] = Query(None, alias="status"),
):
    """Newest first. An unrecognized status returns every idea."""
    return await service.list_ideas(parse_status_filter(status_filter))


@router.post("/savings", response_model=SavingIdeaResponse, status_code=status.HTTP_201_CREATED)
async def create_saving_idea(
    payload: SavingIdeaCreate,
    user: Annotated[CurrentUser, Depends(requires_editor)],
    service: Annotated[SavingsService, Depends(get_savings_service)],
):
    idea = await service.create_idea(payload)
    audit_log("saving_idea_created", str(user.id), {"idea_id": str(idea.id)})
    return idea


@router.put("/savings", response_model=SavingIdeaResponse)
async def update_saving_idea(
    payload: SavingIdeaUpdate,
    user: Annotated[CurrentUser, Depends(requires_editor)],
    service: Annotated[SavingsService, Depends(get_savings_service)],
):
    idea = await service.update_idea(payload)
    audit_log("saving_idea_updated", str(user.id), {"idea_id": str(idea.id)})
    return idea


@router.delete("/savings")
async def delete_saving_idea(
    user: Annotated[CurrentUser, Depends(requires_editor)],
    service: Annotated[SavingsService, Depends(get_savings_service)],
    idea_id: Optional[str] = Query(None, alias="id"),
):
    await service.delete_idea(idea_id)
    audit_log("saving_idea_deleted", str(user.id), {"idea_id": idea_id})
    return {"message": "Deleted successfully"}
