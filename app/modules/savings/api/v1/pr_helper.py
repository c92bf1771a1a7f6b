from typing import Annotated

from fastapi import APIRouter, Depends

from app.modules.savings.api.v1.savings import get_savings_service
from app.modules.savings.domain.pr_note import render_pr_note
from app.modules.savings.domain.service import SavingsService, parse_idea_id
from app.schemas.savings import PRNoteRequest, PRNoteResponse
from app.shared.core.auth import CurrentUser, get_current_user

router = APIRouter(tags=["Savings"])


@router.post("/pr-helper", response_model=PRNoteResponse)
async def generate_pr_note(
    payload: PRNoteRequest,
    user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[SavingsService, Depends(get_savings_service)],
):
    """Markdown PR note for one saving idea, ready to paste."""
    idea = await service.get_idea(parse_idea_id(payload.id))
    return PRNoteResponse(markdown=render_pr_note(idea))
