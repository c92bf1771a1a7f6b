from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from app.models.savings import SavingStatus


class SavingIdeaCreate(BaseModel):
    # Required fields are checked by the service so the caller gets a 400, not a 422
    title: Optional[str] = None
    service: Optional[str] = None
    owner: Optional[str] = None
    est_monthly_saving_usd: Decimal = Decimal("0")
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    status: SavingStatus = SavingStatus.PROPOSED
    notes: Optional[str] = None


class SavingIdeaUpdate(BaseModel):
    id: Optional[str] = None
    title: Optional[str] = None
    service: Optional[str] = None
    owner: Optional[str] = None
    est_monthly_saving_usd: Optional[Decimal] = None
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    status: Optional[SavingStatus] = None
    notes: Optional[str] = None


class SavingIdeaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    service: str
    est_monthly_saving_usd: float
    confidence: float
    owner: str
    status: SavingStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class PRNoteRequest(BaseModel):
    id: Optional[str] = None


class PRNoteResponse(BaseModel):
    markdown: str
