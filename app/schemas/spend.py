"""
Spend Schemas - Ingestion results and dashboard aggregates
"""

from datetime import date
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ALLOWED_RANGES = (7, 30, 90)
DEFAULT_RANGE_DAYS = 30


class SkipBreakdown(BaseModel):
    """Why rows never became new records. Sums to `skipped`."""
    invalid: int = 0
    duplicate_in_file: int = 0
    already_persisted: int = 0


class IngestionSummary(BaseModel):
    cloud: str
    total_rows: int
    inserted: int
    skipped: int = Field(..., description="total_rows - inserted; all skip reasons folded together")
    breakdown: SkipBreakdown = Field(default_factory=SkipBreakdown)


class UploadResponse(BaseModel):
    message: str
    cloud: str
    inserted: int
    skipped: int


class SpendQuery(BaseModel):
    """Dashboard filter set. Empty strings are normalized to 'no filter'."""
    range_days: int = DEFAULT_RANGE_DAYS
    cloud: Optional[str] = None
    team: Optional[str] = None
    env: Optional[str] = None


class DashboardModel(BaseModel):
    """Dashboard payloads are camelCase on the wire (totalCost, topServices, ...)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DailySpend(DashboardModel):
    date: date
    total_cost: float


class ServiceSpend(DashboardModel):
    service: str
    total_cost: float


class SpendDashboard(DashboardModel):
    start_date: date
    end_date: date
    daily: List[DailySpend]
    top_services: List[ServiceSpend]
    available_teams: List[str]
    available_envs: List[str]
