"""
Spend Dashboard API

Endpoint: GET /spend?range=30&cloud=aws&team=platform&env=prod
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query
import structlog

from app.modules.reporting.domain.aggregator import SpendAggregator
from app.schemas.spend import DEFAULT_RANGE_DAYS, SpendDashboard, SpendQuery
from app.shared.core.auth import CurrentUser, get_current_user
from app.shared.core.exceptions import InputError, SpendLedgerException
from app.shared.db.session import Database, get_database

router = APIRouter(tags=["Spend"])
logger = structlog.get_logger()


def get_aggregator(db: Database = Depends(get_database)) -> SpendAggregator:
    return SpendAggregator(db)


@router.get("/spend", response_model=SpendDashboard)
async def get_spend_dashboard(
    user: Annotated[CurrentUser, Depends(get_current_user)],
    aggregator: Annotated[SpendAggregator, Depends(get_aggregator)],
    range_days: int = Query(DEFAULT_RANGE_DAYS, alias="range"),
    cloud: Optional[str] = Query(None),
    team: Optional[str] = Query(None),
    env: Optional[str] = Query(None),
):
    """
    Daily spend, top five services and the team/env filter options for the
    selected window. Filters narrow the daily and service figures only.
    """
    query = SpendQuery(
        range_days=range_days,
        cloud=cloud or None,
        team=team or None,
        env=env or None,
    )

    try:
        return await aggregator.get_dashboard(query)
    except InputError:
        raise
    except Exception as e:
        logger.error("spend_dashboard_failed", error=str(e), exc_info=True)
        raise SpendLedgerException("Failed to load dashboard data", code="dashboard_failed") from e
