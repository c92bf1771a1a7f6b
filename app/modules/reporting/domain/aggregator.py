import asyncio
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.models.spend import SpendRecord
from app.schemas.spend import (
    ALLOWED_RANGES,
    DailySpend,
    ServiceSpend,
    SpendDashboard,
    SpendQuery,
)
from app.shared.core.exceptions import InputError
from app.shared.db.session import Database

logger = structlog.get_logger()

TOP_SERVICES_LIMIT = 5


def resolve_window(range_days: int, today: Optional[date] = None) -> Tuple[date, date]:
    """Inclusive [today - range_days, today] window."""
    if range_days not in ALLOWED_RANGES:
        raise InputError(
            f"range must be one of {', '.join(str(r) for r in ALLOWED_RANGES)}",
            code="invalid_range",
        )
    end_date = today or datetime.now(timezone.utc).date()
    return end_date - timedelta(days=range_days), end_date


class SpendAggregator:
    """
    Read-only dashboard queries over spend_records.

    Each query runs in its own session so the four dashboard reads can be
    issued concurrently.
    """

    def __init__(self, db: Database):
        self.db = db

    @staticmethod
    def _window_clause(start_date: date, end_date: date):
        return (SpendRecord.date >= start_date, SpendRecord.date <= end_date)

    @classmethod
    def _filter_clause(cls, query: SpendQuery, start_date: date, end_date: date):
        clauses = list(cls._window_clause(start_date, end_date))
        if query.cloud:
            clauses.append(SpendRecord.cloud == query.cloud.lower())
        if query.team:
            clauses.append(SpendRecord.team == query.team)
        if query.env:
            clauses.append(SpendRecord.env == query.env)
        return clauses

    async def daily_series(self, query: SpendQuery, start_date: date, end_date: date) -> List[DailySpend]:
        """Sum per calendar day, ascending. Days without spend are absent, not zero."""
        stmt = (
            select(SpendRecord.date, func.sum(SpendRecord.cost_usd).label("total_cost"))
            .where(*self._filter_clause(query, start_date, end_date))
            .group_by(SpendRecord.date)
            .order_by(SpendRecord.date.asc())
        )

        async def _run(session: AsyncSession):
            return (await session.execute(stmt)).all()

        rows = await self.db.run(_run)
        return [
            DailySpend(date=row.date, total_cost=float(row.total_cost or Decimal(0)))
            for row in rows
        ]

    async def top_services(self, query: SpendQuery, start_date: date, end_date: date) -> List[ServiceSpend]:
        """Highest-spend services, at most five. Order among equal sums is unspecified."""
        total = func.sum(SpendRecord.cost_usd).label("total_cost")
        stmt = (
            select(SpendRecord.service, total)
            .where(*self._filter_clause(query, start_date, end_date))
            .group_by(SpendRecord.service)
            .order_by(total.desc())
            .limit(TOP_SERVICES_LIMIT)
        )

        async def _run(session: AsyncSession):
            return (await session.execute(stmt)).all()

        rows = await self.db.run(_run)
        return [
            ServiceSpend(service=row.service, total_cost=float(row.total_cost or Decimal(0)))
            for row in rows
        ]

    async def distinct_values(self, column, start_date: date, end_date: date) -> List[str]:
        """
        Distinct non-empty values of a dimension within the window only.
        Cloud/team/env filters are not applied.
        """
        stmt = (
            select(column)
            .where(*self._window_clause(start_date, end_date))
            .where(column.is_not(None), column != "")
            .distinct()
        )

        async def _run(session: AsyncSession):
            return (await session.execute(stmt)).scalars().all()

        values = await self.db.run(_run)
        return sorted(values)

    async def get_dashboard(self, query: SpendQuery, today: Optional[date] = None) -> SpendDashboard:
        start_date, end_date = resolve_window(query.range_days, today)

        daily, top_services, teams, envs = await asyncio.gather(
            self.daily_series(query, start_date, end_date),
            self.top_services(query, start_date, end_date),
            self.distinct_values(SpendRecord.team, start_date, end_date),
            self.distinct_values(SpendRecord.env, start_date, end_date),
        )

        logger.info("spend_dashboard_built",
                    range_days=query.range_days,
                    cloud=query.cloud,
                    team=query.team,
                    env=query.env,
                    days=len(daily),
                    services=len(top_services))

        return SpendDashboard(
            start_date=start_date,
            end_date=end_date,
            daily=daily,
            top_services=top_services,
            available_teams=teams,
            available_envs=envs,
        )
