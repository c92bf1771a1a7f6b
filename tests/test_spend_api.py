import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch
from httpx import AsyncClient

from app.models.user import UserRole


def _today():
    return datetime.now(timezone.utc).date()


@pytest.fixture
async def recent_spend(ingest):
    today = _today()
    yesterday = today - timedelta(days=1)
    old = today - timedelta(days=60)
    await ingest(
        "date,service,team,env,cost_usd\n"
        f"{today},EC2,platform,prod,10\n"
        f"{yesterday},S3,data,dev,4\n"
        f"{old},RDS,legacy,qa,99\n",
        "aws_billing.csv",
    )


@pytest.mark.asyncio
class TestSpendEndpoint:
    async def test_requires_session(self, ac: AsyncClient):
        response = await ac.get("/api/spend")
        assert response.status_code == 401

    async def test_viewer_sees_dashboard(self, ac: AsyncClient, auth_headers, recent_spend):
        headers = await auth_headers(UserRole.VIEWER)
        response = await ac.get("/api/spend?range=7", headers=headers)

        assert response.status_code == 200
        data = response.json()
        assert {"daily", "topServices", "availableTeams", "availableEnvs"} <= set(data)
        assert data["daily"][0].keys() == {"date", "totalCost"}
        assert [d["totalCost"] for d in data["daily"]] == [4.0, 10.0]
        assert [s["service"] for s in data["topServices"]] == ["EC2", "S3"]
        assert data["availableTeams"] == ["data", "platform"]
        assert data["availableEnvs"] == ["dev", "prod"]

    async def test_default_range_is_30_days(self, ac: AsyncClient, auth_headers, recent_spend):
        headers = await auth_headers(UserRole.VIEWER)
        data = (await ac.get("/api/spend", headers=headers)).json()

        assert data["endDate"] == _today().isoformat()
        assert data["startDate"] == (_today() - timedelta(days=30)).isoformat()
        assert "RDS" not in [s["service"] for s in data["topServices"]]

    async def test_ninety_day_range_includes_older_spend(self, ac: AsyncClient, auth_headers, recent_spend):
        headers = await auth_headers(UserRole.VIEWER)
        data = (await ac.get("/api/spend?range=90", headers=headers)).json()

        assert data["topServices"][0] == {"service": "RDS", "totalCost": 99.0}

    async def test_filters_and_empty_filter_values(self, ac: AsyncClient, auth_headers, recent_spend):
        headers = await auth_headers(UserRole.VIEWER)

        filtered = (await ac.get("/api/spend?range=7&team=data", headers=headers)).json()
        assert [s["service"] for s in filtered["topServices"]] == ["S3"]
        # Filter options are not narrowed by the filters
        assert filtered["availableTeams"] == ["data", "platform"]

        blank = (await ac.get("/api/spend?range=7&cloud=&team=&env=", headers=headers)).json()
        assert len(blank["topServices"]) == 2

    async def test_unsupported_range(self, ac: AsyncClient, auth_headers):
        headers = await auth_headers(UserRole.VIEWER)
        response = await ac.get("/api/spend?range=14", headers=headers)

        assert response.status_code == 400
        assert response.json() == {"error": "range must be one of 7, 30, 90"}

    async def test_failure_is_opaque_500(self, ac: AsyncClient, auth_headers):
        headers = await auth_headers(UserRole.VIEWER)
        with patch(
            "app.modules.reporting.domain.aggregator.SpendAggregator.get_dashboard",
            new_callable=AsyncMock,
            side_effect=RuntimeError("db gone"),
        ):
            response = await ac.get("/api/spend", headers=headers)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to load dashboard data"}
