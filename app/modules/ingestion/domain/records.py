"""
Canonical record construction: defaults for optional fields and type
coercion for the required ones.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, Dict

from app.models.spend import CloudProvider
from app.modules.ingestion.domain.normalizer import RawBillingRow
from app.shared.core.exceptions import MalformedRowError

DEFAULT_ACCOUNT = "unknown"
DEFAULT_TEAM = "unassigned"
DEFAULT_ENV = "prod"


@dataclass(frozen=True)
class CanonicalRecord:
    date: date
    cloud: CloudProvider
    account_or_project: str
    service: str
    team: str
    env: str
    cost_usd: Decimal
    dedupe_key: str

    def to_row(self) -> Dict[str, Any]:
        return {
            "date": self.date,
            "cloud": self.cloud.value,
            "account_or_project": self.account_or_project,
            "service": self.service,
            "team": self.team,
            "env": self.env,
            "cost_usd": self.cost_usd,
            "dedupe_key": self.dedupe_key,
        }


def parse_usage_date(raw: str) -> date:
    """
    Accepts '2024-01-01', '2024-01-01T05:00:00Z', '2024-01-01 05:00:00+02:00'
    and GCP's '2024-01-01 05:00:00 UTC'. Aware timestamps are moved to UTC
    before the calendar date is taken.
    """
    value = raw.strip()
    if value.upper().endswith(" UTC"):
        value = value[:-4] + "+00:00"
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return date.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc)
    return parsed.date()


def parse_cost(raw: str) -> Decimal:
    amount = Decimal(raw.strip())
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"cost must be a non-negative number, got {raw!r}")
    return amount


def build_record(raw: RawBillingRow, cloud: CloudProvider, dedupe_key: str, row_number: int) -> CanonicalRecord:
    """Raises MalformedRowError when a present date or cost cannot be coerced."""
    try:
        usage_date = parse_usage_date(raw.date)
    except ValueError:
        raise MalformedRowError(row_number, "date", raw.date)
    try:
        cost = parse_cost(raw.cost)
    except (InvalidOperation, ValueError):
        raise MalformedRowError(row_number, "cost", raw.cost)

    return CanonicalRecord(
        date=usage_date,
        cloud=cloud,
        account_or_project=raw.account_or_project or DEFAULT_ACCOUNT,
        service=raw.service,
        team=raw.team or DEFAULT_TEAM,
        env=raw.env or DEFAULT_ENV,
        cost_usd=cost,
        dedupe_key=dedupe_key,
    )
