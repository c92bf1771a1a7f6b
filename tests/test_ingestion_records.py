import pytest
from datetime import date
from decimal import Decimal

from app.models.spend import CloudProvider
from app.modules.ingestion.domain.normalizer import RawBillingRow
from app.modules.ingestion.domain.records import (
    DEFAULT_ACCOUNT,
    DEFAULT_ENV,
    DEFAULT_TEAM,
    build_record,
    parse_cost,
    parse_usage_date,
)
from app.shared.core.exceptions import MalformedRowError


@pytest.mark.parametrize("raw, expected", [
    ("2024-01-01", date(2024, 1, 1)),
    (" 2024-01-01 ", date(2024, 1, 1)),
    ("2024-01-01T05:00:00Z", date(2024, 1, 1)),
    ("2024-01-01 05:00:00 UTC", date(2024, 1, 1)),
    ("2024-01-01T23:30:00-02:00", date(2024, 1, 2)),
    ("2024-01-01T10:00:00", date(2024, 1, 1)),
])
def test_parse_usage_date(raw, expected):
    assert parse_usage_date(raw) == expected


def test_parse_usage_date_rejects_garbage():
    with pytest.raises(ValueError):
        parse_usage_date("yesterday")


def test_parse_cost():
    assert parse_cost("100.50") == Decimal("100.50")
    assert parse_cost(" 0 ") == Decimal("0")


@pytest.mark.parametrize("raw", ["-1", "NaN", "Infinity"])
def test_parse_cost_rejects_negative_and_non_finite(raw):
    with pytest.raises(ValueError):
        parse_cost(raw)


def test_build_record_applies_defaults():
    raw = RawBillingRow(date="2024-01-01", account_or_project=None, service="EC2", team=None, env=None, cost="100.50")
    record = build_record(raw, CloudProvider.AWS, "key", row_number=1)

    assert record.date == date(2024, 1, 1)
    assert record.cloud == CloudProvider.AWS
    assert record.account_or_project == DEFAULT_ACCOUNT == "unknown"
    assert record.team == DEFAULT_TEAM == "unassigned"
    assert record.env == DEFAULT_ENV == "prod"
    assert record.cost_usd == Decimal("100.50")
    assert record.to_row()["cloud"] == "aws"


def test_build_record_keeps_supplied_values():
    raw = RawBillingRow(date="2024-01-01", account_or_project="proj-1", service="BigQuery", team="data", env="dev", cost="2")
    record = build_record(raw, CloudProvider.GCP, "key", row_number=1)
    assert (record.account_or_project, record.team, record.env) == ("proj-1", "data", "dev")


def test_build_record_malformed_date_names_row_and_field():
    raw = RawBillingRow(date="not-a-date", account_or_project=None, service="EC2", team=None, env=None, cost="1")
    with pytest.raises(MalformedRowError) as exc:
        build_record(raw, CloudProvider.AWS, "key", row_number=7)

    assert exc.value.status_code == 400
    assert exc.value.message == "Row 7: invalid date value 'not-a-date'"
    assert exc.value.details == {"row": 7, "field": "date"}


def test_build_record_malformed_cost():
    raw = RawBillingRow(date="2024-01-01", account_or_project=None, service="EC2", team=None, env=None, cost="$12")
    with pytest.raises(MalformedRowError, match="invalid cost"):
        build_record(raw, CloudProvider.AWS, "key", row_number=2)
