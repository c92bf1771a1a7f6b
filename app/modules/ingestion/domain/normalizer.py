"""
Column Normalizer

AWS Cost & Usage exports and GCP billing exports name the same concepts
differently. Every row is tried against both vocabularies, regardless of
which cloud the file was attributed to.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple

from app.models.spend import CloudProvider

# Canonical field -> accepted source columns, highest priority first
COLUMN_ALIASES: Dict[str, Tuple[str, ...]] = {
    "date": ("date", "usage_start_time", "usage_date"),
    "account_or_project": ("account_id", "project_id", "billing_account_id"),
    "service": ("service", "service_description", "sku_description"),
    "team": ("team", "owner", "department"),
    "env": ("env", "environment", "stage"),
    "cost": ("cost_usd", "cost", "cost_amount"),
}


@dataclass(frozen=True)
class RawBillingRow:
    """The six canonical values exactly as found in the CSV (None when absent or empty)."""
    date: Optional[str]
    account_or_project: Optional[str]
    service: Optional[str]
    team: Optional[str]
    env: Optional[str]
    cost: Optional[str]


def _first_present(row: Mapping[str, Optional[str]], candidates: Tuple[str, ...]) -> Optional[str]:
    for column in candidates:
        value = row.get(column)
        if value:
            return value
    return None


def normalize_row(row: Mapping[str, Optional[str]]) -> RawBillingRow:
    """Resolve each canonical field to the first non-empty aliased column."""
    return RawBillingRow(**{
        field: _first_present(row, candidates)
        for field, candidates in COLUMN_ALIASES.items()
    })


def infer_cloud(filename: Optional[str]) -> CloudProvider:
    """
    Attribute a whole file to one provider from its name.
    'gcp' anywhere (any case) wins; everything else is AWS.
    """
    name = (filename or "").lower()
    if "gcp" in name:
        return CloudProvider.GCP
    return CloudProvider.AWS
