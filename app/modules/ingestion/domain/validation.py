from app.modules.ingestion.domain.normalizer import RawBillingRow

# Presence only. Parseability is checked later, when the row is coerced.
# A whitespace-only value counts as absent.
REQUIRED_FIELDS = ("date", "service", "cost")


def is_admissible(row: RawBillingRow) -> bool:
    return all((getattr(row, field) or "").strip() for field in REQUIRED_FIELDS)
