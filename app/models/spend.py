import uuid
import datetime as dt
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Numeric, Date, Index, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from app.shared.db.base import Base


class CloudProvider(str, Enum):
    AWS = "aws"
    GCP = "gcp"


class SpendRecord(Base):
    """One normalized billing line. Written once by ingestion, never updated."""
    __tablename__ = "spend_records"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    cloud: Mapped[str] = mapped_column(String(8), nullable=False)  # 'aws', 'gcp'
    account_or_project: Mapped[str] = mapped_column(String, nullable=False)
    service: Mapped[str] = mapped_column(String, nullable=False)
    team: Mapped[str | None] = mapped_column(String, nullable=True)
    env: Mapped[str | None] = mapped_column(String, nullable=True)

    # DECIMAL for money
    cost_usd: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False)

    # Fingerprint of the raw CSV values; the only cross-upload dedup mechanism
    dedupe_key: Mapped[str] = mapped_column(String, nullable=False, unique=True)

    __table_args__ = (
        Index("ix_spend_records_date", "date"),
        Index("ix_spend_records_cloud_date", "cloud", "date"),
        Index("ix_spend_records_service_date", "service", "date"),
        Index("ix_spend_records_team_date", "team", "date"),
        Index("ix_spend_records_env_date", "env", "date"),
    )
