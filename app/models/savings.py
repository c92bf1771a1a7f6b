import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from sqlalchemy import String, Numeric, Float, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP
from app.shared.db.base import Base, utcnow


class SavingStatus(str, Enum):
    """Workflow states. Any state may be set to any other via update."""
    PROPOSED = "PROPOSED"
    APPROVED = "APPROVED"
    REALIZED = "REALIZED"


class SavingIdea(Base):
    __tablename__ = "saving_ideas"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String, nullable=False)
    service: Mapped[str] = mapped_column(String, nullable=False)
    est_monthly_saving_usd: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)  # 0..1
    owner: Mapped[str] = mapped_column(String, nullable=False)
    status: Mapped[str] = mapped_column(String(16), default=SavingStatus.PROPOSED.value, nullable=False, index=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        default=utcnow,
        onupdate=utcnow
    )
