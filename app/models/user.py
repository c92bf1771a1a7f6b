import uuid
from enum import Enum
from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column
from app.shared.db.base import Base


class UserRole(str, Enum):
    """RBAC Role Definitions."""
    ADMIN = "ADMIN"
    ANALYST = "ANALYST"
    VIEWER = "VIEWER"


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    role: Mapped[str] = mapped_column(String(16), default=UserRole.VIEWER.value, nullable=False)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
