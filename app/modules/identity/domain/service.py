from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.models.user import User, UserRole
from app.shared.core.security import hash_password, verify_password
from app.shared.db.session import Database

logger = structlog.get_logger()


class IdentityService:
    def __init__(self, db: Database):
        self.db = db

    async def authenticate(self, email: str, password: str) -> Optional[User]:
        """Returns the user on a matching email/password pair, else None."""
        normalized = email.strip().lower()

        async def _load(session: AsyncSession) -> Optional[User]:
            result = await session.execute(select(User).where(User.email == normalized))
            return result.scalar_one_or_none()

        user = await self.db.run(_load)
        if user is None or not verify_password(password, user.password_hash):
            logger.warning("login_rejected", reason="invalid_credentials")
            return None
        return user

    async def ensure_user(self, email: str, password: str, role: UserRole, name: Optional[str] = None) -> bool:
        """Create the user unless the email is already taken. Returns True if created."""
        normalized = email.strip().lower()

        async def _run(session: AsyncSession) -> bool:
            existing = await session.execute(select(User.id).where(User.email == normalized))
            if existing.scalar_one_or_none() is not None:
                return False
            session.add(User(
                email=normalized,
                name=name,
                role=role.value,
                password_hash=hash_password(password),
            ))
            await session.commit()
            return True

        created = await self.db.run(_run)
        logger.info("user_seeded" if created else "user_exists", role=role.value)
        return created
