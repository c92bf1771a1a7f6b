from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.models.user import User, UserRole
from app.shared.core.config import get_settings
from app.shared.core.exceptions import AuthError, PermissionDeniedError
from app.shared.core.security import decode_session_token
from app.shared.db.session import Database, get_database

logger = structlog.get_logger()


class CurrentUser(BaseModel):
    """The authenticated caller, resolved from the session cookie."""
    id: UUID
    email: str
    name: Optional[str] = None
    role: UserRole


async def get_current_user(
    request: Request,
    db: Database = Depends(get_database),
) -> CurrentUser:
    """
    Session cookie -> user id -> users row. Any failure is a plain 401.
    """
    settings = get_settings()
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        raise AuthError()

    user_id = decode_session_token(token)
    if not user_id:
        raise AuthError()

    try:
        uid = UUID(user_id)
    except ValueError:
        raise AuthError()

    async def _load(session: AsyncSession) -> Optional[User]:
        result = await session.execute(select(User).where(User.id == uid))
        return result.scalar_one_or_none()

    user = await db.run(_load)
    if user is None:
        logger.warning("session_user_missing", user_id=user_id)
        raise AuthError()

    structlog.contextvars.bind_contextvars(user_id=str(user.id))
    return CurrentUser(id=user.id, email=user.email, name=user.name, role=user.role)


def requires_roles(*allowed: UserRole):
    """
    FastAPI dependency for RBAC.

    Usage:
        @router.post("/upload")
        async def upload(user: CurrentUser = Depends(requires_roles(UserRole.ADMIN, UserRole.ANALYST))):
            ...
    """
    def role_checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.role not in allowed:
            logger.warning(
                "insufficient_permissions",
                user_id=str(user.id),
                user_role=user.role.value,
                allowed_roles=[r.value for r in allowed],
            )
            raise PermissionDeniedError()
        return user

    return role_checker


# Upload and savings mutations
requires_editor = requires_roles(UserRole.ADMIN, UserRole.ANALYST)
