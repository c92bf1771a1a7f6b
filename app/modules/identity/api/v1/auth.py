"""
Session Auth API

POST /auth/login   {email, password} -> sets the HttpOnly session cookie
POST /auth/logout  clears it
GET  /auth/me      the caller's profile
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response
import structlog

from app.modules.identity.domain.service import IdentityService
from app.schemas.auth import LoginRequest, SessionResponse, UserProfile
from app.shared.core.auth import CurrentUser, get_current_user
from app.shared.core.config import get_settings
from app.shared.core.exceptions import AuthError, InputError
from app.shared.core.logging import audit_log
from app.shared.core.security import create_session_token
from app.shared.db.session import Database, get_database

router = APIRouter(prefix="/auth", tags=["Auth"])
logger = structlog.get_logger()


def get_identity_service(db: Database = Depends(get_database)) -> IdentityService:
    return IdentityService(db)


@router.post("/login", response_model=SessionResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    service: Annotated[IdentityService, Depends(get_identity_service)],
):
    if not payload.email or not payload.password:
        raise InputError("Email and password required", code="missing_credentials")

    user = await service.authenticate(payload.email, payload.password)
    if user is None:
        raise AuthError("Invalid credentials", code="invalid_credentials")

    settings = get_settings()
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=create_session_token(str(user.id)),
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )
    audit_log("login", str(user.id))
    return SessionResponse(user=UserProfile(email=user.email, role=user.role, name=user.name))


@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(get_settings().SESSION_COOKIE_NAME)
    return {"message": "Logged out"}


@router.get("/me", response_model=SessionResponse)
async def me(user: Annotated[CurrentUser, Depends(get_current_user)]):
    return SessionResponse(user=UserProfile(email=user.email, role=user.role, name=user.name))
