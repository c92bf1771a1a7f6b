from typing import Optional
from pydantic import BaseModel

from app.models.user import UserRole


class LoginRequest(BaseModel):
    # Presence is checked by the handler so the caller gets a 400, not a 422
    email: Optional[str] = None
    password: Optional[str] = None


class UserProfile(BaseModel):
    email: str
    role: UserRole
    name: Optional[str] = None


class SessionResponse(BaseModel):
    user: UserProfile
