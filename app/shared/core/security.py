from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
import structlog

from app.shared.core.config import get_settings

logger = structlog.get_logger()

SESSION_ALGORITHM = "HS256"


def hash_password(plaintext: str) -> str:
    """Hash a plaintext password with bcrypt."""
    return bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plaintext: str, hashed: str) -> bool:
    """Verify a plaintext password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_session_token(user_id: str) -> str:
    """Signed session token carried in the session cookie."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + timedelta(seconds=settings.SESSION_MAX_AGE_SECONDS),
    }
    return jwt.encode(payload, settings.SESSION_SECRET_KEY, algorithm=SESSION_ALGORITHM)


def decode_session_token(token: str) -> Optional[str]:
    """Returns the user id, or None for expired / tampered / malformed tokens."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.SESSION_SECRET_KEY, algorithms=[SESSION_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info("session_expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning("session_invalid", error=str(e))
        return None
    return payload.get("sub")
