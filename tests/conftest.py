import os
# Configure the environment BEFORE any app imports (get_settings is cached)
os.environ["TESTING"] = "True"
os.environ["DEBUG"] = "False"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SESSION_SECRET_KEY"] = "test-session-secret-0123456789abcdef"

import uuid
import pytest
from typing import AsyncGenerator, Awaitable, Callable, Dict, Optional
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User, UserRole
from app.modules.ingestion.domain.pipeline import IngestionPipeline
from app.schemas.spend import IngestionSummary
from app.shared.core.config import get_settings
from app.shared.core.security import create_session_token
from app.shared.db.session import Database


@pytest.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """A fresh file-backed SQLite database per test. No retry back-off."""
    db = Database(
        f"sqlite+aiosqlite:///{tmp_path / 'spend_ledger_test.db'}",
        retry_base_delay=0,
    )
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
async def session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    async with database.session_maker() as s:
        yield s


@pytest.fixture
async def ac(database: Database) -> AsyncGenerator[AsyncClient, None]:
    """Async client bound to the test database (lifespan is not run by ASGITransport)."""
    from app.main import app
    app.state.db = database
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


async def create_user(
    database: Database,
    role: UserRole,
    email: Optional[str] = None,
    password_hash: str = "not-a-bcrypt-hash",
) -> User:
    email = email or f"{role.value.lower()}-{uuid.uuid4().hex[:8]}@kco.dev"

    async def _run(s: AsyncSession) -> User:
        user = User(email=email, name=role.value.title(), role=role.value, password_hash=password_hash)
        s.add(user)
        await s.commit()
        await s.refresh(user)
        return user

    return await database.run(_run)


def session_cookie_header(user_id) -> Dict[str, str]:
    return {"Cookie": f"{get_settings().SESSION_COOKIE_NAME}={create_session_token(str(user_id))}"}


@pytest.fixture
def auth_headers(database: Database) -> Callable[[UserRole], Awaitable[Dict[str, str]]]:
    """Factory: creates a user with the given role and returns a session cookie header."""
    async def _headers(role: UserRole) -> Dict[str, str]:
        user = await create_user(database, role)
        return session_cookie_header(user.id)
    return _headers


@pytest.fixture
def ingest(database: Database) -> Callable[..., Awaitable[IngestionSummary]]:
    """Factory: runs CSV text through the real pipeline."""
    async def _ingest(csv_text: str, filename: str = "aws_billing.csv") -> IngestionSummary:
        return await IngestionPipeline(database).ingest(csv_text.encode("utf-8"), filename)
    return _ingest


@pytest.fixture
def make_user(database: Database) -> Callable[..., Awaitable[User]]:
    async def _make(role: UserRole, **kwargs) -> User:
        return await create_user(database, role, **kwargs)
    return _make


@pytest.fixture
def session_header() -> Callable[..., Dict[str, str]]:
    return session_cookie_header
