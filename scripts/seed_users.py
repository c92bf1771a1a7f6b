import asyncio
import sys
import os

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from app.models.user import UserRole
from app.modules.identity.domain.service import IdentityService
from app.shared.core.config import get_settings
from app.shared.core.logging import setup_logging
from app.shared.db.session import Database

DEFAULT_PASSWORD = "Passw0rd!"

SEED_USERS = [
    ("admin@kco.dev", UserRole.ADMIN, "Admin"),
    ("analyst@kco.dev", UserRole.ANALYST, "Analyst"),
    ("viewer@kco.dev", UserRole.VIEWER, "Viewer"),
]


async def seed_users():
    """Create one user per role. Existing emails are left untouched."""
    setup_logging()
    db = Database.from_settings(get_settings())
    try:
        await db.create_all()
        service = IdentityService(db)
        for email, role, name in SEED_USERS:
            created = await service.ensure_user(email, DEFAULT_PASSWORD, role, name=name)
            print(f"  {'+' if created else '~'} {email} ({role.value})")
        print("Seeded users successfully")
    finally:
        await db.dispose()


if __name__ == "__main__":
    asyncio.run(seed_users())
