import asyncio
import structlog
from typing import Dict, Any

from app.shared.core.config import get_settings
from app.shared.core.exceptions import PersistenceError
from app.shared.db.session import Database

logger = structlog.get_logger()


class HealthService:
    def __init__(self, db: Database):
        self.db = db

    async def check_all(self) -> Dict[str, Any]:
        """Liveness plus database reachability."""
        settings = get_settings()
        db_ok, db_details = await self.check_database()

        return {
            "status": "healthy" if db_ok else "unhealthy",
            "app": settings.APP_NAME,
            "version": settings.VERSION,
            "database": {"status": "up" if db_ok else "down", **db_details},
        }

    async def check_database(self) -> tuple[bool, Dict[str, Any]]:
        """Runs SELECT 1 through the retrying executor."""
        try:
            loop = asyncio.get_running_loop()
            start_time = loop.time()
            await self.db.ping()
            latency = (loop.time() - start_time) * 1000
            return True, {"latency_ms": round(latency, 2)}
        except PersistenceError as e:
            logger.error("health_check_db_failed", error=e.message, code=e.code)
            return False, {"error": e.code}
