"""
Readiness and liveness checks.

Ready means the database answers and every table the API reads is in
place. Live only means the process is serving requests.
"""
import time
from typing import Any, Dict

import structlog
from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from database.models import Contract, Job, Profile

logger = structlog.get_logger(__name__)

REQUIRED_TABLES = (Profile, Contract, Job)


class HealthCheckError(Exception):
    """Raised when health check fails."""

    pass


class HealthCheck:
    """Database-backed health checks, run on the request's session."""

    async def check_database(self, db: AsyncSession) -> Dict[str, Any]:
        """
        Ping the database and confirm the schema exists.

        Returns:
            Dict[str, Any]: Backend name, round-trip latency and the tables checked

        Raises:
            HealthCheckError: If the database is unreachable or a table is missing
        """
        started = time.perf_counter()
        try:
            await db.execute(text("SELECT 1"))
            for model in REQUIRED_TABLES:
                await db.execute(select(model.id).limit(1))
        except Exception as e:
            logger.error("database_health_check_failed", error=str(e))
            raise HealthCheckError(f"Database health check failed: {e}")
        finally:
            # release the read transaction (and the SQLite write lock)
            await db.rollback()

        return {
            "status": "healthy",
            "backend": db.get_bind().dialect.name,
            "latency_ms": round((time.perf_counter() - started) * 1000, 2),
            "tables": [model.__tablename__ for model in REQUIRED_TABLES],
        }

    async def check_all(self, db: AsyncSession) -> Dict[str, Any]:
        """Overall status; unhealthy as soon as one check fails."""
        try:
            database = await self.check_database(db)
        except HealthCheckError as e:
            database = {"status": "unhealthy", "error": str(e)}

        return {
            "status": database["status"],
            "checks": {"database": database},
        }

    async def liveness(self) -> Dict[str, Any]:
        return {
            "status": "alive",
            "message": "Application is running",
        }

    async def readiness(self, db: AsyncSession) -> Dict[str, Any]:
        return await self.check_all(db)
