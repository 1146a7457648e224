"""
Transaction scope for balance-changing operations.

Usage::

    async with UnitOfWork(session) as uow:
        job = await uow.jobs.get_for_update(job_id)
        ...

Leaving the block normally commits; any exception rolls the transaction
back (releasing every row lock taken inside it) and propagates.
"""
from types import TracebackType
from typing import Optional, Type

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from database.repositories import ContractRepository, JobRepository, ProfileRepository

logger = structlog.get_logger(__name__)


class UnitOfWork:
    """Acquire rows, mutate, then commit as one transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.profiles = ProfileRepository(session)
        self.contracts = ContractRepository(session)
        self.jobs = JobRepository(session)

    async def __aenter__(self) -> "UnitOfWork":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if exc_type is None:
            try:
                await self.session.commit()
            except Exception:
                await self.session.rollback()
                raise
            return

        await self.session.rollback()
        logger.debug(
            "unit_of_work_rolled_back",
            error_type=exc_type.__name__,
            error=str(exc),
        )

    async def flush(self) -> None:
        await self.session.flush()
