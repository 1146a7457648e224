"""
Repositories for profiles, contracts and jobs.

Engines talk to the store only through these classes. Methods ending in
``_for_update`` take row locks (``SELECT ... FOR UPDATE``) that are held
until the surrounding transaction ends, and always refresh already-loaded
objects so decisions are made on the locked values.
"""
from collections.abc import Iterable, Sequence
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import false, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from database.models import Contract, ContractStatus, Job, Profile

CENTS = Decimal("0.01")


def _locking(stmt: Select) -> Select:
    return stmt.with_for_update().execution_options(populate_existing=True)


def _unpaid():
    return or_(Job.paid.is_(None), Job.paid == false())


class ProfileRepository:
    """Typed access to the ``profiles`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, profile_id: int) -> Optional[Profile]:
        return await self.session.get(Profile, profile_id)

    async def get_for_update(self, profile_id: int) -> Optional[Profile]:
        stmt = _locking(select(Profile).where(Profile.id == profile_id))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def lock_many(self, profile_ids: Iterable[int]) -> Dict[int, Profile]:
        """
        Lock several profiles in one statement, in ascending id order.

        Returns the locked rows keyed by id; missing ids are absent.
        """
        ids = sorted(set(profile_ids))
        stmt = _locking(select(Profile).where(Profile.id.in_(ids)).order_by(Profile.id))
        result = await self.session.execute(stmt)
        return {profile.id: profile for profile in result.scalars().all()}

    async def list_by_ids(self, profile_ids: Iterable[int]) -> List[Profile]:
        ids = list(set(profile_ids))
        if not ids:
            return []
        result = await self.session.execute(select(Profile).where(Profile.id.in_(ids)))
        return list(result.scalars().all())


class ContractRepository:
    """Typed access to the ``contracts`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get(self, contract_id: int) -> Optional[Contract]:
        return await self.session.get(Contract, contract_id)

    async def get_for_party(self, contract_id: int, profile_id: int) -> Optional[Contract]:
        """Fetch a contract only if ``profile_id`` is its client or contractor."""
        stmt = select(Contract).where(
            Contract.id == contract_id,
            or_(Contract.client_id == profile_id, Contract.contractor_id == profile_id),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_active_for_profile(self, profile_id: int) -> List[Contract]:
        stmt = (
            select(Contract)
            .where(
                Contract.status != ContractStatus.TERMINATED.value,
                or_(Contract.client_id == profile_id, Contract.contractor_id == profile_id),
            )
            .order_by(Contract.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def active_ids_for_profile(self, profile_id: int) -> List[int]:
        stmt = select(Contract.id).where(
            Contract.status != ContractStatus.TERMINATED.value,
            or_(Contract.client_id == profile_id, Contract.contractor_id == profile_id),
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def ids_for_client(self, client_id: int) -> List[int]:
        """Ids of every contract, in any status, where the profile is the client."""
        result = await self.session.execute(
            select(Contract.id).where(Contract.client_id == client_id)
        )
        return list(result.scalars().all())

    async def list_by_ids(self, contract_ids: Iterable[int]) -> List[Contract]:
        ids = list(set(contract_ids))
        if not ids:
            return []
        stmt = select(Contract).where(Contract.id.in_(ids)).order_by(Contract.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


class JobRepository:
    """Typed access to the ``jobs`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_for_update(self, job_id: int) -> Optional[Job]:
        stmt = _locking(select(Job).where(Job.id == job_id))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_unpaid_for_contracts(self, contract_ids: Sequence[int]) -> List[Job]:
        if not contract_ids:
            return []
        stmt = (
            select(Job)
            .where(Job.contract_id.in_(contract_ids), _unpaid())
            .order_by(Job.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def unpaid_prices_for_contracts(self, contract_ids: Sequence[int]) -> List[Decimal]:
        if not contract_ids:
            return []
        stmt = select(Job.price).where(Job.contract_id.in_(contract_ids), _unpaid())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def paid_totals_by_contract(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Dict[int, Decimal]:
        """
        Sum the price of paid jobs per contract.

        Only jobs whose payment date falls within ``[start, end]`` count;
        either bound may be omitted.
        """
        stmt = select(Job.contract_id, func.sum(Job.price)).where(Job.paid.is_(True))
        if start is not None:
            stmt = stmt.where(Job.payment_date >= start)
        if end is not None:
            stmt = stmt.where(Job.payment_date <= end)
        stmt = stmt.group_by(Job.contract_id).order_by(Job.contract_id)

        result = await self.session.execute(stmt)
        return {
            contract_id: Decimal(str(total)).quantize(CENTS)
            for contract_id, total in result.all()
        }
