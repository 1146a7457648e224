"""
Concurrent access tests.

Each task runs in its own session, as concurrent requests would.
"""
import asyncio
from decimal import Decimal

import pytest

from core.errors import InvalidOperation
from core.payment_engine import PaymentEngine
from database.models import Job, Profile, ProfileType


async def _pay_in_own_session(session_factory, job_id, requester):
    async with session_factory() as session:
        return await PaymentEngine().pay_job(job_id, requester, session)


async def _deposit_in_own_session(session_factory, requester, amount):
    async with session_factory() as session:
        return await PaymentEngine().deposit(requester.id, requester, amount, session)


class TestConcurrentPayments:
    """Concurrent attempts against the same job or balance."""

    @pytest.mark.race
    @pytest.mark.asyncio
    async def test_same_job_paid_once(self, session_factory, store) -> None:
        client = await store.profile(ProfileType.CLIENT, balance="1000")
        contractor = await store.profile(ProfileType.CONTRACTOR, balance="0")
        contract = await store.contract(client, contractor)
        job = await store.job(contract, price="200")

        results = await asyncio.gather(
            *[_pay_in_own_session(session_factory, job.id, client) for _ in range(5)],
            return_exceptions=True,
        )

        paid = [r for r in results if isinstance(r, Job)]
        rejected = [r for r in results if isinstance(r, InvalidOperation)]
        assert len(paid) == 1
        assert len(rejected) == 4
        assert all(r.reason == "job_already_paid" for r in rejected)

        assert (await store.get(Profile, client.id)).balance == Decimal("800")
        assert (await store.get(Profile, contractor.id)).balance == Decimal("200")

    @pytest.mark.race
    @pytest.mark.asyncio
    async def test_balance_never_goes_negative(self, session_factory, store) -> None:
        """Three 50 jobs against a balance of 100: exactly two are paid."""
        client = await store.profile(ProfileType.CLIENT, balance="100")
        contractor = await store.profile(ProfileType.CONTRACTOR, balance="0")
        contract = await store.contract(client, contractor)
        jobs = [await store.job(contract, price="50") for _ in range(3)]

        results = await asyncio.gather(
            *[_pay_in_own_session(session_factory, job.id, client) for job in jobs],
            return_exceptions=True,
        )

        paid = [r for r in results if isinstance(r, Job)]
        rejected = [r for r in results if isinstance(r, InvalidOperation)]
        assert len(paid) == 2
        assert [r.reason for r in rejected] == ["insufficient_funds"]

        assert (await store.get(Profile, client.id)).balance == Decimal("0")
        assert (await store.get(Profile, contractor.id)).balance == Decimal("100")

    @pytest.mark.race
    @pytest.mark.asyncio
    async def test_opposite_direction_payments(self, session_factory, store) -> None:
        """Two clients paying the same contractor at once both succeed."""
        first = await store.profile(ProfileType.CLIENT, balance="100")
        second = await store.profile(ProfileType.CLIENT, balance="100")
        contractor = await store.profile(ProfileType.CONTRACTOR, balance="0")
        first_job = await store.job(await store.contract(first, contractor), price="30")
        second_job = await store.job(await store.contract(second, contractor), price="70")

        results = await asyncio.gather(
            _pay_in_own_session(session_factory, first_job.id, first),
            _pay_in_own_session(session_factory, second_job.id, second),
        )

        assert all(job.paid for job in results)
        assert (await store.get(Profile, contractor.id)).balance == Decimal("100")
        assert (await store.get(Profile, first.id)).balance == Decimal("70")
        assert (await store.get(Profile, second.id)).balance == Decimal("30")


class TestConcurrentDeposits:
    """Deposits into the same balance."""

    @pytest.mark.race
    @pytest.mark.asyncio
    async def test_no_lost_updates(self, session_factory, store) -> None:
        client = await store.profile(ProfileType.CLIENT, balance="0")
        contractor = await store.profile(ProfileType.CONTRACTOR)
        contract = await store.contract(client, contractor)
        await store.job(contract, price="400")

        await asyncio.gather(
            *[_deposit_in_own_session(session_factory, client, 10) for _ in range(5)]
        )

        assert (await store.get(Profile, client.id)).balance == Decimal("50")

    @pytest.mark.race
    @pytest.mark.asyncio
    async def test_deposit_while_paying(self, session_factory, store) -> None:
        client = await store.profile(ProfileType.CLIENT, balance="100")
        contractor = await store.profile(ProfileType.CONTRACTOR, balance="0")
        contract = await store.contract(client, contractor)
        job = await store.job(contract, price="100")
        await store.job(contract, price="300")

        await asyncio.gather(
            _pay_in_own_session(session_factory, job.id, client),
            _deposit_in_own_session(session_factory, client, 75),
        )

        assert (await store.get(Profile, client.id)).balance == Decimal("75")
        assert (await store.get(Profile, contractor.id)).balance == Decimal("100")
