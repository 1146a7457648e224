"""
Unit tests for job payments.
"""
from decimal import Decimal

import pytest

from core.errors import Forbidden, InvalidOperation
from core.payment_engine import PaymentEngine
from database.models import ContractStatus, Job, Profile, ProfileType


class TestPayJob:
    """Test suite for PaymentEngine.pay_job."""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pay_job_transfers_price(self, db, store) -> None:
        """Client (1000) pays contractor (100) for a 500 job."""
        client = await store.profile(ProfileType.CLIENT, balance="1000")
        contractor = await store.profile(ProfileType.CONTRACTOR, balance="100")
        contract = await store.contract(client, contractor)
        job = await store.job(contract, price="500")

        paid_job = await PaymentEngine().pay_job(job.id, client, db)

        assert paid_job.id == job.id
        assert paid_job.paid is True
        assert paid_job.payment_date is not None
        assert (await store.get(Profile, client.id)).balance == Decimal("500")
        assert (await store.get(Profile, contractor.id)).balance == Decimal("600")

        stored_job = await store.get(Job, job.id)
        assert stored_job.paid is True
        assert stored_job.payment_date is not None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pay_job_with_zero_price(self, db, store) -> None:
        """A free job is still marked paid; balances are untouched."""
        client = await store.profile(ProfileType.CLIENT, balance="10")
        contractor = await store.profile(ProfileType.CONTRACTOR, balance="20")
        contract = await store.contract(client, contractor)
        job = await store.job(contract, price="0")

        paid_job = await PaymentEngine().pay_job(job.id, client, db)

        assert paid_job.paid is True
        assert paid_job.payment_date is not None
        assert (await store.get(Profile, client.id)).balance == Decimal("10")
        assert (await store.get(Profile, contractor.id)).balance == Decimal("20")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pay_job_exact_balance(self, db, store) -> None:
        """Paying with exactly enough balance leaves the client at zero."""
        client = await store.profile(ProfileType.CLIENT, balance="250.50")
        contractor = await store.profile(ProfileType.CONTRACTOR, balance="0")
        contract = await store.contract(client, contractor)
        job = await store.job(contract, price="250.50")

        await PaymentEngine().pay_job(job.id, client, db)

        assert (await store.get(Profile, client.id)).balance == Decimal("0")
        assert (await store.get(Profile, contractor.id)).balance == Decimal("250.50")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pay_job_twice_fails_second_time(self, db, store) -> None:
        """Second payment is rejected and balances move only once."""
        client = await store.profile(ProfileType.CLIENT, balance="1000")
        contractor = await store.profile(ProfileType.CONTRACTOR, balance="0")
        contract = await store.contract(client, contractor)
        job = await store.job(contract, price="300")
        engine = PaymentEngine()

        await engine.pay_job(job.id, client, db)
        with pytest.raises(InvalidOperation) as exc_info:
            await engine.pay_job(job.id, client, db)

        assert exc_info.value.reason == "job_already_paid"
        assert (await store.get(Profile, client.id)).balance == Decimal("700")
        assert (await store.get(Profile, contractor.id)).balance == Decimal("300")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pay_job_as_contractor_forbidden(self, db, store) -> None:
        """Only clients can pay."""
        client = await store.profile(ProfileType.CLIENT)
        contractor = await store.profile(ProfileType.CONTRACTOR)
        contract = await store.contract(client, contractor)
        job = await store.job(contract)

        with pytest.raises(Forbidden):
            await PaymentEngine().pay_job(job.id, contractor, db)

        assert (await store.get(Job, job.id)).paid is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pay_missing_job(self, db, store) -> None:
        """Unknown job ids are an invalid operation."""
        client = await store.profile(ProfileType.CLIENT)

        with pytest.raises(InvalidOperation) as exc_info:
            await PaymentEngine().pay_job(999, client, db)

        assert exc_info.value.reason == "job_not_found"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pay_job_with_negative_price(self, db, store) -> None:
        """Negative prices are never paid."""
        client = await store.profile(ProfileType.CLIENT)
        contractor = await store.profile(ProfileType.CONTRACTOR)
        contract = await store.contract(client, contractor)
        job = await store.job(contract, price="-5")

        with pytest.raises(InvalidOperation) as exc_info:
            await PaymentEngine().pay_job(job.id, client, db)

        assert exc_info.value.reason == "invalid_price"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pay_someone_elses_job(self, db, store) -> None:
        """A client cannot pay for a job on another client's contract."""
        owner = await store.profile(ProfileType.CLIENT)
        other = await store.profile(ProfileType.CLIENT, balance="5000")
        contractor = await store.profile(ProfileType.CONTRACTOR, balance="0")
        contract = await store.contract(owner, contractor)
        job = await store.job(contract, price="100")

        with pytest.raises(InvalidOperation) as exc_info:
            await PaymentEngine().pay_job(job.id, other, db)

        assert exc_info.value.reason == "not_job_client"
        assert (await store.get(Profile, other.id)).balance == Decimal("5000")
        assert (await store.get(Profile, contractor.id)).balance == Decimal("0")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pay_job_missing_contractor(self, db, store) -> None:
        """Payment fails when the contractor profile is gone."""
        client = await store.profile(ProfileType.CLIENT)
        contractor = await store.profile(ProfileType.CONTRACTOR)
        contract = await store.contract(client, contractor)
        job = await store.job(contract)
        await store.delete(Profile, contractor.id)

        with pytest.raises(InvalidOperation) as exc_info:
            await PaymentEngine().pay_job(job.id, client, db)

        assert exc_info.value.reason == "contractor_not_found"
        assert (await store.get(Job, job.id)).paid is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pay_job_missing_client_profile(self, db, store) -> None:
        """Payment fails when the client's own profile row is gone."""
        client = await store.profile(ProfileType.CLIENT)
        contractor = await store.profile(ProfileType.CONTRACTOR, balance="0")
        contract = await store.contract(client, contractor)
        job = await store.job(contract)
        await store.delete(Profile, client.id)

        with pytest.raises(InvalidOperation) as exc_info:
            await PaymentEngine().pay_job(job.id, client, db)

        assert exc_info.value.reason == "client_not_found"
        assert (await store.get(Profile, contractor.id)).balance == Decimal("0")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pay_job_insufficient_funds_rolls_back(self, db, store) -> None:
        """Nothing is persisted when the client cannot afford the job."""
        client = await store.profile(ProfileType.CLIENT, balance="99.99")
        contractor = await store.profile(ProfileType.CONTRACTOR, balance="0")
        contract = await store.contract(client, contractor)
        job = await store.job(contract, price="100")

        with pytest.raises(InvalidOperation) as exc_info:
            await PaymentEngine().pay_job(job.id, client, db)

        assert exc_info.value.reason == "insufficient_funds"
        assert exc_info.value.to_dict()["error"] == "invalid_operation"

        stored_job = await store.get(Job, job.id)
        assert stored_job.paid is None
        assert stored_job.payment_date is None
        assert (await store.get(Profile, client.id)).balance == Decimal("99.99")
        assert (await store.get(Profile, contractor.id)).balance == Decimal("0")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_pay_job_on_terminated_contract(self, db, store) -> None:
        """Contract status does not block paying an outstanding job."""
        client = await store.profile(ProfileType.CLIENT, balance="100")
        contractor = await store.profile(ProfileType.CONTRACTOR, balance="0")
        contract = await store.contract(client, contractor, status=ContractStatus.TERMINATED)
        job = await store.job(contract, price="40")

        paid_job = await PaymentEngine().pay_job(job.id, client, db)

        assert paid_job.paid is True
        assert (await store.get(Profile, contractor.id)).balance == Decimal("40")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_rejection_with_requester_from_same_session(self, db, store) -> None:
        """The requester loaded by the request session survives the rollback."""
        client = await store.profile(ProfileType.CLIENT, balance="10")
        contractor = await store.profile(ProfileType.CONTRACTOR)
        contract = await store.contract(client, contractor)
        job = await store.job(contract, price="500")
        requester = await db.get(Profile, client.id)

        with pytest.raises(InvalidOperation) as exc_info:
            await PaymentEngine().pay_job(job.id, requester, db)

        assert exc_info.value.reason == "insufficient_funds"
        assert (await store.get(Profile, client.id)).balance == Decimal("10")
