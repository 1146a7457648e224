"""
Payment engine: moves money between client and contractor balances.

Both operations run inside a ``UnitOfWork``. Every row the operation will
write is locked before any value used in a decision is read, so two
concurrent attempts against the same job or balance serialize:

Pay a job:
1. Check the requester is a client
2. Lock the job
3. Check the contract belongs to the requester
4. Lock contractor and client profiles (ascending id order)
5. Check funds, transfer, mark the job paid
6. Commit

Deposit:
1. Validate the amount and ownership
2. Lock the client profile
3. Check the deposit cap against outstanding unpaid jobs
4. Credit the balance and commit
"""
import math
import time
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation as DecimalException
from typing import Any, Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings
from core.errors import BadRequest, Forbidden, InvalidOperation, ServiceError
from core.unit_of_work import UnitOfWork
from database.models import Job, Profile, ProfileType
from database.repositories import CENTS
from monitoring.metrics import metrics

logger = structlog.get_logger(__name__)


class PaymentEngine:
    """
    Job payment and deposit orchestrator.

    Stateless apart from configuration; sessions are passed per call.
    """

    def __init__(self, deposit_cap_ratio: Optional[Decimal] = None) -> None:
        """
        Initialize payment engine.

        Args:
            deposit_cap_ratio: Share of outstanding unpaid job prices a
                client may deposit; defaults to the configured value
        """
        settings = get_settings()
        self.deposit_cap_ratio = (
            deposit_cap_ratio if deposit_cap_ratio is not None else settings.deposit_cap_ratio
        )

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    @staticmethod
    def _validate_deposit_amount(amount: Any) -> Decimal:
        """
        Validate a deposit amount.

        Args:
            amount: Raw amount from the request body

        Returns:
            Decimal: The amount as a decimal

        Raises:
            BadRequest: If the amount is not a positive finite number of
                whole cents
        """
        if amount is None or isinstance(amount, bool):
            raise BadRequest("Deposit amount must be a positive number", reason="invalid_amount")

        if isinstance(amount, float) and not math.isfinite(amount):
            raise BadRequest("Deposit amount must be finite", reason="invalid_amount")

        try:
            value = Decimal(str(amount))
        except (DecimalException, ValueError):
            raise BadRequest("Deposit amount must be a positive number", reason="invalid_amount")

        if not value.is_finite() or value <= 0:
            raise BadRequest("Deposit amount must be a positive number", reason="invalid_amount")

        # balances are stored to the cent
        try:
            whole_cents = value == value.quantize(CENTS)
        except DecimalException:
            whole_cents = False
        if not whole_cents:
            raise BadRequest(
                "Deposit amount cannot have more than two decimal places", reason="invalid_amount"
            )

        return value

    async def pay_job(self, job_id: int, requester: Profile, db: AsyncSession) -> Job:
        """
        Pay the contractor for one of the requesting client's jobs.

        Args:
            job_id: Job ID
            requester: Authenticated profile
            db: Database session

        Returns:
            Job: The job, now paid

        Raises:
            Forbidden: If the requester is not a client
            InvalidOperation: If the job cannot be paid by this client
        """
        start_time = time.time()
        # a rollback expires the requester along with the rest of the session
        requester_id, requester_type = requester.id, requester.type

        logger.info("job_payment_started", job_id=job_id, client_id=requester_id)

        if requester_type != ProfileType.CLIENT.value:
            metrics.record_job_payment(Forbidden.code)
            logger.warning("job_payment_forbidden", job_id=job_id, profile_type=requester_type)
            raise Forbidden("Only clients can pay for jobs", reason="not_a_client")

        try:
            async with UnitOfWork(db) as uow:
                job = await uow.jobs.get_for_update(job_id)

                if job is None:
                    raise InvalidOperation(f"Job {job_id} not found", reason="job_not_found")
                if job.paid:
                    raise InvalidOperation(
                        f"Job {job_id} is already paid", reason="job_already_paid"
                    )
                if job.price < 0:
                    raise InvalidOperation(
                        f"Job {job_id} has an invalid price", reason="invalid_price"
                    )

                contract = await uow.contracts.get(job.contract_id)
                if contract is None or contract.client_id != requester_id:
                    raise InvalidOperation(
                        f"Job {job_id} does not belong to this client", reason="not_job_client"
                    )

                profiles = await uow.profiles.lock_many([contract.contractor_id, requester_id])

                contractor = profiles.get(contract.contractor_id)
                if contractor is None:
                    raise InvalidOperation(
                        "Contractor for this job no longer exists", reason="contractor_not_found"
                    )

                client = profiles.get(requester_id)
                if client is None:
                    raise InvalidOperation(
                        "Client profile no longer exists", reason="client_not_found"
                    )
                if client.balance < job.price:
                    raise InvalidOperation(
                        "Insufficient balance to pay for this job", reason="insufficient_funds"
                    )

                client.balance -= job.price
                contractor.balance += job.price
                job.paid = True
                job.payment_date = self._now()

                await uow.flush()

        except ServiceError as e:
            metrics.record_job_payment(e.code)
            logger.warning(
                "job_payment_rejected",
                job_id=job_id,
                client_id=requester_id,
                reason=e.reason,
                error=e.message,
            )
            raise

        except Exception as e:
            metrics.record_job_payment("error")
            logger.error("job_payment_failed", job_id=job_id, error=str(e))
            raise

        duration = time.time() - start_time
        metrics.record_job_payment("paid", float(job.price))
        metrics.record_job_payment_duration(duration)

        logger.info(
            "job_payment_completed",
            job_id=job.id,
            client_id=client.id,
            contractor_id=contractor.id,
            amount=str(job.price),
            duration_seconds=duration,
        )

        return job

    async def deposit(
        self,
        target_profile_id: int,
        requester: Profile,
        amount: Any,
        db: AsyncSession,
    ) -> Profile:
        """
        Deposit funds into the requesting client's own balance.

        A client may deposit at most ``deposit_cap_ratio`` of the total
        price of their unpaid jobs, across all of their contracts.

        Args:
            target_profile_id: Profile the deposit is for
            requester: Authenticated profile
            amount: Amount to deposit
            db: Database session

        Returns:
            Profile: The client's profile with the updated balance

        Raises:
            BadRequest: If the amount is not a positive finite number
            Forbidden: If depositing into another profile, or not a client
            InvalidOperation: If the client has no unpaid jobs or the cap
                is exceeded
        """
        requester_id, requester_type = requester.id, requester.type

        logger.info(
            "deposit_started",
            target_profile_id=target_profile_id,
            profile_id=requester_id,
        )

        try:
            value = self._validate_deposit_amount(amount)

            if target_profile_id != requester_id:
                raise Forbidden(
                    "Deposits are only allowed into your own balance", reason="not_own_profile"
                )
            if requester_type != ProfileType.CLIENT.value:
                raise Forbidden("Only clients can deposit funds", reason="not_a_client")

            async with UnitOfWork(db) as uow:
                client = await uow.profiles.get_for_update(requester_id)
                if client is None:
                    raise InvalidOperation(
                        "Client profile no longer exists", reason="client_not_found"
                    )

                contract_ids = await uow.contracts.ids_for_client(client.id)
                if not contract_ids:
                    raise InvalidOperation(
                        "Clients without contracts cannot deposit", reason="no_contracts"
                    )

                outstanding = await uow.jobs.unpaid_prices_for_contracts(contract_ids)
                if not outstanding:
                    raise InvalidOperation(
                        "Clients without unpaid jobs cannot deposit", reason="no_unpaid_jobs"
                    )

                cap = sum(outstanding, Decimal("0")) * self.deposit_cap_ratio
                if value > cap:
                    raise InvalidOperation(
                        f"Deposit exceeds the maximum of {cap:.2f}",
                        reason="deposit_cap_exceeded",
                    )

                client.balance += value
                await uow.flush()

        except ServiceError as e:
            metrics.record_deposit(e.code)
            logger.warning(
                "deposit_rejected",
                target_profile_id=target_profile_id,
                profile_id=requester_id,
                reason=e.reason,
                error=e.message,
            )
            raise

        except Exception as e:
            metrics.record_deposit("error")
            logger.error("deposit_failed", profile_id=requester_id, error=str(e))
            raise

        metrics.record_deposit("deposited", float(value))
        logger.info(
            "deposit_completed",
            profile_id=client.id,
            amount=str(value),
            balance=str(client.balance),
        )

        return client
