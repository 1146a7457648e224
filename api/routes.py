"""
API routes for contracts, jobs, balances and admin reports.
"""
from typing import Any, Dict, List, Optional

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from sqlalchemy.ext.asyncio import AsyncSession

from core.contracts import ContractService
from core.payment_engine import PaymentEngine
from core.reporting import ReportingEngine
from database.connection import get_db
from database.models import Profile
from monitoring.health import HealthCheck

from .dependencies import get_current_profile, require_admin
from .schemas import (
    BestClientResponse,
    ContractResponse,
    DepositRequest,
    ErrorResponse,
    HealthCheckResponse,
    JobResponse,
    ProfileResponse,
)

logger = structlog.get_logger(__name__)

# Create routers
contract_router = APIRouter(prefix="/contracts", tags=["contracts"])
job_router = APIRouter(prefix="/jobs", tags=["jobs"])
balance_router = APIRouter(prefix="/balances", tags=["balances"])
admin_router = APIRouter(prefix="/admin", tags=["admin"])
monitoring_router = APIRouter(tags=["monitoring"])

# Initialize services
contract_service = ContractService()
payment_engine = PaymentEngine()
reporting_engine = ReportingEngine()
health_check = HealthCheck()

ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@contract_router.get(
    "/{contract_id}",
    response_model=ContractResponse,
    responses=ERROR_RESPONSES,
    summary="Get a contract",
    description="Fetch one contract the requesting profile is a party to",
)
async def get_contract(
    contract_id: int,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> ContractResponse:
    contract = await contract_service.get_contract(contract_id, profile, db)
    return ContractResponse.model_validate(contract)


@contract_router.get(
    "",
    response_model=List[ContractResponse],
    responses=ERROR_RESPONSES,
    summary="List active contracts",
    description="All non-terminated contracts of the requesting client or contractor",
)
async def list_contracts(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> List[ContractResponse]:
    contracts = await contract_service.list_active_contracts(profile, db)
    return [ContractResponse.model_validate(contract) for contract in contracts]


@job_router.get(
    "/unpaid",
    response_model=List[JobResponse],
    responses=ERROR_RESPONSES,
    summary="List unpaid jobs",
    description="Unpaid jobs under the requesting profile's active contracts",
)
async def list_unpaid_jobs(
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> List[JobResponse]:
    jobs = await contract_service.list_unpaid_jobs(profile, db)
    return [JobResponse.model_validate(job) for job in jobs]


@job_router.post(
    "/{job_id}/pay",
    response_model=JobResponse,
    responses=ERROR_RESPONSES,
    summary="Pay for a job",
    description="Move the job price from the client's balance to the contractor's",
)
async def pay_job(
    job_id: int,
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> JobResponse:
    logger.info("api_pay_job_request", job_id=job_id)

    job = await payment_engine.pay_job(job_id, profile, db)

    logger.info("api_pay_job_success", job_id=job.id, payment_date=str(job.payment_date))
    return JobResponse.model_validate(job)


@balance_router.post(
    "/deposit/{user_id}",
    response_model=ProfileResponse,
    responses=ERROR_RESPONSES,
    summary="Deposit funds",
    description="Deposit into the requesting client's own balance, capped by unpaid jobs",
)
async def deposit(
    user_id: int,
    request: Optional[DepositRequest] = Body(default=None),
    profile: Profile = Depends(get_current_profile),
    db: AsyncSession = Depends(get_db),
) -> ProfileResponse:
    amount = request.deposit_amount if request is not None else None
    logger.info("api_deposit_request", user_id=user_id, amount=str(amount))

    client = await payment_engine.deposit(user_id, profile, amount, db)

    logger.info("api_deposit_success", profile_id=client.id)
    return ProfileResponse.model_validate(client)


@admin_router.get(
    "/best-profession",
    response_model=List[str],
    responses=ERROR_RESPONSES,
    summary="Best profession",
    description="Profession(s) that earned the most in the payment-date window",
)
async def best_profession(
    start: Optional[str] = Query(default=None, description="Window start (ISO 8601)"),
    end: Optional[str] = Query(default=None, description="Window end (ISO 8601)"),
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> List[str]:
    return await reporting_engine.best_profession(db, start=start, end=end)


@admin_router.get(
    "/best-clients",
    response_model=List[BestClientResponse],
    responses=ERROR_RESPONSES,
    summary="Best clients",
    description="Clients that paid the most in the payment-date window",
)
async def best_clients(
    start: Optional[str] = Query(default=None, description="Window start (ISO 8601)"),
    end: Optional[str] = Query(default=None, description="Window end (ISO 8601)"),
    limit: Optional[str] = Query(default=None, description="Number of clients (default 2)"),
    admin: Profile = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> List[BestClientResponse]:
    rows = await reporting_engine.best_clients(db, start=start, end=end, limit=limit)
    return [BestClientResponse.model_validate(row) for row in rows]


@monitoring_router.get(
    "/health",
    response_model=HealthCheckResponse,
    summary="Health check",
    description="Check overall system health",
)
async def health(db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    """Health check endpoint for monitoring."""
    try:
        return await health_check.check_all(db)
    except Exception as e:
        logger.error("health_check_error", error=str(e))
        return {
            "status": "unhealthy",
            "checks": {"error": str(e)},
        }


@monitoring_router.get(
    "/health/live",
    response_model=HealthCheckResponse,
    summary="Liveness probe",
)
async def liveness() -> Dict[str, Any]:
    """Liveness probe endpoint."""
    return await health_check.liveness()


@monitoring_router.get(
    "/health/ready",
    response_model=HealthCheckResponse,
    summary="Readiness probe",
)
async def readiness(db: AsyncSession = Depends(get_db)) -> Dict[str, Any]:
    """Readiness probe endpoint."""
    result = await health_check.readiness(db)
    if result["status"] != "healthy":
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=result)
    return result


@monitoring_router.get(
    "/metrics",
    summary="Prometheus metrics",
    include_in_schema=False,
)
async def prometheus_metrics() -> Response:
    """Expose Prometheus metrics."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
