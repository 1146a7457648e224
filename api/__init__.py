"""FastAPI application and routes."""
from .main import app
from .schemas import (
    BestClientResponse,
    ContractResponse,
    DepositRequest,
    JobResponse,
    ProfileResponse,
)

__all__ = [
    "app",
    "BestClientResponse",
    "ContractResponse",
    "DepositRequest",
    "JobResponse",
    "ProfileResponse",
]
