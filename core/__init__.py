"""Core contract payment logic."""
from .contracts import ContractService
from .errors import (
    BadRequest,
    Forbidden,
    InvalidOperation,
    NotFound,
    ServiceError,
    Unauthenticated,
)
from .payment_engine import PaymentEngine
from .reporting import ReportingEngine
from .unit_of_work import UnitOfWork

__all__ = [
    "BadRequest",
    "ContractService",
    "Forbidden",
    "InvalidOperation",
    "NotFound",
    "PaymentEngine",
    "ReportingEngine",
    "ServiceError",
    "Unauthenticated",
    "UnitOfWork",
]
