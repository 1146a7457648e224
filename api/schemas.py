"""
Pydantic schemas for API request/response models.

Entities are rendered with camelCase keys (``firstName``, ``clientId``,
``paymentDate``) and money as JSON numbers.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class EntityModel(BaseModel):
    """Base for responses built from ORM rows."""

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ProfileResponse(EntityModel):
    """Response schema for a profile."""

    id: int = Field(..., description="Profile ID")
    first_name: str = Field(..., description="First name")
    last_name: str = Field(..., description="Last name")
    profession: str = Field(..., description="Profession")
    balance: Money = Field(..., description="Current balance")
    type: str = Field(..., description="Profile type (client/contractor/admin)")


class ContractResponse(EntityModel):
    """Response schema for a contract."""

    id: int = Field(..., description="Contract ID")
    terms: str = Field(..., description="Contract terms")
    status: str = Field(..., description="Contract status (new/in_progress/terminated)")
    client_id: int = Field(..., description="Client profile ID")
    contractor_id: int = Field(..., description="Contractor profile ID")


class JobResponse(EntityModel):
    """Response schema for a job."""

    id: int = Field(..., description="Job ID")
    description: str = Field(..., description="Job description")
    price: Money = Field(..., description="Job price")
    paid: Optional[bool] = Field(default=None, description="Whether the job has been paid")
    payment_date: Optional[datetime] = Field(
        default=None, description="Payment timestamp (ISO 8601, UTC)"
    )
    contract_id: int = Field(..., description="Contract ID")

    @field_validator("payment_date")
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """SQLite hands back naive timestamps; they are stored as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class DepositRequest(BaseModel):
    """Request schema for depositing funds."""

    deposit_amount: Any = Field(
        default=None,
        alias="depositAmount",
        description="Amount to deposit; at most 25% of outstanding unpaid job prices",
    )

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {"examples": [{"depositAmount": 100}]},
    }


class BestClientResponse(EntityModel):
    """Response schema for one best-clients entry."""

    id: int = Field(..., description="Client profile ID")
    full_name: str = Field(..., description="First and last name")
    paid: Money = Field(..., description="Total paid in the window")


class ErrorResponse(BaseModel):
    """Response schema for errors."""

    error: str = Field(..., description="Stable error code")
    message: str = Field(..., description="Human readable message")
    reason: Optional[str] = Field(default=None, description="Specific rule that failed")


class HealthCheckResponse(BaseModel):
    """Response schema for health checks."""

    status: str = Field(..., description="Overall health status (healthy/unhealthy)")
    checks: Optional[Dict[str, Any]] = Field(default=None, description="Individual service checks")
    message: Optional[str] = Field(default=None, description="Status message")
