"""SQLAlchemy database models for profiles, contracts and jobs."""
import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Fixed-point money: 12 digits, 2 after the decimal point.
Money = Numeric(12, 2, asdecimal=True)


class ProfileType(str, enum.Enum):
    """Roles a profile can hold."""

    CLIENT = "client"
    CONTRACTOR = "contractor"
    ADMIN = "admin"


class ContractStatus(str, enum.Enum):
    """Contract lifecycle states."""

    NEW = "new"
    IN_PROGRESS = "in_progress"
    TERMINATED = "terminated"


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass


class Profile(Base):
    """
    Profiles table.

    A client, contractor or admin account. The balance is only ever
    changed by the payment engine.
    """

    __tablename__ = "profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    profession: Mapped[str] = mapped_column(String(255), nullable=False)
    balance: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    type: Mapped[str] = mapped_column(String(20), nullable=False)

    __table_args__ = (
        CheckConstraint("balance >= 0", name="non_negative_balance"),
        CheckConstraint(
            "type IN ('client', 'contractor', 'admin')",
            name="valid_profile_type",
        ),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def __repr__(self) -> str:
        """String representation of Profile."""
        return f"<Profile(id={self.id}, type={self.type}, balance={self.balance})>"


class Contract(Base):
    """
    Contracts table.

    Links exactly one client profile to one contractor profile.
    A contract is active while its status is not ``terminated``.
    """

    __tablename__ = "contracts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    terms: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("profiles.id"), nullable=False, index=True
    )
    contractor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("profiles.id"), nullable=False, index=True
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('new', 'in_progress', 'terminated')",
            name="valid_contract_status",
        ),
    )

    def __repr__(self) -> str:
        """String representation of Contract."""
        return (
            f"<Contract(id={self.id}, status={self.status}, "
            f"client_id={self.client_id}, contractor_id={self.contractor_id})>"
        )


class Job(Base):
    """
    Jobs table.

    A billable unit of work under a contract. ``paid`` and ``payment_date``
    are set together, once, when the client pays for the job.
    """

    __tablename__ = "jobs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    paid: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    payment_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    contract_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("contracts.id"), nullable=False, index=True
    )

    __table_args__ = (
        Index("idx_jobs_paid_payment_date", "paid", "payment_date"),
    )

    def __repr__(self) -> str:
        """String representation of Job."""
        return f"<Job(id={self.id}, price={self.price}, paid={self.paid})>"
