"""Tenant management models for RentWise.

A Tenant binds one occupant (a User) to a Property and, for unit-bearing
properties, exactly one Unit, together with the lease terms. Records are kept
after move-out with status ``terminated``.
"""

import enum
from datetime import date
from decimal import Decimal

from sqlalchemy import (
    JSON,
    Date,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ...database import Base, RecordMixin, TimestampMixin, enum_values


class TenantStatus(str, enum.Enum):
    """Tenant status values."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    TERMINATED = "terminated"


class DepositStatus(str, enum.Enum):
    """What became of the deposit."""

    HELD = "held"
    RETURNED = "returned"
    FORFEITED = "forfeited"


class Tenant(RecordMixin, TimestampMixin, Base):
    """Lease-binding record for an occupant."""

    __tablename__ = "tenants"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="RESTRICT"), nullable=False
    )
    unit_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="SET NULL"), nullable=True
    )
    agent_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    created_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Lease terms
    lease_start_date: Mapped[date] = mapped_column(Date, nullable=False)
    lease_end_date: Mapped[date] = mapped_column(Date, nullable=False)
    move_in_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    rent_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    deposit_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    deposit_status: Mapped[DepositStatus] = mapped_column(
        Enum(DepositStatus, values_callable=enum_values),
        nullable=False,
        default=DepositStatus.HELD,
    )
    rent_due_day: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    notice_period_days: Mapped[int] = mapped_column(
        Integer, default=30, nullable=False
    )

    status: Mapped[TenantStatus] = mapped_column(
        Enum(TenantStatus, values_callable=enum_values),
        nullable=False,
        default=TenantStatus.ACTIVE,
    )

    # Emergency contact (required)
    emergency_contact_name: Mapped[str] = mapped_column(String(255), nullable=False)
    emergency_contact_phone: Mapped[str] = mapped_column(String(32), nullable=False)
    emergency_contact_relationship: Mapped[str] = mapped_column(
        String(60), nullable=False
    )

    # Employment (optional)
    employer_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    job_title: Mapped[str | None] = mapped_column(String(120), nullable=True)
    monthly_income: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True
    )

    # List of {"name", "phone", "relationship"} objects
    references: Mapped[list | None] = mapped_column(JSON, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Move-out
    move_out_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    termination_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    terminated_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships
    user = relationship("User", foreign_keys=[user_id])
    property = relationship("Property", foreign_keys=[property_id])
    unit = relationship("Unit", foreign_keys=[unit_id])

    __table_args__ = (
        Index("ix_tenants_user", "user_id"),
        Index("ix_tenants_target", "property_id", "unit_id", "status"),
        Index("ix_tenants_agent", "agent_id", "status"),
        Index("ix_tenants_lease_end", "lease_end_date"),
    )

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, user_id={self.user_id}, status={self.status})>"
