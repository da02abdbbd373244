"""Authentication models for RentWise.

A single users table holds every role. Employees act on behalf of the agent
referenced by ``parent_user_id`` and carry per-user capability flags.
"""

import enum
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
)
from sqlalchemy.orm import Mapped, mapped_column

from ...database import Base, RecordMixin, TimestampMixin, enum_values


class UserRole(str, enum.Enum):
    """Available user roles."""

    ADMIN = "admin"
    AGENT = "agent"
    LANDLORD = "landlord"
    EMPLOYEE = "employee"
    TENANT = "tenant"
    SEEKER = "seeker"


class User(RecordMixin, TimestampMixin, Base):
    """Platform user."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    first_name: Mapped[str] = mapped_column(String(120), nullable=False)
    last_name: Mapped[str | None] = mapped_column(String(120), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    id_number: Mapped[str | None] = mapped_column(String(50), nullable=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, values_callable=enum_values),
        nullable=False,
        default=UserRole.SEEKER,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    must_change_password: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    # Hierarchy: who created the account, and the agent an employee/tenant
    # belongs to
    created_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    parent_user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Employee profile
    job_title: Mapped[str | None] = mapped_column(String(120), nullable=True)

    # Employee capability flags (ignored for every other role)
    can_create_tenants: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    can_manage_properties: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    can_handle_payments: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )
    can_view_reports: Mapped[bool] = mapped_column(
        Boolean, default=False, nullable=False
    )

    last_login: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    failed_login_attempts: Mapped[int] = mapped_column(
        Integer, default=0, nullable=False
    )
    locked_until: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    __table_args__ = (
        Index("ix_users_email", "email", unique=True),
        Index("ix_users_role", "role"),
        Index("ix_users_parent", "parent_user_id"),
    )

    @property
    def full_name(self) -> str:
        """Get user's full name."""
        if self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.first_name

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
