"""Initial schema for RentWise Rental Management Platform

Revision ID: 0001
Revises:
Create Date: 2026-10-19

Creates all tables for:
- Auth (users, including employee capability flags)
- Property Management (properties, units)
- Tenant Management (tenants)
"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

AVAILABILITY = ("available", "occupied", "maintenance")


def upgrade() -> None:
    """Create all tables."""

    # =====================
    # USERS
    # =====================

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("uuid", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(120), nullable=False),
        sa.Column("last_name", sa.String(120), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("id_number", sa.String(50), nullable=True),
        sa.Column("role", sa.Enum("admin", "agent", "landlord", "employee", "tenant", "seeker", name="userrole"), nullable=False, server_default="seeker"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="1"),
        sa.Column("must_change_password", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("created_by_id", sa.Integer(), nullable=True),
        sa.Column("parent_user_id", sa.Integer(), nullable=True),
        sa.Column("job_title", sa.String(120), nullable=True),
        sa.Column("can_create_tenants", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("can_manage_properties", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("can_handle_payments", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("can_view_reports", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("last_login", sa.DateTime(timezone=True), nullable=True),
        sa.Column("failed_login_attempts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("locked_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["parent_user_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"])
    op.create_index("ix_users_parent", "users", ["parent_user_id"])

    # =====================
    # PROPERTIES
    # =====================

    op.create_table(
        "properties",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("uuid", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "property_type",
            sa.Enum(
                "apartment", "house", "bedsitter", "single_room", "studio", "bungalow",
                "maisonette", "commercial", "office_space", "shop", "warehouse",
                "hostel", "service_apartment",
                name="propertytype",
            ),
            nullable=False,
            server_default="apartment",
        ),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("city", sa.String(120), nullable=False),
        sa.Column("area_name", sa.String(120), nullable=True),
        sa.Column("bedrooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bathrooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("area", sa.Numeric(10, 2), nullable=True),
        sa.Column("rent", sa.Numeric(12, 2), nullable=True),
        sa.Column("deposit", sa.Numeric(12, 2), nullable=True),
        sa.Column("furnished", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("has_units", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("availability", sa.Enum(*AVAILABILITY, name="availability"), nullable=False, server_default="available"),
        sa.Column("active_tenant_id", sa.Integer(), nullable=True),
        sa.Column("lease_start", sa.Date(), nullable=True),
        sa.Column("lease_end", sa.Date(), nullable=True),
        sa.Column("agent_id", sa.Integer(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
        sa.ForeignKeyConstraint(["agent_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_properties_agent", "properties", ["agent_id"])
    op.create_index("ix_properties_availability", "properties", ["availability"])

    # =====================
    # UNITS (FK to properties)
    # =====================

    op.create_table(
        "units",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("uuid", sa.Uuid(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("unit_number", sa.String(50), nullable=False),
        sa.Column("floor", sa.Integer(), nullable=True),
        sa.Column("bedrooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("bathrooms", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("area", sa.Numeric(10, 2), nullable=False),
        sa.Column("rent", sa.Numeric(12, 2), nullable=False),
        sa.Column("deposit", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("furnished", sa.Boolean(), nullable=False, server_default="0"),
        sa.Column("availability", sa.Enum(*AVAILABILITY, name="availability"), nullable=False, server_default="available"),
        sa.Column("active_tenant_id", sa.Integer(), nullable=True),
        sa.Column("lease_start", sa.Date(), nullable=True),
        sa.Column("lease_end", sa.Date(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="CASCADE"),
    )
    op.create_index("ix_units_number", "units", ["property_id", "unit_number"], unique=True)
    op.create_index("ix_units_availability", "units", ["property_id", "availability"])

    # =====================
    # TENANTS (FK to users, properties, units)
    # =====================

    op.create_table(
        "tenants",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("uuid", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("property_id", sa.Integer(), nullable=False),
        sa.Column("unit_id", sa.Integer(), nullable=True),
        sa.Column("agent_id", sa.Integer(), nullable=False),
        sa.Column("created_by_id", sa.Integer(), nullable=True),
        sa.Column("lease_start_date", sa.Date(), nullable=False),
        sa.Column("lease_end_date", sa.Date(), nullable=False),
        sa.Column("move_in_date", sa.Date(), nullable=True),
        sa.Column("rent_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("deposit_amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("deposit_status", sa.Enum("held", "returned", "forfeited", name="depositstatus"), nullable=False, server_default="held"),
        sa.Column("rent_due_day", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("notice_period_days", sa.Integer(), nullable=False, server_default="30"),
        sa.Column("status", sa.Enum("active", "inactive", "terminated", name="tenantstatus"), nullable=False, server_default="active"),
        sa.Column("emergency_contact_name", sa.String(255), nullable=False),
        sa.Column("emergency_contact_phone", sa.String(32), nullable=False),
        sa.Column("emergency_contact_relationship", sa.String(60), nullable=False),
        sa.Column("employer_name", sa.String(255), nullable=True),
        sa.Column("job_title", sa.String(120), nullable=True),
        sa.Column("monthly_income", sa.Numeric(12, 2), nullable=True),
        sa.Column("references", sa.JSON(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("move_out_date", sa.Date(), nullable=True),
        sa.Column("termination_reason", sa.Text(), nullable=True),
        sa.Column("terminated_by_id", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now(), onupdate=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("uuid"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["property_id"], ["properties.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["unit_id"], ["units.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["agent_id"], ["users.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["created_by_id"], ["users.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["terminated_by_id"], ["users.id"], ondelete="SET NULL"),
    )
    op.create_index("ix_tenants_user", "tenants", ["user_id"])
    op.create_index("ix_tenants_target", "tenants", ["property_id", "unit_id", "status"])
    op.create_index("ix_tenants_agent", "tenants", ["agent_id", "status"])
    op.create_index("ix_tenants_lease_end", "tenants", ["lease_end_date"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("tenants")
    op.drop_table("units")
    op.drop_table("properties")
    op.drop_table("users")
