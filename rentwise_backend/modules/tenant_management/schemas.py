"""Tenant management schemas for RentWise."""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    model_validator,
)

from ..auth.models import UserRole
from ..commons import RequestModel
from .models import DepositStatus, TenantStatus

# ----- Nested request parts -----


class EmergencyContact(RequestModel):
    """Required emergency contact of an occupant."""

    name: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=3, max_length=32)
    relationship: str = Field(..., min_length=1, max_length=60)


class EmploymentInfo(RequestModel):
    """Optional employment details."""

    employer_name: str | None = Field(None, max_length=255)
    job_title: str | None = Field(None, max_length=120)
    monthly_income: Decimal | None = Field(None, ge=0)


class TenantReference(RequestModel):
    """A personal or professional reference."""

    name: str = Field(..., min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=32)
    relationship: str | None = Field(None, max_length=60)


class NewOccupant(RequestModel):
    """Account details for an occupant who is not yet registered."""

    email: EmailStr
    first_name: str = Field(..., min_length=2, max_length=120)
    last_name: str | None = Field(None, max_length=120)
    phone: str | None = Field(None, max_length=32)
    id_number: str | None = Field(None, max_length=50)


# ----- Tenant Schemas -----


class TenantProvisionRequest(RequestModel):
    """Schema for creating a tenant.

    Exactly one of ``user_id`` (an existing seeker) or ``user_data`` (a new
    account) must be given. The lease end is either explicit or derived from
    ``lease_duration_months``.
    """

    property_id: int = Field(
        ..., validation_alias=AliasChoices("propertyId", "property_id", "property")
    )
    unit_id: int | None = Field(
        None, validation_alias=AliasChoices("unitId", "unit_id", "unit")
    )
    user_id: int | None = None
    user_data: NewOccupant | None = Field(
        None, validation_alias=AliasChoices("userData", "newUserData", "user_data")
    )

    lease_start_date: date
    lease_end_date: date | None = None
    lease_duration_months: int | None = Field(None, ge=1, le=120)
    move_in_date: date | None = None
    rent_amount: Decimal | None = Field(None, ge=0)
    deposit_amount: Decimal | None = Field(None, ge=0)
    rent_due_day: int = Field(default=1, ge=1, le=31)
    notice_period_days: int = Field(default=30, ge=0)

    emergency_contact: EmergencyContact
    employment: EmploymentInfo | None = Field(
        None, validation_alias=AliasChoices("employment", "employmentInfo")
    )
    references: list[TenantReference] = Field(default_factory=list)
    notes: str | None = None

    @model_validator(mode="after")
    def check_occupant_and_lease(self) -> "TenantProvisionRequest":
        if (self.user_id is None) == (self.user_data is None):
            raise ValueError("provide exactly one of userId or userData")
        if self.lease_end_date is None and self.lease_duration_months is None:
            raise ValueError("provide leaseEndDate or leaseDurationMonths")
        if self.lease_end_date is not None and self.lease_end_date <= self.lease_start_date:
            raise ValueError("leaseEndDate must be after leaseStartDate")
        return self


class TenantUpdate(RequestModel):
    """Schema for updating a tenant. Status is not writable here."""

    model_config = ConfigDict(extra="forbid")

    emergency_contact: EmergencyContact | None = None
    employment: EmploymentInfo | None = None
    references: list[TenantReference] | None = None
    notes: str | None = None


class MoveOutRequest(RequestModel):
    """Schema for moving a tenant out."""

    move_out_date: date | None = None
    reason: str | None = Field(None, max_length=1000)
    deposit_status: DepositStatus | None = None


class OccupantSummary(BaseModel):
    """The user bound by a tenant record."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    first_name: str
    last_name: str | None = None
    phone: str | None = None
    role: UserRole
    must_change_password: bool


class TenantResponse(BaseModel):
    """Schema for tenant response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    uuid: UUID
    user_id: int
    property_id: int
    unit_id: int | None = None
    agent_id: int
    created_by_id: int | None = None
    status: TenantStatus

    lease_start_date: date
    lease_end_date: date
    move_in_date: date | None = None
    rent_amount: float
    deposit_amount: float
    deposit_status: DepositStatus
    rent_due_day: int
    notice_period_days: int

    emergency_contact_name: str
    emergency_contact_phone: str
    emergency_contact_relationship: str
    employer_name: str | None = None
    job_title: str | None = None
    monthly_income: float | None = None
    references: list[dict] | None = None
    notes: str | None = None

    move_out_date: date | None = None
    termination_reason: str | None = None
    terminated_by_id: int | None = None

    user: OccupantSummary | None = None
    created_at: datetime
    updated_at: datetime | None = None


class ProvisioningResult(BaseModel):
    """Created tenant, any warnings, and the one-time temporary password."""

    tenant: TenantResponse
    warnings: list[str] = Field(default_factory=list)
    temporary_password: str | None = None


class TenantStatsResponse(BaseModel):
    """Tenant counts per status."""

    total: int
    active: int
    inactive: int
    terminated: int
