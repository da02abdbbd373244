"""Property management schemas for RentWise.

Request bodies accept camelCase (``hasUnits``, ``unitNumber``) as well as
snake_case. ``availability`` is deliberately absent from every request
schema: it only changes through the occupancy endpoints.
"""

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..commons import RequestModel
from .models import Availability, PropertyType

# ----- Property Schemas -----


class PropertyCreate(RequestModel):
    """Schema for creating a property."""

    title: str = Field(..., min_length=3, max_length=255)
    description: str | None = None
    property_type: PropertyType = PropertyType.APARTMENT
    address: str = Field(..., min_length=1, max_length=255)
    city: str = Field(..., min_length=1, max_length=120)
    area_name: str | None = Field(None, max_length=120)
    bedrooms: int = Field(default=0, ge=0)
    bathrooms: int = Field(default=0, ge=0)
    area: Decimal | None = Field(None, ge=Decimal("0.01"))
    rent: Decimal | None = Field(None, ge=1)
    deposit: Decimal | None = Field(None, ge=0)
    furnished: bool = False
    has_units: bool = False
    notes: str | None = None
    # Owning agent; only an admin may name one, everyone else owns their own
    agent_id: int | None = None

    @model_validator(mode="after")
    def check_whole_property_pricing(self) -> "PropertyCreate":
        if not self.has_units and (self.rent is None or self.deposit is None):
            raise ValueError(
                "rent and deposit are required for a property leased as a whole"
            )
        return self


class PropertyUpdate(RequestModel):
    """Schema for updating a property.

    ``has_units`` drives the structural transition.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=3, max_length=255)
    description: str | None = None
    property_type: PropertyType | None = None
    address: str | None = Field(None, min_length=1, max_length=255)
    city: str | None = Field(None, min_length=1, max_length=120)
    area_name: str | None = Field(None, max_length=120)
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: int | None = Field(None, ge=0)
    area: Decimal | None = Field(None, ge=Decimal("0.01"))
    rent: Decimal | None = Field(None, ge=1)
    deposit: Decimal | None = Field(None, ge=0)
    furnished: bool | None = None
    has_units: bool | None = None
    notes: str | None = None


class PropertyResponse(BaseModel):
    """Schema for property response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    uuid: UUID
    title: str
    description: str | None = None
    property_type: PropertyType
    address: str
    city: str
    area_name: str | None = None
    bedrooms: int
    bathrooms: int
    area: float | None = None
    rent: float | None = None
    deposit: float | None = None
    furnished: bool
    has_units: bool
    availability: Availability
    active_tenant_id: int | None = None
    lease_start: date | None = None
    lease_end: date | None = None
    agent_id: int
    created_by_id: int | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


# ----- Unit Schemas -----


class UnitCreate(RequestModel):
    """One unit in a bulk creation request."""

    unit_number: str = Field(..., min_length=1, max_length=50)
    floor: int | None = None
    bedrooms: int = Field(default=0, ge=0)
    bathrooms: int = Field(default=0, ge=0)
    area: Decimal = Field(..., ge=Decimal("0.01"))
    rent: Decimal = Field(..., ge=1)
    deposit: Decimal = Field(default=Decimal("0"), ge=0)
    furnished: bool = False
    notes: str | None = None


class UnitBulkCreate(RequestModel):
    """Schema for creating several units at once."""

    units: list[UnitCreate] = Field(..., min_length=1)


class UnitUpdate(RequestModel):
    """Schema for updating a unit."""

    model_config = ConfigDict(extra="forbid")

    unit_number: str | None = Field(None, min_length=1, max_length=50)
    floor: int | None = None
    bedrooms: int | None = Field(None, ge=0)
    bathrooms: int | None = Field(None, ge=0)
    area: Decimal | None = Field(None, ge=Decimal("0.01"))
    rent: Decimal | None = Field(None, ge=1)
    deposit: Decimal | None = Field(None, ge=0)
    furnished: bool | None = None
    notes: str | None = None


class UnitResponse(BaseModel):
    """Schema for unit response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    uuid: UUID
    property_id: int
    unit_number: str
    floor: int | None = None
    bedrooms: int
    bathrooms: int
    area: float
    rent: float
    deposit: float
    furnished: bool
    availability: Availability
    active_tenant_id: int | None = None
    lease_start: date | None = None
    lease_end: date | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime | None = None


class PropertyWithUnitsResponse(PropertyResponse):
    """Property detail including its units."""

    units: list[UnitResponse] = []


class UnitStatsResponse(BaseModel):
    """Occupancy summary of a unit-bearing property."""

    property_id: int
    total_units: int
    available_units: int
    occupied_units: int
    maintenance_units: int
    occupancy_rate: float  # percent
    current_monthly_income: float
    potential_monthly_income: float


# ----- Occupancy Schemas -----


class OccupyRequest(RequestModel):
    """Body of an occupy transition."""

    tenant_id: int
    lease_start: date
    lease_end: date

    @model_validator(mode="after")
    def check_lease_window(self) -> "OccupyRequest":
        if self.lease_end <= self.lease_start:
            raise ValueError("lease_end must be after lease_start")
        return self


class VacateRequest(RequestModel):
    """Optional body of a vacate transition."""

    move_out_date: date | None = None
    reason: str | None = Field(None, max_length=1000)
