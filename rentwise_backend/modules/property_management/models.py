"""Property management models for RentWise.

A Property is either leased as a whole (``has_units`` false, its own
``availability`` applies) or subdivided into Units that carry their own
availability. Availability columns are written only by the occupancy module.
"""

import enum
from datetime import date
from decimal import Decimal

from sqlalchemy import (
    Boolean,
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


class Availability(str, enum.Enum):
    """Occupancy state of a leasable target."""

    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class PropertyType(str, enum.Enum):
    """Kinds of listed property."""

    APARTMENT = "apartment"
    HOUSE = "house"
    BEDSITTER = "bedsitter"
    SINGLE_ROOM = "single_room"
    STUDIO = "studio"
    BUNGALOW = "bungalow"
    MAISONETTE = "maisonette"
    COMMERCIAL = "commercial"
    OFFICE_SPACE = "office_space"
    SHOP = "shop"
    WAREHOUSE = "warehouse"
    HOSTEL = "hostel"
    SERVICE_APARTMENT = "service_apartment"


class Property(RecordMixin, TimestampMixin, Base):
    """Listed rental asset owned by an agent."""

    __tablename__ = "properties"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    property_type: Mapped[PropertyType] = mapped_column(
        Enum(PropertyType, values_callable=enum_values),
        nullable=False,
        default=PropertyType.APARTMENT,
    )

    # Location
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    area_name: Mapped[str | None] = mapped_column(String(120), nullable=True)

    # Details for whole-property leasing
    bedrooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    bathrooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    area: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    rent: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    deposit: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    furnished: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Structural mode and occupancy
    has_units: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    availability: Mapped[Availability] = mapped_column(
        Enum(Availability, values_callable=enum_values),
        nullable=False,
        default=Availability.AVAILABLE,
    )
    # Display back-reference to the active tenant, not an ownership relation
    active_tenant_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    lease_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    lease_end: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Ownership
    agent_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    created_by_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    units: Mapped[list["Unit"]] = relationship(
        "Unit",
        back_populates="property",
        cascade="all, delete-orphan",
        order_by="Unit.unit_number",
    )

    __table_args__ = (
        Index("ix_properties_agent", "agent_id"),
        Index("ix_properties_availability", "availability"),
    )

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, title={self.title}, has_units={self.has_units})>"


class Unit(RecordMixin, TimestampMixin, Base):
    """Individually leasable subdivision of a unit-bearing property."""

    __tablename__ = "units"

    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False
    )
    unit_number: Mapped[str] = mapped_column(String(50), nullable=False)
    floor: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bedrooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    bathrooms: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    area: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    rent: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    deposit: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    furnished: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    availability: Mapped[Availability] = mapped_column(
        Enum(Availability, values_callable=enum_values),
        nullable=False,
        default=Availability.AVAILABLE,
    )
    active_tenant_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    lease_start: Mapped[date | None] = mapped_column(Date, nullable=True)
    lease_end: Mapped[date | None] = mapped_column(Date, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    property: Mapped["Property"] = relationship("Property", back_populates="units")

    __table_args__ = (
        Index("ix_units_number", "property_id", "unit_number", unique=True),
        Index("ix_units_availability", "property_id", "availability"),
    )

    def __repr__(self) -> str:
        return f"<Unit(id={self.id}, number={self.unit_number}, availability={self.availability})>"
