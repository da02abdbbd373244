"""CRUD operations for property management module.

The ``claim_*``/``release_*`` helpers are conditional single-statement
UPDATEs. They return False when the WHERE clause matched nothing, which is
how a lost race on a target's availability shows up.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import and_, case, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .models import Availability, Property, Unit

# ----- Property CRUD -----


async def get_property_by_id(
    db: AsyncSession,
    property_id: int,
    include_units: bool = False,
    include_deleted: bool = False,
) -> Property | None:
    """Get a property by ID."""
    filters = [Property.id == property_id]
    if not include_deleted:
        filters.append(Property.is_deleted == False)  # noqa: E712
    query = select(Property).where(and_(*filters))
    if include_units:
        query = query.options(selectinload(Property.units)).execution_options(
            populate_existing=True
        )
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_properties(
    db: AsyncSession,
    agent_id: int | None = None,
    skip: int = 0,
    limit: int = 100,
    availability: Availability | None = None,
    has_units: bool | None = None,
    search: str | None = None,
) -> tuple[list[Property], int]:
    """Get properties with filtering and pagination.

    ``agent_id`` None means unrestricted.

    Returns:
        Tuple of (list of properties, total count)
    """
    filters = [Property.is_deleted == False]  # noqa: E712
    if agent_id is not None:
        filters.append(Property.agent_id == agent_id)
    if availability:
        filters.append(Property.availability == availability)
    if has_units is not None:
        filters.append(Property.has_units == has_units)
    if search:
        search_filter = f"%{search}%"
        filters.append(
            (Property.title.ilike(search_filter))
            | (Property.address.ilike(search_filter))
            | (Property.city.ilike(search_filter))
        )

    # Count query
    count_result = await db.execute(
        select(func.count(Property.id)).where(and_(*filters))
    )
    total = count_result.scalar() or 0

    # Data query
    result = await db.execute(
        select(Property)
        .where(and_(*filters))
        .order_by(Property.created_at.desc(), Property.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def create_property(db: AsyncSession, **kwargs) -> Property:
    """Create a new property. Caller commits."""
    property_obj = Property(availability=Availability.AVAILABLE, **kwargs)
    db.add(property_obj)
    await db.flush()
    return property_obj


async def update_property(db: AsyncSession, property_obj: Property, **kwargs) -> Property:
    """Update descriptive property fields. Caller commits."""
    for key, value in kwargs.items():
        if hasattr(property_obj, key):
            setattr(property_obj, key, value)
    await db.flush()
    return property_obj


async def soft_delete_property(db: AsyncSession, property_obj: Property) -> None:
    """Soft delete a property."""
    property_obj.is_deleted = True
    await db.flush()


# ----- Unit CRUD -----


async def get_unit_by_id(
    db: AsyncSession, unit_id: int, property_id: int | None = None
) -> Unit | None:
    """Get a unit by ID, optionally requiring it to belong to a property."""
    query = select(Unit).where(Unit.id == unit_id)
    if property_id is not None:
        query = query.where(Unit.property_id == property_id)
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_units(
    db: AsyncSession,
    property_id: int,
    availability: Availability | None = None,
) -> list[Unit]:
    """Get the units of a property ordered by number."""
    query = select(Unit).where(Unit.property_id == property_id)
    if availability:
        query = query.where(Unit.availability == availability)
    result = await db.execute(query.order_by(Unit.unit_number))
    return list(result.scalars().all())


async def count_units(db: AsyncSession, property_id: int) -> int:
    """Count the units of a property."""
    result = await db.execute(
        select(func.count(Unit.id)).where(Unit.property_id == property_id)
    )
    return result.scalar() or 0


async def get_unit_numbers(db: AsyncSession, property_id: int) -> dict[str, int]:
    """Map of normalized unit number to unit id for a property."""
    result = await db.execute(
        select(Unit.unit_number, Unit.id).where(Unit.property_id == property_id)
    )
    return {number.strip().lower(): unit_id for number, unit_id in result.all()}


async def create_units(
    db: AsyncSession, property_id: int, units: list[dict]
) -> list[Unit]:
    """Create several units on one property. Caller commits."""
    created = [
        Unit(property_id=property_id, availability=Availability.AVAILABLE, **data)
        for data in units
    ]
    db.add_all(created)
    await db.flush()
    return created


async def update_unit(db: AsyncSession, unit: Unit, **kwargs) -> Unit:
    """Update descriptive unit fields. Caller commits."""
    for key, value in kwargs.items():
        if hasattr(unit, key):
            setattr(unit, key, value)
    await db.flush()
    return unit


async def delete_unit(db: AsyncSession, unit: Unit) -> None:
    """Hard delete a unit."""
    await db.delete(unit)
    await db.flush()


async def get_unit_stats(db: AsyncSession, property_id: int) -> dict:
    """Availability counts and rent totals for a property's units."""
    occupied = Unit.availability == Availability.OCCUPIED
    result = await db.execute(
        select(
            func.count(Unit.id),
            func.sum(case((Unit.availability == Availability.AVAILABLE, 1), else_=0)),
            func.sum(case((occupied, 1), else_=0)),
            func.sum(case((Unit.availability == Availability.MAINTENANCE, 1), else_=0)),
            func.sum(case((occupied, Unit.rent), else_=0)),
            func.sum(Unit.rent),
        ).where(Unit.property_id == property_id)
    )
    total, available, occupied_count, maintenance, current, potential = result.one()
    return {
        "total": total or 0,
        "available": available or 0,
        "occupied": occupied_count or 0,
        "maintenance": maintenance or 0,
        "current_monthly_income": Decimal(str(current or 0)),
        "potential_monthly_income": Decimal(str(potential or 0)),
    }


# ----- Occupancy compare-and-set -----


def _target_filters(model: type[Property] | type[Unit], target_id: int) -> list:
    filters = [model.id == target_id]
    if model is Property:
        # Whole-property leasing only applies outside unit mode
        filters.append(Property.has_units == False)  # noqa: E712
    return filters


async def claim_target(
    db: AsyncSession,
    model: type[Property] | type[Unit],
    target_id: int,
    tenant_id: int,
    lease_start: date,
    lease_end: date,
) -> bool:
    """available -> occupied, recording the tenant back-reference."""
    result = await db.execute(
        update(model)
        .where(
            *_target_filters(model, target_id),
            model.availability == Availability.AVAILABLE,
        )
        .values(
            availability=Availability.OCCUPIED,
            active_tenant_id=tenant_id,
            lease_start=lease_start,
            lease_end=lease_end,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def release_target(
    db: AsyncSession,
    model: type[Property] | type[Unit],
    target_id: int,
    expected_tenant_id: int | None,
) -> bool:
    """occupied -> available, clearing the back-reference."""
    if expected_tenant_id is None:
        tenant_match = model.active_tenant_id.is_(None)
    else:
        tenant_match = model.active_tenant_id == expected_tenant_id
    result = await db.execute(
        update(model)
        .where(
            model.id == target_id,
            model.availability == Availability.OCCUPIED,
            tenant_match,
        )
        .values(
            availability=Availability.AVAILABLE,
            active_tenant_id=None,
            lease_start=None,
            lease_end=None,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def set_availability(
    db: AsyncSession,
    model: type[Property] | type[Unit],
    target_id: int,
    from_state: Availability,
    to_state: Availability,
) -> bool:
    """Administrative transition for a target with no bound tenant."""
    result = await db.execute(
        update(model)
        .where(
            model.id == target_id,
            model.availability == from_state,
            model.active_tenant_id.is_(None),
        )
        .values(availability=to_state)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def switch_to_unit_mode(db: AsyncSession, property_id: int) -> bool:
    """has_units false -> true for a property with no direct tenant."""
    result = await db.execute(
        update(Property)
        .where(
            Property.id == property_id,
            Property.has_units == False,  # noqa: E712
            Property.active_tenant_id.is_(None),
            Property.availability != Availability.OCCUPIED,
        )
        .values(has_units=True)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def switch_to_whole_mode(db: AsyncSession, property_id: int) -> bool:
    """has_units true -> false. Caller checks the property owns no units."""
    result = await db.execute(
        update(Property)
        .where(Property.id == property_id, Property.has_units == True)  # noqa: E712
        .values(has_units=False, availability=Availability.AVAILABLE)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
