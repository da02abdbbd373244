"""Property management business logic services.

Availability never changes here; structural and occupancy transitions are
delegated to ``occupancy``.
"""

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import (
    BusinessLogicError,
    InvalidStateTransitionError,
    NotFoundError,
    RentWiseException,
    UnauthorizedError,
    ValidationError,
)
from ...core.logging import get_logger
from ..auth import crud as auth_crud
from ..auth.models import UserRole
from ..auth.permissions import (
    Actor,
    AdminActor,
    Capability,
    can_manage,
    is_staff,
    managing_agent_id,
    require_capability,
    require_management,
)
from ..tenant_management import crud as tenant_crud
from . import crud, occupancy
from .models import Availability, Property, Unit
from .schemas import (
    PropertyCreate,
    PropertyUpdate,
    UnitBulkCreate,
    UnitStatsResponse,
    UnitUpdate,
)

logger = get_logger(__name__)


def _require_manage(actor: Actor, property_obj: Property, action: str) -> None:
    require_capability(actor, Capability.MANAGE_PROPERTIES, action, "property")
    require_management(actor, property_obj.agent_id, action, "property")


async def _load_for_view(
    db: AsyncSession, actor: Actor, property_id: int, include_units: bool = False
) -> Property:
    property_obj = await crud.get_property_by_id(
        db, property_id, include_units=include_units
    )
    if not property_obj:
        raise NotFoundError(f"Property with ID {property_id} not found")
    if not can_manage(actor, property_obj.agent_id):
        raise UnauthorizedError("view", "property")
    return property_obj


async def _resolve_owner(
    db: AsyncSession, actor: Actor, requested_agent_id: int | None
) -> int:
    """Work out which agent owns a new property."""
    if isinstance(actor, AdminActor):
        if requested_agent_id is None:
            raise ValidationError("agent_id is required", field="agent_id")
        agent = await auth_crud.get_user_by_id(db, requested_agent_id)
        if not agent or agent.role not in (UserRole.AGENT, UserRole.LANDLORD):
            raise NotFoundError(f"Agent with ID {requested_agent_id} not found")
        return agent.id

    agent_id = managing_agent_id(actor)
    if agent_id is None:
        raise UnauthorizedError("create", "property")
    return agent_id


# ----- Properties -----


async def create_property(
    db: AsyncSession, actor: Actor, data: PropertyCreate
) -> Property:
    """Create a new property owned by the actor's agent.

    Raises:
        UnauthorizedError: If the actor cannot manage properties
    """
    require_capability(actor, Capability.MANAGE_PROPERTIES, "create", "property")
    agent_id = await _resolve_owner(db, actor, data.agent_id)

    fields = data.model_dump(exclude={"agent_id"})
    property_obj = await crud.create_property(
        db, agent_id=agent_id, created_by_id=actor.id, **fields
    )
    await db.commit()
    await db.refresh(property_obj)

    logger.info(
        "Property created",
        extra={
            "property_id": property_obj.id,
            "agent_id": agent_id,
            "actor_id": actor.id,
            "has_units": property_obj.has_units,
        },
    )
    return property_obj


async def list_properties(
    db: AsyncSession,
    actor: Actor,
    skip: int = 0,
    limit: int = 100,
    availability: Availability | None = None,
    has_units: bool | None = None,
    search: str | None = None,
) -> tuple[list[Property], int]:
    """Properties the actor manages."""
    if not is_staff(actor):
        raise UnauthorizedError("list", "properties")

    agent_id = None if isinstance(actor, AdminActor) else managing_agent_id(actor)
    if agent_id is None and not isinstance(actor, AdminActor):
        return [], 0

    return await crud.get_properties(
        db,
        agent_id=agent_id,
        skip=skip,
        limit=limit,
        availability=availability,
        has_units=has_units,
        search=search,
    )


async def get_property(
    db: AsyncSession, actor: Actor, property_id: int, include_units: bool = True
) -> Property:
    """Get a property the actor manages."""
    return await _load_for_view(db, actor, property_id, include_units=include_units)


async def update_property(
    db: AsyncSession, actor: Actor, property_id: int, data: PropertyUpdate
) -> Property:
    """Update descriptive fields and apply a ``has_units`` change if requested.

    Both go out in one commit; a rejected ``has_units`` change leaves the
    other fields untouched too.

    Raises:
        NotFoundError: If property not found
        ValidationError: If reverting unit mode while units remain
        InvalidStateTransitionError: If enabling units while a tenant is bound
    """
    property_obj = await occupancy.load_property(db, property_id)
    _require_manage(actor, property_obj, "update")

    fields = data.model_dump(exclude_unset=True, exclude_none=True)
    has_units = fields.pop("has_units", None)

    restructured = False
    try:
        if fields:
            await crud.update_property(db, property_obj, **fields)
        if has_units is True:
            restructured = await occupancy.stage_unit_mode(db, property_obj)
        elif has_units is False:
            restructured = await occupancy.stage_whole_mode(db, property_obj)
    except RentWiseException:
        await db.rollback()
        raise

    if not fields and not restructured:
        return property_obj

    await db.commit()
    await db.refresh(property_obj)
    logger.info(
        "Property updated",
        extra={
            "property_id": property_id,
            "actor_id": actor.id,
            "fields": sorted(fields),
            "has_units": property_obj.has_units if restructured else None,
        },
    )
    return property_obj


async def delete_property(db: AsyncSession, actor: Actor, property_id: int) -> None:
    """Soft delete a property with no active tenants.

    Raises:
        BusinessLogicError: If an active tenant is bound to the property or its units
    """
    property_obj = await occupancy.load_property(db, property_id)
    _require_manage(actor, property_obj, "delete")

    active = await tenant_crud.count_active_tenants_for_property(db, property_id)
    if active:
        raise BusinessLogicError(
            f"Cannot delete property with {active} active tenant(s). "
            "Move them out first.",
            details={"active_tenants": active},
        )

    await crud.soft_delete_property(db, property_obj)
    await db.commit()
    logger.info(
        "Property deleted", extra={"property_id": property_id, "actor_id": actor.id}
    )


# ----- Units -----


def _normalize_number(unit_number: str) -> str:
    return unit_number.strip().lower()


async def create_units(
    db: AsyncSession, actor: Actor, property_id: int, data: UnitBulkCreate
) -> list[Unit]:
    """Create a batch of units, switching the property to unit mode if needed.

    The batch is all-or-nothing: any duplicate number rejects every unit.

    Raises:
        ValidationError: If a unit number repeats within the batch or the property
        InvalidStateTransitionError: If unit mode cannot be enabled
    """
    property_obj = await occupancy.load_property(db, property_id)
    _require_manage(actor, property_obj, "add units to")

    seen: set[str] = set()
    repeated: list[str] = []
    for unit in data.units:
        key = _normalize_number(unit.unit_number)
        if key in seen:
            repeated.append(unit.unit_number)
        seen.add(key)
    if repeated:
        raise ValidationError(
            f"Duplicate unit numbers in request: {', '.join(repeated)}",
            field="unit_number",
        )

    existing = await crud.get_unit_numbers(db, property_id)
    clashes = [u.unit_number for u in data.units if _normalize_number(u.unit_number) in existing]
    if clashes:
        raise ValidationError(
            f"Unit numbers already exist on this property: {', '.join(clashes)}",
            field="unit_number",
        )

    try:
        switched = await occupancy.stage_unit_mode(db, property_obj)
        units = await crud.create_units(
            db, property_id, [unit.model_dump() for unit in data.units]
        )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ValidationError(
            "Unit number already exists on this property", field="unit_number"
        ) from e
    except RentWiseException:
        await db.rollback()
        raise

    if switched:
        logger.info(
            "Units enabled", extra={"property_id": property_id, "actor_id": actor.id}
        )

    for unit in units:
        await db.refresh(unit)

    logger.info(
        "Units created",
        extra={"property_id": property_id, "count": len(units), "actor_id": actor.id},
    )
    return units


async def list_units(
    db: AsyncSession,
    actor: Actor,
    property_id: int,
    availability: Availability | None = None,
) -> list[Unit]:
    """Units of a property the actor manages."""
    await _load_for_view(db, actor, property_id)
    return await crud.get_units(db, property_id, availability=availability)


async def get_unit_stats(
    db: AsyncSession, actor: Actor, property_id: int
) -> UnitStatsResponse:
    """Availability counts, occupancy rate and income for a property's units."""
    await _load_for_view(db, actor, property_id)
    stats = await crud.get_unit_stats(db, property_id)

    total = stats["total"]
    rate = round(stats["occupied"] / total * 100, 2) if total else 0.0
    return UnitStatsResponse(
        property_id=property_id,
        total_units=total,
        available_units=stats["available"],
        occupied_units=stats["occupied"],
        maintenance_units=stats["maintenance"],
        occupancy_rate=rate,
        current_monthly_income=stats["current_monthly_income"],
        potential_monthly_income=stats["potential_monthly_income"],
    )


async def _load_unit(db: AsyncSession, property_id: int, unit_id: int) -> Unit:
    unit = await crud.get_unit_by_id(db, unit_id, property_id=property_id)
    if not unit:
        raise NotFoundError(f"Unit with ID {unit_id} not found")
    return unit


async def update_unit(
    db: AsyncSession, actor: Actor, property_id: int, unit_id: int, data: UnitUpdate
) -> Unit:
    """Update descriptive unit fields.

    Raises:
        ValidationError: If the new unit number is taken on this property
    """
    property_obj = await occupancy.load_property(db, property_id)
    _require_manage(actor, property_obj, "update units of")
    unit = await _load_unit(db, property_id, unit_id)

    fields = data.model_dump(exclude_unset=True, exclude_none=True)
    if "unit_number" in fields:
        existing = await crud.get_unit_numbers(db, property_id)
        owner = existing.get(_normalize_number(fields["unit_number"]))
        if owner is not None and owner != unit.id:
            raise ValidationError(
                f"Unit number '{fields['unit_number']}' already exists on this property",
                field="unit_number",
            )

    await crud.update_unit(db, unit, **fields)
    await db.commit()
    await db.refresh(unit)

    logger.info(
        "Unit updated",
        extra={"property_id": property_id, "unit_id": unit_id, "actor_id": actor.id},
    )
    return unit


async def delete_unit(
    db: AsyncSession, actor: Actor, property_id: int, unit_id: int
) -> None:
    """Delete a unit that is not occupied.

    Raises:
        InvalidStateTransitionError: If the unit is occupied
        BusinessLogicError: If an active tenant still references the unit
    """
    property_obj = await occupancy.load_property(db, property_id)
    _require_manage(actor, property_obj, "delete units of")
    unit = await _load_unit(db, property_id, unit_id)

    if unit.availability == Availability.OCCUPIED:
        raise InvalidStateTransitionError(
            occupancy.target_label(unit), unit.availability.value, "deleted"
        )
    bound = await tenant_crud.get_active_tenant_for_target(db, property_id, unit_id)
    if bound:
        raise BusinessLogicError(
            "Cannot delete a unit with an active tenant",
            details={"active_tenant_id": bound.id},
        )

    await crud.delete_unit(db, unit)
    await db.commit()
    logger.info(
        "Unit deleted",
        extra={"property_id": property_id, "unit_id": unit_id, "actor_id": actor.id},
    )
