"""Occupancy state machine for properties and units.

States: available, occupied, maintenance. A property with ``has_units``
false is itself the leasable target; once in unit mode every unit is.

Every transition checks its precondition on the loaded row first, so the
caller gets a precise ``InvalidStateTransitionError``, and then re-checks it
inside a single conditional UPDATE. The UPDATE is the authority: when it
matches no row, another request changed the target in between and nothing
has been written.
"""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import (
    InvalidStateTransitionError,
    NotFoundError,
    TargetUnavailableError,
    ValidationError,
)
from ...core.logging import get_logger
from ..auth.permissions import (
    Actor,
    Capability,
    require_capability,
    require_management,
)
from ..tenant_management import crud as tenant_crud
from ..tenant_management.models import TenantStatus
from . import crud
from .models import Availability, Property, Unit

logger = get_logger(__name__)


def target_label(target: Property | Unit) -> str:
    """Human readable name used in error messages."""
    if isinstance(target, Unit):
        return f"Unit {target.unit_number}"
    return f"Property {target.id}"


async def load_property(db: AsyncSession, property_id: int) -> Property:
    property_obj = await crud.get_property_by_id(db, property_id)
    if not property_obj:
        raise NotFoundError(f"Property with ID {property_id} not found")
    return property_obj


async def resolve_target(
    db: AsyncSession, property_id: int, unit_id: int | None
) -> tuple[Property, Property | Unit]:
    """Load the property and the leasable target inside it.

    Raises:
        NotFoundError: If the property or unit does not exist
        ValidationError: If ``unit_id`` does not match the property's mode
    """
    property_obj = await load_property(db, property_id)

    if unit_id is None:
        if property_obj.has_units:
            raise ValidationError(
                "Property is divided into units; a unit must be specified",
                field="unit_id",
            )
        return property_obj, property_obj

    if not property_obj.has_units:
        raise ValidationError(
            "Property is leased as a whole and has no units", field="unit_id"
        )
    unit = await crud.get_unit_by_id(db, unit_id, property_id=property_id)
    if not unit:
        raise NotFoundError(f"Unit with ID {unit_id} not found")
    return property_obj, unit


def _require(actor: Actor, capability: Capability, property_obj: Property, action: str):
    require_capability(actor, capability, action, "property")
    require_management(actor, property_obj.agent_id, action, "property")


def _unit_id_of(target: Property | Unit) -> int | None:
    return target.id if isinstance(target, Unit) else None


# ----- available -> occupied -----


async def occupy(
    db: AsyncSession,
    actor: Actor,
    property_id: int,
    tenant_id: int,
    lease_start: date,
    lease_end: date,
    unit_id: int | None = None,
) -> Property | Unit:
    """Mark a target occupied by ``tenant_id``.

    Raises:
        InvalidStateTransitionError: If the target is not available
        TargetUnavailableError: If a concurrent request claimed it first
    """
    property_obj, target = await resolve_target(db, property_id, unit_id)
    _require(actor, Capability.CREATE_TENANTS, property_obj, "occupy")
    label = target_label(target)

    if target.availability != Availability.AVAILABLE:
        raise InvalidStateTransitionError(
            label, target.availability.value, Availability.OCCUPIED.value
        )

    if lease_end <= lease_start:
        raise ValidationError("Lease end must be after lease start", field="lease_end")

    tenant = await tenant_crud.get_tenant_by_id(db, tenant_id)
    if not tenant:
        raise NotFoundError(f"Tenant with ID {tenant_id} not found")
    if tenant.status != TenantStatus.ACTIVE:
        raise ValidationError(
            f"Tenant is {tenant.status.value}, only active tenants can occupy",
            field="tenant_id",
        )
    if tenant.property_id != property_obj.id or tenant.unit_id != unit_id:
        raise ValidationError(
            f"Tenant {tenant_id} is not leasing {label}", field="tenant_id"
        )

    claimed = await crud.claim_target(
        db, type(target), target.id, tenant_id, lease_start, lease_end
    )
    if not claimed:
        await db.rollback()
        logger.warning(
            "Occupy lost to concurrent transition",
            extra={"property_id": property_id, "unit_id": unit_id, "tenant_id": tenant_id},
        )
        raise TargetUnavailableError(label)

    await db.commit()
    await db.refresh(target)

    logger.info(
        "Target occupied",
        extra={
            "property_id": property_id,
            "unit_id": unit_id,
            "tenant_id": tenant_id,
            "actor_id": actor.id,
        },
    )
    return target


# ----- occupied -> available -----


async def vacate(
    db: AsyncSession,
    actor: Actor,
    property_id: int,
    unit_id: int | None = None,
    move_out_date: date | None = None,
    reason: str | None = None,
) -> Property | Unit:
    """Free an occupied target and terminate its active tenant.

    Raises:
        InvalidStateTransitionError: If the target is not occupied
    """
    property_obj, target = await resolve_target(db, property_id, unit_id)
    _require(actor, Capability.CREATE_TENANTS, property_obj, "vacate")
    label = target_label(target)

    if target.availability != Availability.OCCUPIED:
        raise InvalidStateTransitionError(
            label, target.availability.value, Availability.AVAILABLE.value
        )

    tenant_id = target.active_tenant_id
    released = await crud.release_target(db, type(target), target.id, tenant_id)
    if not released:
        await db.rollback()
        raise InvalidStateTransitionError(
            label,
            Availability.OCCUPIED.value,
            Availability.AVAILABLE.value,
            details={"reason": "changed by a concurrent request"},
        )

    if tenant_id is not None:
        await tenant_crud.terminate_tenant(
            db,
            tenant_id,
            terminated_by_id=actor.id,
            move_out_date=move_out_date or date.today(),
            reason=reason,
        )

    await db.commit()
    await db.refresh(target)

    logger.info(
        "Target vacated",
        extra={
            "property_id": property_id,
            "unit_id": unit_id,
            "tenant_id": tenant_id,
            "actor_id": actor.id,
        },
    )
    return target


# ----- maintenance -----


async def _ensure_no_bound_tenant(
    db: AsyncSession, property_obj: Property, target: Property | Unit, requested: str
) -> None:
    label = target_label(target)
    if target.availability == Availability.OCCUPIED or target.active_tenant_id:
        raise InvalidStateTransitionError(label, target.availability.value, requested)
    bound = await tenant_crud.get_active_tenant_for_target(
        db, property_obj.id, _unit_id_of(target)
    )
    if bound:
        raise InvalidStateTransitionError(
            label,
            target.availability.value,
            requested,
            details={"active_tenant_id": bound.id},
        )


async def start_maintenance(
    db: AsyncSession, actor: Actor, property_id: int, unit_id: int | None = None
) -> Property | Unit:
    """available -> maintenance. A target already in maintenance is left as is."""
    property_obj, target = await resolve_target(db, property_id, unit_id)
    _require(actor, Capability.MANAGE_PROPERTIES, property_obj, "set maintenance on")

    if target.availability == Availability.MAINTENANCE:
        return target

    await _ensure_no_bound_tenant(
        db, property_obj, target, Availability.MAINTENANCE.value
    )

    label = target_label(target)
    changed = await crud.set_availability(
        db, type(target), target.id, Availability.AVAILABLE, Availability.MAINTENANCE
    )
    if not changed:
        await db.rollback()
        raise InvalidStateTransitionError(
            label,
            Availability.AVAILABLE.value,
            Availability.MAINTENANCE.value,
            details={"reason": "changed by a concurrent request"},
        )

    await db.commit()
    await db.refresh(target)
    logger.info(
        "Maintenance started",
        extra={"property_id": property_id, "unit_id": unit_id, "actor_id": actor.id},
    )
    return target


async def complete_maintenance(
    db: AsyncSession, actor: Actor, property_id: int, unit_id: int | None = None
) -> Property | Unit:
    """maintenance -> available."""
    property_obj, target = await resolve_target(db, property_id, unit_id)
    _require(actor, Capability.MANAGE_PROPERTIES, property_obj, "complete maintenance on")
    label = target_label(target)

    if target.availability != Availability.MAINTENANCE:
        raise InvalidStateTransitionError(
            label, target.availability.value, Availability.AVAILABLE.value
        )
    await _ensure_no_bound_tenant(
        db, property_obj, target, Availability.AVAILABLE.value
    )

    changed = await crud.set_availability(
        db, type(target), target.id, Availability.MAINTENANCE, Availability.AVAILABLE
    )
    if not changed:
        await db.rollback()
        raise InvalidStateTransitionError(
            label,
            Availability.MAINTENANCE.value,
            Availability.AVAILABLE.value,
            details={"reason": "changed by a concurrent request"},
        )

    await db.commit()
    await db.refresh(target)
    logger.info(
        "Maintenance completed",
        extra={"property_id": property_id, "unit_id": unit_id, "actor_id": actor.id},
    )
    return target


# ----- Structural transitions -----


async def stage_unit_mode(db: AsyncSession, property_obj: Property) -> bool:
    """Check and apply whole -> unit mode without committing.

    Returns False when the property is already in unit mode. The caller
    commits, or rolls back on error, so the switch can share a transaction
    with other writes.

    Raises:
        InvalidStateTransitionError: If a tenant is bound to the property itself
    """
    if property_obj.has_units:
        return False

    property_id = property_obj.id
    label = target_label(property_obj)
    state = property_obj.availability.value
    if (
        property_obj.availability == Availability.OCCUPIED
        or property_obj.active_tenant_id is not None
    ):
        raise InvalidStateTransitionError(label, state, "unit mode")
    bound = await tenant_crud.get_active_tenant_for_target(db, property_id, None)
    if bound:
        raise InvalidStateTransitionError(
            label, state, "unit mode", details={"active_tenant_id": bound.id}
        )

    if await crud.switch_to_unit_mode(db, property_id):
        return True

    await db.refresh(property_obj)
    if property_obj.has_units:
        # A concurrent call got there first
        return False
    raise InvalidStateTransitionError(label, state, "unit mode")


async def stage_whole_mode(db: AsyncSession, property_obj: Property) -> bool:
    """Check and apply unit -> whole mode without committing.

    Returns False when the property is already leased as a whole.

    Raises:
        ValidationError: If the property still owns units or has no rent
    """
    if not property_obj.has_units:
        return False

    if await crud.count_units(db, property_obj.id) > 0:
        raise ValidationError(
            "Property still has units; delete them first", field="has_units"
        )
    if property_obj.rent is None:
        raise ValidationError(
            "Rent is required for a property leased as a whole", field="rent"
        )
    return await crud.switch_to_whole_mode(db, property_obj.id)


async def enable_units(db: AsyncSession, actor: Actor, property_id: int) -> Property:
    """Convert a whole-leased property into a unit-bearing one.

    Idempotent: a property already in unit mode is returned unchanged.

    Raises:
        InvalidStateTransitionError: If a tenant is bound to the property itself
    """
    property_obj = await load_property(db, property_id)
    _require(actor, Capability.MANAGE_PROPERTIES, property_obj, "restructure")

    try:
        switched = await stage_unit_mode(db, property_obj)
    except InvalidStateTransitionError:
        await db.rollback()
        raise
    if not switched:
        logger.debug("Property already in unit mode", extra={"property_id": property_id})
        return property_obj

    await db.commit()
    await db.refresh(property_obj)
    logger.info(
        "Units enabled", extra={"property_id": property_id, "actor_id": actor.id}
    )
    return property_obj


async def disable_units(db: AsyncSession, actor: Actor, property_id: int) -> Property:
    """Return a unit-bearing property with no units to whole-property leasing.

    Raises:
        ValidationError: If the property still owns units
    """
    property_obj = await load_property(db, property_id)
    _require(actor, Capability.MANAGE_PROPERTIES, property_obj, "restructure")

    if not await stage_whole_mode(db, property_obj):
        return property_obj

    await db.commit()
    await db.refresh(property_obj)
    logger.info(
        "Units disabled", extra={"property_id": property_id, "actor_id": actor.id}
    )
    return property_obj
