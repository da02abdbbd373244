"""CRUD operations for tenant management module."""

from datetime import date

from sqlalchemy import and_, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..property_management.models import Availability, Property, Unit
from .models import Tenant, TenantStatus

# ----- Tenant CRUD -----


async def get_tenant_by_id(db: AsyncSession, tenant_id: int) -> Tenant | None:
    """Get a tenant by ID with its occupant loaded."""
    result = await db.execute(
        select(Tenant)
        .where(Tenant.id == tenant_id)
        .options(selectinload(Tenant.user))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_active_tenant_for_target(
    db: AsyncSession, property_id: int, unit_id: int | None
) -> Tenant | None:
    """Get the active tenant bound to a property (``unit_id`` None) or a unit."""
    filters = [
        Tenant.property_id == property_id,
        Tenant.status == TenantStatus.ACTIVE,
    ]
    if unit_id is None:
        filters.append(Tenant.unit_id.is_(None))
    else:
        filters.append(Tenant.unit_id == unit_id)
    result = await db.execute(
        select(Tenant).where(and_(*filters)).order_by(Tenant.id).limit(1)
    )
    return result.scalar_one_or_none()


async def count_active_tenants_for_property(db: AsyncSession, property_id: int) -> int:
    """Count active tenants on a property or any of its units."""
    result = await db.execute(
        select(func.count(Tenant.id)).where(
            Tenant.property_id == property_id,
            Tenant.status == TenantStatus.ACTIVE,
        )
    )
    return result.scalar() or 0


async def get_tenants(
    db: AsyncSession,
    agent_id: int | None = None,
    skip: int = 0,
    limit: int = 100,
    status: TenantStatus | None = None,
    property_id: int | None = None,
    unit_id: int | None = None,
) -> tuple[list[Tenant], int]:
    """Get tenants with filtering and pagination.

    ``agent_id`` None means unrestricted.

    Returns:
        Tuple of (list of tenants, total count)
    """
    filters = []
    if agent_id is not None:
        filters.append(Tenant.agent_id == agent_id)
    if status:
        filters.append(Tenant.status == status)
    if property_id is not None:
        filters.append(Tenant.property_id == property_id)
    if unit_id is not None:
        filters.append(Tenant.unit_id == unit_id)

    count_query = select(func.count(Tenant.id))
    if filters:
        count_query = count_query.where(and_(*filters))
    total = (await db.execute(count_query)).scalar() or 0

    query = select(Tenant).options(selectinload(Tenant.user))
    if filters:
        query = query.where(and_(*filters))
    query = query.order_by(Tenant.created_at.desc(), Tenant.id.desc())
    result = await db.execute(query.offset(skip).limit(limit))
    return list(result.scalars().all()), total


async def get_tenant_status_counts(
    db: AsyncSession, agent_id: int | None = None
) -> dict[TenantStatus, int]:
    """Count tenants per status."""
    query = select(Tenant.status, func.count(Tenant.id)).group_by(Tenant.status)
    if agent_id is not None:
        query = query.where(Tenant.agent_id == agent_id)
    result = await db.execute(query)
    counts = {s: 0 for s in TenantStatus}
    for status, count in result.all():
        counts[TenantStatus(status)] = count
    return counts


async def reserve_target(
    db: AsyncSession, property_id: int, unit_id: int | None
) -> bool:
    """Lock a free target ahead of inserting its tenant. Caller commits.

    Touches the property (``unit_id`` None) or unit row only while it is
    available and has no active tenant bound. The row lock is held until the
    transaction ends, so two reservations of one target run one after the
    other and the second sees the tenant the first committed.

    Returns:
        True if the target was free and is now locked
    """
    bound = select(Tenant.id).where(
        Tenant.property_id == property_id,
        Tenant.status == TenantStatus.ACTIVE,
        Tenant.unit_id.is_(None) if unit_id is None else Tenant.unit_id == unit_id,
    )
    if unit_id is None:
        model, target_id = Property, property_id
    else:
        model, target_id = Unit, unit_id
    filters = [
        model.id == target_id,
        model.availability == Availability.AVAILABLE,
        ~bound.exists(),
    ]
    if model is Property:
        filters.append(Property.has_units == False)  # noqa: E712
    result = await db.execute(
        update(model)
        .where(*filters)
        .values(updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def create_tenant(db: AsyncSession, **kwargs) -> Tenant:
    """Create a new tenant. Caller commits."""
    tenant = Tenant(status=TenantStatus.ACTIVE, **kwargs)
    db.add(tenant)
    await db.flush()
    return tenant


async def update_tenant(db: AsyncSession, tenant: Tenant, **kwargs) -> Tenant:
    """Update tenant fields. Caller commits."""
    for key, value in kwargs.items():
        if hasattr(tenant, key):
            setattr(tenant, key, value)
    await db.flush()
    return tenant


async def terminate_tenant(
    db: AsyncSession,
    tenant_id: int,
    terminated_by_id: int | None,
    move_out_date: date,
    reason: str | None = None,
) -> bool:
    """Mark an active tenant terminated. Caller commits.

    Returns:
        True if an active tenant was terminated
    """
    result = await db.execute(
        update(Tenant)
        .where(Tenant.id == tenant_id, Tenant.status == TenantStatus.ACTIVE)
        .values(
            status=TenantStatus.TERMINATED,
            move_out_date=move_out_date,
            termination_reason=reason,
            terminated_by_id=terminated_by_id,
        )
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1
