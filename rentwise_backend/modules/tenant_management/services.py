"""Tenant management business logic services."""

from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import (
    InvalidStateTransitionError,
    NotFoundError,
    UnauthorizedError,
)
from ...core.logging import get_logger
from ..auth.permissions import (
    Actor,
    AdminActor,
    Capability,
    TenantActor,
    can_manage,
    is_staff,
    managing_agent_id,
    require_capability,
    require_management,
)
from ..property_management import occupancy
from ..property_management.models import Availability
from . import crud
from .models import Tenant, TenantStatus
from .schemas import MoveOutRequest, TenantStatsResponse, TenantUpdate

logger = get_logger(__name__)


async def _load_tenant(db: AsyncSession, tenant_id: int) -> Tenant:
    tenant = await crud.get_tenant_by_id(db, tenant_id)
    if not tenant:
        raise NotFoundError(f"Tenant with ID {tenant_id} not found")
    return tenant


def _require_tenant_admin(actor: Actor, tenant: Tenant, action: str) -> None:
    require_capability(actor, Capability.CREATE_TENANTS, action, "tenant")
    require_management(actor, tenant.agent_id, action, "tenant")


def _scope_agent_id(actor: Actor, action: str) -> int | None:
    """Agent filter for listings; None means unrestricted."""
    if isinstance(actor, AdminActor):
        return None
    if not is_staff(actor):
        raise UnauthorizedError(action, "tenants")
    agent_id = managing_agent_id(actor)
    if agent_id is None:
        raise UnauthorizedError(action, "tenants")
    return agent_id


async def get_tenant(db: AsyncSession, actor: Actor, tenant_id: int) -> Tenant:
    """Get a tenant the actor manages, or the actor's own tenant record."""
    tenant = await _load_tenant(db, tenant_id)
    if isinstance(actor, TenantActor) and tenant.user_id == actor.id:
        return tenant
    if not can_manage(actor, tenant.agent_id):
        raise UnauthorizedError("view", "tenant")
    return tenant


async def list_tenants(
    db: AsyncSession,
    actor: Actor,
    skip: int = 0,
    limit: int = 100,
    status: TenantStatus | None = None,
    property_id: int | None = None,
    unit_id: int | None = None,
) -> tuple[list[Tenant], int]:
    """Tenants on properties the actor manages."""
    agent_id = _scope_agent_id(actor, "list")
    return await crud.get_tenants(
        db,
        agent_id=agent_id,
        skip=skip,
        limit=limit,
        status=status,
        property_id=property_id,
        unit_id=unit_id,
    )


async def get_tenant_stats(db: AsyncSession, actor: Actor) -> TenantStatsResponse:
    """Tenant counts per status for the actor's portfolio."""
    agent_id = _scope_agent_id(actor, "view statistics of")
    counts = await crud.get_tenant_status_counts(db, agent_id=agent_id)
    return TenantStatsResponse(
        total=sum(counts.values()),
        active=counts[TenantStatus.ACTIVE],
        inactive=counts[TenantStatus.INACTIVE],
        terminated=counts[TenantStatus.TERMINATED],
    )


async def update_tenant(
    db: AsyncSession, actor: Actor, tenant_id: int, data: TenantUpdate
) -> Tenant:
    """Update contact, employment, references and notes."""
    tenant = await _load_tenant(db, tenant_id)
    _require_tenant_admin(actor, tenant, "update")

    fields = {}
    if data.emergency_contact is not None:
        fields["emergency_contact_name"] = data.emergency_contact.name
        fields["emergency_contact_phone"] = data.emergency_contact.phone
        fields["emergency_contact_relationship"] = data.emergency_contact.relationship
    if data.employment is not None:
        fields["employer_name"] = data.employment.employer_name
        fields["job_title"] = data.employment.job_title
        fields["monthly_income"] = data.employment.monthly_income
    if data.references is not None:
        fields["references"] = [r.model_dump() for r in data.references] or None
    if data.notes is not None:
        fields["notes"] = data.notes

    await crud.update_tenant(db, tenant, **fields)
    await db.commit()

    logger.info(
        "Tenant updated",
        extra={"tenant_id": tenant_id, "actor_id": actor.id, "fields": sorted(fields)},
    )
    return await _load_tenant(db, tenant_id)


async def retry_occupancy(db: AsyncSession, actor: Actor, tenant_id: int) -> Tenant:
    """Run the occupy step again for an existing tenant.

    Raises:
        InvalidStateTransitionError: If the target is no longer available
    """
    tenant = await _load_tenant(db, tenant_id)
    _require_tenant_admin(actor, tenant, "occupy for")

    await occupancy.occupy(
        db,
        actor,
        tenant.property_id,
        tenant_id=tenant.id,
        lease_start=tenant.lease_start_date,
        lease_end=tenant.lease_end_date,
        unit_id=tenant.unit_id,
    )
    return await _load_tenant(db, tenant_id)


async def move_out(
    db: AsyncSession, actor: Actor, tenant_id: int, data: MoveOutRequest
) -> Tenant:
    """Terminate a tenant and free its target.

    A tenant whose occupancy step never succeeded is terminated without
    touching the target.

    Raises:
        InvalidStateTransitionError: If the tenant is not active
    """
    tenant = await _load_tenant(db, tenant_id)
    _require_tenant_admin(actor, tenant, "move out")

    if tenant.status != TenantStatus.ACTIVE:
        raise InvalidStateTransitionError(
            f"Tenant {tenant_id}", tenant.status.value, TenantStatus.TERMINATED.value
        )

    move_out_date = data.move_out_date or date.today()
    _, target = await occupancy.resolve_target(db, tenant.property_id, tenant.unit_id)

    if target.availability == Availability.OCCUPIED and target.active_tenant_id == tenant.id:
        await occupancy.vacate(
            db,
            actor,
            tenant.property_id,
            unit_id=tenant.unit_id,
            move_out_date=move_out_date,
            reason=data.reason,
        )
    else:
        await crud.terminate_tenant(
            db,
            tenant.id,
            terminated_by_id=actor.id,
            move_out_date=move_out_date,
            reason=data.reason,
        )
        await db.commit()

    tenant = await _load_tenant(db, tenant_id)
    if data.deposit_status is not None:
        await crud.update_tenant(db, tenant, deposit_status=data.deposit_status)
        await db.commit()

    logger.info(
        "Tenant moved out",
        extra={
            "tenant_id": tenant_id,
            "property_id": tenant.property_id,
            "unit_id": tenant.unit_id,
            "actor_id": actor.id,
        },
    )
    return await _load_tenant(db, tenant_id)
