"""Tenant provisioning workflow.

Steps, in order:

1. authorize the actor (``canCreateTenants`` plus management of the property)
2. resolve the target and check it is available
3. resolve the occupant, creating an account for a new one
4. lock the target, re-check it is free, create the Tenant record and commit
5. occupy the target

Step 4 is the commit point. If step 5 fails afterwards the Tenant is kept
and the result carries ``OCCUPANCY_FAILED_WARNING``; the occupancy step can
be retried alone through ``services.retry_occupancy``. A user account created
in step 3 is committed on its own and is not removed if step 4 fails.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.exceptions import (
    NotFoundError,
    RentWiseException,
    ResourceAlreadyExistsError,
    TargetUnavailableError,
    ValidationError,
)
from ...core.logging import get_logger
from ...core.utils import add_months, generate_temporary_password
from ..auth import crud as auth_crud
from ..auth.models import User, UserRole
from ..auth.permissions import (
    Actor,
    Capability,
    require_capability,
    require_management,
)
from ..property_management import occupancy
from ..property_management.models import Availability, Property, Unit
from . import crud
from .models import Tenant
from .schemas import NewOccupant, TenantProvisionRequest

logger = get_logger(__name__)

OCCUPANCY_FAILED_WARNING = "unit occupation failed - manual follow-up required"


@dataclass
class ProvisionedTenant:
    """Outcome of a provisioning run."""

    tenant: Tenant
    warnings: list[str] = field(default_factory=list)
    temporary_password: str | None = None


def lease_window(request: TenantProvisionRequest) -> tuple[date, date]:
    """Lease start and end, deriving the end from a duration when needed."""
    start = request.lease_start_date
    if request.lease_end_date is not None:
        return start, request.lease_end_date
    return start, add_months(start, request.lease_duration_months)


async def _check_target_free(
    db: AsyncSession, property_obj: Property, target: Property | Unit
) -> None:
    label = occupancy.target_label(target)
    if target.availability != Availability.AVAILABLE:
        raise TargetUnavailableError(
            label, details={"availability": target.availability.value}
        )
    unit_id = target.id if isinstance(target, Unit) else None
    bound = await crud.get_active_tenant_for_target(db, property_obj.id, unit_id)
    if bound:
        raise TargetUnavailableError(label, details={"active_tenant_id": bound.id})


async def _create_occupant(
    db: AsyncSession, actor: Actor, agent_id: int, data: NewOccupant
) -> tuple[User, str]:
    if await auth_crud.get_user_by_email(db, data.email):
        raise ResourceAlreadyExistsError("User", data.email)

    temporary_password = generate_temporary_password(
        settings.temporary_password_length
    )
    try:
        user = await auth_crud.create_user(
            db,
            email=data.email,
            password=temporary_password,
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            id_number=data.id_number,
            role=UserRole.TENANT,
            must_change_password=True,
            created_by_id=actor.id,
            parent_user_id=agent_id,
        )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ResourceAlreadyExistsError("User", data.email) from e

    logger.info(
        "Occupant account created",
        extra={"user_id": user.id, "actor_id": actor.id, "agent_id": agent_id},
    )
    return user, temporary_password


async def _convert_seeker(db: AsyncSession, user_id: int, agent_id: int) -> User:
    user = await auth_crud.get_user_by_id(db, user_id)
    if not user:
        raise NotFoundError(f"User with ID {user_id} not found")
    if user.role != UserRole.SEEKER:
        raise ValidationError(
            f"User has role '{UserRole(user.role).value}'; only seekers can become tenants",
            field="user_id",
        )
    # Flushed together with the Tenant row in step 4
    await auth_crud.update_user(db, user, role=UserRole.TENANT, parent_user_id=agent_id)
    return user


async def provision_tenant(
    db: AsyncSession, actor: Actor, request: TenantProvisionRequest
) -> ProvisionedTenant:
    """Create a tenant and occupy its target.

    Raises:
        UnauthorizedError: If the actor may not create tenants on the property
        NotFoundError: If the property, unit or user does not exist
        TargetUnavailableError: If the target is not available
        ValidationError: If the occupant or lease terms are invalid
    """
    # 1. Authorize
    require_capability(actor, Capability.CREATE_TENANTS, "create", "tenant")

    # 2. Resolve target
    property_obj, target = await occupancy.resolve_target(
        db, request.property_id, request.unit_id
    )
    require_management(actor, property_obj.agent_id, "create tenants on", "property")
    await _check_target_free(db, property_obj, target)

    lease_start, lease_end = lease_window(request)
    rent = request.rent_amount if request.rent_amount is not None else target.rent
    if rent is None:
        raise ValidationError("rent_amount is required", field="rent_amount")
    if request.deposit_amount is not None:
        deposit = request.deposit_amount
    else:
        deposit = target.deposit if target.deposit is not None else Decimal("0")

    agent_id = property_obj.agent_id
    property_id = property_obj.id
    unit_id = request.unit_id
    label = occupancy.target_label(target)

    # 3. Resolve occupant
    temporary_password = None
    if request.user_data is not None:
        occupant, temporary_password = await _create_occupant(
            db, actor, agent_id, request.user_data
        )
    else:
        occupant = await _convert_seeker(db, request.user_id, agent_id)

    # 4. Tenant record, inserted under the target's row lock
    if not await crud.reserve_target(db, property_id, unit_id):
        await db.rollback()
        logger.warning(
            "Target taken before tenant creation",
            extra={"property_id": property_id, "unit_id": unit_id, "actor_id": actor.id},
        )
        raise TargetUnavailableError(label)

    employment = request.employment
    tenant = await crud.create_tenant(
        db,
        user_id=occupant.id,
        property_id=property_id,
        unit_id=unit_id,
        agent_id=agent_id,
        created_by_id=actor.id,
        lease_start_date=lease_start,
        lease_end_date=lease_end,
        move_in_date=request.move_in_date or lease_start,
        rent_amount=rent,
        deposit_amount=deposit,
        rent_due_day=request.rent_due_day,
        notice_period_days=request.notice_period_days,
        emergency_contact_name=request.emergency_contact.name,
        emergency_contact_phone=request.emergency_contact.phone,
        emergency_contact_relationship=request.emergency_contact.relationship,
        employer_name=employment.employer_name if employment else None,
        job_title=employment.job_title if employment else None,
        monthly_income=employment.monthly_income if employment else None,
        references=[r.model_dump() for r in request.references] or None,
        notes=request.notes,
    )
    await db.commit()
    tenant_id = tenant.id

    logger.info(
        "Tenant created",
        extra={
            "tenant_id": tenant_id,
            "user_id": occupant.id,
            "property_id": property_id,
            "unit_id": unit_id,
            "actor_id": actor.id,
        },
    )

    # 5. Occupy
    warnings: list[str] = []
    try:
        await occupancy.occupy(
            db,
            actor,
            property_id,
            tenant_id=tenant_id,
            lease_start=lease_start,
            lease_end=lease_end,
            unit_id=unit_id,
        )
    except (RentWiseException, SQLAlchemyError) as e:
        await db.rollback()
        logger.warning(
            "Occupancy failed after tenant creation",
            extra={
                "tenant_id": tenant_id,
                "property_id": property_id,
                "unit_id": unit_id,
                "error": str(e),
            },
        )
        warnings.append(OCCUPANCY_FAILED_WARNING)

    tenant = await crud.get_tenant_by_id(db, tenant_id)
    return ProvisionedTenant(
        tenant=tenant, warnings=warnings, temporary_password=temporary_password
    )
