"""Authorization resolver.

Callers pass the acting principal explicitly; nothing here reads request
state. A stored ``User`` row is turned into one of the ``Actor`` variants
exactly once by ``actor_from_user`` and every decision afterwards dispatches
on the variant type.
"""

import enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ...core.exceptions import UnauthorizedError
from .models import User, UserRole


class Capability(str, enum.Enum):
    """Named permission flags understood by the resolver."""

    CREATE_TENANTS = "canCreateTenants"
    MANAGE_PROPERTIES = "canManageProperties"
    HANDLE_PAYMENTS = "canHandlePayments"
    VIEW_REPORTS = "canViewReports"


class EmployeePermissions(BaseModel):
    """Per-employee capability record."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    can_create_tenants: bool = Field(default=False, alias="canCreateTenants")
    can_manage_properties: bool = Field(default=False, alias="canManageProperties")
    can_handle_payments: bool = Field(default=False, alias="canHandlePayments")
    can_view_reports: bool = Field(default=False, alias="canViewReports")

    def grants(self, capability: Capability) -> bool:
        return getattr(self, _CAPABILITY_FIELDS[capability]) is True


_CAPABILITY_FIELDS: dict[Capability, str] = {
    Capability.CREATE_TENANTS: "can_create_tenants",
    Capability.MANAGE_PROPERTIES: "can_manage_properties",
    Capability.HANDLE_PAYMENTS: "can_handle_payments",
    Capability.VIEW_REPORTS: "can_view_reports",
}


# ----- Actor variants -----


class _ActorBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    email: str | None = None


class AdminActor(_ActorBase):
    role: Literal[UserRole.ADMIN] = UserRole.ADMIN


class AgentActor(_ActorBase):
    role: Literal[UserRole.AGENT] = UserRole.AGENT


class LandlordActor(_ActorBase):
    role: Literal[UserRole.LANDLORD] = UserRole.LANDLORD


class EmployeeActor(_ActorBase):
    role: Literal[UserRole.EMPLOYEE] = UserRole.EMPLOYEE
    agent_id: int | None = None
    permissions: EmployeePermissions = Field(default_factory=EmployeePermissions)


class TenantActor(_ActorBase):
    role: Literal[UserRole.TENANT] = UserRole.TENANT


class SeekerActor(_ActorBase):
    role: Literal[UserRole.SEEKER] = UserRole.SEEKER


Actor = AdminActor | AgentActor | LandlordActor | EmployeeActor | TenantActor | SeekerActor

# Roles that hold every capability regardless of any permissions record
_PRIVILEGED = (AdminActor, AgentActor, LandlordActor)


def actor_from_user(user: User) -> Actor:
    """Build the actor variant for a stored user."""
    role = UserRole(user.role)
    if role == UserRole.ADMIN:
        return AdminActor(id=user.id, email=user.email)
    if role == UserRole.AGENT:
        return AgentActor(id=user.id, email=user.email)
    if role == UserRole.LANDLORD:
        return LandlordActor(id=user.id, email=user.email)
    if role == UserRole.EMPLOYEE:
        return EmployeeActor(
            id=user.id,
            email=user.email,
            agent_id=user.parent_user_id,
            permissions=EmployeePermissions(
                can_create_tenants=user.can_create_tenants,
                can_manage_properties=user.can_manage_properties,
                can_handle_payments=user.can_handle_payments,
                can_view_reports=user.can_view_reports,
            ),
        )
    if role == UserRole.TENANT:
        return TenantActor(id=user.id, email=user.email)
    return SeekerActor(id=user.id, email=user.email)


def has_capability(actor: Actor, capability: Capability | str) -> bool:
    """Decide whether ``actor`` holds ``capability``.

    Admin, agent and landlord hold everything. Employees hold exactly the
    flags set on their permissions record; unknown capability keys resolve
    to False. Every other role holds nothing.
    """
    if isinstance(actor, _PRIVILEGED):
        return True
    if isinstance(actor, EmployeeActor):
        try:
            key = Capability(capability)
        except ValueError:
            return False
        return actor.permissions.grants(key)
    return False


def capabilities_of(actor: Actor) -> list[Capability]:
    """All capabilities the actor holds, in declaration order."""
    return [c for c in Capability if has_capability(actor, c)]


def is_staff(actor: Actor) -> bool:
    """Admin, agent, landlord or employee."""
    return isinstance(actor, (*_PRIVILEGED, EmployeeActor))


def managing_agent_id(actor: Actor) -> int | None:
    """The agent whose portfolio the actor works on.

    None for admins (unrestricted) and for roles that manage nothing.
    """
    if isinstance(actor, (AgentActor, LandlordActor)):
        return actor.id
    if isinstance(actor, EmployeeActor):
        return actor.agent_id
    return None


def can_manage(actor: Actor, agent_id: int | None) -> bool:
    """Whether the actor may act on a resource owned by ``agent_id``."""
    if isinstance(actor, AdminActor):
        return True
    if isinstance(actor, (AgentActor, LandlordActor, EmployeeActor)):
        owner = managing_agent_id(actor)
        return owner is not None and owner == agent_id
    return False


def require_capability(
    actor: Actor, capability: Capability, action: str, resource_type: str
) -> None:
    """Raise ``UnauthorizedError`` unless the actor holds ``capability``."""
    if not has_capability(actor, capability):
        raise UnauthorizedError(
            action,
            resource_type,
            details={"capability": capability.value, "role": actor.role.value},
        )


def require_management(
    actor: Actor, agent_id: int | None, action: str, resource_type: str
) -> None:
    """Raise ``UnauthorizedError`` unless the actor manages the owner's portfolio."""
    if not can_manage(actor, agent_id):
        raise UnauthorizedError(
            action, resource_type, details={"owner_agent_id": agent_id}
        )
