"""Authentication and user administration business logic."""

from datetime import datetime, timedelta, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...core.exceptions import (
    AuthenticationError,
    NotFoundError,
    ResourceAlreadyExistsError,
    UnauthorizedError,
    ValidationError,
)
from ...core.logging import get_logger
from ...core.utils import generate_temporary_password
from . import crud
from .jwt_service import create_access_token, get_token_expiry_seconds
from .models import User, UserRole
from .password_service import verify_password
from .permissions import (
    Actor,
    AdminActor,
    AgentActor,
    LandlordActor,
    can_manage,
)
from .schemas import EmployeeCreate, PermissionsPayload, TokenResponse

logger = get_logger(__name__)


def _as_aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


async def authenticate_user(
    db: AsyncSession, email: str, password: str
) -> tuple[User, TokenResponse]:
    """Authenticate user and return an access token.

    Raises:
        AuthenticationError: If authentication fails
    """
    user = await crud.get_user_by_email(db, email)
    if not user:
        raise AuthenticationError("Invalid email or password")

    now = datetime.now(timezone.utc)
    if user.locked_until and _as_aware(user.locked_until) > now:
        remaining = (_as_aware(user.locked_until) - now).seconds // 60
        raise AuthenticationError(
            f"Account is locked. Try again in {remaining + 1} minutes."
        )

    if not user.is_active:
        raise AuthenticationError("Account is disabled")

    if not verify_password(password, user.password_hash):
        await crud.increment_failed_login(db, user)

        if user.failed_login_attempts >= settings.max_login_attempts:
            lock_until = now + timedelta(minutes=settings.lockout_duration_minutes)
            await crud.lock_user(db, user, lock_until)
            await db.commit()
            logger.warning("Account locked", extra={"user_id": user.id})
            raise AuthenticationError(
                f"Account locked due to too many failed attempts. "
                f"Try again in {settings.lockout_duration_minutes} minutes."
            )

        await db.commit()
        remaining_attempts = settings.max_login_attempts - user.failed_login_attempts
        raise AuthenticationError(
            f"Invalid email or password. {remaining_attempts} attempts remaining."
        )

    await crud.update_user_last_login(db, user)
    await db.commit()

    access_token = create_access_token(
        user_id=user.id, email=user.email, role=UserRole(user.role).value
    )
    return user, TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=get_token_expiry_seconds(),
        must_change_password=user.must_change_password,
    )


async def change_password(
    db: AsyncSession, user: User, current_password: str, new_password: str
) -> None:
    """Change a user's password after verifying the current one.

    Raises:
        ValidationError: If current password is incorrect
    """
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")

    await crud.update_user_password(db, user, new_password)
    await db.commit()


async def complete_first_login(db: AsyncSession, user: User, new_password: str) -> None:
    """Replace a temporary credential issued when the account was provisioned.

    Raises:
        ValidationError: If the account is not flagged for a forced change
    """
    if not user.must_change_password:
        raise ValidationError("Password change on first login is not required")

    await crud.update_user_password(db, user, new_password)
    await db.commit()
    logger.info("Temporary password replaced", extra={"user_id": user.id})


# ----- Employee administration -----


def _resolve_employer(actor: Actor, requested_agent_id: int | None) -> int:
    """Work out which agent a new employee belongs to."""
    if isinstance(actor, (AgentActor, LandlordActor)):
        return actor.id
    if isinstance(actor, AdminActor):
        if requested_agent_id is None:
            raise ValidationError("agent_id is required", field="agent_id")
        return requested_agent_id
    raise UnauthorizedError("create", "employee")


async def create_employee(
    db: AsyncSession, actor: Actor, data: EmployeeCreate
) -> tuple[User, str | None]:
    """Create an employee account with an initial permissions record.

    Returns:
        Tuple of (employee, temporary password or None if one was supplied)
    """
    agent_id = _resolve_employer(actor, data.agent_id)

    agent = await crud.get_user_by_id(db, agent_id)
    if not agent or agent.role not in (UserRole.AGENT, UserRole.LANDLORD):
        raise NotFoundError(f"Agent with ID {agent_id} not found")

    if await crud.get_user_by_email(db, data.email):
        raise ResourceAlreadyExistsError("User", data.email)

    temporary_password = None
    password = data.password
    if password is None:
        temporary_password = generate_temporary_password(
            settings.temporary_password_length
        )
        password = temporary_password

    try:
        employee = await crud.create_user(
            db,
            email=data.email,
            password=password,
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            job_title=data.job_title,
            role=UserRole.EMPLOYEE,
            created_by_id=actor.id,
            parent_user_id=agent_id,
            must_change_password=True,
            **data.permissions.model_dump(),
        )
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        raise ResourceAlreadyExistsError("User", data.email) from e
    await db.refresh(employee)

    logger.info(
        "Employee created",
        extra={"employee_id": employee.id, "agent_id": agent_id, "actor_id": actor.id},
    )
    return employee, temporary_password


async def update_employee_permissions(
    db: AsyncSession, actor: Actor, employee_id: int, data: PermissionsPayload
) -> User:
    """Replace an employee's capability flags.

    Only the owning agent (or an admin) may change them.
    """
    employee = await crud.get_user_by_id(db, employee_id)
    if not employee or employee.role != UserRole.EMPLOYEE:
        raise NotFoundError(f"Employee with ID {employee_id} not found")

    if not isinstance(actor, (AdminActor, AgentActor, LandlordActor)) or not can_manage(
        actor, employee.parent_user_id
    ):
        raise UnauthorizedError("update permissions of", "employee")

    await crud.update_user(db, employee, **data.model_dump())
    await db.commit()
    await db.refresh(employee)

    logger.info(
        "Employee permissions updated",
        extra={"employee_id": employee.id, "actor_id": actor.id, **data.model_dump()},
    )
    return employee


async def list_employees(db: AsyncSession, actor: Actor) -> list[User]:
    """Employees of the acting agent."""
    if not isinstance(actor, (AgentActor, LandlordActor)):
        raise UnauthorizedError("list", "employees")
    return await crud.get_employees_of(db, actor.id)
