"""CRUD operations for authentication module."""

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import User, UserRole
from .password_service import hash_password

# ----- User CRUD -----


async def get_user_by_id(db: AsyncSession, user_id: int) -> User | None:
    """Get a user by ID."""
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Get a user by email (case-insensitive)."""
    result = await db.execute(
        select(User).where(func.lower(User.email) == email.strip().lower())
    )
    return result.scalar_one_or_none()


async def get_employees_of(db: AsyncSession, agent_id: int) -> list[User]:
    """Get all employees working under an agent."""
    result = await db.execute(
        select(User)
        .where(User.parent_user_id == agent_id, User.role == UserRole.EMPLOYEE)
        .order_by(User.created_at.desc())
    )
    return list(result.scalars().all())


async def create_user(
    db: AsyncSession,
    email: str,
    password: str,
    first_name: str,
    role: UserRole,
    **kwargs,
) -> User:
    """Create a new user. Caller commits."""
    user = User(
        email=email.strip().lower(),
        password_hash=hash_password(password),
        first_name=first_name,
        role=role,
        is_active=True,
        **kwargs,
    )
    db.add(user)
    await db.flush()
    return user


async def update_user(db: AsyncSession, user: User, **kwargs) -> User:
    """Update user fields. Caller commits."""
    for key, value in kwargs.items():
        if hasattr(user, key):
            setattr(user, key, value)
    await db.flush()
    return user


async def update_user_password(
    db: AsyncSession, user: User, new_password: str
) -> None:
    """Replace a user's password and clear the forced-change flag."""
    user.password_hash = hash_password(new_password)
    user.must_change_password = False
    await db.flush()


async def update_user_last_login(db: AsyncSession, user: User) -> None:
    """Update user's last login timestamp and reset failed attempts."""
    user.last_login = datetime.now(timezone.utc)
    user.failed_login_attempts = 0
    user.locked_until = None
    await db.flush()


async def increment_failed_login(db: AsyncSession, user: User) -> None:
    """Increment failed login attempts."""
    user.failed_login_attempts = (user.failed_login_attempts or 0) + 1
    await db.flush()


async def lock_user(db: AsyncSession, user: User, until: datetime) -> None:
    """Lock user account until the specified time."""
    user.locked_until = until
    await db.flush()
