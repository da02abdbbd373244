"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from ...core.exceptions import AuthenticationError
from ...database import get_db
from . import crud
from .jwt_service import decode_access_token
from .models import User
from .permissions import Actor, actor_from_user

security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """Resolve the bearer token to the stored user record.

    The permissions record can change after the token was issued, so the
    user is always loaded fresh.
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    try:
        user_id = int(payload["sub"])
    except (KeyError, ValueError) as e:
        raise AuthenticationError(f"Invalid token payload: {e}")

    user = await crud.get_user_by_id(db, user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("User not found or inactive")
    return user


async def get_current_actor(
    user: Annotated[User, Depends(get_current_user)],
) -> Actor:
    """Current user as an authorization actor."""
    return actor_from_user(user)


# Type aliases for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
