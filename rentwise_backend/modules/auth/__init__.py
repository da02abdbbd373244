"""Authentication and authorization module for RentWise."""

from .dependencies import CurrentActor, CurrentUser, get_current_actor, get_current_user
from .models import User, UserRole
from .permissions import Actor, Capability, actor_from_user, has_capability
from .routers import router, users_router

__all__ = [
    # Models
    "User",
    "UserRole",
    # Routers
    "router",
    "users_router",
    # Dependencies
    "get_current_user",
    "get_current_actor",
    "CurrentUser",
    "CurrentActor",
    # Authorization
    "Actor",
    "Capability",
    "actor_from_user",
    "has_capability",
]
