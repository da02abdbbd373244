"""Authentication and user administration schemas for RentWise."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..commons import RequestModel
from .models import UserRole

# ----- User Schemas -----


class UserResponse(BaseModel):
    """Schema for user response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    uuid: UUID
    email: str
    first_name: str
    last_name: str | None = None
    phone: str | None = None
    role: UserRole
    is_active: bool
    must_change_password: bool
    parent_user_id: int | None = None
    last_login: datetime | None = None
    created_at: datetime


class PermissionsPayload(RequestModel):
    """Employee capability flags, as submitted by the web client."""

    can_create_tenants: bool = False
    can_manage_properties: bool = False
    can_handle_payments: bool = False
    can_view_reports: bool = False


class EmployeeResponse(UserResponse):
    """Employee with its capability flags."""

    job_title: str | None = None
    can_create_tenants: bool
    can_manage_properties: bool
    can_handle_payments: bool
    can_view_reports: bool


class ProfileResponse(UserResponse):
    """Current user's profile plus the capabilities they hold."""

    capabilities: list[str] = []


class EmployeeCreate(RequestModel):
    """Schema for creating an employee account."""

    email: EmailStr
    first_name: str = Field(..., min_length=2, max_length=120)
    last_name: str | None = Field(None, max_length=120)
    phone: str | None = Field(None, max_length=32)
    job_title: str | None = Field(None, max_length=120)
    password: str | None = Field(None, min_length=8, max_length=128)
    # Required when an admin creates the employee for an agent
    agent_id: int | None = None
    permissions: PermissionsPayload = Field(default_factory=PermissionsPayload)


class EmployeeCreatedResponse(BaseModel):
    """Created employee plus the one-time temporary password, if generated."""

    employee: EmployeeResponse
    temporary_password: str | None = None


# ----- Auth Schemas -----


class LoginRequest(BaseModel):
    """Schema for login request."""

    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    """Schema for token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds
    must_change_password: bool = False


class ChangePasswordRequest(RequestModel):
    """Schema for password change request."""

    current_password: str
    new_password: str = Field(..., min_length=8, max_length=128)


class FirstLoginPasswordRequest(RequestModel):
    """Replace a temporary credential without re-entering it."""

    new_password: str = Field(..., min_length=8, max_length=128)
