"""Authentication and user administration API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ..commons import BaseResponse
from . import services
from .dependencies import CurrentActor, CurrentUser
from .permissions import capabilities_of
from .schemas import (
    ChangePasswordRequest,
    EmployeeCreate,
    EmployeeCreatedResponse,
    EmployeeResponse,
    FirstLoginPasswordRequest,
    LoginRequest,
    PermissionsPayload,
    ProfileResponse,
    TokenResponse,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])
users_router = APIRouter(prefix="/users", tags=["Users"])


@router.post("/login", response_model=BaseResponse[TokenResponse])
async def login(
    login_data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Authenticate user and return an access token."""
    user, token = await services.authenticate_user(
        db=db,
        email=login_data.email,
        password=login_data.password,
    )

    return BaseResponse(
        success=True,
        message=f"Welcome back, {user.first_name}!",
        data=token,
    )


@router.get("/me", response_model=BaseResponse[ProfileResponse])
async def get_current_user_info(current_user: CurrentUser, actor: CurrentActor):
    """Get current user's profile and the capabilities they hold."""
    profile = ProfileResponse.model_validate(current_user)
    profile.capabilities = [c.value for c in capabilities_of(actor)]
    return BaseResponse(success=True, data=profile)


@router.post("/change-password", response_model=BaseResponse[None])
async def change_password(
    current_user: CurrentUser,
    password_data: ChangePasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Change current user's password."""
    await services.change_password(
        db=db,
        user=current_user,
        current_password=password_data.current_password,
        new_password=password_data.new_password,
    )

    return BaseResponse(success=True, message="Password changed successfully")


@router.post("/first-login-password", response_model=BaseResponse[None])
async def first_login_password(
    current_user: CurrentUser,
    password_data: FirstLoginPasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Replace the temporary password issued at account creation."""
    await services.complete_first_login(
        db=db, user=current_user, new_password=password_data.new_password
    )

    return BaseResponse(success=True, message="Password set successfully")


# ----- Employees -----


@users_router.post(
    "/employees",
    response_model=BaseResponse[EmployeeCreatedResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_employee(
    data: EmployeeCreate,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create an employee under the acting agent."""
    employee, temporary_password = await services.create_employee(db, actor, data)

    return BaseResponse(
        success=True,
        message="Employee created successfully",
        data=EmployeeCreatedResponse(
            employee=EmployeeResponse.model_validate(employee),
            temporary_password=temporary_password,
        ),
    )


@users_router.get("/employees", response_model=BaseResponse[list[EmployeeResponse]])
async def list_employees(
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """List employees of the acting agent."""
    employees = await services.list_employees(db, actor)

    return BaseResponse(
        success=True,
        data=[EmployeeResponse.model_validate(e) for e in employees],
    )


@users_router.patch(
    "/employees/{employee_id}/permissions",
    response_model=BaseResponse[EmployeeResponse],
)
async def update_employee_permissions(
    employee_id: int,
    data: PermissionsPayload,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Replace an employee's permission flags."""
    employee = await services.update_employee_permissions(db, actor, employee_id, data)

    return BaseResponse(
        success=True,
        message="Permissions updated successfully",
        data=EmployeeResponse.model_validate(employee),
    )
