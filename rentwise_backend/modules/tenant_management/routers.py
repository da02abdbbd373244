"""Tenant management API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ..auth.dependencies import CurrentActor
from ..commons import BaseResponse, PaginatedResponse
from . import provisioning, services
from .models import TenantStatus
from .schemas import (
    MoveOutRequest,
    ProvisioningResult,
    TenantProvisionRequest,
    TenantResponse,
    TenantStatsResponse,
    TenantUpdate,
)

router = APIRouter(prefix="/tenants", tags=["Tenants"])


@router.post(
    "",
    response_model=BaseResponse[ProvisioningResult],
    status_code=status.HTTP_201_CREATED,
)
async def create_tenant(
    data: TenantProvisionRequest,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a tenant and occupy its property or unit.

    When the occupancy step fails the tenant is still created and the
    response carries a warning.
    """
    outcome = await provisioning.provision_tenant(db, actor, data)

    return BaseResponse(
        success=True,
        message=(
            "Tenant created with warnings"
            if outcome.warnings
            else "Tenant created successfully"
        ),
        data=ProvisioningResult(
            tenant=TenantResponse.model_validate(outcome.tenant),
            warnings=outcome.warnings,
            temporary_password=outcome.temporary_password,
        ),
    )


@router.get("", response_model=BaseResponse[PaginatedResponse[TenantResponse]])
async def list_tenants(
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    status: TenantStatus | None = Query(None),
    property_id: int | None = Query(None),
    unit_id: int | None = Query(None),
):
    """Get tenants with pagination and filtering."""
    skip = (page - 1) * page_size
    tenants, total = await services.list_tenants(
        db,
        actor,
        skip=skip,
        limit=page_size,
        status=status,
        property_id=property_id,
        unit_id=unit_id,
    )

    return BaseResponse(
        success=True,
        data=PaginatedResponse.from_items(
            items=[TenantResponse.model_validate(t) for t in tenants],
            total=total,
            page=page,
            page_size=page_size,
        ),
    )


@router.get("/stats", response_model=BaseResponse[TenantStatsResponse])
async def get_tenant_stats(
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Tenant counts per status."""
    stats = await services.get_tenant_stats(db, actor)
    return BaseResponse(success=True, data=stats)


@router.get("/{tenant_id}", response_model=BaseResponse[TenantResponse])
async def get_tenant(
    tenant_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get a tenant by ID."""
    tenant = await services.get_tenant(db, actor, tenant_id)
    return BaseResponse(success=True, data=TenantResponse.model_validate(tenant))


@router.patch("/{tenant_id}", response_model=BaseResponse[TenantResponse])
async def update_tenant(
    tenant_id: int,
    data: TenantUpdate,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Update a tenant's contact details, employment, references or notes."""
    tenant = await services.update_tenant(db, actor, tenant_id, data)
    return BaseResponse(
        success=True,
        message="Tenant updated successfully",
        data=TenantResponse.model_validate(tenant),
    )


@router.post("/{tenant_id}/occupy", response_model=BaseResponse[TenantResponse])
async def retry_occupancy(
    tenant_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Retry marking the tenant's property or unit occupied."""
    tenant = await services.retry_occupancy(db, actor, tenant_id)
    return BaseResponse(
        success=True,
        message="Occupancy recorded",
        data=TenantResponse.model_validate(tenant),
    )


@router.post("/{tenant_id}/move-out", response_model=BaseResponse[TenantResponse])
async def move_out(
    tenant_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
    data: MoveOutRequest | None = None,
):
    """Move a tenant out and free the property or unit."""
    tenant = await services.move_out(db, actor, tenant_id, data or MoveOutRequest())
    return BaseResponse(
        success=True,
        message="Tenant moved out successfully",
        data=TenantResponse.model_validate(tenant),
    )
