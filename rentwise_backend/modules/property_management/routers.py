"""Property and unit API routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...database import get_db
from ..auth.dependencies import CurrentActor
from ..commons import BaseResponse, PaginatedResponse
from . import occupancy, services
from .models import Availability
from .schemas import (
    OccupyRequest,
    PropertyCreate,
    PropertyResponse,
    PropertyUpdate,
    PropertyWithUnitsResponse,
    UnitBulkCreate,
    UnitResponse,
    UnitStatsResponse,
    UnitUpdate,
    VacateRequest,
)

router = APIRouter(prefix="/properties", tags=["Properties"])


# ----- Properties -----


@router.get("", response_model=BaseResponse[PaginatedResponse[PropertyResponse]])
async def list_properties(
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    availability: Availability | None = Query(None),
    has_units: bool | None = Query(None),
    search: str | None = Query(None),
):
    """Get properties the current user manages."""
    skip = (page - 1) * page_size
    properties, total = await services.list_properties(
        db,
        actor,
        skip=skip,
        limit=page_size,
        availability=availability,
        has_units=has_units,
        search=search,
    )

    return BaseResponse(
        success=True,
        data=PaginatedResponse.from_items(
            items=[PropertyResponse.model_validate(p) for p in properties],
            total=total,
            page=page,
            page_size=page_size,
        ),
    )


@router.post(
    "",
    response_model=BaseResponse[PropertyResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_property(
    data: PropertyCreate,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Create a new property."""
    property_obj = await services.create_property(db, actor, data)
    return BaseResponse(
        success=True,
        message="Property created successfully",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.get("/{property_id}", response_model=BaseResponse[PropertyWithUnitsResponse])
async def get_property(
    property_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get a property with its units."""
    property_obj = await services.get_property(db, actor, property_id)
    return BaseResponse(
        success=True,
        data=PropertyWithUnitsResponse.model_validate(property_obj),
    )


@router.patch("/{property_id}", response_model=BaseResponse[PropertyResponse])
async def update_property(
    property_id: int,
    data: PropertyUpdate,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Update a property. ``hasUnits: true`` converts it to unit mode."""
    property_obj = await services.update_property(db, actor, property_id, data)
    return BaseResponse(
        success=True,
        message="Property updated successfully",
        data=PropertyResponse.model_validate(property_obj),
    )


@router.delete("/{property_id}", response_model=BaseResponse[None])
async def delete_property(
    property_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Soft delete a property."""
    await services.delete_property(db, actor, property_id)
    return BaseResponse(success=True, message="Property deleted successfully")


# ----- Whole-property occupancy -----


@router.patch("/{property_id}/occupy", response_model=BaseResponse[PropertyResponse])
async def occupy_property(
    property_id: int,
    data: OccupyRequest,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Mark a whole property occupied."""
    target = await occupancy.occupy(
        db,
        actor,
        property_id,
        tenant_id=data.tenant_id,
        lease_start=data.lease_start,
        lease_end=data.lease_end,
    )
    return BaseResponse(
        success=True,
        message="Property occupied",
        data=PropertyResponse.model_validate(target),
    )


@router.patch("/{property_id}/vacate", response_model=BaseResponse[PropertyResponse])
async def vacate_property(
    property_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
    data: VacateRequest | None = None,
):
    """Free a whole property and terminate its tenant."""
    data = data or VacateRequest()
    target = await occupancy.vacate(
        db,
        actor,
        property_id,
        move_out_date=data.move_out_date,
        reason=data.reason,
    )
    return BaseResponse(
        success=True,
        message="Property vacated",
        data=PropertyResponse.model_validate(target),
    )


@router.patch(
    "/{property_id}/maintenance", response_model=BaseResponse[PropertyResponse]
)
async def start_property_maintenance(
    property_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Put a whole property under maintenance."""
    target = await occupancy.start_maintenance(db, actor, property_id)
    return BaseResponse(
        success=True,
        message="Property under maintenance",
        data=PropertyResponse.model_validate(target),
    )


@router.patch(
    "/{property_id}/maintenance/complete",
    response_model=BaseResponse[PropertyResponse],
)
async def complete_property_maintenance(
    property_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Return a whole property from maintenance to available."""
    target = await occupancy.complete_maintenance(db, actor, property_id)
    return BaseResponse(
        success=True,
        message="Property available",
        data=PropertyResponse.model_validate(target),
    )


# ----- Units -----


@router.post(
    "/{property_id}/units",
    response_model=BaseResponse[list[UnitResponse]],
    status_code=status.HTTP_201_CREATED,
)
async def create_units(
    property_id: int,
    data: UnitBulkCreate,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Add units to a property."""
    units = await services.create_units(db, actor, property_id, data)
    return BaseResponse(
        success=True,
        message=f"{len(units)} unit(s) added successfully",
        data=[UnitResponse.model_validate(u) for u in units],
    )


@router.get("/{property_id}/units", response_model=BaseResponse[list[UnitResponse]])
async def list_units(
    property_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
    availability: Availability | None = Query(None),
):
    """Get the units of a property."""
    units = await services.list_units(db, actor, property_id, availability=availability)
    return BaseResponse(
        success=True,
        data=[UnitResponse.model_validate(u) for u in units],
    )


@router.get(
    "/{property_id}/available-units",
    response_model=BaseResponse[list[UnitResponse]],
)
async def list_available_units(
    property_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Get the units of a property that can be leased."""
    units = await services.list_units(
        db, actor, property_id, availability=Availability.AVAILABLE
    )
    return BaseResponse(
        success=True,
        data=[UnitResponse.model_validate(u) for u in units],
    )


@router.get(
    "/{property_id}/units/stats", response_model=BaseResponse[UnitStatsResponse]
)
async def get_unit_stats(
    property_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Unit occupancy summary for a property."""
    stats = await services.get_unit_stats(db, actor, property_id)
    return BaseResponse(success=True, data=stats)


@router.patch(
    "/{property_id}/units/{unit_id}", response_model=BaseResponse[UnitResponse]
)
async def update_unit(
    property_id: int,
    unit_id: int,
    data: UnitUpdate,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Update a unit."""
    unit = await services.update_unit(db, actor, property_id, unit_id, data)
    return BaseResponse(
        success=True,
        message="Unit updated successfully",
        data=UnitResponse.model_validate(unit),
    )


@router.delete("/{property_id}/units/{unit_id}", response_model=BaseResponse[None])
async def delete_unit(
    property_id: int,
    unit_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Delete a unit."""
    await services.delete_unit(db, actor, property_id, unit_id)
    return BaseResponse(success=True, message="Unit deleted successfully")


@router.patch(
    "/{property_id}/units/{unit_id}/occupy",
    response_model=BaseResponse[UnitResponse],
)
async def occupy_unit(
    property_id: int,
    unit_id: int,
    data: OccupyRequest,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Mark a unit occupied by a tenant."""
    unit = await occupancy.occupy(
        db,
        actor,
        property_id,
        tenant_id=data.tenant_id,
        lease_start=data.lease_start,
        lease_end=data.lease_end,
        unit_id=unit_id,
    )
    return BaseResponse(
        success=True,
        message="Unit occupied",
        data=UnitResponse.model_validate(unit),
    )


@router.patch(
    "/{property_id}/units/{unit_id}/vacate",
    response_model=BaseResponse[UnitResponse],
)
async def vacate_unit(
    property_id: int,
    unit_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
    data: VacateRequest | None = None,
):
    """Free a unit and terminate its tenant."""
    data = data or VacateRequest()
    unit = await occupancy.vacate(
        db,
        actor,
        property_id,
        unit_id=unit_id,
        move_out_date=data.move_out_date,
        reason=data.reason,
    )
    return BaseResponse(
        success=True,
        message="Unit vacated",
        data=UnitResponse.model_validate(unit),
    )


@router.patch(
    "/{property_id}/units/{unit_id}/maintenance",
    response_model=BaseResponse[UnitResponse],
)
async def start_unit_maintenance(
    property_id: int,
    unit_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Put a unit under maintenance."""
    unit = await occupancy.start_maintenance(db, actor, property_id, unit_id=unit_id)
    return BaseResponse(
        success=True,
        message="Unit under maintenance",
        data=UnitResponse.model_validate(unit),
    )


@router.patch(
    "/{property_id}/units/{unit_id}/maintenance/complete",
    response_model=BaseResponse[UnitResponse],
)
async def complete_unit_maintenance(
    property_id: int,
    unit_id: int,
    actor: CurrentActor,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Return a unit from maintenance to available."""
    unit = await occupancy.complete_maintenance(db, actor, property_id, unit_id=unit_id)
    return BaseResponse(
        success=True,
        message="Unit available",
        data=UnitResponse.model_validate(unit),
    )
