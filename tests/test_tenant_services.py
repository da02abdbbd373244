"""Tenant listing, updates and move-out."""

from datetime import date

import pytest

from rentwise_backend.core.exceptions import (
    InvalidStateTransitionError,
    NotFoundError,
    UnauthorizedError,
)
from rentwise_backend.modules.auth.permissions import TenantActor
from rentwise_backend.modules.property_management import occupancy
from rentwise_backend.modules.property_management.models import Availability, Unit
from rentwise_backend.modules.tenant_management import services
from rentwise_backend.modules.tenant_management.models import (
    DepositStatus,
    TenantStatus,
)
from rentwise_backend.modules.tenant_management.schemas import (
    EmergencyContact,
    MoveOutRequest,
    TenantUpdate,
)


async def _occupied_unit(db, users, unit_property, tenant_factory) -> int:
    tenant_id = await tenant_factory(unit_property.id, unit_property.unit_a1)
    await occupancy.occupy(
        db,
        users.agent,
        unit_property.id,
        tenant_id,
        date(2026, 11, 1),
        date(2027, 11, 1),
        unit_id=unit_property.unit_a1,
    )
    return tenant_id


class TestMoveOut:
    async def test_frees_the_unit(
        self, db, users, unit_property, tenant_factory, reload
    ):
        tenant_id = await _occupied_unit(db, users, unit_property, tenant_factory)

        tenant = await services.move_out(
            db,
            users.clerk,
            tenant_id,
            MoveOutRequest(
                move_out_date=date(2027, 6, 30),
                reason="lease ended early",
                deposit_status=DepositStatus.RETURNED,
            ),
        )

        assert tenant.status == TenantStatus.TERMINATED
        assert tenant.move_out_date == date(2027, 6, 30)
        assert tenant.deposit_status == DepositStatus.RETURNED
        assert tenant.terminated_by_id == users.clerk.id
        unit = await reload(Unit, unit_property.unit_a1)
        assert unit.availability == Availability.AVAILABLE
        assert unit.active_tenant_id is None

    async def test_tenant_never_occupied_is_terminated_only(
        self, db, users, unit_property, tenant_factory, reload
    ):
        tenant_id = await tenant_factory(unit_property.id, unit_property.unit_a2)

        tenant = await services.move_out(db, users.agent, tenant_id, MoveOutRequest())

        assert tenant.status == TenantStatus.TERMINATED
        assert tenant.move_out_date == date.today()
        unit = await reload(Unit, unit_property.unit_a2)
        assert unit.availability == Availability.AVAILABLE

    async def test_second_move_out_is_rejected(
        self, db, users, unit_property, tenant_factory
    ):
        tenant_id = await _occupied_unit(db, users, unit_property, tenant_factory)
        await services.move_out(db, users.agent, tenant_id, MoveOutRequest())

        with pytest.raises(InvalidStateTransitionError):
            await services.move_out(db, users.agent, tenant_id, MoveOutRequest())

    async def test_intern_cannot_move_out(
        self, db, users, unit_property, tenant_factory
    ):
        tenant_id = await _occupied_unit(db, users, unit_property, tenant_factory)

        with pytest.raises(UnauthorizedError):
            await services.move_out(db, users.intern, tenant_id, MoveOutRequest())


class TestRetryOccupancy:
    async def test_fails_once_target_taken(
        self, db, users, unit_property, tenant_factory
    ):
        await _occupied_unit(db, users, unit_property, tenant_factory)
        late = await tenant_factory(unit_property.id, unit_property.unit_a1)

        with pytest.raises(InvalidStateTransitionError):
            await services.retry_occupancy(db, users.agent, late)


class TestQueries:
    async def test_list_and_stats(self, db, users, unit_property, tenant_factory):
        occupied = await _occupied_unit(db, users, unit_property, tenant_factory)
        await tenant_factory(unit_property.id, unit_property.unit_a2)
        await services.move_out(db, users.agent, occupied, MoveOutRequest())

        active, total = await services.list_tenants(
            db, users.clerk, status=TenantStatus.ACTIVE
        )
        assert total == 1
        assert active[0].unit_id == unit_property.unit_a2

        stats = await services.get_tenant_stats(db, users.agent)
        assert (stats.total, stats.active, stats.terminated) == (2, 1, 1)

        rival_stats = await services.get_tenant_stats(db, users.other_agent)
        assert rival_stats.total == 0

    async def test_seeker_cannot_list(self, db, users):
        with pytest.raises(UnauthorizedError):
            await services.list_tenants(db, users.seeker)

    async def test_occupant_sees_own_record(
        self, db, users, unit_property, tenant_factory
    ):
        tenant_id = await tenant_factory(unit_property.id, unit_property.unit_a1)
        tenant = await services.get_tenant(db, users.agent, tenant_id)
        occupant = TenantActor(id=tenant.user_id)

        own = await services.get_tenant(db, occupant, tenant_id)
        assert own.id == tenant_id

        with pytest.raises(UnauthorizedError):
            await services.get_tenant(db, TenantActor(id=tenant.user_id + 100), tenant_id)

    async def test_missing_tenant(self, db, users):
        with pytest.raises(NotFoundError):
            await services.get_tenant(db, users.agent, 404)


class TestUpdateTenant:
    async def test_contact_and_notes(self, db, users, unit_property, tenant_factory):
        tenant_id = await tenant_factory(unit_property.id, unit_property.unit_a1)

        tenant = await services.update_tenant(
            db,
            users.clerk,
            tenant_id,
            TenantUpdate(
                emergency_contact=EmergencyContact(
                    name="Mary Wambui", phone="+254722000111", relationship="mother"
                ),
                notes="Prefers calls after 5pm",
            ),
        )

        assert tenant.emergency_contact_name == "Mary Wambui"
        assert tenant.emergency_contact_relationship == "mother"
        assert tenant.notes == "Prefers calls after 5pm"
        assert tenant.status == TenantStatus.ACTIVE

    def test_status_is_not_writable(self):
        with pytest.raises(ValueError):
            TenantUpdate.model_validate({"status": "terminated"})
