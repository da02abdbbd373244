"""Occupancy state machine: occupy, vacate, maintenance and unit mode."""

from datetime import date

import pytest

from rentwise_backend.core.exceptions import (
    InvalidStateTransitionError,
    TargetUnavailableError,
    UnauthorizedError,
    ValidationError,
)
from rentwise_backend.modules.property_management import crud as property_crud
from rentwise_backend.modules.property_management import occupancy
from rentwise_backend.modules.property_management.models import (
    Availability,
    Property,
    Unit,
)
from rentwise_backend.modules.tenant_management.models import Tenant, TenantStatus

LEASE_START = date(2026, 11, 1)
LEASE_END = date(2027, 11, 1)


class TestOccupyAndVacate:
    async def test_round_trip_returns_unit_to_available(
        self, db, users, unit_property, tenant_factory, reload
    ):
        tenant_id = await tenant_factory(unit_property.id, unit_property.unit_a1)

        await occupancy.occupy(
            db,
            users.agent,
            unit_property.id,
            tenant_id=tenant_id,
            lease_start=LEASE_START,
            lease_end=LEASE_END,
            unit_id=unit_property.unit_a1,
        )
        unit = await reload(Unit, unit_property.unit_a1)
        assert unit.availability == Availability.OCCUPIED
        assert unit.active_tenant_id == tenant_id
        assert unit.lease_end == LEASE_END

        await occupancy.vacate(
            db,
            users.agent,
            unit_property.id,
            unit_id=unit_property.unit_a1,
            move_out_date=date(2027, 2, 28),
            reason="relocating",
        )
        unit = await reload(Unit, unit_property.unit_a1)
        assert unit.availability == Availability.AVAILABLE
        assert unit.active_tenant_id is None
        assert unit.lease_start is None

        tenant = await reload(Tenant, tenant_id)
        assert tenant.status == TenantStatus.TERMINATED
        assert tenant.move_out_date == date(2027, 2, 28)
        assert tenant.termination_reason == "relocating"
        assert tenant.terminated_by_id == users.agent.id

    async def test_whole_property_round_trip(
        self, db, users, whole_property, tenant_factory, reload
    ):
        tenant_id = await tenant_factory(whole_property)

        await occupancy.occupy(
            db, users.clerk, whole_property, tenant_id, LEASE_START, LEASE_END
        )
        assert (await reload(Property, whole_property)).availability == (
            Availability.OCCUPIED
        )

        await occupancy.vacate(db, users.clerk, whole_property)
        property_obj = await reload(Property, whole_property)
        assert property_obj.availability == Availability.AVAILABLE
        assert property_obj.active_tenant_id is None

    async def test_vacate_available_target_is_rejected(
        self, db, users, unit_property, reload
    ):
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            await occupancy.vacate(
                db, users.agent, unit_property.id, unit_id=unit_property.unit_a1
            )

        assert exc_info.value.current_state == "available"
        unit = await reload(Unit, unit_property.unit_a1)
        assert unit.availability == Availability.AVAILABLE

    async def test_occupy_occupied_target_is_rejected(
        self, db, users, unit_property, tenant_factory
    ):
        first = await tenant_factory(unit_property.id, unit_property.unit_a1)
        second = await tenant_factory(unit_property.id, unit_property.unit_a1)
        await occupancy.occupy(
            db, users.agent, unit_property.id, first, LEASE_START, LEASE_END,
            unit_id=unit_property.unit_a1,
        )

        with pytest.raises(InvalidStateTransitionError):
            await occupancy.occupy(
                db, users.agent, unit_property.id, second, LEASE_START, LEASE_END,
                unit_id=unit_property.unit_a1,
            )

    async def test_lease_end_must_follow_start(
        self, db, users, unit_property, tenant_factory
    ):
        tenant_id = await tenant_factory(unit_property.id, unit_property.unit_a1)

        with pytest.raises(ValidationError):
            await occupancy.occupy(
                db, users.agent, unit_property.id, tenant_id, LEASE_END, LEASE_START,
                unit_id=unit_property.unit_a1,
            )

    async def test_tenant_must_lease_the_target(
        self, db, users, unit_property, tenant_factory
    ):
        tenant_id = await tenant_factory(unit_property.id, unit_property.unit_a2)

        with pytest.raises(ValidationError):
            await occupancy.occupy(
                db, users.agent, unit_property.id, tenant_id, LEASE_START, LEASE_END,
                unit_id=unit_property.unit_a1,
            )

    async def test_unit_id_required_in_unit_mode(
        self, db, users, unit_property, tenant_factory
    ):
        tenant_id = await tenant_factory(unit_property.id, unit_property.unit_a1)

        with pytest.raises(ValidationError):
            await occupancy.occupy(
                db, users.agent, unit_property.id, tenant_id, LEASE_START, LEASE_END
            )

    async def test_employee_without_flag_cannot_occupy(
        self, db, users, unit_property, tenant_factory, reload
    ):
        tenant_id = await tenant_factory(unit_property.id, unit_property.unit_a1)

        with pytest.raises(UnauthorizedError):
            await occupancy.occupy(
                db, users.intern, unit_property.id, tenant_id, LEASE_START, LEASE_END,
                unit_id=unit_property.unit_a1,
            )
        unit = await reload(Unit, unit_property.unit_a1)
        assert unit.availability == Availability.AVAILABLE

    async def test_agent_cannot_occupy_another_agents_unit(
        self, db, users, unit_property, tenant_factory
    ):
        tenant_id = await tenant_factory(unit_property.id, unit_property.unit_a1)

        with pytest.raises(UnauthorizedError):
            await occupancy.occupy(
                db, users.other_agent, unit_property.id, tenant_id,
                LEASE_START, LEASE_END, unit_id=unit_property.unit_a1,
            )


class TestConcurrentOccupy:
    async def test_claim_target_succeeds_once(
        self, db, unit_property, tenant_factory, reload
    ):
        first = await tenant_factory(unit_property.id, unit_property.unit_a1)
        second = await tenant_factory(unit_property.id, unit_property.unit_a1)

        assert await property_crud.claim_target(
            db, Unit, unit_property.unit_a1, first, LEASE_START, LEASE_END
        )
        assert not await property_crud.claim_target(
            db, Unit, unit_property.unit_a1, second, LEASE_START, LEASE_END
        )
        await db.commit()

        unit = await reload(Unit, unit_property.unit_a1)
        assert unit.active_tenant_id == first

    async def test_stale_snapshot_loses_with_target_unavailable(
        self, db, session_factory, users, unit_property, tenant_factory, reload
    ):
        first = await tenant_factory(unit_property.id, unit_property.unit_a1)
        second = await tenant_factory(unit_property.id, unit_property.unit_a1)

        async with session_factory() as other:
            # Both sessions read the unit while it is still available
            snapshot = await property_crud.get_unit_by_id(other, unit_property.unit_a1)
            assert snapshot.availability == Availability.AVAILABLE

            await occupancy.occupy(
                db, users.agent, unit_property.id, first, LEASE_START, LEASE_END,
                unit_id=unit_property.unit_a1,
            )

            with pytest.raises(TargetUnavailableError):
                await occupancy.occupy(
                    other, users.clerk, unit_property.id, second,
                    LEASE_START, LEASE_END, unit_id=unit_property.unit_a1,
                )

        unit = await reload(Unit, unit_property.unit_a1)
        assert unit.availability == Availability.OCCUPIED
        assert unit.active_tenant_id == first


class TestMaintenance:
    async def test_maintenance_cycle(self, db, users, unit_property, reload):
        await occupancy.start_maintenance(
            db, users.clerk, unit_property.id, unit_id=unit_property.unit_a2
        )
        assert (await reload(Unit, unit_property.unit_a2)).availability == (
            Availability.MAINTENANCE
        )

        # Second request is a no-op
        await occupancy.start_maintenance(
            db, users.clerk, unit_property.id, unit_id=unit_property.unit_a2
        )

        await occupancy.complete_maintenance(
            db, users.clerk, unit_property.id, unit_id=unit_property.unit_a2
        )
        assert (await reload(Unit, unit_property.unit_a2)).availability == (
            Availability.AVAILABLE
        )

    async def test_complete_requires_maintenance(self, db, users, whole_property):
        with pytest.raises(InvalidStateTransitionError):
            await occupancy.complete_maintenance(db, users.agent, whole_property)

    async def test_cannot_occupy_under_maintenance(
        self, db, users, whole_property, tenant_factory
    ):
        await occupancy.start_maintenance(db, users.agent, whole_property)
        tenant_id = await tenant_factory(whole_property)

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            await occupancy.occupy(
                db, users.agent, whole_property, tenant_id, LEASE_START, LEASE_END
            )
        assert exc_info.value.current_state == "maintenance"

    async def test_bound_tenant_blocks_maintenance(
        self, db, users, whole_property, tenant_factory
    ):
        await tenant_factory(whole_property)

        with pytest.raises(InvalidStateTransitionError):
            await occupancy.start_maintenance(db, users.agent, whole_property)

    async def test_occupied_target_blocks_maintenance(
        self, db, users, whole_property, tenant_factory
    ):
        tenant_id = await tenant_factory(whole_property)
        await occupancy.occupy(
            db, users.agent, whole_property, tenant_id, LEASE_START, LEASE_END
        )

        with pytest.raises(InvalidStateTransitionError):
            await occupancy.start_maintenance(db, users.agent, whole_property)

    async def test_requires_manage_properties(self, db, users, whole_property):
        with pytest.raises(UnauthorizedError):
            await occupancy.start_maintenance(db, users.intern, whole_property)


class TestUnitMode:
    async def test_enable_units_twice_is_a_no_op(
        self, db, users, whole_property, reload
    ):
        first = await occupancy.enable_units(db, users.agent, whole_property)
        assert first.has_units is True

        second = await occupancy.enable_units(db, users.agent, whole_property)
        assert second.has_units is True
        assert (await reload(Property, whole_property)).has_units is True

    async def test_occupied_property_cannot_enable_units(
        self, db, users, whole_property, tenant_factory, reload
    ):
        tenant_id = await tenant_factory(whole_property)
        await occupancy.occupy(
            db, users.agent, whole_property, tenant_id, LEASE_START, LEASE_END
        )

        with pytest.raises(InvalidStateTransitionError):
            await occupancy.enable_units(db, users.agent, whole_property)

        property_obj = await reload(Property, whole_property)
        assert property_obj.has_units is False
        assert property_obj.active_tenant_id == tenant_id

    async def test_bound_tenant_blocks_enable_units(
        self, db, users, whole_property, tenant_factory, reload
    ):
        await tenant_factory(whole_property)

        with pytest.raises(InvalidStateTransitionError):
            await occupancy.enable_units(db, users.agent, whole_property)
        assert (await reload(Property, whole_property)).has_units is False

    async def test_unit_mode_rejects_whole_property_claim(
        self, db, whole_property, tenant_factory, users
    ):
        await occupancy.enable_units(db, users.agent, whole_property)
        tenant_id = await tenant_factory(whole_property)

        assert not await property_crud.claim_target(
            db, Property, whole_property, tenant_id, LEASE_START, LEASE_END
        )

    async def test_disable_units_with_units_is_rejected(
        self, db, users, unit_property
    ):
        with pytest.raises(ValidationError):
            await occupancy.disable_units(db, users.agent, unit_property.id)

    async def test_disable_units_without_units(
        self, db, users, whole_property, reload
    ):
        await occupancy.enable_units(db, users.agent, whole_property)
        await occupancy.disable_units(db, users.agent, whole_property)

        property_obj = await reload(Property, whole_property)
        assert property_obj.has_units is False
        assert property_obj.availability == Availability.AVAILABLE
