"""Shared fixtures for the RentWise test suite.

Each test gets its own SQLite file so sessions opened by the HTTP client and
by the test body see the same committed data.
"""

import os
from datetime import date
from decimal import Decimal
from pathlib import Path
from types import SimpleNamespace

# Settings are loaded at import time, so CONFIG must be set first
os.environ["CONFIG"] = str(Path(__file__).parent / "config" / "test.yaml")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import select  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from rentwise_backend.database import Base, get_db  # noqa: E402
from rentwise_backend.main import app  # noqa: E402
from rentwise_backend.modules.auth import crud as auth_crud  # noqa: E402
from rentwise_backend.modules.auth.jwt_service import create_access_token  # noqa: E402
from rentwise_backend.modules.auth.models import UserRole  # noqa: E402
from rentwise_backend.modules.auth.permissions import actor_from_user  # noqa: E402
from rentwise_backend.modules.property_management import (  # noqa: E402
    services as property_services,
)
from rentwise_backend.modules.property_management.schemas import (  # noqa: E402
    PropertyCreate,
    UnitBulkCreate,
    UnitCreate,
)
from rentwise_backend.modules.tenant_management import (  # noqa: E402
    crud as tenant_crud,
)

PASSWORD = "Sup3rSecret!"


@pytest.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'rentwise.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def users(db):
    """Actors for every role, captured before any test touches the session."""
    admin = await auth_crud.create_user(
        db, "admin@rentwise.co.ke", PASSWORD, "Amina", UserRole.ADMIN
    )
    agent = await auth_crud.create_user(
        db, "agent@rentwise.co.ke", PASSWORD, "Brian", UserRole.AGENT
    )
    other_agent = await auth_crud.create_user(
        db, "rival@rentwise.co.ke", PASSWORD, "Carol", UserRole.AGENT
    )
    await db.flush()
    clerk = await auth_crud.create_user(
        db,
        "clerk@rentwise.co.ke",
        PASSWORD,
        "Dennis",
        UserRole.EMPLOYEE,
        parent_user_id=agent.id,
        can_create_tenants=True,
        can_manage_properties=True,
    )
    intern = await auth_crud.create_user(
        db,
        "intern@rentwise.co.ke",
        PASSWORD,
        "Esther",
        UserRole.EMPLOYEE,
        parent_user_id=agent.id,
    )
    seeker = await auth_crud.create_user(
        db, "seeker@rentwise.co.ke", PASSWORD, "Faith", UserRole.SEEKER
    )
    await db.commit()

    rows = {
        "admin": admin,
        "agent": agent,
        "other_agent": other_agent,
        "clerk": clerk,
        "intern": intern,
        "seeker": seeker,
    }
    return SimpleNamespace(
        **{name: actor_from_user(user) for name, user in rows.items()},
        tokens={
            name: create_access_token(user.id, user.email, user.role.value)
            for name, user in rows.items()
        },
    )


@pytest.fixture
def auth_headers(users):
    def _headers(name: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {users.tokens[name]}"}

    return _headers


@pytest.fixture
def reload(db):
    """Fetch a row again, overwriting whatever the identity map holds."""

    async def _reload(model, pk):
        result = await db.execute(
            select(model).where(model.id == pk).execution_options(populate_existing=True)
        )
        return result.scalar_one()

    return _reload


@pytest.fixture
async def whole_property(db, users) -> int:
    """A property leased as a whole, owned by the agent."""
    property_obj = await property_services.create_property(
        db,
        users.agent,
        PropertyCreate(
            title="Kilimani Maisonette",
            address="12 Argwings Kodhek Rd",
            city="Nairobi",
            bedrooms=3,
            bathrooms=2,
            rent=Decimal("20000"),
            deposit=Decimal("20000"),
        ),
    )
    return property_obj.id


@pytest.fixture
async def unit_property(db, users) -> SimpleNamespace:
    """A unit-bearing property with two available units, A1 and A2."""
    property_obj = await property_services.create_property(
        db,
        users.agent,
        PropertyCreate(
            title="Westlands Heights",
            address="4 Mpaka Rd",
            city="Nairobi",
            property_type="apartment",
            has_units=True,
        ),
    )
    units = await property_services.create_units(
        db,
        users.agent,
        property_obj.id,
        UnitBulkCreate(
            units=[
                UnitCreate(
                    unit_number="A1",
                    area=Decimal("45.5"),
                    rent=Decimal("15000"),
                    deposit=Decimal("15000"),
                ),
                UnitCreate(
                    unit_number="A2",
                    area=Decimal("60"),
                    rent=Decimal("18000"),
                    deposit=Decimal("18000"),
                ),
            ]
        ),
    )
    return SimpleNamespace(
        id=property_obj.id, unit_a1=units[0].id, unit_a2=units[1].id
    )


@pytest.fixture
def tenant_factory(db, users):
    """Insert an active tenant row for a target without occupying it."""
    counter = {"n": 0}

    async def _make(property_id: int, unit_id: int | None = None) -> int:
        counter["n"] += 1
        occupant = await auth_crud.create_user(
            db,
            f"occupant{counter['n']}@rentwise.co.ke",
            PASSWORD,
            "Grace",
            UserRole.TENANT,
        )
        tenant = await tenant_crud.create_tenant(
            db,
            user_id=occupant.id,
            property_id=property_id,
            unit_id=unit_id,
            agent_id=users.agent.id,
            created_by_id=users.agent.id,
            lease_start_date=date(2026, 11, 1),
            lease_end_date=date(2027, 11, 1),
            rent_amount=Decimal("15000"),
            deposit_amount=Decimal("15000"),
            emergency_contact_name="John Doe",
            emergency_contact_phone="+254700000000",
            emergency_contact_relationship="brother",
        )
        await db.commit()
        return tenant.id

    return _make


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://testserver"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
