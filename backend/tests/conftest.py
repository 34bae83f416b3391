"""Pytest configuration and fixtures for FleetDesk tests.

Every test gets a fresh SQLite database (through aiosqlite) in its tmp_path,
with the schema built from the models and the permission catalog seeded.
Set TEST_DATABASE_URL to run against another database instead.
"""

import os
from datetime import datetime
from types import SimpleNamespace
from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from fleetdesk.auth.jwt import create_access_token
from fleetdesk.auth.password import hash_password
from fleetdesk.auth.permissions import ALL_PERMISSIONS
from fleetdesk.database import Base, get_db, get_session_factory
from fleetdesk.main import app
from fleetdesk.models.company import Company
from fleetdesk.models.role import Role
from fleetdesk.models.user import User
from fleetdesk.models.vessel import Vessel
from fleetdesk.models.voyage import Voyage
from fleetdesk.services.catalog import seed_catalog

PASSWORD = "correct-horse-9"

OP_STAFF_PERMISSIONS = [
    "dashboard.view",
    "stats.noon",
    "vessels.view",
    "voyage.view",
    "noon.view",
    "noon.create",
    "noon.edit",
    "prearrival.view",
    "prearrival.upload",
]


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Create a throwaway database with every table."""
    url = os.environ.get("TEST_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'fleetdesk.db'}")
    engine = create_async_engine(url, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    factory = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        await seed_catalog(session)
        await session.commit()
    return factory


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session for arranging test data. Commit before issuing requests."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with overridden database dependencies."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ── Builders ─────────────────────────────────────────────────────

def auth_header(user: User) -> dict:
    """Authorization header with a fresh access token for `user`."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


async def make_role(db: AsyncSession, name: str, permissions: list[str], status: str = "active") -> Role:
    role = Role(name=name, permissions=list(permissions), status=status)
    db.add(role)
    await db.flush()
    return role


async def make_company(db: AsyncSession, name: str, **kwargs) -> Company:
    company = Company(name=name, email=f"{name.lower().replace(' ', '-')}@example.com", **kwargs)
    db.add(company)
    await db.flush()
    return company


async def make_user(
    db: AsyncSession,
    email: str,
    role: Role | None,
    company: Company | None,
    **kwargs,
) -> User:
    user = User(
        email=email,
        hashed_password=hash_password(PASSWORD),
        full_name=email.split("@")[0].title(),
        role_id=role.id if role else None,
        company_id=company.id if company else None,
        **kwargs,
    )
    db.add(user)
    await db.flush()
    return user


async def make_vessel(db: AsyncSession, company: Company, name: str, **kwargs) -> Vessel:
    vessel = Vessel(company_id=company.id, name=name, **kwargs)
    db.add(vessel)
    await db.flush()
    return vessel


async def make_voyage(db: AsyncSession, vessel: Vessel, voyage_no: str, **kwargs) -> Voyage:
    voyage = Voyage(
        vessel_id=vessel.id,
        voyage_no=voyage_no,
        status="active",
        eta=datetime(2026, 11, 1),
        **kwargs,
    )
    db.add(voyage)
    await db.flush()
    return voyage


# ── Standard two-tenant world ────────────────────────────────────

@pytest_asyncio.fixture
async def world(db_session: AsyncSession) -> SimpleNamespace:
    """Two companies, each with one vessel and voyage, plus users of every kind.

    super_admin   → super-admin role, no company
    admin_a/b     → admin role in company A/B (every catalog permission)
    staff_a       → op-staff role in company A (own rows only)
    orphan        → admin role, no company
    """
    db = db_session
    super_role = await make_role(db, "super-admin", [])
    admin_role = await make_role(db, "admin", sorted(ALL_PERMISSIONS))
    staff_role = await make_role(db, "op-staff", OP_STAFF_PERMISSIONS)

    company_a = await make_company(db, "Acme Shipping")
    company_b = await make_company(db, "Blue Ocean")

    vessel_a = await make_vessel(db, company_a, "MV Aurora")
    vessel_b = await make_vessel(db, company_b, "MV Boreas")
    voyage_a = await make_voyage(db, vessel_a, "A-001", load_port="Rotterdam")
    voyage_b = await make_voyage(db, vessel_b, "B-001", load_port="Santos")

    ns = SimpleNamespace(
        super_role=super_role,
        admin_role=admin_role,
        staff_role=staff_role,
        company_a=company_a,
        company_b=company_b,
        vessel_a=vessel_a,
        vessel_b=vessel_b,
        voyage_a=voyage_a,
        voyage_b=voyage_b,
        super_admin=await make_user(db, "root@fleetdesk.io", super_role, None),
        admin_a=await make_user(db, "admin@acme.io", admin_role, company_a),
        admin_b=await make_user(db, "admin@blue.io", admin_role, company_b),
        staff_a=await make_user(db, "staff@acme.io", staff_role, company_a),
        orphan=await make_user(db, "orphan@fleetdesk.io", admin_role, None),
    )
    await db.commit()
    return ns


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "auth: Authentication and authorization tests")
    config.addinivalue_line("markers", "tenant: Tenant isolation tests")
