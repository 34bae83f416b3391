"""Tests for dashboard metrics."""

from datetime import datetime

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import auth_header
from fleetdesk.models.report import NoonReport, OperationalReport
from fleetdesk.models.role import Role
from fleetdesk.models.user import User

URL = "/api/dashboard/metrics"


async def _reports(db: AsyncSession, world) -> None:
    for vessel, voyage, user in (
        (world.vessel_a, world.voyage_a, world.admin_a),
        (world.vessel_a, world.voyage_a, world.staff_a),
        (world.vessel_b, world.voyage_b, world.admin_b),
    ):
        db.add(NoonReport(
            vessel_id=vessel.id,
            voyage_id=voyage.id,
            vessel_name=vessel.name,
            voyage_no=voyage.voyage_no,
            report_date=datetime.utcnow(),
            created_by=user.id,
        ))
    db.add(OperationalReport(
        vessel_id=world.vessel_a.id,
        voyage_id=world.voyage_a.id,
        event_type="departure",
        vessel_name=world.vessel_a.name,
        voyage_no=world.voyage_a.voyage_no,
        report_date=datetime.utcnow(),
        created_by=world.admin_a.id,
    ))
    await db.commit()


@pytest.mark.integration
@pytest.mark.asyncio
class TestDashboardMetrics:

    async def test_admin_counts_are_scoped(self, client: AsyncClient, world, db_session: AsyncSession):
        await _reports(db_session, world)

        response = await client.get(URL, headers=auth_header(world.admin_a))
        assert response.status_code == 200
        metrics = response.json()
        assert metrics["noon_reports"] == 2
        assert metrics["departure_reports"] == 1
        assert metrics["arrival_reports"] == 0
        assert metrics["vessels"] == 1
        assert metrics["voyages"] == 1
        assert metrics["users"] == 2
        assert metrics["companies"] == 1

    async def test_unseen_metrics_are_null(self, client: AsyncClient, world, db_session: AsyncSession):
        await _reports(db_session, world)

        metrics = (await client.get(URL, headers=auth_header(world.staff_a))).json()
        assert metrics["noon_reports"] == 1
        assert metrics["vessels"] == 1
        # Own-rows: the fixture voyages have no creator
        assert metrics["voyages"] == 0
        for key in ("departure_reports", "arrival_reports", "nor_reports",
                    "cargo_stowage", "cargo_documents", "users", "companies"):
            assert metrics[key] is None, key

    async def test_requires_dashboard_view(self, client: AsyncClient, world, db_session: AsyncSession):
        role = await db_session.get(Role, world.staff_role.id)
        role.permissions = [p for p in role.permissions if p != "dashboard.view"]
        await db_session.commit()

        response = await client.get(URL, headers=auth_header(world.staff_a))
        assert response.status_code == 403

    async def test_super_admin_company_selector(self, client: AsyncClient, world, db_session: AsyncSession):
        await _reports(db_session, world)
        headers = auth_header(world.super_admin)

        everything = (await client.get(URL, headers=headers)).json()
        assert everything["noon_reports"] == 3
        assert everything["vessels"] == 2
        assert everything["companies"] == 2

        narrowed = (await client.get(URL, params={"company_id": world.company_b.id}, headers=headers)).json()
        assert narrowed["noon_reports"] == 1
        assert narrowed["vessels"] == 1
        assert narrowed["users"] == 1
        assert narrowed["companies"] == 1

    async def test_tenant_selector_is_ignored(self, client: AsyncClient, world):
        metrics = (await client.get(
            URL, params={"company_id": world.company_b.id}, headers=auth_header(world.admin_a)
        )).json()
        assert metrics["users"] == 2
        assert metrics["companies"] == 1

    async def test_user_count_hides_super_admins(self, client: AsyncClient, world, db_session: AsyncSession):
        user = await db_session.get(User, world.super_admin.id)
        user.company_id = world.company_a.id
        await db_session.commit()

        metrics = (await client.get(URL, headers=auth_header(world.admin_a))).json()
        assert metrics["users"] == 2

    async def test_orphan_sees_zeroes(self, client: AsyncClient, world):
        metrics = (await client.get(URL, headers=auth_header(world.orphan))).json()
        assert metrics["vessels"] == 0
        assert metrics["noon_reports"] == 0
        assert metrics["companies"] == 0
