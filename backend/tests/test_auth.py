"""Tests for authentication endpoints and per-request session materialization."""

from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import PASSWORD, auth_header, make_role, make_user
from fleetdesk.auth.context import SessionInvalidError, materialize_session
from fleetdesk.auth.jwt import ACCESS, REFRESH, create_access_token, create_refresh_token, token_subject
from fleetdesk.database import get_db
from fleetdesk.main import app
from fleetdesk.models.company import Company
from fleetdesk.models.role import Role
from fleetdesk.models.user import User


class _UnreachableSession:
    """Session whose every query fails like a refused asyncpg connection."""

    async def execute(self, *args, **kwargs):
        raise ConnectionRefusedError(111, "Connect call failed ('127.0.0.1', 5432)")


@pytest.mark.auth
@pytest.mark.asyncio
class TestLogin:

    async def test_login_success(self, client: AsyncClient, world):
        response = await client.post(
            "/api/auth/login",
            json={"email": "ADMIN@acme.io", "password": PASSWORD},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["refresh_token"]
        assert data["user"]["email"] == "admin@acme.io"
        assert data["user"]["company_name"] == "Acme Shipping"
        assert "voyage.edit" in data["user"]["permissions"]

    async def test_login_records_last_login(self, client: AsyncClient, world, db_session: AsyncSession):
        await client.post("/api/auth/login", json={"email": "staff@acme.io", "password": PASSWORD})

        user = await db_session.get(User, world.staff_a.id, populate_existing=True)
        assert user.last_login_at is not None

    async def test_login_wrong_password(self, client: AsyncClient, world):
        response = await client.post(
            "/api/auth/login",
            json={"email": "admin@acme.io", "password": "wrong-password"},
        )
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid credentials"}

    async def test_login_unknown_email(self, client: AsyncClient, world):
        response = await client.post(
            "/api/auth/login",
            json={"email": "nobody@acme.io", "password": PASSWORD},
        )
        assert response.status_code == 401

    async def test_login_deactivated_user(self, client: AsyncClient, world, db_session: AsyncSession):
        await make_user(db_session, "gone@acme.io", world.admin_role, world.company_a, status="inactive")
        await db_session.commit()

        response = await client.post(
            "/api/auth/login",
            json={"email": "gone@acme.io", "password": PASSWORD},
        )
        assert response.status_code == 403
        assert response.json() == {"error": "Account deactivated"}

    async def test_refresh_issues_new_tokens(self, client: AsyncClient, world):
        response = await client.post(
            "/api/auth/refresh",
            json={"refresh_token": create_refresh_token(world.admin_a.id)},
        )
        assert response.status_code == 200
        assert response.json()["user"]["id"] == world.admin_a.id

    async def test_refresh_rejects_access_token(self, client: AsyncClient, world):
        access = auth_header(world.admin_a)["Authorization"].split()[1]
        response = await client.post("/api/auth/refresh", json={"refresh_token": access})
        assert response.status_code == 401


@pytest.mark.auth
@pytest.mark.asyncio
class TestSessionMaterialization:
    """Every request rebuilds the session from current database state."""

    async def test_missing_token(self, client: AsyncClient, world):
        response = await client.get("/api/auth/me")
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}
        assert response.headers["www-authenticate"] == "Bearer"

    async def test_garbage_token(self, client: AsyncClient, world):
        response = await client.get(
            "/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    async def test_refresh_token_is_not_an_access_token(self, client: AsyncClient, world):
        token = create_refresh_token(world.admin_a.id)
        response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_me_reports_super_admin_flag(self, client: AsyncClient, world):
        response = await client.get("/api/auth/me", headers=auth_header(world.super_admin))
        assert response.status_code == 200
        data = response.json()
        assert data["is_super_admin"] is True
        assert data["company_id"] is None

    async def test_deactivation_applies_to_next_request(
        self, client: AsyncClient, world, db_session: AsyncSession
    ):
        headers = auth_header(world.admin_a)
        assert (await client.get("/api/voyages/", headers=headers)).status_code == 200

        user = await db_session.get(User, world.admin_a.id)
        user.status = "inactive"
        await db_session.commit()

        response = await client.get("/api/voyages/", headers=headers)
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}

    async def test_inactive_company_invalidates_session(
        self, client: AsyncClient, world, db_session: AsyncSession
    ):
        company = await db_session.get(Company, world.company_a.id)
        company.status = "inactive"
        await db_session.commit()

        response = await client.get("/api/auth/me", headers=auth_header(world.admin_a))
        assert response.status_code == 401

    async def test_deleted_company_invalidates_session(
        self, client: AsyncClient, world, db_session: AsyncSession
    ):
        company = await db_session.get(Company, world.company_b.id)
        company.deleted_at = datetime.utcnow()
        await db_session.commit()

        response = await client.get("/api/auth/me", headers=auth_header(world.admin_b))
        assert response.status_code == 401

    async def test_super_admin_unaffected_by_company_state(
        self, client: AsyncClient, world, db_session: AsyncSession
    ):
        user = await db_session.get(User, world.super_admin.id)
        user.company_id = world.company_a.id
        company = await db_session.get(Company, world.company_a.id)
        company.status = "inactive"
        await db_session.commit()

        response = await client.get("/api/auth/me", headers=auth_header(world.super_admin))
        assert response.status_code == 200

    async def test_role_edit_applies_without_relogin(
        self, client: AsyncClient, world, db_session: AsyncSession
    ):
        headers = auth_header(world.staff_a)
        assert (await client.get("/api/cargo-documents/", headers=headers)).status_code == 403

        role = await db_session.get(Role, world.staff_role.id)
        role.permissions = [*role.permissions, "cargo.view"]
        await db_session.commit()

        assert (await client.get("/api/cargo-documents/", headers=headers)).status_code == 200

    async def test_uncatalogued_slug_is_dropped(self, client: AsyncClient, world, db_session: AsyncSession):
        role = await make_role(db_session, "auditor", ["voyage.view", "made.up"])
        user = await make_user(db_session, "auditor@acme.io", role, world.company_a)
        await db_session.commit()

        response = await client.get("/api/auth/me", headers=auth_header(user))
        assert response.json()["permissions"] == ["voyage.view"]

    async def test_unreachable_database_fails_session(self):
        with pytest.raises(SessionInvalidError):
            await materialize_session(_UnreachableSession(), "u-1")

    async def test_unreachable_database_is_unauthorized(self, client: AsyncClient, world):
        async def unreachable_db():
            yield _UnreachableSession()

        app.dependency_overrides[get_db] = unreachable_db
        response = await client.get("/api/auth/me", headers=auth_header(world.admin_a))
        assert response.status_code == 401
        assert response.json() == {"error": "Unauthorized"}


@pytest.mark.auth
@pytest.mark.asyncio
class TestGuards:

    async def test_forbidden_body_is_generic(self, client: AsyncClient, world):
        response = await client.delete(
            f"/api/voyages/{world.voyage_a.id}", headers=auth_header(world.staff_a)
        )
        assert response.status_code == 403
        assert response.json() == {"error": "Forbidden"}

    async def test_denied_request_has_no_side_effect(
        self, client: AsyncClient, world, db_session: AsyncSession
    ):
        await client.delete(f"/api/voyages/{world.voyage_a.id}", headers=auth_header(world.staff_a))

        response = await client.get(
            f"/api/voyages/{world.voyage_a.id}", headers=auth_header(world.admin_a)
        )
        assert response.status_code == 200

    async def test_ops_scenario_end_to_end(self, client: AsyncClient, world, db_session: AsyncSession):
        ops = await make_role(db_session, "ops", ["voyage.view"])
        user = await make_user(
            db_session, "ops@acme.io", ops, world.company_a,
            additional_permissions=["voyage.edit"], excluded_permissions=[],
        )
        await db_session.commit()
        headers = auth_header(user)
        url = f"/api/voyages/{world.voyage_a.id}"

        assert (await client.patch(url, json={"status": "completed"}, headers=headers)).status_code == 200
        assert (await client.delete(url, headers=headers)).status_code == 403

        stored = await db_session.get(User, user.id)
        stored.excluded_permissions = ["voyage.edit"]
        await db_session.commit()

        assert (await client.patch(url, json={"status": "active"}, headers=headers)).status_code == 403


@pytest.mark.unit
class TestTokens:

    def test_subject_of_matching_type(self):
        assert token_subject(create_access_token("u-1"), ACCESS) == "u-1"
        assert token_subject(create_refresh_token("u-1"), REFRESH) == "u-1"

    def test_type_mismatch(self):
        assert token_subject(create_refresh_token("u-1"), ACCESS) is None
        assert token_subject(create_access_token("u-1"), REFRESH) is None

    def test_expired_token(self):
        token = create_access_token("u-1", expires_delta=timedelta(seconds=-5))
        assert token_subject(token, ACCESS) is None

    def test_malformed_token(self):
        assert token_subject("not.a.jwt", ACCESS) is None


@pytest.mark.auth
@pytest.mark.asyncio
class TestProfile:

    async def test_edit_own_profile(self, client: AsyncClient, world):
        response = await client.patch(
            "/api/auth/me",
            json={"full_name": "Staff Member", "email": "Crew.Desk@Acme.io", "phone": "+31 10 555 0101"},
            headers=auth_header(world.staff_a),
        )
        assert response.status_code == 200
        body = response.json()
        assert body["full_name"] == "Staff Member"
        assert body["email"] == "crew.desk@acme.io"
        assert body["phone"] == "+31 10 555 0101"

        login = await client.post(
            "/api/auth/login", json={"email": "crew.desk@acme.io", "password": PASSWORD}
        )
        assert login.status_code == 200

    async def test_role_and_company_cannot_be_self_assigned(
        self, client: AsyncClient, world, db_session: AsyncSession
    ):
        response = await client.patch(
            "/api/auth/me",
            json={"role_id": world.super_role.id, "company_id": world.company_b.id, "phone": "1"},
            headers=auth_header(world.staff_a),
        )
        assert response.status_code == 200
        assert response.json()["role"] == "op-staff"
        assert response.json()["is_super_admin"] is False

        stored = await db_session.get(User, world.staff_a.id)
        await db_session.refresh(stored)
        assert stored.role_id == world.staff_role.id
        assert stored.company_id == world.company_a.id

    async def test_taken_email(self, client: AsyncClient, world):
        response = await client.patch(
            "/api/auth/me", json={"email": "admin@blue.io"}, headers=auth_header(world.staff_a)
        )
        assert response.status_code == 409
        assert response.json() == {"error": "Email already registered"}

    async def test_requires_session(self, client: AsyncClient, world):
        response = await client.patch("/api/auth/me", json={"phone": "1"})
        assert response.status_code == 401
