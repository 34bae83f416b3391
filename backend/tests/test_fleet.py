"""Tests for vessel and voyage management."""

import pytest
from httpx import AsyncClient

from conftest import auth_header


@pytest.mark.integration
@pytest.mark.asyncio
class TestVessels:

    async def test_tenant_admin_creates_in_own_company(self, client: AsyncClient, world):
        response = await client.post(
            "/api/vessels/",
            json={"name": "MV Cassiopeia", "imo": "9876543", "dimensions": {"loa": 229.0, "beam": 32.3}},
            headers=auth_header(world.admin_a),
        )
        assert response.status_code == 201
        body = response.json()
        assert body["company_id"] == world.company_a.id
        assert body["certificates"] == []

    async def test_tenant_admin_cannot_pick_company(self, client: AsyncClient, world):
        response = await client.post(
            "/api/vessels/",
            json={"name": "MV Trojan", "company_id": world.company_b.id},
            headers=auth_header(world.admin_a),
        )
        assert response.status_code == 403

    async def test_super_admin_must_name_company(self, client: AsyncClient, world):
        headers = auth_header(world.super_admin)
        missing = await client.post("/api/vessels/", json={"name": "MV Drifter"}, headers=headers)
        assert missing.status_code == 400

        created = await client.post(
            "/api/vessels/",
            json={"name": "MV Drifter", "company_id": world.company_b.id},
            headers=headers,
        )
        assert created.status_code == 201
        assert created.json()["company_id"] == world.company_b.id

    async def test_certificate_upsert_replaces_file(self, client: AsyncClient, world):
        url = f"/api/vessels/{world.vessel_a.id}/certificates/registry_cert"
        headers = auth_header(world.admin_a)

        first = await client.put(url, json={"name": "Registry", "file_name": "a.pdf", "file_url": "u-a"}, headers=headers)
        second = await client.put(url, json={"name": "Registry", "file_name": "b.pdf", "file_url": "u-b"}, headers=headers)
        assert first.json()["id"] == second.json()["id"]
        assert second.json()["file_name"] == "b.pdf"

        detail = await client.get(f"/api/vessels/{world.vessel_a.id}", headers=headers)
        assert [c["file_name"] for c in detail.json()["certificates"]] == ["b.pdf"]

    async def test_foreign_certificate_upsert(self, client: AsyncClient, world):
        response = await client.put(
            f"/api/vessels/{world.vessel_b.id}/certificates/registry_cert",
            json={"name": "Registry"},
            headers=auth_header(world.admin_a),
        )
        assert response.status_code == 404


@pytest.mark.integration
@pytest.mark.asyncio
class TestVoyages:

    async def test_create_copies_load_port(self, client: AsyncClient, world):
        response = await client.post(
            "/api/voyages/",
            json={
                "vessel_id": world.vessel_a.id,
                "voyage_no": "A-002",
                "route": {"load_port": "Hamburg", "discharge_port": "Singapore"},
                "charter": {"charterer_name": "Nordic Bulk", "laycan_start": "2026-11-10T00:00:00"},
            },
            headers=auth_header(world.admin_a),
        )
        assert response.status_code == 201
        body = response.json()
        assert body["vessel_name"] == "MV Aurora"
        assert body["status"] == "scheduled"
        assert body["charter"]["laycan_start"].startswith("2026-11-10")

        found = await client.get(
            "/api/voyages/", params={"search": "hamburg"}, headers=auth_header(world.admin_a)
        )
        assert [v["voyage_no"] for v in found.json()["data"]] == ["A-002"]

    async def test_duplicate_voyage_number(self, client: AsyncClient, world):
        response = await client.post(
            "/api/voyages/",
            json={"vessel_id": world.vessel_a.id, "voyage_no": "B-001"},
            headers=auth_header(world.admin_a),
        )
        assert response.status_code == 409

    async def test_search_by_vessel_name(self, client: AsyncClient, world):
        response = await client.get(
            "/api/voyages/", params={"search": "Aurora"}, headers=auth_header(world.admin_a)
        )
        assert [v["id"] for v in response.json()["data"]] == [world.voyage_a.id]

    async def test_eta_range(self, client: AsyncClient, world):
        response = await client.get(
            "/api/voyages/",
            params={"eta_from": "2026-12-01T00:00:00"},
            headers=auth_header(world.admin_a),
        )
        assert response.json()["data"] == []

    async def test_null_status_is_ignored(self, client: AsyncClient, world):
        response = await client.patch(
            f"/api/voyages/{world.voyage_a.id}",
            json={"status": None, "eta": "2026-11-03T12:00:00"},
            headers=auth_header(world.admin_a),
        )
        assert response.status_code == 200
        assert response.json()["status"] == "active"

    async def test_lookup_is_scoped(self, client: AsyncClient, world):
        tenant = await client.get("/api/voyages/lookup", headers=auth_header(world.admin_a))
        assert [c["name"] for c in tenant.json()["companies"]] == ["Acme Shipping"]
        assert [v["name"] for v in tenant.json()["vessels"]] == ["MV Aurora"]

        narrowed = await client.get(
            "/api/voyages/lookup",
            params={"company_id": world.company_b.id},
            headers=auth_header(world.super_admin),
        )
        assert len(narrowed.json()["companies"]) == 2
        assert [v["name"] for v in narrowed.json()["vessels"]] == ["MV Boreas"]
