"""Tests for pre-arrival document packs and the vessel certificate library."""

from datetime import datetime

import pytest
from httpx import AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import auth_header
from fleetdesk.models.pre_arrival import PreArrival
from fleetdesk.models.vessel import VesselCertificate
from fleetdesk.services.pre_arrival import (
    ONBOARD_UPLOAD,
    VESSEL_LIBRARY,
    build_initial_checklist,
    hydrate_documents,
    inject_library_certificates,
    uploaded_count,
)


def _cert(cert_id: str, doc_type: str, **kwargs) -> VesselCertificate:
    return VesselCertificate(
        id=cert_id,
        vessel_id="v-1",
        doc_type=doc_type,
        name=kwargs.pop("name", doc_type.replace("_", " ").title()),
        owner=kwargs.pop("owner", "office"),
        updated_at=datetime(2026, 10, 1),
        **kwargs,
    )


def _library_entry(cert_id: str | None, **kwargs) -> dict:
    entry = {
        "doc_source": VESSEL_LIBRARY,
        "vessel_cert_id": cert_id,
        "name": "Registry (cached)",
        "owner": "office",
        "file_name": "old.pdf",
        "file_url": "https://files.example.com/old.pdf",
        "status": "approved",
        "history": [],
    }
    entry.update(kwargs)
    return entry


@pytest.mark.unit
class TestHydration:

    def test_live_certificate_replaces_cache(self):
        cert = _cert("c-1", "registry_cert", file_name="new.pdf", file_url="https://files.example.com/new.pdf")
        documents = {"registry_cert": _library_entry("c-1")}

        hydrated = hydrate_documents(documents, [cert])

        assert hydrated["registry_cert"]["file_name"] == "new.pdf"
        assert hydrated["registry_cert"]["name"] == "Registry Cert"
        assert hydrated["registry_cert"]["status"] == "approved"

    def test_stored_documents_not_mutated(self):
        cert = _cert("c-1", "registry_cert", file_name="new.pdf", file_url="u")
        documents = {"registry_cert": _library_entry("c-1")}

        hydrate_documents(documents, [cert])

        assert documents["registry_cert"]["file_name"] == "old.pdf"

    def test_falls_back_to_doc_type_match(self):
        """A pointer to a re-created certificate still resolves by doc type."""
        cert = _cert("c-new", "registry_cert", file_name="new.pdf", file_url="u")
        hydrated = hydrate_documents({"registry_cert": _library_entry("c-old")}, [cert])
        assert hydrated["registry_cert"]["file_name"] == "new.pdf"

    def test_dangling_pointer_keeps_cache(self):
        hydrated = hydrate_documents({"registry_cert": _library_entry("c-gone")}, [])
        assert hydrated["registry_cert"]["file_name"] == "old.pdf"
        assert hydrated["registry_cert"]["vessel_cert_id"] == "c-gone"

    def test_onboard_uploads_untouched(self):
        cert = _cert("c-1", "crew_list", file_name="library.pdf", file_url="u")
        entry = {"doc_source": ONBOARD_UPLOAD, "file_name": "crew.pdf", "file_url": "x", "status": "pending_review"}
        hydrated = hydrate_documents({"crew_list": entry}, [cert])
        assert hydrated["crew_list"]["file_name"] == "crew.pdf"

    def test_inject_adds_missing_library_certs_as_approved(self):
        certs = [_cert("c-1", "registry_cert", file_url="u"), _cert("c-2", "tonnage_cert")]
        combined = inject_library_certificates({"registry_cert": _library_entry("c-1")}, certs)

        assert set(combined) == {"registry_cert", "tonnage_cert"}
        assert combined["tonnage_cert"]["status"] == "approved"
        assert combined["tonnage_cert"]["doc_source"] == VESSEL_LIBRARY
        assert combined["tonnage_cert"]["vessel_cert_id"] == "c-2"

    def test_uploaded_count(self):
        documents = {
            "a": {"file_url": "u"},
            "b": {"vessel_cert_id": "c-1"},
            "c": {"file_url": None},
        }
        assert uploaded_count(documents) == 2

    def test_initial_checklist_only_certs_with_files(self):
        certs = [_cert("c-1", "registry_cert", file_url="u", uploaded_by="u-9"), _cert("c-2", "tonnage_cert")]
        checklist = build_initial_checklist(certs, "u-1")

        assert set(checklist) == {"registry_cert"}
        assert checklist["registry_cert"]["status"] == "pending_review"
        assert checklist["registry_cert"]["uploaded_by"] == "u-9"


@pytest.mark.integration
@pytest.mark.asyncio
class TestPreArrivalApi:

    async def _create_pack(self, client: AsyncClient, world, **kwargs) -> dict:
        payload = {
            "vessel_id": world.vessel_a.id,
            "voyage_id": world.voyage_a.id,
            "request_id": kwargs.pop("request_id", "PA-001"),
            "port_name": "Rotterdam",
            "eta": "2026-11-01T06:00:00",
        }
        payload.update(kwargs)
        response = await client.post("/api/pre-arrival/", json=payload, headers=auth_header(world.admin_a))
        assert response.status_code == 201, response.text
        return response.json()

    async def _staff_pack(self, client: AsyncClient, world, db: AsyncSession) -> dict:
        """A pack filed by the op-staff user, who only sees packs they created."""
        pack = await self._create_pack(client, world)
        await db.execute(
            update(PreArrival).where(PreArrival.id == pack["id"]).values(created_by=world.staff_a.id)
        )
        await db.commit()
        return pack

    async def _put_cert(self, client: AsyncClient, world, doc_type: str, file_name: str | None) -> dict:
        body = {"name": doc_type.replace("_", " ").title()}
        if file_name:
            body.update(file_name=file_name, file_url=f"https://files.example.com/{file_name}")
        response = await client.put(
            f"/api/vessels/{world.vessel_a.id}/certificates/{doc_type}",
            json=body,
            headers=auth_header(world.admin_a),
        )
        assert response.status_code == 200, response.text
        return response.json()

    async def test_create_seeds_checklist_from_library(self, client: AsyncClient, world):
        await self._put_cert(client, world, "registry_cert", "registry-2026.pdf")
        await self._put_cert(client, world, "tonnage_cert", None)

        pack = await self._create_pack(client, world)

        assert pack["documents"]["registry_cert"]["doc_source"] == VESSEL_LIBRARY
        assert pack["documents"]["registry_cert"]["status"] == "pending_review"
        # Detail view injects the file-less certificate as an approved library entry
        assert pack["documents"]["tonnage_cert"]["status"] == "approved"
        assert pack["vessel_name"] == "MV Aurora"

    async def test_duplicate_request_id(self, client: AsyncClient, world):
        await self._create_pack(client, world)
        response = await client.post(
            "/api/pre-arrival/",
            json={
                "vessel_id": world.vessel_a.id,
                "request_id": "PA-001",
                "port_name": "Antwerp",
                "eta": "2026-11-03T06:00:00",
            },
            headers=auth_header(world.admin_a),
        )
        assert response.status_code == 409

    async def test_voyage_must_belong_to_vessel(self, client: AsyncClient, world):
        response = await client.post(
            "/api/pre-arrival/",
            json={
                "vessel_id": world.vessel_a.id,
                "voyage_id": world.voyage_b.id,
                "request_id": "PA-X",
                "port_name": "Antwerp",
                "eta": "2026-11-03T06:00:00",
            },
            headers=auth_header(world.admin_a),
        )
        assert response.status_code == 404

    async def test_renewed_certificate_shows_in_open_pack(self, client: AsyncClient, world):
        await self._put_cert(client, world, "registry_cert", "registry-2026.pdf")
        pack = await self._create_pack(client, world)

        await self._put_cert(client, world, "registry_cert", "registry-2027.pdf")

        response = await client.get(f"/api/pre-arrival/{pack['id']}", headers=auth_header(world.admin_a))
        assert response.json()["documents"]["registry_cert"]["file_name"] == "registry-2027.pdf"

        listing = await client.get("/api/pre-arrival/", headers=auth_header(world.admin_a))
        row = listing.json()["data"][0]
        assert row["documents"]["registry_cert"]["file_name"] == "registry-2027.pdf"
        assert row["uploaded_count"] == 1

    async def test_deleted_certificate_keeps_cached_copy(self, client: AsyncClient, world):
        await self._put_cert(client, world, "registry_cert", "registry-2026.pdf")
        pack = await self._create_pack(client, world)

        response = await client.delete(
            f"/api/vessels/{world.vessel_a.id}/certificates/registry_cert",
            headers=auth_header(world.admin_a),
        )
        assert response.status_code == 200

        detail = await client.get(f"/api/pre-arrival/{pack['id']}", headers=auth_header(world.admin_a))
        assert detail.json()["documents"]["registry_cert"]["file_name"] == "registry-2026.pdf"

    async def test_library_upload_syncs_certificate(self, client: AsyncClient, world):
        pack = await self._create_pack(client, world)

        response = await client.patch(
            f"/api/pre-arrival/{pack['id']}/documents/isps_ship",
            json={"file_name": "issc.pdf", "file_url": "https://files.example.com/issc.pdf"},
            headers=auth_header(world.admin_a),
        )
        assert response.status_code == 200
        entry = response.json()
        assert entry["doc_source"] == VESSEL_LIBRARY
        assert entry["status"] == "approved"
        assert entry["vessel_cert_id"]

        vessel = await client.get(f"/api/vessels/{world.vessel_a.id}", headers=auth_header(world.admin_a))
        doc_types = {c["doc_type"] for c in vessel.json()["certificates"]}
        assert "isps_ship" in doc_types

    async def test_ship_upload_waits_for_review(self, client: AsyncClient, world, db_session: AsyncSession):
        pack = await self._staff_pack(client, world, db_session)

        response = await client.patch(
            f"/api/pre-arrival/{pack['id']}/documents/crew_list",
            json={"file_name": "crew.pdf", "file_url": "https://files.example.com/crew.pdf"},
            headers=auth_header(world.staff_a),
        )
        assert response.status_code == 200
        entry = response.json()
        assert entry["doc_source"] == ONBOARD_UPLOAD
        assert entry["owner"] == "ship"
        assert entry["status"] == "pending_review"
        assert entry["history"][0]["message"] == "New file uploaded: crew.pdf"

    async def test_staff_library_upload_stays_onboard(self, client: AsyncClient, world, db_session: AsyncSession):
        """Without vessels.edit the library is left alone."""
        pack = await self._staff_pack(client, world, db_session)

        response = await client.patch(
            f"/api/pre-arrival/{pack['id']}/documents/registry_cert",
            json={"file_name": "reg.pdf", "file_url": "https://files.example.com/reg.pdf"},
            headers=auth_header(world.staff_a),
        )
        assert response.json()["doc_source"] == ONBOARD_UPLOAD

    async def test_reject_then_approve(self, client: AsyncClient, world, db_session: AsyncSession):
        pack = await self._staff_pack(client, world, db_session)
        await client.patch(
            f"/api/pre-arrival/{pack['id']}/documents/crew_list",
            json={"file_name": "crew.pdf", "file_url": "https://files.example.com/crew.pdf"},
            headers=auth_header(world.staff_a),
        )
        url = f"/api/pre-arrival/{pack['id']}/documents/crew_list/verify"

        rejected = await client.patch(
            url, json={"status": "rejected", "reason": "Unsigned"}, headers=auth_header(world.admin_a)
        )
        assert rejected.status_code == 200
        assert rejected.json()["rejection_reason"] == "Unsigned"
        last = rejected.json()["history"][-1]
        assert (last["message"], last["role"]) == ("Unsigned", "admin")

        approved = await client.patch(url, json={"status": "approved"}, headers=auth_header(world.admin_a))
        assert approved.json()["status"] == "approved"
        assert approved.json()["rejection_reason"] is None
        assert len(approved.json()["history"]) == 3

    async def test_verify_requires_permission(self, client: AsyncClient, world):
        pack = await self._create_pack(client, world)
        response = await client.patch(
            f"/api/pre-arrival/{pack['id']}/documents/crew_list/verify",
            json={"status": "approved"},
            headers=auth_header(world.staff_a),
        )
        assert response.status_code == 403

    async def test_verify_unknown_document(self, client: AsyncClient, world):
        pack = await self._create_pack(client, world)
        response = await client.patch(
            f"/api/pre-arrival/{pack['id']}/documents/nothing_here/verify",
            json={"status": "approved"},
            headers=auth_header(world.admin_a),
        )
        assert response.status_code == 404

    async def test_locked_pack(self, client: AsyncClient, world):
        pack = await self._create_pack(client, world)
        headers = auth_header(world.admin_a)
        url = f"/api/pre-arrival/{pack['id']}"

        assert (await client.patch(url, json={"is_locked": True}, headers=headers)).status_code == 200
        assert (await client.patch(url, json={"port_name": "Hamburg"}, headers=headers)).status_code == 409
        upload = await client.patch(
            f"{url}/documents/crew_list",
            json={"file_name": "crew.pdf", "file_url": "https://files.example.com/crew.pdf"},
            headers=headers,
        )
        assert upload.status_code == 409

        assert (await client.patch(url, json={"is_locked": False}, headers=headers)).status_code == 200
        assert (await client.patch(url, json={"port_name": "Hamburg"}, headers=headers)).status_code == 200

    async def test_other_company_cannot_see_pack(self, client: AsyncClient, world):
        pack = await self._create_pack(client, world)
        response = await client.get(f"/api/pre-arrival/{pack['id']}", headers=auth_header(world.admin_b))
        assert response.status_code == 404

    async def test_soft_delete(self, client: AsyncClient, world):
        pack = await self._create_pack(client, world)
        headers = auth_header(world.admin_a)

        assert (await client.delete(f"/api/pre-arrival/{pack['id']}", headers=headers)).status_code == 200
        assert (await client.get(f"/api/pre-arrival/{pack['id']}", headers=headers)).status_code == 404
