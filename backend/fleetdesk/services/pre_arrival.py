"""Pre-arrival document pack service.

A pack's `documents` column maps doc_type → checklist entry. Two kinds of
entry exist:

  - vessel_library  → points at a VesselCertificate (`vessel_cert_id`) and
                      keeps a cached copy of its name/owner/file fields
  - onboard_upload  → a file uploaded for this port call only

Reads merge library entries with the live certificate so a renewed
certificate shows up in every open pack without touching them. When the
pointer dangles (certificate deleted, vessel re-created) the cached copy
is returned as-is.
"""

import logging
from collections import defaultdict
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.attributes import flag_modified

from fleetdesk.middleware.exceptions import ResourceNotFoundError
from fleetdesk.models.pre_arrival import PreArrival
from fleetdesk.models.vessel import VesselCertificate
from fleetdesk.schemas.pre_arrival import DocumentUpload, DocumentVerify, PreArrivalOut

logger = logging.getLogger(__name__)

VESSEL_LIBRARY = "vessel_library"
ONBOARD_UPLOAD = "onboard_upload"

# Office-held certificates kept in the vessel library rather than per pack
LIBRARY_DOC_TYPES = frozenset({
    "registry_cert",
    "tonnage_cert",
    "isps_ship",
    "isps_officer",
    "pi_cert",
    "sanitation_cert",
    "msm_cert",
    "hull_machinery",
    "safety_equipment",
    "medical_chest",
    "ships_particulars",
    "security_report",
})

_LIVE_FIELDS = ("name", "owner", "file_name", "file_url")


def _now_iso() -> str:
    return datetime.utcnow().isoformat()


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


# ── Certificate lookup ───────────────────────────────────────

async def load_certificates(
    db: AsyncSession, vessel_ids: list[str]
) -> dict[str, list[VesselCertificate]]:
    """Certificates per vessel, one query for any number of packs."""
    by_vessel: dict[str, list[VesselCertificate]] = defaultdict(list)
    if not vessel_ids:
        return by_vessel
    result = await db.execute(
        select(VesselCertificate)
        .where(VesselCertificate.vessel_id.in_(set(vessel_ids)))
        .order_by(VesselCertificate.doc_type)
    )
    for cert in result.scalars().all():
        by_vessel[cert.vessel_id].append(cert)
    return by_vessel


def _match_certificate(
    entry: dict, doc_type: str, certificates: list[VesselCertificate]
) -> VesselCertificate | None:
    pointer = entry.get("vessel_cert_id")
    if pointer:
        for cert in certificates:
            if cert.id == pointer:
                return cert
    for cert in certificates:
        if cert.doc_type == doc_type:
            return cert
    return None


def _cache_fields(cert: VesselCertificate) -> dict:
    return {
        "vessel_cert_id": cert.id,
        "name": cert.name,
        "owner": cert.owner or "office",
        "file_name": cert.file_name,
        "file_url": cert.file_url,
    }


# ── Read-side hydration ──────────────────────────────────────

def hydrate_documents(
    documents: dict | None, certificates: list[VesselCertificate]
) -> dict:
    """Return a copy of `documents` with library entries merged with live certs.

    The stored column is never modified.
    """
    hydrated: dict = {}
    for doc_type, entry in (documents or {}).items():
        merged = dict(entry)
        if merged.get("doc_source") == VESSEL_LIBRARY:
            cert = _match_certificate(merged, doc_type, certificates)
            if cert is not None:
                live = _cache_fields(cert)
                merged.update({field: live[field] for field in _LIVE_FIELDS})
        hydrated[doc_type] = merged
    return hydrated


def inject_library_certificates(
    documents: dict, certificates: list[VesselCertificate]
) -> dict:
    """Add library certificates not yet on the checklist, as approved entries."""
    combined = dict(documents)
    for cert in certificates:
        if cert.doc_type in combined:
            continue
        combined[cert.doc_type] = {
            **_cache_fields(cert),
            "doc_source": VESSEL_LIBRARY,
            "note": "",
            "status": "approved",
            "history": [],
            "uploaded_by": cert.uploaded_by,
            "uploaded_at": _iso(cert.updated_at),
        }
    return combined


def uploaded_count(documents: dict) -> int:
    """Entries that carry a file or a library pointer."""
    return sum(
        1 for entry in documents.values()
        if entry.get("file_url") or entry.get("vessel_cert_id")
    )


def serialize_pack(
    pack: PreArrival,
    certificates: list[VesselCertificate],
    *,
    detail: bool = False,
    vessel_name: str | None = None,
) -> PreArrivalOut:
    documents = hydrate_documents(pack.documents, certificates)
    if detail:
        documents = inject_library_certificates(documents, certificates)
    return PreArrivalOut(
        id=pack.id,
        vessel_id=pack.vessel_id,
        vessel_name=vessel_name,
        voyage_id=pack.voyage_id,
        request_id=pack.request_id,
        port_name=pack.port_name,
        eta=pack.eta,
        agent_contact=pack.agent_contact,
        due_date=pack.due_date,
        notes=pack.notes,
        status=pack.status,
        is_locked=pack.is_locked,
        documents=documents,
        uploaded_count=uploaded_count(documents),
        created_by=pack.created_by,
        created_at=pack.created_at,
    )


# ── Write-side ───────────────────────────────────────────────

def build_initial_checklist(
    certificates: list[VesselCertificate], user_id: str
) -> dict:
    """Pointers to every library certificate that already has a file."""
    checklist: dict = {}
    for cert in certificates:
        if not cert.file_url:
            continue
        checklist[cert.doc_type] = {
            **_cache_fields(cert),
            "doc_source": VESSEL_LIBRARY,
            "note": "",
            "status": "pending_review",
            "history": [],
            "uploaded_by": cert.uploaded_by or user_id,
            "uploaded_at": _iso(cert.updated_at) or _now_iso(),
        }
    return checklist


async def upsert_certificate(
    db: AsyncSession,
    vessel_id: str,
    doc_type: str,
    *,
    name: str,
    owner: str,
    file_name: str | None,
    file_url: str | None,
    note: str | None,
    user_id: str,
) -> VesselCertificate:
    """Create or replace the library certificate for (vessel, doc_type)."""
    result = await db.execute(
        select(VesselCertificate).where(
            VesselCertificate.vessel_id == vessel_id,
            VesselCertificate.doc_type == doc_type,
        )
    )
    cert = result.scalar_one_or_none()
    if cert is None:
        cert = VesselCertificate(vessel_id=vessel_id, doc_type=doc_type, name=name)
        db.add(cert)

    cert.name = name
    cert.owner = owner
    if file_name is not None:
        cert.file_name = file_name
    if file_url is not None:
        cert.file_url = file_url
    cert.note = note or ""
    cert.uploaded_by = user_id
    cert.updated_at = datetime.utcnow()
    await db.flush()
    return cert


def _set_entry(pack: PreArrival, doc_type: str, entry: dict) -> None:
    documents = dict(pack.documents or {})
    documents[doc_type] = entry
    pack.documents = documents
    flag_modified(pack, "documents")


def record_upload(
    pack: PreArrival,
    doc_type: str,
    body: DocumentUpload,
    user_id: str,
    certificate: VesselCertificate | None = None,
) -> dict:
    """Write an uploaded document into the pack's checklist.

    With `certificate` the entry becomes a library pointer (plus cache);
    otherwise the file fields are stored on the entry itself. Library and
    office-owned documents are approved on upload.
    """
    entry = dict((pack.documents or {}).get(doc_type) or {})
    history = list(entry.get("history") or [])
    history.append({
        "message": body.note or f"New file uploaded: {body.file_name}",
        "role": "ship",
        "created_at": _now_iso(),
    })

    if certificate is not None:
        entry.update(_cache_fields(certificate))
        entry["doc_source"] = VESSEL_LIBRARY
        entry["file_size"] = body.file_size
    else:
        entry.update({
            "doc_source": ONBOARD_UPLOAD,
            "vessel_cert_id": None,
            "name": body.name or entry.get("name") or doc_type,
            "owner": body.owner or "ship",
            "file_name": body.file_name,
            "file_url": body.file_url,
            "file_size": body.file_size,
        })

    auto_approve = certificate is not None or body.owner == "office"
    entry.update({
        "note": body.note or "",
        "status": "approved" if auto_approve else "pending_review",
        "rejection_reason": None,
        "history": history,
        "uploaded_by": user_id,
        "uploaded_at": _now_iso(),
    })
    _set_entry(pack, doc_type, entry)
    pack.updated_by = user_id
    return entry


def record_verification(
    pack: PreArrival, doc_type: str, body: DocumentVerify, user_id: str
) -> dict:
    """Approve, reject or reset one checklist entry and log it to its history."""
    current = (pack.documents or {}).get(doc_type)
    if current is None:
        raise ResourceNotFoundError("Document")

    entry = dict(current)
    history = list(entry.get("history") or [])
    entry["status"] = body.status

    if body.status == "rejected":
        reason = body.reason or "No reason provided"
        entry["rejection_reason"] = reason
        history.append({"message": reason, "role": "admin", "created_at": _now_iso()})
    elif body.status == "approved":
        entry["rejection_reason"] = None
        history.append({
            "message": "Document approved", "role": "admin", "created_at": _now_iso(),
        })

    entry["history"] = history
    _set_entry(pack, doc_type, entry)
    pack.updated_by = user_id
    logger.info(
        "Pre-arrival %s document %s marked %s", pack.request_id, doc_type, body.status,
        extra={"user_id": user_id},
    )
    return entry
