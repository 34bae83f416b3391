"""Initial schema: access control, fleet, reports and pre-arrival packs.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-18

Run with:
    alembic upgrade head
    python -m fleetdesk.cli seed-permissions
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def _audit_columns(*, owned: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column("deleted_at", sa.DateTime(), nullable=True, index=True),
        sa.Column("created_by", sa.String(36), index=owned),
        sa.Column("updated_by", sa.String(36)),
    ]
    return columns + _timestamps()


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # ── Access control ───────────────────────────────────────

    op.create_table(
        "companies",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("phone", sa.String(50)),
        sa.Column("address", sa.String(500)),
        sa.Column("contact_name", sa.String(255), server_default=""),
        sa.Column("contact_email", sa.String(255), server_default=""),
        sa.Column("status", sa.String(20), server_default="active", index=True),
        *_audit_columns(owned=False),
    )

    op.create_table(
        "roles",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True, index=True),
        sa.Column("permissions", sa.JSON(), server_default="[]"),
        sa.Column("status", sa.String(20), server_default="active"),
        *_timestamps(),
    )

    op.create_table(
        "resources",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False, unique=True),
        sa.Column("status", sa.String(20), server_default="active"),
        sa.Column("deleted_at", sa.DateTime(), nullable=True, index=True),
        *_timestamps(),
    )

    op.create_table(
        "permissions",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("slug", sa.String(100), nullable=False, unique=True, index=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(255), server_default=""),
        sa.Column("resource_id", sa.String(36), sa.ForeignKey("resources.id"), nullable=False, index=True),
        sa.Column("status", sa.String(20), server_default="active"),
        *_timestamps(),
    )

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False, unique=True, index=True),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(50)),
        sa.Column("role_id", sa.String(36), sa.ForeignKey("roles.id"), index=True),
        sa.Column("additional_permissions", sa.JSON(), server_default="[]"),
        sa.Column("excluded_permissions", sa.JSON(), server_default="[]"),
        sa.Column("company_id", sa.String(36), sa.ForeignKey("companies.id"), index=True),
        sa.Column("status", sa.String(20), server_default="active"),
        sa.Column("last_login_at", sa.DateTime()),
        *_timestamps(),
    )

    # ── Fleet ────────────────────────────────────────────────

    op.create_table(
        "vessels",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("company_id", sa.String(36), sa.ForeignKey("companies.id"), nullable=False, index=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("imo", sa.String(20), index=True),
        sa.Column("fleet", sa.String(100)),
        sa.Column("status", sa.String(20), server_default="active", index=True),
        sa.Column("call_sign", sa.String(20)),
        sa.Column("mmsi", sa.String(20)),
        sa.Column("flag", sa.String(100)),
        sa.Column("year_built", sa.Integer()),
        sa.Column("dimensions", sa.JSON()),
        sa.Column("performance", sa.JSON()),
        sa.Column("machinery", sa.JSON()),
        *_audit_columns(owned=False),
    )

    op.create_table(
        "vessel_certificates",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("vessel_id", sa.String(36), sa.ForeignKey("vessels.id"), nullable=False, index=True),
        sa.Column("doc_type", sa.String(100), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("owner", sa.String(20), server_default="office"),
        sa.Column("file_name", sa.String(255)),
        sa.Column("file_url", sa.String(1000)),
        sa.Column("note", sa.Text()),
        sa.Column("uploaded_by", sa.String(36)),
        *_timestamps(),
        sa.UniqueConstraint("vessel_id", "doc_type", name="uq_vessel_certificate_doc_type"),
    )

    op.create_table(
        "voyages",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("vessel_id", sa.String(36), sa.ForeignKey("vessels.id"), nullable=False, index=True),
        sa.Column("voyage_no", sa.String(50), nullable=False, unique=True),
        sa.Column("status", sa.String(20), server_default="scheduled", index=True),
        sa.Column("route", sa.JSON()),
        sa.Column("charter", sa.JSON()),
        sa.Column("cargo", sa.JSON()),
        sa.Column("load_port", sa.String(255), index=True),
        sa.Column("start_date", sa.DateTime()),
        sa.Column("eta", sa.DateTime(), index=True),
        sa.Column("end_date", sa.DateTime()),
        *_audit_columns(),
    )

    # ── Reports and documents ────────────────────────────────

    op.create_table(
        "noon_reports",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("vessel_id", sa.String(36), sa.ForeignKey("vessels.id"), nullable=False, index=True),
        sa.Column("voyage_id", sa.String(36), sa.ForeignKey("voyages.id"), nullable=False, index=True),
        sa.Column("vessel_name", sa.String(255), nullable=False),
        sa.Column("voyage_no", sa.String(50), nullable=False),
        sa.Column("report_date", sa.DateTime(), nullable=False, index=True),
        sa.Column("position", sa.JSON()),
        sa.Column("navigation", sa.JSON()),
        sa.Column("consumption", sa.JSON()),
        sa.Column("weather", sa.JSON()),
        sa.Column("remarks", sa.Text()),
        sa.Column("status", sa.String(20), server_default="active"),
        *_audit_columns(),
    )

    op.create_table(
        "operational_reports",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("event_type", sa.String(20), nullable=False, index=True),
        sa.Column("vessel_id", sa.String(36), sa.ForeignKey("vessels.id"), nullable=False, index=True),
        sa.Column("voyage_id", sa.String(36), sa.ForeignKey("voyages.id"), nullable=False, index=True),
        sa.Column("vessel_name", sa.String(255), nullable=False),
        sa.Column("voyage_no", sa.String(50), nullable=False),
        sa.Column("port_name", sa.String(255)),
        sa.Column("last_port", sa.String(255)),
        sa.Column("event_time", sa.DateTime()),
        sa.Column("report_date", sa.DateTime(), index=True),
        sa.Column("navigation", sa.JSON()),
        sa.Column("departure_stats", sa.JSON()),
        sa.Column("arrival_stats", sa.JSON()),
        sa.Column("nor_details", sa.JSON()),
        sa.Column("remarks", sa.Text()),
        sa.Column("status", sa.String(20), server_default="active"),
        *_audit_columns(),
    )

    op.create_table(
        "cargo_documents",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("vessel_id", sa.String(36), sa.ForeignKey("vessels.id"), nullable=False, index=True),
        sa.Column("voyage_id", sa.String(36), sa.ForeignKey("voyages.id"), nullable=False, index=True),
        sa.Column("port_name", sa.String(255), nullable=False),
        sa.Column("port_type", sa.String(20), nullable=False),
        sa.Column("document_type", sa.String(30), nullable=False, index=True),
        sa.Column("document_date", sa.DateTime(), nullable=False),
        sa.Column("report_date", sa.DateTime()),
        sa.Column("file", sa.JSON()),
        sa.Column("remarks", sa.Text()),
        sa.Column("status", sa.String(20), server_default="active"),
        *_audit_columns(),
    )

    op.create_table(
        "pre_arrivals",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("vessel_id", sa.String(36), sa.ForeignKey("vessels.id"), nullable=False, index=True),
        sa.Column("voyage_id", sa.String(36), sa.ForeignKey("voyages.id")),
        sa.Column("request_id", sa.String(50), nullable=False, unique=True),
        sa.Column("port_name", sa.String(255), nullable=False),
        sa.Column("eta", sa.DateTime(), nullable=False),
        sa.Column("agent_contact", sa.String(255)),
        sa.Column("due_date", sa.DateTime()),
        sa.Column("notes", sa.Text()),
        sa.Column("status", sa.String(20), server_default="draft", index=True),
        sa.Column("is_locked", sa.Boolean(), server_default="false"),
        sa.Column("documents", sa.JSON(), server_default="{}"),
        *_audit_columns(),
    )


def downgrade() -> None:
    op.drop_table("pre_arrivals")
    op.drop_table("cargo_documents")
    op.drop_table("operational_reports")
    op.drop_table("noon_reports")
    op.drop_table("voyages")
    op.drop_table("vessel_certificates")
    op.drop_table("vessels")
    op.drop_table("users")
    op.drop_table("permissions")
    op.drop_table("resources")
    op.drop_table("roles")
    op.drop_table("companies")
