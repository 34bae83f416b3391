"""Crew applications (seafarer CVs) per company.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18

After upgrading, re-run `python -m fleetdesk.cli seed-permissions` to add
the jobs.* permissions.
"""

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa


def upgrade() -> None:
    op.create_table(
        "crew_applications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("company_id", sa.String(36), sa.ForeignKey("companies.id"), nullable=False, index=True),
        sa.Column("submission_token", sa.String(64), nullable=False, unique=True),
        sa.Column("form_source", sa.String(20), server_default="admin_created"),
        sa.Column("last_edited_by", sa.String(36)),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("rank", sa.String(100), nullable=False, index=True),
        sa.Column("position_applied", sa.String(100)),
        sa.Column("date_of_availability", sa.DateTime()),
        sa.Column("availability_note", sa.String(255)),
        sa.Column("profile_photo", sa.String(1000)),
        sa.Column("resume", sa.JSON()),
        sa.Column("nationality", sa.String(100), nullable=False, index=True),
        sa.Column("date_of_birth", sa.DateTime(), nullable=False),
        sa.Column("place_of_birth", sa.String(255)),
        sa.Column("marital_status", sa.String(20)),
        sa.Column("present_address", sa.String(500), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("cell_phone", sa.String(50)),
        sa.Column("home_phone", sa.String(50)),
        sa.Column("nearest_airport", sa.String(255)),
        sa.Column("languages", sa.JSON(), server_default="[]"),
        sa.Column("medical_cert_issued_date", sa.DateTime()),
        sa.Column("medical_cert_expired_date", sa.DateTime(), index=True),
        sa.Column("next_of_kin", sa.JSON()),
        sa.Column("licences", sa.JSON(), server_default="[]"),
        sa.Column("passports", sa.JSON(), server_default="[]"),
        sa.Column("seamans_books", sa.JSON(), server_default="[]"),
        sa.Column("visas", sa.JSON(), server_default="[]"),
        sa.Column("endorsements", sa.JSON(), server_default="[]"),
        sa.Column("stcw_certificates", sa.JSON(), server_default="[]"),
        sa.Column("other_certificates", sa.JSON(), server_default="[]"),
        sa.Column("extra_docs", sa.JSON(), server_default="[]"),
        sa.Column("sea_experience", sa.JSON(), server_default="[]"),
        sa.Column("additional_info", sa.Text()),
        sa.Column("status", sa.String(20), server_default="draft", index=True),
        sa.Column("assigned_to", sa.String(36)),
        sa.Column("admin_notes", sa.JSON(), server_default="[]"),
        sa.Column("deleted_at", sa.DateTime(), nullable=True, index=True),
        sa.Column("created_by", sa.String(36)),
        sa.Column("updated_by", sa.String(36)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("company_id", "email", name="uq_crew_application_company_email"),
    )


def downgrade() -> None:
    op.drop_table("crew_applications")
