from pydantic import BaseModel


class DashboardMetrics(BaseModel):
    """Visible-row counts. A metric is null when the caller may not see it."""
    noon_reports: int | None = None
    departure_reports: int | None = None
    arrival_reports: int | None = None
    nor_reports: int | None = None
    cargo_stowage: int | None = None
    cargo_documents: int | None = None
    vessels: int | None = None
    voyages: int | None = None
    users: int | None = None
    companies: int | None = None
