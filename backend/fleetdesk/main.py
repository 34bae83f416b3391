from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fleetdesk.config import settings
from fleetdesk.middleware.exceptions import register_exception_handlers
from fleetdesk.middleware.security import HTTPSRedirectMiddleware, SecurityHeadersMiddleware
from fleetdesk.routers import (
    applications,
    auth,
    cargo_documents,
    companies,
    dashboard,
    health,
    noon_reports,
    operational_reports,
    permissions,
    pre_arrival,
    resources,
    roles,
    users,
    vessels,
    voyages,
)
from fleetdesk.services.startup import lifespan

app = FastAPI(
    title="FleetDesk",
    description="Multi-tenant ship operations and reporting API",
    version="0.1.0",
    lifespan=lifespan,
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (outermost first) ─────────────────────────────
app.add_middleware(SecurityHeadersMiddleware)

# HTTPS redirect (production only)
app.add_middleware(HTTPSRedirectMiddleware, force_https=False)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ──────────────────────────────────────────────────
# Public
app.include_router(health.router)
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])

# Access control
app.include_router(roles.router, prefix="/api/roles", tags=["roles"])
app.include_router(permissions.router, prefix="/api/permissions", tags=["permissions"])
app.include_router(resources.router, prefix="/api/resources", tags=["resources"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(companies.router, prefix="/api/companies", tags=["companies"])

# Fleet
app.include_router(vessels.router, prefix="/api/vessels", tags=["vessels"])
app.include_router(voyages.router, prefix="/api/voyages", tags=["voyages"])

# Reports and documents (tenant-scoped)
app.include_router(noon_reports.router, prefix="/api/noon-reports", tags=["noon-reports"])
app.include_router(operational_reports.departure_router, prefix="/api/departure-reports", tags=["departure-reports"])
app.include_router(operational_reports.arrival_router, prefix="/api/arrival-reports", tags=["arrival-reports"])
app.include_router(operational_reports.nor_router, prefix="/api/nor-reports", tags=["nor-reports"])
app.include_router(cargo_documents.router, prefix="/api/cargo-documents", tags=["cargo-documents"])
app.include_router(pre_arrival.router, prefix="/api/pre-arrival", tags=["pre-arrival"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])

# Crewing
app.include_router(applications.router, prefix="/api/applications", tags=["applications"])
