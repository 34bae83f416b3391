"""Aggregate model imports for Alembic auto-detection."""

# Access control
from fleetdesk.models.company import Company  # noqa: F401
from fleetdesk.models.permission import Permission, Resource  # noqa: F401
from fleetdesk.models.role import Role  # noqa: F401
from fleetdesk.models.user import User, UserStatus  # noqa: F401

# Fleet
from fleetdesk.models.vessel import Vessel, VesselCertificate  # noqa: F401
from fleetdesk.models.voyage import Voyage  # noqa: F401

# Reports and documents
from fleetdesk.models.report import NoonReport, OperationalReport  # noqa: F401
from fleetdesk.models.cargo_document import CargoDocument  # noqa: F401
from fleetdesk.models.pre_arrival import PreArrival  # noqa: F401

# Crewing
from fleetdesk.models.crew_application import CrewApplication  # noqa: F401
