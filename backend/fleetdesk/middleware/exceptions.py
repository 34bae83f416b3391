"""Exceptions and handlers for consistent error responses.

Every error leaves the API as:

    {"error": "Human-readable message"}

with an optional "details" list for validation failures. Auth failures
carry generic messages; the missing permission and any stack trace only
reach the server log.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class FleetDeskError(Exception):
    """Base class for errors routers and services raise on purpose."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "INTERNAL_ERROR"

    def __init__(self, message: str, error_code: str | None = None):
        self.message = message
        self.error_code = error_code or self.default_code
        super().__init__(message)


class AuthenticationError(FleetDeskError):
    """No valid session: bad token, inactive user, vanished company."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHENTICATED"

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class PermissionDeniedError(FleetDeskError):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = "PERMISSION_DENIED"

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class ResourceNotFoundError(FleetDeskError):
    """Missing record, or one outside the caller's tenant scope."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")


class ConflictError(FleetDeskError):
    """Duplicate keys, in-use deletes, locked packs."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


class BusinessLogicError(FleetDeskError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "BUSINESS_LOGIC_ERROR"


# Unique violations that slip past the routers' own pre-checks (races)
_UNIQUE_MESSAGES = (
    (("users", "email"), "Email already registered"),
    (("companies", "email"), "A company with this email already exists"),
    (("roles", "name"), "Role already exists"),
    (("permissions", "slug"), "Permission already exists"),
    (("voyages", "voyage_no"), "Voyage number already exists"),
    (("pre_arrivals", "request_id"), "Request ID is already assigned"),
    (("uq_crew_application_company_email",), "A crew member with this email already exists in this company"),
    (("crew_applications", "email"), "A crew member with this email already exists in this company"),
    (("uq_vessel_certificate_doc_type",), "Certificate already exists for this vessel"),
)


def _unique_message(detail: str) -> str:
    lowered = detail.lower()
    for needles, message in _UNIQUE_MESSAGES:
        if all(n in lowered for n in needles):
            return message
    return "A record with this value already exists"


def error_response(
    status_code: int,
    message: str,
    details: list | None = None,
    headers: dict | None = None,
) -> JSONResponse:
    content: dict = {"error": message}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _request_extra(request: Request, **extra) -> dict:
    return {"path": request.url.path, "method": request.method, **extra}


def _auth_headers(status_code: int) -> dict | None:
    if status_code == status.HTTP_401_UNAUTHORIZED:
        return {"WWW-Authenticate": "Bearer"}
    return None


async def fleetdesk_exception_handler(request: Request, exc: FleetDeskError) -> JSONResponse:
    logger.warning(
        "%s %s -> %s %s",
        request.method, request.url.path, exc.error_code, exc.message,
        extra=_request_extra(request, error_code=exc.error_code),
    )
    return error_response(exc.status_code, exc.message, headers=_auth_headers(exc.status_code))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("HTTP %s: %s", exc.status_code, exc.detail, extra=_request_extra(request))
    headers = getattr(exc, "headers", None) or _auth_headers(exc.status_code)
    return error_response(exc.status_code, str(exc.detail), headers=headers)


async def validation_exception_handler(
    request: Request, exc: RequestValidationError | ValidationError
) -> JSONResponse:
    details = [
        {
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.info("Validation error on %s", request.url.path, extra=_request_extra(request))
    return error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY, "Validation error", details=details
    )


async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    detail = str(exc.orig) if exc.orig is not None else str(exc)
    logger.error("Integrity error on %s: %s", request.url.path, detail, extra=_request_extra(request))

    lowered = detail.lower()
    if "unique" in lowered or "duplicate" in lowered:
        return error_response(status.HTTP_409_CONFLICT, _unique_message(detail))
    if "foreign key" in lowered:
        return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, "Referenced record does not exist")
    return error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, "Database constraint violation")


async def operational_exception_handler(request: Request, exc: OperationalError) -> JSONResponse:
    logger.error("Database unavailable on %s: %s", request.url.path, exc, extra=_request_extra(request))
    return error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Database temporarily unavailable. Please try again.",
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s", request.url.path, extra=_request_extra(request))
    return error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(FleetDeskError, fleetdesk_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_exception_handler)
    app.add_exception_handler(OperationalError, operational_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
