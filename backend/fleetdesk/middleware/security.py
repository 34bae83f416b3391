"""Response hardening for a JSON-only API.

- Security headers on every response (HSTS and CSP in production)
- HTTP → HTTPS redirect in production
"""

from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

from fleetdesk.config import settings

_BASE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "geolocation=(), microphone=(), camera=(), payment=()",
    # No response may be stored by shared caches
    "Cache-Control": "no-store",
}

_PRODUCTION_HEADERS = {
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    # The API serves no HTML, scripts or frames
    "Content-Security-Policy": "default-src 'none'; frame-ancestors 'none'",
}

# Swagger UI needs scripts and styles from its CDN
_DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)

        for name, value in _BASE_HEADERS.items():
            response.headers.setdefault(name, value)

        if settings.environment == "production":
            for name, value in _PRODUCTION_HEADERS.items():
                if name == "Content-Security-Policy" and request.url.path.startswith(_DOCS_PATHS):
                    continue
                response.headers[name] = value

        return response


class HTTPSRedirectMiddleware(BaseHTTPMiddleware):
    """Redirect HTTP requests to HTTPS (production only)."""

    def __init__(self, app, force_https: bool = False):
        super().__init__(app)
        self.force_https = force_https or settings.environment == "production"

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if self.force_https and request.url.scheme == "http":
            return RedirectResponse(url=str(request.url.replace(scheme="https")), status_code=301)
        return await call_next(request)
