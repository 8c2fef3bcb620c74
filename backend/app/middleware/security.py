"""
Security response headers.

JSON endpoints and uploaded images get a locked-down CSP; the interactive docs
load their assets from jsDelivr and get a relaxed one. Responses under /auth
carry tokens and are never cached. HSTS is only sent in production, where the
API sits behind TLS.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..config import get_settings

DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")
NO_STORE_PATHS = ("/auth",)

API_CSP = "default-src 'none'; img-src 'self' data:; frame-ancestors 'none'"
DOCS_CSP = (
    "default-src 'self'; "
    "img-src 'self' data: https:; "
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net;"
)
HSTS = "max-age=31536000; includeSubDomains"

STATIC_HEADERS = {
    "X-Frame-Options": "DENY",
    "X-Content-Type-Options": "nosniff",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def headers_for(path: str, production: bool) -> dict[str, str]:
    headers = dict(STATIC_HEADERS)
    headers["Content-Security-Policy"] = DOCS_CSP if path.startswith(DOCS_PATHS) else API_CSP
    if path.startswith(NO_STORE_PATHS):
        headers["Cache-Control"] = "no-store"
    if production:
        headers["Strict-Transport-Security"] = HSTS
    return headers


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app):
        super().__init__(app)
        self.production = get_settings().is_production

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)
        response.headers.update(headers_for(request.url.path, self.production))
        return response
