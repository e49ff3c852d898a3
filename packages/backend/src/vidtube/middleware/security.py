"""Security headers middleware.

Learn: Adds standard security headers to every response:
- X-Content-Type-Options: no MIME sniffing of uploaded media
- X-Frame-Options: no framing (clickjacking)
- Referrer-Policy: limits referrer leakage
- Strict-Transport-Security: only on HTTPS connections

API responses can carry tokens and account data, so they are also
marked uncacheable. Media served from the static mount is left alone.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

API_PREFIX = "/api/"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        if request.url.path.startswith(API_PREFIX):
            response.headers.setdefault("Cache-Control", "no-store")
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )
        return response
