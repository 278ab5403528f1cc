"""
Security headers added to every response.
"""
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    def __init__(self, app, storage_origin: str = ""):
        super().__init__(app)
        self.storage_origin = storage_origin.rstrip("/")

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "geolocation=(), microphone=(), camera=()"

        # Uploaded images are served from the storage origin
        img_sources = " ".join(filter(None, ["'self'", "data:", self.storage_origin]))
        response.headers["Content-Security-Policy"] = (
            "default-src 'self'; "
            f"img-src {img_sources}; "
            "style-src 'self' 'unsafe-inline'; "
            "frame-ancestors 'none';"
        )

        return response
