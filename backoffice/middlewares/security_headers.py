from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

MEDIA_PREFIX = "/api/v1/media/"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Baseline headers for a JSON API that also serves product media."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault(
            "Content-Security-Policy",
            "default-src 'none'; frame-ancestors 'none'",
        )
        if request.url.path.startswith(MEDIA_PREFIX):
            response.headers.setdefault("Cache-Control", "private, max-age=3600")
        else:
            # Stock and cost figures change with every purchase or sale.
            response.headers.setdefault("Cache-Control", "no-store")
        return response
