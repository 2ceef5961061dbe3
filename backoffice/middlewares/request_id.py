from __future__ import annotations

import logging
import time
from contextvars import ContextVar
from uuid import uuid4

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
principal_ctx_var: ContextVar[str | None] = ContextVar("principal_id", default=None)
logger = logging.getLogger("backoffice.request")

# Health checks and metric scrapes are polled constantly and never logged.
QUIET_PATHS = ("/health", "/metrics")


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag every request with a correlation id and log its outcome."""

    def __init__(self, app, header_name: str = "X-Request-ID") -> None:  # type: ignore[override]
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(self.header_name) or uuid4().hex
        request.state.request_id = request_id
        id_token = request_id_ctx_var.set(request_id)
        principal_token = principal_ctx_var.set(None)
        started = time.perf_counter()
        try:
            response = await call_next(request)
            # The auth dependency runs in a child task, so its contextvar write
            # is not visible here; request.state carries it back.
            principal = principal_ctx_var.get() or getattr(request.state, "principal", None)
        finally:
            request_id_ctx_var.reset(id_token)
            principal_ctx_var.reset(principal_token)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers[self.header_name] = request_id
        response.headers.setdefault("X-Response-Time", f"{elapsed_ms:.2f}ms")
        if not request.url.path.startswith(QUIET_PATHS):
            self._log_completion(request, response, request_id, principal, elapsed_ms)
        return response

    @staticmethod
    def _log_completion(request: Request, response: Response, request_id: str, principal: str | None, elapsed_ms: float) -> None:
        data = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status": response.status_code,
            "duration_ms": elapsed_ms,
        }
        if principal:
            data["principal"] = principal
        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(level, "request.completed", extra={"extra_data": data})
