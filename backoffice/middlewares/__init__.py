"""ASGI middleware plus the context variables the JSON log formatter reads."""

from __future__ import annotations

from .request_id import RequestIdMiddleware, principal_ctx_var, request_id_ctx_var
from .security_headers import SecurityHeadersMiddleware

__all__ = [
    "RequestIdMiddleware",
    "SecurityHeadersMiddleware",
    "principal_ctx_var",
    "request_id_ctx_var",
]
