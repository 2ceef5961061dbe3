from __future__ import annotations

import json
import logging
import sys
from datetime import datetime
from typing import Any, Mapping

from ..middlewares import principal_ctx_var, request_id_ctx_var
from .config import settings

# Access lines duplicate ``request.completed``; engine echo is far too chatty.
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "sqlalchemy.engine": logging.WARNING,
}


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line, carrying the request context when present."""

    def __init__(self, *, service: str, environment: str) -> None:
        super().__init__()
        self.service = service
        self.environment = environment

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.utcnow().isoformat(timespec="milliseconds") + "Z",
            "level": record.levelname,
            "service": self.service,
            "env": self.environment,
            "logger": record.name,
            "event": record.getMessage(),
        }
        for key, var in (("request_id", request_id_ctx_var), ("principal", principal_ctx_var)):
            value = var.get()
            if value:
                entry[key] = value
        extra = getattr(record, "extra_data", None)
        if isinstance(extra, Mapping):
            entry.update(extra)
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, separators=(",", ":"), default=str)


def configure_logging(level: str | None = None) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonLogFormatter(service=settings.APP_NAME, environment=settings.APP_ENV))
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel((level or settings.LOG_LEVEL).upper())
    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)
