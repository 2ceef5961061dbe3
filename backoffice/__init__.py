"""Application factory and top-level wiring for the restaurant back office.

Configuration, database setup, middleware, API routers and error handling are
brought together here. ``backoffice.main`` adds logging, metrics and the
health check on top.
"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings
from .core.errors import (
    BackOfficeError,
    backoffice_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    value_error_handler,
)
from .db.session import Base, engine
from .middlewares import RequestIdMiddleware, SecurityHeadersMiddleware

# Importing the models registers their tables with the metadata.
from .models import expense as _expense  # noqa: F401
from .models import ingredient as _ingredient  # noqa: F401
from .models import inventory as _inventory  # noqa: F401
from .models import product as _product  # noqa: F401
from .models import purchase as _purchase  # noqa: F401
from .models import sale as _sale  # noqa: F401
from .routers import (
    api_expenses,
    api_ingredients,
    api_inventory,
    api_media,
    api_products,
    api_purchases,
    api_reports,
    api_sales,
)

app = FastAPI(title=settings.APP_NAME)

Base.metadata.create_all(bind=engine)

# ---------- Middleware ----------
app.add_middleware(SecurityHeadersMiddleware)
if settings.ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
app.add_middleware(RequestIdMiddleware)

# ---------- Routers ----------
for router_module in (
    api_ingredients,
    api_products,
    api_media,
    api_purchases,
    api_sales,
    api_inventory,
    api_expenses,
    api_reports,
):
    app.include_router(router_module.router)

# ---------- Exception handling ----------
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(BackOfficeError, backoffice_exception_handler)
app.add_exception_handler(ValueError, value_error_handler)


__all__ = ["app"]
