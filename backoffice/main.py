from prometheus_fastapi_instrumentator import Instrumentator

from backoffice.core.config import settings
from backoffice.core.logging import configure_logging
from . import app as base_app

configure_logging()
app = base_app
app.title = settings.APP_NAME
instrumentator = Instrumentator(excluded_handlers=["/health", "/metrics"])
instrumentator.instrument(app).expose(app, include_in_schema=False)


@app.get("/health")
async def health() -> dict[str, bool]:
    return {"ok": True}
