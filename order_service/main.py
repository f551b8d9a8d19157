from typing import Optional
from fastapi import FastAPI
from sqlalchemy.orm import sessionmaker
from prometheus_fastapi_instrumentator import Instrumentator
import structlog

from order_service.version import VERSION
from order_service.api import routes
from order_service.clients.catalog import CatalogClient
from order_service.core.config import Settings, settings as default_settings
from order_service.core.logging import configure_logging
from order_service.db.session import build_engine, build_session_factory

logger = structlog.get_logger(__name__)

def create_app(settings: Optional[Settings] = None, session_factory: Optional[sessionmaker] = None,
               catalog: Optional[CatalogClient] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL, json=settings.LOG_JSON)

    app = FastAPI(title="Order Service", version=VERSION)

    # one engine (and pool) per process, shared by every request
    owned_engine = None
    if session_factory is None:
        owned_engine = build_engine(settings.POSTGRES_DSN)
        session_factory = build_session_factory(owned_engine)
    owns_catalog = catalog is None
    if owns_catalog:
        catalog = CatalogClient.from_settings(settings)

    app.state.settings = settings
    app.state.session_factory = session_factory
    app.state.catalog = catalog

    if settings.METRICS_ENABLED:
        # Instrument the app BEFORE adding routes or middleware
        Instrumentator().instrument(app).expose(
            app,
            include_in_schema=False,
            endpoint="/order/metrics",
            should_gzip=True,
        )

    # Health endpoints
    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/order/health")
    def order_health():
        return {"status": "ok"}

    @app.get("/v1/_info")
    def info():
        return {"service": "order", "version": VERSION}

    @app.on_event("startup")
    async def startup_event():
        for route in app.routes:
            if hasattr(route, "methods") and hasattr(route, "path"):
                logger.info("Route registered", methods=sorted(route.methods), path=route.path)

    @app.on_event("shutdown")
    async def shutdown_event():
        if owns_catalog:
            catalog.close()
        if owned_engine is not None:
            owned_engine.dispose()

    app.include_router(routes.router, prefix="/order", tags=["orders"])
    return app

app = create_app()
