"""RNDC Service — FastAPI application factory.

Submits remesas and manifests to the RNDC web service and keeps the
catalogs and audit trail they depend on, backed by PostgreSQL.
"""

from __future__ import annotations

from fastapi import FastAPI

from rndc_service import __version__
from rndc_service.core.config import settings
from rndc_service.core.events import lifespan
from rndc_service.routers import auditoria, catalogos, configuracion, health, manifiestos, remesas
from rndc_shared.logging import setup_logging
from rndc_shared.middleware import RequestContextMiddleware


def create_app() -> FastAPI:
    """Construct and return the FastAPI application."""
    setup_logging(
        log_level=settings.log_level,
        json_logs=settings.json_logs,
        service_name=settings.service_name,
    )

    application = FastAPI(
        title="RNDC Service",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    application.add_middleware(RequestContextMiddleware)
    application.include_router(health.router)
    application.include_router(configuracion.router)
    application.include_router(catalogos.router)
    application.include_router(remesas.router)
    application.include_router(manifiestos.router)
    application.include_router(auditoria.router)

    return application


app = create_app()
