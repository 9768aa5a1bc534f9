"""RNDC Service — application lifespan (startup / shutdown hooks)."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import structlog
from fastapi import FastAPI

from rndc_service.core.config import settings
from rndc_service.core.database import engine

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the shared RNDC HTTP client and release resources on shutdown."""
    log.info(
        "rndc_service starting up",
        db_url=settings.database_url.split("@")[-1],
        batch_pause_seconds=settings.rndc_batch_pause_seconds,
    )

    # Per-attempt timeouts come from the active configuration on each call
    app.state.http_client = httpx.AsyncClient(follow_redirects=False)

    yield

    log.info("rndc_service shutting down")
    await app.state.http_client.aclose()
    await engine.dispose()
