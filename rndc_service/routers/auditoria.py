"""Audit trail routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rndc_service.core.database import get_session
from rndc_service.schemas.rndc import DocumentoResponse, LogActividadResponse
from rndc_service.services import store

router = APIRouter(prefix="/api", tags=["Auditoria"])


@router.get("/documentos", response_model=list[DocumentoResponse])
async def list_documentos(
    limit: int = Query(100, ge=1, le=1000),
    session: AsyncSession = Depends(get_session),
) -> list[DocumentoResponse]:
    return [DocumentoResponse.model_validate(d) for d in await store.list_documentos(session, limit=limit)]


@router.get("/logs", response_model=list[LogActividadResponse])
async def list_logs(
    limit: int = Query(100, ge=1, le=1000),
    session: AsyncSession = Depends(get_session),
) -> list[LogActividadResponse]:
    entries = await store.list_log_entries(session, limit=limit)
    return [LogActividadResponse.model_validate(e) for e in entries]
