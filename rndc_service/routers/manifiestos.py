"""Manifest routes: issue, fulfill and query."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from rndc_service.core.config import settings
from rndc_service.core.database import get_session
from rndc_service.models import ManifiestoEstado
from rndc_service.routers.deps import get_credentials, get_transport, not_found
from rndc_service.routers.remesas import batch_response
from rndc_service.schemas.rndc import (
    BatchResponse,
    CumplirManifiestosRequest,
    GenerarManifiestosRequest,
    ManifiestoResponse,
    SubmissionResultResponse,
)
from rndc_service.services import store, submission
from rndc_service.services.credentials import RndcCredentials
from rndc_service.services.soap_client import RndcSoapClient

router = APIRouter(prefix="/api/manifiestos", tags=["Manifiestos"])


@router.get("", response_model=list[ManifiestoResponse])
async def list_manifiestos(
    estado: ManifiestoEstado | None = Query(None),
    limit: int = Query(200, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
) -> list[ManifiestoResponse]:
    manifiestos = await store.list_manifiestos(session, estado=estado, limit=limit, offset=offset)
    return [ManifiestoResponse.model_validate(m) for m in manifiestos]


@router.post("/generate", response_model=BatchResponse)
async def generate_manifiestos(
    payload: GenerarManifiestosRequest,
    session: AsyncSession = Depends(get_session),
    credentials: RndcCredentials = Depends(get_credentials),
    transport: RndcSoapClient = Depends(get_transport),
) -> BatchResponse:
    """Issue one manifest per accepted remesa consecutivo."""
    summary = await submission.submit_manifiestos_batch(
        session, transport, credentials, payload.consecutivos,
        pause_seconds=settings.rndc_batch_pause_seconds,
    )
    return batch_response(summary)


@router.post("/cumplir", response_model=BatchResponse)
async def cumplir_manifiestos(
    payload: CumplirManifiestosRequest,
    session: AsyncSession = Depends(get_session),
    credentials: RndcCredentials = Depends(get_credentials),
    transport: RndcSoapClient = Depends(get_transport),
) -> BatchResponse:
    summary = await submission.fulfill_manifiestos_batch(
        session, transport, credentials, payload.numeros,
        pause_seconds=settings.rndc_batch_pause_seconds,
    )
    return batch_response(summary)


@router.post("/{numero}/consultar", response_model=SubmissionResultResponse)
async def consultar_manifiesto(
    numero: str,
    session: AsyncSession = Depends(get_session),
    credentials: RndcCredentials = Depends(get_credentials),
    transport: RndcSoapClient = Depends(get_transport),
) -> SubmissionResultResponse:
    """Refresh the ingreso id and QR code of a manifest from RNDC."""
    if await store.get_manifiesto_by_numero(session, numero) is None:
        raise not_found(f"Manifiesto {numero} no encontrado")
    result = await submission.query_manifiesto(session, transport, credentials, numero)
    return SubmissionResultResponse.model_validate(result)
