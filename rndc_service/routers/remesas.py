"""Remesa routes: spreadsheet upload, batch submission and fulfillment."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from rndc_service.core.config import settings
from rndc_service.core.database import get_session
from rndc_service.models import RemesaEstado
from rndc_service.routers.deps import get_credentials, get_transport
from rndc_service.schemas.rndc import (
    BatchResponse,
    CumplirRemesasRequest,
    ProcessRemesasRequest,
    RemesaResponse,
    UploadResponse,
)
from rndc_service.services import store, submission
from rndc_service.services.credentials import RndcCredentials
from rndc_service.services.errors import InvalidInputError
from rndc_service.services.excel_import import (
    CumplimientoRow,
    RemesaRow,
    json_safe,
    read_table,
    validate_batch,
)
from rndc_service.services.soap_client import RndcSoapClient

router = APIRouter(prefix="/api/remesas", tags=["Remesas"])


def batch_response(summary: submission.BatchSummary) -> BatchResponse:
    return BatchResponse(success=summary.error_count == 0, **summary.to_dict())


@router.get("", response_model=list[RemesaResponse])
async def list_remesas(
    estado: RemesaEstado | None = Query(None),
    limit: int = Query(200, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
) -> list[RemesaResponse]:
    remesas = await store.list_remesas(session, estado=estado, limit=limit, offset=offset)
    return [RemesaResponse.model_validate(r) for r in remesas]


@router.post("/upload", response_model=UploadResponse)
async def upload_remesas(file: UploadFile = File(...)) -> UploadResponse:
    """Parse and validate a dispatch sheet; nothing is stored or sent."""
    content = await file.read()
    try:
        rows = read_table(content, file.filename or "")
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    checked = validate_batch(rows)
    return UploadResponse(
        success=checked.valid,
        filename=file.filename or "",
        total=checked.total,
        rows=[json_safe(r) for r in rows],
        errors=checked.errors,
        warnings=checked.warnings,
        validation=[
            {"fila": r.fila, "valid": r.valid, "errors": r.errors, "warnings": r.warnings}
            for r in checked.rows
        ],
    )


@router.post("/process", response_model=BatchResponse)
async def process_remesas(
    payload: ProcessRemesasRequest,
    session: AsyncSession = Depends(get_session),
    credentials: RndcCredentials = Depends(get_credentials),
    transport: RndcSoapClient = Depends(get_transport),
) -> BatchResponse:
    """Register every row with RNDC, one at a time."""
    try:
        rows = [RemesaRow.from_mapping(r) for r in payload.rows]
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc

    summary = await submission.submit_remesas_batch(
        session, transport, credentials, rows,
        send=payload.send,
        pause_seconds=settings.rndc_batch_pause_seconds,
    )
    return batch_response(summary)


@router.post("/cumplir", response_model=BatchResponse)
async def cumplir_remesas(
    payload: CumplirRemesasRequest,
    session: AsyncSession = Depends(get_session),
    credentials: RndcCredentials = Depends(get_credentials),
    transport: RndcSoapClient = Depends(get_transport),
) -> BatchResponse:
    rows = [CumplimientoRow.from_mapping(r) for r in payload.rows]
    summary = await submission.fulfill_remesas_batch(
        session, transport, credentials, rows,
        pause_seconds=settings.rndc_batch_pause_seconds,
    )
    return batch_response(summary)
