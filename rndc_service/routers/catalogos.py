"""Master-data routes: sites, vehicles, parties and municipalities."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rndc_service.core.database import get_session
from rndc_service.models import Municipio, Sede, Tercero, Vehiculo
from rndc_service.routers.deps import not_found
from rndc_service.schemas.catalogo import (
    MunicipioCreate,
    MunicipioResponse,
    SedeCreate,
    SedeResponse,
    TerceroCreate,
    TerceroResponse,
    VehiculoCreate,
    VehiculoResponse,
)
from rndc_service.services import store

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["Catalogos"])


async def _create(session: AsyncSession, model: type, values: dict[str, Any]) -> Any:
    try:
        return await store.create_record(session, model, values)
    except IntegrityError as exc:
        await session.rollback()
        logger.warning("catalog_record_conflict", table=model.__tablename__, error=str(exc.orig))
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Registro duplicado en {model.__tablename__}",
        ) from exc


# ── Sedes ─────────────────────────────────────


@router.get("/sedes", response_model=list[SedeResponse])
async def list_sedes(session: AsyncSession = Depends(get_session)) -> list[SedeResponse]:
    return [SedeResponse.model_validate(s) for s in await store.list_active(session, Sede)]


@router.post("/sedes", response_model=SedeResponse, status_code=status.HTTP_201_CREATED)
async def create_sede(
    payload: SedeCreate, session: AsyncSession = Depends(get_session)
) -> SedeResponse:
    return SedeResponse.model_validate(await _create(session, Sede, payload.model_dump()))


# ── Vehículos ─────────────────────────────────


@router.get("/vehiculos", response_model=list[VehiculoResponse])
async def list_vehiculos(session: AsyncSession = Depends(get_session)) -> list[VehiculoResponse]:
    return [VehiculoResponse.model_validate(v) for v in await store.list_active(session, Vehiculo)]


@router.post("/vehiculos", response_model=VehiculoResponse, status_code=status.HTTP_201_CREATED)
async def create_vehiculo(
    payload: VehiculoCreate, session: AsyncSession = Depends(get_session)
) -> VehiculoResponse:
    return VehiculoResponse.model_validate(await _create(session, Vehiculo, payload.model_dump()))


# ── Terceros ──────────────────────────────────


@router.get("/terceros", response_model=list[TerceroResponse])
async def list_terceros(session: AsyncSession = Depends(get_session)) -> list[TerceroResponse]:
    return [TerceroResponse.model_validate(t) for t in await store.list_active(session, Tercero)]


@router.get("/terceros/documento/{numero}", response_model=TerceroResponse)
async def get_tercero_by_documento(
    numero: str, session: AsyncSession = Depends(get_session)
) -> TerceroResponse:
    """Look up a driver or owner by document number (used to verify cédulas)."""
    tercero = await store.get_tercero_by_documento(session, numero)
    if tercero is None:
        raise not_found(f"Tercero {numero} no encontrado")
    return TerceroResponse.model_validate(tercero)


@router.post("/terceros", response_model=TerceroResponse, status_code=status.HTTP_201_CREATED)
async def create_tercero(
    payload: TerceroCreate, session: AsyncSession = Depends(get_session)
) -> TerceroResponse:
    return TerceroResponse.model_validate(await _create(session, Tercero, payload.model_dump()))


# ── Municipios ────────────────────────────────


@router.get("/municipios", response_model=list[MunicipioResponse])
async def list_municipios(session: AsyncSession = Depends(get_session)) -> list[MunicipioResponse]:
    return [MunicipioResponse.model_validate(m) for m in await store.list_active(session, Municipio)]


@router.post("/municipios", response_model=MunicipioResponse, status_code=status.HTTP_201_CREATED)
async def create_municipio(
    payload: MunicipioCreate, session: AsyncSession = Depends(get_session)
) -> MunicipioResponse:
    return MunicipioResponse.model_validate(await _create(session, Municipio, payload.model_dump()))
