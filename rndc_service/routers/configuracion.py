"""RNDC access configuration, connectivity test and sequence counters."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rndc_service.core.database import get_session
from rndc_service.routers.deps import get_transport, not_found
from rndc_service.schemas.configuracion import (
    ConfiguracionResponse,
    ConfiguracionUpdate,
    ConnectionTestResponse,
    ConsecutivoResponse,
)
from rndc_service.services import store
from rndc_service.services.soap_client import RndcSoapClient

router = APIRouter(prefix="/api", tags=["Configuracion"])


@router.get("/configuracion", response_model=ConfiguracionResponse)
async def get_configuracion(
    session: AsyncSession = Depends(get_session),
) -> ConfiguracionResponse:
    config = await store.get_active_configuracion(session)
    if config is None:
        raise not_found("No hay configuración RNDC activa")
    return ConfiguracionResponse.model_validate(config)


@router.post("/configuracion", response_model=ConfiguracionResponse)
async def save_configuracion(
    payload: ConfiguracionUpdate,
    session: AsyncSession = Depends(get_session),
) -> ConfiguracionResponse:
    """Replace the active configuration; any other row is deactivated."""
    config = await store.save_configuracion(session, payload.model_dump())
    await store.create_log_entry(
        session,
        tipo="info",
        modulo="configuracion",
        mensaje="Configuración RNDC actualizada",
        detalles={"usuario": config.usuario, "empresa_nit": config.empresa_nit},
    )
    return ConfiguracionResponse.model_validate(config)


@router.get("/rndc/test", response_model=ConnectionTestResponse)
async def test_rndc_connection(
    transport: RndcSoapClient = Depends(get_transport),
) -> ConnectionTestResponse:
    if await transport.test_connection():
        return ConnectionTestResponse(success=True, message="Conexión con RNDC establecida")
    return ConnectionTestResponse(success=False, message="No fue posible conectar con RNDC")


@router.get("/consecutivos", response_model=list[ConsecutivoResponse])
async def list_consecutivos(
    session: AsyncSession = Depends(get_session),
) -> list[ConsecutivoResponse]:
    counters = await store.list_consecutivos(session)
    return [ConsecutivoResponse.model_validate(c) for c in counters]
