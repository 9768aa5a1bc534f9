"""Pydantic schemas for RNDC access settings and sequence counters."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class ConfiguracionUpdate(BaseModel):
    """Payload for saving the active RNDC configuration."""

    usuario: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=200)
    empresa_nit: str = Field(..., min_length=1, max_length=20)
    endpoint_primary: str = Field(..., min_length=1, max_length=300)
    endpoint_backup: str = Field(..., min_length=1, max_length=300)
    timeout: int = Field(30_000, ge=1_000, le=300_000, description="Milliseconds per attempt")
    activo: bool = True


class ConfiguracionResponse(BaseModel):
    """Active configuration; the password is never returned."""

    id: int
    usuario: str
    empresa_nit: str
    endpoint_primary: str
    endpoint_backup: str
    timeout: int
    activo: bool
    updated_at: datetime

    model_config = {"from_attributes": True}


class ConsecutivoResponse(BaseModel):
    tipo: str
    anio: int
    ultimo_numero: int
    prefijo: str | None = None
    updated_at: datetime

    model_config = {"from_attributes": True}


class ConnectionTestResponse(BaseModel):
    success: bool
    message: str
