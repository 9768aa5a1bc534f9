"""Pydantic schemas for the master-data catalogs."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator


# ── Request Schemas ───────────────────────────


class SedeCreate(BaseModel):
    codigo_sede: str = Field(..., min_length=1, max_length=20)
    nombre: str = Field(..., min_length=1, max_length=200)
    tipo_sede: str = Field("granja", pattern="^(planta|granja)$")
    municipio_codigo: str = Field(..., min_length=1, max_length=10)
    valor_tonelada: float | None = Field(None, ge=0, examples=[75000])
    direccion: str | None = None
    telefono: str | None = None
    activo: bool = True


class VehiculoCreate(BaseModel):
    """A truck; ``capacidad_carga`` in kilograms is reported as the loaded quantity."""

    placa: str = Field(..., min_length=5, max_length=10)
    capacidad_carga: int = Field(..., gt=0, examples=[7000])
    propietario_tipo_doc: str = Field(..., min_length=1, max_length=2)
    propietario_numero_doc: str = Field(..., min_length=1, max_length=20)
    propietario_nombre: str = Field(..., min_length=1, max_length=200)
    tenedor_tipo_doc: str | None = None
    tenedor_numero_doc: str | None = None
    tenedor_nombre: str | None = None
    configuracion: str | None = None
    clase: str | None = None
    marca: str | None = None
    modelo: str | None = None
    activo: bool = True

    @field_validator("placa")
    @classmethod
    def _upper_placa(cls, value: str) -> str:
        return value.strip().upper()


class TerceroCreate(BaseModel):
    tipo_documento: str = Field(..., min_length=1, max_length=2)
    numero_documento: str = Field(..., min_length=1, max_length=20)
    nombre: str = Field(..., min_length=1, max_length=200)
    apellido: str | None = None
    razon_social: str | None = None
    direccion: str | None = None
    telefono: str | None = None
    email: str | None = None
    municipio_codigo: str | None = None
    es_conductor: bool = False
    es_propietario: bool = False
    es_responsable_sede: bool = False
    categoria_licencia: str | None = None
    numero_licencia: str | None = None
    fecha_vencimiento_licencia: date | None = None
    activo: bool = True


class MunicipioCreate(BaseModel):
    codigo: str = Field(..., min_length=1, max_length=10, examples=["11001000"])
    nombre: str = Field(..., min_length=1, max_length=100)
    departamento: str = Field(..., min_length=1, max_length=100)
    activo: bool = True


# ── Response Schemas ──────────────────────────


class SedeResponse(SedeCreate):
    id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class VehiculoResponse(VehiculoCreate):
    id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class TerceroResponse(TerceroCreate):
    id: int
    created_at: datetime

    model_config = {"from_attributes": True}


class MunicipioResponse(MunicipioCreate):
    id: int

    model_config = {"from_attributes": True}
