"""Pydantic schemas for remesas, manifests, submissions and the audit trail."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field

from rndc_service.models import (
    DocumentoEstado,
    DocumentoTipo,
    ManifiestoEstado,
    RemesaEstado,
)


# ── Request Schemas ───────────────────────────


class ProcessRemesasRequest(BaseModel):
    """Rows as returned by the upload preview, keyed by column name."""

    rows: list[dict[str, Any]] = Field(..., min_length=1)
    send: bool = Field(True, description="False stores the remesas as generada without sending")


class CumplirRemesasRequest(BaseModel):
    rows: list[dict[str, Any]] = Field(
        ...,
        min_length=1,
        examples=[[{"CONSECUTIVO": "1234", "FECHA": "15/03/2025"}]],
    )


class GenerarManifiestosRequest(BaseModel):
    consecutivos: list[str] = Field(..., min_length=1)


class CumplirManifiestosRequest(BaseModel):
    numeros: list[str] = Field(..., min_length=1)


# ── Response Schemas ──────────────────────────


class SubmissionResultResponse(BaseModel):
    success: bool
    consecutivo: str | None = None
    message: str
    tracking_id: str | None = None
    raw_response: str | None = None
    xml: str | None = None

    model_config = {"from_attributes": True}


class BatchResponse(BaseModel):
    """``success`` is true only when every record succeeded."""

    success: bool
    total: int
    success_count: int
    error_count: int
    results: list[SubmissionResultResponse]


class RowValidationResponse(BaseModel):
    fila: int
    valid: bool
    errors: list[str] = []
    warnings: list[str] = []

    model_config = {"from_attributes": True}


class UploadResponse(BaseModel):
    success: bool
    filename: str
    total: int
    rows: list[dict[str, Any]]
    errors: list[str] = []
    warnings: list[str] = []
    validation: list[RowValidationResponse] = []


class RemesaResponse(BaseModel):
    id: int
    consecutivo: str
    codigo_sede_remitente: str
    codigo_sede_destinatario: str
    placa: str
    cantidad_cargada: int
    fecha_cita_cargue: date
    fecha_cita_descargue: date
    conductor_id: str
    toneladas: float | None = None
    estado: RemesaEstado
    xml_enviado: str | None = None
    respuesta_rndc: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ManifiestoResponse(BaseModel):
    id: int
    numero_manifiesto: str
    consecutivo_remesa: str
    fecha_expedicion: date
    municipio_origen: str
    municipio_destino: str
    placa: str
    conductor_id: str
    valor_flete: float | None = None
    estado: ManifiestoEstado
    ingreso_id: str | None = None
    codigo_seguridad_qr: str | None = None
    xml_enviado: str | None = None
    respuesta_rndc: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class DocumentoResponse(BaseModel):
    id: int
    tipo: DocumentoTipo
    consecutivo: str
    xml_request: str
    xml_response: str | None = None
    estado: DocumentoEstado
    mensaje_respuesta: str | None = None
    fecha_envio: datetime | None = None
    datos_excel: dict | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class LogActividadResponse(BaseModel):
    id: int
    tipo: str
    modulo: str
    mensaje: str
    detalles: dict | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
