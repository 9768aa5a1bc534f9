"""Audit trail: one Documento per XML exchange, plus the activity log."""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Index, Integer, String, Text

from rndc_service.core.database import Base
from rndc_service.models._types import JsonType, state_enum, utcnow


class DocumentoTipo(str, enum.Enum):
    REMESA = "remesa"
    MANIFIESTO = "manifiesto"
    CUMPLIMIENTO = "cumplimiento"
    CUMPLIMIENTO_MANIFIESTO = "cumplimiento_manifiesto"
    CONSULTA_MANIFIESTO = "consulta_manifiesto"


class DocumentoEstado(str, enum.Enum):
    PENDIENTE = "pendiente"
    EXITOSO = "exitoso"
    ERROR = "error"


class Documento(Base):
    """Request/response pair of a single RNDC submission."""

    __tablename__ = "documentos"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    tipo: DocumentoTipo = Column(state_enum(DocumentoTipo, "documento_tipo"), nullable=False)
    consecutivo: str = Column(String(20), nullable=False, index=True)
    xml_request: str = Column(Text, nullable=False)
    xml_response: str | None = Column(Text, nullable=True)
    estado: DocumentoEstado = Column(
        state_enum(DocumentoEstado, "documento_estado"),
        nullable=False,
        default=DocumentoEstado.PENDIENTE,
    )
    mensaje_respuesta: str | None = Column(Text, nullable=True)
    fecha_envio: datetime | None = Column(DateTime(timezone=True), nullable=True)
    datos_excel: dict | None = Column(JsonType, nullable=True)
    created_at: datetime = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class LogActividad(Base):
    """Operator-facing activity log."""

    __tablename__ = "log_actividades"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    tipo: str = Column(String(10), nullable=False)  # info, warning, error, success
    modulo: str = Column(String(50), nullable=False)
    mensaje: str = Column(Text, nullable=False)
    detalles: dict | None = Column(JsonType, nullable=True)
    created_at: datetime = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (Index("ix_log_actividades_created_at", "created_at"),)
