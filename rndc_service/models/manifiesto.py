"""Manifiesto (transport manifest) model."""

from __future__ import annotations

import enum
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Column, Date, DateTime, Index, Integer, Numeric, String, Text

from rndc_service.core.database import Base
from rndc_service.models._types import state_enum, utcnow


class ManifiestoEstado(str, enum.Enum):
    """Manifiesto lifecycle states."""

    GENERADO = "generado"
    EXITOSO = "exitoso"
    ERROR = "error"
    CUMPLIDO = "cumplido"
    ERROR_CUMPLIMIENTO = "error_cumplimiento"


class Manifiesto(Base):
    """Transport manifest, one per accepted remesa.

    ``numero_manifiesto`` always equals ``consecutivo_remesa``.
    """

    __tablename__ = "manifiestos"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    numero_manifiesto: str = Column(String(20), nullable=False, unique=True)
    consecutivo_remesa: str = Column(String(20), nullable=False, index=True)
    fecha_expedicion: date = Column(Date, nullable=False)
    municipio_origen: str = Column(String(10), nullable=False)
    municipio_destino: str = Column(String(10), nullable=False)
    placa: str = Column(String(10), nullable=False)
    conductor_id: str = Column(String(20), nullable=False)
    valor_flete: Decimal | None = Column(Numeric(12, 2), nullable=True)
    estado: ManifiestoEstado = Column(
        state_enum(ManifiestoEstado, "manifiesto_estado"),
        nullable=False,
        default=ManifiestoEstado.GENERADO,
    )

    # Assigned by RNDC
    ingreso_id: str | None = Column(String(30), nullable=True)
    codigo_seguridad_qr: str | None = Column(String(200), nullable=True)

    xml_enviado: str | None = Column(Text, nullable=True)
    respuesta_rndc: str | None = Column(Text, nullable=True)

    created_at: datetime = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (Index("ix_manifiestos_estado", "estado"),)
