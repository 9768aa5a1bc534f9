"""Remesa (cargo order) model."""

from __future__ import annotations

import enum
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Column, Date, DateTime, Index, Integer, Numeric, String, Text

from rndc_service.core.database import Base
from rndc_service.models._types import state_enum, utcnow


class RemesaEstado(str, enum.Enum):
    """Remesa lifecycle states."""

    GENERADA = "generada"
    ENVIADA = "enviada"  # legacy rows; counts as accepted
    EXITOSO = "exitoso"
    ERROR = "error"
    CUMPLIDA = "cumplida"
    ERROR_CUMPLIMIENTO = "error_cumplimiento"


# States from which a manifest may be issued or a fulfillment sent
REMESA_ACEPTADA = frozenset({RemesaEstado.EXITOSO, RemesaEstado.ENVIADA})


class Remesa(Base):
    """Single shipment order registered with RNDC (procesoid 3)."""

    __tablename__ = "remesas"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    consecutivo: str = Column(String(20), nullable=False, unique=True)
    codigo_sede_remitente: str = Column(String(20), nullable=False)
    codigo_sede_destinatario: str = Column(String(20), nullable=False)
    placa: str = Column(String(10), nullable=False)
    cantidad_cargada: int = Column(Integer, nullable=False)
    fecha_cita_cargue: date = Column(Date, nullable=False)
    fecha_cita_descargue: date = Column(Date, nullable=False)
    conductor_id: str = Column(String(20), nullable=False)
    toneladas: Decimal | None = Column(Numeric(8, 2), nullable=True)
    estado: RemesaEstado = Column(
        state_enum(RemesaEstado, "remesa_estado"),
        nullable=False,
        default=RemesaEstado.GENERADA,
    )

    # Last exchange with RNDC
    xml_enviado: str | None = Column(Text, nullable=True)
    respuesta_rndc: str | None = Column(Text, nullable=True)

    created_at: datetime = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_remesas_estado", "estado"),
        Index("ix_remesas_placa", "placa"),
    )
