"""RNDC credentials/endpoints and per-year sequence counters."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Integer, String, UniqueConstraint

from rndc_service.core.database import Base
from rndc_service.models._types import utcnow


class Configuracion(Base):
    """RNDC access settings. At most one row is ``activo``."""

    __tablename__ = "configuraciones"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    usuario: str = Column(String(100), nullable=False)
    password: str = Column(String(200), nullable=False)
    empresa_nit: str = Column(String(20), nullable=False)
    endpoint_primary: str = Column(String(300), nullable=False)
    endpoint_backup: str = Column(String(300), nullable=False)
    timeout: int = Column(Integer, nullable=False, default=30_000)  # milliseconds
    activo: bool = Column(Boolean, nullable=False, default=True)
    created_at: datetime = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: datetime = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )


class Consecutivo(Base):
    """Sequence counter for one document type in one year."""

    __tablename__ = "consecutivos"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    tipo: str = Column(String(20), nullable=False)
    anio: int = Column(Integer, nullable=False)
    ultimo_numero: int = Column(Integer, nullable=False, default=0)
    prefijo: str | None = Column(String(10), nullable=True)
    updated_at: datetime = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    __table_args__ = (UniqueConstraint("tipo", "anio", name="uq_consecutivos_tipo_anio"),)
