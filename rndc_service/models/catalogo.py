"""Master data: sites, vehicles, parties and municipalities."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
)

from rndc_service.core.database import Base
from rndc_service.models._types import utcnow


class Sede(Base):
    """Origin or destination site (plant or farm)."""

    __tablename__ = "sedes"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    codigo_sede: str = Column(String(20), nullable=False, index=True)
    nombre: str = Column(String(200), nullable=False, index=True)
    tipo_sede: str = Column(String(20), nullable=False, default="granja")
    direccion: str | None = Column(Text, nullable=True)
    municipio_codigo: str = Column(String(10), nullable=False)
    telefono: str | None = Column(String(50), nullable=True)
    valor_tonelada: Decimal | None = Column(Numeric(10, 2), nullable=True)
    activo: bool = Column(Boolean, nullable=False, default=True)
    created_at: datetime = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Vehiculo(Base):
    """Registered truck. ``capacidad_carga`` (kg) is the loaded quantity reported to RNDC."""

    __tablename__ = "vehiculos"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    placa: str = Column(String(10), nullable=False, unique=True)
    capacidad_carga: int = Column(Integer, nullable=False)

    configuracion: str | None = Column(String(100), nullable=True)
    clase: str | None = Column(String(50), nullable=True)
    marca: str | None = Column(String(50), nullable=True)
    modelo: str | None = Column(String(50), nullable=True)

    # Propietario
    propietario_tipo_doc: str = Column(String(2), nullable=False)
    propietario_numero_doc: str = Column(String(20), nullable=False)
    propietario_nombre: str = Column(String(200), nullable=False)

    # Tenedor (only when different from the owner)
    tenedor_tipo_doc: str | None = Column(String(2), nullable=True)
    tenedor_numero_doc: str | None = Column(String(20), nullable=True)
    tenedor_nombre: str | None = Column(String(200), nullable=True)

    activo: bool = Column(Boolean, nullable=False, default=True)
    created_at: datetime = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Tercero(Base):
    """Person or company: driver, owner or site responsible."""

    __tablename__ = "terceros"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    tipo_documento: str = Column(String(2), nullable=False)
    numero_documento: str = Column(String(20), nullable=False, unique=True)
    nombre: str = Column(String(200), nullable=False)
    apellido: str | None = Column(String(200), nullable=True)
    razon_social: str | None = Column(String(200), nullable=True)
    direccion: str | None = Column(Text, nullable=True)
    telefono: str | None = Column(String(50), nullable=True)
    email: str | None = Column(String(200), nullable=True)
    municipio_codigo: str | None = Column(String(10), nullable=True)

    es_conductor: bool = Column(Boolean, nullable=False, default=False)
    es_propietario: bool = Column(Boolean, nullable=False, default=False)
    es_responsable_sede: bool = Column(Boolean, nullable=False, default=False)

    # Licencia de conducción
    categoria_licencia: str | None = Column(String(5), nullable=True)
    numero_licencia: str | None = Column(String(30), nullable=True)
    fecha_vencimiento_licencia: date | None = Column(Date, nullable=True)

    activo: bool = Column(Boolean, nullable=False, default=True)
    created_at: datetime = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class Municipio(Base):
    """DANE municipality code."""

    __tablename__ = "municipios"

    id: int = Column(Integer, primary_key=True, autoincrement=True)
    codigo: str = Column(String(10), nullable=False, unique=True)
    nombre: str = Column(String(100), nullable=False)
    departamento: str = Column(String(100), nullable=False)
    activo: bool = Column(Boolean, nullable=False, default=True)
