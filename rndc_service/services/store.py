"""Persistence operations used by the RNDC workflow and the catalog routes.

Module-level async functions taking the session first, one per business
lookup. Lookups use the natural keys RNDC works with (plate, consecutivo,
site code/name, document number).
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rndc_service.models import (
    Configuracion,
    Consecutivo,
    Documento,
    DocumentoEstado,
    DocumentoTipo,
    LogActividad,
    Manifiesto,
    ManifiestoEstado,
    Remesa,
    RemesaEstado,
    Sede,
    Tercero,
    Vehiculo,
)

logger = structlog.get_logger()


# ── Configuración ─────────────────────────────


async def get_active_configuracion(session: AsyncSession) -> Configuracion | None:
    stmt = (
        select(Configuracion)
        .where(Configuracion.activo.is_(True))
        .order_by(Configuracion.updated_at.desc())
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def save_configuracion(session: AsyncSession, values: dict[str, Any]) -> Configuracion:
    """Update the active configuration in place, or create the first one.

    Whatever row ends up active, every other row is deactivated in the
    same transaction.
    """
    config = await get_active_configuracion(session)
    if config is None:
        config = Configuracion(**values)
        session.add(config)
    else:
        for key, value in values.items():
            setattr(config, key, value)
    await session.flush()

    if config.activo:
        await session.execute(
            update(Configuracion)
            .where(Configuracion.id != config.id)
            .values(activo=False)
        )

    await session.commit()
    await session.refresh(config)
    logger.info("configuracion_saved", config_id=config.id, usuario=config.usuario)
    return config


# ── Consecutivos ──────────────────────────────


async def next_consecutivo(
    session: AsyncSession, tipo: str, *, year: int | None = None
) -> str:
    """Increment and return the counter for (tipo, year), committed immediately.

    The increment is a single ``UPDATE ... RETURNING`` so two concurrent
    callers never read the same value. Numbers carry no year, so the first
    counter of a new year continues after the highest number issued for
    ``tipo`` in any earlier year.
    """
    year = year or date.today().year

    for _ in range(2):
        stmt = (
            update(Consecutivo)
            .where(Consecutivo.tipo == tipo, Consecutivo.anio == year)
            .values(
                ultimo_numero=Consecutivo.ultimo_numero + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .returning(Consecutivo.ultimo_numero)
        )
        numero = (await session.execute(stmt)).scalar_one_or_none()
        if numero is not None:
            await session.commit()
            return str(numero)

        previous = await session.execute(
            select(func.max(Consecutivo.ultimo_numero)).where(Consecutivo.tipo == tipo)
        )
        numero = (previous.scalar_one_or_none() or 0) + 1
        session.add(Consecutivo(tipo=tipo, anio=year, ultimo_numero=numero, prefijo=""))
        try:
            await session.commit()
        except IntegrityError:
            # Another transaction created the counter first; increment that one
            await session.rollback()
            continue
        if numero > 1:
            logger.info("consecutivo_year_started", tipo=tipo, anio=year, numero=numero)
        return str(numero)

    raise RuntimeError(f"No se pudo asignar consecutivo para {tipo}/{year}")


async def list_consecutivos(session: AsyncSession) -> list[Consecutivo]:
    result = await session.execute(
        select(Consecutivo).order_by(Consecutivo.anio.desc(), Consecutivo.tipo)
    )
    return list(result.scalars().all())


# ── Catálogos ─────────────────────────────────


async def get_sede_by_nombre(session: AsyncSession, nombre: str) -> Sede | None:
    stmt = select(Sede).where(Sede.nombre == nombre.strip(), Sede.activo.is_(True)).limit(1)
    return (await session.execute(stmt)).scalar_one_or_none()


async def get_sede_by_codigo(session: AsyncSession, codigo: str) -> Sede | None:
    stmt = select(Sede).where(Sede.codigo_sede == codigo).limit(1)
    return (await session.execute(stmt)).scalar_one_or_none()


async def get_vehiculo_by_placa(session: AsyncSession, placa: str) -> Vehiculo | None:
    stmt = select(Vehiculo).where(Vehiculo.placa == placa.strip().upper())
    return (await session.execute(stmt)).scalar_one_or_none()


async def get_tercero_by_documento(session: AsyncSession, numero: str) -> Tercero | None:
    stmt = select(Tercero).where(Tercero.numero_documento == numero)
    return (await session.execute(stmt)).scalar_one_or_none()


async def list_active(session: AsyncSession, model: type) -> list[Any]:
    """All active rows of a catalog model (sedes, vehiculos, terceros, municipios)."""
    result = await session.execute(
        select(model).where(model.activo.is_(True)).order_by(model.id)
    )
    return list(result.scalars().all())


async def create_record(session: AsyncSession, model: type, values: dict[str, Any]) -> Any:
    record = model(**values)
    session.add(record)
    await session.commit()
    await session.refresh(record)
    logger.info("catalog_record_created", table=model.__tablename__, record_id=record.id)
    return record


# ── Remesas ───────────────────────────────────


async def get_remesa_by_consecutivo(session: AsyncSession, consecutivo: str) -> Remesa | None:
    stmt = select(Remesa).where(Remesa.consecutivo == consecutivo)
    return (await session.execute(stmt)).scalar_one_or_none()


async def create_remesa(session: AsyncSession, **values: Any) -> Remesa:
    remesa = Remesa(**values)
    session.add(remesa)
    await session.commit()
    await session.refresh(remesa)
    return remesa


async def update_remesa(session: AsyncSession, remesa: Remesa, **changes: Any) -> Remesa:
    for key, value in changes.items():
        setattr(remesa, key, value)
    await session.commit()
    await session.refresh(remesa)
    return remesa


async def list_remesas(
    session: AsyncSession, *, estado: RemesaEstado | None = None, limit: int = 200, offset: int = 0
) -> list[Remesa]:
    stmt = select(Remesa)
    if estado:
        stmt = stmt.where(Remesa.estado == estado)
    stmt = stmt.order_by(Remesa.created_at.desc(), Remesa.id.desc()).limit(limit).offset(offset)
    return list((await session.execute(stmt)).scalars().all())


# ── Manifiestos ───────────────────────────────


async def get_manifiesto_by_numero(session: AsyncSession, numero: str) -> Manifiesto | None:
    stmt = select(Manifiesto).where(Manifiesto.numero_manifiesto == numero)
    return (await session.execute(stmt)).scalar_one_or_none()


async def create_manifiesto(session: AsyncSession, **values: Any) -> Manifiesto:
    manifiesto = Manifiesto(**values)
    session.add(manifiesto)
    await session.commit()
    await session.refresh(manifiesto)
    return manifiesto


async def update_manifiesto(
    session: AsyncSession, manifiesto: Manifiesto, **changes: Any
) -> Manifiesto:
    for key, value in changes.items():
        setattr(manifiesto, key, value)
    await session.commit()
    await session.refresh(manifiesto)
    return manifiesto


async def list_manifiestos(
    session: AsyncSession, *, estado: ManifiestoEstado | None = None, limit: int = 200, offset: int = 0
) -> list[Manifiesto]:
    stmt = select(Manifiesto)
    if estado:
        stmt = stmt.where(Manifiesto.estado == estado)
    stmt = stmt.order_by(Manifiesto.created_at.desc(), Manifiesto.id.desc()).limit(limit).offset(offset)
    return list((await session.execute(stmt)).scalars().all())


# ── Auditoría ─────────────────────────────────


async def create_documento(
    session: AsyncSession,
    *,
    tipo: DocumentoTipo,
    consecutivo: str,
    xml_request: str,
    datos_excel: dict | None = None,
) -> Documento:
    """Record an outgoing message as ``pendiente`` before it is sent."""
    documento = Documento(
        tipo=tipo,
        consecutivo=consecutivo,
        xml_request=xml_request,
        estado=DocumentoEstado.PENDIENTE,
        datos_excel=datos_excel,
    )
    session.add(documento)
    await session.commit()
    await session.refresh(documento)
    return documento


async def update_documento(
    session: AsyncSession,
    documento: Documento,
    *,
    estado: DocumentoEstado,
    xml_response: str | None,
    mensaje_respuesta: str,
) -> Documento:
    documento.estado = estado
    documento.xml_response = xml_response
    documento.mensaje_respuesta = mensaje_respuesta
    documento.fecha_envio = datetime.now(timezone.utc)
    await session.commit()
    await session.refresh(documento)
    return documento


async def list_documentos(session: AsyncSession, *, limit: int = 100) -> list[Documento]:
    stmt = select(Documento).order_by(Documento.created_at.desc(), Documento.id.desc()).limit(limit)
    return list((await session.execute(stmt)).scalars().all())


async def create_log_entry(
    session: AsyncSession,
    *,
    tipo: str,
    modulo: str,
    mensaje: str,
    detalles: dict | None = None,
) -> LogActividad:
    entry = LogActividad(tipo=tipo, modulo=modulo, mensaje=mensaje, detalles=detalles)
    session.add(entry)
    await session.commit()
    return entry


async def list_log_entries(session: AsyncSession, *, limit: int = 100) -> list[LogActividad]:
    stmt = (
        select(LogActividad)
        .order_by(LogActividad.created_at.desc(), LogActividad.id.desc())
        .limit(limit)
    )
    return list((await session.execute(stmt)).scalars().all())


