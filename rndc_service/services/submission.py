"""RNDC submission workflows.

Each workflow resolves the stored records it needs, builds one XML
message, records it as a ``pendiente`` Documento, sends it through the
transport and stores the classified outcome:

  remesa (3) → manifiesto (4) → cumplir remesa (5) → cumplir manifiesto (6)

Batches run strictly one record at a time with a pause between sends;
RNDC throttles bursts. A failing record never stops the batch and nothing
is retried automatically: every send can create a new ingreso id.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Protocol, TypeVar

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from rndc_service.models import (
    REMESA_ACEPTADA,
    DocumentoEstado,
    DocumentoTipo,
    Manifiesto,
    ManifiestoEstado,
    Remesa,
    RemesaEstado,
)
from rndc_service.services import store
from rndc_service.services.credentials import RndcCredentials
from rndc_service.services.errors import InvalidInputError, ResolutionError, RndcError, StateError
from rndc_service.services.excel_import import CumplimientoRow, RemesaRow, parse_fecha
from rndc_service.services.response_classifier import classify, extract_tag
from rndc_service.services.soap_client import TransportResult
from rndc_service.services.xml_builder import (
    CumplimientoManifiestoPayload,
    CumplimientoRemesaPayload,
    ManifiestoPayload,
    RemesaPayload,
    build_consulta_manifiesto_xml,
    build_cumplimiento_manifiesto_xml,
    build_cumplimiento_remesa_xml,
    build_manifiesto_xml,
    build_remesa_xml,
)

logger = structlog.get_logger()

T = TypeVar("T")

DEFAULT_PAUSE_SECONDS = 2.0
MISSING_INGRESOID_MESSAGE = "Respuesta sin ingresoid"
# Remesa numbers held by stored remesas that one allocation may skip
MAX_TAKEN_CONSECUTIVOS = 50

# Manifest states that may (re)send a fulfillment
_MANIFIESTO_CUMPLIBLE = frozenset({ManifiestoEstado.EXITOSO, ManifiestoEstado.ERROR_CUMPLIMIENTO})
_MANIFIESTO_REGISTRADO = frozenset({ManifiestoEstado.EXITOSO, ManifiestoEstado.CUMPLIDO})


class Transport(Protocol):
    async def send(self, xml: str) -> TransportResult: ...


@dataclass
class SubmissionResult:
    """Outcome of one record; never raised, always returned."""

    success: bool
    consecutivo: str | None
    message: str
    tracking_id: str | None = None
    raw_response: str | None = None
    xml: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class BatchSummary:
    total: int = 0
    success_count: int = 0
    error_count: int = 0
    results: list[SubmissionResult] = field(default_factory=list)

    def add(self, result: SubmissionResult) -> None:
        self.total += 1
        if result.success:
            self.success_count += 1
        else:
            self.error_count += 1
        self.results.append(result)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "success_count": self.success_count,
            "error_count": self.error_count,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass
class _Exchange:
    """What came back from one send, already reflected on the Documento."""

    success: bool
    message: str
    tracking_id: str | None = None
    raw_response: str | None = None


# ── Helpers ─────────────────────────────────────────────


def calcular_flete(toneladas: Decimal | float | None, valor_tonelada: Decimal | float | None) -> int:
    """Freight in pesos: tons × destination rate, rounded half-up to a whole peso."""
    tons = Decimal(str(toneladas or 0))
    rate = Decimal(str(valor_tonelada or 0))
    return int((tons * rate).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _toneladas_from_kg(kg: int) -> Decimal:
    return (Decimal(kg) / Decimal(1000)).quantize(Decimal("0.01"))


def _numero_manifiesto(remesa: Remesa, existing: Manifiesto | None) -> str:
    """A manifest carries exactly one remesa and reuses its consecutivo as number."""
    numero = remesa.consecutivo
    if existing is not None and existing.consecutivo_remesa != numero:
        raise InvalidInputError(
            f"El manifiesto {numero} ya está asociado a la remesa {existing.consecutivo_remesa}"
        )
    return numero


async def _exchange(
    session: AsyncSession,
    transport: Transport,
    *,
    tipo: DocumentoTipo,
    consecutivo: str,
    xml: str,
    datos_excel: dict | None = None,
) -> _Exchange:
    """Persist the request, send it once, classify and persist the response."""
    documento = await store.create_documento(
        session, tipo=tipo, consecutivo=consecutivo, xml_request=xml, datos_excel=datos_excel
    )

    sent = await transport.send(xml)
    if not sent.success:
        exchange = _Exchange(success=False, message=sent.error_message or "Error de transporte")
    else:
        raw = sent.raw_body or ""
        outcome = classify(raw)
        if outcome.success and not outcome.tracking_id:
            exchange = _Exchange(success=False, message=MISSING_INGRESOID_MESSAGE, raw_response=raw)
        else:
            exchange = _Exchange(
                success=outcome.success,
                message=outcome.message,
                tracking_id=outcome.tracking_id,
                raw_response=raw,
            )

    await store.update_documento(
        session,
        documento,
        estado=DocumentoEstado.EXITOSO if exchange.success else DocumentoEstado.ERROR,
        xml_response=exchange.raw_response,
        mensaje_respuesta=exchange.message,
    )
    logger.info(
        "rndc_exchange_recorded",
        tipo=tipo.value,
        consecutivo=consecutivo,
        success=exchange.success,
        tracking_id=exchange.tracking_id,
        endpoint=sent.endpoint,
    )
    return exchange


async def _log(
    session: AsyncSession, tipo: str, modulo: str, mensaje: str, **detalles: Any
) -> None:
    await store.create_log_entry(
        session, tipo=tipo, modulo=modulo, mensaje=mensaje, detalles=detalles or None
    )


async def _log_outcome(
    session: AsyncSession, modulo: str, result: SubmissionResult, success_text: str
) -> None:
    if result.success:
        await _log(
            session, "success", modulo, f"{success_text} {result.consecutivo}",
            consecutivo=result.consecutivo, ingresoid=result.tracking_id,
        )
    else:
        await _log(
            session, "error", modulo, f"Error en {modulo} {result.consecutivo or ''}".strip(),
            consecutivo=result.consecutivo, error=result.message,
        )


async def _require_remesa(session: AsyncSession, consecutivo: str) -> Remesa:
    remesa = await store.get_remesa_by_consecutivo(session, consecutivo)
    if remesa is None:
        raise ResolutionError(f"Remesa {consecutivo} no encontrada")
    return remesa


async def _require_manifiesto(session: AsyncSession, numero: str) -> Manifiesto:
    manifiesto = await store.get_manifiesto_by_numero(session, numero)
    if manifiesto is None:
        raise ResolutionError(f"Manifiesto {numero} no encontrado")
    return manifiesto


async def _guarded(
    session: AsyncSession, modulo: str, key: str | None, run: Callable[[], Awaitable[SubmissionResult]]
) -> SubmissionResult:
    """Turn a precondition failure into a failed result plus an activity entry."""
    try:
        return await run()
    except RndcError as exc:
        await session.rollback()
        logger.warning("submission_rejected", modulo=modulo, key=key, error=str(exc))
        await _log(session, "error", modulo, str(exc), consecutivo=key)
        return SubmissionResult(success=False, consecutivo=key, message=str(exc))
    except IntegrityError as exc:
        await session.rollback()
        logger.error("submission_conflict", modulo=modulo, key=key, error=str(exc.orig))
        message = f"Conflicto al guardar el registro: {exc.orig}"
        await _log(session, "error", modulo, message, consecutivo=key)
        return SubmissionResult(success=False, consecutivo=key, message=message)


async def _free_remesa_consecutivo(session: AsyncSession) -> str:
    """Next remesa number that no stored remesa already holds."""
    for _ in range(MAX_TAKEN_CONSECUTIVOS):
        consecutivo = await store.next_consecutivo(session, "remesa")
        if await store.get_remesa_by_consecutivo(session, consecutivo) is None:
            return consecutivo
        logger.warning("remesa_consecutivo_taken", consecutivo=consecutivo)
    raise StateError("No se encontró un consecutivo de remesa libre; revise el contador de remesas")


async def _run_batch(
    session: AsyncSession,
    items: Iterable[T],
    handle: Callable[[T], Awaitable[SubmissionResult]],
    *,
    modulo: str,
    key: Callable[[T], str | None],
    pause_seconds: float,
) -> BatchSummary:
    items = list(items)
    summary = BatchSummary()
    await _log(session, "info", modulo, f"Iniciando procesamiento de {len(items)} registros")
    logger.info("batch_started", modulo=modulo, total=len(items), pause_seconds=pause_seconds)

    for index, item in enumerate(items):
        if index > 0 and pause_seconds > 0:
            await asyncio.sleep(pause_seconds)
        try:
            result = await handle(item)
        except Exception as exc:
            await session.rollback()
            logger.exception("batch_item_failed", modulo=modulo, index=index)
            result = SubmissionResult(
                success=False, consecutivo=key(item), message=f"Error inesperado: {exc}"
            )
            await _log(session, "error", modulo, result.message, consecutivo=result.consecutivo)
        summary.add(result)

    await _log(
        session,
        "success" if summary.error_count == 0 else "warning",
        modulo,
        f"Procesamiento completado: {summary.success_count} exitosos, {summary.error_count} errores",
        total=summary.total,
        success_count=summary.success_count,
        error_count=summary.error_count,
    )
    logger.info(
        "batch_completed",
        modulo=modulo,
        total=summary.total,
        success_count=summary.success_count,
        error_count=summary.error_count,
    )
    return summary


# ── Remesas (procesoid 3) ───────────────────────────────


async def submit_remesa(
    session: AsyncSession,
    transport: Transport,
    credentials: RndcCredentials,
    row: RemesaRow,
    *,
    send: bool = True,
) -> SubmissionResult:
    """Register one spreadsheet row as a remesa.

    The row's date is checked and its sites and vehicle resolved before a
    consecutivo is allocated, so rejected rows do not consume numbers.
    With ``send=False`` the remesa is stored as ``generada`` with its XML
    and nothing goes out.
    """
    return await _guarded(
        session, "remesas", None,
        lambda: _submit_remesa(session, transport, credentials, row, send=send),
    )


async def _submit_remesa(
    session: AsyncSession,
    transport: Transport,
    credentials: RndcCredentials,
    row: RemesaRow,
    *,
    send: bool,
) -> SubmissionResult:
    log = logger.bind(placa=row.placa, planta=row.planta, granja=row.granja)

    fecha_cita = parse_fecha(row.fecha_cita)
    if not row.identificacion:
        raise InvalidInputError(f"Falta la identificación del conductor para la placa {row.placa}")

    origen = await store.get_sede_by_nombre(session, row.planta)
    if origen is None:
        raise ResolutionError(f"Sede de origen (PLANTA) no encontrada: {row.planta}")
    destino = await store.get_sede_by_nombre(session, row.granja)
    if destino is None:
        raise ResolutionError(f"Sede de destino (GRANJA) no encontrada: {row.granja}")

    vehiculo = await store.get_vehiculo_by_placa(session, row.placa)
    if vehiculo is None:
        raise ResolutionError(f"Vehículo con placa {row.placa} no encontrado")

    cantidad = vehiculo.capacidad_carga
    if row.cantidad_cargada is not None and row.cantidad_cargada != cantidad:
        log.info("cantidad_cargada_overridden", supplied=row.cantidad_cargada, capacidad=cantidad)

    consecutivo = await _free_remesa_consecutivo(session)
    log = log.bind(consecutivo=consecutivo)
    log.info("remesa_consecutivo_allocated")

    payload = RemesaPayload(
        consecutivo=consecutivo,
        codigo_sede_remitente=origen.codigo_sede,
        codigo_sede_destinatario=destino.codigo_sede,
        cantidad_cargada=cantidad,
        fecha_cita_cargue=fecha_cita,
        fecha_cita_descargue=fecha_cita,
        conductor_id=row.identificacion,
    )
    xml = build_remesa_xml(payload, credentials)

    fields = dict(
        consecutivo=consecutivo,
        codigo_sede_remitente=origen.codigo_sede,
        codigo_sede_destinatario=destino.codigo_sede,
        placa=vehiculo.placa,
        cantidad_cargada=cantidad,
        fecha_cita_cargue=fecha_cita,
        fecha_cita_descargue=fecha_cita,
        conductor_id=row.identificacion,
        toneladas=row.toneladas if row.toneladas is not None else _toneladas_from_kg(cantidad),
        xml_enviado=xml,
    )

    if not send:
        await store.create_remesa(session, estado=RemesaEstado.GENERADA, **fields)
        await _log(session, "info", "remesas", f"Remesa {consecutivo} generada sin envío",
                   consecutivo=consecutivo)
        log.info("remesa_generated")
        return SubmissionResult(
            success=True, consecutivo=consecutivo, message="Remesa generada (sin envío)", xml=xml
        )

    exchange = await _exchange(
        session, transport,
        tipo=DocumentoTipo.REMESA, consecutivo=consecutivo, xml=xml, datos_excel=row.source,
    )
    await store.create_remesa(
        session,
        estado=RemesaEstado.EXITOSO if exchange.success else RemesaEstado.ERROR,
        respuesta_rndc=exchange.raw_response or exchange.message,
        **fields,
    )

    result = SubmissionResult(
        success=exchange.success,
        consecutivo=consecutivo,
        message=exchange.message,
        tracking_id=exchange.tracking_id,
        raw_response=exchange.raw_response,
        xml=xml,
    )
    await _log_outcome(session, "remesas", result, "Remesa registrada en RNDC")
    log.info("remesa_submitted", success=result.success, ingresoid=result.tracking_id)
    return result


async def submit_remesas_batch(
    session: AsyncSession,
    transport: Transport,
    credentials: RndcCredentials,
    rows: Iterable[RemesaRow],
    *,
    send: bool = True,
    pause_seconds: float = DEFAULT_PAUSE_SECONDS,
) -> BatchSummary:
    return await _run_batch(
        session, rows,
        lambda row: submit_remesa(session, transport, credentials, row, send=send),
        modulo="remesas",
        key=lambda row: None,
        pause_seconds=pause_seconds if send else 0,
    )


# ── Manifiestos (procesoid 4) ───────────────────────────


async def submit_manifiesto(
    session: AsyncSession,
    transport: Transport,
    credentials: RndcCredentials,
    consecutivo_remesa: str,
) -> SubmissionResult:
    """Issue the manifest of an accepted remesa. The manifest number is the remesa's consecutivo."""
    return await _guarded(
        session, "manifiestos", consecutivo_remesa,
        lambda: _submit_manifiesto(session, transport, credentials, consecutivo_remesa),
    )


async def _submit_manifiesto(
    session: AsyncSession,
    transport: Transport,
    credentials: RndcCredentials,
    consecutivo_remesa: str,
) -> SubmissionResult:
    remesa = await _require_remesa(session, consecutivo_remesa)
    if remesa.estado not in REMESA_ACEPTADA:
        raise StateError(
            f"La remesa {consecutivo_remesa} no fue aceptada por RNDC (estado {remesa.estado.value})"
        )

    existing = await store.get_manifiesto_by_numero(session, remesa.consecutivo)
    if existing is not None and existing.estado in _MANIFIESTO_REGISTRADO:
        raise StateError(f"El manifiesto {existing.numero_manifiesto} ya fue registrado")

    origen = await store.get_sede_by_codigo(session, remesa.codigo_sede_remitente)
    destino = await store.get_sede_by_codigo(session, remesa.codigo_sede_destinatario)
    if origen is None or destino is None:
        raise ResolutionError(
            f"Sedes de la remesa {consecutivo_remesa} no encontradas "
            f"({remesa.codigo_sede_remitente} / {remesa.codigo_sede_destinatario})"
        )

    vehiculo = await store.get_vehiculo_by_placa(session, remesa.placa)
    if vehiculo is None:
        raise ResolutionError(f"Vehículo con placa {remesa.placa} no encontrado")

    numero_manifiesto = _numero_manifiesto(remesa, existing)
    valor_flete = calcular_flete(remesa.toneladas, destino.valor_tonelada)
    payload = ManifiestoPayload(
        numero_manifiesto=numero_manifiesto,
        consecutivo_remesa=remesa.consecutivo,
        fecha_expedicion=date.today(),
        municipio_origen=origen.municipio_codigo,
        municipio_destino=destino.municipio_codigo,
        placa=remesa.placa,
        conductor_id=remesa.conductor_id,
        valor_flete=valor_flete,
        titular_tipo_doc=vehiculo.propietario_tipo_doc,
        titular_numero_doc=vehiculo.propietario_numero_doc,
    )
    xml = build_manifiesto_xml(payload, credentials)
    logger.info("manifiesto_built", numero=numero_manifiesto, valor_flete=valor_flete)

    exchange = await _exchange(
        session, transport,
        tipo=DocumentoTipo.MANIFIESTO, consecutivo=numero_manifiesto, xml=xml,
    )

    fields = dict(
        consecutivo_remesa=remesa.consecutivo,
        fecha_expedicion=payload.fecha_expedicion,
        municipio_origen=payload.municipio_origen,
        municipio_destino=payload.municipio_destino,
        placa=payload.placa,
        conductor_id=payload.conductor_id,
        valor_flete=Decimal(valor_flete),
        estado=ManifiestoEstado.EXITOSO if exchange.success else ManifiestoEstado.ERROR,
        ingreso_id=exchange.tracking_id,
        xml_enviado=xml,
        respuesta_rndc=exchange.raw_response or exchange.message,
    )
    if existing is None:
        await store.create_manifiesto(session, numero_manifiesto=numero_manifiesto, **fields)
    else:
        await store.update_manifiesto(session, existing, **fields)

    result = SubmissionResult(
        success=exchange.success,
        consecutivo=numero_manifiesto,
        message=exchange.message,
        tracking_id=exchange.tracking_id,
        raw_response=exchange.raw_response,
        xml=xml,
    )
    await _log_outcome(session, "manifiestos", result, "Manifiesto registrado en RNDC")
    logger.info("manifiesto_submitted", numero=numero_manifiesto, success=result.success)
    return result


async def submit_manifiestos_batch(
    session: AsyncSession,
    transport: Transport,
    credentials: RndcCredentials,
    consecutivos: Iterable[str],
    *,
    pause_seconds: float = DEFAULT_PAUSE_SECONDS,
) -> BatchSummary:
    return await _run_batch(
        session, consecutivos,
        lambda consecutivo: submit_manifiesto(session, transport, credentials, consecutivo),
        modulo="manifiestos",
        key=lambda consecutivo: consecutivo,
        pause_seconds=pause_seconds,
    )


# ── Cumplimiento de remesas (procesoid 5) ───────────────


async def fulfill_remesa(
    session: AsyncSession,
    transport: Transport,
    credentials: RndcCredentials,
    row: CumplimientoRow,
) -> SubmissionResult:
    return await _guarded(
        session, "cumplimiento", row.consecutivo,
        lambda: _fulfill_remesa(session, transport, credentials, row),
    )


async def _fulfill_remesa(
    session: AsyncSession,
    transport: Transport,
    credentials: RndcCredentials,
    row: CumplimientoRow,
) -> SubmissionResult:
    if not row.consecutivo:
        raise InvalidInputError("Falta el consecutivo de la remesa")

    remesa = await _require_remesa(session, row.consecutivo)
    if remesa.estado not in REMESA_ACEPTADA | {RemesaEstado.ERROR_CUMPLIMIENTO}:
        raise StateError(
            f"La remesa {remesa.consecutivo} no se puede cumplir (estado {remesa.estado.value})"
        )

    fecha = parse_fecha(row.fecha) if row.fecha else date.today()
    payload = CumplimientoRemesaPayload(
        consecutivo_remesa=remesa.consecutivo,
        fecha_cumplimiento=fecha,
        cantidad_cargada=remesa.cantidad_cargada,
        fecha_cita_cargue=remesa.fecha_cita_cargue,
        fecha_cita_descargue=remesa.fecha_cita_descargue,
    )
    xml = build_cumplimiento_remesa_xml(payload, credentials)

    exchange = await _exchange(
        session, transport,
        tipo=DocumentoTipo.CUMPLIMIENTO, consecutivo=remesa.consecutivo, xml=xml,
    )
    await store.update_remesa(
        session,
        remesa,
        estado=RemesaEstado.CUMPLIDA if exchange.success else RemesaEstado.ERROR_CUMPLIMIENTO,
        respuesta_rndc=exchange.raw_response or exchange.message,
    )

    result = SubmissionResult(
        success=exchange.success,
        consecutivo=remesa.consecutivo,
        message=exchange.message,
        tracking_id=exchange.tracking_id,
        raw_response=exchange.raw_response,
        xml=xml,
    )
    await _log_outcome(session, "cumplimiento", result, "Remesa cumplida")
    logger.info("remesa_fulfilled", consecutivo=remesa.consecutivo, success=result.success)
    return result


async def fulfill_remesas_batch(
    session: AsyncSession,
    transport: Transport,
    credentials: RndcCredentials,
    rows: Iterable[CumplimientoRow],
    *,
    pause_seconds: float = DEFAULT_PAUSE_SECONDS,
) -> BatchSummary:
    return await _run_batch(
        session, rows,
        lambda row: fulfill_remesa(session, transport, credentials, row),
        modulo="cumplimiento",
        key=lambda row: row.consecutivo,
        pause_seconds=pause_seconds,
    )


# ── Cumplimiento de manifiestos (procesoid 6) ───────────


async def fulfill_manifiesto(
    session: AsyncSession,
    transport: Transport,
    credentials: RndcCredentials,
    numero: str,
) -> SubmissionResult:
    return await _guarded(
        session, "cumplimiento_manifiesto", numero,
        lambda: _fulfill_manifiesto(session, transport, credentials, numero),
    )


async def _fulfill_manifiesto(
    session: AsyncSession,
    transport: Transport,
    credentials: RndcCredentials,
    numero: str,
) -> SubmissionResult:
    manifiesto = await _require_manifiesto(session, numero)
    if manifiesto.estado not in _MANIFIESTO_CUMPLIBLE:
        raise StateError(
            f"El manifiesto {numero} no se puede cumplir (estado {manifiesto.estado.value})"
        )

    remesa = await _require_remesa(session, manifiesto.consecutivo_remesa)
    if remesa.estado != RemesaEstado.CUMPLIDA:
        raise StateError(
            f"La remesa {remesa.consecutivo} debe estar cumplida antes de cumplir el manifiesto"
        )

    payload = CumplimientoManifiestoPayload(
        numero_manifiesto=manifiesto.numero_manifiesto,
        fecha_expedicion=manifiesto.fecha_expedicion,
    )
    xml = build_cumplimiento_manifiesto_xml(payload, credentials)

    exchange = await _exchange(
        session, transport,
        tipo=DocumentoTipo.CUMPLIMIENTO_MANIFIESTO, consecutivo=manifiesto.numero_manifiesto, xml=xml,
    )
    await store.update_manifiesto(
        session,
        manifiesto,
        estado=ManifiestoEstado.CUMPLIDO if exchange.success else ManifiestoEstado.ERROR_CUMPLIMIENTO,
        respuesta_rndc=exchange.raw_response or exchange.message,
    )

    result = SubmissionResult(
        success=exchange.success,
        consecutivo=manifiesto.numero_manifiesto,
        message=exchange.message,
        tracking_id=exchange.tracking_id,
        raw_response=exchange.raw_response,
        xml=xml,
    )
    await _log_outcome(session, "cumplimiento_manifiesto", result, "Manifiesto cumplido")
    logger.info("manifiesto_fulfilled", numero=numero, success=result.success)
    return result


async def fulfill_manifiestos_batch(
    session: AsyncSession,
    transport: Transport,
    credentials: RndcCredentials,
    numeros: Iterable[str],
    *,
    pause_seconds: float = DEFAULT_PAUSE_SECONDS,
) -> BatchSummary:
    return await _run_batch(
        session, numeros,
        lambda numero: fulfill_manifiesto(session, transport, credentials, numero),
        modulo="cumplimiento_manifiesto",
        key=lambda numero: numero,
        pause_seconds=pause_seconds,
    )


# ── Consulta de manifiesto (tipo 3) ─────────────────────


async def query_manifiesto(
    session: AsyncSession,
    transport: Transport,
    credentials: RndcCredentials,
    numero: str,
) -> SubmissionResult:
    """Fetch the ingreso id and QR security code RNDC holds for a manifest."""
    return await _guarded(
        session, "consultas", numero,
        lambda: _query_manifiesto(session, transport, credentials, numero),
    )


async def _query_manifiesto(
    session: AsyncSession,
    transport: Transport,
    credentials: RndcCredentials,
    numero: str,
) -> SubmissionResult:
    manifiesto = await _require_manifiesto(session, numero)
    xml = build_consulta_manifiesto_xml(manifiesto.numero_manifiesto, credentials)

    exchange = await _exchange(
        session, transport,
        tipo=DocumentoTipo.CONSULTA_MANIFIESTO, consecutivo=manifiesto.numero_manifiesto, xml=xml,
    )
    if exchange.success:
        await store.update_manifiesto(
            session,
            manifiesto,
            ingreso_id=exchange.tracking_id,
            codigo_seguridad_qr=extract_tag(exchange.raw_response or "", "SEGURIDADQR"),
        )

    result = SubmissionResult(
        success=exchange.success,
        consecutivo=manifiesto.numero_manifiesto,
        message=exchange.message,
        tracking_id=exchange.tracking_id,
        raw_response=exchange.raw_response,
        xml=xml,
    )
    await _log_outcome(session, "consultas", result, "Consulta de manifiesto")
    return result
