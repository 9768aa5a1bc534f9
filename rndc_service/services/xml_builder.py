"""RNDC SOAP message builder.

Renders the ``AtenderMensajeRNDC`` envelopes for the RNDC processes this
company uses:

  * procesoid 3: expedir remesa
  * procesoid 4: expedir manifiesto
  * procesoid 5: cumplir remesa
  * procesoid 6: cumplir manifiesto
  * tipo 3 / procesoid 4: consultar manifiesto

Every function is pure: same payload in, byte-identical XML out. No
business validation happens here; the orchestrator resolves and checks
the data before calling in.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from xml.sax.saxutils import escape

from rndc_service.services.credentials import RndcCredentials

ENVELOPE_TPL = """<ns0:Envelope xmlns:ns0="http://schemas.xmlsoap.org/soap/envelope/" xmlns:ns1="urn:BPMServicesIntf-IBPMServices">
  <ns0:Header/>
  <ns0:Body>
    <ns1:AtenderMensajeRNDC>
      <Request>
        <root>
          <acceso>
            <username>{usuario}</username>
            <password>{password}</password>
          </acceso>
          <solicitud>
            <tipo>{tipo}</tipo>
            <procesoid>{procesoid}</procesoid>
          </solicitud>
{body}
        </root>
      </Request>
    </ns1:AtenderMensajeRNDC>
  </ns0:Body>
</ns0:Envelope>"""

# Fixed operational values of this deployment (poultry feed, company-owned policy)
REMESA_DEFAULTS = {
    "CODOPERACIONTRANSPORTE": "G",
    "CODNATURALEZACARGA": "1",
    "UNIDADMEDIDACAPACIDAD": "1",
    "CODTIPOEMPAQUE": "0",
    "MERCANCIAREMESA": "002309",
    "DESCRIPCIONCORTAPRODUCTO": "ALIMENTO PARA AVES DE CORRAL",
    "CODTIPOIDREMITENTE": "N",
    "NUMIDREMITENTE": "8600588314",
    "CODTIPOIDDESTINATARIO": "N",
    "NUMIDDESTINATARIO": "8600588314",
    "DUENOPOLIZA": "N",
    "HORASPACTOCARGA": "2",
    "HORASPACTODESCARGUE": "2",
    "CODTIPOIDPROPIETARIO": "N",
    "CODSEDEPROPIETARIO": "01",
}

HORA_CITA_CARGUE = "08:00"
HORA_CITA_DESCARGUE = "13:00"
HORAS_PERMANENCIA = 2
DIAS_PAGO_SALDO = 30

REMESA_VARIABLES_TPL = """          <variables>
            <NUMNITEMPRESATRANSPORTE>{empresa_nit}</NUMNITEMPRESATRANSPORTE>
            <CONSECUTIVOREMESA>{consecutivo}</CONSECUTIVOREMESA>
            <CODOPERACIONTRANSPORTE>{CODOPERACIONTRANSPORTE}</CODOPERACIONTRANSPORTE>
            <CODNATURALEZACARGA>{CODNATURALEZACARGA}</CODNATURALEZACARGA>
            <CANTIDADCARGADA>{cantidad_cargada}</CANTIDADCARGADA>
            <UNIDADMEDIDACAPACIDAD>{UNIDADMEDIDACAPACIDAD}</UNIDADMEDIDACAPACIDAD>
            <CODTIPOEMPAQUE>{CODTIPOEMPAQUE}</CODTIPOEMPAQUE>
            <MERCANCIAREMESA>{MERCANCIAREMESA}</MERCANCIAREMESA>
            <DESCRIPCIONCORTAPRODUCTO>{DESCRIPCIONCORTAPRODUCTO}</DESCRIPCIONCORTAPRODUCTO>
            <CODTIPOIDREMITENTE>{CODTIPOIDREMITENTE}</CODTIPOIDREMITENTE>
            <NUMIDREMITENTE>{NUMIDREMITENTE}</NUMIDREMITENTE>
            <CODSEDEREMITENTE>{codigo_sede_remitente}</CODSEDEREMITENTE>
            <CODTIPOIDDESTINATARIO>{CODTIPOIDDESTINATARIO}</CODTIPOIDDESTINATARIO>
            <NUMIDDESTINATARIO>{NUMIDDESTINATARIO}</NUMIDDESTINATARIO>
            <CODSEDEDESTINATARIO>{codigo_sede_destinatario}</CODSEDEDESTINATARIO>
            <DUENOPOLIZA>{DUENOPOLIZA}</DUENOPOLIZA>
            <HORASPACTOCARGA>{HORASPACTOCARGA}</HORASPACTOCARGA>
            <HORASPACTODESCARGUE>{HORASPACTODESCARGUE}</HORASPACTODESCARGUE>
            <CODTIPOIDPROPIETARIO>{CODTIPOIDPROPIETARIO}</CODTIPOIDPROPIETARIO>
            <NUMIDPROPIETARIO>{empresa_nit}</NUMIDPROPIETARIO>
            <CODSEDEPROPIETARIO>{CODSEDEPROPIETARIO}</CODSEDEPROPIETARIO>
            <FECHACITAPACTADACARGUE>{fecha_cita_cargue}</FECHACITAPACTADACARGUE>
            <HORACITAPACTADACARGUE>{hora_cita_cargue}</HORACITAPACTADACARGUE>
            <FECHACITAPACTADADESCARGUE>{fecha_cita_descargue}</FECHACITAPACTADADESCARGUE>
            <HORACITAPACTADADESCARGUEREMESA>{hora_cita_descargue}</HORACITAPACTADADESCARGUEREMESA>
          </variables>"""

MANIFIESTO_VARIABLES_TPL = """          <variables>
            <NUMNITEMPRESATRANSPORTE>{empresa_nit}</NUMNITEMPRESATRANSPORTE>
            <NUMMANIFIESTOCARGA>{numero_manifiesto}</NUMMANIFIESTOCARGA>
            <CODOPERACIONTRANSPORTE>G</CODOPERACIONTRANSPORTE>
            <FECHAEXPEDICIONMANIFIESTO>{fecha_expedicion}</FECHAEXPEDICIONMANIFIESTO>
            <CODMUNICIPIOORIGENMANIFIESTO>{municipio_origen}</CODMUNICIPIOORIGENMANIFIESTO>
            <CODMUNICIPIODESTINOMANIFIESTO>{municipio_destino}</CODMUNICIPIODESTINOMANIFIESTO>
            <CODIDTITULARMANIFIESTO>{titular_tipo_doc}</CODIDTITULARMANIFIESTO>
            <NUMIDTITULARMANIFIESTO>{titular_numero_doc}</NUMIDTITULARMANIFIESTO>
            <NUMPLACA>{placa}</NUMPLACA>
            <CODIDCONDUCTOR>C</CODIDCONDUCTOR>
            <NUMIDCONDUCTOR>{conductor_id}</NUMIDCONDUCTOR>
            <VALORFLETEPACTADOVIAJE>{valor_flete}</VALORFLETEPACTADOVIAJE>
            <RETENCIONICAMANIFIESTOCARGA>0.0</RETENCIONICAMANIFIESTOCARGA>
            <RETENCIONFUENTEMANIFIESTO>0.0</RETENCIONFUENTEMANIFIESTO>
            <VALORANTICIPOMANIFIESTO>0</VALORANTICIPOMANIFIESTO>
            <FECHAPAGOSALDOMANIFIESTO>{fecha_pago_saldo}</FECHAPAGOSALDOMANIFIESTO>
            <CODMUNICIPIOPAGOSALDO>11001000</CODMUNICIPIOPAGOSALDO>
            <CODRESPONSABLEPAGOCARGUE>D</CODRESPONSABLEPAGOCARGUE>
            <CODRESPONSABLEPAGODESCARGUE>D</CODRESPONSABLEPAGODESCARGUE>
            <ACEPTACIONELECTRONICA>SI</ACEPTACIONELECTRONICA>
            <REMESASMAN procesoid="43">
              <REMESA>
                <CONSECUTIVOREMESA>{consecutivo_remesa}</CONSECUTIVOREMESA>
              </REMESA>
            </REMESASMAN>
          </variables>"""

CUMPLIMIENTO_REMESA_VARIABLES_TPL = """          <variables>
            <NUMNITEMPRESATRANSPORTE>{empresa_nit}</NUMNITEMPRESATRANSPORTE>
            <CONSECUTIVOREMESA>{consecutivo_remesa}</CONSECUTIVOREMESA>
            <TIPOCUMPLIDOREMESA>C</TIPOCUMPLIDOREMESA>
            <CANTIDADCARGADA>{cantidad_cargada}</CANTIDADCARGADA>
            <CANTIDADENTREGADA>{cantidad_cargada}</CANTIDADENTREGADA>
            <UNIDADMEDIDACAPACIDAD>1</UNIDADMEDIDACAPACIDAD>
            <FECHALLEGADACARGUE>{fecha_cargue}</FECHALLEGADACARGUE>
            <HORALLEGADACARGUEREMESA>{hora_cargue}</HORALLEGADACARGUEREMESA>
            <FECHAENTRADACARGUE>{fecha_cargue}</FECHAENTRADACARGUE>
            <HORAENTRADACARGUEREMESA>{hora_cargue}</HORAENTRADACARGUEREMESA>
            <FECHASALIDACARGUE>{fecha_cargue}</FECHASALIDACARGUE>
            <HORASALIDACARGUEREMESA>{hora_salida_cargue}</HORASALIDACARGUEREMESA>
            <FECHALLEGADADESCARGUE>{fecha_descargue}</FECHALLEGADADESCARGUE>
            <HORALLEGADADESCARGUECUMPLIDO>{hora_descargue}</HORALLEGADADESCARGUECUMPLIDO>
            <FECHAENTRADADESCARGUE>{fecha_descargue}</FECHAENTRADADESCARGUE>
            <HORAENTRADADESCARGUECUMPLIDO>{hora_descargue}</HORAENTRADADESCARGUECUMPLIDO>
            <FECHASALIDADESCARGUE>{fecha_descargue}</FECHASALIDADESCARGUE>
            <HORASALIDADESCARGUECUMPLIDO>{hora_salida_descargue}</HORASALIDADESCARGUECUMPLIDO>
          </variables>"""

CUMPLIMIENTO_MANIFIESTO_VARIABLES_TPL = """          <variables>
            <NUMNITEMPRESATRANSPORTE>{empresa_nit}</NUMNITEMPRESATRANSPORTE>
            <NUMMANIFIESTOCARGA>{numero_manifiesto}</NUMMANIFIESTOCARGA>
            <TIPOCUMPLIDOMANIFIESTO>C</TIPOCUMPLIDOMANIFIESTO>
            <FECHAENTREGADOCUMENTOS>{fecha_entrega_documentos}</FECHAENTREGADOCUMENTOS>
          </variables>"""

CONSULTA_MANIFIESTO_BODY_TPL = """          <variables>INGRESOID,FECHAING,SEGURIDADQR</variables>
          <documento>
            <NUMNITEMPRESATRANSPORTE>{empresa_nit}</NUMNITEMPRESATRANSPORTE>
            <NUMMANIFIESTOCARGA>{numero_manifiesto}</NUMMANIFIESTOCARGA>
          </documento>"""


# ── Payloads ──────────────────────────────────


@dataclass(frozen=True)
class RemesaPayload:
    consecutivo: str
    codigo_sede_remitente: str
    codigo_sede_destinatario: str
    cantidad_cargada: int
    fecha_cita_cargue: date
    fecha_cita_descargue: date
    conductor_id: str


@dataclass(frozen=True)
class ManifiestoPayload:
    numero_manifiesto: str
    consecutivo_remesa: str
    fecha_expedicion: date
    municipio_origen: str
    municipio_destino: str
    placa: str
    conductor_id: str
    valor_flete: int | Decimal
    titular_tipo_doc: str
    titular_numero_doc: str


@dataclass(frozen=True)
class CumplimientoRemesaPayload:
    consecutivo_remesa: str
    fecha_cumplimiento: date
    cantidad_cargada: int
    fecha_cita_cargue: date | None = None
    fecha_cita_descargue: date | None = None
    hora_cita_cargue: str = HORA_CITA_CARGUE
    hora_cita_descargue: str = HORA_CITA_DESCARGUE


@dataclass(frozen=True)
class CumplimientoManifiestoPayload:
    numero_manifiesto: str
    fecha_expedicion: date


# ── Formatting helpers ────────────────────────


def format_rndc_date(value: date) -> str:
    """Render a date the way RNDC expects it: ``DD/MM/YYYY``."""
    return value.strftime("%d/%m/%Y")


def add_hours_to_time(time_str: str, hours: int) -> str:
    """Add whole hours to an ``HH:MM`` string, wrapping past midnight.

    The date is never rolled forward: ``add_hours_to_time("23:30", 2)``
    is ``"01:30"``. RNDC accepts this for same-day fulfillment reports.
    """
    hour_str, minute_str = time_str.split(":")
    new_hour = (int(hour_str) + hours) % 24
    return f"{new_hour:02d}:{minute_str}"


def format_amount(value: int | Decimal | float) -> str:
    """Plain decimal text: no thousands separators, no exponent, no trailing ``.00``."""
    if isinstance(value, int):
        return str(value)
    amount = Decimal(str(value))
    if amount == amount.to_integral_value():
        return str(int(amount))
    return format(amount.normalize(), "f")


def _text(value: object) -> str:
    return escape(str(value))


def _envelope(credentials: RndcCredentials, *, tipo: int, procesoid: int, body: str) -> str:
    return ENVELOPE_TPL.format(
        usuario=_text(credentials.usuario),
        password=_text(credentials.password),
        tipo=tipo,
        procesoid=procesoid,
        body=body,
    )


# ── Message builders ──────────────────────────


def build_remesa_xml(payload: RemesaPayload, credentials: RndcCredentials) -> str:
    """procesoid 3: register a remesa."""
    body = REMESA_VARIABLES_TPL.format(
        empresa_nit=_text(credentials.empresa_nit),
        consecutivo=_text(payload.consecutivo),
        cantidad_cargada=payload.cantidad_cargada,
        codigo_sede_remitente=_text(payload.codigo_sede_remitente),
        codigo_sede_destinatario=_text(payload.codigo_sede_destinatario),
        fecha_cita_cargue=format_rndc_date(payload.fecha_cita_cargue),
        hora_cita_cargue=HORA_CITA_CARGUE,
        fecha_cita_descargue=format_rndc_date(payload.fecha_cita_descargue),
        hora_cita_descargue=HORA_CITA_DESCARGUE,
        **REMESA_DEFAULTS,
    )
    return _envelope(credentials, tipo=1, procesoid=3, body=body)


def build_manifiesto_xml(payload: ManifiestoPayload, credentials: RndcCredentials) -> str:
    """procesoid 4: register a manifest carrying one remesa."""
    fecha_pago_saldo = payload.fecha_expedicion + timedelta(days=DIAS_PAGO_SALDO)
    body = MANIFIESTO_VARIABLES_TPL.format(
        empresa_nit=_text(credentials.empresa_nit),
        numero_manifiesto=_text(payload.numero_manifiesto),
        fecha_expedicion=format_rndc_date(payload.fecha_expedicion),
        municipio_origen=_text(payload.municipio_origen),
        municipio_destino=_text(payload.municipio_destino),
        titular_tipo_doc=_text(payload.titular_tipo_doc),
        titular_numero_doc=_text(payload.titular_numero_doc),
        placa=_text(payload.placa),
        conductor_id=_text(payload.conductor_id),
        valor_flete=format_amount(payload.valor_flete),
        fecha_pago_saldo=format_rndc_date(fecha_pago_saldo),
        consecutivo_remesa=_text(payload.consecutivo_remesa),
    )
    return _envelope(credentials, tipo=1, procesoid=4, body=body)


def build_cumplimiento_remesa_xml(
    payload: CumplimientoRemesaPayload, credentials: RndcCredentials
) -> str:
    """procesoid 5: report a remesa as delivered.

    Each leg reports arrival = entry at the appointment hour and exit two
    hours later (wrapping past midnight without moving the date).
    """
    fecha_cargue = payload.fecha_cita_cargue or payload.fecha_cumplimiento
    fecha_descargue = payload.fecha_cita_descargue or payload.fecha_cumplimiento
    body = CUMPLIMIENTO_REMESA_VARIABLES_TPL.format(
        empresa_nit=_text(credentials.empresa_nit),
        consecutivo_remesa=_text(payload.consecutivo_remesa),
        cantidad_cargada=payload.cantidad_cargada,
        fecha_cargue=format_rndc_date(fecha_cargue),
        hora_cargue=payload.hora_cita_cargue,
        hora_salida_cargue=add_hours_to_time(payload.hora_cita_cargue, HORAS_PERMANENCIA),
        fecha_descargue=format_rndc_date(fecha_descargue),
        hora_descargue=payload.hora_cita_descargue,
        hora_salida_descargue=add_hours_to_time(payload.hora_cita_descargue, HORAS_PERMANENCIA),
    )
    return _envelope(credentials, tipo=1, procesoid=5, body=body)


def build_cumplimiento_manifiesto_xml(
    payload: CumplimientoManifiestoPayload, credentials: RndcCredentials
) -> str:
    """procesoid 6: close a manifest; documents are delivered the day after issue."""
    body = CUMPLIMIENTO_MANIFIESTO_VARIABLES_TPL.format(
        empresa_nit=_text(credentials.empresa_nit),
        numero_manifiesto=_text(payload.numero_manifiesto),
        fecha_entrega_documentos=format_rndc_date(payload.fecha_expedicion + timedelta(days=1)),
    )
    return _envelope(credentials, tipo=1, procesoid=6, body=body)


def build_consulta_manifiesto_xml(numero_manifiesto: str, credentials: RndcCredentials) -> str:
    """tipo 3 / procesoid 4: look up the ingreso id and QR code of a manifest."""
    body = CONSULTA_MANIFIESTO_BODY_TPL.format(
        empresa_nit=_text(credentials.empresa_nit),
        numero_manifiesto=_text(numero_manifiesto),
    )
    return _envelope(credentials, tipo=3, procesoid=4, body=body)
