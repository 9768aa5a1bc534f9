from datetime import date
from decimal import Decimal

from rndc_service.services.xml_builder import (
    CumplimientoManifiestoPayload,
    CumplimientoRemesaPayload,
    ManifiestoPayload,
    RemesaPayload,
    add_hours_to_time,
    build_consulta_manifiesto_xml,
    build_cumplimiento_manifiesto_xml,
    build_cumplimiento_remesa_xml,
    build_manifiesto_xml,
    build_remesa_xml,
    format_amount,
    format_rndc_date,
)


def _remesa_payload(**overrides):
    values = dict(
        consecutivo="42",
        codigo_sede_remitente="009",
        codigo_sede_destinatario="002",
        cantidad_cargada=7000,
        fecha_cita_cargue=date(2025, 3, 15),
        fecha_cita_descargue=date(2025, 3, 15),
        conductor_id="1023456789",
    )
    values.update(overrides)
    return RemesaPayload(**values)


def _manifiesto_payload(**overrides):
    values = dict(
        numero_manifiesto="42",
        consecutivo_remesa="42",
        fecha_expedicion=date(2025, 3, 15),
        municipio_origen="25320000",
        municipio_destino="25286000",
        placa="GIT990",
        conductor_id="1023456789",
        valor_flete=525000,
        titular_tipo_doc="C",
        titular_numero_doc="79123456",
    )
    values.update(overrides)
    return ManifiestoPayload(**values)


def test_remesa_xml_is_deterministic(credentials):
    assert build_remesa_xml(_remesa_payload(), credentials) == build_remesa_xml(
        _remesa_payload(), credentials
    )


def test_remesa_xml_fields(credentials):
    xml = build_remesa_xml(_remesa_payload(), credentials)

    assert "<tipo>1</tipo>" in xml
    assert "<procesoid>3</procesoid>" in xml
    assert "<username>TESTUSER</username>" in xml
    assert "<CONSECUTIVOREMESA>42</CONSECUTIVOREMESA>" in xml
    assert "<CODSEDEREMITENTE>009</CODSEDEREMITENTE>" in xml
    assert "<CODSEDEDESTINATARIO>002</CODSEDEDESTINATARIO>" in xml
    assert "<CANTIDADCARGADA>7000</CANTIDADCARGADA>" in xml
    assert "<FECHACITAPACTADACARGUE>15/03/2025</FECHACITAPACTADACARGUE>" in xml
    assert "<HORACITAPACTADACARGUE>08:00</HORACITAPACTADACARGUE>" in xml
    assert "<HORACITAPACTADADESCARGUEREMESA>13:00</HORACITAPACTADADESCARGUEREMESA>" in xml
    assert "<NUMIDPROPIETARIO>9013690938</NUMIDPROPIETARIO>" in xml
    assert "<MERCANCIAREMESA>002309</MERCANCIAREMESA>" in xml
    assert 'xmlns:ns1="urn:BPMServicesIntf-IBPMServices"' in xml


def test_text_values_are_escaped(credentials):
    xml = build_remesa_xml(_remesa_payload(conductor_id="A&B<1>"), credentials)
    assert "A&amp;B&lt;1&gt;" in xml
    assert "A&B<1>" not in xml


def test_manifiesto_xml_fields(credentials):
    xml = build_manifiesto_xml(_manifiesto_payload(), credentials)

    assert "<procesoid>4</procesoid>" in xml
    assert "<NUMMANIFIESTOCARGA>42</NUMMANIFIESTOCARGA>" in xml
    assert "<VALORFLETEPACTADOVIAJE>525000</VALORFLETEPACTADOVIAJE>" in xml
    assert "<CODIDTITULARMANIFIESTO>C</CODIDTITULARMANIFIESTO>" in xml
    assert "<NUMIDTITULARMANIFIESTO>79123456</NUMIDTITULARMANIFIESTO>" in xml
    # Balance is paid 30 days after issue
    assert "<FECHAPAGOSALDOMANIFIESTO>14/04/2025</FECHAPAGOSALDOMANIFIESTO>" in xml
    assert '<REMESASMAN procesoid="43">' in xml
    assert "<CONSECUTIVOREMESA>42</CONSECUTIVOREMESA>" in xml


def test_cumplimiento_remesa_defaults_to_fulfillment_date(credentials):
    payload = CumplimientoRemesaPayload(
        consecutivo_remesa="42",
        fecha_cumplimiento=date(2025, 3, 16),
        cantidad_cargada=7000,
    )
    xml = build_cumplimiento_remesa_xml(payload, credentials)

    assert "<procesoid>5</procesoid>" in xml
    assert "<TIPOCUMPLIDOREMESA>C</TIPOCUMPLIDOREMESA>" in xml
    assert "<CANTIDADENTREGADA>7000</CANTIDADENTREGADA>" in xml
    assert "<FECHALLEGADACARGUE>16/03/2025</FECHALLEGADACARGUE>" in xml
    assert "<HORASALIDACARGUEREMESA>10:00</HORASALIDACARGUEREMESA>" in xml
    assert "<HORASALIDADESCARGUECUMPLIDO>15:00</HORASALIDADESCARGUECUMPLIDO>" in xml


def test_cumplimiento_remesa_exit_hour_wraps_without_changing_date(credentials):
    payload = CumplimientoRemesaPayload(
        consecutivo_remesa="42",
        fecha_cumplimiento=date(2025, 3, 16),
        cantidad_cargada=7000,
        fecha_cita_descargue=date(2025, 3, 16),
        hora_cita_descargue="23:30",
    )
    xml = build_cumplimiento_remesa_xml(payload, credentials)

    assert "<HORASALIDADESCARGUECUMPLIDO>01:30</HORASALIDADESCARGUECUMPLIDO>" in xml
    assert "<FECHASALIDADESCARGUE>16/03/2025</FECHASALIDADESCARGUE>" in xml


def test_cumplimiento_manifiesto_delivers_documents_next_day(credentials):
    payload = CumplimientoManifiestoPayload(numero_manifiesto="42", fecha_expedicion=date(2025, 12, 31))
    xml = build_cumplimiento_manifiesto_xml(payload, credentials)

    assert "<procesoid>6</procesoid>" in xml
    assert "<FECHAENTREGADOCUMENTOS>01/01/2026</FECHAENTREGADOCUMENTOS>" in xml


def test_consulta_manifiesto(credentials):
    xml = build_consulta_manifiesto_xml("42", credentials)

    assert "<tipo>3</tipo>" in xml
    assert "<procesoid>4</procesoid>" in xml
    assert "<variables>INGRESOID,FECHAING,SEGURIDADQR</variables>" in xml
    assert "<NUMMANIFIESTOCARGA>42</NUMMANIFIESTOCARGA>" in xml


def test_add_hours_to_time():
    assert add_hours_to_time("08:00", 2) == "10:00"
    assert add_hours_to_time("23:30", 2) == "01:30"
    assert add_hours_to_time("22:00", 2) == "00:00"


def test_format_helpers():
    assert format_rndc_date(date(2025, 1, 5)) == "05/01/2025"
    assert format_amount(525000) == "525000"
    assert format_amount(Decimal("525000.00")) == "525000"
    assert format_amount(Decimal("1234.50")) == "1234.5"
