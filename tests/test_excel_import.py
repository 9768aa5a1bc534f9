import io
from datetime import date, datetime
from decimal import Decimal

import pytest
from openpyxl import Workbook

from rndc_service.services.errors import InvalidInputError
from rndc_service.services.excel_import import (
    CumplimientoRow,
    RemesaRow,
    normalize_fecha,
    parse_toneladas,
    parse_fecha,
    read_table,
    validate_batch,
    validate_row,
)


def _row(**overrides):
    row = {
        "GRANJA": "GRANJA NORTE",
        "PLANTA": "PLANTA CENTRAL",
        "PLACA": "GIT990",
        "FECHA_CITA": "15/03/2025",
        "IDENTIFICACION": "1023456789",
        "TONELADAS": "7",
    }
    row.update(overrides)
    return row


@pytest.mark.parametrize(
    "value",
    ["15/03/2025", "2025-03-15", "2025-03-15 00:00:00", date(2025, 3, 15), datetime(2025, 3, 15, 6, 0)],
)
def test_parse_fecha_accepted_forms(value):
    assert parse_fecha(value) == date(2025, 3, 15)
    assert normalize_fecha(value) == "15/03/2025"


@pytest.mark.parametrize("value", ["15-03-2025", "2025/03/15", "marzo 15", "", None, "31/02/2025"])
def test_parse_fecha_rejects_other_forms(value):
    with pytest.raises(InvalidInputError):
        parse_fecha(value)


def test_read_csv_with_semicolons_and_synonyms():
    content = (
        "Granja;Planta;Placa;Fecha Cita;Cedula;Toneladas\n"
        "GRANJA NORTE;PLANTA CENTRAL;git990;15/03/2025;1023456789;7,5\n"
        ";;;;;\n"
    ).encode("utf-8")

    rows = read_table(content, "despachos.csv")

    assert len(rows) == 1
    assert rows[0]["IDENTIFICACION"] == "1023456789"
    assert rows[0]["FECHA_CITA"] == "15/03/2025"

    remesa = RemesaRow.from_mapping(rows[0])
    assert remesa.placa == "GIT990"
    assert remesa.toneladas == Decimal("7.5")


def test_read_xlsx_keeps_native_dates():
    wb = Workbook()
    ws = wb.active
    ws.append(["GRANJA", "PLANTA", "PLACA", "FECHA_CITA", "IDENTIFICACION", "TONELADAS"])
    ws.append(["GRANJA NORTE", "PLANTA CENTRAL", "GIT990", datetime(2025, 3, 15), 1023456789, 7])
    ws.append([None, None, None, None, None, None])
    buffer = io.BytesIO()
    wb.save(buffer)

    rows = read_table(buffer.getvalue(), "despachos.xlsx")

    assert len(rows) == 1
    remesa = RemesaRow.from_mapping(rows[0])
    assert parse_fecha(remesa.fecha_cita) == date(2025, 3, 15)
    assert remesa.identificacion == "1023456789"
    assert remesa.source["FECHA_CITA"] == "2025-03-15T00:00:00"


def test_unsupported_extension():
    with pytest.raises(InvalidInputError):
        read_table(b"data", "despachos.pdf")


def test_validate_row_ok():
    result = validate_row(_row(), 2)
    assert result.valid
    assert result.warnings == []


def test_validate_row_errors_and_warnings():
    result = validate_row(_row(GRANJA="", FECHA_CITA="15-03-2025", TONELADAS="0", PLACA="AB123"), 5)

    assert not result.valid
    assert "Fila 5: GRANJA es obligatorio" in result.errors
    assert any("FECHA_CITA" in e for e in result.errors)
    assert any("TONELADAS" in e for e in result.errors)
    assert result.warnings == ["Fila 5: formato de placa inusual (AB123)"]


@pytest.mark.parametrize("value", ["NaN", "nan", "Infinity", "-inf", "sNaN"])
def test_non_finite_toneladas_are_rejected(value):
    with pytest.raises(InvalidInputError):
        parse_toneladas(value)

    result = validate_row(_row(TONELADAS=value), 3)
    assert result.errors == ["Fila 3: TONELADAS debe ser un número mayor que 0"]


def test_validate_row_accepts_trailer_plate():
    assert validate_row(_row(PLACA="ABC12D"), 2).warnings == []


def test_validate_batch_empty_file():
    result = validate_batch([])
    assert result.valid is False
    assert result.errors == ["El archivo no contiene filas"]


def test_validate_batch_duplicate_plates_are_warnings():
    result = validate_batch([_row(), _row(GRANJA="GRANJA SUR")])

    assert result.valid is True
    assert result.total == 2
    assert result.warnings == ["Fila 3: la placa GIT990 ya aparece en la fila 2"]


def test_validate_batch_large_file_warning():
    result = validate_batch([_row(PLACA=f"AAA{i % 1000:03d}") for i in range(1001)])
    assert any("1001 filas" in w for w in result.warnings)


def test_cumplimiento_row_columns():
    assert CumplimientoRow.from_mapping({"Consecutivo": 42.0}).consecutivo == "42"
    row = CumplimientoRow.from_mapping({"CONSECUTIVOREMESA": "43", "FECHACUMPLIMIENTO": "16/03/2025"})
    assert (row.consecutivo, row.fecha) == ("43", "16/03/2025")
    assert CumplimientoRow.from_mapping({"NUMERO": "44"}).fecha is None
