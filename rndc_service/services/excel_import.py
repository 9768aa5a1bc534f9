"""Spreadsheet ingestion for remesa and fulfillment batches.

Operators upload the daily dispatch sheet as ``.xlsx`` or ``.csv``. Rows
come back as plain dicts keyed by normalized column names
(``FECHA_CITA``, ``PLACA`` ...) so they can be previewed, validated and
then posted back for processing.
"""

from __future__ import annotations

import csv
import io
import re
import unicodedata
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any

import structlog
from openpyxl import load_workbook

from rndc_service.services.errors import InvalidInputError
from rndc_service.services.xml_builder import format_rndc_date

logger = structlog.get_logger()

REQUIRED_COLUMNS = ("GRANJA", "PLANTA", "PLACA", "FECHA_CITA", "IDENTIFICACION")

HEADER_SYNONYMS = {
    "CEDULA": "IDENTIFICACION",
    "CEDULA_CONDUCTOR": "IDENTIFICACION",
    "FECHA": "FECHA_CITA",
    "CONSECUTIVO_REMESA": "CONSECUTIVOREMESA",
    "FECHA_CUMPLIMIENTO": "FECHACUMPLIMIENTO",
}

MAX_BATCH_ROWS = 1000

PLACA_RE = re.compile(r"^[A-Z]{3}\d{3}$|^[A-Z]{3}\d{2}[A-Z]$")

_DATE_FORMATS = ("%d/%m/%Y", "%Y-%m-%d")


# ── Typed rows ────────────────────────────────


@dataclass
class RemesaRow:
    """One line of the dispatch sheet.

    ``cantidad_cargada`` is informational only: the registered vehicle
    capacity is what gets reported.
    """

    granja: str
    planta: str
    placa: str
    fecha_cita: Any
    identificacion: str
    toneladas: Decimal | None = None
    cantidad_cargada: int | None = None
    source: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> RemesaRow:
        row = normalize_row(data)
        return cls(
            granja=cell_text(row.get("GRANJA")),
            planta=cell_text(row.get("PLANTA")),
            placa=cell_text(row.get("PLACA")).upper(),
            fecha_cita=row.get("FECHA_CITA"),
            identificacion=cell_text(row.get("IDENTIFICACION")),
            toneladas=parse_toneladas(row.get("TONELADAS")),
            cantidad_cargada=_parse_int(row.get("CANTIDAD_CARGADA")),
            source=json_safe(row),
        )


@dataclass
class CumplimientoRow:
    consecutivo: str
    fecha: Any = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> CumplimientoRow:
        row = normalize_row(data)
        consecutivo = ""
        for key in ("CONSECUTIVO", "CONSECUTIVOREMESA", "NUMERO"):
            consecutivo = cell_text(row.get(key))
            if consecutivo:
                break
        fecha = row.get("FECHACUMPLIMIENTO") or row.get("FECHA_CITA")
        return cls(consecutivo=consecutivo, fecha=fecha or None)


# ── Cell helpers ──────────────────────────────


def normalize_header(name: Any) -> str:
    """``" Fecha cita "`` → ``FECHA_CITA``; accents dropped, synonyms applied."""
    text = unicodedata.normalize("NFKD", str(name or "")).encode("ascii", "ignore").decode()
    key = re.sub(r"[\s\-]+", "_", text.strip().upper())
    return HEADER_SYNONYMS.get(key, key)


def normalize_row(data: dict[str, Any]) -> dict[str, Any]:
    return {normalize_header(k): v for k, v in data.items() if k is not None and str(k).strip()}


def cell_text(value: Any) -> str:
    """Cell as trimmed text. Spreadsheet numbers like ``1023.0`` lose the fraction."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def json_safe(row: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in row.items():
        if isinstance(value, (date, datetime)):
            out[key] = value.isoformat()
        elif isinstance(value, Decimal):
            out[key] = str(value)
        else:
            out[key] = value
    return out


def parse_fecha(value: Any) -> date:
    """Accept ``DD/MM/YYYY``, ``YYYY-MM-DD`` or a date/datetime cell."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = cell_text(value)
    # Spreadsheet exports sometimes carry a midnight time part
    candidate = text.split(" ")[0].split("T")[0]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(candidate, fmt).date()
        except ValueError:
            continue
    raise InvalidInputError(f"Formato de fecha inválido: {text or value!r}")


def normalize_fecha(value: Any) -> str:
    return format_rndc_date(parse_fecha(value))


def parse_toneladas(value: Any) -> Decimal | None:
    text = cell_text(value)
    if not text:
        return None
    try:
        toneladas = Decimal(text.replace(",", "."))
    except InvalidOperation:
        raise InvalidInputError(f"TONELADAS no es un número: {text}") from None
    if not toneladas.is_finite():
        raise InvalidInputError(f"TONELADAS no es un número: {text}")
    return toneladas


def _parse_int(value: Any) -> int | None:
    text = cell_text(value)
    if not text:
        return None
    try:
        return int(Decimal(text.replace(",", ".")))
    except InvalidOperation:
        return None


# ── Readers ───────────────────────────────────


def read_table(content: bytes, filename: str) -> list[dict[str, Any]]:
    """Parse an uploaded ``.xlsx`` or ``.csv`` into rows keyed by normalized header."""
    name = (filename or "").lower()
    if name.endswith((".xlsx", ".xlsm")):
        rows = _read_xlsx(content)
    elif name.endswith(".csv"):
        rows = _read_csv(content)
    else:
        raise InvalidInputError(f"Tipo de archivo no soportado: {filename}")

    logger.info("spreadsheet_parsed", filename=filename, rows=len(rows))
    return rows


def _read_xlsx(content: bytes) -> list[dict[str, Any]]:
    try:
        wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except Exception as exc:
        raise InvalidInputError(f"No se pudo leer el archivo Excel: {exc}") from exc

    try:
        ws = wb.active
        values = ws.iter_rows(values_only=True)
        header = next(values, None)
        if header is None:
            return []
        columns = [normalize_header(h) for h in header]

        rows = []
        for raw in values:
            if raw is None or all(v is None or str(v).strip() == "" for v in raw):
                continue
            rows.append({col: val for col, val in zip(columns, raw) if col})
        return rows
    finally:
        wb.close()


def _read_csv(content: bytes) -> list[dict[str, Any]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        text = content.decode("latin-1")

    first_line = text.split("\n", 1)[0]
    delimiter = ";" if first_line.count(";") > first_line.count(",") else ","

    reader = csv.DictReader(io.StringIO(text), delimiter=delimiter)
    rows = []
    for raw in reader:
        if not any((v or "").strip() for v in raw.values() if isinstance(v, str)):
            continue
        rows.append(normalize_row(raw))
    return rows


# ── Validation ────────────────────────────────


@dataclass
class RowValidation:
    fila: int
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


@dataclass
class BatchValidation:
    valid: bool
    total: int
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    rows: list[RowValidation] = field(default_factory=list)


def validate_row(row: dict[str, Any], fila: int) -> RowValidation:
    """Check one remesa row. ``fila`` is the spreadsheet line number for messages."""
    result = RowValidation(fila=fila)
    data = normalize_row(row)

    for column in REQUIRED_COLUMNS:
        if not cell_text(data.get(column)):
            result.errors.append(f"Fila {fila}: {column} es obligatorio")

    if cell_text(data.get("FECHA_CITA")):
        try:
            parse_fecha(data["FECHA_CITA"])
        except InvalidInputError:
            result.errors.append(
                f"Fila {fila}: FECHA_CITA debe tener formato DD/MM/YYYY o YYYY-MM-DD"
            )

    try:
        toneladas = parse_toneladas(data.get("TONELADAS"))
    except InvalidInputError:
        result.errors.append(f"Fila {fila}: TONELADAS debe ser un número mayor que 0")
    else:
        if toneladas is not None and toneladas <= 0:
            result.errors.append(f"Fila {fila}: TONELADAS debe ser un número mayor que 0")

    placa = cell_text(data.get("PLACA")).upper()
    if placa and not PLACA_RE.match(placa):
        result.warnings.append(f"Fila {fila}: formato de placa inusual ({placa})")

    return result


def validate_batch(rows: list[dict[str, Any]]) -> BatchValidation:
    if not rows:
        return BatchValidation(valid=False, total=0, errors=["El archivo no contiene filas"])

    batch = BatchValidation(valid=True, total=len(rows))
    if len(rows) > MAX_BATCH_ROWS:
        batch.warnings.append(
            f"El archivo tiene {len(rows)} filas; lotes de más de {MAX_BATCH_ROWS} tardan varios minutos"
        )

    seen: dict[str, int] = {}
    for index, row in enumerate(rows):
        # Line 1 is the header
        fila = index + 2
        checked = validate_row(row, fila)
        batch.rows.append(checked)
        batch.errors.extend(checked.errors)
        batch.warnings.extend(checked.warnings)

        placa = cell_text(normalize_row(row).get("PLACA")).upper()
        if placa:
            if placa in seen:
                batch.warnings.append(
                    f"Fila {fila}: la placa {placa} ya aparece en la fila {seen[placa]}"
                )
            else:
                seen[placa] = fila

    batch.valid = not batch.errors
    return batch
