"""Business outcome of an RNDC response.

RNDC answers HTTP 200 for accepted and rejected documents alike, so the
outcome is read from the payload. The service is known to return
malformed XML and HTML-entity-encoded tags (``&lt;ingresoid&gt;``, even
``&amp;lt;ingresoid&amp;gt;``), so tags are matched with regular
expressions rather than an XML parser. When a tag repeats, the first
occurrence wins.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from functools import lru_cache

_OPEN = r"(?:<|&(?:amp;)*lt;)"
_CLOSE = r"(?:>|&(?:amp;)*gt;)"

ERROR_RNDC_LITERAL = "Error RNDC"
SUCCESS_MESSAGE = "Solicitud procesada exitosamente"
FALLBACK_MESSAGE = "Respuesta procesada"


@dataclass(frozen=True)
class RndcResult:
    """Classified RNDC response. ``raw_body`` is kept verbatim for the audit trail."""

    success: bool
    message: str
    raw_body: str
    tracking_id: str | None = None
    consecutivo: str | None = None


@lru_cache(maxsize=None)
def _presence_pattern(tag: str) -> re.Pattern[str]:
    return re.compile(rf"{_OPEN}\s*{tag}(?:\s[^<>]*?)?/?\s*{_CLOSE}", re.IGNORECASE)


@lru_cache(maxsize=None)
def _value_pattern(tag: str) -> re.Pattern[str]:
    return re.compile(
        rf"{_OPEN}\s*{tag}(?:\s[^<>]*?)?{_CLOSE}(?P<value>.*?){_OPEN}\s*/\s*{tag}\s*{_CLOSE}",
        re.IGNORECASE | re.DOTALL,
    )


def _decode(value: str) -> str:
    # Undo one level of entity encoding per pass (double-encoded bodies need two)
    for _ in range(3):
        decoded = html.unescape(value)
        if decoded == value:
            break
        value = decoded
    return value.strip()


def has_tag(raw_body: str, tag: str) -> bool:
    """True if ``tag`` appears as a raw or entity-encoded element."""
    return _presence_pattern(tag).search(raw_body) is not None


def extract_tag(raw_body: str, tag: str) -> str | None:
    """Text of the first ``tag`` element, entity-decoded, or None if absent/empty."""
    match = _value_pattern(tag).search(raw_body)
    if match is None:
        return None
    value = _decode(match.group("value"))
    return value or None


def has_error_marker(raw_body: str) -> bool:
    return has_tag(raw_body, "ErrorMSG") or ERROR_RNDC_LITERAL in raw_body


def classify(raw_body: str) -> RndcResult:
    """Decide whether RNDC accepted the document.

    Accepted means an ``ingresoid`` element is present and no ``ErrorMSG``
    element nor the literal ``Error RNDC`` is. The error marker wins when
    both appear.
    """
    if has_error_marker(raw_body):
        return RndcResult(
            success=False,
            message=extract_tag(raw_body, "ErrorMSG") or FALLBACK_MESSAGE,
            raw_body=raw_body,
        )

    if not has_tag(raw_body, "ingresoid"):
        return RndcResult(success=False, message=FALLBACK_MESSAGE, raw_body=raw_body)

    return RndcResult(
        success=True,
        message=SUCCESS_MESSAGE,
        raw_body=raw_body,
        tracking_id=extract_tag(raw_body, "ingresoid"),
        consecutivo=extract_tag(raw_body, "CONSECUTIVO"),
    )
