"""RNDC SOAP transport with primary/backup failover.

Each call to :meth:`RndcSoapClient.send` makes at most two HTTP attempts:
one against the primary endpoint and, only if that fails, one against the
backup. There is no retry on the same endpoint and the caller never
retries either; RNDC has no idempotency key and a duplicated submission
creates a duplicated ingreso id.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx
import structlog

from rndc_service.services.credentials import RndcCredentials

logger = structlog.get_logger()

SOAP_ACTION = '"urn:BPMServicesIntf-IBPMServices#AtenderMensajeRNDC"'

SOAP_HEADERS = {
    "Content-Type": "text/xml; charset=utf-8",
    "SOAPAction": SOAP_ACTION,
    "Accept": "text/xml, application/xml",
    "Cache-Control": "no-cache",
    "Pragma": "no-cache",
    "User-Agent": "RNDC-Client/1.0",
}

PING_XML = """<?xml version="1.0" encoding="utf-8"?>
<soap:Envelope xmlns:soap="http://schemas.xmlsoap.org/soap/envelope/">
  <soap:Body>
    <test>connectivity</test>
  </soap:Body>
</soap:Envelope>"""


class RndcTransportError(Exception):
    """Raised internally when one endpoint attempt does not return 2xx."""


@dataclass
class TransportResult:
    """Outcome of delivering one XML message.

    ``success`` only means an endpoint answered 2xx; whether RNDC accepted
    the document is decided by the response classifier.
    """

    success: bool
    raw_body: str | None = None
    error_message: str | None = None
    endpoint: str | None = None


def soap_url(endpoint: str) -> str:
    """Append the RNDC interface selector to a bare endpoint URL."""
    if "?" not in endpoint and not endpoint.endswith("/"):
        return f"{endpoint}?intf=IBPMServices"
    return endpoint


class RndcSoapClient:
    """Sends RNDC envelopes through a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        primary_endpoint: str,
        backup_endpoint: str,
        timeout_ms: int = 30_000,
    ) -> None:
        self._http_client = http_client
        self._endpoints = (("primary", primary_endpoint), ("backup", backup_endpoint))
        self._timeout = httpx.Timeout(timeout_ms / 1000)

    @classmethod
    def from_credentials(
        cls, http_client: httpx.AsyncClient, credentials: RndcCredentials
    ) -> RndcSoapClient:
        return cls(
            http_client,
            credentials.endpoint_primary,
            credentials.endpoint_backup,
            credentials.timeout_ms,
        )

    async def send(self, xml: str) -> TransportResult:
        """POST ``xml`` to the primary endpoint, falling back to the backup once."""
        errors: list[str] = []

        for name, endpoint in self._endpoints:
            url = soap_url(endpoint)
            try:
                body = await self._post(url, xml)
            except Exception as exc:
                # Any failure on this endpoint moves on to the next one
                detail = str(exc) or exc.__class__.__name__
                errors.append(f"{name}: {detail}")
                logger.warning("rndc_send_failed", endpoint=url, attempt=name, error=detail)
                continue

            logger.info("rndc_send_ok", endpoint=url, attempt=name, response_bytes=len(body))
            return TransportResult(success=True, raw_body=body, endpoint=url)

        message = "Error en todos los endpoints: " + "; ".join(errors)
        logger.error("rndc_send_exhausted", errors=errors)
        return TransportResult(success=False, error_message=message)

    async def test_connection(self) -> bool:
        """Return True if any endpoint answers 2xx to a minimal envelope."""
        result = await self.send(PING_XML)
        return result.success

    async def _post(self, url: str, xml: str) -> str:
        response = await self._http_client.post(
            url,
            content=xml.encode("utf-8"),
            headers=SOAP_HEADERS,
            timeout=self._timeout,
        )
        if not response.is_success:
            raise RndcTransportError(f"HTTP error! status: {response.status_code}")
        return response.text
