from conftest import BACKUP, PRIMARY

from rndc_service.services.soap_client import SOAP_ACTION, RndcSoapClient, soap_url

XML = "<envelope/>"


async def test_primary_success_never_touches_backup(transport, fake_rndc):
    fake_rndc.answer("primary.rndc.test", 200, "<ingresoid>1</ingresoid>")

    result = await transport.send(XML)

    assert result.success is True
    assert result.raw_body == "<ingresoid>1</ingresoid>"
    assert result.endpoint == soap_url(PRIMARY)
    assert fake_rndc.hosts == ["primary.rndc.test"]


async def test_fails_over_to_backup_once(transport, fake_rndc):
    fake_rndc.answer("primary.rndc.test", 500, "boom")
    fake_rndc.answer("backup.rndc.test", 200, "<ingresoid>999</ingresoid>")

    result = await transport.send(XML)

    assert result.success is True
    assert result.raw_body == "<ingresoid>999</ingresoid>"
    assert result.endpoint == soap_url(BACKUP)
    assert fake_rndc.hosts == ["primary.rndc.test", "backup.rndc.test"]


async def test_both_endpoints_failing(transport, fake_rndc):
    fake_rndc.refuse("primary.rndc.test")
    fake_rndc.answer("backup.rndc.test", 503, "")

    result = await transport.send(XML)

    assert result.success is False
    assert result.raw_body is None
    assert result.error_message.startswith("Error en todos los endpoints: primary: ")
    assert "connection refused" in result.error_message
    assert "backup: HTTP error! status: 503" in result.error_message
    # One attempt per endpoint, no retries
    assert fake_rndc.hosts == ["primary.rndc.test", "backup.rndc.test"]


async def test_non_2xx_with_body_is_transport_failure(transport, fake_rndc):
    fake_rndc.answer("primary.rndc.test", 404, "<ingresoid>1</ingresoid>")
    fake_rndc.answer("backup.rndc.test", 200, "<ErrorMSG>x</ErrorMSG>")

    result = await transport.send(XML)

    # Transport succeeded on the backup; the business verdict is not its concern
    assert result.success is True
    assert result.raw_body == "<ErrorMSG>x</ErrorMSG>"


async def test_timeout_on_primary_fails_over(transport, fake_rndc):
    fake_rndc.time_out("primary.rndc.test")
    fake_rndc.answer("backup.rndc.test", 200, "<ingresoid>77</ingresoid>")

    result = await transport.send(XML)

    assert result.success is True
    assert result.raw_body == "<ingresoid>77</ingresoid>"
    assert result.endpoint == soap_url(BACKUP)
    assert fake_rndc.hosts == ["primary.rndc.test", "backup.rndc.test"]


async def test_timeout_on_both_endpoints(transport, fake_rndc):
    fake_rndc.time_out("primary.rndc.test")
    fake_rndc.time_out("backup.rndc.test")

    result = await transport.send(XML)

    assert result.success is False
    assert "primary: timed out" in result.error_message
    assert "backup: timed out" in result.error_message


async def test_configured_timeout_is_applied_to_each_request(transport, fake_rndc):
    fake_rndc.refuse("primary.rndc.test")

    await transport.send(XML)

    # credentials fixture sets 5 000 ms
    for request in fake_rndc.requests:
        assert request.extensions["timeout"]["read"] == 5.0
        assert request.extensions["timeout"]["connect"] == 5.0


async def test_malformed_primary_url_fails_over(http_client, fake_rndc):
    client = RndcSoapClient(http_client, "http://[::1", BACKUP)

    result = await client.send(XML)

    assert result.success is True
    assert result.endpoint == soap_url(BACKUP)
    assert fake_rndc.hosts == ["backup.rndc.test"]


async def test_request_headers_and_body(transport, fake_rndc):
    await transport.send(XML)

    request = fake_rndc.requests[0]
    assert request.method == "POST"
    assert request.headers["Content-Type"] == "text/xml; charset=utf-8"
    assert request.headers["SOAPAction"] == SOAP_ACTION
    assert request.headers["User-Agent"] == "RNDC-Client/1.0"
    assert request.headers["Cache-Control"] == "no-cache"
    assert request.content == XML.encode("utf-8")
    assert request.url.params["intf"] == "IBPMServices"


async def test_test_connection(transport, fake_rndc):
    fake_rndc.refuse("primary.rndc.test")
    assert await transport.test_connection() is True

    fake_rndc.refuse("backup.rndc.test")
    assert await transport.test_connection() is False


def test_soap_url():
    assert soap_url("http://host:8080/ws") == "http://host:8080/ws?intf=IBPMServices"
    assert soap_url("http://host:8080/ws?intf=X") == "http://host:8080/ws?intf=X"
    assert soap_url("http://host:8080/ws/") == "http://host:8080/ws/"
