import httpx
import pytest

from rndc_service.core.database import get_session
from rndc_service.main import create_app


@pytest.fixture
async def client(session_factory, http_client):
    app = create_app()

    async def override_session():
        async with session_factory() as s:
            yield s

    app.dependency_overrides[get_session] = override_session
    app.state.http_client = http_client

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        yield c


async def test_liveness(client):
    response = await client.get("/health/live")

    assert response.status_code == 200
    assert response.json()["status"] == "alive"
    assert "X-Request-ID" in response.headers


async def test_processing_without_configuration_is_rejected(client):
    response = await client.post("/api/remesas/process", json={"rows": [{"PLACA": "GIT990"}]})

    assert response.status_code == 400
    assert "configuración" in response.json()["detail"]


async def test_configuracion_roundtrip_hides_password(client):
    payload = {
        "usuario": "TESTUSER",
        "password": "s3cret",
        "empresa_nit": "9013690938",
        "endpoint_primary": "http://primary.rndc.test/ws",
        "endpoint_backup": "http://backup.rndc.test/ws",
    }
    saved = await client.post("/api/configuracion", json=payload)
    fetched = await client.get("/api/configuracion")

    assert saved.status_code == 200
    assert fetched.json()["usuario"] == "TESTUSER"
    assert fetched.json()["timeout"] == 30000
    assert "password" not in fetched.json()


async def test_missing_configuracion_is_404(client):
    assert (await client.get("/api/configuracion")).status_code == 404


async def test_catalog_create_list_and_duplicates(client):
    vehiculo = {
        "placa": "git990",
        "capacidad_carga": 7000,
        "propietario_tipo_doc": "C",
        "propietario_numero_doc": "79123456",
        "propietario_nombre": "TRANSPORTES PRUEBA",
    }
    created = await client.post("/api/vehiculos", json=vehiculo)
    duplicate = await client.post("/api/vehiculos", json=vehiculo)
    listed = await client.get("/api/vehiculos")

    assert created.status_code == 201
    assert created.json()["placa"] == "GIT990"
    assert duplicate.status_code == 409
    assert [v["placa"] for v in listed.json()] == ["GIT990"]


async def test_tercero_lookup_by_document(client):
    await client.post(
        "/api/terceros",
        json={"tipo_documento": "C", "numero_documento": "1023456789", "nombre": "JUAN", "es_conductor": True},
    )

    found = await client.get("/api/terceros/documento/1023456789")
    missing = await client.get("/api/terceros/documento/1")

    assert found.json()["es_conductor"] is True
    assert missing.status_code == 404


async def test_upload_validates_without_storing(client):
    content = (
        "GRANJA;PLANTA;PLACA;FECHA_CITA;IDENTIFICACION\n"
        "GRANJA NORTE;PLANTA CENTRAL;GIT990;15/03/2025;1023456789\n"
        "GRANJA NORTE;;GIT99;2025/03/15;1023456789\n"
    ).encode("utf-8")

    response = await client.post(
        "/api/remesas/upload", files={"file": ("despachos.csv", content, "text/csv")}
    )

    body = response.json()
    assert response.status_code == 200
    assert body["success"] is False
    assert body["total"] == 2
    assert body["rows"][0]["PLACA"] == "GIT990"
    assert [v["valid"] for v in body["validation"]] == [True, False]
    assert (await client.get("/api/remesas")).json() == []


async def test_process_generate_and_audit(client, configuracion, catalog, fake_rndc):
    rows = [{"GRANJA": "GRANJA NORTE", "PLANTA": "PLANTA CENTRAL", "PLACA": "GIT990",
             "FECHA_CITA": "2025-03-15", "IDENTIFICACION": "1023456789", "TONELADAS": "7"}]

    processed = await client.post("/api/remesas/process", json={"rows": rows})
    assert processed.status_code == 200
    assert processed.json()["success"] is True
    consecutivo = processed.json()["results"][0]["consecutivo"]

    generated = await client.post("/api/manifiestos/generate", json={"consecutivos": [consecutivo]})
    assert generated.json()["success_count"] == 1

    manifiestos = (await client.get("/api/manifiestos", params={"estado": "exitoso"})).json()
    assert manifiestos[0]["numero_manifiesto"] == consecutivo
    assert manifiestos[0]["valor_flete"] == 525000

    remesas = (await client.get("/api/remesas")).json()
    assert remesas[0]["estado"] == "exitoso"

    documentos = (await client.get("/api/documentos")).json()
    assert {d["tipo"] for d in documentos} == {"remesa", "manifiesto"}

    logs = (await client.get("/api/logs", params={"limit": 2})).json()
    assert len(logs) == 2


async def test_consultar_unknown_manifiesto_is_404(client, configuracion):
    response = await client.post("/api/manifiestos/999/consultar")
    assert response.status_code == 404


async def test_rndc_connection_test(client, configuracion, fake_rndc):
    fake_rndc.refuse("primary.rndc.test")
    fake_rndc.refuse("backup.rndc.test")

    response = await client.get("/api/rndc/test")

    assert response.json() == {"success": False, "message": "No fue posible conectar con RNDC"}
