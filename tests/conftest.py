"""Shared fixtures: in-memory database, seeded catalogs and a fake RNDC."""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RNDC_BATCH_PAUSE_SECONDS", "0")

from decimal import Decimal  # noqa: E402

import httpx  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import rndc_service.models  # noqa: E402,F401
from rndc_service.core.database import Base  # noqa: E402
from rndc_service.models import Configuracion, Sede, Vehiculo  # noqa: E402
from rndc_service.services.credentials import RndcCredentials  # noqa: E402
from rndc_service.services.soap_client import RndcSoapClient  # noqa: E402

PRIMARY = "http://primary.rndc.test/ws"
BACKUP = "http://backup.rndc.test/ws"

ACCEPTED = "<root><ingresoid>{ingresoid}</ingresoid></root>"


class FakeRndc:
    """``httpx.MockTransport`` handler with one canned answer per host."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._answers: dict[str, object] = {}
        self._next_ingresoid = 1000

    def answer(self, host: str, status_code: int = 200, body: str | None = None) -> None:
        self._answers[host] = (status_code, body)

    def refuse(self, host: str) -> None:
        self._answers[host] = httpx.ConnectError("connection refused")

    def time_out(self, host: str) -> None:
        self._answers[host] = httpx.ReadTimeout("timed out")

    @property
    def hosts(self) -> list[str]:
        return [r.url.host for r in self.requests]

    @property
    def bodies(self) -> list[str]:
        return [r.content.decode("utf-8") for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        answer = self._answers.get(request.url.host)
        if isinstance(answer, Exception):
            raise answer
        if answer is None:
            # Default: accept with a fresh ingreso id
            self._next_ingresoid += 1
            return httpx.Response(200, text=ACCEPTED.format(ingresoid=self._next_ingresoid))
        status_code, body = answer
        return httpx.Response(status_code, text=body or "")


@pytest.fixture
def credentials() -> RndcCredentials:
    return RndcCredentials(
        usuario="TESTUSER",
        password="s3cret",
        empresa_nit="9013690938",
        endpoint_primary=PRIMARY,
        endpoint_backup=BACKUP,
        timeout_ms=5_000,
    )


@pytest.fixture
def fake_rndc() -> FakeRndc:
    return FakeRndc()


@pytest.fixture
async def http_client(fake_rndc):
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_rndc)) as client:
        yield client


@pytest.fixture
def transport(http_client, credentials) -> RndcSoapClient:
    return RndcSoapClient.from_credentials(http_client, credentials)


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return async_sessionmaker(db_engine, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as s:
        yield s


@pytest.fixture
async def catalog(session):
    """Plant 009 (origin), farm 002 (destination, 75 000/t) and truck GIT990 (7 000 kg)."""
    planta = Sede(
        codigo_sede="009",
        nombre="PLANTA CENTRAL",
        tipo_sede="planta",
        municipio_codigo="25320000",
        valor_tonelada=Decimal("68000"),
    )
    granja = Sede(
        codigo_sede="002",
        nombre="GRANJA NORTE",
        tipo_sede="granja",
        municipio_codigo="25286000",
        valor_tonelada=Decimal("75000"),
    )
    vehiculo = Vehiculo(
        placa="GIT990",
        capacidad_carga=7000,
        propietario_tipo_doc="C",
        propietario_numero_doc="79123456",
        propietario_nombre="TRANSPORTES PRUEBA",
    )
    session.add_all([planta, granja, vehiculo])
    await session.commit()
    return {"planta": planta, "granja": granja, "vehiculo": vehiculo}


@pytest.fixture
async def configuracion(session):
    config = Configuracion(
        usuario="TESTUSER",
        password="s3cret",
        empresa_nit="9013690938",
        endpoint_primary=PRIMARY,
        endpoint_backup=BACKUP,
        timeout=5_000,
        activo=True,
    )
    session.add(config)
    await session.commit()
    return config
