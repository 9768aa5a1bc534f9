from sqlalchemy import select

from rndc_service.models import Configuracion, Consecutivo
from rndc_service.services import store


async def test_next_consecutivo_is_sequential_per_type_across_years(session):
    assert await store.next_consecutivo(session, "remesa", year=2025) == "1"
    assert await store.next_consecutivo(session, "remesa", year=2025) == "2"
    assert await store.next_consecutivo(session, "manifiesto", year=2025) == "1"
    # A new year keeps counting; numbers are never reused
    assert await store.next_consecutivo(session, "remesa", year=2026) == "3"
    assert await store.next_consecutivo(session, "remesa", year=2026) == "4"

    counters = await store.list_consecutivos(session)
    assert {(c.tipo, c.anio, c.ultimo_numero) for c in counters} == {
        ("remesa", 2025, 2),
        ("manifiesto", 2025, 1),
        ("remesa", 2026, 4),
    }


async def test_next_consecutivo_continues_existing_counter(session):
    session.add(Consecutivo(tipo="remesa", anio=2025, ultimo_numero=41, prefijo=""))
    await session.commit()

    assert await store.next_consecutivo(session, "remesa", year=2025) == "42"


async def test_save_configuracion_keeps_a_single_active_row(session):
    session.add(
        Configuracion(
            usuario="OLD",
            password="x",
            empresa_nit="1",
            endpoint_primary="http://a/ws",
            endpoint_backup="http://b/ws",
            activo=False,
        )
    )
    await session.commit()

    values = dict(
        usuario="NEW",
        password="y",
        empresa_nit="9013690938",
        endpoint_primary="http://p/ws",
        endpoint_backup="http://q/ws",
        timeout=10_000,
        activo=True,
    )
    first = await store.save_configuracion(session, values)
    second = await store.save_configuracion(session, {**values, "usuario": "NEWER"})

    assert first.id == second.id
    active = await store.get_active_configuracion(session)
    assert active.usuario == "NEWER"
    rows = (await session.execute(select(Configuracion))).scalars().all()
    assert sum(1 for r in rows if r.activo) == 1


async def test_catalog_lookups(session, catalog):
    assert (await store.get_sede_by_nombre(session, " GRANJA NORTE ")).codigo_sede == "002"
    assert (await store.get_sede_by_codigo(session, "009")).nombre == "PLANTA CENTRAL"
    assert (await store.get_vehiculo_by_placa(session, "git990")).capacidad_carga == 7000
    assert await store.get_sede_by_nombre(session, "GRANJA SUR") is None
