"""Active RNDC access settings, resolved once per request and passed explicitly."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from rndc_service.models.configuracion import Configuracion
from rndc_service.services import store
from rndc_service.services.errors import ConfigurationError


@dataclass(frozen=True)
class RndcCredentials:
    """Immutable snapshot of the active ``Configuracion`` row."""

    usuario: str
    password: str
    empresa_nit: str
    endpoint_primary: str
    endpoint_backup: str
    timeout_ms: int = 30_000

    @classmethod
    def from_configuracion(cls, config: Configuracion) -> RndcCredentials:
        return cls(
            usuario=config.usuario,
            password=config.password,
            empresa_nit=config.empresa_nit,
            endpoint_primary=config.endpoint_primary,
            endpoint_backup=config.endpoint_backup,
            timeout_ms=config.timeout,
        )

    def __repr__(self) -> str:
        return (
            f"RndcCredentials(usuario={self.usuario!r}, empresa_nit={self.empresa_nit!r}, "
            f"endpoint_primary={self.endpoint_primary!r})"
        )


async def load_active_credentials(session: AsyncSession) -> RndcCredentials:
    config = await store.get_active_configuracion(session)
    if config is None:
        raise ConfigurationError("No hay configuración RNDC activa")
    return RndcCredentials.from_configuracion(config)
