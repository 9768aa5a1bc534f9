"""ORM models; importing this package registers every table on ``Base.metadata``."""

from rndc_service.models.auditoria import (
    Documento,
    DocumentoEstado,
    DocumentoTipo,
    LogActividad,
)
from rndc_service.models.catalogo import Municipio, Sede, Tercero, Vehiculo
from rndc_service.models.configuracion import Configuracion, Consecutivo
from rndc_service.models.manifiesto import Manifiesto, ManifiestoEstado
from rndc_service.models.remesa import REMESA_ACEPTADA, Remesa, RemesaEstado

__all__ = [
    "Configuracion",
    "Consecutivo",
    "Documento",
    "DocumentoEstado",
    "DocumentoTipo",
    "LogActividad",
    "Manifiesto",
    "ManifiestoEstado",
    "Municipio",
    "REMESA_ACEPTADA",
    "Remesa",
    "RemesaEstado",
    "Sede",
    "Tercero",
    "Vehiculo",
]
