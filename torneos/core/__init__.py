"""Core domain logic for the torneos service.

This package has zero external dependencies and holds the pure business
logic: value objects, the Categoria entity, the EstadoTorneo state
machine and the Torneo aggregate. Persistence and HTTP are handled by
the adapters package.
"""

from .errors import ConflictoDeVersion, ErrorDominio, RecursoNoEncontrado
from .models import (
    Categoria,
    ConfiguracionComisiones,
    EstadoParticipante,
    EstadoTorneo,
    EtapaVenta,
    Participante,
)
from .torneo import Torneo
from .value_objects import CategoriaId, NombreTorneo, TorneoId, UsuarioId

__all__ = [
    "Categoria",
    "CategoriaId",
    "ConfiguracionComisiones",
    "ConflictoDeVersion",
    "ErrorDominio",
    "EstadoParticipante",
    "EstadoTorneo",
    "EtapaVenta",
    "NombreTorneo",
    "Participante",
    "RecursoNoEncontrado",
    "Torneo",
    "TorneoId",
    "UsuarioId",
]
