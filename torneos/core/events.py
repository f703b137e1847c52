"""Domain events recorded by the Torneo aggregate.

Events are plain frozen records. The aggregate queues them and callers
drain the queue with ``Torneo.obtener_eventos_no_publicados()``; nothing
in the core publishes them anywhere.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime


@dataclass(frozen=True)
class EventoDominio:
    """Base for all tournament events."""

    torneo_id: str
    ocurrido_en: datetime = field(default_factory=lambda: datetime.now(UTC), kw_only=True)

    @property
    def tipo(self) -> str:
        return type(self).__name__


@dataclass(frozen=True)
class TorneoCreado(EventoDominio):
    nombre: str
    organizador_id: str
    categoria_id: str


@dataclass(frozen=True)
class RegistroAbierto(EventoDominio):
    pass


@dataclass(frozen=True)
class RegistroCerrado(EventoDominio):
    cantidad_participantes: int


@dataclass(frozen=True)
class ParticipanteRegistrado(EventoDominio):
    participante_id: str
    usuario_id: str


@dataclass(frozen=True)
class ParticipanteCancelado(EventoDominio):
    participante_id: str
    razon: str


@dataclass(frozen=True)
class ParticipanteDescalificado(EventoDominio):
    participante_id: str
    razon: str


@dataclass(frozen=True)
class TorneoIniciado(EventoDominio):
    cantidad_participantes: int


@dataclass(frozen=True)
class TorneoFinalizado(EventoDominio):
    ganador_id: str


@dataclass(frozen=True)
class TorneoCancelado(EventoDominio):
    razon: str
    estado_anterior: str
    participantes_afectados: int


@dataclass(frozen=True)
class SubAdministradorAgregado(EventoDominio):
    usuario_id: str


@dataclass(frozen=True)
class EtapaVentaCreada(EventoDominio):
    nombre: str
    precio: float
