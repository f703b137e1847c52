"""Torneo aggregate root.

The aggregate owns the tournament lifecycle, its participant roster,
sub-administrators and sales stages. Every state change is checked
against the EstadoTorneo transition table, and every mutating method
validates completely before touching any field, so a rejected call
leaves the aggregate exactly as it was. Each successful mutation bumps
``version`` by one; stores use it for optimistic concurrency checks.

Two ways to obtain an instance:
- ``Torneo(...)`` creates a new tournament in BORRADOR.
- ``Torneo.restaurar(...)`` rebuilds one from persisted state.
"""

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from .errors import ErrorDominio
from .events import (
    EtapaVentaCreada,
    EventoDominio,
    ParticipanteCancelado,
    ParticipanteDescalificado,
    ParticipanteRegistrado,
    RegistroAbierto,
    RegistroCerrado,
    SubAdministradorAgregado,
    TorneoCancelado,
    TorneoCreado,
    TorneoFinalizado,
    TorneoIniciado,
)
from .models import (
    Categoria,
    EstadoParticipante,
    EstadoTorneo,
    EtapaVenta,
    Participante,
)
from .value_objects import NombreTorneo, TorneoId, UsuarioId


class Torneo:
    """Tournament aggregate root. Identity is its TorneoId.

    The category is referenced, not owned: it must be active when the
    tournament is created, but later deactivation does not affect
    tournaments that already exist.
    """

    LIMITE_MINIMO = 2
    LIMITE_MAXIMO = 1000
    MINIMO_PARTICIPANTES_PARA_INICIAR = 2
    RAZON_CANCELACION_POR_DEFECTO = "Cancelado por organizador"

    def __init__(
        self,
        id: TorneoId | str,
        nombre: NombreTorneo | str,
        categoria: Categoria,
        organizador_id: UsuarioId | str,
    ):
        """Create a new tournament in BORRADOR.

        Raises:
            ErrorDominio: If an argument is missing or invalid, or the
                category is inactive.
        """
        self._validar_parametros_requeridos(id, nombre, categoria, organizador_id)
        if not isinstance(categoria, Categoria):
            raise ErrorDominio("Categoría del torneo debe ser una Categoria")
        if not categoria.esta_activa:
            raise ErrorDominio("No se puede crear torneo con categoría inactiva")

        self._id = id if isinstance(id, TorneoId) else TorneoId(id)
        self._nombre = nombre if isinstance(nombre, NombreTorneo) else NombreTorneo(nombre)
        self._organizador_id = (
            organizador_id
            if isinstance(organizador_id, UsuarioId)
            else UsuarioId(organizador_id)
        )
        self._categoria = categoria

        self._estado = EstadoTorneo.BORRADOR
        self._fecha_creacion = datetime.now(UTC)
        self._limite_participantes: int | None = None
        self._participantes: dict[str, Participante] = {}
        self._version = 1

        self._razon_cancelacion: str | None = None
        self._fecha_cancelacion: datetime | None = None
        self._ganador_id: UsuarioId | None = None
        self._sub_administradores: list[UsuarioId] = []
        self._etapas_venta: list[EtapaVenta] = []

        self._eventos: list[EventoDominio] = [
            TorneoCreado(
                torneo_id=self._id.valor,
                nombre=self._nombre.valor,
                organizador_id=self._organizador_id.valor,
                categoria_id=self._categoria.id.valor,
            )
        ]

    @classmethod
    def restaurar(
        cls,
        id: TorneoId | str,
        nombre: NombreTorneo | str,
        categoria: Categoria,
        organizador_id: UsuarioId | str,
        *,
        estado: EstadoTorneo | str,
        version: int,
        fecha_creacion: datetime,
        limite_participantes: int | None = None,
        participantes: Iterable[Participante] = (),
        razon_cancelacion: str | None = None,
        fecha_cancelacion: datetime | None = None,
        ganador_id: UsuarioId | str | None = None,
        sub_administradores: Iterable[UsuarioId | str] = (),
        etapas_venta: Iterable[EtapaVenta] = (),
    ) -> "Torneo":
        """Rebuild a tournament from persisted state.

        Runs the creation checks first, so the category must be active
        *now*. Mutable state is then overwritten without emitting events.

        Raises:
            ErrorDominio: If the creation checks fail or the persisted
                state is not a known EstadoTorneo.
        """
        torneo = cls(id, nombre, categoria, organizador_id)

        if not EstadoTorneo.es_valido(estado):
            raise ErrorDominio(f"Estado de torneo desconocido: {estado}")
        if isinstance(version, bool) or not isinstance(version, int) or version < 1:
            raise ErrorDominio(f"Versión de torneo inválida: {version}")

        torneo._estado = EstadoTorneo(estado)
        torneo._version = version
        torneo._fecha_creacion = fecha_creacion
        torneo._limite_participantes = limite_participantes
        torneo._participantes = {p.id: p for p in participantes}
        torneo._razon_cancelacion = razon_cancelacion
        torneo._fecha_cancelacion = fecha_cancelacion
        torneo._ganador_id = _como_usuario_id(ganador_id) if ganador_id else None
        torneo._sub_administradores = [_como_usuario_id(u) for u in sub_administradores]
        torneo._etapas_venta = list(etapas_venta)
        torneo._eventos = []
        return torneo

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def id(self) -> TorneoId:
        return self._id

    @property
    def nombre(self) -> NombreTorneo:
        return self._nombre

    @property
    def categoria(self) -> Categoria:
        return self._categoria

    @property
    def organizador_id(self) -> UsuarioId:
        return self._organizador_id

    @property
    def estado(self) -> EstadoTorneo:
        return self._estado

    @property
    def version(self) -> int:
        return self._version

    @property
    def fecha_creacion(self) -> datetime:
        return self._fecha_creacion

    @property
    def limite_participantes(self) -> int | None:
        return self._limite_participantes

    @property
    def participantes_actuales(self) -> int:
        """Number of active (registered or confirmed) participants."""
        return sum(1 for p in self._participantes.values() if p.esta_activo())

    @property
    def participantes(self) -> tuple[Participante, ...]:
        return tuple(self._participantes.values())

    @property
    def razon_cancelacion(self) -> str | None:
        return self._razon_cancelacion

    @property
    def fecha_cancelacion(self) -> datetime | None:
        return self._fecha_cancelacion

    @property
    def ganador_id(self) -> UsuarioId | None:
        return self._ganador_id

    @property
    def sub_administradores(self) -> tuple[UsuarioId, ...]:
        return tuple(self._sub_administradores)

    @property
    def etapas_venta(self) -> tuple[EtapaVenta, ...]:
        return tuple(self._etapas_venta)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def puede_configurar(self) -> bool:
        return self._estado == EstadoTorneo.BORRADOR

    def puede_aceptar_participantes(self) -> bool:
        if self._estado != EstadoTorneo.ABIERTO_REGISTRO:
            return False
        if self._limite_participantes is None:
            return True
        return self.participantes_actuales < self._limite_participantes

    def buscar_participante_por_usuario(self, usuario_id: UsuarioId | str) -> Participante | None:
        """Return the active participant for a user, or None."""
        usuario = _como_usuario_id(usuario_id)
        for participante in self._participantes.values():
            if participante.usuario_id == usuario and participante.esta_activo():
                return participante
        return None

    def tiene_usuario(self, usuario_id: UsuarioId | str) -> bool:
        return self.buscar_participante_por_usuario(usuario_id) is not None

    def obtener_resumen_para_api(self) -> dict[str, Any]:
        """Summary used by listings."""
        return {
            "torneoId": self._id.valor,
            "nombre": self._nombre.valor,
            "categoria": self._categoria.descripcion,
            "organizadorId": self._organizador_id.valor,
            "estado": self._estado.value,
            "fechaCreacion": self._fecha_creacion.isoformat(),
            "participantesActuales": self.participantes_actuales,
            "limiteParticipantes": self._limite_participantes,
        }

    def obtener_datos_creacion(self) -> dict[str, Any]:
        """Payload returned when a tournament is created."""
        return {
            "torneoId": self._id.valor,
            "nombre": self._nombre.valor,
            "estado": self._estado.value,
            "organizadorId": self._organizador_id.valor,
            "fechaCreacion": self._fecha_creacion.isoformat(),
        }

    def obtener_detalles_completos(self) -> dict[str, Any]:
        """Full detail view of the tournament."""
        detalles: dict[str, Any] = {
            "torneoId": self._id.valor,
            "nombre": self._nombre.valor,
            "categoria": {
                "id": self._categoria.id.valor,
                "descripcion": self._categoria.descripcion,
                "alias": self._categoria.alias,
            },
            "organizadorId": self._organizador_id.valor,
            "estado": self._estado.value,
            "fechaCreacion": self._fecha_creacion.isoformat(),
            "participantesActuales": self.participantes_actuales,
            "limiteParticipantes": self._limite_participantes,
            "version": self._version,
        }
        if self._fecha_cancelacion is not None:
            detalles["fechaCancelacion"] = self._fecha_cancelacion.isoformat()
            detalles["razonCancelacion"] = self._razon_cancelacion
        if self._ganador_id is not None:
            detalles["ganadorId"] = self._ganador_id.valor
        return detalles

    def obtener_estadisticas(self) -> dict[str, Any]:
        """Participation counts by state plus occupancy of the limit."""
        por_estado = {estado.value: 0 for estado in EstadoParticipante}
        for participante in self._participantes.values():
            por_estado[participante.estado.value] += 1

        activos = self.participantes_actuales
        ocupacion = None
        if self._limite_participantes:
            ocupacion = round(activos * 100 / self._limite_participantes, 2)

        return {
            "estado": self._estado.value,
            "totalParticipantes": len(self._participantes),
            "activos": activos,
            "registrados": por_estado[EstadoParticipante.REGISTRADO.value],
            "confirmados": por_estado[EstadoParticipante.CONFIRMADO.value],
            "cancelados": por_estado[EstadoParticipante.CANCELADO.value],
            "descalificados": por_estado[EstadoParticipante.DESCALIFICADO.value],
            "limiteParticipantes": self._limite_participantes,
            "porcentajeOcupacion": ocupacion,
            "etapasVenta": len(self._etapas_venta),
            "subAdministradores": len(self._sub_administradores),
        }

    def obtener_eventos_no_publicados(self) -> list[EventoDominio]:
        """Return the pending events and clear the queue."""
        eventos, self._eventos = self._eventos, []
        return eventos

    # ------------------------------------------------------------------
    # Configuration (BORRADOR only)
    # ------------------------------------------------------------------

    def actualizar_limite_participantes(self, nuevo_limite: int) -> None:
        if not self.puede_configurar():
            raise ErrorDominio(f"No se puede modificar torneo en estado {self._estado.value}")
        if isinstance(nuevo_limite, bool) or not isinstance(nuevo_limite, int):
            raise ErrorDominio("El límite de participantes debe ser un número entero")
        if nuevo_limite < self.LIMITE_MINIMO:
            raise ErrorDominio("El límite debe ser al menos 2 participantes")
        if nuevo_limite > self.LIMITE_MAXIMO:
            raise ErrorDominio("El límite máximo es 1000 participantes")

        self._limite_participantes = nuevo_limite
        self._version += 1

    def actualizar_nombre(self, nombre: NombreTorneo | str) -> None:
        if not self.puede_configurar():
            raise ErrorDominio(
                f"No se puede modificar el nombre del torneo en estado {self._estado.value}"
            )
        nuevo = nombre if isinstance(nombre, NombreTorneo) else NombreTorneo(nombre)

        self._nombre = nuevo
        self._version += 1

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def abrir_para_registro(self) -> None:
        self._validar_transicion(EstadoTorneo.ABIERTO_REGISTRO)

        self._estado = EstadoTorneo.ABIERTO_REGISTRO
        self._version += 1
        self._eventos.append(RegistroAbierto(torneo_id=self._id.valor))

    def cerrar_registro(self) -> None:
        self._validar_transicion(EstadoTorneo.REGISTRO_CERRADO)

        self._estado = EstadoTorneo.REGISTRO_CERRADO
        self._version += 1
        self._eventos.append(
            RegistroCerrado(
                torneo_id=self._id.valor,
                cantidad_participantes=self.participantes_actuales,
            )
        )

    def iniciar_torneo(self) -> None:
        self._validar_transicion(EstadoTorneo.EN_PROGRESO)
        activos = self.participantes_actuales
        if activos < self.MINIMO_PARTICIPANTES_PARA_INICIAR:
            raise ErrorDominio(
                f"Se requieren al menos {self.MINIMO_PARTICIPANTES_PARA_INICIAR} "
                f"participantes para iniciar el torneo (hay {activos})"
            )

        self._estado = EstadoTorneo.EN_PROGRESO
        self._version += 1
        self._eventos.append(
            TorneoIniciado(torneo_id=self._id.valor, cantidad_participantes=activos)
        )

    def finalizar_torneo(self, ganador_id: UsuarioId | str) -> None:
        self._validar_transicion(EstadoTorneo.FINALIZADO)
        ganador = _como_usuario_id(ganador_id)
        if not self.tiene_usuario(ganador):
            raise ErrorDominio(
                f"El ganador {ganador.valor} debe ser un participante activo del torneo"
            )

        self._estado = EstadoTorneo.FINALIZADO
        self._ganador_id = ganador
        self._version += 1
        self._eventos.append(
            TorneoFinalizado(torneo_id=self._id.valor, ganador_id=ganador.valor)
        )

    def cancelar(self, razon: str | None = None) -> None:
        """Cancel the tournament.

        Idempotent once CANCELADO (no version bump). Participants keep
        their state so the caller can report who was affected.

        Raises:
            ErrorDominio: If the tournament is FINALIZADO.
        """
        if self._estado == EstadoTorneo.FINALIZADO:
            raise ErrorDominio("No se puede cancelar un torneo finalizado")
        if self._estado == EstadoTorneo.CANCELADO:
            return
        self._validar_transicion(EstadoTorneo.CANCELADO)

        estado_anterior = self._estado
        razon = razon or self.RAZON_CANCELACION_POR_DEFECTO

        self._estado = EstadoTorneo.CANCELADO
        self._razon_cancelacion = razon
        self._fecha_cancelacion = datetime.now(UTC)
        self._version += 1
        self._eventos.append(
            TorneoCancelado(
                torneo_id=self._id.valor,
                razon=razon,
                estado_anterior=estado_anterior.value,
                participantes_afectados=self.participantes_actuales,
            )
        )

    # ------------------------------------------------------------------
    # Participants
    # ------------------------------------------------------------------

    def agregar_participante(self, participante: Participante) -> None:
        """Register a participant while registration is open.

        Raises:
            ErrorDominio: If registration is not open, the participant id
                or user is already registered, or the limit is reached.
        """
        if self._estado != EstadoTorneo.ABIERTO_REGISTRO:
            raise ErrorDominio(
                f"No se pueden registrar participantes en estado {self._estado.value}"
            )
        if not isinstance(participante, Participante):
            raise ErrorDominio("Participante inválido")
        if not participante.esta_activo():
            raise ErrorDominio(
                f"No se puede registrar un participante en estado {participante.estado.value}"
            )
        if participante.id in self._participantes:
            raise ErrorDominio(f"Participante {participante.id} ya existe en el torneo")
        if self.tiene_usuario(participante.usuario_id):
            raise ErrorDominio(
                f"El usuario {participante.usuario_id.valor} ya está registrado en el torneo"
            )
        if (
            self._limite_participantes is not None
            and self.participantes_actuales >= self._limite_participantes
        ):
            raise ErrorDominio(
                f"Se alcanzó el límite de participantes ({self._limite_participantes})"
            )

        self._participantes[participante.id] = participante
        self._version += 1
        self._eventos.append(
            ParticipanteRegistrado(
                torneo_id=self._id.valor,
                participante_id=participante.id,
                usuario_id=participante.usuario_id.valor,
            )
        )

    def confirmar_participante(self, participante_id: str) -> None:
        self._validar_estado_en(
            "confirmar participantes",
            EstadoTorneo.ABIERTO_REGISTRO,
            EstadoTorneo.REGISTRO_CERRADO,
        )
        participante = self._obtener_participante(participante_id)
        participante.confirmar_participacion()
        self._version += 1

    def remover_participante(
        self, participante_id: str, razon: str = "CANCELACION_VOLUNTARIA"
    ) -> None:
        """Withdraw a participant before the tournament starts."""
        self._validar_estado_en(
            "remover participantes",
            EstadoTorneo.ABIERTO_REGISTRO,
            EstadoTorneo.REGISTRO_CERRADO,
        )
        participante = self._obtener_participante(participante_id)
        participante.cancelar(razon)

        self._version += 1
        self._eventos.append(
            ParticipanteCancelado(
                torneo_id=self._id.valor,
                participante_id=participante.id,
                razon=razon,
            )
        )

    def descalificar_participante(self, participante_id: str, razon: str) -> None:
        self._validar_estado_en(
            "descalificar participantes",
            EstadoTorneo.ABIERTO_REGISTRO,
            EstadoTorneo.REGISTRO_CERRADO,
            EstadoTorneo.EN_PROGRESO,
        )
        participante = self._obtener_participante(participante_id)
        participante.descalificar(razon)

        self._version += 1
        self._eventos.append(
            ParticipanteDescalificado(
                torneo_id=self._id.valor,
                participante_id=participante.id,
                razon=razon,
            )
        )

    # ------------------------------------------------------------------
    # Administration and sales
    # ------------------------------------------------------------------

    def agregar_sub_administrador(self, usuario_id: UsuarioId | str) -> None:
        if self._estado.es_terminal():
            raise ErrorDominio(
                f"No se pueden agregar subadministradores en estado {self._estado.value}"
            )
        usuario = _como_usuario_id(usuario_id)
        if usuario == self._organizador_id:
            raise ErrorDominio("El organizador no puede ser subadministrador de su torneo")
        if usuario in self._sub_administradores:
            raise ErrorDominio(f"El usuario {usuario.valor} ya es subadministrador")

        self._sub_administradores.append(usuario)
        self._version += 1
        self._eventos.append(
            SubAdministradorAgregado(torneo_id=self._id.valor, usuario_id=usuario.valor)
        )

    def crear_etapa_venta(
        self,
        nombre: str,
        fecha_inicio: datetime,
        fecha_fin: datetime,
        precio: float,
    ) -> EtapaVenta:
        """Add a sales stage. Stages may not overlap or share a name."""
        self._validar_estado_en(
            "crear etapas de venta",
            EstadoTorneo.BORRADOR,
            EstadoTorneo.ABIERTO_REGISTRO,
        )
        etapa = EtapaVenta(
            nombre=nombre, fecha_inicio=fecha_inicio, fecha_fin=fecha_fin, precio=precio
        )
        for existente in self._etapas_venta:
            if existente.nombre.lower() == etapa.nombre.lower():
                raise ErrorDominio(f"Ya existe una etapa de venta llamada '{etapa.nombre}'")
            if existente.se_solapa_con(etapa):
                raise ErrorDominio(
                    f"La etapa de venta '{etapa.nombre}' se solapa con '{existente.nombre}'"
                )

        self._etapas_venta.append(etapa)
        self._version += 1
        self._eventos.append(
            EtapaVentaCreada(torneo_id=self._id.valor, nombre=etapa.nombre, precio=etapa.precio)
        )
        return etapa

    # ------------------------------------------------------------------
    # Internal checks
    # ------------------------------------------------------------------

    def _validar_transicion(self, destino: EstadoTorneo) -> None:
        if not EstadoTorneo.puede_transicionar_a(self._estado, destino):
            raise ErrorDominio(
                f"No se puede pasar del estado {self._estado.value} al estado {destino.value}"
            )

    def _validar_estado_en(self, accion: str, *permitidos: EstadoTorneo) -> None:
        if self._estado not in permitidos:
            raise ErrorDominio(f"No se pueden {accion} en estado {self._estado.value}")

    def _obtener_participante(self, participante_id: str) -> Participante:
        participante = self._participantes.get(participante_id)
        if participante is None:
            raise ErrorDominio(f"Participante {participante_id} no encontrado en el torneo")
        return participante

    @staticmethod
    def _validar_parametros_requeridos(
        id: object, nombre: object, categoria: object, organizador_id: object
    ) -> None:
        if not id:
            raise ErrorDominio("ID del torneo es requerido")
        if not nombre:
            raise ErrorDominio("Nombre del torneo es requerido")
        if not categoria:
            raise ErrorDominio("Categoría del torneo es requerido")
        if not organizador_id:
            raise ErrorDominio("Organizador es requerido")

    def __repr__(self) -> str:
        return (
            f"Torneo(id={self._id.valor!r}, nombre={self._nombre.valor!r}, "
            f"estado={self._estado.value}, version={self._version})"
        )


def _como_usuario_id(valor: UsuarioId | str) -> UsuarioId:
    return valor if isinstance(valor, UsuarioId) else UsuarioId(valor)
