"""Domain models for the torneos core.

Enums, entities and small records used by the Torneo aggregate. Like the
rest of the core, this module depends only on the standard library.
"""

import re
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from .errors import ErrorDominio
from .validation import requerir_no_vacio, validar_rango
from .value_objects import CategoriaId, UsuarioId


class EstadoTorneo(str, Enum):
    """Lifecycle states for a tournament.

    Normal flow: BORRADOR → ABIERTO_REGISTRO → REGISTRO_CERRADO → EN_PROGRESO → FINALIZADO.
    CANCELADO is reachable from every non-terminal state.
    FINALIZADO and CANCELADO are terminal.
    """

    BORRADOR = "BORRADOR"
    ABIERTO_REGISTRO = "ABIERTO_REGISTRO"
    REGISTRO_CERRADO = "REGISTRO_CERRADO"
    EN_PROGRESO = "EN_PROGRESO"
    FINALIZADO = "FINALIZADO"
    CANCELADO = "CANCELADO"

    @classmethod
    def valores(cls) -> list[str]:
        return [estado.value for estado in cls]

    @classmethod
    def es_valido(cls, estado: object) -> bool:
        return cls._coerce(estado) is not None

    @classmethod
    def _coerce(cls, estado: object) -> "EstadoTorneo | None":
        if isinstance(estado, cls):
            return estado
        if isinstance(estado, str):
            try:
                return cls(estado)
            except ValueError:
                return None
        return None

    @staticmethod
    def puede_transicionar_a(origen: object, destino: object) -> bool:
        """Look up whether ``origen → destino`` is in the transition table.

        Accepts members or their string values. Unknown states and pairs
        not listed in the table yield False.
        """
        desde = EstadoTorneo._coerce(origen)
        hacia = EstadoTorneo._coerce(destino)
        if desde is None or hacia is None:
            return False
        return hacia in _TRANSICIONES[desde]

    def es_terminal(self) -> bool:
        return not _TRANSICIONES[self]


_TRANSICIONES: dict[EstadoTorneo, frozenset[EstadoTorneo]] = {
    EstadoTorneo.BORRADOR: frozenset(
        {EstadoTorneo.ABIERTO_REGISTRO, EstadoTorneo.CANCELADO}
    ),
    EstadoTorneo.ABIERTO_REGISTRO: frozenset(
        {
            EstadoTorneo.REGISTRO_CERRADO,
            EstadoTorneo.EN_PROGRESO,
            EstadoTorneo.CANCELADO,
        }
    ),
    EstadoTorneo.REGISTRO_CERRADO: frozenset(
        {EstadoTorneo.EN_PROGRESO, EstadoTorneo.CANCELADO}
    ),
    EstadoTorneo.EN_PROGRESO: frozenset(
        {EstadoTorneo.FINALIZADO, EstadoTorneo.CANCELADO}
    ),
    EstadoTorneo.FINALIZADO: frozenset(),
    EstadoTorneo.CANCELADO: frozenset(),
}


class EstadoParticipante(str, Enum):
    """Lifecycle states for a tournament participant.

    REGISTRADO → CONFIRMADO, and both may end in CANCELADO or
    DESCALIFICADO. CANCELADO and DESCALIFICADO are terminal.
    """

    REGISTRADO = "REGISTRADO"
    CONFIRMADO = "CONFIRMADO"
    CANCELADO = "CANCELADO"
    DESCALIFICADO = "DESCALIFICADO"

    def esta_activo(self) -> bool:
        return self in (EstadoParticipante.REGISTRADO, EstadoParticipante.CONFIRMADO)


PORCENTAJE_MINIMO = 0.0
PORCENTAJE_MAXIMO = 20.0
_MENSAJE_PORCENTAJE = "Porcentaje de comisión debe estar entre 0% y 20%"
_ALIAS_VALIDO = re.compile(r"[a-z0-9-]+")


@dataclass
class ConfiguracionComisiones:
    """Commission percentages charged for tournaments of a category."""

    porcentaje_base: float = 5.0
    porcentaje_premium: float = 8.0


class Categoria:
    """A tournament category. Identity is its CategoriaId.

    Mutable: activation state and commission configuration change over
    the entity's lifetime; ``fecha_creacion`` never does.
    """

    LONGITUD_MINIMA_DESCRIPCION = 2
    LONGITUD_MAXIMA_DESCRIPCION = 100

    def __init__(self, id: str, descripcion: str, alias: str):
        if not id:
            raise ErrorDominio("ID de categoría es requerido")
        if not descripcion:
            raise ErrorDominio("Descripción de categoría es requerido")
        if not alias:
            raise ErrorDominio("Alias de categoría es requerido")

        self.id = id if isinstance(id, CategoriaId) else CategoriaId(id)
        self.descripcion = self._validar_descripcion(descripcion)
        self.alias = self._validar_alias(alias)

        self.esta_activa = True
        self._fecha_creacion = datetime.now(UTC)
        self.configuracion_comisiones = ConfiguracionComisiones()
        self.restricciones_tipo_juego: list[str] = []

    @property
    def fecha_creacion(self) -> datetime:
        return self._fecha_creacion

    def activar(self) -> None:
        """Make the category usable for new tournaments (idempotent)."""
        if self.esta_activa:
            return
        self.esta_activa = True

    def desactivar(self) -> None:
        """Stop the category from being used for new tournaments (idempotent)."""
        if not self.esta_activa:
            return
        self.esta_activa = False

    def actualizar_comisiones(
        self, porcentaje_base: float, porcentaje_premium: float | None = None
    ) -> None:
        """Update commission percentages.

        Both values are validated before either is applied, so a rejected
        call leaves the configuration unchanged.

        Raises:
            ErrorDominio: If a percentage is outside [0, 20].
        """
        validar_rango(
            porcentaje_base, PORCENTAJE_MINIMO, PORCENTAJE_MAXIMO, _MENSAJE_PORCENTAJE
        )
        if porcentaje_premium is not None:
            validar_rango(
                porcentaje_premium,
                PORCENTAJE_MINIMO,
                PORCENTAJE_MAXIMO,
                _MENSAJE_PORCENTAJE,
            )

        self.configuracion_comisiones.porcentaje_base = porcentaje_base
        if porcentaje_premium is not None:
            self.configuracion_comisiones.porcentaje_premium = porcentaje_premium

    def puede_usarse_en_torneo(self) -> bool:
        return self.esta_activa

    def obtener_comision_para(self, tipo_torneo: str = "base") -> float:
        """Premium percentage for ``'premium'``, base percentage for anything else."""
        if tipo_torneo == "premium":
            return self.configuracion_comisiones.porcentaje_premium
        return self.configuracion_comisiones.porcentaje_base

    def a_dict(self) -> dict[str, Any]:
        return {
            "id": self.id.valor,
            "descripcion": self.descripcion,
            "alias": self.alias,
            "estaActiva": self.esta_activa,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Categoria):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"Categoria(id={self.id.valor!r}, alias={self.alias!r}, esta_activa={self.esta_activa})"

    def _validar_descripcion(self, descripcion: object) -> str:
        if not isinstance(descripcion, str):
            raise ErrorDominio("Descripción debe ser un string")

        normalizada = descripcion.strip()
        if len(normalizada) < self.LONGITUD_MINIMA_DESCRIPCION:
            raise ErrorDominio("La descripción debe tener al menos 2 caracteres")
        if len(normalizada) > self.LONGITUD_MAXIMA_DESCRIPCION:
            raise ErrorDominio("La descripción no puede exceder 100 caracteres")
        return normalizada

    def _validar_alias(self, alias: object) -> str:
        if not isinstance(alias, str):
            raise ErrorDominio("Alias debe ser un string")

        normalizado = alias.strip()
        if not _ALIAS_VALIDO.fullmatch(normalizado):
            if normalizado != normalizado.lower():
                raise ErrorDominio("El alias debe estar en minúsculas")
            if " " in normalizado:
                raise ErrorDominio("El alias no puede contener espacios")
            raise ErrorDominio("El alias debe contener solo letras, números y guiones")
        return normalizado


class Participante:
    """A user registered in a tournament.

    Identity is ``id``; ``usuario_id`` is the user behind it. State
    transitions follow EstadoParticipante and are validated here.
    """

    def __init__(
        self,
        id: str,
        usuario_id: UsuarioId,
        estado: EstadoParticipante = EstadoParticipante.REGISTRADO,
        fecha_registro: datetime | None = None,
        razon_baja: str | None = None,
    ):
        requerir_no_vacio(id, "ID del participante es requerido")
        if usuario_id is None:
            raise ErrorDominio("Usuario del participante es requerido")
        if not isinstance(usuario_id, UsuarioId):
            usuario_id = UsuarioId(usuario_id)

        self.id = id.strip()
        self.usuario_id = usuario_id
        self._estado = EstadoParticipante(estado)
        self.fecha_registro = fecha_registro or datetime.now(UTC)
        self.razon_baja = razon_baja

    @property
    def estado(self) -> EstadoParticipante:
        return self._estado

    def esta_activo(self) -> bool:
        return self._estado.esta_activo()

    def confirmar_participacion(self) -> None:
        if self._estado != EstadoParticipante.REGISTRADO:
            raise ErrorDominio(
                f"No se puede confirmar participante en estado {self._estado.value}"
            )
        self._estado = EstadoParticipante.CONFIRMADO

    def cancelar(self, razon: str) -> None:
        self._dar_de_baja(EstadoParticipante.CANCELADO, razon)

    def descalificar(self, razon: str) -> None:
        self._dar_de_baja(EstadoParticipante.DESCALIFICADO, razon)

    def a_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "usuarioId": self.usuario_id.valor,
            "estado": self._estado.value,
            "fechaRegistro": self.fecha_registro.isoformat(),
            "razonBaja": self.razon_baja,
        }

    @classmethod
    def desde_dict(cls, datos: dict[str, Any]) -> "Participante":
        return cls(
            id=datos["id"],
            usuario_id=UsuarioId(datos["usuarioId"]),
            estado=EstadoParticipante(datos["estado"]),
            fecha_registro=datetime.fromisoformat(datos["fechaRegistro"]),
            razon_baja=datos.get("razonBaja"),
        )

    def _dar_de_baja(self, destino: EstadoParticipante, razon: str) -> None:
        if not self.esta_activo():
            raise ErrorDominio(
                f"No se puede pasar participante del estado {self._estado.value} "
                f"al estado {destino.value}"
            )
        requerir_no_vacio(razon, "La razón es requerida")
        self._estado = destino
        self.razon_baja = razon

    def __repr__(self) -> str:
        return f"Participante(id={self.id!r}, usuario_id={self.usuario_id.valor!r}, estado={self._estado.value})"


@dataclass(frozen=True)
class EtapaVenta:
    """A ticket sales stage with its own price and time window."""

    nombre: str
    fecha_inicio: datetime
    fecha_fin: datetime
    precio: float

    def __post_init__(self) -> None:
        requerir_no_vacio(self.nombre, "El nombre de la etapa de venta es requerido")
        if self.fecha_fin <= self.fecha_inicio:
            raise ErrorDominio(
                "La fecha de fin de la etapa debe ser posterior a la fecha de inicio"
            )
        if isinstance(self.precio, bool) or not isinstance(self.precio, (int, float)):
            raise ErrorDominio("El precio de la etapa debe ser numérico")
        if self.precio < 0:
            raise ErrorDominio("El precio de la etapa no puede ser negativo")

    def se_solapa_con(self, otra: "EtapaVenta") -> bool:
        return self.fecha_inicio < otra.fecha_fin and otra.fecha_inicio < self.fecha_fin

    def a_dict(self) -> dict[str, Any]:
        return {
            "nombre": self.nombre,
            "fechaInicio": self.fecha_inicio.isoformat(),
            "fechaFin": self.fecha_fin.isoformat(),
            "precio": self.precio,
        }

    @classmethod
    def desde_dict(cls, datos: dict[str, Any]) -> "EtapaVenta":
        return cls(
            nombre=datos["nombre"],
            fecha_inicio=datetime.fromisoformat(datos["fechaInicio"]),
            fecha_fin=datetime.fromisoformat(datos["fechaFin"]),
            precio=datos["precio"],
        )
