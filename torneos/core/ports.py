"""Port interfaces for the torneos service.

These abstract base classes define the boundaries between the core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - CategoriaStorePort: Resolve and persist categories
   - TorneoStorePort: Persist and query tournament snapshots

2. **Driving Ports** (adapters/external systems call into core)
   - GestionTorneosPort: Tournament CRUD used by the HTTP API
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from typing import Any

from .models import Categoria, EstadoTorneo
from .torneo import Torneo


@dataclass(frozen=True)
class FiltrosTorneo:
    """Optional filters for listing an organizer's tournaments.

    ``fecha_desde`` and ``fecha_hasta`` are inclusive calendar days
    compared against the UTC creation date.
    """

    estado: EstadoTorneo | None = None
    fecha_desde: date | None = None
    fecha_hasta: date | None = None
    incluir_cancelados: bool = True


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class CategoriaStorePort(ABC):
    """Port for resolving tournament categories.

    The Torneo aggregate needs a fully built Categoria, never an id, so
    the service resolves categories through this port before touching
    the domain.
    """

    @abstractmethod
    async def get_by_id(self, categoria_id: str) -> Categoria | None:
        """Retrieve a category by id.

        Args:
            categoria_id: CategoriaId value, e.g. ``cat-profesional-001``.

        Returns:
            The Categoria, or None if it does not exist.
        """

    @abstractmethod
    async def list_active(self) -> list[Categoria]:
        """Retrieve all active categories, ordered by description."""

    @abstractmethod
    async def list_all(self) -> list[Categoria]:
        """Retrieve all categories, active or not."""

    @abstractmethod
    async def save(self, categoria: Categoria) -> None:
        """Insert or replace a category."""

    @abstractmethod
    async def exists(self, categoria_id: str) -> bool:
        """Check whether a category with this id exists."""


class TorneoStorePort(ABC):
    """Port for persisting tournaments as snapshots.

    Stores never hold live aggregates: ``save`` serializes the aggregate
    and every read returns a plain snapshot dict. Rehydrating a Torneo
    is the caller's job (see ``core.snapshots.desde_snapshot``).

    Snapshot keys: id, nombre, organizadorId, categoria, categoriaId,
    estado, fechaCreacion, limiteParticipantes, participantesActuales,
    version, fechaCancelacion, razonCancelacion, ganadorId,
    subAdministradores, participantes, etapasVenta.
    """

    @abstractmethod
    async def save(self, torneo: Torneo, version_esperada: int | None = None) -> None:
        """Persist the aggregate, replacing any previous snapshot.

        Args:
            torneo: Aggregate to persist.
            version_esperada: Version the caller read before mutating.
                When given, the write is rejected unless the stored
                snapshot still has this version. None skips the check
                (used for newly created tournaments).

        Raises:
            ConflictoDeVersion: If the stored version differs from
                version_esperada, or no snapshot exists to compare to.
            Exception: If the backend fails.
        """

    @abstractmethod
    async def get_by_id(self, torneo_id: str) -> dict[str, Any] | None:
        """Retrieve the snapshot for a tournament.

        Returns:
            Snapshot dict, or None if not found.
        """

    @abstractmethod
    async def list_by_organizer(
        self, organizador_id: str, filtros: FiltrosTorneo | None = None
    ) -> list[dict[str, Any]]:
        """List an organizer's tournament snapshots.

        Applies ``estado``, ``fecha_desde`` and ``fecha_hasta``.
        ``incluir_cancelados`` is left to the caller so that per-state
        counts can still include cancelled tournaments.

        Returns:
            Snapshots ordered by fechaCreacion, newest first.
        """

    @abstractmethod
    async def exists(self, torneo_id: str) -> bool:
        """Check whether a snapshot exists for this id."""

    @abstractmethod
    async def delete(self, torneo_id: str) -> bool:
        """Physically remove a snapshot.

        Returns:
            True if a snapshot was removed, False if none existed.
        """

    @abstractmethod
    async def get_stats(self) -> dict[str, Any]:
        """Aggregate statistics across all stored tournaments.

        Returns:
            Dictionary with keys:
            - total: number of tournaments
            - porEstado: count per EstadoTorneo value (all states present)
            - porCategoria: count per category description
            - promedioPorDia: tournaments per day over the last 30 days
        """


# ============================================================================
# DRIVING PORTS (External systems call into core)
# ============================================================================


class GestionTorneosPort(ABC):
    """Port for tournament management operations.

    Driving port: the HTTP API handlers invoke these methods. Inputs are
    raw strings; implementations wrap them in value objects, so invalid
    input surfaces as ErrorDominio.
    """

    @abstractmethod
    async def crear_torneo(
        self,
        nombre: str,
        categoria_id: str,
        organizador_id: str,
        limite_participantes: int | None = None,
    ) -> dict[str, Any]:
        """Create a tournament in BORRADOR.

        Returns:
            Creation data (torneoId, nombre, estado, organizadorId,
            fechaCreacion) plus limiteParticipantes, categoria and version.

        Raises:
            RecursoNoEncontrado: If the category does not exist.
            ErrorDominio: If any input breaks a domain rule, including an
                inactive category.
        """

    @abstractmethod
    async def obtener_torneo(self, torneo_id: str) -> dict[str, Any]:
        """Retrieve full details of a tournament.

        Raises:
            RecursoNoEncontrado: If the tournament does not exist.
        """

    @abstractmethod
    async def actualizar_torneo(
        self,
        torneo_id: str,
        organizador_id: str,
        limite_participantes: int | None = None,
        nombre: str | None = None,
    ) -> dict[str, Any]:
        """Apply configuration changes to a BORRADOR tournament.

        Args:
            torneo_id: Tournament to update.
            organizador_id: Acting user, recorded for audit.
            limite_participantes: New participant limit (optional).
            nombre: New display name (optional).

        Returns:
            Updated data including ``cambiosAplicados``, one entry per
            field with campo, valorAnterior and valorNuevo.

        Raises:
            RecursoNoEncontrado: If the tournament does not exist.
            ErrorDominio: If the tournament is no longer configurable or a
                value is invalid.
            ConflictoDeVersion: If the tournament changed concurrently.
        """

    @abstractmethod
    async def cancelar_torneo(
        self, torneo_id: str, organizador_id: str, razon: str | None = None
    ) -> dict[str, Any]:
        """Cancel a tournament. Idempotent for already cancelled ones.

        Returns:
            Cancellation data. For a tournament that was already
            cancelled, includes ``message`` and leaves the store untouched.

        Raises:
            RecursoNoEncontrado: If the tournament does not exist.
            ErrorDominio: If the tournament is FINALIZADO.
            ConflictoDeVersion: If the tournament changed concurrently.
        """

    @abstractmethod
    async def listar_torneos(
        self,
        organizador_id: str,
        filtros: FiltrosTorneo | None = None,
        limite: int = 50,
        offset: int = 0,
    ) -> dict[str, Any]:
        """List an organizer's tournaments with pagination.

        Returns:
            Dictionary with torneos, total, filtros, paginacion
            (limite, offset, hasMore, totalPaginas, paginaActual) and
            estadisticas.porEstado.
        """

    @abstractmethod
    async def listar_categorias(self) -> dict[str, Any]:
        """List active categories.

        Returns:
            Dictionary with categorias (id, descripcion, alias,
            estaActiva) and total.
        """
