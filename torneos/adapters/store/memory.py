"""In-memory store adapters.

Implements TorneoStorePort and CategoriaStorePort with plain dicts. Used
for local development (``STORE_BACKEND=memory``) and as the default
backend. Snapshots are deep-copied in and out so callers never share
mutable state with the store.
"""

import asyncio
import copy
import logging
from datetime import UTC, datetime, timedelta
from typing import Any

from torneos.core.errors import ConflictoDeVersion
from torneos.core.models import Categoria, EstadoTorneo
from torneos.core.ports import CategoriaStorePort, FiltrosTorneo, TorneoStorePort
from torneos.core.snapshots import a_snapshot
from torneos.core.torneo import Torneo

logger = logging.getLogger(__name__)


def categorias_iniciales() -> list[Categoria]:
    """Seed categories available out of the box.

    Includes one inactive category so clients can exercise the
    "categoría inactiva" rejection.
    """
    profesional = Categoria("cat-profesional-001", "Profesional", "profesional")
    profesional.actualizar_comisiones(8.0, 12.0)

    amateur = Categoria("cat-amateur-001", "Amateur", "amateur")
    amateur.actualizar_comisiones(5.0, 7.0)

    junior = Categoria("cat-junior-001", "Junior", "junior")
    junior.actualizar_comisiones(3.0, 5.0)

    inactiva = Categoria("cat-inactiva-001", "Categoría Inactiva", "inactiva")
    inactiva.desactivar()

    return [profesional, amateur, junior, inactiva]


class InMemoryCategoriaStore(CategoriaStorePort):
    """Dict-backed category store."""

    def __init__(self, categorias: list[Categoria] | None = None):
        self._categorias: dict[str, Categoria] = {}
        for categoria in categorias or []:
            self._categorias[categoria.id.valor] = categoria

    async def get_by_id(self, categoria_id: str) -> Categoria | None:
        return self._categorias.get(categoria_id)

    async def list_active(self) -> list[Categoria]:
        activas = [c for c in self._categorias.values() if c.esta_activa]
        return sorted(activas, key=lambda c: c.descripcion)

    async def list_all(self) -> list[Categoria]:
        return sorted(self._categorias.values(), key=lambda c: c.descripcion)

    async def save(self, categoria: Categoria) -> None:
        self._categorias[categoria.id.valor] = categoria

    async def exists(self, categoria_id: str) -> bool:
        return categoria_id in self._categorias


class InMemoryTorneoStore(TorneoStorePort):
    """Dict-backed tournament store keyed by torneo id.

    All access goes through an asyncio.Lock so the version check and the
    write in ``save`` happen atomically with respect to other coroutines.
    """

    def __init__(self) -> None:
        self._snapshots: dict[str, dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    async def save(self, torneo: Torneo, version_esperada: int | None = None) -> None:
        snapshot = a_snapshot(torneo)
        async with self._lock:
            if version_esperada is not None:
                actual = self._snapshots.get(snapshot["id"])
                version_actual = actual["version"] if actual else None
                if version_actual != version_esperada:
                    raise ConflictoDeVersion(snapshot["id"], version_esperada, version_actual)
            self._snapshots[snapshot["id"]] = snapshot

        logger.debug(
            f"Torneo {snapshot['id']} guardado (version {snapshot['version']})",
            extra={"torneo_id": snapshot["id"], "version": snapshot["version"]},
        )

    async def get_by_id(self, torneo_id: str) -> dict[str, Any] | None:
        async with self._lock:
            snapshot = self._snapshots.get(torneo_id)
            return copy.deepcopy(snapshot) if snapshot is not None else None

    async def list_by_organizer(
        self, organizador_id: str, filtros: FiltrosTorneo | None = None
    ) -> list[dict[str, Any]]:
        filtros = filtros or FiltrosTorneo()
        async with self._lock:
            candidatos = [
                copy.deepcopy(s)
                for s in self._snapshots.values()
                if s["organizadorId"] == organizador_id
            ]

        resultado = [s for s in candidatos if _cumple_filtros(s, filtros)]
        resultado.sort(key=lambda s: s["fechaCreacion"], reverse=True)
        return resultado

    async def exists(self, torneo_id: str) -> bool:
        async with self._lock:
            return torneo_id in self._snapshots

    async def delete(self, torneo_id: str) -> bool:
        async with self._lock:
            eliminado = self._snapshots.pop(torneo_id, None) is not None
        if eliminado:
            logger.info(f"Torneo {torneo_id} eliminado", extra={"torneo_id": torneo_id})
        return eliminado

    async def get_stats(self) -> dict[str, Any]:
        async with self._lock:
            todos = list(self._snapshots.values())

        por_estado = {estado: 0 for estado in EstadoTorneo.valores()}
        por_categoria: dict[str, int] = {}
        for snapshot in todos:
            por_estado[snapshot["estado"]] += 1
            categoria = snapshot["categoria"]
            por_categoria[categoria] = por_categoria.get(categoria, 0) + 1

        limite = datetime.now(UTC) - timedelta(days=30)
        recientes = sum(
            1 for s in todos if datetime.fromisoformat(s["fechaCreacion"]) >= limite
        )

        return {
            "total": len(todos),
            "porEstado": por_estado,
            "porCategoria": por_categoria,
            "promedioPorDia": round(recientes / 30, 2),
        }


def _cumple_filtros(snapshot: dict[str, Any], filtros: FiltrosTorneo) -> bool:
    if filtros.estado is not None and snapshot["estado"] != filtros.estado.value:
        return False
    creado = datetime.fromisoformat(snapshot["fechaCreacion"]).date()
    if filtros.fecha_desde is not None and creado < filtros.fecha_desde:
        return False
    if filtros.fecha_hasta is not None and creado > filtros.fecha_hasta:
        return False
    return True
