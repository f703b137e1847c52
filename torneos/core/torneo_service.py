"""Torneo service: implements GestionTorneosPort for the HTTP API.

Resolves categories, wraps raw strings in value objects, rehydrates
aggregates from store snapshots, persists with optimistic version
checks and writes the audit trail. Domain rules stay in the aggregate;
this layer only orchestrates.
"""

import logging
import math
import time
import uuid
from typing import Any

from .errors import RecursoNoEncontrado
from .models import Categoria, EstadoTorneo
from .ports import (
    CategoriaStorePort,
    FiltrosTorneo,
    GestionTorneosPort,
    TorneoStorePort,
)
from .snapshots import desde_snapshot
from .torneo import Torneo
from .value_objects import NombreTorneo, TorneoId, UsuarioId

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("torneos.audit")


class TorneoService(GestionTorneosPort):
    """Core implementation of GestionTorneosPort.

    Reads (obtener, listar) are served straight from snapshots. Writes
    rehydrate the aggregate, apply the change through domain methods and
    save with the version that was read, so concurrent writers get
    ConflictoDeVersion instead of silently overwriting each other.
    """

    def __init__(self, torneos: TorneoStorePort, categorias: CategoriaStorePort):
        """Initialize the service.

        Args:
            torneos: TorneoStorePort implementation for persistence.
            categorias: CategoriaStorePort implementation for lookups.
        """
        self.torneos = torneos
        self.categorias = categorias

    async def crear_torneo(
        self,
        nombre: str,
        categoria_id: str,
        organizador_id: str,
        limite_participantes: int | None = None,
    ) -> dict[str, Any]:
        inicio = time.perf_counter()

        categoria = await self.categorias.get_by_id(categoria_id)
        if categoria is None:
            logger.warning(
                f"Categoría {categoria_id} no encontrada",
                extra={"categoria_id": categoria_id},
            )
            raise RecursoNoEncontrado("Categoría", categoria_id)

        torneo = Torneo(
            TorneoId(str(uuid.uuid4())),
            NombreTorneo(nombre),
            categoria,
            UsuarioId(organizador_id),
        )
        if limite_participantes is not None:
            torneo.actualizar_limite_participantes(limite_participantes)

        await self.torneos.save(torneo)
        self._publicar_eventos(torneo)

        datos = torneo.obtener_datos_creacion()
        datos.update(
            {
                "limiteParticipantes": torneo.limite_participantes,
                "categoria": categoria.a_dict(),
                "version": torneo.version,
            }
        )

        self._registrar_duracion("crear_torneo", inicio, torneo_id=torneo.id.valor)
        logger.info(
            f"Torneo {torneo.id.valor} creado",
            extra={
                "torneo_id": torneo.id.valor,
                "categoria_id": categoria.id.valor,
                "organizador_id": organizador_id,
            },
        )
        _auditar(
            "TORNEO_CREADO",
            organizador_id,
            torneo_id=torneo.id.valor,
            nombre=torneo.nombre.valor,
            categoria=categoria.descripcion,
        )
        return datos

    async def obtener_torneo(self, torneo_id: str) -> dict[str, Any]:
        inicio = time.perf_counter()
        snapshot = await self._cargar_snapshot(torneo_id)
        self._registrar_duracion("obtener_torneo", inicio, torneo_id=torneo_id)
        return _detalles_desde_snapshot(snapshot)

    async def actualizar_torneo(
        self,
        torneo_id: str,
        organizador_id: str,
        limite_participantes: int | None = None,
        nombre: str | None = None,
    ) -> dict[str, Any]:
        inicio = time.perf_counter()
        snapshot = await self._cargar_snapshot(torneo_id)
        version_leida = snapshot["version"]
        torneo = await self._rehidratar(snapshot)

        cambios: list[dict[str, Any]] = []
        if limite_participantes is not None:
            anterior = torneo.limite_participantes
            torneo.actualizar_limite_participantes(limite_participantes)
            cambios.append(
                {
                    "campo": "limiteParticipantes",
                    "valorAnterior": anterior,
                    "valorNuevo": torneo.limite_participantes,
                }
            )
        if nombre is not None:
            anterior_nombre = torneo.nombre.valor
            torneo.actualizar_nombre(nombre)
            cambios.append(
                {
                    "campo": "nombre",
                    "valorAnterior": anterior_nombre,
                    "valorNuevo": torneo.nombre.valor,
                }
            )

        if cambios:
            await self.torneos.save(torneo, version_esperada=version_leida)
            self._publicar_eventos(torneo)

        self._registrar_duracion(
            "actualizar_torneo", inicio, torneo_id=torneo_id, cambios=len(cambios)
        )
        logger.info(
            f"Torneo {torneo_id} actualizado ({len(cambios)} cambios)",
            extra={"torneo_id": torneo_id, "version": torneo.version},
        )
        _auditar(
            "TORNEO_ACTUALIZADO",
            organizador_id,
            torneo_id=torneo_id,
            cambios=[c["campo"] for c in cambios],
        )

        return {
            "torneoId": torneo.id.valor,
            "nombre": torneo.nombre.valor,
            "estado": torneo.estado.value,
            "limiteParticipantes": torneo.limite_participantes,
            "participantesActuales": torneo.participantes_actuales,
            "version": torneo.version,
            "cambiosAplicados": cambios,
        }

    async def cancelar_torneo(
        self, torneo_id: str, organizador_id: str, razon: str | None = None
    ) -> dict[str, Any]:
        inicio = time.perf_counter()
        snapshot = await self._cargar_snapshot(torneo_id)

        if snapshot["estado"] == EstadoTorneo.CANCELADO.value:
            logger.info(
                f"Torneo {torneo_id} ya estaba cancelado",
                extra={"torneo_id": torneo_id},
            )
            return {
                "torneoId": snapshot["id"],
                "nombre": snapshot["nombre"],
                "estado": snapshot["estado"],
                "fechaCancelacion": snapshot.get("fechaCancelacion"),
                "razonCancelacion": snapshot.get("razonCancelacion"),
                "message": "El torneo ya estaba cancelado",
            }

        version_leida = snapshot["version"]
        torneo = await self._rehidratar(snapshot)
        estado_anterior = torneo.estado

        torneo.cancelar(razon)
        await self.torneos.save(torneo, version_esperada=version_leida)
        self._publicar_eventos(torneo)

        self._registrar_duracion("cancelar_torneo", inicio, torneo_id=torneo_id)
        logger.info(
            f"Torneo {torneo_id} cancelado",
            extra={
                "torneo_id": torneo_id,
                "estado_anterior": estado_anterior.value,
                "razon": torneo.razon_cancelacion,
            },
        )
        _auditar(
            "TORNEO_CANCELADO",
            organizador_id,
            torneo_id=torneo_id,
            estado_anterior=estado_anterior.value,
            razon=torneo.razon_cancelacion,
            participantes_afectados=torneo.participantes_actuales,
        )

        return {
            "torneoId": torneo.id.valor,
            "nombre": torneo.nombre.valor,
            "estado": torneo.estado.value,
            "fechaCancelacion": torneo.fecha_cancelacion.isoformat(),
            "razonCancelacion": torneo.razon_cancelacion,
            "estadoAnterior": estado_anterior.value,
            "participantesAfectados": torneo.participantes_actuales,
            "version": torneo.version,
        }

    async def listar_torneos(
        self,
        organizador_id: str,
        filtros: FiltrosTorneo | None = None,
        limite: int = 50,
        offset: int = 0,
    ) -> dict[str, Any]:
        filtros = filtros or FiltrosTorneo()
        inicio = time.perf_counter()

        snapshots = await self.torneos.list_by_organizer(organizador_id, filtros)
        visibles = (
            snapshots
            if filtros.incluir_cancelados
            else [s for s in snapshots if s["estado"] != EstadoTorneo.CANCELADO.value]
        )

        total = len(visibles)
        pagina = visibles[offset : offset + limite]

        por_estado = {estado: 0 for estado in EstadoTorneo.valores()}
        for snapshot in snapshots:
            por_estado[snapshot["estado"]] = por_estado.get(snapshot["estado"], 0) + 1

        self._registrar_duracion(
            "listar_torneos",
            inicio,
            organizador_id=organizador_id,
            total=total,
            devueltos=len(pagina),
        )
        _auditar("TORNEOS_LISTADOS", organizador_id, total=total)

        return {
            "torneos": [_resumen_desde_snapshot(s) for s in pagina],
            "total": total,
            "filtros": {
                "estado": filtros.estado.value if filtros.estado else None,
                "fechaDesde": filtros.fecha_desde.isoformat() if filtros.fecha_desde else None,
                "fechaHasta": filtros.fecha_hasta.isoformat() if filtros.fecha_hasta else None,
                "incluirCancelados": filtros.incluir_cancelados,
            },
            "paginacion": {
                "limite": limite,
                "offset": offset,
                "hasMore": offset + limite < total,
                "totalPaginas": math.ceil(total / limite),
                "paginaActual": offset // limite + 1,
            },
            "estadisticas": {"porEstado": por_estado},
        }

    async def listar_categorias(self) -> dict[str, Any]:
        inicio = time.perf_counter()
        categorias = await self.categorias.list_active()
        self._registrar_duracion("listar_categorias", inicio, total=len(categorias))
        _auditar("CATEGORIAS_LISTADAS", "anonymous", total=len(categorias))
        return {
            "categorias": [c.a_dict() for c in categorias],
            "total": len(categorias),
        }

    async def _cargar_snapshot(self, torneo_id: str) -> dict[str, Any]:
        snapshot = await self.torneos.get_by_id(torneo_id)
        if snapshot is None:
            logger.warning(
                f"Torneo {torneo_id} no encontrado", extra={"torneo_id": torneo_id}
            )
            raise RecursoNoEncontrado("Torneo", torneo_id)
        return snapshot

    async def _rehidratar(self, snapshot: dict[str, Any]) -> Torneo:
        categoria = await self._categoria_de(snapshot)
        torneo = desde_snapshot(snapshot, categoria)
        logger.debug(
            f"Torneo {torneo.id.valor} reconstruido",
            extra={
                "torneo_id": torneo.id.valor,
                "estado": torneo.estado.value,
                "version": torneo.version,
            },
        )
        return torneo

    async def _categoria_de(self, snapshot: dict[str, Any]) -> Categoria:
        categoria = await self.categorias.get_by_id(snapshot["categoriaId"])
        if categoria is None:
            logger.error(
                f"Categoría {snapshot['categoriaId']} del torneo {snapshot['id']} no encontrada",
                extra={"torneo_id": snapshot["id"], "categoria_id": snapshot["categoriaId"]},
            )
            raise RuntimeError("Error de integridad de datos")
        return categoria

    def _publicar_eventos(self, torneo: Torneo) -> None:
        for evento in torneo.obtener_eventos_no_publicados():
            logger.info(
                f"Evento {evento.tipo} en torneo {evento.torneo_id}",
                extra={"evento": evento.tipo, "torneo_id": evento.torneo_id},
            )

    @staticmethod
    def _registrar_duracion(operacion: str, inicio: float, **contexto: Any) -> None:
        duracion_ms = round((time.perf_counter() - inicio) * 1000, 2)
        logger.debug(
            f"{operacion} completado en {duracion_ms}ms",
            extra={"operacion": operacion, "duration_ms": duracion_ms, **contexto},
        )


def _auditar(accion: str, usuario_id: str, **contexto: Any) -> None:
    audit_logger.info(
        f"{accion} por {usuario_id}",
        extra={"action": accion, "user_id": usuario_id, **contexto},
    )


def _resumen_desde_snapshot(snapshot: dict[str, Any]) -> dict[str, Any]:
    resumen = {
        "torneoId": snapshot["id"],
        "nombre": snapshot["nombre"],
        "categoria": snapshot["categoria"],
        "categoriaId": snapshot["categoriaId"],
        "estado": snapshot["estado"],
        "fechaCreacion": snapshot["fechaCreacion"],
        "participantesActuales": snapshot["participantesActuales"],
        "limiteParticipantes": snapshot["limiteParticipantes"],
        "version": snapshot["version"],
    }
    if snapshot.get("fechaCancelacion"):
        resumen["fechaCancelacion"] = snapshot["fechaCancelacion"]
        resumen["razonCancelacion"] = snapshot.get("razonCancelacion")
    return resumen


def _detalles_desde_snapshot(snapshot: dict[str, Any]) -> dict[str, Any]:
    detalles = _resumen_desde_snapshot(snapshot)
    detalles.update(
        {
            "organizadorId": snapshot["organizadorId"],
            "ganadorId": snapshot.get("ganadorId"),
            "subAdministradores": snapshot.get("subAdministradores", []),
            "participantes": snapshot.get("participantes", []),
            "etapasVenta": snapshot.get("etapasVenta", []),
        }
    )
    return detalles
