"""SQLite torneo store adapter.

Implements TorneoStorePort using SQLite with aiosqlite for async access.
Each tournament is one row: the full snapshot as JSON plus the columns
needed for filtering and ordering.
"""

import asyncio
import json
import logging
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import aiosqlite

from torneos.core.errors import ConflictoDeVersion
from torneos.core.models import EstadoTorneo
from torneos.core.ports import FiltrosTorneo, TorneoStorePort
from torneos.core.snapshots import a_snapshot
from torneos.core.torneo import Torneo

logger = logging.getLogger(__name__)


class SQLiteTorneoStore(TorneoStorePort):
    """SQLite-backed torneo store with connection pooling and async access."""

    def __init__(self, db_path: str, pool_size: int = 5):
        """Initialize SQLite store with connection pooling.

        Args:
            db_path: Path to SQLite database file.
            pool_size: Number of connections to maintain in the pool.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._pool: list[aiosqlite.Connection] = []
        self._pool_lock = asyncio.Lock()
        self._schema_lock = asyncio.Lock()
        self._pool_size = pool_size
        self._schema_initialized = False

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get a connection from the pool or create a new one."""
        async with self._pool_lock:
            if self._pool:
                return self._pool.pop()
        return await aiosqlite.connect(str(self.db_path))

    async def _return_connection(self, conn: aiosqlite.Connection) -> None:
        """Return a connection to the pool."""
        async with self._pool_lock:
            if len(self._pool) < self._pool_size:
                self._pool.append(conn)
                return
        await conn.close()

    async def close_pool(self) -> None:
        """Close all pooled connections."""
        async with self._pool_lock:
            for conn in self._pool:
                await conn.close()
            self._pool.clear()

    async def _init_schema(self) -> None:
        """Create the schema on first use. Later calls are no-ops."""
        if self._schema_initialized:
            return
        async with self._schema_lock:
            if self._schema_initialized:
                return

            conn = await self._get_connection()
            try:
                await conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS torneos (
                        id TEXT PRIMARY KEY,
                        organizador_id TEXT NOT NULL,
                        categoria TEXT NOT NULL,
                        estado TEXT NOT NULL,
                        fecha_creacion TEXT NOT NULL,
                        version INTEGER NOT NULL,
                        snapshot_json TEXT NOT NULL
                    )
                    """
                )
                await conn.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_torneos_organizador
                    ON torneos(organizador_id, fecha_creacion)
                    """
                )
                await conn.execute(
                    "CREATE INDEX IF NOT EXISTS idx_torneos_estado ON torneos(estado)"
                )
                await conn.commit()
                self._schema_initialized = True
            finally:
                await self._return_connection(conn)

    async def save(self, torneo: Torneo, version_esperada: int | None = None) -> None:
        """Insert or replace a snapshot, checking the stored version first.

        The read and the write run inside one ``BEGIN IMMEDIATE``
        transaction, so no other writer can slip in between them.
        """
        await self._init_schema()
        snapshot = a_snapshot(torneo)

        conn = await self._get_connection()
        try:
            await conn.execute("BEGIN IMMEDIATE")
            try:
                if version_esperada is not None:
                    cursor = await conn.execute(
                        "SELECT version FROM torneos WHERE id = ?", (snapshot["id"],)
                    )
                    row = await cursor.fetchone()
                    version_actual = row[0] if row else None
                    if version_actual != version_esperada:
                        raise ConflictoDeVersion(
                            snapshot["id"], version_esperada, version_actual
                        )

                await conn.execute(
                    """
                    INSERT OR REPLACE INTO torneos
                    (id, organizador_id, categoria, estado, fecha_creacion,
                     version, snapshot_json)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        snapshot["id"],
                        snapshot["organizadorId"],
                        snapshot["categoria"],
                        snapshot["estado"],
                        snapshot["fechaCreacion"],
                        snapshot["version"],
                        json.dumps(snapshot),
                    ),
                )
                await conn.commit()
            except BaseException:
                await conn.rollback()
                raise
        finally:
            await self._return_connection(conn)

        logger.debug(
            f"Torneo {snapshot['id']} guardado (version {snapshot['version']})",
            extra={"torneo_id": snapshot["id"], "version": snapshot["version"]},
        )

    async def get_by_id(self, torneo_id: str) -> dict[str, Any] | None:
        await self._init_schema()

        conn = await self._get_connection()
        try:
            cursor = await conn.execute(
                "SELECT snapshot_json FROM torneos WHERE id = ?", (torneo_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_snapshot(row)
        finally:
            await self._return_connection(conn)

    async def list_by_organizer(
        self, organizador_id: str, filtros: FiltrosTorneo | None = None
    ) -> list[dict[str, Any]]:
        await self._init_schema()
        filtros = filtros or FiltrosTorneo()

        condiciones = ["organizador_id = ?"]
        parametros: list[Any] = [organizador_id]
        if filtros.estado is not None:
            condiciones.append("estado = ?")
            parametros.append(filtros.estado.value)
        # fecha_creacion is ISO 8601 in UTC; the first ten characters are the day
        if filtros.fecha_desde is not None:
            condiciones.append("substr(fecha_creacion, 1, 10) >= ?")
            parametros.append(filtros.fecha_desde.isoformat())
        if filtros.fecha_hasta is not None:
            condiciones.append("substr(fecha_creacion, 1, 10) <= ?")
            parametros.append(filtros.fecha_hasta.isoformat())

        conn = await self._get_connection()
        try:
            cursor = await conn.execute(
                f"""
                SELECT snapshot_json FROM torneos
                WHERE {" AND ".join(condiciones)}
                ORDER BY fecha_creacion DESC
                """,
                parametros,
            )
            rows = await cursor.fetchall()
            return [self._row_to_snapshot(row) for row in rows]
        finally:
            await self._return_connection(conn)

    async def exists(self, torneo_id: str) -> bool:
        await self._init_schema()

        conn = await self._get_connection()
        try:
            cursor = await conn.execute(
                "SELECT 1 FROM torneos WHERE id = ?", (torneo_id,)
            )
            return await cursor.fetchone() is not None
        finally:
            await self._return_connection(conn)

    async def delete(self, torneo_id: str) -> bool:
        await self._init_schema()

        conn = await self._get_connection()
        try:
            cursor = await conn.execute("DELETE FROM torneos WHERE id = ?", (torneo_id,))
            await conn.commit()
            eliminado = cursor.rowcount > 0
        finally:
            await self._return_connection(conn)

        if eliminado:
            logger.info(f"Torneo {torneo_id} eliminado", extra={"torneo_id": torneo_id})
        return eliminado

    async def get_stats(self) -> dict[str, Any]:
        """Summary statistics for reporting."""
        await self._init_schema()

        conn = await self._get_connection()
        try:
            cursor = await conn.execute("SELECT COUNT(*) FROM torneos")
            total = (await cursor.fetchone())[0]

            cursor = await conn.execute(
                "SELECT estado, COUNT(*) FROM torneos GROUP BY estado"
            )
            por_estado = {estado: 0 for estado in EstadoTorneo.valores()}
            por_estado.update({row[0]: row[1] for row in await cursor.fetchall()})

            cursor = await conn.execute(
                "SELECT categoria, COUNT(*) FROM torneos GROUP BY categoria"
            )
            por_categoria = {row[0]: row[1] for row in await cursor.fetchall()}

            desde = (datetime.now(UTC) - timedelta(days=30)).isoformat()
            cursor = await conn.execute(
                "SELECT COUNT(*) FROM torneos WHERE fecha_creacion >= ?", (desde,)
            )
            recientes = (await cursor.fetchone())[0]

            return {
                "total": total,
                "porEstado": por_estado,
                "porCategoria": por_categoria,
                "promedioPorDia": round(recientes / 30, 2),
            }
        finally:
            await self._return_connection(conn)

    @staticmethod
    def _row_to_snapshot(row: tuple[Any, ...]) -> dict[str, Any]:
        """Decode the snapshot column.

        Raises:
            ValueError: If the stored JSON is corrupt.
        """
        try:
            snapshot = json.loads(row[0])
        except (json.JSONDecodeError, TypeError) as e:
            logger.error(f"Failed to parse torneo snapshot: {e}")
            raise ValueError(f"Snapshot parsing failed: {e}") from e
        if not isinstance(snapshot, dict):
            raise ValueError("Snapshot parsing failed: expected a JSON object")
        return snapshot
