"""Tests for the in-memory store adapters."""

from datetime import UTC, date, datetime, timedelta

import pytest

from torneos.adapters.store.memory import (
    InMemoryCategoriaStore,
    InMemoryTorneoStore,
    categorias_iniciales,
)
from torneos.core.errors import ConflictoDeVersion
from torneos.core.models import EstadoTorneo
from torneos.core.ports import FiltrosTorneo

ORGANIZADOR = "org-123"
ENERO = datetime(2024, 1, 15, 10, 0, tzinfo=UTC)
MARZO = datetime(2024, 3, 1, 23, 59, tzinfo=UTC)
JUNIO = datetime(2024, 6, 30, 0, 0, tzinfo=UTC)


@pytest.fixture
def store() -> InMemoryTorneoStore:
    return InMemoryTorneoStore()


# ============================================================================
# InMemoryCategoriaStore
# ============================================================================


class TestCategoriaStore:
    """Seeded category store."""

    def test_seed_categories(self) -> None:
        categorias = {c.id.valor: c for c in categorias_iniciales()}
        assert set(categorias) == {
            "cat-profesional-001",
            "cat-amateur-001",
            "cat-junior-001",
            "cat-inactiva-001",
        }
        assert categorias["cat-inactiva-001"].esta_activa is False
        assert categorias["cat-profesional-001"].obtener_comision_para("premium") == 12.0

    @pytest.mark.asyncio
    async def test_list_active_sorted_by_description(self) -> None:
        store = InMemoryCategoriaStore(categorias_iniciales())
        activas = await store.list_active()
        assert [c.descripcion for c in activas] == ["Amateur", "Junior", "Profesional"]
        assert len(await store.list_all()) == 4

    @pytest.mark.asyncio
    async def test_lookup_and_save(self, categoria) -> None:
        store = InMemoryCategoriaStore()
        assert await store.get_by_id("cat-profesional-001") is None
        await store.save(categoria)
        assert await store.exists("cat-profesional-001") is True
        assert await store.get_by_id("cat-profesional-001") is categoria


# ============================================================================
# InMemoryTorneoStore
# ============================================================================


class TestTorneoStore:
    """Snapshot persistence, versions and listings."""

    @pytest.mark.asyncio
    async def test_save_and_get(self, store: InMemoryTorneoStore, make_torneo) -> None:
        torneo = make_torneo(1, ENERO)
        await store.save(torneo)

        snapshot = await store.get_by_id(torneo.id.valor)
        assert snapshot["nombre"] == "Copa 1"
        assert snapshot["fechaCreacion"] == ENERO.isoformat()
        assert await store.exists(torneo.id.valor) is True
        assert await store.get_by_id("nope") is None

    @pytest.mark.asyncio
    async def test_returns_copies(self, store: InMemoryTorneoStore, make_torneo) -> None:
        torneo = make_torneo(1, ENERO)
        await store.save(torneo)

        snapshot = await store.get_by_id(torneo.id.valor)
        snapshot["estado"] = "CANCELADO"
        assert (await store.get_by_id(torneo.id.valor))["estado"] == "BORRADOR"

    @pytest.mark.asyncio
    async def test_version_check(self, store: InMemoryTorneoStore, make_torneo) -> None:
        torneo = make_torneo(1, ENERO)
        await store.save(torneo)

        torneo.actualizar_limite_participantes(10)
        await store.save(torneo, version_esperada=1)

        torneo.actualizar_limite_participantes(12)
        with pytest.raises(ConflictoDeVersion) as exc_info:
            await store.save(torneo, version_esperada=1)
        assert exc_info.value.esperada == 1
        assert exc_info.value.actual == 2
        assert (await store.get_by_id(torneo.id.valor))["limiteParticipantes"] == 10

    @pytest.mark.asyncio
    async def test_version_check_on_missing_row(
        self, store: InMemoryTorneoStore, make_torneo
    ) -> None:
        with pytest.raises(ConflictoDeVersion):
            await store.save(make_torneo(1, ENERO), version_esperada=1)

    @pytest.mark.asyncio
    async def test_list_newest_first_by_organizer(
        self, store: InMemoryTorneoStore, make_torneo
    ) -> None:
        await store.save(make_torneo(1, ENERO))
        await store.save(make_torneo(2, JUNIO))
        await store.save(make_torneo(3, MARZO))
        await store.save(make_torneo(4, JUNIO, organizador_id="otro-organizador"))

        resultado = await store.list_by_organizer(ORGANIZADOR)
        assert [s["nombre"] for s in resultado] == ["Copa 2", "Copa 3", "Copa 1"]

    @pytest.mark.asyncio
    async def test_list_filters(self, store: InMemoryTorneoStore, make_torneo) -> None:
        await store.save(make_torneo(1, ENERO))
        await store.save(make_torneo(2, MARZO, estado=EstadoTorneo.CANCELADO))
        await store.save(make_torneo(3, JUNIO))

        por_estado = await store.list_by_organizer(
            ORGANIZADOR, FiltrosTorneo(estado=EstadoTorneo.CANCELADO)
        )
        assert [s["nombre"] for s in por_estado] == ["Copa 2"]

        # both bounds are inclusive calendar days
        por_fecha = await store.list_by_organizer(
            ORGANIZADOR,
            FiltrosTorneo(fecha_desde=date(2024, 3, 1), fecha_hasta=date(2024, 6, 30)),
        )
        assert [s["nombre"] for s in por_fecha] == ["Copa 3", "Copa 2"]

        # cancelled exclusion is applied by the service, not the store
        todos = await store.list_by_organizer(
            ORGANIZADOR, FiltrosTorneo(incluir_cancelados=False)
        )
        assert len(todos) == 3

    @pytest.mark.asyncio
    async def test_delete(self, store: InMemoryTorneoStore, make_torneo) -> None:
        torneo = make_torneo(1, ENERO)
        await store.save(torneo)
        assert await store.delete(torneo.id.valor) is True
        assert await store.delete(torneo.id.valor) is False
        assert await store.exists(torneo.id.valor) is False

    @pytest.mark.asyncio
    async def test_stats(self, store: InMemoryTorneoStore, make_torneo) -> None:
        ahora = datetime.now(UTC)
        await store.save(make_torneo(1, ahora - timedelta(days=1)))
        await store.save(make_torneo(2, ahora - timedelta(days=2), estado=EstadoTorneo.CANCELADO))
        await store.save(make_torneo(3, ahora - timedelta(days=90)))

        stats = await store.get_stats()
        assert stats["total"] == 3
        assert stats["porEstado"]["BORRADOR"] == 2
        assert stats["porEstado"]["CANCELADO"] == 1
        assert stats["porEstado"]["EN_PROGRESO"] == 0
        assert stats["porCategoria"] == {"Profesional": 3}
        assert stats["promedioPorDia"] == round(2 / 30, 2)
