"""Shared builders for store adapter tests."""

from datetime import datetime

import pytest

from torneos.core.models import Categoria, EstadoTorneo
from torneos.core.torneo import Torneo

ORGANIZADOR = "org-123"


@pytest.fixture
def categoria() -> Categoria:
    return Categoria("cat-profesional-001", "Profesional", "profesional")


@pytest.fixture
def make_torneo(categoria: Categoria):
    """Build restored tournaments with a fixed creation date and state."""

    def _make(
        n: int,
        fecha_creacion: datetime,
        estado: EstadoTorneo = EstadoTorneo.BORRADOR,
        organizador_id: str = ORGANIZADOR,
        version: int = 1,
    ) -> Torneo:
        return Torneo.restaurar(
            f"550e8400-e29b-41d4-a716-4466554400{n:02d}",
            f"Copa {n}",
            categoria,
            organizador_id,
            estado=estado,
            version=version,
            fecha_creacion=fecha_creacion,
        )

    return _make
