"""Conversion between Torneo aggregates and persisted snapshots.

A snapshot is a plain, JSON-serializable dict. Stores keep snapshots,
never live aggregates, so state can only come back through
``Torneo.restaurar`` and its creation checks.
"""

from datetime import datetime
from typing import Any

from .models import Categoria, EtapaVenta, Participante
from .torneo import Torneo


def a_snapshot(torneo: Torneo) -> dict[str, Any]:
    """Serialize an aggregate into a snapshot dict."""
    return {
        "id": torneo.id.valor,
        "nombre": torneo.nombre.valor,
        "organizadorId": torneo.organizador_id.valor,
        "categoria": torneo.categoria.descripcion,
        "categoriaId": torneo.categoria.id.valor,
        "estado": torneo.estado.value,
        "fechaCreacion": torneo.fecha_creacion.isoformat(),
        "limiteParticipantes": torneo.limite_participantes,
        "participantesActuales": torneo.participantes_actuales,
        "version": torneo.version,
        "fechaCancelacion": _iso(torneo.fecha_cancelacion),
        "razonCancelacion": torneo.razon_cancelacion,
        "ganadorId": torneo.ganador_id.valor if torneo.ganador_id else None,
        "subAdministradores": [u.valor for u in torneo.sub_administradores],
        "participantes": [p.a_dict() for p in torneo.participantes],
        "etapasVenta": [e.a_dict() for e in torneo.etapas_venta],
    }


def desde_snapshot(snapshot: dict[str, Any], categoria: Categoria) -> Torneo:
    """Rehydrate an aggregate from a snapshot and its resolved category.

    Raises:
        ErrorDominio: If the snapshot breaks a domain invariant, including
            a category that is no longer active.
        KeyError: If a required snapshot key is missing.
    """
    fecha_cancelacion = snapshot.get("fechaCancelacion")
    return Torneo.restaurar(
        snapshot["id"],
        snapshot["nombre"],
        categoria,
        snapshot["organizadorId"],
        estado=snapshot["estado"],
        version=snapshot["version"],
        fecha_creacion=datetime.fromisoformat(snapshot["fechaCreacion"]),
        limite_participantes=snapshot.get("limiteParticipantes"),
        participantes=[
            Participante.desde_dict(p) for p in snapshot.get("participantes", [])
        ],
        razon_cancelacion=snapshot.get("razonCancelacion"),
        fecha_cancelacion=(
            datetime.fromisoformat(fecha_cancelacion) if fecha_cancelacion else None
        ),
        ganador_id=snapshot.get("ganadorId"),
        sub_administradores=snapshot.get("subAdministradores", []),
        etapas_venta=[EtapaVenta.desde_dict(e) for e in snapshot.get("etapasVenta", [])],
    )


def _iso(valor: datetime | None) -> str | None:
    return valor.isoformat() if valor is not None else None
