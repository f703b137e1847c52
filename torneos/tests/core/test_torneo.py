"""Tests for the Torneo aggregate.

Covers creation, configuration, the full lifecycle, the participant
roster, administration, sales stages, projections, events and restore.
"""

from datetime import UTC, datetime, timedelta

import pytest

from torneos.core.errors import ErrorDominio
from torneos.core.events import (
    ParticipanteRegistrado,
    RegistroAbierto,
    TorneoCancelado,
    TorneoCreado,
    TorneoFinalizado,
)
from torneos.core.models import Categoria, EstadoParticipante, EstadoTorneo, Participante
from torneos.core.snapshots import a_snapshot, desde_snapshot
from torneos.core.torneo import Torneo
from torneos.core.value_objects import NombreTorneo, TorneoId, UsuarioId

TORNEO_ID = "550e8400-e29b-41d4-a716-446655440000"
ORGANIZADOR = "org-123"
INICIO = datetime(2025, 3, 1, tzinfo=UTC)


@pytest.fixture
def categoria() -> Categoria:
    return Categoria("cat-001", "Profesional", "profesional")


@pytest.fixture
def torneo(categoria: Categoria) -> Torneo:
    return Torneo(
        TorneoId(TORNEO_ID),
        NombreTorneo("Copa de Verano 2024"),
        categoria,
        UsuarioId(ORGANIZADOR),
    )


@pytest.fixture
def torneo_abierto(torneo: Torneo) -> Torneo:
    torneo.abrir_para_registro()
    return torneo


def participante(n: int) -> Participante:
    return Participante(f"part-{n:03d}", UsuarioId(f"jugador-{n:03d}"))


def con_participantes(torneo: Torneo, cantidad: int) -> Torneo:
    for n in range(1, cantidad + 1):
        torneo.agregar_participante(participante(n))
    return torneo


# ============================================================================
# End-to-end scenarios
# ============================================================================


class TestScenarios:
    """The four reference scenarios for the aggregate."""

    def test_new_tournament_starts_in_borrador(self, torneo: Torneo) -> None:
        assert torneo.estado == EstadoTorneo.BORRADOR
        assert torneo.version == 1

    def test_inactive_category_blocks_creation(self, categoria: Categoria) -> None:
        categoria.desactivar()
        with pytest.raises(ErrorDominio, match="categoría inactiva"):
            Torneo(TORNEO_ID, "Copa de Verano 2024", categoria, ORGANIZADOR)

    def test_configure_then_cancel(self, torneo: Torneo) -> None:
        torneo.actualizar_limite_participantes(32)
        assert torneo.limite_participantes == 32
        assert torneo.version == 2

        torneo.cancelar("Problemas técnicos")
        assert torneo.estado == EstadoTorneo.CANCELADO
        assert torneo.razon_cancelacion == "Problemas técnicos"
        assert torneo.version == 3

    def test_finished_tournament_cannot_be_cancelled(self, categoria: Categoria) -> None:
        torneo = Torneo.restaurar(
            TORNEO_ID,
            "Copa de Verano 2024",
            categoria,
            ORGANIZADOR,
            estado="FINALIZADO",
            version=7,
            fecha_creacion=INICIO,
        )
        with pytest.raises(ErrorDominio, match="No se puede cancelar un torneo finalizado"):
            torneo.cancelar()
        assert torneo.version == 7


# ============================================================================
# Creation
# ============================================================================


class TestCreation:
    """Constructor checks and initial state."""

    def test_accepts_plain_strings(self, categoria: Categoria) -> None:
        torneo = Torneo(TORNEO_ID, "  Copa   de Verano ", categoria, ORGANIZADOR)
        assert torneo.id == TorneoId(TORNEO_ID)
        assert torneo.nombre.valor == "Copa de Verano"
        assert torneo.organizador_id == UsuarioId(ORGANIZADOR)

    def test_initial_state(self, torneo: Torneo) -> None:
        assert torneo.limite_participantes is None
        assert torneo.participantes_actuales == 0
        assert torneo.participantes == ()
        assert torneo.razon_cancelacion is None
        assert torneo.fecha_cancelacion is None
        assert torneo.ganador_id is None
        assert torneo.fecha_creacion.tzinfo is not None

    @pytest.mark.parametrize(
        "campo,mensaje",
        [
            ("id", "ID del torneo es requerido"),
            ("nombre", "Nombre del torneo es requerido"),
            ("categoria", "Categoría del torneo es requerido"),
            ("organizador_id", "Organizador es requerido"),
        ],
    )
    def test_required_arguments(self, categoria: Categoria, campo: str, mensaje: str) -> None:
        argumentos = {
            "id": TORNEO_ID,
            "nombre": "Copa de Verano 2024",
            "categoria": categoria,
            "organizador_id": ORGANIZADOR,
        }
        argumentos[campo] = None
        with pytest.raises(ErrorDominio, match=mensaje):
            Torneo(**argumentos)

    @pytest.mark.parametrize(
        "campo,mensaje",
        [
            ("id", "ID del torneo es requerido"),
            ("nombre", "Nombre del torneo es requerido"),
            ("organizador_id", "Organizador es requerido"),
        ],
    )
    def test_empty_strings_count_as_missing(
        self, categoria: Categoria, campo: str, mensaje: str
    ) -> None:
        argumentos = {
            "id": TORNEO_ID,
            "nombre": "Copa de Verano 2024",
            "categoria": categoria,
            "organizador_id": ORGANIZADOR,
        }
        argumentos[campo] = ""
        with pytest.raises(ErrorDominio, match=mensaje):
            Torneo(**argumentos)

    def test_category_must_be_categoria(self) -> None:
        with pytest.raises(ErrorDominio, match="debe ser una Categoria"):
            Torneo(TORNEO_ID, "Copa de Verano 2024", "cat-001", ORGANIZADOR)  # type: ignore[arg-type]

    def test_invalid_value_objects_propagate(self, categoria: Categoria) -> None:
        with pytest.raises(ErrorDominio, match="UUID"):
            Torneo("torneo-1", "Copa de Verano 2024", categoria, ORGANIZADOR)
        with pytest.raises(ErrorDominio, match="contenido no permitido"):
            Torneo(TORNEO_ID, "Torneo spam", categoria, ORGANIZADOR)

    def test_later_category_deactivation_does_not_affect_tournament(
        self, torneo: Torneo, categoria: Categoria
    ) -> None:
        categoria.desactivar()
        torneo.actualizar_limite_participantes(10)
        assert torneo.limite_participantes == 10

    def test_emits_creation_event(self, torneo: Torneo) -> None:
        eventos = torneo.obtener_eventos_no_publicados()
        assert len(eventos) == 1
        assert isinstance(eventos[0], TorneoCreado)
        assert eventos[0].tipo == "TorneoCreado"
        assert eventos[0].torneo_id == TORNEO_ID
        assert eventos[0].categoria_id == "cat-001"


# ============================================================================
# Configuration
# ============================================================================


class TestConfiguration:
    """Participant limit and name changes while in BORRADOR."""

    @pytest.mark.parametrize("limite", [2, 32, 1000])
    def test_limit_bounds_accepted(self, torneo: Torneo, limite: int) -> None:
        torneo.actualizar_limite_participantes(limite)
        assert torneo.limite_participantes == limite

    @pytest.mark.parametrize(
        "limite,mensaje",
        [
            (1, "al menos 2 participantes"),
            (0, "al menos 2 participantes"),
            (1001, "límite máximo es 1000"),
            (10.5, "número entero"),
            ("32", "número entero"),
            (True, "número entero"),
        ],
    )
    def test_invalid_limit_leaves_state(self, torneo: Torneo, limite: object, mensaje: str) -> None:
        with pytest.raises(ErrorDominio, match=mensaje):
            torneo.actualizar_limite_participantes(limite)  # type: ignore[arg-type]
        assert torneo.limite_participantes is None
        assert torneo.version == 1

    def test_limit_only_in_borrador(self, torneo_abierto: Torneo) -> None:
        version = torneo_abierto.version
        with pytest.raises(ErrorDominio, match="No se puede modificar torneo en estado ABIERTO_REGISTRO"):
            torneo_abierto.actualizar_limite_participantes(10)
        assert torneo_abierto.version == version

    def test_rename(self, torneo: Torneo) -> None:
        torneo.actualizar_nombre("Copa de Invierno")
        assert torneo.nombre == NombreTorneo("Copa de Invierno")
        assert torneo.version == 2

    def test_rename_validates_name(self, torneo: Torneo) -> None:
        with pytest.raises(ErrorDominio, match="al menos 3 caracteres"):
            torneo.actualizar_nombre("ab")
        assert torneo.nombre.valor == "Copa de Verano 2024"
        assert torneo.version == 1

    def test_rename_only_in_borrador(self, torneo: Torneo) -> None:
        torneo.cancelar()
        with pytest.raises(ErrorDominio, match="nombre del torneo en estado CANCELADO"):
            torneo.actualizar_nombre("Copa de Invierno")

    def test_puede_configurar(self, torneo: Torneo) -> None:
        assert torneo.puede_configurar() is True
        torneo.abrir_para_registro()
        assert torneo.puede_configurar() is False


# ============================================================================
# Lifecycle
# ============================================================================


class TestLifecycle:
    """State changes gated by the transition table."""

    def test_full_happy_path(self, torneo: Torneo) -> None:
        torneo.abrir_para_registro()
        con_participantes(torneo, 3)
        torneo.cerrar_registro()
        torneo.iniciar_torneo()
        torneo.finalizar_torneo("jugador-002")

        assert torneo.estado == EstadoTorneo.FINALIZADO
        assert torneo.ganador_id == UsuarioId("jugador-002")
        # 1 + abrir + 3 altas + cerrar + iniciar + finalizar
        assert torneo.version == 8

    def test_start_directly_from_open_registration(self, torneo_abierto: Torneo) -> None:
        con_participantes(torneo_abierto, 2)
        torneo_abierto.iniciar_torneo()
        assert torneo_abierto.estado == EstadoTorneo.EN_PROGRESO

    def test_start_requires_two_active_participants(self, torneo_abierto: Torneo) -> None:
        con_participantes(torneo_abierto, 2)
        torneo_abierto.remover_participante("part-001")
        version = torneo_abierto.version
        with pytest.raises(ErrorDominio, match=r"al menos 2 participantes para iniciar el torneo \(hay 1\)"):
            torneo_abierto.iniciar_torneo()
        assert torneo_abierto.estado == EstadoTorneo.ABIERTO_REGISTRO
        assert torneo_abierto.version == version

    @pytest.mark.parametrize(
        "accion,destino",
        [
            ("cerrar_registro", "REGISTRO_CERRADO"),
            ("iniciar_torneo", "EN_PROGRESO"),
        ],
    )
    def test_disallowed_transitions_from_borrador(
        self, torneo: Torneo, accion: str, destino: str
    ) -> None:
        with pytest.raises(
            ErrorDominio, match=f"No se puede pasar del estado BORRADOR al estado {destino}"
        ):
            getattr(torneo, accion)()
        assert torneo.estado == EstadoTorneo.BORRADOR
        assert torneo.version == 1

    def test_finalize_requires_en_progreso(self, torneo_abierto: Torneo) -> None:
        con_participantes(torneo_abierto, 2)
        with pytest.raises(ErrorDominio, match="del estado ABIERTO_REGISTRO al estado FINALIZADO"):
            torneo_abierto.finalizar_torneo("jugador-001")

    def test_open_twice_rejected(self, torneo_abierto: Torneo) -> None:
        with pytest.raises(ErrorDominio, match="ABIERTO_REGISTRO al estado ABIERTO_REGISTRO"):
            torneo_abierto.abrir_para_registro()

    def test_winner_must_be_active_participant(self, torneo_abierto: Torneo) -> None:
        con_participantes(torneo_abierto, 3)
        torneo_abierto.iniciar_torneo()
        torneo_abierto.descalificar_participante("part-003", "Trampas")
        version = torneo_abierto.version

        for ganador in ("jugador-003", "jugador-999"):
            with pytest.raises(ErrorDominio, match="debe ser un participante activo"):
                torneo_abierto.finalizar_torneo(ganador)
        assert torneo_abierto.estado == EstadoTorneo.EN_PROGRESO
        assert torneo_abierto.version == version

    @pytest.mark.parametrize("preparar", ["borrador", "abierto", "cerrado", "en_progreso"])
    def test_cancel_from_any_non_terminal_state(self, torneo: Torneo, preparar: str) -> None:
        if preparar != "borrador":
            torneo.abrir_para_registro()
            con_participantes(torneo, 2)
        if preparar in ("cerrado", "en_progreso"):
            torneo.cerrar_registro()
        if preparar == "en_progreso":
            torneo.iniciar_torneo()
        version = torneo.version

        torneo.cancelar()
        assert torneo.estado == EstadoTorneo.CANCELADO
        assert torneo.razon_cancelacion == "Cancelado por organizador"
        assert torneo.fecha_cancelacion is not None
        assert torneo.version == version + 1

    def test_cancel_is_idempotent(self, torneo: Torneo) -> None:
        torneo.cancelar("Falta de sponsors")
        fecha = torneo.fecha_cancelacion
        torneo.obtener_eventos_no_publicados()

        torneo.cancelar("Otra razón")
        assert torneo.version == 2
        assert torneo.razon_cancelacion == "Falta de sponsors"
        assert torneo.fecha_cancelacion == fecha
        assert torneo.obtener_eventos_no_publicados() == []

    def test_cancel_keeps_participant_states(self, torneo_abierto: Torneo) -> None:
        con_participantes(torneo_abierto, 2)
        torneo_abierto.cancelar("Lluvia")
        assert torneo_abierto.participantes_actuales == 2
        eventos = torneo_abierto.obtener_eventos_no_publicados()
        cancelado = eventos[-1]
        assert isinstance(cancelado, TorneoCancelado)
        assert cancelado.estado_anterior == "ABIERTO_REGISTRO"
        assert cancelado.participantes_afectados == 2

    def test_nothing_works_after_cancel(self, torneo: Torneo) -> None:
        torneo.cancelar()
        with pytest.raises(ErrorDominio, match="del estado CANCELADO al estado ABIERTO_REGISTRO"):
            torneo.abrir_para_registro()
        with pytest.raises(ErrorDominio, match="No se puede modificar torneo en estado CANCELADO"):
            torneo.actualizar_limite_participantes(10)


# ============================================================================
# Participants
# ============================================================================


class TestParticipants:
    """Roster management."""

    def test_register_only_while_open(self, torneo: Torneo) -> None:
        with pytest.raises(ErrorDominio, match="No se pueden registrar participantes en estado BORRADOR"):
            torneo.agregar_participante(participante(1))

    def test_register(self, torneo_abierto: Torneo) -> None:
        torneo_abierto.agregar_participante(participante(1))
        assert torneo_abierto.participantes_actuales == 1
        assert torneo_abierto.tiene_usuario("jugador-001") is True
        assert torneo_abierto.buscar_participante_por_usuario("jugador-001").id == "part-001"
        assert torneo_abierto.buscar_participante_por_usuario("jugador-404") is None

    def test_rejects_duplicate_participant_id(self, torneo_abierto: Torneo) -> None:
        torneo_abierto.agregar_participante(participante(1))
        with pytest.raises(ErrorDominio, match="Participante part-001 ya existe"):
            torneo_abierto.agregar_participante(Participante("part-001", UsuarioId("otro-usuario")))

    def test_rejects_duplicate_user(self, torneo_abierto: Torneo) -> None:
        torneo_abierto.agregar_participante(participante(1))
        with pytest.raises(ErrorDominio, match="jugador-001 ya está registrado"):
            torneo_abierto.agregar_participante(Participante("part-900", UsuarioId("jugador-001")))

    def test_rejects_inactive_participant(self, torneo_abierto: Torneo) -> None:
        p = participante(1)
        p.cancelar("Lesión")
        with pytest.raises(ErrorDominio, match="No se puede registrar un participante en estado CANCELADO"):
            torneo_abierto.agregar_participante(p)

    def test_rejects_non_participant(self, torneo_abierto: Torneo) -> None:
        with pytest.raises(ErrorDominio, match="Participante inválido"):
            torneo_abierto.agregar_participante("jugador-001")  # type: ignore[arg-type]

    def test_limit_overflow(self, torneo: Torneo) -> None:
        torneo.actualizar_limite_participantes(2)
        torneo.abrir_para_registro()
        con_participantes(torneo, 2)
        assert torneo.puede_aceptar_participantes() is False
        version = torneo.version

        with pytest.raises(ErrorDominio, match=r"límite de participantes \(2\)"):
            torneo.agregar_participante(participante(3))
        assert torneo.participantes_actuales == 2
        assert torneo.version == version

    def test_withdrawn_slot_can_be_reused(self, torneo: Torneo) -> None:
        torneo.actualizar_limite_participantes(2)
        torneo.abrir_para_registro()
        con_participantes(torneo, 2)
        torneo.remover_participante("part-001")

        assert torneo.puede_aceptar_participantes() is True
        torneo.agregar_participante(Participante("part-010", UsuarioId("jugador-001")))
        assert torneo.participantes_actuales == 2

    def test_remove_unknown_participant(self, torneo_abierto: Torneo) -> None:
        with pytest.raises(ErrorDominio, match="Participante part-999 no encontrado"):
            torneo_abierto.remover_participante("part-999")

    def test_remove_records_reason(self, torneo_abierto: Torneo) -> None:
        con_participantes(torneo_abierto, 1)
        torneo_abierto.remover_participante("part-001")
        (p,) = torneo_abierto.participantes
        assert p.estado == EstadoParticipante.CANCELADO
        assert p.razon_baja == "CANCELACION_VOLUNTARIA"

    def test_remove_not_allowed_once_started(self, torneo_abierto: Torneo) -> None:
        con_participantes(torneo_abierto, 2)
        torneo_abierto.iniciar_torneo()
        with pytest.raises(ErrorDominio, match="No se pueden remover participantes en estado EN_PROGRESO"):
            torneo_abierto.remover_participante("part-001")

    def test_confirm(self, torneo_abierto: Torneo) -> None:
        con_participantes(torneo_abierto, 1)
        torneo_abierto.cerrar_registro()
        torneo_abierto.confirmar_participante("part-001")
        assert torneo_abierto.participantes[0].estado == EstadoParticipante.CONFIRMADO

    def test_confirm_twice_leaves_version(self, torneo_abierto: Torneo) -> None:
        con_participantes(torneo_abierto, 1)
        torneo_abierto.confirmar_participante("part-001")
        version = torneo_abierto.version
        with pytest.raises(ErrorDominio, match="en estado CONFIRMADO"):
            torneo_abierto.confirmar_participante("part-001")
        assert torneo_abierto.version == version

    def test_disqualify_during_tournament(self, torneo_abierto: Torneo) -> None:
        con_participantes(torneo_abierto, 3)
        torneo_abierto.iniciar_torneo()
        torneo_abierto.descalificar_participante("part-002", "Conducta antideportiva")
        assert torneo_abierto.participantes_actuales == 2

    def test_disqualify_requires_reason(self, torneo_abierto: Torneo) -> None:
        con_participantes(torneo_abierto, 1)
        with pytest.raises(ErrorDominio, match="La razón es requerida"):
            torneo_abierto.descalificar_participante("part-001", "")


# ============================================================================
# Administration and sales stages
# ============================================================================


class TestAdministration:
    """Sub-administrators and ticket sales stages."""

    def test_add_sub_administrator(self, torneo: Torneo) -> None:
        torneo.agregar_sub_administrador("admin-001")
        assert torneo.sub_administradores == (UsuarioId("admin-001"),)
        assert torneo.version == 2

    def test_organizer_cannot_be_sub_administrator(self, torneo: Torneo) -> None:
        with pytest.raises(ErrorDominio, match="El organizador no puede ser subadministrador"):
            torneo.agregar_sub_administrador(ORGANIZADOR)

    def test_duplicate_sub_administrator(self, torneo: Torneo) -> None:
        torneo.agregar_sub_administrador("admin-001")
        with pytest.raises(ErrorDominio, match="ya es subadministrador"):
            torneo.agregar_sub_administrador(UsuarioId("admin-001"))

    def test_no_sub_administrators_after_cancel(self, torneo: Torneo) -> None:
        torneo.cancelar()
        with pytest.raises(ErrorDominio, match="subadministradores en estado CANCELADO"):
            torneo.agregar_sub_administrador("admin-001")

    def test_create_sales_stages(self, torneo: Torneo) -> None:
        etapa = torneo.crear_etapa_venta("Preventa", INICIO, INICIO + timedelta(days=7), 100)
        torneo.crear_etapa_venta("General", INICIO + timedelta(days=7), INICIO + timedelta(days=14), 150)
        assert torneo.etapas_venta[0] == etapa
        assert len(torneo.etapas_venta) == 2
        assert torneo.version == 3

    def test_overlapping_stage_rejected(self, torneo: Torneo) -> None:
        torneo.crear_etapa_venta("Preventa", INICIO, INICIO + timedelta(days=7), 100)
        with pytest.raises(ErrorDominio, match="se solapa con 'Preventa'"):
            torneo.crear_etapa_venta("General", INICIO + timedelta(days=3), INICIO + timedelta(days=10), 150)
        assert len(torneo.etapas_venta) == 1

    def test_duplicate_stage_name_rejected(self, torneo: Torneo) -> None:
        torneo.crear_etapa_venta("Preventa", INICIO, INICIO + timedelta(days=7), 100)
        with pytest.raises(ErrorDominio, match="Ya existe una etapa de venta llamada 'preventa'"):
            torneo.crear_etapa_venta("preventa", INICIO + timedelta(days=8), INICIO + timedelta(days=9), 10)

    def test_stages_not_allowed_once_started(self, torneo_abierto: Torneo) -> None:
        con_participantes(torneo_abierto, 2)
        torneo_abierto.iniciar_torneo()
        with pytest.raises(ErrorDominio, match="No se pueden crear etapas de venta en estado EN_PROGRESO"):
            torneo_abierto.crear_etapa_venta("Tardía", INICIO, INICIO + timedelta(days=1), 10)


# ============================================================================
# Projections and events
# ============================================================================


class TestProjections:
    """Read models built from the aggregate."""

    def test_resumen(self, torneo: Torneo) -> None:
        resumen = torneo.obtener_resumen_para_api()
        assert resumen == {
            "torneoId": TORNEO_ID,
            "nombre": "Copa de Verano 2024",
            "categoria": "Profesional",
            "organizadorId": ORGANIZADOR,
            "estado": "BORRADOR",
            "fechaCreacion": torneo.fecha_creacion.isoformat(),
            "participantesActuales": 0,
            "limiteParticipantes": None,
        }

    def test_datos_creacion(self, torneo: Torneo) -> None:
        assert set(torneo.obtener_datos_creacion()) == {
            "torneoId",
            "nombre",
            "estado",
            "organizadorId",
            "fechaCreacion",
        }

    def test_detalles_completos(self, torneo: Torneo) -> None:
        detalles = torneo.obtener_detalles_completos()
        assert detalles["categoria"] == {
            "id": "cat-001",
            "descripcion": "Profesional",
            "alias": "profesional",
        }
        assert detalles["version"] == 1
        assert "fechaCancelacion" not in detalles
        assert "ganadorId" not in detalles

        torneo.cancelar("Problemas técnicos")
        detalles = torneo.obtener_detalles_completos()
        assert detalles["razonCancelacion"] == "Problemas técnicos"
        assert detalles["fechaCancelacion"] == torneo.fecha_cancelacion.isoformat()

    def test_estadisticas(self, torneo: Torneo) -> None:
        torneo.actualizar_limite_participantes(8)
        torneo.agregar_sub_administrador("admin-001")
        torneo.abrir_para_registro()
        con_participantes(torneo, 4)
        torneo.confirmar_participante("part-001")
        torneo.remover_participante("part-002")
        torneo.descalificar_participante("part-003", "Trampas")

        assert torneo.obtener_estadisticas() == {
            "estado": "ABIERTO_REGISTRO",
            "totalParticipantes": 4,
            "activos": 2,
            "registrados": 1,
            "confirmados": 1,
            "cancelados": 1,
            "descalificados": 1,
            "limiteParticipantes": 8,
            "porcentajeOcupacion": 25.0,
            "etapasVenta": 0,
            "subAdministradores": 1,
        }

    def test_estadisticas_without_limit(self, torneo: Torneo) -> None:
        assert torneo.obtener_estadisticas()["porcentajeOcupacion"] is None

    def test_events_drain_in_order(self, torneo: Torneo) -> None:
        torneo.abrir_para_registro()
        con_participantes(torneo, 2)
        eventos = torneo.obtener_eventos_no_publicados()
        assert [type(e) for e in eventos] == [
            TorneoCreado,
            RegistroAbierto,
            ParticipanteRegistrado,
            ParticipanteRegistrado,
        ]
        assert torneo.obtener_eventos_no_publicados() == []

    def test_rejected_mutation_emits_nothing(self, torneo: Torneo) -> None:
        torneo.obtener_eventos_no_publicados()
        with pytest.raises(ErrorDominio):
            torneo.iniciar_torneo()
        assert torneo.obtener_eventos_no_publicados() == []

    def test_finalize_event_names_winner(self, torneo_abierto: Torneo) -> None:
        con_participantes(torneo_abierto, 2)
        torneo_abierto.iniciar_torneo()
        torneo_abierto.finalizar_torneo("jugador-001")
        ultimo = torneo_abierto.obtener_eventos_no_publicados()[-1]
        assert isinstance(ultimo, TorneoFinalizado)
        assert ultimo.ganador_id == "jugador-001"


# ============================================================================
# Restore and snapshots
# ============================================================================


class TestRestore:
    """Rebuilding aggregates from persisted state."""

    def test_restore_sets_state_without_events(self, categoria: Categoria) -> None:
        torneo = Torneo.restaurar(
            TORNEO_ID,
            "Copa de Verano 2024",
            categoria,
            ORGANIZADOR,
            estado=EstadoTorneo.REGISTRO_CERRADO,
            version=5,
            fecha_creacion=INICIO,
            limite_participantes=16,
            participantes=[participante(1), participante(2)],
            sub_administradores=["admin-001"],
        )
        assert torneo.estado == EstadoTorneo.REGISTRO_CERRADO
        assert torneo.version == 5
        assert torneo.fecha_creacion == INICIO
        assert torneo.participantes_actuales == 2
        assert torneo.sub_administradores == (UsuarioId("admin-001"),)
        assert torneo.obtener_eventos_no_publicados() == []

        torneo.iniciar_torneo()
        assert torneo.version == 6

    def test_restore_rechecks_category(self, categoria: Categoria) -> None:
        categoria.desactivar()
        with pytest.raises(ErrorDominio, match="categoría inactiva"):
            Torneo.restaurar(
                TORNEO_ID,
                "Copa de Verano 2024",
                categoria,
                ORGANIZADOR,
                estado="BORRADOR",
                version=1,
                fecha_creacion=INICIO,
            )

    @pytest.mark.parametrize(
        "estado,version,mensaje",
        [
            ("PAUSADO", 1, "Estado de torneo desconocido"),
            ("BORRADOR", 0, "Versión de torneo inválida"),
            ("BORRADOR", "2", "Versión de torneo inválida"),
            ("BORRADOR", True, "Versión de torneo inválida"),
        ],
    )
    def test_restore_validates_persisted_state(
        self, categoria: Categoria, estado: str, version: object, mensaje: str
    ) -> None:
        with pytest.raises(ErrorDominio, match=mensaje):
            Torneo.restaurar(
                TORNEO_ID,
                "Copa de Verano 2024",
                categoria,
                ORGANIZADOR,
                estado=estado,
                version=version,  # type: ignore[arg-type]
                fecha_creacion=INICIO,
            )

    def test_snapshot_preserves_aggregate(self, torneo: Torneo, categoria: Categoria) -> None:
        torneo.actualizar_limite_participantes(8)
        torneo.crear_etapa_venta("Preventa", INICIO, INICIO + timedelta(days=7), 99.5)
        torneo.agregar_sub_administrador("admin-001")
        torneo.abrir_para_registro()
        con_participantes(torneo, 3)
        torneo.remover_participante("part-003", "Lesión")

        snapshot = a_snapshot(torneo)
        assert snapshot["participantesActuales"] == 2
        assert snapshot["categoriaId"] == "cat-001"

        restaurado = desde_snapshot(snapshot, categoria)
        assert a_snapshot(restaurado) == snapshot
        assert restaurado.obtener_eventos_no_publicados() == []
        assert restaurado.participantes[2].razon_baja == "Lesión"

    def test_snapshot_of_cancelled_and_finished(self, torneo_abierto: Torneo, categoria: Categoria) -> None:
        con_participantes(torneo_abierto, 2)
        torneo_abierto.iniciar_torneo()
        torneo_abierto.finalizar_torneo("jugador-001")

        snapshot = a_snapshot(torneo_abierto)
        assert snapshot["ganadorId"] == "jugador-001"
        assert snapshot["fechaCancelacion"] is None
        assert desde_snapshot(snapshot, categoria).ganador_id == UsuarioId("jugador-001")
