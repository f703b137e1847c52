"""API handlers for torneos and categorias.

Transport-agnostic: each handler takes already-decoded input (path id,
JSON body dict, query dict) and returns an ApiResponse. The HTTP server
adapter only does routing, auth and byte-level I/O.

This is the single place where errors become responses:

- pydantic ValidationError, malformed path id -> 422
- ErrorDominio -> 400
- RecursoNoEncontrado -> 404
- ConflictoDeVersion -> 409
- anything else -> 500, logged with traceback
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError

from torneos.core.errors import ConflictoDeVersion, ErrorDominio, RecursoNoEncontrado
from torneos.core.ports import FiltrosTorneo, GestionTorneosPort
from torneos.core.validation import es_uuid

from .responses import ApiResponse, respuesta_error, respuesta_exitosa
from .schemas import (
    ActualizarTorneoRequest,
    CancelarTorneoRequest,
    CrearTorneoRequest,
    ListarTorneosQuery,
)

logger = logging.getLogger(__name__)


class PathInvalido(ValueError):
    """A path parameter does not have the expected format."""

    def __init__(self, campo: str, valor: str):
        self.campo = campo
        self.valor = valor
        super().__init__(f"Error de validación en campo '{campo}'")


class TorneoApiHandlers:
    """Handlers for the /api/torneos and /api/categorias endpoints."""

    def __init__(
        self,
        service: GestionTorneosPort,
        default_organizador_id: str = "test-organizador-id",
    ):
        """Initialize the handlers.

        Args:
            service: GestionTorneosPort implementation to delegate to.
            default_organizador_id: Organizer used when a request names none.
        """
        self.service = service
        self.default_organizador_id = default_organizador_id

    async def crear_torneo(self, body: dict[str, Any], request_id: str) -> ApiResponse:
        async def operacion() -> ApiResponse:
            datos = CrearTorneoRequest.model_validate(body)
            creado = await self.service.crear_torneo(
                nombre=datos.nombre,
                categoria_id=datos.categoria_id,
                organizador_id=datos.organizador_id or self.default_organizador_id,
                limite_participantes=datos.limite_participantes,
            )
            return respuesta_exitosa(creado, request_id, status=201)

        return await self._ejecutar("crear_torneo", request_id, operacion)

    async def obtener_torneo(self, torneo_id: str, request_id: str) -> ApiResponse:
        async def operacion() -> ApiResponse:
            _validar_id(torneo_id)
            detalles = await self.service.obtener_torneo(torneo_id)
            return respuesta_exitosa(detalles, request_id)

        return await self._ejecutar("obtener_torneo", request_id, operacion)

    async def actualizar_torneo(
        self, torneo_id: str, body: dict[str, Any], request_id: str
    ) -> ApiResponse:
        async def operacion() -> ApiResponse:
            _validar_id(torneo_id)
            datos = ActualizarTorneoRequest.model_validate(body)
            actualizado = await self.service.actualizar_torneo(
                torneo_id,
                organizador_id=datos.organizador_id or self.default_organizador_id,
                limite_participantes=datos.limite_participantes,
                nombre=datos.nombre,
            )
            return respuesta_exitosa(actualizado, request_id)

        return await self._ejecutar("actualizar_torneo", request_id, operacion)

    async def cancelar_torneo(
        self, torneo_id: str, body: dict[str, Any], request_id: str
    ) -> ApiResponse:
        async def operacion() -> ApiResponse:
            _validar_id(torneo_id)
            datos = CancelarTorneoRequest.model_validate(body)
            cancelado = await self.service.cancelar_torneo(
                torneo_id,
                organizador_id=datos.organizador_id or self.default_organizador_id,
                razon=datos.razon,
            )
            return respuesta_exitosa(cancelado, request_id)

        return await self._ejecutar("cancelar_torneo", request_id, operacion)

    async def listar_torneos(self, query: dict[str, str], request_id: str) -> ApiResponse:
        async def operacion() -> ApiResponse:
            params = ListarTorneosQuery.model_validate(query)
            filtros = FiltrosTorneo(
                estado=params.estado,
                fecha_desde=params.fecha_desde,
                fecha_hasta=params.fecha_hasta,
                incluir_cancelados=params.incluir_cancelados,
            )
            listado = await self.service.listar_torneos(
                params.user_id or self.default_organizador_id,
                filtros,
                limite=params.limite,
                offset=params.offset,
            )
            return respuesta_exitosa(listado, request_id)

        return await self._ejecutar("listar_torneos", request_id, operacion)

    async def listar_categorias(self, request_id: str) -> ApiResponse:
        async def operacion() -> ApiResponse:
            return respuesta_exitosa(await self.service.listar_categorias(), request_id)

        return await self._ejecutar("listar_categorias", request_id, operacion)

    async def _ejecutar(
        self,
        handler: str,
        request_id: str,
        operacion: Callable[[], Awaitable[ApiResponse]],
    ) -> ApiResponse:
        """Run a handler body and map failures to error responses."""
        contexto = {"handler": handler, "request_id": request_id}
        try:
            return await operacion()
        except ValidationError as e:
            errores = [
                {
                    "field": ".".join(str(p) for p in err["loc"]) or "body",
                    "message": err["msg"],
                }
                for err in e.errors()
            ]
            logger.warning(
                f"Validation error in {handler}: {errores}",
                extra={**contexto, "errors": errores},
            )
            return respuesta_error(
                422,
                f"Error de validación en campo '{errores[0]['field']}'",
                request_id,
                {"type": "VALIDATION_ERROR", "errors": errores},
            )
        except PathInvalido as e:
            logger.warning(f"Invalid path parameter in {handler}: {e.valor}", extra=contexto)
            return respuesta_error(
                422,
                str(e),
                request_id,
                {
                    "type": "VALIDATION_ERROR",
                    "field": e.campo,
                    "message": "debe ser un UUID válido",
                },
            )
        except ErrorDominio as e:
            logger.warning(f"Domain error in {handler}: {e}", extra=contexto)
            return respuesta_error(400, str(e), request_id, {"type": "DOMAIN_ERROR"})
        except RecursoNoEncontrado as e:
            return respuesta_error(
                404,
                str(e),
                request_id,
                {
                    "type": "NOT_FOUND",
                    "resource": e.recurso,
                    "resourceId": e.identificador,
                },
            )
        except ConflictoDeVersion as e:
            logger.warning(f"Version conflict in {handler}: {e}", extra=contexto)
            return respuesta_error(
                409,
                str(e),
                request_id,
                {
                    "type": "CONFLICT",
                    "versionEsperada": e.esperada,
                    "versionActual": e.actual,
                },
            )
        except Exception as e:
            logger.error(f"Unexpected error in {handler}: {e}", exc_info=True, extra=contexto)
            return respuesta_error(500, "Error interno del servidor", request_id)


def _validar_id(torneo_id: str) -> None:
    if not es_uuid(torneo_id):
        raise PathInvalido("id", torneo_id)
