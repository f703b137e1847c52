"""Request and query models for the HTTP API.

These pydantic models check request *shape* (types, presence, ranges).
Business rules stay in the domain, so a shape error becomes a 422 and a
rule violation raised later by the core becomes a 400.

Field names follow the camelCase wire format through aliases.
"""

import re
from datetime import date

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from torneos.core.models import EstadoTorneo

_FECHA = re.compile(r"\d{4}-\d{2}-\d{2}")


class _ApiModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class CrearTorneoRequest(_ApiModel):
    """Body of ``POST /api/torneos``."""

    nombre: str = Field(min_length=3, max_length=100)
    categoria_id: str = Field(alias="categoriaId", min_length=1)
    limite_participantes: int | None = Field(
        default=None, alias="limiteParticipantes", ge=2, le=1000, strict=True
    )
    organizador_id: str | None = Field(default=None, alias="organizadorId")


class ActualizarTorneoRequest(_ApiModel):
    """Body of ``PUT /api/torneos/{id}``. Every field is optional."""

    limite_participantes: int | None = Field(
        default=None, alias="limiteParticipantes", ge=2, le=1000, strict=True
    )
    nombre: str | None = Field(default=None, min_length=3, max_length=100)
    organizador_id: str | None = Field(default=None, alias="organizadorId")


class CancelarTorneoRequest(_ApiModel):
    """Body of ``DELETE /api/torneos/{id}``. The body itself is optional."""

    razon: str | None = Field(default=None, min_length=10, max_length=500)
    organizador_id: str | None = Field(default=None, alias="organizadorId")


class ListarTorneosQuery(_ApiModel):
    """Query string of ``GET /api/torneos``.

    Values arrive as strings and are coerced: ``limite=10`` becomes an
    int and ``incluirCancelados=false`` a bool.
    """

    user_id: str | None = Field(default=None, alias="userId")
    estado: EstadoTorneo | None = None
    fecha_desde: date | None = Field(default=None, alias="fechaDesde")
    fecha_hasta: date | None = Field(default=None, alias="fechaHasta")
    limite: int = Field(default=50, ge=1, le=100)
    offset: int = Field(default=0, ge=0)
    incluir_cancelados: bool = Field(default=True, alias="incluirCancelados")

    @field_validator("fecha_desde", "fecha_hasta", mode="before")
    @classmethod
    def validar_formato_fecha(cls, v: object) -> object:
        """Only accept YYYY-MM-DD, not the other formats pydantic parses."""
        if v is None:
            return v
        if not isinstance(v, str) or not _FECHA.fullmatch(v):
            raise ValueError("debe tener formato YYYY-MM-DD")
        return v

    @model_validator(mode="after")
    def validar_rango_fechas(self) -> "ListarTorneosQuery":
        if (
            self.fecha_desde is not None
            and self.fecha_hasta is not None
            and self.fecha_desde > self.fecha_hasta
        ):
            raise ValueError("fechaDesde no puede ser posterior a fechaHasta")
        return self
