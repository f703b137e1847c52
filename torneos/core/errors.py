"""Error types for the torneos core.

ErrorDominio marks a broken business rule or construction invariant.
It is always a caller mistake and is never retried; adapters map it to
a rejected request.

RecursoNoEncontrado and ConflictoDeVersion are raised by the service and
store layers, never by the domain model itself.
"""


class ErrorDominio(ValueError):
    """A business rule or construction invariant was violated.

    The message is stable: callers match on substrings of it.
    """


class RecursoNoEncontrado(LookupError):
    """A referenced torneo or categoria has no backing record."""

    def __init__(self, recurso: str, identificador: str):
        self.recurso = recurso
        self.identificador = identificador
        super().__init__(f"{recurso} con ID '{identificador}' no encontrado")


class ConflictoDeVersion(RuntimeError):
    """A write was based on a stale version of the torneo."""

    def __init__(self, torneo_id: str, esperada: int, actual: int | None):
        self.torneo_id = torneo_id
        self.esperada = esperada
        self.actual = actual
        super().__init__(
            f"Conflicto de versión en torneo {torneo_id}: "
            f"se esperaba {esperada}, versión actual {actual}"
        )
