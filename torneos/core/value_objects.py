"""Value objects for the torneos domain.

All value objects are frozen dataclasses wrapping a single normalized
string in ``valor``. Validation runs in ``__post_init__`` in a fixed
order: required, type, normalization, format/length, content policy.
The first broken rule wins, so error messages are deterministic.

Equality and hashing come from the dataclass: two instances are equal
only when they are the same type and hold the same normalized value.
"""

import re
from dataclasses import dataclass
from typing import ClassVar

from .errors import ErrorDominio
from .validation import es_uuid, requerir_no_vacio, requerir_string


@dataclass(frozen=True)
class TorneoId:
    """Identity of a tournament: a UUID string."""

    valor: str

    def __post_init__(self) -> None:
        requerir_no_vacio(self.valor, "TorneoId no puede ser nulo")
        valor = requerir_string(self.valor, "TorneoId debe ser un string").strip()
        if not es_uuid(valor):
            raise ErrorDominio("TorneoId debe ser un UUID v4 válido")
        object.__setattr__(self, "valor", valor)

    def __str__(self) -> str:
        return self.valor


@dataclass(frozen=True)
class CategoriaId:
    """Identity of a category, e.g. ``cat-profesional-001``."""

    valor: str

    _FORMATO: ClassVar[re.Pattern[str]] = re.compile(r"[a-z0-9_-]+")

    def __post_init__(self) -> None:
        requerir_no_vacio(self.valor, "CategoriaId no puede ser nulo")
        valor = requerir_string(self.valor, "CategoriaId debe ser un string").strip()
        if len(valor) < 2 or not self._FORMATO.fullmatch(valor):
            raise ErrorDominio("CategoriaId debe tener formato inválido")
        object.__setattr__(self, "valor", valor)

    def __str__(self) -> str:
        return self.valor


@dataclass(frozen=True)
class UsuarioId:
    """Identity of a user (organizer, participant, sub-administrator).

    Either a Cognito-style UUID or an alphanumeric handle with dashes and
    underscores, 3 to 50 characters long.
    """

    valor: str

    _FORMATO: ClassVar[re.Pattern[str]] = re.compile(r"[a-zA-Z0-9_-]+")
    LONGITUD_MINIMA: ClassVar[int] = 3
    LONGITUD_MAXIMA: ClassVar[int] = 50

    def __post_init__(self) -> None:
        requerir_no_vacio(self.valor, "UsuarioId no puede ser nulo")
        valor = requerir_string(self.valor, "UsuarioId debe ser un string").strip()
        if len(valor) < self.LONGITUD_MINIMA:
            raise ErrorDominio("UsuarioId debe tener al menos 3 caracteres")
        if len(valor) > self.LONGITUD_MAXIMA:
            raise ErrorDominio("UsuarioId no puede exceder 50 caracteres")
        if not self._FORMATO.fullmatch(valor):
            raise ErrorDominio("UsuarioId contiene caracteres no válidos")
        object.__setattr__(self, "valor", valor)

    def es_uuid(self) -> bool:
        """True when the id looks like a Cognito UUID."""
        return es_uuid(self.valor)

    def __str__(self) -> str:
        return self.valor


_LETRA_O_DIGITO = "a-zA-ZñÑáéíóúÁÉÍÓÚ0-9"


@dataclass(frozen=True)
class NombreTorneo:
    """Display name of a tournament.

    Rules:
    - 3 to 100 characters after trimming and collapsing whitespace runs
    - letters (including Spanish accents), digits, spaces and
      ``- _ . , ! ( ) : [ ] { }`` only
    - none of the denylisted terms, case-insensitive
    - at least one letter or digit
    """

    valor: str

    LONGITUD_MINIMA: ClassVar[int] = 3
    LONGITUD_MAXIMA: ClassVar[int] = 100
    CONTENIDO_PROHIBIDO: ClassVar[tuple[str, ...]] = ("spam", "test123", "ejemplo")

    _PERMITIDOS: ClassVar[re.Pattern[str]] = re.compile(
        rf"[{_LETRA_O_DIGITO}\s\-_.,!():\[\]{{}}]+"
    )
    _CONTENIDO_UTIL: ClassVar[re.Pattern[str]] = re.compile(rf"[{_LETRA_O_DIGITO}]")
    _ESPACIOS: ClassVar[re.Pattern[str]] = re.compile(r"\s+")

    def __post_init__(self) -> None:
        if not isinstance(self.valor, str) or not self.valor.strip():
            raise ErrorDominio("Nombre del torneo es requerido")

        valor = self.normalizar(self.valor)

        if len(valor) < self.LONGITUD_MINIMA:
            raise ErrorDominio("El nombre del torneo debe tener al menos 3 caracteres")
        if len(valor) > self.LONGITUD_MAXIMA:
            raise ErrorDominio("El nombre del torneo no puede exceder 100 caracteres")
        if not self._PERMITIDOS.fullmatch(valor):
            raise ErrorDominio("El nombre contiene caracteres no permitidos")

        minusculas = valor.lower()
        if any(termino in minusculas for termino in self.CONTENIDO_PROHIBIDO):
            raise ErrorDominio("El nombre contiene contenido no permitido")
        if not self._CONTENIDO_UTIL.search(valor):
            raise ErrorDominio("El nombre debe contener al menos una letra o número")

        object.__setattr__(self, "valor", valor)

    @classmethod
    def normalizar(cls, valor: str) -> str:
        """Trim and collapse internal whitespace runs to one space."""
        return cls._ESPACIOS.sub(" ", valor.strip())

    def contiene_termino(self, termino: object) -> bool:
        """Case-insensitive substring test; False for empty or non-str terms."""
        if not termino or not isinstance(termino, str):
            return False
        return termino.lower() in self.valor.lower()

    def longitud(self) -> int:
        return len(self.valor)

    def __str__(self) -> str:
        return self.valor
