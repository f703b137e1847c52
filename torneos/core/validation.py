"""Shared validation helpers for value objects and entities.

Each helper raises ErrorDominio with the caller-supplied message so the
wording stays owned by the type doing the validating.
"""

import re
from typing import Any

from .errors import ErrorDominio

UUID_PATTERN = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}",
    re.IGNORECASE,
)


def es_uuid(valor: str) -> bool:
    """Return True if valor has the 8-4-4-4-12 UUID shape (versions 1-5)."""
    return UUID_PATTERN.fullmatch(valor) is not None


def requerir_no_vacio(valor: Any, mensaje: str) -> None:
    """Reject None and strings that are empty after trimming."""
    if valor is None:
        raise ErrorDominio(mensaje)
    if isinstance(valor, str) and not valor.strip():
        raise ErrorDominio(mensaje)


def requerir_string(valor: Any, mensaje: str) -> str:
    """Reject anything that is not a str and return it unchanged."""
    if not isinstance(valor, str):
        raise ErrorDominio(mensaje)
    return valor


def validar_rango(valor: float, minimo: float, maximo: float, mensaje: str) -> None:
    """Reject numbers outside [minimo, maximo] (inclusive) and non-numbers."""
    # bool is an int subclass; True is not a percentage
    if isinstance(valor, bool) or not isinstance(valor, (int, float)):
        raise ErrorDominio(mensaje)
    if valor < minimo or valor > maximo:
        raise ErrorDominio(mensaje)
