"""Errores del Core.

Dos niveles:
- Errores de transporte (no hubo respuesta HTTP) -> `EscrowTransportError`.
- Cualquier respuesta recibida, incluso 4xx/5xx, NO es un error aquí.
"""

from __future__ import annotations


class EscrowError(Exception):
    """Base error for escrow failures."""


class EscrowTransportError(EscrowError):
    """Raised when the request could not be sent or no response arrived."""

    def __init__(self, message: str, *, url: str) -> None:
        super().__init__(message)
        self.url = url


class EscrowConfigError(EscrowError):
    """Raised when required escrow inputs are missing."""
