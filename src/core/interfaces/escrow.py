"""Contrato de backends de escrow.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite sustituir el servidor Crypt por otro backend (o por un doble de
  test) sin acoplar el servicio a una implementación concreta.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import httpx

from core.domain.models import EscrowRecord


@runtime_checkable
class EscrowBackend(Protocol):
    """Contrato mínimo para un destino de escrow.

    Reglas de diseño:
    - `escrow` es síncrono: el llamador queda bloqueado hasta la respuesta.
    - Devuelve la respuesta cruda; interpretar el status es cosa del llamador.
    """

    def escrow(self, record: EscrowRecord) -> httpx.Response:
        """Envía `record` y devuelve la respuesta sin parsear."""

        ...
