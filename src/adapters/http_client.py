"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y verificación TLS en un solo sitio.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.

Sin reintentos: un fallo de red se propaga al llamador tal cual.
"""

from __future__ import annotations

from typing import Any

import httpx

from core.config import AppSettings


def build_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` síncrono con los defaults de la app.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las peticiones se comporten igual.
    - Si no hay timeout configurado se respeta el default de httpx.
    """

    settings = settings or AppSettings()
    kwargs: dict[str, Any] = {
        "headers": {"User-Agent": settings.user_agent},
        "verify": settings.verify_tls,
    }
    if settings.http_timeout_seconds is not None:
        kwargs["timeout"] = httpx.Timeout(settings.http_timeout_seconds)
    if transport is not None:
        kwargs["transport"] = transport
    return httpx.Client(**kwargs)
