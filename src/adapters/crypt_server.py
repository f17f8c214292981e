"""Backend de escrow: Crypt Server.

El servidor (Django, vista `checkin`) espera un POST form-urlencoded con los
campos `recovery_password`, `serial`, `macname` y `username`. Esos nombres
son parte del contrato y no deben cambiar.
"""

from __future__ import annotations

import logging

import httpx

from adapters.http_client import build_client
from core.config import AppSettings
from core.domain.models import EscrowRecord, ServerEndpoint
from core.errors import EscrowTransportError
from core.interfaces.escrow import EscrowBackend

logger = logging.getLogger(__name__)


def submit(
    record: EscrowRecord,
    endpoint: ServerEndpoint,
    *,
    settings: AppSettings | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Response:
    """Envía `record` al servidor Crypt y devuelve la respuesta cruda.

    - Un status 4xx/5xx NO es un error: se devuelve para que el llamador decida.
    - Cualquier fallo de transporte, URL inválida o body que no se puede
      decodificar se eleva como `EscrowTransportError`.
    """

    url = endpoint.target_url
    auth = endpoint.basic_auth
    logger.debug(
        "posting escrow for serial=%s host=%s to %s (basic_auth=%s)",
        record.serial_number,
        record.hostname,
        url,
        auth is not None,
    )

    try:
        with build_client(settings, transport=transport) as client:
            response = client.post(
                url,
                data=record.to_form(),
                auth=httpx.BasicAuth(*auth) if auth else None,
            )
    except (httpx.RequestError, httpx.InvalidURL) as exc:
        logger.warning("escrow to %s failed: %s", url, exc)
        raise EscrowTransportError(f"escrow request to {url} failed: {exc}", url=url) from exc

    logger.info("escrow to %s returned HTTP %s", url, response.status_code)
    return response


class CryptServerEscrow(EscrowBackend):
    """Destino de escrow que habla con un servidor Crypt."""

    def __init__(
        self,
        endpoint: ServerEndpoint,
        settings: AppSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._settings = settings
        self._transport = transport

    @property
    def endpoint(self) -> ServerEndpoint:
        return self._endpoint

    def escrow(self, record: EscrowRecord) -> httpx.Response:
        return submit(
            record,
            self._endpoint,
            settings=self._settings,
            transport=self._transport,
        )
