"""Escrow orchestration utilities.

The CLI delegates the "resolve inputs, build the record, submit" flow to
these helpers so that the same path is reusable from other entry-points
(tests, scripts) and printing stays out of the core logic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from adapters import host_info
from adapters.crypt_server import CryptServerEscrow
from core.config import AppSettings
from core.domain.models import EscrowRecord, ServerEndpoint
from core.errors import EscrowConfigError

logger = logging.getLogger(__name__)


@dataclass
class EscrowRequest:
    """Inputs for one escrow run. `None` means "use settings / host facts"."""

    recovery_password: str
    serial_number: str | None = None
    hostname: str | None = None
    username: str | None = None
    server_url: str | None = None
    uri_path: str | None = None
    auth_username: str | None = None
    auth_password: str | None = None


@dataclass
class EscrowOutcome:
    """Result of a completed HTTP exchange."""

    target_url: str
    status_code: int
    response: httpx.Response

    @property
    def ok(self) -> bool:
        return self.status_code == httpx.codes.OK


def build_endpoint(request: EscrowRequest, settings: AppSettings) -> ServerEndpoint:
    server_url = request.server_url or settings.server_url
    if not server_url:
        raise EscrowConfigError(
            "no Crypt server configured (use --server or CRYPT_ESCROW_SERVER_URL)"
        )
    return ServerEndpoint(
        base_url=server_url,
        uri_path=request.uri_path or settings.checkin_path,
        auth_username=request.auth_username or settings.auth_username,
        auth_password=request.auth_password or settings.auth_password,
    )


def build_record(request: EscrowRequest) -> EscrowRecord:
    serial = request.serial_number if request.serial_number is not None else host_info.get_serial_number()
    if serial is None:
        raise EscrowConfigError("could not determine the serial number (use --serial)")

    hostname = request.hostname if request.hostname is not None else host_info.get_hostname()
    username = request.username if request.username is not None else host_info.get_username()
    if username is None:
        raise EscrowConfigError("could not determine the username (use --username)")

    return EscrowRecord(
        recovery_password=request.recovery_password,
        serial_number=serial,
        hostname=hostname,
        username=username,
    )


def run_escrow(
    request: EscrowRequest,
    settings: AppSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> EscrowOutcome:
    """Resolve inputs and escrow the recovery password once.

    Transport failures propagate as `EscrowTransportError`; any HTTP status
    is reported in the outcome.
    """

    settings = settings or AppSettings()
    endpoint = build_endpoint(request, settings)
    record = build_record(request)

    backend = CryptServerEscrow(endpoint, settings, transport=transport)
    response = backend.escrow(record)

    outcome = EscrowOutcome(
        target_url=endpoint.target_url,
        status_code=response.status_code,
        response=response,
    )
    if not outcome.ok:
        logger.warning("Crypt server at %s answered HTTP %s", outcome.target_url, outcome.status_code)
    return outcome
