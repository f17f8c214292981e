"""CLI entry-point (Typer).

Commands:
- `escrow`: send the recovery password to the Crypt server.
- `doctor run` / `doctor setup`: diagnostics and interactive configuration.

Exit codes for `escrow`: 0 on HTTP 200, 2 on any other status, 1 when the
request could not be made at all.
"""

from __future__ import annotations

import json

import typer
from rich.console import Console

from cli import doctor
from cli.ui_components import build_outcome_panel, print_banner
from core.config import AppSettings
from core.errors import EscrowConfigError, EscrowTransportError
from core.logging_setup import configure_logging
from core.services.escrow_service import EscrowRequest, run_escrow

app = typer.Typer(no_args_is_help=True, help="Escrow disk-encryption recovery keys to a Crypt server.")
app.add_typer(doctor.app, name="doctor")

_console = Console()
_err_console = Console(stderr=True)


@app.command()
def escrow(
    recovery_password: str = typer.Option(
        ...,
        "--recovery-password",
        envvar="CRYPT_ESCROW_RECOVERY_PASSWORD",
        prompt=True,
        hide_input=True,
        help="Recovery password to escrow.",
    ),
    serial: str | None = typer.Option(None, "--serial", help="Hardware serial (default: detected)."),
    hostname: str | None = typer.Option(None, "--hostname", help="Host name (default: this machine)."),
    username: str | None = typer.Option(None, "--username", help="User name (default: current user)."),
    server: str | None = typer.Option(None, "--server", help="Crypt server base URL."),
    path: str | None = typer.Option(None, "--path", help="Check-in path (default: /checkin/)."),
    auth_username: str | None = typer.Option(None, "--auth-username", help="HTTP Basic auth user."),
    auth_password: str | None = typer.Option(
        None,
        "--auth-password",
        envvar="CRYPT_ESCROW_AUTH_PASSWORD",
        help="HTTP Basic auth password.",
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON (no banner)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Escrow the recovery password once."""

    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)

    if not as_json:
        print_banner(_console)

    request = EscrowRequest(
        recovery_password=recovery_password,
        serial_number=serial,
        hostname=hostname,
        username=username,
        server_url=server,
        uri_path=path,
        auth_username=auth_username,
        auth_password=auth_password,
    )

    try:
        outcome = run_escrow(request, settings)
    except EscrowConfigError as exc:
        _err_console.print(f"[red]Configuration error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    except EscrowTransportError as exc:
        _err_console.print(f"[red]Transport error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    if as_json:
        typer.echo(
            json.dumps(
                {
                    "target_url": outcome.target_url,
                    "status_code": outcome.status_code,
                    "ok": outcome.ok,
                },
                sort_keys=True,
            )
        )
    else:
        _console.print(build_outcome_panel(outcome))

    if not outcome.ok:
        raise typer.Exit(code=2)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
