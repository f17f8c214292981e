"""Doctor command for environment diagnostics."""

from __future__ import annotations

import typer
from rich.console import Console

from adapters import host_info
from adapters.http_client import build_client
from cli.ui_components import build_checks_table
from core.config import AppSettings, write_user_env_vars
from core.domain.models import DEFAULT_CHECKIN_PATH

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_http(url: str, settings: AppSettings) -> tuple[bool, str]:
    try:
        with build_client(settings) as client:
            response = client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = build_checks_table("crypt-escrow Doctor")

    # Config
    if settings.server_url:
        table.add_row("Server URL", "OK", settings.server_url)
    else:
        table.add_row("Server URL", "MISSING", "Run `crypt-escrow doctor setup` or set CRYPT_ESCROW_SERVER_URL")
    table.add_row("Check-in path", "OK", settings.checkin_path)
    if settings.auth_username and settings.auth_password:
        table.add_row("Basic auth", "OK", f"user {settings.auth_username}")
    else:
        table.add_row("Basic auth", "OPTIONAL", "No credentials -> no Authorization header")

    # Host facts
    serial = host_info.get_serial_number()
    table.add_row("Serial number", "OK" if serial else "FAIL", serial or "Not detected -> pass --serial")
    table.add_row("Hostname", "OK", host_info.get_hostname())
    username = host_info.get_username()
    table.add_row("Username", "OK" if username else "FAIL", username or "Not detected -> pass --username")

    # Connectivity (best-effort)
    ok_http = False
    if settings.server_url:
        ok_http, detail_http = _check_http(settings.server_url, settings)
        table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if settings.server_url and not ok_http:
        _console.print(
            "\n[yellow]Note:[/yellow] The server is unreachable; `escrow` will fail until it answers."
        )


@app.command(name="setup")
def setup() -> None:
    """Interactive server setup (stores config in the user config .env)."""

    settings = AppSettings()

    server_url = typer.prompt("Crypt server URL", default=settings.server_url or "", show_default=True).strip()
    checkin_path = typer.prompt("Check-in path", default=settings.checkin_path or DEFAULT_CHECKIN_PATH).strip()
    auth_username = typer.prompt("Basic auth username (blank for none)", default="", show_default=False).strip()
    auth_password = ""
    if auth_username:
        auth_password = typer.prompt("Basic auth password", hide_input=True, confirmation_prompt=False).strip()

    if not server_url:
        raise typer.BadParameter("server URL is required")

    env_path = write_user_env_vars(
        {
            "CRYPT_ESCROW_SERVER_URL": server_url,
            "CRYPT_ESCROW_CHECKIN_PATH": checkin_path,
            "CRYPT_ESCROW_AUTH_USERNAME": auth_username or None,
            "CRYPT_ESCROW_AUTH_PASSWORD": auth_password or None,
        }
    )

    _console.print(f"[green]Saved server config to:[/green] {env_path}")
