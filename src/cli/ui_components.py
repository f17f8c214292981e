"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.services.escrow_service import EscrowOutcome


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - Permite desactivar banner en modos no interactivos (JSON/pipelines).
    """

    title = Text("crypt-escrow", style="bold cyan")
    subtitle = Text("Recovery key escrow • Crypt Server", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_outcome_panel(outcome: EscrowOutcome) -> Panel:
    """Panel con el resultado de un escrow."""

    style = "green" if outcome.ok else "red"
    body = Text()
    body.append("Server: ", style="bold")
    body.append(f"{outcome.target_url}\n")
    body.append("Status: ", style="bold")
    body.append(f"HTTP {outcome.status_code}", style=style)
    title = "Escrow stored" if outcome.ok else "Escrow rejected"
    return Panel(body, title=Text(title, style=f"bold {style}"), border_style=style)


def build_checks_table(title: str) -> Table:
    """Tabla Check/Status/Details usada por `doctor`."""

    table = Table(title=title)
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    return table
