"""CLI (Typer + Rich): comandos `escrow` y `doctor`."""
