"""Adaptadores de I/O: HTTP (httpx) y datos del equipo local."""
