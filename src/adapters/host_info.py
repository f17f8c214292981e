"""Descubrimiento de datos del equipo local.

Por qué en adapters:
- Es I/O puro (sockets, subprocess, sysfs).
- Ninguna función eleva: si un dato no se puede obtener devuelve `None` y
  el llamador decide si es obligatorio.
"""

from __future__ import annotations

import getpass
import logging
import re
import socket
import subprocess
import sys
from pathlib import Path

logger = logging.getLogger(__name__)

_IOREG_SERIAL_RE = re.compile(r'"IOPlatformSerialNumber"\s*=\s*"([^"]*)"')
_DMI_SERIAL_PATH = Path("/sys/class/dmi/id/product_serial")


def get_hostname() -> str:
    return socket.gethostname()


def get_username() -> str | None:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        # Sin entrada en passwd ni LOGNAME/USER (p.ej. contenedores).
        return None


def parse_ioreg_serial(output: str) -> str | None:
    """Extrae `IOPlatformSerialNumber` de la salida de `ioreg`."""

    match = _IOREG_SERIAL_RE.search(output)
    if not match:
        return None
    serial = match.group(1).strip()
    return serial or None


def _serial_from_ioreg() -> str | None:
    try:
        result = subprocess.run(
            ["ioreg", "-c", "IOPlatformExpertDevice", "-d", "2"],
            capture_output=True,
            text=True,
            check=True,
            timeout=10,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("ioreg failed: %s", exc)
        return None
    return parse_ioreg_serial(result.stdout)


def _serial_from_dmi(path: Path | None = None) -> str | None:
    path = path or _DMI_SERIAL_PATH
    try:
        serial = path.read_text(encoding="utf-8", errors="replace").strip()
    except OSError as exc:
        # Normalmente solo legible por root.
        logger.debug("cannot read %s: %s", path, exc)
        return None
    return serial or None


def get_serial_number() -> str | None:
    """Número de serie del hardware (macOS: ioreg, Linux: DMI)."""

    if sys.platform == "darwin":
        return _serial_from_ioreg()
    if sys.platform.startswith("linux"):
        return _serial_from_dmi()
    return None
