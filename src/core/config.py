"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP) y servicios lean config de forma consistente.
"""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import DEFAULT_CHECKIN_PATH

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "crypt-escrow"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "crypt-escrow"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "crypt-escrow"
    return Path.home() / ".config" / "crypt-escrow"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


_ESCAPE_RE = re.compile(r"\\(.)")


def _quote_env_value(value: str) -> str:
    # Comillas dobles: dotenv respeta `#`, espacios y comillas internas.
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _unquote_env_value(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return _ESCAPE_RE.sub(r"\1", value[1:-1])
    if len(value) >= 2 and value[0] == value[-1] == "'":
        return value[1:-1]
    return value


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = _unquote_env_value(value.strip())
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario.

    Las claves con valor `None` se ignoran (no borran lo existente).
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# crypt-escrow user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={_quote_env_value(existing[key])}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    if not sys.platform.startswith("win"):
        # Puede contener la contraseña de Basic Auth.
        env_path.chmod(0o600)
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="CRYPT_ESCROW_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    server_url: str | None = Field(
        default=None,
        description="URL base del servidor Crypt (p.ej. https://crypt.example.com).",
    )
    checkin_path: str = Field(
        default=DEFAULT_CHECKIN_PATH,
        min_length=1,
        description="Ruta del endpoint de check-in.",
    )
    auth_username: str | None = Field(
        default=None,
        description="Usuario HTTP Basic Auth (opcional).",
    )
    auth_password: str | None = Field(
        default=None,
        repr=False,
        description="Contraseña HTTP Basic Auth (opcional).",
    )

    http_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Timeout por request (segundos). None = default de httpx.",
    )
    verify_tls: bool = Field(
        default=True,
        description="Verificar el certificado TLS del servidor.",
    )
    user_agent: str = Field(
        default="crypt-escrow/0.1",
        min_length=1,
        description="User-Agent de las peticiones.",
    )

    log_level: LogLevel = Field(
        default="WARNING",
        description="Nivel de logging de la aplicación.",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value
