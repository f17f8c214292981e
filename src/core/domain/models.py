"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Valores inmutables (`frozen=True`) con documentación autocontenida (Field).
- El dominio no sabe nada de HTTP: solo describe *qué* se envía y *a dónde*.

Nota:
- Los campos son strings opacos: el servidor Crypt es quien decide qué es válido.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

DEFAULT_CHECKIN_PATH = "/checkin/"


class EscrowRecord(BaseModel):
    """Datos a custodiar en el servidor Crypt.

    Por qué existe:
    - Agrupa la contraseña de recuperación y la identidad del equipo en un
      único valor que se construye antes de llamar al backend.
    """

    model_config = ConfigDict(frozen=True)

    recovery_password: str = Field(
        ...,
        repr=False,
        description="Contraseña de recuperación del cifrado de disco.",
    )
    serial_number: str = Field(
        ...,
        description="Número de serie del hardware.",
    )
    hostname: str = Field(
        ...,
        description="Nombre del equipo (el servidor lo llama `macname`).",
    )
    username: str = Field(
        ...,
        description="Usuario asociado al equipo.",
    )

    def to_form(self) -> dict[str, str]:
        """Campos del formulario con los nombres que exige el servidor Crypt."""

        return {
            "recovery_password": self.recovery_password,
            "serial": self.serial_number,
            "macname": self.hostname,
            "username": self.username,
        }


class ServerEndpoint(BaseModel):
    """Dónde enviar el `EscrowRecord`."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        ...,
        description="URL base del servidor Crypt (esquema + host + puerto).",
    )
    uri_path: str = Field(
        default=DEFAULT_CHECKIN_PATH,
        description="Ruta del endpoint de check-in.",
    )
    auth_username: str | None = Field(
        default=None,
        description="Usuario para HTTP Basic Auth (opcional).",
    )
    auth_password: str | None = Field(
        default=None,
        repr=False,
        description="Contraseña para HTTP Basic Auth (opcional).",
    )

    @property
    def target_url(self) -> str:
        # Concatenación literal: no se normalizan barras.
        return f"{self.base_url}{self.uri_path}"

    @property
    def basic_auth(self) -> tuple[str, str] | None:
        """Credenciales Basic solo si ambas están presentes y no vacías."""

        if self.auth_username and self.auth_password:
            return (self.auth_username, self.auth_password)
        return None
