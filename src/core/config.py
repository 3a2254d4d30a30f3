"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP/credenciales) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.models import KeyFilterPolicy


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "fluent-odata"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "fluent-odata"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "fluent-odata"
    return Path.home() / ".config" / "fluent-odata"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


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
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None]) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# fluent-odata user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central del cliente.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="FLUENT_ODATA_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    base_url: str = Field(
        default="",
        description="Service root del endpoint (p.ej. https://host/odata).",
    )
    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="fluent-odata/0.1",
        min_length=1,
        description="User-Agent enviado en cada request.",
    )

    username: str | None = Field(
        default=None,
        description="Usuario para basic auth (opcional).",
    )
    password: str | None = Field(
        default=None,
        description="Password para basic auth (opcional).",
    )
    token: str | None = Field(
        default=None,
        description="Bearer token (opcional; tiene prioridad sobre basic auth).",
    )

    update_method: Literal["PATCH", "MERGE"] = Field(
        default="PATCH",
        description="Verbo HTTP para updates parciales (MERGE en servicios v1-v3).",
    )
    key_filter_policy: KeyFilterPolicy = Field(
        default=KeyFilterPolicy.LAST_WINS,
        description="Precedencia cuando un chain trae key y filter.",
    )
    key_names: list[str] = Field(
        default_factory=lambda: ["ID", "Id"],
        min_length=1,
        description="Propiedades candidatas a key al borrar a partir de una entry.",
    )
