"""Credenciales opacas (basic auth / bearer).

Cada objeto solo sabe producir sus headers; el resto del cliente lo trata como
caja negra y nunca lo registra (el `repr` oculta secretos).
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field

from core.config import AppSettings


@dataclass(frozen=True)
class BasicCredentials:
    username: str
    password: str = field(repr=False)

    def auth_headers(self) -> dict[str, str]:
        raw = f"{self.username}:{self.password}".encode("utf-8")
        return {"Authorization": "Basic " + base64.b64encode(raw).decode("ascii")}


@dataclass(frozen=True)
class BearerCredentials:
    token: str = field(repr=False)

    def auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def credentials_from_settings(settings: AppSettings) -> BasicCredentials | BearerCredentials | None:
    if settings.token:
        return BearerCredentials(settings.token)
    if settings.username:
        return BasicCredentials(settings.username, settings.password or "")
    return None
