"""Contratos de transporte y credenciales.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite que el transporte (httpx, un stub en tests, otro cliente HTTP) sea
  intercambiable sin acoplar el Core a una implementación concreta.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Protocol, runtime_checkable


@dataclass(frozen=True)
class TransportResponse:
    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""


@runtime_checkable
class Transport(Protocol):
    """Contrato mínimo: enviar una request y esperar la respuesta.

    Reglas de diseño:
    - `send` es asíncrono: es el único punto de suspensión del Executor.
    - Fallos de red/timeout se señalan con `core.domain.errors.TransportError`.
    """

    async def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes | None,
    ) -> TransportResponse:
        ...


@runtime_checkable
class Credentials(Protocol):
    """Capacidad opaca que produce headers de autenticación.

    El Core nunca lee ni registra su contenido.
    """

    def auth_headers(self) -> Mapping[str, str]:
        ...
