"""Taxonomía de errores del cliente.

Por qué una jerarquía propia:
- El caller distingue un chain mal formado (`ValidationError`) de un fallo del
  servidor (`ProtocolError`), de un body ilegible (`DecodeError`) y de la red
  (`TransportError`) sin inspeccionar mensajes.
- Ninguno se reintenta en el Core: la política de retry es del caller.
"""

from __future__ import annotations


class ODataError(Exception):
    """Base de todos los errores del cliente."""


class ValidationError(ODataError):
    """Command chain mal formado; se lanza antes de cualquier I/O."""


class ProtocolError(ODataError):
    """Status no exitoso devuelto por el servidor.

    El body se conserva tal cual (bytes), sin reinterpretarlo.
    """

    def __init__(
        self,
        status: int,
        body: bytes = b"",
        *,
        method: str | None = None,
        url: str | None = None,
    ) -> None:
        self.status = status
        self.body = body
        self.method = method
        self.url = url
        target = f" {method} {url}" if method and url else ""
        super().__init__(f"HTTP {status}{target}")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class NotFoundError(ProtocolError):
    """404 sobre un update/delete (en un find es un resultado vacío, no un error)."""


class DecodeError(ODataError):
    """Status exitoso pero el body no tiene la forma esperada."""

    def __init__(self, message: str, *, status: int | None = None, body: bytes = b"") -> None:
        self.status = status
        self.body = body
        super().__init__(message)


class TransportError(ODataError):
    """Fallo de red, timeout o conexión rechazada (opaco, viene del Transport)."""
