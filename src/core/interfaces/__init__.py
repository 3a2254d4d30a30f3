"""Interfaces/abstracciones del Core.

Por qué:
- Define contratos (Protocol) que implementan adaptadores concretos.
- Permite invertir dependencias: el Core depende de abstracciones.
"""

from core.interfaces.transport import Credentials, Transport, TransportResponse

__all__ = ["Credentials", "Transport", "TransportResponse"]
