"""Modelos del dominio del protocolo.

Por qué dataclasses congeladas:
- `RequestDescriptor` y `Outcome` son valores: se construyen una vez por
  llamada terminal y nadie los modifica después.
- Al ser inmutables se pueden compartir entre tareas concurrentes sin locks.

Nota:
- `Entry` es un simple `dict[str, Any]`: las colecciones no tienen esquema fijo.
  Los tipos de valor admitidos están cerrados en `core.values.ValueKind`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

Entry = dict[str, Any]


class Verb(str, Enum):
    """Operación terminal de un command chain."""

    FIND = "find"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


class Target(str, Enum):
    """Forma esperada del recurso direccionado por la URL."""

    ENTRY = "entry"
    COLLECTION = "collection"


@dataclass(frozen=True)
class RequestDescriptor:
    """Descripción completa de una request, lista para el Transport.

    `credentials` es opaco: el Core solo le pide headers, nunca lo inspecciona.
    """

    method: str
    url: str
    verb: Verb
    target: Target
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None
    credentials: Any = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))


@dataclass(frozen=True)
class Outcome:
    """Resultado exitoso de una request.

    `payload` es una `Entry`, una lista de `Entry` (colecciones) o `None`
    (sin contenido / entidad no encontrada en un find).
    """

    status: int
    payload: Entry | list[Entry] | None = None
    headers: Mapping[str, str] = field(default_factory=dict)

    @property
    def found(self) -> bool:
        return self.payload is not None and self.payload != []


class KeyFilterPolicy(str, Enum):
    """Qué hacer cuando un chain trae `key` y `filter` a la vez."""

    LAST_WINS = "last_wins"
    ERROR = "error"
