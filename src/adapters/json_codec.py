"""Codec JSON de entries.

Por qué JSON stdlib + pydantic:
- El wire format del protocolo es JSON plano; los tipos ricos (fechas, GUIDs,
  decimales) se normalizan antes con `core.values.to_wire`.
- Formato estable (sin espacios, orden de inserción) para requests deterministas.
- La forma de las respuestas (objeto, `value`, lista de objetos) se valida con
  modelos pydantic; cualquier desvío se reporta como `DecodeError`.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as SchemaError

from core.domain.errors import DecodeError
from core.domain.models import Entry
from core.values import to_wire

# Anotaciones de metadata que no son propiedades de la entidad (v4, v3, v2).
_ANNOTATION_PREFIXES = ("@odata.", "odata.")
_ANNOTATION_KEYS = frozenset({"__metadata", "__deferred"})


class CollectionPayload(BaseModel):
    """Colección v4 / v3 JSON light: `{"value": [{...}, ...]}`."""

    value: list[dict[str, Any]]


_ENTRY = TypeAdapter(dict[str, Any])
_ENTRIES = TypeAdapter(list[dict[str, Any]])


def encode_entry(entry: Mapping[str, Any]) -> bytes:
    payload = to_wire(entry)
    return json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")


def decode_json(body: bytes, *, status: int | None = None) -> Any:
    try:
        return json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeError(f"Response body is not valid JSON: {exc}", status=status, body=body) from exc


def _describe(exc: SchemaError) -> str:
    first = exc.errors()[0]
    where = ".".join(str(part) for part in first["loc"]) or "<root>"
    return f"{where}: {first['msg']}"


def _is_annotation(name: str) -> bool:
    return name in _ANNOTATION_KEYS or name.startswith(_ANNOTATION_PREFIXES) or "@odata." in name


def _strip_annotations(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: _strip_annotations(v) for k, v in value.items() if not _is_annotation(k)}
    if isinstance(value, list):
        return [_strip_annotations(v) for v in value]
    return value


def _unwrap_verbose(data: Any) -> Any:
    # Formato "verbose" v2: {"d": {...}} o {"d": {"results": [...]}}
    if isinstance(data, dict) and set(data) == {"d"}:
        inner = data["d"]
        if isinstance(inner, dict) and "results" in inner and isinstance(inner["results"], list):
            return inner["results"]
        return inner
    return data


def decode_entry(body: bytes, *, status: int | None = None) -> Entry:
    data = _unwrap_verbose(decode_json(body, status=status))
    try:
        entry = _ENTRY.validate_python(data)
    except SchemaError as exc:
        raise DecodeError(
            f"Expected a JSON object for a single entry ({_describe(exc)})",
            status=status,
            body=body,
        ) from exc
    return _strip_annotations(entry)


def decode_entries(body: bytes, *, status: int | None = None) -> list[Entry]:
    data = _unwrap_verbose(decode_json(body, status=status))
    try:
        if isinstance(data, list):
            items = _ENTRIES.validate_python(data)
        else:
            items = CollectionPayload.model_validate(data).value
    except SchemaError as exc:
        raise DecodeError(
            f"Unexpected collection response shape ({_describe(exc)})",
            status=status,
            body=body,
        ) from exc
    return [_strip_annotations(item) for item in items]
