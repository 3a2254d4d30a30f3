"""Closed set of value kinds carried by entries.

Entries are schema-less, but the values inside them are not arbitrary: every
value must fall into one of the kinds below. Literal formatting (URL keys)
and wire conversion (JSON bodies) dispatch on the kind, so an unsupported
Python type fails loudly at compile time instead of producing a bad request.
"""

from __future__ import annotations

import math
import re
import uuid
from collections.abc import Mapping
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any

from core.domain.errors import ValidationError

# Canonical 8-4-4-4-12 form, as identifiers come back in JSON bodies.
_GUID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}\Z")


class ValueKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATETIME = "datetime"
    IDENTIFIER = "identifier"
    NULL = "null"
    ENTRY = "entry"
    SEQUENCE = "sequence"


def classify(value: Any) -> ValueKind:
    """Return the kind of `value` or raise `ValidationError`.

    `bool` is checked before numbers since it is an `int` subclass.
    """

    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float, Decimal)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (datetime, date)):
        return ValueKind.DATETIME
    if isinstance(value, uuid.UUID):
        return ValueKind.IDENTIFIER
    if isinstance(value, Mapping):
        return ValueKind.ENTRY
    if isinstance(value, (list, tuple)):
        return ValueKind.SEQUENCE
    raise ValidationError(f"Unsupported value type: {type(value).__name__}")


def as_identifier(value: Any) -> Any:
    """Return `uuid.UUID` for a canonical GUID string, `value` unchanged otherwise.

    Decoded entries carry GUIDs as plain JSON strings.
    """

    if isinstance(value, str) and _GUID_RE.match(value):
        return uuid.UUID(value)
    return value


def _format_number(value: int | float | Decimal) -> str:
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            raise ValidationError(f"Non-finite number is not representable: {value!r}")
        # repr() keeps "1.0" as "1.0"; Decimal drops the exponent form.
        return format(Decimal(repr(value)), "f")
    if not value.is_finite():
        raise ValidationError(f"Non-finite number is not representable: {value!r}")
    return format(value, "f")


def format_datetime(value: datetime | date) -> str:
    """Canonical date-time literal (ISO-8601, `Z` for UTC)."""

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
            return value.replace(tzinfo=None).isoformat() + "Z"
        return value.isoformat()
    return value.isoformat()


def format_literal(value: Any) -> str:
    """Protocol literal for a scalar used inside a URL (keys)."""

    kind = classify(value)
    if kind is ValueKind.STRING:
        return "'" + value.replace("'", "''") + "'"
    if kind is ValueKind.NUMBER:
        return _format_number(value)
    if kind is ValueKind.BOOLEAN:
        return "true" if value else "false"
    if kind is ValueKind.DATETIME:
        return format_datetime(value)
    if kind is ValueKind.IDENTIFIER:
        return str(value)
    if kind is ValueKind.NULL:
        raise ValidationError("null cannot be used as a key value")
    raise ValidationError(f"A {kind.value} value cannot be used as a key value")


def to_wire(value: Any) -> Any:
    """Convert a value to its JSON-compatible wire form."""

    kind = classify(value)
    if kind in (ValueKind.STRING, ValueKind.BOOLEAN, ValueKind.NULL):
        return value
    if kind is ValueKind.NUMBER:
        if isinstance(value, Decimal):
            _format_number(value)
            return int(value) if value == value.to_integral_value() else float(value)
        if isinstance(value, float):
            _format_number(value)
        return value
    if kind is ValueKind.DATETIME:
        return format_datetime(value)
    if kind is ValueKind.IDENTIFIER:
        return str(value)
    if kind is ValueKind.ENTRY:
        out: dict[str, Any] = {}
        for name, item in value.items():
            if not isinstance(name, str):
                raise ValidationError(f"Property names must be strings, got {type(name).__name__}")
            out[name] = to_wire(item)
        return out
    return [to_wire(item) for item in value]
