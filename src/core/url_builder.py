"""Resource path and query string construction.

Pure functions only: the same logical inputs always produce byte-identical
output, so compiled requests can be compared, cached and asserted on.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import quote, urlsplit

from core.domain.errors import ValidationError
from core.values import format_literal

# Characters left literal inside a key segment: `(name='x',other=1)`.
_KEY_SAFE = "'(),=:"
# Characters left literal inside query values.
_QUERY_SAFE = "'(),:"


def format_key(key: Any) -> str:
    """Format a key as `(value)` or `(name1=value1,name2=value2)`.

    Composite keys keep the caller's declaration order.
    """

    if isinstance(key, Mapping):
        items = list(key.items())
    elif isinstance(key, tuple) and all(isinstance(p, tuple) and len(p) == 2 for p in key):
        items = list(key)
    else:
        return "(" + quote(format_literal(key), safe=_KEY_SAFE) + ")"

    if not items:
        raise ValidationError("A composite key needs at least one property")

    parts = []
    for name, value in items:
        if not isinstance(name, str) or not name:
            raise ValidationError(f"Invalid key property name: {name!r}")
        parts.append(f"{quote(name, safe='')}={quote(format_literal(value), safe=_KEY_SAFE)}")
    return "(" + ",".join(parts) + ")"


def build(
    collection: str,
    key: Any = None,
    filter: str | None = None,
    select: Sequence[str] | None = None,
) -> tuple[str, str]:
    """Return `(path, query)` for a collection or a single entity.

    `query` has no leading `?` and is empty when there are no options.
    """

    if not isinstance(collection, str) or not collection.strip():
        raise ValidationError("Collection name must be a non-empty string")

    path = quote(collection, safe="")
    if key is not None:
        path += format_key(key)

    params: list[str] = []
    if filter is not None:
        params.append("$filter=" + quote(filter, safe=_QUERY_SAFE))
    if select:
        params.append("$select=" + ",".join(quote(name, safe="") for name in select))
    return path, "&".join(params)


def build_url(
    base_url: str,
    collection: str,
    key: Any = None,
    filter: str | None = None,
    select: Sequence[str] | None = None,
) -> str:
    """Absolute (or base-relative, when `base_url` is empty) resource URL."""

    path, query = build(collection, key=key, filter=filter, select=select)
    url = f"{base_url.rstrip('/')}/{path}" if base_url else path
    return f"{url}?{query}" if query else url


def host_of(base_url: str | None) -> str | None:
    """Network location of the service root, e.g. `example.com:8080`."""

    if not base_url:
        return None
    return urlsplit(base_url).netloc or None
