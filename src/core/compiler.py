"""Command chain → `RequestDescriptor`.

The compiler is where intent becomes a request. Everything it rejects is
raised as `ValidationError` before any network activity:

- `for_()` must appear exactly once, as the first step;
- `insert` needs property changes and accepts neither a key nor a filter;
- `update` and `delete` need a key or a filter;
- `update` needs property changes (`set` or `set_entry`);
- `find` and `delete` do not accept property changes.

Repeated steps resolve deterministically: the last `key` wins, the last
`filter` wins, successive `set` calls merge (later values override) and
`set_entry` replaces any earlier `set` (and vice versa). A chain carrying both
a key and a filter is resolved by `KeyFilterPolicy`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from adapters.json_codec import encode_entry
from core.differ import resolve_update
from core.domain.errors import ValidationError
from core.domain.models import Entry, KeyFilterPolicy, RequestDescriptor, Target, Verb
from core.url_builder import build_url


@dataclass(frozen=True)
class ForStep:
    collection: str


@dataclass(frozen=True)
class KeyStep:
    # Scalar, or a tuple of (name, value) pairs for composite keys.
    value: Any


@dataclass(frozen=True)
class FilterStep:
    predicate: str


@dataclass(frozen=True)
class SelectStep:
    names: tuple[str, ...]


@dataclass(frozen=True)
class SetStep:
    properties: tuple[tuple[str, Any], ...]


@dataclass(frozen=True)
class SetEntryStep:
    current: Entry = field(compare=False)
    previous: Entry | None = field(default=None, compare=False)


Step = ForStep | KeyStep | FilterStep | SelectStep | SetStep | SetEntryStep

_METHODS = {
    Verb.FIND: "GET",
    Verb.INSERT: "POST",
    Verb.DELETE: "DELETE",
}


@dataclass
class _Resolved:
    collection: str
    key: KeyStep | None = None
    filter: FilterStep | None = None
    select: tuple[str, ...] | None = None
    changes: dict[str, Any] | SetEntryStep | None = None
    saw_key: bool = False
    saw_filter: bool = False


def _resolve(steps: tuple[Step, ...], policy: KeyFilterPolicy) -> _Resolved:
    if not steps or not isinstance(steps[0], ForStep):
        raise ValidationError("A command chain must start with for_(collection)")
    if any(isinstance(step, ForStep) for step in steps[1:]):
        raise ValidationError("for_(collection) may appear only once in a command chain")

    collection = steps[0].collection
    if not isinstance(collection, str) or not collection.strip():
        raise ValidationError("Collection name must be a non-empty string")

    resolved = _Resolved(collection=collection)
    last_addressing: str | None = None
    for step in steps[1:]:
        if isinstance(step, KeyStep):
            if step.value is None:
                raise ValidationError("null cannot be used as a key value")
            resolved.key = step
            resolved.saw_key = True
            last_addressing = "key"
        elif isinstance(step, FilterStep):
            resolved.filter = step
            resolved.saw_filter = True
            last_addressing = "filter"
        elif isinstance(step, SelectStep):
            resolved.select = step.names
        elif isinstance(step, SetStep):
            if not isinstance(resolved.changes, dict):
                resolved.changes = {}
            resolved.changes.update(step.properties)
        elif isinstance(step, SetEntryStep):
            resolved.changes = step

    if resolved.key is not None and resolved.filter is not None:
        if policy is KeyFilterPolicy.ERROR:
            raise ValidationError("A command chain cannot combine key() and filter()")
        if last_addressing == "key":
            resolved.filter = None
        else:
            resolved.key = None
    return resolved


def _body_for(verb: Verb, changes: dict[str, Any] | SetEntryStep) -> Entry:
    if isinstance(changes, dict):
        return changes
    if verb is Verb.INSERT:
        return dict(changes.current)
    return resolve_update(changes.current, changes.previous)


def compile_chain(
    steps: tuple[Step, ...],
    verb: Verb,
    *,
    base_url: str = "",
    update_method: str = "PATCH",
    key_filter_policy: KeyFilterPolicy = KeyFilterPolicy.LAST_WINS,
    credentials: Any = None,
) -> RequestDescriptor:
    """Validate a chain and produce the one request it describes."""

    resolved = _resolve(steps, key_filter_policy)
    addressed = resolved.key is not None or resolved.filter is not None

    if verb is Verb.INSERT:
        if resolved.saw_key:
            raise ValidationError("insert does not accept a key")
        if resolved.saw_filter:
            raise ValidationError("insert does not accept a filter")
        if resolved.changes is None:
            raise ValidationError("insert requires set() or set_entry()")
    elif verb is Verb.UPDATE:
        if not addressed:
            raise ValidationError("update requires a key or a filter")
        if resolved.changes is None:
            raise ValidationError("update requires set() or set_entry()")
    elif verb is Verb.DELETE:
        if not addressed:
            raise ValidationError("delete requires a key or a filter")
        if resolved.changes is not None:
            raise ValidationError("delete does not accept property changes")
    elif resolved.changes is not None:
        raise ValidationError("find does not accept property changes")

    url = build_url(
        base_url,
        resolved.collection,
        key=resolved.key.value if resolved.key is not None else None,
        filter=resolved.filter.predicate if resolved.filter is not None else None,
        select=resolved.select,
    )

    headers = {"Accept": "application/json"}
    body: bytes | None = None
    if resolved.changes is not None:
        body = encode_entry(_body_for(verb, resolved.changes))
        headers["Content-Type"] = "application/json"
        headers["Prefer"] = "return=representation"

    if verb is Verb.FIND and resolved.key is None:
        target = Target.COLLECTION
    else:
        target = Target.ENTRY

    return RequestDescriptor(
        method=update_method if verb is Verb.UPDATE else _METHODS[verb],
        url=url,
        verb=verb,
        target=target,
        headers=headers,
        body=body,
        credentials=credentials,
    )
