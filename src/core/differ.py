"""Minimal property sets for whole-object updates.

When the caller hands over a full entry snapshot instead of an explicit set
of properties, only what changed since the previously observed snapshot is
sent:

- added or changed properties carry their new value;
- removed properties are sent as explicit `None`.

Fallback: without a previous snapshot nothing can be compared and the whole
current entry is sent. That can clear server-side properties that are absent
from `current`, so callers that care should keep the snapshot returned by
the last find/insert/update.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from core.domain.models import Entry
from core.values import ValueKind, classify


def values_equal(left: Any, right: Any) -> bool:
    """Deep structural equality; values of different kinds never match."""

    kind = classify(left)
    if kind is not classify(right):
        return False
    if kind is ValueKind.ENTRY:
        if set(left.keys()) != set(right.keys()):
            return False
        return all(values_equal(left[name], right[name]) for name in left)
    if kind is ValueKind.SEQUENCE:
        if len(left) != len(right):
            return False
        return all(values_equal(a, b) for a, b in zip(left, right))
    return left == right


def diff(previous: Mapping[str, Any], current: Mapping[str, Any]) -> Entry:
    changes: Entry = {}
    for name, value in current.items():
        if name not in previous or not values_equal(previous[name], value):
            changes[name] = copy.deepcopy(value)
    for name in previous:
        if name not in current:
            changes[name] = None
    return changes


def resolve_update(current: Mapping[str, Any], previous: Mapping[str, Any] | None = None) -> Entry:
    """Body for a whole-object update (diff, or everything without a snapshot)."""

    if previous is None:
        return copy.deepcopy(dict(current))
    return diff(previous, current)
