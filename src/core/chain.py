"""Fluent, immutable command chain.

Every fluent call returns a *new* `CommandChain` node that points at its
parent; no call ever mutates an existing chain. Partial chains can therefore
be stored, shared between tasks and extended in different directions::

    products = client.for_("Products")
    cheap = products.filter("Price lt 10")
    one = products.key(5)

Terminal verbs (`find_entries`, `find_entry`, `insert_entry`, `update_entry`,
`delete_entry`) compile the chain and run exactly one request.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from core.compiler import (
    FilterStep,
    ForStep,
    KeyStep,
    SelectStep,
    SetEntryStep,
    SetStep,
    Step,
)
from core.domain.errors import ValidationError
from core.domain.models import Entry, Outcome, RequestDescriptor, Verb

if TYPE_CHECKING:
    from core.client import ODataClient


@dataclass(frozen=True)
class CommandChain:
    step: Step
    parent: CommandChain | None = None
    client: ODataClient | None = field(default=None, repr=False, compare=False)

    def _extend(self, step: Step) -> CommandChain:
        return CommandChain(step=step, parent=self, client=self.client)

    @property
    def steps(self) -> tuple[Step, ...]:
        out: list[Step] = []
        node: CommandChain | None = self
        while node is not None:
            out.append(node.step)
            node = node.parent
        return tuple(reversed(out))

    # ─── Fluent steps ────────────────────────────────────────────────────────

    def for_(self, collection: str) -> CommandChain:
        return self._extend(ForStep(collection))

    def key(self, value: Any = None, /, **named: Any) -> CommandChain:
        """Address one entity: `key(5)`, `key({"A": 1, "B": 2})` or `key(A=1, B=2)`."""

        if named:
            if value is not None:
                raise ValidationError("key() takes either a value or named key properties, not both")
            return self._extend(KeyStep(tuple(named.items())))
        if isinstance(value, Mapping):
            return self._extend(KeyStep(tuple(copy.deepcopy(dict(value)).items())))
        return self._extend(KeyStep(value))

    def filter(self, predicate: str) -> CommandChain:
        if not isinstance(predicate, str) or not predicate.strip():
            raise ValidationError("filter() needs a non-empty predicate string")
        return self._extend(FilterStep(predicate))

    def select(self, *names: str) -> CommandChain:
        if not names:
            raise ValidationError("select() needs at least one property name")
        return self._extend(SelectStep(tuple(names)))

    def set(self, entry: Mapping[str, Any] | None = None, /, **properties: Any) -> CommandChain:
        """Explicit partial set: only the given properties are sent."""

        values: dict[str, Any] = dict(entry or {})
        values.update(properties)
        if not values:
            raise ValidationError("set() needs at least one property")
        return self._extend(SetStep(tuple(copy.deepcopy(values).items())))

    def set_entry(self, current: Mapping[str, Any], previous: Mapping[str, Any] | None = None) -> CommandChain:
        """Whole-object set; on update only the diff against `previous` is sent.

        Without `previous` the whole `current` entry is sent (see `core.differ`).
        """

        return self._extend(
            SetEntryStep(
                current=copy.deepcopy(dict(current)),
                previous=copy.deepcopy(dict(previous)) if previous is not None else None,
            )
        )

    # ─── Terminal verbs ──────────────────────────────────────────────────────

    def compile(self, verb: Verb | str) -> RequestDescriptor:
        return self._require_client().compile(self.steps, Verb(verb))

    async def execute(self, verb: Verb | str) -> Outcome:
        client = self._require_client()
        descriptor = client.compile(self.steps, Verb(verb))
        return await client.execute(descriptor)

    async def find_entries(self) -> list[Entry]:
        outcome = await self.execute(Verb.FIND)
        if outcome.payload is None:
            return []
        if isinstance(outcome.payload, dict):
            return [outcome.payload]
        return outcome.payload

    async def find_entry(self) -> Entry | None:
        """First matching entry, or `None` when nothing matches."""

        outcome = await self.execute(Verb.FIND)
        if isinstance(outcome.payload, list):
            return outcome.payload[0] if outcome.payload else None
        return outcome.payload

    async def insert_entry(self) -> Entry | None:
        outcome = await self.execute(Verb.INSERT)
        return outcome.payload  # type: ignore[return-value]

    async def update_entry(self) -> Entry | None:
        outcome = await self.execute(Verb.UPDATE)
        return outcome.payload  # type: ignore[return-value]

    async def delete_entry(self) -> None:
        await self.execute(Verb.DELETE)

    def _require_client(self) -> ODataClient:
        if self.client is None:
            raise ValidationError("This command chain is not bound to a client")
        return self.client
