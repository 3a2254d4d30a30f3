"""Client facade: settings, transport and credentials wired together.

Uso típico::

    async with ODataClient(AppSettings(base_url="https://host/odata")) as client:
        product = await client.for_("Products").set(Name="Test1", Price=18).insert_entry()
        product = await client.for_("Products").key(product["ID"]).set(Price=123).update_entry()
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from adapters.credentials import credentials_from_settings
from adapters.http_client import HttpxTransport, build_async_client
from core.chain import CommandChain
from core.compiler import ForStep, Step, compile_chain
from core.config import AppSettings
from core.domain.errors import ValidationError
from core.domain.models import Entry, Outcome, RequestDescriptor, Verb
from core.executor import Executor
from core.interfaces.transport import Credentials, Transport
from core.url_builder import host_of
from core.values import as_identifier


class ODataClient:
    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        base_url: str | None = None,
        transport: Transport | None = None,
        credentials: Credentials | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self.base_url = base_url if base_url is not None else self._settings.base_url
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport(build_async_client(self._settings))
        self._credentials = credentials if credentials is not None else credentials_from_settings(self._settings)
        self._executor = Executor(self._transport)

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def host(self) -> str | None:
        return host_of(self.base_url)

    def for_(self, collection: str) -> CommandChain:
        return CommandChain(step=ForStep(collection), client=self)

    def compile(self, steps: tuple[Step, ...], verb: Verb) -> RequestDescriptor:
        return compile_chain(
            steps,
            verb,
            base_url=self.base_url,
            update_method=self._settings.update_method,
            key_filter_policy=self._settings.key_filter_policy,
            credentials=self._credentials,
        )

    async def execute(self, descriptor: RequestDescriptor) -> Outcome:
        return await self._executor.execute(descriptor)

    # ─── Shortcuts ───────────────────────────────────────────────────────────

    async def find_entries(self, collection: str, filter: str | None = None) -> list[Entry]:
        chain = self.for_(collection)
        if filter is not None:
            chain = chain.filter(filter)
        return await chain.find_entries()

    async def find_entry(self, collection: str, key: Any) -> Entry | None:
        return await self.for_(collection).key(key).find_entry()

    def key_of(self, entry: Mapping[str, Any]) -> Any:
        """Key value of `entry`, taken from the first configured key property present.

        GUID-shaped strings come back as `uuid.UUID` so they format as bare
        identifier literals.
        """

        for name in self._settings.key_names:
            if name in entry and entry[name] is not None:
                return as_identifier(entry[name])
        raise ValidationError(
            f"Entry has none of the key properties {', '.join(self._settings.key_names)}"
        )

    async def delete_entry(self, collection: str, entry: Mapping[str, Any]) -> None:
        await self.for_(collection).key(self.key_of(entry)).delete_entry()

    # ─── Lifecycle ───────────────────────────────────────────────────────────

    async def aclose(self) -> None:
        if self._owns_transport and isinstance(self._transport, HttpxTransport):
            await self._transport.aclose()

    async def __aenter__(self) -> ODataClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
