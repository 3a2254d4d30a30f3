"""Shared test fixtures for fluent-odata.

`InMemoryODataService` is a tiny OData-style endpoint served through
`httpx.MockTransport`: it understands collection and key addressing, simple
`Name eq 'value'` filters, POST/PATCH/MERGE/DELETE and (optionally) basic auth.
"""
from __future__ import annotations

import asyncio
import base64
import itertools
import json
import re
from urllib.parse import unquote

import httpx
import pytest

from adapters.http_client import HttpxTransport, build_async_client
from core.client import ODataClient
from core.config import AppSettings

BASE_URL = "https://service.test/odata"

_PATH_RE = re.compile(r"^/odata/(?P<collection>[A-Za-z]+)(?:\((?P<key>[^)]*)\))?$")
_FILTER_RE = re.compile(r"^(?P<name>\w+) eq (?P<value>'(?:[^']|'')*'|[\w.\-]+)$")


def _parse_literal(text: str) -> object:
    if text.startswith("'") and text.endswith("'"):
        return text[1:-1].replace("''", "'")
    if text in ("true", "false"):
        return text == "true"
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return text


class InMemoryODataService:
    def __init__(self, *, credentials: tuple[str, str] | None = None) -> None:
        self.collections: dict[str, dict[object, dict]] = {"Products": {}, "WorkTaskModels": {}}
        self.key_names = {"Products": "ID", "WorkTaskModels": "Id"}
        # Edm.Guid keys: only the bare literal form is accepted.
        self.guid_keyed = {"WorkTaskModels"}
        self.requests: list[httpx.Request] = []
        self._ids = itertools.count(1)
        self._credentials = credentials

    def seed(self, collection: str, entry: dict) -> dict:
        key_name = self.key_names[collection]
        stored = dict(entry)
        stored.setdefault(key_name, next(self._ids))
        self.collections[collection][stored[key_name]] = stored
        return stored

    def _authorized(self, request: httpx.Request) -> bool:
        if self._credentials is None:
            return True
        raw = f"{self._credentials[0]}:{self._credentials[1]}".encode("utf-8")
        expected = "Basic " + base64.b64encode(raw).decode("ascii")
        return request.headers.get("Authorization") == expected

    def _json(self, status: int, payload: object) -> httpx.Response:
        return httpx.Response(status, json=payload)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._authorized(request):
            return httpx.Response(401, text="Unauthorized")

        match = _PATH_RE.match(unquote(request.url.path))
        if match is None or match["collection"] not in self.collections:
            return httpx.Response(404, text="Unknown resource")

        collection = match["collection"]
        store = self.collections[collection]
        key_name = self.key_names[collection]
        raw_key = match["key"]

        if raw_key is None:
            if request.method == "GET":
                items = list(store.values())
                predicate = request.url.params.get("$filter")
                if predicate:
                    filt = _FILTER_RE.match(predicate)
                    if filt is None:
                        return httpx.Response(400, text=f"Unsupported filter: {predicate}")
                    wanted = _parse_literal(filt["value"])
                    items = [item for item in items if item.get(filt["name"]) == wanted]
                return self._json(200, {"@odata.context": "$metadata#" + collection, "value": items})
            if request.method == "POST":
                body = json.loads(request.content)
                stored = self.seed(collection, body)
                return self._json(201, {"@odata.context": "$metadata#" + collection + "/$entity", **stored})
            return httpx.Response(405, text="Method not allowed")

        if collection in self.guid_keyed and raw_key.startswith("'"):
            return httpx.Response(400, text=f"Invalid Edm.Guid key literal: {raw_key}")
        key = _parse_literal(raw_key)
        entry = store.get(key)
        if entry is None:
            return httpx.Response(404, json={"error": {"code": "", "message": "Not found"}})

        if request.method == "GET":
            return self._json(200, entry)
        if request.method in ("PATCH", "MERGE"):
            entry.update(json.loads(request.content))
            if request.headers.get("Prefer") == "return=representation":
                return self._json(200, entry)
            return httpx.Response(204)
        if request.method == "DELETE":
            del store[key]
            return httpx.Response(204)
        return httpx.Response(405, text="Method not allowed")


@pytest.fixture()
def settings() -> AppSettings:
    return AppSettings(_env_file=None, base_url=BASE_URL)


@pytest.fixture()
def service() -> InMemoryODataService:
    return InMemoryODataService()


@pytest.fixture()
def make_client(settings):
    """Build an `ODataClient` wired to an in-memory service.

    The client does not own an injected transport, so the httpx clients built
    here are closed at teardown.
    """

    http_clients: list[httpx.AsyncClient] = []

    def factory(service: InMemoryODataService, client_settings: AppSettings | None = None) -> ODataClient:
        used = client_settings or settings
        http = build_async_client(used, transport=httpx.MockTransport(service))
        http_clients.append(http)
        return ODataClient(used, transport=HttpxTransport(http))

    factory.http_clients = http_clients
    yield factory
    for http in http_clients:
        if not http.is_closed:
            asyncio.run(http.aclose())


@pytest.fixture()
def service_factory():
    return InMemoryODataService
