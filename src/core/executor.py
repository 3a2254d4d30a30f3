"""Asynchronous execution of compiled requests.

`Executor.execute` suspends exactly once (at `Transport.send`) and maps the
response to an `Outcome` or a typed error:

| Status | Verb               | Result                                   |
|--------|--------------------|------------------------------------------|
| 2xx    | find/insert/update | `Outcome`, payload decoded when present  |
| 2xx    | delete             | `Outcome` without payload, body ignored  |
| 404    | find by key        | `Outcome` with no entity (`None`)        |
| 404    | update/delete      | `NotFoundError`                          |
| other  | any                | `ProtocolError` with the raw body        |

A 404 on a collection find is a `ProtocolError`: a missing collection is not
an empty one.

No retries: protocol and transport failures go back to the caller as-is.
"""

from __future__ import annotations

import logging

from adapters.json_codec import decode_entries, decode_entry
from core.domain.errors import NotFoundError, ProtocolError
from core.domain.models import Outcome, RequestDescriptor, Target, Verb
from core.interfaces.transport import Transport, TransportResponse

logger = logging.getLogger(__name__)


def interpret_response(descriptor: RequestDescriptor, response: TransportResponse) -> Outcome:
    status = response.status
    headers = dict(response.headers)

    if 200 <= status < 300:
        if descriptor.verb is Verb.DELETE or not response.body or not response.body.strip():
            return Outcome(status=status, payload=None, headers=headers)
        if descriptor.target is Target.COLLECTION:
            payload = decode_entries(response.body, status=status)
        else:
            payload = decode_entry(response.body, status=status)
        return Outcome(status=status, payload=payload, headers=headers)

    if status == 404 and descriptor.verb is not Verb.FIND:
        raise NotFoundError(status, response.body, method=descriptor.method, url=descriptor.url)
    if status == 404 and descriptor.target is Target.ENTRY:
        return Outcome(status=status, payload=None, headers=headers)

    raise ProtocolError(status, response.body, method=descriptor.method, url=descriptor.url)


class Executor:
    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def execute(self, descriptor: RequestDescriptor) -> Outcome:
        headers = dict(descriptor.headers)
        if descriptor.credentials is not None:
            headers.update(descriptor.credentials.auth_headers())

        logger.debug("%s %s", descriptor.method, descriptor.url)
        response = await self._transport.send(descriptor.method, descriptor.url, headers, descriptor.body)
        logger.debug("%s %s -> %s", descriptor.method, descriptor.url, response.status)

        return interpret_response(descriptor, response)
