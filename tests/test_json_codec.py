"""Unit tests for adapters.json_codec — encoding and response shapes."""
from __future__ import annotations

import uuid

import pytest

from adapters.json_codec import CollectionPayload, decode_entries, decode_entry, encode_entry
from core.domain.errors import DecodeError


def test_encode_entry_is_compact_and_ordered() -> None:
    ident = uuid.UUID("0f8fad5b-d9cb-469f-a165-70867728950e")
    body = encode_entry({"Id": ident, "Name": "Ñandú", "Tags": []})
    assert body == '{"Id":"0f8fad5b-d9cb-469f-a165-70867728950e","Name":"Ñandú","Tags":[]}'.encode("utf-8")


def test_collection_payload_model() -> None:
    payload = CollectionPayload.model_validate({"@odata.context": "x", "value": [{"ID": 1}]})
    assert payload.value == [{"ID": 1}]


def test_decode_entries_from_value_and_verbose_shapes() -> None:
    assert decode_entries(b'{"value": [{"ID": 1, "@odata.etag": "W/1"}]}') == [{"ID": 1}]
    assert decode_entries(b'{"d": {"results": [{"ID": 2}]}}') == [{"ID": 2}]
    assert decode_entries(b'{"d": [{"ID": 3}]}') == [{"ID": 3}]


@pytest.mark.parametrize(
    "body",
    [
        b'{"items": []}',
        b'{"value": {"ID": 1}}',
        b'{"value": [1, 2]}',
        b'[{"ID": 1}, "x"]',
        b'"text"',
    ],
)
def test_decode_entries_rejects_unexpected_shapes(body: bytes) -> None:
    with pytest.raises(DecodeError) as info:
        decode_entries(body, status=200)
    assert info.value.status == 200
    assert info.value.body == body


def test_decode_entry_strips_nested_annotations() -> None:
    entry = decode_entry(b'{"__metadata": {"uri": "u"}, "ID": 1, "Location": {"odata.type": "Geo", "Latitude": 1.0}}')
    assert entry == {"ID": 1, "Location": {"Latitude": 1.0}}


@pytest.mark.parametrize("body", [b"[1, 2]", b"5", b"null"])
def test_decode_entry_requires_an_object(body: bytes) -> None:
    with pytest.raises(DecodeError) as info:
        decode_entry(body, status=201)
    assert info.value.status == 201
    assert "single entry" in str(info.value)
