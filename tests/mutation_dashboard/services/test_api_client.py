from __future__ import annotations

import asyncio

import httpx
import pytest

from mutation_dashboard.core.exceptions import IngestionError, IngestionErrorKind
from mutation_dashboard.services.api_client import MutationApiClient, extract_rows

ROW = {"index": 1, "latitude": 1.0, "longitude": 100.0, "x": 0.0, "y": 0.0, "mutation_value": 0.5}


def _client(handler) -> MutationApiClient:
    return MutationApiClient("http://api.test/mutations", transport=httpx.MockTransport(handler))


def test_extract_rows_plain_and_wrapped():
    assert extract_rows([ROW]) == [ROW]
    assert extract_rows({"data": [ROW]}) == [ROW]
    assert extract_rows({"results": []}) == []


@pytest.mark.parametrize("payload", [{"detail": "nope"}, "text", 3, [ROW, 4]])
def test_extract_rows_rejects_other_shapes(payload):
    with pytest.raises(IngestionError) as exc_info:
        extract_rows(payload)
    assert exc_info.value.kind is IngestionErrorKind.PARSE


def test_url_without_scheme_gets_http():
    assert MutationApiClient("localhost:8000/api/").url == "http://localhost:8000/api"
    assert MutationApiClient("https://be.example.org/x").url == "https://be.example.org/x"


def test_fetch_rows_success():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"records": [ROW]})

    rows = asyncio.run(_client(handler).fetch_rows())

    assert rows == [ROW]
    assert seen[0].method == "GET"
    assert str(seen[0].url) == "http://api.test/mutations"


def test_fetch_rows_http_error_status():
    client = _client(lambda request: httpx.Response(404))

    with pytest.raises(IngestionError) as exc_info:
        asyncio.run(client.fetch_rows())
    assert exc_info.value.kind is IngestionErrorKind.NETWORK
    assert "404" in exc_info.value.message


def test_fetch_rows_transport_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(IngestionError) as exc_info:
        asyncio.run(_client(handler).fetch_rows())
    assert exc_info.value.kind is IngestionErrorKind.NETWORK


def test_fetch_rows_invalid_json():
    client = _client(lambda request: httpx.Response(200, text="<html>oops</html>"))

    with pytest.raises(IngestionError) as exc_info:
        asyncio.run(client.fetch_rows())
    assert exc_info.value.kind is IngestionErrorKind.PARSE
