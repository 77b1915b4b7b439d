import json

import httpx
import pytest

from fooswap.errors import SourceUnavailable
from fooswap.sources.sui.client import SuiEventClient
from fooswap.sources.sui.events import SWAP_TYPE

RPC_URL = "https://fullnode.test.sui.io:443"


def _client(handler, max_tries=1):
    http = httpx.Client(transport=httpx.MockTransport(handler))
    return SuiEventClient(RPC_URL, max_tries=max_tries, http_client=http)


def test_fetch_page_sends_query_events_request():
    seen = []

    def handler(request):
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={
            "jsonrpc": "2.0",
            "id": 1,
            "result": {
                "data": [{"id": {"txDigest": "tx-1", "eventSeq": "0"}}],
                "nextCursor": {"txDigest": "tx-1", "eventSeq": "0"},
                "hasNextPage": True,
            },
        })

    client = _client(handler)
    cursor = {"txDigest": "tx-0", "eventSeq": "3"}
    page = client.fetch_page(SWAP_TYPE, cursor, 50)

    assert seen[0]["method"] == "suix_queryEvents"
    assert seen[0]["params"] == [{"MoveEventType": SWAP_TYPE}, cursor, 50, False]
    assert len(page.entries) == 1
    assert page.next_cursor == {"txDigest": "tx-1", "eventSeq": "0"}
    assert page.has_more is True


def test_request_ids_increase():
    ids = []

    def handler(request):
        ids.append(json.loads(request.content)["id"])
        return httpx.Response(200, json={"result": {"data": [], "nextCursor": None, "hasNextPage": False}})

    client = _client(handler)
    client.fetch_page(SWAP_TYPE, None, 10)
    client.fetch_page(SWAP_TYPE, None, 10)

    assert ids == [1, 2]


def test_empty_page_without_cursor():
    client = _client(lambda request: httpx.Response(200, json={"result": {"data": []}}))

    page = client.fetch_page(SWAP_TYPE, None, 10)

    assert page.entries == []
    assert page.next_cursor is None
    assert page.has_more is False


@pytest.mark.parametrize("page_size", [0, 1001])
def test_page_size_out_of_range(page_size):
    client = _client(lambda request: httpx.Response(200, json={}))

    with pytest.raises(ValueError):
        client.fetch_page(SWAP_TYPE, None, page_size)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(503, text="upstream down"),
        httpx.Response(200, text="<html>not json</html>"),
        httpx.Response(200, json=["unexpected"]),
        httpx.Response(200, json={"error": {"code": -32602, "message": "Invalid params"}}),
        httpx.Response(200, json={"result": {"nextCursor": None}}),
    ],
)
def test_bad_responses_surface_as_source_unavailable(response):
    client = _client(lambda request: response)

    with pytest.raises(SourceUnavailable):
        client.fetch_page(SWAP_TYPE, None, 10)


def test_transport_errors_are_retried_then_reported(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda seconds: None)
    attempts = []

    def handler(request):
        attempts.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler, max_tries=3)

    with pytest.raises(SourceUnavailable) as exc:
        client.fetch_page(SWAP_TYPE, None, 10)
    assert len(attempts) == 3
    assert RPC_URL in str(exc.value)


def test_transient_transport_error_recovers(monkeypatch):
    monkeypatch.setattr("time.sleep", lambda seconds: None)
    attempts = []

    def handler(request):
        attempts.append(request)
        if len(attempts) == 1:
            raise httpx.ReadTimeout("timed out", request=request)
        return httpx.Response(200, json={"result": {"data": [], "hasNextPage": False}})

    client = _client(handler, max_tries=2)
    page = client.fetch_page(SWAP_TYPE, None, 10)

    assert len(attempts) == 2
    assert page.has_more is False
