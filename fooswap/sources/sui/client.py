import itertools
import logging
from typing import Any, Dict, List, NamedTuple, Optional

import backoff
import httpx

from fooswap.config.settings import MAX_EVENTS_PER_PAGE, RPC_MAX_TRIES, RPC_TIMEOUT_SECS
from fooswap.errors import SourceUnavailable

logger = logging.getLogger(__name__)

QUERY_EVENTS_METHOD = "suix_queryEvents"


class EventPage(NamedTuple):
    entries: List[Dict[str, Any]]
    next_cursor: Optional[Dict[str, Any]]
    has_more: bool


class SuiEventClient:
    """Thin wrapper around ``suix_queryEvents`` for one Sui full node.

    Transport errors are retried a bounded number of times inside a single
    ``fetch_page`` call; anything still failing after that surfaces as
    :class:`SourceUnavailable` and is left to the next scheduled tick.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = RPC_TIMEOUT_SECS,
        max_tries: int = RPC_MAX_TRIES,
        http_client: Optional[httpx.Client] = None,
    ):
        self.rpc_url = rpc_url
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=timeout)
        self._ids = itertools.count(1)
        self._post = backoff.on_exception(
            backoff.expo,
            httpx.TransportError,
            max_tries=max_tries,
            jitter=None,
            logger=logger,
        )(self._post_once)

    def _post_once(self, payload: dict) -> httpx.Response:
        return self._http.post(self.rpc_url, json=payload)

    def fetch_page(
        self,
        event_type: str,
        cursor: Optional[Dict[str, Any]],
        page_size: int,
    ) -> EventPage:
        if not 1 <= page_size <= MAX_EVENTS_PER_PAGE:
            raise ValueError(f"page_size must be within 1..{MAX_EVENTS_PER_PAGE}, got {page_size}")

        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": QUERY_EVENTS_METHOD,
            # query, cursor, limit, descending_order
            "params": [{"MoveEventType": event_type}, cursor, page_size, False],
        }
        try:
            resp = self._post(payload)
        except httpx.TransportError as e:
            raise SourceUnavailable(f"Sui RPC unreachable at {self.rpc_url}: {e}") from e

        if resp.is_error:
            raise SourceUnavailable(f"Sui RPC returned HTTP {resp.status_code}")

        try:
            body = resp.json()
        except ValueError as e:
            raise SourceUnavailable("Sui RPC returned a non-JSON body") from e

        if not isinstance(body, dict):
            raise SourceUnavailable("Sui RPC returned an unexpected JSON document")

        error = body.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else error
            raise SourceUnavailable(f"Sui RPC error: {message}")

        result = body.get("result")
        if not isinstance(result, dict) or not isinstance(result.get("data"), list):
            raise SourceUnavailable("Sui RPC response is missing result.data")

        page = EventPage(
            entries=list(result["data"]),
            next_cursor=result.get("nextCursor"),
            has_more=bool(result.get("hasNextPage", False)),
        )
        logger.debug(f"{event_type}: fetched {len(page.entries)} events (has_more={page.has_more})")
        return page

    def close(self) -> None:
        if self._owns_http:
            self._http.close()


# Cache of clients per RPC URL
_sui_clients: Dict[str, SuiEventClient] = {}


def get_sui_client(rpc_url: str) -> SuiEventClient:
    """Returns a cached or newly created client for a given RPC URL."""
    if rpc_url not in _sui_clients:
        logger.info(f"Using Sui RPC: {rpc_url}")
        _sui_clients[rpc_url] = SuiEventClient(rpc_url)
    return _sui_clients[rpc_url]


def close_sui_clients() -> None:
    for client in _sui_clients.values():
        client.close()
    _sui_clients.clear()
