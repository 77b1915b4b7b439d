from dotenv import load_dotenv
import os
import pathlib
import pytest

# never start the background indexer from the test app
os.environ["INDEXER_ENABLED"] = "false"

# Automatically load .env from project root
load_dotenv(dotenv_path=pathlib.Path(__file__).parent.parent.parent / ".env")

from fooswap.errors import SourceUnavailable  # noqa: E402
from fooswap.sources.sui.client import EventPage  # noqa: E402
from fooswap.sources.sui.events import POOL_CREATED_TYPE, SWAP_TYPE  # noqa: E402
from fooswap.storage.db import init_db, make_engine, make_session_factory  # noqa: E402


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'fooswap-test.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


# ── raw events as suix_queryEvents returns them ────────────────────────
def pool_created_event(digest, pool_id, token_a, token_b, reserve_a, reserve_b, ts):
    return {
        "id": {"txDigest": digest, "eventSeq": "0"},
        "packageId": POOL_CREATED_TYPE.split("::")[0],
        "transactionModule": "fooswap",
        "sender": "0xc0ffee",
        "type": POOL_CREATED_TYPE,
        "parsedJson": {
            "pool_id": pool_id,
            "token_a": token_a,
            "token_b": token_b,
            "initial_reserve_a": str(reserve_a),
            "initial_reserve_b": str(reserve_b),
        },
        "timestampMs": str(ts),
    }


def swap_event(digest, pool_id, amount_in, amount_out, reserve_a, reserve_b, ts, sender="0xbeef"):
    return {
        "id": {"txDigest": digest, "eventSeq": "0"},
        "packageId": SWAP_TYPE.split("::")[0],
        "transactionModule": "fooswap",
        "sender": sender,
        "type": SWAP_TYPE,
        "parsedJson": {
            "pool_id": pool_id,
            "amount_in": str(amount_in),
            "amount_out": str(amount_out),
            "new_reserve_a": str(reserve_a),
            "new_reserve_b": str(reserve_b),
        },
        "timestampMs": str(ts),
    }


class FakeEventSource:
    """In-memory feed per event type, paged the way the Sui node pages.

    The cursor is the position of the last entry handed out; ``fail_on_call``
    makes the n-th ``fetch_page`` call (1-based) raise ``SourceUnavailable``.
    """

    def __init__(self, feeds=None, fail_on_call=None):
        self.feeds = feeds or {}
        self.fail_on_call = fail_on_call
        self.calls = []

    def fetch_page(self, event_type, cursor, page_size):
        self.calls.append((event_type, cursor, page_size))
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise SourceUnavailable("connection refused")

        entries = self.feeds.get(event_type, [])
        start = 0 if cursor is None else int(cursor["eventSeq"]) + 1
        end = min(start + page_size, len(entries))
        if start >= end:
            return EventPage(entries=[], next_cursor=cursor, has_more=False)
        return EventPage(
            entries=entries[start:end],
            next_cursor={"txDigest": f"page-{end}", "eventSeq": str(end - 1)},
            has_more=end < len(entries),
        )


@pytest.fixture
def make_pool_created():
    return pool_created_event


@pytest.fixture
def make_swap():
    return swap_event


@pytest.fixture
def fake_source():
    return FakeEventSource
