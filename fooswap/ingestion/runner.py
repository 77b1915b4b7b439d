from dataclasses import asdict, dataclass
from enum import Enum
from typing import Callable, Optional
import logging
import threading
import time

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fooswap.config.settings import EVENTS_PER_PAGE, POLL_INTERVAL_SECS, SUI_RPC_URL
from fooswap.errors import MalformedEvent, SourceUnavailable, StorageError
from fooswap.ingestion.context import IngestionContext, LoopState
from fooswap.sources.sui.client import SuiEventClient, get_sui_client
from fooswap.sources.sui.decoder import DecodedEvent, PoolCreated, SwapOccurred, decode
from fooswap.sources.sui.events import struct_name
from fooswap.storage.db import SessionLocal
from fooswap.storage.writer import SwapInsert, insert_swap, upsert_pool

log = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


class ApplyOutcome(Enum):
    POOL_UPSERTED = "pool_upserted"
    SWAP_APPLIED = "swap_applied"
    SWAP_DUPLICATE = "swap_duplicate"


@dataclass
class TickReport:
    pages: int = 0
    events: int = 0
    pools_upserted: int = 0
    swaps_applied: int = 0
    swaps_duplicate: int = 0
    malformed: int = 0

    def count(self, outcome: ApplyOutcome) -> None:
        match outcome:
            case ApplyOutcome.POOL_UPSERTED:
                self.pools_upserted += 1
            case ApplyOutcome.SWAP_APPLIED:
                self.swaps_applied += 1
            case ApplyOutcome.SWAP_DUPLICATE:
                self.swaps_duplicate += 1

    def as_dict(self) -> dict:
        return asdict(self)


def apply_event(db: Session, event: DecodedEvent) -> ApplyOutcome:
    """
    Persist one decoded event as a single transaction.

    A swap writes its row and, only if the row is new, moves the pool to
    the reserves the swap carried. Both land in the same commit.

    Raises
    ------
    StorageError
        Any database failure; the transaction is rolled back first.
    """
    try:
        match event:
            case PoolCreated():
                upsert_pool(
                    db, event.pool_id, event.token_a, event.token_b,
                    event.reserve_a, event.reserve_b, event.timestamp,
                    from_creation=True,
                )
                outcome = ApplyOutcome.POOL_UPSERTED
            case SwapOccurred():
                inserted = insert_swap(
                    db, event.pool_id, event.amount_in, event.amount_out,
                    event.timestamp, event.tx_digest, sender=event.sender,
                )
                if inserted is SwapInsert.ALREADY_PROCESSED:
                    outcome = ApplyOutcome.SWAP_DUPLICATE
                else:
                    upsert_pool(
                        db, event.pool_id, None, None,
                        event.reserve_a, event.reserve_b, event.timestamp,
                    )
                    outcome = ApplyOutcome.SWAP_APPLIED
            case _:
                raise TypeError(f"Unsupported event record: {event!r}")
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise StorageError(f"Failed to apply event {event.tx_digest}: {e}") from e
    return outcome


def _drain_event_type(
    db: Session,
    context: IngestionContext,
    client: SuiEventClient,
    event_type: str,
    page_size: int,
    report: TickReport,
) -> None:
    name = struct_name(event_type)
    cursor = context.cursor_for(event_type)
    while True:
        page = client.fetch_page(event_type, cursor, page_size)
        report.pages += 1
        log.info(f"----Fetched {len(page.entries)} {name} events (has_more={page.has_more})")

        # apply as we go: a failure further down keeps what is already committed
        for raw in page.entries:
            report.events += 1
            try:
                event = decode(raw)
            except MalformedEvent as e:
                report.malformed += 1
                log.warning(f"Skipping malformed {name} event: {e}")
                continue
            report.count(apply_event(db, event))

        context.advance(event_type, page.next_cursor, page.has_more)
        if not page.has_more:
            return
        if page.next_cursor is None or page.next_cursor == cursor:
            raise SourceUnavailable(f"{name}: source reports more pages but the cursor did not move")
        cursor = page.next_cursor


def run_tick(
    context: IngestionContext,
    client: SuiEventClient,
    session_factory: SessionFactory,
    page_size: int = EVENTS_PER_PAGE,
) -> TickReport:
    """One polling pass: drain every event type from its cursor, in order.

    ``SourceUnavailable`` and ``StorageError`` abort the pass and propagate;
    malformed entries are skipped and counted.
    """
    report = TickReport()
    context.set_state(LoopState.POLLING)
    try:
        with session_factory() as db:
            for event_type in context.event_types:
                _drain_event_type(db, context, client, event_type, page_size, report)
    finally:
        context.set_state(LoopState.IDLE)
    return report


class IndexerLoop:
    """Fixed-interval poller: tick, sleep ``interval``, repeat.

    Failed ticks are logged and retried on the next interval. There is no
    backoff; ticks never overlap because they run on one thread.
    """

    def __init__(
        self,
        client: SuiEventClient,
        session_factory: SessionFactory,
        context: Optional[IngestionContext] = None,
        interval: float = POLL_INTERVAL_SECS,
        page_size: int = EVENTS_PER_PAGE,
    ):
        self.client = client
        self.session_factory = session_factory
        self.context = context or IngestionContext()
        self.interval = interval
        self.page_size = page_size
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def tick(self) -> Optional[TickReport]:
        started = time.time()
        try:
            report = run_tick(self.context, self.client, self.session_factory, self.page_size)
        except SourceUnavailable as e:
            log.error(f"Event source unavailable, retrying in {self.interval}s: {e}")
            self.context.record_failure(e)
            return None
        except StorageError as e:
            log.error(f"Storage failure, tick aborted: {e}")
            self.context.record_failure(e)
            return None
        except Exception as e:
            log.exception("Unexpected error during ingestion tick")
            self.context.record_failure(e)
            return None

        self.context.record_success()
        duration = time.time() - started
        log.info(
            f"[tick] {report.events} events in {report.pages} pages "
            f"({report.pools_upserted} pools, {report.swaps_applied} swaps, "
            f"{report.swaps_duplicate} duplicates, {report.malformed} malformed) "
            f"duration: {duration:.2f}s"
        )
        return report

    def run_forever(self, stop_event: Optional[threading.Event] = None) -> None:
        stop_event = stop_event or self._stop
        log.info(f"🔄  Indexer polling every {self.interval}s")
        while not stop_event.is_set():
            self.tick()
            stop_event.wait(self.interval)
        log.info("Indexer stopped")

    def start(self) -> threading.Thread:
        if self._thread is not None and self._thread.is_alive():
            return self._thread
        self._stop.clear()
        self._thread = threading.Thread(
            target=self.run_forever, args=(self._stop,), name="fooswap-indexer", daemon=True
        )
        self._thread.start()
        return self._thread

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None


def build_indexer(context: Optional[IngestionContext] = None) -> IndexerLoop:
    """Indexer wired to the configured RPC endpoint and database."""
    return IndexerLoop(get_sui_client(SUI_RPC_URL), SessionLocal, context=context)
