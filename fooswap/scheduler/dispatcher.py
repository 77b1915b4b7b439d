from celery import shared_task
from redis import Redis
from redlock import Redlock
from typing import Optional
import logging

from fooswap.config.settings import CELERY_BROKER_URL, INGEST_LOCK_MS
from fooswap.ingestion.runner import IndexerLoop, build_indexer
from fooswap.storage.db import engine, init_db

log = logging.getLogger(__name__)

INGEST_LOCK = "fooswap_ingest_lock"

# ── per worker process ─────────────────────────────────────────────────
_locker: Optional[Redlock] = None
_indexer: Optional[IndexerLoop] = None


def get_locker() -> Redlock:
    global _locker
    if _locker is None:
        # one attempt: a held lock means a tick is already running
        _locker = Redlock([Redis.from_url(CELERY_BROKER_URL)], retry_count=1)
    return _locker


def get_worker_indexer() -> IndexerLoop:
    """The worker's indexer; its context (cursors) survives between beats."""
    global _indexer
    if _indexer is None:
        init_db(engine)
        _indexer = build_indexer()
    return _indexer


@shared_task(name="ingest_tick", queue="ingest", bind=True)
def ingest_tick(self) -> dict:
    locker = get_locker()
    lock = locker.lock(INGEST_LOCK, INGEST_LOCK_MS)
    if not lock:
        log.info("🔒 Another ingest tick is running; skipping.")
        return {"skipped": True, "ok": False, "report": None}

    try:
        report = get_worker_indexer().tick()
    finally:
        locker.unlock(lock)

    return {
        "skipped": False,
        "ok": report is not None,
        "report": report.as_dict() if report is not None else None,
    }
