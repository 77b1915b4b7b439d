# celery_app.py  ─────────────────────────────────────────────────────────
# Beat-driven deployment of the ingestion loop. Run one worker on the
# "ingest" queue (`celery -A fooswap.celery.celery_app worker -Q ingest -c 1`)
# plus `celery -A fooswap.celery.celery_app beat`.
from celery import Celery

from fooswap.config.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND, POLL_INTERVAL_SECS
from fooswap.utils.log_utils import configure_logging

# ── 1.  Broker / backend  ────────────────────────────────────
celery_app = Celery(
    "fooswap_tasks",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# ── 2.  Core config, Beat & routing ─────────────────────────
celery_app.conf.update(
    task_serializer       ='json',
    result_serializer     ='json',
    accept_content        =['json'],
    timezone              ='UTC',
    enable_utc            =True,

    # --- RedBeat keeps the schedule in Redis next to the lock
    beat_scheduler        ="redbeat.RedBeatScheduler",
    redbeat_redis_url     =CELERY_BROKER_URL,

    task_routes           ={"ingest_tick": {"queue": "ingest"}},
)

# ── 3.  Beat schedule – one ingestion tick per poll interval ─────────────
# Worker processes are not recycled: the tick cursor lives in process memory.
celery_app.conf.beat_schedule = {
    "ingest-tick": {
        "task": "ingest_tick",
        "schedule": float(POLL_INTERVAL_SECS),
        # a tick nobody picked up before the next beat is stale
        "options": {"queue": "ingest", "expires": POLL_INTERVAL_SECS},
    }
}

# ── 4.  Logging ────────────────────────────────────────────
celery_app.conf.worker_hijack_root_logger = False
configure_logging()

# ── 5.  Import task modules so Celery registers them ───────────────
import fooswap.scheduler.dispatcher  # noqa: E402,F401
