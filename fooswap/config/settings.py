import os
import pathlib
from dotenv import load_dotenv

# Automatically load .env from project root
load_dotenv(dotenv_path=pathlib.Path(__file__).parent.parent.parent / ".env")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# ── Upstream event source ───────────────────────────────────────────────
SUI_RPC_URL = os.getenv("SUI_RPC_URL", "https://fullnode.devnet.sui.io:443")

# Move package the fooswap module is published under (devnet deployment)
DEX_PACKAGE_ID = os.getenv(
    "DEX_PACKAGE_ID",
    "0x1c2be4cfbf91fe8d71aedeb83cbe680475b70359bab87900df99ecd787ca5474",
)
DEX_MODULE = os.getenv("DEX_MODULE", "fooswap")

POOL_CREATED_EVENT = "PoolCreatedEvent"
SWAP_EVENT = "SwapEvent"

RPC_TIMEOUT_SECS = float(os.getenv("RPC_TIMEOUT_SECS", "10"))
RPC_MAX_TRIES = int(os.getenv("RPC_MAX_TRIES", "3"))

# ── Ingestion loop ──────────────────────────────────────────────────────
POLL_INTERVAL_SECS = 5
EVENTS_PER_PAGE = 100
MAX_EVENTS_PER_PAGE = 1000

INDEXER_ENABLED = _env_bool("INDEXER_ENABLED", True)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# ── Storage ─────────────────────────────────────────────────────────────
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./fooswap.db")

# ── Celery (optional beat-driven deployment of the ingestion loop) ─────
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/0")
INGEST_LOCK_MS = 5 * 60 * 1000    # must exceed the longest tick
