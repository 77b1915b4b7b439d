# fooswap/main.py
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
import logging

from fooswap.api import api
from fooswap.api.schemas import ErrorResponse
from fooswap.config.settings import INDEXER_ENABLED
from fooswap.errors import QueryError
from fooswap.ingestion.runner import build_indexer
from fooswap.sources.sui.client import close_sui_clients
from fooswap.storage.db import engine, init_db
from fooswap.utils.log_utils import configure_logging

configure_logging()
log = logging.getLogger(__name__)

app = FastAPI(title="fooswap indexer", description="Pool reserves and swap history indexed from Sui events")
app.state.indexer = None

app.include_router(api.router, prefix="/api")


@app.exception_handler(QueryError)
async def query_error_handler(request: Request, exc: QueryError):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=exc.message).model_dump(),
    )


@app.get("/health", response_class=PlainTextResponse)
def health():
    return "OK"


@app.on_event("startup")
def open_storage_and_start_indexer():
    # storage is the one thing we cannot run without: let the error stop startup
    try:
        init_db(engine)
        log.info("✅ Database connected.")
    except Exception as e:
        log.error(f"❌ DB connection failed: {e}")
        raise

    if INDEXER_ENABLED:
        app.state.indexer = build_indexer()
        app.state.indexer.start()
    else:
        log.info("Indexer disabled; serving reads only")


@app.on_event("shutdown")
def stop_indexer():
    indexer = app.state.indexer
    if indexer is not None:
        indexer.stop(timeout=indexer.interval * 2)
        close_sui_clients()
        app.state.indexer = None
