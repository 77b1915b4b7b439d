import threading
import typer
import uvicorn
import logging

from fooswap.ingestion.runner import build_indexer
from fooswap.sources.sui.client import close_sui_clients
from fooswap.storage.db import engine, init_db
from fooswap.utils.log_utils import configure_logging

log = logging.getLogger(__name__)

app = typer.Typer(help="fooswap indexer: Sui event ingestion and query API")


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind"),
    port: int = typer.Option(3000, help="Port to listen on"),
):
    """
    Run the HTTP API; the indexer runs alongside it on a background thread
    unless INDEXER_ENABLED=false.
    """
    uvicorn.run("fooswap.main:app", host=host, port=port, log_config=None)


@app.command("index")
def index():
    """Run the ingestion loop in the foreground until interrupted."""
    configure_logging()
    init_db(engine)
    indexer = build_indexer()
    stop = threading.Event()
    try:
        indexer.run_forever(stop)
    except KeyboardInterrupt:
        log.info("[cli] Interrupted, stopping indexer")
        stop.set()
    finally:
        close_sui_clients()


@app.command("tick")
def tick():
    """Run exactly one ingestion tick and report what it applied."""
    configure_logging()
    init_db(engine)
    indexer = build_indexer()
    try:
        report = indexer.tick()
    finally:
        close_sui_clients()

    if report is None:
        log.error(f"[cli] Tick failed: {indexer.context.last_error}")
        raise typer.Exit(code=1)
    log.info(f"[cli] Tick completed: {report.as_dict()}")


def main():
    app()


if __name__ == "__main__":
    main()
