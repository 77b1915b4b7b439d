from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import sessionmaker
import logging

from fooswap.config.settings import DATABASE_URL
from fooswap.storage.base import Base
# registers both tables on Base.metadata
from fooswap.storage.models.pools import Pool  # noqa: F401
from fooswap.storage.models.swaps import Swap  # noqa: F401

log = logging.getLogger(__name__)


def make_engine(database_url: str) -> Engine:
    """Engine for the indexer's two tables.

    SQLite runs in WAL mode so API readers keep going while the indexer
    thread commits; every other backend gets a pre-pinged connection pool.
    """
    if make_url(database_url).get_backend_name() == "sqlite":
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

        return engine

    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def init_db(engine: Engine) -> None:
    """Check the connection and create ``pools`` / ``swaps`` if missing."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    Base.metadata.create_all(bind=engine)
    log.info(f"Database ready at {engine.url.render_as_string(hide_password=True)}")


engine = make_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
