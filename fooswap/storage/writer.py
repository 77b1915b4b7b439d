from decimal import Decimal
from enum import Enum
from typing import Optional
import logging

import sqlalchemy as sa
from sqlalchemy import func, Table
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from fooswap.storage.models.pools import Pool
from fooswap.storage.models.swaps import Swap

log = logging.getLogger(__name__)


class SwapInsert(Enum):
    INSERTED = "inserted"
    ALREADY_PROCESSED = "already_processed"


def _insert(db: Session, table: Table):
    """Dialect-specific INSERT so ON CONFLICT is available on both backends."""
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return pg_insert(table)
    if dialect == "sqlite":
        return sqlite_insert(table)
    raise NotImplementedError(f"Upserts are not implemented for dialect {dialect!r}")


def upsert_pool(
    db: Session,
    pool_id: str,
    token_a: Optional[str],
    token_b: Optional[str],
    reserve_a: Decimal,
    reserve_b: Decimal,
    updated_at: int,
    from_creation: bool = False,
) -> None:
    """
    Insert a pool row or move an existing one to the given reserves.

    Reserves only move forward in event time: an incoming row whose
    ``updated_at`` is older than the stored ``last_updated`` leaves them
    untouched, so replaying the feed after a restart cannot roll a pool back
    to its creation reserves. A creation event only wins over a strictly
    older row: Sui stamps events with the checkpoint time, so a swap in the
    same checkpoint as the creation shares its timestamp and must keep its
    post-swap reserves on replay. Token ids are filled in once and never
    overwritten; swaps pass ``None`` because their payload carries none.

    Executes in the caller's transaction, does not commit.
    """
    table = Pool.__table__
    stmt = _insert(db, table).values(
        pool_id=pool_id,
        token_a=token_a or "",
        token_b=token_b or "",
        reserve_a=reserve_a,
        reserve_b=reserve_b,
        last_updated=updated_at,
    )
    if from_creation:
        newer = stmt.excluded.last_updated > table.c.last_updated
    else:
        newer = stmt.excluded.last_updated >= table.c.last_updated
    stmt = stmt.on_conflict_do_update(
        index_elements=["pool_id"],
        set_={
            "token_a": func.coalesce(func.nullif(table.c.token_a, ""), stmt.excluded.token_a),
            "token_b": func.coalesce(func.nullif(table.c.token_b, ""), stmt.excluded.token_b),
            "reserve_a": sa.case((newer, stmt.excluded.reserve_a), else_=table.c.reserve_a),
            "reserve_b": sa.case((newer, stmt.excluded.reserve_b), else_=table.c.reserve_b),
            "last_updated": sa.case((newer, stmt.excluded.last_updated), else_=table.c.last_updated),
        },
    )
    db.execute(stmt)


def insert_swap(
    db: Session,
    pool_id: str,
    amount_in: Decimal,
    amount_out: Decimal,
    timestamp: int,
    tx_digest: str,
    sender: Optional[str] = None,
) -> SwapInsert:
    """Insert one swap row unless ``tx_digest`` is already stored.

    The UNIQUE constraint on ``tx_digest`` is the only dedup mechanism, so
    two concurrent attempts still end with exactly one row.
    """
    stmt = (
        _insert(db, Swap.__table__)
        .values(
            pool_id=pool_id,
            sender=sender,
            amount_in=amount_in,
            amount_out=amount_out,
            timestamp=timestamp,
            tx_digest=tx_digest,
        )
        .on_conflict_do_nothing(index_elements=["tx_digest"])
    )
    result = db.execute(stmt)
    if result.rowcount == 0:
        log.debug(f"swap {tx_digest} already processed")
        return SwapInsert.ALREADY_PROCESSED
    return SwapInsert.INSERTED
