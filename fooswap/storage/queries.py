from typing import List, NamedTuple, Optional
import logging

import sqlalchemy as sa
from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from fooswap.errors import PoolNotFound
from fooswap.storage.models.pools import Pool
from fooswap.storage.models.swaps import Swap

log = logging.getLogger(__name__)


class PoolMatch(NamedTuple):
    pool: Pool
    # True when the pair was found as token_b/token_a
    reversed: bool


def list_pools(db: Session) -> List[Pool]:
    return list(db.execute(select(Pool).order_by(Pool.pool_id)).scalars())


def list_swaps(db: Session, pool_id: str, limit: Optional[int] = None) -> List[Swap]:
    """Swaps of one pool, oldest first.

    With ``limit`` only the most recent ``limit`` swaps are kept (still
    returned oldest first). Unknown pools simply have no swaps.
    """
    stmt = select(Swap).where(Swap.pool_id == pool_id)
    if limit is None:
        return list(db.execute(stmt.order_by(Swap.timestamp.asc(), Swap.id.asc())).scalars())

    recent = db.execute(
        stmt.order_by(Swap.timestamp.desc(), Swap.id.desc()).limit(limit)
    ).scalars().all()
    return list(reversed(recent))


def _symbol_pattern(symbol: str) -> str:
    escaped = symbol.upper().replace("/", "//").replace("%", "/%").replace("_", "/_")
    return f"%::{escaped}"


def _token_matches(column, token: str):
    """Exact identifier, or the struct name of a Move type (``USDC`` ~ ``0xab::usdc::USDC``)."""
    return or_(
        column == token,
        func.upper(column).like(_symbol_pattern(token), escape="/"),
    )


def find_pool_by_tokens(db: Session, token_a: str, token_b: str) -> PoolMatch:
    """
    Resolve the pool for a user-supplied pair, e.g. ``USDC/SUI``,
    even if the pool stores the tokens in reverse order.

    Direct orientation wins over reversed; within one orientation exact
    identifier matches win over symbol matches, then the most recently
    updated pool.

    Raises
    ------
    PoolNotFound
    """
    if not token_a or not token_b:
        raise PoolNotFound(f"No pool found for {token_a}/{token_b}")

    for first, second, is_reversed in ((token_a, token_b, False), (token_b, token_a, True)):
        exact = sa.case(
            (and_(Pool.token_a == first, Pool.token_b == second), 0),
            else_=1,
        )
        pool = db.execute(
            select(Pool)
            .where(_token_matches(Pool.token_a, first), _token_matches(Pool.token_b, second))
            .order_by(exact, Pool.last_updated.desc(), Pool.pool_id)
            .limit(1)
        ).scalars().first()
        if pool is not None:
            return PoolMatch(pool=pool, reversed=is_reversed)

    log.info(f"Pool for {token_a}/{token_b} not found in either orientation")
    raise PoolNotFound(f"No pool found for {token_a}/{token_b}")
