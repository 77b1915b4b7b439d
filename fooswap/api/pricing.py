from decimal import Decimal
from typing import Tuple

from fooswap.errors import BadRequest, ZeroReserve
from fooswap.storage.queries import PoolMatch


def parse_pair(pair: str) -> Tuple[str, str]:
    """``"USDC/SUI"`` → ``("USDC", "SUI")``"""
    parts = [p.strip() for p in pair.split("/")]
    if len(parts) != 2 or not all(parts):
        raise BadRequest("Query parameter `pair` must be in the form TOKENA/TOKENB")
    return parts[0], parts[1]


def spot_price(match: PoolMatch) -> Decimal:
    """Constant-product spot price of the requested base in the requested quote.

    Direct orientation: reserve_b / reserve_a. Reversed: reserve_a / reserve_b.
    """
    pool = match.pool
    numerator, denominator = (
        (pool.reserve_a, pool.reserve_b) if match.reversed else (pool.reserve_b, pool.reserve_a)
    )
    if not denominator:
        raise ZeroReserve(f"Pool {pool.pool_id} has an empty reserve; price is undefined")
    return Decimal(numerator) / Decimal(denominator)
