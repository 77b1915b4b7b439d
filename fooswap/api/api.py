from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import Optional

from fooswap.api.pricing import parse_pair, spot_price
from fooswap.api.schemas import (
    PoolOut,
    PoolsResponse,
    PriceResponse,
    StatusResponse,
    SwapOut,
    SwapsResponse,
)
from fooswap.errors import BadRequest
from fooswap.storage.db import get_db
from fooswap.storage.queries import find_pool_by_tokens, list_pools, list_swaps

router = APIRouter()


@router.get("/pools", response_model=PoolsResponse)
def read_pools(db: Session = Depends(get_db)):
    return PoolsResponse(data=[PoolOut.model_validate(p) for p in list_pools(db)])


@router.get("/swaps/{pool_id}", response_model=SwapsResponse)
def read_swaps(
    pool_id: str,
    limit: Optional[int] = Query(None, ge=1, description="Keep only the most recent N swaps"),
    db: Session = Depends(get_db),
):
    # unknown pools are an empty history, not a 404
    swaps = list_swaps(db, pool_id, limit=limit)
    return SwapsResponse(data=[SwapOut.model_validate(s) for s in swaps])


@router.get("/price", response_model=PriceResponse)
def read_price(
    pair: Optional[str] = Query(None, description="Token pair, e.g. USDC/SUI"),
    db: Session = Depends(get_db),
):
    if not pair:
        raise BadRequest("Missing `pair` query parameter")
    token_a, token_b = parse_pair(pair)
    found = find_pool_by_tokens(db, token_a, token_b)
    return PriceResponse(pair=pair, pool_id=found.pool.pool_id, price=float(spot_price(found)))


@router.get("/status", response_model=StatusResponse)
def read_status(request: Request):
    """Cursor and counters of the indexer running in this process, if any."""
    indexer = getattr(request.app.state, "indexer", None)
    return StatusResponse(data=indexer.context.snapshot() if indexer is not None else None)
