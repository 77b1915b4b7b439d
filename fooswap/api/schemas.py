# schemas.py
from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Optional


class PoolOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    pool_id: str
    token_a: str
    token_b: str
    # JSON numbers, not Decimal strings
    reserve_a: float
    reserve_b: float
    last_updated: int


class SwapOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    pool_id: str
    sender: Optional[str] = None
    amount_in: float
    amount_out: float
    timestamp: int
    tx_digest: str


class PoolsResponse(BaseModel):
    status: str = "ok"
    data: List[PoolOut]


class SwapsResponse(BaseModel):
    status: str = "ok"
    data: List[SwapOut]


class PriceResponse(BaseModel):
    status: str = "ok"
    pair: str
    pool_id: str
    price: float


class StatusResponse(BaseModel):
    status: str = "ok"
    data: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    status: str = "error"
    message: str
