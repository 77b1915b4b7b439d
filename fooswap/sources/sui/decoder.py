# decoder.py
# --------------------------------------------------------------
# Decode fooswap Move events (PoolCreatedEvent / SwapEvent) from
# the JSON envelope returned by suix_queryEvents.
# --------------------------------------------------------------
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional, Union

from fooswap.config.settings import POOL_CREATED_EVENT, SWAP_EVENT
from fooswap.errors import MalformedEvent
from fooswap.sources.sui.events import struct_name


@dataclass(frozen=True)
class PoolCreated:
    pool_id: str
    token_a: str
    token_b: str
    reserve_a: Decimal
    reserve_b: Decimal
    timestamp: int
    tx_digest: str


@dataclass(frozen=True)
class SwapOccurred:
    pool_id: str
    sender: Optional[str]
    amount_in: Decimal
    amount_out: Decimal
    # post-swap reserves as emitted by the contract, never recomputed here
    reserve_a: Decimal
    reserve_b: Decimal
    timestamp: int
    tx_digest: str


DecodedEvent = Union[PoolCreated, SwapOccurred]


def _text(parsed: Dict[str, Any], key: str, digest: str) -> str:
    value = parsed.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedEvent(f"field {key!r} must be a non-empty string", digest)
    return value.strip()


def _token(parsed: Dict[str, Any], key: str, digest: str) -> str:
    # std::type_name::TypeName serialises as {"name": "..."}
    value = parsed.get(key)
    if isinstance(value, dict):
        return _text(value, "name", digest)
    return _text(parsed, key, digest)


def _amount(parsed: Dict[str, Any], key: str, digest: str) -> Decimal:
    """u64 values arrive as decimal strings; plain JSON numbers are tolerated."""
    value = parsed.get(key)
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise MalformedEvent(f"field {key!r} is missing or not numeric", digest)
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise MalformedEvent(f"field {key!r} is not a number: {value!r}", digest) from None
    if not amount.is_finite() or amount < 0:
        raise MalformedEvent(f"field {key!r} must be a finite non-negative amount", digest)
    return amount


def _timestamp(value: Any, digest: str) -> int:
    if isinstance(value, bool):
        raise MalformedEvent("timestampMs is not an integer", digest)
    if isinstance(value, int):
        ts = value
    elif isinstance(value, str) and value.strip().isascii() and value.strip().isdigit():
        # ascii only: isdigit() alone lets through "²", which int() rejects
        ts = int(value.strip())
    else:
        raise MalformedEvent(f"timestampMs missing or invalid: {value!r}", digest)
    if ts < 0:
        raise MalformedEvent("timestampMs is negative", digest)
    return ts


def decode(raw: Dict[str, Any]) -> DecodedEvent:
    """
    Turn one raw Sui event into a typed record.

    Raises
    ------
    MalformedEvent
        Envelope or payload does not match either known event shape.
        Unknown event kinds are reported too, so schema drift is visible.
    """
    if not isinstance(raw, dict):
        raise MalformedEvent("event envelope is not a JSON object")

    # ─── envelope ───────────────────────────────────────────────────────
    ident = raw.get("id")
    digest = ident.get("txDigest") if isinstance(ident, dict) else None
    if not isinstance(digest, str) or not digest:
        raise MalformedEvent("event has no id.txDigest")

    move_type = raw.get("type")
    if not isinstance(move_type, str) or not move_type:
        raise MalformedEvent("event has no type", digest)

    parsed = raw.get("parsedJson")
    if not isinstance(parsed, dict):
        raise MalformedEvent("event has no parsedJson object", digest)

    ts = _timestamp(raw.get("timestampMs"), digest)
    kind = struct_name(move_type)

    # ─── payload ────────────────────────────────────────────────────────
    if kind == POOL_CREATED_EVENT:
        return PoolCreated(
            pool_id=_text(parsed, "pool_id", digest),
            token_a=_token(parsed, "token_a", digest),
            token_b=_token(parsed, "token_b", digest),
            reserve_a=_amount(parsed, "initial_reserve_a", digest),
            reserve_b=_amount(parsed, "initial_reserve_b", digest),
            timestamp=ts,
            tx_digest=digest,
        )

    if kind == SWAP_EVENT:
        sender = parsed.get("sender") or raw.get("sender")
        return SwapOccurred(
            pool_id=_text(parsed, "pool_id", digest),
            sender=sender if isinstance(sender, str) else None,
            amount_in=_amount(parsed, "amount_in", digest),
            amount_out=_amount(parsed, "amount_out", digest),
            reserve_a=_amount(parsed, "new_reserve_a", digest),
            reserve_b=_amount(parsed, "new_reserve_b", digest),
            timestamp=ts,
            tx_digest=digest,
        )

    raise MalformedEvent(f"unknown event kind {move_type!r}", digest)
