from typing import Tuple
from fooswap.config.settings import DEX_PACKAGE_ID, DEX_MODULE, POOL_CREATED_EVENT, SWAP_EVENT


def event_type(package_id: str, module: str, name: str) -> str:
    """Fully-qualified Move event type, e.g. ``0x1c2b…::fooswap::SwapEvent``."""
    return f"{package_id}::{module}::{name}"


def struct_name(move_type: str) -> str:
    """``0x1::m::Swap<0x2::sui::SUI>`` → ``Swap``"""
    return move_type.split("<", 1)[0].rsplit("::", 1)[-1]


POOL_CREATED_TYPE = event_type(DEX_PACKAGE_ID, DEX_MODULE, POOL_CREATED_EVENT)
SWAP_TYPE = event_type(DEX_PACKAGE_ID, DEX_MODULE, SWAP_EVENT)

# Pool creation first so swaps normally land on an existing pool row.
EVENT_TYPES: Tuple[str, ...] = (POOL_CREATED_TYPE, SWAP_TYPE)
