from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple
import copy
import threading
import time

from fooswap.sources.sui.events import EVENT_TYPES


class LoopState(Enum):
    IDLE = "idle"
    POLLING = "polling"


@dataclass
class IngestionContext:
    """Everything the ingestion loop remembers between ticks.

    Cursors live in memory only. A fresh context starts every event type
    from the beginning of the feed; re-ingesting is a no-op thanks to the
    ``tx_digest`` constraint.
    """
    event_types: Tuple[str, ...] = EVENT_TYPES
    cursors: Dict[str, Optional[Dict[str, Any]]] = field(default_factory=dict)
    has_more: Dict[str, bool] = field(default_factory=dict)
    state: LoopState = LoopState.IDLE
    ticks: int = 0
    failed_ticks: int = 0
    last_tick_at: Optional[float] = None
    last_error: Optional[str] = None
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def cursor_for(self, event_type: str) -> Optional[Dict[str, Any]]:
        return self.cursors.get(event_type)

    def advance(self, event_type: str, next_cursor: Optional[Dict[str, Any]], has_more: bool) -> None:
        # an empty page reports no cursor; keep the position we already have
        with self._lock:
            if next_cursor is not None:
                self.cursors[event_type] = next_cursor
            self.has_more[event_type] = has_more

    def set_state(self, state: LoopState) -> None:
        with self._lock:
            self.state = state

    def record_success(self) -> None:
        with self._lock:
            self.ticks += 1
            self.last_tick_at = time.time()
            self.last_error = None

    def record_failure(self, error: BaseException) -> None:
        with self._lock:
            self.ticks += 1
            self.failed_ticks += 1
            self.last_tick_at = time.time()
            self.last_error = f"{type(error).__name__}: {error}"

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "state": self.state.value,
                "ticks": self.ticks,
                "failed_ticks": self.failed_ticks,
                "last_tick_at": self.last_tick_at,
                "last_error": self.last_error,
                "cursors": copy.deepcopy(self.cursors),
                "has_more": dict(self.has_more),
            }
