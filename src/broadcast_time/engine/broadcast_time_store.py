"""
In-memory slot for the last broadcast time pair.

The pair is either absent or complete: set() swaps in a new immutable
BroadcastTimePair under a lock, so readers never see a half-written value.
Nothing survives a process restart.
"""

import logging
import threading
from typing import Optional

from ..interfaces.time_result import BroadcastTimePair

logger = logging.getLogger(__name__)


class BroadcastTimeStore:
    """Holds zero or one BroadcastTimePair, last write wins."""

    def __init__(self):
        self._lock = threading.Lock()
        self._pair: Optional[BroadcastTimePair] = None

    def set(self, utc: int, local: int):
        """Overwrite the stored pair. No range validation."""
        pair = BroadcastTimePair(utc=utc, local=local)
        with self._lock:
            self._pair = pair
        logger.debug(f"Broadcast time stored: utc={utc}, local={local}")

    def get(self) -> Optional[BroadcastTimePair]:
        """Current pair, or None if no broadcast time was ever set."""
        with self._lock:
            return self._pair

    @property
    def available(self) -> bool:
        return self.get() is not None
