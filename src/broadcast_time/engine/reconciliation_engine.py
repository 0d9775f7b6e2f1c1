"""
Time Reconciliation Engine

Answers "what time is it, reconciled" for applications that rely on
broadcast time.

Decision policy:

    broadcast NOT authoritative
        adjusted_utc = system clock
        local        = system clock rendered through the device timezone

    broadcast authoritative, pair stored
        local        = stored broadcast local time
        adjusted_utc = stored local reconverted through the DEVICE timezone
                       (the broadcast utc is ignored)

    broadcast authoritative, nothing stored
        internal inconsistency: logged, counted, falls back to system clock

The broadcaster's (utc, local) pair is consistent under the broadcaster's
own timezone; what may be wrong is the device timezone. Reconverting the
broadcast wall clock through the device rules yields the UTC a device
with that timezone would report, so clients can build time objects from
adjusted_utc in the natural way and still display the broadcast local time.

Usage:
    engine = TimeReconciliationEngine(authority.is_effective)
    engine.set_broadcast_time(utc, local)
    effective = engine.get_effective_time()
"""

import logging
import threading
import time
from datetime import tzinfo
from typing import Any, Callable, Dict, Optional

from ..interfaces.time_result import BroadcastTimePair, EffectiveTime, TimeSource
from ..timing.local_time import INVALID_TIME, reinterpret_as_local, reinterpret_as_utc
from .broadcast_time_store import BroadcastTimeStore

logger = logging.getLogger(__name__)


class BroadcastAuthority:
    """
    Thread-safe "is broadcast time authoritative" flag.

    The owning service decides when broadcast time takes over from the
    user-set clock; this holder only carries the decision to the engine.
    """

    def __init__(self, effective: bool = False):
        self._lock = threading.Lock()
        self._effective = bool(effective)

    def set(self, effective: bool):
        with self._lock:
            changed = self._effective != bool(effective)
            self._effective = bool(effective)
        if changed:
            logger.info(f"Broadcast time authoritative: {bool(effective)}")

    def is_effective(self) -> bool:
        with self._lock:
            return self._effective


class TimeReconciliationEngine:
    """
    Reconciles system clock, device timezone and broadcast time.

    No method raises for the expected outcomes: missing broadcast time and
    conversion failures are reported as None.
    """

    def __init__(
        self,
        is_broadcast_effective: Callable[[], bool],
        store: Optional[BroadcastTimeStore] = None,
        tz: Optional[tzinfo] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize the engine.

        Args:
            is_broadcast_effective: Callable telling whether broadcast time
                                    is currently authoritative
            store: Broadcast time store (default: new empty store)
            tz: Device timezone (default: system timezone)
            clock: Source of the current UTC time in seconds
        """
        self.is_broadcast_effective = is_broadcast_effective
        self.store = store if store is not None else BroadcastTimeStore()
        self.tz = tz
        self.clock = clock

        self._stats_lock = threading.Lock()
        self.stats: Dict[str, Any] = {
            'start_time': time.time(),
            'broadcast_sets': 0,
            'broadcast_queries': 0,
            'effective_queries': 0,
            'broadcast_effective_answers': 0,
            'inconsistencies': 0,
            'compute_failures': 0,
        }

    def _count(self, key: str):
        with self._stats_lock:
            self.stats[key] += 1

    def set_broadcast_time(self, utc: int, local: int):
        """Record the time pair received in the broadcast signal."""
        self.store.set(utc, local)
        self._count('broadcast_sets')

    def get_broadcast_time(self) -> Optional[BroadcastTimePair]:
        """
        Stored broadcast pair, unmodified.

        Returns:
            BroadcastTimePair, or None if no broadcast time was received
        """
        self._count('broadcast_queries')
        return self.store.get()

    def _system_time(self) -> EffectiveTime:
        adjusted_utc = int(self.clock())
        return EffectiveTime(
            adjusted_utc=adjusted_utc,
            local=reinterpret_as_local(adjusted_utc, self.tz),
            source=TimeSource.SYSTEM
        )

    def get_effective_time(self) -> Optional[EffectiveTime]:
        """
        Effective (adjusted_utc, local) for applications relying on broadcast time.

        Returns:
            EffectiveTime, or None if local time could not be computed
        """
        self._count('effective_queries')

        if not self.is_broadcast_effective():
            # just use system local time (set by user)
            effective = self._system_time()
        else:
            pair = self.store.get()
            if pair is None:
                self._count('inconsistencies')
                logger.warning(
                    "Internal logic error: broadcast time reported effective "
                    "but none is stored, falling back to system time"
                )
                effective = self._system_time()
            else:
                self._count('broadcast_effective_answers')
                effective = EffectiveTime(
                    adjusted_utc=reinterpret_as_utc(pair.local, self.tz),
                    local=pair.local,
                    source=TimeSource.BROADCAST
                )

        if effective.local == INVALID_TIME or effective.adjusted_utc == INVALID_TIME:
            self._count('compute_failures')
            logger.error(
                f"Failed to get local time ({effective.source.value}): "
                f"adjusted_utc={effective.adjusted_utc}, local={effective.local}"
            )
            return None

        return effective

    def get_status(self) -> Dict[str, Any]:
        """Snapshot of engine state for status reporting."""
        pair = self.store.get()
        with self._stats_lock:
            stats = dict(self.stats)
        return {
            'broadcast_available': pair is not None,
            'broadcast_time': pair.to_dict() if pair else None,
            'broadcast_effective': bool(self.is_broadcast_effective()),
            'uptime_seconds': time.time() - stats.pop('start_time'),
            'stats': stats,
        }
