"""
broadcast-time: Broadcast Time Reconciliation Service

Reconciles the device system clock, the configured timezone and the
(UTC, local) time pair received in a broadcast stream (e.g. a TV tuner).

The service:
    1. Remembers the most recent broadcast time pair (in memory only)
    2. Reports an effective (adjustedUtc, local) pair that stays correct
       even when the device timezone is misconfigured

Broadcast local time is re-derived into UTC through the device timezone
rather than trusting the broadcast UTC, so applications building time
objects from adjustedUtc display the broadcaster's wall clock.

Version: 1.0.0
"""

__version__ = "1.0.0"

from .interfaces.time_result import (
    BroadcastTimePair,
    EffectiveTime,
    ErrorCode,
    TimeSource,
)
from .engine import BroadcastAuthority, BroadcastTimeStore, TimeReconciliationEngine

__all__ = [
    "BroadcastTimePair",
    "EffectiveTime",
    "ErrorCode",
    "TimeSource",
    "BroadcastAuthority",
    "BroadcastTimeStore",
    "TimeReconciliationEngine",
    "__version__",
]
