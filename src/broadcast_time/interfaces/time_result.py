"""
Broadcast Time Data Models

These dataclasses define the contract between broadcast-time and its
callers. Replies follow the request/response convention of the device
services: every reply carries "returnValue", failures add "errorCode"
and "errorText".

Contract Version: 1.0.0
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Dict

from ..timing.time_width import to_wire


class TimeSource(str, Enum):
    """Where an effective time came from."""
    SYSTEM = "SYSTEM"         # System clock rendered through the device timezone
    BROADCAST = "BROADCAST"   # Stored broadcast local time


class ErrorCode(IntEnum):
    """Error codes reported in failure replies."""
    COMPUTE_FAILURE = -1      # Conversion produced the non-representable sentinel
    NOT_AVAILABLE = -2        # No broadcast time recorded yet
    INVALID_REQUEST = -3      # Request failed validation


ERROR_TEXT = {
    ErrorCode.COMPUTE_FAILURE: "Failed to get localtime",
    ErrorCode.NOT_AVAILABLE: "No information available",
}


@dataclass(frozen=True)
class BroadcastTimePair:
    """
    Last time pair received from the broadcast signal.

    `local` is the broadcaster's wall-clock reading encoded as seconds
    since epoch, not a real instant.
    """
    utc: int
    local: int

    def to_dict(self) -> Dict[str, int]:
        return {'utc': to_wire(self.utc), 'local': to_wire(self.local)}


@dataclass(frozen=True)
class EffectiveTime:
    """Reconciled time reported to consumers."""
    adjusted_utc: int
    local: int
    source: TimeSource = TimeSource.SYSTEM

    def to_dict(self) -> Dict[str, int]:
        return {'adjustedUtc': to_wire(self.adjusted_utc), 'local': to_wire(self.local)}


def success_reply(**fields: Any) -> Dict[str, Any]:
    """Build a success reply with optional payload fields."""
    reply: Dict[str, Any] = {'returnValue': True}
    reply.update(fields)
    return reply


def error_reply(code: ErrorCode, text: str = "") -> Dict[str, Any]:
    """Build a failure reply."""
    return {
        'returnValue': False,
        'errorCode': int(code),
        'errorText': text or ERROR_TEXT.get(code, ""),
    }
