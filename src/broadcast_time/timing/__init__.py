"""
Time conversion helpers for broadcast-time.

Local/UTC reinterpretation of broadcast timestamps and native time_t width
handling for the wire representation.
"""

from .local_time import (
    INVALID_TIME,
    TimeConversionError,
    reinterpret_as_local,
    reinterpret_as_utc,
    resolve_timezone,
)
from .time_width import TIME_T_SIZE, TimeRangeError, to_time_t, to_wire

__all__ = [
    'INVALID_TIME',
    'TimeConversionError',
    'reinterpret_as_local',
    'reinterpret_as_utc',
    'resolve_timezone',
    'TIME_T_SIZE',
    'TimeRangeError',
    'to_time_t',
    'to_wire',
]
