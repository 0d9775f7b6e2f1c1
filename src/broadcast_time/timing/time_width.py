"""
Native time_t Width Handling

Broadcast timestamps travel as JSON integers but are held by the platform
as time_t, which is 32 or 64 bits wide. Every value crossing the wire is
checked against the native width with the matching struct format, so a
64-bit value is never silently truncated into a 32-bit field.

    TIME_T_SIZE    4 or 8 (bytes)
    TIME_T_FORMAT  'i' or 'q' (struct format character)
"""

import ctypes
import struct
import sys
from typing import Any


def time_t_format(size: int) -> str:
    """struct format character for a time_t of `size` bytes ('i' or 'q')."""
    return 'i' if size <= struct.calcsize('=i') else 'q'


def _native_time_t_size() -> int:
    # ctypes.c_time_t exists on Python 3.12+
    if hasattr(ctypes, 'c_time_t'):
        return ctypes.sizeof(ctypes.c_time_t)
    # MSVC time_t is 64-bit while long stays 32-bit
    if sys.platform == 'win32':
        return 8
    # c_long matches time_t on LP64/ILP32 POSIX
    return ctypes.sizeof(ctypes.c_long)


TIME_T_SIZE = _native_time_t_size()
TIME_T_FORMAT = time_t_format(TIME_T_SIZE)
TIME_T_BITS = struct.calcsize('=' + TIME_T_FORMAT) * 8
TIME_T_MIN = -(1 << (TIME_T_BITS - 1))
TIME_T_MAX = (1 << (TIME_T_BITS - 1)) - 1


class TimeRangeError(OverflowError):
    """Value does not fit the platform's native time_t."""


def _check(value: int) -> int:
    try:
        struct.pack('=' + TIME_T_FORMAT, value)
    except struct.error as e:
        raise TimeRangeError(
            f"{value} does not fit a {TIME_T_BITS}-bit time_t"
        ) from e
    return value


def to_time_t(value: Any) -> int:
    """
    Convert a decoded wire value to a native time value.

    Only JSON integers are accepted; floats (1.0 included), strings and
    booleans are rejected.

    Raises:
        TypeError: value is not an integer
        TimeRangeError: value does not fit the native width
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"time value must be an integer, got {type(value).__name__}")
    return _check(value)


def to_wire(value: int) -> int:
    """
    Prepare a native time value for JSON encoding.

    Raises:
        TimeRangeError: value does not fit the native width
    """
    return _check(int(value))
