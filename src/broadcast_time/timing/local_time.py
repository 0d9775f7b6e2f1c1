"""
Local/UTC Reinterpretation Primitives

Broadcast streams report local wall-clock time as "seconds since epoch",
which is not a real instant: it is the calendar reading of a local clock
encoded as if it were UTC. These helpers move values between the two
meanings using the device's timezone rules.

    reinterpret_as_local(instant)  ->  local wall clock, encoded as UTC
    reinterpret_as_utc(local)      ->  real instant for that wall clock

Both return INVALID_TIME when the platform cannot represent the result.
The typed helpers (wall_clock / instant_from_wall_clock) do the same work
with naive datetimes and raise TimeConversionError instead.

Timezone selection:
    tz=None     process timezone (TZ environment / system configuration),
                resolved by the C library exactly as localtime()/mktime() do
    tz=ZoneInfo explicit IANA zone, ambiguous/non-existent wall clocks
                resolved with PEP 495 fold=0
"""

import calendar
import logging
import time
from datetime import datetime, tzinfo
from typing import Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)


# Non-representable time marker ((time_t)-1)
INVALID_TIME = -1


class TimeConversionError(ValueError):
    """A timestamp could not be converted between local and UTC meaning."""


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """
    Resolve a configured timezone name.

    Args:
        name: IANA timezone name, or empty/None for the system timezone

    Returns:
        ZoneInfo for the name, or None meaning "system timezone"

    Raises:
        ValueError: if the name is not a known IANA zone
    """
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name!r}") from e


def timezone_name(tz: Optional[tzinfo] = None) -> str:
    """Human-readable name of the zone used for conversions."""
    if tz is None:
        return datetime.now().astimezone().tzname() or 'system'
    return getattr(tz, 'key', None) or str(tz)


def _local_fields(instant: int, tz: Optional[tzinfo]) -> Tuple[int, ...]:
    """Break an instant down into local calendar fields (time.struct_time order)."""
    try:
        if tz is None:
            return tuple(time.localtime(instant))
        return tuple(datetime.fromtimestamp(instant, tz).timetuple())
    except (OverflowError, OSError, ValueError) as e:
        raise TimeConversionError(f"Cannot break down {instant} as local time: {e}") from e


def _instant_from_fields(fields: Tuple[int, ...], tz: Optional[tzinfo]) -> int:
    """Recompose local calendar fields into a UTC instant."""
    try:
        if tz is None:
            # tm_isdst = -1: let mktime look up the TZ rules for this date
            return int(time.mktime(tuple(fields[:8]) + (-1,)))
        local_dt = datetime(*fields[:6], tzinfo=tz)
        return calendar.timegm(local_dt.utctimetuple())
    except (OverflowError, OSError, ValueError) as e:
        raise TimeConversionError(f"Cannot convert local fields {fields[:6]} to UTC: {e}") from e


def wall_clock(instant: int, tz: Optional[tzinfo] = None) -> datetime:
    """
    Local wall-clock reading for a real instant.

    Returns:
        Naive datetime with the calendar fields of the local clock
    """
    fields = _local_fields(instant, tz)
    try:
        return datetime(*fields[:6])
    except ValueError as e:
        raise TimeConversionError(f"Local time for {instant} is outside datetime range") from e


def instant_from_wall_clock(local: datetime, tz: Optional[tzinfo] = None) -> int:
    """
    Real instant (seconds since epoch) for a naive local wall-clock reading.

    DST applicability is decided by the zone rules for that date, never
    taken from the caller.
    """
    if local.tzinfo is not None:
        raise TimeConversionError("Wall-clock time must be naive")
    return _instant_from_fields(tuple(local.timetuple()), tz)


def reinterpret_as_local(instant: int, tz: Optional[tzinfo] = None) -> int:
    """
    Encode the local wall-clock reading of `instant` as seconds since epoch.

    The instant is broken down with the local zone rules and the resulting
    calendar fields are recomposed as if they were UTC, so the result
    differs from `instant` by exactly the local UTC offset.

    Returns:
        Local time as seconds since epoch, or INVALID_TIME
    """
    try:
        return calendar.timegm(_local_fields(instant, tz))
    except TimeConversionError as e:
        logger.debug(f"reinterpret_as_local failed: {e}")
        return INVALID_TIME


def reinterpret_as_utc(local: int, tz: Optional[tzinfo] = None) -> int:
    """
    Find the real instant for a local time stored as seconds since epoch.

    The value is broken down as UTC to recover its calendar fields, which
    are then treated as a local wall-clock reading and converted with the
    local zone rules.

    Returns:
        UTC instant as seconds since epoch, or INVALID_TIME
    """
    try:
        fields = tuple(time.gmtime(local))
    except (OverflowError, OSError, ValueError) as e:
        logger.debug(f"reinterpret_as_utc failed to break down {local}: {e}")
        return INVALID_TIME
    try:
        return _instant_from_fields(fields, tz)
    except TimeConversionError as e:
        logger.debug(f"reinterpret_as_utc failed: {e}")
        return INVALID_TIME
