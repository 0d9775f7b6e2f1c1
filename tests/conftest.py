"""
Pytest configuration and fixtures for broadcast-time tests.
"""

import os
import pytest
import sys
import time
from pathlib import Path
from zoneinfo import ZoneInfo

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))


# 2024-01-15 12:00:00 UTC (winter: New York on EST, -5h)
WINTER_UTC = 1705320000
# 2024-07-01 12:00:00 UTC (summer: New York on EDT, -4h)
SUMMER_UTC = 1719835200


@pytest.fixture
def new_york():
    return ZoneInfo('America/New_York')


@pytest.fixture
def tokyo():
    """Fixed +9h zone without DST."""
    return ZoneInfo('Asia/Tokyo')


@pytest.fixture
def system_timezone():
    """
    Set the process timezone (TZ + tzset) for the duration of a test.

    Uses POSIX TZ strings so no zoneinfo files are needed.
    """
    if not hasattr(time, 'tzset'):
        pytest.skip("time.tzset not available on this platform")

    original = os.environ.get('TZ')

    def _set(tz_string):
        os.environ['TZ'] = tz_string
        time.tzset()

    yield _set

    if original is None:
        os.environ.pop('TZ', None)
    else:
        os.environ['TZ'] = original
    time.tzset()


@pytest.fixture
def fixed_clock():
    """Clock returning WINTER_UTC plus a fractional second."""
    return lambda: WINTER_UTC + 0.75


@pytest.fixture
def store():
    from broadcast_time.engine import BroadcastTimeStore
    return BroadcastTimeStore()
