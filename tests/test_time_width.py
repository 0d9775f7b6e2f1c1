"""
Unit tests for native time_t width handling.
"""

import ctypes
import struct
import sys
import pytest


class TestNativeWidth:

    def test_format_matches_size(self):
        from broadcast_time.timing.time_width import TIME_T_FORMAT, TIME_T_SIZE
        assert struct.calcsize('=' + TIME_T_FORMAT) == TIME_T_SIZE

    def test_size_is_32_or_64_bit(self):
        from broadcast_time.timing.time_width import TIME_T_BITS
        assert TIME_T_BITS in (32, 64)

    def test_bounds(self):
        from broadcast_time.timing.time_width import TIME_T_BITS, TIME_T_MAX, TIME_T_MIN
        assert TIME_T_MAX == 2 ** (TIME_T_BITS - 1) - 1
        assert TIME_T_MIN == -(2 ** (TIME_T_BITS - 1))

    def test_format_for_width(self):
        from broadcast_time.timing.time_width import time_t_format
        assert time_t_format(4) == 'i'
        assert time_t_format(8) == 'q'

    def test_windows_without_c_time_t_is_64_bit(self, monkeypatch):
        from broadcast_time.timing import time_width

        monkeypatch.delattr(ctypes, 'c_time_t', raising=False)
        monkeypatch.setattr(sys, 'platform', 'win32')
        assert time_width._native_time_t_size() == 8

    def test_posix_without_c_time_t_uses_long(self, monkeypatch):
        from broadcast_time.timing import time_width

        monkeypatch.delattr(ctypes, 'c_time_t', raising=False)
        monkeypatch.setattr(sys, 'platform', 'linux')
        assert time_width._native_time_t_size() == ctypes.sizeof(ctypes.c_long)


class TestToTimeT:

    def test_integer_passes_through(self):
        from broadcast_time.timing.time_width import to_time_t
        assert to_time_t(1705320000) == 1705320000
        assert to_time_t(-1) == -1

    @pytest.mark.parametrize('value', [1000.0, 1.5, '1000', None, True])
    def test_non_integer_rejected(self, value):
        from broadcast_time.timing.time_width import to_time_t

        with pytest.raises(TypeError):
            to_time_t(value)

    def test_limits_accepted(self):
        from broadcast_time.timing.time_width import TIME_T_MAX, TIME_T_MIN, to_time_t
        assert to_time_t(TIME_T_MAX) == TIME_T_MAX
        assert to_time_t(TIME_T_MIN) == TIME_T_MIN

    def test_out_of_range_never_truncated(self):
        from broadcast_time.timing.time_width import TIME_T_MAX, TIME_T_MIN, TimeRangeError, to_time_t

        with pytest.raises(TimeRangeError):
            to_time_t(TIME_T_MAX + 1)
        with pytest.raises(TimeRangeError):
            to_time_t(TIME_T_MIN - 1)

    def test_range_error_is_overflow_error(self):
        from broadcast_time.timing.time_width import TimeRangeError
        assert issubclass(TimeRangeError, OverflowError)


class TestToWire:

    def test_in_range(self):
        from broadcast_time.timing.time_width import to_wire
        assert to_wire(1705320000) == 1705320000

    def test_out_of_range(self):
        from broadcast_time.timing.time_width import TimeRangeError, to_wire

        with pytest.raises(TimeRangeError):
            to_wire(2 ** 70)

    @pytest.mark.skipif(
        ctypes.sizeof(getattr(ctypes, 'c_time_t', ctypes.c_long)) < 8,
        reason="requires 64-bit time_t"
    )
    def test_64bit_values_kept(self):
        from broadcast_time.timing.time_width import to_wire

        # 2106-02-07: beyond any 32-bit time_t
        assert to_wire(2 ** 32) == 2 ** 32


class TestThirtyTwoBitTimeT:
    """Checks follow the 'i' format when time_t is 32 bits wide."""

    @pytest.fixture
    def narrow_time_t(self, monkeypatch):
        from broadcast_time.timing import time_width

        monkeypatch.setattr(time_width, 'TIME_T_FORMAT', time_width.time_t_format(4))
        monkeypatch.setattr(time_width, 'TIME_T_BITS', 32)
        return time_width

    def test_format_is_int(self, narrow_time_t):
        assert narrow_time_t.TIME_T_FORMAT == 'i'

    def test_limits_accepted(self, narrow_time_t):
        assert narrow_time_t.to_time_t(2 ** 31 - 1) == 2 ** 31 - 1
        assert narrow_time_t.to_time_t(-2 ** 31) == -2 ** 31

    def test_post_2038_rejected(self, narrow_time_t):
        with pytest.raises(narrow_time_t.TimeRangeError):
            narrow_time_t.to_time_t(2 ** 31)
        with pytest.raises(narrow_time_t.TimeRangeError):
            narrow_time_t.to_wire(-2 ** 31 - 1)
