"""Test clock-time conversion and interval helpers."""

from datetime import date

import pytest

from barber_availability.core.exceptions import (
    InvalidTimeFormat,
    OutOfRangeError,
    UnsupportedCrossMidnightInterval,
)
from barber_availability.utils.time_arithmetic import (
    TimeInterval,
    day_of_week,
    interval_from,
    overlaps,
    to_minutes,
    to_time_string,
)


@pytest.mark.unit
class TestToMinutes:
    """Test parsing of "HH:MM" strings."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("00:00", 0),
            ("09:00", 540),
            ("9:05", 545),
            ("12:30", 750),
            ("23:59", 1439),
        ],
    )
    def test_valid_times(self, value, expected):
        """Test well-formed clock times."""
        assert to_minutes(value) == expected

    def test_seconds_are_truncated(self):
        """Test SQL TIME style strings drop the seconds."""
        assert to_minutes("09:30:45") == 570

    @pytest.mark.parametrize(
        "value",
        ["", "9", "24:00", "12:60", "ab:cd", "12:5", "123:00", "12:00:61", "12-00", "1:2:3:4"],
    )
    def test_malformed_times(self, value):
        """Test malformed strings raise InvalidTimeFormat."""
        with pytest.raises(InvalidTimeFormat) as exc_info:
            to_minutes(value)

        assert exc_info.value.details["value"] == value

    def test_non_string_rejected(self):
        """Test non-string input is a format error, not a type error."""
        with pytest.raises(InvalidTimeFormat):
            to_minutes(540)


@pytest.mark.unit
class TestToTimeString:
    """Test formatting of minute offsets."""

    def test_zero_padded(self):
        assert to_time_string(0) == "00:00"
        assert to_time_string(545) == "09:05"
        assert to_time_string(1439) == "23:59"

    @pytest.mark.parametrize("minutes", [-1, 1440, 2000])
    def test_out_of_range(self, minutes):
        """Test offsets outside the day raise OutOfRangeError."""
        with pytest.raises(OutOfRangeError):
            to_time_string(minutes)

    def test_bool_rejected(self):
        with pytest.raises(OutOfRangeError):
            to_time_string(True)

    def test_round_trip_every_minute(self):
        """Test every minute of the day survives formatting and parsing."""
        assert all(to_minutes(to_time_string(m)) == m for m in range(1440))


@pytest.mark.unit
class TestIntervals:
    """Test interval construction and overlap."""

    def test_interval_from(self):
        interval = interval_from(540, 30)
        assert interval == TimeInterval(540, 570)
        assert interval.duration == 30

    def test_interval_may_end_at_midnight(self):
        """Test an interval ending exactly at 24:00 is allowed."""
        assert interval_from(1380, 60) == TimeInterval(1380, 1440)

    def test_cross_midnight_rejected(self):
        with pytest.raises(UnsupportedCrossMidnightInterval) as exc_info:
            interval_from(1410, 60)

        assert exc_info.value.details == {"start_minute": 1410, "duration": 60}

    def test_start_out_of_range(self):
        with pytest.raises(OutOfRangeError):
            interval_from(1440, 10)

    def test_touching_intervals_do_not_overlap(self):
        """Test back-to-back intervals are compatible in both directions."""
        a = TimeInterval(540, 570)
        b = TimeInterval(570, 600)
        assert not overlaps(a, b)
        assert not overlaps(b, a)

    def test_partial_overlap_is_symmetric(self):
        a = TimeInterval(540, 600)
        b = TimeInterval(570, 630)
        assert overlaps(a, b)
        assert overlaps(b, a)

    def test_containment_overlaps(self):
        outer = TimeInterval(540, 720)
        inner = TimeInterval(600, 615)
        assert overlaps(outer, inner)
        assert overlaps(inner, outer)

    def test_non_empty_interval_overlaps_itself(self):
        a = TimeInterval(600, 660)
        assert overlaps(a, a)


@pytest.mark.unit
class TestDayOfWeek:
    """Test the shop weekday index."""

    @pytest.mark.parametrize(
        "day,expected",
        [
            (date(2024, 1, 14), 0),  # Sunday
            (date(2024, 1, 15), 1),  # Monday
            (date(2024, 1, 20), 6),  # Saturday
        ],
    )
    def test_sunday_is_zero(self, day, expected):
        assert day_of_week(day) == expected
