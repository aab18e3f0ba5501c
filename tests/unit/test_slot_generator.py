"""Test candidate slot generation."""

import pytest

from barber_availability.schemas.availability import OpeningHours
from barber_availability.services.slot_generator import SlotGenerator


def _hours(open_time, close_time, is_closed=False):
    return OpeningHours(
        barber_id="barber-1",
        day_of_week=1,
        open_time=open_time,
        close_time=close_time,
        is_closed=is_closed,
    )


@pytest.mark.unit
class TestSlotGenerator:
    """Test the fixed-step candidate grid."""

    @pytest.fixture
    def generator(self):
        return SlotGenerator()

    def test_full_day_grid(self, generator):
        """Test 09:00-17:00 gives 32 quarter-hour starts ending at 16:45."""
        slots = generator.generate(_hours("09:00", "17:00"))

        assert len(slots) == 32
        assert slots[0] == 540
        assert slots[-1] == 1005
        assert 1020 not in slots

    def test_grid_is_strictly_increasing(self, generator):
        slots = generator.generate(_hours("08:30", "12:00"))
        assert all(b - a == 15 for a, b in zip(slots, slots[1:]))

    def test_unaligned_close(self, generator):
        """Test the last start may sit less than one step before close."""
        assert generator.generate(_hours("09:00", "10:10")) == [540, 555, 570, 585, 600]

    def test_unaligned_open(self, generator):
        """Test the grid is anchored at the open time."""
        assert generator.generate(_hours("09:10", "10:00")) == [550, 565, 580, 595]

    def test_window_shorter_than_step(self, generator):
        assert generator.generate(_hours("09:00", "09:05")) == [540]

    def test_closed_day(self, generator):
        assert generator.generate(_hours(None, None, is_closed=True)) == []

    def test_no_hours(self, generator):
        assert generator.generate(None) == []

    def test_custom_step(self):
        generator = SlotGenerator(step_minutes=30)
        assert generator.generate(_hours("09:00", "11:00")) == [540, 570, 600, 630]

    def test_step_override_per_call(self, generator):
        assert generator.generate(_hours("09:00", "10:00"), step_minutes=20) == [540, 560, 580]

    @pytest.mark.parametrize("step", [0, -15])
    def test_invalid_step(self, step):
        """Test a zero or negative step is rejected instead of looping forever."""
        with pytest.raises(ValueError):
            SlotGenerator(step_minutes=step)

    def test_invalid_step_per_call(self, generator):
        with pytest.raises(ValueError):
            generator.generate(_hours("09:00", "10:00"), step_minutes=0)
