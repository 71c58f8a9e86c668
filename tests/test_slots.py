"""Tests for the half-hour grid and time-of-day parsing."""

from datetime import date, time

import pytest

from errors import InvalidWindow
from slots import (
    ProfessionalSchedule,
    Slot,
    format_time_of_day,
    generate_grid,
    is_grid_point,
    parse_time_of_day,
)


class TestParseTimeOfDay:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("09:00", 540),
            ("09:30:00", 570),
            ("00:00", 0),
            ("23:59", 1439),
            (time(14, 30), 870),
            (600, 600),
        ],
    )
    def test_valid_values(self, value, expected):
        assert parse_time_of_day(value) == expected

    @pytest.mark.parametrize(
        "value",
        ["9am", "24:00", "09:60", "9:00", "09:00:30", "", "09-00", "٠٩:٣٠", "０９:３０", -1, 1440, True, None, 9.5],
    )
    def test_invalid_values(self, value):
        with pytest.raises(ValueError):
            parse_time_of_day(value)

    def test_format(self):
        assert format_time_of_day(540) == "09:00"
        assert format_time_of_day(1425) == "23:45"


class TestGenerateGrid:
    def test_two_hour_window(self):
        """09:00-11:00 yields exactly four half-hour points."""
        grid = generate_grid("09:00", "11:00")

        assert [format_time_of_day(m) for m in grid] == ["09:00", "09:30", "10:00", "10:30"]

    def test_end_is_exclusive(self):
        assert generate_grid("09:00:00", "10:00:00") == [540, 570]

    def test_grid_starts_at_work_start(self):
        grid = generate_grid("09:15", "10:30")

        assert [format_time_of_day(m) for m in grid] == ["09:15", "09:45", "10:15"]

    def test_empty_window(self):
        assert generate_grid("10:00", "10:00") == []

    def test_inverted_window(self):
        assert generate_grid("17:00", "09:00") == []

    def test_malformed_start(self):
        with pytest.raises(InvalidWindow):
            generate_grid("nine", "10:00")

    def test_malformed_end(self):
        with pytest.raises(InvalidWindow):
            generate_grid("09:00", "25:00")

    def test_deterministic(self):
        assert generate_grid("08:00", "12:00") == generate_grid("08:00", "12:00")


class TestGridPoint:
    schedule = ProfessionalSchedule(professional_id=1, work_start="09:00", work_end="10:00")

    def test_on_grid(self):
        assert is_grid_point(self.schedule, 540)
        assert is_grid_point(self.schedule, 570)

    def test_off_grid(self):
        assert not is_grid_point(self.schedule, 555)

    def test_outside_window(self):
        assert not is_grid_point(self.schedule, 600)
        assert not is_grid_point(self.schedule, 510)

    def test_slot_label(self):
        assert Slot(date=date(2026, 1, 5), minute=570).label == "09:30"
