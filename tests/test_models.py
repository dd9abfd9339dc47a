"""Tests for habit model validation and (de)serialization."""

import pytest

from habitpal.errors import ConfigurationError
from habitpal.models import (
    BooleanQuantity,
    CountQuantity,
    CustomFrequency,
    DailyFrequency,
    Habit,
    WeeklyFrequency,
    frequency_from_dict,
    frequency_to_dict,
    quantity_from_dict,
    quantity_to_dict,
)


class TestVariants:
    def test_weekly_days_sorted_and_deduplicated(self):
        f = WeeklyFrequency((5, 1, 3, 1))
        assert f.days_of_week == (1, 3, 5)

    def test_weekly_accepts_list(self):
        assert WeeklyFrequency([3, 0]).days_of_week == (0, 3)

    @pytest.mark.parametrize("days", [(7,), (-1,), ("mon",), (True,)])
    def test_weekly_rejects_bad_days(self, days):
        with pytest.raises(ConfigurationError):
            WeeklyFrequency(days)

    @pytest.mark.parametrize("n", [0, -3, 1.5, "2"])
    def test_custom_interval_must_be_positive_int(self, n):
        with pytest.raises(ConfigurationError):
            CustomFrequency(n)

    @pytest.mark.parametrize("t", [0, -1, 2.0, None])
    def test_count_target_must_be_positive_int(self, t):
        with pytest.raises(ConfigurationError):
            CountQuantity(t)


class TestHabit:
    def test_defaults(self):
        h = Habit(id="h1", name="Read", frequency=DailyFrequency(), quantity=BooleanQuantity())
        assert h.archived is False
        assert h.category_id is None
        assert h.created_at.tzinfo is not None
        assert h.is_count is False

    def test_rejects_missing_frequency(self):
        with pytest.raises(ConfigurationError):
            Habit(id="h1", name="Read", frequency=None, quantity=BooleanQuantity())

    def test_rejects_swapped_variants(self):
        with pytest.raises(ConfigurationError):
            Habit(id="h1", name="Read", frequency=BooleanQuantity(), quantity=DailyFrequency())


class TestSerialization:
    def test_frequency_shapes(self):
        assert frequency_to_dict(DailyFrequency()) == {"kind": "daily"}
        assert frequency_to_dict(WeeklyFrequency((1, 3))) == {"kind": "weekly", "daysOfWeek": [1, 3]}
        assert frequency_to_dict(CustomFrequency(2)) == {"kind": "custom", "intervalDays": 2}

    def test_frequency_from_dict(self):
        assert frequency_from_dict({"kind": "daily"}) == DailyFrequency()
        assert frequency_from_dict({"kind": "weekly", "daysOfWeek": [5, 1]}) == WeeklyFrequency((1, 5))
        assert frequency_from_dict({"kind": "custom", "intervalDays": 3}) == CustomFrequency(3)

    @pytest.mark.parametrize("data", [
        None,
        {},
        {"kind": "monthly"},
        {"kind": "weekly"},
        {"kind": "custom"},
    ])
    def test_frequency_from_bad_dict(self, data):
        with pytest.raises(ConfigurationError):
            frequency_from_dict(data)

    def test_quantity_shapes(self):
        assert quantity_to_dict(BooleanQuantity()) == {"kind": "boolean"}
        assert quantity_to_dict(CountQuantity(8)) == {"kind": "count", "target": 8}
        assert quantity_from_dict({"kind": "count", "target": 8}) == CountQuantity(8)
        assert quantity_from_dict({"kind": "boolean"}) == BooleanQuantity()

    @pytest.mark.parametrize("data", [None, {"kind": "count"}, {"kind": "percent"}])
    def test_quantity_from_bad_dict(self, data):
        with pytest.raises(ConfigurationError):
            quantity_from_dict(data)
