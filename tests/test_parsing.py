"""Tests for chat command parsing."""

import pytest

from habitpal.errors import ConfigurationError
from habitpal.models import (
    BooleanQuantity,
    CountQuantity,
    CustomFrequency,
    DailyFrequency,
    WeeklyFrequency,
)
from habitpal.parsing import parse_done_args, parse_frequency, parse_new_habit, parse_quantity


class TestParseFrequency:
    @pytest.mark.parametrize("text", ["", "daily", "Every Day", " everyday "])
    def test_daily(self, text):
        assert parse_frequency(text) == DailyFrequency()

    def test_weekly_names(self):
        assert parse_frequency("weekly mon, wed, fri") == WeeklyFrequency((1, 3, 5))

    def test_bare_day_list(self):
        assert parse_frequency("Sunday,saturday") == WeeklyFrequency((0, 6))

    def test_numeric_days(self):
        assert parse_frequency("weekly 0 3") == WeeklyFrequency((0, 3))

    def test_every_n_days(self):
        assert parse_frequency("every 3 days") == CustomFrequency(3)
        assert parse_frequency("every 2d") == CustomFrequency(2)

    @pytest.mark.parametrize("text", ["weekly", "weekly funday", "mon 9", "every 0 days"])
    def test_invalid(self, text):
        with pytest.raises(ConfigurationError):
            parse_frequency(text)


class TestParseQuantity:
    @pytest.mark.parametrize("text", ["", "check", "Boolean", "yes/no", "done"])
    def test_boolean(self, text):
        assert parse_quantity(text) == BooleanQuantity()

    @pytest.mark.parametrize("text", ["count 8", "8", "x8", "8 times", "8x"])
    def test_count(self, text):
        assert parse_quantity(text) == CountQuantity(8)

    @pytest.mark.parametrize("text", ["lots", "count 0", "count -2"])
    def test_invalid(self, text):
        with pytest.raises(ConfigurationError):
            parse_quantity(text)


class TestParseNewHabit:
    def test_name_only(self):
        assert parse_new_habit("Read") == ("Read", DailyFrequency(), BooleanQuantity(), None)

    def test_all_fields(self):
        name, freq, qty, category = parse_new_habit(" Drink water | daily | count 8 | health ")
        assert name == "Drink water"
        assert freq == DailyFrequency()
        assert qty == CountQuantity(8)
        assert category == "health"

    def test_blank_category_is_none(self):
        assert parse_new_habit("Read | daily | check |  ")[3] is None

    @pytest.mark.parametrize("text", ["", " | daily", "a | daily | check | health | extra"])
    def test_invalid(self, text):
        with pytest.raises(ConfigurationError):
            parse_new_habit(text)


class TestParseDoneArgs:
    def test_trailing_count(self):
        assert parse_done_args(["Drink", "water", "3"]) == ("Drink water", 3)

    def test_no_count(self):
        assert parse_done_args(["Read"]) == ("Read", None)

    def test_numeric_name_alone(self):
        assert parse_done_args(["10"]) == ("10", None)

    def test_empty(self):
        with pytest.raises(ConfigurationError):
            parse_done_args([])
