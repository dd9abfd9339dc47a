"""Tests for chat command handlers."""

import pytest

from habitpal import commands, db
from habitpal.models import CountQuantity, WeeklyFrequency

TODAY = "2024-03-10"


@pytest.fixture(autouse=True)
def _db(fresh_db):
    yield fresh_db


class TestNewHabit:
    def test_creates_habit(self):
        reply = commands.new_habit(1, "Gym | weekly mon, thu")
        assert reply == "✅ New habit: Gym (weekly (Mon, Thu), binary (done/not done))"
        (habit,) = db.list_habits(1)
        assert habit.frequency == WeeklyFrequency((1, 4))

    def test_count_habit(self):
        reply = commands.new_habit(1, "Water | daily | count 8")
        assert "count (target: 8)" in reply
        assert db.list_habits(1)[0].quantity == CountQuantity(8)

    def test_duplicate_name(self):
        commands.new_habit(1, "Read")
        assert commands.new_habit(1, "read") == "You already have a habit called read."
        assert len(db.list_habits(1)) == 1

    def test_parse_error_is_friendly(self):
        reply = commands.new_habit(1, "Read | sometimes")
        assert reply.startswith("⚠️")
        assert db.list_habits(1) == []


class TestMarkDone:
    def test_boolean_streak(self):
        commands.new_habit(1, "Read")
        commands.mark_done(1, ["Read"], "2024-03-09")
        assert commands.mark_done(1, ["read"], TODAY) == "✅ Read done! Streak: 2 (best 2)"

    def test_count_progress_then_target(self):
        commands.new_habit(1, "Water | daily | count 3")
        assert commands.mark_done(1, ["Water", "2"], TODAY) == "➕ Water: 2/3 today."
        assert commands.mark_done(1, ["Water"], TODAY) == \
            "🎯 Water: 3/3, target reached! Streak: 1 (best 1)"

    def test_unknown_habit(self):
        assert commands.mark_done(1, ["Nope"], TODAY) == "No habit called Nope. Try /habits."

    def test_archived_habit(self):
        commands.new_habit(1, "Read")
        commands.archive_habit(1, ["Read"])
        assert commands.mark_done(1, ["Read"], TODAY) == "Read is archived."

    def test_missing_args(self):
        assert commands.mark_done(1, [], TODAY).startswith("⚠️")


class TestOverviewAndArchive:
    def test_overview_empty(self):
        assert commands.habits_overview(1, TODAY) == "No habits configured."

    def test_overview_shows_archived_flag(self):
        commands.new_habit(1, "Read")
        assert commands.archive_habit(1, ["Read"]) == "🗄 Read archived."
        assert commands.habits_overview(1, TODAY).splitlines()[2].endswith("(archived)")

    def test_archive_unknown(self):
        assert commands.archive_habit(1, ["Nope"]) == "No habit called Nope."
        assert commands.archive_habit(1, []).startswith("⚠️")


class TestProfile:
    def test_update(self):
        assert commands.update_profile(1, ["Ana", "Maria", "30"]) == "Nice to meet you, Ana Maria!"
        profile = db.get_user_profile(1)
        assert (profile.name, profile.age) == ("Ana Maria", 30)

    def test_usage(self):
        assert commands.update_profile(1, ["Ana"]).startswith("⚠️")


class TestDelete:
    def test_delete_removes_habit_and_logs(self):
        commands.new_habit(1, "Read")
        commands.mark_done(1, ["Read"], TODAY)
        hid = db.list_habits(1)[0].id
        assert commands.delete_habit(1, ["read"]) == "🗑 Read deleted, along with its history."
        assert db.list_habits(1) == []
        assert db.list_habit_logs(1, hid) == []

    def test_delete_unknown(self):
        assert commands.delete_habit(1, ["Nope"]) == "No habit called Nope."
        assert commands.delete_habit(1, []).startswith("⚠️")


class TestCategories:
    def test_new_habit_with_category(self):
        reply = commands.new_habit(1, "Water | daily | count 8 | health")
        assert reply.endswith(" in health")
        assert db.list_habits(1)[0].category_id == "health"

    def test_overview_groups_by_category(self):
        commands.new_habit(1, "Read")
        commands.new_habit(1, "Water | daily | count 8 | health")
        commands.new_habit(1, "Gym | weekly mon | check | health")
        commands.new_habit(1, "Journal | daily | check | mind")
        text = commands.habits_overview(1, TODAY)
        assert text.endswith(
            "By category:\n"
            "- health: Gym, Water\n"
            "- mind: Journal\n"
            "- other: Read"
        )

    def test_overview_without_categories_is_plain_digest(self):
        commands.new_habit(1, "Read")
        assert "By category" not in commands.habits_overview(1, TODAY)
