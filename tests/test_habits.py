"""Tests for core habit logic."""

from datetime import date, time

import pytest

from chronograma.core.habits import (
    EVERY_DAY,
    WEEKDAYS,
    Habit,
    HabitColor,
    default_habits,
    format_days,
    habits_for_weekday,
    parse_days,
    parse_time,
    weekday_index,
)


def make_habit(title="Stretch", days=WEEKDAYS, start=time(7, 0), end=None, **kwargs) -> Habit:
    return Habit(title=title, days=days, start=start, end=end or start, **kwargs)


class TestWeekdayIndex:
    def test_monday_is_zero(self):
        assert weekday_index(date(2025, 3, 17)) == 0

    def test_sunday_is_six(self):
        assert weekday_index(date(2025, 3, 16)) == 6


class TestParseDays:
    def test_names(self):
        assert parse_days("mon,wed,fri") == (True, False, True, False, True, False, False)

    def test_full_names_are_truncated(self):
        assert parse_days("Monday, Sunday") == (True, False, False, False, False, False, True)

    def test_keywords(self):
        assert parse_days("weekdays") == WEEKDAYS
        assert parse_days("daily") == EVERY_DAY
        assert parse_days("weekends") == (False,) * 5 + (True, True)

    def test_bitmask(self):
        assert parse_days("1000001") == (True, False, False, False, False, False, True)

    def test_unknown_day(self):
        with pytest.raises(ValueError):
            parse_days("mon,funday")

    def test_format_round_trip(self):
        days = parse_days("tue,thu")
        assert format_days(days) == "tue,thu"
        assert format_days(WEEKDAYS) == "weekdays"
        assert format_days(EVERY_DAY) == "daily"


class TestParseTime:
    def test_hours_minutes(self):
        assert parse_time("07:30") == time(7, 30)

    def test_hours_only(self):
        assert parse_time("22") == time(22, 0)

    def test_invalid(self):
        with pytest.raises(ValueError):
            parse_time("25:00")


class TestHabit:
    def test_days_must_have_seven_entries(self):
        with pytest.raises(ValueError):
            make_habit(days=(True, False))

    def test_is_active_on(self):
        habit = make_habit()
        assert habit.is_active_on(0) is True
        assert habit.is_active_on(5) is False

    def test_is_active_on_rejects_bad_index(self):
        with pytest.raises(ValueError):
            make_habit().is_active_on(7)

    def test_completion_is_day_scoped(self):
        habit = make_habit()
        habit.toggle(date(2025, 3, 17))
        assert habit.is_completed_on(date(2025, 3, 17)) is True
        assert habit.is_completed_on(date(2025, 3, 18)) is False

    def test_toggle_twice_undoes(self):
        habit = make_habit()
        habit.toggle(date(2025, 3, 17))
        habit.toggle(date(2025, 3, 17))
        assert habit.completed_on is None
        assert habit.completed_dates == set()
        assert habit.streak == 0

    def test_streak_grows_on_consecutive_days(self):
        habit = make_habit()
        for day in (17, 18, 19):
            habit.toggle(date(2025, 3, day))
        assert habit.streak == 3

    def test_streak_resets_after_gap(self):
        habit = make_habit()
        habit.toggle(date(2025, 3, 17))
        habit.toggle(date(2025, 3, 18))
        habit.toggle(date(2025, 3, 21))
        assert habit.streak == 1
        assert habit.is_completed_on(date(2025, 3, 18)) is True

    def test_undo_then_redo_keeps_streak(self):
        habit = make_habit()
        habit.toggle(date(2025, 3, 17))
        habit.toggle(date(2025, 3, 18))
        habit.toggle(date(2025, 3, 18))
        assert habit.streak == 1
        habit.toggle(date(2025, 3, 18))
        assert habit.streak == 2

    def test_earlier_day_keeps_later_completion(self):
        habit = make_habit()
        habit.toggle(date(2025, 3, 18))
        habit.toggle(date(2025, 3, 17))
        assert habit.is_completed_on(date(2025, 3, 18)) is True
        assert habit.is_completed_on(date(2025, 3, 17)) is True
        assert habit.completed_on == date(2025, 3, 18)
        assert habit.streak == 2

    def test_undo_earlier_day_splits_streak(self):
        habit = make_habit()
        for day in (16, 17, 18):
            habit.toggle(date(2025, 3, day))
        habit.toggle(date(2025, 3, 17))
        assert habit.streak == 1
        assert habit.is_completed_on(date(2025, 3, 16)) is True

    def test_format_time_range(self):
        assert make_habit(start=time(9, 0), end=time(17, 0)).format_time_range() == "09:00 - 17:00"
        assert make_habit(start=time(7, 0)).format_time_range() == "07:00"

    def test_dict_round_trip(self):
        habit = make_habit(color=HabitColor.BLUE, completed_dates={date(2025, 3, 16), date(2025, 3, 17)})
        assert Habit.from_dict(habit.to_dict()) == habit

    def test_unknown_color_falls_back_to_gray(self):
        data = make_habit().to_dict()
        data["color"] = "teal"
        assert Habit.from_dict(data).color is HabitColor.GRAY


class TestHabitsForWeekday:
    @pytest.fixture
    def habits(self):
        return [
            make_habit("Weekday", days=WEEKDAYS),
            make_habit("Daily", days=EVERY_DAY),
            make_habit("Saturday", days=(False,) * 5 + (True, False)),
        ]

    @pytest.mark.parametrize("index", range(7))
    def test_exact_for_every_index(self, habits, index):
        expected = [h.title for h in habits if h.days[index]]
        assert [h.title for h in habits_for_weekday(habits, index)] == expected

    def test_saturday(self, habits):
        assert [h.title for h in habits_for_weekday(habits, 5)] == ["Daily", "Saturday"]

    def test_rejects_bad_index(self, habits):
        with pytest.raises(ValueError):
            habits_for_weekday(habits, -1)


def test_default_habits():
    habits = default_habits()
    assert [h.title for h in habits] == ["Wake up", "Work", "Sleep"]
    assert habits[1].start == time(9, 0)
    assert habits[1].end == time(17, 0)
    assert habits[2].days == EVERY_DAY
    assert len({h.id for h in habits}) == 3
