"""Tests for due-date classification, ordering and week grouping."""
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from canvas_cli.dates import (
    format_due_date,
    format_week_range,
    group_by_week,
    is_due,
    is_due_within_days,
    is_overdue,
    sort_by_course_position_then_date,
    sort_by_due_date,
    upcoming_week_window,
    week_end,
    week_label,
    week_start,
)
from conftest import NOW, make_assignment


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


# is_due_within_days / is_overdue / is_due

def test_due_within_days_includes_both_ends_of_window() -> None:
    """Due exactly now and exactly at the end of the window both count."""
    assert is_due_within_days(make_assignment(due_in_days=0), 3, NOW)
    assert is_due_within_days(make_assignment(due_in_days=3), 3, NOW)


def test_due_within_days_excludes_past_and_beyond_window() -> None:
    assert not is_due_within_days(make_assignment(due_in_days=-0.001), 3, NOW)
    assert not is_due_within_days(make_assignment(due_in_days=3.001), 3, NOW)


def test_due_within_days_is_monotonic_in_window() -> None:
    """Widening the window never drops an assignment that was already included."""
    assignments = [make_assignment(due_in_days=offset) for offset in (-2, -0.5, 0, 0.5, 1, 2.9, 3, 6, 14)]
    previous: set[int] = set()
    for days in range(0, 16):
        included = {a.id for a in assignments if is_due_within_days(a, days, NOW)}
        assert previous <= included
        previous = included


def test_predicates_are_false_without_due_date() -> None:
    undated = make_assignment(due_in_days=None)
    assert not is_due_within_days(undated, 365, NOW)
    assert not is_overdue(undated, NOW)
    assert not is_due(undated, NOW)


def test_overdue_requires_past_due_and_no_submissions() -> None:
    """Flipping the submitted flag on a past-due assignment clears overdue."""
    past = make_assignment(due_in_days=-1, has_submitted_submissions=False)
    past_submitted = make_assignment(due_in_days=-1, has_submitted_submissions=True)
    future = make_assignment(due_in_days=1)

    assert is_overdue(past, NOW)
    assert not is_overdue(past_submitted, NOW)
    assert not is_overdue(future, NOW)


def test_is_due_has_no_upper_bound() -> None:
    assert is_due(make_assignment(due_in_days=0), NOW)
    assert is_due(make_assignment(due_in_days=400), NOW)
    assert not is_due(make_assignment(due_in_days=-0.01), NOW)


# Ordering

def test_sort_by_due_date_puts_undated_last_and_breaks_ties_by_course() -> None:
    zeta_2 = make_assignment("z2", due_in_days=2, course_name="Zeta")
    beta_none = make_assignment("bn", due_in_days=None, course_name="Beta")
    alpha_1 = make_assignment("a1", due_in_days=1, course_name="Alpha")
    alpha_2 = make_assignment("a2", due_in_days=2, course_name="Alpha")
    alpha_none = make_assignment("an", due_in_days=None, course_name="Alpha")

    ordered = sort_by_due_date([zeta_2, beta_none, alpha_1, alpha_2, alpha_none])

    assert [a.name for a in ordered] == ["a1", "a2", "z2", "an", "bn"]


def test_sort_by_due_date_course_tie_break_is_case_sensitive() -> None:
    lower = make_assignment("lower", due_in_days=1, course_name="alpha")
    upper = make_assignment("upper", due_in_days=1, course_name="Zeta")

    assert [a.name for a in sort_by_due_date([lower, upper])] == ["upper", "lower"]


def test_sort_by_due_date_is_stable_for_full_ties() -> None:
    first = make_assignment("first", due_in_days=1, course_name="Same")
    second = make_assignment("second", due_in_days=1, course_name="Same")

    assert [a.name for a in sort_by_due_date([first, second])] == ["first", "second"]
    assert [a.name for a in sort_by_due_date([second, first])] == ["second", "first"]


def test_sort_by_due_date_does_not_mutate_input() -> None:
    items = [make_assignment("b", due_in_days=2), make_assignment("a", due_in_days=1)]
    sort_by_due_date(items)
    assert [a.name for a in items] == ["b", "a"]


def test_sort_by_course_position_then_date() -> None:
    p1_late = make_assignment("p1-late", due_in_days=5, position=1)
    p2_soon = make_assignment("p2-soon", due_in_days=1, position=2)
    p1_undated = make_assignment("p1-undated", due_in_days=None, position=1)
    p1_early = make_assignment("p1-early", due_in_days=2, position=1)

    ordered = sort_by_course_position_then_date([p1_late, p2_soon, p1_undated, p1_early])

    assert [a.name for a in ordered] == ["p1-early", "p1-late", "p1-undated", "p2-soon"]


# Week windows

@pytest.mark.parametrize(
    "start_day, expected",
    [
        (0, utc(2025, 1, 12)),   # Sunday
        (1, utc(2025, 1, 13)),   # Monday
        (3, utc(2025, 1, 15)),   # Wednesday: the day itself
        (4, utc(2025, 1, 9)),    # Thursday: previous week
    ],
)
def test_week_start(start_day: int, expected: datetime) -> None:
    assert week_start(NOW, start_day) == expected


def test_week_end_is_last_millisecond_of_seventh_day() -> None:
    assert week_end(NOW, 0) == datetime(2025, 1, 18, 23, 59, 59, 999000, tzinfo=timezone.utc)


def test_format_week_range() -> None:
    assert format_week_range(utc(2025, 1, 12), 0) == "Jan 12-18"
    assert format_week_range(utc(2025, 1, 26), 0) == "Jan 26 - Feb 1"


def test_week_label() -> None:
    assert week_label(utc(2025, 1, 12), NOW, 0) == "This Week (Jan 12-18)"
    assert week_label(utc(2025, 1, 19), NOW, 0) == "Next Week (Jan 19-25)"
    assert week_label(utc(2025, 1, 26), NOW, 0) == "Jan 26 - Feb 1"
    assert week_label(utc(2025, 1, 5), NOW, 0) == "Jan 5-11"


def test_group_by_week_buckets_and_orders() -> None:
    a = make_assignment("a", due_in_days=1, position=2)    # Thu Jan 16
    b = make_assignment("b", due_in_days=2, position=1)    # Fri Jan 17
    c = make_assignment("c", due_in_days=5, position=1)    # Mon Jan 20
    d = make_assignment("d", due_in_days=None, position=1)
    e = make_assignment("e", due_in_days=4, position=3)    # Sun Jan 19

    groups = group_by_week([a, b, c, d, e], NOW, start_day=0)

    assert [g.label for g in groups] == ["This Week (Jan 12-18)", "Next Week (Jan 19-25)"]
    assert [[x.name for x in g.assignments] for g in groups] == [["b", "a"], ["c", "e"]]
    assert groups[1].week_start - groups[0].week_end == timedelta(milliseconds=1)


def test_group_by_week_respects_start_day() -> None:
    a = make_assignment("a", due_in_days=1)    # Thu Jan 16
    e = make_assignment("e", due_in_days=4)    # Sun Jan 19
    c = make_assignment("c", due_in_days=5)    # Mon Jan 20

    groups = group_by_week([a, e, c], NOW, start_day=1)

    assert [g.week_start for g in groups] == [utc(2025, 1, 13), utc(2025, 1, 20)]
    assert [[x.name for x in g.assignments] for g in groups] == [["a", "e"], ["c"]]


def test_group_by_week_every_dated_assignment_in_exactly_one_group() -> None:
    assignments = [make_assignment(f"x{i}", due_in_days=i * 1.7 - 10) for i in range(20)]
    groups = group_by_week(assignments, NOW, start_day=2)

    grouped = [a.id for g in groups for a in g.assignments]
    assert sorted(grouped) == sorted(a.id for a in assignments)
    for group in groups:
        for assignment in group.assignments:
            assert group.week_start <= assignment.due_at <= group.week_end
    starts = [g.week_start for g in groups]
    assert starts == sorted(starts)


def test_group_by_week_is_idempotent() -> None:
    assignments = [
        make_assignment(f"x{i}", due_in_days=(i * 3) % 17, position=i % 3) for i in range(12)
    ]
    assert group_by_week(assignments, NOW, 0) == group_by_week(list(assignments), NOW, 0)


def test_group_by_week_uses_timezone_of_now() -> None:
    """Saturday evening locally is still this week even if it is Sunday in UTC."""
    eastern = timezone(timedelta(hours=-5))
    local_now = NOW.astimezone(eastern)
    late_saturday = replace(make_assignment("sat"), due_at=utc(2025, 1, 19, 3, 0))

    groups = group_by_week([late_saturday], local_now, start_day=0)

    assert groups[0].week_start == datetime(2025, 1, 12, tzinfo=eastern)
    assert groups[0].label == "This Week (Jan 12-18)"


def test_due_date_past_dst_change_uses_its_own_offset() -> None:
    """A December due date seen from October keeps standard time, not daylight time."""
    new_york = ZoneInfo("America/New_York")
    october_now = datetime(2026, 10, 18, 12, 0, tzinfo=new_york)
    saturday_night = replace(make_assignment("late"), due_at=utc(2026, 12, 6, 4, 30))

    groups = group_by_week([saturday_night], october_now, start_day=0)

    assert groups[0].week_start == datetime(2026, 11, 29, tzinfo=new_york)
    assert groups[0].week_start.utcoffset() == timedelta(hours=-5)
    assert groups[0].label == "Nov 29 - Dec 5"
    assert format_due_date(saturday_night.due_at, october_now) == "Dec 5, 2026 23:30"


def test_due_within_days_counts_elapsed_time_across_dst_change() -> None:
    """The 3-day window from Oct 31 ends 72 hours later even though clocks fall back."""
    new_york = ZoneInfo("America/New_York")
    now = datetime(2026, 10, 31, 12, 0, tzinfo=new_york)
    at_horizon = replace(make_assignment(), due_at=utc(2026, 11, 3, 16, 0))
    past_horizon = replace(make_assignment(), due_at=utc(2026, 11, 3, 16, 30))

    assert is_due_within_days(at_horizon, 3, now)
    assert not is_due_within_days(past_horizon, 3, now)


def test_upcoming_week_window() -> None:
    start, end = upcoming_week_window(NOW, start_day=0, extra_weeks=1)
    assert start == utc(2025, 1, 12)
    assert end == datetime(2025, 1, 25, 23, 59, 59, 999000, tzinfo=timezone.utc)


# Display formatting

def test_format_due_date() -> None:
    assert format_due_date(None, NOW) == "No due date"
    assert format_due_date(NOW + timedelta(hours=2), NOW) == "Today at 14:00"
    assert format_due_date(NOW + timedelta(days=1), NOW) == "Tomorrow at 12:00"
    assert format_due_date(NOW + timedelta(days=10), NOW) == "Jan 25, 2025 12:00"
