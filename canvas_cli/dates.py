"""
Due-date logic: classification, ordering and calendar-week grouping.

Every function that depends on the current time takes ``now`` as an argument.
Week windows are computed in the timezone of ``now``; pass a zone with DST
rules (``zoneinfo``) so dates past a clock change keep their own offset.
"""
from __future__ import annotations

import typing as t
from datetime import datetime, timedelta

from canvas_cli.models import DEFAULT_POSITION, Assignment, WeekGroup

SECONDS_PER_DAY = 86400
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


# Classification

def is_due_within_days(assignment: Assignment, days: float, now: datetime) -> bool:
    """True when the assignment is due between now and now + days (inclusive)."""
    if assignment.due_at is None:
        return False
    # Elapsed seconds, not wall-clock days
    horizon = now.timestamp() + days * SECONDS_PER_DAY
    return now <= assignment.due_at and assignment.due_at.timestamp() <= horizon


def is_overdue(assignment: Assignment, now: datetime) -> bool:
    """True when the due date has passed and nobody has submitted.

    ``has_submitted_submissions`` is course-wide, so an assignment the current
    user has not turned in may still read as not overdue.
    """
    if assignment.due_at is None:
        return False
    return assignment.due_at < now and not assignment.has_submitted_submissions


def is_due(assignment: Assignment, now: datetime) -> bool:
    if assignment.due_at is None:
        return False
    return assignment.due_at >= now


# Ordering

def _due_key(assignment: Assignment) -> tuple[bool, float]:
    if assignment.due_at is None:
        return (True, 0.0)
    return (False, assignment.due_at.timestamp())


def sort_by_due_date(assignments: t.Iterable[Assignment]) -> list[Assignment]:
    """Earliest due first, undated last, same due time ordered by course name."""
    return sorted(assignments, key=lambda a: (_due_key(a), a.course_name))


def sort_by_course_position_then_date(assignments: t.Iterable[Assignment]) -> list[Assignment]:
    """Dashboard position first, then due date with undated last."""
    return sorted(
        assignments,
        key=lambda a: (
            a.course_position if a.course_position is not None else DEFAULT_POSITION,
            _due_key(a),
        ),
    )


# Week windows

def sunday_based_weekday(moment: datetime) -> int:
    """Weekday with 0=Sunday .. 6=Saturday."""
    return (moment.weekday() + 1) % 7


def week_start(moment: datetime, start_day: int) -> datetime:
    """Midnight of the most recent start_day on or before moment."""
    diff = (sunday_based_weekday(moment) - start_day) % 7
    return (moment - timedelta(days=diff)).replace(hour=0, minute=0, second=0, microsecond=0)


def week_end(moment: datetime, start_day: int) -> datetime:
    """Last millisecond of the week that contains moment."""
    start = week_start(moment, start_day)
    return (start + timedelta(days=6)).replace(hour=23, minute=59, second=59, microsecond=999000)


def format_week_range(start: datetime, start_day: int) -> str:
    """Render a week as "Jan 6-12", or "Jan 27 - Feb 2" across a month boundary."""
    end = week_end(start, start_day)
    start_month = MONTH_ABBREVIATIONS[start.month - 1]
    end_month = MONTH_ABBREVIATIONS[end.month - 1]
    if start_month == end_month:
        return f"{start_month} {start.day}-{end.day}"
    return f"{start_month} {start.day} - {end_month} {end.day}"


def week_label(start: datetime, now: datetime, start_day: int) -> str:
    this_week = week_start(now, start_day)
    next_week = week_start(this_week + timedelta(days=7), start_day)
    week_range = format_week_range(start, start_day)
    if start == this_week:
        return f"This Week ({week_range})"
    if start == next_week:
        return f"Next Week ({week_range})"
    return week_range


def _localize(moment: datetime, now: datetime) -> datetime:
    if moment.tzinfo is not None and now.tzinfo is not None:
        return moment.astimezone(now.tzinfo)
    return moment


def group_by_week(
    assignments: t.Iterable[Assignment],
    now: datetime,
    start_day: int = 0,
) -> list[WeekGroup]:
    """Bucket dated assignments into week windows.

    Args:
        assignments: Assignments in any order; undated ones are dropped
        now: Reference time for the "This Week" / "Next Week" labels
        start_day: First day of the week, 0=Sunday .. 6=Saturday

    Returns:
        Week groups in chronological order, each sorted by course position
        and then due date
    """
    buckets: dict[datetime, list[Assignment]] = {}
    for assignment in assignments:
        if assignment.due_at is None:
            continue
        key = week_start(_localize(assignment.due_at, now), start_day)
        buckets.setdefault(key, []).append(assignment)

    groups = []
    for start in sorted(buckets):
        groups.append(WeekGroup(
            week_start=start,
            week_end=week_end(start, start_day),
            label=week_label(start, now, start_day),
            assignments=sort_by_course_position_then_date(buckets[start]),
        ))
    return groups


def upcoming_week_window(now: datetime, start_day: int, extra_weeks: int) -> tuple[datetime, datetime]:
    """Start of this week and end of the last extra week after it."""
    start = week_start(now, start_day)
    last = start + timedelta(days=7 * max(extra_weeks, 0))
    return start, week_end(last, start_day)


# Display

def format_due_date(due_at: t.Optional[datetime], now: datetime) -> str:
    """Convert a due timestamp to "Today at 14:30", "Tomorrow at 09:00" or a full date."""
    if due_at is None:
        return "No due date"
    due = _localize(due_at, now)
    if due.date() == now.date():
        return f"Today at {due:%H:%M}"
    if due.date() == (now + timedelta(days=1)).date():
        return f"Tomorrow at {due:%H:%M}"
    return f"{MONTH_ABBREVIATIONS[due.month - 1]} {due.day}, {due.year} {due:%H:%M}"
