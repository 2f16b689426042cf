"""
Data models for courses and assignments pulled from Canvas.

This module contains the dataclasses the rest of the client works with. They are
built fresh from API payloads on every fetch and never mutated afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
import typing as t


# Dashboard rank used when Canvas has no position recorded for a course
DEFAULT_POSITION = 999


@dataclass(frozen=True)
class Course:
    """An active enrollment as shown on the user's Canvas dashboard."""
    id: int
    name: str
    course_code: str = ""
    custom_color: t.Optional[str] = None   # "#rrggbb" from the user's color settings
    position: int = DEFAULT_POSITION
    term: t.Optional[str] = None


@dataclass(frozen=True)
class Assignment:
    """
    A task belonging to a course, with its course's display metadata copied in.

    The course_* fields are denormalized at merge time; course_id is only a
    back-reference to the course the assignment was fetched from.
    """
    id: int
    course_id: int
    name: str
    due_at: t.Optional[datetime] = None
    points_possible: t.Optional[float] = None
    submission_types: tuple[str, ...] = ()
    description: t.Optional[str] = None
    html_url: t.Optional[str] = None
    # True when *anyone* has submitted; not a reliable "I submitted" signal
    has_submitted_submissions: bool = False
    course_name: str = ""
    course_code: str = ""
    course_color: t.Optional[str] = None
    course_position: int = DEFAULT_POSITION

    @property
    def accepts_file_upload(self) -> bool:
        return "online_upload" in self.submission_types


@dataclass(frozen=True)
class CourseFetch:
    """Outcome of fetching one course's assignments: either assignments or an error."""
    course: Course
    assignments: tuple[Assignment, ...] = ()
    error: t.Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class AggregationResult:
    """Merged assignments across courses plus the names of access-restricted courses."""
    assignments: list[Assignment] = field(default_factory=list)
    skipped_courses: list[str] = field(default_factory=list)


@dataclass
class WeekGroup:
    """Assignments due inside one calendar-week window."""
    week_start: datetime
    week_end: datetime
    label: str
    assignments: list[Assignment] = field(default_factory=list)
