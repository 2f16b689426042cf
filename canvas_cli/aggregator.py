"""Course and assignment aggregation.

Courses, custom colors and dashboard positions are fetched concurrently and
merged by course id. Assignments are then fetched one course at a time; a
course that fails is skipped instead of aborting the whole listing.
"""
from __future__ import annotations

import asyncio
import logging
import typing as t

from canvas_cli.client import CanvasClient
from canvas_cli.errors import AccessRestricted
from canvas_cli.models import (
    DEFAULT_POSITION,
    AggregationResult,
    Assignment,
    Course,
    CourseFetch,
)
from canvas_cli.schemas import (
    AssignmentRecord,
    CourseRecord,
    CustomColorsResponse,
    DashboardPositionsResponse,
    course_asset_key,
)

logger = logging.getLogger(__name__)

COURSES_PATH = "/api/v1/courses"
COLORS_PATH = "/api/v1/users/self/colors"
POSITIONS_PATH = "/api/v1/users/self/dashboard_positions"
PER_PAGE = 100


def assignments_path(course_id: int) -> str:
    return f"/api/v1/courses/{course_id}/assignments"


async def fetch_custom_colors(client: CanvasClient) -> dict[str, str]:
    data = await client.get_json(COLORS_PATH)
    return CustomColorsResponse.model_validate(data).custom_colors


async def fetch_dashboard_positions(client: CanvasClient) -> dict[str, int]:
    data = await client.get_json(POSITIONS_PATH)
    return DashboardPositionsResponse.model_validate(data).dashboard_positions


def merge_course(
    record: CourseRecord,
    colors: t.Mapping[str, str],
    positions: t.Mapping[str, int],
) -> Course:
    key = course_asset_key(record.id)
    return Course(
        id=record.id,
        name=record.display_name(),
        course_code=record.course_code or "",
        custom_color=colors.get(key) or None,
        position=positions.get(key, DEFAULT_POSITION),
        term=record.term.name if record.term and record.term.name else None,
    )


async def fetch_courses(client: CanvasClient) -> list[Course]:
    """Fetch active courses with their custom colors and dashboard positions.

    The three requests run concurrently. Courses come back ordered by
    dashboard position; courses sharing a position keep the API's order.

    Args:
        client: Authenticated Canvas client

    Returns:
        List of courses sorted by position ascending
    """
    raw_courses, colors, positions = await asyncio.gather(
        client.get_json(
            COURSES_PATH,
            params={"enrollment_state": "active", "include[]": "term", "per_page": PER_PAGE},
        ),
        fetch_custom_colors(client),
        fetch_dashboard_positions(client),
    )

    courses = [
        merge_course(CourseRecord.model_validate(raw), colors, positions)
        for raw in raw_courses
        if isinstance(raw, dict)
    ]
    logger.debug("Fetched %d courses", len(courses))
    return sorted(courses, key=lambda course: course.position)


def merge_assignment(record: AssignmentRecord, course: Course) -> Assignment:
    """Attach the course's display metadata to an assignment record."""
    return Assignment(
        id=record.id,
        course_id=course.id,
        name=record.name,
        due_at=record.due_at,
        points_possible=record.points_possible,
        submission_types=tuple(record.submission_types),
        description=record.description,
        html_url=record.html_url,
        has_submitted_submissions=record.has_submitted_submissions,
        course_name=course.name,
        course_code=course.course_code,
        course_color=course.custom_color,
        course_position=course.position,
    )


async def fetch_course_assignments(client: CanvasClient, course: Course) -> list[Assignment]:
    """Fetch one course's assignments; errors propagate to the caller."""
    raw_assignments = await client.get_json(
        assignments_path(course.id), params={"per_page": PER_PAGE}
    )
    return [
        merge_assignment(AssignmentRecord.model_validate(raw), course)
        for raw in raw_assignments
        if isinstance(raw, dict)
    ]


async def iter_course_assignments(
    client: CanvasClient,
    courses: t.Iterable[Course],
) -> t.AsyncIterator[CourseFetch]:
    """Yield one CourseFetch per course, fetching strictly in sequence."""
    for course in courses:
        try:
            assignments = await fetch_course_assignments(client, course)
        except Exception as exc:
            yield CourseFetch(course=course, error=exc)
        else:
            yield CourseFetch(course=course, assignments=tuple(assignments))


def fold_course_fetches(fetches: t.Iterable[CourseFetch]) -> AggregationResult:
    """Combine per-course outcomes.

    Access-restricted courses are listed in skipped_courses. Any other failure
    drops the course without recording it. Empty courses are not skipped.
    """
    result = AggregationResult()
    for fetch in fetches:
        if fetch.ok:
            result.assignments.extend(fetch.assignments)
        elif isinstance(fetch.error, AccessRestricted):
            logger.info("Skipping %s: access restricted", fetch.course.name)
            result.skipped_courses.append(fetch.course.name)
        else:
            logger.debug(
                "Skipping %s after error", fetch.course.name, exc_info=fetch.error
            )
    return result


async def fetch_all_assignments(client: CanvasClient) -> AggregationResult:
    """Fetch every active course's assignments into one AggregationResult."""
    courses = await fetch_courses(client)
    fetches = [fetch async for fetch in iter_course_assignments(client, courses)]
    return fold_course_fetches(fetches)
