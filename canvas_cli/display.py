"""Terminal rendering of courses and assignments."""
from __future__ import annotations

import re
import typing as t
from datetime import datetime

from rich.console import Console
from rich.rule import Rule
from rich.text import Text
from rich.tree import Tree

from canvas_cli.colors import ColorResolver, due_date_color
from canvas_cli.dates import format_due_date, group_by_week, is_due, sort_by_due_date
from canvas_cli.models import Assignment, Course

console = Console()

DESCRIPTION_PREVIEW_LENGTH = 500
UPCOMING_PREVIEW_COUNT = 10
MIN_NAME_WIDTH = 20
TREE_GUIDE_WIDTH = 4

TAG_PATTERN = re.compile(r"<[^>]*>")


def truncate(text: str, max_length: int) -> str:
    """Truncate text to max_length characters, adding ellipsis if needed."""
    if len(text) <= max_length:
        return text
    if max_length <= 3:
        return "..."[:max_length]
    return text[:max_length - 3] + "..."


def strip_markup(html: str) -> str:
    return TAG_PATTERN.sub("", html).strip()


def course_tag(assignment: Assignment, colors: ColorResolver) -> Text:
    color = colors.resolve(assignment.course_id, assignment.course_name, assignment.course_color)
    return Text(f"[{assignment.course_name}]", style=color)


def due_text(assignment: Assignment, now: datetime) -> Text:
    return Text(
        format_due_date(assignment.due_at, now),
        style=due_date_color(assignment.due_at, now),
    )


def _format_points(points: float) -> str:
    return str(int(points)) if float(points).is_integer() else str(points)


def display_assignments_list(
    assignments: t.Sequence[Assignment],
    now: datetime,
    colors: ColorResolver,
    console: Console = console,
) -> None:
    if not assignments:
        console.print("\n[yellow]No assignments found[/yellow]\n")
        return

    console.print("\n[bold]Assignments[/bold]\n")
    for index, assignment in enumerate(assignments, start=1):
        console.print(Text.assemble(
            (f"{index}. ", "dim"),
            course_tag(assignment, colors),
            " ",
            (assignment.name, "bold"),
        ))
        console.print(Text.assemble("   Due: ", due_text(assignment, now)))
        if assignment.points_possible is not None:
            console.print(f"   Points: {_format_points(assignment.points_possible)}")
        console.print()


def display_week_view(
    assignments: t.Sequence[Assignment],
    now: datetime,
    start_day: int,
    colors: ColorResolver,
    console: Console = console,
) -> None:
    """Print assignments as a tree per calendar week."""
    if not assignments:
        console.print("\n[yellow]No upcoming assignments[/yellow]\n")
        return

    weeks = group_by_week(sort_by_due_date(assignments), now, start_day)
    console.print("\n[bold]Upcoming Assignments[/bold]\n")

    for week_index, week in enumerate(weeks):
        tree = Tree(Text(week.label, style="bold cyan"), guide_style="dim")
        for assignment in week.assignments:
            tag = course_tag(assignment, colors)

            # "├── [Course] " prefix plus a one column margin
            available = console.width - (TREE_GUIDE_WIDTH + len(tag.plain) + 1) - 1
            name = truncate(assignment.name, max(available, MIN_NAME_WIDTH))

            tree.add(Text.assemble(tag, " ", name, "\nDue: ", due_text(assignment, now)))
        console.print(tree)
        if week_index < len(weeks) - 1:
            console.print()
    console.print()


def _header(console: Console, title: str, color: str) -> None:
    console.print(Rule(style="bold"))
    console.print(Text(f"  {title}", style=f"bold {color}"))
    console.print(Rule(style="bold"))


def display_assignment_details(
    assignment: Assignment,
    now: datetime,
    colors: ColorResolver,
    console: Console = console,
) -> None:
    color = colors.resolve(assignment.course_id, assignment.course_name, assignment.course_color)
    _header(console, assignment.course_name, color)
    console.print(Text(f"\n{assignment.name}\n", style="bold"))

    console.print(Text.assemble(("Due Date: ", "dim"), due_text(assignment, now)))
    if assignment.points_possible is not None:
        console.print(Text.assemble(("Points: ", "dim"), _format_points(assignment.points_possible)))
    console.print(Text.assemble(("Submission Types: ", "dim"), ", ".join(assignment.submission_types)))
    if assignment.html_url:
        console.print(Text.assemble(("URL: ", "dim"), assignment.html_url))

    if assignment.description:
        description = strip_markup(assignment.description)
        if description:
            console.print(Text("\nDescription:", style="dim"))
            console.print(Text(truncate(description, DESCRIPTION_PREVIEW_LENGTH)))

    console.print(Rule(style="bold"))


def display_course_details(
    course: Course,
    upcoming: t.Sequence[Assignment],
    all_assignments: t.Sequence[Assignment],
    now: datetime,
    colors: ColorResolver,
    days: int,
    console: Console = console,
) -> None:
    """Course header, assignment counts and a preview of what is coming up.

    Only assignments in ``upcoming`` that are not yet past due are previewed.
    """
    color = colors.resolve(course.id, course.name, course.custom_color)
    _header(console, course.name, color)
    console.print(Text.assemble(("\nCourse Code: ", "dim"), course.course_code or "N/A"))
    if course.term:
        console.print(Text.assemble(("Term: ", "dim"), course.term))

    console.print(Text.assemble(("\nTotal Assignments: ", "dim"), str(len(all_assignments))))
    still_due = [a for a in upcoming if is_due(a, now)]
    console.print(Text.assemble((f"Upcoming Assignments (next {days} days): ", "dim"), str(len(still_due))))

    if still_due:
        console.print("\n[bold]Upcoming Assignments:[/bold]\n")
        for index, assignment in enumerate(still_due[:UPCOMING_PREVIEW_COUNT], start=1):
            console.print(f"  {index}. ", Text(assignment.name), sep="")
            console.print(Text.assemble("     Due: ", due_text(assignment, now)))
            console.print()

    console.print(Rule(style="bold"))


def display_skipped_courses(skipped: t.Sequence[str], console: Console = console) -> None:
    if not skipped:
        return
    console.print(Text(
        "Skipped (access restricted): " + ", ".join(skipped),
        style="dim",
    ))
