# -*- coding: utf-8 -*-
"""Command-line entry point for the Canvas client.

Running `canvas` with no command lists assignments due in the next few days.
"""
import asyncio
import logging
import typing as t
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.text import Text
from tzlocal import get_localzone

from canvas_cli import select as menus
from canvas_cli.aggregator import fetch_all_assignments, fetch_course_assignments, fetch_courses
from canvas_cli.client import CanvasClient
from canvas_cli.colors import ColorCache, ColorResolver
from canvas_cli.config import Settings
from canvas_cli.dates import (
    format_due_date,
    is_due,
    is_due_within_days,
    is_overdue,
    sort_by_due_date,
    upcoming_week_window,
)
from canvas_cli.display import (
    display_assignment_details,
    display_assignments_list,
    display_course_details,
    display_skipped_courses,
    display_week_view,
)
from canvas_cli.errors import CanvasError, display_error
from canvas_cli.logging_setup import configure_logging
from canvas_cli.models import Assignment
from canvas_cli.select import Choice
from canvas_cli.upload import Failed, UploadState, UploadStep, run_upload

console = Console()
logger = logging.getLogger(__name__)

SHOW_ALL = "__SHOW_ALL__"

# List filters
UPCOMING = "upcoming"
ALL = "all"
ALL_DUE = "all-due"
ALL_OVERDUE = "all-overdue"


def build_client(settings: Settings) -> CanvasClient:
    return CanvasClient.from_settings(settings)


def local_now() -> datetime:
    return datetime.now(get_localzone())


def run_command(coro: t.Coroutine[t.Any, t.Any, None]) -> None:
    """Run a command coroutine, turning Canvas errors into exit status 1."""
    try:
        asyncio.run(coro)
    except CanvasError as exc:
        display_error(exc)
        raise SystemExit(1)


def filter_assignments(
    assignments: t.Iterable[Assignment],
    mode: str,
    days: int,
    now: datetime,
) -> list[Assignment]:
    if mode == ALL_OVERDUE:
        selected = [a for a in assignments if is_overdue(a, now)]
    elif mode == ALL_DUE:
        selected = [a for a in assignments if is_due(a, now)]
    elif mode == ALL:
        selected = list(assignments)
    else:
        selected = [a for a in assignments if is_due_within_days(a, days, now)]
    return sort_by_due_date(selected)


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


def _colors(ctx: click.Context) -> ColorResolver:
    return ctx.obj["colors"]


# Commands

@click.group(
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.version_option(package_name="canvas-cli")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """Canvas LMS assignments in your terminal."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj.setdefault("settings", Settings())
    # One color cache per run so a course keeps its color across every view
    ctx.obj.setdefault("colors", ColorResolver(ColorCache()))
    if ctx.invoked_subcommand is None:
        ctx.invoke(list_command)


@main.command("auth")
@click.option("--url", help="Canvas base URL, e.g. https://school.instructure.com")
@click.pass_context
def auth_command(ctx: click.Context, url: t.Optional[str]) -> None:
    """Store a Canvas access token after verifying it."""
    settings = _settings(ctx)

    async def verify(token: str, base_url: str) -> None:
        async with CanvasClient(base_url, token) as client:
            user = await client.get_user()
        settings.save_credentials(token, base_url)
        console.print("\n[green]\\[+] Authentication successful![/green]")
        console.print(Text(f"Logged in as: {user.name}", style="dim"))

    console.print("\n[cyan]\\[AUTH] Canvas CLI Authentication[/cyan]\n")
    token = menus.ask_token()
    base_url = url.rstrip("/") if url else menus.ask_url()
    run_command(verify(token, base_url))


def _list(ctx: click.Context, mode: str, days: t.Optional[int]) -> None:
    settings = _settings(ctx)
    colors = _colors(ctx)
    window = days if days is not None else settings.default_days

    async def async_list() -> None:
        async with build_client(settings) as client:
            console.print("\n[cyan]\\[*] Loading assignments...[/cyan]")
            result = await fetch_all_assignments(client)
        now = local_now()
        display_assignments_list(filter_assignments(result.assignments, mode, window, now), now, colors)
        display_skipped_courses(result.skipped_courses)

    run_command(async_list())


@main.command("list")
@click.option("--days", "-d", type=click.IntRange(min=0), help="Look-ahead window in days.")
@click.pass_context
def list_command(ctx: click.Context, days: t.Optional[int] = None) -> None:
    """List assignments due in the next few days."""
    _list(ctx, UPCOMING, days)


@main.command("list-all")
@click.pass_context
def list_all_command(ctx: click.Context) -> None:
    """List all assignments."""
    _list(ctx, ALL, None)


@main.command("list-all-due")
@click.pass_context
def list_all_due_command(ctx: click.Context) -> None:
    """List all assignments that are still due."""
    _list(ctx, ALL_DUE, None)


@main.command("list-all-overdue")
@click.pass_context
def list_all_overdue_command(ctx: click.Context) -> None:
    """List all overdue assignments."""
    _list(ctx, ALL_OVERDUE, None)


@main.command("week")
@click.option("--weeks", "-w", type=click.IntRange(min=0), help="Extra weeks to show after this one.")
@click.pass_context
def week_command(ctx: click.Context, weeks: t.Optional[int]) -> None:
    """Show upcoming assignments grouped by week."""
    settings = _settings(ctx)
    colors = _colors(ctx)
    extra_weeks = weeks if weeks is not None else settings.extra_weeks
    start_day = settings.week_start_day

    async def async_week() -> None:
        async with build_client(settings) as client:
            console.print("\n[cyan]\\[*] Loading assignments...[/cyan]")
            result = await fetch_all_assignments(client)
        now = local_now()
        _, window_end = upcoming_week_window(now, start_day, extra_weeks)
        upcoming = [
            a for a in result.assignments
            if is_due(a, now) and a.due_at is not None and a.due_at <= window_end
        ]
        display_week_view(upcoming, now, start_day, colors)
        display_skipped_courses(result.skipped_courses)

    run_command(async_week())


def _class(ctx: click.Context, show_all: bool) -> None:
    settings = _settings(ctx)
    colors = _colors(ctx)
    days = settings.default_days

    async def async_class() -> None:
        async with build_client(settings) as client:
            console.print("\n[cyan]\\[*] Loading courses...[/cyan]\n")
            courses = await fetch_courses(client)
            course = menus.select_course(courses)
            if course is None:
                return
            console.print("\n[cyan]\\[*] Loading assignments...[/cyan]\n")
            assignments = sort_by_due_date(await fetch_course_assignments(client, course))

        now = local_now()
        summary = assignments if show_all else [
            a for a in assignments if is_due_within_days(a, days, now)
        ]
        display_course_details(course, summary, assignments, now, colors, days)
        if menus.confirm("View all assignments?"):
            display_assignments_list(assignments, now, colors)

    run_command(async_class())


@main.command("class")
@click.pass_context
def class_command(ctx: click.Context) -> None:
    """Pick a course and view what is due soon."""
    _class(ctx, show_all=False)


@main.command("class-all")
@click.pass_context
def class_all_command(ctx: click.Context) -> None:
    """Pick a course and view all of its assignments."""
    _class(ctx, show_all=True)


def _assignment(ctx: click.Context, show_all: bool) -> None:
    settings = _settings(ctx)
    colors = _colors(ctx)
    days = settings.default_days

    async def async_assignment() -> None:
        async with build_client(settings) as client:
            console.print("\n[cyan]\\[*] Loading courses...[/cyan]\n")
            course = menus.select_course(await fetch_courses(client))
            if course is None:
                return
            console.print("\n[cyan]\\[*] Loading assignments...[/cyan]\n")
            assignments = await fetch_course_assignments(client, course)

        now = local_now()
        if not show_all:
            assignments = [a for a in assignments if is_due_within_days(a, days, now)]
        if not assignments:
            console.print("[yellow]No assignments found[/yellow]")
            return
        assignment = menus.select_assignment(sort_by_due_date(assignments))
        if assignment is not None:
            display_assignment_details(assignment, now, colors)

    run_command(async_assignment())


@main.command("assignment")
@click.pass_context
def assignment_command(ctx: click.Context) -> None:
    """Pick an assignment due soon and view its details."""
    _assignment(ctx, show_all=False)


@main.command("assignment-all")
@click.pass_context
def assignment_all_command(ctx: click.Context) -> None:
    """Pick any assignment and view its details."""
    _assignment(ctx, show_all=True)


def _assignment_choices(assignments: t.Sequence[Assignment], now: datetime) -> list[Choice]:
    return [
        Choice(f"[{a.course_name}] {a.name} - Due: {format_due_date(a.due_at, now)}", a)
        for a in assignments
    ]


def report_upload_progress(state: UploadState) -> None:
    messages = {
        UploadStep.IDLE: "Step 1: Requesting upload parameters...",
        UploadStep.TRANSFERRING: "Step 2: Uploading file data...",
        UploadStep.CONFIRMING: "Step 3: Confirming upload...",
    }
    if isinstance(state, Failed):
        console.print(Text(f"  Upload failed while {state.failed_step.value.lower()}", style="red"))
    elif state.step in messages:
        console.print(Text(f"  {messages[state.step]}", style="dim"))


@main.command("submit")
@click.option(
    "--directory",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=".",
    help="Directory to pick the file from.",
)
@click.pass_context
def submit_command(ctx: click.Context, directory: Path) -> None:
    """Submit a file for an assignment."""
    settings = _settings(ctx)
    days = settings.default_days

    async def async_submit() -> None:
        async with build_client(settings) as client:
            console.print("\n[cyan]\\[*] Loading courses...[/cyan]\n")
            course = menus.select_course(await fetch_courses(client))
            if course is None:
                return

            console.print("\n[cyan]\\[*] Loading assignments...[/cyan]\n")
            uploads = [a for a in await fetch_course_assignments(client, course) if a.accepts_file_upload]
            if not uploads:
                console.print("[yellow]No file upload assignments found for this course[/yellow]")
                return

            now = local_now()
            upcoming = sort_by_due_date(a for a in uploads if is_due_within_days(a, days, now))
            future = sort_by_due_date(a for a in uploads if is_due(a, now))

            choices = _assignment_choices(upcoming, now)
            if len(future) > len(upcoming):
                choices.append(Choice(f"[>] Show all {len(future)} future file upload assignments", SHOW_ALL))
            assignment = menus.select(
                f"Select an assignment (showing {len(upcoming)} due in next {days} days):", choices,
            )
            if assignment == SHOW_ALL:
                assignment = menus.select("Select an assignment:", _assignment_choices(future, now))
            if assignment is None:
                if not choices:
                    console.print("[yellow]No upcoming file upload assignments[/yellow]")
                return

            console.print(Text(f"\nSelected: {assignment.name}", style="cyan"))
            console.print(Text(f"Course: {assignment.course_name}\n", style="dim"))

            file_path = menus.select_file(directory)
            if file_path is None:
                return
            console.print(Text(f"\nFile to submit: {file_path.name}", style="cyan"))
            console.print(Text(f"Path: {file_path.resolve()}", style="dim"))
            if not menus.confirm("\nSubmit this file?"):
                console.print("\n[yellow]Submission cancelled[/yellow]\n")
                return

            console.print("\n[cyan]\\[*] Uploading file...[/cyan]\n")
            await run_upload(
                client,
                file_path,
                assignment.course_id,
                assignment.id,
                progress_callback=report_upload_progress,
            )
        console.print("\n[green]\\[+] File submitted successfully![/green]\n")

    run_command(async_submit())


if __name__ == "__main__":
    main()
