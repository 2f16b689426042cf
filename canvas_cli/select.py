"""Interactive selection menus on the terminal.

Every menu returns the chosen value, or None when the user cancels with "q"
(or the list is empty).
"""
from __future__ import annotations

import typing as t
from dataclasses import dataclass
from pathlib import Path

from rich.console import Console
from rich.prompt import Confirm, Prompt
from rich.text import Text

from canvas_cli.models import Assignment, Course

console = Console()

CANCEL = "q"


@dataclass(frozen=True)
class Choice:
    label: str
    value: t.Any


def select(message: str, choices: t.Sequence[Choice], console: Console = console) -> t.Any:
    """Show a numbered menu and return the value of the picked entry."""
    if not choices:
        return None

    console.print(Text(message, style="bold cyan"))
    for number, choice in enumerate(choices, start=1):
        console.print(Text.assemble((f"  {number:>2}. ", "dim"), choice.label))

    answers = [str(number) for number in range(1, len(choices) + 1)]
    answer = Prompt.ask(
        f"Choose 1-{len(choices)} or {CANCEL} to cancel",
        choices=answers + [CANCEL],
        show_choices=False,
        console=console,
    )
    if answer == CANCEL:
        return None
    return choices[int(answer) - 1].value


def select_course(courses: t.Sequence[Course], console: Console = console) -> t.Optional[Course]:
    if not courses:
        console.print("[yellow]No courses found[/yellow]")
        return None
    choices = [
        Choice(f"{course.name} ({course.course_code})" if course.course_code else course.name, course)
        for course in courses
    ]
    return select("Select a course:", choices, console=console)


def select_assignment(
    assignments: t.Sequence[Assignment],
    console: Console = console,
) -> t.Optional[Assignment]:
    if not assignments:
        console.print("[yellow]No assignments found[/yellow]")
        return None
    choices = [Choice(f"[{a.course_name}] {a.name}", a) for a in assignments]
    return select("Select an assignment:", choices, console=console)


def select_file(directory: Path, console: Console = console) -> t.Optional[Path]:
    """Pick a regular, non-hidden file from a directory."""
    files = sorted(
        path for path in directory.iterdir()
        if path.is_file() and not path.name.startswith(".")
    )
    if not files:
        console.print("[yellow]No files found in current directory[/yellow]")
        return None
    return select("Select a file to submit:", [Choice(path.name, path) for path in files], console=console)


def confirm(message: str, console: Console = console) -> bool:
    return Confirm.ask(message, default=False, console=console)


def ask_token(console: Console = console) -> str:
    while True:
        token = Prompt.ask("Enter your Canvas access token", password=True, console=console).strip()
        if token:
            return token
        console.print("[red]Token cannot be empty[/red]")


def ask_url(console: Console = console) -> str:
    while True:
        url = Prompt.ask("Enter your Canvas URL", console=console).strip()
        if url.startswith("http://") or url.startswith("https://"):
            return url.rstrip("/")
        console.print("[red]Please enter a valid URL starting with http:// or https://[/red]")
