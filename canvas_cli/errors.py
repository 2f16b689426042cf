"""Error types raised by the Canvas client and their terminal rendering.

Error payloads are kept whole on the exception objects and printed in full;
nothing here shortens a response body.
"""
from __future__ import annotations

import json
import typing as t

from rich.console import Console
from rich.json import JSON
from rich.text import Text
from rich.traceback import Traceback

if t.TYPE_CHECKING:
    from canvas_cli.config import Settings


STATUS_PAGE_URL = "https://status.instructure.com/"


class CanvasError(Exception):
    """Base class for every error the client raises on purpose."""


class AuthenticationMissing(CanvasError):
    """No stored token or Canvas URL."""

    def __init__(self, message: str = "Not authenticated. Run: canvas auth") -> None:
        super().__init__(message)


class HttpError(CanvasError):
    """Canvas (or the upload storage) answered with a failure status."""

    def __init__(
        self,
        status: int,
        body: t.Any,
        url: str = "",
        reason: str = "",
    ) -> None:
        self.status = status
        self.body = body
        self.url = url
        self.reason = reason
        super().__init__(f"HTTP {status} {reason}".strip() + (f" for {url}" if url else ""))


class AccessRestricted(HttpError):
    """HTTP 403; the aggregator skips courses that raise this."""


class ServiceUnavailable(HttpError):
    """HTTP 503, usually Canvas maintenance."""


class NetworkError(CanvasError):
    """The request was sent but no response came back."""

    def __init__(self, message: str, url: str = "") -> None:
        self.url = url
        super().__init__(message)


class UploadProtocolViolation(CanvasError):
    """The upload storage accepted the file but gave no location to confirm it at."""


def error_for_status(status: int, body: t.Any, url: str = "", reason: str = "") -> HttpError:
    """Build the most specific HttpError subclass for a status code."""
    if status == 403:
        return AccessRestricted(status, body, url, reason)
    if status == 503:
        return ServiceUnavailable(status, body, url, reason)
    return HttpError(status, body, url, reason)


def require_auth(settings: "Settings") -> None:
    """Raise AuthenticationMissing unless a token and URL are configured."""
    if not settings.is_authenticated():
        raise AuthenticationMissing()


def _is_html(body: t.Any) -> bool:
    if not isinstance(body, str):
        return False
    head = body.lstrip().lower()
    return head.startswith("<!doctype") or head.startswith("<html")


def _render_body(console: Console, body: t.Any) -> None:
    if isinstance(body, (dict, list)):
        console.print(JSON(json.dumps(body, indent=2)))
    else:
        console.print(Text(str(body)))


def display_error(error: BaseException, console: t.Optional[Console] = None) -> None:
    """Print every detail of an error to the terminal.

    Args:
        error: The exception to render
        console: Console to print on; defaults to a stderr console
    """
    console = console or Console(stderr=True)
    console.print("\n[bold red]\\[ERROR][/bold red]\n")

    if isinstance(error, AuthenticationMissing):
        console.print(Text(str(error), style="red"))
        console.print("[yellow]  canvas auth[/yellow]\n")
        return

    if isinstance(error, ServiceUnavailable):
        console.print("[red]Canvas is currently unavailable (503 Service Unavailable)[/red]")
        console.print("[yellow]\nThis usually means:[/yellow]")
        console.print("[yellow]  - Canvas is down for maintenance[/yellow]")
        console.print("[yellow]  - Canvas is experiencing service issues[/yellow]")
        console.print(Text.assemble(("\nCheck status at: ", "yellow"), (STATUS_PAGE_URL, "cyan")))
        if not _is_html(error.body):
            console.print("[red]\nResponse Data:[/red]")
            _render_body(console, error.body)
        return

    if isinstance(error, HttpError):
        console.print(Text.assemble(("Status: ", "red"), str(error.status)))
        console.print(Text.assemble(("Status Text: ", "red"), error.reason or "N/A"))
        console.print(Text.assemble(("URL: ", "red"), error.url or "N/A"))
        console.print("[red]\nResponse Data:[/red]")
        _render_body(console, error.body)
    elif isinstance(error, NetworkError):
        console.print("[red]No response received from server[/red]")
        console.print(Text.assemble(("Request: ", "red"), error.url or "N/A"))
        console.print(Text.assemble(("Message: ", "red"), str(error)))
    else:
        console.print(Text.assemble(("Message: ", "red"), str(error)))

    if error.__traceback__ is None:
        return
    if not isinstance(error, CanvasError) or error.__cause__ is not None:
        console.print("[red]\nStack Trace:[/red]")
        console.print(Traceback.from_exception(type(error), error, error.__traceback__))
