"""Shared fixtures and factories for the canvas_cli tests."""
import itertools
import typing as t
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from canvas_cli.client import CanvasClient
from canvas_cli.models import DEFAULT_POSITION, Assignment

BASE_URL = "https://canvas.test"

# Wednesday, 15 January 2025, noon UTC
NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

_ids = itertools.count(1000)


def make_assignment(
    name: str = "Homework",
    due_in_days: t.Optional[float] = None,
    course_name: str = "Course",
    course_id: int = 1,
    position: int = DEFAULT_POSITION,
    **kwargs: t.Any,
) -> Assignment:
    """Build an Assignment due a number of days after NOW (None for undated)."""
    due_at = NOW + timedelta(days=due_in_days) if due_in_days is not None else None
    return Assignment(
        id=kwargs.pop("id", next(_ids)),
        course_id=course_id,
        name=name,
        due_at=due_at,
        course_name=course_name,
        course_position=position,
        **kwargs,
    )


def json_response(
    data: t.Any,
    status_code: int = 200,
    headers: t.Optional[dict[str, str]] = None,
) -> httpx.Response:
    return httpx.Response(status_code, json=data, headers=headers)


def mock_client(handler: t.Callable[[httpx.Request], httpx.Response]) -> CanvasClient:
    """CanvasClient whose requests are answered by handler instead of the network."""
    return CanvasClient(BASE_URL, "test-token", transport=httpx.MockTransport(handler))


@pytest.fixture
def now() -> datetime:
    return NOW
