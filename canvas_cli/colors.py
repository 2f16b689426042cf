"""Colors for due dates and courses.

``due_date_color`` blends from red (due within a day) through amber (a week
out) to green (two weeks out). ``ColorResolver`` gives each course a stable
color, preferring the one the user picked in Canvas.
"""
from __future__ import annotations

import math
import typing as t
from datetime import datetime

MS_PER_DAY = 24 * 60 * 60 * 1000

RGB = tuple[int, int, int]

# Color stops (muted tones that read well on dark and light terminals)
URGENT_RED: RGB = (215, 95, 95)       # #d75f5f
MID_YELLOW: RGB = (215, 175, 95)      # #d7af5f
RELAXED_GREEN: RGB = (95, 175, 95)    # #5faf5f
NO_DUE_DATE_COLOR = "#5faf5f"

FALLBACK_PALETTE = ("cyan", "green", "yellow", "magenta", "blue", "red")


def _lerp(start: int, end: int, fraction: float) -> int:
    # Round half up so .5 lands the same way on every platform
    return int(math.floor(start + (end - start) * fraction + 0.5))


def _blend(start: RGB, end: RGB, fraction: float) -> RGB:
    return (
        _lerp(start[0], end[0], fraction),
        _lerp(start[1], end[1], fraction),
        _lerp(start[2], end[2], fraction),
    )


def _to_hex(rgb: RGB) -> str:
    return "#" + "".join(f"{channel:02x}" for channel in rgb)


def days_until(due_at: datetime, now: datetime) -> float:
    """Fractional days from now to due_at (negative once past)."""
    return (due_at - now).total_seconds() * 1000 / MS_PER_DAY


def gradient_for_days(days_until_due: float) -> str:
    if days_until_due <= 1:
        rgb = URGENT_RED
    elif days_until_due <= 7:
        rgb = _blend(URGENT_RED, MID_YELLOW, (days_until_due - 1) / 6)
    elif days_until_due <= 13:
        rgb = _blend(MID_YELLOW, RELAXED_GREEN, (days_until_due - 7) / 6)
    else:
        rgb = RELAXED_GREEN
    return _to_hex(rgb)


def due_date_color(due_at: t.Optional[datetime], now: datetime) -> str:
    """Hex color ("#rrggbb", lowercase) for how soon something is due."""
    if due_at is None:
        return NO_DUE_DATE_COLOR
    return gradient_for_days(days_until(due_at, now))


class ColorCache:
    """Course key -> color, kept for the lifetime of one CLI run."""

    def __init__(self) -> None:
        self._colors: dict[t.Any, str] = {}

    def get(self, key: t.Any) -> t.Optional[str]:
        return self._colors.get(key)

    def set(self, key: t.Any, color: str) -> None:
        self._colors[key] = color

    def __contains__(self, key: t.Any) -> bool:
        return key in self._colors

    def __len__(self) -> int:
        return len(self._colors)


class ColorResolver:
    """Pick the display color for a course.

    1. A custom color from Canvas is used as-is and cached.
    2. Otherwise a color already cached for the course is reused.
    3. Otherwise a palette color is derived from the course key and cached.
    """

    def __init__(
        self,
        cache: t.Optional[ColorCache] = None,
        palette: t.Sequence[str] = FALLBACK_PALETTE,
    ) -> None:
        self.cache = cache if cache is not None else ColorCache()
        self.palette = tuple(palette)

    @staticmethod
    def cache_key(course_id: t.Any, course_name: t.Optional[str]) -> t.Any:
        return course_id if course_id is not None else course_name

    def fallback_color(self, key: t.Any) -> str:
        checksum = sum(ord(char) for char in str(key)) if key is not None else 0
        return self.palette[checksum % len(self.palette)]

    def resolve(
        self,
        course_id: t.Any,
        course_name: t.Optional[str] = None,
        custom_color: t.Optional[str] = None,
    ) -> str:
        key = self.cache_key(course_id, course_name)
        if custom_color:
            self.cache.set(key, custom_color)
            return custom_color

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        color = self.fallback_color(key)
        self.cache.set(key, color)
        return color
