"""
Pydantic models for Canvas REST payloads.

These mirror only the fields the client reads; anything else in a response is
ignored. Conversion into the dataclasses in canvas_cli.models happens in the
aggregator.
"""
from __future__ import annotations

from datetime import datetime
import typing as t

from pydantic import BaseModel, Field


class TermRecord(BaseModel):
    name: str = ""


class CourseRecord(BaseModel):
    """A course as returned by /api/v1/courses."""
    id: int
    name: t.Optional[str] = None
    course_code: t.Optional[str] = None
    term: t.Optional[TermRecord] = None

    def display_name(self) -> str:
        # Date-restricted courses come back with only an id
        return self.name or self.course_code or f"Course {self.id}"


class AssignmentRecord(BaseModel):
    """An assignment as returned by /api/v1/courses/{id}/assignments."""
    id: int
    name: str = ""
    due_at: t.Optional[datetime] = None
    points_possible: t.Optional[float] = None
    submission_types: list[str] = Field(default_factory=list)
    description: t.Optional[str] = None
    html_url: t.Optional[str] = None
    has_submitted_submissions: bool = False


class CustomColorsResponse(BaseModel):
    """/api/v1/users/self/colors, keyed by asset string ("course_42")."""
    custom_colors: dict[str, str] = Field(default_factory=dict)


class DashboardPositionsResponse(BaseModel):
    """/api/v1/users/self/dashboard_positions, keyed by asset string."""
    dashboard_positions: dict[str, int] = Field(default_factory=dict)


class UploadTarget(BaseModel):
    """Step 1 response of the file upload handshake."""
    upload_url: str
    upload_params: dict[str, t.Any] = Field(default_factory=dict)


class UserRecord(BaseModel):
    id: int
    name: str = ""


def course_asset_key(course_id: int) -> str:
    """Key Canvas uses for a course in per-user settings maps."""
    return f"course_{course_id}"
