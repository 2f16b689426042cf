"""Three-step file upload to an assignment submission.

Canvas does not take file bytes directly. The client first asks Canvas for an
upload target, then posts the file to that (usually third-party) storage URL,
then follows the returned Location back to Canvas to get the file record.

Each step is a coroutine that takes the previous state value and returns the
next one, so steps can be driven and tested one at a time. Nothing is retried
and nothing is cleaned up after a failure.
"""
from __future__ import annotations

import logging
import typing as t
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import httpx

from canvas_cli.client import CanvasClient
from canvas_cli.errors import UploadProtocolViolation
from canvas_cli.schemas import UploadTarget

logger = logging.getLogger(__name__)


class UploadStep(Enum):
    """Where an upload attempt currently is."""
    IDLE = "IDLE"
    AWAITING_UPLOAD_TARGET = "AWAITING_UPLOAD_TARGET"
    TRANSFERRING = "TRANSFERRING"
    CONFIRMING = "CONFIRMING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


@dataclass(frozen=True)
class UploadSession:
    """The file and assignment one submission attempt is for."""
    file_path: Path
    size: int
    course_id: int
    assignment_id: int

    @property
    def file_name(self) -> str:
        return self.file_path.name

    @property
    def files_path(self) -> str:
        return (
            f"/api/v1/courses/{self.course_id}"
            f"/assignments/{self.assignment_id}/submissions/self/files"
        )


@dataclass(frozen=True)
class Initiating:
    session: UploadSession
    step: t.ClassVar[UploadStep] = UploadStep.IDLE


@dataclass(frozen=True)
class Transferring:
    session: UploadSession
    upload_url: str
    upload_params: dict[str, t.Any] = field(default_factory=dict)
    step: t.ClassVar[UploadStep] = UploadStep.TRANSFERRING


@dataclass(frozen=True)
class Confirming:
    session: UploadSession
    location: str
    step: t.ClassVar[UploadStep] = UploadStep.CONFIRMING


@dataclass(frozen=True)
class Done:
    session: UploadSession
    file: t.Any
    step: t.ClassVar[UploadStep] = UploadStep.COMPLETE


@dataclass(frozen=True)
class Failed:
    session: UploadSession
    failed_step: UploadStep
    reason: BaseException
    step: t.ClassVar[UploadStep] = UploadStep.FAILED


UploadState = t.Union[Initiating, Transferring, Confirming, Done, Failed]


def start_upload(file_path: t.Union[str, Path], course_id: int, assignment_id: int) -> Initiating:
    """Open an upload attempt for a local file."""
    path = Path(file_path)
    return Initiating(
        session=UploadSession(
            file_path=path,
            size=path.stat().st_size,
            course_id=course_id,
            assignment_id=assignment_id,
        )
    )


async def initiate(client: CanvasClient, state: Initiating) -> Transferring:
    """Step 1: tell Canvas the file name and size, get the storage target back."""
    session = state.session
    data = await client.post_json(
        session.files_path, {"name": session.file_name, "size": session.size}
    )
    target = UploadTarget.model_validate(data)
    logger.debug("Upload target for %s issued", session.file_name)
    return Transferring(
        session=session,
        upload_url=target.upload_url,
        upload_params=dict(target.upload_params),
    )


async def transfer(client: CanvasClient, state: Transferring) -> Confirming:
    """Step 2: post the server's form fields, then the file, to the storage URL.

    Raises:
        UploadProtocolViolation: If the storage answers without a Location
    """
    session = state.session
    with session.file_path.open("rb") as file_obj:
        response = await client.post_multipart(
            state.upload_url, state.upload_params, session.file_name, file_obj
        )

    location = response.headers.get("location")
    if not location:
        raise UploadProtocolViolation(
            f"Upload of {session.file_name} returned HTTP {response.status_code} "
            f"without a Location header"
        )
    logger.debug("Upload of %s stored, confirming", session.file_name)
    return Confirming(session=session, location=str(httpx.URL(state.upload_url).join(location)))


async def confirm(client: CanvasClient, state: Confirming) -> Done:
    """Step 3: fetch the Location to get Canvas' record of the uploaded file."""
    file_record = await client.get_absolute(state.location)
    return Done(session=state.session, file=file_record)


async def run_upload(
    client: CanvasClient,
    file_path: t.Union[str, Path],
    course_id: int,
    assignment_id: int,
    progress_callback: t.Optional[t.Callable[[UploadState], None]] = None,
) -> Done:
    """Drive all three steps for one file.

    Args:
        client: Authenticated Canvas client
        file_path: Local file to submit
        course_id: Course the assignment belongs to
        assignment_id: Assignment to attach the file to
        progress_callback: Called with each state as it is entered, including
                           a Failed state right before the error is re-raised

    Returns:
        The Done state holding the confirmed file record

    Raises:
        The first error any step raises, unchanged
    """
    state: UploadState = start_upload(file_path, course_id, assignment_id)

    def report(new_state: UploadState) -> None:
        logger.debug("Upload state -> %s", new_state.step.value)
        if progress_callback:
            progress_callback(new_state)

    report(state)
    current = UploadStep.AWAITING_UPLOAD_TARGET
    try:
        state = await initiate(client, state)
        report(state)
        current = UploadStep.TRANSFERRING
        state = await transfer(client, state)
        report(state)
        current = UploadStep.CONFIRMING
        state = await confirm(client, state)
    except Exception as exc:
        report(Failed(session=state.session, failed_step=current, reason=exc))
        raise
    report(state)
    return state
