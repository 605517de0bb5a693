"""
Quick Capture API Router

Endpoints behind the hotkey capture window. Map one-to-one onto the
QuickCaptureCoordinator transitions.
"""

from fastapi import APIRouter, Depends, HTTPException, Response, status

from mindpad.api.deps import get_capture
from mindpad.core.errors import NoPendingCaptureError, NoteNotFoundError, ValidationError
from mindpad.schemas.capture import CaptureContent, CaptureStatus
from mindpad.schemas.notes import NoteSummary
from mindpad.services.capture import QuickCaptureCoordinator

router = APIRouter()


@router.post("/", response_model=NoteSummary)
async def begin_capture(capture: QuickCaptureCoordinator = Depends(get_capture)):
    """Start a capture; repeated calls return the same pending note."""
    return NoteSummary.from_note(await capture.begin())


@router.get("/", response_model=CaptureStatus)
async def read_pending_capture(capture: QuickCaptureCoordinator = Depends(get_capture)):
    """Current state and pending note (null when idle)."""
    note = await capture.get_pending()
    return CaptureStatus(
        state=capture.state.value,
        note=NoteSummary.from_note(note) if note else None,
    )


@router.put("/draft", response_model=NoteSummary)
async def update_capture_draft(
    body: CaptureContent,
    capture: QuickCaptureCoordinator = Depends(get_capture),
):
    """Persist in-progress text of the pending capture."""
    try:
        note = await capture.update_draft(body.content)
    except NoPendingCaptureError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except NoteNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return NoteSummary.from_note(note)


@router.post("/commit", response_model=NoteSummary)
async def commit_capture(
    body: CaptureContent,
    capture: QuickCaptureCoordinator = Depends(get_capture),
):
    """
    Finalize the pending capture.

    Returns as soon as the content is saved; title, tags and embedding are
    generated afterwards.
    """
    try:
        note = await capture.commit(body.content)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)
        ) from e
    except NoPendingCaptureError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e)) from e
    except NoteNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    return NoteSummary.from_note(note)


@router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
async def discard_capture(capture: QuickCaptureCoordinator = Depends(get_capture)):
    """Discard the pending capture and its note. Idempotent."""
    await capture.discard()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
