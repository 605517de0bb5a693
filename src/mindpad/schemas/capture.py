"""
Quick Capture Schemas

Request/response models for the quick-capture endpoints.
"""

from pydantic import BaseModel, Field

from mindpad.schemas.notes import NoteSummary


class CaptureContent(BaseModel):
    """Body for draft updates and commits."""

    content: str = Field(default="", description="Markdown typed into the capture window")


class CaptureStatus(BaseModel):
    """Current coordinator state and the pending note, if any."""

    state: str
    note: NoteSummary | None = None
