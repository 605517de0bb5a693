"""Models package - re-exports all models for convenient imports."""

from mindpad.models.base import Base, TimestampMixin, now_ms
from mindpad.models.note import NoteRecord, new_note_id

__all__ = [
    "Base",
    "TimestampMixin",
    "NoteRecord",
    "new_note_id",
    "now_ms",
]
