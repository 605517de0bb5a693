"""Repositories package."""

from mindpad.repositories.base import BaseRepository
from mindpad.repositories.notes import NoteRepository

__all__ = [
    "BaseRepository",
    "NoteRepository",
]
