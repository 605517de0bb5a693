"""
Quick Capture

State machine for the hotkey-driven capture window:

    IDLE --begin--> PENDING_EMPTY --draft--> PENDING_WITH_CONTENT
      ^                 |    ^                     |
      |                 |    +-------draft(blank)--+
      +----commit / discard-------------------------+

At most one capture is pending process-wide. The pending slot is an
explicit PendingCapture object owned by the coordinator; whoever needs it
(HTTP layer, window shell) receives the coordinator, never a global.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from dataclasses import dataclass

from mindpad.core.errors import NoPendingCaptureError, NoteNotFoundError, ValidationError
from mindpad.schemas.notes import Note
from mindpad.services.enrichment import EnrichmentPipeline
from mindpad.services.store import NoteStore
from mindpad.services.tags import extract_tags, merge_tags

logger = logging.getLogger(__name__)


class CaptureState(enum.Enum):
    IDLE = "idle"
    PENDING_EMPTY = "pending_empty"
    PENDING_WITH_CONTENT = "pending_with_content"


@dataclass
class PendingCapture:
    """The single pending-capture slot."""

    note_id: str | None = None
    state: CaptureState = CaptureState.IDLE

    @property
    def is_pending(self) -> bool:
        return self.note_id is not None

    def hold(self, note_id: str) -> None:
        self.note_id = note_id
        self.state = CaptureState.PENDING_EMPTY

    def clear(self) -> None:
        self.note_id = None
        self.state = CaptureState.IDLE


class QuickCaptureCoordinator:
    """
    Owns the pending capture and its transitions.

    All transitions are serialized by an asyncio.Lock, so rapid repeated
    ``begin`` calls resolve to the same pending note.
    """

    def __init__(
        self,
        store: NoteStore,
        pipeline: EnrichmentPipeline,
        pending: PendingCapture | None = None,
    ) -> None:
        self._store = store
        self._pipeline = pipeline
        self.pending = pending or PendingCapture()
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CaptureState:
        return self.pending.state

    async def begin(self) -> Note:
        """
        Start a capture, or return the one already pending.

        The note is created immediately, empty and untitled, so its id is
        reserved before any content exists.
        """
        async with self._lock:
            if self.pending.is_pending:
                existing = await self._store.get(self.pending.note_id)  # type: ignore[arg-type]
                if existing is not None:
                    logger.info("Capture already pending (%s), reusing it", existing.id)
                    return existing
                logger.warning("Pending note %s vanished, starting over", self.pending.note_id)
                self.pending.clear()

            note = await self._store.create({"content": ""})
            self.pending.hold(note.id)
            logger.info("Quick capture started with note %s", note.id)
            return note

    async def update_draft(self, content: str) -> Note:
        """
        Persist in-progress text without finalizing.

        Raises:
            NoPendingCaptureError: No capture is pending.
            NoteNotFoundError: The pending note was deleted elsewhere.
        """
        async with self._lock:
            note_id = self._require_pending()
            try:
                note = await self._store.update(note_id, {"content": content})
            except NoteNotFoundError:
                self.pending.clear()
                raise
            self.pending.state = (
                CaptureState.PENDING_WITH_CONTENT if content.strip() else CaptureState.PENDING_EMPTY
            )
            return note

    async def commit(self, content: str) -> Note:
        """
        Finalize the pending note and launch enrichment in the background.

        Returns as soon as the content is persisted; enrichment runs later.

        Raises:
            NoPendingCaptureError: No capture is pending.
            ValidationError: Blank content. The capture stays pending.
            NoteNotFoundError: The pending note was deleted elsewhere.
        """
        async with self._lock:
            note_id = self._require_pending()
            text = (content or "").strip()
            if not text:
                raise ValidationError("Content cannot be empty")

            current = await self._store.get(note_id)
            if current is None:
                self.pending.clear()
                raise NoteNotFoundError(note_id)

            note = await self._store.update(
                note_id,
                {"content": text, "tags": merge_tags(current.tags, extract_tags(text))},
            )
            self.pending.clear()

        logger.info("Quick capture committed (%s, %d chars)", note_id, len(text))
        self._pipeline.schedule(note_id)
        return note

    async def discard(self) -> None:
        """Cancel the capture and delete its note. Always succeeds when idle."""
        async with self._lock:
            if not self.pending.is_pending:
                return
            note_id = self.pending.note_id
            await self._store.delete(note_id)  # type: ignore[arg-type]
            self.pending.clear()
        logger.info("Quick capture discarded (%s)", note_id)

    async def get_pending(self) -> Note | None:
        """The pending note, or None when idle."""
        if not self.pending.is_pending:
            return None
        note = await self._store.get(self.pending.note_id)  # type: ignore[arg-type]
        if note is None:
            self.pending.clear()
        return note

    def _require_pending(self) -> str:
        if self.pending.note_id is None:
            raise NoPendingCaptureError()
        return self.pending.note_id
