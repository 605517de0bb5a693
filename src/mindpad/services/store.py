"""
Note Store

Session-per-call facade over NoteRepository. This is the contract every
other component (search, enrichment, graph, quick capture) depends on.

Each operation opens its own AsyncSession and commits before returning, so
callers may run operations concurrently without external locking. Reads
and writes are not atomic across awaits: callers that merge onto prior
state must re-fetch immediately before updating.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mindpad.core.config import settings
from mindpad.core.errors import NoteNotFoundError, ValidationError
from mindpad.repositories.notes import NoteRepository
from mindpad.schemas.notes import Note, NoteCreate, NoteUpdate

logger = logging.getLogger(__name__)

# Columns without a meaning for None; title, embedding and parent_id have one
NON_NULLABLE_FIELDS = (
    "content",
    "tags",
    "is_favorite",
    "auto_generated_title",
    "auto_generated_tags",
)


class NoteStore:
    """
    Persisted collection of notes.

    Usage::

        store = NoteStore(build_session_factory(engine))
        note = await store.create({"content": "buy milk #errands"})
        note = await store.update(note.id, {"title": "groceries"})
        await store.delete(note.id)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repository: NoteRepository | None = None,
        default_title: str | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._repository = repository or NoteRepository()
        self.default_title = default_title or settings.DEFAULT_TITLE

    @property
    def corrupt_record_count(self) -> int:
        """Malformed tags/embedding fields seen since startup."""
        return self._repository.corrupt_records

    async def create(self, fields: NoteCreate | dict[str, Any] | None = None) -> Note:
        """
        Create a note.

        Missing title defaults to the placeholder, missing tags to an empty
        list, missing embedding to absent.

        Raises:
            ValidationError: ``parent_id`` references an unknown note.
        """
        note_in = fields if isinstance(fields, NoteCreate) else NoteCreate(**(fields or {}))
        data = note_in.model_dump()
        if not data.get("title"):
            data["title"] = self.default_title

        async with self._session_factory() as session:
            await self._check_parent(session, data.get("parent_id"))
            record = await self._repository.create_note(session, data)
            note = self._repository.to_note(record)

        logger.info("Created note %s", note.id)
        return note

    async def get(self, note_id: str) -> Note | None:
        """Get a note by id. Returns None if not found."""
        async with self._session_factory() as session:
            record = await self._repository.get_by_id(session, note_id)
            return self._repository.to_note(record) if record else None

    async def get_or_raise(self, note_id: str) -> Note:
        note = await self.get(note_id)
        if note is None:
            raise NoteNotFoundError(note_id)
        return note

    async def exists(self, note_id: str) -> bool:
        async with self._session_factory() as session:
            return await self._repository.exists(session, note_id)

    async def list(self) -> list[Note]:
        """All notes. No order is guaranteed; callers sort."""
        async with self._session_factory() as session:
            records = await self._repository.get_all(session)
            return [self._repository.to_note(record) for record in records]

    async def update(self, note_id: str, fields: NoteUpdate | dict[str, Any]) -> Note:
        """
        Merge ``fields`` onto an existing note and bump ``updated_at``.

        Only explicitly provided fields change. Passing ``embedding=None``
        clears the embedding.

        Raises:
            NoteNotFoundError: Unknown id.
            ValidationError: ``parent_id`` references an unknown note or the note
                itself, or an explicit None was given for a field that cannot be empty.
        """
        note_in = fields if isinstance(fields, NoteUpdate) else NoteUpdate(**fields)
        data = note_in.model_dump(exclude_unset=True)
        nulls = [name for name in NON_NULLABLE_FIELDS if name in data and data[name] is None]
        if nulls:
            raise ValidationError(f"Fields cannot be null: {', '.join(nulls)}")

        async with self._session_factory() as session:
            record = await self._repository.get_by_id(session, note_id)
            if record is None:
                raise NoteNotFoundError(note_id)
            if "parent_id" in data:
                if data["parent_id"] == note_id:
                    raise ValidationError("A note cannot be its own parent")
                await self._check_parent(session, data["parent_id"])
            if "title" in data and data["title"] is None:
                data["title"] = self.default_title
            record = await self._repository.update_note(session, record, data)
            return self._repository.to_note(record)

    async def delete(self, note_id: str) -> None:
        """Delete a note. Deleting an unknown id is not an error."""
        async with self._session_factory() as session:
            record = await self._repository.get_by_id(session, note_id)
            if record is None:
                logger.debug("Delete of unknown note %s ignored", note_id)
                return
            await self._repository.delete_note(session, record)
        logger.info("Deleted note %s", note_id)

    async def list_by_tag(self, tag: str) -> list[Note]:
        async with self._session_factory() as session:
            return await self._repository.list_by_tag(session, tag)

    async def all_tags(self) -> list[str]:
        """Every tag in use, deduplicated and sorted."""
        async with self._session_factory() as session:
            return await self._repository.all_tags(session)

    async def _check_parent(self, session: AsyncSession, parent_id: str | None) -> None:
        if parent_id is None:
            return
        if not await self._repository.exists(session, parent_id):
            raise ValidationError(f"Parent note {parent_id} does not exist")
