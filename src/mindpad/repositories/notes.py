"""
Note Repository

Data access layer for Note entities.
Extends BaseRepository with JSON (de)serialization of the derived fields,
tag queries and timestamp bookkeeping.
"""

import json
import logging
import math
from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from mindpad.models import NoteRecord, new_note_id, now_ms
from mindpad.repositories.base import BaseRepository
from mindpad.schemas.notes import Note
from mindpad.services.tags import normalize_tags

logger = logging.getLogger(__name__)


class NoteRepository(BaseRepository[NoteRecord]):
    """
    Repository for Note entities.

    Inherits standard CRUD from BaseRepository and adds:
        - to_note: defensive row -> domain conversion
        - create_note / update_note: encode tags/embedding, maintain timestamps
        - delete_note: delete and clear dangling parent references atomically
        - list_by_tag / all_tags: tag queries over the JSON column

    Malformed stored JSON never raises: the field is read as empty/absent,
    a warning is logged and ``corrupt_records`` is incremented.
    """

    def __init__(self) -> None:
        super().__init__(NoteRecord)
        self.corrupt_records = 0

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @staticmethod
    def encode_tags(tags: Any) -> str:
        return json.dumps(normalize_tags(tags))

    @staticmethod
    def encode_embedding(embedding: Sequence[float] | None) -> str | None:
        if not embedding:
            return None
        return json.dumps([float(x) for x in embedding])

    def _decode_tags(self, record: NoteRecord) -> list[str]:
        if not record.tags:
            return []
        try:
            parsed = json.loads(record.tags)
        except (TypeError, ValueError) as e:
            self._flag_corrupt(record, "tags", str(e))
            return []
        if not isinstance(parsed, list):
            self._flag_corrupt(record, "tags", f"expected array, got {type(parsed).__name__}")
            return []
        return normalize_tags(parsed)

    def _decode_embedding(self, record: NoteRecord) -> list[float] | None:
        if not record.embedding:
            return None
        try:
            parsed = json.loads(record.embedding)
        except (TypeError, ValueError) as e:
            self._flag_corrupt(record, "embedding", str(e))
            return None
        if not isinstance(parsed, list) or not all(
            isinstance(x, (int, float)) and not isinstance(x, bool) and math.isfinite(x)
            for x in parsed
        ):
            self._flag_corrupt(record, "embedding", "expected array of finite numbers")
            return None
        # An empty array is how older stores wrote "no embedding yet"
        return [float(x) for x in parsed] or None

    def _flag_corrupt(self, record: NoteRecord, field: str, reason: str) -> None:
        self.corrupt_records += 1
        logger.warning(
            "Corrupt %s on note %s, treating as empty: %s", field, record.id, reason
        )

    def to_note(self, record: NoteRecord) -> Note:
        """Convert a row to the domain model, tolerating malformed fields."""
        now = now_ms()
        created_at = record.created_at if record.created_at is not None else now
        return Note(
            id=record.id,
            title=record.title or "",
            content=record.content or "",
            tags=self._decode_tags(record),
            created_at=created_at,
            updated_at=record.updated_at if record.updated_at is not None else created_at,
            embedding=self._decode_embedding(record),
            cover_image_path=record.cover_image_path,
            icon=record.icon,
            is_favorite=bool(record.is_favorite),
            status=record.status,
            priority=record.priority,
            parent_id=record.parent_id,
            auto_generated_title=bool(record.auto_generated_title),
            auto_generated_tags=bool(record.auto_generated_tags),
        )

    def _encode_fields(self, fields: dict[str, Any]) -> dict[str, Any]:
        data = dict(fields)
        if "tags" in data:
            data["tags"] = self.encode_tags(data["tags"])
        if "embedding" in data:
            data["embedding"] = self.encode_embedding(data["embedding"])
        return data

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    async def create_note(
        self,
        session: AsyncSession,
        fields: dict[str, Any],
    ) -> NoteRecord:
        """
        Insert a note with a fresh id and equal created/updated timestamps.

        Args:
            session: Active database session.
            fields: Column values; ``tags``/``embedding`` given as Python lists.
        """
        now = now_ms()
        data = self._encode_fields(fields)
        data.setdefault("tags", "[]")
        data.update(id=new_note_id(), created_at=now, updated_at=now)
        return await self.create(session, data)

    async def update_note(
        self,
        session: AsyncSession,
        record: NoteRecord,
        fields: dict[str, Any],
    ) -> NoteRecord:
        """Merge ``fields`` onto ``record`` and bump ``updated_at`` monotonically."""
        data = self._encode_fields(fields)
        data["updated_at"] = max(now_ms(), record.updated_at or 0)
        return await self.update(session, record, data)

    async def delete_note(self, session: AsyncSession, record: NoteRecord) -> None:
        """
        Delete a note and detach its children in the same transaction.

        Children keep their content; only ``parent_id`` is cleared so the
        reference stays valid-or-absent.
        """
        now = now_ms()
        await session.execute(
            update(NoteRecord)
            .where(NoteRecord.parent_id == record.id)
            .values(parent_id=None, updated_at=func.max(NoteRecord.updated_at, now))
            .execution_options(synchronize_session=False)
        )
        await self.delete(session, record)

    # ------------------------------------------------------------------
    # Read operations
    # ------------------------------------------------------------------

    async def list_by_tag(self, session: AsyncSession, tag: str) -> list[Note]:
        """
        Notes carrying ``tag`` (case-insensitive).

        ``instr`` narrows candidates in SQL; the exact match is confirmed
        after decoding so substrings of longer tags never match.
        """
        wanted = tag.strip().lower()
        if not wanted:
            return []
        stmt = select(NoteRecord).where(
            func.instr(func.lower(NoteRecord.tags), json.dumps(wanted)) > 0
        )
        result = await session.execute(stmt)
        notes = [self.to_note(record) for record in result.scalars().all()]
        return [note for note in notes if wanted in note.tags]

    async def all_tags(self, session: AsyncSession) -> list[str]:
        """Every tag in use, deduplicated and sorted."""
        records = await self.get_all(session)
        tags: set[str] = set()
        for record in records:
            tags.update(self._decode_tags(record))
        return sorted(tags)

    async def exists(self, session: AsyncSession, note_id: str) -> bool:
        result = await session.execute(
            select(func.count()).select_from(NoteRecord).where(NoteRecord.id == note_id)
        )
        return bool(result.scalar_one())
