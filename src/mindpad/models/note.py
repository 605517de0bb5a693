"""
Note Model

The sole persisted entity. Derived data (tags, embedding) is stored as
JSON-encoded text so the row shape stays readable by older stores.
"""

import uuid

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mindpad.models.base import Base, TimestampMixin


def new_note_id() -> str:
    """Opaque, never-reused note identifier."""
    return uuid.uuid4().hex


class NoteRecord(Base, TimestampMixin):
    """
    Note row.

    Attributes:
        id: Text primary key (uuid4 hex), assigned at creation.
        title: Human-readable title ("untitled" until enriched or edited).
        content: Markdown body; all derived data is computed from it.
        tags: JSON array of lowercase tokens.
        embedding: JSON array of floats (nullable until enrichment succeeds).
        cover_image_path, icon, is_favorite, status, priority, parent_id:
            Organizational metadata, no effect on search or enrichment.
        auto_generated_title, auto_generated_tags: Set when enrichment
            wrote the field, so machine values can be told apart.
    """

    __tablename__ = "notes"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=new_note_id)
    title: Mapped[str] = mapped_column(Text, default="untitled")
    content: Mapped[str] = mapped_column(Text, default="")
    tags: Mapped[str] = mapped_column(Text, default="[]")
    # Nullable: embedding is generated async after the note is saved
    embedding: Mapped[str | None] = mapped_column(Text, nullable=True)

    cover_image_path: Mapped[str | None] = mapped_column(Text, nullable=True)
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    priority: Mapped[str | None] = mapped_column(String(32), nullable=True)
    parent_id: Mapped[str | None] = mapped_column(String(32), nullable=True, index=True)

    auto_generated_title: Mapped[bool] = mapped_column(Boolean, default=False)
    auto_generated_tags: Mapped[bool] = mapped_column(Boolean, default=False)

    def __repr__(self) -> str:
        return f"<NoteRecord(id={self.id!s:.8}, title='{(self.title or '')[:20]}...')>"
