"""
Note Schemas

Pydantic models for the note domain and its request/response validation.
Separates concerns: NoteCreate (input), NoteUpdate (partial), Note (output),
plus the derived, non-persisted SearchResult and graph shapes.
"""

from typing import Literal

from pydantic import BaseModel, Field, FiniteFloat

NoteStatus = Literal["todo", "in-progress", "done"]
NotePriority = Literal["low", "medium", "high"]


class NoteFields(BaseModel):
    """Organizational metadata shared by create/update/read schemas."""

    cover_image_path: str | None = None
    icon: str | None = Field(None, max_length=64)
    is_favorite: bool = False
    status: NoteStatus | None = None
    priority: NotePriority | None = None
    parent_id: str | None = None


class NoteCreate(NoteFields):
    """
    Request schema for creating a note.

    Every field is optional: quick capture creates an empty, untitled note
    before any content exists.
    """

    title: str | None = Field(None, max_length=500, description="Defaults to 'untitled'")
    content: str = Field(default="", description="Markdown body")
    tags: list[str] = Field(default_factory=list)
    embedding: list[FiniteFloat] | None = None


class NoteUpdate(BaseModel):
    """
    Request schema for PATCH /notes/{id}.

    All fields optional to support partial updates; only fields that were
    explicitly set are merged (``model_dump(exclude_unset=True)``).
    """

    title: str | None = Field(None, max_length=500)
    content: str | None = None
    tags: list[str] | None = None
    embedding: list[FiniteFloat] | None = None
    cover_image_path: str | None = None
    icon: str | None = Field(None, max_length=64)
    is_favorite: bool | None = None
    status: NoteStatus | None = None
    priority: NotePriority | None = None
    parent_id: str | None = None
    auto_generated_title: bool | None = None
    auto_generated_tags: bool | None = None


class Note(NoteFields):
    """Full note representation as seen by every caller of the store."""

    id: str
    title: str
    content: str
    tags: list[str] = Field(default_factory=list)
    created_at: int = Field(description="Epoch milliseconds")
    updated_at: int = Field(description="Epoch milliseconds")
    embedding: list[float] | None = None
    auto_generated_title: bool = False
    auto_generated_tags: bool = False


class NoteSummary(NoteFields):
    """
    Lightweight response schema for list endpoints.

    Excludes the embedding to keep polling payloads small.
    """

    id: str
    title: str
    content: str
    tags: list[str]
    created_at: int
    updated_at: int
    has_embedding: bool = False
    auto_generated_title: bool = False
    auto_generated_tags: bool = False

    @classmethod
    def from_note(cls, note: Note) -> "NoteSummary":
        data = note.model_dump(exclude={"embedding"})
        return cls(**data, has_embedding=note.embedding is not None)


class SearchResult(BaseModel):
    """A note ranked by vector similarity."""

    note: Note
    score: float = Field(ge=0.0, le=1.0, description="Similarity clamped to [0, 1]")


class SearchHit(BaseModel):
    """HTTP shape of a ranked result (embedding omitted)."""

    note: NoteSummary
    score: float

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchHit":
        return cls(note=NoteSummary.from_note(result.note), score=result.score)


class KeywordSearchRequest(BaseModel):
    """Request schema for keyword search."""

    query: str = Field(..., min_length=1, description="Case-insensitive substring")


class SemanticSearchRequest(BaseModel):
    """Request schema for semantic search endpoint."""

    query: str = Field(..., min_length=1, description="Search query text")
    k: int | None = Field(
        default=None,
        ge=1,
        le=100,
        description="Maximum number of results (all matches when omitted)",
    )


class GraphNode(BaseModel):
    id: str
    title: str


class GraphEdge(BaseModel):
    """Undirected edge between two notes sharing ``label`` as a tag."""

    source: str
    target: str
    label: str


class GraphData(BaseModel):
    nodes: list[GraphNode] = Field(default_factory=list)
    edges: list[GraphEdge] = Field(default_factory=list)
