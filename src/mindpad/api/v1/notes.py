"""
Notes API Router

REST endpoints for note CRUD, tags, tag graph, keyword and semantic search.

Enrichment (title, tags, embedding) is offloaded to background tasks to
keep saves fast; a note is usable immediately and appears in semantic
search once its embedding lands. Clients observe that by polling GET /.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from mindpad.api.deps import get_note_service
from mindpad.core.errors import NoteNotFoundError, ValidationError
from mindpad.schemas.notes import (
    GraphData,
    KeywordSearchRequest,
    Note,
    NoteCreate,
    NoteSummary,
    NoteUpdate,
    SearchHit,
    SemanticSearchRequest,
)
from mindpad.services.notes import DEFAULT_RELATED_LIMIT, NoteService

router = APIRouter()


def _not_found(e: NoteNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _invalid(e: ValidationError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.post("/", response_model=NoteSummary, status_code=status.HTTP_201_CREATED)
async def create_note(
    note: NoteCreate,
    service: NoteService = Depends(get_note_service),
):
    """
    Create a new note.

    Tags extracted from the content are merged with the given ones.
    Enrichment runs in the background after the response is sent.
    """
    try:
        created = await service.create_note(note)
    except ValidationError as e:
        raise _invalid(e) from e
    return NoteSummary.from_note(created)


@router.get("/", response_model=list[NoteSummary])
async def read_notes(
    tag: str | None = None,
    service: NoteService = Depends(get_note_service),
):
    """List notes, most recently updated first, optionally filtered by tag."""
    notes = await service.list_notes_by_tag(tag) if tag else await service.list_notes()
    return [NoteSummary.from_note(note) for note in notes]


@router.get("/tags", response_model=list[str])
async def read_tags(service: NoteService = Depends(get_note_service)):
    """Every tag in use, sorted."""
    return await service.list_tags()


@router.get("/graph", response_model=GraphData)
async def read_graph(service: NoteService = Depends(get_note_service)):
    """Notes as nodes, one edge per shared tag per note pair."""
    return await service.get_graph()


@router.post("/search", response_model=list[NoteSummary])
async def search_notes(
    search_req: KeywordSearchRequest,
    service: NoteService = Depends(get_note_service),
):
    """Case-insensitive substring search over title, content and tags."""
    notes = await service.search_by_keyword(search_req.query)
    return [NoteSummary.from_note(note) for note in notes]


@router.post("/search/semantic", response_model=list[SearchHit])
async def search_notes_semantic(
    search_req: SemanticSearchRequest,
    service: NoteService = Depends(get_note_service),
):
    """
    Semantic search using vector similarity.

    Returns an empty list when the embedding provider is unavailable;
    that is the normal "nothing found" state, not an error.
    """
    results = await service.search_by_similarity(search_req.query, limit=search_req.k)
    return [SearchHit.from_result(result) for result in results]


@router.get("/{note_id}", response_model=Note)
async def read_note(note_id: str, service: NoteService = Depends(get_note_service)):
    """Retrieve a single note by ID, embedding included."""
    note = await service.get_note(note_id)
    if note is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Note not found"
        )
    return note


@router.patch("/{note_id}", response_model=NoteSummary)
async def update_note(
    note_id: str,
    note: NoteUpdate,
    service: NoteService = Depends(get_note_service),
):
    """Partial update; only fields present in the body change."""
    try:
        updated = await service.update_note(note_id, note)
    except NoteNotFoundError as e:
        raise _not_found(e) from e
    except ValidationError as e:
        raise _invalid(e) from e
    return NoteSummary.from_note(updated)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(note_id: str, service: NoteService = Depends(get_note_service)):
    """Delete a note. Deleting an unknown id also returns 204."""
    await service.delete_note(note_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{note_id}/related", response_model=list[SearchHit])
async def read_related_notes(
    note_id: str,
    limit: int = Query(DEFAULT_RELATED_LIMIT, ge=1, le=50),
    service: NoteService = Depends(get_note_service),
):
    """Other notes ranked by similarity to this note's embedding."""
    try:
        results = await service.get_related_notes(note_id, limit)
    except NoteNotFoundError as e:
        raise _not_found(e) from e
    return [SearchHit.from_result(result) for result in results]
