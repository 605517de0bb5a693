"""
Search Engine

Two ranking strategies over an in-memory note collection:

    - keyword: case-insensitive substring match on title, content or tags
    - similarity: cosine similarity against a query embedding

Notes whose embedding is missing or has a different length than the query
are skipped individually; one bad record never fails the whole search.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from mindpad.schemas.notes import Note, SearchResult
from mindpad.services.vector import cosine_similarity, is_valid_embedding

logger = logging.getLogger(__name__)


def search_by_text(query: str, notes: Iterable[Note]) -> list[Note]:
    """Notes whose title, content or any tag contains ``query`` (case-insensitive)."""
    needle = (query or "").strip().lower()
    if not needle:
        return []
    return [
        note
        for note in notes
        if needle in note.title.lower()
        or needle in note.content.lower()
        or any(needle in tag.lower() for tag in note.tags)
    ]


def search_by_similarity(
    query_vector: Sequence[float],
    notes: Iterable[Note],
    limit: int | None = None,
) -> list[SearchResult]:
    """
    Rank notes by cosine similarity to ``query_vector``.

    Args:
        query_vector: Query embedding.
        notes: Candidate notes.
        limit: Maximum number of results (all when None).

    Returns:
        SearchResults sorted by similarity, highest first. Ties keep input
        order. Scores are clamped into [0, 1].
    """
    if not query_vector:
        return []

    dimension = len(query_vector)
    scored: list[tuple[float, Note]] = []
    skipped = 0
    for note in notes:
        if not is_valid_embedding(note.embedding, dimension):
            skipped += 1
            continue
        scored.append((cosine_similarity(query_vector, note.embedding), note))  # type: ignore[arg-type]

    if skipped:
        logger.debug("Similarity search skipped %d notes without a usable embedding", skipped)

    # sorted() is stable, so equal scores keep their input order
    scored.sort(key=lambda item: item[0], reverse=True)
    if limit is not None:
        scored = scored[:limit]

    return [
        SearchResult(note=note, score=max(0.0, min(1.0, score))) for score, note in scored
    ]
