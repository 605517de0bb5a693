"""
Note Service

The collaborator interface offered to presentation layers (HTTP routes,
desktop shell). Composes NoteStore, the search functions, the tag graph
and the enrichment pipeline.

Save path: whenever content is written, user tags are merged with tags
extracted from the text and enrichment is scheduled in the background.
Enrichment failures never reach these methods.
"""

from __future__ import annotations

import logging
from typing import Any

from mindpad.schemas.notes import GraphData, Note, NoteCreate, NoteUpdate, SearchResult
from mindpad.services import graph, search
from mindpad.services.ai import EmbeddingGateway
from mindpad.services.enrichment import EnrichmentPipeline
from mindpad.services.store import NoteStore
from mindpad.services.tags import extract_tags, merge_tags
from mindpad.services.vector import is_valid_embedding

logger = logging.getLogger(__name__)

DEFAULT_RELATED_LIMIT = 3


class NoteService:
    """
    Async note operations, safe to call concurrently.

    Usage::

        service = NoteService(store, pipeline, embeddings)
        note = await service.create_note({"content": "#idea rust ports"})
        hits = await service.search_by_similarity("systems languages")
    """

    def __init__(
        self,
        store: NoteStore,
        pipeline: EnrichmentPipeline,
        embeddings: EmbeddingGateway,
    ) -> None:
        self.store = store
        self._pipeline = pipeline
        self._embeddings = embeddings

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    async def create_note(self, fields: NoteCreate | dict[str, Any] | None = None) -> Note:
        """Persist a note, then enrich it in the background if it has content."""
        note_in = fields if isinstance(fields, NoteCreate) else NoteCreate(**(fields or {}))
        has_content = bool(note_in.content.strip())
        if has_content:
            note_in = note_in.model_copy(
                update={"tags": merge_tags(note_in.tags, extract_tags(note_in.content))}
            )

        note = await self.store.create(note_in)
        if has_content:
            self._pipeline.schedule(note.id)
        return note

    async def get_note(self, note_id: str) -> Note | None:
        return await self.store.get(note_id)

    async def list_notes(self) -> list[Note]:
        """All notes, most recently updated first. Cheap enough to poll."""
        notes = await self.store.list()
        return sorted(notes, key=lambda n: n.updated_at, reverse=True)

    async def update_note(self, note_id: str, fields: NoteUpdate | dict[str, Any]) -> Note:
        """
        Merge ``fields`` onto a note.

        A content change re-merges extracted tags and re-launches
        enrichment against the new content.

        Raises:
            NoteNotFoundError: Unknown id.
            ValidationError: Null on a field that has no null meaning.
        """
        note_in = fields if isinstance(fields, NoteUpdate) else NoteUpdate(**fields)
        data = note_in.model_dump(exclude_unset=True)

        content_changed = False
        if data.get("content") is not None:
            current = await self.store.get_or_raise(note_id)
            content_changed = data["content"] != current.content
            base_tags = data.get("tags", current.tags)
            if base_tags is not None:
                data["tags"] = merge_tags(base_tags, extract_tags(data["content"]))

        note = await self.store.update(note_id, data)
        if content_changed and note.content.strip():
            self._pipeline.schedule(note_id)
        return note

    async def delete_note(self, note_id: str) -> None:
        """Idempotent delete; an in-flight enrichment for the id becomes a no-op."""
        await self.store.delete(note_id)

    async def list_tags(self) -> list[str]:
        return await self.store.all_tags()

    async def list_notes_by_tag(self, tag: str) -> list[Note]:
        return await self.store.list_by_tag(tag)

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------

    async def search_by_keyword(self, query: str) -> list[Note]:
        return search.search_by_text(query, await self.store.list())

    async def search_by_similarity(
        self,
        query: str,
        limit: int | None = None,
    ) -> list[SearchResult]:
        """
        Embed ``query`` and rank notes against it.

        Returns an empty list when the query cannot be embedded (no
        credential, provider down): "nothing found", not an error.
        """
        outcome = await self._embeddings.embed(query)
        if not outcome.ok:
            logger.info(
                "Semantic search unavailable (%s)",
                outcome.failure.value if outcome.failure else "unknown",
            )
            return []
        return search.search_by_similarity(outcome.vector, await self.store.list(), limit)  # type: ignore[arg-type]

    async def get_related_notes(
        self,
        note_id: str,
        limit: int = DEFAULT_RELATED_LIMIT,
    ) -> list[SearchResult]:
        """
        Rank every other note against this note's own embedding.

        Embeddings whose length differs from the provider dimension are
        treated as absent, on the source note and on candidates alike.

        Raises:
            NoteNotFoundError: Unknown id.
        """
        note = await self.store.get_or_raise(note_id)
        dimension = self._embeddings.dimension
        if not is_valid_embedding(note.embedding, dimension):
            return []
        others = [
            n
            for n in await self.store.list()
            if n.id != note_id and is_valid_embedding(n.embedding, dimension)
        ]
        return search.search_by_similarity(note.embedding, others, limit)

    async def get_graph(self) -> GraphData:
        return graph.build_graph(await self.store.list())

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    async def reenrich_missing(self) -> list[str]:
        """
        Schedule enrichment for notes without a usable embedding.

        Covers notes saved while the provider was unconfigured and
        embeddings left over from an older model's dimensionality.
        """
        scheduled: list[str] = []
        for note in await self.store.list():
            if not note.content.strip():
                continue
            if is_valid_embedding(note.embedding, self._embeddings.dimension):
                continue
            self._pipeline.schedule(note.id)
            scheduled.append(note.id)
        logger.info("Scheduled enrichment for %d notes", len(scheduled))
        return scheduled
