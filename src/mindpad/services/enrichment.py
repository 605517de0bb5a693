"""
Enrichment Pipeline

Background derivation of title, tags and embedding for a saved note.
Runs outside the capture/save call path with its own store sessions.

Guarantees:
    - ``schedule`` is fire-and-forget: it only creates a task.
    - The three derivations run concurrently; latency is bounded by the
      slowest one.
    - At most one run per note id: scheduling again cancels the run in
      flight, and the new run re-reads the note's current content.
    - Write-back is a single regular ``update`` with only the fields that
      succeeded, applied after re-fetching the note. A note deleted
      mid-run is never re-created.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import partial

from mindpad.core.errors import NoteNotFoundError
from mindpad.schemas.notes import Note
from mindpad.services.ai import EmbeddingGateway
from mindpad.services.llm import LLMService
from mindpad.services.store import NoteStore
from mindpad.services.tags import merge_tags

logger = logging.getLogger(__name__)


@dataclass
class EnrichmentResult:
    """
    Outcome of one enrichment run.

    Attributes:
        note_id: Target note.
        title: Generated title, None if generation failed.
        tags: Generated tags, None if generation failed.
        embedding: Generated vector, None if embedding failed.
        applied: True if a write-back happened.
    """

    note_id: str
    title: str | None = None
    tags: list[str] | None = None
    embedding: list[float] | None = None
    applied: bool = False


class EnrichmentPipeline:
    """
    Orchestrates title/tag/embedding generation for notes.

    Usage::

        pipeline = EnrichmentPipeline(store, EmbeddingGateway(client), LLMService(client))
        pipeline.schedule(note.id)   # returns immediately
        await pipeline.wait_idle()   # tests / shutdown only
    """

    def __init__(
        self,
        store: NoteStore,
        embeddings: EmbeddingGateway,
        llm: LLMService,
    ) -> None:
        self._store = store
        self._embeddings = embeddings
        self._llm = llm
        self._tasks: dict[str, asyncio.Task[EnrichmentResult | None]] = {}

    @property
    def in_flight(self) -> int:
        return sum(1 for task in self._tasks.values() if not task.done())

    def is_running(self, note_id: str) -> bool:
        task = self._tasks.get(note_id)
        return task is not None and not task.done()

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def schedule(self, note_id: str) -> asyncio.Task[EnrichmentResult | None]:
        """
        Launch enrichment for ``note_id`` without awaiting it.

        Must be called from a running event loop. Any earlier run for the
        same id is cancelled first.
        """
        previous = self._tasks.get(note_id)
        if previous is not None and not previous.done():
            logger.info("Superseding in-flight enrichment for note %s", note_id)
            previous.cancel()

        task = asyncio.create_task(self._run(note_id), name=f"enrich-{note_id}")
        self._tasks[note_id] = task
        task.add_done_callback(partial(self._forget, note_id))
        return task

    def _forget(self, note_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(note_id) is task:
            del self._tasks[note_id]

    async def _run(self, note_id: str) -> EnrichmentResult | None:
        try:
            return await self.enrich(note_id)
        except asyncio.CancelledError:
            logger.debug("Enrichment for note %s cancelled", note_id)
            raise
        except Exception:
            # Background task: nothing above us to report to
            logger.exception("Enrichment failed for note %s", note_id)
            return None

    async def wait_idle(self) -> None:
        """Wait until no enrichment run is in flight."""
        while True:
            pending = [task for task in self._tasks.values() if not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel every in-flight run."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

    # ------------------------------------------------------------------
    # Run body
    # ------------------------------------------------------------------

    async def enrich(self, note_id: str) -> EnrichmentResult | None:
        """
        Derive and write back title, tags and embedding for one note.

        Returns:
            EnrichmentResult, or None if the note does not exist.
        """
        note = await self._store.get(note_id)
        if note is None:
            logger.warning("Note %s not found for enrichment", note_id)
            return None

        content = note.content
        if not content.strip():
            logger.debug("Note %s has no content, nothing to enrich", note_id)
            return EnrichmentResult(note_id=note_id)

        title, tags, embedding = await asyncio.gather(
            self._derive_title(note_id, content),
            self._derive_tags(note_id, content),
            self._derive_embedding(note_id, content),
        )
        result = EnrichmentResult(
            note_id=note_id, title=title, tags=tags, embedding=embedding
        )

        # Shielded: a superseding schedule() must not interrupt a commit
        result.applied = await asyncio.shield(self._write_back(note_id, content, result))
        return result

    async def _derive_title(self, note_id: str, content: str) -> str | None:
        try:
            return await self._llm.generate_title(content)
        except Exception:
            logger.exception("Title generation crashed for note %s", note_id)
            return None

    async def _derive_tags(self, note_id: str, content: str) -> list[str] | None:
        try:
            return await self._llm.generate_tags(content)
        except Exception:
            logger.exception("Tag generation crashed for note %s", note_id)
            return None

    async def _derive_embedding(self, note_id: str, content: str) -> list[float] | None:
        try:
            outcome = await self._embeddings.embed(content)
        except Exception:
            logger.exception("Embedding crashed for note %s", note_id)
            return None
        if not outcome.ok:
            logger.info(
                "No embedding for note %s (%s)",
                note_id,
                outcome.failure.value if outcome.failure else "unknown",
            )
        return outcome.vector

    async def _write_back(
        self,
        note_id: str,
        content: str,
        result: EnrichmentResult,
    ) -> bool:
        """Apply succeeded fields onto the freshly re-read note."""
        current = await self._store.get(note_id)
        if current is None:
            logger.info("Note %s deleted during enrichment, dropping results", note_id)
            return False
        if current.content != content:
            logger.info("Note %s changed during enrichment, dropping stale results", note_id)
            return False

        fields = self._fields_to_apply(current, result)
        if not fields:
            logger.info("Enrichment produced nothing for note %s", note_id)
            return False

        try:
            await self._store.update(note_id, fields)
        except NoteNotFoundError:
            logger.info("Note %s deleted before write-back, dropping results", note_id)
            return False

        logger.info("Enriched note %s (%s)", note_id, ", ".join(sorted(fields)))
        return True

    def _fields_to_apply(self, current: Note, result: EnrichmentResult) -> dict:
        fields: dict = {}
        if result.title and self._title_replaceable(current):
            fields["title"] = result.title
            fields["auto_generated_title"] = True
        if result.tags:
            fields["tags"] = merge_tags(current.tags, result.tags)
            fields["auto_generated_tags"] = True
        if result.embedding is not None:
            fields["embedding"] = result.embedding
        return fields

    def _title_replaceable(self, note: Note) -> bool:
        """User-authored titles are never overwritten."""
        title = note.title.strip()
        return not title or title == self._store.default_title or note.auto_generated_title
