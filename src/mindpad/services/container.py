"""
Service Container

Wires the store, provider gateways, enrichment pipeline, note service and
quick-capture coordinator for one process.
"""

from __future__ import annotations

from dataclasses import dataclass

from openai import AsyncOpenAI
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from mindpad.services.ai import EmbeddingGateway, build_client
from mindpad.services.capture import QuickCaptureCoordinator
from mindpad.services.enrichment import EnrichmentPipeline
from mindpad.services.llm import LLMService
from mindpad.services.notes import NoteService
from mindpad.services.store import NoteStore


@dataclass
class Services:
    store: NoteStore
    embeddings: EmbeddingGateway
    llm: LLMService
    pipeline: EnrichmentPipeline
    notes: NoteService
    capture: QuickCaptureCoordinator

    @property
    def enrichment_configured(self) -> bool:
        return self.embeddings.is_configured and self.llm.is_configured

    async def aclose(self) -> None:
        """Cancel in-flight enrichment."""
        await self.pipeline.shutdown()


def build_services(
    session_factory: async_sessionmaker[AsyncSession],
    client: AsyncOpenAI | None = None,
    embeddings: EmbeddingGateway | None = None,
    llm: LLMService | None = None,
) -> Services:
    """
    Build the process-wide service graph.

    Without an explicit client or gateways, the OpenAI client is built from
    settings; a missing credential leaves enrichment unconfigured and the
    store fully functional.
    """
    if client is None and (embeddings is None or llm is None):
        client = build_client()

    store = NoteStore(session_factory)
    embeddings = embeddings or EmbeddingGateway(client)
    llm = llm or LLMService(client)
    pipeline = EnrichmentPipeline(store, embeddings, llm)
    return Services(
        store=store,
        embeddings=embeddings,
        llm=llm,
        pipeline=pipeline,
        notes=NoteService(store, pipeline, embeddings),
        capture=QuickCaptureCoordinator(store, pipeline),
    )
