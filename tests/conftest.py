"""
Pytest Configuration and Fixtures

Shared fixtures: a throwaway SQLite store per test and recording fakes for
the embedding and chat providers. No network, no API keys.
"""

import os
import tempfile

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Test environment defaults: MUST be set before any mindpad imports.
#
# 1. Load .env first so local overrides (LOG_LEVEL...) are honoured.
# 2. setdefault fills in anything still missing.
# 3. The provider credential is always blanked: tests must never reach
#    the real API, enrichment is exercised through the fakes below.
# ---------------------------------------------------------------------------
load_dotenv()  # .env → os.environ (no-op if file is missing)

_test_env = {
    "DATABASE_PATH": os.path.join(tempfile.gettempdir(), "mindpad-test.db"),
    "LOG_LEVEL": "DEBUG",
    "EMBEDDING_RETRY_DELAY": "0",
}
for _key, _value in _test_env.items():
    os.environ.setdefault(_key, _value)
os.environ["OPENAI_API_KEY"] = ""

# ---------------------------------------------------------------------------
# Imports (safe now that env vars are set)
# ---------------------------------------------------------------------------
import asyncio  # noqa: E402
from collections.abc import AsyncGenerator, Callable  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine  # noqa: E402

from mindpad.core.database import build_engine, build_session_factory, init_db  # noqa: E402
from mindpad.services.ai import EmbeddingFailure, EmbeddingResult  # noqa: E402
from mindpad.services.capture import QuickCaptureCoordinator  # noqa: E402
from mindpad.services.enrichment import EnrichmentPipeline  # noqa: E402
from mindpad.services.notes import NoteService  # noqa: E402
from mindpad.services.store import NoteStore  # noqa: E402

DIMENSION = 4


# ---------------------------------------------------------------------------
# Provider fakes
# ---------------------------------------------------------------------------


class FakeEmbeddings:
    """
    Stand-in for EmbeddingGateway.

    Records every call in ``events`` (shared with FakeLLM) and returns
    ``vector_for(text)``. Setting ``gate`` holds calls until it is set.
    """

    def __init__(self, events: list[str], dimension: int = DIMENSION) -> None:
        self.events = events
        self.dimension = dimension
        self.is_configured = True
        self.failure: EmbeddingFailure | None = None
        self.gate: asyncio.Event | None = None
        self.vectors: dict[str, list[float]] = {}
        self.calls: list[str] = []

    def vector_for(self, text: str) -> list[float]:
        if text in self.vectors:
            return self.vectors[text]
        return [1.0] + [0.0] * (self.dimension - 1)

    async def embed(self, text: str) -> EmbeddingResult:
        self.calls.append(text)
        self.events.append("embed")
        if self.gate is not None:
            await self.gate.wait()
        if self.failure is not None:
            return EmbeddingResult.failed(self.failure)
        if not text.strip():
            return EmbeddingResult.failed(EmbeddingFailure.EMPTY_INPUT)
        return EmbeddingResult(vector=self.vector_for(text))


class FakeLLM:
    """Stand-in for LLMService with scriptable title/tag answers."""

    def __init__(self, events: list[str]) -> None:
        self.events = events
        self.is_configured = True
        self.title: str | None = "grocery run"
        self.tags: list[str] | None = ["errands", "food"]
        self.title_error: Exception | None = None
        self.tags_error: Exception | None = None
        self.gate: asyncio.Event | None = None
        self.started: list[str] = []

    async def generate_title(self, content: str) -> str | None:
        self.events.append("title")
        self.started.append("title")
        if self.gate is not None:
            await self.gate.wait()
        if self.title_error is not None:
            raise self.title_error
        return self.title

    async def generate_tags(self, content: str) -> list[str] | None:
        self.events.append("tags")
        self.started.append("tags")
        if self.gate is not None:
            await self.gate.wait()
        if self.tags_error is not None:
            raise self.tags_error
        return self.tags


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    """Fresh SQLite file per test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'notes.db'}"


@pytest_asyncio.fixture
async def engine(database_url: str) -> AsyncGenerator[AsyncEngine, None]:
    engine = build_engine(database_url)
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def store(engine: AsyncEngine) -> NoteStore:
    return NoteStore(build_session_factory(engine))


@pytest.fixture
def events() -> list[str]:
    """Ordered log of provider calls and test checkpoints."""
    return []


@pytest.fixture
def fake_embeddings(events: list[str]) -> FakeEmbeddings:
    return FakeEmbeddings(events)


@pytest.fixture
def fake_llm(events: list[str]) -> FakeLLM:
    return FakeLLM(events)


@pytest_asyncio.fixture
async def pipeline(
    store: NoteStore, fake_embeddings: FakeEmbeddings, fake_llm: FakeLLM
) -> AsyncGenerator[EnrichmentPipeline, None]:
    pipeline = EnrichmentPipeline(store, fake_embeddings, fake_llm)  # type: ignore[arg-type]
    yield pipeline
    await pipeline.shutdown()


@pytest.fixture
def note_service(
    store: NoteStore, pipeline: EnrichmentPipeline, fake_embeddings: FakeEmbeddings
) -> NoteService:
    return NoteService(store, pipeline, fake_embeddings)  # type: ignore[arg-type]


@pytest.fixture
def capture(store: NoteStore, pipeline: EnrichmentPipeline) -> QuickCaptureCoordinator:
    return QuickCaptureCoordinator(store, pipeline)


@pytest.fixture
def unit_vector() -> Callable[[int], list[float]]:
    """Axis-aligned unit vector of the fake dimensionality."""

    def make(axis: int) -> list[float]:
        vector = [0.0] * DIMENSION
        vector[axis] = 1.0
        return vector

    return make
