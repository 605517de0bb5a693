"""
AI Service

OpenAI integration for generating text embeddings.

The gateway never raises into its callers: every outcome is an
EmbeddingResult carrying either a vector or a failure kind. A missing
credential is a normal operating mode (NOT_CONFIGURED), not an error.
"""

import asyncio
import enum
import logging
import math
from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from mindpad.core.config import settings

logger = logging.getLogger(__name__)


def build_client(api_key: str | None = None) -> AsyncOpenAI | None:
    """
    Shared AsyncOpenAI client for embeddings and chat completions.

    Returns None when no credential is configured.
    """
    key = api_key if api_key is not None else settings.OPENAI_API_KEY
    if not key or not key.strip():
        return None
    return AsyncOpenAI(
        api_key=key,
        timeout=settings.PROVIDER_TIMEOUT,
        max_retries=settings.PROVIDER_MAX_RETRIES,
    )


class EmbeddingFailure(enum.Enum):
    NOT_CONFIGURED = "not_configured"
    EMPTY_INPUT = "empty_input"
    PROVIDER_ERROR = "provider_error"


@dataclass(frozen=True)
class EmbeddingResult:
    """
    Outcome of an embedding request.

    Exactly one of ``vector`` / ``failure`` is set.
    """

    vector: list[float] | None = None
    failure: EmbeddingFailure | None = None

    @property
    def ok(self) -> bool:
        return self.vector is not None

    @classmethod
    def failed(cls, failure: EmbeddingFailure) -> "EmbeddingResult":
        return cls(failure=failure)


class EmbeddingGateway:
    """
    Fallible remote embedding call with timeout and linear-backoff retries.

    Usage::

        gateway = EmbeddingGateway(build_client())
        result = await gateway.embed("meeting notes")
        if result.ok:
            store_vector(result.vector)
    """

    def __init__(
        self,
        client: AsyncOpenAI | None,
        model: str | None = None,
        dimension: int | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay: float | None = None,
    ) -> None:
        self._client = client
        self.model = model or settings.EMBEDDING_MODEL
        self.dimension = dimension or settings.EMBEDDING_DIMENSION
        self._timeout = timeout or settings.PROVIDER_TIMEOUT
        self._max_retries = max(
            1, max_retries if max_retries is not None else settings.EMBEDDING_MAX_RETRIES
        )
        self._retry_delay = (
            retry_delay if retry_delay is not None else settings.EMBEDDING_RETRY_DELAY
        )

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def embed(self, text: str) -> EmbeddingResult:
        """
        Generate a vector embedding for ``text``.

        Args:
            text: Input text to embed.

        Returns:
            EmbeddingResult with a ``dimension``-length vector, or the
            failure kind. Timeouts count as PROVIDER_ERROR. API errors and
            timeouts are retried; a malformed response is not.
        """
        if self._client is None:
            return EmbeddingResult.failed(EmbeddingFailure.NOT_CONFIGURED)

        cleaned = (text or "").strip()
        if not cleaned:
            return EmbeddingResult.failed(EmbeddingFailure.EMPTY_INPUT)

        for attempt in range(self._max_retries):
            try:
                vector = await asyncio.wait_for(
                    self._request(cleaned), timeout=self._timeout
                )
                return EmbeddingResult(vector=vector)
            except ValueError as e:
                # Malformed answer: asking again yields the same shape
                logger.error("Unusable embedding response: %s", e)
                return EmbeddingResult.failed(EmbeddingFailure.PROVIDER_ERROR)
            except (openai.OpenAIError, asyncio.TimeoutError) as e:
                logger.error(
                    "Embedding request failed (attempt %d/%d): %s: %s",
                    attempt + 1,
                    self._max_retries,
                    type(e).__name__,
                    e,
                )
                if attempt < self._max_retries - 1:
                    # Linear backoff: delay, 2*delay, 3*delay...
                    await asyncio.sleep(self._retry_delay * (attempt + 1))

        logger.error("Giving up on embedding after %d attempts", self._max_retries)
        return EmbeddingResult.failed(EmbeddingFailure.PROVIDER_ERROR)

    async def _request(self, text: str) -> list[float]:
        """
        Raises:
            openai.OpenAIError: Remote failure.
            ValueError: Malformed response or wrong dimensionality.
        """
        assert self._client is not None
        text = text.replace("\n", " ")  # OpenAI recommends single-line input
        response = await self._client.embeddings.create(input=[text], model=self.model)
        if not response.data:
            raise ValueError("Embedding response contained no data")
        vector = list(response.data[0].embedding)
        if len(vector) != self.dimension:
            raise ValueError(
                f"Embedding has {len(vector)} dimensions, expected {self.dimension}"
            )
        if not all(math.isfinite(x) for x in vector):
            raise ValueError("Embedding contains non-finite values")
        return vector
