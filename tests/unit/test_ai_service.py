"""
AI Service Unit Tests

Tests for the embedding gateway with a mocked OpenAI client.
No external API calls - runs without network or API keys.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import openai
import pytest

from mindpad.services.ai import (
    EmbeddingFailure,
    EmbeddingGateway,
    build_client,
)


def _response(vector: list[float]) -> SimpleNamespace:
    """Object matching the OpenAI SDK embeddings response structure."""
    return SimpleNamespace(data=[SimpleNamespace(embedding=vector)])


def _client(**create_kwargs) -> MagicMock:
    client = MagicMock()
    client.embeddings.create = AsyncMock(**create_kwargs)
    return client


def _gateway(client, **kwargs) -> EmbeddingGateway:
    kwargs.setdefault("dimension", 4)
    kwargs.setdefault("retry_delay", 0)
    return EmbeddingGateway(client, model="text-embedding-3-small", **kwargs)


@pytest.mark.asyncio
async def test_embed_calls_openai():
    """
    Verify embed calls the OpenAI API correctly.

    Validates:
        - Correct model selection
        - Proper input formatting (newlines flattened)
        - Response parsing
    """
    client = _client(return_value=_response([0.1, 0.2, 0.3, 0.4]))
    gateway = _gateway(client)

    result = await gateway.embed("Hello\nWorld")

    assert result.ok
    assert result.vector == [0.1, 0.2, 0.3, 0.4]
    assert result.failure is None
    client.embeddings.create.assert_called_once()
    _, kwargs = client.embeddings.create.call_args
    assert kwargs["model"] == "text-embedding-3-small"
    assert kwargs["input"] == ["Hello World"]


@pytest.mark.asyncio
async def test_not_configured_without_client():
    gateway = _gateway(None)

    result = await gateway.embed("anything")

    assert not gateway.is_configured
    assert result.failure is EmbeddingFailure.NOT_CONFIGURED
    assert result.vector is None


@pytest.mark.asyncio
async def test_empty_input_skips_the_provider():
    client = _client(return_value=_response([0.1] * 4))
    gateway = _gateway(client)

    result = await gateway.embed("   \n ")

    assert result.failure is EmbeddingFailure.EMPTY_INPUT
    client.embeddings.create.assert_not_called()


@pytest.mark.asyncio
async def test_provider_error_is_retried_then_reported():
    client = _client(side_effect=openai.OpenAIError("boom"))
    gateway = _gateway(client, max_retries=3)

    result = await gateway.embed("text")

    assert result.failure is EmbeddingFailure.PROVIDER_ERROR
    assert client.embeddings.create.call_count == 3


@pytest.mark.asyncio
async def test_transient_error_recovers():
    client = _client(
        side_effect=[openai.OpenAIError("flaky"), _response([0.0, 1.0, 0.0, 0.0])]
    )
    gateway = _gateway(client, max_retries=2)

    result = await gateway.embed("text")

    assert result.ok
    assert result.vector == [0.0, 1.0, 0.0, 0.0]
    assert client.embeddings.create.call_count == 2


@pytest.mark.asyncio
async def test_timeout_counts_as_provider_error():
    async def slow(*args, **kwargs):
        await asyncio.sleep(5)
        return _response([0.1] * 4)

    client = _client(side_effect=slow)
    gateway = _gateway(client, timeout=0.01, max_retries=2)

    result = await gateway.embed("text")

    assert result.failure is EmbeddingFailure.PROVIDER_ERROR
    assert client.embeddings.create.call_count == 2


@pytest.mark.asyncio
async def test_wrong_dimension_is_rejected():
    client = _client(return_value=_response([0.1, 0.2, 0.3]))
    gateway = _gateway(client, max_retries=3)

    result = await gateway.embed("text")

    assert result.failure is EmbeddingFailure.PROVIDER_ERROR
    # A malformed answer is not worth asking for again
    assert client.embeddings.create.call_count == 1


@pytest.mark.asyncio
async def test_empty_response_is_rejected():
    client = _client(return_value=SimpleNamespace(data=[]))
    gateway = _gateway(client, max_retries=1)

    result = await gateway.embed("text")

    assert result.failure is EmbeddingFailure.PROVIDER_ERROR


def test_build_client_without_key_returns_none():
    assert build_client("") is None
    assert build_client("   ") is None


def test_build_client_with_key():
    with patch("mindpad.services.ai.AsyncOpenAI") as MockClient:
        client = build_client("sk-test")

    assert client is MockClient.return_value
    _, kwargs = MockClient.call_args
    assert kwargs["api_key"] == "sk-test"


@pytest.mark.asyncio
async def test_non_finite_vector_is_rejected():
    client = _client(return_value=_response([float("nan"), 0.0, 0.0, 0.0]))
    gateway = _gateway(client, max_retries=3)

    result = await gateway.embed("text")

    assert result.failure is EmbeddingFailure.PROVIDER_ERROR
    assert client.embeddings.create.call_count == 1
