"""
LLM Service

Chat-completion backed title and tag generation for note enrichment.

Design:
    - Async calls via the shared AsyncOpenAI client (non-blocking).
    - Graceful degradation: every failure (missing credential, timeout,
      API error, unusable answer) returns None instead of raising, so the
      enrichment pipeline keeps whatever the note already has.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Final

import openai
from openai import AsyncOpenAI

from mindpad.core.config import settings
from mindpad.services.parsing import clean_tag, clean_title, parse_tag_response

logger = logging.getLogger(__name__)

MAX_GENERATED_TAGS: Final[int] = 7

TITLE_SYSTEM_PROMPT: Final[str] = (
    "You are a helpful assistant that creates casual, informal note titles. "
    "Return ONLY the title, nothing else."
)
TITLE_USER_PROMPT: Final[str] = (
    "create a casual lowercase human-style title (max 6 words) for this note: {content}"
)

TAGS_SYSTEM_PROMPT: Final[str] = (
    "You are a helpful assistant that extracts tags from notes. "
    'Return ONLY a JSON array of tags, nothing else. Example: ["ai", "coding", "learning"]'
)
TAGS_USER_PROMPT: Final[str] = (
    "extract 3-7 simple lowercase tags describing this note. no spaces, "
    "use hyphens if needed. return ONLY a JSON array.\n\nNote content:\n{content}"
)


class LLMService:
    """
    Title and tag generator with automatic fallback.

    Usage::

        service = LLMService(build_client())
        title = await service.generate_title("met sam about the q3 roadmap")
        tags = await service.generate_tags("met sam about the q3 roadmap")
        if title is None:
            print("keeping the default title")
    """

    def __init__(
        self,
        client: AsyncOpenAI | None,
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self._client = client
        self._model = model or settings.CHAT_MODEL
        self._timeout = timeout or settings.PROVIDER_TIMEOUT

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def generate_title(self, content: str) -> str | None:
        """
        Generate a short lowercase title.

        Returns:
            The cleaned title, or None if unavailable.
        """
        if not content or not content.strip():
            return None
        answer = await self._complete(
            TITLE_SYSTEM_PROMPT,
            TITLE_USER_PROMPT.format(content=content),
            temperature=0.7,
            max_tokens=20,
        )
        if answer is None:
            return None
        return clean_title(answer) or None

    async def generate_tags(self, content: str) -> list[str] | None:
        """
        Generate 3-7 lowercase hyphenated tags.

        Returns:
            Cleaned tags (possibly empty when the answer could not be
            parsed), or None when the provider call itself failed.
        """
        if not content or not content.strip():
            return None
        answer = await self._complete(
            TAGS_SYSTEM_PROMPT,
            TAGS_USER_PROMPT.format(content=content),
            temperature=0.5,
            max_tokens=100,
        )
        if answer is None:
            return None

        parsed = parse_tag_response(answer)
        logger.debug("Tag response parsed via %s", parsed.source.value)

        tags: list[str] = []
        for raw in parsed.tags:
            tag = clean_tag(raw)
            if tag and tag not in tags:
                tags.append(tag)
        return tags[:MAX_GENERATED_TAGS]

    async def _complete(
        self,
        system: str,
        user: str,
        temperature: float,
        max_tokens: int,
    ) -> str | None:
        """Single chat completion; None on any failure."""
        if self._client is None:
            logger.debug("Chat provider not configured, skipping completion")
            return None

        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._model,
                    messages=[
                        {"role": "system", "content": system},
                        {"role": "user", "content": user},
                    ],
                    temperature=temperature,
                    max_tokens=max_tokens,
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Chat completion timed out after %.1fs", self._timeout)
            return None
        except openai.OpenAIError as e:
            logger.error("Chat completion failed: %s: %s", type(e).__name__, e)
            return None

        if not response.choices or response.choices[0].message is None:
            logger.error("Chat completion returned no choices")
            return None
        content = response.choices[0].message.content
        return content.strip() if content else None
