"""
Tag Extraction

Heuristic tag derivation from raw note text, plus the helpers used to keep
stored tag lists normalized. Pure functions, no I/O.

Heuristic tags (hashtags + recurring words) are applied at save time.
Provider-generated tags arrive later through the enrichment pipeline and are
merged additively with ``merge_tags``; neither source replaces user tags.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable
from typing import Final

MAX_EXTRACTED_TAGS: Final[int] = 10
MIN_KEYWORD_LENGTH: Final[int] = 4  # "longer than 3 characters"
MIN_KEYWORD_OCCURRENCES: Final[int] = 2

_HASHTAG_RE = re.compile(r"#(\w+)")

STOP_WORDS: Final[frozenset[str]] = frozenset(
    {
        "the", "and", "for", "are", "but", "not", "you", "all", "can", "her",
        "was", "one", "our", "out", "day", "get", "has", "him", "his", "how",
        "its", "may", "new", "now", "old", "see", "two", "way", "who", "boy",
        "did", "let", "put", "say", "she", "too", "use", "that", "this",
        "with", "from", "have", "been", "will", "your", "what", "when", "where",
    }
)  # fmt: skip


def extract_tags(text: str) -> list[str]:
    """
    Derive up to 10 candidate tags from ``text``.

    Sources, unioned in first-seen order:
        1. ``#token`` markers, lowercased.
        2. Words longer than 3 characters, not stop words, occurring at
           least twice (case-insensitive).

    Args:
        text: Raw note content.

    Returns:
        Deterministic list of lowercase tags.
    """
    if not text:
        return []

    tags: dict[str, None] = {}
    for match in _HASHTAG_RE.finditer(text):
        tags.setdefault(match.group(1).lower(), None)

    words = [
        word
        for word in text.lower().split()
        if len(word) >= MIN_KEYWORD_LENGTH and word not in STOP_WORDS
    ]
    counts = Counter(words)
    for word in words:
        if counts[word] >= MIN_KEYWORD_OCCURRENCES:
            tags.setdefault(word, None)

    return list(tags)[:MAX_EXTRACTED_TAGS]


def normalize_tags(tags: Iterable[object] | None) -> list[str]:
    """Lowercase, strip and de-duplicate tags, keeping display order."""
    if not tags:
        return []
    seen: dict[str, None] = {}
    for tag in tags:
        if not isinstance(tag, str):
            continue
        cleaned = tag.strip().lower()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


def merge_tags(*groups: Iterable[str] | None) -> list[str]:
    """Additive union of tag groups; earlier groups keep their positions."""
    merged: list[str] = []
    for group in groups:
        merged.extend(group or [])
    return normalize_tags(merged)
