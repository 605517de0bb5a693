"""
Provider Response Parsing

Chat models asked for "a JSON array of tags" answer in several shapes:
a bare array, an object holding an array, or prose wrapped around an
array (often inside a markdown code fence). The parser tries each shape
in turn; every step is total and the chain ends in EMPTY, so parsing can
never fail the enrichment run.
"""

from __future__ import annotations

import enum
import json
import re
from dataclasses import dataclass, field
from typing import Any

_FENCE_RE = re.compile(r"```(?:json)?\s*", re.IGNORECASE)
_ARRAY_RE = re.compile(r"\[(.*?)\]", re.DOTALL)


class ParseSource(enum.Enum):
    JSON = "json"
    EXTRACTED_ARRAY = "extracted_array"
    COMMA_LIST = "comma_list"
    EMPTY = "empty"


@dataclass(frozen=True)
class ParsedTags:
    tags: list[str] = field(default_factory=list)
    source: ParseSource = ParseSource.EMPTY


def _strings(values: list[Any]) -> list[str]:
    return [v for v in values if isinstance(v, str)]


def _array_from_json(value: Any) -> list[Any] | None:
    """Bare array, ``{"tags": [...]}``, or the first array value of an object."""
    if isinstance(value, list):
        return value
    if isinstance(value, dict):
        if isinstance(value.get("tags"), list):
            return value["tags"]
        for item in value.values():
            if isinstance(item, list):
                return item
    return None


def _try_strict_json(text: str) -> ParsedTags | None:
    try:
        parsed = json.loads(text)
    except ValueError:
        return None
    array = _array_from_json(parsed)
    if array is None:
        return None
    return ParsedTags(_strings(array), ParseSource.JSON)


def _try_extracted_array(text: str) -> ParsedTags | None:
    match = _ARRAY_RE.search(text)
    if match is None:
        return None
    try:
        parsed = json.loads(match.group(0))
    except ValueError:
        return None
    if not isinstance(parsed, list):
        return None
    return ParsedTags(_strings(parsed), ParseSource.EXTRACTED_ARRAY)


def _try_comma_list(text: str) -> ParsedTags | None:
    match = _ARRAY_RE.search(text)
    if match is None:
        return None
    parts = [part.strip().strip("\"'").strip() for part in match.group(1).split(",")]
    tags = [part for part in parts if part]
    if not tags:
        return None
    return ParsedTags(tags, ParseSource.COMMA_LIST)


def parse_tag_response(text: str | None) -> ParsedTags:
    """
    Parse a tag-generation response.

    Fallback chain:
        strict JSON -> first ``[...]`` as JSON -> ``[...]`` body split on
        commas -> EMPTY.
    """
    if not text:
        return ParsedTags()
    cleaned = _FENCE_RE.sub("", text).strip()
    for step in (_try_strict_json, _try_extracted_array, _try_comma_list):
        parsed = step(cleaned)
        if parsed is not None:
            return parsed
    return ParsedTags()


def clean_tag(raw: str) -> str:
    """Lowercase, hyphenate whitespace and drop anything outside ``[a-z0-9-]``."""
    tag = re.sub(r"\s+", "-", raw.strip().lower())
    return re.sub(r"[^a-z0-9-]", "", tag)


def clean_title(raw: str) -> str:
    """Lowercase, strip wrapping quotes and trailing punctuation."""
    title = raw.strip().lower()
    title = re.sub(r"^[\"']|[\"']$", "", title)
    title = re.sub(r"[.,;:!?]+$", "", title)
    return title.strip()
