"""
Vector Math

Cosine similarity over plain Python float sequences. Stored embeddings are
small in number (one per note) so ranking happens in-process rather than in
a vector index.
"""

from __future__ import annotations

import math
from collections.abc import Sequence


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Normalized dot product of two equal-length vectors.

    A zero-magnitude operand yields 0.0 instead of a division error, and so
    does any operand holding NaN or infinity.

    Raises:
        ValueError: If the vectors differ in length.
    """
    if len(a) != len(b):
        raise ValueError(f"Vectors must have the same length ({len(a)} != {len(b)})")

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    magnitude = math.sqrt(norm_a) * math.sqrt(norm_b)
    if magnitude == 0:
        return 0.0

    similarity = dot / magnitude
    if not math.isfinite(similarity):
        return 0.0
    # Guard float drift so similarity(v, v) never exceeds 1
    return max(-1.0, min(1.0, similarity))


def is_valid_embedding(
    embedding: Sequence[float] | None,
    dimension: int | None = None,
) -> bool:
    """True if ``embedding`` is a non-empty, finite vector of the expected length."""
    if not embedding:
        return False
    if dimension is not None and len(embedding) != dimension:
        return False
    return all(math.isfinite(x) for x in embedding)
