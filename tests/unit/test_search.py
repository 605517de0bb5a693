"""
Search Engine Unit Tests

Keyword matching and similarity ranking over in-memory notes.
"""

import pytest

from mindpad.schemas.notes import Note
from mindpad.services.search import search_by_similarity, search_by_text


def make_note(note_id: str, **fields) -> Note:
    fields.setdefault("title", "untitled")
    fields.setdefault("content", "")
    return Note(id=note_id, created_at=0, updated_at=0, **fields)


class TestKeywordSearch:
    def test_matches_title_content_and_tags(self):
        notes = [
            make_note("t", title="Python Tips"),
            make_note("c", content="learning PYTHON today"),
            make_note("g", tags=["python"]),
            make_note("x", content="rust only"),
        ]

        hits = search_by_text("python", notes)

        assert [note.id for note in hits] == ["t", "c", "g"]

    def test_blank_query_matches_nothing(self):
        notes = [make_note("a", content="anything")]

        assert search_by_text("   ", notes) == []
        assert search_by_text("", notes) == []


class TestSimilaritySearch:
    def test_ranked_highest_first(self):
        notes = [
            make_note("far", embedding=[0.0, 1.0, 0.0]),
            make_note("exact", embedding=[1.0, 0.0, 0.0]),
            make_note("near", embedding=[0.9, 0.1, 0.0]),
        ]

        results = search_by_similarity([1.0, 0.0, 0.0], notes)

        assert [r.note.id for r in results] == ["exact", "near", "far"]
        assert results[0].score == pytest.approx(1.0)
        assert all(0.0 <= r.score <= 1.0 for r in results)

    def test_limit(self):
        notes = [make_note(str(i), embedding=[1.0, float(i)]) for i in range(5)]

        results = search_by_similarity([1.0, 0.0], notes, limit=2)

        assert [r.note.id for r in results] == ["0", "1"]

    def test_missing_and_mismatched_embeddings_are_skipped(self):
        notes = [
            make_note("none"),
            make_note("short", embedding=[1.0, 0.0]),
            make_note("good", embedding=[1.0, 0.0, 0.0]),
        ]

        results = search_by_similarity([1.0, 0.0, 0.0], notes)

        assert [r.note.id for r in results] == ["good"]

    def test_negative_similarity_is_clamped_but_still_ranked(self):
        notes = [
            make_note("opposite", embedding=[-1.0, 0.0]),
            make_note("orthogonal", embedding=[0.0, 1.0]),
        ]

        results = search_by_similarity([1.0, 0.0], notes)

        assert [r.note.id for r in results] == ["orthogonal", "opposite"]
        assert results[1].score == 0.0

    def test_ties_keep_input_order(self):
        notes = [make_note(name, embedding=[1.0, 0.0]) for name in ("b", "a", "c")]

        results = search_by_similarity([2.0, 0.0], notes)

        assert [r.note.id for r in results] == ["b", "a", "c"]

    def test_empty_inputs(self):
        assert search_by_similarity([1.0], []) == []
        assert search_by_similarity([], [make_note("a", embedding=[1.0])]) == []
