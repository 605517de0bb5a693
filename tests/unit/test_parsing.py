"""
Provider Response Parsing Unit Tests

The tag parser's fallback chain and the title/tag cleaners.
"""

import pytest

from mindpad.services.parsing import (
    ParseSource,
    clean_tag,
    clean_title,
    parse_tag_response,
)


class TestParseTagResponse:
    def test_bare_json_array(self):
        parsed = parse_tag_response('["ai", "coding", "learning"]')

        assert parsed.tags == ["ai", "coding", "learning"]
        assert parsed.source is ParseSource.JSON

    def test_object_with_tags_key(self):
        parsed = parse_tag_response('{"tags": ["a", "b"]}')

        assert parsed.tags == ["a", "b"]
        assert parsed.source is ParseSource.JSON

    def test_object_with_other_array_key(self):
        parsed = parse_tag_response('{"keywords": ["x", "y"]}')

        assert parsed.tags == ["x", "y"]
        assert parsed.source is ParseSource.JSON

    def test_code_fence_is_stripped(self):
        parsed = parse_tag_response('```json\n["x", "y"]\n```')

        assert parsed.tags == ["x", "y"]
        assert parsed.source is ParseSource.JSON

    def test_array_embedded_in_prose(self):
        parsed = parse_tag_response('Sure! Here are the tags: ["a", "b"] hope it helps')

        assert parsed.tags == ["a", "b"]
        assert parsed.source is ParseSource.EXTRACTED_ARRAY

    def test_unquoted_array_falls_back_to_comma_split(self):
        parsed = parse_tag_response("Tags: [ai, coding, 'ml']")

        assert parsed.tags == ["ai", "coding", "ml"]
        assert parsed.source is ParseSource.COMMA_LIST

    def test_non_string_items_are_dropped(self):
        parsed = parse_tag_response('["ok", 3, null, "fine"]')

        assert parsed.tags == ["ok", "fine"]

    @pytest.mark.parametrize("answer", [None, "", "no tags here", '"just a string"', "[]"])
    def test_unusable_answers_end_empty(self, answer):
        parsed = parse_tag_response(answer)

        assert parsed.tags == []


class TestCleaners:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Machine Learning", "machine-learning"),
            ("  #AI!  ", "ai"),
            ("c++", "c"),
            ("web-dev", "web-dev"),
        ],
    )
    def test_clean_tag(self, raw, expected):
        assert clean_tag(raw) == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ('"Grocery Run!"', "grocery run"),
            ("  weekend plans...  ", "weekend plans"),
            ("'Q3 Roadmap'", "q3 roadmap"),
        ],
    )
    def test_clean_title(self, raw, expected):
        assert clean_title(raw) == expected
