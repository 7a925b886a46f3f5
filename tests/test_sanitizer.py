"""
Revisio Backend — Output Sanitizer Unit Tests
==============================================

What:  Known-bad supplementation outputs must come out as plain Markdown,
       and clean Markdown must come out untouched.
"""

import pytest

from revisio.services.sanitizer import find_leaks, sanitize_markdown


CLEAN = (
    "## Photosynthesis\n\n"
    "Photosynthesis converts **light energy** into *chemical energy*.\n\n"
    "- Sunlight\n- Chlorophyll\n\n"
    "## Respiration\n\nGlucose is broken down to release energy."
)

# Fixtures observed in real model output
POINTS_TAIL = (
    '## Cells\n\nCells are the unit of life., "points": [{"point": '
    '"## Tissues\n\nGroups of similar cells."}]}'
)
TOPIC_HEAD = (
    '[{"topic": "Biology", "points": [{"point": '
    '"## Cells\n\nCells are the basic unit of life."}]}]'
)
MULTI_POINT = (
    '[{"topic": "Biology", "points": [{"point": "## Cells\n\nUnits of life."}, '
    '{"point": "## Tissues\n\nGroups of cells."}, {"point": "## Organs\n\nGroups of tissues."}]}]'
)
ENVELOPE = '{"supplementedPoints": "## Mitosis\\n\\nCell division with \\"two\\" daughter cells."}'
INLINE_KEYS = '## Osmosis\n\n"title": "Osmosis", "summary": "Water moves across a membrane."'


class TestSanitizeMarkdown:

    def test_clean_markdown_is_unchanged(self):
        assert sanitize_markdown(CLEAN) == CLEAN

    def test_plain_quotes_are_not_touched(self):
        text = '## Quotes\n\nHe said "hello": it was polite.'
        assert sanitize_markdown(text) == text

    def test_points_tail_is_stripped(self):
        """The heading after the tail keeps a line of its own."""
        result = sanitize_markdown(POINTS_TAIL)
        assert result == (
            "## Cells\n\nCells are the unit of life.\n\n"
            "## Tissues\n\nGroups of similar cells."
        )
        assert "\n## Tissues" in result
        assert '"' not in result

    def test_topic_head_is_stripped(self):
        result = sanitize_markdown(TOPIC_HEAD)
        assert result == "## Cells\n\nCells are the basic unit of life."

    def test_every_point_keeps_its_own_heading(self):
        result = sanitize_markdown(MULTI_POINT)
        assert result == (
            "## Cells\n\nUnits of life.\n\n"
            "## Tissues\n\nGroups of cells.\n\n"
            "## Organs\n\nGroups of tissues."
        )

    def test_envelope_is_unwrapped_and_unescaped(self):
        result = sanitize_markdown(ENVELOPE)
        assert result == '## Mitosis\n\nCell division with "two" daughter cells.'

    def test_inline_field_keys_are_removed(self):
        result = sanitize_markdown(INLINE_KEYS)
        assert result == "## Osmosis\n\nOsmosis\n\nWater moves across a membrane."
        assert '"' not in result


class TestFieldNameLeakage:
    """Regression scan: no internal field name may survive as a JSON key."""

    def test_find_leaks_detects_field_keys(self):
        leaks = find_leaks('## A\n\n"summary": "text" and "title" : "x"')
        assert len(leaks) == 2

    def test_find_leaks_ignores_prose(self):
        assert find_leaks("The title of this summary mentions points and topics.") == []

    @pytest.mark.parametrize(
        "raw",
        [POINTS_TAIL, TOPIC_HEAD, MULTI_POINT, ENVELOPE, INLINE_KEYS],
        ids=["points-tail", "topic-head", "multi-point", "envelope", "inline-keys"],
    )
    def test_sanitized_output_has_no_leaks(self, raw):
        assert find_leaks(raw)
        assert find_leaks(sanitize_markdown(raw)) == []
