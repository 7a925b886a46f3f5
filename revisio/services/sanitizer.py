"""
Revisio Backend — Markdown Output Sanitizer
============================================

What:  Best-effort repair of supplementation output that leaked
       structured-data fragments into the Markdown.
How:   A fixed sequence of regex repairs, kept apart from the stage call so
       it can be tested against known-bad fixtures and strengthened on its own.
Who:   Called by SupplementationService after the payload was parsed.

Repairs, in order:
    1. Replace `[{"topic": "...", "points": [{"point": "` heads,
       `"}, {"point": "` separators and `, "points": [{"point": "` tails with a
       paragraph break, so every "## " heading starts its own line
    2. Unwrap a whole-payload `{"supplementedPoints": "..."}` envelope and
       unescape its \\n and \\" sequences
    3. Strip leftover quoted field-name keys (a `", ` run before a key becomes
       a paragraph break), trailing `"}]}` closer runs and an unpaired edge
       quote, then collapse blank-line runs

Clean Markdown passes through unchanged, byte for byte. Nothing here
guarantees a fully clean result; find_leaks() reports what survived.
"""

import re
from typing import List

# Internal schema field names that must never appear as JSON keys in output
FIELD_NAMES = (
    "supplementedPoints",
    "supplemented_points",
    "revisionPoints",
    "revision_points",
    "topic",
    "points",
    "point",
    "title",
    "summary",
)

_FIELD_ALTERNATION = "|".join(FIELD_NAMES)

_PARAGRAPH = "\n\n"

_TOPIC_HEAD = re.compile(r'\[\{"topic":\s*".*?",\s*"points":\s*\[\{"point":\s*"?')
_POINT_SEPARATOR = re.compile(r'"\s*\}\s*,\s*\{\s*"point":\s*"?')
_POINTS_TAIL = re.compile(r',\s*"points":\s*\[\{"point":\s*"?')
_ENVELOPE = re.compile(
    r'^\s*\{\s*"(?:supplementedPoints|supplemented_points)"\s*:\s*"(.*)"\s*\}\s*$',
    re.DOTALL,
)
# A key with its value's opening quote; a preceding `", ` closes the previous value
_FIELD_KEY = re.compile(r'(?P<sep>"\s*,\s*)?"(?:' + _FIELD_ALTERNATION + r')"\s*:\s*"?')
_JSON_TAIL = re.compile(r'"?\s*(?:[}\]]\s*)+$')
_BLANK_LINES = re.compile(r"\n{3,}")

# Detection only: a quoted field name used as a key
LEAK_PATTERN = re.compile(r'"(?:' + _FIELD_ALTERNATION + r')"\s*:')


def sanitize_markdown(raw: str) -> str:
    """
    Strip known structured-data fragments from model Markdown.

    Args:
        raw: The supplemented_points string as returned by the model.

    Returns:
        The repaired Markdown. Identical to raw when nothing matched.
    """
    # Head first: it contains a points tail of its own
    stripped = _TOPIC_HEAD.sub(_PARAGRAPH, raw)
    stripped = _POINT_SEPARATOR.sub(_PARAGRAPH, stripped)
    stripped = _POINTS_TAIL.sub(_PARAGRAPH, stripped)

    cleaned = stripped
    match = _ENVELOPE.match(cleaned)
    if match and match.group(1):
        cleaned = match.group(1).replace("\\n", "\n").replace('\\"', '"')

    if stripped != raw or LEAK_PATTERN.search(cleaned):
        cleaned = _FIELD_KEY.sub(lambda m: _PARAGRAPH if m.group("sep") else "", cleaned)
        cleaned = _JSON_TAIL.sub("", cleaned)
        cleaned = _drop_unpaired_quote(cleaned.strip())
        cleaned = _BLANK_LINES.sub(_PARAGRAPH, cleaned)

    return cleaned


def _drop_unpaired_quote(text: str) -> str:
    """Remove a value quote left dangling at either end of the text."""
    if text.count('"') % 2 == 0:
        return text
    if text.startswith('"'):
        return text[1:].lstrip()
    if text.endswith('"'):
        return text[:-1].rstrip()
    return text


def find_leaks(text: str) -> List[str]:
    """Return every field-name leak still present in text (empty when clean)."""
    return [m.group(0) for m in LEAK_PATTERN.finditer(text)]
