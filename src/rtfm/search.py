"""Case-insensitive search and match navigation over a displayed document."""

from __future__ import annotations

import re

from .models import Match, ParsedDocument


def search(document: ParsedDocument, query: str) -> list[Match]:
    """Return all matches of query in display order.

    Matching is a case-insensitive substring search over each line's
    visible text. Matches do not overlap. An empty query matches nothing.
    """
    if not query:
        return []
    pattern = re.compile(re.escape(query), re.IGNORECASE)
    matches: list[Match] = []
    for line_index, line in enumerate(document.lines):
        for found in pattern.finditer(line.text):
            matches.append(Match(line_index, found.start(), found.end()))
    return matches


def next_match(matches: list[Match], cursor: int) -> int:
    """Advance the match cursor, wrapping from the last match to the first."""
    if not matches:
        return cursor
    return (cursor + 1) % len(matches)


def prev_match(matches: list[Match], cursor: int) -> int:
    """Step the match cursor back, wrapping from the first match to the last."""
    if not matches:
        return cursor
    return (cursor - 1) % len(matches)


def matches_on_line(matches: list[Match], line_index: int) -> list[tuple[int, Match]]:
    """Return (match number, match) pairs on one line."""
    return [(i, m) for i, m in enumerate(matches) if m.line_index == line_index]
