"""Turn raw man/tldr output into styled lines.

Parsing runs in three passes per document:

1. Terminal formatting is decoded: ANSI SGR escapes toggle bold/italic and
   are otherwise dropped; man overstrike pairs (``X\\bX`` bold,
   ``_\\bX`` underline) become bold/italic characters.
2. A line rule picks the line's base style (headings claim the whole line).
3. Inline rules are matched left to right as one alternation in priority
   order, so spans never overlap and earlier rules win ties.

The parser never raises. Output it cannot structure (binary data) comes
back as a raw document of plain lines.
"""

from __future__ import annotations

import re
from typing import Callable, Optional, Sequence

from .models import ParsedDocument, SourceKind, Span, StyledLine, StyleTag

_ESCAPE_RE = re.compile(r"\x1b\[([0-9;?]*)([A-Za-z])|\x1b[@-Z\\-_]")
_BINARY_RE = re.compile(r"[\x00-\x07\x0e-\x1a\x1c-\x1f]")

# name, style, pattern; order is priority
INLINE_RULES: tuple[tuple[str, StyleTag, str], ...] = (
    ("link", StyleTag.LINK, r"(?:https?|ftp)://[^\s<>\"']+[^\s<>\"'.,;:)\]]"),
    (
        "placeholder",
        StyleTag.PLACEHOLDER,
        r"\{\{.+?\}\}|<(?![a-z]+://)[^<>\s][^<>]*>|\[[^\[\]]+\]",
    ),
    ("flag", StyleTag.FLAG, r"(?<![\w-])--?[A-Za-z0-9][\w-]*(?:=[^\s,\]]+)?"),
)

_INLINE_RE = re.compile(
    "|".join(f"(?P<{name}>{pattern})" for name, _, pattern in INLINE_RULES)
)
_INLINE_STYLES = {name: style for name, style, _ in INLINE_RULES}

LineRule = Callable[[str], Optional[StyleTag]]


def _man_heading(text: str) -> Optional[StyleTag]:
    """Section headings start at column 0 and are upper case."""
    if not text or text[0].isspace():
        return None
    stripped = text.strip()
    if any(c.isalpha() for c in stripped) and stripped == stripped.upper():
        return StyleTag.HEADING
    return None


def _tldr_title(text: str) -> Optional[StyleTag]:
    return StyleTag.HEADING if text.lstrip().startswith("#") else None


def _tldr_description(text: str) -> Optional[StyleTag]:
    return StyleTag.QUOTE if text.lstrip().startswith(">") else None


def _tldr_example_text(text: str) -> Optional[StyleTag]:
    stripped = text.lstrip()
    return StyleTag.PLAIN if stripped.startswith("- ") else None


def _tldr_example_command(text: str) -> Optional[StyleTag]:
    if text.lstrip().startswith("`") or (text.startswith("    ") and text.strip()):
        return StyleTag.CODE
    return None


LINE_RULES: dict[SourceKind, tuple[LineRule, ...]] = {
    SourceKind.MAN: (_man_heading,),
    SourceKind.TLDR: (
        _tldr_title,
        _tldr_description,
        _tldr_example_text,
        _tldr_example_command,
    ),
}

# Line styles that claim the whole line; inline rules are not applied.
WHOLE_LINE_STYLES = frozenset({StyleTag.HEADING})


def _apply_sgr(params: str, bold: bool, italic: bool) -> tuple[bool, bool]:
    codes = [int(p) for p in params.split(";") if p.isdigit()] or [0]
    for code in codes:
        if code == 0:
            bold = italic = False
        elif code == 1:
            bold = True
        elif code in (3, 4):
            italic = True
        elif code == 22:
            bold = False
        elif code in (23, 24):
            italic = False
    return bold, italic


def decode_terminal_text(line: str) -> tuple[str, list[StyleTag]]:
    """Decode ANSI SGR and overstrike formatting of one line.

    Returns:
        The visible text and one style per character
    """
    chars: list[str] = []
    styles: list[StyleTag] = []
    bold = italic = False
    i = 0
    n = len(line)
    while i < n:
        char = line[i]
        if char == "\x1b":
            match = _ESCAPE_RE.match(line, i)
            if match is None:
                i += 1
                continue
            if match.group(2) == "m":
                bold, italic = _apply_sgr(match.group(1), bold, italic)
            i = match.end()
            continue
        if char == "\b":
            # Stray backspace without a preceding character
            i += 1
            continue
        if i + 2 < n and line[i + 1] == "\b":
            shown = line[i + 2]
            style = StyleTag.ITALIC if char == "_" and shown != "_" else StyleTag.BOLD
            if char != shown and char != "_":
                style = StyleTag.PLAIN
            i += 3
            # Repeated strikes (X\bX\bX) render the same character
            while i + 1 < n and line[i] == "\b" and line[i + 1] == shown:
                i += 2
            chars.append(shown)
            styles.append(style)
            continue
        chars.append(char)
        if bold:
            styles.append(StyleTag.BOLD)
        elif italic:
            styles.append(StyleTag.ITALIC)
        else:
            styles.append(StyleTag.PLAIN)
        i += 1
    return "".join(chars), styles


def _merge_spans(text: str, styles: Sequence[StyleTag]) -> StyledLine:
    spans: list[Span] = []
    start = 0
    for i in range(1, len(text) + 1):
        if i == len(text) or styles[i] != styles[start]:
            spans.append(Span(text[start:i], styles[start]))
            start = i
    return StyledLine(tuple(spans))


class DocumentParser:
    """Deterministic raw-text to ParsedDocument converter."""

    def __init__(
        self,
        line_rules: Optional[dict[SourceKind, tuple[LineRule, ...]]] = None,
    ) -> None:
        self.line_rules = line_rules if line_rules is not None else LINE_RULES

    def line_style(self, text: str, source: SourceKind) -> StyleTag:
        for rule in self.line_rules.get(source, ()):
            style = rule(text)
            if style is not None:
                return style
        return StyleTag.PLAIN

    def parse_line(self, raw_line: str, source: SourceKind) -> StyledLine:
        text, char_styles = decode_terminal_text(raw_line.expandtabs())
        if not text:
            return StyledLine()

        base = self.line_style(text, source)
        if base in WHOLE_LINE_STYLES:
            return StyledLine((Span(text, base),))

        styles = [base if style is StyleTag.PLAIN else style for style in char_styles]
        for match in _INLINE_RE.finditer(text):
            inline = _INLINE_STYLES[match.lastgroup or ""]
            for pos in range(match.start(), match.end()):
                styles[pos] = inline
        return _merge_spans(text, styles)

    def parse(self, raw: str, source: SourceKind = SourceKind.MAN) -> ParsedDocument:
        """Parse raw provider output.

        Never raises. Binary-looking input yields ``raw=True`` with the
        text kept verbatim as plain lines.
        """
        lines = raw.replace("\r\n", "\n").split("\n")
        # Trailing newline does not make an extra line
        if lines and lines[-1] == "":
            lines.pop()

        if _BINARY_RE.search(raw):
            return ParsedDocument.from_plain_text(lines, source, raw=True)

        return ParsedDocument(
            tuple(self.parse_line(line, source) for line in lines), source
        )
