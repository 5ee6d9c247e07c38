"""Pure rendering of ViewState into prompt_toolkit formatted text."""

from __future__ import annotations

from typing import Optional

from prompt_toolkit.styles import Style

from ..errors import NotFound, ParseFailure, ProviderUnavailable
from ..models import Match, StyledLine, StyleTag
from ..search import matches_on_line
from ..session.state import Focus, ViewState

Fragments = list[tuple[str, str]]

STYLE_CLASSES: dict[StyleTag, str] = {
    StyleTag.PLAIN: "",
    StyleTag.HEADING: "class:doc.heading",
    StyleTag.FLAG: "class:doc.flag",
    StyleTag.PLACEHOLDER: "class:doc.placeholder",
    StyleTag.BOLD: "class:doc.bold",
    StyleTag.ITALIC: "class:doc.italic",
    StyleTag.CODE: "class:doc.code",
    StyleTag.QUOTE: "class:doc.quote",
    StyleTag.LINK: "class:doc.link",
}

MATCH_CLASS = "class:match"
CURRENT_MATCH_CLASS = "class:match.current"

FOCUS_HINTS: dict[Focus, str] = {
    Focus.COMMAND_LIST: "type to filter | Enter open | Tab document | Ctrl-C quit",
    Focus.DOCUMENT: "/ search | n/N match | t man/tldr | Tab list | q quit",
    Focus.SEARCH_INPUT: "Enter search | Esc cancel | Ctrl-N/Ctrl-P match",
}


def build_style() -> Style:
    return Style.from_dict(
        {
            "status": "bg:#262626 #d4d4d4",
            "status.source": "bold #5fafff",
            "status.error": "#ff5f5f",
            "input": "",
            "input.prompt": "bold #87d787",
            "list.selected": "reverse",
            "list.selected.unfocused": "bg:#444444",
            "description": "italic #a8a8a8",
            "separator": "#3a3a3a",
            "message": "#a8a8a8",
            "message.error": "#ff5f5f",
            "doc.heading": "bold #ffd75f",
            "doc.flag": "#87d7ff",
            "doc.placeholder": "#d7afff",
            "doc.bold": "bold",
            "doc.italic": "underline",
            "doc.code": "#87d787",
            "doc.quote": "italic #bcbcbc",
            "doc.link": "underline #5fafff",
            "match": "bg:#5f5f00",
            "match.current": "bg:#d7af00 #000000",
        }
    )


def _join(*classes: str) -> str:
    return " ".join(c for c in classes if c)


def render_line(
    line: StyledLine,
    line_matches: list[tuple[int, Match]],
    current: Optional[int],
) -> Fragments:
    """Render one styled line, overlaying match highlights."""
    fragments: Fragments = []
    pos = 0
    for span in line.spans:
        style = STYLE_CLASSES[span.style]
        start = pos
        end = pos + len(span.text)
        cuts = {start, end}
        for _, m in line_matches:
            if start < m.start_offset < end:
                cuts.add(m.start_offset)
            if start < m.end_offset < end:
                cuts.add(m.end_offset)
        edges = sorted(cuts)
        for a, b in zip(edges, edges[1:]):
            extra = ""
            for number, m in line_matches:
                if m.start_offset <= a and b <= m.end_offset:
                    extra = CURRENT_MATCH_CLASS if number == current else MATCH_CLASS
                    break
            fragments.append((_join(style, extra), span.text[a - start : b - start]))
        pos = end
    return fragments


def document_message(state: ViewState) -> Optional[tuple[str, str]]:
    """Message shown in place of the document, if any."""
    key = state.active_document_key
    if key is None:
        return ("class:message", "Select a command and press Enter.")
    if state.loading and state.document_key != key:
        return ("class:message", f"Loading {key.describe()}...")
    error = state.document_error
    if state.document is None:
        if isinstance(error, NotFound):
            return ("class:message.error", f"Not found: {error}")
        if isinstance(error, ProviderUnavailable):
            return ("class:message.error", f"Unavailable: {error}")
        if error is not None:
            return ("class:message.error", str(error))
        return ("class:message", "Empty document.")
    return None


def render_document(state: ViewState) -> Fragments:
    message = document_message(state)
    document = state.document
    if message is not None or document is None:
        return [message] if message is not None else []

    fragments: Fragments = []
    start = state.scroll_offset
    stop = min(state.document_length, start + state.document_viewport)
    current = state.match_cursor if state.matches else None
    for index in range(start, stop):
        line = document.lines[index]
        fragments.extend(render_line(line, matches_on_line(state.matches, index), current))
        fragments.append(("", "\n"))
    return fragments


def render_command_list(state: ViewState) -> Fragments:
    if not state.visible_commands:
        return [("class:message", "No matching commands.")]
    selected_class = (
        "class:list.selected"
        if state.focus is Focus.COMMAND_LIST
        else "class:list.selected.unfocused"
    )
    fragments: Fragments = []
    stop = min(len(state.visible_commands), state.list_offset + state.list_viewport)
    for index in range(state.list_offset, stop):
        entry = state.visible_commands[index]
        style = selected_class if index == state.selected_command else ""
        fragments.append((style, entry.name))
        fragments.append(("", "\n"))
    return fragments


def render_description(state: ViewState) -> Fragments:
    entry = state.selected_entry
    if entry is None:
        return []
    sections = ",".join(str(s) for s in sorted(entry.sections))
    sources = "/".join(s.label for s in sorted(entry.sources, key=lambda s: s.value))
    header = f"{entry.name}({sections})" if sections else entry.name
    return [
        ("class:description", f"{header} [{sources}]\n"),
        ("class:description", entry.description),
    ]


def render_input(state: ViewState) -> Fragments:
    if state.focus is Focus.SEARCH_INPUT:
        return [("class:input.prompt", "/"), ("class:input", state.search_buffer)]
    if state.current_query and state.focus is Focus.DOCUMENT:
        return [("class:input.prompt", "/"), ("class:input", state.current_query)]
    return [("class:input.prompt", "> "), ("class:input", state.filter_text)]


def render_status(state: ViewState) -> Fragments:
    fragments: Fragments = [("class:status.source", f" {state.source.label} ")]
    key = state.document_key
    if key is not None:
        fragments.append(("class:status", f" {key.describe()}"))
    if state.loading:
        fragments.append(("class:status", " loading"))
    if isinstance(state.document_error, ParseFailure):
        fragments.append(("class:status", " [raw text]"))
    if state.matches:
        fragments.append(
            ("class:status", f" match {state.match_cursor + 1}/{len(state.matches)}")
        )
    elif state.current_query:
        fragments.append(("class:status", " no matches"))
    if state.status_message:
        fragments.append(("class:status.error", f" {state.status_message}"))
    fragments.append(("class:status", f"  {FOCUS_HINTS[state.focus]}"))
    return fragments
