"""View state owned by the session controller."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..constants import DEFAULT_DOCUMENT_VIEWPORT, DEFAULT_LIST_VIEWPORT
from ..errors import FetchError
from ..models import CommandEntry, DocumentKey, Match, ParsedDocument, SourceKind


class Focus(str, Enum):
    """Which pane receives input."""

    COMMAND_LIST = "command_list"
    DOCUMENT = "document"
    # Sub-mode of DOCUMENT while a search query is being typed
    SEARCH_INPUT = "search_input"


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


@dataclass
class ViewState:
    """Everything the UI needs to draw one frame."""

    focus: Focus = Focus.COMMAND_LIST
    scroll_offset: int = 0
    selected_command: int = 0
    active_document_key: Optional[DocumentKey] = None
    current_query: str = ""
    match_cursor: int = 0

    filter_text: str = ""
    search_buffer: str = ""
    source: SourceKind = SourceKind.MAN
    visible_commands: list[CommandEntry] = field(default_factory=list)
    list_offset: int = 0

    document: Optional[ParsedDocument] = None
    document_key: Optional[DocumentKey] = None
    document_error: Optional[FetchError] = None
    loading: bool = False
    matches: list[Match] = field(default_factory=list)

    list_viewport: int = DEFAULT_LIST_VIEWPORT
    document_viewport: int = DEFAULT_DOCUMENT_VIEWPORT
    status_message: Optional[str] = None
    running: bool = True

    @property
    def selected_entry(self) -> Optional[CommandEntry]:
        if 0 <= self.selected_command < len(self.visible_commands):
            return self.visible_commands[self.selected_command]
        return None

    @property
    def current_match(self) -> Optional[Match]:
        if 0 <= self.match_cursor < len(self.matches):
            return self.matches[self.match_cursor]
        return None

    @property
    def document_length(self) -> int:
        return len(self.document) if self.document is not None else 0

    @property
    def max_scroll(self) -> int:
        return max(0, self.document_length - self.document_viewport)

    @property
    def has_document(self) -> bool:
        """True once a fetch result (document or error) has been shown."""
        return self.document is not None or self.document_error is not None
